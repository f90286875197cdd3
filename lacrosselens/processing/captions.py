"""YouTube captions, fed to the model as running game commentary."""
import re
from dataclasses import dataclass
from typing import Optional

from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api._errors import (
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
)

from .annotations import format_timestamp

# Non-speech cues in auto captions: [Music], [Applause], [Cheering] ...
SOUND_CUE = re.compile(r"^\s*[\[(][^\])]*[\])]\s*$")
TRUNCATED_NOTE = "[commentary truncated]"

# Watch, short, embed and shorts URLs, or a bare 11-character id
VIDEO_ID_PATTERNS = [
    r"(?:youtube\.com/watch\?.*v=)([a-zA-Z0-9_-]{11})",
    r"(?:youtu\.be/)([a-zA-Z0-9_-]{11})",
    r"(?:youtube\.com/embed/)([a-zA-Z0-9_-]{11})",
    r"(?:youtube\.com/shorts/)([a-zA-Z0-9_-]{11})",
    r"^([a-zA-Z0-9_-]{11})$",
]


class CaptionError(Exception):
    """Captions could not be fetched for a video."""


@dataclass
class CaptionLine:
    text: str
    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


@dataclass
class Captions:
    """One caption track of a video."""

    video_id: str
    lines: list[CaptionLine]
    language: str
    is_auto_generated: bool

    @property
    def duration_seconds(self) -> float:
        if not self.lines:
            return 0.0
        return self.lines[-1].end

    def commentary(self, max_chars: Optional[int] = None) -> str:
        """Captions as "[m:ss] text" lines.

        Sound cues are dropped and a line repeating the one before it is
        skipped. With ``max_chars`` the text is cut at a line boundary and
        ends with a truncation note.
        """
        rendered = []
        used = 0
        previous = None
        for line in self.lines:
            text = " ".join(line.text.split())
            if not text or SOUND_CUE.match(text) or text == previous:
                continue
            previous = text

            entry = f"[{format_timestamp(line.start)}] {text}"
            if max_chars is not None and used + len(entry) > max_chars:
                rendered.append(TRUNCATED_NOTE)
                break
            rendered.append(entry)
            used += len(entry) + 1
        return "\n".join(rendered)


def extract_video_id(url_or_id: str) -> str:
    """Extract the 11-character video id from a URL or bare id.

    Raises:
        ValueError: If no valid video ID can be extracted
    """
    url_or_id = (url_or_id or "").strip()

    for pattern in VIDEO_ID_PATTERNS:
        match = re.search(pattern, url_or_id)
        if match:
            return match.group(1)

    raise ValueError(f"Could not extract video ID from: {url_or_id}")


class CaptionFetcher:
    """Fetches caption tracks through youtube-transcript-api."""

    def __init__(self, api: Optional[YouTubeTranscriptApi] = None, languages: Optional[list[str]] = None):
        self._api = api
        self.languages = languages or ["en"]

    @property
    def api(self) -> YouTubeTranscriptApi:
        if self._api is None:
            self._api = YouTubeTranscriptApi()
        return self._api

    def _pick_track(self, video_id: str):
        tracks = self.api.list(video_id)
        # Human captions name players correctly far more often
        finders = (
            tracks.find_manually_created_transcript,
            tracks.find_generated_transcript,
            tracks.find_transcript,
        )
        for find in finders:
            try:
                return find(self.languages)
            except NoTranscriptFound:
                continue
        raise CaptionError(f"No captions in {self.languages} for video {video_id}")

    def fetch(self, video_id: str) -> Captions:
        """Fetch the best caption track for ``video_id``.

        Raises:
            CaptionError: If the video has no usable captions
        """
        try:
            track = self._pick_track(video_id)
            lines = [
                CaptionLine(text=snippet.text, start=snippet.start, duration=snippet.duration)
                for snippet in track.fetch()
            ]
        except CaptionError:
            raise
        except TranscriptsDisabled:
            raise CaptionError(f"Captions are disabled for video {video_id}")
        except VideoUnavailable:
            raise CaptionError(f"Video {video_id} is unavailable")
        except Exception as e:
            raise CaptionError(f"Error fetching captions for video {video_id}: {e}")

        return Captions(
            video_id=video_id,
            lines=lines,
            language=track.language_code,
            is_auto_generated=track.is_generated,
        )
