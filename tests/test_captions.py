"""Tests for caption fetching and commentary formatting."""
import pytest
from unittest.mock import Mock

from youtube_transcript_api._errors import NoTranscriptFound, TranscriptsDisabled

from lacrosselens.processing.captions import (
    TRUNCATED_NOTE,
    CaptionError,
    CaptionFetcher,
    CaptionLine,
    Captions,
    extract_video_id,
)

VIDEO_ID = "dQw4w9WgXcQ"


def _snippet(text, start, duration):
    snippet = Mock()
    snippet.text = text
    snippet.start = start
    snippet.duration = duration
    return snippet


def make_captions(*lines):
    return Captions(
        video_id=VIDEO_ID,
        lines=[CaptionLine(text=text, start=start, duration=2.0) for text, start in lines],
        language="en",
        is_auto_generated=True,
    )


class TestCaptions:
    """Tests for the Captions track."""

    def test_line_end(self):
        assert CaptionLine(text="Face-off win for white", start=10.0, duration=5.0).end == 15.0

    def test_commentary(self):
        captions = make_captions(
            ("Opening draw", 0.0),
            ("Goal by number 23", 65.0),
            ("Timeout", 125.5),
        )
        assert captions.commentary() == "[0:00] Opening draw\n[1:05] Goal by number 23\n[2:05] Timeout"

    def test_drops_sound_cues_and_repeats(self):
        captions = make_captions(
            ("[Music]", 0.0),
            ("White clears", 4.0),
            ("White  clears", 5.0),
            ("(crowd cheering)", 6.0),
            ("Shot saved", 9.0),
        )
        assert captions.commentary() == "[0:04] White clears\n[0:09] Shot saved"

    def test_truncates_at_line_boundary(self):
        captions = make_captions(("Ground ball dark", 0.0), ("Clear white", 10.0), ("Goal white", 20.0))

        text = captions.commentary(max_chars=45)

        assert text.splitlines() == ["[0:00] Ground ball dark", "[0:10] Clear white", TRUNCATED_NOTE]

    def test_duration(self):
        assert make_captions(("First", 0.0), ("Last", 50.0)).duration_seconds == 52.0
        assert make_captions().duration_seconds == 0.0


class TestExtractVideoId:
    """Tests for URL parsing."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=120",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
            "dQw4w9WgXcQ",
            "  https://youtu.be/dQw4w9WgXcQ  ",
        ],
    )
    def test_supported_formats(self, url):
        assert extract_video_id(url) == VIDEO_ID

    @pytest.mark.parametrize("url", ["https://example.com/not-youtube", "abc123", ""])
    def test_invalid(self, url):
        with pytest.raises(ValueError, match="Could not extract video ID"):
            extract_video_id(url)


class TestCaptionFetcher:
    """Tests for CaptionFetcher.fetch with a mocked transcript API."""

    @pytest.fixture
    def api(self):
        return Mock()

    @pytest.fixture
    def fetcher(self, api):
        return CaptionFetcher(api=api)

    def track(self, *snippets, generated=False):
        track = Mock()
        track.language_code = "en"
        track.is_generated = generated
        track.fetch.return_value = list(snippets)
        return track

    def test_prefers_manual_captions(self, api, fetcher):
        api.list.return_value.find_manually_created_transcript.return_value = self.track(
            _snippet("White wins the draw", 0.0, 2.0),
            _snippet("Clear to the attack", 2.0, 2.0),
        )

        result = fetcher.fetch(VIDEO_ID)

        api.list.assert_called_once_with(VIDEO_ID)
        api.list.return_value.find_manually_created_transcript.assert_called_once_with(["en"])
        assert result.video_id == VIDEO_ID
        assert result.is_auto_generated is False
        assert [line.text for line in result.lines] == ["White wins the draw", "Clear to the attack"]

    def test_falls_back_to_auto_generated(self, api, fetcher):
        tracks = api.list.return_value
        tracks.find_manually_created_transcript.side_effect = NoTranscriptFound(VIDEO_ID, ["en"], {})
        tracks.find_generated_transcript.return_value = self.track(
            _snippet("auto captions", 0.0, 1.0), generated=True
        )

        result = fetcher.fetch(VIDEO_ID)

        assert result.is_auto_generated is True
        assert result.lines[0].text == "auto captions"

    def test_languages(self, api):
        api.list.return_value.find_manually_created_transcript.return_value = self.track()

        CaptionFetcher(api=api, languages=["es", "en"]).fetch(VIDEO_ID)

        api.list.return_value.find_manually_created_transcript.assert_called_once_with(["es", "en"])

    def test_no_track(self, api, fetcher):
        missing = NoTranscriptFound(VIDEO_ID, ["en"], {})
        tracks = api.list.return_value
        tracks.find_manually_created_transcript.side_effect = missing
        tracks.find_generated_transcript.side_effect = missing
        tracks.find_transcript.side_effect = missing

        with pytest.raises(CaptionError, match="No captions"):
            fetcher.fetch(VIDEO_ID)

    def test_disabled(self, api, fetcher):
        api.list.side_effect = TranscriptsDisabled(VIDEO_ID)

        with pytest.raises(CaptionError, match="disabled"):
            fetcher.fetch(VIDEO_ID)

    def test_wraps_unexpected_errors(self, api, fetcher):
        api.list.side_effect = RuntimeError("connection reset")

        with pytest.raises(CaptionError, match="connection reset"):
            fetcher.fetch(VIDEO_ID)
