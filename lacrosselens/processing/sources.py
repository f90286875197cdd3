"""What the analyzers send to the model for one video."""
import base64
from dataclasses import dataclass, field
from typing import Optional

from .annotations import format_timestamp
from .prompts import HINTS_TEMPLATE, NO_CAPTIONS_NOTE
from .youtube_metadata import YouTubeMetadata, enhanced_description


@dataclass
class VideoFrame:
    """A JPEG-encoded still taken ``timestamp`` seconds into the video."""

    timestamp: float
    jpeg: bytes


@dataclass
class CoachHints:
    player_number: Optional[str] = None
    team_name: Optional[str] = None
    position: Optional[str] = None
    level: Optional[str] = None
    video_type: Optional[str] = None
    user_prompt: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any(vars(self).values())


@dataclass
class AnalysisSource:
    """Everything known about a video at analysis time.

    Uploaded files contribute ``frames``; YouTube videos contribute
    ``metadata`` and, when captions exist, ``commentary``.
    """

    title: str
    hints: CoachHints = field(default_factory=CoachHints)
    frames: list[VideoFrame] = field(default_factory=list)
    commentary: Optional[str] = None
    metadata: Optional[YouTubeMetadata] = None
    youtube_url: Optional[str] = None

    @property
    def is_youtube(self) -> bool:
        return self.youtube_url is not None

    def hints_text(self) -> str:
        if self.hints.is_empty:
            return ""
        return HINTS_TEMPLATE.format(
            **{key: value or "not specified" for key, value in vars(self.hints).items()}
        )

    def material_text(self) -> str:
        """Text material: YouTube metadata and captions, or a note on the frames."""
        if not self.is_youtube:
            return f"{len(self.frames)} frames sampled from the uploaded video follow."

        parts = [f"YouTube URL: {self.youtube_url}"]
        if self.metadata:
            parts.append(enhanced_description(self.metadata))
        if self.commentary:
            parts.append(f"Caption commentary:\n{self.commentary}")
        else:
            parts.append(NO_CAPTIONS_NOTE)
        return "\n\n".join(parts)

    def content_blocks(self, prompt: str) -> list[dict]:
        """Anthropic message content: labelled frames first, then ``prompt``."""
        blocks: list[dict] = []
        for frame in self.frames:
            blocks.append({"type": "text", "text": f"Frame at {format_timestamp(frame.timestamp)}"})
            blocks.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": "image/jpeg",
                        "data": base64.b64encode(frame.jpeg).decode("ascii"),
                    },
                }
            )
        blocks.append({"type": "text", "text": prompt})
        return blocks
