"""Uploaded video I/O with OpenCV: probing, thumbnails and frame sampling."""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import cv2

from .sources import VideoFrame

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = (800, 450)
THUMBNAIL_POSITION = 0.1
FRAME_MAX_WIDTH = 1280
JPEG_QUALITY = 85


class MediaError(Exception):
    """Error reading an uploaded video file."""

    pass


@dataclass
class VideoProbe:
    frame_count: int
    fps: float
    width: int
    height: int

    @property
    def duration_seconds(self) -> float:
        if self.fps <= 0:
            return 0.0
        return self.frame_count / self.fps


@contextmanager
def open_video(path: str) -> Iterator["cv2.VideoCapture"]:
    capture = cv2.VideoCapture(str(path))
    try:
        if not capture.isOpened():
            raise MediaError(f"Could not open video file: {path}")
        yield capture
    finally:
        capture.release()


def _probe(capture) -> VideoProbe:
    return VideoProbe(
        frame_count=int(capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0),
        fps=float(capture.get(cv2.CAP_PROP_FPS) or 0.0),
        width=int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0),
        height=int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0),
    )


def _read_frame(capture, index: int):
    capture.set(cv2.CAP_PROP_POS_FRAMES, index)
    ok, frame = capture.read()
    if not ok or frame is None:
        return None
    return frame


def probe_video(path: str) -> VideoProbe:
    """Frame count, frame rate and dimensions of a video file.

    Raises:
        MediaError: If the file cannot be opened
    """
    with open_video(path) as capture:
        return _probe(capture)


def generate_thumbnail(path: str, video_id: int, thumbnail_dir: str) -> str:
    """Write an 800x450 JPEG taken 10% into the video.

    Returns:
        Public URL of the thumbnail, served by the thumbnails router

    Raises:
        MediaError: If no frame can be read or the image cannot be written
    """
    with open_video(path) as capture:
        probe = _probe(capture)
        frame = _read_frame(capture, int(probe.frame_count * THUMBNAIL_POSITION))
        if frame is None:
            frame = _read_frame(capture, 0)
        if frame is None:
            raise MediaError(f"Could not read a frame from {path}")

    filename = f"thumbnail-{video_id}.jpg"
    target = Path(thumbnail_dir)
    target.mkdir(parents=True, exist_ok=True)

    resized = cv2.resize(frame, THUMBNAIL_SIZE, interpolation=cv2.INTER_AREA)
    if not cv2.imwrite(str(target / filename), resized):
        raise MediaError(f"Could not write thumbnail {filename}")

    logger.info("Thumbnail generated for video %s", video_id)
    return f"/api/thumbnails/{filename}"


def _shrink(frame):
    height, width = frame.shape[:2]
    if width <= FRAME_MAX_WIDTH:
        return frame
    scale = FRAME_MAX_WIDTH / width
    return cv2.resize(frame, (FRAME_MAX_WIDTH, int(height * scale)), interpolation=cv2.INTER_AREA)


def sample_frames(path: str, count: int) -> list[VideoFrame]:
    """Evenly spaced JPEG frames across the runtime, in time order.

    Unreadable positions are skipped.

    Raises:
        MediaError: If the file cannot be opened or yields no frames
    """
    frames: list[VideoFrame] = []
    with open_video(path) as capture:
        probe = _probe(capture)
        if probe.frame_count <= 0 or count <= 0:
            raise MediaError(f"No frames to sample in {path}")

        step = probe.frame_count / count
        for i in range(count):
            index = int(step * i + step / 2)
            frame = _read_frame(capture, index)
            if frame is None:
                continue
            ok, buffer = cv2.imencode(".jpg", _shrink(frame), [cv2.IMWRITE_JPEG_QUALITY, JPEG_QUALITY])
            if not ok:
                continue
            timestamp = index / probe.fps if probe.fps > 0 else 0.0
            frames.append(VideoFrame(timestamp=timestamp, jpeg=buffer.tobytes()))

    if not frames:
        raise MediaError(f"Could not read any frames from {path}")
    return frames
