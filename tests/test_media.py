"""Tests for OpenCV video helpers."""
import cv2
import numpy as np
import pytest

from lacrosselens.processing.media import MediaError, generate_thumbnail, probe_video, sample_frames


@pytest.fixture
def video_file(tmp_path):
    """A 2-second 10fps MJPG clip whose frames get brighter over time."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (320, 240))
    for i in range(20):
        writer.write(np.full((240, 320, 3), i * 10, dtype=np.uint8))
    writer.release()
    return path


class TestProbe:
    def test_probe(self, video_file):
        probe = probe_video(str(video_file))
        assert probe.width == 320
        assert probe.height == 240
        assert probe.frame_count == 20
        assert probe.duration_seconds == pytest.approx(2.0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(MediaError, match="Could not open"):
            probe_video(str(tmp_path / "missing.mp4"))


class TestSampleFrames:
    def test_evenly_spaced_jpegs(self, video_file):
        frames = sample_frames(str(video_file), 4)

        assert len(frames) == 4
        assert [frame.timestamp for frame in frames] == sorted(frame.timestamp for frame in frames)
        assert all(frame.jpeg.startswith(b"\xff\xd8") for frame in frames)

    def test_zero_count(self, video_file):
        with pytest.raises(MediaError):
            sample_frames(str(video_file), 0)


class TestThumbnail:
    def test_writes_resized_jpeg(self, video_file, tmp_path):
        url = generate_thumbnail(str(video_file), 7, str(tmp_path / "thumbs"))

        assert url == "/api/thumbnails/thumbnail-7.jpg"
        image = cv2.imread(str(tmp_path / "thumbs" / "thumbnail-7.jpg"))
        assert image.shape[:2] == (450, 800)
