"""Tests for video, team, dashboard, thumbnail and auth endpoints."""
import io
from pathlib import Path
from unittest.mock import Mock

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from lacrosselens.api.dependencies import create_access_token, get_current_user_id
from lacrosselens.api.main import app
from lacrosselens.api.routers import videos
from lacrosselens.config.settings import Settings
from lacrosselens.database.models import Analysis, Team, User, Video, VideoStatus
from lacrosselens.processing.pipeline import PLACEHOLDER_TITLE

YOUTUBE_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.fixture
def storage(tmp_path, monkeypatch):
    """Point uploads and thumbnails at a temporary directory."""
    settings = Settings(
        upload_dir=str(tmp_path / "videos"),
        thumbnail_dir=str(tmp_path / "thumbnails"),
    )
    monkeypatch.setattr("lacrosselens.api.routers.videos.get_settings", lambda: settings)
    monkeypatch.setattr("lacrosselens.api.routers.thumbnails.get_settings", lambda: settings)
    return settings


@pytest.fixture
def other_video(test_session):
    """A video owned by someone else."""
    test_session.add(User(id="coach-2"))
    video = Video(
        title="Not yours",
        youtube_url=YOUTUBE_URL,
        user_id="coach-2",
        status=VideoStatus.COMPLETED,
    )
    test_session.add(video)
    test_session.commit()
    test_session.refresh(video)
    return video


class TestUploadVideo:
    """Tests for POST /api/videos/upload."""

    def test_missing_file(self, client):
        response = client.post("/api/videos/upload", data={"title": "Practice"})
        assert response.status_code == 400
        assert response.json()["detail"] == "No video file provided"

    def test_invalid_type(self, client, storage):
        response = client.post(
            "/api/videos/upload",
            files={"video": ("notes.txt", b"not a video", "text/plain")},
        )
        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]

    def test_upload_starts_processing(self, client, storage, task_manager, test_session):
        response = client.post(
            "/api/videos/upload",
            files={"video": ("scrimmage.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")},
            data={"playerNumber": "23", "position": "attack", "videoType": "game"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "scrimmage.mp4"
        assert data["status"] == "uploading"
        assert data["playerNumber"] == "23"
        assert data["videoType"] == "game"
        assert Path(data["filePath"]).parent == Path(storage.upload_dir)
        assert Path(data["filePath"]).is_file()
        task_manager.submit.assert_called_once_with(data["id"])
        assert test_session.get(User, "coach-1") is not None

    def test_too_large(self, client, storage, task_manager):
        storage.max_upload_bytes = 4

        response = client.post(
            "/api/videos/upload",
            files={"video": ("big.mp4", b"0123456789", "video/mp4")},
        )

        assert response.status_code == 400
        assert list(Path(storage.upload_dir).iterdir()) == []
        task_manager.submit.assert_not_called()

    def test_oversized_stream_is_not_read_to_the_end(self, tmp_path, monkeypatch):
        monkeypatch.setattr(videos, "UPLOAD_CHUNK_BYTES", 4)
        stream = io.BytesIO(b"0" * 20)
        upload = Mock(filename="big.mp4", file=stream)

        with pytest.raises(HTTPException) as exc_info:
            videos._save_upload(upload, str(tmp_path), max_bytes=4)

        assert exc_info.value.status_code == 400
        assert stream.tell() == 8
        assert list(tmp_path.iterdir()) == []


class TestSubmitYouTube:
    """Tests for POST /api/videos/youtube."""

    def test_placeholder_title(self, client, task_manager):
        response = client.post("/api/videos/youtube", json={"youtubeUrl": YOUTUBE_URL})

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == PLACEHOLDER_TITLE
        assert data["youtubeUrl"] == YOUTUBE_URL
        assert data["status"] == "uploading"
        task_manager.submit.assert_called_once_with(data["id"])

    def test_keeps_given_title(self, client):
        response = client.post(
            "/api/videos/youtube",
            json={"youtubeUrl": YOUTUBE_URL, "title": "Senior night", "userPrompt": "Watch #23"},
        )
        assert response.json()["title"] == "Senior night"
        assert response.json()["userPrompt"] == "Watch #23"

    def test_missing_url(self, client, task_manager):
        response = client.post("/api/videos/youtube", json={"title": "No link"})
        assert response.status_code == 400
        task_manager.submit.assert_not_called()

    def test_invalid_url(self, client):
        response = client.post("/api/videos/youtube", json={"youtubeUrl": "https://example.com/clip"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid YouTube URL"


class TestReadVideos:
    """Tests for listing and fetching videos."""

    def test_list_only_own_videos(self, client, sample_video, other_video):
        response = client.get("/api/videos")
        assert response.status_code == 200
        assert [video["id"] for video in response.json()] == [sample_video.id]

    def test_get_video(self, client, sample_video):
        response = client.get(f"/api/videos/{sample_video.id}")
        assert response.status_code == 200
        assert response.json()["title"] == "Spring Scrimmage"

    def test_not_found(self, client):
        assert client.get("/api/videos/999").status_code == 404

    def test_forbidden(self, client, other_video):
        response = client.get(f"/api/videos/{other_video.id}")
        assert response.status_code == 403

    def test_analyses_in_timestamp_order(self, client, sample_video, add_analysis):
        add_analysis("Late goal", timestamp=300, tags=["goal"])
        add_analysis("Opening draw", type="face_off", timestamp=5, details={"winner": "white"})

        response = client.get(f"/api/videos/{sample_video.id}/analyses")

        assert response.status_code == 200
        data = response.json()
        assert [item["timestamp"] for item in data] == [5, 300]
        assert data[0]["metadata"] == {"winner": "white"}
        assert data[1]["tags"] == ["goal"]


class TestRetryVideo:
    """Tests for POST /api/videos/{id}/retry."""

    def test_retry_failed(self, client, sample_video, test_session, task_manager):
        sample_video.status = VideoStatus.FAILED
        test_session.commit()

        response = client.post(f"/api/videos/{sample_video.id}/retry")

        assert response.status_code == 200
        assert response.json()["status"] == "processing"
        task_manager.submit.assert_called_once_with(sample_video.id)

    def test_completed_cannot_retry(self, client, sample_video, task_manager):
        response = client.post(f"/api/videos/{sample_video.id}/retry")
        assert response.status_code == 400
        task_manager.submit.assert_not_called()


class TestDeleteVideo:
    """Tests for DELETE /api/videos/{id}."""

    def test_delete_removes_results_and_files(
        self, client, sample_video, add_analysis, test_session, task_manager, tmp_path
    ):
        upload = tmp_path / "clip.mp4"
        upload.write_bytes(b"video")
        sample_video.file_path = str(upload)
        test_session.commit()
        add_analysis("#23 white scores")

        response = client.delete(f"/api/videos/{sample_video.id}")

        assert response.status_code == 200
        task_manager.cancel.assert_called_once_with(sample_video.id)
        test_session.expire_all()
        assert test_session.query(Video).count() == 0
        assert test_session.query(Analysis).count() == 0
        assert not upload.exists()

    def test_delete_forbidden(self, client, other_video, task_manager):
        assert client.delete(f"/api/videos/{other_video.id}").status_code == 403
        task_manager.cancel.assert_not_called()


class TestTeams:
    """Tests for team and roster endpoints."""

    def test_create_and_list(self, client):
        client.post("/api/teams", json={"name": "Varsity"})
        client.post("/api/teams", json={"name": "JV"})

        response = client.get("/api/teams")

        assert response.status_code == 200
        assert [team["name"] for team in response.json()] == ["JV", "Varsity"]

    def test_roster(self, client):
        team_id = client.post("/api/teams", json={"name": "Varsity"}).json()["id"]
        client.post(f"/api/teams/{team_id}/players", json={"name": "Sam", "jerseyNumber": 23})
        client.post(f"/api/teams/{team_id}/players", json={"name": "Alex", "jerseyNumber": 7})

        response = client.get(f"/api/teams/{team_id}/players")

        assert [player["jerseyNumber"] for player in response.json()] == [7, 23]

    def test_other_users_team(self, client, test_session):
        test_session.add(User(id="coach-2"))
        team = Team(name="Rivals", user_id="coach-2")
        test_session.add(team)
        test_session.commit()

        response = client.get(f"/api/teams/{team.id}/players")

        assert response.status_code == 403


class TestDashboard:
    """Tests for GET /api/dashboard/stats."""

    def test_stats(self, client, sample_video, add_analysis, test_session):
        add_analysis("Goal", confidence=90)
        add_analysis("Save", confidence=80)
        test_session.add(Video(title="Queued", user_id="coach-1", status=VideoStatus.PROCESSING))
        test_session.commit()

        data = client.get("/api/dashboard/stats").json()

        assert data["videosAnalyzed"] == 1
        assert data["videosProcessing"] == 1
        assert data["totalVideos"] == 2
        assert data["analysisAccuracy"] == 85


class TestThumbnails:
    """Tests for GET /api/thumbnails/{filename}."""

    def test_serves_jpeg(self, client, storage):
        directory = Path(storage.thumbnail_dir)
        directory.mkdir(parents=True)
        (directory / "7.jpg").write_bytes(b"\xff\xd8\xff")

        response = client.get("/api/thumbnails/7.jpg")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"

    def test_missing(self, client, storage):
        assert client.get("/api/thumbnails/404.jpg").status_code == 404

    def test_only_jpegs(self, client, storage):
        assert client.get("/api/thumbnails/settings.env").status_code == 404


class TestAuth:
    """Tests for bearer token authentication."""

    @pytest.fixture
    def auth_client(self, client):
        app.dependency_overrides.pop(get_current_user_id)
        return client

    def test_valid_token(self, auth_client, test_session):
        token = create_access_token("coach-9")

        response = auth_client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["id"] == "coach-9"
        assert test_session.get(User, "coach-9") is not None

    def test_missing_token(self, auth_client):
        assert auth_client.get("/api/videos").status_code == 401

    def test_invalid_token(self, auth_client):
        response = auth_client.get("/api/videos", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_expired_token(self, auth_client):
        token = create_access_token("coach-9", expires_hours=-1)
        response = auth_client.get("/api/videos", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


def test_health():
    response = TestClient(app).get("/health")
    assert response.json() == {"status": "healthy"}
