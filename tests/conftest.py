"""Shared pytest fixtures for tests."""
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lacrosselens.api.dependencies import get_current_user_id, get_db, get_task_manager
from lacrosselens.api.main import app
from lacrosselens.database.connection import Base
from lacrosselens.database.models import Analysis, User, Video, VideoStatus
from lacrosselens.processing.tasks import ProcessingTaskManager


@pytest.fixture(scope="function")
def test_engine():
    """Create an in-memory SQLite engine shared by every connection."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_session(session_factory):
    """Create a test database session."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sample_user(test_session):
    user = User(id="coach-1", email="coach@example.com", first_name="Pat")
    test_session.add(user)
    test_session.commit()
    test_session.refresh(user)
    return user


@pytest.fixture
def sample_video(test_session, sample_user):
    """Create a completed YouTube video for testing."""
    video = Video(
        title="Spring Scrimmage",
        description="Varsity scrimmage",
        youtube_url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        user_id=sample_user.id,
        status=VideoStatus.COMPLETED,
    )
    test_session.add(video)
    test_session.commit()
    test_session.refresh(video)
    return video


@pytest.fixture
def add_analysis(test_session, sample_video):
    """Factory that stores an analysis row for ``sample_video``."""

    def _add(content, type="key_moment", timestamp=0, confidence=85, **fields):
        analysis = Analysis(
            video_id=sample_video.id,
            type=type,
            title=fields.pop("title", type),
            content=content,
            timestamp=timestamp,
            confidence=confidence,
            **fields,
        )
        test_session.add(analysis)
        test_session.commit()
        test_session.refresh(analysis)
        return analysis

    return _add


# --- API ---


@pytest.fixture
def task_manager():
    return Mock(spec=ProcessingTaskManager)


@pytest.fixture
def client(test_session, task_manager):
    """Test client signed in as ``coach-1`` with background processing mocked out."""

    def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = lambda: "coach-1"
    app.dependency_overrides[get_task_manager] = lambda: task_manager

    yield TestClient(app)

    app.dependency_overrides.clear()
