"""Tests for background processing tasks and the watchdog."""
import asyncio
from unittest.mock import Mock, patch

import pytest

from lacrosselens.database.models import Video, VideoStatus
from lacrosselens.processing.pipeline import ProcessingError
from lacrosselens.processing.tasks import ProcessingTaskManager, run_video_processing


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


async def settle():
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def processing_video(test_session, sample_user):
    video = Video(
        title="Stuck game",
        youtube_url="https://youtu.be/dQw4w9WgXcQ",
        user_id=sample_user.id,
        status=VideoStatus.PROCESSING,
    )
    test_session.add(video)
    test_session.commit()
    test_session.refresh(video)
    return video


class TestRunVideoProcessing:
    """Tests for the per-video coroutine."""

    @patch("lacrosselens.processing.tasks.VideoProcessor")
    def test_runs_steps_in_order(self, mock_processor_cls):
        processor = mock_processor_cls.return_value
        processor.prepare.return_value = "source"
        processor.analyze.return_value = ("analysis", "standard")

        asyncio.run(run_video_processing(5, session_factory=Mock()))

        processor.prepare.assert_called_once_with(5)
        processor.analyze.assert_called_once_with("source")
        processor.store.assert_called_once_with(5, "analysis")
        processor.fail.assert_not_called()

    @patch("lacrosselens.processing.tasks.VideoProcessor")
    def test_failure_marks_video_failed(self, mock_processor_cls):
        processor = mock_processor_cls.return_value
        processor.prepare.side_effect = ProcessingError("Invalid YouTube URL")

        asyncio.run(run_video_processing(5, session_factory=Mock()))

        processor.fail.assert_called_once_with(5, "Invalid YouTube URL")
        processor.store.assert_not_called()

    @patch("lacrosselens.processing.tasks.VideoProcessor")
    def test_each_step_gets_its_own_session(self, mock_processor_cls):
        processor = mock_processor_cls.return_value
        processor.analyze.return_value = ("analysis", "standard")
        session_factory = Mock()

        asyncio.run(run_video_processing(5, session_factory=session_factory))

        assert session_factory.call_count == 3
        assert session_factory.return_value.close.call_count == 3


class TestProcessingTaskManager:
    """Tests for ProcessingTaskManager."""

    def make_manager(self, session_factory, runner, clock):
        return ProcessingTaskManager(
            session_factory=session_factory,
            runner=runner,
            timeout=10,
            max_retries=1,
            interval=1,
            clock=clock,
        )

    def test_submit_requires_loop(self, session_factory):
        manager = self.make_manager(session_factory, Mock(), FakeClock())
        with pytest.raises(RuntimeError):
            manager.submit(1)

    def test_stuck_video_retried_once_then_failed(self, session_factory, test_session, processing_video):
        clock = FakeClock()
        started = []
        cancelled = []

        async def runner(video_id):
            started.append(video_id)
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(video_id)
                raise

        manager = self.make_manager(session_factory, runner, clock)

        async def scenario():
            manager.bind(asyncio.get_running_loop())
            manager.submit(processing_video.id)
            await settle()

            clock.now = 5
            report = manager.check_stuck_videos()
            assert report.retried == [] and report.failed == []

            clock.now = 11
            report = manager.check_stuck_videos()
            assert report.retried == [processing_video.id]
            await settle()
            assert cancelled == [processing_video.id]
            assert manager.is_running(processing_video.id)

            clock.now = 15
            assert manager.check_stuck_videos().retried == []

            clock.now = 22
            report = manager.check_stuck_videos()
            assert report.failed == [processing_video.id]
            await settle()
            assert not manager.is_running(processing_video.id)

            await manager.shutdown()

        asyncio.run(scenario())

        assert started == [processing_video.id, processing_video.id]
        assert len(cancelled) == 2
        test_session.expire_all()
        assert test_session.get(Video, processing_video.id).status == VideoStatus.FAILED

    def test_video_seen_first_by_watchdog(self, session_factory, test_session, processing_video):
        """A video left in processing by a previous run gets a fresh timer."""
        clock = FakeClock()
        started = []

        async def runner(video_id):
            started.append(video_id)

        manager = self.make_manager(session_factory, runner, clock)

        async def scenario():
            manager.bind(asyncio.get_running_loop())
            clock.now = 100
            assert manager.check_stuck_videos().retried == []
            clock.now = 111
            assert manager.check_stuck_videos().retried == [processing_video.id]
            await settle()

        asyncio.run(scenario())
        assert started == [processing_video.id]

    def test_completed_videos_are_ignored(self, session_factory, test_session, processing_video):
        processing_video.status = VideoStatus.COMPLETED
        test_session.commit()
        clock = FakeClock()
        manager = self.make_manager(session_factory, Mock(), clock)

        clock.now = 1000
        report = manager.check_stuck_videos()

        assert report.retried == [] and report.failed == []

    def test_cancel(self, session_factory):
        clock = FakeClock()

        async def runner(video_id):
            await asyncio.Event().wait()

        manager = self.make_manager(session_factory, runner, clock)

        async def scenario():
            manager.bind(asyncio.get_running_loop())
            handle = manager.submit(3)
            await settle()
            assert manager.cancel(3) is True
            await settle()
            assert handle.cancelled()
            assert manager.cancel(3) is False

        asyncio.run(scenario())

    def test_resubmit_cancels_previous(self, session_factory):
        async def runner(video_id):
            await asyncio.Event().wait()

        manager = self.make_manager(session_factory, runner, FakeClock())

        async def scenario():
            manager.bind(asyncio.get_running_loop())
            first = manager.submit(3)
            await settle()
            second = manager.submit(3)
            await settle()
            assert first.cancelled()
            assert not second.done()
            await manager.shutdown()

        asyncio.run(scenario())
