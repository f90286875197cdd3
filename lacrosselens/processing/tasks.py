"""Background processing tasks and the stuck-video watchdog."""
import asyncio
import functools
import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from sqlalchemy.orm import Session

from lacrosselens.config.settings import get_settings
from lacrosselens.database.connection import SessionLocal
from lacrosselens.database.models import Video, VideoStatus
from .pipeline import ProcessingError, VideoProcessor

logger = logging.getLogger(__name__)

Runner = Callable[[int], Awaitable[None]]


def _run_step(session_factory: Callable[[], Session], step: str, *args):
    db = session_factory()
    try:
        return getattr(VideoProcessor(db), step)(*args)
    finally:
        db.close()


async def run_video_processing(
    video_id: int, session_factory: Callable[[], Session] = SessionLocal
) -> None:
    """Process one video, running each blocking step in a worker thread.

    Each step uses its own session, so a cancelled run never shares a
    session with the run that replaces it. Cancellation takes effect
    between steps.
    """
    run = functools.partial(asyncio.to_thread, _run_step, session_factory)
    try:
        source = await run("prepare", video_id)
        analysis, mode = await run("analyze", source)
        await run("store", video_id, analysis)
        logger.info("Video %s: %s analysis stored", video_id, mode)
    except asyncio.CancelledError:
        logger.info("Video %s: processing task cancelled", video_id)
        raise
    except Exception as e:
        if not isinstance(e, ProcessingError):
            logger.exception("Video %s: unexpected processing error", video_id)
        await run("fail", video_id, str(e))


@dataclass
class WatchdogReport:
    retried: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


class ProcessingTaskManager:
    """Owns one cancellable processing task per video.

    Request handlers call ``submit`` from worker threads; tasks run on the
    event loop passed to ``bind``. The watchdog retries a video stuck in
    ``processing`` at most ``max_retries`` times, cancelling the old task
    first, and then marks it failed.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        runner: Optional[Runner] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.session_factory = session_factory
        self.runner = runner or functools.partial(run_video_processing, session_factory=session_factory)
        self.timeout = timeout if timeout is not None else settings.processing_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.max_processing_retries
        self.interval = interval if interval is not None else settings.watchdog_interval_seconds
        self.clock = clock

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()
        self._tasks: dict[int, Future] = {}
        self._started: dict[int, float] = {}
        self._retries: dict[int, int] = {}
        self._watcher: Optional[asyncio.Task] = None

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def is_running(self, video_id: int) -> bool:
        with self._lock:
            handle = self._tasks.get(video_id)
        return handle is not None and not handle.done()

    def submit(self, video_id: int) -> Future:
        """Start processing ``video_id``, replacing any task already running for it."""
        handle = self._start(video_id)
        with self._lock:
            self._retries[video_id] = 0
        logger.info("Video %s: processing task submitted", video_id)
        return handle

    def cancel(self, video_id: int) -> bool:
        with self._lock:
            handle = self._tasks.pop(video_id, None)
            self._started.pop(video_id, None)
            self._retries.pop(video_id, None)
        if handle is None or handle.done():
            return False
        return handle.cancel()

    def _start(self, video_id: int) -> Future:
        if self._loop is None:
            raise RuntimeError("Task manager is not bound to an event loop")

        with self._lock:
            previous = self._tasks.get(video_id)
        if previous is not None and not previous.done():
            previous.cancel()
            logger.info("Video %s: cancelled previous processing task", video_id)

        handle = asyncio.run_coroutine_threadsafe(self.runner(video_id), self._loop)
        with self._lock:
            self._tasks[video_id] = handle
            self._started[video_id] = self.clock()
        handle.add_done_callback(functools.partial(self._discard, video_id))
        return handle

    def _discard(self, video_id: int, handle: Future) -> None:
        with self._lock:
            if self._tasks.get(video_id) is handle:
                del self._tasks[video_id]

    def check_stuck_videos(self) -> WatchdogReport:
        """One watchdog pass over every video in ``processing``."""
        report = WatchdogReport()
        now = self.clock()
        db = self.session_factory()
        try:
            videos = db.query(Video).filter(Video.status == VideoStatus.PROCESSING).all()
            for video in videos:
                with self._lock:
                    started = self._started.setdefault(video.id, now)
                    retries = self._retries.get(video.id, 0)
                if now - started <= self.timeout:
                    continue

                if retries < self.max_retries:
                    logger.info(
                        "Video %s: stuck in processing for %.0fs, retrying (%d/%d)",
                        video.id, now - started, retries + 1, self.max_retries,
                    )
                    self._start(video.id)
                    with self._lock:
                        self._retries[video.id] = retries + 1
                    report.retried.append(video.id)
                else:
                    logger.warning("Video %s: still stuck after %d retries, marking failed", video.id, retries)
                    self.cancel(video.id)
                    video.status = VideoStatus.FAILED
                    report.failed.append(video.id)
            db.commit()
            self._forget_settled({video.id for video in videos} - set(report.failed))
        finally:
            db.close()
        return report

    def _forget_settled(self, processing: set[int]) -> None:
        with self._lock:
            for video_id in list(self._started):
                running = video_id in self._tasks and not self._tasks[video_id].done()
                if video_id not in processing and not running:
                    self._started.pop(video_id, None)
                    self._retries.pop(video_id, None)

    async def watch(self) -> None:
        """Run ``check_stuck_videos`` every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(self.interval)
            try:
                await asyncio.to_thread(self.check_stuck_videos)
            except Exception:
                logger.exception("Watchdog pass failed")

    def start_watchdog(self) -> None:
        if self._loop is None:
            raise RuntimeError("Task manager is not bound to an event loop")
        self._watcher = self._loop.create_task(self.watch())

    async def shutdown(self) -> None:
        if self._watcher is not None:
            self._watcher.cancel()
            try:
                await self._watcher
            except asyncio.CancelledError:
                pass
            self._watcher = None

        with self._lock:
            handles = list(self._tasks.values())
            self._tasks.clear()
        for handle in handles:
            handle.cancel()
