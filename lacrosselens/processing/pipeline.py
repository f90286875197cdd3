"""Processing pipeline that connects video sources, model analysis, and database storage."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from lacrosselens.analytics import rollups
from lacrosselens.config.settings import Settings, get_settings
from lacrosselens.database.models import Video, VideoStatus
from .captions import CaptionError, CaptionFetcher, extract_video_id
from .enrichment import AnalysisEnricher, clear_video_results
from .llm_analyzer import AnalyzerError, ClaudeToolCaller, LacrosseAnalyzer
from .media import MediaError, generate_thumbnail, probe_video, sample_frames
from .multi_pass import MultiPassAnalyzer, MultiPassError
from .records import LacrosseAnalysis, records_from_analysis
from .registry import create_default_registry
from .sources import AnalysisSource, CoachHints
from .youtube_metadata import (
    YouTubeMetadataFetcher,
    duration_seconds,
    enhanced_description,
    enhanced_title,
)

logger = logging.getLogger(__name__)

# Title stored for YouTube submissions that arrive without one
PLACEHOLDER_TITLE = "YouTube Video Analysis"

MULTI_PASS = "multi_pass"
STANDARD = "standard"


@dataclass
class ProcessingResult:
    """Result of processing a video."""

    video_id: int
    status: str
    analyses_stored: int = 0
    mode: Optional[str] = None
    error: Optional[str] = None


class ProcessingError(Exception):
    """Error during pipeline processing."""

    pass


class VideoProcessor:
    """Runs one video through preparation, analysis and storage.

    The steps are separate methods so the background runner can execute them
    one at a time and be cancelled in between.
    """

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        standard_analyzer: Optional[LacrosseAnalyzer] = None,
        multi_pass_analyzer: Optional[MultiPassAnalyzer] = None,
        caption_fetcher: Optional[CaptionFetcher] = None,
        metadata_fetcher: Optional[YouTubeMetadataFetcher] = None,
        enricher: Optional[AnalysisEnricher] = None,
    ):
        """Initialize the processor.

        Args:
            db: SQLAlchemy database session
            settings: Optional settings (defaults to get_settings())
            standard_analyzer: Optional single-pass analyzer
            multi_pass_analyzer: Optional four-pass analyzer
            caption_fetcher: Optional custom caption fetcher
            metadata_fetcher: Optional custom YouTube metadata fetcher
            enricher: Optional custom analysis enricher

        Analyzers are built on first use so that preparation works without
        an API key.
        """
        self.db = db
        self.settings = settings or get_settings()
        self._standard = standard_analyzer
        self._multi_pass = multi_pass_analyzer
        self.caption_fetcher = caption_fetcher or CaptionFetcher()
        self.metadata_fetcher = metadata_fetcher or YouTubeMetadataFetcher(
            api_key=self.settings.youtube_api_key or None
        )
        self.enricher = enricher or AnalysisEnricher(min_confidence=self.settings.min_analysis_confidence)

    def _build_analyzers(self) -> None:
        if self._standard is not None and self._multi_pass is not None:
            return
        caller = ClaudeToolCaller(
            api_key=self.settings.anthropic_api_key,
            model=self.settings.claude_model,
            max_tokens=self.settings.claude_max_tokens,
        )
        registry = create_default_registry(self.settings.analysis_modules)
        if self._standard is None:
            self._standard = LacrosseAnalyzer(caller=caller, registry=registry)
        if self._multi_pass is None:
            self._multi_pass = MultiPassAnalyzer(
                caller=caller,
                registry=registry,
                max_detail_segments=self.settings.max_detail_segments,
            )

    def _get_video(self, video_id: int) -> Video:
        video = self.db.get(Video, video_id)
        if video is None:
            raise ProcessingError(f"Video {video_id} not found")
        return video

    def prepare(self, video_id: int) -> AnalysisSource:
        """Mark the video as processing, backfill its details and gather model input.

        Raises:
            ProcessingError: If the video is missing or its source cannot be read
        """
        video = self._get_video(video_id)
        video.status = VideoStatus.PROCESSING
        self.db.commit()
        logger.info("Video %s: processing started", video_id)

        hints = CoachHints(
            player_number=video.player_number,
            team_name=video.team_name,
            position=video.position,
            level=video.level,
            video_type=video.video_type,
            user_prompt=video.user_prompt,
        )

        if video.is_youtube:
            source = self._prepare_youtube(video, hints)
        else:
            source = self._prepare_upload(video, hints)

        self.db.commit()
        return source

    def _prepare_youtube(self, video: Video, hints: CoachHints) -> AnalysisSource:
        try:
            youtube_id = extract_video_id(video.youtube_url)
        except ValueError as e:
            raise ProcessingError(f"Invalid YouTube URL: {e}")

        meta = self.metadata_fetcher.fetch(youtube_id)
        if not video.title or video.title == PLACEHOLDER_TITLE:
            video.title = enhanced_title(meta)
        if not video.description:
            video.description = enhanced_description(meta)
        if video.duration is None:
            video.duration = duration_seconds(meta.duration)
        if not video.thumbnail_url:
            video.thumbnail_url = meta.thumbnail_url

        commentary = None
        try:
            captions = self.caption_fetcher.fetch(youtube_id)
            commentary = captions.commentary(self.settings.max_caption_chars) or None
        except CaptionError as e:
            logger.warning("Video %s: no captions available (%s)", video.id, e)

        return AnalysisSource(
            title=video.title,
            hints=hints,
            commentary=commentary,
            metadata=meta,
            youtube_url=video.youtube_url,
        )

    def _prepare_upload(self, video: Video, hints: CoachHints) -> AnalysisSource:
        if not video.file_path:
            raise ProcessingError(f"Video {video.id} has neither a file nor a YouTube URL")

        try:
            if video.duration is None:
                video.duration = int(probe_video(video.file_path).duration_seconds)
            frames = sample_frames(video.file_path, self.settings.frame_sample_count)
        except MediaError as e:
            raise ProcessingError(f"Failed to read video file: {e}")

        if not video.thumbnail_url:
            try:
                video.thumbnail_url = generate_thumbnail(video.file_path, video.id, self.settings.thumbnail_dir)
            except MediaError as e:
                logger.warning("Video %s: thumbnail generation failed: %s", video.id, e)

        return AnalysisSource(title=video.title, hints=hints, frames=frames)

    def analyze(self, source: AnalysisSource) -> tuple[LacrosseAnalysis, str]:
        """Run the multi-pass analysis, falling back once to a standard analysis.

        Returns:
            The analysis and the mode that produced it

        Raises:
            ProcessingError: If the standard analysis fails as well
        """
        try:
            self._build_analyzers()
        except AnalyzerError as e:
            raise ProcessingError(str(e))

        if self.settings.multi_pass_enabled:
            try:
                return self._multi_pass.analyze(source), MULTI_PASS
            except MultiPassError as e:
                logger.info("Multi-pass analysis failed, falling back to standard analysis: %s", e)

        try:
            return self._standard.analyze(source), STANDARD
        except AnalyzerError as e:
            raise ProcessingError(f"Analysis failed: {e}")

    def store(self, video_id: int, analysis: LacrosseAnalysis) -> int:
        """Replace the video's results with ``analysis`` and mark it completed.

        Returns:
            Number of analysis rows stored
        """
        self._get_video(video_id)
        clear_video_results(self.db, video_id)
        self.db.commit()

        stored = 0
        for record in records_from_analysis(analysis):
            if self.enricher.process(self.db, video_id, record) is not None:
                stored += 1

        rollups.rebuild_rollups(self.db, video_id)

        video = self._get_video(video_id)
        video.status = VideoStatus.COMPLETED
        self.db.commit()
        logger.info("Video %s: completed with %d analyses", video_id, stored)
        return stored

    def fail(self, video_id: int, error: str) -> None:
        self.db.rollback()
        video = self.db.get(Video, video_id)
        if video is None:
            return
        video.status = VideoStatus.FAILED
        self.db.commit()
        logger.error("Video %s: processing failed: %s", video_id, error)

    def process_video(self, video_id: int) -> ProcessingResult:
        """Process a video end to end.

        Failures never propagate; they leave the video ``failed`` and are
        reported in the result.
        """
        try:
            source = self.prepare(video_id)
            analysis, mode = self.analyze(source)
            stored = self.store(video_id, analysis)
        except Exception as e:
            if not isinstance(e, ProcessingError):
                logger.exception("Video %s: unexpected processing error", video_id)
            self.fail(video_id, str(e))
            return ProcessingResult(video_id=video_id, status=VideoStatus.FAILED, error=str(e))

        return ProcessingResult(
            video_id=video_id,
            status=VideoStatus.COMPLETED,
            analyses_stored=stored,
            mode=mode,
        )
