"""Processing module: video sources, model analysis, and result enrichment."""
from .captions import CaptionFetcher, Captions, CaptionLine, CaptionError
from .youtube_metadata import YouTubeMetadata, YouTubeMetadataFetcher
from .llm_analyzer import AnalyzerError, ClaudeToolCaller, LacrosseAnalyzer
from .multi_pass import MultiPassAnalyzer, MultiPassError
from .enrichment import AnalysisEnricher, clear_video_results
from .pipeline import VideoProcessor, ProcessingResult, ProcessingError
from .tasks import ProcessingTaskManager, run_video_processing

__all__ = [
    "CaptionFetcher",
    "Captions",
    "CaptionLine",
    "CaptionError",
    "YouTubeMetadata",
    "YouTubeMetadataFetcher",
    "AnalyzerError",
    "ClaudeToolCaller",
    "LacrosseAnalyzer",
    "MultiPassAnalyzer",
    "MultiPassError",
    "AnalysisEnricher",
    "clear_video_results",
    "VideoProcessor",
    "ProcessingResult",
    "ProcessingError",
    "ProcessingTaskManager",
    "run_video_processing",
]
