"""Four-pass analysis: segmentation, technique, tactics, statistics.

Each pass is a separate model call with its own tool schema. The passes run
in order and any failure aborts the whole run with ``MultiPassError``; the
caller decides whether to fall back to a single-pass analysis.
"""
import json
import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lacrosselens.config.settings import get_settings
from .annotations import format_timestamp
from .llm_analyzer import AnalyzerError, ClaudeToolCaller
from .prompts import (
    SEGMENT_PROMPT_TEMPLATE,
    STATISTICS_PROMPT_TEMPLATE,
    TACTICAL_PROMPT_TEMPLATE,
    TECHNICAL_PROMPT_TEMPLATE,
)
from .records import (
    FaceOffOutput,
    KeyMomentOutput,
    LacrosseAnalysis,
    PlayerEvaluationOutput,
    TransitionOutput,
)
from .registry import AnalysisModuleRegistry, create_default_registry
from .sources import AnalysisSource

logger = logging.getLogger(__name__)

MIN_SEGMENTS = 15
MAX_SEGMENTS = 30


class MultiPassError(AnalyzerError):
    """A multi-pass run failed in one of its phases."""

    pass


class _Phase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class VideoSegment(_Phase):
    start_time: float = Field(ge=0)
    end_time: float = Field(ge=0)
    description: str
    players: list[str] = []
    play_type: str
    importance: Literal["high", "medium", "low"]


class TechnicalBreakdown(_Phase):
    timestamp: float = Field(0, ge=0)
    player_number: Optional[str] = None
    skill_area: str
    biomechanics: str
    decision_making: str
    improvement: str
    confidence: float = 85


class TacticalInsight(_Phase):
    timestamp: float = Field(0, ge=0)
    situation: str
    formation: str
    execution: str
    alternatives: str = ""
    coaching: str = ""
    confidence: float = 85


class StatisticalEvent(_Phase):
    timestamp: float = Field(0, ge=0)
    play_type: str
    player_involved: str = ""
    outcome: str
    confidence: float = 85


class MultiPassResult(BaseModel):
    segments: list[VideoSegment]
    breakdowns: list[TechnicalBreakdown] = []
    insights: list[TacticalInsight] = []
    statistics: list[StatisticalEvent] = []


def _tool(name: str, description: str, key: str, properties: dict, required: list[str]) -> dict:
    return {
        "name": name,
        "description": description,
        "input_schema": {
            "type": "object",
            "properties": {
                key: {
                    "type": "array",
                    "items": {"type": "object", "properties": properties, "required": required},
                }
            },
            "required": [key],
        },
    }


SEGMENTS_TOOL = _tool(
    "record_segments",
    "Record the timeline segments of the video",
    "segments",
    {
        "startTime": {"type": "number"},
        "endTime": {"type": "number"},
        "description": {"type": "string"},
        "players": {"type": "array", "items": {"type": "string"}},
        "playType": {"type": "string"},
        "importance": {"type": "string", "enum": ["high", "medium", "low"]},
    },
    ["startTime", "endTime", "description", "playType", "importance"],
)

TECHNICAL_TOOL = _tool(
    "record_technical_breakdowns",
    "Record technical breakdowns of the target segments",
    "breakdowns",
    {
        "timestamp": {"type": "number"},
        "playerNumber": {"type": "string"},
        "skillArea": {"type": "string"},
        "biomechanics": {"type": "string"},
        "decisionMaking": {"type": "string"},
        "improvement": {"type": "string"},
        "confidence": {"type": "number"},
    },
    ["timestamp", "skillArea", "biomechanics", "decisionMaking", "improvement", "confidence"],
)

TACTICAL_TOOL = _tool(
    "record_tactical_insights",
    "Record tactical insights across the segments",
    "insights",
    {
        "timestamp": {"type": "number"},
        "situation": {"type": "string"},
        "formation": {"type": "string"},
        "execution": {"type": "string"},
        "alternatives": {"type": "string"},
        "coaching": {"type": "string"},
        "confidence": {"type": "number"},
    },
    ["timestamp", "situation", "formation", "execution", "coaching", "confidence"],
)

STATISTICS_TOOL = _tool(
    "record_statistics",
    "Record every statistical event in the video",
    "statistics",
    {
        "timestamp": {"type": "number"},
        "playType": {"type": "string"},
        "playerInvolved": {"type": "string"},
        "outcome": {"type": "string"},
        "confidence": {"type": "number"},
    },
    ["timestamp", "playType", "playerInvolved", "outcome"],
)

FACEOFF_TYPES = {"face_off", "faceoff"}
TRANSITION_TYPES = {"clear", "ride", "fast_break", "transition"}
KEY_MOMENT_TYPES = {"goal", "assist", "hockey_assist", "save", "caused_turnover", "penalty", "shot"}


def _segments_json(segments: list[VideoSegment]) -> str:
    return json.dumps([segment.model_dump(by_alias=True) for segment in segments], indent=2)


def to_lacrosse_analysis(result: MultiPassResult) -> LacrosseAnalysis:
    """Merge the four passes into the standard analysis shape."""
    overall = [
        f"[{format_timestamp(insight.timestamp)}] {insight.situation} ({insight.formation}): "
        f"{insight.execution} {insight.coaching}".strip()
        for insight in result.insights
    ]
    if not overall:
        overall = [
            f"[{format_timestamp(segment.start_time)}] {segment.description}"
            for segment in result.segments
            if segment.importance == "high"
        ]

    evaluations = [
        PlayerEvaluationOutput(
            player_number=breakdown.player_number,
            evaluation=" ".join(
                part
                for part in (
                    f"{breakdown.player_number or 'Player'} {breakdown.skill_area}:",
                    breakdown.biomechanics,
                    breakdown.decision_making,
                    breakdown.improvement,
                )
                if part
            ),
            timestamp=breakdown.timestamp,
            confidence=breakdown.confidence,
        )
        for breakdown in result.breakdowns
    ]

    faceoffs, transitions, moments = [], [], []
    for event in result.statistics:
        play_type = event.play_type.lower().replace("-", "_").replace(" ", "_")
        text = f"{event.player_involved} {event.outcome}".strip()
        if play_type in FACEOFF_TYPES:
            faceoffs.append(FaceOffOutput(analysis=text, timestamp=event.timestamp, confidence=event.confidence))
        elif play_type in TRANSITION_TYPES:
            transitions.append(
                TransitionOutput(
                    analysis=text,
                    timestamp=event.timestamp,
                    confidence=event.confidence,
                    transition_type=play_type,
                )
            )
        elif play_type in KEY_MOMENT_TYPES:
            moments.append(
                KeyMomentOutput(description=text, timestamp=event.timestamp, confidence=event.confidence, type=play_type)
            )

    return LacrosseAnalysis(
        overall_analysis="\n\n".join(overall),
        player_evaluations=evaluations,
        face_off_analysis=faceoffs,
        transition_analysis=transitions,
        key_moments=moments,
    )


class MultiPassAnalyzer:
    """Runs the four analysis passes in sequence."""

    def __init__(
        self,
        caller: Optional[ClaudeToolCaller] = None,
        registry: Optional[AnalysisModuleRegistry] = None,
        max_detail_segments: Optional[int] = None,
    ):
        settings = get_settings()
        self.caller = caller or ClaudeToolCaller()
        self.registry = registry or create_default_registry(settings.analysis_modules)
        self.max_detail_segments = max_detail_segments or settings.max_detail_segments

    def run(self, source: AnalysisSource) -> MultiPassResult:
        """Run every pass and return their combined output.

        Raises:
            MultiPassError: If any pass fails or returns unusable data
        """
        try:
            logger.info("Pass 1: segmenting '%s'", source.title)
            segments = self._segment(source)

            logger.info("Pass 2: technical breakdown")
            breakdowns = self._technical(source, segments)

            logger.info("Pass 3: tactical analysis")
            insights = self._tactical(source, segments)

            logger.info("Pass 4: statistical extraction")
            statistics = self._statistics(source, segments)

            return MultiPassResult(
                segments=segments,
                breakdowns=breakdowns,
                insights=insights,
                statistics=statistics,
            )
        except MultiPassError:
            raise
        except Exception as e:
            raise MultiPassError(f"Multi-pass analysis failed: {e}")

    def analyze(self, source: AnalysisSource) -> LacrosseAnalysis:
        """Run the passes and merge them into a single analysis.

        Raises:
            MultiPassError: If a pass or the merge fails, or nothing was found
        """
        result = self.run(source)
        try:
            analysis = to_lacrosse_analysis(result)
        except Exception as e:
            raise MultiPassError(f"Failed to merge multi-pass results: {e}")
        if analysis.is_empty:
            raise MultiPassError("Multi-pass analysis produced no items")
        logger.info("Multi-pass analysis returned %d items", analysis.item_count)
        return analysis

    def _segment(self, source: AnalysisSource) -> list[VideoSegment]:
        prompt = SEGMENT_PROMPT_TEMPLATE.format(
            title=source.title or "Untitled",
            hints=source.hints_text(),
            material=source.material_text(),
        )
        data = self.caller.call(SEGMENTS_TOOL, source.content_blocks(prompt))
        segments = [VideoSegment.model_validate(item) for item in data.get("segments", [])]
        if not segments:
            raise MultiPassError("Segmentation returned no segments")
        if not MIN_SEGMENTS <= len(segments) <= MAX_SEGMENTS:
            logger.warning("Segmentation returned %d segments (expected 15-30)", len(segments))
        return sorted(segments, key=lambda segment: segment.start_time)

    def _technical(self, source: AnalysisSource, segments: list[VideoSegment]) -> list[TechnicalBreakdown]:
        targets = [segment for segment in segments if segment.importance == "high"][: self.max_detail_segments]
        if not targets:
            logger.info("No high-importance segments; skipping technical pass")
            return []
        prompt = TECHNICAL_PROMPT_TEMPLATE.format(
            title=source.title or "Untitled",
            material=source.material_text(),
            segments=_segments_json(targets),
            focus=self.registry.build_focus(),
        )
        data = self.caller.call(TECHNICAL_TOOL, source.content_blocks(prompt))
        return [TechnicalBreakdown.model_validate(item) for item in data.get("breakdowns", [])]

    def _tactical(self, source: AnalysisSource, segments: list[VideoSegment]) -> list[TacticalInsight]:
        prompt = TACTICAL_PROMPT_TEMPLATE.format(
            title=source.title or "Untitled",
            material=source.material_text(),
            segments=_segments_json(segments),
        )
        data = self.caller.call(TACTICAL_TOOL, source.content_blocks(prompt))
        return [TacticalInsight.model_validate(item) for item in data.get("insights", [])]

    def _statistics(self, source: AnalysisSource, segments: list[VideoSegment]) -> list[StatisticalEvent]:
        prompt = STATISTICS_PROMPT_TEMPLATE.format(
            title=source.title or "Untitled",
            material=source.material_text(),
            segments=_segments_json(segments),
        )
        data = self.caller.call(STATISTICS_TOOL, source.content_blocks(prompt))
        return [StatisticalEvent.model_validate(item) for item in data.get("statistics", [])]
