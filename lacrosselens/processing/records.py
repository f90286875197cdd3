"""Typed shapes for model output.

``LacrosseAnalysis`` validates the JSON the model returns. It is flattened
into ``AnalysisRecord`` items, a union discriminated on ``type``, which is
what the enricher consumes and what ends up in the ``analyses`` table.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_CONFIDENCE = 85


class _ModelOutput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    timestamp: float = Field(0, ge=0)
    confidence: float = DEFAULT_CONFIDENCE

    @field_validator("confidence")
    @classmethod
    def _percent(cls, value: float) -> float:
        # Some responses use 0-1 fractions
        if 0 < value <= 1:
            value *= 100
        return max(0.0, min(100.0, value))


class PlayerEvaluationOutput(_ModelOutput):
    player_number: Optional[str] = None
    evaluation: str


class FaceOffOutput(_ModelOutput):
    analysis: str
    win_probability: Optional[float] = None
    win_probability_change: Optional[float] = None
    outcome: Optional[str] = None
    winner: Optional[str] = None
    technique: Optional[str] = None


class TransitionOutput(_ModelOutput):
    analysis: str
    success_probability: Optional[float] = None
    successful: Optional[bool] = None
    transition_type: Optional[str] = None
    end_timestamp: Optional[float] = None


class KeyMomentOutput(_ModelOutput):
    description: str
    type: Optional[str] = None


class LacrosseAnalysis(BaseModel):
    """Complete structured response for one video."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    overall_analysis: str = ""
    player_evaluations: list[PlayerEvaluationOutput] = []
    face_off_analysis: list[FaceOffOutput] = []
    transition_analysis: list[TransitionOutput] = []
    key_moments: list[KeyMomentOutput] = []

    @property
    def is_empty(self) -> bool:
        return not (
            self.overall_analysis.strip()
            or self.player_evaluations
            or self.face_off_analysis
            or self.transition_analysis
            or self.key_moments
        )

    @property
    def item_count(self) -> int:
        return (
            (1 if self.overall_analysis.strip() else 0)
            + len(self.player_evaluations)
            + len(self.face_off_analysis)
            + len(self.transition_analysis)
            + len(self.key_moments)
        )


# --- Stored records ---


class _Record(BaseModel):
    content: str
    timestamp: Optional[int] = None
    confidence: int = DEFAULT_CONFIDENCE

    def metadata(self) -> dict:
        """Type-specific fields persisted in the analysis metadata column."""
        return self.model_dump(
            by_alias=True,
            exclude={"type", "content", "timestamp", "confidence"},
            exclude_none=True,
        )


class OverallRecord(_Record):
    type: Literal["overall"] = "overall"


class PlayerEvaluationRecord(_Record):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["player_evaluation"] = "player_evaluation"
    player_number: Optional[str] = None


class FaceOffRecord(_Record):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["face_off"] = "face_off"
    win_probability: Optional[float] = None
    win_probability_change: Optional[float] = None
    outcome: Optional[str] = None
    winner: Optional[str] = None
    technique: Optional[str] = None


class TransitionRecord(_Record):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["transition"] = "transition"
    success_probability: Optional[float] = None
    successful: Optional[bool] = None
    transition_type: Optional[str] = None
    end_timestamp: Optional[int] = None


class KeyMomentRecord(_Record):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["key_moment"] = "key_moment"
    moment_type: Optional[str] = None


AnalysisRecord = Annotated[
    Union[OverallRecord, PlayerEvaluationRecord, FaceOffRecord, TransitionRecord, KeyMomentRecord],
    Field(discriminator="type"),
]

record_adapter = TypeAdapter(AnalysisRecord)


def parse_record(data: dict) -> AnalysisRecord:
    """Validate a plain dict (``type`` plus fields) into the matching record class."""
    return record_adapter.validate_python(data)


def _seconds(value: Optional[float]) -> Optional[int]:
    return None if value is None else int(round(value))


def records_from_analysis(analysis: LacrosseAnalysis) -> list[AnalysisRecord]:
    """Flatten a model response into records, in response order."""
    records: list[AnalysisRecord] = []

    if analysis.overall_analysis.strip():
        records.append(OverallRecord(content=analysis.overall_analysis, timestamp=0, confidence=95))

    for item in analysis.player_evaluations:
        records.append(
            PlayerEvaluationRecord(
                content=item.evaluation,
                timestamp=_seconds(item.timestamp),
                confidence=round(item.confidence),
                player_number=item.player_number,
            )
        )

    for item in analysis.face_off_analysis:
        records.append(
            FaceOffRecord(
                content=item.analysis,
                timestamp=_seconds(item.timestamp),
                confidence=round(item.confidence),
                win_probability=item.win_probability,
                win_probability_change=item.win_probability_change,
                outcome=item.outcome,
                winner=item.winner,
                technique=item.technique,
            )
        )

    for item in analysis.transition_analysis:
        records.append(
            TransitionRecord(
                content=item.analysis,
                timestamp=_seconds(item.timestamp),
                confidence=round(item.confidence),
                success_probability=item.success_probability,
                successful=item.successful,
                transition_type=item.transition_type,
                end_timestamp=_seconds(item.end_timestamp),
            )
        )

    for item in analysis.key_moments:
        records.append(
            KeyMomentRecord(
                content=item.description,
                timestamp=_seconds(item.timestamp),
                confidence=round(item.confidence),
                moment_type=item.type,
            )
        )

    return records
