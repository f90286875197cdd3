"""Turn analysis records into stored rows, play events and detail rows."""
import logging
from dataclasses import asdict
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from lacrosselens.config.settings import get_settings
from lacrosselens.database.models import (
    Analysis,
    CoachingPoint,
    DefensiveDetail,
    FaceoffDetail,
    GameFlow,
    PlayEvent,
    PlayerProfile,
    ShotDetail,
    TeamFormation,
    TransitionDetail,
)
from .annotations import enhance_metadata, generate_tags, generate_title
from .identifier import extract_identifiers, extract_player_info
from .play_details import (
    event_subtype,
    extract_defense,
    extract_faceoff,
    extract_shot,
    extract_transition,
    faceoff_type,
    field_side,
    field_zone,
    game_context,
    key_moment_type,
    momentum,
)
from .profiles import ProfileAggregator
from .records import (
    AnalysisRecord,
    FaceOffRecord,
    KeyMomentRecord,
    PlayerEvaluationRecord,
    TransitionRecord,
)
from .skill_rater import rate_skills

logger = logging.getLogger(__name__)

EVALUATION_CONFIDENCE = 85


def _percent(probability: float) -> float:
    return probability * 100 if probability <= 1 else probability


def faceoff_success(record: FaceOffRecord, detected_winner: Optional[str]) -> bool:
    """Explicit outcome, then win probability, then whether any winner was named."""
    if record.outcome:
        return record.outcome.lower() == "win"
    if record.win_probability is not None:
        return _percent(record.win_probability) > 50
    return detected_winner is not None


def transition_success(record: TransitionRecord) -> bool:
    if record.successful is not None:
        return record.successful
    if record.success_probability is not None:
        return _percent(record.success_probability) >= 50
    return True


def clear_video_results(db: Session, video_id: int) -> None:
    """Delete everything derived from a video's analyses, children first.

    The caller commits.
    """
    event_ids = select(PlayEvent.id).where(PlayEvent.video_id == video_id)
    for detail in (FaceoffDetail, TransitionDetail, ShotDetail, DefensiveDetail):
        db.query(detail).filter(detail.play_event_id.in_(event_ids)).delete(synchronize_session=False)

    for model in (PlayEvent, CoachingPoint, GameFlow, TeamFormation, Analysis, PlayerProfile):
        db.query(model).filter(model.video_id == video_id).delete(synchronize_session=False)


class AnalysisEnricher:
    """Stores one analysis record and derives structured data from it.

    The base ``analyses`` row is committed before any enrichment runs. A
    failure while enriching is rolled back and logged; it never removes the
    base row or stops the caller from moving on to the next record.
    """

    def __init__(
        self,
        aggregator: Optional[ProfileAggregator] = None,
        min_confidence: Optional[int] = None,
    ):
        if min_confidence is None:
            min_confidence = get_settings().min_analysis_confidence
        self.aggregator = aggregator or ProfileAggregator()
        self.min_confidence = min_confidence
        self._handlers = {
            "player_evaluation": self._enrich_player_evaluation,
            "face_off": self._enrich_faceoff,
            "transition": self._enrich_transition,
            "key_moment": self._enrich_key_moment,
        }

    def process(self, db: Session, video_id: int, record: AnalysisRecord) -> Optional[Analysis]:
        """Persist ``record`` for ``video_id`` and enrich it.

        Returns:
            The stored Analysis, or None when the record was below the
            confidence threshold
        """
        if record.confidence < self.min_confidence:
            logger.warning(
                "Skipping %s at %ss for video %s: confidence %s below %s",
                record.type, record.timestamp, video_id, record.confidence, self.min_confidence,
            )
            return None

        analysis = Analysis(
            video_id=video_id,
            type=record.type,
            content=record.content,
            timestamp=record.timestamp,
            confidence=record.confidence,
            **self._annotate(record),
        )
        db.add(analysis)
        db.commit()
        db.refresh(analysis)

        handler = self._handlers.get(record.type)
        if handler is None:
            return analysis

        try:
            handler(db, video_id, analysis, record)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(
                "Enrichment failed for analysis %s (%s) of video %s", analysis.id, record.type, video_id
            )
        return analysis

    def _annotate(self, record: AnalysisRecord) -> dict:
        metadata = record.metadata()
        try:
            enhanced = enhance_metadata(record.type, metadata, record.content)
            return {
                "subtype": enhanced.get("subtype"),
                "title": generate_title(record.type, record.content, metadata, record.timestamp),
                "end_timestamp": metadata.get("endTimestamp"),
                "details": enhanced,
                "player_identifiers": extract_identifiers(record.content),
                "tags": generate_tags(record.type, record.content, metadata),
            }
        except Exception:
            logger.exception("Could not annotate %s record; storing it bare", record.type)
            return {
                "subtype": None,
                "title": record.type,
                "end_timestamp": None,
                "details": metadata,
                "player_identifiers": [],
                "tags": [record.type],
            }

    def _existing_profiles(self, db: Session, video_id: int, identifiers: list[str]) -> dict[str, int]:
        if not identifiers:
            return {}
        rows = (
            db.query(PlayerProfile.player_identifier, PlayerProfile.id)
            .filter(
                PlayerProfile.video_id == video_id,
                PlayerProfile.player_identifier.in_(identifiers),
            )
            .all()
        )
        found = dict(rows)
        # Keep the order the players are mentioned in
        return {identifier: found[identifier] for identifier in identifiers if identifier in found}

    def _base_event(self, video_id: int, analysis: Analysis, record: AnalysisRecord, **fields) -> PlayEvent:
        values = {
            "video_id": video_id,
            "analysis_id": analysis.id,
            "start_timestamp": float(record.timestamp or 0),
            "confidence": record.confidence,
            "description": record.content,
            "field_zone": field_zone(record.content),
            "field_side": field_side(record.content),
            "game_context": game_context(record.content),
            "momentum": momentum(record.content),
        }
        values.update(fields)
        return PlayEvent(**values)

    def _enrich_player_evaluation(
        self, db: Session, video_id: int, analysis: Analysis, record: PlayerEvaluationRecord
    ) -> None:
        player = extract_player_info(record.content, record.player_number)
        skills = rate_skills(record.content)

        profile_id = None
        if player.identifier:
            profile_id = self.aggregator.upsert(db, video_id, player, skills, record.content)
        else:
            logger.debug("No player identifier in evaluation %s", analysis.id)

        db.add(
            self._base_event(
                video_id,
                analysis,
                record,
                event_type="evaluation",
                event_subtype=analysis.subtype,
                primary_player_id=profile_id,
                confidence=EVALUATION_CONFIDENCE,
            )
        )

    def _enrich_faceoff(self, db: Session, video_id: int, analysis: Analysis, record: FaceOffRecord) -> None:
        winner = record.winner.lower() if record.winner else None
        info = extract_faceoff(record.content, winner=winner)
        fogos = self._existing_profiles(db, video_id, analysis.player_identifiers or [])
        fogo_ids = list(fogos.values())

        event = self._base_event(
            video_id,
            analysis,
            record,
            event_type="faceoff",
            event_subtype=faceoff_type(record.content),
            field_zone="midfield",
            field_side="center",
            success=faceoff_success(record, info.winner),
            game_context="face_off",
        )
        event.faceoff_detail = FaceoffDetail(
            team1_fogo_id=fogo_ids[0] if fogo_ids else None,
            team2_fogo_id=fogo_ids[1] if len(fogo_ids) > 1 else None,
            win_probability_change=record.win_probability_change,
            **asdict(info),
        )
        db.add(event)

    def _enrich_transition(
        self, db: Session, video_id: int, analysis: Analysis, record: TransitionRecord
    ) -> None:
        info = extract_transition(record.content)
        successful = transition_success(record)
        if record.transition_type:
            info.transition_type = record.transition_type
        players = self._existing_profiles(db, video_id, analysis.player_identifiers or [])

        event = self._base_event(
            video_id,
            analysis,
            record,
            event_type="transition",
            event_subtype=info.transition_type,
            end_timestamp=float(record.end_timestamp) if record.end_timestamp is not None else None,
            success=successful,
            game_context="transition",
        )
        event.transition_detail = TransitionDetail(
            primary_clearer_id=next(iter(players.values()), None),
            successful=successful,
            expected_success_rate=record.success_probability,
            **asdict(info),
        )
        db.add(event)

    def _enrich_key_moment(
        self, db: Session, video_id: int, analysis: Analysis, record: KeyMomentRecord
    ) -> None:
        moment = key_moment_type(record.content)
        identifiers = analysis.player_identifiers or []
        profiles = self._existing_profiles(db, video_id, identifiers[:2])
        primary_id = profiles.get(identifiers[0]) if identifiers else None
        secondary_id = profiles.get(identifiers[1]) if len(identifiers) > 1 else None

        event = self._base_event(
            video_id,
            analysis,
            record,
            event_type=moment,
            event_subtype=event_subtype(record.content, moment),
            primary_player_id=primary_id,
            secondary_player_id=secondary_id,
            success=True,
        )

        if moment in ("goal", "shot"):
            event.shot_detail = ShotDetail(
                shooter_id=primary_id,
                assisted_by=secondary_id if moment == "goal" else None,
                **asdict(extract_shot(record.content, moment)),
            )
        elif moment == "caused_turnover":
            event.defensive_detail = DefensiveDetail(
                defender_id=primary_id,
                **asdict(extract_defense(record.content)),
            )
        db.add(event)
