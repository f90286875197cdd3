"""Per-video play statistics derived from stored analysis text.

Nothing here is cached: every call re-classifies the video's current
analyses, so the numbers always reflect what is stored.
"""
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from lacrosselens.database.models import Analysis
from lacrosselens.processing import classifier
from lacrosselens.processing.classifier import PlayTag, classify
from lacrosselens.processing.identifier import extract_jersey_number, extract_team_color

DEFAULT_CONFIDENCE = 85


@dataclass
class PlayStatistics:
    video_id: int
    goals: int = 0
    assists: int = 0
    hockey_assists: int = 0
    shots: int = 0
    shots_on_target: int = 0
    saves: int = 0
    turnovers: int = 0
    caused_turnovers: int = 0
    ground_balls: int = 0
    checks: int = 0
    penalties: int = 0
    ball_touches: int = 0
    face_off_wins: int = 0
    face_off_total: int = 0
    transition_success: int = 0
    transition_total: int = 0
    clear_success: int = 0
    clear_total: int = 0

    @property
    def face_off_win_percentage(self) -> float:
        return _percentage(self.face_off_wins, self.face_off_total)

    @property
    def clearing_percentage(self) -> float:
        return _percentage(self.clear_success, self.clear_total)


@dataclass
class DetailedPlay:
    type: str
    timestamp: int
    analysis_id: int
    success: bool
    description: str
    confidence: int
    player_number: Optional[str] = None
    team_color: Optional[str] = None


# Play type -> counter field
COUNTED = {
    classifier.GOAL: "goals",
    classifier.ASSIST: "assists",
    classifier.HOCKEY_ASSIST: "hockey_assists",
    classifier.SHOT: "shots",
    classifier.SAVE: "saves",
    classifier.TURNOVER: "turnovers",
    classifier.CAUSED_TURNOVER: "caused_turnovers",
    classifier.GROUND_BALL: "ground_balls",
    classifier.CHECK: "checks",
    classifier.PENALTY: "penalties",
    classifier.BALL_TOUCH: "ball_touches",
    classifier.FACE_OFF: "face_off_total",
    classifier.TRANSITION: "transition_total",
    classifier.CLEAR: "clear_total",
}

# Play type -> success counter field
SUCCESS_COUNTED = {
    classifier.FACE_OFF: "face_off_wins",
    classifier.TRANSITION: "transition_success",
    classifier.CLEAR: "clear_success",
}


def _percentage(part: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(part / total * 100, 1)


def _video_analyses(db: Session, video_id: int) -> list[Analysis]:
    return (
        db.query(Analysis)
        .filter(Analysis.video_id == video_id)
        .order_by(Analysis.timestamp, Analysis.id)
        .all()
    )


def tally(stats: PlayStatistics, tags: list[PlayTag]) -> None:
    """Add one analysis's classifier output to ``stats``."""
    saved = any(tag.type == classifier.SAVE for tag in tags)
    for tag in tags:
        setattr(stats, COUNTED[tag.type], getattr(stats, COUNTED[tag.type]) + 1)
        if tag.success and tag.type in SUCCESS_COUNTED:
            field = SUCCESS_COUNTED[tag.type]
            setattr(stats, field, getattr(stats, field) + 1)
        # A saved shot was still on target
        if tag.type == classifier.SHOT and (tag.success or saved):
            stats.shots_on_target += 1


def get_video_play_statistics(db: Session, video_id: int) -> PlayStatistics:
    """Counts per play type over every stored analysis of the video."""
    stats = PlayStatistics(video_id=video_id)
    for analysis in _video_analyses(db, video_id):
        tally(stats, classify(analysis.content))
    return stats


def get_video_play_by_play(db: Session, video_id: int) -> list[DetailedPlay]:
    """Every detected play, ordered by timestamp.

    Ball touches are counted in the statistics but left out of the
    play-by-play.
    """
    plays = []
    for analysis in _video_analyses(db, video_id):
        tags = [tag for tag in classify(analysis.content) if tag.type != classifier.BALL_TOUCH]
        if not tags:
            continue
        number = extract_jersey_number(analysis.content)
        color = extract_team_color(analysis.content)
        for tag in tags:
            plays.append(
                DetailedPlay(
                    type=tag.type,
                    timestamp=analysis.timestamp or 0,
                    analysis_id=analysis.id,
                    success=tag.success,
                    description=analysis.content,
                    confidence=analysis.confidence or DEFAULT_CONFIDENCE,
                    player_number=number,
                    team_color=color,
                )
            )
    return sorted(plays, key=lambda play: play.timestamp)


def play_type_counts(db: Session, video_id: int) -> Counter:
    """Plain play-type counts, used by the coaching insights report."""
    counts: Counter = Counter()
    for analysis in _video_analyses(db, video_id):
        counts.update(tag.type for tag in classify(analysis.content))
    return counts
