"""Read-side analytics reports over play events, details and profiles."""
import re
from collections import Counter
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from lacrosselens.database.models import (
    Analysis,
    CoachingPoint,
    FaceoffDetail,
    GameFlow,
    PlayEvent,
    PlayerProfile,
    TeamFormation,
    TransitionDetail,
)
from lacrosselens.database.schemas import (
    CoachingInsightsResponse,
    CoachingPointResponse,
    CriticalPeriod,
    ExitStats,
    FaceoffAnalyticsResponse,
    GameFlowMoment,
    GameFlowResponse,
    GameFlowWindow,
    MomentumPeriod,
    PlayerDevelopment,
    PlayerPerformanceResponse,
    TeamAnalyticsResponse,
    TechniqueStats,
)
from lacrosselens.processing.identifier import extract_team_color
from lacrosselens.processing.play_details import FACEOFF_TECHNIQUES
from .rollups import coaching_priority
from .statistics import get_video_play_statistics

STRENGTH_THRESHOLD = 80
WEAKNESS_THRESHOLD = 60
MIN_FORM_EVENTS = 5
MAX_TACTICAL_NOTES = 5

EXIT_DIRECTIONS = ["forward", "back", "left", "right"]
KEY_MOMENT_EVENTS = ["goal", "save", "caused_turnover", "penalty"]
TACTICAL_SENTENCE = re.compile(
    r"[^.!?]*\b(?:formation|strategy|scheme|offense|defense|slides?|ride|clear)\b[^.!?]*[.!?]?",
    re.IGNORECASE,
)


def _percentage(part: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(part / total * 100, 1)


def strengths(profile: PlayerProfile) -> list[str]:
    ranked = sorted(profile.skill_values().items(), key=lambda item: -(item[1] or 0))
    return [skill for skill, value in ranked if value is not None and value >= STRENGTH_THRESHOLD]


def improvement_areas(profile: PlayerProfile) -> list[str]:
    ranked = sorted(profile.skill_values().items(), key=lambda item: item[1] or 0)
    return [skill for skill, value in ranked if value is not None and value < WEAKNESS_THRESHOLD]


def recent_form(events: list[PlayEvent]) -> str:
    """Compare the success rate of the later half of ``events`` with the earlier half.

    ``events`` must be in time order. Fewer than five events is always stable.
    """
    if len(events) < MIN_FORM_EVENTS:
        return "stable"

    middle = len(events) // 2
    earlier, later = events[:middle], events[middle:]
    earlier_rate = sum(1 for event in earlier if event.success) / len(earlier)
    later_rate = sum(1 for event in later if event.success) / len(later)

    if later_rate > earlier_rate + 0.1:
        return "improving"
    if later_rate < earlier_rate - 0.1:
        return "declining"
    return "stable"


def player_performance(db: Session, profile_id: int) -> Optional[PlayerPerformanceResponse]:
    """Event totals and form for one player profile, or None when it does not exist."""
    profile = db.get(PlayerProfile, profile_id)
    if profile is None:
        return None

    events = (
        db.query(PlayEvent)
        .filter(or_(PlayEvent.primary_player_id == profile_id, PlayEvent.secondary_player_id == profile_id))
        .order_by(PlayEvent.start_timestamp)
        .all()
    )
    primary = Counter(event.event_type for event in events if event.primary_player_id == profile_id)
    assists = sum(
        1 for event in events if event.event_type == "goal" and event.secondary_player_id == profile_id
    )

    faceoffs = (
        db.query(FaceoffDetail)
        .filter(or_(FaceoffDetail.team1_fogo_id == profile_id, FaceoffDetail.team2_fogo_id == profile_id))
        .all()
    )
    faceoff_wins = sum(1 for detail in faceoffs if profile.team_color and detail.winner == profile.team_color)

    clears = (
        db.query(TransitionDetail)
        .filter(TransitionDetail.primary_clearer_id == profile_id, TransitionDetail.transition_type == "clear")
        .all()
    )

    return PlayerPerformanceResponse(
        player_id=profile.id,
        player_identifier=profile.player_identifier,
        total_events=len(events),
        goals=primary["goal"],
        assists=assists,
        shots=primary["shot"] + primary["goal"],
        saves=primary["save"],
        caused_turnovers=primary["caused_turnover"],
        turnovers=primary["turnover"],
        ground_balls=primary["ground_ball"],
        faceoff_wins=faceoff_wins,
        faceoff_losses=len(faceoffs) - faceoff_wins,
        clearing_success=sum(1 for detail in clears if detail.successful),
        clearing_attempts=len(clears),
        overall_rating=profile.overall_rating or 0.0,
        recent_form=recent_form(events),
        key_strengths=strengths(profile),
        areas_for_improvement=improvement_areas(profile),
    )


def _momentum_periods(windows: list[GameFlow], team_color: str) -> list[MomentumPeriod]:
    flipped = {"positive": "negative", "negative": "positive"}
    periods = []
    for window in windows:
        if not window.possession_team:
            continue
        strength = window.momentum or "neutral"
        if window.possession_team != team_color:
            strength = flipped.get(strength, strength)
        periods.append(MomentumPeriod(start=window.start_timestamp, end=window.end_timestamp, strength=strength))
    return periods


def team_analytics(db: Session, video_id: int, team_color: str) -> TeamAnalyticsResponse:
    """Efficiency, face-off, transition and formation numbers for one team color."""
    team_color = team_color.lower()
    profiles = db.query(PlayerProfile).filter(PlayerProfile.video_id == video_id).all()
    team_ids = {profile.id for profile in profiles if profile.team_color == team_color}
    other_ids = {profile.id for profile in profiles if profile.team_color not in (None, team_color)}

    events = db.query(PlayEvent).filter(PlayEvent.video_id == video_id).all()
    ours = [event for event in events if event.primary_player_id in team_ids]
    goals = sum(1 for event in ours if event.event_type == "goal")
    shots = sum(1 for event in ours if event.event_type in ("goal", "shot"))
    saves = sum(1 for event in ours if event.event_type == "save")
    opponent_goals = sum(
        1
        for event in events
        if event.event_type == "goal"
        and (
            event.primary_player_id in other_ids
            or (
                event.primary_player_id not in team_ids
                and extract_team_color(event.description or "") not in (None, team_color)
            )
        )
    )

    faceoffs = (
        db.query(FaceoffDetail)
        .join(PlayEvent, FaceoffDetail.play_event_id == PlayEvent.id)
        .filter(PlayEvent.video_id == video_id, FaceoffDetail.winner.isnot(None))
        .all()
    )
    clears = (
        db.query(TransitionDetail)
        .join(PlayEvent, TransitionDetail.play_event_id == PlayEvent.id)
        .filter(PlayEvent.video_id == video_id, TransitionDetail.clearing_team == team_color)
        .all()
    )
    formations = (
        db.query(TeamFormation)
        .filter(TeamFormation.video_id == video_id, TeamFormation.team_color == team_color)
        .all()
    )
    windows = db.query(GameFlow).filter(GameFlow.video_id == video_id).order_by(GameFlow.start_timestamp).all()

    offensive = _percentage(goals, shots)
    return TeamAnalyticsResponse(
        video_id=video_id,
        team_color=team_color,
        offensive_efficiency=offensive,
        defensive_efficiency=_percentage(saves, saves + opponent_goals),
        shot_conversion_rate=offensive,
        faceoff_win_percentage=_percentage(
            sum(1 for detail in faceoffs if detail.winner == team_color), len(faceoffs)
        ),
        transition_success_rate=_percentage(sum(1 for detail in clears if detail.successful), len(clears)),
        formation_counts=dict(Counter(row.offensive_formation for row in formations if row.offensive_formation)),
        momentum_periods=_momentum_periods(windows, team_color),
    )


def moment_impact(event: PlayEvent) -> str:
    if event.event_type == "goal":
        return "high"
    if event.event_type == "save" and event.game_context == "man_down":
        return "high"
    if event.event_type == "caused_turnover":
        return "medium"
    return "low"


def game_flow(db: Session, video_id: int) -> GameFlowResponse:
    events = (
        db.query(PlayEvent)
        .filter(PlayEvent.video_id == video_id, PlayEvent.event_type.in_(KEY_MOMENT_EVENTS))
        .order_by(PlayEvent.start_timestamp)
        .all()
    )
    windows = db.query(GameFlow).filter(GameFlow.video_id == video_id).order_by(GameFlow.start_timestamp).all()

    moments = [
        GameFlowMoment(
            timestamp=event.start_timestamp,
            event_type=event.event_type,
            description=event.description or f"{event.event_type} at {event.field_zone or 'unknown zone'}",
            impact=moment_impact(event),
            momentum_shift=event.momentum in ("positive", "negative"),
        )
        for event in events
    ]
    critical = [
        CriticalPeriod(
            start=window.start_timestamp,
            end=window.end_timestamp,
            description=f"{window.goals} goals"
            + (f", {window.possession_team} controlling play" if window.possession_team else ""),
        )
        for window in windows
        if (window.goals or 0) >= 2
    ]

    return GameFlowResponse(
        video_id=video_id,
        key_moments=moments,
        windows=[GameFlowWindow.model_validate(window) for window in windows],
        critical_periods=critical,
    )


def faceoff_analytics(db: Session, video_id: int) -> FaceoffAnalyticsResponse:
    """Technique and exit outcomes over the video's face-offs.

    The first technique mentioned belongs to the side the analysis follows,
    so it is credited with the event's success and the second with its
    failure.
    """
    rows = (
        db.query(PlayEvent, FaceoffDetail)
        .join(FaceoffDetail, FaceoffDetail.play_event_id == PlayEvent.id)
        .filter(PlayEvent.video_id == video_id, PlayEvent.event_type == "faceoff")
        .order_by(PlayEvent.start_timestamp)
        .all()
    )

    techniques = {technique: TechniqueStats() for technique in FACEOFF_TECHNIQUES}
    exits = {direction: ExitStats() for direction in EXIT_DIRECTIONS}

    for event, detail in rows:
        for technique, won in ((detail.team1_technique, event.success), (detail.team2_technique, not event.success)):
            stats = techniques.get((technique or "").lower())
            if stats is None:
                continue
            stats.attempts += 1
            if won:
                stats.wins += 1

        stats = exits.get((detail.exit_direction or "").lower())
        if stats is not None:
            stats.attempts += 1
            if detail.fast_break_opportunity:
                stats.fast_breaks += 1

    scores = [detail.technical_score or 0 for _, detail in rows]
    return FaceoffAnalyticsResponse(
        video_id=video_id,
        total_faceoffs=len(rows),
        technique_stats=techniques,
        exit_stats=exits,
        average_technical_score=round(sum(scores) / len(scores), 1) if scores else 0.0,
        wing_support_count=sum(1 for _, detail in rows if detail.wing_support),
    )


def tactical_notes(analyses: list[Analysis], formations: list[TeamFormation]) -> list[str]:
    notes = []
    for analysis in analyses:
        if analysis.type != "overall" and not re.search(r"formation|strategy", analysis.content, re.IGNORECASE):
            continue
        notes.extend(match.group(0).strip() for match in TACTICAL_SENTENCE.finditer(analysis.content))
    for row in formations:
        if row.offensive_formation:
            notes.append(f"{row.team_color} ran a {row.offensive_formation} set")
    # Keep first occurrence of each note
    return list(dict.fromkeys(note for note in notes if note))[:MAX_TACTICAL_NOTES]


def team_strengths_and_weaknesses(db: Session, video_id: int) -> tuple[list[str], list[str]]:
    stats = get_video_play_statistics(db, video_id)
    strong, weak = [], []

    if stats.face_off_total:
        if stats.face_off_win_percentage >= 60:
            strong.append("Effective face-off unit")
        elif stats.face_off_win_percentage < 40:
            weak.append("Losing the face-off battle")
    if stats.clear_total:
        if stats.clearing_percentage >= 75:
            strong.append("Reliable clearing")
        elif stats.clearing_percentage < 60:
            weak.append("Inconsistent clearing")
    if stats.transition_total and stats.transition_success * 2 > stats.transition_total:
        strong.append("Strong transition game")
    if stats.caused_turnovers >= 3:
        strong.append("Disruptive defense")
    if stats.ground_balls >= 5:
        strong.append("Wins ground balls")
    if stats.turnovers > stats.caused_turnovers + 2:
        weak.append("Ball security")
    if stats.shots >= 5 and stats.shots_on_target * 2 < stats.shots:
        weak.append("Shooting accuracy")

    return strong, weak


def coaching_insights(db: Session, video_id: int) -> CoachingInsightsResponse:
    profiles = (
        db.query(PlayerProfile)
        .filter(PlayerProfile.video_id == video_id)
        .order_by(PlayerProfile.player_identifier)
        .all()
    )
    points = (
        db.query(CoachingPoint)
        .filter(CoachingPoint.video_id == video_id)
        .order_by(CoachingPoint.id)
        .all()
    )
    analyses = db.query(Analysis).filter(Analysis.video_id == video_id).order_by(Analysis.timestamp).all()
    formations = (
        db.query(TeamFormation)
        .filter(TeamFormation.video_id == video_id)
        .order_by(TeamFormation.timestamp)
        .all()
    )
    strong, weak = team_strengths_and_weaknesses(db, video_id)

    return CoachingInsightsResponse(
        video_id=video_id,
        player_development={
            profile.player_identifier: PlayerDevelopment(
                current_level=profile.overall_rating,
                potential=profile.potential_rating,
                key_skills=strengths(profile)[:3],
                development_areas=improvement_areas(profile)[:3],
                coaching_priority=coaching_priority(profile),
            )
            for profile in profiles
        },
        coaching_points=[CoachingPointResponse.model_validate(point) for point in points],
        tactical_notes=tactical_notes(analyses, formations),
        strengths=strong,
        weaknesses=weak,
    )
