"""Per-video rollup tables rebuilt after each successful processing run."""
import logging
from collections import Counter, defaultdict

from sqlalchemy.orm import Session

from lacrosselens.database.models import (
    Analysis,
    CoachingPoint,
    GameFlow,
    PlayEvent,
    PlayerProfile,
    TeamFormation,
)
from lacrosselens.processing.identifier import extract_team_color
from lacrosselens.processing.rules import Rule, first_match, score_adjustments

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 300
# Negative-tier phrases score exactly 60
WEAK_SKILL = 60
UNKNOWN_TEAM = "unknown"

OFFENSIVE_FORMATION_RULES = [
    Rule(r"\b2-2-2\b", "2-2-2"),
    Rule(r"\b1-4-1\b", "1-4-1"),
    Rule(r"\b2-3-1\b", "2-3-1"),
    Rule(r"\b1-3-2\b", "1-3-2"),
    Rule(r"\b3-3\b", "3-3"),
    Rule(r"\b4-2\b", "4-2"),
    Rule(r"\bcircle\b|motion offense", "motion"),
]

DEFENSIVE_FORMATION_RULES = [
    Rule(r"man[- ]to[- ]man|\bman defense\b", "man_to_man"),
    Rule(r"\bzone\b", "zone"),
    Rule(r"\bbackside\b|\bcrease slide\b", "backside_slide"),
    Rule(r"\badjacent slides?\b", "adjacent_slide"),
]

BALL_MOVEMENT_RULES = [
    Rule(r"quick ball movement|moves? the ball (?:well|quickly)|\bskip pass", "fast"),
    Rule(r"stagnant|holds? the ball|\bsticky\b", "stagnant"),
    Rule(r"patient|\bpossession\b", "patient"),
]

SPACING_RULES = [
    Rule(r"good spacing|spread(?:s)? (?:the field|out)|\bwide spacing\b", "good"),
    Rule(r"poor spacing|\bcrowded\b|bunched", "poor"),
]

EXECUTION_RULES = [
    Rule(r"\bexcellent\b|\bexecuted perfectly\b|\bcrisp\b", 15),
    Rule(r"\beffective\b|\bwell\b", 5),
    Rule(r"\bpoor\b|\bbreaks? down\b|\bdisorganized\b", -15),
]

PRESSURE_EVENTS = {"caused_turnover", "penalty", "save"}
UP_TEMPO_EVENTS = {"transition", "faceoff"}

DRILLS = {
    "dodging": ("Attack the defender's hands and change direction with purpose", "Split-dodge cone series"),
    "shooting": ("Repeat shots from game spots with a quick release", "Five-spot shooting with time limits"),
    "passing": ("Work both hands and throw to the outside pocket", "Star passing drill"),
    "ground balls": ("Get low through the ball and explode out of traffic", "2v1 ground ball battles"),
    "defense": ("Keep the hands away and win with the feet", "Approach and break-down drill"),
    "off ball": ("Cut with timing and relocate after every pass", "3v2 cutting and relocating"),
    "iq": ("Review film of each possession and name the read", "Film session with decision freeze-frames"),
}


def coaching_priority(profile: PlayerProfile) -> str:
    gap = (profile.potential_rating or 0) - (profile.overall_rating or 0)
    if gap > 1.0:
        return "high"
    if gap > 0.5:
        return "medium"
    return "low"


def _formations(analyses: list[Analysis]) -> list[TeamFormation]:
    rows = []
    for analysis in analyses:
        offensive = first_match(OFFENSIVE_FORMATION_RULES, analysis.content)
        defensive = first_match(DEFENSIVE_FORMATION_RULES, analysis.content)
        if offensive is None and defensive is None:
            continue
        rows.append(
            TeamFormation(
                video_id=analysis.video_id,
                timestamp=float(analysis.timestamp or 0),
                team_color=extract_team_color(analysis.content) or UNKNOWN_TEAM,
                offensive_formation=offensive,
                defensive_formation=defensive,
                ball_movement=first_match(BALL_MOVEMENT_RULES, analysis.content),
                spacing=first_match(SPACING_RULES, analysis.content),
                execution_score=score_adjustments(70, EXECUTION_RULES, analysis.content),
            )
        )
    return rows


def _pace(event_count: int) -> str:
    if event_count >= 6:
        return "fast"
    if event_count >= 3:
        return "medium"
    return "slow"


def _game_flow(video_id: int, events: list[PlayEvent]) -> list[GameFlow]:
    windows: dict[int, list[PlayEvent]] = defaultdict(list)
    for event in events:
        windows[int(event.start_timestamp // WINDOW_SECONDS)].append(event)

    rows = []
    for index in sorted(windows):
        window = windows[index]
        types = Counter(event.event_type for event in window)
        colors = Counter(
            color for color in (extract_team_color(event.description or "") for event in window) if color
        )
        moods = Counter(event.momentum for event in window if event.momentum and event.momentum != "neutral")
        pressure = sum(types[name] for name in PRESSURE_EVENTS)

        rows.append(
            GameFlow(
                video_id=video_id,
                start_timestamp=float(index * WINDOW_SECONDS),
                end_timestamp=float((index + 1) * WINDOW_SECONDS),
                possession_team=colors.most_common(1)[0][0] if colors else None,
                pressure_level="high" if pressure >= 2 else "medium" if pressure == 1 else "low",
                goals=types["goal"],
                pace=_pace(len(window)),
                style="transition" if sum(types[name] for name in UP_TEMPO_EVENTS) * 2 > len(window) else "settled",
                momentum=moods.most_common(1)[0][0] if moods else "neutral",
            )
        )
    return rows


def _coaching_points(profiles: list[PlayerProfile], events: list[PlayEvent]) -> list[CoachingPoint]:
    moments: dict[int, list[int]] = defaultdict(list)
    for event in events:
        if event.primary_player_id is not None:
            moments[event.primary_player_id].append(int(event.start_timestamp))

    rows = []
    for profile in profiles:
        priority = coaching_priority(profile)
        for skill, value in profile.skill_values().items():
            if value is None or value > WEAK_SKILL:
                continue
            recommendation, drill = DRILLS[skill]
            rows.append(
                CoachingPoint(
                    video_id=profile.video_id,
                    player_id=profile.id,
                    category="skill_development",
                    subcategory=skill,
                    priority=priority,
                    timeframe="immediate" if priority == "high" else "season",
                    observation=f"{profile.player_identifier} rated {value} in {skill}",
                    recommendation=recommendation,
                    drill_suggestion=drill,
                    related_timestamps=moments.get(profile.id, []),
                )
            )
    return rows


def rebuild_rollups(db: Session, video_id: int) -> None:
    """Replace the video's formations, game flow windows and coaching points.

    The caller commits.
    """
    for table in (TeamFormation, GameFlow, CoachingPoint):
        db.query(table).filter(table.video_id == video_id).delete(synchronize_session=False)

    analyses = (
        db.query(Analysis)
        .filter(Analysis.video_id == video_id, Analysis.type.in_(["overall", "transition"]))
        .order_by(Analysis.timestamp)
        .all()
    )
    events = (
        db.query(PlayEvent)
        .filter(PlayEvent.video_id == video_id)
        .order_by(PlayEvent.start_timestamp)
        .all()
    )
    profiles = db.query(PlayerProfile).filter(PlayerProfile.video_id == video_id).all()

    formations = _formations(analyses)
    flow = _game_flow(video_id, events)
    points = _coaching_points(profiles, events)
    db.add_all(formations + flow + points)
    db.flush()

    logger.info(
        "Video %s: rebuilt %d formations, %d game flow windows, %d coaching points",
        video_id, len(formations), len(flow), len(points),
    )
