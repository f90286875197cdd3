"""Regex probes that turn play descriptions into structured detail fields.

Each probe is independent and falls back to a fixed default ("medium",
"neutral", None, ...) when nothing in the text matches.
"""
import re
from dataclasses import dataclass
from typing import Optional

from .identifier import TEAM_COLORS
from .rules import (
    Rule,
    any_match,
    clamp,
    first_float,
    first_int,
    first_match,
    score_adjustments,
)

_COLORS = "|".join(TEAM_COLORS)

# --- Field location and game context ---

FIELD_ZONE_RULES = [
    Rule(r"attack.*box|offensive.*zone|attack.*area", "attack_box"),
    Rule(r"defensive.*zone|defensive.*end", "defensive_zone"),
    Rule(r"midfield|center.*field", "midfield"),
    Rule(r"crease|goal.*area", "crease"),
    Rule(r"\bx\b|behind.*cage", "x_area"),
]

FIELD_SIDE_RULES = [
    Rule(r"left.*side|left.*alley", "left"),
    Rule(r"right.*side|right.*alley", "right"),
    Rule(r"center|middle", "center"),
]

GAME_CONTEXT_RULES = [
    Rule(r"man.*up|extra.?man", "man_up"),
    Rule(r"man.*down", "man_down"),
    Rule(r"transition", "transition"),
]

MOMENTUM_RULES = [
    Rule(r"momentum.*shift|game.*changer|spark", "positive"),
    Rule(r"deflating|costly|damaging", "negative"),
]


def field_zone(content: str) -> Optional[str]:
    return first_match(FIELD_ZONE_RULES, content)


def field_side(content: str) -> Optional[str]:
    return first_match(FIELD_SIDE_RULES, content)


def game_context(content: str) -> str:
    return first_match(GAME_CONTEXT_RULES, content, "even_strength")


def momentum(content: str) -> str:
    return first_match(MOMENTUM_RULES, content, "neutral")


def players_involved(content: str) -> int:
    return len(set(re.findall(r"#\d{1,2}", content)))


def duration_seconds(content: str) -> Optional[float]:
    return first_float(r"(\d+(?:\.\d+)?)\s*seconds?", content)


# --- Key moments ---

# Fixed priority: the first matching type wins
KEY_MOMENT_RULES = [
    Rule(r"\bgoal\b|\bscor(?:es|ed)\b", "goal"),
    Rule(r"\bassist", "assist"),
    Rule(r"\bsav(?:e|es|ed)\b|\bstopped\b", "save"),
    Rule(r"caused.*turnover|takeaway", "caused_turnover"),
    Rule(r"penalty|\bflag", "penalty"),
    Rule(r"\bshot\b", "shot"),
]

GOAL_SUBTYPE_RULES = [
    Rule(r"dodge.*goal|goal.*dodg", "dodge_goal"),
    Rule(r"time.*room", "time_and_room"),
    Rule(r"man.*up|extra.?man", "man_up_goal"),
    Rule(r"fast.*break|transition", "fast_break_goal"),
    Rule(r"outside", "outside_shot"),
]


def key_moment_type(content: str) -> str:
    return first_match(KEY_MOMENT_RULES, content, "highlight")


def event_subtype(content: str, event_type: str) -> Optional[str]:
    if event_type == "goal":
        return first_match(GOAL_SUBTYPE_RULES, content)
    return None


# --- Face-offs ---

FACEOFF_TECHNIQUES = ["clamp", "rake", "jump", "plunger", "laser", "traditional"]

FACEOFF_TYPE_RULES = [
    Rule(r"violation|illegal", "violation"),
    Rule(r"fast.*break", "fast_break_faceoff"),
    Rule(r"defensive.*win", "defensive_faceoff"),
]

CLAMP_SPEED_RULES = [
    Rule(r"quick.*clamp|fast.*clamp|explosive.*clamp", "fast"),
    Rule(r"slow.*clamp|deliberate.*clamp", "slow"),
]

CLAMP_ANGLE_RULES = [
    Rule(r"forward.*clamp|aggressive.*angle", "forward"),
    Rule(r"reverse.*clamp|backward.*angle", "reverse"),
]

COUNTER_MOVE_RULES = [
    Rule(r"jump.*counter", "jump counter"),
    Rule(r"spin.*move", "spin move"),
    Rule(r"rake.*counter", "rake counter"),
    Rule(r"lift.*check", "lift check"),
]

COUNTER_TIMING_RULES = [
    Rule(r"early.*counter|anticipat", "early"),
    Rule(r"late.*counter|delayed", "late"),
]

EXIT_DIRECTION_RULES = [
    Rule(
        r"forward.*exit|exits? forward|push\w*.*forward"
        r"|(?:explod|burst|driv|break|charg|sprint|bolt|race)\w*\s+(?:straight\s+)?(?:forward|ahead|upfield)",
        "forward",
    ),
    Rule(r"back.*exit|pull\w*.*back|exits? back", "back"),
    Rule(r"left.*exit|exits? (?:to the )?left", "left"),
    Rule(r"right.*exit|exits? (?:to the )?right", "right"),
]

EXIT_SPEED_RULES = [
    Rule(r"explosive.*exit|quick.*exit|fast.*out|explod\w*", "explosive"),
    Rule(r"slow.*exit", "slow"),
]

TECHNICAL_SCORE_RULES = [
    Rule(r"perfect.*technique|textbook|flawless", 20),
    Rule(r"strong.*technique|solid.*execution", 10),
    Rule(r"quick.*hands|fast.*clamp", 5),
    Rule(r"poor.*technique|sloppy|struggled", -15),
    Rule(r"\bslow\b|hesitant|\blate\b", -10),
]


@dataclass
class FaceoffInfo:
    team1_technique: Optional[str]
    team2_technique: Optional[str]
    clamp_speed: str
    clamp_angle: str
    counter_move: Optional[str]
    counter_timing: str
    exit_direction: Optional[str]
    exit_speed: str
    wing_support: bool
    wing_play_description: Optional[str]
    winner: Optional[str]
    possession_team: Optional[str]
    fast_break_opportunity: bool
    technical_score: int


def faceoff_type(content: str) -> str:
    return first_match(FACEOFF_TYPE_RULES, content, "standard_faceoff")


def faceoff_techniques(content: str) -> list[str]:
    """Techniques in the order they are mentioned."""
    positions = []
    for technique in FACEOFF_TECHNIQUES:
        match = re.search(technique, content, re.IGNORECASE)
        if match:
            positions.append((match.start(), technique))
    return [technique for _, technique in sorted(positions)]


def faceoff_winner(content: str) -> Optional[str]:
    match = re.search(
        rf"\b({_COLORS})\b[^.]{{0,40}}?\b(?:wins?|won|gains? possession|possession|comes? away)",
        content,
        re.IGNORECASE,
    )
    return match.group(1).lower() if match else None


def wing_play(content: str) -> Optional[str]:
    match = re.search(r"wing.{0,50}(support|help|play|position)", content, re.IGNORECASE)
    return match.group(0) if match else None


def technical_score(content: str) -> int:
    return score_adjustments(70, TECHNICAL_SCORE_RULES, content)


def extract_faceoff(content: str, winner: Optional[str] = None, possession: Optional[str] = None) -> FaceoffInfo:
    """Structured face-off details. ``winner``/``possession`` from the model take precedence."""
    techniques = faceoff_techniques(content)
    detected_winner = faceoff_winner(content)
    return FaceoffInfo(
        team1_technique=techniques[0] if techniques else None,
        team2_technique=techniques[1] if len(techniques) > 1 else None,
        clamp_speed=first_match(CLAMP_SPEED_RULES, content, "medium"),
        clamp_angle=first_match(CLAMP_ANGLE_RULES, content, "neutral"),
        counter_move=first_match(COUNTER_MOVE_RULES, content),
        counter_timing=first_match(COUNTER_TIMING_RULES, content, "on-time"),
        exit_direction=first_match(EXIT_DIRECTION_RULES, content),
        exit_speed=first_match(EXIT_SPEED_RULES, content, "controlled"),
        wing_support=any_match(r"wing.*support|wing.*help", content),
        wing_play_description=wing_play(content),
        winner=(winner or detected_winner),
        possession_team=(possession or winner or detected_winner),
        fast_break_opportunity=any_match(r"fast.*break|numbers|transition.*opportunity", content),
        technical_score=technical_score(content),
    )


# --- Transitions ---

TRANSITION_TYPE_RULES = [
    Rule(r"\bclear", "clear"),
    Rule(r"\brid(?:e|es|ing)\b", "ride"),
    Rule(r"unsettled|broken", "unsettled"),
]

ORIGINATING_EVENT_RULES = [
    Rule(r"after.*save|following.*save", "save"),
    Rule(r"turnover|caused", "turnover"),
    Rule(r"face.?off.*win|won.*draw", "faceoff_win"),
    Rule(r"ground.*ball", "ground_ball"),
]

CLEAR_FORMATION_RULES = [
    Rule(r"banana", "banana"),
    Rule(r"\bwide\b", "wide"),
    Rule(r"traditional|standard", "traditional"),
]

RIDE_FORMATION_RULES = [
    Rule(r"10.?man", "10-man"),
    Rule(r"\bzone\b", "zone"),
    Rule(r"adjacent", "adjacent"),
]

SUBSTITUTION_RULES = [
    Rule(r"hockey.*change|line.*change", "hockey_change"),
    Rule(r"middie.*back", "middie_back"),
    Rule(r"full.*change", "full_change"),
]

PRESSURE_RULES = [
    Rule(r"intense.*pressure|heavy.*pressure|high.*pressure", "high"),
    Rule(r"light.*pressure|low.*pressure|no.*pressure", "low"),
]

SPACING_RULES = [
    Rule(r"compressed|tight.*spacing|bunched", "compressed"),
    Rule(r"stretched|wide.*spacing|spread", "stretched"),
]

RESULTING_OPPORTUNITY_RULES = [
    Rule(r"fast.*break|numbers|odd.*man", "fast_break"),
    Rule(r"slow.*break|settled", "slow_break"),
    Rule(r"turnover|lost.*possession", "turnover"),
]

EXECUTION_QUALITY_RULES = [
    Rule(r"perfect.*execution|flawless|textbook", 20),
    Rule(r"quick.*ball.*movement|crisp.*passes", 10),
    Rule(r"good.*spacing|maintained.*structure", 10),
    Rule(r"sloppy|poor.*execution|struggled", -20),
    Rule(r"turnovers?|dropped.*pass", -15),
]


@dataclass
class TransitionInfo:
    transition_type: str
    originating_event: Optional[str]
    clearing_team: Optional[str]
    riding_team: Optional[str]
    clear_formation: Optional[str]
    ride_formation: Optional[str]
    pass_count: Optional[int]
    ground_balls: Optional[int]
    substitution_pattern: Optional[str]
    pressure_level: str
    field_spacing: str
    resulting_opportunity: str
    time_to_complete: Optional[float]
    execution_quality: int


def team_in_context(content: str, context: str) -> Optional[str]:
    """Team color mentioned within 20 characters after ``context``."""
    match = re.search(rf"{context}.{{0,20}}?\b({_COLORS})\b", content, re.IGNORECASE)
    return match.group(1).lower() if match else None


def execution_quality(content: str) -> int:
    return score_adjustments(70, EXECUTION_QUALITY_RULES, content)


def extract_transition(content: str) -> TransitionInfo:
    return TransitionInfo(
        transition_type=first_match(TRANSITION_TYPE_RULES, content, "transition"),
        originating_event=first_match(ORIGINATING_EVENT_RULES, content),
        clearing_team=team_in_context(content, "clear(?:ing|s|ed)?"),
        riding_team=team_in_context(content, "rid(?:ing|es|e)"),
        clear_formation=first_match(CLEAR_FORMATION_RULES, content),
        ride_formation=first_match(RIDE_FORMATION_RULES, content),
        pass_count=first_int(r"(\d+)\s*pass(?:es)?", content),
        ground_balls=first_int(r"(\d+)\s*ground\s*balls?", content),
        substitution_pattern=first_match(SUBSTITUTION_RULES, content),
        pressure_level=first_match(PRESSURE_RULES, content, "medium"),
        field_spacing=first_match(SPACING_RULES, content, "balanced"),
        resulting_opportunity=first_match(RESULTING_OPPORTUNITY_RULES, content, "settled"),
        time_to_complete=duration_seconds(content),
        execution_quality=execution_quality(content),
    )


# --- Shots ---

SHOT_TYPE_RULES = [
    Rule(r"behind.the.back|\bbtb\b", "behind_the_back"),
    Rule(r"underhand|low to high", "underhand"),
    Rule(r"sidearm|side.arm", "sidearm"),
]

SHOT_LOCATION_RULES = [
    Rule(r"top shelf|top corner|upper (?:left|right|corner)|high corner", "top_shelf"),
    Rule(r"low corner|bottom corner|low (?:left|right)", "low_corner"),
    Rule(r"five.hole|between the legs", "five_hole"),
    Rule(r"off.hip|hip", "off_hip"),
    Rule(r"bounce shot|bounced", "bounce"),
]

SHOT_DISTANCE_RULES = [
    Rule(r"crease|point.blank|close range|doorstep", "close"),
    Rule(r"outside|long range|from distance|\d{2}\s*yards?", "long"),
]

SHOT_ANGLE_RULES = [
    Rule(r"behind the cage|from x\b|wrap", "behind_cage"),
    Rule(r"left alley|left side|from the left", "left"),
    Rule(r"right alley|right side|from the right", "right"),
]

DODGE_TYPE_RULES = [
    Rule(r"roll dodge|\brolls?\b", "roll"),
    Rule(r"split dodge|\bsplits?\b", "split"),
    Rule(r"face dodge", "face"),
    Rule(r"bull dodge|bull rush|\bbulls?\b", "bull"),
    Rule(r"question mark", "question_mark"),
]

SHOT_VELOCITY_RULES = [
    Rule(r"rocket|laser|blast|cannon|hard shot|rips", "hard"),
    Rule(r"soft|floater|lob|change.of.pace", "soft"),
]

SHOT_RESULT_RULES = [
    Rule(r"off the (?:post|pipe)|hits? the (?:post|pipe|crossbar)", "post"),
    Rule(r"\bblocked\b", "blocked"),
    Rule(r"\bsav(?:e|es|ed)\b|\bstopped\b|\bdenied\b", "save"),
    Rule(r"\bmiss(?:es|ed)?\b|\bwide\b|\bhigh\b", "miss"),
    Rule(r"\bgoal\b|\bscor(?:es|ed)\b|back of the net|finish(?:es|ed)", "goal"),
]

SHOT_QUALITY_RULES = [
    Rule(r"perfect placement|picture perfect|pinpoint|top shelf|beautiful", 15),
    Rule(r"time and room|wide open|uncontested", 10),
    Rule(r"on the run|while running", 5),
    Rule(r"forced shot|low percentage|bad angle|rushed", -15),
    Rule(r"right at the goalie|into the goalie", -10),
]


@dataclass
class ShotInfo:
    shot_type: str
    shot_location: Optional[str]
    shot_distance: str
    shot_angle: str
    dodge_type: Optional[str]
    time_and_room: bool
    on_the_run: bool
    shot_velocity: str
    result: str
    shot_quality_score: int


def extract_shot(content: str, moment_type: str) -> ShotInfo:
    """Shot details for a goal or shot moment. Goals always resolve to result "goal"."""
    result = "goal" if moment_type == "goal" else first_match(SHOT_RESULT_RULES, content, "miss")
    quality = score_adjustments(70, SHOT_QUALITY_RULES, content)
    if result == "goal":
        quality = clamp(quality + 10)
    return ShotInfo(
        shot_type=first_match(SHOT_TYPE_RULES, content, "overhand"),
        shot_location=first_match(SHOT_LOCATION_RULES, content),
        shot_distance=first_match(SHOT_DISTANCE_RULES, content, "medium"),
        shot_angle=first_match(SHOT_ANGLE_RULES, content, "straight"),
        dodge_type=first_match(DODGE_TYPE_RULES, content),
        time_and_room=any_match(r"time and room|time & room", content),
        on_the_run=any_match(r"on the run|while running|on the move", content),
        shot_velocity=first_match(SHOT_VELOCITY_RULES, content, "medium"),
        result=result,
        shot_quality_score=quality,
    )


# --- Defensive plays ---

DEFENSIVE_ACTION_RULES = [
    Rule(r"double(?:s|d)? team|\bdouble\b", "double"),
    Rule(r"\bslides?\b|\bslid\b", "slide"),
    Rule(r"recover(?:s|ed|y)?", "recover"),
    Rule(r"check|poke|slap|lift|strip", "check"),
    Rule(r"intercept", "interception"),
]

DEFENSIVE_TECHNIQUE_RULES = [
    Rule(r"poke check|\bpoke", "poke"),
    Rule(r"slap check|\bslap", "slap"),
    Rule(r"wrap check|\bwrap", "wrap"),
    Rule(r"lift check|\blift", "lift"),
    Rule(r"body position|\bbody\b|hip check", "body"),
]

POSITIONING_RULES = [
    Rule(r"topside|top side", "topside"),
    Rule(r"trailing|beaten|from behind", "trailing"),
    Rule(r"\beven\b|square", "even"),
]

FOOTWORK_RULES = [
    Rule(r"reach(?:es|ing)?|lunges?", "reaching"),
    Rule(r"recovering|recovers", "recovering"),
    Rule(r"balanced|great feet|good feet|footwork", "balanced"),
]

DEFENSIVE_SCORE_RULES = [
    Rule(r"textbook|perfect timing|flawless|excellent", 20),
    Rule(r"well.timed|disciplined|strong", 10),
    Rule(r"reach(?:es|ing)|lunges?|out of position", -15),
    Rule(r"penalty|slashing|\bflag", -10),
]


@dataclass
class DefensiveInfo:
    action_type: str
    technique: Optional[str]
    positioning: Optional[str]
    footwork: Optional[str]
    successful: bool
    caused_turnover: bool
    drew_penalty: bool
    technique_score: int


def extract_defense(content: str) -> DefensiveInfo:
    caused = any_match(r"caused.*turnover|forced.*turnover|takeaway|strip", content)
    return DefensiveInfo(
        action_type=first_match(DEFENSIVE_ACTION_RULES, content, "check"),
        technique=first_match(DEFENSIVE_TECHNIQUE_RULES, content),
        positioning=first_match(POSITIONING_RULES, content),
        footwork=first_match(FOOTWORK_RULES, content),
        successful=caused or not any_match(r"beaten|got by|missed|whiff", content),
        caused_turnover=caused,
        drew_penalty=any_match(r"penalty|flag|slashing|tripping", content),
        technique_score=score_adjustments(70, DEFENSIVE_SCORE_RULES, content),
    )
