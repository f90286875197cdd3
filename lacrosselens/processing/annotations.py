"""Cosmetic fields derived for an analysis row: title, subtype, tags, metadata."""
import re
from typing import Optional

from .identifier import extract_player_info
from .play_details import (
    duration_seconds,
    faceoff_techniques,
    field_side,
    field_zone,
    key_moment_type,
    players_involved,
)
from .rules import Rule, first_match

TAG_TECHNIQUE_PATTERN = re.compile(
    r"\b(clamp|rake|plunger|jump|dodge|roll|split|face|bull|banana|slide|double|triple)\b",
    re.IGNORECASE,
)

EVALUATION_SUBTYPE_RULES = [
    Rule(r"attackman|attack", "attack_evaluation"),
    Rule(r"midfielder|middie", "midfield_evaluation"),
    Rule(r"defenseman|defense|pole", "defense_evaluation"),
    Rule(r"goalie|keeper", "goalie_evaluation"),
    Rule(r"fogo|face.?off", "fogo_evaluation"),
]


def format_timestamp(seconds: int) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def determine_subtype(analysis_type: str, content: str) -> Optional[str]:
    if analysis_type == "player_evaluation":
        return first_match(EVALUATION_SUBTYPE_RULES, content)
    return None


def generate_title(
    analysis_type: str,
    content: str,
    metadata: dict,
    timestamp: Optional[int] = None,
) -> str:
    """Build a display title such as ``[1:05] Player Evaluation: #23 white``."""
    prefix = f"[{format_timestamp(timestamp)}] " if timestamp else ""

    if analysis_type == "player_evaluation":
        player = extract_player_info(content, metadata.get("playerNumber"))
        label = player.identifier or metadata.get("playerNumber") or "Unknown"
        return f"{prefix}Player Evaluation: {label}"
    if analysis_type == "face_off":
        techniques = faceoff_techniques(content)
        technique = metadata.get("technique") or (techniques[0] if techniques else "Analysis")
        return f"{prefix}Face-off: {technique}"
    if analysis_type == "transition":
        return f"{prefix}Transition: {metadata.get('transitionType') or 'Clear/Ride'}"
    if analysis_type == "key_moment":
        return f"{prefix}Key Moment: {key_moment_type(content)}"
    if analysis_type == "overall":
        return "Game Overview"
    return f"{prefix}{analysis_type}"


def generate_tags(analysis_type: str, content: str, metadata: dict) -> list[str]:
    """Searchable tags in first-seen order, without duplicates."""
    tags = [analysis_type]
    tags.extend(match.lower() for match in TAG_TECHNIQUE_PATTERN.findall(content))

    if metadata.get("outcome"):
        tags.append(str(metadata["outcome"]))
    if metadata.get("successful"):
        tags.append("successful")

    if re.search(r"man.?up", content, re.IGNORECASE):
        tags.append("man-up")
    if re.search(r"man.?down", content, re.IGNORECASE):
        tags.append("man-down")
    if re.search(r"fast.?break", content, re.IGNORECASE):
        tags.append("fast-break")

    return list(dict.fromkeys(tags))


def enhance_metadata(analysis_type: str, metadata: dict, content: str) -> dict:
    enhanced = dict(metadata)
    enhanced["subtype"] = determine_subtype(analysis_type, content)
    if analysis_type == "transition":
        enhanced["duration"] = duration_seconds(content)
    enhanced["fieldLocation"] = {"zone": field_zone(content), "side": field_side(content)}
    enhanced["playersInvolved"] = players_involved(content)
    return enhanced
