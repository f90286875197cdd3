"""Jersey number, team color and position extraction."""
import re
from dataclasses import dataclass
from typing import Optional

TEAM_COLORS = [
    "white",
    "dark",
    "blue",
    "red",
    "green",
    "yellow",
    "orange",
    "black",
    "navy",
    "maroon",
]

POSITIONS = ["attackman", "midfielder", "defenseman", "goalie", "fogo", "lsm"]

_COLORS = "|".join(TEAM_COLORS)
_POSITIONS = "|".join(POSITIONS)

# (pattern, number group, descriptor group)
IDENTIFIER_PATTERNS = [
    (re.compile(rf"#(\d{{1,2}})\s+({_COLORS})\b", re.IGNORECASE), 1, 2),
    (re.compile(rf"\b({_COLORS})\s+#(\d{{1,2}})\b", re.IGNORECASE), 2, 1),
    (re.compile(rf"\b({_POSITIONS})\s+#(\d{{1,2}})\b", re.IGNORECASE), 2, 1),
    (re.compile(rf"#(\d{{1,2}})\s+({_POSITIONS})\b", re.IGNORECASE), 1, 2),
]

JERSEY_PATTERN = re.compile(r"#(\d{1,2})\b")
TEAM_COLOR_PATTERN = re.compile(rf"\b({_COLORS})\b", re.IGNORECASE)
POSITION_PATTERN = re.compile(rf"\b({_POSITIONS})\b", re.IGNORECASE)


@dataclass
class PlayerInfo:
    """Who an evaluation is about. ``identifier`` keys the player's profile."""

    identifier: Optional[str]
    jersey_number: Optional[str]
    team_color: Optional[str]
    position: Optional[str]


def format_identifier(number: str, descriptor: str) -> str:
    return f"#{number} {descriptor.lower()}"


def extract_identifiers(content: str) -> list[str]:
    """Find every "#<number> <color-or-position>" mention in ``content``.

    Results are deduplicated and keep first-seen order. An empty list is the
    normal result for text about unidentified players.
    """
    if not content:
        return []

    found: dict[str, int] = {}
    for pattern, number_group, descriptor_group in IDENTIFIER_PATTERNS:
        for match in pattern.finditer(content):
            identifier = format_identifier(
                match.group(number_group), match.group(descriptor_group)
            )
            position = match.start()
            if identifier not in found or position < found[identifier]:
                found[identifier] = position

    return sorted(found, key=found.get)


def extract_jersey_number(content: str) -> Optional[str]:
    match = JERSEY_PATTERN.search(content or "")
    return match.group(1) if match else None


def extract_team_color(content: str) -> Optional[str]:
    match = TEAM_COLOR_PATTERN.search(content or "")
    return match.group(1).lower() if match else None


def extract_position(content: str) -> Optional[str]:
    match = POSITION_PATTERN.search(content or "")
    return match.group(1).lower() if match else None


def extract_player_info(content: str, hint: Optional[str] = None) -> PlayerInfo:
    """Identify the player an evaluation describes.

    The first number/color pairing in the content wins. When the content
    only names the player by position, the number/position pairing is used
    instead. ``hint`` (the model's ``playerNumber`` field) is consulted when
    the content itself has no usable pairing.

    Args:
        content: Evaluation text
        hint: Optional player label supplied alongside the text

    Returns:
        PlayerInfo with ``identifier`` None when no player could be keyed
    """
    for text in (content or "", hint or ""):
        for pattern, number_group, descriptor_group in IDENTIFIER_PATTERNS[:2]:
            match = pattern.search(text)
            if match:
                number = match.group(number_group)
                color = match.group(descriptor_group).lower()
                return PlayerInfo(
                    identifier=format_identifier(number, color),
                    jersey_number=number,
                    team_color=color,
                    position=extract_position(content) or extract_position(hint or ""),
                )

    for text in (content or "", hint or ""):
        for pattern, number_group, descriptor_group in IDENTIFIER_PATTERNS[2:]:
            match = pattern.search(text)
            if match:
                number = match.group(number_group)
                position = match.group(descriptor_group).lower()
                return PlayerInfo(
                    identifier=format_identifier(number, position),
                    jersey_number=number,
                    team_color=extract_team_color(content),
                    position=position,
                )

    return PlayerInfo(
        identifier=None,
        jersey_number=extract_jersey_number(content) or extract_jersey_number(hint or ""),
        team_color=extract_team_color(content),
        position=extract_position(content),
    )
