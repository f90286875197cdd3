"""Multi-label play classifier for free-text analysis content."""
from dataclasses import dataclass
from typing import Optional

from .rules import Rule, any_match, count_matches


@dataclass(frozen=True)
class PlayTag:
    """A play detected in a block of text."""

    type: str
    success: bool = True


@dataclass(frozen=True)
class PlayCategory:
    """Detection rule for one play type plus the phrases that mark it unsuccessful."""

    detect: Rule
    failure: Optional[str] = None

    @property
    def name(self) -> str:
        return self.detect.value


GOAL = "goal"
ASSIST = "assist"
HOCKEY_ASSIST = "hockey_assist"
SAVE = "save"
SHOT = "shot"
TURNOVER = "turnover"
CAUSED_TURNOVER = "caused_turnover"
GROUND_BALL = "ground_ball"
CHECK = "check"
PENALTY = "penalty"
CLEAR = "clear"
BALL_TOUCH = "ball_touch"
FACE_OFF = "face_off"
TRANSITION = "transition"

CATEGORIES = [
    PlayCategory(
        Rule(r"\bgoals?\b|\bscor(?:es|ed)\b|\bfinish(?:es|ed)\b|back of the net|\bburies\b", GOAL),
    ),
    PlayCategory(
        Rule(
            r"(?<!hockey )(?<!secondary )\bassist(?:s|ed)?\b|\bfeeds?\b|\bdish(?:es|ed)?\b",
            ASSIST,
        ),
    ),
    PlayCategory(
        Rule(r"hockey assist|secondary assist|pass to (?:the )?assist", HOCKEY_ASSIST),
    ),
    PlayCategory(
        Rule(r"\bsav(?:e|es|ed)\b|\bstops? the shot\b|\bstopped\b|\bdenie[sd]\b", SAVE),
    ),
    PlayCategory(
        Rule(r"\bshots?\b|\bshoot(?:s|ing)?\b|\brip(?:s|ped)?\b|\bfire[sd]?\b", SHOT),
        failure=r"\bmiss(?:es|ed)?\b|\bwide\b|\bsav(?:e|es|ed)\b|\bblocked\b|off the (?:post|pipe)",
    ),
    PlayCategory(
        Rule(
            r"(?<!caused )(?<!forced )(?<!caused a )(?<!forced a )\bturnovers?\b"
            r"|lost possession|\bstripped\b|\bdrops? the ball\b",
            TURNOVER,
        ),
    ),
    PlayCategory(
        Rule(
            r"(?:caused|forced|forces|causes) (?:a )?turnover|\btakeaways?\b|\bintercept(?:s|ed|ion)\b",
            CAUSED_TURNOVER,
        ),
    ),
    PlayCategory(
        Rule(r"ground ?balls?|\bscoop(?:s|ed)?\b|loose ball|\bgbs?\b", GROUND_BALL),
    ),
    PlayCategory(
        Rule(r"\bcheck(?:s|ed)?\b|\bpoke\b|\bslap\b|\blift checks?\b", CHECK),
        failure=r"\bwhiff(?:s|ed)?\b|missed check|\bbeaten\b|\bgot by\b",
    ),
    PlayCategory(
        Rule(
            r"\bpenalt(?:y|ies)\b|\bflag(?:ged)?\b|\bslashing\b|\btripping\b|\boffsides?\b"
            r"|\bunsportsmanlike\b|illegal procedure",
            PENALTY,
        ),
    ),
    PlayCategory(
        Rule(
            r"\bclear(?:s|ed|ing)?\b(?! (?:look|shot|lane|path|view|sight|advantage))|\boutlet\b"
            r"|moved (?:the )?ball out",
            CLEAR,
        ),
        failure=r"failed clear|\bturnovers?\b",
    ),
    PlayCategory(
        Rule(r"face[- ]?offs?\b|\bfogo\b|\bclamp(?:s|ed)?\b|\bthe draw\b", FACE_OFF),
        failure=r"\blos(?:es|t)\b|\bviolation\b",
    ),
    PlayCategory(
        Rule(r"\btransition\b|fast ?break|\bunsettled\b|\bodd[- ]man\b|\brid(?:e|es|ing)\b", TRANSITION),
        failure=r"\bfailed\b|broke down|\bturnovers?\b",
    ),
]

# Possession verbs; each occurrence is one touch
BALL_TOUCH_PATTERN = (
    r"\b(?:catch(?:es)?|caught|cradl(?:es|ed|ing)|receiv(?:es|ed)|picks? up|picked up"
    r"|carr(?:y|ies|ied)|gather(?:s|ed)?|scoop(?:s|ed)?)\b"
)

CATEGORY_NAMES = [category.name for category in CATEGORIES] + [BALL_TOUCH]


def classify(content: str) -> list[PlayTag]:
    """Detect every play type mentioned in ``content``.

    Categories are independent, so one sentence can yield several tags.
    Ball touches are counted per occurrence rather than per category.

    Args:
        content: Free-text analysis content

    Returns:
        Detected plays in category order; empty when nothing matches
    """
    if not content:
        return []

    text = content.lower()
    tags = []

    for category in CATEGORIES:
        if not category.detect.matches(text):
            continue
        success = not (category.failure and any_match(category.failure, text))
        tags.append(PlayTag(type=category.name, success=success))

    touches = count_matches(BALL_TOUCH_PATTERN, text)
    tags.extend(PlayTag(type=BALL_TOUCH) for _ in range(touches))

    return tags
