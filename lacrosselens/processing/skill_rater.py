"""Map qualitative scouting language to numeric skill scores and ratings."""
from dataclasses import dataclass, asdict, fields
from typing import Optional

from .rules import Rule, first_match, score_adjustments

DEFAULT_SKILL = 70
ELITE = 90
POSITIVE = 80
NEGATIVE = 60


def _tiers(elite: str, positive: str, negative: str) -> list[Rule]:
    # Checked elite -> positive -> negative; the first hit decides the score
    return [Rule(elite, ELITE), Rule(positive, POSITIVE), Rule(negative, NEGATIVE)]


SKILL_RULES = {
    "dodging": _tiers(
        r"exceptional dodging|elite dodg|unstoppable.*dodge",
        r"strong dodg|effective dodg|good dodg",
        r"developing dodg|needs work.*dodg",
    ),
    "shooting": _tiers(
        r"sniper|deadly accurate|exceptional shot",
        r"accurate shot|strong shot|reliable shooter",
        r"inconsistent shot|needs work.*shooting",
    ),
    "passing": _tiers(
        r"exceptional vision|elite passer|pinpoint pass",
        r"good passer|accurate passes|solid distribution",
        r"errant pass|needs work.*passing",
    ),
    "ground_balls": _tiers(
        r"ground ball machine|dominant.*ground balls|exceptional.*scoop",
        r"strong.*ground balls|reliable.*possession",
        r"struggles.*ground balls|needs work.*scooping",
    ),
    "defense": _tiers(
        r"lockdown defender|exceptional defense|shutdown",
        r"solid defender|good positioning|reliable defense",
        r"poor positioning|needs work.*defense",
    ),
    "off_ball": _tiers(
        r"exceptional off[- ]ball|always finds (?:the )?(?:open|soft) (?:space|spot)|elite cutter",
        r"good off[- ]ball|smart cuts?|relocates well|active off[- ]ball",
        r"static off[- ]ball|ball[- ]watch|needs work.*off[- ]ball",
    ),
    "iq": _tiers(
        r"exceptional.*iq|brilliant.*decision|chess master",
        r"smart player|good decisions|solid.*iq",
        r"poor decisions|needs.*awareness",
    ),
    "athleticism": _tiers(
        r"elite (?:speed|athlete)|freak athlete|exceptional athleticism",
        r"explosive|athletic|quick first step|good speed",
        r"lacks speed|slow footed|needs work.*conditioning|gets tired",
    ),
}

OVERALL_BUCKETS = [(85, 4.5), (75, 4.0), (65, 3.5), (55, 3.0)]
OVERALL_FLOOR = 2.5
MAX_RATING = 5.0

POTENTIAL_BUMPS = [
    Rule(r"young|freshman|sophomore|high ceiling|raw talent", 0.5),
    Rule(r"coachable|quick learner|improving rapidly", 0.3),
    Rule(r"athletic|explosive|physical tools", 0.2),
]

HANDEDNESS_RULES = [
    Rule(r"right.?handed|righty", "right"),
    Rule(r"left.?handed|lefty", "left"),
    Rule(r"ambidextrous|both hands|switches hands", "ambidextrous"),
]

HEIGHT_RULES = [
    Rule(r"\btall\b|lengthy|long.*pole|towers", "tall"),
    Rule(r"\bshort\b|compact|low.*center", "short"),
]

COACHABILITY_RULES = [
    Rule(r"coachable|receptive|quick learner|adjusts well", 20),
    Rule(r"stubborn|resistant|slow to adjust", -20),
    Rule(r"great attitude|positive|team first", 10),
]


@dataclass
class SkillRatings:
    """Eight skill scores on a 0-100 scale; 70 means no signal."""

    dodging: int = DEFAULT_SKILL
    shooting: int = DEFAULT_SKILL
    passing: int = DEFAULT_SKILL
    ground_balls: int = DEFAULT_SKILL
    defense: int = DEFAULT_SKILL
    off_ball: int = DEFAULT_SKILL
    iq: int = DEFAULT_SKILL
    athleticism: int = DEFAULT_SKILL

    def as_dict(self) -> dict[str, int]:
        return asdict(self)

    @property
    def average(self) -> float:
        values = [getattr(self, f.name) for f in fields(self)]
        return sum(values) / len(values)


def rate_skills(content: str) -> SkillRatings:
    """Score each skill from the phrases in ``content``.

    Never fails: missing signal leaves the 70 default in place, and all
    eight skills are always present.
    """
    text = content or ""
    return SkillRatings(
        **{
            skill: first_match(rules, text, DEFAULT_SKILL)
            for skill, rules in SKILL_RULES.items()
        }
    )


def overall_rating(skills: SkillRatings) -> float:
    """Bucket the mean skill score to the 2.5-4.5 star scale."""
    avg = skills.average
    for threshold, rating in OVERALL_BUCKETS:
        if avg >= threshold:
            return rating
    return OVERALL_FLOOR


def potential_rating(content: str, skills: SkillRatings) -> float:
    """Overall rating plus bumps for youth, coachability and physical tools."""
    potential = overall_rating(skills)
    for rule in POTENTIAL_BUMPS:
        if rule.matches(content or ""):
            potential += rule.value
    return round(min(MAX_RATING, potential), 1)


def detect_handedness(content: str) -> Optional[str]:
    return first_match(HANDEDNESS_RULES, content or "")


def estimate_height(content: str) -> str:
    return first_match(HEIGHT_RULES, content or "", "average")


def coachability_score(content: str) -> int:
    return score_adjustments(DEFAULT_SKILL, COACHABILITY_RULES, content or "")

