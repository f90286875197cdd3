"""Ordered regex rule tables.

Every text heuristic in the enrichment pipeline is expressed as a list of
``Rule`` objects evaluated in order, so individual rules can be unit tested
and tables can be extended without touching control flow.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


@dataclass(frozen=True)
class Rule:
    """A case-insensitive pattern that yields ``value`` when it matches."""

    pattern: str
    value: Any
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


def compile_pattern(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def first_match(rules: Iterable[Rule], text: str, default: Any = None) -> Any:
    """Return the value of the first rule that matches ``text``.

    Args:
        rules: Rules in priority order
        text: Text to scan
        default: Value returned when no rule matches

    Returns:
        The matching rule's value, or ``default``
    """
    for rule in rules:
        if rule.matches(text):
            return rule.value
    return default


def all_matches(rules: Iterable[Rule], text: str) -> list[Any]:
    """Return the values of every matching rule, in table order."""
    return [rule.value for rule in rules if rule.matches(text)]


def any_match(pattern: str, text: str) -> bool:
    return re.search(pattern, text, re.IGNORECASE) is not None


def count_matches(pattern: str, text: str) -> int:
    return len(re.findall(pattern, text, re.IGNORECASE))


def first_int(pattern: str, text: str) -> Optional[int]:
    """Return the first captured group of ``pattern`` as an int."""
    match = re.search(pattern, text, re.IGNORECASE)
    return int(match.group(1)) if match else None


def first_float(pattern: str, text: str) -> Optional[float]:
    match = re.search(pattern, text, re.IGNORECASE)
    return float(match.group(1)) if match else None


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def score_adjustments(base: int, rules: Iterable[Rule], text: str) -> int:
    """Add the value of every matching rule to ``base`` and clamp to 0..100."""
    return clamp(base + sum(all_matches(rules, text)))
