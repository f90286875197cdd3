"""Fuzzy search module for finding player profiles within a video."""
from dataclasses import dataclass
from typing import Optional

from rapidfuzz import fuzz


@dataclass
class SearchCandidate:
    """A single searchable label for a profile."""

    name: str
    profile_id: int
    player_identifier: str
    source: str  # "identifier", "number", "color" or "position"


@dataclass
class FuzzyMatch:
    """A fuzzy search result."""

    profile_id: int
    player_identifier: str
    similarity_score: float
    matched_on: str
    source: str


def build_search_candidates(profiles):
    """Build a flat list of searchable labels.

    Args:
        profiles: List of dicts with keys: id, player_identifier, and
            optionally jersey_number, team_color, position
    """
    candidates = []

    for profile in profiles:
        profile_id = profile["id"]
        identifier = profile["player_identifier"]

        candidates.append(
            SearchCandidate(
                name=identifier,
                profile_id=profile_id,
                player_identifier=identifier,
                source="identifier",
            )
        )

        number = profile.get("jersey_number")
        if number:
            candidates.append(
                SearchCandidate(
                    name=f"#{number}",
                    profile_id=profile_id,
                    player_identifier=identifier,
                    source="number",
                )
            )

        for source in ("team_color", "position"):
            value = profile.get(source)
            if value and value.lower() not in identifier.lower():
                candidates.append(
                    SearchCandidate(
                        name=f"{value} #{number}" if number else value,
                        profile_id=profile_id,
                        player_identifier=identifier,
                        source=source.replace("team_", ""),
                    )
                )

    return candidates


def fuzzy_search(query, candidates, limit=10, threshold=60):
    """Score each candidate against query using multiple fuzzy strategies.

    Returns results deduplicated by profile, sorted by score descending.

    Args:
        query: Search string such as "23", "#23 white" or "white 23"
        candidates: List of SearchCandidate
        limit: Max results to return
        threshold: Minimum score to include (0-100)
    """
    query_lower = query.lower().strip()
    best_by_id: dict[int, tuple[FuzzyMatch, float]] = {}

    for candidate in candidates:
        name_lower = candidate.name.lower()

        direct_ratio = fuzz.ratio(query_lower, name_lower)
        score = max(
            direct_ratio,
            fuzz.partial_ratio(query_lower, name_lower),
            fuzz.token_set_ratio(query_lower, name_lower),
        )
        if score < threshold:
            continue

        match = FuzzyMatch(
            profile_id=candidate.profile_id,
            player_identifier=candidate.player_identifier,
            similarity_score=round(score, 1),
            matched_on=candidate.name,
            source=candidate.source,
        )

        # Keep highest score per profile; on tie prefer the closer direct match
        existing = best_by_id.get(candidate.profile_id)
        if (
            existing is None
            or match.similarity_score > existing[0].similarity_score
            or (match.similarity_score == existing[0].similarity_score and direct_ratio > existing[1])
        ):
            best_by_id[candidate.profile_id] = (match, direct_ratio)

    ranked = sorted(best_by_id.values(), key=lambda item: (-item[0].similarity_score, -item[1]))
    return [match for match, _ in ranked[:limit]]


def find_profile(query: str, candidates, threshold=60) -> Optional[FuzzyMatch]:
    results = fuzzy_search(query, candidates, limit=1, threshold=threshold)
    return results[0] if results else None
