"""Tests for fuzzy search module."""
from lacrosselens.search.fuzzy import build_search_candidates, find_profile, fuzzy_search


# --- Helpers ---

def make_profile(id, identifier, number=None, color=None, position=None):
    return {
        "id": id,
        "player_identifier": identifier,
        "jersey_number": number,
        "team_color": color,
        "position": position,
    }


def make_candidates(*profiles):
    return build_search_candidates(profiles)


# --- build_search_candidates ---

class TestBuildSearchCandidates:
    def test_identifier_only(self):
        candidates = make_candidates(make_profile(1, "#7 goalie"))
        assert len(candidates) == 1
        assert candidates[0].name == "#7 goalie"
        assert candidates[0].profile_id == 1
        assert candidates[0].source == "identifier"

    def test_number_and_position_labels(self):
        candidates = make_candidates(
            make_profile(1, "#23 white", number="23", color="white", position="attackman")
        )
        names = [c.name for c in candidates]
        assert names == ["#23 white", "#23", "attackman #23"]
        assert [c.source for c in candidates] == ["identifier", "number", "position"]

    def test_color_label_when_identifier_uses_position(self):
        candidates = make_candidates(
            make_profile(2, "#4 lsm", number="4", color="dark", position="lsm")
        )
        names = [c.name for c in candidates]
        assert "dark #4" in names
        assert "lsm #4" not in names


# --- fuzzy_search ---

class TestFuzzySearch:
    def setup_method(self):
        self.candidates = make_candidates(
            make_profile(1, "#23 white", number="23", color="white", position="attackman"),
            make_profile(2, "#7 dark", number="7", color="dark", position="midfielder"),
        )

    def test_exact_identifier(self):
        results = fuzzy_search("#23 white", self.candidates)
        assert results[0].profile_id == 1
        assert results[0].similarity_score == 100.0

    def test_number_only(self):
        results = fuzzy_search("23", self.candidates)
        assert [r.profile_id for r in results] == [1]

    def test_case_insensitive(self):
        results = fuzzy_search("#7 DARK", self.candidates)
        assert results[0].player_identifier == "#7 dark"

    def test_one_result_per_profile(self):
        results = fuzzy_search("#23", self.candidates, threshold=0)
        ids = [r.profile_id for r in results]
        assert len(ids) == len(set(ids))

    def test_sorted_by_score(self):
        results = fuzzy_search("#23 white", self.candidates, threshold=0)
        scores = [r.similarity_score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_threshold_filters(self):
        assert fuzzy_search("zzzz", self.candidates) == []

    def test_limit(self):
        results = fuzzy_search("#", self.candidates, limit=1, threshold=0)
        assert len(results) == 1

    def test_empty_candidates(self):
        assert fuzzy_search("#23", []) == []


class TestFindProfile:
    def test_best_match(self):
        candidates = make_candidates(make_profile(1, "#23 white", number="23", color="white"))
        match = find_profile("white 23", candidates)
        assert match is not None
        assert match.profile_id == 1

    def test_no_match(self):
        candidates = make_candidates(make_profile(1, "#23 white", number="23", color="white"))
        assert find_profile("qqqq", candidates) is None
