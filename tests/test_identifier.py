"""Tests for player identification."""
from lacrosselens.processing.identifier import (
    extract_identifiers,
    extract_player_info,
    format_identifier,
)


class TestExtractIdentifiers:
    """Tests for extract_identifiers."""

    def test_all_formats_in_first_seen_order(self):
        content = "#23 white dodges past dark #5 and feeds attackman #7"
        assert extract_identifiers(content) == ["#23 white", "#5 dark", "#7 attackman"]

    def test_deduplicates(self):
        content = "#23 White shoots, then White #23 scores"
        assert extract_identifiers(content) == ["#23 white"]

    def test_no_players(self):
        assert extract_identifiers("Good ball movement around the perimeter") == []
        assert extract_identifiers("") == []

    def test_format_identifier_lowercases(self):
        assert format_identifier("9", "NAVY") == "#9 navy"


class TestExtractPlayerInfo:
    """Tests for extract_player_info."""

    def test_number_and_color(self):
        info = extract_player_info("#23 White is a midfielder with an exceptional shot")
        assert info.identifier == "#23 white"
        assert info.jersey_number == "23"
        assert info.team_color == "white"
        assert info.position == "midfielder"

    def test_color_first(self):
        info = extract_player_info("Blue #12 wins every ground ball")
        assert info.identifier == "#12 blue"

    def test_hint_used_when_content_has_no_pairing(self):
        info = extract_player_info("Great effort on the ride", hint="#12 blue")
        assert info.identifier == "#12 blue"
        assert info.team_color == "blue"

    def test_position_fallback(self):
        info = extract_player_info("Goalie #1 makes three big stops")
        assert info.identifier == "#1 goalie"
        assert info.position == "goalie"
        assert info.team_color is None

    def test_unidentified_player(self):
        info = extract_player_info("Number #9 looked sharp")
        assert info.identifier is None
        assert info.jersey_number == "9"
