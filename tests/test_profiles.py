"""Tests for player profile aggregation."""
import pytest

from lacrosselens.database.models import PlayerProfile
from lacrosselens.processing.identifier import extract_player_info
from lacrosselens.processing.profiles import ProfileAggregator, average_skill
from lacrosselens.processing.skill_rater import rate_skills


class TestAverageSkill:
    """Tests for the merge rule."""

    def test_first_observation(self):
        assert average_skill(None, 80) == 80

    def test_average(self):
        assert average_skill(80, 60) == 70

    def test_half_rounds_up(self):
        assert average_skill(90, 61) == 76


class TestProfileAggregator:
    """Tests for ProfileAggregator.upsert against SQLite."""

    @pytest.fixture
    def aggregator(self):
        return ProfileAggregator()

    def observe(self, aggregator, db, video_id, content):
        profile_id = aggregator.upsert(
            db, video_id, extract_player_info(content), rate_skills(content), content
        )
        db.commit()
        return profile_id

    def test_first_observation_seeds_profile(self, aggregator, test_session, sample_video):
        self.observe(aggregator, test_session, sample_video.id, "#23 white lefty with an exceptional shot")

        profile = test_session.query(PlayerProfile).one()
        assert profile.player_identifier == "#23 white"
        assert profile.jersey_number == "23"
        assert profile.team_color == "white"
        assert profile.shooting_skill == 90
        assert profile.handedness == "left"
        assert profile.overall_rating == 3.5

    def test_second_observation_averages(self, aggregator, test_session, sample_video):
        first = self.observe(aggregator, test_session, sample_video.id, "#23 white has an exceptional shot")
        second = self.observe(aggregator, test_session, sample_video.id, "#23 white has an inconsistent shot")

        assert first == second
        profile = test_session.query(PlayerProfile).one()
        assert profile.shooting_skill == 75

    def test_one_row_per_player(self, aggregator, test_session, sample_video):
        for _ in range(4):
            self.observe(aggregator, test_session, sample_video.id, "#8 dark good passer")
        self.observe(aggregator, test_session, sample_video.id, "#9 dark good passer")

        assert test_session.query(PlayerProfile).count() == 2

    def test_seed_attributes_are_not_overwritten(self, aggregator, test_session, sample_video):
        self.observe(aggregator, test_session, sample_video.id, "#23 white lefty")
        self.observe(aggregator, test_session, sample_video.id, "#23 white righty, a coachable kid")

        profile = test_session.query(PlayerProfile).one()
        assert profile.handedness == "left"
        assert profile.coachability_score == 70

    def test_requires_identifier(self, aggregator, test_session, sample_video):
        with pytest.raises(ValueError):
            aggregator.upsert(
                test_session, sample_video.id, extract_player_info("nobody"), rate_skills(""), "nobody"
            )
