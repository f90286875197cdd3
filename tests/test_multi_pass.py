"""Tests for the four-pass analyzer."""
import pytest
from unittest.mock import Mock, patch

from lacrosselens.processing.llm_analyzer import AnalyzerError
from lacrosselens.processing.multi_pass import (
    MultiPassAnalyzer,
    MultiPassError,
    MultiPassResult,
    StatisticalEvent,
    TacticalInsight,
    TechnicalBreakdown,
    VideoSegment,
    to_lacrosse_analysis,
)
from lacrosselens.processing.registry import create_default_registry
from lacrosselens.processing.sources import AnalysisSource


def segment(start, importance="medium", play_type="settled_offense"):
    return {
        "startTime": start,
        "endTime": start + 20,
        "description": f"Possession at {start}",
        "players": ["#23 white"],
        "playType": play_type,
        "importance": importance,
    }


SEGMENTS = [segment(40, "high"), segment(0, "high", "face_off"), segment(20)]

PASS_OUTPUT = {
    "record_segments": {"segments": SEGMENTS},
    "record_technical_breakdowns": {
        "breakdowns": [
            {
                "timestamp": 42,
                "playerNumber": "#23 white",
                "skillArea": "dodging",
                "biomechanics": "Strong dodger who drops the hips.",
                "decisionMaking": "Reads the slide early.",
                "improvement": "Protect the stick on the roll.",
                "confidence": 88,
            }
        ]
    },
    "record_tactical_insights": {
        "insights": [
            {
                "timestamp": 40,
                "situation": "Settled offense",
                "formation": "2-2-2",
                "execution": "Good spacing and quick ball movement.",
                "coaching": "Keep the crease clear.",
                "confidence": 80,
            }
        ]
    },
    "record_statistics": {
        "statistics": [
            {"timestamp": 0, "playType": "face-off", "playerInvolved": "#2 white", "outcome": "White wins the clamp"},
            {"timestamp": 10, "playType": "clear", "playerInvolved": "#40 dark", "outcome": "Clear successful"},
            {"timestamp": 55, "playType": "goal", "playerInvolved": "#23 white", "outcome": "Scores low corner"},
            {"timestamp": 60, "playType": "timeout", "playerInvolved": "", "outcome": "Timeout called"},
        ]
    },
}


@pytest.fixture
def caller():
    caller = Mock()
    caller.call.side_effect = lambda tool, content, *args, **kwargs: PASS_OUTPUT[tool["name"]]
    return caller


@pytest.fixture
def analyzer(caller):
    return MultiPassAnalyzer(caller=caller, registry=create_default_registry(), max_detail_segments=1)


@pytest.fixture
def source():
    return AnalysisSource(title="Scrimmage", youtube_url="https://youtu.be/dQw4w9WgXcQ")


class TestMultiPassAnalyzer:
    """Tests for MultiPassAnalyzer."""

    def test_runs_four_passes_in_order(self, analyzer, caller, source):
        result = analyzer.run(source)

        names = [call.args[0]["name"] for call in caller.call.call_args_list]
        assert names == [
            "record_segments",
            "record_technical_breakdowns",
            "record_tactical_insights",
            "record_statistics",
        ]
        assert [s.start_time for s in result.segments] == [0, 20, 40]
        assert len(result.statistics) == 4

    def test_technical_pass_limited_to_high_segments(self, analyzer, caller, source):
        analyzer.run(source)

        prompt = caller.call.call_args_list[1].args[1][-1]["text"]
        assert "Possession at 0" in prompt
        assert "Possession at 40" not in prompt
        assert "Possession at 20" not in prompt

    def test_technical_pass_skipped_without_high_segments(self, caller, source):
        outputs = dict(PASS_OUTPUT, record_segments={"segments": [segment(0), segment(20)]})
        caller.call.side_effect = lambda tool, content, *args, **kwargs: outputs[tool["name"]]

        result = MultiPassAnalyzer(caller=caller, registry=create_default_registry()).run(source)

        assert result.breakdowns == []
        assert caller.call.call_count == 3

    def test_no_segments_fails(self, caller, analyzer, source):
        caller.call.side_effect = lambda tool, content, *args, **kwargs: {"segments": []}
        with pytest.raises(MultiPassError, match="no segments"):
            analyzer.run(source)

    def test_pass_failure_wrapped(self, caller, analyzer, source):
        caller.call.side_effect = AnalyzerError("rate limited")
        with pytest.raises(MultiPassError, match="rate limited"):
            analyzer.run(source)

    def test_invalid_phase_output_wrapped(self, caller, analyzer, source):
        caller.call.side_effect = lambda tool, content, *args, **kwargs: {"segments": [{"startTime": 0}]}
        with pytest.raises(MultiPassError):
            analyzer.run(source)

    def test_analyze_merges_passes(self, analyzer, source):
        analysis = analyzer.analyze(source)

        assert "2-2-2" in analysis.overall_analysis
        assert analysis.player_evaluations[0].player_number == "#23 white"
        assert len(analysis.face_off_analysis) == 1
        assert analysis.transition_analysis[0].transition_type == "clear"
        assert [moment.type for moment in analysis.key_moments] == ["goal"]

    def test_negative_timestamp_fails_inside_the_pass(self, caller, analyzer, source):
        breakdown = dict(PASS_OUTPUT["record_technical_breakdowns"]["breakdowns"][0], timestamp=-3)
        outputs = dict(PASS_OUTPUT, record_technical_breakdowns={"breakdowns": [breakdown]})
        caller.call.side_effect = lambda tool, content, *args, **kwargs: outputs[tool["name"]]

        with pytest.raises(MultiPassError):
            analyzer.analyze(source)

    def test_merge_failure_wrapped(self, analyzer, source):
        with patch(
            "lacrosselens.processing.multi_pass.to_lacrosse_analysis",
            side_effect=ValueError("bad merge"),
        ):
            with pytest.raises(MultiPassError, match="bad merge"):
                analyzer.analyze(source)


class TestToLacrosseAnalysis:
    """Tests for merging pass output."""

    def test_high_segments_fill_in_missing_insights(self):
        result = MultiPassResult(
            segments=[
                VideoSegment.model_validate(segment(65, "high")),
                VideoSegment.model_validate(segment(90)),
            ]
        )
        analysis = to_lacrosse_analysis(result)
        assert analysis.overall_analysis == "[1:05] Possession at 65"

    def test_breakdown_text(self):
        result = MultiPassResult(
            segments=[],
            breakdowns=[
                TechnicalBreakdown(
                    skill_area="shooting",
                    biomechanics="Exceptional shot mechanics.",
                    decision_making="Shoots on time.",
                    improvement="",
                )
            ],
        )
        evaluation = to_lacrosse_analysis(result).player_evaluations[0]
        assert evaluation.evaluation == "Player shooting: Exceptional shot mechanics. Shoots on time."

    def test_unknown_statistics_dropped(self):
        result = MultiPassResult(
            segments=[],
            insights=[TacticalInsight(situation="Ride", formation="10-man", execution="Aggressive")],
            statistics=[StatisticalEvent(play_type="timeout", outcome="Timeout")],
        )
        analysis = to_lacrosse_analysis(result)
        assert analysis.key_moments == []
        assert analysis.item_count == 1
