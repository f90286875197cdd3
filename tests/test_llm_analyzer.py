"""Tests for the Claude-backed analyzers."""
import pytest
from unittest.mock import Mock

from lacrosselens.processing.llm_analyzer import (
    RECORD_ANALYSIS_TOOL,
    AnalyzerError,
    ClaudeToolCaller,
    LacrosseAnalyzer,
)
from lacrosselens.processing.records import LacrosseAnalysis, records_from_analysis
from lacrosselens.processing.registry import AnalysisModule, AnalysisModuleRegistry, create_default_registry
from lacrosselens.processing.sources import AnalysisSource, CoachHints, VideoFrame


def tool_response(payload, name="record_lacrosse_analysis"):
    block = Mock()
    block.type = "tool_use"
    block.name = name
    block.input = payload
    response = Mock()
    response.content = [block]
    return response


ANALYSIS = {
    "overallAnalysis": "White runs a 2-2-2 with good spacing.",
    "playerEvaluations": [
        {"evaluation": "#23 white has an exceptional shot", "timestamp": 30.4, "confidence": 0.9, "playerNumber": "#23 white"}
    ],
    "faceOffAnalysis": [
        {"analysis": "White wins the clamp", "timestamp": 0, "confidence": 80, "outcome": "win", "technique": "clamp"}
    ],
    "transitionAnalysis": [],
    "keyMoments": [{"description": "#23 white scores", "timestamp": 95, "confidence": 90, "type": "goal"}],
}


class TestClaudeToolCaller:
    """Tests for ClaudeToolCaller."""

    def test_requires_api_key_without_client(self, monkeypatch):
        monkeypatch.setattr(
            "lacrosselens.processing.llm_analyzer.get_settings",
            lambda: Mock(anthropic_api_key="", claude_model="m", claude_max_tokens=100),
        )
        with pytest.raises(AnalyzerError, match="API key"):
            ClaudeToolCaller()

    def test_forces_the_tool(self):
        client = Mock()
        client.messages.create.return_value = tool_response({"ok": True})
        caller = ClaudeToolCaller(api_key="k", model="claude-test", max_tokens=100, client=client)

        result = caller.call(RECORD_ANALYSIS_TOOL, [{"type": "text", "text": "hi"}])

        assert result == {"ok": True}
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["tool_choice"] == {"type": "tool", "name": "record_lacrosse_analysis"}
        assert kwargs["tools"] == [RECORD_ANALYSIS_TOOL]

    def test_api_error_wrapped(self):
        client = Mock()
        client.messages.create.side_effect = RuntimeError("overloaded")
        caller = ClaudeToolCaller(api_key="k", client=client)

        with pytest.raises(AnalyzerError, match="overloaded"):
            caller.call(RECORD_ANALYSIS_TOOL, [])

    def test_missing_tool_use(self):
        text_block = Mock()
        text_block.type = "text"
        client = Mock()
        client.messages.create.return_value = Mock(content=[text_block])
        caller = ClaudeToolCaller(api_key="k", client=client)

        with pytest.raises(AnalyzerError, match="No record_lacrosse_analysis"):
            caller.call(RECORD_ANALYSIS_TOOL, [])


class TestLacrosseAnalyzer:
    """Tests for LacrosseAnalyzer."""

    @pytest.fixture
    def caller(self):
        return Mock()

    @pytest.fixture
    def analyzer(self, caller):
        return LacrosseAnalyzer(caller=caller, registry=create_default_registry())

    def test_analyze_validates_response(self, analyzer, caller):
        caller.call.return_value = ANALYSIS

        analysis = analyzer.analyze(AnalysisSource(title="Scrimmage", youtube_url="https://youtu.be/dQw4w9WgXcQ"))

        assert analysis.item_count == 4
        assert analysis.player_evaluations[0].confidence == 90
        assert analysis.key_moments[0].type == "goal"

    def test_empty_analysis_rejected(self, analyzer, caller):
        caller.call.return_value = {
            "overallAnalysis": "  ",
            "playerEvaluations": [],
            "faceOffAnalysis": [],
            "transitionAnalysis": [],
            "keyMoments": [],
        }
        with pytest.raises(AnalyzerError, match="empty"):
            analyzer.analyze(AnalysisSource(title="Scrimmage"))

    def test_schema_mismatch(self, analyzer, caller):
        caller.call.return_value = {"playerEvaluations": [{"timestamp": 3}]}
        with pytest.raises(AnalyzerError, match="schema"):
            analyzer.analyze(AnalysisSource(title="Scrimmage"))

    def test_prompt_includes_hints_and_focus(self, analyzer):
        source = AnalysisSource(
            title="Scrimmage",
            hints=CoachHints(player_number="23", position="attack"),
            youtube_url="https://youtu.be/dQw4w9WgXcQ",
        )
        prompt = analyzer.build_prompt(source)
        assert "Scrimmage" in prompt
        assert "23" in prompt
        assert "FACE-OFFS" in prompt


class TestRecordsFromAnalysis:
    """Tests for flattening a response into stored records."""

    def test_order_and_rounding(self):
        records = records_from_analysis(LacrosseAnalysis.model_validate(ANALYSIS))

        assert [record.type for record in records] == ["overall", "player_evaluation", "face_off", "key_moment"]
        assert records[0].confidence == 95
        assert records[1].timestamp == 30
        assert records[1].metadata() == {"playerNumber": "#23 white"}
        assert records[2].outcome == "win"
        assert records[2].technique == "clamp"


class TestSources:
    """Tests for the content sent to the model."""

    def test_frames_become_image_blocks(self):
        source = AnalysisSource(title="Practice", frames=[VideoFrame(timestamp=75.0, jpeg=b"\xff\xd8")])
        blocks = source.content_blocks("prompt")

        assert blocks[0] == {"type": "text", "text": "Frame at 1:15"}
        assert blocks[1]["type"] == "image"
        assert blocks[1]["source"]["media_type"] == "image/jpeg"
        assert blocks[-1] == {"type": "text", "text": "prompt"}

    def test_youtube_material_without_captions(self):
        source = AnalysisSource(title="Game", youtube_url="https://youtu.be/dQw4w9WgXcQ")
        assert "https://youtu.be/dQw4w9WgXcQ" in source.material_text()
        assert "Captions" not in source.material_text()


class TestRegistry:
    """Tests for the analysis module registry."""

    def test_default_registry_enables_selected(self):
        registry = create_default_registry(["faceoff"])
        assert [module.name for module in registry.enabled()] == ["faceoff"]
        assert len(registry.all()) == 5

    def test_focus_follows_registration_order(self):
        registry = AnalysisModuleRegistry()
        registry.register(AnalysisModule(name="a", description="", focus="FIRST"))
        registry.register(AnalysisModule(name="b", description="", focus="SECOND"))
        focus = registry.build_focus()
        assert focus.index("FIRST") < focus.index("SECOND")

    def test_disabled_modules_excluded(self):
        registry = AnalysisModuleRegistry()
        registry.register(AnalysisModule(name="a", description="", focus="FIRST"), enabled=False)
        assert registry.build_focus() == ""
        registry.enable("a")
        assert "FIRST" in registry.build_focus()

    def test_enable_unknown(self):
        with pytest.raises(KeyError):
            AnalysisModuleRegistry().enable("nope")
