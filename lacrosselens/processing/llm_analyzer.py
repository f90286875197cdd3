"""Single-pass lacrosse video analysis using the Claude API."""
import logging
from typing import Any, Optional

from anthropic import Anthropic
from pydantic import ValidationError

from lacrosselens.config.settings import get_settings
from .prompts import STANDARD_PROMPT_TEMPLATE, SYSTEM_PROMPT
from .records import LacrosseAnalysis
from .registry import AnalysisModuleRegistry, create_default_registry
from .sources import AnalysisSource

logger = logging.getLogger(__name__)


class AnalyzerError(Exception):
    """Error during model analysis."""

    pass


def _observation(text_field: str, extra: dict) -> dict:
    properties = {
        text_field: {"type": "string", "description": "Detailed coaching observation"},
        "timestamp": {"type": "number", "description": "Seconds into the video"},
        "confidence": {"type": "number", "minimum": 0, "maximum": 100},
    }
    properties.update(extra)
    return {
        "type": "array",
        "items": {
            "type": "object",
            "properties": properties,
            "required": [text_field, "timestamp", "confidence"],
        },
    }


RECORD_ANALYSIS_TOOL = {
    "name": "record_lacrosse_analysis",
    "description": "Record the complete film breakdown for a lacrosse video",
    "input_schema": {
        "type": "object",
        "properties": {
            "overallAnalysis": {
                "type": "string",
                "description": "Overall game breakdown: systems, ball movement, schemes",
            },
            "playerEvaluations": _observation(
                "evaluation",
                {"playerNumber": {"type": "string", "description": 'Player as "#<number> <color>"'}},
            ),
            "faceOffAnalysis": _observation(
                "analysis",
                {
                    "winProbability": {"type": "number", "description": "0-100 chance the focus team won"},
                    "outcome": {"type": "string", "enum": ["win", "loss", "violation"]},
                    "winner": {"type": "string", "description": "Jersey color that won possession"},
                    "technique": {"type": "string", "description": "Winning technique: clamp, rake, plunger, jump"},
                },
            ),
            "transitionAnalysis": _observation(
                "analysis",
                {
                    "successProbability": {"type": "number", "description": "0-100"},
                    "successful": {"type": "boolean"},
                    "transitionType": {"type": "string", "enum": ["clear", "ride", "fast_break", "unsettled"]},
                    "endTimestamp": {"type": "number"},
                },
            ),
            "keyMoments": _observation(
                "description",
                {"type": {"type": "string", "description": "goal, assist, save, caused_turnover, penalty, shot"}},
            ),
        },
        "required": [
            "overallAnalysis",
            "playerEvaluations",
            "faceOffAnalysis",
            "transitionAnalysis",
            "keyMoments",
        ],
    },
}


class ClaudeToolCaller:
    """Calls Claude with a single forced tool and returns the tool input."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        client: Optional[Anthropic] = None,
    ):
        """Initialize the caller.

        Args:
            api_key: Anthropic API key (defaults to settings)
            model: Model to use (defaults to settings)
            max_tokens: Response token limit (defaults to settings)
            client: Preconstructed client, mainly for tests
        """
        settings = get_settings()
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.claude_model
        self.max_tokens = max_tokens or settings.claude_max_tokens

        if client is None and not self.api_key:
            raise AnalyzerError(
                "Anthropic API key not found. Set ANTHROPIC_API_KEY environment variable."
            )

        self.client = client or Anthropic(api_key=self.api_key)

    def call(self, tool: dict, content: list[dict], system: str = SYSTEM_PROMPT) -> dict[str, Any]:
        """Send ``content`` and return the input of the forced ``tool`` call.

        Raises:
            AnalyzerError: If the request fails or no tool call comes back
        """
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                tools=[tool],
                tool_choice={"type": "tool", "name": tool["name"]},
                messages=[{"role": "user", "content": content}],
            )
        except Exception as e:
            raise AnalyzerError(f"Error calling Claude API: {e}")

        for block in response.content:
            if block.type == "tool_use":
                return block.input

        raise AnalyzerError(f"No {tool['name']} tool use found in response")


class LacrosseAnalyzer:
    """Standard single-request analysis of one video."""

    def __init__(
        self,
        caller: Optional[ClaudeToolCaller] = None,
        registry: Optional[AnalysisModuleRegistry] = None,
    ):
        self.caller = caller or ClaudeToolCaller()
        self.registry = registry or create_default_registry(get_settings().analysis_modules)

    def build_prompt(self, source: AnalysisSource) -> str:
        return STANDARD_PROMPT_TEMPLATE.format(
            title=source.title or "Untitled",
            hints=source.hints_text(),
            material=source.material_text(),
            focus=self.registry.build_focus(),
        )

    def analyze(self, source: AnalysisSource) -> LacrosseAnalysis:
        """Analyze a video in one request.

        Returns:
            Validated LacrosseAnalysis with at least one item

        Raises:
            AnalyzerError: If the call fails, the response does not match the
                schema, or it contains no analysis at all
        """
        logger.info("Requesting standard analysis for '%s'", source.title)
        data = self.caller.call(RECORD_ANALYSIS_TOOL, source.content_blocks(self.build_prompt(source)))

        try:
            analysis = LacrosseAnalysis.model_validate(data)
        except ValidationError as e:
            raise AnalyzerError(f"Analysis response did not match schema: {e}")

        if analysis.is_empty:
            raise AnalyzerError("Model returned an empty analysis")

        logger.info("Standard analysis returned %d items", analysis.item_count)
        return analysis
