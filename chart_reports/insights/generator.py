"""Local chart insight generation using Claude AI.

The reports service normally produces insights through its
``/insights/generate`` endpoint (``ReportsAPIClient.generate_insight``). This
module is a drop-in alternative that asks Claude directly, with the same
``generate_insight(request) -> str`` coroutine, so the insight controller can
use either one.

Insight Generation Workflow:
1. Initialize InsightsGenerator with an Anthropic API key
2. Build an ``InsightRequest`` from a chart config (labels, primary series, axis labels)
3. Build a prompt that sanitizes every free-text field against prompt injection
4. Send the prompt to Claude and return the plain-text paragraph it answers with

Usage:
    from chart_reports.insights.generator import InsightsGenerator

    generator = InsightsGenerator(api_key="sk-...")
    text = await generator.generate_insight(InsightRequest.for_chart(chart))

Security Notes:
    - Labels and axis names are stripped of newlines/control characters
    - Each free-text field is capped before prompt inclusion
    - API key never logged (handled by Anthropic SDK)
"""

from __future__ import annotations

import anthropic

from ..core.errors import InsightGenerationError
from ..core.logging_config import get_logger
from ..core.models import InsightRequest

logger = get_logger(__name__)

DEFAULT_MODEL = "claude-3-5-haiku-20241022"
MAX_FIELD_LENGTH = 100
MAX_POINTS = 200


def _sanitize(value: str, limit: int = MAX_FIELD_LENGTH) -> str:
    cleaned = "".join(ch if ch.isprintable() else " " for ch in str(value))
    return " ".join(cleaned.split())[:limit]


class InsightsGenerator:
    """Generates a short narrative insight for one chart using Claude API."""

    def __init__(
        self,
        api_key: str,
        max_tokens: int = 600,
        temperature: float = 0.4,
        model: str = DEFAULT_MODEL,
    ):
        """Initialize the insights generator.

        Args:
            api_key: Anthropic API key
            max_tokens: Maximum tokens for Claude response (default: 600)
            temperature: Response temperature 0-1 (default: 0.4)
            model: Claude model name
        """
        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.model = model

    async def generate_insight(self, request: InsightRequest) -> str:
        """Generate a plain-text insight for a chart series.

        Raises:
            InsightGenerationError: If the Claude call fails or returns no text
        """
        logger.info(
            "Generating insight with Claude API",
            extra={"chart_type": request.chart_type, "points": len(request.data)},
        )
        prompt = self._build_prompt(request)

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system="You are a data analyst who explains charts to business users.",
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AuthenticationError as e:
            logger.error("Invalid Anthropic API key")
            raise InsightGenerationError("Invalid Anthropic API key") from e
        except anthropic.RateLimitError as e:
            logger.error("Anthropic API rate limit exceeded")
            raise InsightGenerationError("Anthropic API rate limit exceeded") from e
        except anthropic.APIError as e:
            logger.error(
                "Failed to generate insight",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            raise InsightGenerationError(f"Insight request failed: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise InsightGenerationError("Claude returned an empty insight")

        logger.info("Insight generated successfully", extra={"length": len(text)})
        return text

    def _build_prompt(self, request: InsightRequest) -> str:
        """Build the analysis prompt for Claude."""
        label = _sanitize(request.label)
        x_label = _sanitize(request.x_label)
        y_label = _sanitize(request.y_label)
        points = "\n".join(
            f"- {_sanitize(name, 60)}: {value:g}"
            for name, value in list(zip(request.labels, request.data))[:MAX_POINTS]
        )

        return f"""Analyze this {_sanitize(request.chart_type, 20) or "chart"} chart.

Series: {label}
X axis: {x_label}
Y axis: {y_label}

Data points:
{points}

Describe the main trend, the highest and lowest values and anything unusual
in one short paragraph of plain text. Do not use markdown or bullet points."""
