"""
Explainability Engine.

WHAT THIS DOES:
Turns the raw audit metrics (quality, drift, hallucination score) into a
short "Trust & Explainability" report: an explainability score (0-100)
and a few plain-language insights for the dashboard.

WHY IT RUNS LAST:
It explains the other signals, so it needs the hallucination score.
The pipeline only calls it after the hallucination check has finished.

FAILURE BEHAVIOR:
Never raises. On any failure it logs the error and returns the degraded
result (score 60, one generic insight).

USAGE:
    engine = ExplainabilityEngine()
    result = await engine.explain(MetricsSummary(
        data_quality=quality,
        drift=drift,
        hallucination_score=hallucination.score,
    ))
"""

import json
import logging
from typing import Any, Optional

from openai import AsyncOpenAI

from truthlens.config import get_settings
from truthlens.models.schemas import ExplainabilityResult, MetricsSummary
from truthlens.services.collaborators.protocols import (
    BaseExplainer,
    clamp_score,
    degraded_explainability_result,
)

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 70
DEFAULT_INSIGHTS = ["Data patterns analyzed."]

SYSTEM_PROMPT = """You are an Explainable AI (XAI) engine. Generate a 'Trust & Explainability' report based on the raw audit metrics provided.

RULES:
1. Explain what the metrics mean for someone deciding whether to trust the AI output
2. Mention the drifted features and the missing/outlier counts when they matter
3. Keep each insight to one sentence
4. Give 3 insights

OUTPUT FORMAT (JSON):
{
  "explainabilityScore": 0-100 (based on clarity of the data),
  "insights": ["insight 1", "insight 2", "insight 3"]
}"""


def _parse_insights(raw_insights: Any) -> list[str]:
    if not isinstance(raw_insights, list):
        return list(DEFAULT_INSIGHTS)
    insights = [str(item).strip() for item in raw_insights if str(item).strip()]
    return insights or list(DEFAULT_INSIGHTS)


class ExplainabilityEngine(BaseExplainer):
    """
    Explains raw audit metrics with an OpenAI model.

    Pipeline position:
    Quality + Drift + Hallucination → [ExplainabilityEngine] → GovernanceAggregator
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
    ):
        settings = get_settings()
        self._client = client
        self.model = model or settings.explainability_model

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the OpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=get_settings().openai_api_key)
        return self._client

    async def explain(self, metrics: MetricsSummary) -> ExplainabilityResult:
        """
        Generate an explainability score and insights for the metrics.

        Returns:
            ExplainabilityResult; the degraded default on any failure
        """
        payload = metrics.model_dump_json(by_alias=True)
        logger.info(f"Explaining audit metrics ({len(payload)} chars)")

        try:
            client = self._get_client()
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f"Raw audit metrics:\n{payload}"},
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
            )
            result = json.loads(response.choices[0].message.content or "{}")
            if not isinstance(result, dict):
                raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
        except Exception as e:
            logger.error(f"Explainability generation failed: {e}")
            return degraded_explainability_result()

        explanation = ExplainabilityResult(
            score=clamp_score(result.get("explainabilityScore"), DEFAULT_SCORE),
            insights=_parse_insights(result.get("insights")),
        )

        logger.info(
            f"Explainability complete: score={explanation.score:g}, "
            f"insights={len(explanation.insights)}"
        )
        return explanation


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def explain_metrics(metrics: MetricsSummary) -> ExplainabilityResult:
    """
    Convenience function to explain audit metrics.

    Example:
        result = await explain_metrics(summary)
    """
    engine = ExplainabilityEngine()
    return await engine.explain(metrics)
