"""
Collaborator Protocols — Abstract interfaces for the AI collaborators.

WHAT THIS IS:
The audit pipeline needs two capabilities it does not implement itself:
- a hallucination check of the AI output against the data
- an explanation of the raw audit metrics

They are handed to the pipeline as constructor arguments. Nothing in the
pipeline reaches for a global client or API key.

CONTRACT:
Implementations must NEVER raise to the caller. On any internal failure
they return a degraded-but-valid result (see DEGRADED_* below), which
the governance gate treats as ordinary input.

USAGE:
    class MyChecker(BaseHallucinationChecker):
        async def analyze(self, text, context_sample) -> HallucinationResult:
            ...

    pipeline = AuditPipeline(MyChecker(), MyExplainer())
"""

import math
from abc import ABC, abstractmethod
from typing import Any

from truthlens.models.schemas import (
    ExplainabilityResult,
    HallucinationFlag,
    HallucinationResult,
    MetricsSummary,
)


def clamp_score(value: Any, default: float) -> float:
    """Read a 0-100 score from model output, falling back to default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        score = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(score):
        return default
    return max(0.0, min(100.0, score))


def degraded_hallucination_result() -> HallucinationResult:
    """Result returned when the hallucination check could not run."""
    return HallucinationResult(
        score=50,
        flags=[
            HallucinationFlag(
                sentence="System Error",
                reason="API Connection Failed",
                risk="Medium",
            )
        ],
        analysis_text="Error connecting to AI Audit Engine. Please check API Key.",
    )


def degraded_explainability_result() -> ExplainabilityResult:
    """Result returned when the explanation could not be generated."""
    return ExplainabilityResult(
        score=60,
        insights=["Automated explanation unavailable due to connection error."],
    )


class BaseHallucinationChecker(ABC):
    """
    Abstract base class for hallucination checkers.

    The default HallucinationDetector in hallucination_detector.py implements
    this interface with an OpenAI model.
    """

    @abstractmethod
    async def analyze(self, text: str, context_sample: str) -> HallucinationResult:
        """
        Check an AI output against a sample of the dataset.

        Args:
            text: The AI-generated text under audit
            context_sample: JSON sample of the dataset used as ground truth

        Returns:
            HallucinationResult (degraded on failure, never raises)
        """
        pass


class BaseExplainer(ABC):
    """
    Abstract base class for explainability engines.

    The default ExplainabilityEngine in explainability.py implements this
    interface with an OpenAI model.
    """

    @abstractmethod
    async def explain(self, metrics: MetricsSummary) -> ExplainabilityResult:
        """
        Explain the raw audit metrics.

        Args:
            metrics: Quality, drift and hallucination score of the audit

        Returns:
            ExplainabilityResult (degraded on failure, never raises)
        """
        pass
