"""
Shared fixtures for the audit engine tests.

Collaborators are replaced by in-memory fakes so no test needs an OpenAI key
or network access. The OpenAI stub mimics the one call we make:
client.chat.completions.create(...) → response.choices[0].message.content
"""

from types import SimpleNamespace

import pytest

from truthlens.models.schemas import (
    ExplainabilityResult,
    HallucinationResult,
    MetricsSummary,
)
from truthlens.services.collaborators.protocols import (
    BaseExplainer,
    BaseHallucinationChecker,
)


# =============================================================================
# DATA BUILDERS
# =============================================================================

def build_stable_rows(num_rows: int) -> list[dict]:
    """
    Numeric rows with identical feature means in both halves.

    'visits' cycles 10..14 and 'spend' cycles 100, 102, 104, so any
    multiple-of-15 half sees full cycles: no drift, no outliers, no gaps.
    """
    return [
        {"visits": 10 + (i % 5), "spend": 100 + 2 * (i % 3)}
        for i in range(num_rows)
    ]


@pytest.fixture
def stable_rows():
    return build_stable_rows


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================

class FakeHallucinationChecker(BaseHallucinationChecker):
    """Returns a fixed score and records every call."""

    def __init__(self, score: float = 90, call_log: list | None = None):
        self.score = score
        self.calls: list[tuple[str, str]] = []
        self.call_log = call_log if call_log is not None else []

    async def analyze(self, text: str, context_sample: str) -> HallucinationResult:
        self.calls.append((text, context_sample))
        self.call_log.append("hallucination")
        return HallucinationResult(score=self.score, flags=[], analysis_text="fake")


class FakeExplainer(BaseExplainer):
    """Returns a fixed score and records the metrics it was given."""

    def __init__(self, score: float = 80, call_log: list | None = None):
        self.score = score
        self.summaries: list[MetricsSummary] = []
        self.call_log = call_log if call_log is not None else []

    async def explain(self, metrics: MetricsSummary) -> ExplainabilityResult:
        self.summaries.append(metrics)
        self.call_log.append("explainability")
        return ExplainabilityResult(score=self.score, insights=["fake insight"])


class BrokenExplainer(BaseExplainer):
    """Violates the never-raise contract, to exercise the engine-fault path."""

    async def explain(self, metrics: MetricsSummary) -> ExplainabilityResult:
        raise RuntimeError("explainer exploded")


@pytest.fixture
def fake_checker():
    return FakeHallucinationChecker


@pytest.fixture
def fake_explainer():
    return FakeExplainer


@pytest.fixture
def broken_explainer():
    return BrokenExplainer()


# =============================================================================
# OPENAI STUB
# =============================================================================

class StubCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class StubOpenAIClient:
    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.completions = StubCompletions(content=content, error=error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def stub_openai():
    return StubOpenAIClient
