"""
Collaborators — the AI services an audit depends on but does not own.

COMPONENTS:
- BaseHallucinationChecker / HallucinationDetector: grounds the AI output in the data
- BaseExplainer / ExplainabilityEngine: explains the raw metrics

Both default implementations call OpenAI and absorb their own failures,
returning degraded results instead of raising.

USAGE:
    from truthlens.services.collaborators import HallucinationDetector, ExplainabilityEngine

    pipeline = AuditPipeline(HallucinationDetector(), ExplainabilityEngine())
"""

from truthlens.services.collaborators.protocols import (
    BaseExplainer,
    BaseHallucinationChecker,
    degraded_explainability_result,
    degraded_hallucination_result,
)
from truthlens.services.collaborators.hallucination_detector import HallucinationDetector
from truthlens.services.collaborators.explainability import ExplainabilityEngine

__all__ = [
    "BaseExplainer",
    "BaseHallucinationChecker",
    "degraded_explainability_result",
    "degraded_hallucination_result",
    "HallucinationDetector",
    "ExplainabilityEngine",
]
