"""
Pydantic schemas for audit results and API request/response validation.

These define the shape of data that goes in and out of the audit engine.
The AuditReport is the core output of the entire system.

FLOW OVERVIEW:
==============
1. User sends AuditRequest to /api/audit (or uploads a file)
2. DataQualityAnalyzer → DataQualityMetrics
3. DriftAnalyzer → DriftReport
4. Hallucination collaborator → HallucinationResult
5. Explainability collaborator → ExplainabilityResult
6. GovernanceAggregator → AuditReport
7. Dashboard displays the AuditReport

All models serialize with camelCase aliases (overallTrustScore, riskBadge, ...)
so the dashboard can consume them directly. Field names work as input too.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel


class AuditModel(BaseModel):
    """Base for every audit schema: camelCase on the wire, immutable once built."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# GOVERNANCE ENUMS
# =============================================================================

class CriticalFlag(str, Enum):
    """Veto signals, listed in the order the gate checks them."""
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    HIGH_HALLUCINATION_RISK = "HIGH_HALLUCINATION_RISK"
    SEVERE_DRIFT = "SEVERE_DRIFT"


class RiskBadge(str, Enum):
    """Final, mutually exclusive governance verdict."""
    SAFE = "SAFE"
    REVIEW = "REVIEW"
    UNSAFE = "UNSAFE"
    INSUFFICIENT = "INSUFFICIENT"


# =============================================================================
# LOCAL ANALYSIS SCHEMAS
# =============================================================================
#
# WHEN USED:
# - DataQualityMetrics: Created by DataQualityAnalyzer
# - DriftMetric / DriftReport: Created by DriftAnalyzer
#

class DataQualityMetrics(AuditModel):
    """
    Missing-value and outlier statistics for a dataset.

    USED BY: DataQualityAnalyzer
    DISPLAYED: "Data Integrity" card (score + counts)
    """
    score: int = Field(ge=0, le=100, description="Quality score (0-100)")
    missing_values: int = Field(ge=0, description="Number of null/empty cells")
    outliers: int = Field(ge=0, description="Number of |z| > 3 numeric values")
    total_rows: int = Field(ge=0)


class DriftMetric(AuditModel):
    """A single feature whose mean shifted between the two dataset halves."""
    feature: str
    score: float = Field(ge=0, description="Relative change of the feature mean")
    drift_detected: bool


class DriftReport(AuditModel):
    """
    Population drift between the first and second half of a dataset.

    USED BY: DriftAnalyzer
    DISPLAYED: DriftChart (one bar per drifted feature)
    """
    score: int = Field(ge=0, le=100, description="Stability score (0-100)")
    drifted_features: list[DriftMetric] = Field(
        default_factory=list,
        description="Drifted features in column order",
    )


# =============================================================================
# COLLABORATOR SCHEMAS
# =============================================================================
#
# Produced by the AI collaborators, consumed as ordinary input by the
# aggregator. A degraded collaborator result has exactly the same shape.
#

class HallucinationFlag(AuditModel):
    """One suspicious sentence in the AI output."""
    sentence: str
    reason: str
    risk: Literal["Low", "Medium", "High"] = "Medium"


class HallucinationResult(AuditModel):
    """
    Grounding verdict for the AI output text.

    100 = perfectly grounded in the data, < 50 = contradiction or fabrication.
    """
    score: float = Field(ge=0, le=100)
    flags: list[HallucinationFlag] = Field(default_factory=list)
    analysis_text: str = ""


class ExplainabilityResult(AuditModel):
    """Explainability score plus human-readable insights about the metrics."""
    score: float = Field(ge=0, le=100)
    insights: list[str] = Field(default_factory=list)


class MetricsSummary(AuditModel):
    """The raw metrics handed to the explainability collaborator."""
    data_quality: DataQualityMetrics
    drift: DriftReport
    hallucination_score: float


# =============================================================================
# AUDIT REPORT (the core output)
# =============================================================================

class AuditReport(AuditModel):
    """
    The main output of the audit engine.

    USED BY: POST /api/audit, POST /api/audit/upload
    WHEN: After the entire pipeline completes (analyze → ground → explain → gate)
    DISPLAYED: The entire dashboard renders from this single object

    INVARIANTS (checked on construction):
    - overall_trust_score is None  <=>  risk_badge is INSUFFICIENT
    - INSUFFICIENT_DATA is flagged  <=>  risk_badge is INSUFFICIENT
    """
    overall_trust_score: int | None = Field(
        ge=0, le=100,
        description="Governance-gated trust score; null when data is insufficient",
    )
    risk_badge: RiskBadge
    critical_flags: list[CriticalFlag] = Field(default_factory=list)

    data_quality: DataQualityMetrics
    drift: DriftReport
    hallucination: HallucinationResult
    explainability: ExplainabilityResult

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    file_label: str = ""

    @computed_field(alias="governanceOverride")
    @property
    def governance_override(self) -> bool:
        """True when a veto capped or replaced the weighted score."""
        return len(self.critical_flags) > 0

    @model_validator(mode="after")
    def _check_gate_invariants(self) -> "AuditReport":
        insufficient = self.risk_badge is RiskBadge.INSUFFICIENT
        if (self.overall_trust_score is None) != insufficient:
            raise ValueError(
                f"Trust score {self.overall_trust_score!r} is inconsistent "
                f"with risk badge {self.risk_badge.value}"
            )
        if (CriticalFlag.INSUFFICIENT_DATA in self.critical_flags) != insufficient:
            raise ValueError(
                f"INSUFFICIENT_DATA flag is inconsistent with risk badge "
                f"{self.risk_badge.value}"
            )
        return self


# =============================================================================
# API REQUEST SCHEMAS
# =============================================================================

class AuditRequest(AuditModel):
    """
    Request body for the /api/audit endpoint.

    Example:
        POST /api/audit
        {
            "rows": [{"age": 41, "income": 52000}, ...],
            "aiOutputText": "Income is stable across the dataset.",
            "fileLabel": "customers.csv"
        }
    """
    rows: list[dict[str, Any]] = Field(description="Parsed dataset rows")
    ai_output_text: str = Field(
        default="",
        description="AI-generated text to verify against the data (optional)",
    )
    file_label: str = Field(default="", description="Name shown for the dataset")


class DemoScenario(AuditModel):
    """The built-in grounding demo: a small dataset plus a fabricated analysis."""
    rows: list[dict[str, Any]]
    ai_output_text: str
    file_label: str
