"""
Governance Aggregator — the veto gate.

WHAT THIS DOES:
Combines the four audit signals into one trust score and a risk badge.
This is the decision core of the engine.

STEP 1 — WEIGHTED BASELINE:
    trust = 0.35 × quality + 0.25 × drift + 0.30 × hallucination + 0.10 × explainability

STEP 2 — VETO RULES (in this order):
    a. Insufficient data: rows < 25
       → score null, badge INSUFFICIENT. Terminal: nothing else runs.
    b. High hallucination risk: hallucination < 50
       → score capped at 40, badge UNSAFE
    c. Severe drift: drift < 60
       → score capped at 60, badge REVIEW (an UNSAFE badge is kept)
    d. No veto fired: badge from the weighted score
       → ≥ 80 SAFE, ≥ 50 REVIEW, otherwise UNSAFE

STEP 3 — round the score (halves up).

Vetoes cap, they never blend: one severe safety failure must not be
averaged away by otherwise good metrics. A veto can only lower or null
the score, never raise it.

EXAMPLE:
    quality 100, drift 100, hallucination 30, explainability 80, 40 rows
    baseline = 35 + 25 + 9 + 8 = 77
    hallucination veto → min(77, 40) = 40, UNSAFE

USAGE:
    aggregator = GovernanceAggregator()
    report = aggregator.aggregate(quality, drift, hallucination, explainability, row_count=40)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from truthlens.models.schemas import (
    AuditReport,
    CriticalFlag,
    DataQualityMetrics,
    DriftReport,
    ExplainabilityResult,
    HallucinationResult,
    RiskBadge,
)
from truthlens.services.governance.statistics import round_score

logger = logging.getLogger(__name__)

# Baseline weights (sum to 1.0)
QUALITY_WEIGHT = 0.35
DRIFT_WEIGHT = 0.25
HALLUCINATION_WEIGHT = 0.30
EXPLAINABILITY_WEIGHT = 0.10

# Veto a: audits over fewer rows are not judged at all
MIN_ROWS_FOR_AUDIT = 25

# Veto b
HALLUCINATION_VETO_THRESHOLD = 50
HALLUCINATION_SCORE_CAP = 40

# Veto c
DRIFT_VETO_THRESHOLD = 60
DRIFT_SCORE_CAP = 60

# Badge bands when no veto fires
SAFE_THRESHOLD = 80
REVIEW_THRESHOLD = 50


@dataclass
class GateState:
    """In-progress verdict, mutated by the veto rules and finalized once."""

    trust: Optional[float]
    """Current trust score (None once the data-volume veto fires)."""

    badge: Optional[RiskBadge] = None
    """Badge assigned so far, if any rule has assigned one."""

    flags: list[CriticalFlag] = field(default_factory=list)
    """Critical flags in the order they fired."""

    terminal: bool = False
    """Set by a rule that ends the chain."""

    def cap(self, ceiling: float) -> None:
        if self.trust is not None:
            self.trust = min(self.trust, ceiling)


@dataclass
class GateInputs:
    """The signals the veto rules look at."""
    quality: DataQualityMetrics
    drift: DriftReport
    hallucination: HallucinationResult
    explainability: ExplainabilityResult
    row_count: int


class GovernanceAggregator:
    """
    Computes the governance-gated trust score and risk badge.

    Pipeline position:
    Quality + Drift + Hallucination + Explainability → [GovernanceAggregator] → AuditReport
    """

    def __init__(self):
        self.rules: list[Callable[[GateInputs, GateState], None]] = [
            self._insufficient_data_veto,
            self._hallucination_veto,
            self._drift_veto,
            self._score_band,
        ]

    def weighted_score(
        self,
        quality: DataQualityMetrics,
        drift: DriftReport,
        hallucination: HallucinationResult,
        explainability: ExplainabilityResult,
    ) -> float:
        """Unrounded, un-vetoed weighted trust score."""
        return (
            QUALITY_WEIGHT * quality.score
            + DRIFT_WEIGHT * drift.score
            + HALLUCINATION_WEIGHT * hallucination.score
            + EXPLAINABILITY_WEIGHT * explainability.score
        )

    def aggregate(
        self,
        quality: DataQualityMetrics,
        drift: DriftReport,
        hallucination: HallucinationResult,
        explainability: ExplainabilityResult,
        row_count: int,
        file_label: str = "",
        timestamp: Optional[datetime] = None,
    ) -> AuditReport:
        """
        Run the veto gate and build the final report.

        Args:
            quality: DataQualityAnalyzer output
            drift: DriftAnalyzer output
            hallucination: Hallucination collaborator output (degraded or not)
            explainability: Explainability collaborator output
            row_count: Number of rows in the audited dataset
            file_label: Dataset name carried through to the report
            timestamp: Audit time, defaults to now (UTC)

        Returns:
            A frozen AuditReport
        """
        inputs = GateInputs(
            quality=quality,
            drift=drift,
            hallucination=hallucination,
            explainability=explainability,
            row_count=row_count,
        )
        state = GateState(
            trust=self.weighted_score(quality, drift, hallucination, explainability)
        )
        baseline = state.trust

        for rule in self.rules:
            rule(inputs, state)
            if state.terminal:
                break

        final_score = round_score(state.trust) if state.trust is not None else None

        logger.info(
            f"Governance gate: baseline={baseline:.1f}, final={final_score}, "
            f"badge={state.badge.value}, flags={[f.value for f in state.flags]}"
        )

        return AuditReport(
            overall_trust_score=final_score,
            risk_badge=state.badge,
            critical_flags=state.flags,
            data_quality=quality,
            drift=drift,
            hallucination=hallucination,
            explainability=explainability,
            timestamp=timestamp or datetime.now(timezone.utc),
            file_label=file_label,
        )

    # =========================================================================
    # VETO RULES
    # =========================================================================

    def _insufficient_data_veto(self, inputs: GateInputs, state: GateState) -> None:
        if inputs.row_count >= MIN_ROWS_FOR_AUDIT:
            return
        logger.warning(
            f"Veto: insufficient data ({inputs.row_count} rows < {MIN_ROWS_FOR_AUDIT})"
        )
        state.trust = None
        state.badge = RiskBadge.INSUFFICIENT
        state.flags = [CriticalFlag.INSUFFICIENT_DATA]
        state.terminal = True

    def _hallucination_veto(self, inputs: GateInputs, state: GateState) -> None:
        if inputs.hallucination.score >= HALLUCINATION_VETO_THRESHOLD:
            return
        logger.warning(
            f"Veto: high hallucination risk (score {inputs.hallucination.score:g} "
            f"< {HALLUCINATION_VETO_THRESHOLD}), capping at {HALLUCINATION_SCORE_CAP}"
        )
        state.flags.append(CriticalFlag.HIGH_HALLUCINATION_RISK)
        state.cap(HALLUCINATION_SCORE_CAP)
        state.badge = RiskBadge.UNSAFE

    def _drift_veto(self, inputs: GateInputs, state: GateState) -> None:
        if inputs.drift.score >= DRIFT_VETO_THRESHOLD:
            return
        logger.warning(
            f"Veto: severe drift (score {inputs.drift.score} < {DRIFT_VETO_THRESHOLD}), "
            f"capping at {DRIFT_SCORE_CAP}"
        )
        state.flags.append(CriticalFlag.SEVERE_DRIFT)
        state.cap(DRIFT_SCORE_CAP)
        # A weaker drift signal never downgrades an UNSAFE verdict
        if state.badge is not RiskBadge.UNSAFE:
            state.badge = RiskBadge.REVIEW

    def _score_band(self, inputs: GateInputs, state: GateState) -> None:
        if state.flags:
            return
        if state.trust >= SAFE_THRESHOLD:
            state.badge = RiskBadge.SAFE
        elif state.trust >= REVIEW_THRESHOLD:
            state.badge = RiskBadge.REVIEW
        else:
            state.badge = RiskBadge.UNSAFE


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def aggregate_trust(
    quality: DataQualityMetrics,
    drift: DriftReport,
    hallucination: HallucinationResult,
    explainability: ExplainabilityResult,
    row_count: int,
    file_label: str = "",
) -> AuditReport:
    """
    Convenience function to run the governance gate.

    Example:
        report = aggregate_trust(quality, drift, hallucination, explainability, len(dataset))
    """
    aggregator = GovernanceAggregator()
    return aggregator.aggregate(
        quality, drift, hallucination, explainability, row_count, file_label=file_label
    )
