"""
Audit Pipeline — Orchestrates a full governance audit.

WHAT THIS DOES:
Coordinates the local analyzers, the two AI collaborators and the
governance gate to turn a dataset + AI output into an AuditReport.

WHY THIS EXISTS:
- Keeps API routes thin and focused on HTTP concerns
- Makes the audit testable with fake collaborators
- Single place to understand the full flow

PIPELINE STAGES:
1. Local analysis: data quality + drift (pure, synchronous)
2. Grounding: hallucination check of the AI text against a data sample
3. Explainability: explanation of quality, drift and hallucination score
   (must wait for stage 2, it consumes the hallucination score)
4. Governance gate: weighted score + vetoes → AuditReport

FAILURES:
Collaborators absorb their own failures (degraded results). Anything else
that goes wrong is unexpected: it is logged and raised as AuditEngineError.
There are no partial reports.

USAGE:
    pipeline = AuditPipeline(HallucinationDetector(), ExplainabilityEngine())
    report = await pipeline.run(dataset, ai_output_text="Income is stable...")
"""

import logging
from dataclasses import dataclass
from typing import Optional

from truthlens.config import get_settings
from truthlens.models.dataset import Dataset
from truthlens.models.schemas import (
    AuditReport,
    DataQualityMetrics,
    DriftReport,
    ExplainabilityResult,
    HallucinationResult,
    MetricsSummary,
)
from truthlens.services.collaborators import (
    BaseExplainer,
    BaseHallucinationChecker,
    ExplainabilityEngine,
    HallucinationDetector,
)
from truthlens.services.governance.aggregator import GovernanceAggregator
from truthlens.services.governance.data_quality import DataQualityAnalyzer
from truthlens.services.governance.drift import DriftAnalyzer

logger = logging.getLogger(__name__)


class AuditEngineError(RuntimeError):
    """An audit run failed in a way the engine cannot recover from."""


@dataclass
class AuditRun:
    """Intermediate result tracking through the pipeline."""

    # Input
    dataset: Dataset
    ai_output_text: str
    file_label: str

    # Local analysis stage
    quality: Optional[DataQualityMetrics] = None
    drift: Optional[DriftReport] = None

    # Collaborator stages
    hallucination: Optional[HallucinationResult] = None
    explainability: Optional[ExplainabilityResult] = None


class AuditPipeline:
    """
    Orchestrates a full audit from dataset to AuditReport.

    Each run works on its own dataset and its own AuditRun, so one pipeline
    can serve concurrent audits without locking.
    """

    def __init__(
        self,
        hallucination_checker: BaseHallucinationChecker,
        explainer: BaseExplainer,
        context_sample_rows: Optional[int] = None,
        quality_analyzer: Optional[DataQualityAnalyzer] = None,
        drift_analyzer: Optional[DriftAnalyzer] = None,
        aggregator: Optional[GovernanceAggregator] = None,
    ):
        """
        Initialize the pipeline with its collaborators.

        Args:
            hallucination_checker: Grounds the AI text in the data
            explainer: Explains the raw metrics
            context_sample_rows: Rows sent as grounding context. Defaults to config value.
        """
        self.hallucination_checker = hallucination_checker
        self.explainer = explainer
        self.context_sample_rows = (
            context_sample_rows
            if context_sample_rows is not None
            else get_settings().context_sample_rows
        )
        self.quality_analyzer = quality_analyzer or DataQualityAnalyzer()
        self.drift_analyzer = drift_analyzer or DriftAnalyzer()
        self.aggregator = aggregator or GovernanceAggregator()

    async def run(
        self,
        dataset: Dataset,
        ai_output_text: str = "",
        file_label: str = "",
    ) -> AuditReport:
        """
        Run the full audit and return an AuditReport.

        Args:
            dataset: The rows to audit
            ai_output_text: AI-generated text to verify (may be empty)
            file_label: Dataset name carried into the report

        Raises:
            AuditEngineError: on any unexpected failure
        """
        logger.info(
            f"Audit starting: '{file_label or 'unnamed'}' ({len(dataset)} rows, "
            f"{len(dataset.feature_keys)} features, text={len(ai_output_text)} chars)"
        )

        run = AuditRun(dataset=dataset, ai_output_text=ai_output_text, file_label=file_label)

        try:
            self._stage_local_analysis(run)
            await self._stage_grounding(run)
            await self._stage_explainability(run)
            report = self._stage_governance(run)
        except Exception as e:
            logger.exception(f"Audit failed: {e}")
            raise AuditEngineError(f"Audit engine fault: {e}") from e

        logger.info(
            f"Audit complete: badge={report.risk_badge.value}, "
            f"score={report.overall_trust_score}, "
            f"flags={[f.value for f in report.critical_flags]}"
        )
        return report

    # =========================================================================
    # STAGE 1: LOCAL ANALYSIS
    # =========================================================================

    def _stage_local_analysis(self, run: AuditRun) -> None:
        run.quality = self.quality_analyzer.analyze(run.dataset)
        run.drift = self.drift_analyzer.analyze(run.dataset)

    # =========================================================================
    # STAGE 2: GROUNDING
    # =========================================================================

    async def _stage_grounding(self, run: AuditRun) -> None:
        """Send the AI text plus the first rows of the dataset to the checker."""
        context_sample = run.dataset.context_sample(self.context_sample_rows)
        run.hallucination = await self.hallucination_checker.analyze(
            run.ai_output_text, context_sample
        )
        logger.info(f"Hallucination score: {run.hallucination.score:g}")

    # =========================================================================
    # STAGE 3: EXPLAINABILITY
    # =========================================================================

    async def _stage_explainability(self, run: AuditRun) -> None:
        summary = MetricsSummary(
            data_quality=run.quality,
            drift=run.drift,
            hallucination_score=run.hallucination.score,
        )
        run.explainability = await self.explainer.explain(summary)
        logger.info(f"Explainability score: {run.explainability.score:g}")

    # =========================================================================
    # STAGE 4: GOVERNANCE GATE
    # =========================================================================

    def _stage_governance(self, run: AuditRun) -> AuditReport:
        return self.aggregator.aggregate(
            quality=run.quality,
            drift=run.drift,
            hallucination=run.hallucination,
            explainability=run.explainability,
            row_count=len(run.dataset),
            file_label=run.file_label,
        )


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def run_audit(
    dataset: Dataset,
    ai_output_text: str = "",
    file_label: str = "",
) -> AuditReport:
    """
    Convenience function to run an audit with the default OpenAI collaborators.

    Example:
        report = await run_audit(
            Dataset.from_records(rows),
            "Income is stable across the dataset.",
        )
    """
    pipeline = AuditPipeline(HallucinationDetector(), ExplainabilityEngine())
    return await pipeline.run(dataset, ai_output_text=ai_output_text, file_label=file_label)
