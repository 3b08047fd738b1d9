"""
Drift Analyzer.

WHAT THIS DOES:
Detects population drift inside a single dataset by comparing its first
half ("reference", the earlier snapshot) with its second half ("current").

HOW IT WORKS:
1. Split rows at n // 2, keeping the original order
2. For every feature whose first-row value is numeric or blank, compare the
   mean of each half
3. percent_change = |ref_mean - cur_mean| / |ref_mean|
   (the denominator is 1 when ref_mean is exactly 0)
4. A feature drifts when percent_change > 0.20; each drifted feature
   costs percent_change × 10 points
5. score = max(0, 100 - total_penalty)

When averaging a half, text and missing cells count as 0. That pulls a
sparse column's mean towards zero; it is a known approximation, kept so
scores stay comparable across runs.

SMALL DATASETS:
Fewer than 10 rows cannot be split meaningfully. That returns a clean
score of 100 with no drifted features. Deciding whether there is enough
data at all is the governance gate's job, not this analyzer's.

EXAMPLE:
    reference income mean = 50,000
    current income mean   = 65,000
    percent_change = 15,000 / 50,000 = 0.30  → drifted, penalty 3.0
    score = 100 - 3 = 97

USAGE:
    analyzer = DriftAnalyzer()
    report = analyzer.analyze(dataset)
"""

import logging

from truthlens.models.dataset import Dataset, Missing, Number, numeric_or_zero
from truthlens.models.schemas import DriftMetric, DriftReport
from truthlens.services.governance.statistics import (
    mean,
    round_half_up,
    round_score,
)

logger = logging.getLogger(__name__)

# Below this many rows the halves are too small to compare
MIN_ROWS_FOR_DRIFT = 10

# Relative change in the mean above which a feature counts as drifted
DRIFT_THRESHOLD = 0.20

# Score points lost per unit of relative change
DRIFT_PENALTY_FACTOR = 10


class DriftAnalyzer:
    """
    Flags features whose mean shifts between the two halves of a dataset.

    Pipeline position:
    Dataset → DataQualityAnalyzer → [DriftAnalyzer] → collaborators → GovernanceAggregator
    """

    def analyze(self, dataset: Dataset) -> DriftReport:
        """
        Compare the reference and current halves of the dataset.

        Returns:
            DriftReport with the stability score and drifted features in
            column order (not sorted by severity)
        """
        if len(dataset) < MIN_ROWS_FOR_DRIFT:
            logger.info(
                f"Drift skipped: {len(dataset)} rows (minimum {MIN_ROWS_FOR_DRIFT})"
            )
            return DriftReport(score=100, drifted_features=[])

        reference, current = dataset.split()
        drifted_features: list[DriftMetric] = []
        total_penalty = 0.0

        for key in dataset.feature_keys:
            # A blank first cell still counts: it reads as 0 like any other gap
            if not isinstance(dataset.cell(0, key), (Number, Missing)):
                continue

            percent_change = self.percent_change(
                mean([numeric_or_zero(c) for c in reference.column(key)]),
                mean([numeric_or_zero(c) for c in current.column(key)]),
            )

            if percent_change > DRIFT_THRESHOLD:
                drifted_features.append(DriftMetric(
                    feature=key,
                    score=round_half_up(percent_change, 2),
                    drift_detected=True,
                ))
                total_penalty += percent_change * DRIFT_PENALTY_FACTOR
                logger.info(f"Drift detected on '{key}': {percent_change:.2%} change")

        score = round_score(max(0.0, 100 - total_penalty))
        logger.info(
            f"Drift: score={score}, drifted={len(drifted_features)}, "
            f"split={len(reference)}/{len(current)}"
        )
        return DriftReport(score=score, drifted_features=drifted_features)

    @staticmethod
    def percent_change(ref_mean: float, cur_mean: float) -> float:
        """Relative shift of the mean, using 1 as denominator for a zero reference."""
        denominator = 1.0 if ref_mean == 0 else abs(ref_mean)
        return abs(ref_mean - cur_mean) / denominator


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def analyze_drift(dataset: Dataset) -> DriftReport:
    """
    Convenience function to measure drift between dataset halves.

    Example:
        report = analyze_drift(Dataset.from_records(rows))
    """
    analyzer = DriftAnalyzer()
    return analyzer.analyze(dataset)
