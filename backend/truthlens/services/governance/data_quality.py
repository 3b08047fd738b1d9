"""
Data Quality Analyzer.

WHAT THIS DOES:
Scans a dataset for missing values and numeric outliers and turns them
into a single 0-100 quality score.

FORMULA:
    missing_ratio = missing_cells / (rows × features)
    outlier_ratio = outlier_cells / (rows × features)
    score = max(0, 100 - missing_ratio × 200 - outlier_ratio × 500)

Outliers weigh 5× and missing values 2×: an implausible value is a stronger
integrity signal than an absent one.

OUTLIERS:
A numeric value is an outlier when |z| > 3 within its own column.
Columns with 5 or fewer numeric values, or with zero spread, are skipped.
Text cells never count as errors; they are just left out of the numbers.

EXAMPLE:
    30 rows × 4 features = 120 cells
    3 missing cells, 1 outlier
    score = 100 - (3/120)×200 - (1/120)×500 = 100 - 5 - 4.17 ≈ 91

USAGE:
    analyzer = DataQualityAnalyzer()
    metrics = analyzer.analyze(dataset)
"""

import logging

from truthlens.models.dataset import Dataset, Missing, Number
from truthlens.models.schemas import DataQualityMetrics
from truthlens.services.governance.statistics import (
    mean,
    standard_deviation,
    z_score,
    round_score,
)

logger = logging.getLogger(__name__)

# Columns need more than this many numeric values for outlier analysis
MIN_VALUES_FOR_OUTLIERS = 5

# |z| above this is an outlier
OUTLIER_Z_THRESHOLD = 3.0

MISSING_WEIGHT = 200
OUTLIER_WEIGHT = 500


class DataQualityAnalyzer:
    """
    Computes missing-value and outlier statistics for a dataset.

    Pipeline position:
    Dataset → [DataQualityAnalyzer] → DriftAnalyzer → collaborators → GovernanceAggregator
    """

    def analyze(self, dataset: Dataset) -> DataQualityMetrics:
        """
        Analyze a dataset and return its quality metrics.

        An empty dataset (or one whose first row has no columns) gets a
        score of 0 rather than an error.
        """
        row_count = len(dataset)
        keys = dataset.feature_keys

        if row_count == 0 or not keys:
            return DataQualityMetrics(
                score=0,
                missing_values=0,
                outliers=0,
                total_rows=row_count,
            )

        missing_count = 0
        numeric_columns: dict[str, list[float]] = {key: [] for key in keys}

        for row in dataset.rows:
            for key in keys:
                cell = row.get(key)
                if cell is None or isinstance(cell, Missing):
                    missing_count += 1
                elif isinstance(cell, Number):
                    numeric_columns[key].append(cell.value)

        outlier_count = sum(
            self._count_outliers(values) for values in numeric_columns.values()
        )

        total_cells = row_count * len(keys)
        missing_ratio = missing_count / total_cells
        outlier_ratio = outlier_count / total_cells
        score = max(
            0.0,
            100 - missing_ratio * MISSING_WEIGHT - outlier_ratio * OUTLIER_WEIGHT,
        )

        metrics = DataQualityMetrics(
            score=round_score(score),
            missing_values=missing_count,
            outliers=outlier_count,
            total_rows=row_count,
        )

        logger.info(
            f"Data quality: score={metrics.score}, missing={missing_count}, "
            f"outliers={outlier_count}, rows={row_count}, features={len(keys)}"
        )
        return metrics

    def _count_outliers(self, values: list[float]) -> int:
        """Count values more than 3 standard deviations from the column mean."""
        if len(values) <= MIN_VALUES_FOR_OUTLIERS:
            return 0

        m = mean(values)
        sd = standard_deviation(values)
        if sd <= 0:
            return 0

        return sum(1 for v in values if abs(z_score(v, m, sd)) > OUTLIER_Z_THRESHOLD)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def analyze_data_quality(dataset: Dataset) -> DataQualityMetrics:
    """
    Convenience function to score a dataset's quality.

    Example:
        metrics = analyze_data_quality(Dataset.from_records(rows))
    """
    analyzer = DataQualityAnalyzer()
    return analyzer.analyze(dataset)
