"""
Tests for the DriftAnalyzer.

Run with: pytest backend/tests/test_drift.py -v
"""

import pytest

from truthlens.models.dataset import Dataset
from truthlens.services.governance.drift import DriftAnalyzer, analyze_drift


def halves(reference: list, current: list, key: str = "x") -> Dataset:
    """Dataset whose first half holds `reference` and second half `current`."""
    return Dataset.from_records([{key: v} for v in reference + current])


# =============================================================================
# SMALL DATASETS
# =============================================================================

@pytest.mark.parametrize("num_rows", [0, 1, 5, 9])
def test_fewer_than_ten_rows_reports_no_drift(num_rows):
    """Below 10 rows: score 100, nothing drifted, whatever the content."""
    rows = [{"x": 1 if i < num_rows // 2 else 1_000_000} for i in range(num_rows)]

    report = analyze_drift(Dataset.from_records(rows))

    assert report.score == 100
    assert report.drifted_features == []


def test_ten_rows_are_analyzed():
    report = analyze_drift(halves([10] * 5, [20] * 5))

    assert len(report.drifted_features) == 1
    metric = report.drifted_features[0]
    assert metric.feature == "x"
    assert metric.score == 1.0
    assert metric.drift_detected is True
    # Penalty: 1.0 × 10
    assert report.score == 90


# =============================================================================
# DRIFT DETECTION
# =============================================================================

def test_stable_means_score_100(stable_rows):
    report = analyze_drift(Dataset.from_records(stable_rows(30)))

    assert report.score == 100
    assert report.drifted_features == []


def test_twenty_percent_change_is_not_drift():
    """The threshold is strict: exactly 0.20 does not count."""
    report = analyze_drift(halves([10] * 5, [12] * 5))

    assert report.drifted_features == []
    assert report.score == 100


def test_zero_reference_mean_uses_unit_denominator():
    report = analyze_drift(halves([0] * 5, [0.5] * 5))

    assert report.drifted_features[0].score == 0.5
    assert report.score == 95


def test_missing_and_text_count_as_zero_in_means():
    """Current half [10, 10, 10, 0, 0] → mean 6 → 40% change."""
    report = analyze_drift(halves([10] * 5, [10, 10, 10, None, "n/a"]))

    assert report.drifted_features[0].score == 0.4
    assert report.score == 96


def test_non_numeric_first_value_skips_feature():
    rows = [{"city": "Leeds" if i == 0 else i * 100, "x": 1} for i in range(20)]

    report = analyze_drift(Dataset.from_records(rows))

    assert report.drifted_features == []


def test_blank_first_value_keeps_feature():
    """Row 0 is null and reads as 0: reference mean 1400 / 15, current 200."""
    rows = [{"income": None}] + [{"income": 100}] * 14 + [{"income": 200}] * 15

    report = analyze_drift(Dataset.from_records(rows))

    assert [m.feature for m in report.drifted_features] == ["income"]
    assert report.drifted_features[0].score == 1.14
    # Penalty: 11.43
    assert report.score == 89


def test_drifted_features_keep_column_order():
    """'small' drifts less than 'big' but comes first in the columns."""
    rows = [
        {"small": 10 if i < 10 else 13, "stable": 5, "big": 10 if i < 10 else 30}
        for i in range(20)
    ]

    report = analyze_drift(Dataset.from_records(rows))

    assert [m.feature for m in report.drifted_features] == ["small", "big"]
    assert [m.score for m in report.drifted_features] == [0.3, 2.0]
    # Penalty: 3 + 20
    assert report.score == 77


def test_score_is_floored_at_zero():
    report = analyze_drift(halves([1] * 10, [50] * 10))

    assert report.drifted_features[0].score == 49.0
    assert report.score == 0


def test_analysis_is_idempotent():
    dataset = Dataset.from_records(
        [{"a": i, "b": (i * 7) % 11, "c": "t"} for i in range(31)]
    )
    analyzer = DriftAnalyzer()

    assert analyzer.analyze(dataset) == analyzer.analyze(dataset)
