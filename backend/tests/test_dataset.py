"""
Tests for the Dataset model and its tagged cells.

Run with: pytest backend/tests/test_dataset.py -v
"""

import json

import pytest

from truthlens.models.dataset import (
    MISSING,
    Dataset,
    Number,
    Text,
    numeric_or_zero,
    to_cell,
)


# =============================================================================
# CELL COERCION
# =============================================================================

@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, MISSING),
        ("", MISSING),
        (42, Number(42.0)),
        (3.5, Number(3.5)),
        (" 12.5 ", Number(12.5)),
        ("   ", Number(0.0)),
        ("-7", Number(-7.0)),
        ("1e3", Number(1000.0)),
        (True, Number(1.0)),
        ("n/a", Text("n/a")),
        ("abc", Text("abc")),
        ("1_000", Text("1_000")),
        ("nan", Text("nan")),
        ("inf", Text("inf")),
        (float("inf"), Text("inf")),
        (10**400, Text(str(10**400))),
    ],
)
def test_to_cell(raw, expected):
    assert to_cell(raw) == expected


def test_numeric_or_zero_reads_text_and_missing_as_zero():
    assert numeric_or_zero(Number(4.0)) == 4.0
    assert numeric_or_zero(Text("x")) == 0.0
    assert numeric_or_zero(MISSING) == 0.0


# =============================================================================
# DATASET
# =============================================================================

def test_feature_keys_come_from_first_row():
    dataset = Dataset.from_records([
        {"a": 1, "b": 2},
        {"a": 3, "b": 4, "extra": 5},
    ])
    assert dataset.feature_keys == ("a", "b")


def test_absent_key_reads_as_missing():
    dataset = Dataset.from_records([{"a": 1, "b": 2}, {"a": 3}])
    assert dataset.cell(1, "b") is MISSING
    assert dataset.column("b") == [Number(2.0), MISSING]


def test_empty_dataset():
    dataset = Dataset.from_records([])
    assert len(dataset) == 0
    assert dataset.is_empty
    assert dataset.feature_keys == ()


@pytest.mark.parametrize("num_rows", [10, 11, 25, 30])
def test_split_at_midpoint(num_rows):
    """reference = rows[0 : n // 2], current = rows[n // 2 : n]."""
    dataset = Dataset.from_records([{"i": i} for i in range(num_rows)])
    reference, current = dataset.split()

    midpoint = num_rows // 2
    assert [c.value for c in reference.column("i")] == list(range(midpoint))
    assert [c.value for c in current.column("i")] == list(range(midpoint, num_rows))


def test_dataset_is_immutable():
    records = [{"a": 1}]
    dataset = Dataset.from_records(records)

    # Mutating the caller's list does not leak in
    records[0]["a"] = 999
    assert dataset.cell(0, "a") == Number(1.0)

    with pytest.raises(TypeError):
        dataset.rows[0]["a"] = Number(2.0)
    with pytest.raises(TypeError):
        dataset.records[0]["a"] = 2


def test_context_sample_is_json_of_leading_rows():
    dataset = Dataset.from_records([{"i": i, "note": None} for i in range(20)])

    sample = json.loads(dataset.context_sample(15))

    assert len(sample) == 15
    assert sample[0] == {"i": 0, "note": None}
    assert sample[-1]["i"] == 14


def test_int_too_large_for_float_is_text():
    huge = 10**400
    dataset = Dataset.from_records([{"x": huge}] + [{"x": i} for i in range(5)])

    assert dataset.cell(0, "x") == Text(str(huge))
    assert dataset.cell(1, "x") == Number(0.0)
    # Raw value still serializes into the context sample
    assert json.loads(dataset.context_sample(1)) == [{"x": huge}]
