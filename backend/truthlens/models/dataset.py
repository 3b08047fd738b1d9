"""
Dataset — the immutable, typed view of an uploaded table.

WHAT THIS IS:
Uploaded rows arrive as plain dicts of string -> (string | number | null).
Before any statistics run, every value is turned into a tagged Cell:

- Number:  a finite numeric value (ints, floats, bools, numeric strings,
           whitespace-only strings read as 0)
- Text:    anything that is present but not numeric
- Missing: None or the empty string (or a key absent from the row)

Analyzers branch on the cell type instead of re-coercing raw values,
so "42", 42 and 42.0 always mean the same thing and "abc" is never
silently read as a number.

USAGE:
    dataset = Dataset.from_records([
        {"age": 34, "income": "52000", "city": "Leeds"},
        {"age": None, "income": "61000", "city": "York"},
    ])
    dataset.feature_keys        # ("age", "income", "city")
    dataset.cell(1, "age")      # MISSING
    reference, current = dataset.split()
"""

import json
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Union


@dataclass(frozen=True)
class Number:
    """A finite numeric cell."""
    value: float


@dataclass(frozen=True)
class Text:
    """A present, non-numeric cell."""
    value: str


@dataclass(frozen=True)
class Missing:
    """An absent cell (null, empty string, or key not in the row)."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = Missing()

Cell = Union[Number, Text, Missing]


def _parse_number(text: str) -> float | None:
    """Parse a decimal string the way a spreadsheet would, or return None."""
    stripped = text.strip()
    # A blank cell in a spreadsheet formula reads as 0
    if not stripped:
        return 0.0
    # float() accepts "1_000", "nan" and "inf"; none of those are data values
    if "_" in stripped:
        return None
    try:
        number = float(stripped)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def to_cell(value: Any) -> Cell:
    """
    Convert a raw row value into a tagged Cell.

    Examples:
        to_cell(None)      -> MISSING
        to_cell("")        -> MISSING
        to_cell(" 12.5 ")  -> Number(12.5)
        to_cell("   ")     -> Number(0.0)
        to_cell(True)      -> Number(1.0)
        to_cell("n/a")     -> Text("n/a")
    """
    if value is None:
        return MISSING
    if isinstance(value, (Number, Text, Missing)):
        return value
    if isinstance(value, bool):
        return Number(float(value))
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # An int too large for a float is not a usable measurement
            return Text(str(value))
        return Number(number) if math.isfinite(number) else Text(str(value))
    if isinstance(value, str):
        if value == "":
            return MISSING
        number = _parse_number(value)
        return Number(number) if number is not None else Text(value)
    return Text(str(value))


def numeric_or_zero(cell: Cell) -> float:
    """Numeric value of a cell, reading Text and Missing as 0."""
    return cell.value if isinstance(cell, Number) else 0.0


def _to_primitive(value: Any) -> Any:
    """Raw value made JSON-safe for the context sample."""
    if isinstance(value, Number):
        return value.value
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Missing):
        return None
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class Dataset:
    """
    An ordered, immutable sequence of rows.

    The first row's keys define the analyzed feature set. Later rows may
    carry extra keys (ignored) or lack some (read as Missing).
    """

    def __init__(self, records: Iterable[Mapping[str, Any]]):
        raw = tuple(MappingProxyType(dict(record)) for record in records)
        self._records = raw
        self._rows = tuple(
            MappingProxyType({key: to_cell(value) for key, value in record.items()})
            for record in raw
        )
        self._feature_keys = tuple(raw[0].keys()) if raw else ()

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Dataset":
        return cls(records)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    def __repr__(self) -> str:
        return f"Dataset(rows={len(self)}, features={list(self._feature_keys)})"

    @property
    def rows(self) -> tuple[Mapping[str, Cell], ...]:
        return self._rows

    @property
    def records(self) -> tuple[Mapping[str, Any], ...]:
        """The raw records as they were loaded."""
        return self._records

    @property
    def feature_keys(self) -> tuple[str, ...]:
        return self._feature_keys

    @property
    def is_empty(self) -> bool:
        return not self._rows

    def cell(self, index: int, key: str) -> Cell:
        return self._rows[index].get(key, MISSING)

    def column(self, key: str) -> list[Cell]:
        """All cells for one feature, in row order."""
        return [row.get(key, MISSING) for row in self._rows]

    def split(self) -> tuple["Dataset", "Dataset"]:
        """
        Split at the midpoint into (reference, current).

        reference = rows[0 : n // 2], current = rows[n // 2 : n].
        Order is preserved: the first half is the "earlier" population.
        """
        midpoint = len(self) // 2
        return (
            Dataset(self._records[:midpoint]),
            Dataset(self._records[midpoint:]),
        )

    def context_sample(self, num_rows: int) -> str:
        """JSON array of the first num_rows raw records."""
        sample = [
            {key: _to_primitive(value) for key, value in record.items()}
            for record in self._records[:num_rows]
        ]
        return json.dumps(sample)
