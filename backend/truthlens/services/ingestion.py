"""
Dataset Ingestion Service.

WHAT THIS DOES:
Turns an uploaded CSV or JSON file into a Dataset the audit engine can use.
The engine itself never parses files; this is the collaborator that does.

SUPPORTED FORMATS:
- .json: a top-level array of objects, e.g. [{"age": 41}, {"age": 37}]
- .csv: first line is the header; blank lines are skipped; every value is
  trimmed; a row shorter than the header leaves the remaining columns empty

CSV values stay strings ("41"); the Dataset decides what is numeric.

USAGE:
    dataset = parse_dataset(uploaded_bytes, "customers.csv")
"""

import csv
import io
import json
import logging

from truthlens.models.dataset import Dataset

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".json")


class DatasetParseError(ValueError):
    """The uploaded file could not be turned into a dataset."""


def _is_blank(line: list[str]) -> bool:
    """True for an empty or whitespace-only CSV line (",," is not blank)."""
    return not line or (len(line) == 1 and not line[0].strip())


class DatasetIngestor:
    """Parses uploaded files into Datasets."""

    def parse(self, content: bytes | str, file_name: str) -> Dataset:
        """
        Parse file content according to its extension.

        Args:
            content: Raw file content
            file_name: Original file name (used to pick the format)

        Raises:
            DatasetParseError: unsupported type, bad encoding, or malformed content
        """
        text = self._decode(content, file_name)
        lowered = file_name.lower()

        if lowered.endswith(".json"):
            records = self._parse_json(text, file_name)
        elif lowered.endswith(".csv"):
            records = self._parse_csv(text)
        else:
            raise DatasetParseError(
                f"Unsupported file type: '{file_name}' "
                f"(expected one of {', '.join(SUPPORTED_EXTENSIONS)})"
            )

        dataset = Dataset.from_records(records)
        logger.info(f"Parsed '{file_name}': {dataset!r}")
        return dataset

    def _decode(self, content: bytes | str, file_name: str) -> str:
        if isinstance(content, str):
            return content
        try:
            # utf-8-sig drops the BOM spreadsheet exports often start with
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DatasetParseError(f"'{file_name}' is not valid UTF-8 text") from e

    def _parse_json(self, text: str, file_name: str) -> list[dict]:
        try:
            data = json.loads(text)
        except ValueError as e:
            raise DatasetParseError(f"Invalid JSON in '{file_name}': {e}") from e

        if not isinstance(data, list):
            raise DatasetParseError("JSON datasets must be an array of objects")
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                raise DatasetParseError(
                    f"JSON datasets must be an array of objects (item {i} is "
                    f"{type(item).__name__})"
                )
        return data

    def _parse_csv(self, text: str) -> list[dict]:
        lines = [line for line in csv.reader(io.StringIO(text)) if not _is_blank(line)]
        if not lines:
            return []

        headers = [h.strip() for h in lines[0]]
        records = []
        for values in lines[1:]:
            record = {}
            for i, header in enumerate(headers):
                record[header] = values[i].strip() if i < len(values) else None
            records.append(record)
        return records


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_dataset(content: bytes | str, file_name: str) -> Dataset:
    """
    Convenience function to parse an uploaded file.

    Example:
        dataset = parse_dataset(b"age,income\\n41,52000\\n", "customers.csv")
    """
    ingestor = DatasetIngestor()
    return ingestor.parse(content, file_name)
