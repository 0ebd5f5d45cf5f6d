from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Optional

from . import exceptions
from .config import EncoderConfig
from .types import ValidationReport


def _report() -> ValidationReport:
    return {
        "is_valid": True,
        "errors": [],
        "warnings": [],
        "stats": {
            "total_rows": 0,
            "total_columns": 0,
            "empty_values": 0,
            "null_values": 0,
        },
    }


def _fail(report: ValidationReport, message: str) -> ValidationReport:
    report["is_valid"] = False
    report["errors"].append(message)
    return report


def validate_rows(
    rows: Any, config: Optional[EncoderConfig] = None
) -> ValidationReport:
    """
    Check flattened rows before encoding.

    Structural problems (no data, not a list, first row not a mapping) make the
    report invalid. Ragged or non-mapping later rows and high null/empty
    density only add warnings.
    """
    config = config or EncoderConfig()
    report = _report()

    if rows is None:
        return _fail(report, "No data provided")
    if not isinstance(rows, (list, tuple)):
        return _fail(report, "Data must be a list of rows")
    if len(rows) == 0:
        return _fail(report, "Data is empty")

    stats = report["stats"]
    stats["total_rows"] = len(rows)

    first = rows[0]
    if not isinstance(first, Mapping):
        return _fail(report, "Data rows must be mappings")

    headers = list(first.keys())
    stats["total_columns"] = len(headers)

    empty = 0
    nulls = 0
    for i, row in enumerate(rows, start=1):
        if not isinstance(row, Mapping):
            report["warnings"].append(f"Row {i} is not a mapping")
            continue
        if len(row) != len(headers):
            report["warnings"].append(
                f"Row {i} has {len(row)} columns, expected {len(headers)}"
            )
        for h in headers:
            value = row.get(h)
            if value is None:
                nulls += 1
            elif str(value).strip() == "":
                empty += 1

    stats["empty_values"] = empty
    stats["null_values"] = nulls

    total_cells = stats["total_rows"] * stats["total_columns"]
    if total_cells:
        empty_pct = empty / total_cells * 100.0
        null_pct = nulls / total_cells * 100.0
        if empty_pct > config.quality_warning_pct:
            report["warnings"].append(f"{empty_pct:.1f}% of values are empty")
        if null_pct > config.quality_warning_pct:
            report["warnings"].append(f"{null_pct:.1f}% of values are null")

    return report


def assert_valid(rows: Any, config: Optional[EncoderConfig] = None) -> ValidationReport:
    """validate_rows(), raising ValidationFailure when the report is invalid."""
    report = validate_rows(rows, config)
    exceptions.require(
        report["is_valid"],
        f"Data validation failed: {', '.join(report['errors'])}",
        exceptions.ValidationFailure,
    )
    return report
