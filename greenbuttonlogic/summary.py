from __future__ import annotations
import pandas as pd
from typing import Any, Mapping, Sequence

from . import canon, utils
from .types import PreviewPayload, SummaryPayload


def preview(
    rows: Sequence[Mapping[str, Any]], max_rows: int = canon.DEFAULT_PREVIEW_ROWS
) -> PreviewPayload:
    """First max_rows rows plus the header list; input is left untouched."""
    if not rows:
        return {"headers": [], "rows": [], "total_rows": 0, "is_preview": False}

    total = len(rows)
    return {
        "headers": list(rows[0].keys()),
        "rows": list(rows[:max_rows]),
        "total_rows": total,
        "is_preview": total > max_rows,
    }


def _column(df: pd.DataFrame, name: str) -> pd.Series:
    if name in df.columns:
        return df[name]
    return pd.Series([], dtype="object")


def _distinct_ids(s: pd.Series) -> int:
    s = s.dropna()
    s = s[s.astype(str) != ""]
    return int(s.nunique())


def _numeric_sum(s: pd.Series) -> float:
    # only real numbers count; strings and bools are ignored
    if s.empty:
        return 0.0
    nums = s[s.map(lambda v: isinstance(v, (int, float)) and not isinstance(v, bool))]
    return float(pd.to_numeric(nums).sum()) if len(nums) else 0.0


def summarise(rows: Sequence[Mapping[str, Any]]) -> SummaryPayload:
    """
    Headline numbers for a flattened table.

    Sums the raw 'value' and 'cost' columns (unscaled), counts distinct usage
    points / meter readings, and reports the span of start times.
    """
    if not rows:
        return {
            "total_intervals": 0,
            "usage_points": 0,
            "meter_readings": 0,
            "total_energy_value": 0.0,
            "total_cost": 0.0,
            "date_range": None,
            "commodities": [],
        }

    # object dtype keeps None as None and ints as Python ints
    df = pd.DataFrame(list(rows), dtype=object)

    starts = _column(df, "start_time").dropna()
    starts = starts[starts.astype(str) != ""]
    ts = pd.to_datetime(starts, utc=True, errors="coerce", format="ISO8601").dropna()
    date_range = None
    if len(ts):
        date_range = {
            "min": utils.format_datetime(ts.min().to_pydatetime()),
            "max": utils.format_datetime(ts.max().to_pydatetime()),
        }

    commodities = _column(df, "commodity").dropna()
    commodities = commodities[commodities.astype(str) != ""]

    return {
        "total_intervals": len(rows),
        "usage_points": _distinct_ids(_column(df, "usage_point_id")),
        "meter_readings": _distinct_ids(_column(df, "meter_reading_id")),
        "total_energy_value": _numeric_sum(_column(df, "value")),
        "total_cost": _numeric_sum(_column(df, "cost")),
        "date_range": date_range,
        "commodities": [str(c) for c in commodities.unique()],
    }
