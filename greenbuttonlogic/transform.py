from __future__ import annotations
import pandas as pd
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from . import canon, utils
from .types import (
    FlatRow,
    IntervalReading,
    ParsedDocument,
    ReadingType,
    UsagePoint,
)

_CENTS = Decimal("0.01")


def calculated_cost(cost: Optional[int], power_of_ten: int) -> Optional[str]:
    """
    Subunit cost -> major-unit string with two decimals.

    The multiplier is applied before dividing by the currency subunit.
    """
    scaled = utils.scale(cost, power_of_ten)
    if scaled is None:
        return None
    # ties round away from zero: 0.125 -> "0.13"
    major = Decimal(repr(scaled / canon.CURRENCY_SUBUNITS))
    return f"{major.quantize(_CENTS, rounding=ROUND_HALF_UP):f}"


def _row(
    up_id: str,
    usage_point: UsagePoint,
    mr_id: str,
    ib_id: str,
    rt_id: Optional[str],
    reading_type: Optional[ReadingType],
    reading: IntervalReading,
) -> FlatRow:
    multiplier = reading_type.power_of_ten_multiplier if reading_type else 0
    period = reading.time_period
    start = period.start if period else None
    duration = period.duration if period else None
    end = start + duration if start is not None and duration is not None else None

    return {
        "usage_point_id": up_id,
        "meter_reading_id": mr_id,
        "interval_block_id": ib_id,
        "reading_type_id": rt_id,
        "service_category": (
            usage_point.service_category.description
            if usage_point.service_category
            else None
        ),
        "commodity": (
            reading_type.commodity.description
            if reading_type and reading_type.commodity
            else None
        ),
        "uom": (
            reading_type.uom.description if reading_type and reading_type.uom else None
        ),
        "power_multiplier": (
            reading_type.power_of_ten_multiplier if reading_type else None
        ),
        "start_time": utils.format_timestamp(start),
        "duration": duration,
        "end_time": utils.format_timestamp(end),
        "value": reading.value,
        "cost": reading.cost,
        "quality_flags": reading.quality_flags,
        "interval_length": reading_type.interval_length if reading_type else None,
        "calculated_value": utils.scale(reading.value, multiplier),
        "calculated_cost": calculated_cost(reading.cost, multiplier),
    }


def flatten(doc: ParsedDocument) -> list[FlatRow]:
    """
    Denormalise a parsed feed into one row per interval reading.

    Order: usage point -> related meter reading -> related interval block ->
    reading within block. Only the first related reading type is joined.
    Dangling relationship ids are skipped.
    """
    rel = doc.relationships
    rows: list[FlatRow] = []

    for up_id, usage_point in doc.usage_points.items():
        for mr_id in rel.usage_point_to_meter_readings.get(up_id, []):
            if mr_id not in doc.meter_readings:
                continue

            rt_ids = rel.meter_reading_to_reading_types.get(mr_id, [])
            rt_id = rt_ids[0] if rt_ids else None
            reading_type = doc.reading_types.get(rt_id) if rt_id else None

            for ib_id in rel.meter_reading_to_interval_blocks.get(mr_id, []):
                block = doc.interval_blocks.get(ib_id)
                if block is None:
                    continue
                for reading in block.interval_readings:
                    rows.append(
                        _row(
                            up_id,
                            usage_point,
                            mr_id,
                            ib_id,
                            rt_id,
                            reading_type,
                            reading,
                        )
                    )
    return rows


def flatten_frame(doc: ParsedDocument) -> pd.DataFrame:
    """
    flatten() as a DataFrame with the canonical column order.

    start_time / end_time stay as ISO strings; callers wanting datetimes can
    pd.to_datetime them.
    """
    rows = flatten(doc)
    if not rows:
        return pd.DataFrame(columns=list(canon.CSV_HEADERS))
    return pd.DataFrame.from_records(rows, columns=list(canon.CSV_HEADERS))
