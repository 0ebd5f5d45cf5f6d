from __future__ import annotations
from types import MappingProxyType
from typing import Final, Mapping

ESPI_NS: Final[str] = "http://naesb.org/espi"
PARSE_ERROR_PREFIX: Final[str] = "Failed to parse Green Button XML: "

UNKNOWN: Final[str] = "Unknown"

# ESPI commodity kind -> label
COMMODITY_TYPES: Mapping[int, str] = MappingProxyType(
    {
        0: "Unknown",
        1: "Electricity",
        2: "Gas",
        3: "Water",
        4: "Time",
        5: "Heat",
        6: "Cooling",
        7: "Carbon",
        8: "Carbon dioxide",
        9: "Nitrogen",
        10: "Hydrogen",
        11: "Compressed air",
    }
)

# ESPI unit-of-measure code -> symbol
UOM_TYPES: Mapping[int, str] = MappingProxyType(
    {
        5: "A",
        29: "V",
        31: "J",
        38: "W",
        42: "m³",
        72: "Wh",
        73: "kWh",
        106: "Ah",
        119: "ft³",
        122: "gal",
        132: "VAh",
        140: "W",
        159: "Wh",
        169: "VAR",
        174: "VAh",
    }
)

SERVICE_CATEGORIES: Mapping[int, str] = MappingProxyType(
    {
        0: "Electricity",
        1: "Gas",
        2: "Water",
        3: "Time",
        4: "Heat",
        5: "Cooling",
    }
)

# Substrings in a "related" href that imply an association with a resource type
MR_LINK_MARKER: Final[str] = "MeterReading"
IB_LINK_MARKER: Final[str] = "IntervalBlock"
RT_LINK_MARKER: Final[str] = "ReadingType"

RELATED_REL: Final[str] = "related"

# Output table
CSV_HEADERS: Final[tuple[str, ...]] = (
    "usage_point_id",
    "meter_reading_id",
    "interval_block_id",
    "reading_type_id",
    "service_category",
    "commodity",
    "uom",
    "power_multiplier",
    "start_time",
    "duration",
    "end_time",
    "value",
    "cost",
    "quality_flags",
    "interval_length",
    "calculated_value",
    "calculated_cost",
)

DEFAULT_FILENAME: Final[str] = "green_button_data.csv"
FILENAME_PREFIX: Final[str] = "green_button_data_"
DEFAULT_PREVIEW_ROWS: Final[int] = 10
QUALITY_WARNING_PCT: Final[float] = 10.0

# Currency subunits (cents) per major unit
CURRENCY_SUBUNITS: Final[int] = 100
