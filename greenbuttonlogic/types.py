from __future__ import annotations
from typing import TypedDict, Literal, List, Dict, Optional, Union
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

Links = Dict[str, List[str]]


## ESPI resources
class CodedValue(BaseModel):
    code: int | None
    description: str
    model_config = {"frozen": True}


class ServiceCategory(BaseModel):
    kind: int
    description: str
    model_config = {"frozen": True}


class DateTimeInterval(BaseModel):
    start: int | None = None  # epoch seconds
    duration: int | None = None  # seconds
    model_config = {"frozen": True}


class UsagePoint(BaseModel):
    resource: Literal["UsagePoint"] = "UsagePoint"
    id: str
    service_category: ServiceCategory | None = None
    description: str | None = None
    links: Links = Field(default_factory=dict)
    model_config = {"frozen": True}


class MeterReading(BaseModel):
    """Container resource; only carries links to blocks and reading types."""

    resource: Literal["MeterReading"] = "MeterReading"
    id: str
    links: Links = Field(default_factory=dict)
    model_config = {"frozen": True}


class ReadingType(BaseModel):
    """How the raw values of a meter reading should be interpreted."""

    resource: Literal["ReadingType"] = "ReadingType"
    id: str
    accumulation_behaviour: int | None = None
    commodity: CodedValue | None = None
    currency: int | None = None
    data_qualifier: int | None = None
    flow_direction: int | None = None
    interval_length: int | None = None  # seconds
    kind: int | None = None
    phase: int | None = None
    power_of_ten_multiplier: int = 0
    time_attribute: int | None = None
    uom: CodedValue | None = None
    model_config = {"frozen": True}


class IntervalReading(BaseModel):
    value: int | None = None
    cost: int | None = None  # smallest currency subunit
    time_period: DateTimeInterval | None = None
    quality_flags: str | None = None
    model_config = {"frozen": True}


class IntervalBlock(BaseModel):
    resource: Literal["IntervalBlock"] = "IntervalBlock"
    id: str
    interval: DateTimeInterval | None = None
    interval_readings: list[IntervalReading] = Field(default_factory=list)
    links: Links = Field(default_factory=dict)
    model_config = {"frozen": True}


class LocalTimeParameters(BaseModel):
    resource: Literal["LocalTimeParameters"] = "LocalTimeParameters"
    id: str
    dst_end_rule: str | None = None
    dst_offset: int | None = None
    dst_start_rule: str | None = None
    tz_offset: int | None = None
    model_config = {"frozen": True}


class SummaryMeasurement(BaseModel):
    power_of_ten_multiplier: int = 0
    uom: int | None = None
    value: int | None = None
    model_config = {"frozen": True}


class UsageSummary(BaseModel):
    resource: Literal["UsageSummary"] = "UsageSummary"
    id: str
    billing_period: DateTimeInterval | None = None
    bill_last_period: int | None = None
    bill_to_date: int | None = None
    overall_consumption_last_period: SummaryMeasurement | None = None
    currency: int | None = None
    model_config = {"frozen": True}


ParsedEntity = Union[
    UsagePoint,
    MeterReading,
    IntervalBlock,
    ReadingType,
    LocalTimeParameters,
    UsageSummary,
]


## Parsed document
@dataclass(frozen=True)
class FeedMetadata:
    feed_id: Optional[str]
    feed_title: Optional[str]
    updated: Optional[str]
    total_entries: int = 0


@dataclass
class Relationships:
    usage_point_to_meter_readings: Dict[str, List[str]] = field(default_factory=dict)
    meter_reading_to_interval_blocks: Dict[str, List[str]] = field(
        default_factory=dict
    )
    meter_reading_to_reading_types: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class ParsedDocument:
    """
    Everything recovered from one feed.

    Collections are keyed by entry id and keep document order.
    """

    metadata: FeedMetadata
    usage_points: Dict[str, UsagePoint] = field(default_factory=dict)
    meter_readings: Dict[str, MeterReading] = field(default_factory=dict)
    interval_blocks: Dict[str, IntervalBlock] = field(default_factory=dict)
    reading_types: Dict[str, ReadingType] = field(default_factory=dict)
    local_time_parameters: Dict[str, LocalTimeParameters] = field(
        default_factory=dict
    )
    usage_summaries: Dict[str, UsageSummary] = field(default_factory=dict)
    relationships: Relationships = field(default_factory=Relationships)


## Output payloads
class FlatRow(TypedDict):
    usage_point_id: str
    meter_reading_id: str
    interval_block_id: str
    reading_type_id: Optional[str]
    service_category: Optional[str]
    commodity: Optional[str]
    uom: Optional[str]
    power_multiplier: Optional[int]
    start_time: Optional[str]
    duration: Optional[int]
    end_time: Optional[str]
    value: Optional[int]
    cost: Optional[int]
    quality_flags: Optional[str]
    interval_length: Optional[int]
    calculated_value: Optional[float]
    calculated_cost: Optional[str]


class PreviewPayload(TypedDict):
    headers: List[str]
    rows: List[dict]
    total_rows: int
    is_preview: bool


class ValidationStats(TypedDict):
    total_rows: int
    total_columns: int
    empty_values: int
    null_values: int


class ValidationReport(TypedDict):
    is_valid: bool
    errors: List[str]
    warnings: List[str]
    stats: ValidationStats


class DateRange(TypedDict):
    min: str
    max: str


class SummaryPayload(TypedDict):
    total_intervals: int
    usage_points: int
    meter_readings: int
    total_energy_value: float
    total_cost: float
    date_range: Optional[DateRange]
    commodities: List[str]


class ExportStats(TypedDict):
    total_rows: int
    total_columns: int
    file_size: int


class ExportResult(TypedDict):
    success: bool
    csv_content: Optional[str]
    filename: Optional[str]
    stats: Optional[ExportStats]
    validation: Optional[ValidationReport]
    error: Optional[str]
