from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from . import canon


@dataclass
class EncoderConfig:
    # Data quality: warn when null or empty cells exceed this share of all cells
    quality_warning_pct: float = canon.QUALITY_WARNING_PCT


@dataclass
class ExportOptions:
    filename: str = canon.DEFAULT_FILENAME
    include_metadata_comments: bool = False
    preview_rows: int = canon.DEFAULT_PREVIEW_ROWS
    headers: Optional[list[str]] = None  # None -> keys of the first row
    encoder: EncoderConfig = field(default_factory=EncoderConfig)


def default_options() -> ExportOptions:
    return ExportOptions()
