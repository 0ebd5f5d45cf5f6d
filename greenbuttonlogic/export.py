from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Optional

from . import canon, formats, transform, utils, validate
from .config import ExportOptions
from .exceptions import GreenButtonError
from .types import ExportResult, FeedMetadata

logger = logging.getLogger(__name__)


def default_filename(now: Optional[datetime] = None) -> str:
    """green_button_data_<UTC timestamp, colons as dashes>.csv"""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{canon.FILENAME_PREFIX}{stamp}.csv"


def metadata_comments(
    metadata: FeedMetadata, row_count: int, generated: Optional[datetime] = None
) -> list[str]:
    generated = generated or datetime.now(timezone.utc)
    return [
        "# Green Button Data Export",
        f"# Generated: {utils.format_datetime(generated)}",
        f"# Feed ID: {metadata.feed_id or 'N/A'}",
        f"# Feed Title: {metadata.feed_title or 'N/A'}",
        f"# Total Entries: {metadata.total_entries or 0}",
        f"# Data Rows: {row_count}",
        "#",
    ]


def _failure(message: str) -> ExportResult:
    return {
        "success": False,
        "csv_content": None,
        "filename": None,
        "stats": None,
        "validation": None,
        "error": message,
    }


def export_data(doc, options: Optional[ExportOptions] = None) -> ExportResult:
    """
    flatten -> validate -> to_csv, with an optional '#' comment header.

    Failures come back as {'success': False, 'error': ...} with no CSV.
    """
    options = options or ExportOptions()
    try:
        rows = transform.flatten(doc)
        report = validate.assert_valid(rows, options.encoder)
        for w in report["warnings"]:
            logger.warning("export validation: %s", w)

        content = formats.to_csv(rows, options.headers)
        if options.include_metadata_comments:
            lines = metadata_comments(doc.metadata, len(rows))
            content = "\n".join(lines) + "\n" + content

    except GreenButtonError as e:
        logger.info("export failed: %s", e)
        return _failure(str(e))
    except Exception as e:
        logger.exception("unexpected export failure")
        return _failure(str(e))

    logger.info("exported %d rows to %s", len(rows), options.filename)
    return {
        "success": True,
        "csv_content": content,
        "filename": options.filename,
        "stats": {
            "total_rows": len(rows),
            "total_columns": len(rows[0]),
            "file_size": len(content.encode("utf-8")),
        },
        "validation": report,
        "error": None,
    }
