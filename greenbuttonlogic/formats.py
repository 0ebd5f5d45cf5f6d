from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from . import canon
from .exceptions import EmptyDataError, require

_QUOTE_TRIGGERS = (",", '"', "\n", "\r")


def needs_quoting(value: str) -> bool:
    """Delimiters, quotes, line breaks, or surrounding whitespace."""
    if any(ch in value for ch in _QUOTE_TRIGGERS):
        return True
    return value != value.strip()


def number_text(x: float) -> str:
    """
    Shortest round-trip text for a float, without trailing '.0'.

    Integral values print as integers (2.0 -> "2"); exponents are kept only
    below 1e-6 or from 1e21 up, without zero padding (1e-07 -> "1e-7").
    """
    if x.is_integer() and abs(x) < 1e21:
        return str(int(x))
    text = repr(x)
    if "e" not in text:
        return text
    mantissa, exp = text.split("e")
    power = int(exp)
    if -7 < power < 21:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def escape_field(value: Any) -> str:
    if value is None:
        return ""
    s = number_text(value) if isinstance(value, float) else str(value)
    if needs_quoting(s):
        return '"' + s.replace('"', '""') + '"'
    return s


def format_row(values: Sequence[Any]) -> str:
    return ",".join(escape_field(v) for v in values)


def resolve_headers(
    rows: Sequence[Mapping[str, Any]], headers: Optional[Sequence[str]] = None
) -> list[str]:
    if headers:
        return list(headers)
    first = list(rows[0].keys()) if rows else []
    return first or list(canon.CSV_HEADERS)


def to_csv(
    rows: Sequence[Mapping[str, Any]], headers: Optional[Sequence[str]] = None
) -> str:
    """
    Encode rows as CSV text.

    Header order: explicit headers, else the first row's keys, else the
    canonical column list. Missing keys and None become empty fields. Lines are
    joined with '\\n' and there is no trailing newline.
    """
    require(bool(rows), "No data provided for CSV conversion", EmptyDataError)

    cols = resolve_headers(rows, headers)
    lines = [format_row(cols)]
    for row in rows:
        lines.append(format_row([row.get(c) for c in cols]))
    return "\n".join(lines)
