# greenbuttonlogic/utils.py
from __future__ import annotations
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Iterator, Mapping, Optional

from . import canon

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_integer(text: Optional[str]) -> Optional[int]:
    """
    Lenient integer decode for ESPI fields.

    Reads an optional sign and the leading digits ("12.7" -> 12, "42kWh" -> 42).
    Absent or unparseable text gives None instead of raising.
    """
    if text is None:
        return None
    m = _LEADING_INT.match(text)
    if m is None:
        return None
    return int(m.group(1))


def local_name(tag: object) -> str:
    """'{ns}name' -> 'name'. Comments/PIs have non-string tags."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def iter_local(parent: ET.Element, name: str) -> Iterator[ET.Element]:
    """Descendants of parent (not parent itself) whose local name matches."""
    for el in parent.iter():
        if el is not parent and local_name(el.tag) == name:
            yield el


def find_element(parent: ET.Element, name: str) -> Optional[ET.Element]:
    """
    First descendant matching name, trying in order:
      - unprefixed element
      - element in the ESPI namespace
      - any element with that local name
    """
    found = parent.find(f".//{name}")
    if found is None:
        found = parent.find(f".//{{{canon.ESPI_NS}}}{name}")
    if found is None:
        found = next(iter_local(parent, name), None)
    return found


def find_any(parent: ET.Element, *names: str) -> Optional[ET.Element]:
    for name in names:
        el = find_element(parent, name)
        if el is not None:
            return el
    return None


def text_of(parent: ET.Element, name: str) -> Optional[str]:
    el = find_element(parent, name)
    if el is None:
        return None
    return "".join(el.itertext()).strip()


def int_of(parent: ET.Element, name: str) -> Optional[int]:
    return parse_integer(text_of(parent, name))


def describe(code: Optional[int], table: Mapping[int, str]) -> str:
    if code is None:
        return canon.UNKNOWN
    return table.get(code, canon.UNKNOWN)


def format_timestamp(epoch_seconds: Optional[int]) -> Optional[str]:
    """Epoch seconds -> '2021-01-01T00:00:00.000Z'; None when unrepresentable."""
    if epoch_seconds is None:
        return None
    try:
        dt = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        # outside the platform's datetime range
        return None
    return format_datetime(dt)


def format_datetime(dt: datetime) -> str:
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def scale(raw: Optional[int], power_of_ten: int) -> Optional[float]:
    """raw x 10^power_of_ten, None passes through."""
    if raw is None:
        return None
    return raw * 10**power_of_ten
