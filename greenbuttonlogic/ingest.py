from __future__ import annotations
import logging
import xml.etree.ElementTree as ET
from typing import Callable, Optional

from . import canon, utils
from .exceptions import GreenButtonParseError, InvalidFeedError, MalformedXmlError
from .types import (
    CodedValue,
    DateTimeInterval,
    FeedMetadata,
    IntervalBlock,
    IntervalReading,
    Links,
    LocalTimeParameters,
    MeterReading,
    ParsedDocument,
    ParsedEntity,
    ReadingType,
    Relationships,
    ServiceCategory,
    SummaryMeasurement,
    UsagePoint,
    UsageSummary,
)

logger = logging.getLogger(__name__)


def _extract_links(entry: ET.Element) -> Links:
    links: Links = {}
    for link in utils.iter_local(entry, "link"):
        rel = link.get("rel")
        href = link.get("href")
        if rel and href:
            links.setdefault(rel, []).append(href)
    return links


def _interval(el: Optional[ET.Element]) -> Optional[DateTimeInterval]:
    if el is None:
        return None
    return DateTimeInterval(
        start=utils.int_of(el, "start"),
        duration=utils.int_of(el, "duration"),
    )


def _coded(text: Optional[str], table) -> Optional[CodedValue]:
    if not text:
        return None
    code = utils.parse_integer(text)
    return CodedValue(code=code, description=utils.describe(code, table))


def _usage_point(el: ET.Element, entry_id: str, links: Links) -> UsagePoint:
    service_category = None
    sc = utils.find_element(el, "ServiceCategory")
    kind = utils.int_of(sc, "kind") if sc is not None else None
    if kind is not None:
        service_category = ServiceCategory(
            kind=kind, description=utils.describe(kind, canon.SERVICE_CATEGORIES)
        )
    return UsagePoint(
        id=entry_id,
        service_category=service_category,
        description=utils.text_of(el, "description") or None,
        links=links,
    )


def _meter_reading(el: ET.Element, entry_id: str, links: Links) -> MeterReading:
    return MeterReading(id=entry_id, links=links)


def _interval_block(el: ET.Element, entry_id: str, links: Links) -> IntervalBlock:
    readings = []
    for r in utils.iter_local(el, "IntervalReading"):
        readings.append(
            IntervalReading(
                value=utils.int_of(r, "value"),
                cost=utils.int_of(r, "cost"),
                time_period=_interval(utils.find_element(r, "timePeriod")),
                quality_flags=utils.text_of(r, "qualityFlags") or None,
            )
        )
    # the block's own <interval> precedes its readings in document order
    return IntervalBlock(
        id=entry_id,
        interval=_interval(utils.find_element(el, "interval")),
        interval_readings=readings,
        links=links,
    )


def _reading_type(el: ET.Element, entry_id: str, links: Links) -> ReadingType:
    multiplier = utils.int_of(el, "powerOfTenMultiplier")
    return ReadingType(
        id=entry_id,
        accumulation_behaviour=utils.int_of(el, "accumulationBehaviour"),
        commodity=_coded(utils.text_of(el, "commodity"), canon.COMMODITY_TYPES),
        currency=utils.int_of(el, "currency"),
        data_qualifier=utils.int_of(el, "dataQualifier"),
        flow_direction=utils.int_of(el, "flowDirection"),
        interval_length=utils.int_of(el, "intervalLength"),
        kind=utils.int_of(el, "kind"),
        phase=utils.int_of(el, "phase"),
        power_of_ten_multiplier=multiplier if multiplier is not None else 0,
        time_attribute=utils.int_of(el, "timeAttribute"),
        uom=_coded(utils.text_of(el, "uom"), canon.UOM_TYPES),
    )


def _local_time_parameters(
    el: ET.Element, entry_id: str, links: Links
) -> LocalTimeParameters:
    return LocalTimeParameters(
        id=entry_id,
        dst_end_rule=utils.text_of(el, "dstEndRule") or None,
        dst_offset=utils.int_of(el, "dstOffset"),
        dst_start_rule=utils.text_of(el, "dstStartRule") or None,
        tz_offset=utils.int_of(el, "tzOffset"),
    )


def _usage_summary(el: ET.Element, entry_id: str, links: Links) -> UsageSummary:
    overall = None
    oc = utils.find_element(el, "overallConsumptionLastPeriod")
    if oc is not None:
        multiplier = utils.int_of(oc, "powerOfTenMultiplier")
        overall = SummaryMeasurement(
            power_of_ten_multiplier=multiplier if multiplier is not None else 0,
            uom=utils.int_of(oc, "uom"),
            value=utils.int_of(oc, "value"),
        )
    return UsageSummary(
        id=entry_id,
        billing_period=_interval(utils.find_element(el, "billingPeriod")),
        bill_last_period=utils.int_of(el, "billLastPeriod"),
        bill_to_date=utils.int_of(el, "billToDate"),
        overall_consumption_last_period=overall,
        currency=utils.int_of(el, "currency"),
    )


Extractor = Callable[[ET.Element, str, Links], ParsedEntity]

# Match order: an entry is classified by the first resource element found.
EXTRACTORS: tuple[tuple[tuple[str, ...], Extractor], ...] = (
    (("UsagePoint",), _usage_point),
    (("MeterReading",), _meter_reading),
    (("IntervalBlock",), _interval_block),
    (("ReadingType",), _reading_type),
    (("LocalTimeParameters",), _local_time_parameters),
    (("UsageSummary", "ElectricPowerUsageSummary"), _usage_summary),
)

_COLLECTIONS = {
    "UsagePoint": "usage_points",
    "MeterReading": "meter_readings",
    "IntervalBlock": "interval_blocks",
    "ReadingType": "reading_types",
    "LocalTimeParameters": "local_time_parameters",
    "UsageSummary": "usage_summaries",
}


def parse_entry(entry: ET.Element) -> Optional[ParsedEntity]:
    """Classify one Atom entry; None when it has no content or no known resource."""
    content = next(utils.iter_local(entry, "content"), None)
    if content is None:
        return None

    entry_id = utils.text_of(entry, "id") or ""
    links = _extract_links(entry)

    for names, extract in EXTRACTORS:
        el = utils.find_any(content, *names)
        if el is not None:
            return extract(el, entry_id, links)
    return None


def _store(doc: ParsedDocument, entity: ParsedEntity) -> None:
    collection = getattr(doc, _COLLECTIONS[entity.resource])
    collection[entity.id] = entity


def _related_to(links: Links, marker: str) -> bool:
    return any(marker in href for href in links.get(canon.RELATED_REL, []))


def build_relationships(doc: ParsedDocument) -> Relationships:
    """
    Infer edges from link presence only.

    A resource with any 'related' href mentioning the target type is linked to
    every resource of that type in the feed; hrefs are not resolved to ids.
    Resources without such a link get no key at all.
    """
    rel = Relationships()

    for up_id, up in doc.usage_points.items():
        if _related_to(up.links, canon.MR_LINK_MARKER):
            rel.usage_point_to_meter_readings[up_id] = list(doc.meter_readings)

    for mr_id, mr in doc.meter_readings.items():
        if _related_to(mr.links, canon.IB_LINK_MARKER):
            rel.meter_reading_to_interval_blocks[mr_id] = list(doc.interval_blocks)

    for mr_id, mr in doc.meter_readings.items():
        if _related_to(mr.links, canon.RT_LINK_MARKER) and doc.reading_types:
            rel.meter_reading_to_reading_types[mr_id] = list(doc.reading_types)

    return rel


def _find_feed(root: ET.Element) -> Optional[ET.Element]:
    if utils.local_name(root.tag) == "feed":
        return root
    return next(utils.iter_local(root, "feed"), None)


def _parse(xml_text: str | bytes) -> ParsedDocument:
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise MalformedXmlError(
            f"{canon.PARSE_ERROR_PREFIX}XML parsing error: {e}"
        ) from e

    feed = _find_feed(root)
    if feed is None:
        raise InvalidFeedError(
            f"{canon.PARSE_ERROR_PREFIX}Invalid Green Button file: No feed element found"
        )

    entries = list(utils.iter_local(feed, "entry"))
    # feed-level fields come before the first entry in a well-formed Atom feed
    metadata = FeedMetadata(
        feed_id=utils.text_of(feed, "id"),
        feed_title=utils.text_of(feed, "title"),
        updated=utils.text_of(feed, "updated"),
        total_entries=len(entries),
    )
    doc = ParsedDocument(metadata=metadata)

    skipped = 0
    for entry in entries:
        entity = parse_entry(entry)
        if entity is None:
            skipped += 1
            continue
        logger.debug("entry %s -> %s", entity.id, entity.resource)
        _store(doc, entity)

    doc.relationships = build_relationships(doc)

    logger.debug(
        "parsed %d entries (%d skipped): %d usage points, %d meter readings, "
        "%d interval blocks, %d reading types",
        len(entries),
        skipped,
        len(doc.usage_points),
        len(doc.meter_readings),
        len(doc.interval_blocks),
        len(doc.reading_types),
    )
    return doc


def parse(xml_text: str | bytes) -> ParsedDocument:
    """
    Parse a Green Button Atom feed into a ParsedDocument.

    Raises MalformedXmlError / InvalidFeedError, or GreenButtonParseError
    wrapping any other failure. Nothing partial is returned.
    """
    try:
        return _parse(xml_text)
    except GreenButtonParseError:
        raise
    except Exception as e:
        raise GreenButtonParseError(f"{canon.PARSE_ERROR_PREFIX}{e}") from e


def parse_file(path) -> ParsedDocument:
    with open(path, "rb") as fh:
        return parse(fh.read())
