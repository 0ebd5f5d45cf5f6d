from pathlib import Path

import pytest

from greenbuttonlogic.types import (
    CodedValue,
    DateTimeInterval,
    FeedMetadata,
    IntervalBlock,
    IntervalReading,
    MeterReading,
    ParsedDocument,
    ReadingType,
    Relationships,
    ServiceCategory,
    UsagePoint,
)

ATOM = "http://www.w3.org/2005/Atom"
ESPI = "http://naesb.org/espi"
BASE = "https://utility.example.com/espi/1_1/resource/Subscription/5"


@pytest.fixture
def data_dir() -> Path:
    return Path(__file__).parent / "data"


@pytest.fixture
def sample_xml(data_dir) -> str:
    return (data_dir / "sample_feed.xml").read_text(encoding="utf-8")


def atom_entry(entry_id: str, body: str = "", related=()) -> str:
    links = "".join(f'<link rel="related" href="{href}"/>' for href in related)
    content = f"<content>{body}</content>" if body else ""
    return f"<entry><id>{entry_id}</id>{links}{content}</entry>"


def atom_feed(*entries: str, feed_id: str = "urn:uuid:feed") -> str:
    return (
        f'<feed xmlns="{ATOM}" xmlns:espi="{ESPI}">'
        f"<id>{feed_id}</id><title>Test Feed</title><updated>2021-01-01T00:00:00Z</updated>"
        + "".join(entries)
        + "</feed>"
    )


@pytest.fixture
def feed_builder():
    """Expose the entry/feed helpers to tests."""

    class Builder:
        entry = staticmethod(atom_entry)
        feed = staticmethod(atom_feed)
        base = BASE

    return Builder


@pytest.fixture
def plain_xml() -> str:
    # same shape as the sample, no namespaces or prefixes anywhere
    return """<?xml version="1.0"?>
<feed>
  <id>plain-feed</id>
  <title>Plain</title>
  <updated>2021-01-01T00:00:00Z</updated>
  <entry>
    <id>up</id>
    <link rel="related" href="/UsagePoint/1/MeterReading"/>
    <content><UsagePoint><ServiceCategory><kind>1</kind></ServiceCategory></UsagePoint></content>
  </entry>
  <entry>
    <id>mr</id>
    <link rel="related" href="/MeterReading/1/IntervalBlock"/>
    <link rel="related" href="/ReadingType/1"/>
    <content><MeterReading/></content>
  </entry>
  <entry>
    <id>rt</id>
    <content><ReadingType><commodity>2</commodity><uom>42</uom><powerOfTenMultiplier>-3</powerOfTenMultiplier></ReadingType></content>
  </entry>
  <entry>
    <id>ib</id>
    <content>
      <IntervalBlock>
        <IntervalReading>
          <timePeriod><duration>3600</duration><start>1609459200</start></timePeriod>
          <value>2500</value>
        </IntervalReading>
      </IntervalBlock>
    </content>
  </entry>
</feed>
"""


@pytest.fixture
def make_doc():
    """
    Build a minimal linked ParsedDocument without going through XML.

    One usage point -> one meter reading -> one reading type -> one block.
    """

    def _make(readings, multiplier=0, with_reading_type=True):
        up = UsagePoint(
            id="up-1",
            service_category=ServiceCategory(kind=0, description="Electricity"),
        )
        mr = MeterReading(id="mr-1")
        ib = IntervalBlock(
            id="ib-1",
            interval=DateTimeInterval(start=1609459200, duration=3600),
            interval_readings=list(readings),
        )
        doc = ParsedDocument(
            metadata=FeedMetadata(
                feed_id="feed-1", feed_title="Feed", updated=None, total_entries=4
            ),
            usage_points={up.id: up},
            meter_readings={mr.id: mr},
            interval_blocks={ib.id: ib},
            relationships=Relationships(
                usage_point_to_meter_readings={"up-1": ["mr-1"]},
                meter_reading_to_interval_blocks={"mr-1": ["ib-1"]},
            ),
        )
        if with_reading_type:
            rt = ReadingType(
                id="rt-1",
                commodity=CodedValue(code=1, description="Electricity"),
                uom=CodedValue(code=72, description="Wh"),
                power_of_ten_multiplier=multiplier,
                interval_length=900,
            )
            doc.reading_types[rt.id] = rt
            doc.relationships.meter_reading_to_reading_types["mr-1"] = ["rt-1"]
        return doc

    return _make


@pytest.fixture
def reading():
    def _reading(value=None, cost=None, start=None, duration=None, flags=None):
        period = None
        if start is not None or duration is not None:
            period = DateTimeInterval(start=start, duration=duration)
        return IntervalReading(
            value=value, cost=cost, time_period=period, quality_flags=flags
        )

    return _reading
