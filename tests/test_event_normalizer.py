"""Unit tests for EventNormalizer."""
from datetime import datetime
from unittest.mock import patch

import pytest

from processor.event_normalizer import EventNormalizer, parse_ical_events
from processor.models import Event


@pytest.fixture
def sample_ics():
    """A feed with one full event and one date-only event."""
    return (
        "BEGIN:VCALENDAR\r\n"
        "VERSION:2.0\r\n"
        "PRODID:-//Booked.net//Calendar//ES\r\n"
        "BEGIN:VEVENT\r\n"
        "UID:abc123\r\n"
        "SUMMARY:Corte\r\n"
        "DESCRIPTION:Cliente nuevo\\, dos niños\\nLlamar antes\r\n"
        "DTSTART:20260116T100000Z\r\n"
        "DTEND:20260116T110000Z\r\n"
        "LOCATION:Sede Norte\r\n"
        "STATUS:TENTATIVE\r\n"
        "END:VEVENT\r\n"
        "BEGIN:VEVENT\r\n"
        "UID:def456\r\n"
        "SUMMARY:Revisión\r\n"
        "DTSTART;VALUE=DATE:20260117\r\n"
        "END:VEVENT\r\n"
        "END:VCALENDAR\r\n"
    )


class TestEventNormalizer:
    """Test cases for EventNormalizer class."""

    def test_normalize_text_valid_events(self, sample_ics):
        """Test normalizing a feed of valid events."""
        normalizer = EventNormalizer()

        result = normalizer.normalize_text(sample_ics)

        assert result.blocks_found == 2
        assert result.blocks_skipped == 0
        assert len(result.events) == 2

        event = result.events[0]
        assert event.id == "abc123"
        assert event.title == "Corte"
        assert event.description == "Cliente nuevo, dos niños\nLlamar antes"
        assert event.start_date == datetime(2026, 1, 16, 10, 0)
        assert event.end_date == datetime(2026, 1, 16, 11, 0)
        assert event.location == "Sede Norte"
        assert event.status == "TENTATIVE"

    def test_optional_fields_default(self, sample_ics):
        """Test defaults for absent optional properties."""
        normalizer = EventNormalizer()

        event = normalizer.normalize_text(sample_ics).events[1]

        assert event.id == "def456"
        assert event.title == "Revisión"
        assert event.start_date == datetime(2026, 1, 17, 0, 0)
        assert event.description is None
        assert event.end_date is None
        assert event.location is None
        assert event.status == "CONFIRMED"

    def test_missing_summary_is_dropped(self):
        """Test that a block without SUMMARY is excluded."""
        normalizer = EventNormalizer()
        blocks = ["\nUID:1\nDTSTART:20260116T100000Z\n"]

        result = normalizer.normalize_blocks(blocks)

        assert result.events == []
        assert result.blocks_found == 1
        assert result.blocks_skipped == 1

    def test_missing_dtstart_is_dropped(self):
        """Test that a block without DTSTART is excluded."""
        normalizer = EventNormalizer()

        result = normalizer.normalize_blocks(["\nUID:1\nSUMMARY:Corte\n"])

        assert result.events == []
        assert result.blocks_skipped == 1

    def test_invalid_dtstart_is_dropped(self):
        """Test that an unparsable DTSTART drops the block."""
        normalizer = EventNormalizer()

        result = normalizer.normalize_blocks(["\nSUMMARY:Corte\nDTSTART:mañana\n"])

        assert result.events == []

    def test_invalid_dtend_keeps_event(self):
        """Test that a bad DTEND only clears the end date."""
        normalizer = EventNormalizer()
        blocks = ["\nSUMMARY:Corte\nDTSTART:20260116\nDTEND:soon\n"]

        events = normalizer.normalize_blocks(blocks).events

        assert len(events) == 1
        assert events[0].end_date is None

    def test_malformed_block_does_not_abort_batch(self):
        """Test that invalid siblings are dropped and valid ones kept in order."""
        normalizer = EventNormalizer()
        blocks = [
            "\nSUMMARY:First\nDTSTART:20260116\n",
            "\nDTSTART:20260116\n",
            "\nSUMMARY:Third\nDTSTART:20260118\n",
        ]

        result = normalizer.normalize_blocks(blocks)

        assert [e.title for e in result.events] == ["First", "Third"]
        assert result.blocks_found == 3
        assert result.blocks_skipped == 1

    def test_unexpected_exception_skips_block(self):
        """Test that an error while parsing one block is contained."""
        normalizer = EventNormalizer()
        blocks = [
            "\nSUMMARY:Good\nDTSTART:20260116\n",
            "\nSUMMARY:Bad\nDTSTART:20260117\n",
        ]
        original = normalizer._normalize_single_block

        def flaky(block):
            if "Bad" in block:
                raise RuntimeError("boom")
            return original(block)

        with patch.object(normalizer, "_normalize_single_block", side_effect=flaky):
            result = normalizer.normalize_blocks(blocks)

        assert [e.title for e in result.events] == ["Good"]
        assert result.blocks_skipped == 1

    def test_no_events_in_text(self):
        """Test a calendar without VEVENT blocks."""
        normalizer = EventNormalizer()

        result = normalizer.normalize_text("BEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n")

        assert result.events == []
        assert result.blocks_found == 0
        assert result.blocks_skipped == 0

    def test_parse_ical_events(self, sample_ics):
        """Test the module-level parse helper."""
        events = parse_ical_events(sample_ics)

        assert len(events) == 2
        assert all(isinstance(e, Event) for e in events)

    def test_parse_is_deterministic(self, sample_ics):
        """Test that identical text produces equal results."""
        assert parse_ical_events(sample_ics) == parse_ical_events(sample_ics)

    def test_carriage_return_only_feed(self):
        """Test a feed that ends its lines with a bare CR."""
        text = "BEGIN:VEVENT\rSUMMARY:Corte\rDTSTART:20260116T100000Z\rEND:VEVENT"

        events = parse_ical_events(text)

        assert [(e.title, e.start_date) for e in events] == [
            ("Corte", datetime(2026, 1, 16, 10, 0))
        ]

    def test_non_ascii_time_keeps_event_at_midnight(self):
        """Test that a garbled time part does not drop the event."""
        text = "BEGIN:VEVENT\nSUMMARY:Corte\nDTSTART:20260116T²³0000\nEND:VEVENT"

        events = parse_ical_events(text)

        assert len(events) == 1
        assert events[0].start_date == datetime(2026, 1, 16, 0, 0)

    def test_end_to_end_block(self):
        """Test the reference VEVENT."""
        text = (
            "BEGIN:VEVENT\n"
            "UID:abc123\n"
            "SUMMARY:Corte\n"
            "DTSTART:20260116T100000Z\n"
            "LOCATION:Sede Norte\n"
            "END:VEVENT\n"
        )

        events = parse_ical_events(text)

        assert events == [
            Event(
                id="abc123",
                title="Corte",
                description=None,
                start_date=datetime(2026, 1, 16, 10, 0),
                end_date=None,
                location="Sede Norte",
                status="CONFIRMED"
            )
        ]

    def test_event_to_dict(self):
        """Test the serialized event shape."""
        event = Event(
            id="abc123",
            title="Corte",
            description=None,
            start_date=datetime(2026, 1, 16, 10, 0),
            end_date=None,
            location=None
        )

        assert event.to_dict() == {
            "id": "abc123",
            "title": "Corte",
            "description": None,
            "startDate": "2026-01-16T10:00:00",
            "endDate": None,
            "location": None,
            "status": "CONFIRMED"
        }
