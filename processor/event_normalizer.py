"""Event normalizer for turning VEVENT blocks into validated events."""
import logging
from typing import Iterable, List, Optional

from processor.models import Event, NormalizeResult
from vevent.block_scanner import extract_fields, iter_event_blocks
from vevent.date_parser import parse_ical_date

logger = logging.getLogger(__name__)


class EventNormalizer:
    """Normalizer for validating VEVENT blocks and building Event objects."""

    PROPERTIES = (
        'UID',
        'SUMMARY',
        'DESCRIPTION',
        'DTSTART',
        'DTEND',
        'LOCATION',
        'STATUS',
    )
    DEFAULT_STATUS = 'CONFIRMED'

    def normalize_blocks(self, blocks: Iterable[str]) -> NormalizeResult:
        """
        Normalize a sequence of VEVENT blocks.

        Blocks without a SUMMARY or a parsable DTSTART are dropped, as are
        blocks that raise while being parsed. Order is preserved.

        Args:
            blocks: VEVENT block contents in document order

        Returns:
            NormalizeResult with the accepted events and block counts
        """
        events = []
        blocks_found = 0

        for block in blocks:
            blocks_found += 1
            try:
                event = self._normalize_single_block(block)
            except Exception as e:
                logger.warning(f"Failed to parse VEVENT #{blocks_found}: {e}")
                continue

            if event:
                logger.debug(f"Parsed event #{blocks_found}: {event.title}")
                events.append(event)

        logger.info(
            f"Found {blocks_found} VEVENT blocks, parsed {len(events)} events"
        )
        return NormalizeResult(
            events=events,
            blocks_found=blocks_found,
            blocks_skipped=blocks_found - len(events)
        )

    def normalize_text(self, ical_text: str) -> NormalizeResult:
        """Normalize every VEVENT block found in raw ICS text."""
        return self.normalize_blocks(iter_event_blocks(ical_text))

    def _normalize_single_block(self, block: str) -> Optional[Event]:
        """
        Build an Event from a single block.

        Args:
            block: VEVENT block contents

        Returns:
            Event object or None if validation fails
        """
        fields = extract_fields(block, self.PROPERTIES)

        title = fields['SUMMARY']
        if not title:
            logger.debug("Dropping VEVENT without SUMMARY")
            return None

        start_date = parse_ical_date(fields['DTSTART'])
        if start_date is None:
            logger.debug(
                f"Dropping VEVENT '{title}' with missing or invalid DTSTART: "
                f"{fields['DTSTART']}"
            )
            return None

        return Event(
            id=fields['UID'],
            title=title,
            description=fields['DESCRIPTION'],
            start_date=start_date,
            end_date=parse_ical_date(fields['DTEND']),
            location=fields['LOCATION'],
            status=fields['STATUS'] or self.DEFAULT_STATUS
        )


def parse_ical_events(ical_text: str) -> List[Event]:
    """Parse raw ICS text into the list of valid events, without any network access."""
    return EventNormalizer().normalize_text(ical_text).events
