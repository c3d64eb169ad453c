"""Fetch-and-convert entry point for external iCal appointments."""
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from feed.ical_fetcher import ICalFeedFetcher
from processor.appointment_mapper import convert_events_to_appointments
from processor.event_normalizer import EventNormalizer
from processor.models import FeedReport

DEFAULT_PROXY_BASE = 'http://127.0.0.1:8000/api'
DEFAULT_TIMEOUT_SECONDS = 10

logger = logging.getLogger(__name__)


# Structured fields the pipeline attaches through ``extra=``
LOG_EXTRA_FIELDS = (
    'feed_url',
    'status_code',
    'blocks_found',
    'blocks_skipped',
    'appointments',
    'duration_seconds',
    'fetch_error',
    'error_type',
)


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for name in LOG_EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Route root logging through a single JSON handler.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR);
            unknown names fall back to INFO
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass
class ICalSyncConfig:
    """Settings for the feed proxy and logging."""
    proxy_base: str = DEFAULT_PROXY_BASE
    feed_url: str = ''
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    log_level: str = 'INFO'


def load_config() -> ICalSyncConfig:
    """Read configuration from environment variables."""
    raw_timeout = os.environ.get('TIMEOUT_SECONDS', str(DEFAULT_TIMEOUT_SECONDS))
    try:
        timeout_seconds = int(raw_timeout)
    except ValueError:
        logger.warning(
            f"Invalid TIMEOUT_SECONDS '{raw_timeout}', "
            f"using {DEFAULT_TIMEOUT_SECONDS}"
        )
        timeout_seconds = DEFAULT_TIMEOUT_SECONDS

    return ICalSyncConfig(
        proxy_base=os.environ.get('ICAL_PROXY_BASE', DEFAULT_PROXY_BASE),
        feed_url=os.environ.get('ICAL_FEED_URL', ''),
        timeout_seconds=timeout_seconds,
        log_level=os.environ.get('LOG_LEVEL', 'INFO')
    )


def fetch_and_convert(
    feed_url: Optional[str] = None,
    config: Optional[ICalSyncConfig] = None
) -> FeedReport:
    """
    Fetch an iCal feed and convert its events into external appointments.

    Never raises: a failed fetch or an unexpected error yields an empty
    report, and malformed VEVENT blocks are skipped. When no config is
    given, settings come from the environment and root logging is set up
    at LOG_LEVEL.

    Args:
        feed_url: Absolute feed URL (defaults to ICAL_FEED_URL)
        config: Settings to use instead of the environment

    Returns:
        FeedReport with the appointments plus diagnostic counts
    """
    start_time = time.time()

    try:
        if config is None:
            config = load_config()
            setup_logging(config.log_level)
        if feed_url is None:
            feed_url = config.feed_url

        fetcher = ICalFeedFetcher(
            proxy_base=config.proxy_base,
            timeout=config.timeout_seconds
        )
        normalizer = EventNormalizer()

        fetch_result = fetcher.fetch(feed_url)
        if not fetch_result.ok:
            logger.info(
                "No external appointments, feed fetch failed",
                extra={
                    'feed_url': feed_url,
                    'status_code': fetch_result.status_code,
                    'fetch_error': fetch_result.error
                }
            )
            return FeedReport(fetch_error=fetch_result.error)

        normalized = normalizer.normalize_text(fetch_result.body)
        appointments = convert_events_to_appointments(normalized.events)

        duration = time.time() - start_time
        logger.info(
            f"Converted {len(appointments)} external appointments",
            extra={
                'feed_url': feed_url,
                'blocks_found': normalized.blocks_found,
                'blocks_skipped': normalized.blocks_skipped,
                'appointments': len(appointments),
                'duration_seconds': round(duration, 2)
            }
        )

        return FeedReport(
            appointments=appointments,
            events=normalized.events,
            blocks_found=normalized.blocks_found,
            blocks_skipped=normalized.blocks_skipped
        )

    except Exception as e:
        logger.error(
            f"iCal fetch-and-convert failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return FeedReport(fetch_error=f"{type(e).__name__}: {e}")


def fetch_external_appointments(
    feed_url: Optional[str] = None,
    config: Optional[ICalSyncConfig] = None
) -> List[Dict[str, Any]]:
    """
    Fetch an iCal feed and return its appointments in the booking UI's shape.

    Args:
        feed_url: Absolute feed URL (defaults to ICAL_FEED_URL)
        config: Settings to use instead of the environment

    Returns:
        List of appointment dictionaries, empty on any failure
    """
    report = fetch_and_convert(feed_url, config)
    return [appointment.to_dict() for appointment in report.appointments]
