"""HTTP fetcher for iCalendar feeds served through the booking proxy."""
import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of a single feed request."""
    body: str
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ICalFeedFetcher:
    """Fetcher that retrieves raw ICS text through the same-origin proxy."""

    PROXY_PATH = '/ical-proxy'
    USER_AGENT = (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(compatible; ICalAppointmentsSync/1.0)'
    )

    def __init__(self, proxy_base: str, timeout: int = 10):
        """
        Initialize the feed fetcher.

        Args:
            proxy_base: Base URL of the proxy API (e.g. http://127.0.0.1:8000/api)
            timeout: HTTP request timeout in seconds (default: 10)
        """
        self.proxy_base = proxy_base.rstrip('/')
        self.timeout = timeout

    @property
    def proxy_url(self) -> str:
        return self.proxy_base + self.PROXY_PATH

    def fetch(self, feed_url: str) -> FetchResult:
        """
        Fetch the raw ICS text of a feed.

        A single attempt is made. Transport failures, non-2xx statuses and
        empty bodies all produce a result with an empty body and an error
        description; nothing is raised.

        Args:
            feed_url: Absolute URL of the iCalendar feed

        Returns:
            FetchResult with the response text on success
        """
        if not feed_url or not feed_url.strip():
            logger.warning("No feed URL given, skipping fetch")
            return FetchResult(body='', error='missing feed url')

        logger.info(f"Fetching iCal feed through proxy: {self.proxy_url}")

        try:
            response = requests.get(
                self.proxy_url,
                params={'url': feed_url},
                headers={
                    'Accept': 'text/calendar',
                    'User-Agent': self.USER_AGENT
                },
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning(f"iCal feed request failed: {e}")
            return FetchResult(body='', error=f"{type(e).__name__}: {e}")

        if not 200 <= response.status_code < 300:
            logger.warning(f"iCal proxy returned status {response.status_code}")
            return FetchResult(
                body='',
                status_code=response.status_code,
                error=f"HTTP {response.status_code}"
            )

        text = response.text
        if not text or not text.strip():
            logger.warning("iCal proxy returned an empty body")
            return FetchResult(
                body='',
                status_code=response.status_code,
                error='empty body'
            )

        logger.info(f"Downloaded iCal feed, size: {len(text)} characters")
        return FetchResult(body=text, status_code=response.status_code)
