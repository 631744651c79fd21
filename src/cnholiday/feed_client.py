import time
from typing import Optional

import requests

from .exceptions import FetchError
from .logging_config import get_logger

logger = get_logger(__name__)


class FeedClient:
    """
    Fetches calendar subscription feeds over HTTP.

    A single GET per call. No retries: a failure is raised to the caller
    as FetchError and the next query decides whether to try again.
    """

    def __init__(self, timeout: Optional[float] = 30.0, session: Optional[requests.Session] = None):
        """
        Args:
            timeout: Request timeout in seconds, None to wait indefinitely
            session: Optional requests session (defaults to module-level requests)
        """
        self.timeout = timeout
        self._http = session or requests

    def fetch(self, url: str) -> str:
        """
        Download the feed at url and return it as text.

        The body is always decoded as UTF-8; subscription servers often omit
        the charset and requests would otherwise fall back to ISO-8859-1.

        Raises:
            FetchError: On transport failure, a non-2xx response or a body that is not valid UTF-8
        """
        started = time.monotonic()
        try:
            response = self._http.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Feed request failed: %s", type(e).__name__, extra={'url': url})
            raise FetchError(f"Could not fetch calendar feed: {e}", url=url) from e

        if not response.ok:
            logger.error(
                "Feed request returned HTTP %d", response.status_code, extra={'url': url}
            )
            raise FetchError(
                f"Calendar feed returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        # Strict: no replacement characters
        try:
            text = response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.error("Feed body is not valid UTF-8 at byte %d", e.start, extra={'url': url})
            raise FetchError(f"Calendar feed is not valid UTF-8: {e}", url=url) from e

        logger.debug(
            "Fetched calendar feed",
            extra={
                'url': url,
                'bytes': len(response.content),
                'duration_ms': round((time.monotonic() - started) * 1000),
            }
        )
        return text
