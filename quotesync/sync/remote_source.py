"""Remote source of candidate quotes.

Handles network access with retry logic and translation of remote records
into quotes.
"""

import asyncio
import logging
from typing import Any

import httpx

from ..exceptions import RemoteUnavailable
from ..quotes.models import Quote

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_URL = "https://jsonplaceholder.typicode.com/posts"
SENTINEL_CATEGORY = "ServerSync"


class RemoteSource:
    """Client for the remote quote endpoint.

    The endpoint has no category concept, so every fetched record is tagged
    with a fixed sentinel category.
    """

    def __init__(
        self,
        url: str = DEFAULT_REMOTE_URL,
        timeout: float = 10.0,
        max_retries: int = 3,
        text_field: str = "title",
        sentinel_category: str = SENTINEL_CATEGORY,
        fetch_limit: int | None = None,
        user_id: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the remote source.

        Args:
            url: Endpoint URL for both reads (GET) and writes (POST).
            timeout: Request timeout in seconds.
            max_retries: Maximum attempts per request.
            text_field: Remote record field that becomes the quote text.
            sentinel_category: Category assigned to every fetched quote.
            fetch_limit: Keep only the first N remote records, if set.
            user_id: userId sent with posted quotes.
            transport: Optional httpx transport, used in tests.
        """
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.text_field = text_field
        self.sentinel_category = sentinel_category
        self.fetch_limit = fetch_limit
        self.user_id = user_id
        self._transport = transport
        self._consecutive_failures = 0

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    async def _request_with_retry(
        self,
        method: str,
        json_data: Any = None,
    ) -> tuple[Any, str | None]:
        """Make HTTP request with exponential backoff retry.

        Args:
            method: HTTP method (GET, POST).
            json_data: Optional JSON body.

        Returns:
            Tuple of (response_data, error_message).
        """
        if not self.url:
            return None, "No remote URL configured"

        backoff = 1.0

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            for attempt in range(self.max_retries):
                try:
                    if method == "GET":
                        response = await client.get(self.url)
                    elif method == "POST":
                        response = await client.post(self.url, json=json_data)
                    else:
                        return None, f"Unsupported method: {method}"

                    if response.status_code in (200, 201):
                        self._consecutive_failures = 0
                        return response.json(), None

                    elif response.status_code >= 500:
                        # Server error, retry
                        logger.warning(
                            f"Server error {response.status_code}, "
                            f"attempt {attempt + 1}/{self.max_retries}"
                        )
                    else:
                        # Client error, don't retry
                        self._consecutive_failures += 1
                        return None, f"HTTP {response.status_code}: {response.text}"

                except httpx.ConnectError:
                    logger.warning(
                        f"Connection failed, attempt {attempt + 1}/{self.max_retries}"
                    )
                except httpx.TimeoutException:
                    logger.warning(
                        f"Request timeout, attempt {attempt + 1}/{self.max_retries}"
                    )
                except (httpx.HTTPError, ValueError) as e:
                    logger.error(f"Request error: {e}")
                    self._consecutive_failures += 1
                    return None, str(e)

                # Exponential backoff
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(backoff)
                    backoff *= 2

        self._consecutive_failures += 1
        return None, f"Max retries ({self.max_retries}) exceeded"

    def _translate(self, data: Any) -> list[Quote]:
        """Translate remote records into quotes.

        Raises:
            RemoteUnavailable: If the payload is not a list of records.
        """
        if not isinstance(data, list):
            raise RemoteUnavailable(
                f"Expected a list of records, got {type(data).__name__}"
            )

        records = data if self.fetch_limit is None else data[: self.fetch_limit]
        quotes = []
        for record in records:
            if not isinstance(record, dict):
                raise RemoteUnavailable("Remote record is not an object")
            text = record.get(self.text_field)
            if not isinstance(text, str) or not text.strip():
                logger.debug(f"Skipping remote record without {self.text_field!r}")
                continue
            quotes.append(Quote(text=text, category=self.sentinel_category))

        return quotes

    async def fetch_candidates(self) -> list[Quote]:
        """Fetch candidate quotes from the remote endpoint.

        Returns:
            Translated quotes, or an empty list if the remote is unreachable
            or returned something unparsable.
        """
        try:
            data, error = await self._request_with_retry("GET")
            if error:
                raise RemoteUnavailable(error)
            quotes = self._translate(data)
        except RemoteUnavailable as e:
            logger.warning(f"Remote unavailable, no candidates: {e}")
            return []

        logger.debug(f"Fetched {len(quotes)} candidate quotes")
        return quotes

    async def post_quote(self, quote: Quote) -> dict[str, Any] | None:
        """Send a quote to the remote endpoint.

        The remote does not durably keep the write.

        Returns:
            The remote response, or None on failure.
        """
        payload = {
            "title": quote.text,
            "body": quote.category,
            "userId": self.user_id,
        }

        data, error = await self._request_with_retry("POST", payload)
        if error:
            logger.warning(f"Failed to post quote: {error}")
            return None

        logger.info("Posted quote to remote")
        return data
