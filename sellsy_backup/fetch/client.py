"""API client fetching complete collections page by page."""
import logging
from typing import Any

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from sellsy_backup.config import Config
from sellsy_backup.errors import FetchError
from sellsy_backup.fetch.endpoints import get_collection_url
from sellsy_backup.models import PageEnvelope

logger = logging.getLogger(__name__)


class ApiClient:
    """Authenticated client for the Sellsy v2 collections."""

    def __init__(self, config: Config, client: httpx.AsyncClient, token: str):
        self.config = config
        self.client = client
        self.token = token
        self.request_count = 0

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _get(self, url: str, params: dict[str, int]) -> httpx.Response:
        return await self.client.get(url, params=params, headers=self._headers(), timeout=self.config.TIMEOUT)

    async def fetch_page(self, url: str, offset: int, limit: int) -> PageEnvelope:
        """Fetch and validate one page."""
        logger.info(f"{url}?limit={limit}&offset={offset}")
        self.request_count += 1

        try:
            response = await self._get(url, {"limit": limit, "offset": offset})
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {url} (offset={offset}) failed: {e}") from e

        if not response.is_success:
            raise FetchError(
                f"Request to {url} (offset={offset}) failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            return PageEnvelope.model_validate_json(response.content)
        except ValidationError as e:
            raise FetchError(f"Malformed page envelope from {url} (offset={offset}): {e}") from e

    async def fetch_all(self, url: str, limit: int | None = None) -> list[dict[str, Any]]:
        """Fetch every record of a collection, in server order."""
        limit = limit or self.config.PAGE_LIMIT
        records: list[dict[str, Any]] = []
        offset = 0
        pages = 0

        while True:
            if pages >= self.config.MAX_PAGES:
                raise FetchError(f"Gave up on {url} after {pages} pages ({len(records)} records)")

            page = await self.fetch_page(url, offset, limit)
            pages += 1
            records.extend(page.data)

            pagination = page.pagination
            if pagination.offset + pagination.count >= pagination.total:
                break
            if not page.data:
                logger.warning(
                    f"{url} returned an empty page at offset {offset} "
                    f"before reaching total {pagination.total}; stopping at {len(records)} records"
                )
                break
            offset = pagination.offset + len(page.data)

        logger.info(f"Fetched {len(records)} records from {url} in {pages} requests")
        return records

    async def fetch_collection(self, collection: str) -> list[dict[str, Any]]:
        """Fetch a named collection (companies, contacts, ...)."""
        return await self.fetch_all(get_collection_url(self.config.API_URL, collection))
