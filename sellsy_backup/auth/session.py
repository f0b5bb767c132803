"""OAuth2 client-credentials token exchange."""
import logging

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from sellsy_backup.config import Config
from sellsy_backup.errors import AuthenticationError
from sellsy_backup.fetch.endpoints import get_token_url

logger = logging.getLogger(__name__)


class TokenProvider:
    """Exchanges the configured client id/secret for a bearer token."""

    def __init__(self, config: Config, client: httpx.AsyncClient):
        self.config = config
        self.client = client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _request_token(self, url: str, body: dict) -> httpx.Response:
        return await self.client.post(url, json=body, timeout=self.config.TIMEOUT)

    async def get_token(self) -> str:
        """Fetch one access token. Raises AuthenticationError on any failure."""
        if not self.config.CLIENT_ID or not self.config.CLIENT_SECRET:
            raise AuthenticationError("SELLSY_CLIENT_ID and SELLSY_CLIENT_SECRET must be provided")

        url = get_token_url(self.config.LOGIN_URL)
        body = {
            "client_id": self.config.CLIENT_ID,
            "client_secret": self.config.CLIENT_SECRET,
            "grant_type": "client_credentials",
        }
        logger.info(f"Requesting access token from {url}")

        try:
            response = await self._request_token(url, body)
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Token request to {url} failed: {e}") from e

        if not response.is_success:
            raise AuthenticationError(
                f"Token request to {url} failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise AuthenticationError(f"Token response from {url} is not JSON") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise AuthenticationError(f"Token response from {url} has no access_token")

        logger.info("Access token obtained")
        return token
