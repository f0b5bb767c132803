"""PDF document downloads with manual redirect handling."""
import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Optional

import aiofiles
import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from sellsy_backup.config import Config
from sellsy_backup.errors import DownloadError, RedirectLoopError
from sellsy_backup.models import DownloadReport, DownloadResult

logger = logging.getLogger(__name__)


def document_filename(number: Any) -> str:
    """File name for a document number, kept inside its directory."""
    safe = str(number).strip().replace("/", "-").replace("\\", "-")
    return f"{safe}.PDF"


class DocumentDownloader:
    """Streams remote documents to disk, following redirects up to a cap."""

    def __init__(self, config: Config, client: httpx.AsyncClient):
        self.config = config
        self.client = client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _transfer(self, url: str, destination: Path) -> Optional[str]:
        """Write the body of `url` to `destination`, or return the redirect target."""
        async with self.client.stream("GET", url, timeout=self.config.TIMEOUT) as response:
            if response.is_redirect:
                return str(httpx.URL(url).join(response.headers["location"]))

            if response.status_code >= 300:
                raise DownloadError(
                    f"{response.status_code} {response.reason_phrase}",
                    url=url,
                    status_code=response.status_code,
                )

            destination.parent.mkdir(parents=True, exist_ok=True)
            partial = destination.with_name(destination.name + ".part")
            try:
                async with aiofiles.open(partial, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        await f.write(chunk)
                os.replace(partial, destination)
            except Exception:
                partial.unlink(missing_ok=True)
                raise
        return None

    async def download(self, url: str, destination: Path) -> Path:
        """Download `url` into `destination`, overwriting it."""
        current = url
        for hop in range(self.config.MAX_REDIRECTS + 1):
            try:
                location = await self._transfer(current, destination)
            except httpx.HTTPError as e:
                raise DownloadError(f"Network error: {e}", url=current) from e

            if location is None:
                return destination
            logger.debug(f"Redirect {hop + 1} for {url}: {current} -> {location}")
            current = location

        raise RedirectLoopError(
            f"More than {self.config.MAX_REDIRECTS} redirects",
            url=url,
        )

    async def download_documents(
        self, documents: Iterable[dict[str, Any]], directory: Path
    ) -> DownloadReport:
        """Download the PDF of every document; failures are reported, not raised."""
        semaphore = asyncio.Semaphore(self.config.DOWNLOAD_CONCURRENCY)

        async def download_one(document: dict[str, Any]) -> DownloadResult:
            number = document.get("number")
            url = document.get("pdf_link")
            if number in (None, "") or not isinstance(url, str) or not url:
                logger.warning(f"Skipping document {document.get('id')}: missing number or pdf_link")
                return DownloadResult(
                    number=str(number), url=url if isinstance(url, str) else None, path=None, ok=False,
                    error="missing number or pdf_link",
                )

            destination = directory / document_filename(number)
            async with semaphore:
                logger.info(f"downloading: {url}")
                try:
                    await self.download(url, destination)
                except (DownloadError, OSError) as e:
                    logger.error(f"Failed to download {url} to {destination}: {e}")
                    return DownloadResult(number=str(number), url=url, path=destination, ok=False, error=str(e))
            return DownloadResult(number=str(number), url=url, path=destination, ok=True)

        results = await asyncio.gather(*(download_one(d) for d in documents))
        report = DownloadReport(results=list(results))
        if report.failed:
            logger.warning(
                f"{len(report.failed)} of {len(report.results)} documents failed: "
                + ", ".join(r.number for r in report.failed)
            )
        return report
