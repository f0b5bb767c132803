"""Main job runner orchestrating the backup pipeline."""
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from sellsy_backup.auth.session import TokenProvider
from sellsy_backup.config import Config
from sellsy_backup.fetch.client import ApiClient
from sellsy_backup.fetch.downloader import DocumentDownloader
from sellsy_backup.fetch.endpoints import COLLECTIONS, DOCUMENT_COLLECTIONS
from sellsy_backup.jobs.metrics import Metrics
from sellsy_backup.models import DownloadReport
from sellsy_backup.store.archive import create_archive
from sellsy_backup.store.retention import prune_archives, prune_snapshots
from sellsy_backup.store.snapshot import SnapshotWriter

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class RunReport:
    """What a completed run produced."""

    run_id: str
    archive: Path
    records: dict[str, int]
    downloads: DownloadReport
    pruned: list[Path] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)


class BackupRunner:
    """Runs authenticate -> fetch -> download -> snapshot -> archive -> prune.

    A runner executes at most one backup at a time; a call to `run` made
    while another is in progress is skipped and returns None.
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        today: Callable[[], date] = utc_today,
    ):
        self.config = config
        self.transport = transport
        self.today = today
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def _make_client(self) -> httpx.AsyncClient:
        limits = httpx.Limits(
            max_connections=self.config.DOWNLOAD_CONCURRENCY + 2,
            max_keepalive_connections=self.config.DOWNLOAD_CONCURRENCY,
        )
        return httpx.AsyncClient(
            http2=True,
            timeout=self.config.TIMEOUT,
            follow_redirects=False,  # Redirects are counted by DocumentDownloader
            limits=limits,
            transport=self.transport,
        )

    async def run(self) -> Optional[RunReport]:
        """Run one backup, unless one is already in progress."""
        if self._lock.locked():
            logger.warning("A backup is already running; skipping this trigger")
            return None
        async with self._lock:
            return await self._run()

    async def _run(self) -> RunReport:
        run_id = str(uuid.uuid4())
        metrics = Metrics(run_id)
        base_path = self.config.LOCAL_PATH
        logger.info(f"Run ID: {run_id} (base path: {base_path})")

        async with self._make_client() as client:
            token = await TokenProvider(self.config, client).get_token()

            api = ApiClient(self.config, client, token)
            collections: dict[str, list[dict[str, Any]]] = {}
            for collection in COLLECTIONS:
                collections[collection] = await api.fetch_collection(collection)
                metrics.record_collection(collection, len(collections[collection]))

            downloader = DocumentDownloader(self.config, client)
            downloads = DownloadReport()
            for collection in DOCUMENT_COLLECTIONS:
                downloads.extend(
                    await downloader.download_documents(collections[collection], self.config.invoices_dir)
                )
            metrics.increment("documents_ok", len(downloads.succeeded))
            metrics.increment("documents_failed", len(downloads.failed))

        entries = await SnapshotWriter(base_path).write_all(collections)
        archive = create_archive(entries, self.config.backups_dir, self.today())

        pruned = prune_archives(self.config.backups_dir, self.config.MAXIMUM_HOLD_IN_DAYS)
        if not self.config.KEEP_SNAPSHOTS:
            pruned += prune_snapshots(base_path)
        metrics.increment("pruned", len(pruned))

        metrics.report()
        return RunReport(
            run_id=run_id,
            archive=archive,
            records=dict(metrics.records),
            downloads=downloads,
            pruned=pruned,
            summary=metrics.get_summary(),
        )
