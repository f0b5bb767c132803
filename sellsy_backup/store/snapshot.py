"""JSON snapshot files, one per collection."""
import logging
from pathlib import Path
from typing import Any, Mapping

import aiofiles
import orjson

from sellsy_backup.errors import FilesystemError
from sellsy_backup.fetch.endpoints import COLLECTIONS

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """Writes each collection to `<base>/<collection>.json`."""

    def __init__(self, base_path: Path):
        self.base_path = base_path

    def snapshot_path(self, collection: str) -> Path:
        """Get the snapshot file for a collection."""
        return self.base_path / COLLECTIONS[collection]

    async def write(self, collection: str, records: list[dict[str, Any]]) -> Path:
        """Write one collection, overwriting any previous snapshot."""
        path = self.snapshot_path(collection)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(orjson.dumps(records))
        except OSError as e:
            raise FilesystemError(f"Could not write snapshot {path}: {e}") from e
        logger.info(f"Saved {len(records)} {collection} to {path}")
        return path

    async def write_all(self, collections: Mapping[str, list[dict[str, Any]]]) -> dict[str, Path]:
        """Write every collection. Returns archive entry name -> file path."""
        written = {}
        for collection in COLLECTIONS:
            written[COLLECTIONS[collection]] = await self.write(collection, collections.get(collection, []))
        return written
