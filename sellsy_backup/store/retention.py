"""Retention: prune old archives and consumed snapshot files."""
import argparse
import logging
import time
from pathlib import Path
from typing import Optional

from sellsy_backup.config import Config
from sellsy_backup.errors import FilesystemError
from sellsy_backup.fetch.endpoints import COLLECTIONS
from sellsy_backup.logging_conf import setup_logging
from sellsy_backup.store.archive import ARCHIVE_SUFFIX

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def _remove(path: Path) -> bool:
    """Delete a file. Returns False if it was already gone."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise FilesystemError(f"Could not delete {path}: {e}") from e
    return True


def prune_archives(
    backups_dir: Path,
    max_age_days: int,
    now: Optional[float] = None,
    dry_run: bool = False,
) -> list[Path]:
    """Delete archives in `backups_dir` older than `max_age_days`."""
    if not backups_dir.is_dir():
        return []

    now = time.time() if now is None else now
    cutoff_time = now - (max_age_days * SECONDS_PER_DAY)

    deleted = []
    for archive in sorted(backups_dir.glob(f"*{ARCHIVE_SUFFIX}")):
        try:
            stat = archive.stat()
        except FileNotFoundError:
            continue
        if not archive.is_file() or stat.st_mtime >= cutoff_time:
            continue
        if dry_run:
            logger.info(f"Would delete {archive.name} ({stat.st_size} bytes)")
            deleted.append(archive)
        elif _remove(archive):
            logger.info(f"Deleted {archive.name} ({stat.st_size} bytes)")
            deleted.append(archive)

    logger.info(f"Archive cleanup complete: {len(deleted)} files older than {max_age_days} days")
    return deleted


def prune_snapshots(base_path: Path) -> list[Path]:
    """Delete the top-level snapshot JSON files of `base_path`."""
    deleted = []
    for name in COLLECTIONS.values():
        path = base_path / name
        if _remove(path):
            logger.debug(f"Deleted snapshot {path}")
            deleted.append(path)
    return deleted


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Cleanup old backup archives")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without actually deleting",
    )
    parser.add_argument(
        "--older-than-days",
        type=int,
        default=None,
        help="Delete archives older than N days (default: MAXIMUM_HOLD_IN_DAYS)",
    )
    args = parser.parse_args()

    config = Config.from_env()
    setup_logging(config.LOG_LEVEL)
    days = args.older_than_days if args.older_than_days is not None else config.MAXIMUM_HOLD_IN_DAYS
    prune_archives(config.backups_dir, days, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
