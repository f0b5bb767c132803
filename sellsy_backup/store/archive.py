"""Dated ZIP archive of the snapshot files."""
import logging
import os
import zipfile
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

from sellsy_backup.errors import FilesystemError

logger = logging.getLogger(__name__)

ARCHIVE_PREFIX = "sellsy-backup-"
ARCHIVE_SUFFIX = ".zip"


def archive_path(backups_dir: Path, day: date) -> Path:
    """Get the archive file for a calendar date."""
    return backups_dir / f"{ARCHIVE_PREFIX}{day.isoformat()}{ARCHIVE_SUFFIX}"


def create_archive(
    entries: Mapping[str, Path],
    backups_dir: Path,
    day: Optional[date] = None,
) -> Path:
    """Bundle `entries` (archive name -> file) into the archive for `day`.

    The archive is built next to its final location and moved into place once
    closed, replacing an archive from an earlier run on the same date.
    """
    day = day or datetime.now(timezone.utc).date()
    output = archive_path(backups_dir, day)
    partial = output.with_name(output.name + ".part")

    try:
        backups_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for name, path in entries.items():
                zf.write(path, arcname=name)
        os.replace(partial, output)
    except OSError as e:
        partial.unlink(missing_ok=True)
        raise FilesystemError(f"Could not create archive {output}: {e}") from e

    logger.info(f"Created archive {output} ({output.stat().st_size} bytes, {len(entries)} entries)")
    return output
