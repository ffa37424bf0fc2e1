"""Mirror a rendered file set into a zip archive."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from ..core.errors import PreconditionError
from ..core.models import StatusLedger
from ..rendering.builder import FileSet

logger = logging.getLogger(__name__)


def write_archive(files: FileSet, archive_path: Path) -> StatusLedger:
    """Write every file into a new archive at ``archive_path``.

    Members are stored under their bare relative paths. An existing archive
    is replaced. The archive is closed before returning, whether or not
    individual members failed.

    Args:
        files: Rendered file set
        archive_path: Location of the zip file

    Returns:
        Ledger with one record per file
    """
    if not files:
        raise PreconditionError("Refusing to archive an empty file set")

    archive_path = Path(archive_path).absolute()
    ledger = StatusLedger(target="zip")

    logger.info(f"Archiving {len(files)} file(s) to {archive_path}...")

    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        archive = zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED)
    except OSError as exc:
        logger.error(f"Cannot open archive {archive_path}: {exc}")
        for relative_path in files:
            ledger.record(
                relative_path,
                f"{archive_path}:{relative_path}",
                False,
                f"Failed to open archive: {exc}",
            )
        return ledger

    with archive:
        for relative_path, content in files.items():
            member = f"{archive_path}:{relative_path}"
            try:
                archive.writestr(relative_path, content)
            except (OSError, ValueError, zipfile.BadZipFile) as exc:
                logger.error(f"Failed to archive {relative_path}: {exc}")
                ledger.record(relative_path, member, False, f"Failed to write: {exc}")
                continue
            logger.debug(f"Archived {relative_path}")
            ledger.record(relative_path, member, True, f"Successfully wrote: {relative_path}")

    return ledger
