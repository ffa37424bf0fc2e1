"""Write a rendered file set into the destination directory."""

from __future__ import annotations

import logging
from pathlib import Path

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.errors import PreconditionError
from ..core.models import StatusLedger
from ..rendering.builder import FileSet
from ..rendering.io import atomic_write_bytes

logger = logging.getLogger(__name__)

# Errors that can clear up on their own, e.g. a file briefly locked by another process.
TRANSIENT_WRITE_ERRORS = (PermissionError, BlockingIOError, InterruptedError)


def write_with_retry(path: Path, content: bytes, attempts: int = 3) -> None:
    for attempt in Retrying(
        reraise=True,
        retry=retry_if_exception_type(TRANSIENT_WRITE_ERRORS),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    ):
        with attempt:
            atomic_write_bytes(path, content)


def write_to_destination(
    files: FileSet, destination: Path, slug: str, retries: int = 3
) -> StatusLedger:
    """Write every file below ``<destination>/<slug>``.

    Existing files at the same paths are overwritten; other files are left alone.
    A failed file is recorded and the remaining files are still attempted.

    Args:
        files: Rendered file set
        destination: Destination root directory
        slug: Name of the output tree
        retries: Attempts per file for transient errors

    Returns:
        Ledger with one record per file
    """
    if not files:
        raise PreconditionError("Refusing to write an empty file set")
    if not str(destination).strip() or not slug:
        raise PreconditionError("Destination and slug are required")

    output_root = Path(destination).absolute() / slug
    ledger = StatusLedger(target="local")

    logger.info(f"Writing {len(files)} file(s) to {output_root}...")

    for relative_path, content in files.items():
        target = output_root / relative_path
        existed = target.is_file()
        try:
            write_with_retry(target, content, attempts=retries)
        except OSError as exc:
            logger.error(f"Failed: {relative_path} ({exc})")
            ledger.record(relative_path, str(target), False, f"Failed to write: {exc}")
            continue

        verb = "Overwrote" if existed else "Wrote"
        logger.debug(f"{verb} {target}")
        ledger.record(relative_path, str(target), True, f"{verb} {relative_path}")

    return ledger
