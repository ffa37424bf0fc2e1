"""Formatting of write ledgers for end-of-run reports."""

from __future__ import annotations

from ..core.models import StatusLedger, WriteRecord

_TARGET_LABELS = {"local": "Local files", "zip": "Archive"}


def format_record(record: WriteRecord) -> str:
    status = "OK  " if record.success else "FAIL"
    line = f"{status} {record.destination_path} -> {record.resolved_path}"
    if not record.success and record.message:
        line = f"{line}: {record.message}"
    return line


def summarize(ledger: StatusLedger) -> str:
    label = _TARGET_LABELS.get(ledger.target, ledger.target)
    failed = len(ledger.failed)
    if failed:
        return f"{label}: {len(ledger.succeeded)} written, {failed} failed"
    return f"{label}: {len(ledger.succeeded)} written"


def format_ledger(ledger: StatusLedger) -> list[str]:
    """Return one line per record followed by a summary line."""
    return [format_record(record) for record in ledger.records] + [summarize(ledger)]
