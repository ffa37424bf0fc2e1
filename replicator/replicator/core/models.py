"""Domain models for replication configuration, manifests and write ledgers."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Literal, Mapping

from pydantic import BaseModel, Field, field_validator


def validate_slug(value: str) -> str:
    """Return ``value`` stripped, or raise ValueError if it is not a single path segment."""
    slug = (value or "").strip()
    if not slug:
        raise ValueError("slug must not be empty")
    if slug in (".", "..") or "/" in slug or "\\" in slug:
        raise ValueError(f"slug must be a single path segment, got: {slug!r}")
    return slug


class ManifestEntry(BaseModel):
    """Maps one output-relative path to the template that renders it."""

    output_path: str = Field(..., min_length=1, description="Path inside the output tree")
    template_id: str = Field(..., min_length=1, description="Template identifier")


class Manifest(BaseModel):
    """Ordered collection of manifest entries."""

    entries: list[ManifestEntry] = Field(..., min_length=1, description="Manifest entries")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> Manifest:
        return cls(
            entries=[
                ManifestEntry(output_path=str(path), template_id=str(template))
                for path, template in mapping.items()
            ]
        )

    def items(self) -> Iterator[tuple[str, str]]:
        for entry in self.entries:
            yield entry.output_path, entry.template_id

    def __len__(self) -> int:
        return len(self.entries)


class ConflictStrategy(str, Enum):
    """Operator choices when the output tree already exists."""

    BACKUP = "backup"
    OVERWRITE = "overwrite"
    DELETE = "delete"


class ConflictDecision(str, Enum):
    """Outcome of conflict resolution, decided once per run."""

    NO_CONFLICT = "no_conflict"
    BACKUP = "backup"
    OVERWRITE = "overwrite"
    DELETE = "delete"
    ABORT = "abort"


class WriteRecord(BaseModel):
    """Outcome of writing a single file."""

    destination_path: str
    resolved_path: str
    success: bool
    message: str = ""


class StatusLedger(BaseModel):
    """Append-only record of per-file write outcomes for one target."""

    target: Literal["local", "zip"]
    records: list[WriteRecord] = Field(default_factory=list)

    def record(
        self, destination_path: str, resolved_path: str, success: bool, message: str = ""
    ) -> WriteRecord:
        entry = WriteRecord(
            destination_path=destination_path,
            resolved_path=resolved_path,
            success=success,
            message=message,
        )
        self.records.append(entry)
        return entry

    @property
    def ok(self) -> bool:
        return all(record.success for record in self.records)

    @property
    def succeeded(self) -> list[WriteRecord]:
        return [record for record in self.records if record.success]

    @property
    def failed(self) -> list[WriteRecord]:
        return [record for record in self.records if not record.success]

    @property
    def written_paths(self) -> set[str]:
        return {record.destination_path for record in self.succeeded}

    def __len__(self) -> int:
        return len(self.records)


class ReplicationConfig(BaseModel):
    """Configuration for a single replication run."""

    destination: Path = Field(..., description="Destination root directory")
    slug: str = Field(..., description="Name of the output tree and archive")
    zip: bool = Field(default=False, description="Mirror the output into <slug>.zip")
    on_conflict: ConflictStrategy | None = Field(
        default=None, description="Forced strategy for an existing output tree"
    )
    assume_yes: bool = Field(default=False, description="Confirm deletion without asking")
    write_retries: int = Field(default=3, ge=1, description="Attempts per file write")
    strict_undefined: bool = Field(
        default=False, description="Fail the build on undefined template variables"
    )

    @field_validator("destination", mode="before")
    @classmethod
    def _require_destination(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("destination must not be empty")
        return value

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        return validate_slug(value)

    @property
    def output_root(self) -> Path:
        return self.destination / self.slug

    @property
    def archive_path(self) -> Path:
        return self.destination / f"{self.slug}.zip"


class ReplicationResult(BaseModel):
    """Summary of a completed replication run."""

    decision: ConflictDecision
    output_root: Path
    local: StatusLedger
    archive: StatusLedger | None = None
    backup_root: Path | None = None

    @property
    def ok(self) -> bool:
        return self.local.ok and (self.archive is None or self.archive.ok)
