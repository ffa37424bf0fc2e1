"""Exceptions raised by the replication pipeline."""

from __future__ import annotations


class ReplicationError(Exception):
    """Base class for fatal replication errors."""


class PreconditionError(ReplicationError, ValueError):
    """Raised when pipeline inputs are missing or invalid."""


class TemplateNotFoundError(ReplicationError):
    """Raised when a manifest entry names a template the source cannot find."""

    def __init__(self, template_id: str, output_path: str | None = None) -> None:
        self.template_id = template_id
        self.output_path = output_path
        target = f" (for {output_path})" if output_path else ""
        super().__init__(f"Template not found: {template_id}{target}")


class TemplateRenderError(ReplicationError):
    """Raised when a template fails to parse or references undefined data."""


class BackupError(ReplicationError):
    """Raised when an existing output tree cannot be backed up."""


class SideloadError(ReplicationError):
    """Raised when a sideload hook cannot be loaded or fails."""


class ReplicationAborted(ReplicationError):
    """Raised when the operator declines to delete an existing output tree.

    This is a deliberate stop rather than a failure: nothing was written.
    """
