"""Replicator - project skeleton replication from templates.

Renders a manifest of templates into an output directory and, optionally,
a zip archive, resolving conflicts with existing output first.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .core.errors import (  # noqa: E402
    PreconditionError,
    ReplicationAborted,
    ReplicationError,
    TemplateNotFoundError,
)
from .core.models import Manifest, ReplicationConfig  # noqa: E402
from .core.pipeline import run_replication  # noqa: E402

# Re-export main CLI entry point
from .cli import main  # noqa: E402

__all__ = [
    "Manifest",
    "PreconditionError",
    "ReplicationAborted",
    "ReplicationConfig",
    "ReplicationError",
    "TemplateNotFoundError",
    "main",
    "run_replication",
]
