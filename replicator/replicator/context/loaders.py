"""Loading manifests and data files from disk."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..core.errors import PreconditionError
from ..core.models import Manifest


def _load_mapping(path: Path, kind: str) -> dict[str, Any]:
    if not path.is_file():
        raise PreconditionError(f"{kind} file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise PreconditionError(f"Invalid {kind.lower()} file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PreconditionError(f"{kind} file {path} must contain a mapping")
    return data


def load_manifest(path: Path) -> Manifest:
    """Load a manifest from a YAML or JSON mapping of output path to template id.

    A top-level ``files`` key may hold the mapping instead.
    """
    data = _load_mapping(path, "Manifest")
    if isinstance(data.get("files"), dict):
        data = data["files"]
    if not data:
        raise PreconditionError(f"Manifest {path} has no entries")

    try:
        return Manifest.from_mapping(
            {str(k): "" if v is None else str(v) for k, v in data.items()}
        )
    except ValidationError as e:
        raise PreconditionError(f"Invalid manifest {path}: {e}") from e


def load_data(path: Path) -> dict[str, Any]:
    """Load a data context layer from a YAML or JSON mapping."""
    return _load_mapping(path, "Data")
