"""Build the in-memory file set from a manifest."""

from __future__ import annotations

import logging
from collections import UserDict
from pathlib import PurePosixPath
from typing import Any, Mapping

from ..core.errors import PreconditionError, TemplateNotFoundError
from ..core.models import Manifest
from .engine import TemplateSource, render

logger = logging.getLogger(__name__)


def normalize_output_path(path: str) -> str:
    """Normalize a relative output path to POSIX form.

    Raises:
        PreconditionError: If the path is empty, absolute or leaves the output tree
    """
    raw = str(path).replace("\\", "/").strip()
    if not raw:
        raise PreconditionError("Output path must not be empty")
    if raw.startswith("/") or (len(raw) > 1 and raw[1] == ":"):
        raise PreconditionError(f"Output path must be relative: {path!r}")

    parts = [part for part in PurePosixPath(raw).parts if part not in ("", ".")]
    if not parts:
        raise PreconditionError(f"Output path names no file: {path!r}")
    if ".." in parts:
        raise PreconditionError(f"Output path must stay inside the output tree: {path!r}")
    return "/".join(parts)


class FileSet(UserDict[str, bytes]):
    """Relative output path -> file content.

    Text is stored UTF-8 encoded. Setting an existing path replaces its content.
    """

    def __setitem__(self, key: str, value: str | bytes) -> None:
        if isinstance(value, str):
            value = value.encode("utf-8")
        elif not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"File content must be str or bytes, got {type(value).__name__}")
        super().__setitem__(normalize_output_path(key), bytes(value))

    def __getitem__(self, key: str) -> bytes:
        return super().__getitem__(normalize_output_path(key))

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        try:
            return super().__contains__(normalize_output_path(key))
        except PreconditionError:
            return False

    def text(self, key: str) -> str:
        return self[key].decode("utf-8")


def build_file_set(
    manifest: Manifest,
    source: TemplateSource,
    data_context: Mapping[str, Any],
    *,
    strict: bool = False,
) -> FileSet:
    """Render every manifest entry into a new file set.

    Args:
        manifest: Output paths and the templates that render them
        source: Where template text is looked up
        data_context: Values substituted into every template
        strict: Treat undefined template variables as render errors

    Returns:
        File set keyed by manifest output path

    Raises:
        TemplateNotFoundError: If any template is missing; nothing is returned
        TemplateRenderError: If any template fails to render
    """
    logger.info(f"Replicating {len(manifest)} file(s) from templates...")

    files = FileSet()
    for output_path, template_id in manifest.items():
        if not source.has(template_id):
            raise TemplateNotFoundError(template_id, output_path)
        files[output_path] = render(source.read(template_id), data_context, strict=strict)
        logger.debug(f"Rendered {template_id} -> {output_path}")

    return files
