"""Hooks that add or replace files after template rendering."""

from __future__ import annotations

import importlib
import json
import logging
from typing import Any, Callable, Mapping

from ..core.errors import SideloadError
from .builder import FileSet

logger = logging.getLogger(__name__)

SideloadHook = Callable[[FileSet, Mapping[str, Any]], None]


def noop_sideload(files: FileSet, data_context: Mapping[str, Any]) -> None:
    """Leave the file set unchanged."""


class DataDumpSideload:
    """Write the data context itself into the file set as pretty-printed JSON."""

    def __init__(self, filename: str) -> None:
        self.filename = filename

    def __call__(self, files: FileSet, data_context: Mapping[str, Any]) -> None:
        files[self.filename] = json.dumps(dict(data_context), indent=4, default=str)
        logger.debug(f"Sideloaded data file: {self.filename}")

    def __repr__(self) -> str:
        return f"DataDumpSideload({self.filename!r})"


def chain_sideloads(*hooks: SideloadHook) -> SideloadHook:
    """Combine hooks into one that runs them in order."""
    active = [hook for hook in hooks if hook is not noop_sideload]
    if not active:
        return noop_sideload
    if len(active) == 1:
        return active[0]

    def _chained(files: FileSet, data_context: Mapping[str, Any]) -> None:
        for hook in active:
            hook(files, data_context)

    return _chained


def load_sideload(spec: str) -> SideloadHook:
    """Import a hook given as ``package.module:attribute``."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise SideloadError(f"Sideload must be MODULE:ATTRIBUTE, got: {spec!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SideloadError(f"Cannot import sideload module {module_name!r}: {e}") from e

    hook: Any = module
    for part in attr.split("."):
        try:
            hook = getattr(hook, part)
        except AttributeError as e:
            raise SideloadError(f"{module_name!r} has no attribute {attr!r}") from e

    if not callable(hook):
        raise SideloadError(f"Sideload {spec!r} is not callable")
    return hook
