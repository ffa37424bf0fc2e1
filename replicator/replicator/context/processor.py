"""Data context assembly from environment variables and overrides."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Iterable, Mapping

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

DATA_ENV_PREFIX = "REPLICATOR_DATA_"
DEFAULT_ENV_FILE = ".env"

_INT_PATTERN = re.compile(r"^-?\d+$")
_FLOAT_PATTERN = re.compile(r"^-?\d+(?:\.\d+)?$")


def coerce_value(value: str) -> bool | int | float | str:
    """Coerce a string value to its appropriate type.

    Args:
        value: String value to coerce

    Returns:
        Coerced value (bool, int, float, or str)
    """
    value_lower = value.lower()

    if value_lower in ("true", "false"):
        return value_lower == "true"

    if _INT_PATTERN.match(value):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return value

    if _FLOAT_PATTERN.match(value):
        try:
            return float(value)
        except (ValueError, OverflowError):
            return value

    return value


def load_environ(env_file: str | Path | None = DEFAULT_ENV_FILE) -> dict[str, str]:
    """Return ``os.environ`` layered over the variables defined in ``env_file``.

    Process variables win over the file. A missing file contributes nothing.
    """
    environ: dict[str, str] = {}
    if env_file is not None and Path(env_file).is_file():
        logger.debug(f"Loading environment file {env_file}")
        environ.update(
            {key: value for key, value in dotenv_values(env_file).items() if value is not None}
        )
    environ.update(os.environ)
    return environ


def env_data(
    prefix: str = DATA_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
    env_file: str | Path | None = DEFAULT_ENV_FILE,
) -> dict[str, Any]:
    """Collect prefixed environment variables as data context entries.

    ``REPLICATOR_DATA_AUTHOR=Jane`` becomes ``{"author": "Jane"}``. Empty
    values are skipped.

    Args:
        prefix: Variable prefix, matched case-insensitively
        environ: Environment mapping (defaults to ``os.environ`` over ``env_file``)
        env_file: Dotenv file read when ``environ`` is not given

    Returns:
        Dictionary with lowercase keys and coerced values
    """
    source = load_environ(env_file) if environ is None else environ
    prefix_lower = prefix.lower()

    data: dict[str, Any] = {}
    for key, value in source.items():
        if not key.lower().startswith(prefix_lower) or not value:
            continue
        name = key[len(prefix) :].lower()
        if name:
            data[name] = coerce_value(value)
    return data


def parse_assignment(value: str) -> tuple[str, Any]:
    """Parse ``KEY=VALUE`` into a key and a coerced value."""
    if "=" not in value:
        raise ValueError(f"Must be KEY=VALUE, got: {value!r}")
    key, raw = value.split("=", 1)
    key = key.strip()
    if not key:
        raise ValueError(f"Missing key in assignment: {value!r}")
    return key, coerce_value(raw)


def set_dotted(data: dict[str, Any], key: str, value: Any) -> None:
    """Set ``value`` at a dotted key path, creating nested mappings as needed."""
    parts = key.split(".")
    node = data
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def build_context(
    *layers: Mapping[str, Any],
    assignments: Iterable[str] = (),
    environ: Mapping[str, str] | None = None,
    env_file: str | Path | None = DEFAULT_ENV_FILE,
) -> dict[str, Any]:
    """Build the data context for a replication run.

    Precedence, lowest first: prefixed environment variables, each of
    ``layers`` in order, then ``assignments``.

    Args:
        layers: Mappings loaded from data files
        assignments: ``KEY=VALUE`` overrides; dotted keys address nested values
        environ: Environment mapping (defaults to ``os.environ`` over ``env_file``)
        env_file: Dotenv file read when ``environ`` is not given

    Returns:
        Context dictionary for template rendering
    """
    logger.debug("Building data context")

    context: dict[str, Any] = env_data(environ=environ, env_file=env_file)
    for layer in layers:
        context.update(layer)
    for assignment in assignments:
        key, value = parse_assignment(assignment)
        set_dotted(context, key, value)

    logger.debug(f"Data context keys: {sorted(context)}")
    return context
