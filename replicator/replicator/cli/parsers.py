"""CLI argument parsers and validators."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from ..context.processor import parse_assignment
from ..core.errors import PreconditionError
from ..core.models import ReplicationConfig
from ..core.settings import ReplicatorSettings


def validate_assignments(values: list[str]) -> list[str]:
    """Reject ``--set`` values that are not KEY=VALUE."""
    for value in values or []:
        try:
            parse_assignment(value)
        except ValueError as e:
            raise typer.BadParameter(str(e)) from e
    return values


def validate_sideloads(values: list[str]) -> list[str]:
    """Reject ``--sideload`` values that are not MODULE:ATTRIBUTE."""
    for value in values or []:
        module_name, sep, attr = value.partition(":")
        if not sep or not module_name or not attr:
            raise typer.BadParameter(f"Must be MODULE:ATTRIBUTE, got: {value!r}")
    return values


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in error.errors()
    )


def load_settings() -> ReplicatorSettings:
    """Read ``REPLICATOR_*`` settings, reporting bad values as a precondition error."""
    try:
        return ReplicatorSettings()
    except ValidationError as e:
        raise PreconditionError(f"Invalid settings: {_describe(e)}") from e


def build_config(**fields: object) -> ReplicationConfig:
    """Build a run configuration, reporting invalid fields as a precondition error."""
    try:
        return ReplicationConfig(**fields)  # type: ignore[arg-type]
    except ValidationError as e:
        raise PreconditionError(f"Invalid configuration: {_describe(e)}") from e
