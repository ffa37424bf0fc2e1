"""Replication pipeline: resolve conflicts, build files, sideload, write, archive."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from ..destination.archive import write_archive
from ..destination.conflicts import ConflictResolver
from ..destination.writer import write_to_destination
from ..rendering.builder import FileSet, build_file_set
from ..rendering.engine import TemplateSource
from ..rendering.sideload import SideloadHook, noop_sideload
from .errors import PreconditionError, ReplicationAborted, ReplicationError, SideloadError
from .models import (
    ConflictDecision,
    Manifest,
    ReplicationConfig,
    ReplicationResult,
    StatusLedger,
)
from .prompting import Prompter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineContext:
    """State handed from one pipeline phase to the next."""

    config: ReplicationConfig
    manifest: Manifest
    data: Mapping[str, Any]
    decision: ConflictDecision | None = None
    files: FileSet | None = None
    backup_root: Path | None = None
    local: StatusLedger | None = None
    archive: StatusLedger | None = None


def resolve_conflicts(ctx: PipelineContext, resolver: ConflictResolver) -> PipelineContext:
    decision = resolver.decide(ctx.config.output_root)
    logger.debug(f"Conflict decision: {decision.value}")
    if decision is ConflictDecision.ABORT:
        raise ReplicationAborted(f"Left {ctx.config.output_root} untouched.")
    return replace(ctx, decision=decision)


def build_files(
    ctx: PipelineContext, source: TemplateSource, sideload: SideloadHook
) -> PipelineContext:
    files = build_file_set(
        ctx.manifest, source, ctx.data, strict=ctx.config.strict_undefined
    )

    logger.info("Sideloading dynamic files...")
    try:
        sideload(files, ctx.data)
    except ReplicationError:
        raise
    except Exception as exc:
        raise SideloadError(f"Sideload hook failed: {exc}") from exc

    if not files:
        raise PreconditionError("No files to write")
    return replace(ctx, files=files)


def apply_conflict_decision(ctx: PipelineContext, resolver: ConflictResolver) -> PipelineContext:
    assert ctx.decision is not None
    backup_root = resolver.apply(ctx.decision, ctx.config.output_root)
    return replace(ctx, backup_root=backup_root)


def write_files(ctx: PipelineContext) -> PipelineContext:
    assert ctx.files is not None
    local = write_to_destination(
        ctx.files,
        ctx.config.destination,
        ctx.config.slug,
        retries=ctx.config.write_retries,
    )
    archive = write_archive(ctx.files, ctx.config.archive_path) if ctx.config.zip else None
    return replace(ctx, local=local, archive=archive)


def run_replication(
    config: ReplicationConfig,
    manifest: Manifest,
    data_context: Mapping[str, Any],
    source: TemplateSource,
    *,
    prompter: Prompter | None = None,
    sideload: SideloadHook = noop_sideload,
) -> ReplicationResult:
    """Replicate ``manifest`` into ``<destination>/<slug>``.

    Nothing below the destination changes until the conflict decision is made
    and every template has rendered.

    Args:
        config: Destination, slug and run options
        manifest: Output paths and their templates
        data_context: Values available to every template
        source: Template lookup
        prompter: Asked how to handle an existing output tree
        sideload: Hook run once after rendering to add or replace files

    Returns:
        Conflict decision and the write ledgers

    Raises:
        ReplicationAborted: If the operator declined to delete existing output
        ReplicationError: For any fatal error before writing begins
    """
    if not len(manifest):
        raise PreconditionError("Manifest is empty")

    resolver = ConflictResolver(
        prompter=prompter, strategy=config.on_conflict, assume_yes=config.assume_yes
    )
    ctx = PipelineContext(
        config=config,
        manifest=manifest,
        data=MappingProxyType(dict(data_context)),
    )

    ctx = resolve_conflicts(ctx, resolver)
    ctx = build_files(ctx, source, sideload)
    ctx = apply_conflict_decision(ctx, resolver)
    ctx = write_files(ctx)

    assert ctx.decision is not None and ctx.local is not None
    return ReplicationResult(
        decision=ctx.decision,
        output_root=config.output_root,
        local=ctx.local,
        archive=ctx.archive,
        backup_root=ctx.backup_root,
    )
