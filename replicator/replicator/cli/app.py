"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ..context.loaders import load_data, load_manifest
from ..context.processor import build_context
from ..core.errors import PreconditionError, ReplicationAborted, ReplicationError
from ..core.models import ConflictStrategy, ReplicationResult, StatusLedger
from ..core.pipeline import run_replication
from ..core.prompting import TyperPrompter
from ..destination.ledger import format_record, summarize
from ..rendering.engine import DirectoryTemplateSource
from ..rendering.sideload import DataDumpSideload, chain_sideloads, load_sideload
from ..core.settings import ReplicatorSettings
from .parsers import build_config, load_settings, validate_assignments, validate_sideloads

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="replicator",
    help="Replicate a project skeleton from a manifest of templates.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _templates_source(templates: str, settings: ReplicatorSettings) -> DirectoryTemplateSource:
    templates_dir = Path(templates) if templates else settings.templates_dir
    if templates_dir is None:
        raise PreconditionError("No template directory given (use --templates)")
    if not templates_dir.is_dir():
        raise PreconditionError(f"Template directory not found: {templates_dir}")
    return DirectoryTemplateSource(templates_dir, suffix=settings.template_suffix)


def _report_ledger(ledger: StatusLedger) -> None:
    for record in ledger.records:
        typer.secho(format_record(record), fg="green" if record.success else "red")
    typer.secho(summarize(ledger), bold=True)


def _report(result: ReplicationResult) -> None:
    if result.backup_root is not None:
        typer.echo(f"Previous output backed up to {result.backup_root}")
    _report_ledger(result.local)
    if result.archive is not None:
        _report_ledger(result.archive)


@app.command()
def run(
    manifest: Annotated[
        Path,
        typer.Option(
            "--manifest",
            "-m",
            help="YAML or JSON mapping of OUTPUT_PATH: TEMPLATE_ID.",
            metavar="FILE",
        ),
    ],
    templates: Annotated[
        str,
        typer.Option(
            "--templates",
            "-t",
            help="Directory containing templates (default: REPLICATOR_TEMPLATES_DIR).",
            metavar="DIR",
        ),
    ] = "",
    dest: Annotated[
        str,
        typer.Option(
            "--dest",
            "-d",
            help="Destination root directory (default: REPLICATOR_DESTINATION or cwd).",
            metavar="DIR",
        ),
    ] = "",
    slug: Annotated[
        str,
        typer.Option(
            "--slug",
            help="Name of the output directory (default: the 'slug' data value).",
        ),
    ] = "",
    data_files: Annotated[
        list[Path],
        typer.Option(
            "--data",
            help="YAML or JSON data file merged into the template data. Repeatable.",
            metavar="FILE",
        ),
    ] = [],
    assignments: Annotated[
        list[str],
        typer.Option(
            "--set",
            help="Set a data value (KEY=VALUE, dotted keys for nesting). Repeatable.",
            metavar="KEY=VALUE",
            callback=validate_assignments,
        ),
    ] = [],
    zip_archive: Annotated[
        Optional[bool],
        typer.Option(
            "--zip/--no-zip",
            help="Also write <dest>/<slug>.zip (default: REPLICATOR_ZIP).",
        ),
    ] = None,
    on_conflict: Annotated[
        Optional[ConflictStrategy],
        typer.Option(
            "--on-conflict",
            help="How to treat an existing output directory, without asking.",
            case_sensitive=False,
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Confirm deletion of an existing output directory."),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Fail on undefined template variables instead of rendering them empty.",
        ),
    ] = False,
    no_data_file: Annotated[
        bool,
        typer.Option("--no-data-file", help="Do not write <slug>-data.json."),
    ] = False,
    sideloads: Annotated[
        list[str],
        typer.Option(
            "--sideload",
            help="Extra hook run after rendering (MODULE:ATTRIBUTE). Repeatable.",
            metavar="MODULE:ATTR",
            callback=validate_sideloads,
        ),
    ] = [],
    interactive: Annotated[
        bool,
        typer.Option(
            "--interactive/--no-interactive",
            help="Ask how to handle an existing output directory.",
        ),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Render the manifest's templates into <dest>/<slug>."""
    _configure_logging(verbose)
    logger.debug("Starting replicator")

    try:
        settings = load_settings()
        manifest_model = load_manifest(manifest)
        source = _templates_source(templates, settings)
        context = build_context(
            *(load_data(path) for path in data_files),
            assignments=assignments,
        )

        config = build_config(
            destination=dest or settings.destination,
            slug=slug or str(context.get("slug") or ""),
            zip=settings.zip if zip_archive is None else zip_archive,
            on_conflict=on_conflict or settings.on_conflict,
            assume_yes=yes or settings.assume_yes,
            write_retries=settings.write_retries,
            strict_undefined=strict or settings.strict_undefined,
        )
        context["slug"] = config.slug

        hooks = [load_sideload(spec) for spec in sideloads]
        if settings.write_data_file and not no_data_file:
            hooks.insert(0, DataDumpSideload(f"{config.slug}{settings.data_file_suffix}"))

        logger.debug(f"Config: {len(manifest_model)} manifest entries, source {source!r}")

        result = run_replication(
            config,
            manifest_model,
            context,
            source,
            prompter=TyperPrompter() if interactive else None,
            sideload=chain_sideloads(*hooks),
        )
    except ReplicationAborted as exc:
        typer.echo(f"Aborted. {exc}")
        raise typer.Exit(code=0)
    except ReplicationError as exc:
        typer.secho(f"Error: {exc}", err=True, fg="red")
        raise typer.Exit(code=1)

    _report(result)

    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def check(
    manifest: Annotated[
        Path,
        typer.Option("--manifest", "-m", help="Manifest file to check.", metavar="FILE"),
    ],
    templates: Annotated[
        str,
        typer.Option("--templates", "-t", help="Directory containing templates.", metavar="DIR"),
    ] = "",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Verify that every manifest entry has a template, without writing anything."""
    _configure_logging(verbose)

    try:
        settings = load_settings()
        manifest_model = load_manifest(manifest)
        source = _templates_source(templates, settings)
    except ReplicationError as exc:
        typer.secho(f"Error: {exc}", err=True, fg="red")
        raise typer.Exit(code=1)

    missing = [
        (output_path, template_id)
        for output_path, template_id in manifest_model.items()
        if not source.has(template_id)
    ]
    for output_path, template_id in missing:
        typer.secho(f"Missing template {template_id} (for {output_path})", fg="red")

    if missing:
        raise typer.Exit(code=1)
    typer.echo(f"All {len(manifest_model)} template(s) found.")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
