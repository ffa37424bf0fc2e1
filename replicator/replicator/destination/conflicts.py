"""Resolution of conflicts with an existing output tree."""

from __future__ import annotations

import datetime as dt
import logging
import secrets
import shutil
from pathlib import Path

from ..core.errors import BackupError, PreconditionError, ReplicationError
from ..core.models import ConflictDecision, ConflictStrategy
from ..core.prompting import Prompter

logger = logging.getLogger(__name__)

CONFLICT_CHOICES = {
    ConflictStrategy.BACKUP.value: "Backup - copies the directory aside, then deletes the original",
    ConflictStrategy.OVERWRITE.value: "Overwrite or Insert - keeps custom files, only writes files from templates",
    ConflictStrategy.DELETE.value: "Delete",
}


def output_exists(output_root: Path) -> bool:
    """Return True when ``output_root`` is a directory with any contents."""
    if not output_root.exists():
        return False
    if not output_root.is_dir():
        raise PreconditionError(f"{output_root} exists and is not a directory")
    return any(output_root.iterdir())


def make_backup_token() -> str:
    timestamp = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{timestamp}{secrets.token_hex(3)}"


def backup_root_for(output_root: Path, token: str) -> Path:
    return output_root.with_name(f"{output_root.name}-backup_{token}")


def backup_tree(output_root: Path, token: str | None = None) -> Path:
    """Copy every file under ``output_root`` to a sibling backup tree, then remove the original.

    The original is only removed once all copies succeeded. A failed copy
    removes the partial backup tree and leaves the original as it was.

    Returns:
        Root of the backup tree
    """
    backup_root = backup_root_for(output_root, token or make_backup_token())
    if backup_root.exists():
        raise BackupError(f"Backup location already exists: {backup_root}")

    files = []
    for path in sorted(output_root.rglob("*")):
        if path.is_file():
            files.append(path)
        elif path.is_symlink() and not path.exists():
            logger.warning(f"Broken symlink {path} is not backed up and will be removed")
    logger.info(f"Found {len(files)} file(s) to back up...")

    for source in files:
        target = backup_root / source.relative_to(output_root)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as exc:
            shutil.rmtree(backup_root, ignore_errors=True)
            raise BackupError(f"Failed to back up {source}: {exc}") from exc
        logger.debug(f"Backed up {source} -> {target}")

    try:
        shutil.rmtree(output_root)
    except OSError as exc:
        raise BackupError(f"Backed up to {backup_root} but could not remove {output_root}: {exc}") from exc

    logger.info(f"Backed up {output_root} to {backup_root}")
    return backup_root


def delete_tree(output_root: Path) -> None:
    logger.info(f"Deleting {output_root}...")
    try:
        shutil.rmtree(output_root)
    except OSError as exc:
        raise ReplicationError(f"Failed to delete {output_root}: {exc}") from exc


class ConflictResolver:
    """Decide, then apply, how to treat an existing output tree.

    The decision comes from ``strategy`` when set, otherwise from the
    prompter. Without either, the existing tree is overwritten in place.
    """

    def __init__(
        self,
        prompter: Prompter | None = None,
        strategy: ConflictStrategy | None = None,
        assume_yes: bool = False,
    ) -> None:
        self.prompter = prompter
        self.strategy = strategy
        self.assume_yes = assume_yes

    def decide(self, output_root: Path) -> ConflictDecision:
        """Choose what to do with ``output_root`` without touching it."""
        if not output_exists(output_root):
            logger.debug(f"No existing output at {output_root}")
            return ConflictDecision.NO_CONFLICT

        logger.warning(f"{output_root} already exists.")
        choice = self._choose()

        if choice is ConflictStrategy.DELETE:
            if self.assume_yes:
                return ConflictDecision.DELETE
            if self.prompter is not None and self.prompter.ask_confirm(
                f"Delete {output_root.name}?", default=False
            ):
                return ConflictDecision.DELETE
            logger.info("Deletion not confirmed.")
            return ConflictDecision.ABORT

        if choice is ConflictStrategy.BACKUP:
            return ConflictDecision.BACKUP
        return ConflictDecision.OVERWRITE

    def _choose(self) -> ConflictStrategy:
        if self.strategy is not None:
            return self.strategy
        if self.prompter is None:
            return ConflictStrategy.OVERWRITE
        answer = self.prompter.ask_choice(
            "How would you like to proceed?",
            CONFLICT_CHOICES,
            default=ConflictStrategy.OVERWRITE.value,
        )
        return ConflictStrategy(answer)

    def apply(self, decision: ConflictDecision, output_root: Path) -> Path | None:
        """Carry out ``decision``. Returns the backup root for a backup."""
        if decision is ConflictDecision.ABORT:
            raise ValueError("An aborted run cannot be applied")
        if decision is ConflictDecision.BACKUP:
            return backup_tree(output_root)
        if decision is ConflictDecision.DELETE:
            delete_tree(output_root)
        return None
