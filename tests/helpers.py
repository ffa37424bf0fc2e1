from __future__ import annotations

from pathlib import Path

from replicator.core.models import Manifest, ReplicationConfig
from replicator.rendering.builder import FileSet


def make_config(destination: Path, slug: str = "tea-patterns", **overrides) -> ReplicationConfig:
    return ReplicationConfig(destination=destination, slug=slug, **overrides)


def make_files(mapping: dict[str, str | bytes]) -> FileSet:
    return FileSet(mapping)


def make_manifest(mapping: dict[str, str]) -> Manifest:
    return Manifest.from_mapping(mapping)


def populate(root: Path, files: dict[str, str]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def snapshot(root: Path) -> dict[str, str]:
    return {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }
