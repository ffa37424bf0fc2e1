from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in list(os.environ):
        if key.upper().startswith("REPLICATOR_"):
            monkeypatch.delenv(key, raising=False)
    # settings read .env from the working directory
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    return tmp_path / "dest"


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    (root / "php").mkdir(parents=True)
    (root / "readme.j2").write_text("# {{ label }}\n\n{{ desc }}\n", encoding="utf-8")
    (root / "php" / "plugin-file.php.j2").write_text(
        "<?php\n/**\n * Plugin Name: {{ label }}\n */\nnamespace {{ namespace }};\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def data_context() -> dict:
    return {
        "label": "Tea Patterns",
        "slug": "tea-patterns",
        "namespace": "Tea_Patterns",
        "desc": "Earl Grey, hot.",
    }
