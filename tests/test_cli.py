from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from replicator.cli import app

from tests.helpers import populate, snapshot

runner = CliRunner()


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    path = tmp_path / "manifest.yaml"
    path.write_text(
        "README.md: readme\ntea-patterns.php: php/plugin-file.php\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def data_file(tmp_path: Path, data_context: dict) -> Path:
    path = tmp_path / "data.json"
    path.write_text(json.dumps(data_context), encoding="utf-8")
    return path


def _run_args(manifest_file: Path, templates_dir: Path, destination: Path, data_file: Path) -> list[str]:
    return [
        "run",
        "--manifest",
        str(manifest_file),
        "--templates",
        str(templates_dir),
        "--dest",
        str(destination),
        "--data",
        str(data_file),
    ]


def test_run_writes_project_and_data_file(
    manifest_file: Path, templates_dir: Path, destination: Path, data_file: Path
) -> None:
    result = runner.invoke(
        app, _run_args(manifest_file, templates_dir, destination, data_file) + ["--zip"]
    )

    assert result.exit_code == 0, result.output
    written = snapshot(destination / "tea-patterns")
    assert sorted(written) == ["README.md", "tea-patterns-data.json", "tea-patterns.php"]
    assert "namespace Tea_Patterns;" in written["tea-patterns.php"]
    with zipfile.ZipFile(destination / "tea-patterns.zip") as archive:
        assert sorted(archive.namelist()) == sorted(written)
    assert "Local files: 3 written" in result.output
    assert "Archive: 3 written" in result.output


def test_run_set_overrides_and_no_data_file(
    manifest_file: Path, templates_dir: Path, destination: Path, data_file: Path
) -> None:
    args = _run_args(manifest_file, templates_dir, destination, data_file)
    result = runner.invoke(
        app, args + ["--set", "label=Green Tea", "--slug", "green", "--no-data-file"]
    )

    assert result.exit_code == 0, result.output
    written = snapshot(destination / "green")
    assert sorted(written) == ["README.md", "tea-patterns.php"]
    assert written["README.md"].startswith("# Green Tea")


def test_run_declined_delete_exits_cleanly(
    manifest_file: Path, templates_dir: Path, destination: Path, data_file: Path
) -> None:
    populate(destination / "tea-patterns", {"README.md": "old"})

    result = runner.invoke(
        app,
        _run_args(manifest_file, templates_dir, destination, data_file),
        input="delete\nn\n",
    )

    assert result.exit_code == 0, result.output
    assert "Aborted" in result.output
    assert snapshot(destination / "tea-patterns") == {"README.md": "old"}
    assert "Local files" not in result.output


def test_run_backup_without_prompt(
    manifest_file: Path, templates_dir: Path, destination: Path, data_file: Path
) -> None:
    populate(destination / "tea-patterns", {"README.md": "old"})

    result = runner.invoke(
        app,
        _run_args(manifest_file, templates_dir, destination, data_file)
        + ["--on-conflict", "backup", "--no-interactive"],
    )

    assert result.exit_code == 0, result.output
    backups = [p for p in destination.iterdir() if p.name.startswith("tea-patterns-backup_")]
    assert len(backups) == 1
    assert snapshot(backups[0]) == {"README.md": "old"}
    assert "backed up to" in result.output


def test_run_missing_template_fails_without_writing(
    tmp_path: Path, templates_dir: Path, destination: Path, data_file: Path
) -> None:
    manifest = tmp_path / "broken.yaml"
    manifest.write_text("a.txt: missing\n", encoding="utf-8")

    result = runner.invoke(app, _run_args(manifest, templates_dir, destination, data_file))

    assert result.exit_code == 1
    assert "Template not found: missing" in result.output
    assert not destination.exists()


def test_run_reports_failed_files(
    manifest_file: Path, templates_dir: Path, destination: Path, data_file: Path
) -> None:
    (destination / "tea-patterns" / "README.md").mkdir(parents=True)

    result = runner.invoke(
        app,
        _run_args(manifest_file, templates_dir, destination, data_file) + ["--no-interactive"],
    )

    assert result.exit_code == 1
    assert "FAIL README.md" in result.output
    assert "OK   tea-patterns.php" in result.output
    assert "2 written, 1 failed" in result.output


def test_run_requires_a_slug(
    manifest_file: Path, templates_dir: Path, destination: Path, tmp_path: Path
) -> None:
    empty = tmp_path / "empty.yaml"
    empty.write_text("label: x\nnamespace: X\ndesc: y\n", encoding="utf-8")

    result = runner.invoke(app, _run_args(manifest_file, templates_dir, destination, empty))

    assert result.exit_code == 1
    assert "slug" in result.output


def test_run_rejects_bad_assignment(
    manifest_file: Path, templates_dir: Path, destination: Path, data_file: Path
) -> None:
    args = _run_args(manifest_file, templates_dir, destination, data_file)
    result = runner.invoke(app, args + ["--set", "novalue"])
    assert result.exit_code == 2


def test_check_lists_missing_templates(tmp_path: Path, templates_dir: Path) -> None:
    manifest = tmp_path / "manifest.yaml"
    manifest.write_text("README.md: readme\nlib.php: missing-lib\n", encoding="utf-8")

    result = runner.invoke(app, ["check", "--manifest", str(manifest), "--templates", str(templates_dir)])

    assert result.exit_code == 1
    assert "Missing template missing-lib (for lib.php)" in result.output


def test_check_passes(manifest_file: Path, templates_dir: Path) -> None:
    result = runner.invoke(
        app, ["check", "--manifest", str(manifest_file), "--templates", str(templates_dir)]
    )
    assert result.exit_code == 0, result.output
    assert "All 2 template(s) found." in result.output


def test_run_takes_data_from_dotenv(tmp_path: Path, destination: Path) -> None:
    templates = tmp_path / "tpl"
    templates.mkdir()
    (templates / "readme.j2").write_text("by {{ author }}{{ author_uri }}\n", encoding="utf-8")
    manifest = tmp_path / "m.yaml"
    manifest.write_text("README.md: readme\n", encoding="utf-8")
    (tmp_path / ".env").write_text("REPLICATOR_DATA_AUTHOR=Jane\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "run",
            "--manifest",
            str(manifest),
            "--templates",
            str(templates),
            "--dest",
            str(destination),
            "--slug",
            "foo",
            "--no-interactive",
            "--no-data-file",
        ],
    )

    assert result.exit_code == 0, result.output
    assert snapshot(destination / "foo") == {"README.md": "by Jane\n"}


def test_run_strict_flag_rejects_undefined_values(
    manifest_file: Path, templates_dir: Path, destination: Path, tmp_path: Path
) -> None:
    data = tmp_path / "partial.yaml"
    data.write_text("slug: tea-patterns\nlabel: Tea\n", encoding="utf-8")

    result = runner.invoke(
        app, _run_args(manifest_file, templates_dir, destination, data) + ["--strict"]
    )

    assert result.exit_code == 1
    assert "Undefined template variable" in result.output
    assert not destination.exists()


def test_run_no_zip_overrides_setting(
    manifest_file: Path,
    templates_dir: Path,
    destination: Path,
    data_file: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("REPLICATOR_ZIP", "true")
    args = _run_args(manifest_file, templates_dir, destination, data_file)

    result = runner.invoke(app, args + ["--no-zip"])

    assert result.exit_code == 0, result.output
    assert (destination / "tea-patterns" / "README.md").is_file()
    assert not (destination / "tea-patterns.zip").exists()


def test_run_reports_invalid_settings_without_traceback(
    manifest_file: Path,
    templates_dir: Path,
    destination: Path,
    data_file: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("REPLICATOR_WRITE_RETRIES", "abc")

    result = runner.invoke(app, _run_args(manifest_file, templates_dir, destination, data_file))

    assert result.exit_code == 1
    assert "Error: Invalid settings: write_retries" in result.output
    assert "Traceback" not in result.output
    assert not destination.exists()
