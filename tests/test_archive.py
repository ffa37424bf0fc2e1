from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from replicator.core.errors import PreconditionError
from replicator.destination.archive import write_archive
from replicator.destination.writer import write_to_destination
from replicator.rendering.builder import FileSet

from tests.helpers import make_files


def test_archive_uses_bare_relative_paths(destination: Path) -> None:
    files = make_files({"README.md": "Hello", "inc/admin.php": "<?php"})
    archive_path = destination / "foo.zip"

    ledger = write_archive(files, archive_path)

    assert ledger.target == "zip"
    assert ledger.ok
    with zipfile.ZipFile(archive_path) as archive:
        assert sorted(archive.namelist()) == ["README.md", "inc/admin.php"]
        assert archive.read("README.md") == b"Hello"
    assert ledger.records[0].message == "Successfully wrote: README.md"


def test_archive_replaces_existing_archive(destination: Path) -> None:
    archive_path = destination / "foo.zip"
    write_archive(make_files({"stale.txt": "old"}), archive_path)

    write_archive(make_files({"README.md": "new"}), archive_path)

    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == ["README.md"]


def test_archive_and_local_paths_match(destination: Path) -> None:
    files = make_files({"README.md": "a", "src/x.py": "b", "src/y/z.txt": "c"})

    local = write_to_destination(files, destination, "foo")
    archived = write_archive(files, destination / "foo.zip")

    assert local.ok and archived.ok
    assert local.written_paths == archived.written_paths == set(files)


def test_unopenable_archive_records_every_file(destination: Path) -> None:
    archive_path = destination / "foo.zip"
    archive_path.mkdir(parents=True)

    ledger = write_archive(make_files({"a.txt": "1", "b.txt": "2"}), archive_path)

    assert len(ledger) == 2
    assert not ledger.succeeded
    assert all("Failed to open archive" in r.message for r in ledger.records)


def test_empty_file_set_is_a_precondition_error(destination: Path) -> None:
    with pytest.raises(PreconditionError):
        write_archive(FileSet(), destination / "foo.zip")


def test_failed_member_is_recorded_and_others_still_written(
    destination: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_writestr = zipfile.ZipFile.writestr

    def writestr(self, name, data, *args, **kwargs):
        if name == "b.txt":
            raise OSError("No space left on device")
        return real_writestr(self, name, data, *args, **kwargs)

    monkeypatch.setattr(zipfile.ZipFile, "writestr", writestr)
    archive_path = destination / "foo.zip"

    ledger = write_archive(make_files({"a.txt": "1", "b.txt": "2", "c.txt": "3"}), archive_path)

    assert [r.destination_path for r in ledger.failed] == ["b.txt"]
    assert ledger.failed[0].message == "Failed to write: No space left on device"
    assert [r.destination_path for r in ledger.succeeded] == ["a.txt", "c.txt"]
    with zipfile.ZipFile(archive_path) as archive:
        assert sorted(archive.namelist()) == ["a.txt", "c.txt"]
