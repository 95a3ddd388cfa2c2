"""Tests for corpus folder status and cleanup."""

import os
from pathlib import Path

import pytest

from truth_sentinel.data_management import CorpusManager

NOW = 1_800_000_000.0
DAY = 86400


def make_files(directory: Path, ages_days: list[int], size: int = 100) -> list[Path]:
    paths = []
    for i, age in enumerate(ages_days):
        path = directory / f"doc_{i}.txt"
        path.write_bytes(b"x" * size)
        mtime = NOW - age * DAY
        os.utime(path, (mtime, mtime))
        paths.append(path)
    return paths


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    directory.mkdir()
    return directory


@pytest.fixture
def manager(corpus: Path) -> CorpusManager:
    return CorpusManager(corpus, protected=[corpus / "learning_log.json"])


class TestStatus:
    def test_status_newest_first(self, corpus: Path, manager: CorpusManager) -> None:
        make_files(corpus, [3, 0, 10])
        status = manager.status(now=NOW)
        assert status.exists is True
        assert status.file_count == 3
        assert [f.age_days for f in status.files] == [0, 3, 10]
        assert status.newest_file_age == 0
        assert status.oldest_file_age == 10

    def test_missing_directory(self, tmp_path: Path) -> None:
        status = CorpusManager(tmp_path / "missing").status()
        assert status.exists is False
        assert status.file_count == 0

    def test_protected_log_not_listed(self, corpus: Path, manager: CorpusManager) -> None:
        make_files(corpus, [1])
        (corpus / "learning_log.json").write_text("[]")
        (corpus / "learning_log.json.lock").write_text("")
        assert [f.name for f in manager.list_files(now=NOW)] == ["doc_0.txt"]


class TestCleanup:
    def test_healthy_folder_untouched(self, corpus: Path, manager: CorpusManager) -> None:
        make_files(corpus, [1, 2])
        report = manager.cleanup(now=NOW)
        assert report.success is True
        assert report.files_deleted == 0
        assert report.message.startswith("Folder is healthy. 2 files")

    def test_age_cleanup_keeps_newest(self, corpus: Path, manager: CorpusManager) -> None:
        paths = make_files(corpus, [0, 10, 20, 35, 40, 50, 60, 70])
        report = manager.cleanup(max_age_days=30, keep_min_files=5, now=NOW)

        assert report.files_analyzed == 8
        assert sorted(report.deleted_files) == ["doc_5.txt", "doc_6.txt", "doc_7.txt"]
        # doc_3 and doc_4 are old but inside the keep-min window
        assert "doc_3.txt" in report.kept_files
        assert all(p.exists() for p in paths[:5])
        assert not any(p.exists() for p in paths[5:])
        assert report.message.startswith("Deleted 3 old files")

    def test_dry_run_deletes_nothing(self, corpus: Path, manager: CorpusManager) -> None:
        paths = make_files(corpus, [0, 40, 50])
        report = manager.cleanup(keep_min_files=1, dry_run=True, now=NOW)
        assert report.dry_run is True
        assert report.files_deleted == 2
        assert report.space_freed_mb == 0.0
        assert report.message.startswith("[DRY RUN] Would delete 2 files")
        assert all(p.exists() for p in paths)

    def test_size_limit_removes_oldest(self, corpus: Path, manager: CorpusManager) -> None:
        make_files(corpus, list(range(8)), size=1024)
        report = manager.cleanup(
            max_age_days=30, max_folder_size_mb=0.003, keep_min_files=2, now=NOW
        )
        assert sorted(report.deleted_files) == [f"doc_{i}.txt" for i in range(3, 8)]
        assert sorted(report.kept_files) == ["doc_0.txt", "doc_1.txt", "doc_2.txt"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        report = CorpusManager(tmp_path / "missing").cleanup()
        assert report.success is False
        assert report.message == "Data directory not found"

    def test_protected_log_never_deleted(self, corpus: Path, manager: CorpusManager) -> None:
        make_files(corpus, [0, 90])
        log_file = corpus / "learning_log.json"
        log_file.write_text("[]")
        old = NOW - 400 * DAY
        os.utime(log_file, (old, old))

        manager.cleanup(keep_min_files=0, now=NOW)
        assert log_file.exists()
