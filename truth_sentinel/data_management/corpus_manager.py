"""Maintenance of the local reference corpus directory.

Reports folder health and prunes old documents so the corpus stays small
enough for the lexical index. The learning log and its lock/temp siblings
are never listed or deleted.
"""

import time
from pathlib import Path
from typing import Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from truth_sentinel.config.settings import settings

BYTES_PER_MB = 1024 * 1024
SECONDS_PER_DAY = 60 * 60 * 24


class CorpusFile(BaseModel):
    """One file in the corpus directory."""

    name: str
    path: Path
    size_bytes: int
    modified_at: float
    age_days: int

    @property
    def size_mb(self) -> float:
        return self.size_bytes / BYTES_PER_MB


class CorpusStatus(BaseModel):
    """Folder health snapshot."""

    exists: bool
    file_count: int = 0
    total_size_mb: float = 0.0
    oldest_file_age: int = 0
    newest_file_age: int = 0
    files: list[CorpusFile] = Field(default_factory=list)


class CleanupReport(BaseModel):
    """Outcome of a cleanup run."""

    success: bool
    dry_run: bool = False
    files_analyzed: int = 0
    deleted_files: list[str] = Field(default_factory=list)
    kept_files: list[str] = Field(default_factory=list)
    space_freed_mb: float = 0.0
    message: str = ""

    @property
    def files_deleted(self) -> int:
        return len(self.deleted_files)


class CorpusManager:
    """Status and cleanup for the corpus directory."""

    def __init__(
        self,
        data_dir: Optional[str | Path] = None,
        protected: Sequence[str | Path] = (),
    ) -> None:
        """Initialize CorpusManager.

        Args:
            data_dir: Corpus directory. Defaults to settings.data_dir.
            protected: Files never deleted. The learning log is always protected.
        """
        self.data_dir = Path(data_dir or settings.data_dir)
        log_path = Path(settings.learning_log_path)
        protected_paths = [log_path, *map(Path, protected)]
        self._protected = set()
        for path in protected_paths:
            resolved = path.resolve()
            self._protected.update(
                {resolved, Path(f"{resolved}.lock"), Path(f"{resolved}.tmp")}
            )
        self._logger = structlog.get_logger().bind(component="CorpusManager")

    def list_files(self, now: Optional[float] = None) -> list[CorpusFile]:
        """Top-level corpus files, newest first."""
        now = now if now is not None else time.time()
        files = []
        for path in self.data_dir.iterdir():
            if not path.is_file() or self._is_protected(path):
                continue
            stat = path.stat()
            files.append(
                CorpusFile(
                    name=path.name,
                    path=path,
                    size_bytes=stat.st_size,
                    modified_at=stat.st_mtime,
                    age_days=int((now - stat.st_mtime) // SECONDS_PER_DAY),
                )
            )
        files.sort(key=lambda f: f.modified_at, reverse=True)
        return files

    def status(self, now: Optional[float] = None) -> CorpusStatus:
        if not self.data_dir.exists():
            return CorpusStatus(exists=False)

        files = self.list_files(now)
        total_mb = sum(f.size_bytes for f in files) / BYTES_PER_MB

        self._logger.info(
            "corpus_status", file_count=len(files), total_size_mb=round(total_mb, 2)
        )
        return CorpusStatus(
            exists=True,
            file_count=len(files),
            total_size_mb=round(total_mb, 2),
            oldest_file_age=files[-1].age_days if files else 0,
            newest_file_age=files[0].age_days if files else 0,
            files=files,
        )

    def cleanup(
        self,
        max_age_days: int = 30,
        max_folder_size_mb: float = 50.0,
        keep_min_files: int = 5,
        dry_run: bool = False,
        now: Optional[float] = None,
    ) -> CleanupReport:
        """Delete old files, then the oldest files while the folder is too large.

        The newest ``keep_min_files`` files are always kept.

        Args:
            max_age_days: Files older than this are deleted.
            max_folder_size_mb: Size limit applied after the age pass.
            keep_min_files: Newest files that are never deleted.
            dry_run: Report what would be deleted without deleting.
            now: Reference time (epoch seconds), defaults to the current time.

        Returns:
            CleanupReport describing deleted and kept files.
        """
        if not self.data_dir.exists():
            self._logger.warning("corpus_missing", path=str(self.data_dir))
            return CleanupReport(success=False, message="Data directory not found")

        files = self.list_files(now)
        total_mb = sum(f.size_bytes for f in files) / BYTES_PER_MB
        needs_cleanup = total_mb > max_folder_size_mb or any(
            f.age_days > max_age_days for f in files
        )

        if not needs_cleanup:
            return CleanupReport(
                success=True,
                dry_run=dry_run,
                files_analyzed=len(files),
                kept_files=[f.name for f in files],
                message=f"Folder is healthy. {len(files)} files, {total_mb:.2f}MB total",
            )

        keep = files[:keep_min_files]
        candidates = files[keep_min_files:]
        to_delete = [f for f in candidates if f.age_days > max_age_days]

        remaining_mb = total_mb - sum(f.size_mb for f in to_delete)
        if remaining_mb > max_folder_size_mb:
            for f in sorted(candidates, key=lambda c: c.modified_at):
                if remaining_mb <= max_folder_size_mb:
                    break
                if f in to_delete:
                    continue
                to_delete.append(f)
                remaining_mb -= f.size_mb

        deleted: list[str] = []
        freed_bytes = 0
        for f in to_delete:
            if dry_run:
                deleted.append(f.name)
                continue
            try:
                f.path.unlink()
            except OSError as e:
                self._logger.error("corpus_delete_failed", file=f.name, error=str(e))
                continue
            deleted.append(f.name)
            freed_bytes += f.size_bytes

        deleted_names = set(deleted)
        kept = [f.name for f in keep] + [
            f.name for f in candidates if f.name not in deleted_names
        ]
        freed_mb = freed_bytes / BYTES_PER_MB
        if dry_run:
            would_free = sum(f.size_mb for f in to_delete)
            message = f"[DRY RUN] Would delete {len(deleted)} files ({would_free:.2f}MB)"
        else:
            message = f"Deleted {len(deleted)} old files, freed {freed_mb:.2f}MB"

        self._logger.info(
            "corpus_cleanup",
            dry_run=dry_run,
            files_deleted=len(deleted),
            space_freed_mb=round(freed_mb, 2),
            remaining_files=len(kept),
        )
        return CleanupReport(
            success=True,
            dry_run=dry_run,
            files_analyzed=len(files),
            deleted_files=deleted,
            kept_files=kept,
            space_freed_mb=round(freed_mb, 2),
            message=message,
        )

    def _is_protected(self, path: Path) -> bool:
        return path.resolve() in self._protected
