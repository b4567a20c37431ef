"""Rotating file store: one writable current file, a timestamped stash, bounded retention.

Every operation that touches the open handle, the size counter or the current
path runs on a private single-worker executor, so writes, rotations, cleanups,
combines and purges execute one at a time in submission order. Methods whose
names start with an underscore run on that worker and must never submit work
and wait on it.
"""

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from rotating_file_store.archive import pack
from rotating_file_store.config import StoreConfig, normalize_max_size
from rotating_file_store.errors import PackagingError, RotationConflict
from rotating_file_store.fileutil import append_line
from rotating_file_store.retention import delete_files, enforce_retention, list_stash_files

SESSION_MARKER = "-- ** ** ** --"


def stash_listing(config: StoreConfig, current_path: str | None = None,
                  stash_dir: str | None = None) -> list[str]:
    """Stash files for *config*, newest first, without the current or combined file."""
    current_path = current_path or config.resolved_current_path
    exclude = (os.path.basename(config.combined_path), os.path.basename(current_path))
    return list_stash_files(stash_dir or config.stash_dir, config.file_extension, exclude)


class RotatingFileStore:
    def __init__(self, config: StoreConfig | None = None,
                 logger: logging.Logger | None = None, time_func=None):
        self._config = config or StoreConfig()
        self._log = logger or logging.getLogger(__name__)
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._max_file_size = normalize_max_size(self._config.max_file_size_bytes)
        self._max_stash_count = self._config.max_stash_count
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="file-store")
        self._closed = False

        self._file = None
        self._current_path: str | None = None
        self._current_size = 0
        self._stash_dir: str | None = None
        self._combined_path: str | None = None

        current = self._config.resolved_current_path
        self._ensure_dir(self._config.log_dir)
        self._reopen(current)

        # Rotation stays disabled until this is set
        self._stash_dir = self._config.stash_dir
        self._ensure_dir(self._stash_dir)

        if self.should_rotate():
            self._rotate()

    # -- properties ---------------------------------------------------------

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def logger(self) -> logging.Logger:
        return self._log

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def current_file_path(self) -> str | None:
        return self._current_path

    @property
    def current_file_size(self) -> int:
        return self._current_size

    @property
    def stash_directory(self) -> str | None:
        return self._stash_dir

    @property
    def combined_artifact_path(self) -> str | None:
        return self._combined_path

    @property
    def max_file_size_bytes(self) -> int:
        return self._max_file_size

    @max_file_size_bytes.setter
    def max_file_size_bytes(self, value: int):
        self._call(self._set_max_file_size, value)

    @property
    def max_stash_count(self) -> int:
        return self._max_stash_count

    @max_stash_count.setter
    def max_stash_count(self, value: int):
        self._call(self._set_max_stash_count, value)

    # -- public API ---------------------------------------------------------

    def write(self, message: str) -> None:
        """Queue *message* for appending. Never raises."""
        try:
            self._executor.submit(self._write, message)
        except RuntimeError:
            self._log.warning("Store is closed, dropping message")

    def should_rotate(self) -> bool:
        if self._stash_dir is None:
            return False
        return self._current_size >= self._max_file_size

    def rotate(self) -> str | None:
        """Force a rotation. Returns the stash path, or None if it did not happen."""
        return self._call(self._rotate)

    def cleanup(self) -> list[str]:
        """Apply retention now. Returns the deleted stash paths."""
        return self._call(self._cleanup, default=[])

    def list_stash(self) -> list[str]:
        """Stash files, most recently created first. Safe to call from any thread."""
        return stash_listing(self._config, self._current_path, self._stash_dir)

    def stash_count(self) -> int:
        return len(self.list_stash())

    def combine(self, include_current_file: bool = False, archive: bool = False) -> str | None:
        """Concatenate stash files oldest-first into the combined artifact.

        Returns the combined file path, the archive path when *archive* is set
        and packaging succeeded, or None when there was nothing to combine or
        the combine failed.
        """
        return self._call(self._combine, include_current_file, archive)

    def clear_combined_artifact(self) -> None:
        self._call(self._clear_combined)

    def purge(self, include_current_file: bool = False) -> list[str]:
        """Delete every stash file, and the current file too if asked."""
        return self._call(self._purge, include_current_file, default=[])

    def reopen(self, path: str) -> None:
        """Switch the current file to *path*, closing the previous handle first."""
        self._call(self._reopen, path)

    def flush(self) -> None:
        """Block until every operation submitted so far has run."""
        self._call(lambda: None)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._executor.submit(self._close)
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # -- worker-side operations --------------------------------------------

    def _call(self, fn, *args, default=None):
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError:
            self._log.warning("Store is closed, ignoring %s", getattr(fn, "__name__", fn))
            return default
        return future.result()

    def _set_max_file_size(self, value: int):
        self._max_file_size = normalize_max_size(value)

    def _set_max_stash_count(self, value: int):
        self._max_stash_count = value
        self._cleanup()

    def _write(self, message: str):
        self._append(message)
        if self.should_rotate():
            self._rotate()

    def _append(self, message: str):
        try:
            data = message.encode("utf-8")
        except UnicodeEncodeError as e:
            self._log.error("Error encoding log message: %s", e)
            return

        # Counted even if the write below fails
        self._current_size += len(data)

        if self._file is None:
            self._log.error("No open log file at %s, dropping message", self._current_path)
            return
        try:
            self._file.write(data + b"\n")
            self._file.flush()
        except OSError as e:
            self._log.error("Error writing to log file %s: %s", self._current_path, e)

    def _rotate(self) -> str | None:
        source = self._current_path
        stamp = self._time_func().strftime(self._config.stash_suffix_format)
        target = os.path.join(
            self._stash_dir or self._config.log_dir,
            f"{self._config.base_file_name}{stamp}.{self._config.file_extension}",
        )

        try:
            self._move_to_stash(target)
        except RotationConflict as e:
            self._log.warning("Rotation of %s aborted: %s", source, e)
            return None
        except OSError as e:
            self._open_current()
            self._log.error("Unable to rotate file %s to %s: %s", source, target, e)
            return None

        self._current_size = 0
        self._log.info("Rotated file %s to %s", source, target)
        self._open_current()
        self._cleanup()
        return target

    def _move_to_stash(self, target: str):
        if os.path.exists(target):
            raise RotationConflict(target)
        self._close()
        shutil.move(self._current_path, target)

    def _cleanup(self) -> list[str]:
        deleted = enforce_retention(self.list_stash(), self._max_stash_count, self._log)
        if deleted:
            self._log.info("Purged %d stashed file(s): %s", len(deleted), ", ".join(deleted))
        return deleted

    def _combine(self, include_current_file: bool, archive: bool) -> str | None:
        combined = self._config.combined_path
        if os.path.exists(combined):
            try:
                os.remove(combined)
            except OSError as e:
                self._log.warning("Unable to remove stale combined file %s: %s", combined, e)

        sources = list(reversed(self.list_stash()))
        if include_current_file and self._current_path:
            sources.append(self._current_path)
        if not sources:
            return None

        try:
            for path in sources:
                with open(path, "r", encoding="utf-8") as f:
                    contents = f.read()
                append_line(contents, combined)
        except (OSError, UnicodeDecodeError) as e:
            self._log.error("Error combining stashed log files into %s: %s", combined, e)
            return None

        self._combined_path = combined

        if archive:
            try:
                return pack(combined, self._config.archive_path, self._config.archive_format)
            except PackagingError as e:
                self._log.error("Failed to create archive %s: %s", self._config.archive_path, e)
        return combined

    def _clear_combined(self):
        if self._combined_path is None:
            return
        try:
            os.remove(self._combined_path)
        except OSError as e:
            self._log.error("Error clearing combined file %s: %s", self._combined_path, e)
        self._combined_path = None

    def _purge(self, include_current_file: bool) -> list[str]:
        paths = self.list_stash()
        if include_current_file and self._current_path:
            self._close()
            paths.append(self._current_path)

        deleted = delete_files(paths, self._log)
        self._log.info("Purged %d log file(s)", len(deleted))

        if include_current_file:
            self._reopen(self._config.default_current_path)
        return deleted

    # -- handle lifecycle ---------------------------------------------------

    def _reopen(self, path: str):
        self._close()
        self._current_path = path
        self._ensure_dir(os.path.dirname(os.path.abspath(path)))
        self._open_current()
        try:
            self._current_size = os.path.getsize(path)
        except OSError as e:
            self._log.error("Error fetching current log file size for %s: %s", path, e)
            self._current_size = 0

    def _open_current(self):
        path = self._current_path
        existed = os.path.exists(path)
        try:
            self._file = open(path, "ab")
        except OSError as e:
            self._log.error("Attempt to open log file %s failed: %s", path, e)
            self._file = None
            return
        if existed:
            self._append(SESSION_MARKER)
        self._log.info("Opened log file at %s", path)

    def _close(self):
        if self._file is None:
            return
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
        except OSError as e:
            self._log.error("Error syncing log file %s: %s", self._current_path, e)
        finally:
            self._file.close()
            self._file = None

    def _ensure_dir(self, path: str):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            self._log.error("Unable to create directory %s: %s", path, e)
