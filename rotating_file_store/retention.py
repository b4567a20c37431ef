"""Stash listing and count-based retention."""

import logging
import os

logger = logging.getLogger(__name__)


def _creation_time(path: str) -> float:
    st = os.stat(path)
    # st_birthtime is missing on most Linux builds; ctime is the closest stand-in
    return getattr(st, "st_birthtime", st.st_ctime)


def list_stash_files(stash_dir: str, file_extension: str,
                     exclude_names: tuple[str, ...] = ()) -> list[str]:
    """List stash files in *stash_dir*, most recently created first.

    Only regular files ending in ``.<file_extension>`` are considered, and any
    name in *exclude_names* is skipped. Files whose timestamp cannot be read
    (for instance removed mid-scan) are dropped.
    """
    try:
        names = os.listdir(stash_dir)
    except OSError as e:
        logger.error("Unable to list stash directory %s: %s", stash_dir, e)
        return []

    suffix = "." + file_extension
    candidates = []
    for name in names:
        if not name.endswith(suffix) or name.startswith(".") or name in exclude_names:
            continue
        path = os.path.join(stash_dir, name)
        if not os.path.isfile(path):
            continue
        try:
            created = _creation_time(path)
        except OSError:
            continue
        candidates.append((created, name, path))

    candidates.sort(reverse=True)
    return [path for _, _, path in candidates]


def delete_files(paths: list[str], log: logging.Logger | None = None) -> list[str]:
    """Best-effort delete. Failures are logged per file. Returns the deleted paths."""
    log = log or logger
    deleted = []
    for path in paths:
        try:
            os.remove(path)
        except OSError as e:
            log.error("Unable to delete stashed log file %s: %s", path, e)
            continue
        deleted.append(path)
    return deleted


def expired_files(stash_newest_first: list[str], max_count: int) -> list[str]:
    """Files beyond the newest *max_count* entries."""
    if len(stash_newest_first) <= max_count:
        return []
    return stash_newest_first[max_count:]


def enforce_retention(stash_newest_first: list[str], max_count: int,
                      log: logging.Logger | None = None) -> list[str]:
    """Delete the oldest stash files beyond *max_count*. Returns deleted paths."""
    return delete_files(expired_files(stash_newest_first, max_count), log)
