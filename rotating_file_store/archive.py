"""Packaging of a combined log file (or a directory) into a single archive."""

import logging
import os
import shutil

from rotating_file_store.config import ARCHIVE_EXTENSIONS
from rotating_file_store.errors import PackagingFailedError, SourceMissingError

logger = logging.getLogger(__name__)


def _ensure_folder(source: str) -> tuple[str, bool]:
    """Return (folder, is_temporary) with *source* inside folder.

    A lone file is copied into a sibling directory named after its stem so the
    archive always contains one top-level folder.
    """
    if not os.path.exists(source):
        raise SourceMissingError(f"Source does not exist: {source}")
    if os.path.isdir(source):
        return source, False

    stem = os.path.splitext(os.path.basename(source))[0]
    folder = os.path.join(os.path.dirname(source), stem)
    os.makedirs(folder, exist_ok=True)
    target = os.path.join(folder, os.path.basename(source))
    if os.path.exists(target):
        os.remove(target)
    shutil.copy2(source, target)
    return folder, True


def pack(source: str, destination: str, archive_format: str = "zip") -> str:
    """Archive *source* to *destination*, replacing any existing archive there.

    Returns the archive path. Raises SourceMissingError when *source* is absent
    and PackagingFailedError when the archive could not be written.
    """
    ext = ARCHIVE_EXTENSIONS.get(archive_format)
    if ext is None:
        raise PackagingFailedError(f"Unsupported archive format: {archive_format}")

    try:
        folder, is_temporary = _ensure_folder(source)
    except OSError as e:
        raise PackagingFailedError(f"Unable to stage {source} for packaging: {e}") from e

    suffix = "." + ext
    base_name = destination[: -len(suffix)] if destination.endswith(suffix) else destination
    try:
        if os.path.exists(destination):
            os.remove(destination)
        produced = shutil.make_archive(
            base_name,
            archive_format,
            root_dir=os.path.dirname(folder),
            base_dir=os.path.basename(folder),
        )
        if os.path.abspath(produced) != os.path.abspath(destination):
            shutil.move(produced, destination)
    except (OSError, ValueError, shutil.Error) as e:
        raise PackagingFailedError(f"Failed to archive {source} to {destination}: {e}") from e
    finally:
        if is_temporary:
            try:
                shutil.rmtree(folder)
            except OSError as e:
                logger.warning("Failed to remove temporary folder %s: %s", folder, e)

    return destination
