"""Exceptions raised inside the store and its collaborators."""


class RotationConflict(Exception):
    """Raised when the stash target for a rotation already exists."""

    def __init__(self, target: str):
        super().__init__(f"Stash target already exists: {target}")
        self.target = target


class PackagingError(Exception):
    """Base class for archive packaging failures."""


class SourceMissingError(PackagingError):
    """Raised when the file or directory to package does not exist."""


class PackagingFailedError(PackagingError):
    """Raised when the archiver could not produce the archive."""
