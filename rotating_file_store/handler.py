"""logging.Handler that persists records through a RotatingFileStore."""

import logging
import time

from rotating_file_store.store import RotatingFileStore

PACKAGE_LOGGER = "rotating_file_store"


class StoreFormatter(logging.Formatter):
    """Formats records as ``<time> <LEVEL> [<name>] : k=v ... [<module>] <message>``.

    Metadata is the handler-level ``metadata`` dict, then whatever
    ``metadata_provider()`` returns, then the record's ``metadata`` extra,
    later sources winning. When neither the provider nor the record supplies
    anything the metadata block is left out.
    """

    default_time_format = "%Y-%m-%dT%H:%M:%S%z"

    def __init__(self, metadata: dict | None = None, metadata_provider=None):
        super().__init__()
        self.metadata = dict(metadata or {})
        self.metadata_provider = metadata_provider

    def formatTime(self, record, datefmt=None):
        return time.strftime(datefmt or self.default_time_format, self.converter(record.created))

    def _effective_metadata(self, record) -> dict | None:
        provided = (self.metadata_provider() if self.metadata_provider else None) or {}
        explicit = getattr(record, "metadata", None) or {}
        if not provided and not explicit:
            return None
        merged = dict(self.metadata)
        merged.update(provided)
        merged.update(explicit)
        return merged

    def format(self, record):
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        metadata = self._effective_metadata(record)
        pretty = ""
        if metadata:
            pretty = " " + " ".join(f"{k}={metadata[k]}" for k in sorted(metadata))
        return (
            f"{self.formatTime(record)} {record.levelname} [{record.name}] :{pretty} "
            f"[{record.module}] {message}"
        )


class OwnDiagnosticsFilter(logging.Filter):
    """Rejects records from the store's diagnostic logger and this package's loggers."""

    def __init__(self, store: RotatingFileStore):
        super().__init__()
        self.store = store

    def filter(self, record):
        name = record.name
        return not (
            name == self.store.logger.name
            or name == PACKAGE_LOGGER
            or name.startswith(PACKAGE_LOGGER + ".")
        )


class RotatingFileStoreHandler(logging.Handler):
    def __init__(self, store: RotatingFileStore, level=logging.NOTSET,
                 metadata: dict | None = None, metadata_provider=None):
        super().__init__(level)
        self.store = store
        self.setFormatter(StoreFormatter(metadata, metadata_provider))
        # Filters run before Handler.handle takes the lock, so worker-side
        # diagnostics never wait on it while flush() waits on the worker
        self.addFilter(OwnDiagnosticsFilter(store))

    def emit(self, record):
        try:
            self.store.write(self.format(record))
        except Exception:
            self.handleError(record)

    def flush(self):
        if not self.store.closed:
            self.store.flush()
