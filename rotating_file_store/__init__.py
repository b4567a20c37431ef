from rotating_file_store.config import StoreConfig, load_config, load_yaml_config
from rotating_file_store.errors import (
    PackagingError,
    PackagingFailedError,
    RotationConflict,
    SourceMissingError,
)
from rotating_file_store.handler import RotatingFileStoreHandler, StoreFormatter
from rotating_file_store.store import RotatingFileStore

__all__ = [
    "PackagingError",
    "PackagingFailedError",
    "RotatingFileStore",
    "RotatingFileStoreHandler",
    "RotationConflict",
    "SourceMissingError",
    "StoreConfig",
    "StoreFormatter",
    "load_config",
    "load_yaml_config",
]
