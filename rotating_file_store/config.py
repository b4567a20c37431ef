"""Configuration module — frozen dataclass loaded from YAML and environment variables."""

import logging
import os
import tempfile
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

# Stand-in for "no size limit" when max_file_size_bytes is configured as 0
UNLIMITED = 2**64 - 1

ARCHIVE_EXTENSIONS = {
    "zip": "zip",
    "tar": "tar",
    "gztar": "tar.gz",
    "bztar": "tar.bz2",
    "xztar": "tar.xz",
}


def normalize_max_size(value: int) -> int:
    return UNLIMITED if value < 1 else value


@dataclass(frozen=True)
class StoreConfig:
    log_dir: str = os.path.join(tempfile.gettempdir(), "log")
    base_file_name: str = "file-logger"
    file_extension: str = "log"
    current_file_path: str | None = None
    max_file_size_bytes: int = 1_048_576  # 1 MB
    max_stash_count: int = 10
    stash_suffix_format: str = "_%Y-%m-%d_%H%M%S"
    archive_format: str = "zip"

    @property
    def file_name(self) -> str:
        return f"{self.base_file_name}.{self.file_extension}"

    @property
    def default_current_path(self) -> str:
        return os.path.join(self.log_dir, self.file_name)

    @property
    def resolved_current_path(self) -> str:
        return self.current_file_path or self.default_current_path

    @property
    def stash_dir(self) -> str:
        """Parent of the current file when it follows the naming convention, else log_dir."""
        current = self.resolved_current_path
        if os.path.basename(current) == self.file_name:
            return os.path.dirname(os.path.abspath(current))
        return self.log_dir

    @property
    def combined_path(self) -> str:
        return os.path.join(
            self.log_dir, f"{self.base_file_name}_combined_stashed.{self.file_extension}"
        )

    @property
    def archive_path(self) -> str:
        ext = ARCHIVE_EXTENSIONS[self.archive_format]
        return os.path.join(self.log_dir, f"{self.base_file_name}_archived.{ext}")


def load_yaml_config(path: str | None) -> dict:
    """Load the ``store`` section of a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    logger.info("Loaded YAML config from %s", path)
    return data.get("store", {}) or {}


def load_config(yaml_data: dict | None = None) -> StoreConfig:
    """Build StoreConfig from env vars, then YAML values, then defaults."""
    yaml_data = yaml_data or {}

    def pick(env_key: str, yaml_key: str, default):
        raw = os.environ.get(env_key)
        if raw is not None:
            return raw
        return yaml_data.get(yaml_key, default)

    # MAX_FILE_SIZE_BYTES takes precedence over MAX_FILE_SIZE_MB
    raw_bytes = os.environ.get("MAX_FILE_SIZE_BYTES")
    raw_mb = os.environ.get("MAX_FILE_SIZE_MB")
    if raw_bytes is not None:
        max_size = int(raw_bytes)
    elif raw_mb is not None:
        max_size = int(float(raw_mb) * 1024 * 1024)
    else:
        max_size = int(yaml_data.get("max_file_size_bytes", StoreConfig.max_file_size_bytes))

    archive_format = pick("ARCHIVE_FORMAT", "archive_format", StoreConfig.archive_format)
    if archive_format not in ARCHIVE_EXTENSIONS:
        raise ValueError(
            f"Unsupported archive format {archive_format!r}, "
            f"expected one of {sorted(ARCHIVE_EXTENSIONS)}"
        )

    return StoreConfig(
        log_dir=pick("LOG_DIR", "log_dir", StoreConfig.log_dir),
        base_file_name=pick("LOG_BASE_NAME", "base_file_name", StoreConfig.base_file_name),
        file_extension=pick("LOG_FILE_EXTENSION", "file_extension", StoreConfig.file_extension),
        current_file_path=pick("LOG_FILE_PATH", "current_file_path", None),
        max_file_size_bytes=max_size,
        max_stash_count=int(pick("MAX_STASH_COUNT", "max_stash_count", StoreConfig.max_stash_count)),
        stash_suffix_format=pick(
            "STASH_SUFFIX_FORMAT", "stash_suffix_format", StoreConfig.stash_suffix_format
        ),
        archive_format=archive_format,
    )
