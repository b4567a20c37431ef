"""Rotating file store demo — generates log traffic through the logging handler until stopped."""

import argparse
import logging
import os
import random
import signal
import sys
import time
import uuid

from rotating_file_store.config import load_config, load_yaml_config
from rotating_file_store.handler import RotatingFileStoreHandler
from rotating_file_store.store import RotatingFileStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [file-store] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, _frame):
    global _running
    logger.info("Shutdown signal received (signal %d), stopping...", sig)
    _running = False


LEVELS = [logging.INFO, logging.INFO, logging.INFO, logging.DEBUG, logging.WARNING, logging.ERROR]
SERVICES = ["auth-api", "order-svc", "payment-gw", "user-svc", "catalog-api"]
MESSAGES = {
    logging.INFO: [
        "Request processed successfully",
        "Health check passed",
        "Cache hit for user session",
    ],
    logging.DEBUG: [
        "Entering request handler",
        "Token validation started",
    ],
    logging.WARNING: [
        "Slow query detected (>500ms)",
        "Connection pool nearing capacity",
    ],
    logging.ERROR: [
        "Failed to connect to database",
        "Timeout waiting for upstream response",
    ],
}


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rotating file store demo")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--interval", type=float, default=0.05,
                        help="Seconds between generated entries (default: 0.05)")
    parser.add_argument("--combine-on-exit", action="store_true",
                        help="Combine stashed files (and the current one) on shutdown")
    parser.add_argument("--archive", action="store_true",
                        help="Package the combined file into an archive")
    return parser


def emit_entry(app_logger: logging.Logger):
    level = random.choice(LEVELS)
    app_logger.log(
        level,
        random.choice(MESSAGES[level]),
        extra={"metadata": {"service": random.choice(SERVICES), "req": uuid.uuid4().hex[:8]}},
    )


def main():
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    args = build_cli_parser().parse_args()
    config = load_config(load_yaml_config(args.config))
    logger.info(
        "Config: log_dir=%s, max_size=%d bytes, max_stash=%d, archive_format=%s",
        config.log_dir, config.max_file_size_bytes, config.max_stash_count, config.archive_format,
    )

    store = RotatingFileStore(config)
    app_logger = logging.getLogger("demo")
    app_logger.setLevel(logging.DEBUG)
    app_logger.propagate = False
    app_logger.addHandler(RotatingFileStoreHandler(store, metadata={"pid": str(os.getpid())}))

    entries_written = 0
    try:
        while _running:
            emit_entry(app_logger)
            entries_written += 1
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass

    store.flush()
    logger.info("Stashed files: %d", store.stash_count())
    if args.combine_on_exit:
        result = store.combine(include_current_file=True, archive=args.archive)
        logger.info("Combined output: %s", result)

    store.close()
    logger.info("Shut down cleanly. Total entries written: %d", entries_written)


if __name__ == "__main__":
    main()
