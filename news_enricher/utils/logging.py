"""Logging configuration utilities.

One function initializes the root logger for the CLI and the API server;
everything else asks for a named logger through ``get_logger``.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Literal, Optional

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_OUTPUT = os.environ.get("LOG_OUTPUT", "stderr").lower()
LOG_FILE_PATH = os.environ.get("LOG_FILE_PATH", "logs/news-enricher.log")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "text").lower()

LogOutput = Literal["stdout", "stderr", "file", "both"]
LogFormat = Literal["text", "json"]

# Third-party loggers that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "uvicorn.access")


def is_kubernetes_env() -> bool:
    """Check if the process runs inside a Kubernetes pod."""
    return bool(
        os.environ.get("K8S_CLUSTER")
        or os.environ.get("KUBERNETES_SERVICE_HOST")
        or os.path.exists("/var/run/secrets/kubernetes.io/serviceaccount")
    )


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
    module: Optional[str] = None,
) -> None:
    """Configure application logging.

    Parameters
    ----------
    level:
        Logging level as a string (e.g., "INFO") or numeric value.
    output:
        "stdout", "stderr", "file", or "both" (stderr plus file). The
        default keeps stdout free for the CLI JSON output.
    file_path:
        Log file location when output includes "file".
    log_format:
        "text" or "json" (one JSON object per line).
    module:
        Optional logger name that gets the same level as the root logger.
    """
    # Resolved at call time so a .env loaded in main() is honoured
    if level is None:
        level = os.environ.get("LOG_LEVEL", LOG_LEVEL)
    if log_format is None:
        log_format = (os.environ.get("LOG_FORMAT") or LOG_FORMAT).lower()
    if output is None:
        if is_kubernetes_env() and "LOG_OUTPUT" not in os.environ:
            output = "stdout"
        else:
            output = (os.environ.get("LOG_OUTPUT") or LOG_OUTPUT).lower()
    if file_path is None:
        file_path = os.environ.get("LOG_FILE_PATH") or LOG_FILE_PATH

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if log_format == "json":
        formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    if output in ("stdout", "stderr", "both"):
        stream_handler = logging.StreamHandler(sys.stdout if output == "stdout" else sys.stderr)
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)

    if output in ("file", "both"):
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(file_path, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if module:
        logging.getLogger(module).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
