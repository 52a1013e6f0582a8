"""Root logger setup for the ingestion CLI.

Every module asks for a named logger through ``get_logger``; ``configure_logging``
is called once from ``main`` and decides where records go (stdout, a rotating
file, or both) and whether they are rendered as text or one JSON object per line.
Settings come from arguments first, then ``CIVICNEWS_LOG_*`` / ``LOG_*`` env vars.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, List, Literal

LogOutput = Literal["stdout", "file", "both"]
LogFormat = Literal["text", "json"]

DEFAULT_LOG_FILE = os.path.join("logs", "civicnews.log")
NOISY_LOGGERS = ("urllib3", "charset_normalizer")

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(threadName)s | %(message)s"
_JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", '
    '"thread": "%(threadName)s", "message": "%(message)s"}'
)
_ROTATE_BYTES = 10 * 1024 * 1024
_ROTATE_KEEP = 5


def _env(key: str, default: str) -> str:
    return os.environ.get(f"CIVICNEWS_{key}") or os.environ.get(key) or default


def running_in_cluster() -> bool:
    """True inside a Kubernetes pod, where logs should go to stdout only."""
    if os.environ.get("K8S_CLUSTER") or os.environ.get("KUBERNETES_SERVICE_HOST"):
        return True
    return os.path.exists("/var/run/secrets/kubernetes.io/serviceaccount")


def _resolve(level, output, file_path, log_format):
    # read at call time so values loaded from .env by main() apply
    level = level if level is not None else _env("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = level.upper()
    if output is None:
        explicit = os.environ.get("CIVICNEWS_LOG_OUTPUT") or os.environ.get("LOG_OUTPUT")
        output = "stdout" if running_in_cluster() and not explicit else _env("LOG_OUTPUT", "stdout")
    return (
        level,
        output.lower(),
        file_path or _env("LOG_FILE_PATH", DEFAULT_LOG_FILE),
        (log_format or _env("LOG_FORMAT", "text")).lower(),
    )


def _handlers(output: str, file_path: str) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if output in ("file", "both"):
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(RotatingFileHandler(file_path, maxBytes=_ROTATE_BYTES, backupCount=_ROTATE_KEEP))
    return handlers


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Replace the root logger's handlers.

    Parameters
    ----------
    level:
        Level name ("DEBUG", "INFO", ...) or number. Defaults to LOG_LEVEL.
    output:
        "stdout", "file" or "both". Forced to "stdout" inside a cluster unless
        LOG_OUTPUT is set explicitly.
    file_path:
        Rotating log file used when output includes "file".
    log_format:
        "text" for pipe-separated lines, "json" for one object per line.
    quiet:
        Third-party loggers held at WARNING; the HTTP stack logs every
        connection and retry at DEBUG.
    """
    level, output, file_path, log_format = _resolve(level, output, file_path, log_format)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    formatter = logging.Formatter(_JSON_FORMAT if log_format == "json" else _TEXT_FORMAT)
    for handler in _handlers(output, file_path):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
