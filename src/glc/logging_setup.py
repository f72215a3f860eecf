from __future__ import annotations

import logging
import os
import sys
import uuid
from logging.handlers import RotatingFileHandler
from typing import Callable

from pythonjsonlogger.json import JsonFormatter

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s [%(run_id)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(run_id)s"


class RunIdRecordFactory:
    """Setzt ``run_id`` auf jeden LogRecord; wird nur einmal installiert."""

    def __init__(self, wrapped: Callable[..., logging.LogRecord], run_id: str) -> None:
        self.wrapped = wrapped
        self.run_id = run_id

    def __call__(self, *args, **kwargs) -> logging.LogRecord:
        record = self.wrapped(*args, **kwargs)
        if not hasattr(record, "run_id"):
            record.run_id = self.run_id
        return record


def install_run_id(run_id: str) -> RunIdRecordFactory:
    factory = logging.getLogRecordFactory()
    if isinstance(factory, RunIdRecordFactory):
        factory.run_id = run_id
        return factory
    factory = RunIdRecordFactory(factory, run_id)
    logging.setLogRecordFactory(factory)
    return factory


def _formatter(json_mode: bool) -> logging.Formatter:
    if json_mode:
        return JsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    return logging.Formatter(fmt=PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _file_handler(path: str) -> logging.Handler | None:
    max_bytes = int(os.getenv("LOG_MAX_BYTES", "10485760"))
    backup_count = int(os.getenv("LOG_BACKUP_COUNT", "5"))
    try:
        return RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning("Cannot open log file %s: %s", path, e)
        return None


def setup_logging_from_env() -> str:
    """Konfiguriert das Root-Logging aus der Umgebung und gibt die run_id zurück.

    RUN_ID, LOG_LEVEL (Default WARNING), LOG_JSON, LOG_FILE, LOG_MAX_BYTES,
    LOG_BACKUP_COUNT. Konsole ist stderr, stdout bleibt für das CSV frei.
    Mehrfache Aufrufe ersetzen Handler und run_id, stapeln aber nichts.
    """
    run_id = os.getenv("RUN_ID") or str(uuid.uuid4())
    install_run_id(run_id)

    level = getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING)
    fmt = _formatter(os.getenv("LOG_JSON", "false").lower() == "true")

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_file = os.getenv("LOG_FILE")
    if log_file:
        fh = _file_handler(log_file)
        if fh is not None:
            handlers.append(fh)
    for h in handlers:
        h.setFormatter(fmt)
        root.addHandler(h)

    # httpx loggt jeden Request auf INFO
    if level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging initialized")
    return run_id
