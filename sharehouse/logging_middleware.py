"""Per-service audit log.

Each service writes one line per request to ``<log_dir>/<service>.log``. The
bookings service also receives the ``sharehouse`` package records (scheduler
decisions, notification delivery), so a rejected booking can be read next to
the request that caused it.
"""
from __future__ import annotations

import logging
from pathlib import Path
from time import perf_counter
from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, Request

from .config import get_settings

REQUEST_ID_HEADER = "X-Request-ID"

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _file_handler(service_name: str) -> logging.Handler:
    log_dir = Path(get_settings().log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / f"{service_name}.log")
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def configure_service_logging(service_name: str, package_logs: bool = False) -> logging.Logger:
    """Return the audit logger of ``service_name``, attaching its file once.

    With ``package_logs`` the ``sharehouse`` package records are written to the
    same file. Only one service per process gets them.
    """

    audit = logging.getLogger(f"audit.{service_name}")
    if audit.handlers:
        return audit

    handler = _file_handler(service_name)
    audit.setLevel(logging.INFO)
    audit.addHandler(handler)

    package_logger = logging.getLogger("sharehouse")
    if package_logs and not any(isinstance(h, logging.FileHandler) for h in package_logger.handlers):
        if package_logger.level == logging.NOTSET:
            package_logger.setLevel(logging.INFO)
        package_logger.addHandler(handler)
    return audit
