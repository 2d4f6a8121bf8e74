"""Application logging setup and the per-request audit trail.

Each request produces one audit line in ``<log_dir>/<name>.log`` naming the
gym it touched, if any.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from time import perf_counter
from typing import Optional

from fastapi import FastAPI, Request

from .config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_GYM_PATH = re.compile(r"^/api/(?:gym|gyms)/(\d+)(?:/|$)")


def configure_logging() -> None:
    """Console logging for application modules at the configured level."""

    level = getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)


def _audit_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(f"audit.{name}")
    if logger.handlers:
        return logger

    log_dir = Path(get_settings().log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / f"{name}.log")
    handler.setFormatter(logging.Formatter("%(asctime)s | %(message)s", datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


def gym_in_path(path: str) -> Optional[int]:
    match = _GYM_PATH.match(path)
    return int(match.group(1)) if match else None


def add_audit_middleware(app: FastAPI, name: str) -> None:
    audit = _audit_logger(name)

    @app.middleware("http")
    async def audit_request(request: Request, call_next):  # type: ignore[override]
        started = perf_counter()
        response = await call_next(request)
        gym_id = gym_in_path(request.url.path)
        audit.info(
            "%s %s | status=%s | gym=%s | client=%s | %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            gym_id if gym_id is not None else "-",
            request.client.host if request.client else "unknown",
            (perf_counter() - started) * 1000,
        )
        return response
