"""Runtime settings read from the environment (and an optional .env file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import structlog
from dotenv import load_dotenv

DEFAULT_API_ORIGIN = "http://localhost:3001"


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    api_origin: str = DEFAULT_API_ORIGIN
    api_prefix: str = "/api"
    api_timeout: float | None = None  # None: rely on the transport's own failures
    session_ttl: int = 1800  # 30 minutes
    max_sessions: int = 200
    max_upload_bytes: int = 5 * 1024 * 1024
    log_level: str = "INFO"
    environment: str = "dev"
    port: int = 8000

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv()
        return cls(
            api_origin=os.environ.get("LIBRARY_API_ORIGIN", DEFAULT_API_ORIGIN).rstrip("/"),
            api_prefix=os.environ.get("LIBRARY_API_PREFIX", "/api"),
            api_timeout=_optional_float(os.environ.get("LIBRARY_API_TIMEOUT")),
            session_ttl=int(os.environ.get("ADMIN_SESSION_TTL", "1800")),
            max_sessions=int(os.environ.get("MAX_ADMIN_SESSIONS", "200")),
            max_upload_bytes=int(os.environ.get("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024))),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            environment=os.environ.get("ENV", "dev"),
            port=int(os.environ.get("PORT", "8000")),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a structlog pipeline that drops events below ``level``."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
    )
