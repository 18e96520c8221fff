"""
structlog configuration for Nocturna.

Every log line is a single JSON object. Request-scoped values bound by
``RequestContextMiddleware`` (request_id, client_ip) are merged into each
event automatically.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory

# Never written out, whatever the caller passes
_REDACTED_KEYS = frozenset({"password", "password_hash", "token", "session"})


def setup_logging(log_level: str = "INFO") -> None:
    """
    Install the structlog processor chain and route it through stdlib logging.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_secrets,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level.upper())

    for noisy in ("psycopg.pool", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _redact_secrets(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_request(
    method: str, path: str, status_code: int, duration_ms: float, user_id: str | None = None
) -> None:
    """One line per HTTP request; 4xx as warnings, 5xx as errors."""
    logger = get_logger("http")
    fields = {"method": method, "path": path, "status_code": status_code, "duration_ms": duration_ms}
    if user_id:
        fields["user_id"] = user_id

    if status_code >= 500:
        logger.error("HTTP request failed", **fields)
    elif status_code >= 400:
        logger.warning("HTTP request rejected", **fields)
    else:
        logger.info("HTTP request completed", **fields)
