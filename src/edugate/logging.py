"""Centralized logging utilities for edugate.

This module provides:
- Logging configuration from GateConfig
- Safe preview utilities for sensitive data
- Secret redaction
- Structured logging with request_id / principal_id propagation
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .config import GateConfig, LogLevel
from .models import Principal

# Patterns for detecting secrets (common patterns to redact)
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|key|api[_-]?key|auth[_-]?token)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=]+)',
    r'(?i)(?:sk-|pk-)[a-zA-Z0-9]{32,}',
    r'(?i)(?:x-api-key|x-auth-token|x-access-token)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'(?i)(?:redis|rediss)://[^@\s]*:[^@\s]+@',  # credentials inside connection URLs
]

_RESERVED_RECORD_KEYS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "taskName", "exc_info", "exc_text", "stack_info",
    "request_id", "principal_id",
}


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded, single-line preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Redact secret patterns from text.

    Args:
        text: The text to redact
        replacement: String to replace secrets with (default: "[REDACTED]")

    Returns:
        Text with secrets redacted
    """
    if not isinstance(text, str):
        return text

    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE | re.DOTALL)

    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Preview plus optional redaction. Use for anything that may carry secrets."""
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_secrets(preview)
    return preview


class GateLogFormatter(logging.Formatter):
    """Formatter that includes request_id / principal_id and emits JSON or plain text.

    Extra fields passed via ``extra=`` are previewed and redacted.
    """

    def __init__(
        self,
        include_request_context: bool = True,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_request_context = include_request_context
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        request_id = getattr(record, "request_id", None)
        principal_id = getattr(record, "principal_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_request_context:
            if request_id:
                log_data["request_id"] = str(request_id)
            if principal_id is not None:
                log_data["principal_id"] = principal_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if request_id:
            parts.append(f"request_id={log_data['request_id']}")
        if principal_id is not None:
            parts.append(f"principal_id={principal_id}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds request_id and principal_id to log records.

    Usage:
        logger = get_request_logger(__name__, request_id=req_id)
        logger.warning("Denied", principal=principal)
    """

    def __init__(
        self,
        logger: logging.Logger,
        request_id: Optional[str] = None,
        principal_id: Optional[int] = None,
    ):
        super().__init__(logger, {})
        self.request_id = request_id
        self.principal_id = principal_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        request_id = kwargs.pop("request_id", self.request_id)
        principal_id = kwargs.pop("principal_id", self.principal_id)

        principal = kwargs.pop("principal", None)
        if isinstance(principal, Principal) and principal_id is None:
            principal_id = principal.id

        extra = dict(kwargs.get("extra") or {})
        if request_id:
            extra["request_id"] = request_id
        if principal_id is not None:
            extra["principal_id"] = principal_id
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[GateConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Configure root logging for an edugate deployment.

    Args:
        config: GateConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        redact_secrets: Whether to redact secrets (default: True)
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        GateLogFormatter(
            include_request_context=True,
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_request_logger(
    name: str,
    request_id: Optional[str] = None,
    principal_id: Optional[int] = None,
) -> RequestLoggerAdapter:
    """Get a logger adapter bound to one request."""
    logger = logging.getLogger(name)
    return RequestLoggerAdapter(logger, request_id=request_id, principal_id=principal_id)


__all__ = [
    "GateLogFormatter",
    "RequestLoggerAdapter",
    "get_request_logger",
    "redact_secrets",
    "safe_log_value",
    "safe_preview",
    "setup_logging",
]
