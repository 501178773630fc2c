"""Log sanitization filter to keep credentials and PII out of logs.

User ids in this service are often email addresses, and requests reaching the
API carry auth headers, so records are scrubbed of:
- Email addresses
- Bearer tokens and authorization headers
- JWT tokens
- token / secret / api_key fields

Usage:
    from coach_briefing.utils.log_sanitizer import install_log_sanitizer

    # Apply to all loggers at application startup
    install_log_sanitizer()
"""

import logging
import re
from typing import Any


class LogSanitizationFilter(logging.Filter):
    """Logging filter that redacts sensitive information from log records."""

    # Order matters - more specific patterns come before general ones
    PATTERNS: list[tuple[re.Pattern, str]] = [
        # JWT tokens (three base64 segments) - before Bearer
        (re.compile(r'\beyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+'), '[REDACTED_JWT]'),

        # Bearer tokens
        (re.compile(r'Bearer\s+[a-zA-Z0-9_\-\.]+', re.IGNORECASE), 'Bearer [REDACTED_TOKEN]'),

        # Authorization header values
        (re.compile(r'(Authorization["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),

        # Secret-bearing fields
        (re.compile(r'((?:access_|refresh_)?token["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'((?:client_)?secret["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'(api_?key["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),

        # Email addresses
        (re.compile(r'\b[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\b'), '[REDACTED_EMAIL]'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the record in place; always lets it through."""
        if record.msg:
            record.msg = self._sanitize(str(record.msg))

        if record.args:
            record.args = self._sanitize_args(record.args)

        return True

    def _sanitize(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _sanitize_args(self, args: Any) -> Any:
        """Recursively sanitize log arguments."""
        if isinstance(args, str):
            return self._sanitize(args)
        elif isinstance(args, tuple):
            return tuple(self._sanitize_args(arg) for arg in args)
        elif isinstance(args, list):
            return [self._sanitize_args(arg) for arg in args]
        elif isinstance(args, dict):
            return {k: self._sanitize_args(v) for k, v in args.items()}
        else:
            # Keep non-string args untouched unless they render something sensitive
            str_val = str(args)
            sanitized = self._sanitize(str_val)
            return sanitized if sanitized != str_val else args


# Loggers uvicorn configures with handlers of their own.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _add_filter_once(target: logging.Filterer, sanitizer: LogSanitizationFilter) -> None:
    if not any(isinstance(f, LogSanitizationFilter) for f in target.filters):
        target.addFilter(sanitizer)


def install_log_sanitizer(logger_name: str | None = None) -> None:
    """Install the sanitization filter.

    Logger filters only see records created on that exact logger, so the
    filter also goes on every handler that emits. Call again once logging
    handlers are configured; repeated calls do not stack filters.

    Args:
        logger_name: If provided, install only on the named logger and its handlers.
                    If None, install on the root logger, its handlers and the
                    server loggers' handlers.
    """
    sanitizer = LogSanitizationFilter()

    if logger_name:
        logger = logging.getLogger(logger_name)
        _add_filter_once(logger, sanitizer)
        for handler in logger.handlers:
            _add_filter_once(handler, sanitizer)
        return

    root_logger = logging.getLogger()
    _add_filter_once(root_logger, sanitizer)
    for handler in root_logger.handlers:
        _add_filter_once(handler, sanitizer)

    for name in SERVER_LOGGERS:
        for handler in logging.getLogger(name).handlers:
            _add_filter_once(handler, sanitizer)


def sanitize_string(text: str) -> str:
    """Sanitize a string outside the logging system (e.g. error messages)."""
    return LogSanitizationFilter()._sanitize(text)
