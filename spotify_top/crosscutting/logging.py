import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Any, Optional

# Context variables for correlation
flow_var: ContextVar[Optional[str]] = ContextVar('flow', default=None)
time_range_var: ContextVar[Optional[str]] = ContextVar('time_range', default=None)

ROOT_LOGGER_NAME = 'spotify_top'


class SecretMasker:
    """Masks sensitive information in log messages."""

    def __init__(self):
        """Initialize secret masker with patterns."""
        self.patterns = [
            # Authorization headers: "Bearer <token>"
            r'(?i)(bearer)\s+["\']?([a-zA-Z0-9\-_\.~+/]{8,}=*)["\']?',
            # API tokens and keys: "token=...", "spotify_key: ..."
            r'(?i)(token|key|secret|password)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{8,})["\']?',
        ]
        self.separators = [' ', ': ']

        self.compiled_patterns = [re.compile(pattern) for pattern in self.patterns]

    @staticmethod
    def _mask_value(secret: str) -> str:
        # Keep first 4 and last 4 characters, mask the rest
        if len(secret) > 8:
            return secret[:4] + '*' * (len(secret) - 8) + secret[-4:]
        return '*' * len(secret)

    def mask_secrets(self, text: str) -> str:
        """Mask sensitive information in text."""
        if not text:
            return text

        masked_text = text

        for pattern, separator in zip(self.compiled_patterns, self.separators):
            def replace_match(match, separator=separator):
                return f"{match.group(1)}{separator}{self._mask_value(match.group(2))}"

            masked_text = pattern.sub(replace_match, masked_text)

        return masked_text

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask sensitive information in dictionary."""
        if not data:
            return data

        masked_data = {}

        for key, value in data.items():
            if isinstance(value, str):
                masked_data[key] = self.mask_secrets(value)
            elif isinstance(value, dict):
                masked_data[key] = self.mask_dict(value)
            elif isinstance(value, list):
                masked_data[key] = [self.mask_dict(item) if isinstance(item, dict)
                                    else self.mask_secrets(item) if isinstance(item, str)
                                    else item for item in value]
            else:
                masked_data[key] = value

        return masked_data


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self):
        """Initialize formatter."""
        super().__init__()
        self.masker = SecretMasker()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': self.masker.mask_secrets(record.getMessage()),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        flow = flow_var.get()
        time_range = time_range_var.get()
        if flow:
            log_entry['flow'] = flow
        if time_range:
            log_entry['timeRange'] = time_range

        if record.exc_info:
            log_entry['exception'] = self.masker.mask_secrets(self.formatException(record.exc_info))

        if hasattr(record, 'fields') and record.fields:
            log_entry['fields'] = self.masker.mask_dict(record.fields)

        return json.dumps(log_entry, ensure_ascii=False)


class CorrelationContext:
    """Context manager for correlation data."""

    def __init__(self, flow: Optional[str] = None, time_range: Optional[str] = None):
        """Initialize correlation context."""
        self.flow = flow
        self.time_range = time_range
        self._tokens = []

    def __enter__(self):
        """Set correlation context."""
        if self.flow is not None:
            self._tokens.append((flow_var, flow_var.set(self.flow)))
        if self.time_range is not None:
            self._tokens.append((time_range_var, time_range_var.set(self.time_range)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Restore correlation context."""
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


def setup_logging(level: str = 'WARNING',
                  log_file: Optional[str] = None) -> logging.Logger:
    """Setup structured logging on stderr, keeping stdout for the ranked lists."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get logger with structured formatting."""
    return logging.getLogger(name)


def log_with_fields(logger: logging.Logger, level: str, message: str,
                    fields: Optional[Dict[str, Any]] = None, exc_info=None, **kwargs):
    """Log message with additional fields."""
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    merged = dict(fields or {})
    merged.update(kwargs)
    logger.log(levelno, message, exc_info=exc_info, extra={'fields': merged} if merged else None,
               stacklevel=2)


def log_flow_start(logger: logging.Logger, flow: str, **kwargs):
    """Log start of an artists or tracks flow."""
    with CorrelationContext(flow=flow):
        log_with_fields(logger, 'INFO', 'Flow started', kwargs)


def log_flow_complete(logger: logging.Logger, flow: str, item_counts: Dict[str, int], **kwargs):
    """Log flow completion with the number of items per time range."""
    with CorrelationContext(flow=flow):
        log_with_fields(logger, 'INFO', 'Flow completed', {
            'item_counts': item_counts,
            **kwargs
        })


def log_error(logger: logging.Logger, message: str, error: BaseException, **kwargs):
    """Log error with exception details."""
    log_with_fields(logger, 'ERROR', message, {
        'error_type': type(error).__name__,
        'error_message': str(error),
        **kwargs
    }, exc_info=(type(error), error, error.__traceback__))
