"""Logging filters and utilities."""

import logging
import time
import uuid
from contextvars import ContextVar
from functools import wraps
from typing import Any


# Context variable for correlation ID
correlation_id: ContextVar[str] = ContextVar('correlation_id', default='')

MASK = '***MASKED***'

class SensitiveDataFilter(logging.Filter):
    """Filter to mask sensitive data in logs."""

    def __init__(self, sensitive_fields: set[str] | None = None, mask_pattern: str = MASK):
        """Initialize filter.

        Args:
            sensitive_fields: Set of field names to mask
            mask_pattern: Replacement text for masked values
        """
        super().__init__()
        self.sensitive_fields = {f.lower() for f in (sensitive_fields or {
            'password', 'token', 'api_key', 'secret', 'auth', 'cookie',
            'email', 'user_email', 'phone'
        })}
        self.mask_pattern = mask_pattern

    def _mask_sensitive_data(self, obj: Any) -> Any:
        """Recursively mask sensitive data in object."""
        if isinstance(obj, dict):
            return {
                k: self.mask_pattern if str(k).lower() in self.sensitive_fields else self._mask_sensitive_data(v)
                for k, v in obj.items()
            }
        if isinstance(obj, list):
            return [self._mask_sensitive_data(item) for item in obj]
        return obj

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask sensitive data in log record."""
        if hasattr(record, 'extra_fields'):
            record.extra_fields = self._mask_sensitive_data(record.extra_fields)
        return True

def with_correlation_id(func):
    """Decorator to add correlation ID to logs."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        # Generate new correlation ID if not present
        if not correlation_id.get():
            correlation_id.set(str(uuid.uuid4()))
        return func(*args, **kwargs)
    return wrapper

def log_performance(logger: logging.Logger, operation: str):
    """Decorator to log operation performance.

    Args:
        logger: Logger instance to use
        operation: Name of operation being timed
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                duration = (time.perf_counter() - start_time) * 1000
                logger.debug(
                    f"Completed {operation}",
                    extra={'extra_fields': {
                        'operation': operation,
                        'duration_ms': round(duration, 2),
                        'status': 'success',
                        'correlation_id': correlation_id.get()
                    }}
                )
                return result
            except Exception as e:
                duration = (time.perf_counter() - start_time) * 1000
                logger.warning(
                    f"Failed {operation}",
                    extra={'extra_fields': {
                        'operation': operation,
                        'duration_ms': round(duration, 2),
                        'status': 'error',
                        'error_type': type(e).__name__,
                        'correlation_id': correlation_id.get()
                    }}
                )
                raise
        return wrapper
    return decorator

class CorrelationFilter(logging.Filter):
    """Filter to add correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation ID to log record."""
        cid = correlation_id.get()
        if cid:
            if not hasattr(record, 'extra_fields'):
                record.extra_fields = {}
            record.extra_fields = {**record.extra_fields, 'correlation_id': cid}
        return True
