"""Error aggregation and reporting utilities."""

import logging
import threading
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from types import TracebackType

from golflesson.config.logging_config import ErrorAggregationConfig

@dataclass
class ErrorGroup:
    """Group of similar errors."""
    message: str
    count: int = 0
    first_seen: datetime = field(default_factory=datetime.now)
    last_seen: datetime = field(default_factory=datetime.now)
    services: set[str] = field(default_factory=set)
    stack_traces: list[str] = field(default_factory=list)

    def update(self, service: str, stack_trace: str | None = None) -> None:
        """Update error group with new occurrence."""
        self.count += 1
        self.last_seen = datetime.now()
        self.services.add(service)
        if stack_trace and stack_trace not in self.stack_traces:
            self.stack_traces.append(stack_trace)

class ErrorAggregator:
    """Aggregates and reports errors across services."""

    def __init__(self, config: ErrorAggregationConfig):
        """Initialize error aggregator.

        Args:
            config: Error aggregation configuration
        """
        self._errors: dict[str, ErrorGroup] = {}
        self._lock = threading.Lock()
        self._config = config
        self._last_report = datetime.now()
        self.logger = logging.getLogger('error_aggregator')

        # Start reporting thread if enabled
        self._stop_flag = threading.Event()
        self._report_thread: threading.Thread | None = None
        if config.enabled:
            self._report_thread = threading.Thread(target=self._periodic_report, daemon=True)
            self._report_thread.start()

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def _key(self, message: str, service: str) -> str:
        if 'service' in self._config.categorize_by:
            return f"{service}:{message}"
        return message

    def add_error(
        self,
        message: str,
        service: str,
        stack_trace: str | TracebackType | None = None
    ) -> None:
        """Add error occurrence to aggregator.

        Args:
            message: Error message
            service: Service where error occurred
            stack_trace: Optional stack trace or traceback object
        """
        if not self._config.enabled:
            return

        if isinstance(stack_trace, TracebackType):
            stack_trace = ''.join(traceback.format_tb(stack_trace))

        key = self._key(message, service)
        with self._lock:
            if key not in self._errors:
                self._errors[key] = ErrorGroup(message=message)
            error_group = self._errors[key]
            error_group.update(service, stack_trace)

            # Check if immediate report needed
            if (
                error_group.count >= self._config.error_threshold or
                (datetime.now() - error_group.first_seen).total_seconds() >= self._config.time_threshold
            ):
                self._report_error_group(error_group)
                del self._errors[key]

    def pending(self) -> dict[str, int]:
        """Return counts of errors not yet reported."""
        with self._lock:
            return {key: group.count for key, group in self._errors.items()}

    def _report_error_group(self, error_group: ErrorGroup) -> None:
        """Report a single error group."""
        self.logger.error(
            f"{error_group.message} (occurrences: {error_group.count}, "
            f"services: {', '.join(sorted(error_group.services))})"
        )
        for trace in error_group.stack_traces:
            if trace.strip():
                self.logger.debug(f"Stack trace:\n{trace}")

    def _periodic_report(self) -> None:
        """Periodically report all accumulated errors."""
        while not self._stop_flag.wait(1):
            now = datetime.now()
            if (now - self._last_report).total_seconds() >= self._config.report_interval:
                self.flush()
                self._last_report = now

    def flush(self) -> None:
        """Report and clear all accumulated errors."""
        with self._lock:
            for group in self._errors.values():
                self._report_error_group(group)
            self._errors.clear()

    def shutdown(self) -> None:
        """Shutdown aggregator and report remaining errors."""
        if not self._config.enabled:
            return

        self._stop_flag.set()
        if self._report_thread is not None:
            self._report_thread.join()
        self.flush()

# Global error aggregator instance
_error_aggregator: ErrorAggregator | None = None

def init_error_aggregator(config: ErrorAggregationConfig) -> ErrorAggregator:
    """Initialize global error aggregator with configuration.

    Args:
        config: Error aggregation configuration
    """
    global _error_aggregator
    if _error_aggregator is not None:
        _error_aggregator.shutdown()
    _error_aggregator = ErrorAggregator(config)
    return _error_aggregator

def get_error_aggregator() -> ErrorAggregator:
    """Get global error aggregator instance.

    A disabled aggregator is created on first use when
    ``init_error_aggregator`` has not been called, so library callers
    never have to configure it.
    """
    global _error_aggregator
    if _error_aggregator is None:
        _error_aggregator = ErrorAggregator(ErrorAggregationConfig(enabled=False))
    return _error_aggregator

def aggregate_error(
    message: str,
    service: str,
    stack_trace: str | TracebackType | None = None
) -> None:
    """Add error to global aggregator.

    Args:
        message: Error message
        service: Service where error occurred
        stack_trace: Optional stack trace
    """
    get_error_aggregator().add_error(message, service, stack_trace)
