"""
Logging setup and handshake timing for the certificate pinning tool.

Records go to a rotating JSON file, to the console and, for errors only,
to a second JSON file next to the main log.
"""
import json
import logging
import logging.handlers
import sys
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class JSONFormatter(logging.Formatter):
    """One JSON object per record; context passed as extra_data is kept as is."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger_name': record.name,
            'message': record.getMessage(),
            'source': f"{record.module}.{record.funcName}:{record.lineno}",
            'thread': record.threadName,
            'extra_data': getattr(record, 'extra_data', None),
            'exception_info': None,
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry['exception_info'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


@dataclass
class OperationTiming:
    """Duration and result of one measured operation, e.g. a pinned handshake."""
    operation: str
    duration_ms: float
    success: bool
    error: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)


class PerformanceMonitor:
    """Collects the timings of measured operations for this process."""

    def __init__(self):
        self._timings: List[OperationTiming] = []
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    @contextmanager
    def measure_operation(self, operation: str, extra_data: Optional[Dict[str, Any]] = None):
        """Time the body of the with block; failures are recorded and re-raised."""
        context = dict(extra_data or {})
        error = None
        start = time.perf_counter()

        try:
            yield
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            raise
        finally:
            timing = OperationTiming(
                operation=operation,
                duration_ms=(time.perf_counter() - start) * 1000,
                success=error is None,
                error=error,
                context=context
            )
            with self._lock:
                self._timings.append(timing)

            self.logger.info(
                f"{operation} took {timing.duration_ms:.1f} ms",
                extra={'extra_data': {
                    'operation': operation,
                    'duration_ms': timing.duration_ms,
                    'success': timing.success,
                    'error': error,
                    **context
                }}
            )

    def timings(self, operation: Optional[str] = None) -> List[OperationTiming]:
        with self._lock:
            return [t for t in self._timings if operation is None or t.operation == operation]

    def get_operation_stats(self, operation: str) -> Dict[str, Any]:
        """Call counts and duration summary for one operation, empty if never measured."""
        timings = self.timings(operation)
        if not timings:
            return {}

        durations = [t.duration_ms for t in timings]
        succeeded = sum(1 for t in timings if t.success)
        return {
            'operation': operation,
            'total_calls': len(timings),
            'success_count': succeeded,
            'failure_count': len(timings) - succeeded,
            'avg_duration_ms': sum(durations) / len(durations),
            'min_duration_ms': min(durations),
            'max_duration_ms': max(durations),
        }


class LoggingService:
    """Configures the root logger from Config and times pinned handshakes."""

    def __init__(self, config):
        self.config = config
        self.performance_monitor = PerformanceMonitor()
        self._configure_root_logger()
        self.logger = logging.getLogger(__name__)
        self.logger.debug("Logging service initialized")

    def _configure_root_logger(self):
        log_path = Path(self.config.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        root_logger.setLevel(level)

        json_formatter = JSONFormatter()
        handlers = [
            (self._rotating_file(log_path, 10 * 1024 * 1024, 5), json_formatter, level),
            (logging.StreamHandler(sys.stdout), logging.Formatter(CONSOLE_FORMAT), level),
            (self._rotating_file(log_path.with_suffix('.errors.log'), 5 * 1024 * 1024, 3),
             json_formatter, logging.ERROR),
        ]
        for handler, formatter, handler_level in handlers:
            handler.setFormatter(formatter)
            handler.setLevel(handler_level)
            root_logger.addHandler(handler)

    @staticmethod
    def _rotating_file(path: Path, max_bytes: int, backup_count: int) -> logging.Handler:
        return logging.handlers.RotatingFileHandler(
            filename=str(path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )

    def log_with_context(self, level: str, message: str, **context):
        """Log message with additional context data."""
        logger = logging.getLogger('certpin')
        log_method = getattr(logger, level.lower(), logger.info)
        log_method(message, extra={'extra_data': context})

    def measure_performance(self, operation: str, extra_data: Optional[Dict[str, Any]] = None):
        return self.performance_monitor.measure_operation(operation, extra_data)

    def get_performance_stats(self, operation: str = "tls_handshake") -> Dict[str, Any]:
        return self.performance_monitor.get_operation_stats(operation)
