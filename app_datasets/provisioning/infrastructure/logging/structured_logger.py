"""
Structured logger implementation for provisioning operations.
"""
import json
import logging
import sys
import threading
from typing import Dict, Any, Optional, TextIO
from datetime import datetime, timezone
from ...core.interfaces.logger_interface import ILogger

RED = '\033[0;31m'
GREEN = '\033[0;32m'
YELLOW = '\033[0;33m'
CYAN = '\033[0;36m'
NC = '\033[0m'

LOG_FORMATS = ("console", "json")

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'stack_info',
    'exc_info', 'exc_text', 'message', 'timestamp', 'taskName'
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StructuredLogger(ILogger):
    """Structured logger with console or JSON formatting and context support."""
    
    def __init__(self, name: str = "app_datasets", level: str = "INFO", log_format: str = "console",
                 stream: Optional[TextIO] = None, error_stream: Optional[TextIO] = None):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        
        if log_format == "json":
            formatter: logging.Formatter = StructuredFormatter()
        else:
            formatter = ConsoleFormatter(use_color=(stream or sys.stdout).isatty())
        
        # Reconfiguring replaces previous handlers
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
        
        # Errors go to stderr, everything else to stdout
        out_handler = logging.StreamHandler(stream or sys.stdout)
        out_handler.setFormatter(formatter)
        out_handler.addFilter(lambda record: record.levelno < logging.ERROR)
        self.logger.addHandler(out_handler)
        
        err_handler = logging.StreamHandler(error_stream or sys.stderr)
        err_handler.setFormatter(formatter)
        err_handler.setLevel(logging.ERROR)
        self.logger.addHandler(err_handler)
        
        # Prevent duplicate logs
        self.logger.propagate = False
    
    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log debug message with optional extra context."""
        self._log(logging.DEBUG, message, extra)
    
    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log info message with optional extra context."""
        self._log(logging.INFO, message, extra)
    
    def success(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, message, {**(extra or {}), "outcome": "success"})
    
    def dry_run(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, message, {**(extra or {}), "dry_run": True})
    
    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log warning message with optional extra context."""
        self._log(logging.WARNING, message, extra)
    
    def error(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log error message with optional extra context."""
        self._log(logging.ERROR, message, extra)
    
    def exception(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        """Log exception with traceback."""
        self._log(logging.ERROR, message, extra, exc_info=True)
    
    def _log(self, level: int, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False) -> None:
        """Internal logging method with structured context."""
        if not self.logger.isEnabledFor(level):
            return
        if extra is None:
            extra = {}
        
        # Create log record with structured data
        record = self.logger.makeRecord(
            name=self.name,
            level=level,
            fn="",
            lno=0,
            msg=message,
            args=(),
            exc_info=sys.exc_info() if exc_info else None
        )
        
        # Add extra context
        for key, value in extra.items():
            if key not in _RESERVED_ATTRS:
                setattr(record, key, value)
        
        record.timestamp = _utcnow().isoformat()
        
        self.logger.handle(record)


class ConsoleFormatter(logging.Formatter):
    """Human readable, coloured output for operators at a terminal."""
    
    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color
    
    def _paint(self, color: str, text: str) -> str:
        return f"{color}{text}{NC}" if self.use_color else text
    
    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        
        if record.levelno >= logging.ERROR:
            line = f"{self._paint(RED, 'ERROR:')}   {message}"
        elif record.levelno >= logging.WARNING:
            line = f"{self._paint(YELLOW, 'WARNING:')} {message}"
        elif getattr(record, 'dry_run', False):
            line = f"{self._paint(YELLOW, 'DRY RUN:')} {message}"
        elif getattr(record, 'outcome', None) == "success":
            line = self._paint(GREEN, message)
        elif record.levelno >= logging.INFO:
            line = self._paint(CYAN, message)
        else:
            line = message
        
        payload = getattr(record, 'payload', None)
        if payload is not None:
            line += "\n" + json.dumps(payload, indent=2)
        
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""
    
    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            "timestamp": getattr(record, 'timestamp', _utcnow().isoformat()),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        
        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        
        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                # Ensure value is JSON serializable
                try:
                    json.dumps(value)
                    log_entry[key] = value
                except (TypeError, ValueError):
                    log_entry[key] = str(value)
        
        try:
            return json.dumps(log_entry, ensure_ascii=False, separators=(',', ':'))
        except (TypeError, ValueError):
            # Fallback to string representation if JSON serialization fails
            return str(log_entry)


class ContextLogger(StructuredLogger):
    """Logger with persistent context that gets added to all log messages."""
    
    def __init__(self, name: str = "app_datasets", level: str = "INFO",
                 context: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(name, level, **kwargs)
        self.context = context or {}
        self._context_lock = threading.Lock()
    
    def add_context(self, key: str, value: Any) -> None:
        """Add persistent context to all future log messages."""
        with self._context_lock:
            self.context[key] = value
    
    def remove_context(self, key: str) -> None:
        """Remove context key."""
        with self._context_lock:
            self.context.pop(key, None)
    
    def _log(self, level: int, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False) -> None:
        """Internal logging method with merged context."""
        with self._context_lock:
            merged_extra = self.context.copy()
        if extra:
            merged_extra.update(extra)
        
        super()._log(level, message, merged_extra, exc_info)


class OperationLogger(ContextLogger):
    """Logger for one provisioning run, tracked as an operation."""
    
    def __init__(self, name: str = "app_datasets", level: str = "INFO", **kwargs):
        super().__init__(name, level, **kwargs)
        self.operation_id = None
        self.operation_start_time = None
    
    def start_operation(self, operation_id: str, operation_type: str, **kwargs) -> None:
        """Start tracking an operation."""
        self.operation_id = operation_id
        self.operation_start_time = _utcnow()
        
        self.add_context("operation_id", operation_id)
        self.add_context("operation_type", operation_type)
        
        self.debug(f"Starting operation: {operation_type}", kwargs)
    
    def complete_operation(self, success: bool = True, **kwargs) -> None:
        """Complete the current operation."""
        if self.operation_id and self.operation_start_time:
            duration = (_utcnow() - self.operation_start_time).total_seconds()
            
            self.debug(f"Operation completed: {self.context.get('operation_type', 'unknown')}", {
                "success": success,
                "duration_seconds": duration,
                **kwargs
            })
            self._end_operation()
    
    def fail_operation(self, error: str, **kwargs) -> None:
        """Mark operation as failed."""
        if self.operation_id and self.operation_start_time:
            duration = (_utcnow() - self.operation_start_time).total_seconds()
            
            self.debug(f"Operation failed: {self.context.get('operation_type', 'unknown')}", {
                "success": False,
                "error": error,
                "duration_seconds": duration,
                **kwargs
            })
            self._end_operation()
    
    def _end_operation(self) -> None:
        self.remove_context("operation_id")
        self.remove_context("operation_type")
        self.operation_id = None
        self.operation_start_time = None
