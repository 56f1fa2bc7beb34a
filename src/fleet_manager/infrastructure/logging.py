"""Structured JSON logging for the Fleet Management API."""

import json
import logging
import logging.handlers
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

DEFAULT_SERVICE_NAME = "fleet-management-api"

# Correlation ID of the request being served by the current task
correlation_id_context: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

_RESERVED_RECORD_KEYS = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'message', 'exc_info',
    'exc_text', 'stack_info', 'correlation_id', 'taskName',
})


class CorrelationIDFilter(logging.Filter):
    """Stamp records with the current correlation ID."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_context.get() or "unknown"
        return True


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def __init__(self, service_name: str = DEFAULT_SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, 'correlation_id', 'unknown'),
            "module": record.module,
            "line": record.lineno,
        }
        if record.funcName and record.funcName != '<module>':
            entry["function"] = record.funcName

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str, ensure_ascii=False)


class LoggingConfig:
    """Root logger setup: JSON to stdout, optionally rotating files."""

    def __init__(
        self,
        log_level: str = "INFO",
        service_name: str = DEFAULT_SERVICE_NAME,
        log_dir: Optional[str] = None,
        max_file_size: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        enable_file: bool = False
    ):
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.service_name = service_name
        self.log_dir = Path(log_dir) if log_dir else Path.cwd() / "logs"
        self.max_file_size = max_file_size
        self.backup_count = backup_count
        self.enable_file = enable_file

    def setup_logging(self) -> None:
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        root_logger.setLevel(self.log_level)

        correlation_filter = CorrelationIDFilter()
        formatter = JSONFormatter(service_name=self.service_name)

        console_handler = logging.StreamHandler(sys.stdout)
        root_logger.addHandler(self._prepare(console_handler, self.log_level, correlation_filter, formatter))

        if self.enable_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = self._rotating_handler(f"{self.service_name}.log")
            root_logger.addHandler(self._prepare(file_handler, self.log_level, correlation_filter, formatter))
            # ERROR and CRITICAL also go to their own file
            error_handler = self._rotating_handler(f"{self.service_name}-errors.log")
            root_logger.addHandler(self._prepare(error_handler, logging.ERROR, correlation_filter, formatter))

        self._quiet_third_party_loggers()

    def _rotating_handler(self, filename: str) -> logging.Handler:
        return logging.handlers.RotatingFileHandler(
            filename=self.log_dir / filename,
            maxBytes=self.max_file_size,
            backupCount=self.backup_count,
            encoding='utf-8'
        )

    @staticmethod
    def _prepare(
        handler: logging.Handler,
        level: int,
        correlation_filter: logging.Filter,
        formatter: logging.Formatter
    ) -> logging.Handler:
        handler.setLevel(level)
        handler.addFilter(correlation_filter)
        handler.setFormatter(formatter)
        return handler

    @staticmethod
    def _quiet_third_party_loggers() -> None:
        for name in (
            'sqlalchemy.engine', 'sqlalchemy.dialects', 'sqlalchemy.pool', 'sqlalchemy.orm',
            'uvicorn.access', 'fastapi', 'aiosqlite', 'asyncio',
        ):
            logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(
    log_level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    log_dir: Optional[str] = None,
    enable_file: bool = False
) -> LoggingConfig:
    """Configure logging once for the process and return the applied config."""
    config = LoggingConfig(
        log_level=log_level,
        service_name=service_name,
        log_dir=log_dir,
        enable_file=enable_file
    )
    config.setup_logging()
    return config


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_context.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return correlation_id_context.get()


def clear_correlation_id() -> None:
    correlation_id_context.set(None)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_extra(logger: logging.Logger, level: int, message: str, **extra) -> None:
    """Log a message with extra structured fields."""
    logger.log(level, message, extra=extra)


def log_request(logger: logging.Logger, method: str, path: str, **extra) -> None:
    log_with_extra(
        logger,
        logging.INFO,
        f"HTTP Request: {method} {path}",
        request_method=method,
        request_path=path,
        **extra
    )


def log_response(logger: logging.Logger, method: str, path: str, status_code: int, duration_ms: float, **extra) -> None:
    log_with_extra(
        logger,
        logging.INFO,
        f"HTTP Response: {method} {path} -> {status_code} ({duration_ms:.2f}ms)",
        request_method=method,
        request_path=path,
        response_status=status_code,
        response_duration_ms=duration_ms,
        **extra
    )


def log_database_operation(logger: logging.Logger, operation: str, table: str, **extra) -> None:
    log_with_extra(
        logger,
        logging.DEBUG,
        f"Database {operation}: {table}",
        db_operation=operation,
        db_table=table,
        **extra
    )


def log_authentication_attempt(logger: logging.Logger, email: str, success: bool, **extra) -> None:
    level = logging.INFO if success else logging.WARNING
    outcome = "successful" if success else "failed"
    log_with_extra(
        logger,
        level,
        f"Authentication attempt {outcome} for {email}",
        auth_email=email,
        auth_success=success,
        **extra
    )


def log_business_rule_violation(logger: logging.Logger, rule: str, details: str, **extra) -> None:
    log_with_extra(
        logger,
        logging.WARNING,
        f"Business rule violation: {rule} - {details}",
        business_rule=rule,
        violation_details=details,
        **extra
    )
