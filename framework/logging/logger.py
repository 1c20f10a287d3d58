import sys
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>Trace:{extra[trace_id]}</magenta> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | Trace:{extra[trace_id]} - {message}"


class LogLevel(IntEnum):
    TRACE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5

    @property
    def loguru_name(self) -> str:
        return _LOGURU_NAMES[self]

    @classmethod
    def parse(cls, value: Union["LogLevel", int, str]) -> "LogLevel":
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        name = value.strip().upper()
        name = _ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None


_LOGURU_NAMES = {
    LogLevel.TRACE: "TRACE",
    LogLevel.DEBUG: "DEBUG",
    LogLevel.INFORMATION: "INFO",
    LogLevel.WARNING: "WARNING",
    LogLevel.ERROR: "ERROR",
    LogLevel.CRITICAL: "CRITICAL",
}
_ALIASES = {"INFO": "INFORMATION", "WARN": "WARNING", "FATAL": "CRITICAL"}


class LogEntry(BaseModel):
    """One emitted log record."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    level: LogLevel
    message: str
    correlation: Dict[str, Any] = Field(default_factory=dict)


class StructuredLogger:
    """Process-wide logging sink on top of Loguru.

    Build one at startup and hand it to every consumer (middleware, exception
    handler, controllers). Calls below ``min_level`` return before any record
    is built. Loguru serializes writes per handler, so concurrent callers never
    interleave within an entry.
    """

    def __init__(self, min_level: Union[LogLevel, int, str] = LogLevel.INFORMATION, name: str = "app"):
        self.min_level = LogLevel.parse(min_level)
        self.name = name
        self._logger = logger.bind(channel=name)
        self._handler_ids: List[int] = []
        logger.configure(extra={"trace_id": "system"})

    @classmethod
    def from_settings(cls, settings) -> "StructuredLogger":
        instance = cls(min_level=settings.LOG_LEVEL, name=settings.APP_NAME)
        instance.configure(
            log_dir=settings.LOG_DIR if settings.LOG_TO_FILE else None,
            enqueue=settings.LOG_ENQUEUE,
        )
        return instance

    def configure(self, console: bool = True, log_dir: Optional[str] = None, enqueue: bool = False):
        """Replace all Loguru handlers with console and optional rotating file sinks."""
        logger.remove()
        self._handler_ids = []
        level = self.min_level.loguru_name

        if console:
            self._handler_ids.append(logger.add(
                sys.stdout,
                enqueue=enqueue,
                backtrace=True,
                diagnose=False,
                format=CONSOLE_FORMAT,
                level=level,
            ))

        if log_dir:
            directory = Path(log_dir)
            directory.mkdir(parents=True, exist_ok=True)
            self._handler_ids.append(logger.add(
                directory / "app_{time:YYYY-MM-DD}.log",
                rotation="00:00",
                retention="30 days",
                compression="zip",
                enqueue=enqueue,
                format=FILE_FORMAT,
                level=level,
            ))
            self._handler_ids.append(logger.add(
                directory / "error_{time:YYYY-MM-DD}.log",
                level="ERROR",
                rotation="100 MB",
                enqueue=enqueue,
                format=FILE_FORMAT,
            ))

    def add_sink(self, sink, fmt: str = FILE_FORMAT, enqueue: bool = False) -> int:
        """Attach an extra sink (file path, stream or callable) at the configured level."""
        handler_id = logger.add(sink, level=self.min_level.loguru_name, format=fmt, enqueue=enqueue)
        self._handler_ids.append(handler_id)
        return handler_id

    def remove_sink(self, handler_id: int) -> None:
        logger.remove(handler_id)
        if handler_id in self._handler_ids:
            self._handler_ids.remove(handler_id)

    def shutdown(self) -> None:
        """Remove the handlers this instance added."""
        for handler_id in list(self._handler_ids):
            self.remove_sink(handler_id)

    def is_enabled(self, level: Union[LogLevel, int, str]) -> bool:
        return LogLevel.parse(level) >= self.min_level

    def contextualize(self, **correlation):
        """Context manager binding correlation data (e.g. trace_id) to every entry inside it."""
        return logger.contextualize(**correlation)

    def log(self, level: Union[LogLevel, int, str], message: str, **correlation) -> Optional[LogEntry]:
        return self._emit(LogLevel.parse(level), message, correlation, depth=2)

    def trace(self, message: str, **correlation) -> Optional[LogEntry]:
        return self._emit(LogLevel.TRACE, message, correlation, depth=2)

    def debug(self, message: str, **correlation) -> Optional[LogEntry]:
        return self._emit(LogLevel.DEBUG, message, correlation, depth=2)

    def info(self, message: str, **correlation) -> Optional[LogEntry]:
        return self._emit(LogLevel.INFORMATION, message, correlation, depth=2)

    def warning(self, message: str, **correlation) -> Optional[LogEntry]:
        return self._emit(LogLevel.WARNING, message, correlation, depth=2)

    def error(self, message: str, **correlation) -> Optional[LogEntry]:
        return self._emit(LogLevel.ERROR, message, correlation, depth=2)

    def critical(self, message: str, **correlation) -> Optional[LogEntry]:
        return self._emit(LogLevel.CRITICAL, message, correlation, depth=2)

    def exception(self, message: str, exc: Optional[BaseException] = None,
                  level: Union[LogLevel, str] = LogLevel.ERROR, **correlation) -> Optional[LogEntry]:
        """Log with a traceback: ``exc`` if given, else the exception being handled."""
        return self._emit(LogLevel.parse(level), message, correlation, depth=2, exception=exc or True)

    def _emit(self, level: LogLevel, message: str, correlation: Dict[str, Any],
              depth: int, exception: Union[bool, BaseException] = False) -> Optional[LogEntry]:
        if level < self.min_level:
            return None
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc),
            level=level,
            message=message,
            correlation=correlation,
        )
        bound = self._logger.bind(**correlation) if correlation else self._logger
        bound.opt(depth=depth, exception=exception).log(level.loguru_name, message)
        return entry
