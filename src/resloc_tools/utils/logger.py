"""
Unified logging system for the resource localization tools.

Provides:
- Structured logging with levels (DEBUG, INFO, WARNING, ERROR)
- File and console output
- Rich formatting
- Timing of extraction / generation passes
- Progress tracking over leaf streams
- Custom exception hierarchy with error kinds
"""

from __future__ import annotations

import enum
import logging
import time
import functools
from pathlib import Path
from typing import Optional, Any, Callable, TypeVar
from contextlib import contextmanager

from rich.logging import RichHandler
from rich.console import Console
from rich.progress import Progress, BarColumn, TimeElapsedColumn, TextColumn

_console = Console(stderr=True)

# 类型变量用于装饰器
F = TypeVar('F', bound=Callable[..., Any])


# ========================================
# 自定义异常层次结构
# ========================================

class ErrorKind(enum.Enum):
    """Classification of every failure a run can report."""

    MALFORMED_ROW = "MalformedRow"
    MALFORMED_KEY = "MalformedKey"
    AMBIGUOUS_NAME = "AmbiguousName"
    UNSUPPORTED_CONTAINER_SHAPE = "UnsupportedContainerShape"
    IO_FAILURE = "IOFailure"
    CONFIGURATION = "Configuration"


class ResLocError(Exception):
    """资源本地化工具基础异常"""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = {k: v for k, v in (details or {}).items() if v is not None}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MalformedRowError(ResLocError):
    """翻译表中的行格式错误（缺少列、布尔值无效等）"""

    kind = ErrorKind.MALFORMED_ROW

    def __init__(
        self,
        message: str,
        row_number: Optional[int] = None,
        stream_name: Optional[str] = None,
        **kwargs
    ):
        details = {"row": row_number, "stream": stream_name, **kwargs}
        super().__init__(message, details)
        self.row_number = row_number
        self.stream_name = stream_name


class MalformedKeyError(ResLocError):
    """资源键无法解析"""

    kind = ErrorKind.MALFORMED_KEY

    def __init__(self, message: str, key: Optional[str] = None, row_number: Optional[int] = None, **kwargs):
        details = {"key": key, "row": row_number, **kwargs}
        super().__init__(message, details)
        self.key = key
        self.row_number = row_number


class AmbiguousNameError(ResLocError):
    """Reserved: a name that resolves to more than one stream."""

    kind = ErrorKind.AMBIGUOUS_NAME

    def __init__(self, message: str, name: Optional[str] = None, **kwargs):
        super().__init__(message, {"name": name, **kwargs})
        self.name = name


class UnsupportedContainerShapeError(ResLocError):
    """输入文件既不是已知的容器也不是叶记录"""

    kind = ErrorKind.UNSUPPORTED_CONTAINER_SHAPE

    def __init__(self, message: str, file_path: Optional[Path] = None, **kwargs):
        details = {"file_path": str(file_path) if file_path else None, **kwargs}
        super().__init__(message, details)
        self.file_path = file_path


class ContainerIOError(ResLocError):
    """容器或条目的读写错误"""

    kind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str,
        container: Optional[str] = None,
        entry: Optional[str] = None,
        file_path: Optional[Path] = None,
        **kwargs
    ):
        details = {
            "container": container,
            "entry": entry,
            "file_path": str(file_path) if file_path else None,
            **kwargs,
        }
        super().__init__(message, details)
        self.container = container
        self.entry = entry
        self.file_path = file_path


class InputOpenError(ContainerIOError):
    """顶层输入文件无法打开（无论错误策略如何都终止运行）"""


class ConfigurationError(ResLocError):
    """配置错误（缺少必要参数、无效值等）"""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = {"config_key": config_key, **kwargs}
        super().__init__(message, details)
        self.config_key = config_key


# ========================================
# 日志类
# ========================================


class TranslationLogger:
    """Logger wrapper with convenience methods."""

    def __init__(
        self,
        name: str = "resloc_tools",
        level: int = logging.INFO,
        log_file: Optional[Path] = None,
    ):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path for log output
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.handlers = []  # Clear existing handlers

        console_handler = RichHandler(
            console=_console,
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=False
        )
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            self.logger.addHandler(file_handler)

    def debug(self, msg: str, *args, **kwargs):
        """Log debug message."""
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        """Log info message."""
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        """Log warning message."""
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        """Log error message."""
        self.logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        """Log exception with traceback."""
        self.logger.exception(msg, *args, **kwargs)

    @contextmanager
    def timer(self, operation: str, level: int = logging.INFO):
        """
        Context manager for timing a pass.

        Usage:
            with logger.timer("Generating satellite"):
                ...
        """
        start = time.time()
        self.logger.log(level, f"Starting: {operation}")
        try:
            yield
        finally:
            elapsed = time.time() - start
            self.logger.log(level, f"Completed: {operation} (took {elapsed:.2f}s)")

    @contextmanager
    def progress(
        self,
        total: int,
        description: str = "Processing",
        disable: bool = False
    ):
        """
        Context manager for progress tracking with Rich.

        Usage:
            with logger.progress(len(streams), "Extracting") as update:
                for stream in streams:
                    update(1)
        """
        if disable:
            count = [0]

            def update(advance: int = 1):
                count[0] += advance
                if count[0] % max(1, total // 10) == 0:
                    self.debug(f"{description}: {count[0]}/{total}")

            yield update
            return

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=_console,
            transient=True,
        ) as progress:
            task = progress.add_task(description, total=total)

            def update(advance: int = 1):
                progress.update(task, advance=advance)

            yield update


def log_exceptions(
    logger_instance: Optional[TranslationLogger] = None,
    reraise: bool = True,
    default_return: Any = None
) -> Callable[[F], F]:
    """
    装饰器：自动记录函数异常

    Usage:
        @log_exceptions()
        def load_something():
            ...
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            log = logger_instance or get_logger()
            try:
                return func(*args, **kwargs)
            except ResLocError as e:
                log.error(f"{func.__name__} failed: {e}")
                if reraise:
                    raise
                return default_return
            except Exception as e:
                log.exception(f"{func.__name__} unexpected error: {e}")
                if reraise:
                    raise
                return default_return
        return wrapper  # type: ignore
    return decorator


# Global logger instance
_default_logger: Optional[TranslationLogger] = None


def get_logger(
    name: str = "resloc_tools",
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
) -> TranslationLogger:
    """
    Get or create global logger instance.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional log file path

    Returns:
        TranslationLogger instance
    """
    global _default_logger
    if _default_logger is None:
        _default_logger = TranslationLogger(name=name, level=level, log_file=log_file)
    return _default_logger


def setup_logger(
    name: str = "resloc_tools",
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
) -> TranslationLogger:
    """
    Setup and configure global logger.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional log file path

    Returns:
        Configured TranslationLogger instance
    """
    global _default_logger
    _default_logger = TranslationLogger(name=name, level=level, log_file=log_file)
    return _default_logger


# 创建默认的模块级 logger 实例
logger = get_logger()
