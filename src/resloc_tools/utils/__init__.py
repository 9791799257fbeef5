from .config import LocalizeConfig, ConfigManager, get_config
from .io import atomic_output, open_table_for_read, read_optional_text
from .logger import (
    TranslationLogger, get_logger, setup_logger, log_exceptions,
    ErrorKind, ResLocError, MalformedRowError, MalformedKeyError, AmbiguousNameError,
    UnsupportedContainerShapeError, ContainerIOError, InputOpenError, ConfigurationError,
)

__all__ = [
    # config
    "LocalizeConfig",
    "ConfigManager",
    "get_config",
    # io
    "atomic_output",
    "open_table_for_read",
    "read_optional_text",
    # logger
    "TranslationLogger",
    "get_logger",
    "setup_logger",
    "log_exceptions",
    # errors
    "ErrorKind",
    "ResLocError",
    "MalformedRowError",
    "MalformedKeyError",
    "AmbiguousNameError",
    "UnsupportedContainerShapeError",
    "ContainerIOError",
    "InputOpenError",
    "ConfigurationError",
]
