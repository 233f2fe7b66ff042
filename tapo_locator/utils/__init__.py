"""
Utility functions and helper classes.
"""

from .logger import Logger, LogLevel, logger, set_log_level, get_logger
from .error_handler import (
    ErrorHandler, ErrorContext, ErrorType, ErrorSeverity,
    TapoLocatorError, NetworkError, SubprocessFailure, ConfigurationError,
    AuthError, CloudError, LoginError, DeviceError, DeviceNotFoundError, DeviceSelectionError,
    with_retry
)
from . import network_utils

__all__ = [
    'Logger',
    'LogLevel',
    'logger',
    'set_log_level',
    'get_logger',
    'ErrorHandler',
    'ErrorContext',
    'ErrorType',
    'ErrorSeverity',
    'TapoLocatorError',
    'NetworkError',
    'SubprocessFailure',
    'ConfigurationError',
    'AuthError',
    'CloudError',
    'LoginError',
    'DeviceError',
    'DeviceNotFoundError',
    'DeviceSelectionError',
    'with_retry',
    'network_utils'
]
