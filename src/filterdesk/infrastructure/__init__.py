"""Infrastructure layer for external services and adapters.

This module contains the REST gateway, the session context, configuration
loading, logging setup and error handling.
"""

from .api_gateway import ApiGateway
from .config import ApiConfig, ConfigManager, ConsoleConfig, LoggingConfig, ViewDefaults
from .error_handler import ErrorHandler
from .session import SessionContext

__all__ = [
    "ApiConfig",
    "ApiGateway",
    "ConfigManager",
    "ConsoleConfig",
    "ErrorHandler",
    "LoggingConfig",
    "SessionContext",
    "ViewDefaults",
]
