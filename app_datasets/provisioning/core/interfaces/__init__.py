"""Abstractions over the outside world"""

from .command_executor import ICommandExecutor, CommandResult
from .middleware_client import IMiddlewareClient
from .filesystem import IFilesystem
from .confirmation_provider import IConfirmationProvider
from .logger_interface import ILogger

__all__ = [
    'ICommandExecutor',
    'CommandResult',
    'IMiddlewareClient',
    'IFilesystem',
    'IConfirmationProvider',
    'ILogger',
]
