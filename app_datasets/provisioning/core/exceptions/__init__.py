"""Provisioning exceptions"""

from .validation_exceptions import ValidationError, InvalidDatasetNameError, MissingArgumentError
from .provisioning_exceptions import (
    ProvisioningError,
    EnvironmentCheckError,
    PreconditionError,
    PoolNotFoundError,
    UserAbortError,
    MiddlewareCallError,
    CreationError,
    MountTimeoutError,
    AclApplicationError,
    ConfigWriteSkipped,
)

__all__ = [
    'ValidationError',
    'InvalidDatasetNameError',
    'MissingArgumentError',
    'ProvisioningError',
    'EnvironmentCheckError',
    'PreconditionError',
    'PoolNotFoundError',
    'UserAbortError',
    'MiddlewareCallError',
    'CreationError',
    'MountTimeoutError',
    'AclApplicationError',
    'ConfigWriteSkipped',
]
