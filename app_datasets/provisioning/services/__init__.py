"""Provisioning services"""

from .input_validator import InputValidator
from .environment_check import EnvironmentCheck
from .dataset_service import DatasetService
from .precondition_service import PreconditionService
from .acl_service import AclService
from .cleanup_reporter import CleanupReporter

__all__ = [
    'InputValidator',
    'EnvironmentCheck',
    'DatasetService',
    'PreconditionService',
    'AclService',
    'CleanupReporter',
]
