"""Provisioning domain entities"""

from .provisioning_request import ProvisioningRequest
from .run_context import RunContext, DatasetRole, DatasetState

__all__ = ['ProvisioningRequest', 'RunContext', 'DatasetRole', 'DatasetState']
