"""
Input validation for dataset names and the provisioning request.
"""
from typing import Optional, Sequence

from ..core.entities.provisioning_request import ProvisioningRequest
from ..core.exceptions.validation_exceptions import (
    InvalidDatasetNameError,
    MissingArgumentError,
    ValidationError,
)
from ..core.value_objects.dataset_path import DATASET_SEGMENT_PATTERN, INVALID_SEGMENT_REASON


class InputValidator:
    """Checks names before anything touches the middleware."""
    
    def validate_dataset_name(self, name: str) -> str:
        """Accept only letters, digits, ``.``, ``_`` and ``-``."""
        if not isinstance(name, str) or not DATASET_SEGMENT_PATTERN.fullmatch(name):
            raise InvalidDatasetNameError(str(name), INVALID_SEGMENT_REASON)
        return name
    
    def validate_root(self, root: str) -> str:
        """The root may be nested (``apps/config``); every segment is checked."""
        for segment in root.split('/'):
            self.validate_dataset_name(segment)
        return root
    
    def build_request(self,
                      pool: str,
                      root: str,
                      app_name: Optional[str],
                      children: Sequence[str] = (),
                      encrypt: bool = False,
                      force_acl: bool = False,
                      dry_run: bool = False) -> ProvisioningRequest:
        """Validate every input and freeze them into a request."""
        if not pool or not root:
            raise ValidationError(
                "ZFS Pool Name or Parent Dataset Root is not set. "
                "Configure them in the config file or via -p/-r flags.",
                "pool" if not pool else "root"
            )
        if not app_name:
            raise MissingArgumentError("app_name")
        
        self.validate_dataset_name(pool)
        self.validate_root(root)
        self.validate_dataset_name(app_name)
        for child in children:
            self.validate_dataset_name(child)
        
        return ProvisioningRequest(
            pool=pool,
            root=root,
            app_name=app_name,
            children=tuple(children),
            encrypt=encrypt,
            force_acl=force_acl,
            dry_run=dry_run,
        )
