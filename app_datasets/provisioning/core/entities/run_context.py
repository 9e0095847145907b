"""Per-invocation run state"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
from uuid import uuid4

from .provisioning_request import ProvisioningRequest
from ..value_objects.dataset_path import DatasetPath


class DatasetRole(Enum):
    """Where a dataset sits in the app tree; decides the encryption fields"""
    ROOT = "root"
    CHILD = "child"


class DatasetState(Enum):
    """Per-dataset lifecycle across the create and ACL phases"""
    ABSENT = "absent"
    PRESENT = "present"
    CREATED = "created"
    ACL_APPLIED = "acl-applied"
    ACL_SKIPPED = "acl-skipped"


@dataclass
class RunContext:
    """
    State threaded through one provisioning run.
    
    ``created`` holds datasets really created by this run and is what the
    cleanup report lists. ``would_create`` is its dry-run counterpart. Both
    are append-only and ordered.
    """
    
    request: ProvisioningRequest
    run_id: str = field(default_factory=lambda: str(uuid4()))
    created: List[DatasetPath] = field(default_factory=list)
    would_create: List[DatasetPath] = field(default_factory=list)
    states: Dict[str, DatasetState] = field(default_factory=dict)
    
    @property
    def dry_run(self) -> bool:
        return self.request.dry_run
    
    def record_absent(self, path: DatasetPath) -> None:
        self.states[str(path)] = DatasetState.ABSENT
    
    def record_present(self, path: DatasetPath) -> None:
        self.states[str(path)] = DatasetState.PRESENT
    
    def record_created(self, path: DatasetPath) -> None:
        """Append to the ledger matching the run mode"""
        if self.dry_run:
            self.would_create.append(path)
        else:
            self.created.append(path)
        self.states[str(path)] = DatasetState.CREATED
    
    def record_acl(self, path: DatasetPath, applied: bool) -> None:
        self.states[str(path)] = DatasetState.ACL_APPLIED if applied else DatasetState.ACL_SKIPPED
    
    def was_created(self, path: DatasetPath) -> bool:
        """True if this run created (or in dry-run, would create) the dataset"""
        ledger = self.would_create if self.dry_run else self.created
        return path in ledger
    
    def state_of(self, path: DatasetPath) -> Optional[DatasetState]:
        return self.states.get(str(path))
