"""Provisioning request entity"""

from dataclasses import dataclass
from typing import List, Tuple

from ..value_objects.dataset_path import DatasetPath


@dataclass(frozen=True)
class ProvisioningRequest:
    """Everything one invocation was asked to do. Built once at startup."""
    
    pool: str
    root: str
    app_name: str
    children: Tuple[str, ...] = ()
    encrypt: bool = False
    force_acl: bool = False
    dry_run: bool = False
    
    def __post_init__(self):
        # Children are unique; the first occurrence keeps its place.
        object.__setattr__(self, 'children', tuple(dict.fromkeys(self.children)))
    
    @property
    def root_path(self) -> DatasetPath:
        """The intermediate ``pool/root`` dataset"""
        return DatasetPath.from_string(f"{self.pool}/{self.root}")
    
    @property
    def app_path(self) -> DatasetPath:
        return DatasetPath.for_app(self.pool, self.root, self.app_name)
    
    @property
    def child_paths(self) -> List[DatasetPath]:
        return [self.app_path.join(child) for child in self.children]
    
    @property
    def app_tree(self) -> List[DatasetPath]:
        """App dataset followed by its children, in processing order"""
        return [self.app_path] + self.child_paths
