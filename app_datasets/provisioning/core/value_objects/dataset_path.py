"""DatasetPath value object"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from ..exceptions.validation_exceptions import InvalidDatasetNameError

DATASET_SEGMENT_PATTERN = re.compile(r'^[a-zA-Z0-9._-]+$')

INVALID_SEGMENT_REASON = (
    "ZFS dataset names can only contain alphanumeric characters, "
    "underscores, hyphens, and periods."
)


@dataclass(frozen=True)
class DatasetPath:
    """Immutable hierarchical dataset identifier, e.g. ``tank/apps-config/immich/config``"""
    
    pool: str
    segments: Tuple[str, ...] = ()
    
    def __post_init__(self):
        for part in (self.pool,) + tuple(self.segments):
            if not DATASET_SEGMENT_PATTERN.fullmatch(part or ""):
                raise InvalidDatasetNameError(part, INVALID_SEGMENT_REASON)
    
    @classmethod
    def from_string(cls, value: str) -> 'DatasetPath':
        """Create DatasetPath from its ``pool/a/b`` string form"""
        if not value:
            raise InvalidDatasetNameError(value, "Dataset name cannot be empty.")
        pool, *segments = value.split('/')
        return cls(pool, tuple(segments))
    
    @classmethod
    def for_app(cls, pool: str, root: str, app_name: str, child: Optional[str] = None) -> 'DatasetPath':
        """Build ``pool/root/app[/child]``. ``root`` may itself be nested (``a/b``)."""
        path = cls(pool).join(*root.split('/')).join(app_name)
        return path.join(child) if child is not None else path
    
    def join(self, *names: str) -> 'DatasetPath':
        return DatasetPath(self.pool, self.segments + tuple(names))
    
    @property
    def parent(self) -> Optional['DatasetPath']:
        if not self.segments:
            return None
        return DatasetPath(self.pool, self.segments[:-1])
    
    def mount_path(self, prefix: str = "/mnt") -> str:
        """Mount path of the dataset under the given prefix"""
        return f"{prefix.rstrip('/')}/{self}"
    
    def __str__(self) -> str:
        return '/'.join((self.pool,) + tuple(self.segments))
    
    def __repr__(self) -> str:
        return f"DatasetPath('{self}')"
