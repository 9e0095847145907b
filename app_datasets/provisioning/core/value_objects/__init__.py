"""Value objects"""

from .dataset_path import DatasetPath, DATASET_SEGMENT_PATTERN

__all__ = ['DatasetPath', 'DATASET_SEGMENT_PATTERN']
