"""
Local filesystem adapter.
"""
import os
import shutil

from ..core.interfaces.filesystem import IFilesystem


class LocalFilesystem(IFilesystem):
    
    def is_directory(self, path: str) -> bool:
        return os.path.isdir(path)
    
    def set_owner(self, path: str, user: str, group: str) -> None:
        shutil.chown(path, user=user, group=group)
