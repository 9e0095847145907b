from abc import ABC, abstractmethod


class IFilesystem(ABC):
    """Local filesystem operations the ACL phase needs"""
    
    @abstractmethod
    def is_directory(self, path: str) -> bool:
        pass
    
    @abstractmethod
    def set_owner(self, path: str, user: str, group: str) -> None:
        """Set Unix owner and group of ``path``; raises ``OSError`` or ``LookupError``"""
        pass
