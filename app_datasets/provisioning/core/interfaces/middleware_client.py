from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class IMiddlewareClient(ABC):
    """
    Administrative RPC boundary.
    
    Every call is synchronous from the caller's point of view and either
    returns or raises ``MiddlewareCallError``.
    """
    
    @abstractmethod
    async def query(self, method: str, filters: List[List[Any]],
                    options: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run a ``*.query`` method and return zero or more matching records"""
        pass
    
    @abstractmethod
    async def create_dataset(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Call ``pool.dataset.create``"""
        pass
    
    @abstractmethod
    async def set_acl(self, payload: Dict[str, Any]) -> Any:
        """Run the ``filesystem.setacl`` job and wait for it to finish"""
        pass
