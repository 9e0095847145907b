from abc import ABC, abstractmethod


class IConfirmationProvider(ABC):
    """Asks the operator a yes/no question"""
    
    @abstractmethod
    def confirm(self, question: str) -> bool:
        pass
