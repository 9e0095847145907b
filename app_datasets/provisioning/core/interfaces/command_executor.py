from abc import ABC, abstractmethod
from typing import Optional
from dataclasses import dataclass


@dataclass
class CommandResult:
    """Result of a command execution"""
    returncode: int
    stdout: str
    stderr: str
    success: Optional[bool] = None
    
    def __post_init__(self):
        if self.success is None:
            self.success = self.returncode == 0


class ICommandExecutor(ABC):
    """Interface for command execution with validation"""
    
    @abstractmethod
    async def execute_system(self, command: str, *args: str) -> CommandResult:
        """Execute an allow-listed system command"""
        pass
    
    @abstractmethod
    def is_available(self, command: str) -> bool:
        """Check whether a command can be found on PATH"""
        pass
