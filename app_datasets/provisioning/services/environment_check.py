"""
Host checks that run before any other work.
"""
import os
from typing import Callable, Optional

from ..core.interfaces.command_executor import ICommandExecutor
from ..core.exceptions.provisioning_exceptions import EnvironmentCheckError


class EnvironmentCheck:
    """Root privileges are needed for ``midclt`` and ``chown``."""
    
    def __init__(self, executor: ICommandExecutor, midclt_binary: str = "midclt",
                 geteuid: Optional[Callable[[], int]] = None):
        self._executor = executor
        self._midclt_binary = midclt_binary
        self._geteuid = geteuid or os.geteuid
    
    def verify(self) -> None:
        if self._geteuid() != 0:
            raise EnvironmentCheckError(
                "This tool must be run as root or with 'sudo'.",
                "not_root"
            )
        if not self._executor.is_available(self._midclt_binary):
            raise EnvironmentCheckError(
                f"'{self._midclt_binary}' was not found on PATH. "
                "This tool must run on a TrueNAS SCALE host.",
                "midclt_missing"
            )
