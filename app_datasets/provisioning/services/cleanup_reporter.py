"""
Failure report listing what a failed run left behind.
"""
from typing import List

from ..core.entities.run_context import RunContext
from ..core.interfaces.logger_interface import ILogger


class CleanupReporter:
    """
    Reports datasets created before a failure. Nothing is rolled back:
    the operator may already have put data in them.
    """
    
    def __init__(self, logger: ILogger, mount_prefix: str = "/mnt"):
        self._logger = logger
        self._mount_prefix = mount_prefix
    
    def report(self, context: RunContext, error: BaseException) -> List[str]:
        """Log the failure and return the mount paths the operator should inspect."""
        reason = str(error) or type(error).__name__
        self._logger.error(f"Provisioning failed: {reason}", {"run_id": context.run_id})
        
        leftovers = [path.mount_path(self._mount_prefix) for path in context.created]
        if not leftovers:
            self._logger.warning("No datasets were created by this run before the error occurred.")
            return leftovers
        
        self._logger.warning("Datasets potentially created in this run:", {"created": leftovers})
        for mount_path in leftovers:
            self._logger.error(f"  - {mount_path}")
        self._logger.warning(
            "Please inspect these datasets in the TrueNAS UI or via 'zfs list' "
            "and manually clean up if necessary."
        )
        return leftovers
