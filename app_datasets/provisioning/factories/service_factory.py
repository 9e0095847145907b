"""
Service factory for dependency injection and service creation.
"""
from typing import Dict, Optional

from ...config import AppDatasetsConfig
from ..core.interfaces.command_executor import ICommandExecutor
from ..core.interfaces.confirmation_provider import IConfirmationProvider
from ..core.interfaces.filesystem import IFilesystem
from ..core.interfaces.middleware_client import IMiddlewareClient
from ..infrastructure.command_executor import CommandExecutor
from ..infrastructure.confirmation import TerminalConfirmation
from ..infrastructure.filesystem import LocalFilesystem
from ..infrastructure.logging.structured_logger import OperationLogger, StructuredLogger
from ..infrastructure.middleware_client import MidcltClient
from ..services.acl_service import AclService
from ..services.cleanup_reporter import CleanupReporter
from ..services.dataset_service import DatasetService
from ..services.environment_check import EnvironmentCheck
from ..services.input_validator import InputValidator
from ..services.precondition_service import PreconditionService
from ..workflow import ProvisioningWorkflow


class ServiceFactory:
    """
    Builds services with their collaborators. Any collaborator can be
    swapped out, which is how tests run without a TrueNAS host.
    """
    
    def __init__(self,
                 config: AppDatasetsConfig,
                 executor: Optional[ICommandExecutor] = None,
                 client: Optional[IMiddlewareClient] = None,
                 filesystem: Optional[IFilesystem] = None,
                 confirmation: Optional[IConfirmationProvider] = None):
        self._config = config
        runtime = config.runtime
        self._executor = executor or CommandExecutor(timeout=runtime.command_timeout)
        self._client = client or MidcltClient(self._executor, binary=runtime.midclt_binary)
        self._filesystem = filesystem or LocalFilesystem()
        self._confirmation = confirmation or TerminalConfirmation()
        self._loggers: Dict[str, StructuredLogger] = {}
    
    def get_logger(self, name: str) -> StructuredLogger:
        """Get or create a logger instance for a service."""
        if name not in self._loggers:
            runtime = self._config.runtime
            self._loggers[name] = StructuredLogger(
                name=f"app_datasets.{name}",
                level=runtime.log_level,
                log_format=runtime.log_format
            )
        return self._loggers[name]
    
    def create_input_validator(self) -> InputValidator:
        return InputValidator()
    
    def create_environment_check(self) -> EnvironmentCheck:
        return EnvironmentCheck(self._executor, self._config.runtime.midclt_binary)
    
    def create_dataset_service(self) -> DatasetService:
        return DatasetService(client=self._client, logger=self.get_logger("datasets"))
    
    def create_precondition_service(self, datasets: Optional[DatasetService] = None) -> PreconditionService:
        return PreconditionService(
            client=self._client,
            datasets=datasets or self.create_dataset_service(),
            confirmation=self._confirmation,
            logger=self.get_logger("preconditions")
        )
    
    def create_acl_service(self) -> AclService:
        runtime = self._config.runtime
        return AclService(
            client=self._client,
            filesystem=self._filesystem,
            logger=self.get_logger("acl"),
            apps_user=runtime.apps_user,
            apps_group=runtime.apps_group,
            mount_prefix=runtime.mount_prefix,
            wait_attempts=runtime.mount_wait_attempts,
            wait_interval=runtime.mount_wait_interval
        )
    
    def create_cleanup_reporter(self) -> CleanupReporter:
        return CleanupReporter(self.get_logger("cleanup"), mount_prefix=self._config.runtime.mount_prefix)
    
    def create_workflow(self) -> ProvisioningWorkflow:
        runtime = self._config.runtime
        datasets = self.create_dataset_service()
        return ProvisioningWorkflow(
            preconditions=self.create_precondition_service(datasets),
            datasets=datasets,
            acls=self.create_acl_service(),
            reporter=self.create_cleanup_reporter(),
            logger=OperationLogger(
                name="app_datasets.workflow",
                level=runtime.log_level,
                log_format=runtime.log_format
            ),
            config=self._config
        )
