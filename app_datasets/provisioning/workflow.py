"""
Provisioning workflow: preconditions, datasets, then ACLs.
"""
from typing import Optional

from ..config import AppDatasetsConfig
from .core.entities.provisioning_request import ProvisioningRequest
from .core.entities.run_context import RunContext, DatasetRole
from .core.exceptions.provisioning_exceptions import ConfigWriteSkipped
from .infrastructure.logging.structured_logger import OperationLogger
from .services.acl_service import AclService
from .services.cleanup_reporter import CleanupReporter
from .services.dataset_service import DatasetService
from .services.precondition_service import PreconditionService


class ProvisioningWorkflow:
    """
    Runs one request end to end, strictly in order: pool check, root
    confirmation, config save, intermediate root, app dataset, children,
    then ACLs for the app dataset and each child. The first error stops the
    run; the cleanup reporter lists what was created before it.
    """
    
    def __init__(self,
                 preconditions: PreconditionService,
                 datasets: DatasetService,
                 acls: AclService,
                 reporter: CleanupReporter,
                 logger: OperationLogger,
                 config: Optional[AppDatasetsConfig] = None):
        self._preconditions = preconditions
        self._datasets = datasets
        self._acls = acls
        self._reporter = reporter
        self._logger = logger
        self._config = config
    
    async def run(self, request: ProvisioningRequest) -> RunContext:
        context = RunContext(request)
        self._logger.start_operation(
            context.run_id,
            "provision_app_datasets",
            app=request.app_name,
            dry_run=request.dry_run
        )
        try:
            await self._run(context)
        except BaseException as e:
            # Interrupts and cancellation still get the cleanup report.
            self._reporter.report(context, e)
            self._logger.fail_operation(str(e) or type(e).__name__, created=[str(p) for p in context.created])
            raise
        
        self._logger.complete_operation(
            created=[str(p) for p in context.created],
            would_create=[str(p) for p in context.would_create]
        )
        return context
    
    async def _run(self, context: RunContext) -> None:
        request = context.request
        
        await self._preconditions.check_pool_exists(request.pool)
        await self._preconditions.confirm_parent_root(context)
        self._persist_config()
        
        await self._datasets.ensure_root(context)
        
        if request.dry_run:
            self._logger.dry_run("--- DRY RUN MODE ENABLED ---")
            self._logger.dry_run("No changes will be made to your TrueNAS system.")
            self._logger.dry_run(f"Encryption requested? {str(request.encrypt).lower()}")
            self._logger.dry_run("---------------------------")
        
        # The app dataset is the encryption root; children inherit from it.
        await self._datasets.ensure_dataset(context, request.app_path, DatasetRole.ROOT)
        for child_path in request.child_paths:
            await self._datasets.ensure_dataset(context, child_path, DatasetRole.CHILD)
        
        for path in request.app_tree:
            await self._acls.apply_acl(context, path)
    
    def _persist_config(self) -> None:
        if self._config is None:
            return
        try:
            path = self._config.save()
        except ConfigWriteSkipped as skipped:
            self._logger.warning(str(skipped))
            for hint in skipped.hints:
                self._logger.warning(hint)
            return
        self._logger.info(f"Saved current configuration to {path}.")
