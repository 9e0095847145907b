"""
Checks on live storage state made before anything is created.
"""
from ...models import PoolRecord
from ..core.entities.run_context import RunContext
from ..core.exceptions.provisioning_exceptions import PoolNotFoundError, UserAbortError
from ..core.interfaces.confirmation_provider import IConfirmationProvider
from ..core.interfaces.logger_interface import ILogger
from ..core.interfaces.middleware_client import IMiddlewareClient
from .dataset_service import DatasetService


class PreconditionService:
    
    def __init__(self,
                 client: IMiddlewareClient,
                 datasets: DatasetService,
                 confirmation: IConfirmationProvider,
                 logger: ILogger):
        self._client = client
        self._datasets = datasets
        self._confirmation = confirmation
        self._logger = logger
    
    async def check_pool_exists(self, pool_name: str) -> None:
        """Always a real query, dry run or not."""
        self._logger.info(f"Verifying if ZFS pool '{pool_name}' exists on TrueNAS...")
        pools = await self._client.query("pool.query", [["name", "=", pool_name]])
        if not pools:
            raise PoolNotFoundError(pool_name)
        pool = PoolRecord.model_validate(pools[0])
        self._logger.success(f"ZFS Pool '{pool_name}' found.", {"pool": pool.name, "status": pool.status})
    
    async def confirm_parent_root(self, context: RunContext) -> bool:
        """
        Make sure the operator accepts that ``pool/root`` will be created.
        
        Returns True if the root already exists. A dry run assumes consent
        without asking; declining raises ``UserAbortError``.
        """
        request = context.request
        root_path = request.root_path
        self._logger.info(f"Checking if parent root dataset '{root_path}' exists...")
        
        if await self._datasets.dataset_exists(root_path):
            self._logger.success(f"Parent root dataset '{root_path}' found.")
            return True
        
        self._logger.warning(f"Parent root dataset '{root_path}' not found.")
        self._logger.warning(f"If you proceed, TrueNAS will automatically create '{root_path}'")
        self._logger.warning(
            f"with the 'Apps' preset properties as an intermediate dataset "
            f"when creating '{request.app_path}'."
        )
        
        if context.dry_run:
            self._logger.dry_run("In dry-run mode, we would prompt for confirmation here.")
            self._logger.dry_run(
                "Assuming 'yes' for dry-run purposes, but a real run would ask for explicit confirmation."
            )
            self._logger.info("Proceeding with dry run.")
            return False
        
        if not self._confirmation.confirm(f"Do you want to proceed and allow creation of '{root_path}'?"):
            raise UserAbortError(str(root_path))
        
        self._logger.success("User confirmed. Proceeding to create/ensure datasets.")
        return False
