from typing import Optional

from ...models import DatasetCreatePayload, DatasetRecord, EncryptionOptions
from ..core.entities.run_context import RunContext, DatasetRole
from ..core.exceptions.provisioning_exceptions import CreationError, MiddlewareCallError
from ..core.interfaces.logger_interface import ILogger
from ..core.interfaces.middleware_client import IMiddlewareClient
from ..core.value_objects.dataset_path import DatasetPath


class DatasetService:
    """Idempotent dataset creation through ``pool.dataset.create``."""
    
    def __init__(self, client: IMiddlewareClient, logger: ILogger):
        self._client = client
        self._logger = logger
    
    async def find_dataset(self, path: DatasetPath) -> Optional[DatasetRecord]:
        """Look a dataset up by its full name. Read-only, so it also runs in dry-run mode."""
        records = await self._client.query(
            "pool.dataset.query",
            [["id", "=", str(path)]],
            {"extra": {"retrieve_children": False}}
        )
        if not records:
            return None
        return DatasetRecord.model_validate(records[0])
    
    async def dataset_exists(self, path: DatasetPath) -> bool:
        return await self.find_dataset(path) is not None
    
    def build_create_payload(self, path: DatasetPath, role: DatasetRole, encrypt: bool) -> DatasetCreatePayload:
        """
        Apps preset fields, plus encryption fields picked by role.
        
        ``ROOT`` starts a new encryption root with a generated AES-256-GCM key
        and must not inherit. ``CHILD`` inherits from its parent and carries
        no key fields. Without ``encrypt`` no encryption field is set.
        """
        payload = DatasetCreatePayload(name=str(path))
        if not encrypt:
            return payload
        
        if role is DatasetRole.ROOT:
            payload.inherit_encryption = False
            payload.encryption = True
            payload.encryption_options = EncryptionOptions(generate_key=True, algorithm="AES-256-GCM")
        else:
            payload.inherit_encryption = True
        return payload
    
    async def ensure_dataset(self, context: RunContext, path: DatasetPath, role: DatasetRole,
                             encrypt: Optional[bool] = None) -> bool:
        """
        Create ``path`` unless it exists. Returns True if it was (or in a
        dry run would be) created.
        """
        if encrypt is None:
            encrypt = context.request.encrypt
        
        self._logger.info(f"Checking if dataset {path} already exists...")
        if await self.dataset_exists(path):
            self._logger.success(f"Dataset {path} already exists. Skipping creation.", {"dataset": str(path)})
            context.record_present(path)
            return False
        
        context.record_absent(path)
        payload = self.build_create_payload(path, role, encrypt).to_payload()
        self._logger.warning(f"Creating dataset {path} with Apps preset...")
        
        if context.dry_run:
            self._logger.dry_run(f"Would create dataset {path}.")
            self._logger.dry_run("Create JSON payload:", {"dataset": str(path), "payload": payload})
            context.record_created(path)
            return True
        
        try:
            await self._client.create_dataset(payload)
        except MiddlewareCallError as e:
            raise CreationError(str(path), e.stderr or str(e)) from e
        
        context.record_created(path)
        self._logger.success(f"Created dataset {path}.", {"dataset": str(path)})
        return True
    
    async def ensure_root(self, context: RunContext) -> bool:
        """
        Make sure ``pool/root`` exists before the app dataset is created.
        
        The middleware refuses to create a dataset whose intermediate parents
        are missing, so the root and any missing ancestors of a nested root
        are created explicitly, top down, never encrypted.
        """
        root_path = context.request.root_path
        missing = []
        path = root_path
        while path.parent is not None and not await self.dataset_exists(path):
            missing.append(path)
            path = path.parent
        
        if not missing:
            context.record_present(root_path)
            return False
        
        for path in reversed(missing):
            await self._create_root_level(context, path)
        return True
    
    async def _create_root_level(self, context: RunContext, path: DatasetPath) -> None:
        context.record_absent(path)
        self._logger.info(f"Creating missing parent root dataset '{path}' with Apps preset...")
        payload = self.build_create_payload(path, DatasetRole.ROOT, encrypt=False).to_payload()
        
        if context.dry_run:
            self._logger.dry_run(f"Would create intermediate root dataset {path}.")
            self._logger.dry_run("Root Create JSON payload:", {"dataset": str(path), "payload": payload})
            context.record_created(path)
            return
        
        try:
            await self._client.create_dataset(payload)
        except MiddlewareCallError as e:
            raise CreationError(str(path), e.stderr or str(e)) from e
        
        context.record_created(path)
