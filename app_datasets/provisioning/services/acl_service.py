import asyncio
from typing import Awaitable, Callable

from ...models import AclEntry, AclTag, BasicPermission, SetAclPayload
from ..core.entities.run_context import RunContext
from ..core.exceptions.provisioning_exceptions import (
    AclApplicationError,
    MiddlewareCallError,
    MountTimeoutError,
)
from ..core.interfaces.filesystem import IFilesystem
from ..core.interfaces.logger_interface import ILogger
from ..core.interfaces.middleware_client import IMiddlewareClient
from ..core.value_objects.dataset_path import DatasetPath

USERS_GROUP = "builtin_users"
ADMINISTRATORS_GROUP = "builtin_administrators"


def build_acl_payload(mount_path: str) -> SetAclPayload:
    """
    The fixed app ACL: owner full control, owning group modify,
    builtin_users modify, builtin_administrators full control. Every entry is
    an inheritable ALLOW; existing ACLs are stripped and the result applied
    recursively.
    """
    return SetAclPayload(
        path=mount_path,
        dacl=[
            AclEntry.basic(AclTag.OWNER, BasicPermission.FULL_CONTROL),
            AclEntry.basic(AclTag.GROUP_OWNER, BasicPermission.MODIFY),
            AclEntry.basic(AclTag.GROUP, BasicPermission.MODIFY, id=USERS_GROUP),
            AclEntry.basic(AclTag.GROUP, BasicPermission.FULL_CONTROL, id=ADMINISTRATORS_GROUP),
        ],
    )


class AclService:
    """Applies the app ACL and apps ownership to dataset mount points."""
    
    def __init__(self,
                 client: IMiddlewareClient,
                 filesystem: IFilesystem,
                 logger: ILogger,
                 apps_user: str = "apps",
                 apps_group: str = "apps",
                 mount_prefix: str = "/mnt",
                 wait_attempts: int = 30,
                 wait_interval: float = 0.1,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self._client = client
        self._filesystem = filesystem
        self._logger = logger
        self.apps_user = apps_user
        self.apps_group = apps_group
        self.mount_prefix = mount_prefix
        self.wait_attempts = wait_attempts
        self.wait_interval = wait_interval
        self._sleep = sleep
    
    @property
    def owner(self) -> str:
        return f"{self.apps_user}:{self.apps_group}"
    
    async def apply_acl(self, context: RunContext, path: DatasetPath) -> bool:
        """
        Apply the ACL if ``path`` was created by this run or ``force_acl`` is
        set. Returns whether it was (or in a dry run would be) applied.
        """
        mount_path = path.mount_path(self.mount_prefix)
        just_created = context.was_created(path)
        force = context.request.force_acl
        
        if context.dry_run:
            return self._simulate(context, path, mount_path, just_created, force)
        
        if just_created:
            self._logger.info(f"Applying ACL and Unix ownership to {mount_path} (newly created dataset)...")
        elif force:
            self._logger.info(f"Applying ACL and Unix ownership to {mount_path} (dataset existed, --force-acl used)...")
        else:
            self._logger.info(
                f"Dataset {path} already exists and --force-acl was not specified. Skipping ACL application."
            )
            context.record_acl(path, applied=False)
            return False
        
        await self.wait_for_mount(mount_path)
        payload = build_acl_payload(mount_path).to_payload()
        try:
            await self._client.set_acl(payload)
        except MiddlewareCallError as e:
            raise AclApplicationError(mount_path, e.stderr or str(e)) from e
        
        # Unix ownership backs the UI's basic permission fields.
        try:
            self._filesystem.set_owner(mount_path, self.apps_user, self.apps_group)
        except (OSError, LookupError) as e:
            raise AclApplicationError(mount_path, f"chown {self.owner} failed: {e}") from e
        
        context.record_acl(path, applied=True)
        self._logger.success(f"Applied ACL and ownership {self.owner} to {mount_path}.", {"dataset": str(path)})
        return True
    
    def _simulate(self, context: RunContext, path: DatasetPath, mount_path: str,
                  just_created: bool, force: bool) -> bool:
        if just_created:
            reason = "dataset would be newly created in this dry run"
        elif force:
            reason = "dataset existed, --force-acl used"
        else:
            self._logger.dry_run(
                f"Dataset {path} already exists (on the real system) and --force-acl was not specified. "
                "Would skip ACL application."
            )
            context.record_acl(path, applied=False)
            return False
        
        self._logger.dry_run(f"Would apply ACL and chown {self.owner} to {mount_path} ({reason}).")
        self._logger.dry_run(
            "ACL JSON payload (note: this is a dry run; ACL would be applied):",
            {"dataset": str(path), "payload": build_acl_payload(mount_path).to_payload()}
        )
        context.record_acl(path, applied=True)
        return True
    
    async def wait_for_mount(self, mount_path: str) -> None:
        """Poll for the mount point; creation and mount registration are not synchronous."""
        for _ in range(self.wait_attempts):
            if self._filesystem.is_directory(mount_path):
                return
            await self._sleep(self.wait_interval)
        if not self._filesystem.is_directory(mount_path):
            raise MountTimeoutError(mount_path, self.wait_attempts, self.wait_interval)
