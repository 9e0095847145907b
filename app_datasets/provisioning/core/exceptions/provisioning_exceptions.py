from typing import Dict, Any, Optional, List


class ProvisioningError(Exception):
    """Base exception for all provisioning failures. Every subclass is fatal."""
    
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization"""
        return {
            'error_type': self.__class__.__name__,
            'message': str(self),
            'error_code': self.error_code,
            'details': self.details
        }


class EnvironmentCheckError(ProvisioningError):
    """The host cannot run the tool (not root, middleware CLI missing)"""
    
    def __init__(self, message: str, reason: str):
        super().__init__(
            message,
            error_code="ENVIRONMENT_CHECK_FAILED",
            details={"reason": reason}
        )


class PreconditionError(ProvisioningError):
    """A precondition on live storage state does not hold"""
    pass


class PoolNotFoundError(PreconditionError):
    """Pool not found exception"""
    
    def __init__(self, pool_name: str):
        super().__init__(
            f"ZFS Pool '{pool_name}' not found on your TrueNAS system",
            error_code="POOL_NOT_FOUND",
            details={"pool_name": pool_name}
        )


class UserAbortError(ProvisioningError):
    """Operator declined the implicit creation of the parent root dataset"""
    
    def __init__(self, dataset_name: str):
        super().__init__(
            f"Operation cancelled by user. Parent root dataset '{dataset_name}' not confirmed",
            error_code="USER_ABORT",
            details={"dataset_name": dataset_name}
        )


class MiddlewareCallError(ProvisioningError):
    """A middleware RPC call failed or returned unparseable output"""
    
    def __init__(self, method: str, exit_code: int, stderr: str = ""):
        message = f"Middleware call '{method}' failed (exit code {exit_code})"
        if stderr:
            message += f": {stderr}"
        super().__init__(
            message,
            error_code="MIDDLEWARE_CALL_FAILED",
            details={
                "method": method,
                "exit_code": exit_code,
                "stderr": stderr
            }
        )
        self.method = method
        self.exit_code = exit_code
        self.stderr = stderr


class CreationError(ProvisioningError):
    """Dataset creation call failed"""
    
    def __init__(self, dataset_name: str, reason: str = ""):
        message = f"Failed to create dataset '{dataset_name}'"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            error_code="DATASET_CREATE_FAILED",
            details={"dataset_name": dataset_name, "reason": reason}
        )


class MountTimeoutError(ProvisioningError):
    """Mount point of a dataset never appeared on the filesystem"""
    
    def __init__(self, mount_path: str, attempts: int, interval: float):
        super().__init__(
            f"Mount point {mount_path} did not appear after dataset creation. Cannot apply ACLs",
            error_code="MOUNT_TIMEOUT",
            details={
                "mount_path": mount_path,
                "attempts": attempts,
                "interval_seconds": interval
            }
        )
        self.mount_path = mount_path


class AclApplicationError(ProvisioningError):
    """Setting the ACL or the Unix ownership of a mount path failed"""
    
    def __init__(self, mount_path: str, reason: str = ""):
        message = f"Failed to apply ACL and ownership to {mount_path}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            error_code="ACL_APPLY_FAILED",
            details={"mount_path": mount_path, "reason": reason}
        )


class ConfigWriteSkipped(Exception):
    """Persisted configuration was not written. Informational only, never fatal."""
    
    def __init__(self, message: str, config_path: str, hints: Optional[List[str]] = None):
        super().__init__(message)
        self.config_path = config_path
        self.hints = hints or []
