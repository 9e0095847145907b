from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from enum import Enum


class DatasetType(str, Enum):
    FILESYSTEM = "FILESYSTEM"


class ShareType(str, Enum):
    APPS = "APPS"


class AclTag(str, Enum):
    OWNER = "OWNER@"
    GROUP_OWNER = "GROUP@"
    GROUP = "GROUP"


class BasicPermission(str, Enum):
    MODIFY = "MODIFY"
    FULL_CONTROL = "FULL_CONTROL"


class BasicFlag(str, Enum):
    INHERIT = "INHERIT"


class EncryptionOptions(BaseModel):
    generate_key: bool = True
    algorithm: str = "AES-256-GCM"


class DatasetCreatePayload(BaseModel):
    """Arguments of ``pool.dataset.create``. Unset encryption fields are omitted."""
    name: str
    type: DatasetType = DatasetType.FILESYSTEM
    share_type: ShareType = ShareType.APPS
    acltype: str = "NFSV4"
    aclmode: str = "PASSTHROUGH"
    inherit_encryption: Optional[bool] = None
    encryption: Optional[bool] = None
    encryption_options: Optional[EncryptionOptions] = None
    
    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class AclEntry(BaseModel):
    tag: AclTag
    id: Optional[str] = None
    perms: Dict[str, BasicPermission]
    flags: Dict[str, BasicFlag] = Field(default_factory=lambda: {"BASIC": BasicFlag.INHERIT})
    type: str = "ALLOW"
    
    @classmethod
    def basic(cls, tag: AclTag, permission: BasicPermission, id: Optional[str] = None) -> 'AclEntry':
        return cls(tag=tag, id=id, perms={"BASIC": permission})


class AclOptions(BaseModel):
    recursive: bool = True
    traverse: bool = False
    stripacl: bool = True


class SetAclPayload(BaseModel):
    """Arguments of the ``filesystem.setacl`` job"""
    path: str
    dacl: List[AclEntry]
    options: AclOptions = Field(default_factory=AclOptions)
    
    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class DatasetRecord(BaseModel):
    """A row of ``pool.dataset.query``. Owned by the middleware, never mutated here."""
    model_config = ConfigDict(extra="ignore")
    
    id: str
    name: Optional[str] = None
    encrypted: bool = False
    mountpoint: Optional[str] = None


class PoolRecord(BaseModel):
    """A row of ``pool.query``"""
    model_config = ConfigDict(extra="ignore")
    
    name: str
    id: Optional[int] = None
    status: Optional[str] = None
    healthy: Optional[bool] = None
