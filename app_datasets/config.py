"""
App Datasets Configuration Module

Built-in defaults, environment overrides and the persisted sidecar file that
remembers the pool and root dataset between runs.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dotenv.parser import parse_stream

from .provisioning.core.exceptions import ConfigWriteSkipped

CONFIG_FILE_NAME = ".create_app_dataset.conf"

DEFAULT_POOL = "Pool"
DEFAULT_ROOT = "apps-config"

ENV_PREFIXES = ("APP_DATASETS_", "")

_POOL_KEYS = ("POOL_NAME", "pool")
_ROOT_KEYS = ("PARENT_DATASET_ROOT", "root")


@dataclass
class StorageConfig:
    """Where app datasets live. Persisted in the sidecar file."""
    pool: str = DEFAULT_POOL
    root: str = DEFAULT_ROOT


@dataclass
class RuntimeConfig:
    """Operational settings. Environment only, never persisted."""
    apps_user: str = "apps"
    apps_group: str = "apps"
    mount_prefix: str = "/mnt"
    mount_wait_attempts: int = 30
    mount_wait_interval: float = 0.1
    command_timeout: Optional[float] = None
    midclt_binary: str = "midclt"
    log_level: str = "INFO"
    log_format: str = "console"


def default_config_path() -> Path:
    """Sidecar file next to the installed tool"""
    return Path(__file__).resolve().parent / CONFIG_FILE_NAME


class AppDatasetsConfig:
    """
    Configuration for one run.
    
    ``storage`` starts from built-in defaults and is overlaid with the
    sidecar file by ``load()``. ``runtime`` is read from environment
    variables, optionally prefixed with ``APP_DATASETS_``.
    """
    
    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        self.config_path = Path(config_path) if config_path else default_config_path()
        self._environ = os.environ if environ is None else environ
        self.storage = StorageConfig()
        self.runtime = RuntimeConfig()
        self.warnings = []
        self._load_environment_variables()
    
    def _load_environment_variables(self):
        self.runtime.apps_user = self._get_string("APPS_USER", self.runtime.apps_user)
        self.runtime.apps_group = self._get_string("APPS_GROUP", self.runtime.apps_group)
        self.runtime.mount_prefix = self._get_string("MOUNT_PREFIX", self.runtime.mount_prefix)
        self.runtime.mount_wait_attempts = self._get_int(
            "MOUNT_WAIT_ATTEMPTS", self.runtime.mount_wait_attempts
        )
        self.runtime.mount_wait_interval = self._get_float(
            "MOUNT_WAIT_INTERVAL", self.runtime.mount_wait_interval
        )
        self.runtime.midclt_binary = self._get_string("MIDCLT", self.runtime.midclt_binary)
        self.runtime.log_level = self._get_string("LOG_LEVEL", self.runtime.log_level).upper()
        self.runtime.log_format = self._get_string("LOG_FORMAT", self.runtime.log_format).lower()
        
        timeout = self._get_string("COMMAND_TIMEOUT", "")
        if timeout:
            self.runtime.command_timeout = self._get_float("COMMAND_TIMEOUT", 0.0) or None
        
        if self.runtime.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            self.warnings.append(f"Invalid log level: {self.runtime.log_level}, using INFO")
            self.runtime.log_level = "INFO"
        if self.runtime.mount_wait_attempts < 1:
            self.warnings.append("MOUNT_WAIT_ATTEMPTS must be at least 1, using 30")
            self.runtime.mount_wait_attempts = 30
    
    def _get_string(self, key: str, default: str) -> str:
        """Get string value from environment with multiple key attempts"""
        for prefix in ENV_PREFIXES:
            value = self._environ.get(f"{prefix}{key}")
            if value is not None:
                return value
        return default
    
    def _get_int(self, key: str, default: int) -> int:
        value = self._get_string(key, str(default))
        try:
            return int(value)
        except ValueError:
            self.warnings.append(f"Invalid integer value for {key}: {value}, using default: {default}")
            return default
    
    def _get_float(self, key: str, default: float) -> float:
        value = self._get_string(key, str(default))
        try:
            return float(value)
        except ValueError:
            self.warnings.append(f"Invalid number for {key}: {value}, using default: {default}")
            return default
    
    def load(self) -> bool:
        """
        Overlay the sidecar file onto the storage defaults.
        
        A missing, unreadable or malformed file is not an error: a warning is
        recorded and the defaults stay in place for anything that could not be
        read. Returns True if the file was read.
        """
        if not self.config_path.is_file():
            self.warnings.append(
                f"Configuration file not found at {self.config_path}. Using default values."
            )
            return False
        
        try:
            with open(self.config_path, encoding="utf-8") as stream:
                bindings = list(parse_stream(stream))
        except (OSError, UnicodeDecodeError) as e:
            self.warnings.append(f"Could not read configuration file {self.config_path}: {e}. Using default values.")
            return False
        
        values: Dict[str, Optional[str]] = {}
        for binding in bindings:
            if binding.error:
                self.warnings.append(
                    f"Could not parse line {binding.original.line} of {self.config_path}, ignoring it."
                )
            elif binding.key is not None:
                values[binding.key] = binding.value
        
        pool = self._first_value(values, _POOL_KEYS)
        root = self._first_value(values, _ROOT_KEYS)
        if pool is None and root is None:
            self.warnings.append(
                f"No pool or root found in {self.config_path}. Using default values."
            )
        self.storage.pool = pool or self.storage.pool
        self.storage.root = root or self.storage.root
        return True
    
    @staticmethod
    def _first_value(values: Dict[str, Optional[str]], keys) -> Optional[str]:
        for key in keys:
            value = values.get(key)
            if value:
                return value.strip().strip('"')
        return None
    
    def apply_overrides(self, pool: Optional[str] = None, root: Optional[str] = None) -> None:
        """Command line flags take precedence over file and defaults"""
        if pool:
            self.storage.pool = pool
        if root:
            self.storage.root = root
    
    def save(self) -> Path:
        """
        Persist pool and root next to the tool with owner-only permissions.
        
        Raises ConfigWriteSkipped when the directory is not writable.
        """
        directory = self.config_path.parent
        if not os.access(directory, os.W_OK):
            if self.config_path.exists():
                raise ConfigWriteSkipped(
                    f"Config directory ({directory}) is not writable. Cannot update existing config file.",
                    str(self.config_path),
                    ["Changes from -p/-r flags will NOT be saved persistently."]
                )
            raise ConfigWriteSkipped(
                f"Config directory ({directory}) is not writable, and config file does not exist.",
                str(self.config_path),
                [
                    "Configuration will NOT be saved persistently. You will need to use -p and -r flags",
                    "or set defaults another way for future runs.",
                ]
            )
        
        content = (
            f'POOL_NAME="{self.storage.pool}"\n'
            f'PARENT_DATASET_ROOT="{self.storage.root}"\n'
        )
        try:
            fd = os.open(self.config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.chmod(self.config_path, 0o600)
        except OSError as e:
            raise ConfigWriteSkipped(
                f"Could not write config file {self.config_path}: {e}",
                str(self.config_path)
            )
        return self.config_path
    
    def get_summary(self) -> dict:
        return {
            "config_path": str(self.config_path),
            "pool": self.storage.pool,
            "root": self.storage.root,
            "apps_owner": f"{self.runtime.apps_user}:{self.runtime.apps_group}",
            "mount_prefix": self.runtime.mount_prefix,
            "mount_wait": {
                "attempts": self.runtime.mount_wait_attempts,
                "interval_seconds": self.runtime.mount_wait_interval,
            },
        }
