"""
App Datasets Test Configuration and Fixtures

Shared fixtures: in-memory middleware and filesystem, mock loggers, and a
service factory wired to them.
"""

import pytest
from unittest.mock import Mock

from app_datasets.config import AppDatasetsConfig
from app_datasets.provisioning.core.entities import ProvisioningRequest, RunContext
from app_datasets.provisioning.factories.service_factory import ServiceFactory
from app_datasets.provisioning.infrastructure.confirmation import AutoConfirm
from tests.fixtures.fakes import FakeFilesystem, FakeMiddlewareClient


@pytest.fixture
def filesystem():
    return FakeFilesystem()


@pytest.fixture
def client(filesystem):
    """Pool ``tank`` exists, no datasets yet."""
    return FakeMiddlewareClient(pools=("tank",), filesystem=filesystem)


@pytest.fixture
def mock_logger():
    """Create mock logger."""
    logger = Mock()
    logger.debug = Mock()
    logger.info = Mock()
    logger.success = Mock()
    logger.dry_run = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.exception = Mock()
    return logger


@pytest.fixture
def config(tmp_path):
    """Config whose sidecar file lives in a temp dir and ignores the real environment."""
    cfg = AppDatasetsConfig(config_path=tmp_path / ".create_app_dataset.conf", environ={})
    cfg.runtime.mount_wait_interval = 0
    return cfg


@pytest.fixture
def confirmation():
    return AutoConfirm(answer=True)


@pytest.fixture
def service_factory(config, client, filesystem, confirmation):
    executor = Mock()
    executor.is_available = Mock(return_value=True)
    return ServiceFactory(
        config,
        executor=executor,
        client=client,
        filesystem=filesystem,
        confirmation=confirmation
    )


@pytest.fixture
def immich_request():
    return ProvisioningRequest(
        pool="tank",
        root="apps-config",
        app_name="immich",
        children=("config", "data"),
    )

