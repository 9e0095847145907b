"""
End-to-end provisioning runs against the in-memory middleware.
"""
import asyncio

import pytest
from unittest.mock import AsyncMock

from app_datasets.provisioning.core.entities import DatasetState, ProvisioningRequest
from app_datasets.provisioning.core.exceptions import (
    CreationError,
    MountTimeoutError,
    PoolNotFoundError,
    UserAbortError,
)
from app_datasets.provisioning.infrastructure.confirmation import AutoConfirm
from app_datasets.provisioning.factories.service_factory import ServiceFactory
from tests.fixtures.test_data import EXPECTED_DACL

IMMICH_TREE = [
    "tank/apps-config/immich",
    "tank/apps-config/immich/config",
    "tank/apps-config/immich/data",
]


def immich(**overrides):
    fields = dict(pool="tank", root="apps-config", app_name="immich", children=("config", "data"))
    fields.update(overrides)
    return ProvisioningRequest(**fields)


class TestFreshProvisioning:
    
    @pytest.mark.asyncio
    async def test_creates_root_app_and_children(self, service_factory, client, filesystem, config,
                                                 confirmation, immich_request):
        context = await service_factory.create_workflow().run(immich_request)
        
        assert client.created_names == ["tank/apps-config"] + IMMICH_TREE
        assert [str(p) for p in context.created] == ["tank/apps-config"] + IMMICH_TREE
        assert client.acl_paths == ["/mnt/" + name for name in IMMICH_TREE]
        assert all(payload["dacl"] == EXPECTED_DACL for payload in client.acl_payloads)
        assert filesystem.owners == {"/mnt/" + name: "apps:apps" for name in IMMICH_TREE}
        assert confirmation.questions == [
            "Do you want to proceed and allow creation of 'tank/apps-config'?"
        ]
    
    @pytest.mark.asyncio
    async def test_payloads_use_apps_preset(self, service_factory, client, immich_request):
        await service_factory.create_workflow().run(immich_request)
        
        for payload in client.create_payloads:
            assert payload["type"] == "FILESYSTEM"
            assert payload["share_type"] == "APPS"
            assert payload["acltype"] == "NFSV4"
            assert payload["aclmode"] == "PASSTHROUGH"
            assert "encryption" not in payload
    
    @pytest.mark.asyncio
    async def test_root_already_present(self, service_factory, client, confirmation, immich_request):
        client.add_dataset("tank/apps-config")
        
        await service_factory.create_workflow().run(immich_request)
        
        assert client.created_names == IMMICH_TREE
        assert confirmation.questions == []
    
    @pytest.mark.asyncio
    async def test_saves_configuration(self, service_factory, config, immich_request):
        config.apply_overrides(pool="tank")
        
        await service_factory.create_workflow().run(immich_request)
        
        assert config.config_path.read_text() == (
            'POOL_NAME="tank"\nPARENT_DATASET_ROOT="apps-config"\n'
        )


class TestIdempotence:
    
    @pytest.mark.asyncio
    async def test_second_run_changes_nothing(self, service_factory, client, filesystem, immich_request):
        await service_factory.create_workflow().run(immich_request)
        client.calls.clear()
        filesystem.owners.clear()
        
        context = await service_factory.create_workflow().run(immich_request)
        
        assert client.create_payloads == []
        assert client.acl_payloads == []
        assert filesystem.owners == {}
        assert context.created == []
        assert all(context.state_of(p) is DatasetState.ACL_SKIPPED for p in immich_request.app_tree)
    
    @pytest.mark.asyncio
    async def test_existing_app_dataset_without_force(self, service_factory, client, immich_request):
        client.add_dataset("tank/apps-config")
        client.add_dataset("tank/apps-config/immich")
        
        context = await service_factory.create_workflow().run(immich_request)
        
        assert client.created_names == IMMICH_TREE[1:]
        assert client.acl_paths == ["/mnt/" + name for name in IMMICH_TREE[1:]]
        assert context.state_of(immich_request.app_path) is DatasetState.ACL_SKIPPED

    @pytest.mark.asyncio
    async def test_new_children_on_existing_app(self, service_factory, client, immich_request):
        for name in ["tank/apps-config"] + IMMICH_TREE[:2]:
            client.add_dataset(name)
        
        await service_factory.create_workflow().run(immich_request)
        
        assert client.created_names == ["tank/apps-config/immich/data"]
        assert client.acl_paths == ["/mnt/tank/apps-config/immich/data"]
    
    @pytest.mark.asyncio
    async def test_force_acl_reapplies_everywhere(self, service_factory, client, filesystem):
        for name in ["tank/apps-config"] + IMMICH_TREE:
            client.add_dataset(name)
        
        await service_factory.create_workflow().run(immich(force_acl=True))
        
        assert client.create_payloads == []
        assert client.acl_paths == ["/mnt/" + name for name in IMMICH_TREE]
        assert len(filesystem.owners) == 3


class TestEncryption:
    
    @pytest.mark.asyncio
    async def test_app_is_encryption_root_children_inherit(self, service_factory, client):
        await service_factory.create_workflow().run(immich(encrypt=True))
        
        root, app, config, data = client.create_payloads
        assert "encryption" not in root and "inherit_encryption" not in root
        assert app["inherit_encryption"] is False
        assert app["encryption"] is True
        assert app["encryption_options"] == {"generate_key": True, "algorithm": "AES-256-GCM"}
        for child in (config, data):
            assert child["inherit_encryption"] is True
            assert "encryption" not in child
            assert "encryption_options" not in child


class TestDryRun:
    
    @pytest.mark.asyncio
    async def test_no_mutations(self, config, client, filesystem):
        confirmation = AutoConfirm(answer=False)
        factory = ServiceFactory(config, client=client, filesystem=filesystem, confirmation=confirmation)
        
        context = await factory.create_workflow().run(immich(dry_run=True, force_acl=True))
        
        assert [call[0] for call in client.calls] == ["query"] * len(client.calls)
        assert filesystem.owners == {}
        assert confirmation.questions == []
        assert context.created == []
        assert [str(p) for p in context.would_create] == ["tank/apps-config"] + IMMICH_TREE
        assert all(context.state_of(p) is DatasetState.ACL_APPLIED for p in context.request.app_tree)
    
    @pytest.mark.asyncio
    async def test_matches_real_run_decisions(self, config, client, filesystem, service_factory):
        client.add_dataset("tank/apps-config")
        client.add_dataset("tank/apps-config/immich")
        dry = await service_factory.create_workflow().run(immich(dry_run=True))
        
        real = await service_factory.create_workflow().run(immich())
        
        assert dry.would_create == real.created
        assert {k: v for k, v in dry.states.items()} == {k: v for k, v in real.states.items()}
    
    @pytest.mark.asyncio
    async def test_repeated_children_match_real_run(self, config, client, filesystem, service_factory):
        dry = await service_factory.create_workflow().run(immich(children=("data", "data"), dry_run=True))
        real = await service_factory.create_workflow().run(immich(children=("data", "data")))
        
        assert dry.would_create == real.created
        assert [str(p) for p in real.created] == ["tank/apps-config"] + IMMICH_TREE[::2]
        assert client.acl_paths == ["/mnt/" + name for name in IMMICH_TREE[::2]]


class TestFailures:
    
    @pytest.mark.asyncio
    async def test_missing_pool_creates_nothing(self, service_factory, client):
        with pytest.raises(PoolNotFoundError):
            await service_factory.create_workflow().run(immich(pool="nope"))
        
        assert client.create_payloads == []
    
    @pytest.mark.asyncio
    async def test_user_declines_root_creation(self, config, client, filesystem):
        factory = ServiceFactory(config, client=client, filesystem=filesystem,
                                 confirmation=AutoConfirm(answer=False))
        
        with pytest.raises(UserAbortError):
            await factory.create_workflow().run(immich())
        
        assert client.create_payloads == []
        assert not config.config_path.exists()
    
    @pytest.mark.asyncio
    async def test_creation_failure_stops_run_and_reports(self, service_factory, client, mocker):
        client.fail_create.add("tank/apps-config/immich/data")
        workflow = service_factory.create_workflow()
        report = mocker.spy(workflow._reporter, "report")
        
        request = immich()
        
        with pytest.raises(CreationError, match="tank/apps-config/immich/data"):
            await workflow.run(request)
        
        assert client.acl_payloads == []
        assert report.spy_return == [
            "/mnt/tank/apps-config",
            "/mnt/tank/apps-config/immich",
            "/mnt/tank/apps-config/immich/config",
        ]
        context = report.call_args.args[0]
        assert context.state_of(request.child_paths[1]) is DatasetState.ABSENT
    
    @pytest.mark.asyncio
    async def test_mount_never_appears(self, config, service_factory, client):
        config.runtime.mount_wait_attempts = 3
        client.mount_on_create = False
        client.add_dataset("tank/apps-config")
        
        with pytest.raises(MountTimeoutError):
            await service_factory.create_workflow().run(immich())
        
        assert client.created_names == IMMICH_TREE
        assert client.acl_payloads == []
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("interrupt", [KeyboardInterrupt, asyncio.CancelledError])
    async def test_interrupt_still_reports_created_datasets(self, service_factory, client, mocker, interrupt):
        client.add_dataset("tank/apps-config")
        client.set_acl = AsyncMock(side_effect=interrupt)
        workflow = service_factory.create_workflow()
        report = mocker.spy(workflow._reporter, "report")
        
        with pytest.raises(interrupt):
            await workflow.run(immich(children=()))
        
        assert report.call_count == 1
        assert report.spy_return == ["/mnt/tank/apps-config/immich"]
