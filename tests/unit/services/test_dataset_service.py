import pytest
from unittest.mock import Mock, AsyncMock

from app_datasets.provisioning.core.entities import DatasetRole, DatasetState
from app_datasets.provisioning.core.exceptions import CreationError, MiddlewareCallError
from app_datasets.provisioning.core.value_objects import DatasetPath
from app_datasets.provisioning.services.dataset_service import DatasetService
from tests.fixtures.test_data import make_context

BASE_FIELDS = {
    "type": "FILESYSTEM",
    "share_type": "APPS",
    "acltype": "NFSV4",
    "aclmode": "PASSTHROUGH",
}

ENCRYPTION_KEYS = {"encryption", "encryption_options", "inherit_encryption"}


class TestBuildCreatePayload:
    
    @pytest.fixture
    def service(self, mock_logger):
        return DatasetService(client=Mock(), logger=mock_logger)
    
    @pytest.fixture
    def path(self):
        return DatasetPath.from_string("tank/apps-config/immich")
    
    @pytest.mark.parametrize("role", [DatasetRole.ROOT, DatasetRole.CHILD])
    def test_unencrypted_has_only_base_fields(self, service, path, role):
        payload = service.build_create_payload(path, role, encrypt=False).to_payload()
        
        assert payload == {"name": "tank/apps-config/immich", **BASE_FIELDS}
        assert not ENCRYPTION_KEYS & payload.keys()
    
    def test_encrypted_root(self, service, path):
        payload = service.build_create_payload(path, DatasetRole.ROOT, encrypt=True).to_payload()
        
        assert payload == {
            "name": "tank/apps-config/immich",
            **BASE_FIELDS,
            "inherit_encryption": False,
            "encryption": True,
            "encryption_options": {"generate_key": True, "algorithm": "AES-256-GCM"},
        }
    
    def test_encrypted_child_inherits(self, service, path):
        child = path.join("config")
        payload = service.build_create_payload(child, DatasetRole.CHILD, encrypt=True).to_payload()
        
        assert payload["inherit_encryption"] is True
        assert "encryption" not in payload
        assert "encryption_options" not in payload


class TestEnsureDataset:
    
    @pytest.fixture
    def service(self, client, mock_logger):
        return DatasetService(client=client, logger=mock_logger)
    
    @pytest.mark.asyncio
    async def test_creates_missing_dataset(self, service, client):
        context = make_context()
        path = context.request.app_path
        
        created = await service.ensure_dataset(context, path, DatasetRole.ROOT)
        
        assert created is True
        assert client.created_names == ["tank/apps-config/immich"]
        assert context.created == [path]
        assert context.state_of(path) is DatasetState.CREATED
    
    @pytest.mark.asyncio
    async def test_existing_dataset_is_left_alone(self, service, client):
        client.add_dataset("tank/apps-config/immich")
        context = make_context()
        
        created = await service.ensure_dataset(context, context.request.app_path, DatasetRole.ROOT)
        
        assert created is False
        assert client.create_payloads == []
        assert context.created == []
        assert context.state_of(context.request.app_path) is DatasetState.PRESENT
    
    @pytest.mark.asyncio
    async def test_uses_request_encrypt_flag(self, service, client):
        context = make_context(encrypt=True)
        
        await service.ensure_dataset(context, context.request.app_path, DatasetRole.ROOT)
        await service.ensure_dataset(context, context.request.child_paths[0], DatasetRole.CHILD)
        
        root_payload, child_payload = client.create_payloads
        assert root_payload["encryption"] is True
        assert child_payload["inherit_encryption"] is True
    
    @pytest.mark.asyncio
    async def test_dry_run_makes_no_create_call(self, service, client, mock_logger):
        context = make_context(dry_run=True)
        path = context.request.app_path
        
        created = await service.ensure_dataset(context, path, DatasetRole.ROOT)
        
        assert created is True
        assert client.create_payloads == []
        assert context.would_create == [path]
        assert context.created == []
        # The payload is emitted for inspection
        payloads = [c.args[1]["payload"] for c in mock_logger.dry_run.call_args_list if len(c.args) > 1]
        assert payloads[0]["name"] == "tank/apps-config/immich"
    
    @pytest.mark.asyncio
    async def test_dry_run_still_queries_existence(self, service, client):
        context = make_context(dry_run=True)
        
        await service.ensure_dataset(context, context.request.app_path, DatasetRole.ROOT)
        
        assert ("query", "pool.dataset.query", [["id", "=", "tank/apps-config/immich"]]) in client.calls
    
    @pytest.mark.asyncio
    async def test_create_failure_raises_creation_error(self, service, client):
        client.fail_create.add("tank/apps-config/immich")
        context = make_context()
        
        with pytest.raises(CreationError) as exc_info:
            await service.ensure_dataset(context, context.request.app_path, DatasetRole.ROOT)
        
        assert "EINVAL" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, MiddlewareCallError)
        assert context.created == []
    
    @pytest.mark.asyncio
    async def test_query_failure_propagates(self, mock_logger):
        client = Mock()
        client.query = AsyncMock(side_effect=MiddlewareCallError("pool.dataset.query", 1, "boom"))
        service = DatasetService(client=client, logger=mock_logger)
        context = make_context()
        
        with pytest.raises(MiddlewareCallError):
            await service.ensure_dataset(context, context.request.app_path, DatasetRole.ROOT)


class TestEnsureRoot:
    
    @pytest.fixture
    def service(self, client, mock_logger):
        return DatasetService(client=client, logger=mock_logger)
    
    @pytest.mark.asyncio
    async def test_creates_missing_root_unencrypted(self, service, client):
        context = make_context(encrypt=True)
        
        assert await service.ensure_root(context) is True
        
        assert client.create_payloads == [{"name": "tank/apps-config", **BASE_FIELDS}]
        assert context.created == [context.request.root_path]
    
    @pytest.mark.asyncio
    async def test_existing_root_is_skipped(self, service, client):
        client.add_dataset("tank/apps-config")
        context = make_context()
        
        assert await service.ensure_root(context) is False
        assert client.create_payloads == []
    
    @pytest.mark.asyncio
    async def test_dry_run_records_would_create(self, service, client):
        context = make_context(dry_run=True)
        
        await service.ensure_root(context)
        
        assert client.create_payloads == []
        assert context.would_create == [context.request.root_path]
    
    @pytest.mark.asyncio
    async def test_find_dataset_returns_record(self, service, client):
        client.add_dataset("tank/apps-config", encrypted=True)
        
        record = await service.find_dataset(DatasetPath.from_string("tank/apps-config"))
        
        assert record.id == "tank/apps-config"
        assert record.encrypted is True
        assert record.mountpoint == "/mnt/tank/apps-config"
    
    @pytest.mark.asyncio
    async def test_nested_root_creates_missing_ancestors_top_down(self, service, client):
        context = make_context(root="apps/config")
        
        assert await service.ensure_root(context) is True
        
        assert client.created_names == ["tank/apps", "tank/apps/config"]
        assert [str(p) for p in context.created] == ["tank/apps", "tank/apps/config"]
    
    @pytest.mark.asyncio
    async def test_nested_root_with_existing_ancestor(self, service, client):
        client.add_dataset("tank/apps")
        context = make_context(root="apps/config")
        
        await service.ensure_root(context)
        
        assert client.created_names == ["tank/apps/config"]
