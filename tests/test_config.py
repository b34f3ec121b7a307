import pytest

from geev_core import (
    ContractError,
    ContractState,
    DynamoStore,
    ErrorKind,
    GeevConfig,
    GeevContract,
    InMemoryStore,
    InMemoryTokenLedger,
    ManualClock,
    SignerSetAuthenticator,
    read_config,
)
from geev_core import clients

ENV_VARS = (
    "GEEV_STORE_BACKEND",
    "GEEV_TABLE_NAME",
    "GEEV_INSTANCE_TABLE_NAME",
    "AWS_REGION",
    "GEEV_CONTRACT_ADDRESS",
    "GEEV_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeResource:
    def __init__(self) -> None:
        self.tables: list[str] = []

    def Table(self, name):
        self.tables.append(name)
        return {"name": name}


def test_read_config_defaults():
    config = read_config()
    assert config == GeevConfig()
    assert config.store_backend == "memory"
    assert config.contract_address == "geev-contract"
    assert config.log_level == "INFO"


def test_read_config_from_env(monkeypatch):
    monkeypatch.setenv("GEEV_STORE_BACKEND", " DynamoDB ")
    monkeypatch.setenv("GEEV_TABLE_NAME", "GeevContract")
    monkeypatch.setenv("AWS_REGION", "eu-west-1")
    monkeypatch.setenv("GEEV_CONTRACT_ADDRESS", "custody-1")
    monkeypatch.setenv("GEEV_LOG_LEVEL", "debug")

    config = read_config()
    assert config.store_backend == "dynamodb"
    assert config.table_name == "GeevContract"
    assert config.instance_table_name is None
    assert config.aws_region == "eu-west-1"
    assert config.contract_address == "custody-1"
    assert config.log_level == "DEBUG"


def test_read_config_blank_values_fall_back(monkeypatch):
    monkeypatch.setenv("GEEV_TABLE_NAME", "   ")
    monkeypatch.setenv("AWS_REGION", "")
    config = read_config()
    assert config.table_name is None
    assert config.aws_region == "us-east-1"


def test_read_config_rejects_unknown_backend(monkeypatch):
    monkeypatch.setenv("GEEV_STORE_BACKEND", "sqlite")
    with pytest.raises(RuntimeError):
        read_config()


def test_build_store_memory():
    assert isinstance(clients.build_store(GeevConfig()), InMemoryStore)


def test_build_store_dynamodb_requires_table():
    with pytest.raises(RuntimeError):
        clients.build_store(GeevConfig(store_backend="dynamodb"))


def test_build_store_dynamodb_tables(monkeypatch):
    resource = FakeResource()
    calls = []

    def fake_resource(service, region_name=None):
        calls.append((service, region_name))
        return resource

    monkeypatch.setattr(clients.boto3, "resource", fake_resource)
    config = GeevConfig(
        store_backend="dynamodb",
        table_name="GeevContract",
        instance_table_name="GeevInstance",
        aws_region="eu-west-1",
    )

    store = clients.build_store(config)
    assert isinstance(store, DynamoStore)
    assert calls == [("dynamodb", "eu-west-1")]
    assert resource.tables == ["GeevContract", "GeevInstance"]


def test_contract_from_config_uses_address():
    config = GeevConfig(contract_address="custody-7")
    contract = GeevContract.from_config(
        config, auth=SignerSetAuthenticator(["admin"]), clock=ManualClock(10)
    )
    assert contract.address == "custody-7"
    assert isinstance(contract.state.store, InMemoryStore)
    contract.initialize("admin")
    assert contract.get_admin() == "admin"


def test_contract_from_config_requires_authenticator():
    with pytest.raises(TypeError):
        GeevContract.from_config(GeevConfig())
    with pytest.raises(TypeError):
        ContractState()


def test_contract_from_config_enforces_signers():
    ledger = InMemoryTokenLedger()
    auth = SignerSetAuthenticator()
    contract = GeevContract.from_config(GeevConfig(), auth=auth, tokens=ledger)

    with pytest.raises(ContractError) as excinfo:
        contract.initialize("admin")
    assert excinfo.value.kind is ErrorKind.NOT_AUTHORIZED

    auth.authorize("admin")
    contract.initialize("admin")
    ledger.mint("XLM", contract.address, 500)
    with pytest.raises(ContractError) as excinfo:
        contract.set_paused("mallory", True)
    assert excinfo.value.kind is ErrorKind.NOT_AUTHORIZED

    auth.revoke("admin")
    with pytest.raises(ContractError) as excinfo:
        contract.admin_withdraw("XLM", 500, "mallory")
    assert excinfo.value.kind is ErrorKind.NOT_AUTHORIZED
    assert ledger.balance("XLM", "mallory") == 0
    assert contract.is_paused() is False
