import pytest

from geev_core import ContractError, ErrorKind

TOKEN = "XLM"


def test_initialize_sets_admin_and_fee(bare_contract, events):
    assert bare_contract.get_admin() is None
    bare_contract.initialize("admin", fee_bps=250)

    assert bare_contract.get_admin() == "admin"
    assert bare_contract.get_fee_bps() == 250
    assert bare_contract.is_paused() is False
    assert events.named("Initialized")[0].payload == (250,)


def test_initialize_only_once(contract):
    with pytest.raises(ContractError) as excinfo:
        contract.initialize("bob")
    assert excinfo.value.kind is ErrorKind.ALREADY_INITIALIZED
    assert contract.get_admin() == "admin"


@pytest.mark.parametrize("fee_bps", [-1, 10_001])
def test_initialize_rejects_bad_fee(bare_contract, fee_bps):
    with pytest.raises(ContractError) as excinfo:
        bare_contract.initialize("admin", fee_bps=fee_bps)
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT
    assert bare_contract.get_admin() is None


def test_initialize_requires_admin_auth(bare_contract, auth):
    auth.revoke("admin")
    with pytest.raises(ContractError) as excinfo:
        bare_contract.initialize("admin")
    assert excinfo.value.kind is ErrorKind.NOT_AUTHORIZED
    assert bare_contract.get_admin() is None

    auth.authorize("admin")
    bare_contract.initialize("admin")
    assert bare_contract.get_admin() == "admin"


def test_set_paused_by_admin(contract, events):
    contract.set_paused("admin", True)
    assert contract.is_paused() is True
    contract.set_paused("admin", False)
    assert contract.is_paused() is False
    assert [event.payload for event in events.named("PauseChanged")] == [
        (True,),
        (False,),
    ]


def test_set_paused_by_other_account(contract):
    with pytest.raises(ContractError) as excinfo:
        contract.set_paused("bob", True)
    assert excinfo.value.kind is ErrorKind.NOT_ADMIN
    assert contract.is_paused() is False


def test_set_paused_before_initialize(bare_contract):
    with pytest.raises(ContractError) as excinfo:
        bare_contract.set_paused("admin", True)
    assert excinfo.value.kind is ErrorKind.NOT_INITIALIZED


def test_reads_work_while_paused(contract):
    giveaway_id = contract.create_giveaway("alice", TOKEN, 100, "Books", 60)
    contract.set_paused("admin", True)
    assert contract.get_giveaway(giveaway_id).amount == 100
    assert contract.get_giveaway_count() == 1
    assert contract.get_help_request(1) is None


def test_admin_withdraw_moves_custody(contract, ledger, events):
    contract.create_giveaway("alice", TOKEN, 500, "Books", 60)
    contract.admin_withdraw(TOKEN, 200, "admin")

    assert ledger.balance(TOKEN, "admin") == 200
    assert ledger.balance(TOKEN, contract.address) == 300
    assert events.named("EmergencyWithdraw")[0].payload == (200, "admin")

    contract.admin_withdraw(TOKEN, 300, "dave")
    assert ledger.balance(TOKEN, contract.address) == 0


def test_admin_withdraw_works_while_paused(contract, ledger):
    contract.create_giveaway("alice", TOKEN, 500, "Books", 60)
    contract.set_paused("admin", True)
    contract.admin_withdraw(TOKEN, 500, "admin")
    assert ledger.balance(TOKEN, "admin") == 500


def test_admin_withdraw_validation(contract, auth):
    contract.create_giveaway("alice", TOKEN, 500, "Books", 60)

    with pytest.raises(ContractError) as excinfo:
        contract.admin_withdraw(TOKEN, 0, "admin")
    assert excinfo.value.kind is ErrorKind.INVALID_AMOUNT

    with pytest.raises(ContractError) as excinfo:
        contract.admin_withdraw(TOKEN, 501, "admin")
    assert excinfo.value.kind is ErrorKind.TRANSFER_FAILED

    auth.revoke("admin")
    with pytest.raises(ContractError) as excinfo:
        contract.admin_withdraw(TOKEN, 100, "bob")
    assert excinfo.value.kind is ErrorKind.NOT_AUTHORIZED


def test_admin_withdraw_before_initialize(bare_contract):
    with pytest.raises(ContractError) as excinfo:
        bare_contract.admin_withdraw(TOKEN, 1, "admin")
    assert excinfo.value.kind is ErrorKind.NOT_INITIALIZED


def test_error_message_and_code():
    error = ContractError(ErrorKind.NOT_WINNER, "carol")
    assert str(error) == "NOT_WINNER: carol"
    assert error.code == 15
    assert str(ContractError(ErrorKind.CONTRACT_PAUSED)) == "CONTRACT_PAUSED"
