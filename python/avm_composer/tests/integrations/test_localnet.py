"""Composer integration tests against a running LocalNet.

These tests submit REAL transactions. They use the LocalNet KMD dispenser
to fund fresh accounts.

Required environment variables:
- ALGOD_SERVER: Algod server of the LocalNet (e.g. http://localhost)

Optional:
- ALGOD_PORT / ALGOD_TOKEN / INDEXER_SERVER / KMD_PORT
"""

import base64
import os

import pytest

from algosdk import abi, account, transaction

from avm_composer import (
    AlgorandClient,
    AppCallParams,
    AppSchema,
    AssetCreateParams,
    AssetOptInParams,
    AssetTransferParams,
    MethodCallParams,
    PaymentParams,
    get_localnet_dispenser_account,
)
from avm_composer.deploy import AppDeployMetadata, AppDeployParams, DeployAction, OnUpdate

pytestmark = pytest.mark.skipif(
    not os.environ.get("ALGOD_SERVER"),
    reason="ALGOD_SERVER environment variable required for LocalNet integration tests",
)

# Approves everything; returns its first argument for ABI calls
APPROVAL_TEAL = """#pragma version 10
txn ApplicationID
bz done
txn NumAppArgs
bz done
byte 0x151f7c75
txna ApplicationArgs 1
concat
log
done:
int 1
return
"""

APPROVAL_TEAL_V2 = APPROVAL_TEAL.replace("done:", "done:\nint 2\npop")

CLEAR_TEAL = """#pragma version 10
int 1
return
"""

ECHO = abi.Method.from_signature("echo(uint64)uint64")
PAY_ECHO = abi.Method.from_signature("pay_echo(pay,uint64)uint64")


def _compile(algorand: AlgorandClient, source: str) -> bytes:
    return base64.b64decode(algorand.algod.compile(source)["result"])


@pytest.fixture(scope="module")
def algorand():
    client = AlgorandClient.from_environment()
    if not client.is_localnet():
        pytest.skip("LocalNet required")
    return client


@pytest.fixture(scope="module")
def dispenser(algorand):
    found = get_localnet_dispenser_account(algorand.algod, algorand.kmd)
    algorand.account.add_account(found.private_key)
    return found.address


@pytest.fixture
def funded(algorand, dispenser):
    """Create and fund a fresh account."""
    private_key, address = account.generate_account()
    algorand.account.add_account(private_key)
    algorand.new_group().add_payment(
        PaymentParams(sender=dispenser, receiver=address, amount=10_000_000)
    ).execute()
    return address


@pytest.fixture
def app_id(algorand, funded):
    result = algorand.new_group().add_app_call(
        AppCallParams(
            sender=funded,
            app_id=0,
            approval_program=_compile(algorand, APPROVAL_TEAL),
            clear_program=_compile(algorand, CLEAR_TEAL),
        )
    ).execute()
    return algorand.algod.pending_transaction_info(result.tx_ids[0])["application-index"]


class TestPayments:
    """Tests for plain transaction groups."""

    def test_payment_group(self, algorand, funded, dispenser):
        """Test a two payment group confirms atomically."""
        result = (
            algorand.new_group()
            .add_payment(PaymentParams(sender=funded, receiver=dispenser, amount=1_000))
            .add_payment(PaymentParams(sender=funded, receiver=dispenser, amount=2_000, note=b"x"))
            .execute()
        )
        assert len(result.tx_ids) == 2
        assert result.confirmed_round > 0
        assert result.group_id

    def test_simulate(self, algorand, funded, dispenser):
        """Test simulate does not submit."""
        before = algorand.algod.account_info(funded)["amount"]
        algorand.new_group().add_payment(
            PaymentParams(sender=funded, receiver=dispenser, amount=1_000)
        ).simulate()
        assert algorand.algod.account_info(funded)["amount"] == before


class TestAssets:
    """Tests for asset lifecycle."""

    def test_create_opt_in_transfer(self, algorand, funded, dispenser):
        """Test creating, opting in to and transferring an asset."""
        result = algorand.new_group().add_asset_create(
            AssetCreateParams(sender=funded, total=100, unit_name="TST", asset_name="Test")
        ).execute()
        asset_id = algorand.algod.pending_transaction_info(result.tx_ids[0])["asset-index"]

        (
            algorand.new_group()
            .add_asset_opt_in(AssetOptInParams(sender=dispenser, asset_id=asset_id))
            .add_asset_transfer(
                AssetTransferParams(sender=funded, receiver=dispenser, asset_id=asset_id, amount=7)
            )
            .execute()
        )
        holding = algorand.algod.account_asset_info(dispenser, asset_id)
        assert holding["asset-holding"]["amount"] == 7


class TestMethodCalls:
    """Tests for ABI method calls."""

    def test_return_value(self, algorand, funded, app_id):
        """Test ABI return values are decoded."""
        result = algorand.new_group().add_method_call(
            MethodCallParams(sender=funded, app_id=app_id, method=ECHO, args=[42])
        ).execute()
        assert result.returns[0].return_value == 42

    def test_transaction_argument(self, algorand, funded, dispenser, app_id):
        """Test a payment argument is sent ahead of the call."""
        result = algorand.new_group().add_method_call(
            MethodCallParams(
                sender=funded,
                app_id=app_id,
                method=PAY_ECHO,
                args=[PaymentParams(sender=funded, receiver=dispenser, amount=1_000), 5],
            )
        ).execute()
        assert len(result.tx_ids) == 2
        assert isinstance(result.transactions[0], transaction.PaymentTxn)


class TestDeploy:
    """Tests for idempotent deployment."""

    def test_create_then_update(self, algorand, funded):
        """Test a second deploy with new programs updates in place."""
        clear = _compile(algorand, CLEAR_TEAL)
        params = AppDeployParams(
            metadata=AppDeployMetadata(name="integration", version="1", updatable=True),
            sender=funded,
            approval_program=_compile(algorand, APPROVAL_TEAL),
            clear_program=clear,
            schema=AppSchema(),
            on_update=OnUpdate.UPDATE_APP,
        )
        created = algorand.deployer.deploy(params)
        assert created.action == DeployAction.CREATE

        params.metadata = AppDeployMetadata(name="integration", version="2", updatable=True)
        params.approval_program = _compile(algorand, APPROVAL_TEAL_V2)
        # Indexer may lag the node
        existing = algorand.deployer.get_existing_app(funded, "integration")
        if existing is None:
            pytest.skip("Indexer has not caught up")
        updated = algorand.deployer.deploy(params)
        assert updated.action == DeployAction.UPDATE
        assert updated.app_id == created.app_id
