"""Unit tests for AlgorandClient."""

import time

import pytest

from algosdk import transaction

from avm_composer.client import AlgorandClient
from avm_composer.composer import TransactionComposer
from avm_composer.constants import ALGONODE_ALGOD_TESTNET, DEFAULT_VALIDITY_WINDOW
from avm_composer.deploy import AppDeployer
from avm_composer.errors import MissingSignerError
from avm_composer.types import PaymentParams

from avm_composer.tests.unit.fakes import FakeAlgod, make_params


@pytest.fixture
def client(algod) -> AlgorandClient:
    return AlgorandClient.from_clients(algod)


class TestConstruction:
    """Tests for the client factories."""

    def test_from_clients(self, algod):
        """Test the given algod client is exposed."""
        assert AlgorandClient.from_clients(algod).algod is algod

    def test_testnet(self):
        """Test TestNet points at AlgoNode."""
        client = AlgorandClient.testnet()
        assert client.algod.algod_address == ALGONODE_ALGOD_TESTNET
        assert client.indexer is not None

    def test_default_localnet(self):
        """Test LocalNet configures all three services."""
        client = AlgorandClient.default_localnet()
        assert client.algod.algod_address.endswith(":4001")
        assert client.indexer.indexer_address.endswith(":8980")
        assert client.kmd.kmd_address.endswith(":4002")

    def test_missing_indexer(self, client):
        """Test using an unconfigured indexer is an error."""
        with pytest.raises(ValueError, match="no indexer configured"):
            client.indexer

    def test_missing_kmd(self, client):
        """Test using an unconfigured kmd is an error."""
        with pytest.raises(ValueError, match="no kmd configured"):
            client.kmd

    def test_deployer_requires_indexer(self, client):
        """Test the deployer needs an indexer."""
        with pytest.raises(ValueError):
            client.deployer

    def test_deployer_is_cached(self, algod):
        """Test the deployer is created once."""
        client = AlgorandClient.from_clients(algod, indexer=object())
        assert isinstance(client.deployer, AppDeployer)
        assert client.deployer is client.deployer


class TestSuggestedParams:
    """Tests for the shared suggested params cache."""

    def test_params_cached(self, client, algod):
        """Test repeated lookups hit algod once."""
        client.get_suggested_params()
        client.get_suggested_params()
        assert algod.suggested_params_calls == 1

    def test_seeded_params(self, client, algod):
        """Test seeded params are served without calling algod."""
        client.set_suggested_params_cache(make_params(first=77), until=time.time() + 60)
        assert client.get_suggested_params().first == 77
        assert algod.suggested_params_calls == 0

    def test_zero_timeout_refetches(self, client, algod):
        """Test a zero timeout makes every lookup fetch."""
        client.set_suggested_params_cache_timeout(0)
        client.get_suggested_params()
        client.get_suggested_params()
        assert algod.suggested_params_calls == 2


class TestNewGroup:
    """Tests for composers handed out by the client."""

    def test_new_group_uses_registered_signers(self, client, alice, bob):
        """Test new groups resolve signers from the account manager."""
        client.account.add_account(alice.private_key)
        group = client.new_group().add_payment(
            PaymentParams(sender=alice.address, receiver=bob.address, amount=1)
        ).build_group()
        assert group[0].signer.private_key == alice.private_key

    def test_new_group_missing_signer(self, client, alice, bob):
        """Test an unknown sender fails at build time."""
        composer = client.new_group().add_payment(
            PaymentParams(sender=alice.address, receiver=bob.address, amount=1)
        )
        with pytest.raises(MissingSignerError):
            composer.build_group()

    def test_new_groups_are_independent(self, client):
        """Test each call returns a fresh composer."""
        first = client.new_group()
        assert isinstance(first, TransactionComposer)
        assert client.new_group() is not first

    def test_default_validity_window(self, client, alice, bob):
        """Test the default window applies to new groups."""
        client.set_default_signer(alice.signer)
        payment = PaymentParams(sender=alice.address, receiver=bob.address, amount=1)

        txn = client.new_group().add_payment(payment).build_group()[0].txn
        assert txn.last_valid_round == txn.first_valid_round + DEFAULT_VALIDITY_WINDOW

        client.set_default_validity_window(50)
        txn = client.new_group().add_payment(payment).build_group()[0].txn
        assert txn.last_valid_round == txn.first_valid_round + 50

    def test_set_signer(self, client, alice, bob):
        """Test a signer set on the client is used for that sender."""
        client.set_signer(alice.address, bob.signer)
        group = client.new_group().add_payment(
            PaymentParams(sender=alice.address, receiver=bob.address, amount=1)
        ).build_group()
        assert group[0].signer is bob.signer
        assert isinstance(group[0].txn, transaction.PaymentTxn)

    def test_groups_share_params_cache(self, client, algod, alice, bob):
        """Test building several groups fetches params once."""
        client.set_default_signer(alice.signer)
        payment = PaymentParams(sender=alice.address, receiver=bob.address, amount=1)
        client.new_group().add_payment(payment).build_group()
        client.new_group().add_payment(payment).build_group()
        assert algod.suggested_params_calls == 1


class TestLocalNet:
    """Tests for LocalNet detection through the client."""

    def test_is_localnet(self):
        """Test LocalNet genesis IDs are detected."""
        assert AlgorandClient.from_clients(FakeAlgod(make_params(gen="dockernet-v1"))).is_localnet()

    def test_is_not_localnet(self, client):
        """Test public networks are not LocalNet."""
        assert not client.is_localnet()
