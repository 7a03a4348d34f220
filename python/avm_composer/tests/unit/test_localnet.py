"""Unit tests for the KMD backed LocalNet account helpers."""

from types import SimpleNamespace

import pytest

from algosdk.atomic_transaction_composer import AtomicTransactionComposer

from avm_composer.localnet import (
    DEFAULT_WALLET_NAME,
    DISPENSER_MIN_BALANCE,
    KmdAccount,
    get_kmd_wallet_account,
    get_localnet_dispenser_account,
    get_or_create_kmd_wallet_account,
)

from avm_composer.tests.unit.fakes import FakeAlgod, make_params, new_account


class FakeKmd:
    """KMD holding wallets of locally generated accounts."""

    def __init__(self):
        self.wallets: dict[str, dict] = {}
        self.keys: dict[str, list] = {}
        self.open_handles: set[str] = set()

    def add_wallet(self, name, accounts):
        wallet_id = f"id-{len(self.wallets)}"
        self.wallets[wallet_id] = {"id": wallet_id, "name": name}
        self.keys[wallet_id] = list(accounts)
        return wallet_id

    def list_wallets(self):
        return list(self.wallets.values())

    def create_wallet(self, name, password):
        return self.wallets[self.add_wallet(name, [])]

    def init_wallet_handle(self, wallet_id, password):
        handle = f"handle-{wallet_id}"
        self.open_handles.add(handle)
        return handle

    def release_wallet_handle(self, handle):
        self.open_handles.discard(handle)
        return True

    def _wallet(self, handle):
        return handle.removeprefix("handle-")

    def list_keys(self, handle):
        return [a.address for a in self.keys[self._wallet(handle)]]

    def export_key(self, handle, password, address):
        return next(a.private_key for a in self.keys[self._wallet(handle)] if a.address == address)

    def generate_key(self, handle):
        generated = new_account()
        self.keys[self._wallet(handle)].append(generated)
        return generated.address


@pytest.fixture
def kmd():
    return FakeKmd()


@pytest.fixture
def localnet_algod():
    return FakeAlgod(make_params(gen="dockernet-v1"))


class TestGetKmdWalletAccount:
    """Tests for reading accounts out of a wallet."""

    def test_first_key(self, kmd, algod, alice, bob):
        """Test the first key is returned without a predicate."""
        kmd.add_wallet("w", [alice, bob])
        result = get_kmd_wallet_account(algod, kmd, "w")
        assert result == KmdAccount(address=alice.address, private_key=alice.private_key)

    def test_missing_wallet(self, kmd, algod):
        """Test a missing wallet gives None."""
        assert get_kmd_wallet_account(algod, kmd, "nope") is None

    def test_predicate(self, kmd, algod, alice, bob):
        """Test the predicate filters on account information."""
        kmd.add_wallet("w", [alice, bob])
        algod.accounts = {alice.address: {"amount": 1}, bob.address: {"amount": 5}}
        result = get_kmd_wallet_account(algod, kmd, "w", lambda info: info["amount"] > 2)
        assert result.address == bob.address

    def test_no_match(self, kmd, algod, alice):
        """Test no matching account gives None and releases the handle."""
        kmd.add_wallet("w", [alice])
        algod.accounts = {alice.address: {"amount": 1}}
        assert get_kmd_wallet_account(algod, kmd, "w", lambda info: False) is None
        assert kmd.open_handles == set()


class TestDispenser:
    """Tests for the LocalNet dispenser lookup."""

    def test_funded_online_account(self, kmd, localnet_algod, alice, bob):
        """Test the funded, online genesis account is chosen."""
        kmd.add_wallet(DEFAULT_WALLET_NAME, [alice, bob])
        localnet_algod.accounts = {
            alice.address: {"amount": DISPENSER_MIN_BALANCE * 2, "status": "Offline"},
            bob.address: {"amount": DISPENSER_MIN_BALANCE * 2, "status": "Online"},
        }
        assert get_localnet_dispenser_account(localnet_algod, kmd).address == bob.address

    def test_not_localnet(self, kmd, algod):
        """Test public networks are refused."""
        with pytest.raises(ValueError, match="non LocalNet"):
            get_localnet_dispenser_account(algod, kmd)

    def test_no_funded_account(self, kmd, localnet_algod, alice):
        """Test an empty wallet is an error."""
        kmd.add_wallet(DEFAULT_WALLET_NAME, [alice])
        localnet_algod.accounts = {alice.address: {"amount": 0, "status": "Online"}}
        with pytest.raises(ValueError, match="No funded account"):
            get_localnet_dispenser_account(localnet_algod, kmd)


class TestGetOrCreate:
    """Tests for named wallet accounts."""

    def test_existing_wallet(self, kmd, localnet_algod, alice):
        """Test an existing wallet's account is returned as-is."""
        kmd.add_wallet("app", [alice])
        result = get_or_create_kmd_wallet_account(localnet_algod, kmd, "app")
        assert result.address == alice.address

    def test_creates_and_funds(self, kmd, localnet_algod, alice, monkeypatch):
        """Test a new wallet gets one key funded from the dispenser."""
        kmd.add_wallet(DEFAULT_WALLET_NAME, [alice])
        localnet_algod.accounts = {
            alice.address: {"amount": DISPENSER_MIN_BALANCE * 2, "status": "Online"},
        }
        sent = []

        def fake_execute(self, client, wait_rounds):
            sent.extend(ts.txn for ts in self.txn_list)
            return SimpleNamespace(confirmed_round=1, tx_ids=["tx"], abi_results=[])

        monkeypatch.setattr(AtomicTransactionComposer, "execute", fake_execute)

        result = get_or_create_kmd_wallet_account(localnet_algod, kmd, "app", fund_with=5_000)

        assert result.address != alice.address
        assert len(sent) == 1
        assert sent[0].sender == alice.address
        assert sent[0].receiver == result.address
        assert sent[0].amt == 5_000
        assert kmd.open_handles == set()
