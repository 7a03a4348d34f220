"""Shared fixtures for composer unit tests.

Everything here runs offline: transactions are real algosdk objects and the
algod client is an in-memory fake.
"""

import pytest

from algosdk.transaction import SuggestedParams

from avm_composer.composer import TransactionComposer
from avm_composer.signers import AccountManager
from avm_composer.tests.unit.fakes import FakeAlgod, LocalAccount, make_params, new_account


@pytest.fixture
def params_factory():
    return make_params


@pytest.fixture
def sp() -> SuggestedParams:
    return make_params()


@pytest.fixture
def algod() -> FakeAlgod:
    return FakeAlgod()


@pytest.fixture
def alice() -> LocalAccount:
    return new_account()


@pytest.fixture
def bob() -> LocalAccount:
    return new_account()


@pytest.fixture
def accounts(alice, bob) -> AccountManager:
    return AccountManager().add_account(alice.private_key).add_account(bob.private_key)


@pytest.fixture
def composer(algod, accounts) -> TransactionComposer:
    return TransactionComposer(algod, accounts.get_signer)
