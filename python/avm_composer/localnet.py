"""LocalNet account helpers backed by KMD.

LocalNet ships a KMD wallet holding funded accounts. These helpers read
keys out of KMD so the same code can run against a fresh LocalNet without
configuring private keys.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .composer import TransactionComposer
from .network import is_localnet
from .signers import AccountManager
from .types import PaymentParams

try:
    from algosdk.kmd import KMDClient
    from algosdk.v2client.algod import AlgodClient
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

logger = logging.getLogger(__name__)

# KMD wallet holding the LocalNet genesis accounts
DEFAULT_WALLET_NAME = "unencrypted-default-wallet"

# Balance (microalgos) a genesis account must hold to serve as dispenser
DISPENSER_MIN_BALANCE = 1_000_000_000

# Funding for newly created wallet accounts (microalgos)
DEFAULT_FUND_AMOUNT = 1_000_000_000


@dataclass
class KmdAccount:
    """Account whose private key was exported from KMD."""

    address: str
    private_key: str


def get_kmd_wallet_account(
    algod_client: AlgodClient,
    kmd_client: KMDClient,
    name: str,
    predicate: Callable[[dict[str, Any]], bool] | None = None,
) -> KmdAccount | None:
    """Get an account from a KMD wallet.

    Args:
        algod_client: Client used to look up account information.
        kmd_client: KMD client.
        name: Wallet name.
        predicate: Optional filter over algod account information; the
            first matching account is returned. Without it the first key
            in the wallet is returned.

    Returns:
        KmdAccount, or None if the wallet or a matching account is missing.
    """
    wallets = [w for w in kmd_client.list_wallets() if w["name"] == name]
    if not wallets:
        return None

    handle = kmd_client.init_wallet_handle(wallets[0]["id"], "")
    try:
        addresses = kmd_client.list_keys(handle)
        match = next(
            (
                address
                for address in addresses
                if predicate is None or predicate(algod_client.account_info(address))
            ),
            None,
        )
        if match is None:
            return None
        private_key = kmd_client.export_key(handle, "", match)
    finally:
        kmd_client.release_wallet_handle(handle)

    return KmdAccount(address=match, private_key=private_key)


def get_localnet_dispenser_account(
    algod_client: AlgodClient,
    kmd_client: KMDClient,
) -> KmdAccount:
    """Get the funded genesis account of a LocalNet.

    Raises:
        ValueError: If algod is not a LocalNet or no funded account exists.
    """
    if not is_localnet(algod_client):
        raise ValueError("Can't get the dispenser account from a non LocalNet network")

    dispenser = get_kmd_wallet_account(
        algod_client,
        kmd_client,
        DEFAULT_WALLET_NAME,
        lambda info: info.get("status") != "Offline"
        and info.get("amount", 0) > DISPENSER_MIN_BALANCE,
    )
    if dispenser is None:
        raise ValueError(f"No funded account found in KMD wallet {DEFAULT_WALLET_NAME}")
    return dispenser


def get_or_create_kmd_wallet_account(
    algod_client: AlgodClient,
    kmd_client: KMDClient,
    name: str,
    fund_with: int = DEFAULT_FUND_AMOUNT,
) -> KmdAccount:
    """Get the first account of a named KMD wallet, creating and funding it
    from the LocalNet dispenser if the wallet does not exist yet.

    Args:
        algod_client: LocalNet algod client.
        kmd_client: LocalNet KMD client.
        name: Wallet name; the same name always yields the same account.
        fund_with: Microalgos sent to a newly created account.

    Returns:
        KmdAccount.
    """
    existing = get_kmd_wallet_account(algod_client, kmd_client, name)
    if existing is not None:
        return existing

    wallet_id = kmd_client.create_wallet(name, "")["id"]
    handle = kmd_client.init_wallet_handle(wallet_id, "")
    try:
        kmd_client.generate_key(handle)
    finally:
        kmd_client.release_wallet_handle(handle)

    account = get_kmd_wallet_account(algod_client, kmd_client, name)
    if account is None:
        raise ValueError(f"KMD wallet {name} has no account after key generation")

    dispenser = get_localnet_dispenser_account(algod_client, kmd_client)
    logger.info(
        "Created KMD wallet %s with account %s, funding with %d microalgos",
        name,
        account.address,
        fund_with,
    )

    accounts = AccountManager().add_account(dispenser.private_key)
    TransactionComposer(algod_client, accounts.get_signer).add_payment(
        PaymentParams(
            sender=dispenser.address,
            receiver=account.address,
            amount=fund_with,
        )
    ).execute()

    return account
