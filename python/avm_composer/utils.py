"""Composer utility functions.

Provides address validation, ABI value detection and small helpers for
working with groups of algosdk transactions.
"""

from __future__ import annotations

import base64
import copy
import re
from typing import Any

try:
    from algosdk import encoding
    from algosdk.atomic_transaction_composer import TransactionWithSigner
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

# Algorand address validation regex (58 character base32 with checksum)
AVM_ADDRESS_REGEX = r"^[A-Z2-7]{58}$"


def is_valid_address(address: str) -> bool:
    """Validate an Algorand address format.

    Args:
        address: String to validate.

    Returns:
        True if valid Algorand address format.
    """
    if not address or not isinstance(address, str):
        return False

    if not re.match(AVM_ADDRESS_REGEX, address):
        return False

    try:
        encoding.decode_address(address)
        return True
    except Exception:
        return False


def is_abi_value(value: Any) -> bool:
    """Check whether a method argument is a plain ABI value.

    Plain values are booleans, integers, strings and byte strings, or
    lists/tuples composed entirely of plain values (including empty ones).

    Args:
        value: Caller-supplied method argument.

    Returns:
        True if the value can be passed to the ABI encoder unchanged.
    """
    if isinstance(value, (list, tuple)):
        return all(is_abi_value(v) for v in value)

    return isinstance(value, (bool, int, str, bytes, bytearray))


def strip_group(txn_with_signer: TransactionWithSigner) -> TransactionWithSigner:
    """Copy a transaction without its group tag so it can join another group.

    The given TransactionWithSigner and its transaction are left untouched,
    so groups built earlier keep their IDs.
    """
    txn = copy.copy(txn_with_signer.txn)
    txn.group = None
    return TransactionWithSigner(txn, txn_with_signer.signer)


def encode_group_id(group: bytes | None) -> str:
    """Encode a group ID as base64, or "" if the transaction is ungrouped."""
    if not group:
        return ""
    return base64.b64encode(group).decode("utf-8")


def max_last_valid_round(group: list[TransactionWithSigner]) -> int:
    """Get the latest last valid round across a group.

    Args:
        group: Transactions with signers.

    Returns:
        Highest last_valid_round, or 0 for an empty group.
    """
    return max((ts.txn.last_valid_round for ts in group), default=0)
