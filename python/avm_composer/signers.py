"""Concrete signer registry for the composer.

Provides AccountManager, a SignerSource implementation backed by
py-algorand-sdk signers.
"""

from __future__ import annotations

import logging

try:
    from algosdk import account, mnemonic
    from algosdk.atomic_transaction_composer import (
        AccountTransactionSigner,
        TransactionSigner,
    )

    ALGOSDK_AVAILABLE = True
except ImportError:
    ALGOSDK_AVAILABLE = False

from .errors import MissingSignerError
from .utils import is_valid_address

logger = logging.getLogger(__name__)


def _check_algosdk() -> None:
    """Check that algosdk is available."""
    if not ALGOSDK_AVAILABLE:
        raise ImportError(
            "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
        )


class AccountManager:
    """Signer registry keyed by address.

    Implements SignerSource protocol.

    Example:
        ```python
        accounts = AccountManager()
        accounts.add_account(private_key_1).add_account(private_key_2)
        composer = TransactionComposer(algod, accounts.get_signer)
        ```
    """

    def __init__(self, default_signer: TransactionSigner | None = None):
        """Create account manager.

        Args:
            default_signer: Signer used for addresses with no registered signer.
        """
        _check_algosdk()
        self._signers: dict[str, TransactionSigner] = {}
        self._default_signer = default_signer

    def add_account(self, private_key: str) -> "AccountManager":
        """Register a signing account.

        Args:
            private_key: Base64-encoded Algorand private key.

        Returns:
            Self for chaining.
        """
        address = account.address_from_private_key(private_key)
        self._signers[address] = AccountTransactionSigner(private_key)
        logger.debug("Registered signer for %s", address)
        return self

    def add_account_from_mnemonic(self, phrase: str) -> "AccountManager":
        """Register a signing account from a 25-word Algorand mnemonic.

        Args:
            phrase: 25-word mnemonic phrase.

        Returns:
            Self for chaining.

        Raises:
            ValueError: If the mnemonic is invalid.
        """
        try:
            private_key = mnemonic.to_private_key(phrase)
        except Exception as e:
            raise ValueError(f"Invalid Algorand mnemonic: {e}") from e
        return self.add_account(private_key)

    def create_account(self) -> str:
        """Generate a new random account and register its signer.

        Returns:
            Address of the new account.
        """
        private_key, address = account.generate_account()
        self.add_account(private_key)
        return address

    def set_signer(self, address: str, signer: TransactionSigner) -> "AccountManager":
        """Register a signer for an address.

        Use this for signers that are not backed by a local private key,
        e.g. multisig or logic signature signers.

        Returns:
            Self for chaining.

        Raises:
            ValueError: If address is not a valid Algorand address.
        """
        if not is_valid_address(address):
            raise ValueError(f"Invalid Algorand address: {address}")
        self._signers[address] = signer
        return self

    def set_default_signer(self, signer: TransactionSigner) -> "AccountManager":
        """Set the signer used when an address has none registered.

        Returns:
            Self for chaining.
        """
        self._default_signer = signer
        return self

    def get_addresses(self) -> list[str]:
        """Get all addresses with a registered signer."""
        return list(self._signers.keys())

    def get_signer(self, address: str) -> TransactionSigner:
        """Get the signer for an address, falling back to the default.

        Raises:
            MissingSignerError: If no signer is registered and no default is set.
        """
        signer = self._signers.get(address, self._default_signer)
        if signer is None:
            raise MissingSignerError(address, self.get_addresses())
        return signer
