"""Collaborator protocol definitions.

Defines the interfaces the composer consumes:
- AlgodLike: The node RPC surface used to fetch params, submit and confirm.
- SignerSource: Resolves a transaction signer for an address.
"""

from collections.abc import Callable
from typing import Any, Protocol

from algosdk.atomic_transaction_composer import TransactionSigner
from algosdk.transaction import SignedTransaction, SuggestedParams

# Resolves the signer for a sender address
SignerGetter = Callable[[str], TransactionSigner]

# Returns the network parameters used to build a group
SuggestedParamsGetter = Callable[[], SuggestedParams]


class AlgodLike(Protocol):
    """Protocol for the algod client operations the composer relies on.

    ``algosdk.v2client.algod.AlgodClient`` satisfies it. Tests substitute an
    in-memory fake.
    """

    def suggested_params(self) -> SuggestedParams:
        """Get current fee and round guidance from the network.

        Returns:
            SuggestedParams with fee per byte, min fee, first/last round
            and genesis identifiers.
        """
        ...

    def send_transactions(self, txns: list[SignedTransaction], **kwargs: Any) -> str:
        """Submit a signed group.

        Args:
            txns: Signed transactions in group order.

        Returns:
            Transaction ID of the first transaction in the group.

        Raises:
            AlgodHTTPError: If the node rejects the group.
        """
        ...

    def pending_transaction_info(self, txid: str, **kwargs: Any) -> dict[str, Any]:
        """Get the pool or confirmation state of a transaction."""
        ...

    def status(self, **kwargs: Any) -> dict[str, Any]:
        """Get the node status, including its last round."""
        ...

    def status_after_block(self, block_num: int, **kwargs: Any) -> dict[str, Any]:
        """Block until the node has seen the given round."""
        ...

    def simulate_transactions(self, request: Any, **kwargs: Any) -> dict[str, Any]:
        """Dry-run a group without committing it.

        Used only for diagnostics after a failed submission.
        """
        ...


class SignerSource(Protocol):
    """Protocol for anything that can hand out signers by address.

    The signer source is responsible for:
    - Mapping a sender address to the signer for that account
    - Falling back to a default signer where one is configured
    """

    def get_signer(self, address: str) -> TransactionSigner:
        """Get the signer for an address.

        Args:
            address: 58-character Algorand address.

        Returns:
            TransactionSigner able to sign for that address.

        Raises:
            MissingSignerError: If nothing can sign for the address.
        """
        ...
