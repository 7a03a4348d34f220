"""Composer types - transaction intents and send results.

Each intent is a keyword-only dataclass tagged with a ``kind``. The set of
kinds is closed: the composer dispatches on ``kind`` through a lookup table
and treats an unknown kind as an internal error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from .constants import (
    KIND_APP_CALL,
    KIND_ASSET_CONFIG,
    KIND_ASSET_CREATE,
    KIND_ASSET_DESTROY,
    KIND_ASSET_FREEZE,
    KIND_ASSET_OPT_IN,
    KIND_ASSET_TRANSFER,
    KIND_ATC,
    KIND_KEY_REG,
    KIND_METHOD_CALL,
    KIND_PAYMENT,
    KIND_TXN_WITH_SIGNER,
    LEASE_SIZE,
    MAX_NOTE_SIZE,
)
from .errors import ConfigurationError

try:
    from algosdk import abi, transaction
    from algosdk.atomic_transaction_composer import (
        ABIResult,
        AtomicTransactionComposer,
        TransactionSigner,
        TransactionWithSigner,
    )
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e


@dataclass(kw_only=True)
class CommonTxnParams:
    """Fields shared by every transaction intent.

    Attributes:
        sender: Address sending the transaction.
        signer: Signer for this transaction; resolved from sender if None.
        rekey_to: Change the signing key of the sender to this address.
        note: Note bytes to attach.
        lease: 32-byte lease preventing replays within the validity window.
        flat_fee: Exact fee in microalgos. Exclusive with extra_fee.
        extra_fee: Fee paid on top of the suggested fee, e.g. to cover
            inner transactions. Exclusive with flat_fee.
        max_fee: Fail the build if the computed fee is above this.
        validity_window: Rounds after first_valid_round the transaction
            stays valid.
        first_valid_round: First valid round; defaults to the suggested one.
        last_valid_round: Explicit last valid round; overrides the window.
    """

    kind: ClassVar[str] = ""

    sender: str
    signer: TransactionSigner | None = None
    rekey_to: str | None = None
    note: bytes | None = None
    lease: bytes | None = None
    flat_fee: int | None = None
    extra_fee: int | None = None
    max_fee: int | None = None
    validity_window: int | None = None
    first_valid_round: int | None = None
    last_valid_round: int | None = None

    def validate(self) -> None:
        """Validate the common fields.

        Raises:
            ConfigurationError: If both flat_fee and extra_fee are set, or
                the lease or note has an invalid size.
        """
        if self.flat_fee is not None and self.extra_fee is not None:
            raise ConfigurationError(
                "Cannot set both flat_fee and extra_fee",
                ["flat_fee", "extra_fee"],
            )
        if self.lease is not None and len(self.lease) != LEASE_SIZE:
            raise ConfigurationError(f"Lease must be {LEASE_SIZE} bytes", ["lease"])
        if self.note is not None and len(self.note) > MAX_NOTE_SIZE:
            raise ConfigurationError(f"Note exceeds {MAX_NOTE_SIZE} bytes", ["note"])


@dataclass(kw_only=True)
class PaymentParams(CommonTxnParams):
    """Send ALGO from sender to receiver."""

    kind: ClassVar[str] = KIND_PAYMENT

    receiver: str
    amount: int
    close_remainder_to: str | None = None


@dataclass(kw_only=True)
class AssetCreateParams(CommonTxnParams):
    """Create an Algorand Standard Asset."""

    kind: ClassVar[str] = KIND_ASSET_CREATE

    total: int
    decimals: int = 0
    default_frozen: bool = False
    manager: str | None = None
    reserve: str | None = None
    freeze: str | None = None
    clawback: str | None = None
    unit_name: str = ""
    asset_name: str = ""
    url: str = ""
    metadata_hash: bytes | None = None


@dataclass(kw_only=True)
class AssetConfigParams(CommonTxnParams):
    """Reconfigure the management addresses of an asset."""

    kind: ClassVar[str] = KIND_ASSET_CONFIG

    asset_id: int
    manager: str | None = None
    reserve: str | None = None
    freeze: str | None = None
    clawback: str | None = None


@dataclass(kw_only=True)
class AssetFreezeParams(CommonTxnParams):
    """Freeze or unfreeze an asset holding."""

    kind: ClassVar[str] = KIND_ASSET_FREEZE

    asset_id: int
    account: str
    frozen: bool


@dataclass(kw_only=True)
class AssetDestroyParams(CommonTxnParams):
    kind: ClassVar[str] = KIND_ASSET_DESTROY

    asset_id: int


@dataclass(kw_only=True)
class AssetTransferParams(CommonTxnParams):
    """Transfer units of an asset.

    Attributes:
        asset_id: ID of the asset.
        amount: Amount in the asset's smallest unit.
        receiver: Account receiving the asset.
        clawback_target: Account to take the asset from (clawback only).
        close_asset_to: Account to close the sender's holding to.
    """

    kind: ClassVar[str] = KIND_ASSET_TRANSFER

    asset_id: int
    amount: int
    receiver: str
    clawback_target: str | None = None
    close_asset_to: str | None = None


@dataclass(kw_only=True)
class AssetOptInParams(CommonTxnParams):
    """Opt the sender into an asset (zero-amount transfer to self)."""

    kind: ClassVar[str] = KIND_ASSET_OPT_IN

    asset_id: int


@dataclass
class AppSchema:
    """State schema of an application. Immutable after creation."""

    global_uints: int = 0
    global_byte_slices: int = 0
    local_uints: int = 0
    local_byte_slices: int = 0

    def global_state_schema(self) -> transaction.StateSchema:
        return transaction.StateSchema(self.global_uints, self.global_byte_slices)

    def local_state_schema(self) -> transaction.StateSchema:
        return transaction.StateSchema(self.local_uints, self.local_byte_slices)


@dataclass(kw_only=True)
class AppCallFields(CommonTxnParams):
    """Fields shared by bare and ABI application calls.

    An ``app_id`` of None or 0 creates a new application, in which case
    both programs are required.
    """

    app_id: int | None = None
    on_complete: transaction.OnComplete = transaction.OnComplete.NoOpOC
    approval_program: bytes | None = None
    clear_program: bytes | None = None
    schema: AppSchema | None = None
    account_references: list[str] | None = None
    app_references: list[int] | None = None
    asset_references: list[int] | None = None
    extra_pages: int = 0
    # (app_id, box name) pairs; app_id 0 means the called app
    box_references: list[tuple[int, bytes]] | None = None

    @property
    def is_create(self) -> bool:
        return not self.app_id


@dataclass(kw_only=True)
class AppCallParams(AppCallFields):
    """Bare application call (or creation) with raw byte arguments."""

    kind: ClassVar[str] = KIND_APP_CALL

    args: list[bytes] | None = None


@dataclass(kw_only=True)
class MethodCallParams(AppCallFields):
    """ABI method call.

    Attributes:
        method: ABI method descriptor.
        args: One value per declared argument. Transaction-typed arguments
            take another intent (including a nested MethodCallParams) or a
            pre-built TransactionWithSigner; all others take ABI values.
    """

    kind: ClassVar[str] = KIND_METHOD_CALL

    method: abi.Method
    args: list[Any] = field(default_factory=list)


@dataclass(kw_only=True)
class KeyRegParams(CommonTxnParams):
    """Register participation keys, or take the account offline.

    Keys are base64 encoded. When neither ``offline`` nor
    ``non_participation`` is set, all of vote_key, selection_key,
    vote_first, vote_last and vote_key_dilution are required.
    """

    kind: ClassVar[str] = KIND_KEY_REG

    vote_key: str | None = None
    selection_key: str | None = None
    state_proof_key: str | None = None
    vote_first: int | None = None
    vote_last: int | None = None
    vote_key_dilution: int | None = None
    offline: bool = False
    non_participation: bool = False


@dataclass
class TransactionWithSignerIntent:
    """An already-built transaction added to the group as-is."""

    kind: ClassVar[str] = KIND_TXN_WITH_SIGNER

    txn_with_signer: TransactionWithSigner

    def validate(self) -> None:
        return None


@dataclass
class AtcIntent:
    """An externally-built group flattened into this one."""

    kind: ClassVar[str] = KIND_ATC

    atc: AtomicTransactionComposer

    def validate(self) -> None:
        return None


# Intents that resolve to exactly one transaction through a builder
BuildableIntent = Union[
    PaymentParams,
    AssetCreateParams,
    AssetConfigParams,
    AssetFreezeParams,
    AssetDestroyParams,
    AssetTransferParams,
    AssetOptInParams,
    AppCallParams,
    KeyRegParams,
]

TransactionIntent = Union[
    BuildableIntent,
    MethodCallParams,
    TransactionWithSignerIntent,
    AtcIntent,
]


@dataclass
class SendResult:
    """Outcome of submitting a composed group.

    Attributes:
        group_id: Base64 encoded group ID ("" for a single transaction).
        tx_ids: Transaction IDs in group order.
        confirmed_round: Round the group was confirmed in.
        returns: Decoded ABI return values, one per method call.
        transactions: The submitted transactions in group order.
    """

    group_id: str
    tx_ids: list[str]
    confirmed_round: int
    returns: list[ABIResult] = field(default_factory=list)
    transactions: list[transaction.Transaction] = field(default_factory=list)
