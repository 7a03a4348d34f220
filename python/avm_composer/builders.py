"""Per-kind transaction builders.

Each builder is a pure function turning one intent plus a suggested params
snapshot into an unsigned algosdk Transaction. Builders translate their
payload and then run the common build step, which applies the fields shared
by every intent: lease, rekey, note, validity window and fee.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import fields
from typing import Any

from .constants import (
    DEFAULT_VALIDITY_WINDOW,
    KIND_APP_CALL,
    KIND_ASSET_CONFIG,
    KIND_ASSET_CREATE,
    KIND_ASSET_DESTROY,
    KIND_ASSET_FREEZE,
    KIND_ASSET_OPT_IN,
    KIND_ASSET_TRANSFER,
    KIND_KEY_REG,
    KIND_PAYMENT,
    MIN_TXN_FEE,
)
from .errors import (
    FeeLimitExceeded,
    MissingKeyRegField,
    MissingProgram,
    UnsupportedTransactionKind,
)
from .types import (
    AppCallFields,
    AppCallParams,
    AppSchema,
    AssetConfigParams,
    AssetCreateParams,
    AssetDestroyParams,
    AssetFreezeParams,
    AssetOptInParams,
    AssetTransferParams,
    CommonTxnParams,
    KeyRegParams,
    PaymentParams,
)

try:
    from algosdk import transaction
    from algosdk.transaction import SuggestedParams
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

logger = logging.getLogger(__name__)

Builder = Callable[..., transaction.Transaction]


def compute_fee(txn: transaction.Transaction, sp: SuggestedParams) -> int:
    """Compute the suggested fee for a transaction.

    Args:
        txn: Transaction whose encoded size drives the fee.
        sp: Suggested params snapshot.

    Returns:
        max(size * fee per byte, min fee), or the flat fee when the
        params themselves are flat.
    """
    if sp.flat_fee:
        return sp.fee
    min_fee = sp.min_fee or MIN_TXN_FEE
    return max(txn.estimate_size() * sp.fee, min_fee)


def common_txn_build_step(
    params: CommonTxnParams,
    txn: transaction.Transaction,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    """Apply the fields shared by every intent to a built transaction.

    Args:
        params: The intent's common fields (already validated).
        txn: Freshly built transaction, mutated in place.
        sp: Suggested params snapshot for this group build.
        default_validity_window: Rounds used when the intent gives none.

    Returns:
        The same transaction.

    Raises:
        FeeLimitExceeded: If the fee is above params.max_fee.
    """
    if params.lease:
        txn.lease = transaction.Transaction.as_lease(params.lease)
    if params.rekey_to:
        txn.rekey_to = params.rekey_to
    if params.note:
        txn.note = transaction.Transaction.as_note(params.note)

    if params.first_valid_round:
        txn.first_valid_round = params.first_valid_round

    if params.last_valid_round:
        txn.last_valid_round = params.last_valid_round
    else:
        window = (
            params.validity_window
            if params.validity_window is not None
            else default_validity_window
        )
        txn.last_valid_round = txn.first_valid_round + window

    if params.flat_fee is not None:
        txn.fee = params.flat_fee
    else:
        txn.fee = compute_fee(txn, sp)
        if params.extra_fee:
            txn.fee += params.extra_fee

    if params.max_fee is not None and txn.fee > params.max_fee:
        raise FeeLimitExceeded(txn.fee, params.max_fee)

    return txn


def build_payment(
    params: PaymentParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    txn = transaction.PaymentTxn(
        sender=params.sender,
        sp=sp,
        receiver=params.receiver,
        amt=params.amount,
        close_remainder_to=params.close_remainder_to,
    )
    return common_txn_build_step(params, txn, sp, default_validity_window)


def build_asset_create(
    params: AssetCreateParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    txn = transaction.AssetCreateTxn(
        sender=params.sender,
        sp=sp,
        total=params.total,
        decimals=params.decimals,
        default_frozen=params.default_frozen,
        manager=params.manager,
        reserve=params.reserve,
        freeze=params.freeze,
        clawback=params.clawback,
        unit_name=params.unit_name,
        asset_name=params.asset_name,
        url=params.url,
        metadata_hash=params.metadata_hash,
    )
    return common_txn_build_step(params, txn, sp, default_validity_window)


def build_asset_config(
    params: AssetConfigParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    # Unset addresses are cleared on chain, not left unchanged
    txn = transaction.AssetConfigTxn(
        sender=params.sender,
        sp=sp,
        index=params.asset_id,
        manager=params.manager,
        reserve=params.reserve,
        freeze=params.freeze,
        clawback=params.clawback,
        strict_empty_address_check=False,
    )
    return common_txn_build_step(params, txn, sp, default_validity_window)


def build_asset_freeze(
    params: AssetFreezeParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    txn = transaction.AssetFreezeTxn(
        sender=params.sender,
        sp=sp,
        index=params.asset_id,
        target=params.account,
        new_freeze_state=params.frozen,
    )
    return common_txn_build_step(params, txn, sp, default_validity_window)


def build_asset_destroy(
    params: AssetDestroyParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    txn = transaction.AssetDestroyTxn(
        sender=params.sender,
        sp=sp,
        index=params.asset_id,
    )
    return common_txn_build_step(params, txn, sp, default_validity_window)


def build_asset_transfer(
    params: AssetTransferParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    txn = transaction.AssetTransferTxn(
        sender=params.sender,
        sp=sp,
        receiver=params.receiver,
        amt=params.amount,
        index=params.asset_id,
        close_assets_to=params.close_asset_to,
        revocation_target=params.clawback_target,
    )
    return common_txn_build_step(params, txn, sp, default_validity_window)


def opt_in_as_transfer(params: AssetOptInParams) -> AssetTransferParams:
    """Express an opt-in as a zero-amount asset transfer to self."""
    common = {f.name: getattr(params, f.name) for f in fields(CommonTxnParams)}
    return AssetTransferParams(
        **common,
        asset_id=params.asset_id,
        amount=0,
        receiver=params.sender,
    )


def build_asset_opt_in(
    params: AssetOptInParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    return build_asset_transfer(opt_in_as_transfer(params), sp, default_validity_window)


def check_app_create_programs(params: AppCallFields) -> None:
    """Ensure a creation call carries both programs.

    Raises:
        MissingProgram: If app_id is None/0 and a program is missing.
    """
    if not params.is_create:
        return
    missing = [
        name
        for name in ("approval_program", "clear_program")
        if getattr(params, name) is None
    ]
    if missing:
        raise MissingProgram(missing)


def build_app_call(
    params: AppCallParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    """Build an application call, or a creation when app_id is None/0."""
    check_app_create_programs(params)

    schema = params.schema or AppSchema()
    txn = transaction.ApplicationCallTxn(
        sender=params.sender,
        sp=sp,
        index=params.app_id or 0,
        on_complete=params.on_complete,
        local_schema=schema.local_state_schema() if params.is_create else None,
        global_schema=schema.global_state_schema() if params.is_create else None,
        approval_program=params.approval_program,
        clear_program=params.clear_program,
        app_args=params.args,
        accounts=params.account_references,
        foreign_apps=params.app_references,
        foreign_assets=params.asset_references,
        extra_pages=params.extra_pages,
        boxes=params.box_references,
    )
    return common_txn_build_step(params, txn, sp, default_validity_window)


def build_key_reg(
    params: KeyRegParams,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    """Build a key registration.

    Raises:
        MissingKeyRegField: If an online registration lacks a key field.
    """
    if params.non_participation:
        txn = transaction.KeyregNonparticipatingTxn(sender=params.sender, sp=sp)
    elif params.offline:
        txn = transaction.KeyregOfflineTxn(sender=params.sender, sp=sp)
    else:
        required = (
            "vote_key",
            "selection_key",
            "vote_first",
            "vote_last",
            "vote_key_dilution",
        )
        missing = [name for name in required if getattr(params, name) is None]
        if missing:
            raise MissingKeyRegField(missing)

        txn = transaction.KeyregOnlineTxn(
            sender=params.sender,
            sp=sp,
            votekey=params.vote_key,
            selkey=params.selection_key,
            votefst=params.vote_first,
            votelst=params.vote_last,
            votekd=params.vote_key_dilution,
            sprfkey=params.state_proof_key,
        )
    return common_txn_build_step(params, txn, sp, default_validity_window)


# Intent kind -> builder
BUILDERS: dict[str, Builder] = {
    KIND_PAYMENT: build_payment,
    KIND_ASSET_CREATE: build_asset_create,
    KIND_ASSET_CONFIG: build_asset_config,
    KIND_ASSET_FREEZE: build_asset_freeze,
    KIND_ASSET_DESTROY: build_asset_destroy,
    KIND_ASSET_TRANSFER: build_asset_transfer,
    KIND_ASSET_OPT_IN: build_asset_opt_in,
    KIND_APP_CALL: build_app_call,
    KIND_KEY_REG: build_key_reg,
}


def build_transaction(
    intent: Any,
    sp: SuggestedParams,
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> transaction.Transaction:
    """Build any single-transaction intent through the builder table.

    Raises:
        UnsupportedTransactionKind: If no builder is registered for the kind.
    """
    kind = getattr(intent, "kind", None)
    builder = BUILDERS.get(kind)  # type: ignore[arg-type]
    if builder is None:
        raise UnsupportedTransactionKind(kind)

    txn = builder(intent, sp, default_validity_window)
    logger.debug("Built %s transaction from %s", kind, intent.sender)
    return txn
