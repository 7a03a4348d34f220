"""ABI method call expansion.

Turns one MethodCallParams into the ordered transactions it stands for:
every transaction-typed argument (recursively, for nested method calls)
followed by the application call itself.

Argument resolution is a fold over the caller's arguments with an explicit
accumulator. A nested method call producing N transactions contributes N
method arguments, so the method must declare a transaction parameter for
each of them. The accumulator's ``offset`` counts those extra arguments:
caller argument ``i`` is declared at method parameter ``i + offset``, and
a nested call shifts every later argument by N - 1.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from .builders import build_transaction, check_app_create_programs, common_txn_build_step
from .constants import DEFAULT_VALIDITY_WINDOW, SINGLE_TXN_KINDS
from .errors import UnsupportedMethodArgument
from .types import AppSchema, MethodCallParams
from .utils import is_abi_value, strip_group

try:
    from algosdk import abi
    from algosdk.atomic_transaction_composer import (
        AtomicTransactionComposer,
        TransactionSigner,
        TransactionWithSigner,
    )
    from algosdk.transaction import SuggestedParams
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedMethodArgs:
    """Accumulator for method argument resolution.

    Attributes:
        args: Method arguments ready for
            AtomicTransactionComposer.add_method_call. A nested method call
            contributes one entry per transaction it expands into.
        offset: Extra method arguments contributed by nested method calls
            so far.
        method_calls: Transaction ID -> ABI method for nested calls.
    """

    args: tuple[Any, ...] = ()
    offset: int = 0
    method_calls: dict[str, abi.Method] = field(default_factory=dict)


@dataclass
class MethodCallExpansion:
    """Transactions produced by one method call intent.

    Attributes:
        txns: Argument transactions followed by the app call, group tags
            stripped.
        method_calls: Transaction ID -> ABI method, for this call and every
            nested call.
    """

    txns: list[TransactionWithSigner]
    method_calls: dict[str, abi.Method]


def _declared_type(method: abi.Method, position: int) -> Any:
    if position >= len(method.args):
        return None
    return method.args[position].type


def _resolve_arg(
    acc: ResolvedMethodArgs,
    index: int,
    value: Any,
    params: MethodCallParams,
    sp: SuggestedParams,
    get_signer: Callable[[str], TransactionSigner],
    default_signer: TransactionSigner,
    default_validity_window: int,
) -> ResolvedMethodArgs:
    """Fold one caller argument into the accumulator."""
    if is_abi_value(value):
        return replace(acc, args=acc.args + (value,))

    arg_type = _declared_type(params.method, index + acc.offset)
    if arg_type is None or not abi.is_abi_transaction_type(arg_type):
        raise UnsupportedMethodArgument(index, value, str(arg_type) if arg_type else None)

    if isinstance(value, TransactionWithSigner):
        return replace(acc, args=acc.args + (strip_group(value),))

    if isinstance(value, MethodCallParams):
        nested = expand_method_call(value, sp, get_signer, default_validity_window)
        return ResolvedMethodArgs(
            args=acc.args + tuple(nested.txns),
            offset=acc.offset + len(nested.txns) - 1,
            method_calls={**acc.method_calls, **nested.method_calls},
        )

    if getattr(value, "kind", None) in SINGLE_TXN_KINDS:
        txn = build_transaction(value, sp, default_validity_window)
        if value.signer is not None:
            signer = value.signer
        elif value.sender == params.sender:
            signer = default_signer
        else:
            signer = get_signer(value.sender)
        return replace(acc, args=acc.args + (TransactionWithSigner(txn, signer),))

    raise UnsupportedMethodArgument(index, value, str(arg_type))


def resolve_method_args(
    params: MethodCallParams,
    sp: SuggestedParams,
    get_signer: Callable[[str], TransactionSigner],
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> ResolvedMethodArgs:
    """Resolve a method call's arguments.

    Args:
        params: The method call intent.
        sp: Suggested params snapshot shared by the whole group.
        get_signer: Resolves signers for senders without an explicit one.
        default_validity_window: Rounds used when an intent gives none.

    Returns:
        The final accumulator.

    Raises:
        UnsupportedMethodArgument: If an argument is neither a plain ABI
            value nor a transaction for a transaction-typed parameter.
    """
    default_signer = params.signer or get_signer(params.sender)

    acc = ResolvedMethodArgs()
    for index, value in enumerate(params.args):
        acc = _resolve_arg(
            acc,
            index,
            value,
            params,
            sp,
            get_signer,
            default_signer,
            default_validity_window,
        )
    return acc


def expand_method_call(
    params: MethodCallParams,
    sp: SuggestedParams,
    get_signer: Callable[[str], TransactionSigner],
    default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
) -> MethodCallExpansion:
    """Expand a method call into its ordered transactions.

    An isolated AtomicTransactionComposer encodes the call and orders its
    transaction arguments, including every transaction of a nested method
    call. Group tags are dropped (the group is assigned once, over the whole
    composed list) and the common build step is applied to the application
    call.

    Returns:
        MethodCallExpansion with transactions in group order.

    Raises:
        MissingProgram: If app_id is None/0 and a program is missing.
        UnsupportedMethodArgument: See resolve_method_args.
        FeeLimitExceeded: If the app call fee is above max_fee.
    """
    check_app_create_programs(params)

    signer = params.signer or get_signer(params.sender)
    resolved = resolve_method_args(params, sp, get_signer, default_validity_window)

    schema = params.schema or AppSchema()
    method_atc = AtomicTransactionComposer()
    method_atc.add_method_call(
        app_id=params.app_id or 0,
        method=params.method,
        sender=params.sender,
        sp=sp,
        signer=signer,
        method_args=list(resolved.args),
        on_complete=params.on_complete,
        local_schema=schema.local_state_schema() if params.is_create else None,
        global_schema=schema.global_state_schema() if params.is_create else None,
        approval_program=params.approval_program,
        clear_program=params.clear_program,
        extra_pages=params.extra_pages,
        accounts=params.account_references,
        foreign_apps=params.app_references,
        foreign_assets=params.asset_references,
        boxes=params.box_references,
    )
    txns = [strip_group(ts) for ts in method_atc.build_group()]

    app_call = txns[-1]
    common_txn_build_step(params, app_call.txn, sp, default_validity_window)

    method_calls = dict(resolved.method_calls)
    method_calls[app_call.txn.get_txid()] = params.method

    logger.debug(
        "Expanded method call %s into %d transactions",
        params.method.get_signature(),
        len(txns),
    )
    return MethodCallExpansion(txns=txns, method_calls=method_calls)
