"""Transaction composer - fluent builder for atomic transaction groups.

Callers append transaction intents in the order they want them executed.
Nothing touches the network until the group is built: ``build_group()``
fetches suggested params once, resolves every intent through its builder,
assigns the group ID over the finished list and freezes the composer.
``execute()`` then signs, submits and waits for confirmation.
"""

from __future__ import annotations

import logging

from . import constants
from .builders import build_transaction
from .constants import DEFAULT_VALIDITY_WINDOW, KIND_ATC, KIND_METHOD_CALL, KIND_TXN_WITH_SIGNER
from .errors import ComposerFrozenError
from .method_call import expand_method_call
from .signer import AlgodLike, SignerGetter, SuggestedParamsGetter
from .types import (
    AppCallParams,
    AssetConfigParams,
    AssetCreateParams,
    AssetDestroyParams,
    AssetFreezeParams,
    AssetOptInParams,
    AssetTransferParams,
    AtcIntent,
    KeyRegParams,
    MethodCallParams,
    PaymentParams,
    SendResult,
    TransactionIntent,
    TransactionWithSignerIntent,
)
from .utils import encode_group_id, max_last_valid_round, strip_group

try:
    from algosdk import abi, transaction
    from algosdk.atomic_transaction_composer import (
        AtomicTransactionComposer,
        SimulateAtomicTransactionResponse,
        TransactionSigner,
        TransactionWithSigner,
    )
    from algosdk.transaction import SuggestedParams
    from algosdk.v2client.models import SimulateRequest, SimulateTraceConfig
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

logger = logging.getLogger(__name__)


class TransactionComposer:
    """Compose, build and send an atomic transaction group.

    Example:
        ```python
        accounts = AccountManager().add_account(private_key)
        result = (
            TransactionComposer(algod_client, accounts.get_signer)
            .add_payment(PaymentParams(sender=alice, receiver=bob, amount=100_000))
            .add_asset_opt_in(AssetOptInParams(sender=bob, asset_id=asset_id))
            .execute()
        )
        print(result.tx_ids)
        ```
    """

    def __init__(
        self,
        algod: AlgodLike,
        get_signer: SignerGetter,
        get_suggested_params: SuggestedParamsGetter | None = None,
        default_validity_window: int = DEFAULT_VALIDITY_WINDOW,
    ):
        """Create composer.

        Args:
            algod: Algod client used for params, submission and simulation.
            get_signer: Resolves the signer of a sender without an explicit one.
            get_suggested_params: Params source, e.g. SuggestedParamsCache.get.
                Defaults to algod.suggested_params.
            default_validity_window: Rounds a transaction stays valid when
                its intent gives no window.
        """
        self._algod = algod
        self._get_signer = get_signer
        self._get_suggested_params = get_suggested_params or algod.suggested_params
        self._default_validity_window = default_validity_window

        self._intents: list[TransactionIntent] = []
        self._atc: AtomicTransactionComposer | None = None

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def _add(self, intent: TransactionIntent) -> "TransactionComposer":
        if self._atc is not None:
            raise ComposerFrozenError()
        intent.validate()
        if isinstance(intent, MethodCallParams):
            self._validate_method_args(intent)
        self._intents.append(intent)
        return self

    def _validate_method_args(self, params: MethodCallParams) -> None:
        for arg in params.args:
            if isinstance(arg, MethodCallParams):
                arg.validate()
                self._validate_method_args(arg)
            elif getattr(arg, "kind", None) in constants.SINGLE_TXN_KINDS:
                arg.validate()

    def add_payment(self, params: PaymentParams) -> "TransactionComposer":
        return self._add(params)

    def add_asset_create(self, params: AssetCreateParams) -> "TransactionComposer":
        return self._add(params)

    def add_asset_config(self, params: AssetConfigParams) -> "TransactionComposer":
        return self._add(params)

    def add_asset_freeze(self, params: AssetFreezeParams) -> "TransactionComposer":
        return self._add(params)

    def add_asset_destroy(self, params: AssetDestroyParams) -> "TransactionComposer":
        return self._add(params)

    def add_asset_transfer(self, params: AssetTransferParams) -> "TransactionComposer":
        return self._add(params)

    def add_asset_opt_in(self, params: AssetOptInParams) -> "TransactionComposer":
        return self._add(params)

    def add_app_call(self, params: AppCallParams) -> "TransactionComposer":
        """Add a bare application call. An app_id of None or 0 creates the app."""
        return self._add(params)

    def add_key_reg(self, params: KeyRegParams) -> "TransactionComposer":
        return self._add(params)

    def add_method_call(self, params: MethodCallParams) -> "TransactionComposer":
        """Add an ABI method call.

        Transaction-typed arguments may be intents, nested method calls or
        pre-built TransactionWithSigner values; they are placed in the
        group immediately before the call that consumes them.

        Raises:
            ConfigurationError: If this call or a nested argument sets both
                flat_fee and extra_fee.
            ComposerFrozenError: If the group was already built.
        """
        return self._add(params)

    def add_transaction(
        self,
        txn: transaction.Transaction,
        signer: TransactionSigner | None = None,
    ) -> "TransactionComposer":
        """Add a pre-built transaction.

        Args:
            txn: Unsigned transaction, must not belong to a group yet.
            signer: Signer for txn; resolved from txn.sender if None.
        """
        txn_signer = signer or self._get_signer(txn.sender)
        return self._add(TransactionWithSignerIntent(TransactionWithSigner(txn, txn_signer)))

    def add_atc(self, atc: AtomicTransactionComposer) -> "TransactionComposer":
        """Append every transaction of an existing composer, keeping its
        signers and ABI methods. The given composer is left untouched."""
        return self._add(AtcIntent(atc))

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def _resolve_intent(
        self,
        intent: TransactionIntent,
        sp: SuggestedParams,
    ) -> tuple[list[TransactionWithSigner], dict[str, abi.Method]]:
        kind = intent.kind

        if kind == KIND_METHOD_CALL:
            expansion = expand_method_call(
                intent, sp, self._get_signer, self._default_validity_window
            )
            return expansion.txns, expansion.method_calls

        if kind == KIND_TXN_WITH_SIGNER:
            return [strip_group(intent.txn_with_signer)], {}

        if kind == KIND_ATC:
            built = intent.atc.clone().build_group()
            txns = [strip_group(ts) for ts in built]
            method_calls = {
                txns[index].txn.get_txid(): method
                for index, method in intent.atc.method_dict.items()
            }
            return txns, method_calls

        txn = build_transaction(intent, sp, self._default_validity_window)
        signer = intent.signer or self._get_signer(intent.sender)
        return [TransactionWithSigner(txn, signer)], {}

    def _build_transactions(
        self,
    ) -> tuple[list[TransactionWithSigner], dict[str, abi.Method]]:
        sp = self._get_suggested_params()

        txns: list[TransactionWithSigner] = []
        method_calls: dict[str, abi.Method] = {}
        for intent in self._intents:
            intent_txns, intent_methods = self._resolve_intent(intent, sp)
            txns.extend(intent_txns)
            method_calls.update(intent_methods)

        return txns, method_calls

    def build_transactions(self) -> list[transaction.Transaction]:
        """Resolve every intent without grouping or freezing the composer.

        Returns:
            Unsigned, ungrouped transactions in group order.
        """
        txns, _ = self._build_transactions()
        return [ts.txn for ts in txns]

    def count(self) -> int:
        """Number of transactions the group resolves to."""
        return len(self.build_transactions())

    def build_group(self) -> list[TransactionWithSigner]:
        """Resolve every intent and assign the group ID.

        Suggested params are fetched once per call. Calling this again
        rebuilds the group with fresh params, so fees and validity rounds
        may change; the order of transactions never does.

        Returns:
            Grouped transactions with their signers, in intent order.

        Raises:
            ComposerError: If an intent cannot be built.
        """
        txns, method_calls = self._build_transactions()

        atc = AtomicTransactionComposer()
        for ts in txns:
            atc.add_transaction(ts)
        atc.method_dict = {
            index: method_calls[ts.txn.get_txid()]
            for index, ts in enumerate(txns)
            if ts.txn.get_txid() in method_calls
        }

        group = atc.build_group()
        self._atc = atc
        logger.debug("Built group of %d transactions", len(group))
        return group

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def _default_wait_rounds(self, group: list[TransactionWithSigner]) -> int:
        return max_last_valid_round(group) - self._get_suggested_params().first

    def execute(self, max_rounds_to_wait: int | None = None) -> SendResult:
        """Sign, submit and wait for the group to be confirmed.

        Args:
            max_rounds_to_wait: Rounds to wait for confirmation. Defaults to
                the rounds left until the last transaction expires.

        Returns:
            SendResult with IDs, confirmed round and ABI return values.

        Raises:
            AlgodHTTPError: If the node rejects the group.
            ConfirmationTimeoutError: If the group is not confirmed in time.
        """
        group = self.build_group()
        wait_rounds = (
            max_rounds_to_wait
            if max_rounds_to_wait is not None
            else self._default_wait_rounds(group)
        )

        try:
            response = self._atc.execute(self._algod, wait_rounds)
        except Exception:
            if constants.DEBUG:
                self._log_failure_trace()
            raise

        logger.debug(
            "Group of %d transactions confirmed in round %d",
            len(group),
            response.confirmed_round,
        )
        return SendResult(
            group_id=encode_group_id(group[0].txn.group) if group else "",
            tx_ids=response.tx_ids,
            confirmed_round=response.confirmed_round,
            returns=response.abi_results,
            transactions=[ts.txn for ts in group],
        )

    def _log_failure_trace(self) -> None:
        """Simulate the failed group with execution traces and log them."""
        try:
            trace = self._simulate_with_trace()
        except Exception as e:
            logger.error("Could not simulate failed group: %s", e)
            return
        logger.error(
            "Group failed, simulation: %s",
            trace.failure_message or trace.simulate_response,
        )

    def _simulate_with_trace(self) -> SimulateAtomicTransactionResponse:
        atc = self._atc.clone()
        atc.build_group()
        request = SimulateRequest(
            txn_groups=[],
            allow_empty_signatures=True,
            exec_trace_config=SimulateTraceConfig(
                enable=True,
                stack_change=True,
                scratch_change=True,
                state_change=True,
            ),
        )
        return atc.simulate(self._algod, request)

    def simulate(self) -> SimulateAtomicTransactionResponse:
        """Run the group through algod's simulate endpoint.

        Returns:
            algosdk's simulate response; ``simulate_response`` holds the
            raw node response.
        """
        self.build_group()
        request = SimulateRequest(txn_groups=[], allow_empty_signatures=True)
        return self._atc.simulate(self._algod, request)

    def get_intents(self) -> list[TransactionIntent]:
        """Get a copy of the queued intents."""
        return list(self._intents)
