"""AlgorandClient - one entry point for clients, signers and composers.

Wires an algod client (plus optional indexer and kmd clients) to a shared
suggested params cache and signer registry, and hands out composers that
use them.
"""

from __future__ import annotations

import logging
from typing import Literal

from .composer import TransactionComposer
from .constants import DEFAULT_VALIDITY_WINDOW, ClientConfig
from .deploy import AppDeployer
from .network import (
    SuggestedParamsCache,
    get_algod_client,
    get_algonode_config,
    get_config_from_environment_or_localnet,
    get_default_localnet_config,
    get_indexer_client,
    get_kmd_client,
    is_localnet,
)
from .signers import AccountManager

try:
    from algosdk.atomic_transaction_composer import TransactionSigner
    from algosdk.kmd import KMDClient
    from algosdk.transaction import SuggestedParams
    from algosdk.v2client.algod import AlgodClient
    from algosdk.v2client.indexer import IndexerClient
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

logger = logging.getLogger(__name__)


class AlgorandClient:
    """Facade over the algod/indexer/kmd clients.

    Example:
        ```python
        algorand = AlgorandClient.from_environment()
        alice = algorand.account.create_account()
        algorand.new_group().add_payment(
            PaymentParams(sender=alice, receiver=bob, amount=1_000)
        ).execute()
        ```
    """

    def __init__(
        self,
        algod: AlgodClient,
        indexer: IndexerClient | None = None,
        kmd: KMDClient | None = None,
    ):
        self._algod = algod
        self._indexer = indexer
        self._kmd = kmd
        self._account_manager = AccountManager()
        self._params_cache = SuggestedParamsCache(algod)
        self._default_validity_window = DEFAULT_VALIDITY_WINDOW
        self._deployer: AppDeployer | None = None

    @classmethod
    def from_clients(
        cls,
        algod: AlgodClient,
        indexer: IndexerClient | None = None,
        kmd: KMDClient | None = None,
    ) -> "AlgorandClient":
        return cls(algod, indexer, kmd)

    @classmethod
    def from_config(
        cls,
        algod_config: ClientConfig,
        indexer_config: ClientConfig | None = None,
        kmd_config: ClientConfig | None = None,
    ) -> "AlgorandClient":
        return cls(
            get_algod_client(algod_config),
            get_indexer_client(indexer_config) if indexer_config else None,
            get_kmd_client(kmd_config) if kmd_config else None,
        )

    @classmethod
    def default_localnet(cls) -> "AlgorandClient":
        """Client for a LocalNet on its default ports."""
        return cls.from_config(
            get_default_localnet_config("algod"),
            get_default_localnet_config("indexer"),
            get_default_localnet_config("kmd"),
        )

    @classmethod
    def _algonode(cls, network: Literal["mainnet", "testnet"]) -> "AlgorandClient":
        return cls.from_config(
            get_algonode_config(network, "algod"),
            get_algonode_config(network, "indexer"),
        )

    @classmethod
    def testnet(cls) -> "AlgorandClient":
        """Client for TestNet through AlgoNode."""
        return cls._algonode("testnet")

    @classmethod
    def mainnet(cls) -> "AlgorandClient":
        """Client for MainNet through AlgoNode."""
        return cls._algonode("mainnet")

    @classmethod
    def from_environment(cls) -> "AlgorandClient":
        """Client configured from ALGOD_* / INDEXER_* variables, else LocalNet."""
        config = get_config_from_environment_or_localnet()
        return cls.from_config(config["algod"], config["indexer"], config["kmd"])

    @property
    def algod(self) -> AlgodClient:
        return self._algod

    @property
    def indexer(self) -> IndexerClient:
        """Indexer client.

        Raises:
            ValueError: If no indexer is configured.
        """
        if self._indexer is None:
            raise ValueError("Attempt to use indexer client with no indexer configured")
        return self._indexer

    @property
    def kmd(self) -> KMDClient:
        """KMD client.

        Raises:
            ValueError: If no kmd is configured.
        """
        if self._kmd is None:
            raise ValueError("Attempt to use kmd client with no kmd configured")
        return self._kmd

    @property
    def account(self) -> AccountManager:
        return self._account_manager

    @property
    def deployer(self) -> AppDeployer:
        """App deployer using this client's indexer and composers."""
        if self._deployer is None:
            self._deployer = AppDeployer(self._algod, self.indexer, self.new_group)
        return self._deployer

    def set_default_validity_window(self, validity_window: int) -> "AlgorandClient":
        self._default_validity_window = validity_window
        return self

    def set_default_signer(self, signer: TransactionSigner) -> "AlgorandClient":
        self._account_manager.set_default_signer(signer)
        return self

    def set_signer(self, sender: str, signer: TransactionSigner) -> "AlgorandClient":
        self._account_manager.set_signer(sender, signer)
        return self

    def set_suggested_params_cache(
        self,
        suggested_params: SuggestedParams,
        until: float | None = None,
    ) -> "AlgorandClient":
        """Serve the given params until an expiry time.

        Args:
            suggested_params: Params to serve.
            until: Expiry as a time.time() timestamp; defaults to now plus
                the cache timeout.
        """
        self._params_cache.set(suggested_params, until)
        return self

    def set_suggested_params_cache_timeout(self, timeout: float) -> "AlgorandClient":
        """Set how many seconds fetched params stay fresh."""
        self._params_cache.timeout = timeout
        return self

    def get_suggested_params(self) -> SuggestedParams:
        """Get suggested params from the cache, refreshing when stale."""
        return self._params_cache.get()

    def new_group(self) -> TransactionComposer:
        """Start a new transaction group using this client's signers and params."""
        return TransactionComposer(
            self._algod,
            self._account_manager.get_signer,
            self._params_cache.get,
            self._default_validity_window,
        )

    def is_localnet(self) -> bool:
        return is_localnet(self._algod)
