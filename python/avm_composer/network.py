"""Network parameters and client configuration.

Provides the time-boxed suggested params cache shared by composers, plus
helpers that build algod, indexer and kmd clients from environment
variables or the built-in LocalNet/AlgoNode configurations.
"""

from __future__ import annotations

import copy
import logging
import os
import time
from collections.abc import Callable
from typing import Literal

from .constants import (
    ENV_ALGOD_PORT,
    ENV_ALGOD_SERVER,
    ENV_ALGOD_TOKEN,
    ENV_INDEXER_PORT,
    ENV_INDEXER_SERVER,
    ENV_INDEXER_TOKEN,
    ENV_KMD_PORT,
    LOCALNET_ALGOD_PORT,
    LOCALNET_GENESIS_IDS,
    LOCALNET_INDEXER_PORT,
    LOCALNET_KMD_PORT,
    LOCALNET_SERVER,
    LOCALNET_TOKEN,
    NETWORK_CONFIGS,
    SUGGESTED_PARAMS_CACHE_TIMEOUT,
    ClientConfig,
)
from .signer import AlgodLike

try:
    from algosdk import kmd
    from algosdk.transaction import SuggestedParams
    from algosdk.v2client import algod, indexer
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

logger = logging.getLogger(__name__)

Service = Literal["algod", "indexer", "kmd"]


class SuggestedParamsCache:
    """Time-boxed cache of suggested params.

    Every read returns a shallow copy, so a caller mutating its params
    (e.g. setting ``flat_fee``) never changes what other composers see.

    Example:
        ```python
        cache = SuggestedParamsCache(algod_client)
        composer = TransactionComposer(algod_client, get_signer, cache.get)
        ```
    """

    def __init__(
        self,
        algod_client: AlgodLike,
        timeout: float = SUGGESTED_PARAMS_CACHE_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        """Create cache.

        Args:
            algod_client: Client used to fetch fresh params.
            timeout: Seconds fetched params stay fresh.
            clock: Time source in seconds, injectable for tests.
        """
        self._algod = algod_client
        self._timeout = timeout
        self._clock = clock
        self._params: SuggestedParams | None = None
        self._expiry: float | None = None

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        self._timeout = value

    def set(self, params: SuggestedParams, until: float | None = None) -> None:
        """Seed the cache.

        Args:
            params: Params to serve.
            until: Absolute expiry time (same clock as the cache); defaults
                to now plus the timeout.
        """
        self._params = params
        self._expiry = until if until is not None else self._clock() + self._timeout

    def get(self) -> SuggestedParams:
        """Get suggested params, fetching from algod when stale.

        Returns:
            A copy of the cached SuggestedParams.
        """
        now = self._clock()
        if self._params is None or (self._expiry is not None and self._expiry <= now):
            logger.debug("Fetching suggested params from algod")
            self._params = self._algod.suggested_params()
            self._expiry = now + self._timeout

        return copy.copy(self._params)


def _address(config: ClientConfig) -> str:
    """Build a client URL from a server and optional port."""
    server = config["server"].rstrip("/")
    port = config.get("port")
    if port in (None, ""):
        return server
    return f"{server}:{port}"


def get_algod_client(config: ClientConfig) -> algod.AlgodClient:
    """Create an algod client from a configuration."""
    return algod.AlgodClient(config["token"], _address(config))


def get_indexer_client(config: ClientConfig) -> indexer.IndexerClient:
    """Create an indexer client from a configuration."""
    return indexer.IndexerClient(config["token"], _address(config))


def get_kmd_client(config: ClientConfig) -> kmd.KMDClient:
    """Create a KMD client from a configuration."""
    return kmd.KMDClient(config["token"], _address(config))


def get_default_localnet_config(service_or_port: Service | int) -> ClientConfig:
    """Get the connection config of a default LocalNet service.

    Args:
        service_or_port: "algod", "indexer", "kmd" or an explicit port.

    Returns:
        ClientConfig for the LocalNet service.
    """
    ports = {
        "algod": LOCALNET_ALGOD_PORT,
        "indexer": LOCALNET_INDEXER_PORT,
        "kmd": LOCALNET_KMD_PORT,
    }
    if isinstance(service_or_port, int):
        port = service_or_port
    else:
        port = ports[service_or_port]
    return {"server": LOCALNET_SERVER, "port": port, "token": LOCALNET_TOKEN}


def get_algonode_config(
    network: Literal["mainnet", "testnet"],
    service: Literal["algod", "indexer"],
) -> ClientConfig:
    """Get the AlgoNode public endpoint config for a network.

    Raises:
        ValueError: If the network is not supported.
    """
    config = NETWORK_CONFIGS.get(network)
    if not config:
        raise ValueError(f"Unsupported network: {network}")
    return dict(config[service])  # type: ignore[return-value]


def get_algod_config_from_environment() -> ClientConfig:
    """Read algod connection details from ALGOD_SERVER/PORT/TOKEN.

    Raises:
        ValueError: If ALGOD_SERVER is not set.
    """
    server = os.environ.get(ENV_ALGOD_SERVER)
    if not server:
        raise ValueError(f"Attempt to get default algod configuration without specifying {ENV_ALGOD_SERVER} in the environment variables")
    return {
        "server": server,
        "port": os.environ.get(ENV_ALGOD_PORT),
        "token": os.environ.get(ENV_ALGOD_TOKEN, ""),
    }


def get_indexer_config_from_environment() -> ClientConfig:
    """Read indexer connection details from INDEXER_SERVER/PORT/TOKEN.

    Raises:
        ValueError: If INDEXER_SERVER is not set.
    """
    server = os.environ.get(ENV_INDEXER_SERVER)
    if not server:
        raise ValueError(f"Attempt to get default indexer configuration without specifying {ENV_INDEXER_SERVER} in the environment variables")
    return {
        "server": server,
        "port": os.environ.get(ENV_INDEXER_PORT),
        "token": os.environ.get(ENV_INDEXER_TOKEN, ""),
    }


def get_config_from_environment_or_localnet() -> dict[str, ClientConfig | None]:
    """Resolve client configs from the environment, else default LocalNet.

    Returns:
        Dict with "algod", "indexer" and "kmd" configs. "indexer" is None
        when ALGOD_SERVER is set without INDEXER_SERVER. "kmd" reuses the
        algod server with KMD_PORT (default 4002) and is None for AlgoNode.
    """
    if os.environ.get(ENV_ALGOD_SERVER):
        algod_config = get_algod_config_from_environment()
        kmd_config: ClientConfig | None = None
        if "algonode.cloud" not in algod_config["server"]:
            kmd_config = {
                **algod_config,
                "port": os.environ.get(ENV_KMD_PORT, str(LOCALNET_KMD_PORT)),
            }
        return {
            "algod": algod_config,
            "indexer": (
                get_indexer_config_from_environment()
                if os.environ.get(ENV_INDEXER_SERVER)
                else None
            ),
            "kmd": kmd_config,
        }

    return {
        "algod": get_default_localnet_config("algod"),
        "indexer": get_default_localnet_config("indexer"),
        "kmd": get_default_localnet_config("kmd"),
    }


def genesis_id_is_localnet(genesis_id: str | None) -> bool:
    """Check whether a genesis ID belongs to a LocalNet."""
    return genesis_id in LOCALNET_GENESIS_IDS


def is_localnet(algod_client: AlgodLike) -> bool:
    """Check whether an algod client points at a LocalNet."""
    return genesis_id_is_localnet(algod_client.suggested_params().gen)
