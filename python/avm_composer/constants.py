"""Composer constants - fees, validity windows, network configs, error codes."""

import os
from typing import TypedDict

# Minimum transaction fee on Algorand (in microalgos)
MIN_TXN_FEE = 1000

# Maximum transactions in an atomic group
MAX_GROUP_SIZE = 16

# Rounds a transaction stays valid when no window is given
DEFAULT_VALIDITY_WINDOW = 10

# Seconds a cached set of suggested params stays fresh
SUGGESTED_PARAMS_CACHE_TIMEOUT = 3.0

# Maximum note size accepted by the network (bytes)
MAX_NOTE_SIZE = 1024

# Lease size (bytes)
LEASE_SIZE = 32

# ============================================================================
# Algod / Indexer endpoints
# ============================================================================

# AlgoNode public endpoints
ALGONODE_ALGOD_MAINNET = "https://mainnet-api.algonode.cloud"
ALGONODE_ALGOD_TESTNET = "https://testnet-api.algonode.cloud"
ALGONODE_INDEXER_MAINNET = "https://mainnet-idx.algonode.cloud"
ALGONODE_INDEXER_TESTNET = "https://testnet-idx.algonode.cloud"

# LocalNet defaults
LOCALNET_SERVER = "http://localhost"
LOCALNET_TOKEN = "a" * 64
LOCALNET_ALGOD_PORT = 4001
LOCALNET_INDEXER_PORT = 8980
LOCALNET_KMD_PORT = 4002

# Client configuration - environment variables override the LocalNet fallback
# Set ALGOD_SERVER (and optionally ALGOD_PORT / ALGOD_TOKEN) to use a custom node.
# These are read when a client is created, not at import.
ENV_ALGOD_SERVER = "ALGOD_SERVER"
ENV_ALGOD_PORT = "ALGOD_PORT"
ENV_ALGOD_TOKEN = "ALGOD_TOKEN"
ENV_INDEXER_SERVER = "INDEXER_SERVER"
ENV_INDEXER_PORT = "INDEXER_PORT"
ENV_INDEXER_TOKEN = "INDEXER_TOKEN"
ENV_KMD_PORT = "KMD_PORT"

# Simulate failed groups and log their execution trace
DEBUG = os.environ.get("AVM_COMPOSER_DEBUG", "").lower() in ("1", "true", "yes")

# Genesis IDs that identify a LocalNet
LOCALNET_GENESIS_IDS = ["devnet-v1", "sandnet-v1", "dockernet-v1"]

# Genesis IDs of the public networks
MAINNET_GENESIS_ID = "mainnet-v1.0"
TESTNET_GENESIS_ID = "testnet-v1.0"

# Indexer transaction type of application calls
TXN_TYPE_APPLICATION_CALL = "appl"

# Intent kinds (composer level)
KIND_PAYMENT = "pay"
KIND_ASSET_CREATE = "assetCreate"
KIND_ASSET_CONFIG = "assetConfig"
KIND_ASSET_FREEZE = "assetFreeze"
KIND_ASSET_DESTROY = "assetDestroy"
KIND_ASSET_TRANSFER = "assetTransfer"
KIND_ASSET_OPT_IN = "assetOptIn"
KIND_APP_CALL = "appCall"
KIND_KEY_REG = "keyReg"
KIND_METHOD_CALL = "methodCall"
KIND_TXN_WITH_SIGNER = "txnWithSigner"
KIND_ATC = "atc"

# Intent kinds that resolve to exactly one transaction via a builder
SINGLE_TXN_KINDS = [
    KIND_PAYMENT,
    KIND_ASSET_CREATE,
    KIND_ASSET_CONFIG,
    KIND_ASSET_FREEZE,
    KIND_ASSET_DESTROY,
    KIND_ASSET_TRANSFER,
    KIND_ASSET_OPT_IN,
    KIND_APP_CALL,
    KIND_KEY_REG,
]

# ARC-2 note prefix written by the app deployer
DEPLOY_NOTE_PREFIX = "ALGOKIT_DEPLOYER"
DEPLOY_NOTE_FORMAT = "j"

# Error codes
ERR_CONFIGURATION = "composer_configuration_error"
ERR_FEE_LIMIT_EXCEEDED = "composer_fee_limit_exceeded"
ERR_MISSING_PROGRAM = "composer_missing_program"
ERR_MISSING_KEYREG_FIELD = "composer_missing_keyreg_field"
ERR_UNSUPPORTED_METHOD_ARG = "composer_unsupported_method_argument"
ERR_UNSUPPORTED_TXN_KIND = "composer_unsupported_transaction_kind"
ERR_COMPOSER_FROZEN = "composer_group_already_built"
ERR_MISSING_SIGNER = "composer_missing_signer"
ERR_DEPLOY_FAILED = "deploy_failed"


class ClientConfig(TypedDict):
    """Connection details for an algod, indexer or kmd node."""

    server: str
    port: int | str | None
    token: str


class NetworkConfig(TypedDict):
    """Configuration for a known Algorand network."""

    algod: ClientConfig
    indexer: ClientConfig
    genesis_id: str


# Network configurations
NETWORK_CONFIGS: dict[str, NetworkConfig] = {
    "mainnet": {
        "algod": {"server": ALGONODE_ALGOD_MAINNET, "port": None, "token": ""},
        "indexer": {"server": ALGONODE_INDEXER_MAINNET, "port": None, "token": ""},
        "genesis_id": MAINNET_GENESIS_ID,
    },
    "testnet": {
        "algod": {"server": ALGONODE_ALGOD_TESTNET, "port": None, "token": ""},
        "indexer": {"server": ALGONODE_INDEXER_TESTNET, "port": None, "token": ""},
        "genesis_id": TESTNET_GENESIS_ID,
    },
}
