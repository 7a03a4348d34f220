"""Atomic transaction group composer for Algorand (AVM).

Builds, signs and submits atomic transaction groups from declarative
transaction intents, on top of py-algorand-sdk.

Features:
- Fluent composer for payments, assets, app calls, key registration and
  ABI method calls (up to 16 transactions per group)
- Nested ABI method calls as transaction arguments
- Fee policy: suggested, flat or suggested plus extra, with a ceiling
- Shared suggested params cache
- Idempotent app deployment keyed by ARC-2 deploy notes
- ARC-32 to ARC-56 app spec conversion

Environment Variables:
    ALGOD_SERVER / ALGOD_PORT / ALGOD_TOKEN: Algod node (default: LocalNet)
    INDEXER_SERVER / INDEXER_PORT / INDEXER_TOKEN: Indexer node
    KMD_PORT: KMD port on the algod server (default: 4002)
    AVM_COMPOSER_DEBUG: Simulate failed groups and log execution traces

Usage:
    ```python
    from algosdk import abi
    from avm_composer import AlgorandClient, MethodCallParams, PaymentParams

    algorand = AlgorandClient.from_environment()
    algorand.account.add_account(private_key)

    result = (
        algorand.new_group()
        .add_method_call(
            MethodCallParams(
                sender=sender,
                app_id=app_id,
                method=abi.Method.from_signature("buy(pay,uint64)uint64"),
                args=[PaymentParams(sender=sender, receiver=app_address, amount=10_000), 3],
            )
        )
        .execute()
    )
    print(result.returns[0].return_value)
    ```
"""

# Constants
from .constants import (
    DEFAULT_VALIDITY_WINDOW,
    MAX_GROUP_SIZE,
    MIN_TXN_FEE,
    NETWORK_CONFIGS,
)

# Errors
from .errors import (
    ComposerError,
    ComposerFrozenError,
    ConfigurationError,
    DeployError,
    FeeLimitExceeded,
    MissingKeyRegField,
    MissingProgram,
    MissingSignerError,
    UnsupportedMethodArgument,
    UnsupportedTransactionKind,
)

# Types
from .types import (
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
    MethodCallParams,
    PaymentParams,
    SendResult,
)

# Signers
from .signer import AlgodLike, SignerGetter, SignerSource, SuggestedParamsGetter
from .signers import AccountManager

# Network
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

# Composer
from .composer import TransactionComposer
from .method_call import expand_method_call, resolve_method_args
from .client import AlgorandClient
from .app_spec import arc32_to_arc56

# LocalNet
from .localnet import (
    DEFAULT_WALLET_NAME,
    KmdAccount,
    get_kmd_wallet_account,
    get_localnet_dispenser_account,
    get_or_create_kmd_wallet_account,
)

# Submodule exports
from . import deploy

__all__ = [
    # Constants
    "DEFAULT_VALIDITY_WINDOW",
    "MAX_GROUP_SIZE",
    "MIN_TXN_FEE",
    "NETWORK_CONFIGS",
    # Errors
    "ComposerError",
    "ComposerFrozenError",
    "ConfigurationError",
    "DeployError",
    "FeeLimitExceeded",
    "MissingKeyRegField",
    "MissingProgram",
    "MissingSignerError",
    "UnsupportedMethodArgument",
    "UnsupportedTransactionKind",
    # Types
    "AppCallParams",
    "AppSchema",
    "AssetConfigParams",
    "AssetCreateParams",
    "AssetDestroyParams",
    "AssetFreezeParams",
    "AssetOptInParams",
    "AssetTransferParams",
    "CommonTxnParams",
    "KeyRegParams",
    "MethodCallParams",
    "PaymentParams",
    "SendResult",
    # Signers
    "AccountManager",
    "AlgodLike",
    "SignerGetter",
    "SignerSource",
    "SuggestedParamsGetter",
    # Network
    "SuggestedParamsCache",
    "get_algod_client",
    "get_algonode_config",
    "get_config_from_environment_or_localnet",
    "get_default_localnet_config",
    "get_indexer_client",
    "get_kmd_client",
    "is_localnet",
    # Composer
    "AlgorandClient",
    "TransactionComposer",
    "arc32_to_arc56",
    "expand_method_call",
    "resolve_method_args",
    # LocalNet
    "DEFAULT_WALLET_NAME",
    "KmdAccount",
    "get_kmd_wallet_account",
    "get_localnet_dispenser_account",
    "get_or_create_kmd_wallet_account",
    # Submodules
    "deploy",
]
