"""Idempotent app deployment keyed by ARC-2 deploy notes."""

from .deployer import AppDeployer
from .policy import decide_deploy_action, is_schema_break
from .types import (
    AppDeployMetadata,
    AppDeployParams,
    DeployAction,
    DeployResult,
    ExistingApp,
    OnSchemaBreak,
    OnUpdate,
)

__all__ = [
    "AppDeployer",
    "AppDeployMetadata",
    "AppDeployParams",
    "DeployAction",
    "DeployResult",
    "ExistingApp",
    "OnSchemaBreak",
    "OnUpdate",
    "decide_deploy_action",
    "is_schema_break",
]
