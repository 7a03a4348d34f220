"""Deploy decision table.

Decides what to do with an already deployed app given the new programs,
schema and policies. Pure: no network access.
"""

from __future__ import annotations

from ..errors import DeployError
from ..types import AppSchema
from .types import DeployAction, ExistingApp, OnSchemaBreak, OnUpdate


def is_schema_break(existing: AppSchema, new: AppSchema) -> bool:
    """A schema breaks when any state allocation grows."""
    return (
        new.global_uints > existing.global_uints
        or new.global_byte_slices > existing.global_byte_slices
        or new.local_uints > existing.local_uints
        or new.local_byte_slices > existing.local_byte_slices
    )


def _require_mutable(existing: ExistingApp, flag: str, action: str) -> None:
    # None means the deploy note did not say; the chain has the final word
    if getattr(existing.metadata, flag) is False:
        raise DeployError(
            f"Cannot {action} app {existing.app_id}: it was deployed with {flag}=False"
        )


def decide_deploy_action(
    existing: ExistingApp | None,
    approval_program: bytes,
    clear_program: bytes,
    schema: AppSchema,
    on_schema_break: OnSchemaBreak = OnSchemaBreak.FAIL,
    on_update: OnUpdate = OnUpdate.FAIL,
) -> DeployAction:
    """Decide how to deploy.

    Args:
        existing: The app currently deployed under the name, if any.
        approval_program: New approval program.
        clear_program: New clear program.
        schema: New state schema.
        on_schema_break: Policy when the schema grows.
        on_update: Policy when the programs change.

    Returns:
        The DeployAction to perform.

    Raises:
        DeployError: If the applicable policy is FAIL, or the existing app
            was deployed as not updatable (for UPDATE) or not deletable
            (for REPLACE).
    """
    if existing is None or existing.deleted:
        return DeployAction.CREATE

    if is_schema_break(existing.schema, schema):
        if on_schema_break == OnSchemaBreak.FAIL:
            raise DeployError(
                f"Schema break detected for app {existing.app_id} and "
                "on_schema_break is FAIL"
            )
        if on_schema_break == OnSchemaBreak.APPEND_APP:
            return DeployAction.CREATE
        _require_mutable(existing, "deletable", "replace")
        return DeployAction.REPLACE

    programs_changed = (
        existing.approval_program != approval_program
        or existing.clear_program != clear_program
    )
    if not programs_changed:
        return DeployAction.NONE

    if on_update == OnUpdate.FAIL:
        raise DeployError(
            f"Program change detected for app {existing.app_id} and on_update is FAIL"
        )
    if on_update == OnUpdate.APPEND_APP:
        return DeployAction.CREATE
    if on_update == OnUpdate.UPDATE_APP:
        _require_mutable(existing, "updatable", "update")
        return DeployAction.UPDATE
    _require_mutable(existing, "deletable", "replace")
    return DeployAction.REPLACE
