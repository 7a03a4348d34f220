"""Idempotent app deployment.

Apps are identified by creator address and the name stored in the ARC-2
deploy note of their creation transaction. The deployer finds the app the
creator last deployed under a name, decides what to do with the decision
table in ``policy`` and runs the resulting transactions through a
TransactionComposer.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable, Iterator
from typing import Any

from ..composer import TransactionComposer
from ..constants import TXN_TYPE_APPLICATION_CALL
from ..types import AppCallParams, AppSchema
from .policy import decide_deploy_action
from .types import (
    DEPLOY_NOTE_HEADER,
    AppDeployMetadata,
    AppDeployParams,
    DeployAction,
    DeployResult,
    ExistingApp,
)

try:
    from algosdk import logic, transaction
    from algosdk.error import AlgodHTTPError
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

logger = logging.getLogger(__name__)


class AppDeployer:
    """Create, update or replace apps by name.

    Example:
        ```python
        deployer = AppDeployer(algod_client, indexer_client, lambda: TransactionComposer(algod_client, accounts.get_signer))
        result = deployer.deploy(
            AppDeployParams(
                metadata=AppDeployMetadata(name="counter", version="2", updatable=True),
                sender=creator,
                approval_program=approval,
                clear_program=clear,
                on_update=OnUpdate.UPDATE_APP,
            )
        )
        ```
    """

    def __init__(
        self,
        algod_client: Any,
        indexer_client: Any,
        new_group: Callable[[], TransactionComposer],
    ):
        """Create deployer.

        Args:
            algod_client: Client used to read current app programs and
                confirmed creation results.
            indexer_client: Client used to search deploy notes.
            new_group: Factory for the composer used to send deploy groups.
        """
        self._algod = algod_client
        self._indexer = indexer_client
        self._new_group = new_group

    def _search_deploy_transactions(self, creator: str) -> Iterator[dict[str, Any]]:
        next_page = None
        while True:
            response = self._indexer.search_transactions(
                address=creator,
                address_role="sender",
                txn_type=TXN_TYPE_APPLICATION_CALL,
                note_prefix=DEPLOY_NOTE_HEADER.encode("utf-8"),
                next_page=next_page,
            )
            yield from response.get("transactions", [])
            next_page = response.get("next-token")
            if not next_page or not response.get("transactions"):
                return

    def get_creator_apps(self, creator: str) -> dict[str, ExistingApp]:
        """Find the apps a creator deployed, keyed by deploy name.

        When a name was created more than once, the latest creation wins.
        Program and schema fields are not loaded; see get_existing_app.
        """
        txns = sorted(
            self._search_deploy_transactions(creator),
            key=lambda t: t.get("confirmed-round", 0),
        )

        apps_by_id: dict[int, ExistingApp] = {}
        for txn in txns:
            metadata = AppDeployMetadata.from_note(base64.b64decode(txn.get("note", "")))
            if metadata is None:
                continue

            created_id = txn.get("created-application-index")
            app_txn = txn.get("application-transaction", {})
            confirmed_round = txn.get("confirmed-round", 0)
            if created_id:
                apps_by_id[created_id] = ExistingApp(
                    app_id=created_id,
                    app_address=logic.get_application_address(created_id),
                    created_round=confirmed_round,
                    updated_round=confirmed_round,
                    metadata=metadata,
                )
            elif (
                app_txn.get("on-completion") == "update"
                and app_txn.get("application-id") in apps_by_id
            ):
                app = apps_by_id[app_txn["application-id"]]
                app.updated_round = confirmed_round
                app.metadata = metadata

        apps: dict[str, ExistingApp] = {}
        for app in sorted(apps_by_id.values(), key=lambda a: a.created_round):
            apps[app.metadata.name] = app
        return apps

    def _load_app_state(self, app: ExistingApp) -> ExistingApp:
        try:
            info = self._algod.application_info(app.app_id)
        except AlgodHTTPError as e:
            if e.code == 404:
                app.deleted = True
                return app
            raise

        params = info.get("params", {})
        global_schema = params.get("global-state-schema", {})
        local_schema = params.get("local-state-schema", {})
        app.approval_program = base64.b64decode(params.get("approval-program", ""))
        app.clear_program = base64.b64decode(params.get("clear-state-program", ""))
        app.schema = AppSchema(
            global_uints=global_schema.get("num-uint", 0),
            global_byte_slices=global_schema.get("num-byte-slice", 0),
            local_uints=local_schema.get("num-uint", 0),
            local_byte_slices=local_schema.get("num-byte-slice", 0),
        )
        return app

    def get_existing_app(self, creator: str, name: str) -> ExistingApp | None:
        """Get the app currently deployed by a creator under a name.

        Returns:
            ExistingApp with programs and schema loaded, or None.
        """
        app = self.get_creator_apps(creator).get(name)
        if app is None:
            return None
        return self._load_app_state(app)

    def deploy(self, params: AppDeployParams) -> DeployResult:
        """Deploy an app idempotently.

        Returns:
            DeployResult describing the action taken.

        Raises:
            DeployError: If the configured policy refuses the change.
        """
        existing = self.get_existing_app(params.sender, params.metadata.name)
        action = decide_deploy_action(
            existing,
            params.approval_program,
            params.clear_program,
            params.schema,
            params.on_schema_break,
            params.on_update,
        )
        logger.info(
            "Deploying %s version %s: %s",
            params.metadata.name,
            params.metadata.version,
            action.value,
        )

        if action == DeployAction.NONE:
            return DeployResult(
                action=action,
                app_id=existing.app_id,
                app_address=existing.app_address,
            )

        if action == DeployAction.UPDATE:
            result = (
                self._new_group()
                .add_app_call(self._update_params(params, existing.app_id))
                .execute()
            )
            return DeployResult(
                action=action,
                app_id=existing.app_id,
                app_address=existing.app_address,
                tx_ids=result.tx_ids,
                confirmed_round=result.confirmed_round,
            )

        group = self._new_group().add_app_call(self._create_params(params))
        deleted_app_id = None
        if action == DeployAction.REPLACE:
            deleted_app_id = existing.app_id
            group.add_app_call(self._delete_params(params, existing.app_id))
        result = group.execute()

        app_id = self._algod.pending_transaction_info(result.tx_ids[0])["application-index"]
        return DeployResult(
            action=action,
            app_id=app_id,
            app_address=logic.get_application_address(app_id),
            tx_ids=result.tx_ids,
            confirmed_round=result.confirmed_round,
            deleted_app_id=deleted_app_id,
        )

    def _create_params(self, params: AppDeployParams) -> AppCallParams:
        return AppCallParams(
            sender=params.sender,
            signer=params.signer,
            app_id=0,
            approval_program=params.approval_program,
            clear_program=params.clear_program,
            schema=params.schema,
            extra_pages=params.extra_pages,
            args=params.create_args,
            note=params.metadata.to_note(),
        )

    def _update_params(self, params: AppDeployParams, app_id: int) -> AppCallParams:
        return AppCallParams(
            sender=params.sender,
            signer=params.signer,
            app_id=app_id,
            on_complete=transaction.OnComplete.UpdateApplicationOC,
            approval_program=params.approval_program,
            clear_program=params.clear_program,
            args=params.update_args,
            note=params.metadata.to_note(),
        )

    def _delete_params(self, params: AppDeployParams, app_id: int) -> AppCallParams:
        return AppCallParams(
            sender=params.sender,
            signer=params.signer,
            app_id=app_id,
            on_complete=transaction.OnComplete.DeleteApplicationOC,
            args=params.delete_args,
        )
