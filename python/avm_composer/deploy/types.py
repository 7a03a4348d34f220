"""Deployment types - policies, ARC-2 deploy metadata and results."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum

from ..constants import DEPLOY_NOTE_FORMAT, DEPLOY_NOTE_PREFIX
from ..types import AppSchema

try:
    from algosdk.atomic_transaction_composer import TransactionSigner
except ImportError as e:
    raise ImportError(
        "avm_composer requires py-algorand-sdk. Install with: pip install py-algorand-sdk"
    ) from e

logger = logging.getLogger(__name__)

DEPLOY_NOTE_HEADER = f"{DEPLOY_NOTE_PREFIX}:{DEPLOY_NOTE_FORMAT}"


class OnSchemaBreak(Enum):
    """What to do when the new app needs more state than the deployed one."""

    FAIL = "fail"
    APPEND_APP = "append"
    REPLACE_APP = "replace"


class OnUpdate(Enum):
    """What to do when the programs differ from the deployed ones."""

    FAIL = "fail"
    APPEND_APP = "append"
    UPDATE_APP = "update"
    REPLACE_APP = "replace"


class DeployAction(Enum):
    NONE = "none"
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"


@dataclass
class AppDeployMetadata:
    """Deployment metadata stored in the ARC-2 note of create/update calls.

    Example note:
        ``ALGOKIT_DEPLOYER:j{"name":"counter","version":"1.0","deletable":true,"updatable":false}``
    """

    name: str
    version: str
    deletable: bool | None = None
    updatable: bool | None = None

    def to_note(self) -> bytes:
        """Encode as an ARC-2 note."""
        payload = json.dumps(asdict(self), separators=(",", ":"))
        return f"{DEPLOY_NOTE_HEADER}{payload}".encode("utf-8")

    @classmethod
    def from_note(cls, note: bytes | str | None) -> "AppDeployMetadata | None":
        """Decode an ARC-2 note.

        Args:
            note: Raw note bytes or text.

        Returns:
            AppDeployMetadata, or None if the note is not a deploy note.
        """
        if not note:
            return None
        if isinstance(note, bytes):
            try:
                note = note.decode("utf-8")
            except UnicodeDecodeError:
                return None
        if not note.startswith(DEPLOY_NOTE_HEADER):
            return None

        try:
            data = json.loads(note[len(DEPLOY_NOTE_HEADER):])
            return cls(
                name=data["name"],
                version=data["version"],
                deletable=data.get("deletable"),
                updatable=data.get("updatable"),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.debug("Ignoring malformed deploy note: %s", e)
            return None


@dataclass
class ExistingApp:
    """An app previously deployed by a creator, as found on chain.

    Attributes:
        app_id: Application ID.
        app_address: Escrow address of the app.
        created_round: Round of the creation transaction.
        updated_round: Round of the latest update (created_round if never
            updated).
        metadata: Deploy metadata from the latest create/update note.
        deleted: Whether the app no longer exists.
        approval_program: Current approval program bytes.
        clear_program: Current clear program bytes.
        schema: Current state schema.
    """

    app_id: int
    app_address: str
    created_round: int
    updated_round: int
    metadata: AppDeployMetadata
    deleted: bool = False
    approval_program: bytes = b""
    clear_program: bytes = b""
    schema: AppSchema = field(default_factory=AppSchema)


@dataclass(kw_only=True)
class AppDeployParams:
    """Idempotent deployment of a named app.

    Attributes:
        metadata: Name and version of the app; the name identifies it per
            creator.
        sender: Creator address.
        approval_program: Compiled approval program.
        clear_program: Compiled clear program.
        schema: State schema of the app.
        on_schema_break: Policy when the schema grows.
        on_update: Policy when the programs change.
        extra_pages: Extra program pages for creation.
        create_args: Bare call arguments for creation.
        update_args: Bare call arguments for the update call.
        delete_args: Bare call arguments for deleting a replaced app.
        signer: Signer for every deploy transaction.
    """

    metadata: AppDeployMetadata
    sender: str
    approval_program: bytes
    clear_program: bytes
    schema: AppSchema = field(default_factory=AppSchema)
    on_schema_break: OnSchemaBreak = OnSchemaBreak.FAIL
    on_update: OnUpdate = OnUpdate.FAIL
    extra_pages: int = 0
    create_args: list[bytes] | None = None
    update_args: list[bytes] | None = None
    delete_args: list[bytes] | None = None
    signer: TransactionSigner | None = None


@dataclass
class DeployResult:
    """Outcome of a deployment.

    Attributes:
        action: What the deployer did.
        app_id: ID of the app now serving the name.
        app_address: Escrow address of that app.
        tx_ids: Transactions sent (empty for NONE).
        confirmed_round: Round the deploy group confirmed in, if any.
        deleted_app_id: ID of the app deleted by a REPLACE.
    """

    action: DeployAction
    app_id: int
    app_address: str
    tx_ids: list[str] = field(default_factory=list)
    confirmed_round: int | None = None
    deleted_app_id: int | None = None
