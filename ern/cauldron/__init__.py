"""Git-backed, versioned Cauldron store.

Usage:
    from ern.cauldron import Cauldron, context_from_config

    match context_from_config(config, ern_home=ern_home(), console=console):
        case Ok(ctx):
            cauldron = Cauldron(ctx)
            deps = cauldron.get_native_dependencies(descriptor)
        case Err(e):
            console.error(e.pretty())
"""

from ern.cauldron.context import CauldronContext, context_from_config
from ern.cauldron.errors import (
    DocumentError,
    LockContentionError,
    SchemaError,
    StorageError,
    SyncError,
    SyncStep,
    TransactionAbortedError,
    TransactionError,
)
from ern.cauldron.model import (
    CURRENT_FORMAT,
    DEFAULT_CONTAINER_VERSION,
    AppVersion,
    BinaryStoreConfig,
    CauldronDocument,
)
from ern.cauldron.schema import DOCUMENT_FILE, load_document, migrate, save_document
from ern.cauldron.store import Cauldron, QueryError
from ern.cauldron.transaction import TransactionEngine, TransactionRequest, transaction_in_progress
from ern.cauldron.vcs import MemoryRemote, MemoryVersionControl, VersionControl

__all__ = [
    # context
    "CauldronContext",
    "context_from_config",
    # errors
    "DocumentError",
    "LockContentionError",
    "QueryError",
    "SchemaError",
    "StorageError",
    "SyncError",
    "SyncStep",
    "TransactionAbortedError",
    "TransactionError",
    # model
    "AppVersion",
    "BinaryStoreConfig",
    "CURRENT_FORMAT",
    "CauldronDocument",
    "DEFAULT_CONTAINER_VERSION",
    # schema
    "DOCUMENT_FILE",
    "load_document",
    "migrate",
    "save_document",
    # store
    "Cauldron",
    "TransactionEngine",
    "TransactionRequest",
    "transaction_in_progress",
    # version control
    "MemoryRemote",
    "MemoryVersionControl",
    "VersionControl",
]
