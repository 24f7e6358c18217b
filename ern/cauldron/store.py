"""High-level Cauldron API.

Queries sync with the remote and read the document; each mutation is one
transaction with a generated commit message. Multi-step updates (such as
updating MiniApps together with their native dependencies) build their own
TransactionRequest and go through `transaction()`.
"""

from __future__ import annotations

from collections.abc import Sequence

from ern.cauldron.context import CauldronContext
from ern.cauldron.errors import DocumentError, TransactionError
from ern.cauldron.model import DEFAULT_CONTAINER_VERSION, BinaryStoreConfig, CauldronDocument
from ern.cauldron.transaction import TransactionEngine, TransactionRequest
from ern.core.result import Result
from ern.identity.dependency import Dependency
from ern.identity.descriptor import NativeApplicationDescriptor
from ern.identity.package_path import PackagePath
from ern.platform.files import remove_tree

__all__ = ["Cauldron", "QueryError"]

type QueryError = TransactionError | DocumentError


class Cauldron:
    def __init__(self, context: CauldronContext) -> None:
        self._ctx = context
        self._engine = TransactionEngine(context)

    @property
    def engine(self) -> TransactionEngine:
        return self._engine

    def transaction(self, request: TransactionRequest) -> Result[CauldronDocument, TransactionError]:
        return self._engine.run(request)

    def document(self) -> Result[CauldronDocument, TransactionError]:
        return self._engine.read()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_descriptors(
        self,
        *,
        only_non_released: bool = False,
        within: NativeApplicationDescriptor | None = None,
    ) -> Result[list[NativeApplicationDescriptor], TransactionError]:
        return self.document().map(
            lambda doc: doc.descriptors(only_non_released=only_non_released, within=within)
        )

    def has_descriptor(self, descriptor: NativeApplicationDescriptor) -> Result[bool, TransactionError]:
        return self.document().map(lambda doc: doc.has_descriptor(descriptor))

    def get_native_dependencies(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[list[Dependency], QueryError]:
        return self.document().flat_map(lambda doc: doc.native_dependencies(descriptor))

    def get_container_miniapps(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[list[PackagePath], QueryError]:
        return self.document().flat_map(lambda doc: doc.miniapps(descriptor))

    def get_container_version(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[str, QueryError]:
        return self.document().flat_map(lambda doc: doc.container_version(descriptor))

    def get_binary_store_config(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[BinaryStoreConfig | None, QueryError]:
        return self.document().flat_map(
            lambda doc: doc.require_version(descriptor).map(lambda v: v.binary_store)
        )

    # -------------------------------------------------------------------------
    # One-shot mutations
    # -------------------------------------------------------------------------

    def add_native_app_version(
        self,
        descriptor: NativeApplicationDescriptor,
        *,
        container_version: str = DEFAULT_CONTAINER_VERSION,
    ) -> Result[CauldronDocument, TransactionError]:
        return self.transaction(
            TransactionRequest(
                mutate=lambda doc: doc.add_version(descriptor, container_version=container_version),
                commit_message=f"Create {descriptor} native application version",
                descriptor=descriptor,
            )
        )

    def add_dependencies(
        self, descriptor: NativeApplicationDescriptor, dependencies: Sequence[Dependency]
    ) -> Result[CauldronDocument, TransactionError]:
        message: str | list[str]
        if len(dependencies) == 1:
            message = f"Add {dependencies[0]} native dependency to {descriptor}"
        else:
            message = [
                f"Add native dependencies to {descriptor}",
                *(f"- {dep}" for dep in dependencies),
            ]
        return self.transaction(
            TransactionRequest(
                mutate=lambda doc: doc.sync_native_dependencies(descriptor, dependencies),
                commit_message=message,
                descriptor=descriptor,
            )
        )

    def mark_released(
        self, descriptor: NativeApplicationDescriptor
    ) -> Result[CauldronDocument, TransactionError]:
        return self.transaction(
            TransactionRequest(
                mutate=lambda doc: doc.mark_released(descriptor),
                commit_message=f"Mark {descriptor} as released",
                descriptor=descriptor,
            )
        )

    def set_binary_store(
        self, descriptor: NativeApplicationDescriptor, url: str
    ) -> Result[CauldronDocument, TransactionError]:
        return self.transaction(
            TransactionRequest(
                mutate=lambda doc: doc.set_binary_store(descriptor, BinaryStoreConfig(url=url)),
                commit_message=f"Set binary store of {descriptor}",
                descriptor=descriptor,
            )
        )

    # -------------------------------------------------------------------------
    # Local state
    # -------------------------------------------------------------------------

    def clear_working_copy(self) -> bool:
        """Delete the local clone; the next operation clones it again."""
        return remove_tree(self._ctx.working_copy)
