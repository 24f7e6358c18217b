"""Read-modify-write cycles against the shared Cauldron remote.

One transaction:
    1. take the process-wide lock (fail fast if held)
    2. init the working copy if needed, fetch the tracked branch
    3. hard-reset to the remote state (bootstrapping an empty remote once)
    4. load + migrate the document
    5. run the caller's mutation on the in-memory document
    6. save, stage, commit, tag, push
    7. surface a refused push as SyncError, without retrying
    8. release the lock

Nothing is written to the working copy before the mutation has succeeded.
A failed commit or push is rolled back by resetting the working copy to the
remote state; a refused push leaves the remote untouched.

A commit whose push was refused is dropped at once rather than left
committed-but-unpushed for the next fetch to discard. Either way the next
transaction starts from the remote state; resetting immediately also keeps
`read()` and the working copy from showing a commit nobody else can see.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ern.cauldron.context import CauldronContext
from ern.cauldron.errors import (
    LockContentionError,
    SyncError,
    SyncStep,
    TransactionAbortedError,
    TransactionError,
)
from ern.cauldron.model import CauldronDocument
from ern.cauldron.schema import DOCUMENT_FILE, load_document, save_document
from ern.core.result import Err, Ok, Result
from ern.git.repository import GitError
from ern.identity.descriptor import NativeApplicationDescriptor
from ern.output.console import Style

__all__ = [
    "BOOTSTRAP_FILE",
    "Mutation",
    "TransactionEngine",
    "TransactionRequest",
    "transaction_in_progress",
]

BOOTSTRAP_FILE = "README.md"
BOOTSTRAP_CONTENT = "### Cauldron Repository\n"
BOOTSTRAP_MESSAGE = "First Commit!"

type Mutation = Callable[[CauldronDocument], Result[object, object] | None]

_TRANSACTION_LOCK = threading.Lock()


def transaction_in_progress() -> bool:
    return _TRANSACTION_LOCK.locked()


@dataclass(frozen=True, slots=True)
class TransactionRequest:
    """What a caller wants committed.

    Attributes:
        mutate: Applied to the freshly synced document. Returning Err or
            raising aborts the transaction.
        commit_message: Commit message, or its lines.
        descriptor: Version the transaction targets (needed for container_version).
        tag: Optional tag to create and push with the commit.
        container_version: Applied to descriptor once mutate has succeeded.
    """

    mutate: Mutation
    commit_message: str | Sequence[str]
    descriptor: NativeApplicationDescriptor | None = None
    tag: str | None = None
    container_version: str | None = None

    @property
    def message(self) -> str:
        if isinstance(self.commit_message, str):
            return self.commit_message
        return "\n".join(self.commit_message)


def _sync_error(step: SyncStep, error: GitError) -> SyncError:
    return SyncError(step=step, message=f"git {error.command} failed", hint=error.message or None)


class TransactionEngine:
    """Serializes mutations of the Cauldron document.

    The engine holds no document between calls: every run starts from the
    remote's state.
    """

    def __init__(self, context: CauldronContext) -> None:
        self._ctx = context

    @property
    def context(self) -> CauldronContext:
        return self._ctx

    def run(self, request: TransactionRequest) -> Result[CauldronDocument, TransactionError]:
        """Run one transaction; returns the document as committed and pushed."""
        if not _TRANSACTION_LOCK.acquire(blocking=False):
            return Err(LockContentionError())
        try:
            return self._run_locked(request)
        finally:
            _TRANSACTION_LOCK.release()

    def run_transaction(
        self,
        mutate: Mutation,
        message: str | Sequence[str],
        *,
        descriptor: NativeApplicationDescriptor | None = None,
        tag: str | None = None,
        container_version: str | None = None,
    ) -> Result[CauldronDocument, TransactionError]:
        return self.run(
            TransactionRequest(
                mutate=mutate,
                commit_message=message,
                descriptor=descriptor,
                tag=tag,
                container_version=container_version,
            )
        )

    def read(self) -> Result[CauldronDocument, TransactionError]:
        """Sync with the remote and load the document without changing anything."""
        if not _TRANSACTION_LOCK.acquire(blocking=False):
            return Err(LockContentionError())
        try:
            synced = self._sync()
            if isinstance(synced, Err):
                return synced
            return self._load()
        finally:
            _TRANSACTION_LOCK.release()

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _run_locked(self, request: TransactionRequest) -> Result[CauldronDocument, TransactionError]:
        synced = self._sync()
        if isinstance(synced, Err):
            return synced

        loaded = self._load()
        if isinstance(loaded, Err):
            return loaded
        doc = loaded.value

        applied = self._apply(doc, request)
        if isinstance(applied, Err):
            self._ctx.console.print("mutation failed, nothing committed", Style.DIM)
            return applied

        persisted = self._persist(doc, request)
        if isinstance(persisted, Err):
            self._rollback()
            return persisted
        return Ok(doc)

    def _sync(self) -> Result[None, SyncError]:
        ctx = self._ctx
        vcs = ctx.vcs
        console = ctx.console

        if not vcs.exists():
            console.print(f"git init {ctx.working_copy}", Style.DIM)
            init = vcs.init(ctx.remote, ctx.repository, ctx.branch)
            if isinstance(init, Err):
                return Err(_sync_error("init", init.error))

        remote = vcs.set_remote_url(ctx.remote, ctx.repository)
        if isinstance(remote, Err):
            return Err(_sync_error("remote", remote.error))

        console.print(f"git fetch {ctx.remote} {ctx.branch}", Style.DIM)
        fetched = vcs.fetch(ctx.remote, ctx.branch)
        if isinstance(fetched, Err):
            if fetched.error.kind != "no_remote_ref":
                return Err(_sync_error("fetch", fetched.error))
            bootstrapped = self._bootstrap()
            if isinstance(bootstrapped, Err):
                return bootstrapped

        console.print(f"git reset --hard {ctx.tracking_ref}", Style.DIM)
        reset = vcs.reset_hard(ctx.tracking_ref)
        if isinstance(reset, Err):
            return Err(_sync_error("reset", reset.error))
        return Ok(None)

    def _bootstrap(self) -> Result[None, SyncError]:
        """Give an empty remote its first commit, then fetch it."""
        ctx = self._ctx
        vcs = ctx.vcs
        ctx.console.info(f"{ctx.repository} has no history yet, creating first commit")

        marker = ctx.working_copy / BOOTSTRAP_FILE
        try:
            if not marker.exists():
                marker.write_text(BOOTSTRAP_CONTENT, encoding="utf-8")
        except OSError as e:
            return Err(SyncError(step="bootstrap", message=f"failed to write {marker}", hint=str(e)))

        steps: tuple[tuple[SyncStep, Callable[[], Result[None, GitError]]], ...] = (
            ("add", lambda: vcs.add([BOOTSTRAP_FILE])),
            ("commit", lambda: vcs.commit(BOOTSTRAP_MESSAGE)),
            ("push", lambda: vcs.push(ctx.remote, ctx.branch)),
            ("fetch", lambda: vcs.fetch(ctx.remote, ctx.branch)),
        )
        for step, action in steps:
            result = action()
            if isinstance(result, Err):
                return Err(_sync_error(step, result.error))
        return Ok(None)

    def _load(self) -> Result[CauldronDocument, TransactionError]:
        loaded = load_document(self._ctx.document_path)
        if isinstance(loaded, Err):
            return loaded
        return Ok(loaded.value)

    def _apply(
        self, doc: CauldronDocument, request: TransactionRequest
    ) -> Result[None, TransactionAbortedError]:
        try:
            outcome = request.mutate(doc)
        except Exception as e:  # noqa: BLE001
            return Err(TransactionAbortedError(message="Cauldron update failed", cause=e))

        if isinstance(outcome, Err):
            return Err(TransactionAbortedError(message="Cauldron update failed", cause=outcome.error))

        if request.container_version is not None:
            if request.descriptor is None:
                return Err(
                    TransactionAbortedError(
                        message="a container version requires a target descriptor",
                    )
                )
            updated = doc.set_container_version(request.descriptor, request.container_version)
            if isinstance(updated, Err):
                return Err(
                    TransactionAbortedError(
                        message="failed to set container version",
                        cause=updated.error,
                    )
                )
        return Ok(None)

    def _rollback(self) -> None:
        """Drop a local commit or write that did not reach the remote."""
        ctx = self._ctx
        ctx.console.print(f"git reset --hard {ctx.tracking_ref}", Style.DIM)
        reset = ctx.vcs.reset_hard(ctx.tracking_ref)
        if isinstance(reset, Err):
            ctx.console.warning(f"could not restore the working copy: {reset.error.message}")

    def _persist(
        self, doc: CauldronDocument, request: TransactionRequest
    ) -> Result[None, TransactionError]:
        ctx = self._ctx
        vcs = ctx.vcs
        console = ctx.console

        saved = save_document(ctx.document_path, doc)
        if isinstance(saved, Err):
            return saved

        console.print(f"git add {DOCUMENT_FILE}", Style.DIM)
        added = vcs.add([DOCUMENT_FILE])
        if isinstance(added, Err):
            return Err(_sync_error("add", added.error))

        message = request.message
        console.print(f"git commit -m {message.splitlines()[0] if message else ''}", Style.DIM)
        committed = vcs.commit(message)
        if isinstance(committed, Err):
            return Err(_sync_error("commit", committed.error))

        tags: tuple[str, ...] = ()
        if request.tag is not None:
            console.print(f"git tag {request.tag}", Style.DIM)
            tagged = vcs.tag(request.tag)
            if isinstance(tagged, Err):
                return Err(_sync_error("tag", tagged.error))
            tags = (request.tag,)

        console.print(f"git push {ctx.remote} {ctx.branch}", Style.DIM)
        pushed = vcs.push(ctx.remote, ctx.branch, tags=tags)
        if isinstance(pushed, Err):
            error = pushed.error
            hint = error.message or None
            if error.kind == "rejected":
                hint = "The Cauldron changed remotely; run the command again."
            return Err(SyncError(step="push", message="git push failed", hint=hint))
        return Ok(None)
