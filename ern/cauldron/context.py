from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ern.cauldron.schema import DOCUMENT_FILE
from ern.cauldron.vcs import VersionControl, git_version_control
from ern.core.config import DEFAULT_BRANCH, DEFAULT_REMOTE, Config, ConfigError
from ern.core.result import Err, Ok, Result
from ern.output.console import ConsoleProtocol


@dataclass(frozen=True, slots=True)
class CauldronContext:
    """Everything a Cauldron operation needs, passed explicitly.

    Attributes:
        repository: URL of the shared remote.
        vcs: Working copy operations (git, or in-memory for tests).
        console: Where progress is reported.
        branch: Remote branch holding the document.
        remote: Name the remote is registered under in the working copy.
    """

    repository: str
    vcs: VersionControl
    console: ConsoleProtocol
    branch: str = DEFAULT_BRANCH
    remote: str = DEFAULT_REMOTE

    @property
    def working_copy(self) -> Path:
        return self.vcs.path

    @property
    def document_path(self) -> Path:
        return self.vcs.path / DOCUMENT_FILE

    @property
    def tracking_ref(self) -> str:
        return f"{self.remote}/{self.branch}"


def context_from_config(
    config: Config,
    *,
    ern_home: Path,
    console: ConsoleProtocol,
    vcs: VersionControl | None = None,
) -> Result[CauldronContext, ConfigError]:
    """Build the context for the Cauldron selected in config.toml."""
    cauldron = config.cauldron
    if cauldron.repository is None:
        return Err(
            ConfigError(
                "No Cauldron repository is configured "
                "(set [cauldron] repository in config.toml)",
            )
        )

    working_copy = cauldron.working_copy(ern_home)
    return Ok(
        CauldronContext(
            repository=cauldron.repository,
            vcs=vcs if vcs is not None else git_version_control(working_copy),
            console=console,
            branch=cauldron.branch,
            remote=cauldron.remote,
        )
    )
