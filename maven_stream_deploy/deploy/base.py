"""Interface of the collaborator that performs the actual install/deploy."""

from __future__ import annotations

from pathlib import Path
from typing import Awaitable, Protocol

from maven_stream_deploy.domain import DeployOptions


class ArtifactDeployer(Protocol):
    """Common interface for deploy backends.

    ``configure`` applies to the ``deploy``/``install`` calls issued right
    after it. Failures are raised from the returned awaitable.
    """

    def configure(self, options: DeployOptions) -> None:  # pragma: no cover - interface
        ...

    def deploy(self, repository_id: str, file_path: Path, snapshot: bool = False) -> Awaitable[None]:  # pragma: no cover - interface
        ...

    def install(self, file_path: Path) -> Awaitable[None]:  # pragma: no cover - interface
        ...
