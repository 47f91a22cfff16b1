"""Deploy backend that shells out to the Maven command line."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from pathlib import Path
from typing import Awaitable, List, Optional

from maven_stream_deploy.domain import DeployOptions, Repository
from maven_stream_deploy.domain.constants import SNAPSHOT_SUFFIX
from maven_stream_deploy.exceptions import DeployError
from maven_stream_deploy.settings import Settings, get_settings

INSTALL_GOAL = "install:install-file"
DEPLOY_GOAL = "deploy:deploy-file"


class MavenCliDeployer:
    """Runs ``mvn install:install-file`` / ``mvn deploy:deploy-file`` for staged files.

    The command line is captured when ``install``/``deploy`` is called, so a
    later ``configure`` for another file does not affect calls already issued.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.options: Optional[DeployOptions] = None
        self.log = logging.getLogger(self.__class__.__name__)

    def configure(self, options: DeployOptions) -> None:
        self.options = options

    def install(self, file_path: Path) -> Awaitable[str]:
        command = self._build_command(INSTALL_GOAL, Path(file_path))
        return self._execute(command)

    def deploy(self, repository_id: str, file_path: Path, snapshot: bool = False) -> Awaitable[str]:
        options = self._require_options()
        repo = options.repository(repository_id)
        if repo is None:
            raise DeployError(f"Unknown repository id {repository_id!r}")
        command = self._build_command(DEPLOY_GOAL, Path(file_path), repository=repo, snapshot=snapshot)
        return self._execute(command)

    def _require_options(self) -> DeployOptions:
        if self.options is None:
            raise DeployError("Deployer used before configure()")
        return self.options

    def resolve_version(self, snapshot: bool = False) -> str:
        options = self._require_options()
        version = options.version or self.settings.default_version
        if not version:
            raise DeployError("Missing artifact version")
        if snapshot and not version.endswith(SNAPSHOT_SUFFIX):
            version += SNAPSHOT_SUFFIX
        return version

    def _build_command(
        self,
        goal: str,
        file_path: Path,
        *,
        repository: Optional[Repository] = None,
        snapshot: bool = False,
    ) -> List[str]:
        options = self._require_options()
        if not options.group_id:
            raise DeployError("Missing groupId")
        args = {
            "file": str(file_path),
            "groupId": options.group_id,
            "artifactId": options.artifact_id,
            "version": self.resolve_version(snapshot),
            "packaging": options.type,
            "generatePom": "true" if options.generate_pom else "false",
        }
        if options.classifier:
            args["classifier"] = options.classifier
        if repository is not None:
            args["repositoryId"] = repository.id
            args["url"] = repository.url

        command = [self.settings.mvn_executable, "-B"]
        if self.settings.mvn_settings_file:
            command += ["-s", self.settings.mvn_settings_file]
        command.append(goal)
        command += [f"-D{key}={value}" for key, value in args.items()]
        return command

    def _execute(self, command: List[str]) -> Awaitable[str]:
        return asyncio.to_thread(self._run_mvn, command)

    def _run_mvn(self, command: List[str]) -> str:
        timeout = self.settings.mvn_timeout if self.settings.mvn_timeout > 0 else None
        self.log.info("Executing mvn cmd=%s timeout=%s", command, timeout or "none")
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired as exc:
            self.log.error("mvn timed out after %ss cmd=%s", timeout, command)
            raise DeployError(f"mvn timed out after {timeout}s") from exc
        except OSError as exc:
            raise DeployError(f"Unable to run {command[0]}: {exc}") from exc
        if completed.stdout:
            self.log.debug("mvn stdout: %s", completed.stdout.strip())
        if completed.stderr:
            self.log.warning("mvn stderr: %s", completed.stderr.strip())
        if completed.returncode != 0:
            raise DeployError(_failure_message(completed), output=completed.stdout or "")
        return completed.stdout or ""


def _failure_message(completed: subprocess.CompletedProcess) -> str:
    message = f"mvn exited with code {completed.returncode}"
    for line in (completed.stdout or "").splitlines():
        if line.startswith("[ERROR]"):
            detail = line[len("[ERROR]") :].strip()
            if detail:
                return f"{message}: {detail}"
    return message
