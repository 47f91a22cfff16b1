"""Stream adapter: stage each file, hand it to the deployer, forward it."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Union,
)

from maven_stream_deploy.deploy import ArtifactDeployer, ArtifactProbe, MavenCliDeployer
from maven_stream_deploy.domain import DeployConfig, DeployOptions, StreamedFile
from maven_stream_deploy.exceptions import DeployError
from maven_stream_deploy.settings import Settings, get_settings
from .options import build_file_options, validate_config
from .staging import StagingArea

ConfigInput = Union[DeployConfig, Mapping[str, Any]]
FileInput = Union[StreamedFile, str, "os.PathLike[str]"]
FileSource = Union[Iterable[FileInput], AsyncIterable[FileInput]]

_EXHAUSTED = object()


class DeployStream:
    """Deploys (or installs) every file passed through it and forwards it unchanged.

    The configuration is validated here, so an invalid configuration never
    yields a stream. Each file runs as its own task:
    stage -> configure -> deploy per repository -> remove temp file -> forward.
    """

    def __init__(
        self,
        config: ConfigInput,
        deployer: Optional[ArtifactDeployer] = None,
        *,
        install: bool = False,
        settings: Optional[Settings] = None,
        staging: Optional[StagingArea] = None,
        probe: Optional[ArtifactProbe] = None,
    ) -> None:
        self.config = DeployConfig.coerce(config)
        validate_config(self.config, require_repositories=not install)
        self.install_mode = install
        self.settings = settings or get_settings()
        self.deployer = deployer or MavenCliDeployer(self.settings)
        self.staging = staging or StagingArea(self.settings.staging_dir)
        self._probe = probe
        self._owns_probe = probe is None
        self.log = logging.getLogger(self.__class__.__name__)

    async def process(self, file: FileInput) -> StreamedFile:
        """Run the full pipeline for one file and return it on success."""
        file = _as_streamed_file(file)
        options = build_file_options(file, self.config)
        async with self.staging.stage(file) as temp_path:
            self.deployer.configure(options)
            if self.install_mode:
                self.log.info("Installing %s as %s:%s", file.path, options.group_id, options.artifact_id)
                await _issue(self.deployer.install, temp_path)
            else:
                await self._deploy_all(file, temp_path)
            if self.config.verify and not self.install_mode:
                await self._verify(options)
        self.log.info("Finished %s artifact=%s type=%s", file.relative, options.artifact_id, options.type)
        return file

    async def _deploy_all(self, file: StreamedFile, temp_path: os.PathLike) -> None:
        repositories = self.config.repositories
        self.log.info(
            "Deploying %s to %s",
            file.path,
            ", ".join(repo.id for repo in repositories),
        )
        calls = [
            _issue(self.deployer.deploy, repo.id, temp_path, self.config.snapshot)
            for repo in repositories
        ]
        results = await asyncio.gather(*calls, return_exceptions=True)
        failures = [
            (repo, result)
            for repo, result in zip(repositories, results)
            if isinstance(result, BaseException)
        ]
        if not failures:
            return
        for repo, exc in failures[1:]:
            self.log.error("Deploy of %s to %s also failed: %s", file.path, repo.id, exc)
        repo, exc = failures[0]
        self.log.error("Deploy of %s to %s failed: %s", file.path, repo.id, exc)
        raise exc

    async def _verify(self, options: DeployOptions) -> None:
        version = options.version or self.settings.default_version
        if not version:
            raise DeployError("Missing artifact version")
        coords = options.coordinates(version)
        if self.config.snapshot or coords.is_snapshot:
            # snapshot uploads get timestamped file names
            self.log.debug("Skipping verification of snapshot %s", coords)
            return
        if self._probe is None:
            self._probe = ArtifactProbe(self.settings)
        for repo in self.config.repositories:
            if not await self._probe.exists(repo, coords):
                raise DeployError(f"Artifact {coords} not found in {repo.id} after deploy")

    async def pipe(self, files: FileSource) -> AsyncIterator[StreamedFile]:
        """Yield each file as soon as its pipeline succeeds, in completion order.

        The source and the running files are awaited together, so a finished
        file is forwarded even while the source is still waiting for input.
        After the first failure no more input is read; files already in
        flight run to completion and successful ones are still yielded, then
        the failure is raised.
        """
        source = _aiter(files)
        pending: Dict[asyncio.Task, int] = {}
        next_item: Optional[asyncio.Task] = asyncio.create_task(_next(source))
        failure: Optional[BaseException] = None
        submitted = 0
        try:
            while next_item is not None or pending:
                waiting = set(pending)
                if next_item is not None:
                    waiting.add(next_item)
                await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

                for task in sorted(_finished(pending), key=pending.__getitem__):
                    del pending[task]
                    exc = _task_error(task)
                    if exc is None:
                        yield task.result()
                    elif failure is None:
                        failure = exc
                    else:
                        self.log.error("Discarding failure after earlier error: %s", exc)

                if next_item is not None and failure is not None:
                    await _cancel(next_item)
                    next_item = None
                elif next_item is not None and next_item.done():
                    exc = _task_error(next_item)
                    if exc is None and next_item.result() is _EXHAUSTED:
                        next_item = None
                    elif exc is not None:
                        failure, next_item = exc, None
                    else:
                        pending[asyncio.create_task(self.process(next_item.result()))] = submitted
                        submitted += 1
                        next_item = asyncio.create_task(_next(source))
            if failure is not None:
                raise failure
        finally:
            if next_item is not None:
                await _cancel(next_item)
            await source.aclose()
            if pending:
                await self._drain(pending)
            await self.aclose()

    async def collect(self, files: FileSource) -> List[StreamedFile]:
        return [file async for file in self.pipe(files)]

    def run(self, files: FileSource) -> List[StreamedFile]:
        """Blocking wrapper around :meth:`collect`."""
        return asyncio.run(self.collect(files))

    async def _drain(self, pending: Iterable[asyncio.Task]) -> None:
        # only reached when the consumer stops early; nothing can be yielded
        tasks = list(pending)
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                self.log.error("Discarding failure after consumer stopped: %s", result)
            else:
                self.log.warning("Deployed %s but the consumer stopped before it was forwarded", result.path)

    def cleanup(self) -> None:
        self.staging.cleanup()

    async def aclose(self) -> None:
        self.cleanup()
        if self._owns_probe and self._probe is not None:
            await self._probe.aclose()
            self._probe = None


def deploy(config: ConfigInput, deployer: Optional[ArtifactDeployer] = None, **kwargs: Any) -> DeployStream:
    """Create a stream that deploys every file to each configured repository."""
    return DeployStream(config, deployer, **kwargs)


def install(config: ConfigInput, deployer: Optional[ArtifactDeployer] = None, **kwargs: Any) -> DeployStream:
    """Create a stream that installs every file into the local Maven repository."""
    return DeployStream(config, deployer, install=True, **kwargs)


def _as_streamed_file(file: FileInput) -> StreamedFile:
    if isinstance(file, StreamedFile):
        return file
    return StreamedFile(path=os.fspath(file))


def _issue(call: Callable[..., Awaitable[Any]], *args: Any) -> Awaitable[Any]:
    # a synchronous raise becomes a failed future so sibling calls still run
    try:
        return call(*args)
    except Exception as exc:  # noqa: BLE001
        future = asyncio.get_running_loop().create_future()
        future.set_exception(exc)
        return future


def _finished(tasks: Iterable[asyncio.Task]) -> List[asyncio.Task]:
    return [task for task in tasks if task.done()]


async def _aiter(files: FileSource) -> AsyncIterator[FileInput]:
    if hasattr(files, "__aiter__"):
        async for file in files:
            yield file
    else:
        for file in files:
            yield file


async def _next(source: AsyncIterator[FileInput]) -> Any:
    try:
        return await source.__anext__()
    except StopAsyncIteration:
        return _EXHAUSTED


async def _cancel(task: asyncio.Task) -> None:
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


def _task_error(task: asyncio.Task) -> Optional[BaseException]:
    if task.cancelled():
        return asyncio.CancelledError()
    return task.exception()
