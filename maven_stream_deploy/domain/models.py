"""Dataclasses describing deploy configuration, streamed files and options."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Mapping, Optional, Union

from .artifact import ArtifactCoordinates
from .constants import CHUNK_SIZE, CONFIG_KEY_ALIASES, DEFAULT_PACKAGING

FileContents = Union[bytes, BinaryIO, None]


@dataclass(frozen=True)
class Repository:
    """A remote artifact destination, identified the way settings.xml names it."""

    id: str = ""
    url: str = ""

    @classmethod
    def from_value(cls, value: Any) -> "Repository":
        if isinstance(value, Repository):
            return value
        if isinstance(value, Mapping):
            return cls(id=value.get("id") or "", url=value.get("url") or "")
        return cls()

    def as_dict(self) -> Dict[str, str]:
        return {"id": self.id, "url": self.url}


@dataclass
class DeployConfig:
    repositories: List[Repository] = field(default_factory=list)
    artifact_id: Optional[str] = None
    group_id: Optional[str] = None
    version: Optional[str] = None
    classifier: Optional[str] = None
    snapshot: bool = False
    generate_pom: bool = True
    verify: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    _FIELDS = (
        "artifact_id",
        "group_id",
        "version",
        "classifier",
        "snapshot",
        "generate_pom",
        "verify",
    )

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "DeployConfig":
        """Build a config from plugin-style mappings (camelCase or snake_case keys).

        Unknown keys are kept in ``extra`` and passed through to the deployer.
        """
        data = dict(data or {})
        raw_repos = data.pop("repositories", None) or []
        if isinstance(raw_repos, (str, bytes, Mapping)):
            raw_repos = [raw_repos]
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            name = CONFIG_KEY_ALIASES.get(key, key)
            if name in cls._FIELDS:
                kwargs[name] = value
            else:
                extra[key] = value
        return cls(
            repositories=[Repository.from_value(item) for item in raw_repos],
            extra=extra,
            **kwargs,
        )

    @classmethod
    def coerce(cls, value: Union["DeployConfig", Mapping[str, Any], None]) -> "DeployConfig":
        if isinstance(value, DeployConfig):
            return value
        return cls.from_mapping(value)


@dataclass(frozen=True, eq=False)
class StreamedFile:
    """A file moving through the pipeline.

    ``contents`` may be raw bytes, a binary file object (read once), or
    ``None`` when the content should be read from ``path`` on disk.
    """

    path: Path
    contents: FileContents = None
    base: Optional[Path] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        if self.base is not None:
            object.__setattr__(self, "base", Path(self.base))

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def extension(self) -> str:
        return self.path.suffix[1:]

    @property
    def relative(self) -> Path:
        if self.base is not None:
            try:
                return self.path.relative_to(self.base)
            except ValueError:
                pass
        return Path(self.path.name)

    def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        if self.contents is None:
            with open(self.path, "rb") as fh:
                yield from iter(lambda: fh.read(chunk_size), b"")
        elif isinstance(self.contents, (bytes, bytearray, memoryview)):
            view = memoryview(self.contents)
            for offset in range(0, len(view), chunk_size):
                yield bytes(view[offset : offset + chunk_size])
        else:
            yield from iter(lambda: self.contents.read(chunk_size), b"")


@dataclass
class DeployOptions:
    """Per-file options handed to the deployer's ``configure`` step."""

    artifact_id: str
    type: str = DEFAULT_PACKAGING
    group_id: Optional[str] = None
    version: Optional[str] = None
    classifier: Optional[str] = None
    generate_pom: bool = True
    repositories: List[Repository] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def repository(self, repository_id: str) -> Optional[Repository]:
        for repo in self.repositories:
            if repo.id == repository_id:
                return repo
        return None

    def coordinates(self, version: str) -> ArtifactCoordinates:
        return ArtifactCoordinates(
            group_id=self.group_id or "",
            artifact_id=self.artifact_id,
            version=version,
            extension=self.type,
            classifier=self.classifier,
        )

    def as_dict(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = dict(self.extra)
        merged.update(
            {
                "groupId": self.group_id,
                "artifactId": self.artifact_id,
                "type": self.type,
                "version": self.version,
                "classifier": self.classifier,
                "generatePom": self.generate_pom,
                "repositories": [repo.as_dict() for repo in self.repositories],
            }
        )
        return {key: value for key, value in merged.items() if value is not None}
