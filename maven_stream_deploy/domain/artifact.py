"""Maven artifact coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .constants import DEFAULT_PACKAGING, SNAPSHOT_SUFFIX


@dataclass(frozen=True)
class ArtifactCoordinates:
    """Represents a Maven artifact coordinate."""

    group_id: str
    artifact_id: str
    version: str
    extension: str = DEFAULT_PACKAGING
    classifier: Optional[str] = None

    @property
    def is_snapshot(self) -> bool:
        return self.version.endswith(SNAPSHOT_SUFFIX)

    @property
    def filename(self) -> str:
        classifier = f"-{self.classifier}" if self.classifier else ""
        return f"{self.artifact_id}-{self.version}{classifier}.{self.extension}"

    @property
    def path_segments(self) -> List[str]:
        group_path = self.group_id.replace(".", "/")
        return [group_path, self.artifact_id, self.version, self.filename]

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.extension]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)
