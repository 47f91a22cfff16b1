from .artifact import ArtifactCoordinates
from .models import DeployConfig, DeployOptions, Repository, StreamedFile

__all__ = [
    "ArtifactCoordinates",
    "DeployConfig",
    "DeployOptions",
    "Repository",
    "StreamedFile",
]
