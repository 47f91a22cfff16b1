from .base import ArtifactDeployer
from .maven_cli import MavenCliDeployer
from .verify import ArtifactProbe

__all__ = ["ArtifactDeployer", "ArtifactProbe", "MavenCliDeployer"]
