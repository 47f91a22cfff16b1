"""Stage streamed files and install or deploy them as Maven artifacts."""

from .domain import ArtifactCoordinates, DeployConfig, DeployOptions, Repository, StreamedFile
from .exceptions import ConfigurationError, DeployError, MavenDeployError
from .service import DeployStream, StagingArea, build_file_options, deploy, install, validate_config
from .settings import Settings, get_settings

__all__ = [
    "ArtifactCoordinates",
    "ConfigurationError",
    "DeployConfig",
    "DeployError",
    "DeployOptions",
    "DeployStream",
    "MavenDeployError",
    "Repository",
    "Settings",
    "StagingArea",
    "StreamedFile",
    "build_file_options",
    "deploy",
    "get_settings",
    "install",
    "validate_config",
]
