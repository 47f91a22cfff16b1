"""Configuration validation and per-file option mapping."""

from __future__ import annotations

from maven_stream_deploy.domain import DeployConfig, DeployOptions, StreamedFile
from maven_stream_deploy.domain.constants import (
    DEFAULT_PACKAGING,
    MISSING_REPOSITORIES,
    MISSING_REPOSITORY_FIELDS,
)
from maven_stream_deploy.exceptions import ConfigurationError


def validate_config(config: DeployConfig, *, require_repositories: bool = True) -> None:
    """Raise ConfigurationError when the repository list is unusable."""
    if not config.repositories:
        if require_repositories:
            raise ConfigurationError(MISSING_REPOSITORIES)
        return
    for repo in config.repositories:
        if not repo.id or not repo.url:
            raise ConfigurationError(MISSING_REPOSITORY_FIELDS)


def build_file_options(file: StreamedFile, config: DeployConfig) -> DeployOptions:
    return DeployOptions(
        artifact_id=config.artifact_id or file.stem,
        type=file.extension or DEFAULT_PACKAGING,
        group_id=config.group_id,
        version=config.version,
        classifier=config.classifier,
        generate_pom=config.generate_pom,
        repositories=list(config.repositories),
        extra=dict(config.extra),
    )
