"""Exceptions raised by the deploy stream and its collaborators."""

from __future__ import annotations


class MavenDeployError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(MavenDeployError, ValueError):
    """The deploy configuration is structurally invalid."""


class DeployError(MavenDeployError, RuntimeError):
    """An install or deploy call failed."""

    def __init__(self, message: str, *, output: str = "") -> None:
        super().__init__(message)
        self.output = output
