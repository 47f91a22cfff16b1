from .options import build_file_options, validate_config
from .staging import StagingArea
from .stream import DeployStream, deploy, install

__all__ = [
    "DeployStream",
    "StagingArea",
    "build_file_options",
    "deploy",
    "install",
    "validate_config",
]
