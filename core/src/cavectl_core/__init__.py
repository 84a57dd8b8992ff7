"""cavectl Core - install queue resolution for locally installed games

This is the core library package. It contains no CLI dependencies (click, rich)
and can be used as a standalone library: resolve install requests against the
local cave registry and the remote catalog, and prepare install jobs.
"""

__version__ = "0.1.0"

from .config import Config
from .cave import Cave, InstallLocation
from .models import Game, Upload, Build
from .registry import Registry
from .catalog_api import CatalogAPI, CatalogApiError
from .downloads import DownloadQueue
from .errors import (
    ErrorCode,
    InstallQueueError,
    ValidationError,
    NotFoundError,
    NoCompatibleUploadsError,
    OperationAbortedError,
    EnvironmentFailure,
)
from .job import InstallRequest, InstallQueueResult, ResolvedJob
from .install_queue import InstallQueue, run_guarded

__all__ = [
    # Core classes
    "Config",
    "Cave",
    "InstallLocation",
    "Game",
    "Upload",
    "Build",
    "Registry",
    "CatalogAPI",
    "CatalogApiError",
    "DownloadQueue",
    "InstallQueue",
    "InstallRequest",
    "InstallQueueResult",
    "ResolvedJob",
    "run_guarded",
    # Errors
    "ErrorCode",
    "InstallQueueError",
    "ValidationError",
    "NotFoundError",
    "NoCompatibleUploadsError",
    "OperationAbortedError",
    "EnvironmentFailure",
    # Version
    "__version__",
]
