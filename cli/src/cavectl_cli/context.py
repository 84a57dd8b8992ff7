"""CLI context management for cavectl.

Provides a context object that holds references to core components
and is passed through Click commands via the pass decorator.
"""

import logging
from dataclasses import dataclass

from cavectl_core import Config, Registry, DownloadQueue, InstallQueue
from cavectl_core.auth import AuthStore
from cavectl_core.prompts import UploadChooser, ExternalUploadConfirmer

logger = logging.getLogger(__name__)


@dataclass
class CliContext:
    """Context object passed through Click commands.

    Keeps core components as pure library code; the CLI only adds
    presentation and prompts.
    """
    config: Config
    registry: Registry
    downloads: DownloadQueue

    @classmethod
    def create(cls) -> "CliContext":
        """Create a new CLI context with default configuration."""
        config = Config()
        return cls(
            config=config,
            registry=Registry(config),
            downloads=DownloadQueue(config),
        )

    @property
    def auth_store(self) -> AuthStore:
        return AuthStore(key_file=self.config.api_key_file)

    def get_install_queue(
        self,
        chooser: UploadChooser,
        confirmer: ExternalUploadConfirmer,
    ) -> InstallQueue:
        """Get an InstallQueue wired to this context's registry and queue."""
        return InstallQueue(
            registry=self.registry,
            config=self.config,
            chooser=chooser,
            confirmer=confirmer,
            download_queue=self.downloads,
        )
