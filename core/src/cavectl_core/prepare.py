"""Install preparation.

Preparation decides how a job will be carried out and checks that it can
be, without fetching any content. Fetching is left to the download queue.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, TYPE_CHECKING
import logging
import shutil

import humanize

from .errors import InstallQueueError
from .job import ResolvedJob
from .job_context import JobContext

if TYPE_CHECKING:
    from .registry import Registry

logger = logging.getLogger(__name__)

PREPARE_SECTION = "install-prepare"

STRATEGY_INSTALL = "install"
STRATEGY_REINSTALL = "reinstall"
STRATEGY_UPGRADE = "upgrade"
STRATEGY_HEAL = "heal"


class PrepareError(InstallQueueError):
    """Install preparation failed"""


@dataclass
class InstallPrepareResult:
    """How a job will be installed"""
    strategy: str
    needed_bytes: int = 0
    free_bytes: Optional[int] = None


class InstallPreparer(Protocol):
    """Prepares a resolved job for installation."""

    def prepare(self, job_context: JobContext, job: ResolvedJob, allow_downloads: bool = False) -> InstallPrepareResult:
        ...


def _existing_parent(path: Path) -> Path:
    for candidate in [path, *path.parents]:
        if candidate.exists():
            return candidate
    return path


class LocalInstallPreparer:
    """Chooses an install strategy and checks free disk space"""

    def __init__(self, registry: Optional["Registry"] = None):
        self.registry = registry

    def _strategy(self, job: ResolvedJob) -> str:
        if job.no_cave or not job.cave_id or self.registry is None:
            return STRATEGY_INSTALL

        cave = self.registry.get_cave(job.cave_id)
        if cave is None or cave.upload is None:
            return STRATEGY_INSTALL

        if cave.upload.id == job.upload.id and cave.build and job.build:
            if cave.build.id == job.build.id:
                return STRATEGY_HEAL
            return STRATEGY_UPGRADE

        return STRATEGY_REINSTALL

    def prepare(self, job_context: JobContext, job: ResolvedJob, allow_downloads: bool = False) -> InstallPrepareResult:
        """Prepare a job.

        Raises:
            PrepareError: If the job cannot be installed where it should go
        """
        if allow_downloads:
            logger.debug("Downloads allowed, but content is fetched by the download queue")

        result = InstallPrepareResult(strategy=self._strategy(job), needed_bytes=job.upload.size)

        target = _existing_parent(Path(job.install_folder))
        try:
            result.free_bytes = shutil.disk_usage(target).free
        except OSError as e:
            logger.warning(f"Could not check free space at {target}: {e}")

        if result.free_bytes is not None and result.needed_bytes > result.free_bytes:
            raise PrepareError(
                f"Not enough space at {target}: need {humanize.naturalsize(result.needed_bytes, binary=True)}, "
                f"have {humanize.naturalsize(result.free_bytes, binary=True)}"
            )

        job_context.save(PREPARE_SECTION, {
            'strategy': result.strategy,
            'needed_bytes': result.needed_bytes,
            'allow_downloads': allow_downloads,
            'prepared_at': datetime.now().isoformat(),
        })

        logger.info(f"Prepared job {job.id}: {result.strategy} into {job.install_folder}")
        return result
