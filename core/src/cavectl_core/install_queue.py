"""Install queue orchestration.

Turns an install request into a resolved, prepared job:

1. Resolve cave, install location, staging folder and job ID
2. Look up access for the game
3. Refresh the game, name the install folder, then settle upload and build
4. Save the resolved job into the staging folder's job context
5. Prepare the install (no downloads at this stage)
6. Persist the cave, return the result, optionally queue the download
"""

from pathlib import Path
from typing import Any, Callable, Optional, TypeVar
import logging

from .access import access_for_game
from .catalog_api import CatalogAPI
from .config import Config
from .downloads import DownloadQueue
from .errors import EnvironmentFailure, ErrorCode, InstallQueueError, ValidationError
from .job import InstallRequest, InstallQueueResult, JobDraft, ResolvedJob, REASONS
from .job_context import JobContext, CONTEXT_FILE_NAME
from .prepare import InstallPreparer, LocalInstallPreparer
from .prompts import UploadChooser, ExternalUploadConfirmer
from .reconciler import CatalogReconciler
from .registry import Registry
from .resolver import EntityResolver

logger = logging.getLogger(__name__)

QUEUE_SECTION = "install-queue"

ClientFactory = Callable[[str], CatalogAPI]
T = TypeVar("T")


def default_client_factory(config: Config) -> ClientFactory:
    """Build catalog clients from config settings"""
    def factory(api_key: str) -> CatalogAPI:
        return CatalogAPI(
            api_key=api_key,
            base_url=config.catalog_base_url,
            timeout_s=config.catalog_timeout_seconds,
            rate_limit_s=config.catalog_rate_limit_seconds,
        )
    return factory


class InstallQueue:
    """Resolve and prepare install jobs"""

    def __init__(
        self,
        registry: Registry,
        config: Config,
        chooser: UploadChooser,
        confirmer: ExternalUploadConfirmer,
        client_factory: Optional[ClientFactory] = None,
        preparer: Optional[InstallPreparer] = None,
        download_queue: Optional[DownloadQueue] = None,
    ):
        self.registry = registry
        self.config = config
        self.chooser = chooser
        self.confirmer = confirmer
        self.client_factory = client_factory or default_client_factory(config)
        self.preparer = preparer or LocalInstallPreparer(registry)
        self.download_queue = download_queue

    def _validate(self, request: InstallRequest) -> None:
        if request.game is None and not request.cave_id:
            raise ValidationError("Missing game in install")
        if request.reason and request.reason not in REASONS:
            raise ValidationError(f"Unknown reason '{request.reason}' (expected one of {', '.join(REASONS)})")
        if request.queue_download and self.download_queue is None:
            raise ValidationError("queueDownload requested but no download queue is available")

    def queue(self, request: InstallRequest) -> InstallQueueResult:
        """Resolve, persist and prepare an install job.

        Raises:
            ValidationError: On missing or inconsistent request fields
            NotFoundError: If a cave, location or upload has vanished
            NoCompatibleUploadsError: If no upload fits this platform
            OperationAbortedError: If the user cancelled a prompt
            CatalogApiError: If listing uploads fails
            EnvironmentFailure: On non-recoverable conditions, see run_guarded
        """
        self._validate(request)

        resolver = EntityResolver(self.registry)
        draft = resolver.resolve(request)
        draft.access = access_for_game(self.registry, self.config, draft.game.id)

        with self.client_factory(draft.access.api_key) as client:
            reconciler = CatalogReconciler(client, self.chooser, self.confirmer, self.config.platform)
            reconciler.refresh_game(draft)
            # folder names come from the refreshed game's URL slug
            resolver.assign_install_folder(draft)
            reconciler.settle_upload(draft)

        job = draft.finalize()

        with JobContext.load(job.staging_folder) as job_context:
            job_context.save(QUEUE_SECTION, job.to_dict())

            try:
                self.preparer.prepare(job_context, job, allow_downloads=False)
            except Exception:
                logger.error(f"Install preparation failed for job {job.id}, retiring it")
                job_context.retire()
                raise

        self._persist_cave(draft)

        result = InstallQueueResult.from_job(job)

        # a failed enqueue leaves the cave saved and the staging folder in place
        if request.queue_download:
            self.download_queue.queue(result)

        return result

    def _persist_cave(self, draft: JobDraft) -> None:
        if draft.no_cave or draft.cave is None:
            return
        if not (draft.cave_is_new or draft.cave_changed):
            return

        cave = draft.cave
        if draft.cave_is_new:
            cave.game = draft.game
            cave.upload = draft.upload
            cave.build = draft.build
        cave.touch()
        self.registry.save_cave(cave)


def load_job(staging_folder: Path, api_key: str = "") -> Optional[ResolvedJob]:
    """Load a resolved job back from its staging folder, if one was saved.

    Used to resume interrupted jobs, e.g. by `cavectl downloads requeue`.
    The API key is never saved with the job, so callers pass it in.
    """
    if not (Path(staging_folder) / CONTEXT_FILE_NAME).exists():
        return None

    with JobContext.load(staging_folder) as ctx:
        data = ctx.get(QUEUE_SECTION)
    if not data:
        return None
    return ResolvedJob.from_dict(data, api_key=api_key)


def run_guarded(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run an install-queue call, turning fatal failures into a reported error.

    EnvironmentFailure is never handled by intermediate layers; this is the
    one place that catches it, so the process keeps running.
    """
    try:
        return fn(*args, **kwargs)
    except EnvironmentFailure as e:
        logger.exception(f"Non-recoverable failure: {e}")
        raise InstallQueueError(f"Internal error: {e}", code=ErrorCode.INTERNAL) from e
