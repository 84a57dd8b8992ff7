"""Entity resolution: where an install lives and under what identity."""

from pathlib import Path
import logging

from .cave import Cave, InstallLocation
from .errors import ValidationError, NotFoundError
from .folders import make_folder_name, ensure_unique_folder_name
from .identifiers import generate_id, new_uuid
from .job import InstallRequest, JobDraft, REASON_INSTALL
from .registry import Registry

logger = logging.getLogger(__name__)


class EntityResolver:
    """Resolve the cave, install location, staging folder and job ID.

    Reads from the registry but never writes to it: a new cave only exists
    in the returned draft until the orchestrator persists it.
    """

    def __init__(self, registry: Registry):
        self.registry = registry

    def resolve(self, request: InstallRequest) -> JobDraft:
        """Resolve identity and location for a request.

        Raises:
            ValidationError: On missing or inconsistent request fields
            NotFoundError: If the cave or install location does not exist
            EnvironmentFailure: If no identifier or folder name can be made
        """
        reason = request.reason or REASON_INSTALL

        if request.no_cave:
            return self._resolve_no_cave(request, reason)
        return self._resolve_cave(request, reason)

    def _resolve_no_cave(self, request: InstallRequest, reason: str) -> JobDraft:
        if request.game is None:
            raise ValidationError("Missing game in install")
        if not request.staging_folder:
            raise ValidationError("With noCave, stagingFolder must be specified")
        if not request.install_folder:
            raise ValidationError("With noCave, installFolder must be specified")

        # caller owns the staging folder, no need to check for collisions
        return JobDraft(
            id=new_uuid(),
            reason=reason,
            staging_folder=Path(request.staging_folder),
            game=request.game,
            upload=request.upload,
            build=request.build,
            no_cave=True,
            install_folder=Path(request.install_folder),
        )

    def validate_cave(self, cave_id: str) -> Cave:
        """Load a cave and check it is usable.

        Raises:
            ValidationError: If the cave has no game or no install location
            NotFoundError: If the cave does not exist
        """
        if not cave_id:
            raise ValidationError("caveId must be set")

        cave = self.registry.get_cave(cave_id)
        if cave is None:
            raise NotFoundError(f"Cave not found ({cave_id})")
        if cave.game is None:
            raise ValidationError(f"Cave {cave_id} has no game")
        if not cave.install_location_id:
            raise ValidationError(f"Cave {cave_id} has no install location")
        return cave

    def _lookup_location(self, location_id: str) -> InstallLocation:
        location = self.registry.get_install_location(location_id)
        if location is None:
            raise NotFoundError(f"Install location not found ({location_id})")
        return location

    def _resolve_cave(self, request: InstallRequest, reason: str) -> JobDraft:
        cave = None
        if request.cave_id:
            cave = self.validate_cave(request.cave_id)
            request = request.with_defaults(
                game=request.game or cave.game,
                upload=request.upload or cave.upload,
                build=request.build or cave.build,
            )
            location = self._lookup_location(cave.install_location_id)
        else:
            if not request.install_location_id:
                raise ValidationError("When caveId is unspecified, installLocationId must be set")
            location = self._lookup_location(request.install_location_id)

        if request.game is None:
            raise ValidationError("Missing game in install")

        job_id = generate_id(location.path)
        draft = JobDraft(
            id=job_id,
            reason=reason,
            staging_folder=location.staging_folder(job_id),
            game=request.game,
            upload=request.upload,
            build=request.build,
            location=location,
        )

        if cave is None:
            cave = Cave(id=new_uuid(), install_location_id=location.id)
            draft.cave_is_new = True
            logger.debug(f"New cave {cave.id} in {location.id}")

        draft.cave = cave
        draft.install_location_id = cave.install_location_id
        return draft

    def assign_install_folder(self, draft: JobDraft) -> JobDraft:
        """Settle the install folder of a cave draft.

        Runs once the game has been refreshed from the catalog, so a cave
        without a folder name is named after the game's current URL slug.

        Raises:
            EnvironmentFailure: If no unique folder name can be found
        """
        if draft.no_cave:
            return draft

        cave = draft.cave
        if not cave.install_folder_name:
            cave.install_folder_name = make_folder_name(draft.game)
            ensure_unique_folder_name(cave, draft.location)
            draft.cave_changed = True

        draft.install_folder = cave.install_folder(draft.location)
        draft.install_folder_name = cave.install_folder_name

        logger.info(f"Job {draft.id} will install into {draft.install_folder}")
        return draft
