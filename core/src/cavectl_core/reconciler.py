"""Catalog reconciliation: what exactly is being installed.

Refreshes the game, settles on an upload (asking the chooser when there is
more than one candidate) and a build, and asks for confirmation before
installing an upload hosted outside the catalog.
"""

import logging

from .catalog_api import CatalogAPI
from .catalog_http import CatalogApiError
from .errors import (
    NoCompatibleUploadsError,
    NotFoundError,
    OperationAbortedError,
    ValidationError,
)
from .job import JobDraft
from .prompts import UploadChooser, ExternalUploadConfirmer
from .uploads import upload_is_probably_external, log_upload

logger = logging.getLogger(__name__)


class CatalogReconciler:
    """Fill in game, upload and build on a job draft.

    Must be called without any registry connection open: the chooser and
    confirmer may block indefinitely.
    """

    def __init__(
        self,
        client: CatalogAPI,
        chooser: UploadChooser,
        confirmer: ExternalUploadConfirmer,
        platform: str,
    ):
        self.client = client
        self.chooser = chooser
        self.confirmer = confirmer
        self.platform = platform

    def reconcile(self, draft: JobDraft) -> JobDraft:
        """Resolve game, upload and build in place.

        Raises:
            NoCompatibleUploadsError: If no upload fits this platform
            OperationAbortedError: If the user cancels a prompt
            NotFoundError: If the upload vanished from the catalog
            CatalogApiError: If listing uploads fails
        """
        self.refresh_game(draft)
        return self.settle_upload(draft)

    def settle_upload(self, draft: JobDraft) -> JobDraft:
        """Pick the upload and build, and confirm external uploads.

        Raises:
            Same as reconcile, except for the game refresh
        """
        if draft.upload is None:
            self.pick_upload(draft)

        if draft.build is None:
            self.refresh_build(draft)

        self.check_external(draft)
        return draft

    def _credentials(self, draft: JobDraft):
        return draft.access.credentials if draft.access else None

    def refresh_game(self, draft: JobDraft) -> None:
        """Refresh game info. A stale game is better than no install."""
        try:
            draft.game = self.client.get_game(draft.game.id, self._credentials(draft))
        except CatalogApiError as e:
            logger.warning(f"Could not refresh game info: {e}")

    def pick_upload(self, draft: JobDraft) -> None:
        logger.info("No upload specified, looking for compatible ones...")
        result = self.client.get_filtered_uploads(draft.game, self._credentials(draft), self.platform)

        if not result.uploads:
            logger.error("Didn't find a compatible upload.")
            logger.error(f"The initial {len(result.initial_uploads)} uploads were:")
            for upload in result.initial_uploads:
                log_upload(upload, upload.build)
            raise NoCompatibleUploadsError()

        if len(result.uploads) == 1:
            draft.upload = result.uploads[0]
        else:
            picked = self.chooser.pick_upload(result.uploads)
            if picked.index < 0:
                raise OperationAbortedError("Upload selection cancelled")
            if picked.index >= len(result.uploads):
                raise ValidationError(
                    f"Picked upload index {picked.index} out of range ({len(result.uploads)} uploads)"
                )
            draft.upload = result.uploads[picked.index]

        # the upload was just listed, so its build is the latest one
        if draft.upload.build is not None:
            draft.build = draft.upload.build

    def refresh_build(self, draft: JobDraft) -> None:
        """Settle on the current build of the chosen upload, if it has any."""
        uploads = self.client.list_game_uploads(draft.game.id, self._credentials(draft))

        fresh = next((u for u in uploads if u.id == draft.upload.id), None)
        if fresh is None:
            logger.error("Uh oh, we didn't find that upload on the server:")
            log_upload(draft.upload)
            raise NotFoundError(f"Upload not found ({draft.upload.id})")

        if fresh.build is None:
            logger.info("Upload is not wharf-enabled")
        else:
            logger.info(f"Latest build for upload is {fresh.build.id}")
            draft.build = fresh.build

    def check_external(self, draft: JobDraft) -> None:
        if not upload_is_probably_external(draft.upload):
            return

        logger.info(f"Upload {draft.upload.id} is probably external, asking for confirmation")
        answer = self.confirmer.confirm_external_upload(draft.upload)
        if not answer.accept:
            raise OperationAbortedError("External upload declined")
