"""Tests for catalog reconciliation."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from cavectl_core import Game, Upload, Build, CatalogApiError
from cavectl_core.access import GameAccess
from cavectl_core.errors import (
    NoCompatibleUploadsError,
    NotFoundError,
    OperationAbortedError,
    ValidationError,
)
from cavectl_core.job import JobDraft
from cavectl_core.prompts import PickUploadResult, ExternalUploadResult
from cavectl_core.reconciler import CatalogReconciler
from cavectl_core.uploads import UploadsFilterResult


def make_draft(**kwargs):
    defaults = dict(
        id="calmly-brave-otter",
        reason="install",
        staging_folder=Path("/tmp/staging"),
        game=Game(id=42),
        access=GameAccess(api_key="k", credentials={"download_key_id": 5}),
        install_folder=Path("/tmp/install"),
    )
    defaults.update(kwargs)
    return JobDraft(**defaults)


class TestReconcile:
    """Test settling game, upload and build."""

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.get_game.return_value = Game(id=42, title="Overland")
        return client

    @pytest.fixture
    def chooser(self):
        return MagicMock()

    @pytest.fixture
    def confirmer(self):
        confirmer = MagicMock()
        confirmer.confirm_external_upload.return_value = ExternalUploadResult(accept=True)
        return confirmer

    @pytest.fixture
    def reconciler(self, client, chooser, confirmer):
        return CatalogReconciler(client, chooser, confirmer, platform="linux")

    def test_game_refreshed(self, reconciler, client):
        upload = Upload(id=1, size=10, build=Build(id=11))
        client.get_filtered_uploads.return_value = UploadsFilterResult(uploads=[upload])

        draft = reconciler.reconcile(make_draft())

        assert draft.game.title == "Overland"
        client.get_game.assert_called_once_with(42, {"download_key_id": 5})

    def test_game_refresh_failure_tolerated(self, reconciler, client):
        client.get_game.side_effect = CatalogApiError(500, "boom")
        client.get_filtered_uploads.return_value = UploadsFilterResult(
            uploads=[Upload(id=1, size=10, build=Build(id=11))]
        )

        draft = reconciler.reconcile(make_draft(game=Game(id=42, title="Stale")))

        assert draft.game.title == "Stale"
        assert draft.upload.id == 1

    def test_no_compatible_uploads(self, reconciler, client):
        client.get_filtered_uploads.return_value = UploadsFilterResult(
            initial_uploads=[Upload(id=1, platforms=["windows"])],
            uploads=[],
            had_wrong_platform=True,
        )

        with pytest.raises(NoCompatibleUploadsError) as exc_info:
            reconciler.reconcile(make_draft())

        assert exc_info.value.code == 2001

    def test_single_upload_taken_without_asking(self, reconciler, client, chooser):
        client.get_filtered_uploads.return_value = UploadsFilterResult(
            uploads=[Upload(id=1, size=10, build=Build(id=11))]
        )

        draft = reconciler.reconcile(make_draft())

        assert draft.upload.id == 1
        assert draft.build.id == 11
        chooser.pick_upload.assert_not_called()
        client.list_game_uploads.assert_not_called()

    def test_chooser_picks_among_several(self, reconciler, client, chooser):
        uploads = [Upload(id=1, size=10), Upload(id=2, size=10, build=Build(id=22))]
        client.get_filtered_uploads.return_value = UploadsFilterResult(uploads=uploads)
        chooser.pick_upload.return_value = PickUploadResult(index=1)

        draft = reconciler.reconcile(make_draft())

        chooser.pick_upload.assert_called_once_with(uploads)
        assert draft.upload.id == 2
        assert draft.build.id == 22

    def test_cancelled_pick_aborts(self, reconciler, client, chooser, confirmer):
        client.get_filtered_uploads.return_value = UploadsFilterResult(
            uploads=[Upload(id=1), Upload(id=2)]
        )
        chooser.pick_upload.return_value = PickUploadResult(index=-1)

        with pytest.raises(OperationAbortedError):
            reconciler.reconcile(make_draft())

        client.list_game_uploads.assert_not_called()
        confirmer.confirm_external_upload.assert_not_called()

    def test_out_of_range_pick(self, reconciler, client, chooser):
        client.get_filtered_uploads.return_value = UploadsFilterResult(
            uploads=[Upload(id=1), Upload(id=2)]
        )
        chooser.pick_upload.return_value = PickUploadResult(index=2)

        with pytest.raises(ValidationError):
            reconciler.reconcile(make_draft())

    def test_build_refreshed_for_given_upload(self, reconciler, client):
        client.list_game_uploads.return_value = [
            Upload(id=3, size=10),
            Upload(id=7, size=10, build=Build(id=77)),
        ]

        draft = reconciler.reconcile(make_draft(upload=Upload(id=7, size=10)))

        client.get_filtered_uploads.assert_not_called()
        assert draft.build.id == 77

    def test_upload_without_build(self, reconciler, client):
        client.list_game_uploads.return_value = [Upload(id=7, size=10)]

        draft = reconciler.reconcile(make_draft(upload=Upload(id=7, size=10)))

        assert draft.build is None

    def test_given_build_kept(self, reconciler, client):
        draft = reconciler.reconcile(make_draft(upload=Upload(id=7, size=10), build=Build(id=70)))

        client.list_game_uploads.assert_not_called()
        assert draft.build.id == 70

    def test_upload_gone_from_catalog(self, reconciler, client):
        client.list_game_uploads.return_value = [Upload(id=3, size=10)]

        with pytest.raises(NotFoundError, match="Upload not found"):
            reconciler.reconcile(make_draft(upload=Upload(id=7, size=10)))

    def test_external_upload_declined(self, reconciler, client, confirmer):
        external = Upload(id=1, storage="external")
        client.get_filtered_uploads.return_value = UploadsFilterResult(uploads=[external])
        client.list_game_uploads.return_value = [external]
        confirmer.confirm_external_upload.return_value = ExternalUploadResult(accept=False)

        with pytest.raises(OperationAbortedError):
            reconciler.reconcile(make_draft())

        confirmer.confirm_external_upload.assert_called_once_with(external)

    def test_external_upload_accepted(self, reconciler, client, confirmer):
        external = Upload(id=1, storage="external")
        client.get_filtered_uploads.return_value = UploadsFilterResult(uploads=[external])
        client.list_game_uploads.return_value = [external]

        draft = reconciler.reconcile(make_draft())

        assert draft.upload is external
        confirmer.confirm_external_upload.assert_called_once()
