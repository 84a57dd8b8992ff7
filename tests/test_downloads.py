"""Tests for the download queue."""

import pytest

from cavectl_core import DownloadQueue, Game, Upload, InstallQueueResult


def make_item(job_id, cave_id="c1"):
    return InstallQueueResult(
        id=job_id,
        cave_id=cave_id,
        game=Game(id=42),
        upload=Upload(id=7),
        build=None,
        install_folder="/games/overland",
        staging_folder=f"/games/downloads/{job_id}",
        reason="install",
    )


class TestDownloadQueue:
    """Test queueing prepared jobs."""

    @pytest.fixture
    def downloads(self, config):
        return DownloadQueue(config)

    def test_positions_increase(self, downloads):
        first = downloads.queue(make_item("a", cave_id="c1"))
        second = downloads.queue(make_item("b", cave_id="c2"))

        assert second.position > first.position
        assert [d.id for d in downloads.list()] == ["a", "b"]

    def test_replaces_pending_download_for_same_cave(self, downloads):
        downloads.queue(make_item("a"))
        downloads.queue(make_item("b"))

        assert [d.id for d in downloads.list()] == ["b"]

    def test_caveless_jobs_never_replace_each_other(self, downloads):
        downloads.queue(make_item("a", cave_id=""))
        downloads.queue(make_item("b", cave_id=""))

        assert len(downloads.list()) == 2

    def test_item_roundtrip(self, downloads):
        downloads.queue(make_item("a"))

        item = downloads.list()[0].item

        assert item.game.id == 42
        assert item.upload.id == 7
        assert item.install_folder == "/games/overland"

    def test_finish_and_clear(self, downloads):
        downloads.queue(make_item("a"))

        assert downloads.mark_finished("a")
        assert downloads.list() == []
        assert downloads.list(include_finished=True)[0].is_finished

        assert downloads.clear_finished() == 1
        assert downloads.list(include_finished=True) == []

    def test_finished_download_kept_on_requeue(self, downloads):
        downloads.queue(make_item("a"))
        downloads.mark_finished("a")
        downloads.queue(make_item("b"))

        assert {d.id for d in downloads.list(include_finished=True)} == {"a", "b"}

    def test_discard(self, downloads):
        downloads.queue(make_item("a"))

        assert downloads.discard("a")
        assert not downloads.discard("a")
