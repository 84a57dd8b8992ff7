"""Tests for upload narrowing."""

from cavectl_core import Upload, Build
from cavectl_core.uploads import (
    is_compatible,
    narrow_down_uploads,
    upload_is_probably_external,
    format_upload,
)


class TestNarrowDownUploads:
    """Test filtering uploads for a platform."""

    def test_drops_other_platforms(self):
        uploads = [
            Upload(id=1, platforms=["windows"]),
            Upload(id=2, platforms=["linux"]),
        ]

        result = narrow_down_uploads(uploads, "linux")

        assert [u.id for u in result.uploads] == [2]
        assert result.had_wrong_platform
        assert not result.had_untagged
        assert len(result.initial_uploads) == 2

    def test_untagged_uploads_flagged(self):
        result = narrow_down_uploads([Upload(id=1)], "linux")

        assert result.uploads == []
        assert result.had_untagged

    def test_platform_independent_types_kept(self):
        uploads = [Upload(id=1, type="soundtrack"), Upload(id=2, type="html")]

        result = narrow_down_uploads(uploads, "osx")

        assert {u.id for u in result.uploads} == {1, 2}

    def test_demos_dropped_when_full_version_exists(self):
        uploads = [
            Upload(id=1, platforms=["linux"], demo=True),
            Upload(id=2, platforms=["linux"]),
        ]

        result = narrow_down_uploads(uploads, "linux")

        assert [u.id for u in result.uploads] == [2]

    def test_demos_kept_when_alone(self):
        result = narrow_down_uploads([Upload(id=1, platforms=["linux"], demo=True)], "linux")
        assert [u.id for u in result.uploads] == [1]

    def test_executables_and_wharf_first(self):
        uploads = [
            Upload(id=1, type="soundtrack"),
            Upload(id=2, platforms=["linux"]),
            Upload(id=3, platforms=["linux"], build=Build(id=9)),
        ]

        result = narrow_down_uploads(uploads, "linux")

        assert [u.id for u in result.uploads] == [3, 2, 1]

    def test_is_compatible(self):
        assert is_compatible(Upload(id=1, platforms=["windows", "linux"]), "linux")
        assert not is_compatible(Upload(id=1, platforms=["windows"]), "linux")


class TestUploadIsProbablyExternal:
    """Test external upload detection."""

    def test_external_storage(self):
        assert upload_is_probably_external(Upload(id=1, storage="external", size=100))

    def test_hosted_with_content(self):
        assert not upload_is_probably_external(Upload(id=1, size=1024))

    def test_hosted_without_size_or_build(self):
        assert upload_is_probably_external(Upload(id=1))

    def test_wharf_upload_without_size(self):
        assert not upload_is_probably_external(Upload(id=1, build_id=7))
        assert not upload_is_probably_external(Upload(id=1, storage="build"))


class TestFormatUpload:
    def test_includes_name_size_and_build(self):
        upload = Upload(id=5, filename="game.zip", size=2048, platforms=["linux"])
        text = format_upload(upload, Build(id=9, user_version="1.2"))

        assert "#5" in text
        assert "game.zip" in text
        assert "2.0 KiB" in text
        assert "build #9 (1.2)" in text

    def test_from_catalog_platform_mapping(self):
        upload = Upload.from_dict({"id": 5, "platforms": {"linux": "all", "windows": "386"}})
        assert upload.platforms == ["windows", "linux"]
