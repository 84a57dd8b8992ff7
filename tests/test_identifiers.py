"""Tests for job identifiers."""

import re
from unittest.mock import patch

import pytest

from cavectl_core.errors import EnvironmentFailure
from cavectl_core.identifiers import (
    MAX_TRIES,
    random_words,
    new_uuid,
    generate_id,
)


class TestRandomWords:
    """Test random name generation."""

    def test_three_words(self):
        assert len(random_words(3, "-").split("-")) == 3

    def test_single_word(self):
        assert "-" not in random_words(1)

    def test_custom_separator(self):
        assert len(random_words(3, "_").split("_")) == 3

    @patch("cavectl_core.identifiers.petname.generate", return_value="calmly-brave-otter")
    def test_uses_petname(self, generate):
        assert random_words() == "calmly-brave-otter"
        generate.assert_called_once_with(3, "-")

    def test_zero_count_rejected(self):
        with pytest.raises(ValueError):
            random_words(0)


class TestGenerateId:
    """Test collision-free job ID generation."""

    def test_empty_directory(self, tmp_path):
        job_id = generate_id(tmp_path)

        assert len(job_id.split("-")) == 3
        assert not (tmp_path / job_id).exists()

    def test_skips_existing_entries(self, tmp_path):
        (tmp_path / "calmly-brave-otter").mkdir()

        with patch(
            "cavectl_core.identifiers.petname.generate",
            side_effect=["calmly-brave-otter", "gently-bold-lynx"],
        ):
            assert generate_id(tmp_path) == "gently-bold-lynx"

    def test_files_count_as_collisions(self, tmp_path):
        (tmp_path / "calmly-brave-otter").write_text("")

        with patch(
            "cavectl_core.identifiers.petname.generate",
            side_effect=["calmly-brave-otter", "gently-bold-lynx"],
        ):
            assert generate_id(tmp_path) == "gently-bold-lynx"

    def test_falls_back_to_uuid(self, tmp_path):
        (tmp_path / "calmly-brave-otter").mkdir()

        with patch("cavectl_core.identifiers.petname.generate", return_value="calmly-brave-otter") as words:
            job_id = generate_id(tmp_path)

        assert words.call_count == MAX_TRIES
        assert re.fullmatch(r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{12}", job_id)

    def test_uuid_failure_is_fatal(self, tmp_path):
        (tmp_path / "calmly-brave-otter").mkdir()

        with patch("cavectl_core.identifiers.petname.generate", return_value="calmly-brave-otter"), \
                patch("cavectl_core.identifiers.uuid.uuid4", side_effect=OSError("no entropy")):
            with pytest.raises(EnvironmentFailure):
                generate_id(tmp_path)


class TestNewUuid:
    """Test UUID generation."""

    def test_unique(self):
        assert new_uuid() != new_uuid()

    def test_random_source_failure(self):
        with patch("cavectl_core.identifiers.uuid.uuid4", side_effect=NotImplementedError):
            with pytest.raises(EnvironmentFailure):
                new_uuid()
