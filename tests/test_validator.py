"""Tests for Validator."""
from pathlib import Path
from unittest.mock import patch

import pytest

from workshop_uploader.errors import PreviewMissing, PreviewTooLarge, ValidationError
from workshop_uploader.models import PackageRecord
from workshop_uploader.services.validator import Validator

MB = 1024 * 1024


def _record_with_preview(content_root, size):
    folder = content_root / "demo"
    folder.mkdir(exist_ok=True)
    (folder / "header_image.png").write_bytes(b"\0" * size)
    return PackageRecord(content_folder="demo", preview_file="header_image.png")


class TestValidate:
    def test_no_preview_passes(self, content_root):
        Validator(content_root).validate(PackageRecord(content_folder="demo"))

    def test_preview_at_limit_fails(self, content_root):
        record = _record_with_preview(content_root, MB)
        with pytest.raises(PreviewTooLarge) as exc_info:
            Validator(content_root).validate(record)
        assert exc_info.value.size == MB

    def test_preview_below_limit_passes(self, content_root):
        record = _record_with_preview(content_root, MB - 1)
        Validator(content_root).validate(record)

    def test_preview_removed_after_refresh(self, content_root):
        record = PackageRecord(content_folder="demo", preview_file="header_image.png")
        with pytest.raises(PreviewMissing):
            Validator(content_root).validate(record)

    def test_custom_limit(self, content_root):
        record = _record_with_preview(content_root, 10)
        with pytest.raises(PreviewTooLarge):
            Validator(content_root, max_preview_bytes=10).validate(record)


class TestSanitizeTags:
    def test_disabled_is_noop(self, content_root):
        record = PackageRecord(tags=["GT", "bogus"])
        removed = Validator(content_root, valid_tags={"GT"}, validate_tags=False).sanitize_tags(record)
        assert removed == []
        assert record.tags == ["GT", "bogus"]

    def test_enabled_drops_unknown_and_keeps_order(self, content_root):
        record = PackageRecord(tags=["1990s", "bogus", "GT", "other"])
        validator = Validator(content_root, valid_tags={"GT", "1990s", "F1"}, validate_tags=True)

        removed = validator.sanitize_tags(record)

        assert record.tags == ["1990s", "GT"]
        assert removed == ["bogus", "other"]

    def test_enabled_mutates_in_place(self, content_root):
        tags = ["bogus"]
        record = PackageRecord(tags=tags)
        Validator(content_root, valid_tags=set(), validate_tags=True).sanitize_tags(record)
        assert tags == []
        assert record.tags is tags

    def test_from_config(self, config):
        validator = Validator.from_config(config)
        record = PackageRecord(tags=["anything"])
        validator.sanitize_tags(record)
        assert record.tags == ["anything"]


class TestUnreadablePreview:
    def test_stat_failure_is_a_validation_error(self, content_root):
        record = _record_with_preview(content_root, 10)
        with patch.object(Path, "stat", side_effect=PermissionError("denied")):
            with pytest.raises(ValidationError) as exc_info:
                Validator(content_root).validate(record)
        assert "denied" in str(exc_info.value)
        assert not isinstance(exc_info.value, PreviewMissing)
