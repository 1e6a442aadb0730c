"""Tests for workshop uploader models."""
import pytest
from workshop_uploader.models import (
    ErrorKind,
    OutcomeCategory,
    PackageRecord,
    PublishOutcome,
    PublishPhase,
    UpdateProgress,
    UpdateStatus,
    Visibility,
    WorkshopConfig,
)


class TestPackageRecord:
    def test_defaults(self):
        record = PackageRecord(content_folder="demo")
        assert record.identity is None
        assert record.visibility == Visibility.PRIVATE
        assert record.tags == []
        assert record.is_published is False

    def test_to_dict_uses_persisted_keys_only(self):
        record = PackageRecord(
            content_folder="demo",
            identity=123,
            title="Demo",
            tags=["GT", "1990s"],
            change_note="secret",
        )
        data = record.to_dict()
        assert data == {
            "publishedfileid": "123",
            "contentfolder": "demo",
            "previewfile": "",
            "visibility": 2,
            "title": "Demo",
            "description": "Description goes here",
            "metadata": "",
            "tags": ["GT", "1990s"],
        }

    def test_from_dict_large_id(self):
        record = PackageRecord.from_dict({"publishedfileid": "18446744073709551615"})
        assert record.identity == 2**64 - 1

    def test_from_dict_empty_id_is_absent(self):
        record = PackageRecord.from_dict({"publishedfileid": "", "contentfolder": "x"})
        assert record.identity is None
        assert record.content_folder == "x"

    def test_from_dict_missing_keys_take_defaults(self):
        record = PackageRecord.from_dict({})
        assert record.title == "New Mod"
        assert record.visibility == Visibility.PRIVATE

    @pytest.mark.parametrize("data", [
        {"publishedfileid": "abc"},
        {"publishedfileid": "-5"},
        {"visibility": 9},
        {"tags": "GT"},
        ["not", "an", "object"],
    ])
    def test_from_dict_rejects_bad_fields(self, data):
        with pytest.raises((TypeError, ValueError)):
            PackageRecord.from_dict(data)


class TestUpdateProgress:
    def test_fraction(self):
        progress = UpdateProgress(UpdateStatus.UPLOADING_CONTENT, 50, 200)
        assert progress.fraction == 0.25
        assert progress.label == "Uploading content..."

    def test_zero_total_is_zero(self):
        progress = UpdateProgress(UpdateStatus.PREPARING_CONTENT, 0, 0)
        assert progress.fraction == 0.0

    def test_invalid_status_has_no_ratio(self):
        progress = UpdateProgress(UpdateStatus.INVALID, 10, 0)
        assert progress.fraction == 0.0
        assert progress.active is False
        assert progress.label is None

    def test_fraction_clamped(self):
        assert UpdateProgress(UpdateStatus.UPLOADING_CONTENT, 300, 200).fraction == 1.0


class TestPublishOutcome:
    def test_ok(self):
        outcome = PublishOutcome.ok(PublishPhase.CREATE, 5, "done", "http://x/5")
        assert outcome.success is True
        assert outcome.kind is None
        assert outcome.item_id == 5

    def test_fail(self):
        outcome = PublishOutcome.fail(
            PublishPhase.SUBMIT, OutcomeCategory.REMOTE_REJECTION, ErrorKind.TIMEOUT, "late"
        )
        assert outcome.success is False
        assert outcome.kind == ErrorKind.TIMEOUT

    def test_immutable(self):
        outcome = PublishOutcome.ok(PublishPhase.CREATE, 5, "done", "u")
        with pytest.raises(Exception):
            outcome.item_id = 6


class TestWorkshopConfig:
    def test_default_config(self):
        config = WorkshopConfig()
        assert config.app_id == 0
        assert config.has_app_id is False
        assert config.max_preview_bytes == 1024 * 1024
        assert config.status_interval == 0.5
        assert config.language == "english"
