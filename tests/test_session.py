"""Tests for WorkshopSession."""
import json

import pytest

from workshop_uploader.errors import (
    ConfigError,
    InvalidPackageName,
    LocalPreconditionError,
    PackageUnreadable,
)
from workshop_uploader.models import Visibility, WorkshopConfig
from workshop_uploader.orchestrator import OrchestratorState, WorkshopSession
from workshop_uploader.protocols import CreateItemResult, ResultCode, SubmitItemResult


@pytest.fixture
def session(config, api, store, validator, reporter):
    return WorkshopSession(config, api, store=store, validator=validator, reporter=reporter)


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestStart:
    def test_unset_app_id(self, content_root, api):
        session = WorkshopSession(WorkshopConfig(content_root=content_root), api)
        with pytest.raises(ConfigError):
            session.start()

    def test_creates_root_and_lists(self, tmp_path, api):
        root = tmp_path / "fresh"
        session = WorkshopSession(WorkshopConfig(content_root=root, app_id=480), api)
        assert session.start() == []
        assert root.is_dir()


class TestCreatePackage:
    @pytest.mark.asyncio
    async def test_create_requests_remote_item(self, session, api, settle):
        record = session.create_package("demo")

        assert session.active is record
        assert api.count("create_item") == 1
        assert session.orchestrator.state == OrchestratorState.CREATING_ITEM

        api.create_futures[0].set_result(CreateItemResult(ResultCode.OK, item_id=123))
        await settle()

        assert _read(record.source_location)["publishedfileid"] == "123"

    @pytest.mark.asyncio
    async def test_invalid_name_reported(self, session, api, reporter):
        with pytest.raises(InvalidPackageName):
            session.create_package("bad.name")
        assert reporter.current.text.startswith("Invalid mod name")
        assert api.calls == []
        assert session.active is None


class TestSelect:
    def test_select_flushes_previous(self, session, store):
        first = store.create("first")
        second = store.create("second")

        session.select_package(first)
        session.edit_active_fields(title="Edited")
        session.select_package(second)

        assert _read(first.path)["title"] == "Edited"
        assert session.active.title == "second"

    def test_unreadable_keeps_previous(self, session, store, content_root, reporter):
        good = store.create("good")
        (content_root / "bad.workshop.json").write_text("{oops", encoding="utf-8")

        record = session.select_package(good)
        with pytest.raises(PackageUnreadable):
            session.select_package(store.handle_for("bad"))

        assert session.active is record
        assert reporter.current.text.startswith("ERROR:")


class TestEdit:
    def test_requires_active(self, session):
        with pytest.raises(LocalPreconditionError):
            session.edit_active_fields(title="x")

    def test_edit_fields(self, session, store):
        session.select_package(store.create("demo"))
        record = session.edit_active_fields(
            title="Demo",
            description="About",
            visibility=Visibility.PUBLIC,
            tags=["GT", "1990s", "GT"],
            change_note="v2",
        )
        assert record.title == "Demo"
        assert record.description == "About"
        assert record.visibility == Visibility.PUBLIC
        assert record.tags == ["GT", "1990s"]
        assert record.change_note == "v2"

    def test_omitted_fields_untouched(self, session, store):
        session.select_package(store.create("demo"))
        record = session.edit_active_fields(title="Only title")
        assert record.description == "Description goes here"
        assert record.visibility == Visibility.PRIVATE


class TestSubmitActive:
    @pytest.mark.asyncio
    async def test_submit_persists_then_updates(self, session, api, store, settle):
        handle = store.create("demo")
        record = store.load(handle)
        record.identity = 555
        store.save(record)

        session.select_package(handle)
        session.edit_active_fields(title="New title")
        state = session.submit_active(change_note="notes")

        assert state == OrchestratorState.AWAITING_SUBMIT_RESULT
        assert _read(handle.path)["title"] == "New title"
        assert api.calls[-1] == ("submit_item_update", 77, "notes")

        api.submit_futures[0].set_result(SubmitItemResult(ResultCode.OK, item_id=555))
        await settle()
        assert session.orchestrator.state == OrchestratorState.IDLE

    def test_submit_without_active(self, session):
        with pytest.raises(LocalPreconditionError):
            session.submit_active()


class TestCreateWhileReselecting:
    @pytest.mark.asyncio
    async def test_reloaded_copy_keeps_new_identity(self, session, api, store, settle):
        record = session.create_package("a")
        other = store.create("b")
        session.select_package(other)
        session.select_package(store.handle_for("a"))
        assert session.active is not record

        api.create_futures[0].set_result(CreateItemResult(ResultCode.OK, item_id=123))
        await settle()

        assert session.active.identity == 123
        session.shutdown()
        assert store.load(store.handle_for("a")).identity == 123

    @pytest.mark.asyncio
    async def test_other_active_package_untouched(self, session, api, store, settle):
        session.create_package("a")
        session.select_package(store.create("b"))

        api.create_futures[0].set_result(CreateItemResult(ResultCode.OK, item_id=123))
        await settle()
        session.shutdown()

        assert session.active.identity is None
        assert store.load(store.handle_for("b")).identity is None
        assert store.load(store.handle_for("a")).identity == 123


class TestHousekeeping:
    def test_shutdown_persists(self, session, store):
        handle = store.create("demo")
        session.select_package(handle)
        session.edit_active_fields(tags=["GT"])
        session.shutdown()
        assert _read(handle.path)["tags"] == ["GT"]

    def test_shutdown_without_active(self, session):
        session.shutdown()

    def test_refresh_rederives_preview(self, session, store, content_root):
        session.select_package(store.create("demo"))
        assert session.active.preview_file is None

        (content_root / "demo" / "header_image.jpg").write_bytes(b"jpg")
        handles = session.refresh()

        assert session.active.preview_file == "header_image.jpg"
        assert [h.name for h in handles] == ["demo"]

    def test_active_content_path_flushes(self, session, store, content_root):
        handle = store.create("demo")
        session.select_package(handle)
        session.edit_active_fields(description="changed")

        assert session.active_content_path() == content_root / "demo"
        assert _read(handle.path)["description"] == "changed"

    def test_tag_validation_on_flush(self, content_root, api, store, reporter):
        config = WorkshopConfig(
            content_root=content_root, app_id=480,
            validate_tags=True, valid_tags=frozenset({"GT"}),
        )
        session = WorkshopSession(config, api, store=store, reporter=reporter)
        handle = store.create("demo")
        session.select_package(handle)
        session.edit_active_fields(tags=["GT", "bogus"])
        session.shutdown()

        assert _read(handle.path)["tags"] == ["GT"]
