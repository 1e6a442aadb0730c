"""Shared fixtures: a controllable fake of the Remote Publishing API."""
import asyncio
from typing import Dict, List, Optional

import pytest

from workshop_uploader.models import UpdateProgress, WorkshopConfig
from workshop_uploader.services.status import StatusReporter
from workshop_uploader.services.store import PackageStore
from workshop_uploader.services.validator import Validator


class FakePublishingAPI:
    """
    Records every call; futures are resolved by the test.

    `progress` is returned verbatim from get_item_update_progress.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.create_futures: List[asyncio.Future] = []
        self.submit_futures: List[asyncio.Future] = []
        self.fields: Dict[str, object] = {}
        self.progress = UpdateProgress.idle()
        self.next_handle = 77
        self.raise_on_create: Optional[Exception] = None

    def create_item(self, app_id, item_type):
        self.calls.append(("create_item", app_id, item_type))
        if self.raise_on_create is not None:
            raise self.raise_on_create
        future = asyncio.get_running_loop().create_future()
        self.create_futures.append(future)
        return future

    def start_item_update(self, app_id, item_id):
        self.calls.append(("start_item_update", app_id, item_id))
        return self.next_handle

    def _setter(name):
        def setter(self, handle, value):
            self.calls.append((name, handle, value))
            self.fields[name] = value
            return True
        return setter

    set_item_update_language = _setter("set_item_update_language")
    set_item_title = _setter("set_item_title")
    set_item_description = _setter("set_item_description")
    set_item_visibility = _setter("set_item_visibility")
    set_item_content = _setter("set_item_content")
    set_item_preview = _setter("set_item_preview")
    set_item_metadata = _setter("set_item_metadata")
    set_item_tags = _setter("set_item_tags")
    del _setter

    def submit_item_update(self, handle, change_note):
        self.calls.append(("submit_item_update", handle, change_note))
        future = asyncio.get_running_loop().create_future()
        self.submit_futures.append(future)
        return future

    def get_item_update_progress(self, handle):
        self.calls.append(("get_item_update_progress", handle))
        return self.progress

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def _settle():
    """Let done-callbacks scheduled by resolved futures run."""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.fixture
def settle():
    return _settle


@pytest.fixture
def content_root(tmp_path):
    root = tmp_path / "WorkshopContent"
    root.mkdir()
    return root


@pytest.fixture
def config(content_root):
    return WorkshopConfig(content_root=content_root, app_id=480)


@pytest.fixture
def api():
    return FakePublishingAPI()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(content_root):
    return PackageStore(content_root)


@pytest.fixture
def validator(config):
    return Validator.from_config(config)


@pytest.fixture
def reporter(clock):
    return StatusReporter(interval=0.5, clock=clock)
