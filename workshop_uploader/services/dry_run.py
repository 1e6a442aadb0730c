"""
Dry-run Publishing API - an in-process stand-in for the remote service.

Nothing leaves the machine. Requests resolve on the running event loop,
item ids are allocated sequentially, and each progress poll advances the
simulated upload by one step through every phase before the submit
result is delivered.
"""
import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..models import ItemType, UpdateProgress, UpdateStatus
from ..protocols import CreateItemResult, ResultCode, SubmitItemResult

logger = logging.getLogger(__name__)

_PHASES = (
    UpdateStatus.PREPARING_CONFIG,
    UpdateStatus.PREPARING_CONTENT,
    UpdateStatus.UPLOADING_CONTENT,
    UpdateStatus.UPLOADING_PREVIEW_FILE,
    UpdateStatus.COMMITTING_CHANGES,
)


def _folder_size(path: Path) -> int:
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for name in filenames:
            try:
                total += (Path(dirpath) / name).stat().st_size
            except OSError:
                continue
    return total


@dataclass
class _SimulatedUpdate:
    item_id: int
    fields: Dict[str, object] = field(default_factory=dict)
    content_bytes: int = 0
    future: Optional[asyncio.Future] = None
    phase_index: int = 0
    bytes_done: int = 0


class DryRunPublishingAPI:
    """
    Simulated IRemotePublishingAPI.

    Args:
        first_item_id: id handed out by the first create_item call
        chunk_bytes: bytes "uploaded" per poll during UPLOADING_CONTENT
        create_delay: seconds before a create_item result is delivered
    """

    def __init__(self, first_item_id: int = 1000, chunk_bytes: int = 256 * 1024, create_delay: float = 0.05):
        self._next_item_id = first_item_id
        self._next_handle = 1
        self._chunk_bytes = max(chunk_bytes, 1)
        self._create_delay = create_delay
        self._updates: Dict[int, _SimulatedUpdate] = {}
        self.published: Dict[int, Dict[str, object]] = {}

    def create_item(self, app_id: int, item_type: ItemType) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        item_id = self._next_item_id
        self._next_item_id += 1
        logger.info(f"[dry-run] create_item app={app_id} type={ItemType(item_type).name} -> {item_id}")
        loop.call_later(
            self._create_delay,
            _resolve,
            future,
            CreateItemResult(result_code=ResultCode.OK, item_id=item_id),
        )
        return future

    def start_item_update(self, app_id: int, item_id: int) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._updates[handle] = _SimulatedUpdate(item_id=item_id)
        logger.debug(f"[dry-run] start_item_update item={item_id} -> handle {handle}")
        return handle

    def _set(self, handle: int, key: str, value) -> bool:
        update = self._updates.get(handle)
        if update is None:
            return False
        update.fields[key] = value
        return True

    def set_item_update_language(self, handle: int, language: str) -> bool:
        return self._set(handle, "language", language)

    def set_item_title(self, handle: int, title: str) -> bool:
        return self._set(handle, "title", title)

    def set_item_description(self, handle: int, description: str) -> bool:
        return self._set(handle, "description", description)

    def set_item_visibility(self, handle: int, visibility: int) -> bool:
        return self._set(handle, "visibility", int(visibility))

    def set_item_content(self, handle: int, content_path: str) -> bool:
        if handle in self._updates:
            self._updates[handle].content_bytes = _folder_size(Path(content_path))
        return self._set(handle, "content", content_path)

    def set_item_preview(self, handle: int, preview_path: str) -> bool:
        return self._set(handle, "preview", preview_path)

    def set_item_metadata(self, handle: int, metadata: str) -> bool:
        return self._set(handle, "metadata", metadata)

    def set_item_tags(self, handle: int, tags: List[str]) -> bool:
        return self._set(handle, "tags", list(tags))

    def submit_item_update(self, handle: int, change_note: str) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        update = self._updates.get(handle)
        if update is None:
            future.set_result(SubmitItemResult(result_code=ResultCode.FAIL))
            return future
        update.fields["change_note"] = change_note
        update.future = future
        return future

    def get_item_update_progress(self, handle: int) -> UpdateProgress:
        update = self._updates.get(handle)
        if update is None or update.future is None or update.future.done():
            return UpdateProgress.idle()

        status = _PHASES[update.phase_index]
        if status == UpdateStatus.UPLOADING_CONTENT:
            update.bytes_done = min(update.bytes_done + self._chunk_bytes, update.content_bytes)
            if update.bytes_done >= update.content_bytes:
                update.phase_index += 1
        elif update.phase_index == len(_PHASES) - 1:
            self._finish(handle, update)
        else:
            update.phase_index += 1

        return UpdateProgress(status, update.bytes_done, update.content_bytes)

    def _finish(self, handle: int, update: _SimulatedUpdate) -> None:
        self.published[update.item_id] = dict(update.fields)
        del self._updates[handle]
        logger.info(f"[dry-run] item {update.item_id} published")
        asyncio.get_running_loop().call_soon(
            _resolve,
            update.future,
            SubmitItemResult(result_code=ResultCode.OK, item_id=update.item_id),
        )


def _resolve(future: asyncio.Future, result) -> None:
    if not future.done():
        future.set_result(result)
