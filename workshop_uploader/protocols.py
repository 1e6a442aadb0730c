"""
Protocols (Interfaces) for Dependency Inversion.

The Remote Publishing API is consumed, never implemented, by the core.
Async requests return asyncio futures that resolve exactly once; the
setters are local and synchronous.
"""
import asyncio
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Protocol, runtime_checkable

from .models import ItemType, UpdateProgress


class ResultCode(IntEnum):
    """Remote result codes the uploader distinguishes (remote numbering)."""
    OK = 1
    FAIL = 2
    NO_CONNECTION = 3
    INVALID_PARAM = 8
    FILE_NOT_FOUND = 9
    DUPLICATE_NAME = 14
    ACCESS_DENIED = 15
    TIMEOUT = 16
    BANNED = 17
    SERVICE_UNAVAILABLE = 20
    NOT_LOGGED_ON = 21
    INSUFFICIENT_PRIVILEGE = 24
    LIMIT_EXCEEDED = 25
    DUPLICATE_REQUEST = 29
    LOCKING_FAILED = 33
    IO_FAILURE = 37
    SERVICE_READ_ONLY = 44


@dataclass(frozen=True)
class CreateItemResult:
    """Delivered when a create-item request completes."""
    result_code: int
    item_id: int = 0
    legal_agreement_pending: bool = False
    io_failure: bool = False


@dataclass(frozen=True)
class SubmitItemResult:
    """Delivered when a submit-update request completes."""
    result_code: int
    item_id: int = 0
    legal_agreement_pending: bool = False
    io_failure: bool = False


@runtime_checkable
class IRemotePublishingAPI(Protocol):
    """Interface for the remote workshop service."""

    def create_item(self, app_id: int, item_type: ItemType) -> "asyncio.Future[CreateItemResult]":
        """Request a new remote item id."""
        ...

    def start_item_update(self, app_id: int, item_id: int) -> int:
        """Open an update handle for an existing item."""
        ...

    def set_item_update_language(self, handle: int, language: str) -> bool:
        ...

    def set_item_title(self, handle: int, title: str) -> bool:
        ...

    def set_item_description(self, handle: int, description: str) -> bool:
        ...

    def set_item_visibility(self, handle: int, visibility: int) -> bool:
        ...

    def set_item_content(self, handle: int, content_path: str) -> bool:
        ...

    def set_item_preview(self, handle: int, preview_path: str) -> bool:
        ...

    def set_item_metadata(self, handle: int, metadata: str) -> bool:
        ...

    def set_item_tags(self, handle: int, tags: List[str]) -> bool:
        ...

    def submit_item_update(
        self, handle: int, change_note: str
    ) -> "asyncio.Future[SubmitItemResult]":
        """Upload everything set on the handle."""
        ...

    def get_item_update_progress(self, handle: int) -> UpdateProgress:
        """Poll progress; INVALID once the handle has resolved."""
        ...
