"""
Models for workshop uploader.

PackageRecord is the only mutable model: it is edited in place while it
is the active package. Results and progress snapshots are immutable.
"""
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional


PREVIEW_CANDIDATES = ("header_image.png", "header_image.jpg")
MAX_PREVIEW_BYTES = 1024 * 1024


class Visibility(IntEnum):
    """Remote item visibility, numbered as the remote service stores it."""
    PUBLIC = 0
    FRIENDS_ONLY = 1
    PRIVATE = 2
    UNLISTED = 3


class ItemType(IntEnum):
    COMMUNITY = 0


class UpdateStatus(IntEnum):
    """Phase reported while an item update is being uploaded."""
    INVALID = 0
    PREPARING_CONFIG = 1
    PREPARING_CONTENT = 2
    UPLOADING_CONTENT = 3
    UPLOADING_PREVIEW_FILE = 4
    COMMITTING_CHANGES = 5


UPDATE_STATUS_LABELS = {
    UpdateStatus.PREPARING_CONFIG: "Preparing configuration...",
    UpdateStatus.PREPARING_CONTENT: "Preparing content...",
    UpdateStatus.UPLOADING_CONTENT: "Uploading content...",
    UpdateStatus.UPLOADING_PREVIEW_FILE: "Uploading preview image...",
    UpdateStatus.COMMITTING_CHANGES: "Committing changes...",
}


@dataclass
class PackageRecord:
    """
    One publishable content package.

    `change_note` and `source_location` are transient and never written
    to disk. `preview_file` is derived from the content folder on every
    load, never authored.
    """
    content_folder: str = ""
    identity: Optional[int] = None
    preview_file: Optional[str] = None
    visibility: Visibility = Visibility.PRIVATE
    title: str = "New Mod"
    description: str = "Description goes here"
    metadata: str = ""
    tags: List[str] = field(default_factory=list)
    # transient
    change_note: str = "Version 1.0"
    source_location: Optional[Path] = None

    @property
    def is_published(self) -> bool:
        return self.identity is not None

    def to_dict(self) -> Dict[str, Any]:
        """Persisted representation, keyed as in *.workshop.json."""
        return {
            "publishedfileid": "" if self.identity is None else str(self.identity),
            "contentfolder": self.content_folder,
            "previewfile": self.preview_file or "",
            "visibility": int(self.visibility),
            "title": self.title,
            "description": self.description,
            "metadata": self.metadata,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageRecord":
        """
        Build a record from its persisted representation.

        Missing keys fall back to defaults. Raises ValueError or TypeError
        when a present field has the wrong shape.
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")

        defaults = cls()
        raw_id = str(data.get("publishedfileid", "") or "").strip()
        identity = None
        if raw_id:
            if not raw_id.isdigit():
                raise ValueError(f"publishedfileid is not an unsigned integer: {raw_id!r}")
            identity = int(raw_id)

        tags = data.get("tags", [])
        if not isinstance(tags, list):
            raise TypeError("tags must be a list")

        return cls(
            content_folder=str(data.get("contentfolder", defaults.content_folder)),
            identity=identity,
            preview_file=str(data.get("previewfile") or "") or None,
            visibility=Visibility(int(data.get("visibility", defaults.visibility))),
            title=str(data.get("title", defaults.title)),
            description=str(data.get("description", defaults.description)),
            metadata=str(data.get("metadata", defaults.metadata)),
            tags=[str(tag) for tag in tags],
        )


@dataclass(frozen=True)
class PackageHandle:
    """Reference to a package file inside the content root."""
    name: str
    path: Path


@dataclass(frozen=True)
class UpdateProgress:
    """Snapshot of an in-flight item update."""
    status: UpdateStatus = UpdateStatus.INVALID
    bytes_done: int = 0
    bytes_total: int = 0

    @property
    def fraction(self) -> float:
        # INVALID handles carry no meaningful byte counts
        if self.status == UpdateStatus.INVALID or self.bytes_total <= 0:
            return 0.0
        return min(max(self.bytes_done / self.bytes_total, 0.0), 1.0)

    @property
    def label(self) -> Optional[str]:
        return UPDATE_STATUS_LABELS.get(self.status)

    @property
    def active(self) -> bool:
        return self.status != UpdateStatus.INVALID

    @classmethod
    def idle(cls) -> "UpdateProgress":
        return cls()


class PublishPhase(Enum):
    CREATE = "create"
    SUBMIT = "submit"


class OutcomeCategory(Enum):
    SUCCESS = "success"
    TRANSPORT = "transport"
    LEGAL_AGREEMENT = "legal_agreement"
    REMOTE_REJECTION = "remote_rejection"


class ErrorKind(Enum):
    """Stable failure kinds independent of raw remote result codes."""
    IO_FAILURE = "io_failure"
    LEGAL_AGREEMENT_REQUIRED = "legal_agreement_required"
    BANNED = "banned"
    INSUFFICIENT_PRIVILEGE = "insufficient_privilege"
    NOT_LOGGED_ON = "not_logged_on"
    TIMEOUT = "timeout"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INVALID_PARAM = "invalid_param"
    ACCESS_DENIED = "access_denied"
    QUOTA_EXCEEDED = "quota_exceeded"
    NOT_FOUND = "not_found"
    DUPLICATE_REQUEST = "duplicate_request"
    DUPLICATE_NAME = "duplicate_name"
    SERVICE_READ_ONLY = "service_read_only"
    LOCKING_FAILED = "locking_failed"
    GENERIC_FAILURE = "generic_failure"


@dataclass(frozen=True)
class PublishOutcome:
    """Immutable, classified result of a create or submit request."""
    phase: PublishPhase
    category: OutcomeCategory
    message: str
    kind: Optional[ErrorKind] = None
    item_id: Optional[int] = None
    url: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.category == OutcomeCategory.SUCCESS

    @classmethod
    def ok(cls, phase: PublishPhase, item_id: int, message: str, url: str):
        return cls(
            phase=phase,
            category=OutcomeCategory.SUCCESS,
            message=message,
            item_id=item_id,
            url=url
        )

    @classmethod
    def fail(
        cls,
        phase: PublishPhase,
        category: OutcomeCategory,
        kind: ErrorKind,
        message: str,
        url: Optional[str] = None
    ):
        return cls(
            phase=phase,
            category=category,
            message=message,
            kind=kind,
            url=url
        )


@dataclass(frozen=True)
class WorkshopConfig:
    """Immutable configuration for the uploader."""
    content_root: Path = Path("WorkshopContent")
    app_id: int = 0  # 0 means unset
    item_type: ItemType = ItemType.COMMUNITY
    language: str = "english"
    validate_tags: bool = False
    valid_tags: FrozenSet[str] = frozenset()
    max_preview_bytes: int = MAX_PREVIEW_BYTES
    status_interval: float = 0.5
    poll_interval: float = 0.1

    @property
    def has_app_id(self) -> bool:
        return self.app_id > 0
