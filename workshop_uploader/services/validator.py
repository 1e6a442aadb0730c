"""Validator - pre-submission checks on a package record."""
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import PreviewMissing, PreviewTooLarge, ValidationError
from ..models import MAX_PREVIEW_BYTES, PackageRecord

logger = logging.getLogger(__name__)


class Validator:
    """
    Checks preview size and tag legality.

    Only reads the filesystem; the one mutation is sanitize_tags, which
    edits the record's tag list in place.
    """

    def __init__(
        self,
        content_root: Path,
        valid_tags: Optional[Iterable[str]] = None,
        validate_tags: bool = False,
        max_preview_bytes: int = MAX_PREVIEW_BYTES,
    ):
        self._content_root = Path(content_root)
        self._valid_tags = frozenset(valid_tags or ())
        self._validate_tags = validate_tags
        self._max_preview_bytes = max_preview_bytes

    @classmethod
    def from_config(cls, config) -> "Validator":
        return cls(
            config.content_root,
            valid_tags=config.valid_tags,
            validate_tags=config.validate_tags,
            max_preview_bytes=config.max_preview_bytes,
        )

    def validate(self, record: PackageRecord) -> None:
        """Raise a ValidationError if the record cannot be submitted."""
        if not record.preview_file:
            return

        path = self._content_root / record.content_folder / record.preview_file
        try:
            size = path.stat().st_size
        except FileNotFoundError as e:
            raise PreviewMissing(f"Preview file not found: {path}") from e
        except OSError as e:
            raise ValidationError(f"Cannot read preview file {path}: {e}") from e

        if size >= self._max_preview_bytes:
            raise PreviewTooLarge(path, size, self._max_preview_bytes)

    def sanitize_tags(self, record: PackageRecord) -> List[str]:
        """Drop tags outside the allow-list. Returns the removed tags."""
        if not self._validate_tags:
            return []

        kept, removed = [], []
        for tag in record.tags:
            (kept if tag in self._valid_tags else removed).append(tag)
        for tag in removed:
            logger.warning("Removing invalid tag: %s", tag)
        record.tags[:] = kept
        return removed
