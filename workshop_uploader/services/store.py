"""
Package Store - persists package records as *.workshop.json files.

Layout of the content root:

    WorkshopContent/
        demo.workshop.json   <- record
        demo/                <- payload files (content folder)
            header_image.png <- optional preview
"""
import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import List, Optional

from ..errors import InvalidPackageName, PackageUnreadable, StoreError
from ..models import PREVIEW_CANDIDATES, PackageHandle, PackageRecord

logger = logging.getLogger(__name__)

PACKAGE_SUFFIX = ".workshop.json"
PACKAGE_GLOB = f"*{PACKAGE_SUFFIX}"
FORBIDDEN_NAME_CHARS = (".", "/", "\\")


def _file_mode(path: Path) -> int:
    """Mode for a rewritten file: the existing one, else the umask default."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class PackageStore:
    """
    Enumerates, loads, creates and saves package records.

    Usage:
        store = PackageStore(Path("WorkshopContent"))
        handle = store.create("demo")
        record = store.load(handle)
        record.title = "Demo"
        store.save(record)
    """

    def __init__(self, root: Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        logger.debug("Content root is: %s", self._root)
        return self._root

    def handle_for(self, name: str) -> PackageHandle:
        return PackageHandle(name=name, path=self._root / f"{name}{PACKAGE_SUFFIX}")

    def list_packages(self) -> List[PackageHandle]:
        """Non-recursive scan; order is whatever the filesystem yields."""
        if not self._root.is_dir():
            return []
        return [
            PackageHandle(name=path.name[: -len(PACKAGE_SUFFIX)], path=path)
            for path in self._root.glob(PACKAGE_GLOB)
            if path.is_file()
        ]

    def load(self, handle: PackageHandle) -> PackageRecord:
        try:
            data = json.loads(handle.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise PackageUnreadable(f"Cannot read package {handle.name}: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PackageUnreadable(f"Package {handle.name} is not valid JSON: {e}") from e

        try:
            record = PackageRecord.from_dict(data)
        except (TypeError, ValueError) as e:
            raise PackageUnreadable(f"Package {handle.name} is malformed: {e}") from e

        record.source_location = handle.path
        self.refresh_preview(record)
        return record

    def save(self, record: PackageRecord) -> Path:
        """Overwrite the record's file via a temp file in the same directory."""
        if record.source_location is None:
            raise StoreError(f"Package '{record.title}' has no store location")

        path = Path(record.source_location)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(record.to_dict(), indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(tmp_name, _file_mode(path))
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Cannot save package to {path}: {e}") from e

        logger.info("Saved package to file: %s", path)
        return path

    def create(self, name: str) -> PackageHandle:
        """Write a fresh record and create its empty content folder."""
        self.validate_name(name)
        handle = self.handle_for(name)
        if handle.path.exists():
            raise InvalidPackageName(f"Invalid mod name: {name} (package already exists)")

        self.ensure_root()
        record = PackageRecord(content_folder=name, title=name, source_location=handle.path)
        self.save(record)
        (self._root / name).mkdir(exist_ok=True)
        logger.info("Created package %s", name)
        return handle

    @staticmethod
    def validate_name(name: str) -> None:
        if not name or any(ch in name for ch in FORBIDDEN_NAME_CHARS):
            raise InvalidPackageName(f"Invalid mod name: {name}")

    def content_path(self, record: PackageRecord) -> Path:
        return self._root / record.content_folder

    def preview_path(self, record: PackageRecord) -> Optional[Path]:
        if not record.preview_file:
            return None
        return self.content_path(record) / record.preview_file

    def find_preview(self, record: PackageRecord) -> Optional[Path]:
        folder = self.content_path(record)
        for candidate in PREVIEW_CANDIDATES:
            path = folder / candidate
            if path.is_file():
                return path
        return None

    def refresh_preview(self, record: PackageRecord) -> Optional[str]:
        """Re-derive record.preview_file from the content folder."""
        path = self.find_preview(record)
        record.preview_file = path.name if path else None
        return record.preview_file
