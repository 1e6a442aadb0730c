"""Workshop session - the host-facing surface over store and orchestrator."""
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..errors import ConfigError, LocalPreconditionError, StoreError
from ..models import PackageHandle, PackageRecord, UpdateProgress, Visibility, WorkshopConfig
from ..protocols import IRemotePublishingAPI
from ..services.status import StatusReporter
from ..services.store import PackageStore
from ..services.validator import Validator
from .core import UploadOrchestrator
from .models import OrchestratorState

logger = logging.getLogger(__name__)


class WorkshopSession:
    """
    Holds the active package and wires services together.

    Usage:
        session = WorkshopSession(config, api)
        session.start()
        session.create_package("demo")      # also requests a remote id
        ...
        session.edit_active_fields(title="Demo", tags=["GT"])
        session.submit_active(change_note="First release")
        while session.orchestrator.busy:
            progress = session.tick()
            await asyncio.sleep(config.poll_interval)
        session.shutdown()
    """

    def __init__(
        self,
        config: WorkshopConfig,
        api: IRemotePublishingAPI,
        store: Optional[PackageStore] = None,
        validator: Optional[Validator] = None,
        reporter: Optional[StatusReporter] = None,
        orchestrator: Optional[UploadOrchestrator] = None,
    ):
        self._config = config
        self._store = store or PackageStore(config.content_root)
        self._validator = validator or Validator.from_config(config)
        self._reporter = reporter or StatusReporter(interval=config.status_interval)
        self._orchestrator = orchestrator or UploadOrchestrator(
            api, self._store, self._validator, self._reporter, config
        )
        self._active: Optional[PackageRecord] = None
        self._orchestrator.events.on("item_created", self._adopt_identity)

    @property
    def config(self) -> WorkshopConfig:
        return self._config

    @property
    def store(self) -> PackageStore:
        return self._store

    @property
    def reporter(self) -> StatusReporter:
        return self._reporter

    @property
    def orchestrator(self) -> UploadOrchestrator:
        return self._orchestrator

    @property
    def active(self) -> Optional[PackageRecord]:
        return self._active

    def start(self) -> List[PackageHandle]:
        if not self._config.has_app_id:
            raise ConfigError(
                "App ID isn't set! Set WORKSHOP_APP_ID or 'app_id' in the config file."
            )
        self._store.ensure_root()
        return self.list_packages()

    def list_packages(self) -> List[PackageHandle]:
        return self._store.list_packages()

    def create_package(self, name: str) -> PackageRecord:
        """Create a package, make it active and request its remote id."""
        try:
            handle = self._store.create(name)
        except StoreError as e:
            self._reporter.error(str(e))
            raise

        record = self.select_package(handle)
        self._orchestrator.create_item(record)
        return record

    def select_package(self, handle: PackageHandle) -> PackageRecord:
        """Persist the current package, then load and activate another."""
        self._flush()
        try:
            record = self._store.load(handle)
        except StoreError as e:
            self._reporter.error(f"ERROR: {e}")
            raise

        self._active = record
        logger.info(f"Selected package {handle.name}")
        return record

    def edit_active_fields(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
        visibility: Optional[Visibility] = None,
        tags: Optional[Iterable[str]] = None,
        change_note: Optional[str] = None,
    ) -> PackageRecord:
        record = self._require_active()
        if title is not None:
            record.title = title
        if description is not None:
            record.description = description
        if visibility is not None:
            record.visibility = Visibility(visibility)
        if tags is not None:
            record.tags = list(dict.fromkeys(tags))
        if change_note is not None:
            record.change_note = change_note
        return record

    def submit_active(self, change_note: Optional[str] = None) -> OrchestratorState:
        record = self._require_active()
        if change_note is not None:
            record.change_note = change_note
        self._flush()
        return self._orchestrator.submit(record)

    def tick(self) -> UpdateProgress:
        return self._orchestrator.tick()

    def refresh(self) -> List[PackageHandle]:
        """Re-scan packages and re-derive the active preview."""
        if self._active is not None:
            self._store.refresh_preview(self._active)
        return self.list_packages()

    def active_content_path(self) -> Path:
        record = self._require_active()
        self._flush()
        path = self._store.content_path(record)
        logger.debug(f"Browsing to {path}")
        return path

    def shutdown(self) -> None:
        self._flush()

    def _flush(self) -> None:
        if self._active is None or self._active.source_location is None:
            return
        self._validator.sanitize_tags(self._active)
        self._store.save(self._active)

    def _adopt_identity(self, created: PackageRecord) -> None:
        # the active record may be a fresh load of the same file taken while creating
        active = self._active
        if active is None or active is created or active.identity is not None:
            return
        if active.source_location is not None and active.source_location == created.source_location:
            active.identity = created.identity
            logger.info(f"Active package picked up remote id {created.identity}")

    def _require_active(self) -> PackageRecord:
        if self._active is None:
            raise LocalPreconditionError("No package selected")
        return self._active
