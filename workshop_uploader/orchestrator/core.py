"""Core orchestrator - the create/update/submit state machine."""
import asyncio
import logging
from typing import Optional

from ..errors import LocalPreconditionError, StoreError, TransportError, ValidationError
from ..models import PackageRecord, PublishOutcome, PublishPhase, UpdateProgress, WorkshopConfig
from ..protocols import IRemotePublishingAPI
from ..services.status import StatusReporter
from ..services.store import PackageStore
from ..services.taxonomy import (
    classify_create_result,
    classify_submit_result,
    transport_failure,
)
from ..services.validator import Validator
from ..utils.events import EventEmitter
from .models import OrchestratorState

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """
    Drives one package at a time through the Remote Publishing API.

    States:
        IDLE -> CREATING_ITEM -> ITEM_CREATED
        IDLE | ITEM_CREATED -> PREPARING_UPDATE -> AWAITING_SUBMIT_RESULT -> IDLE

    Nothing here blocks. Requests return futures whose completion
    callbacks run on the event loop; the host calls tick() once per
    scheduling tick to poll upload progress.

    The update handle is owned by this instance: set when an update is
    submitted, cleared only when its result is delivered. Any new work
    while busy is rejected with LocalPreconditionError.

    Events (via `orchestrator.events`):
        "state"   -> OrchestratorState
        "item_created" -> PackageRecord that received its remote id
        "outcome" -> PublishOutcome
    """

    def __init__(
        self,
        api: IRemotePublishingAPI,
        store: PackageStore,
        validator: Validator,
        reporter: StatusReporter,
        config: Optional[WorkshopConfig] = None,
    ):
        self._api = api
        self._store = store
        self._validator = validator
        self._reporter = reporter
        self._config = config or WorkshopConfig()

        self._state = OrchestratorState.IDLE
        self._current_handle: Optional[int] = None
        self._pending_create: Optional[asyncio.Future] = None
        self._pending_submit: Optional[asyncio.Future] = None
        self._record: Optional[PackageRecord] = None
        self._last_outcome: Optional[PublishOutcome] = None
        self.events = EventEmitter()

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state.busy

    @property
    def current_handle(self) -> Optional[int]:
        return self._current_handle

    @property
    def last_outcome(self) -> Optional[PublishOutcome]:
        return self._last_outcome

    def submit(self, record: PackageRecord) -> OrchestratorState:
        """Validate, then create the remote item or push an update."""
        self._ensure_not_busy()
        self._reporter.report("Validating package...")
        try:
            self._validator.validate(record)
        except ValidationError as e:
            self._reporter.error(f"ERROR: {e}")
            self._set_state(OrchestratorState.IDLE)
            raise

        if record.identity is None:
            return self.create_item(record)
        return self._start_update(record)

    def create_item(self, record: PackageRecord) -> OrchestratorState:
        """Request a remote id for a record that has none yet."""
        self._ensure_not_busy()
        if record.identity is not None:
            raise LocalPreconditionError(
                f"Package '{record.title}' already has remote id {record.identity}"
            )

        try:
            future = self._api.create_item(self._config.app_id, self._config.item_type)
        except Exception as e:
            self._fail_transport(PublishPhase.CREATE, e)
            raise TransportError(f"create_item request failed: {e}") from e

        self._record = record
        self._pending_create = future
        self._set_state(OrchestratorState.CREATING_ITEM)
        self._reporter.report("Creating new item...")
        future.add_done_callback(self._on_item_created)
        return self._state

    def tick(self) -> UpdateProgress:
        """Poll progress of the in-flight update, if any."""
        if self._state != OrchestratorState.AWAITING_SUBMIT_RESULT or self._current_handle is None:
            return UpdateProgress.idle()

        progress = self._api.get_item_update_progress(self._current_handle)
        if progress.active and progress.label:
            self._reporter.report(progress.label)
        # INVALID: the handle already resolved, the result callback is due
        return progress

    def _start_update(self, record: PackageRecord) -> OrchestratorState:
        self._set_state(OrchestratorState.PREPARING_UPDATE)
        if record.identity is None:
            self._reporter.error(
                "ERROR: publishedfileid is empty, try creating the workshop item first..."
            )
            self._set_state(OrchestratorState.IDLE)
            raise LocalPreconditionError(f"Package '{record.title}' has no remote id")

        try:
            handle = self._api.start_item_update(self._config.app_id, record.identity)
            self._push_fields(handle, record)
            future = self._api.submit_item_update(handle, record.change_note)
        except Exception as e:
            self._fail_transport(PublishPhase.SUBMIT, e)
            raise TransportError(f"item update request failed: {e}") from e

        self._record = record
        self._current_handle = handle
        self._pending_submit = future
        self._set_state(OrchestratorState.AWAITING_SUBMIT_RESULT)
        self._reporter.report("Submitting item update...")
        future.add_done_callback(self._on_item_submitted)
        return self._state

    def _push_fields(self, handle: int, record: PackageRecord) -> None:
        preview = self._store.preview_path(record)
        self._api.set_item_update_language(handle, self._config.language)
        self._api.set_item_title(handle, record.title)
        self._api.set_item_description(handle, record.description)
        self._api.set_item_visibility(handle, int(record.visibility))
        self._api.set_item_content(handle, str(self._store.content_path(record).resolve()))
        self._api.set_item_preview(handle, str(preview.resolve()) if preview else "")
        self._api.set_item_metadata(handle, "")
        self._api.set_item_tags(handle, list(record.tags))

    def _on_item_created(self, future: asyncio.Future) -> None:
        if future is not self._pending_create:
            logger.warning("Ignoring stale create-item result")
            return
        self._pending_create = None
        record, self._record = self._record, None

        outcome = self._resolve(future, PublishPhase.CREATE, classify_create_result)
        if not outcome.success:
            self._finish(outcome, OrchestratorState.IDLE)
            return

        record.identity = outcome.item_id
        self._validator.sanitize_tags(record)
        try:
            self._store.save(record)
        except StoreError as e:
            # identity stays on the in-memory record; the next flush retries the write
            logger.error(f"Could not persist new item id {record.identity}: {e}")
        self.events.emit("item_created", record)
        self._finish(outcome, OrchestratorState.ITEM_CREATED)

    def _on_item_submitted(self, future: asyncio.Future) -> None:
        if future is not self._pending_submit:
            logger.warning("Ignoring stale submit result")
            return
        self._pending_submit = None
        self._current_handle = None
        self._record = None

        outcome = self._resolve(future, PublishPhase.SUBMIT, classify_submit_result)
        self._finish(outcome, OrchestratorState.IDLE)

    @staticmethod
    def _resolve(future: asyncio.Future, phase: PublishPhase, classify) -> PublishOutcome:
        if future.cancelled():
            return transport_failure(phase, "request cancelled")
        error = future.exception()
        if error is not None:
            logger.error(f"{phase.value} request raised: {error!r}")
            return transport_failure(phase, str(error))
        return classify(future.result())

    def _finish(self, outcome: PublishOutcome, state: OrchestratorState) -> None:
        self._last_outcome = outcome
        if outcome.success:
            self._reporter.report(outcome.message, url=outcome.url)
        else:
            self._reporter.error(outcome.message, url=outcome.url)
        self._set_state(state)
        self.events.emit("outcome", outcome)

    def _fail_transport(self, phase: PublishPhase, error: Exception) -> None:
        logger.error(f"{phase.value} request could not be issued: {error!r}")
        self._current_handle = None
        self._record = None
        self._finish(transport_failure(phase, str(error)), OrchestratorState.IDLE)

    def _ensure_not_busy(self) -> None:
        if self.busy:
            message = f"An upload is already in progress ({self._state.value})"
            self._reporter.error(f"ERROR: {message}")
            raise LocalPreconditionError(message)

    def _set_state(self, state: OrchestratorState) -> None:
        if state == self._state:
            return
        logger.debug(f"state {self._state.value} -> {state.value}")
        self._state = state
        self.events.emit("state", state)
