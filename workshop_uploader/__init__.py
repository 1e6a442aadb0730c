"""
Workshop uploader - manage content packages and publish them to the workshop.

Packages live as <name>.workshop.json records next to their content
folders in a single content root. Publishing is two-phase: the first
submit creates the remote item, later submits push metadata and content.
Remote results arrive asynchronously; progress is polled once per tick.

Usage:
    from workshop_uploader import WorkshopSession, load_config
    from workshop_uploader.services import DryRunPublishingAPI

    config = load_config()
    session = WorkshopSession(config, DryRunPublishingAPI())
    session.start()

    # Create package + remote item
    session.create_package("demo")

    # Later: push an update
    session.edit_active_fields(title="Demo", tags=["GT"])
    session.submit_active(change_note="First release")
    while session.orchestrator.busy:
        progress = session.tick()
        await asyncio.sleep(config.poll_interval)
    print(session.orchestrator.last_outcome)
"""
from .config import load_config
from .errors import (
    ConfigError,
    InvalidPackageName,
    LocalPreconditionError,
    PackageUnreadable,
    PreviewMissing,
    PreviewTooLarge,
    StoreError,
    TransportError,
    ValidationError,
    WorkshopError,
)
from .models import (
    ErrorKind,
    OutcomeCategory,
    PackageHandle,
    PackageRecord,
    PublishOutcome,
    PublishPhase,
    UpdateProgress,
    UpdateStatus,
    Visibility,
    WorkshopConfig,
)
from .orchestrator import OrchestratorState, UploadOrchestrator, WorkshopSession
from .protocols import CreateItemResult, IRemotePublishingAPI, ResultCode, SubmitItemResult
from .services import PackageStore, StatusReporter, Validator

__version__ = "0.1.0"
__all__ = [
    # Main
    "UploadOrchestrator",
    "WorkshopSession",
    "OrchestratorState",
    "load_config",
    # Models
    "PackageRecord",
    "PackageHandle",
    "Visibility",
    "UpdateStatus",
    "UpdateProgress",
    "PublishOutcome",
    "PublishPhase",
    "OutcomeCategory",
    "ErrorKind",
    "WorkshopConfig",
    # Remote API boundary
    "IRemotePublishingAPI",
    "CreateItemResult",
    "SubmitItemResult",
    "ResultCode",
    # Services
    "PackageStore",
    "StatusReporter",
    "Validator",
    # Errors
    "WorkshopError",
    "ConfigError",
    "StoreError",
    "InvalidPackageName",
    "PackageUnreadable",
    "ValidationError",
    "PreviewTooLarge",
    "PreviewMissing",
    "TransportError",
    "LocalPreconditionError",
]
