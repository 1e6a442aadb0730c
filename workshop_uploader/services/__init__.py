"""Services for workshop uploader."""
from .dry_run import DryRunPublishingAPI
from .status import StatusMessage, StatusReporter
from .store import PackageStore
from .taxonomy import classify_create_result, classify_submit_result
from .validator import Validator

__all__ = [
    "DryRunPublishingAPI",
    "PackageStore",
    "StatusMessage",
    "StatusReporter",
    "Validator",
    "classify_create_result",
    "classify_submit_result",
]
