"""
Local error hierarchy.

Remote rejections are not exceptions: they are classified into
PublishOutcome values by the taxonomy service. These exceptions cover
failures detected on this side of the Remote Publishing API.
"""


class WorkshopError(RuntimeError):
    """Base class for every local workshop error."""


class ConfigError(WorkshopError):
    """Configuration is missing or malformed."""


class StoreError(WorkshopError):
    """Package store failure."""


class InvalidPackageName(StoreError):
    """Package name is empty, contains forbidden characters or is taken."""


class PackageUnreadable(StoreError):
    """Package file is missing or malformed."""


class ValidationError(WorkshopError):
    """Package failed pre-submission checks."""


class PreviewTooLarge(ValidationError):
    """Preview image is at or above the size limit."""

    def __init__(self, path, size: int, limit: int):
        super().__init__(f"Preview file must be <1MB! ({path.name} is {size} bytes, limit {limit})")
        self.path = path
        self.size = size
        self.limit = limit


class PreviewMissing(ValidationError):
    """Preview file disappeared between refresh and submit."""


class TransportError(WorkshopError):
    """The Remote Publishing API could not accept a request."""


class LocalPreconditionError(WorkshopError):
    """Operation is not allowed in the current local state."""
