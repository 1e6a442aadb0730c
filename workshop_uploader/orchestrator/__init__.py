"""Orchestrator package - coordinates publishing workflows."""
from .core import UploadOrchestrator
from .models import OrchestratorState
from .session import WorkshopSession

__all__ = ["UploadOrchestrator", "OrchestratorState", "WorkshopSession"]
