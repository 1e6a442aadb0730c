"""Orchestrator data models."""
from enum import Enum


class OrchestratorState(Enum):
    """Upload state machine states."""
    IDLE = "idle"
    CREATING_ITEM = "creating_item"
    ITEM_CREATED = "item_created"
    PREPARING_UPDATE = "preparing_update"
    AWAITING_SUBMIT_RESULT = "awaiting_submit_result"

    @property
    def busy(self) -> bool:
        """True while a request is outstanding or being assembled."""
        return self in _BUSY_STATES


_BUSY_STATES = frozenset({
    OrchestratorState.CREATING_ITEM,
    OrchestratorState.PREPARING_UPDATE,
    OrchestratorState.AWAITING_SUBMIT_RESULT,
})
