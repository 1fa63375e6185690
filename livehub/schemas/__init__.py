from .automation_call import AutomationCallResult, AutomationStatus
from .automation_state import AutomationOutcome, AutomationState, AutomationTrigger
from .stream_list import STREAM_LIST_UPDATE, StreamListUpdate

__all__ = [
    "STREAM_LIST_UPDATE",
    "AutomationCallResult",
    "AutomationOutcome",
    "AutomationState",
    "AutomationStatus",
    "AutomationTrigger",
    "StreamListUpdate",
]
