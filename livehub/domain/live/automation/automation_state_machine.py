"""Automation channel state machine."""

from livehub.schemas import AutomationState
from livehub.utils.app_errors import AppError, AppErrorCode, HttpStatusCode


class AutomationStateMachine:
    """Valid transitions of the automation channel.

    State flow with triggers:
    - DISCONNECTED -> CONNECTING (connect attempt started)
    - CONNECTING -> CONNECTED (handshake succeeded) | DISCONNECTED (handshake failed or timed out)
    - CONNECTED has no outgoing transition: scene-switch failures never demote it,
      and reconnection is not attempted.
    """

    TRANSITIONS: dict[AutomationState, set[AutomationState]] = {
        AutomationState.DISCONNECTED: {AutomationState.CONNECTING},
        AutomationState.CONNECTING: {
            AutomationState.CONNECTED,
            AutomationState.DISCONNECTED,
        },
        AutomationState.CONNECTED: set(),
    }

    @classmethod
    def can_transition(cls, current: AutomationState, new: AutomationState) -> bool:
        """Check if state transition is valid.

        Args:
            current: Current automation state
            new: Target state to transition to

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def ensure_transition(cls, current: AutomationState, new: AutomationState) -> AutomationState:
        """Return `new` if the transition is valid, otherwise raise AppError."""
        if not cls.can_transition(current, new):
            raise AppError(
                errcode=AppErrorCode.E_INVALID_STATE_TRANSITION,
                errmesg=f"Invalid automation state transition: {current} -> {new}",
                status_code=HttpStatusCode.CONFLICT,
            )
        return new

    @classmethod
    def get_valid_transitions(cls, state: AutomationState) -> set[AutomationState]:
        return cls.TRANSITIONS.get(state, set())
