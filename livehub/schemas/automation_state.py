"""Automation channel enums."""

from enum import Enum


class AutomationState(str, Enum):
    """Connection state of the scene automation channel.

    State Transition Flow:

    DISCONNECTED → CONNECTING → CONNECTED
                       ↓
                  DISCONNECTED

    - DISCONNECTED: Initial state, and the state after a failed connect attempt.
    - CONNECTING: A connect attempt is in flight.
    - CONNECTED: The automation client answered the handshake.

    Scene-switch call failures never move the state; only connect attempts do.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"

    def __str__(self) -> str:
        return self.value


class AutomationTrigger(str, Enum):
    """Lifecycle transition that caused a scene switch."""

    START = "start"
    STOP = "stop"

    def __str__(self) -> str:
        return self.value


class AutomationOutcome(str, Enum):
    OK = "ok"
    FAILED = "failed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    DROPPED = "dropped"

    def __str__(self) -> str:
        return self.value


__all__ = ["AutomationOutcome", "AutomationState", "AutomationTrigger"]
