"""Tests for AutomationStateMachine transitions."""

import pytest

from livehub.domain.live.automation.automation_state_machine import AutomationStateMachine
from livehub.schemas import AutomationState
from livehub.utils.app_errors import AppError, AppErrorCode


class TestCanTransition:
    def test_disconnected_to_connecting_valid(self):
        assert (
            AutomationStateMachine.can_transition(
                AutomationState.DISCONNECTED, AutomationState.CONNECTING
            )
            is True
        )

    def test_connecting_to_connected_valid(self):
        assert (
            AutomationStateMachine.can_transition(
                AutomationState.CONNECTING, AutomationState.CONNECTED
            )
            is True
        )

    def test_connecting_to_disconnected_valid(self):
        """A failed connect attempt falls back to DISCONNECTED."""
        assert (
            AutomationStateMachine.can_transition(
                AutomationState.CONNECTING, AutomationState.DISCONNECTED
            )
            is True
        )

    def test_disconnected_to_connected_invalid(self):
        """Must go through CONNECTING."""
        assert (
            AutomationStateMachine.can_transition(
                AutomationState.DISCONNECTED, AutomationState.CONNECTED
            )
            is False
        )

    def test_connected_is_never_demoted(self):
        assert AutomationStateMachine.get_valid_transitions(AutomationState.CONNECTED) == set()
        assert (
            AutomationStateMachine.can_transition(
                AutomationState.CONNECTED, AutomationState.DISCONNECTED
            )
            is False
        )


class TestEnsureTransition:
    def test_returns_target_state(self):
        assert (
            AutomationStateMachine.ensure_transition(
                AutomationState.DISCONNECTED, AutomationState.CONNECTING
            )
            is AutomationState.CONNECTING
        )

    def test_invalid_transition_raises(self):
        with pytest.raises(AppError) as exc_info:
            AutomationStateMachine.ensure_transition(
                AutomationState.CONNECTED, AutomationState.DISCONNECTED
            )

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_STATE_TRANSITION.value
        assert exc_info.value.status_code == 409
