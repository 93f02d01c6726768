"""Tests for pay history state machine."""

import pytest

from payroll_scheduler.errors import ValidationFailedError
from payroll_scheduler.services.state_machine import (
    LEGACY_STATUS_ALIASES,
    InvalidTransitionError,
    PayHistoryStateMachine,
    PayHistoryStatus,
)


class TestPayHistoryStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # PENDING → PROCESSED
        assert PayHistoryStateMachine.can_transition("PENDING", "PROCESSED") is True

        # PROCESSED → PAID
        assert PayHistoryStateMachine.can_transition("PROCESSED", "PAID") is True

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # Can't skip PROCESSED
        assert PayHistoryStateMachine.can_transition("PENDING", "PAID") is False

        # Can't go backwards
        assert PayHistoryStateMachine.can_transition("PROCESSED", "PENDING") is False

        # PAID is terminal
        assert PayHistoryStateMachine.can_transition("PAID", "PENDING") is False
        assert PayHistoryStateMachine.can_transition("PAID", "PROCESSED") is False

    def test_validate_transition_raises(self):
        """Test that validate_transition raises for invalid transitions."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            PayHistoryStateMachine.validate_transition("PENDING", "PAID")

        assert exc_info.value.from_status == "PENDING"
        assert exc_info.value.to_status == "PAID"

    def test_validate_transition_reports_enum_values(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            PayHistoryStateMachine.validate_transition(
                PayHistoryStatus.PAID, PayHistoryStatus.PENDING
            )
        assert exc_info.value.context == {"from_status": "PAID", "to_status": "PENDING"}

    def test_initial_status(self):
        assert PayHistoryStateMachine.INITIAL_STATUS == PayHistoryStatus.PENDING

    def test_get_next_statuses(self):
        """Test getting valid next statuses."""
        assert PayHistoryStateMachine.get_next_statuses("PENDING") == [PayHistoryStatus.PROCESSED]
        assert PayHistoryStateMachine.get_next_statuses("PAID") == []

    def test_allowed_sources(self):
        assert PayHistoryStateMachine.allowed_sources("PAID") == [PayHistoryStatus.PROCESSED]
        assert PayHistoryStateMachine.allowed_sources("PROCESSED") == [PayHistoryStatus.PENDING]
        assert PayHistoryStateMachine.allowed_sources("PENDING") == []


class TestStatusParsing:
    """Raw status values, including the legacy alias."""

    def test_case_and_whitespace(self):
        assert PayHistoryStateMachine.parse_status(" processed ") == PayHistoryStatus.PROCESSED

    def test_legacy_sent_maps_to_paid(self):
        assert LEGACY_STATUS_ALIASES["SENT"] == PayHistoryStatus.PAID
        assert PayHistoryStateMachine.parse_status("sent") == PayHistoryStatus.PAID
        assert PayHistoryStateMachine.can_transition("PROCESSED", "SENT") is True

    def test_unknown_status_is_validation_error(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            PayHistoryStateMachine.parse_status("ARCHIVED")
        assert exc_info.value.issues[0]["field"] == "status"
