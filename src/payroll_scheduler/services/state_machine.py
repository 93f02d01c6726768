"""Pay history status state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from payroll_scheduler.errors import PayrollError, ValidationFailedError


class PayHistoryStatus(str, Enum):
    """Pay history status values."""

    PENDING = "PENDING"
    PROCESSED = "PROCESSED"
    PAID = "PAID"


# Older clients sent SENT for the terminal state. Accepted on input only.
LEGACY_STATUS_ALIASES: dict[str, PayHistoryStatus] = {
    "SENT": PayHistoryStatus.PAID,
}


class InvalidTransitionError(PayrollError):
    """Raised when an invalid state transition is attempted."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = getattr(from_status, "value", str(from_status))
        self.to_status = getattr(to_status, "value", str(to_status))
        self.reason = reason
        msg = f"Invalid transition from '{self.from_status}' to '{self.to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"from_status": self.from_status, "to_status": self.to_status})


class PayHistoryStateMachine:
    """State machine for pay history status transitions.

    Allowed transitions:
    - PENDING → PROCESSED
    - PROCESSED → PAID

    PENDING is the only initial state. Transitions only happen on an explicit
    status update request.
    """

    INITIAL_STATUS = PayHistoryStatus.PENDING

    VALID_TRANSITIONS: dict[PayHistoryStatus, list[PayHistoryStatus]] = {
        PayHistoryStatus.PENDING: [PayHistoryStatus.PROCESSED],
        PayHistoryStatus.PROCESSED: [PayHistoryStatus.PAID],
        PayHistoryStatus.PAID: [],  # Terminal state
    }

    @classmethod
    def parse_status(cls, value: str | PayHistoryStatus) -> PayHistoryStatus:
        """Map a raw status (including legacy aliases) to a PayHistoryStatus."""
        if isinstance(value, PayHistoryStatus):
            return value
        raw = str(value).strip().upper()
        if raw in LEGACY_STATUS_ALIASES:
            return LEGACY_STATUS_ALIASES[raw]
        try:
            return PayHistoryStatus(raw)
        except ValueError:
            allowed = ", ".join(s.value for s in PayHistoryStatus)
            raise ValidationFailedError.for_field(
                "status", f"status must be one of {allowed} (got '{value}')"
            ) from None

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(cls.parse_status(from_status), [])
        return cls.parse_status(to_status) in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def allowed_sources(cls, to_status: str | PayHistoryStatus) -> list[PayHistoryStatus]:
        """Statuses from which ``to_status`` can be reached in one step."""
        target = cls.parse_status(to_status)
        return [src for src, targets in cls.VALID_TRANSITIONS.items() if target in targets]

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[PayHistoryStatus]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(cls.parse_status(current_status), [])
