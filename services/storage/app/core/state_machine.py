"""Upload lifecycle state machine."""

from services.storage.app.core.schemas import UploadState


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        current_state: UploadState,
        target_state: UploadState,
        message: str | None = None,
    ):
        self.current_state = current_state
        self.target_state = target_state
        self.message = message or f"Invalid transition from {current_state} to {target_state}"
        super().__init__(self.message)


class UploadStateMachine:
    """Upload lifecycle rules.

    Valid transitions:
    - idle -> in_flight (request sent)
    - in_flight -> succeeded (response without error)
    - in_flight -> failed (transport or HTTP error)

    Both outcomes are terminal; there is no retry.
    """

    VALID_TRANSITIONS: set[tuple[UploadState, UploadState]] = {
        (UploadState.IDLE, UploadState.IN_FLIGHT),
        (UploadState.IN_FLIGHT, UploadState.SUCCEEDED),
        (UploadState.IN_FLIGHT, UploadState.FAILED),
    }

    TERMINAL_STATES = frozenset({UploadState.SUCCEEDED, UploadState.FAILED})

    @classmethod
    def is_valid_transition(
        cls,
        current_state: UploadState,
        target_state: UploadState,
    ) -> bool:
        """Check if a state transition is valid."""
        return (current_state, target_state) in cls.VALID_TRANSITIONS

    @classmethod
    def validate_transition(
        cls,
        current_state: UploadState,
        target_state: UploadState,
    ) -> None:
        """Validate a state transition, raising an error if invalid.

        Raises:
            InvalidTransitionError: If transition is not valid
        """
        if not cls.is_valid_transition(current_state, target_state):
            raise InvalidTransitionError(current_state, target_state)

    @classmethod
    def is_terminal_state(cls, state: UploadState) -> bool:
        return state in cls.TERMINAL_STATES


class UploadLifecycle:
    """Current state of one upload attempt."""

    def __init__(self) -> None:
        self.state = UploadState.IDLE

    def transition(self, target_state: UploadState) -> None:
        UploadStateMachine.validate_transition(self.state, target_state)
        self.state = target_state

    @property
    def is_finished(self) -> bool:
        return UploadStateMachine.is_terminal_state(self.state)
