from enum import Enum
from typing import Optional


class ClarificationState(str, Enum):
    IDLE = "idle"
    AWAITING_GENDER = "awaiting_gender"


VALID_TRANSITIONS = {
    ClarificationState.IDLE: [ClarificationState.AWAITING_GENDER],
    ClarificationState.AWAITING_GENDER: [ClarificationState.IDLE],
}


class InvalidTransitionError(Exception):
    def __init__(self, from_state: ClarificationState, to_state: ClarificationState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state.value} -> {to_state.value}")


def state_for(pending_clarification: Optional[str]) -> ClarificationState:
    """A session is awaiting a gender exactly while it remembers a query."""
    if pending_clarification is None:
        return ClarificationState.IDLE
    return ClarificationState.AWAITING_GENDER


def can_transition(from_state: ClarificationState, to_state: ClarificationState) -> bool:
    allowed = VALID_TRANSITIONS.get(from_state, [])
    return to_state in allowed


def transition(from_state: ClarificationState, to_state: ClarificationState) -> ClarificationState:
    """Perform state transition. Raises InvalidTransitionError if not allowed."""
    if not can_transition(from_state, to_state):
        raise InvalidTransitionError(from_state, to_state)
    return to_state


def ask_for_gender(current_state: ClarificationState) -> ClarificationState:
    return transition(current_state, ClarificationState.AWAITING_GENDER)


def gender_received(current_state: ClarificationState) -> ClarificationState:
    return transition(current_state, ClarificationState.IDLE)
