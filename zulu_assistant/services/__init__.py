from zulu_assistant.services.result import Result
from zulu_assistant.services.state_machine import (
    ClarificationState,
    InvalidTransitionError,
    ask_for_gender,
    can_transition,
    gender_received,
    state_for,
    transition,
)
