"""Pipeline state machine.

`transition` is pure: it maps the current state and an event to the next
state and rejects anything the flow does not allow. The orchestrator performs
the side effects and feeds the resulting events back in.
"""

from enum import Enum
from typing import Dict, Tuple

from ..models.migration import State


class Flow(str, Enum):
    """Which pipeline is running."""

    ARCHIVE = 'archive'
    MIGRATE = 'migrate'
    MIGRATE_AND_DELETE = 'migrate_and_delete'


class Event(str, Enum):
    """Results fed into the state machine."""

    RESOLVED = 'resolved'
    ACCESS_GRANTED = 'access_granted'
    ALREADY_ARCHIVED = 'already_archived'
    CONFIRMED = 'confirmed'
    DECLINED = 'declined'
    STAGED = 'staged'
    CLONED = 'cloned'
    PUSHED = 'pushed'
    DELETE_CONFIRMED = 'delete_confirmed'
    DELETED = 'deleted'
    ARCHIVED = 'archived'
    FINISHED = 'finished'
    FAILED = 'failed'


class InvalidTransitionError(RuntimeError):
    """Raised when an event is not allowed in the current state."""

    def __init__(self, flow: Flow, state: State, event: Event):
        super().__init__(
            f'Event {event.value} is not allowed in state {state.value} '
            f'of the {flow.value} flow'
        )
        self.flow = flow
        self.state = state
        self.event = event


_COMMON: Dict[Tuple[State, Event], State] = {
    (State.START, Event.RESOLVED): State.IDENTIFIER_RESOLVED,
    (State.IDENTIFIER_RESOLVED, Event.ACCESS_GRANTED): State.ACCESS_VERIFIED,
}

_ARCHIVE: Dict[Tuple[State, Event], State] = {
    **_COMMON,
    (State.ACCESS_VERIFIED, Event.ALREADY_ARCHIVED): State.ALREADY_ARCHIVED,
    (State.ACCESS_VERIFIED, Event.CONFIRMED): State.CONFIRMED_INTENT,
    (State.ALREADY_ARCHIVED, Event.CONFIRMED): State.CONFIRMED_INTENT,
    (State.CONFIRMED_INTENT, Event.ARCHIVED): State.ARCHIVED,
    (State.ARCHIVED, Event.FINISHED): State.DONE,
}

_MIGRATE: Dict[Tuple[State, Event], State] = {
    **_COMMON,
    (State.ACCESS_VERIFIED, Event.CONFIRMED): State.CONFIRMED_INTENT,
    (State.CONFIRMED_INTENT, Event.STAGED): State.STAGED,
    (State.STAGED, Event.CLONED): State.CLONED,
    (State.CLONED, Event.PUSHED): State.PUSHED,
}

_TRANSITIONS: Dict[Flow, Dict[Tuple[State, Event], State]] = {
    Flow.ARCHIVE: _ARCHIVE,
    Flow.MIGRATE: {
        **_MIGRATE,
        (State.PUSHED, Event.FINISHED): State.DONE,
    },
    Flow.MIGRATE_AND_DELETE: {
        **_MIGRATE,
        (State.PUSHED, Event.DELETE_CONFIRMED): State.DELETE_CONFIRMED,
        (State.DELETE_CONFIRMED, Event.DELETED): State.DELETED,
        (State.DELETED, Event.FINISHED): State.DONE,
    },
}

# States in which a yes/no question is asked
_DECLINABLE = {
    Flow.ARCHIVE: {State.ACCESS_VERIFIED, State.ALREADY_ARCHIVED},
    Flow.MIGRATE: {State.ACCESS_VERIFIED},
    Flow.MIGRATE_AND_DELETE: {State.ACCESS_VERIFIED},
}


def transition(flow: Flow, state: State, event: Event) -> State:
    """Compute the state following `event`.

    Raises:
        InvalidTransitionError: If the flow does not allow `event` in `state`
    """
    if state.is_terminal:
        raise InvalidTransitionError(flow, state, event)

    if event is Event.FAILED:
        return State.FAILED

    if event is Event.DECLINED:
        if state in _DECLINABLE[flow]:
            return State.CANCELLED
        raise InvalidTransitionError(flow, state, event)

    try:
        return _TRANSITIONS[flow][(state, event)]
    except KeyError:
        raise InvalidTransitionError(flow, state, event) from None
