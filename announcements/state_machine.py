"""
Announcement status state machine.

All transitions are one-way; nothing re-enters pending.
"""
from core.exceptions import InvalidTransition


ANNOUNCEMENT_STATUS_TRANSITIONS = {
    'pending': ['published', 'canceled', 'blocked'],
    'published': ['closed', 'canceled', 'blocked'],
    'closed': [],  # Terminal state
    'canceled': [],  # Terminal state
    'blocked': [],  # Terminal state
}

TERMINAL_STATUSES = frozenset(
    status for status, allowed in ANNOUNCEMENT_STATUS_TRANSITIONS.items() if not allowed
)


def allowed_announcement_transitions(current_status):
    return list(ANNOUNCEMENT_STATUS_TRANSITIONS.get(current_status, []))


def validate_announcement_transition(current_status: str, new_status: str) -> bool:
    """
    Validate that an announcement status transition is allowed.

    Unlike a plain field update, a same-status "transition" is rejected:
    publishing a published announcement is a caller error.

    Raises:
        InvalidTransition if the transition is not in the table
    """
    valid_transitions = allowed_announcement_transitions(current_status)
    if new_status not in valid_transitions:
        raise InvalidTransition(current_status, new_status, valid_transitions)
    return True
