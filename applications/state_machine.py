"""
Application status state machine.
"""
from core.exceptions import InvalidTransition


APPLICATION_STATUS_TRANSITIONS = {
    'pending': ['approved', 'rejected', 'closed'],
    'approved': ['closed'],
    'rejected': ['pending'],  # Reopen by the applicant
    'closed': [],  # Terminal state
}


def allowed_application_transitions(current_status):
    return list(APPLICATION_STATUS_TRANSITIONS.get(current_status, []))


def validate_application_transition(current_status: str, new_status: str) -> bool:
    """
    Validate that an application status transition is allowed.

    Raises:
        InvalidTransition reporting the current status and allowed next states
    """
    valid_transitions = allowed_application_transitions(current_status)
    if new_status not in valid_transitions:
        raise InvalidTransition(
            current_status, new_status, valid_transitions, resource_type='application'
        )
    return True


def ensure_editable(current_status: str) -> bool:
    """Only pending applications may have their terms edited."""
    if current_status != 'pending':
        raise InvalidTransition(
            current_status,
            'pending',
            allowed_application_transitions(current_status),
            resource_type='application',
            detail=(
                f"Only pending applications can be edited (current status: {current_status}). "
                f"Valid transitions from '{current_status}': "
                f"{allowed_application_transitions(current_status)}"
            ),
        )
    return True
