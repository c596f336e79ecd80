"""Share validation package."""

from splitledger.validation.guards import (
    EmptyParticipantSetError,
    NegativeShareError,
    PercentageSumError,
    SplitError,
    SplitMismatchError,
    UnknownMemberError,
    check_participants,
    resolve_tolerance,
    validate_participants,
)

__all__ = [
    # Errors
    "EmptyParticipantSetError",
    "NegativeShareError",
    "PercentageSumError",
    "SplitError",
    "SplitMismatchError",
    "UnknownMemberError",
    # Guards
    "check_participants",
    "resolve_tolerance",
    "validate_participants",
]
