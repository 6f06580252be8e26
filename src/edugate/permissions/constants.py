"""Action and reason-code constants for edugate.

Provides:
- ``Action`` — every operation a principal can request on a resource.
- ``ReasonCode`` — the exhaustive set of decision reasons.
- ``READ_ACTIONS`` / ``MUTATING_ACTIONS`` / ``OWN_SUBMISSION_ACTIONS`` — action classes.
"""

from __future__ import annotations

from enum import Enum


class Action(str, Enum):
    """Operations checked by the gate.

    Read-class actions never change state. Mutating-class actions create,
    change, or remove data (including visibility toggles). ``submit`` is the
    student-owned write on their own submission.
    """

    READ = "read"
    VIEW_ANALYTICS = "view_analytics"

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    TOGGLE_VISIBILITY = "toggle_visibility"
    START = "start"
    ASSIGN = "assign"
    MANAGE_TEAM = "manage_team"
    GRADE = "grade"
    GENERATE_CONTENT = "generate_content"

    SUBMIT = "submit"

    # Admin user management, checked against the project the users belong to.
    MANAGE_USERS = "manage_users"


class ReasonCode(str, Enum):
    """Why a decision was made. Every deny carries one."""

    OWNER_MATCH = "OWNER_MATCH"
    SCHOOL_SCOPE = "SCHOOL_SCOPE"
    ENROLLED_PARTICIPANT = "ENROLLED_PARTICIPANT"
    TIER_DOWNGRADE_DENIED = "TIER_DOWNGRADE_DENIED"
    ROLE_NOT_PERMITTED = "ROLE_NOT_PERMITTED"
    ENROLLED_PARTICIPANT_FAILED = "ENROLLED_PARTICIPANT_FAILED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    BROKEN_CHAIN = "BROKEN_CHAIN"


ALLOW_REASONS = frozenset(
    {
        ReasonCode.OWNER_MATCH,
        ReasonCode.SCHOOL_SCOPE,
        ReasonCode.ENROLLED_PARTICIPANT,
    }
)

READ_ACTIONS = frozenset({Action.READ, Action.VIEW_ANALYTICS})

MUTATING_ACTIONS = frozenset(
    {
        Action.CREATE,
        Action.UPDATE,
        Action.DELETE,
        Action.TOGGLE_VISIBILITY,
        Action.START,
        Action.ASSIGN,
        Action.MANAGE_TEAM,
        Action.GRADE,
        Action.GENERATE_CONTENT,
        Action.MANAGE_USERS,
    }
)

OWN_SUBMISSION_ACTIONS = frozenset({Action.SUBMIT})


def is_read_action(action: Action) -> bool:
    """True for read-class actions only. Unknown values are not read-class."""
    return action in READ_ACTIONS


__all__ = [
    "ALLOW_REASONS",
    "Action",
    "MUTATING_ACTIONS",
    "OWN_SUBMISSION_ACTIONS",
    "READ_ACTIONS",
    "ReasonCode",
    "is_read_action",
]
