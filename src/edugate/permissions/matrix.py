"""Role matrix and per-kind school scope.

Provides:
- ``ROLE_MATRIX`` — ``(ResourceKind, Action)`` → roles allowed to attempt it.
- ``SCHOOL_SCOPE_KINDS`` — kinds where a same-school teacher gets read access.
- ``allowed_roles()`` — lookup that fails closed for unlisted pairs.

The matrix only answers "may this role attempt this action on this kind at
all". Ownership, tier downgrade, school scope and enrollment are applied by
the evaluator on top of it.
"""

from __future__ import annotations

from ..models import ResourceKind, Role
from .constants import Action

_ALL = frozenset({Role.ADMIN, Role.TEACHER, Role.STUDENT})
_STAFF = frozenset({Role.ADMIN, Role.TEACHER})
_STUDENT_WORK = frozenset({Role.ADMIN, Role.STUDENT})
_ADMIN_ONLY = frozenset({Role.ADMIN})

# ── Role Matrix ─────────────────────────────────────────
# Pairs that are absent are denied for every role.
# ``create`` on a kind means creating a child under that resource.

ROLE_MATRIX: dict[tuple[ResourceKind, Action], frozenset[Role]] = {
    # Project
    (ResourceKind.PROJECT, Action.READ): _ALL,
    (ResourceKind.PROJECT, Action.CREATE): _STAFF,
    (ResourceKind.PROJECT, Action.VIEW_ANALYTICS): _STAFF,
    (ResourceKind.PROJECT, Action.UPDATE): _STAFF,
    (ResourceKind.PROJECT, Action.DELETE): _STAFF,
    (ResourceKind.PROJECT, Action.TOGGLE_VISIBILITY): _STAFF,
    (ResourceKind.PROJECT, Action.START): _STAFF,
    (ResourceKind.PROJECT, Action.ASSIGN): _STAFF,
    (ResourceKind.PROJECT, Action.MANAGE_TEAM): _STAFF,
    (ResourceKind.PROJECT, Action.GENERATE_CONTENT): _STAFF,
    (ResourceKind.PROJECT, Action.MANAGE_USERS): _ADMIN_ONLY,  # roster and account management for the project
    # Milestone
    (ResourceKind.MILESTONE, Action.READ): _ALL,
    (ResourceKind.MILESTONE, Action.CREATE): _STAFF,
    (ResourceKind.MILESTONE, Action.UPDATE): _STAFF,
    (ResourceKind.MILESTONE, Action.DELETE): _STAFF,
    (ResourceKind.MILESTONE, Action.GENERATE_CONTENT): _STAFF,
    # Assessment
    (ResourceKind.ASSESSMENT, Action.READ): _ALL,
    (ResourceKind.ASSESSMENT, Action.VIEW_ANALYTICS): _STAFF,
    (ResourceKind.ASSESSMENT, Action.CREATE): _STAFF,
    (ResourceKind.ASSESSMENT, Action.UPDATE): _STAFF,
    (ResourceKind.ASSESSMENT, Action.DELETE): _STAFF,
    (ResourceKind.ASSESSMENT, Action.GENERATE_CONTENT): _STAFF,
    (ResourceKind.ASSESSMENT, Action.SUBMIT): _STUDENT_WORK,
    # Submission
    (ResourceKind.SUBMISSION, Action.READ): _ALL,
    (ResourceKind.SUBMISSION, Action.GRADE): _STAFF,
    (ResourceKind.SUBMISSION, Action.DELETE): _STAFF,
    (ResourceKind.SUBMISSION, Action.SUBMIT): _STUDENT_WORK,
    # Team
    (ResourceKind.TEAM, Action.READ): _ALL,
    (ResourceKind.TEAM, Action.UPDATE): _STAFF,
    (ResourceKind.TEAM, Action.DELETE): _STAFF,
    (ResourceKind.TEAM, Action.MANAGE_TEAM): _STAFF,
    # Team member
    (ResourceKind.TEAM_MEMBER, Action.READ): _ALL,
    (ResourceKind.TEAM_MEMBER, Action.DELETE): _STAFF,
    (ResourceKind.TEAM_MEMBER, Action.MANAGE_TEAM): _STAFF,
}


# ── School Scope ────────────────────────────────────────
# Submissions are student work and stay owner-only.

SCHOOL_SCOPE_KINDS: frozenset[ResourceKind] = frozenset(
    {
        ResourceKind.PROJECT,
        ResourceKind.MILESTONE,
        ResourceKind.ASSESSMENT,
        ResourceKind.TEAM,
        ResourceKind.TEAM_MEMBER,
    }
)


def allowed_roles(kind: ResourceKind, action: Action) -> frozenset[Role]:
    """Roles that may attempt ``action`` on ``kind``.

    Returns an empty set for unlisted pairs (fail-closed).

    Example::

        allowed_roles(ResourceKind.PROJECT, Action.DELETE)
        # frozenset({Role.ADMIN, Role.TEACHER})
        allowed_roles(ResourceKind.MILESTONE, Action.TOGGLE_VISIBILITY)
        # frozenset()
    """
    return ROLE_MATRIX.get((kind, action), frozenset())


def allows_school_scope(kind: ResourceKind) -> bool:
    return kind in SCHOOL_SCOPE_KINDS


__all__ = [
    "ROLE_MATRIX",
    "SCHOOL_SCOPE_KINDS",
    "allowed_roles",
    "allows_school_scope",
]
