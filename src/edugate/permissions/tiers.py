"""Tier gate: per-action subscription requirements.

Every action carries an explicit entry, ``None`` meaning "no tier
requirement". This is evaluated before any resource fetch, so a request for
an enterprise-only feature from a free account costs no store round-trip.
"""

from __future__ import annotations

from typing import Optional

from ..models import Tier
from .constants import Action

# Ordered lowest → highest.
TIER_ORDER: tuple[Tier, ...] = (Tier.FREE, Tier.ENTERPRISE)

TIER_REQUIREMENTS: dict[Action, Optional[Tier]] = {
    Action.READ: None,
    Action.VIEW_ANALYTICS: Tier.ENTERPRISE,  # cross-school analytics, dashboards
    Action.CREATE: None,
    Action.UPDATE: None,
    Action.DELETE: None,
    Action.TOGGLE_VISIBILITY: None,
    Action.START: None,
    Action.ASSIGN: Tier.ENTERPRISE,  # assigning students to a project
    Action.MANAGE_TEAM: Tier.ENTERPRISE,  # team and team-member management
    Action.GRADE: None,
    Action.GENERATE_CONTENT: Tier.ENTERPRISE,  # AI milestone/assessment generation
    Action.SUBMIT: None,
    Action.MANAGE_USERS: None,  # admin-only in ROLE_MATRIX; no tier check
}

_UNKNOWN = object()


def requires_tier(action: Action) -> Optional[Tier]:
    """Minimum tier for ``action``, or None when any tier may attempt it.

    Raises:
        KeyError: for an action missing from :data:`TIER_REQUIREMENTS`.
            Callers treat this as a deny.
    """
    required = TIER_REQUIREMENTS.get(action, _UNKNOWN)
    if required is _UNKNOWN:
        raise KeyError(f"No tier requirement declared for action {action!r}")
    return required  # type: ignore[return-value]


def tier_satisfies(actual: Tier, required: Optional[Tier]) -> bool:
    """Check ``actual`` is at or above ``required``.

    Unknown tiers never satisfy a requirement.
    """
    if required is None:
        return True
    try:
        return TIER_ORDER.index(actual) >= TIER_ORDER.index(required)
    except ValueError:
        return False


def check_tier(tier: Tier, action: Action) -> bool:
    """True if a principal on ``tier`` may attempt ``action``.

    Fails closed for actions with no declared requirement.
    """
    try:
        required = requires_tier(action)
    except KeyError:
        return False
    return tier_satisfies(tier, required)


__all__ = [
    "TIER_ORDER",
    "TIER_REQUIREMENTS",
    "check_tier",
    "requires_tier",
    "tier_satisfies",
]
