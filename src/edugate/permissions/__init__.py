"""Authorization policy for edugate.

Defines:
- Action / ReasonCode: operations and decision reasons
- ROLE_MATRIX: (resource kind, action) → roles allowed to attempt it
- SCHOOL_SCOPE_KINDS: kinds where same-school teachers may read
- TIER_REQUIREMENTS: action → minimum subscription tier
- PolicyEvaluator / Decision: pure role × tier × tenant evaluation
"""

from .constants import (
    ALLOW_REASONS,
    MUTATING_ACTIONS,
    OWN_SUBMISSION_ACTIONS,
    READ_ACTIONS,
    Action,
    ReasonCode,
    is_read_action,
)
from .evaluator import Decision, PolicyEvaluator, evaluate
from .matrix import ROLE_MATRIX, SCHOOL_SCOPE_KINDS, allowed_roles, allows_school_scope
from .tiers import TIER_ORDER, TIER_REQUIREMENTS, check_tier, requires_tier, tier_satisfies

__all__ = [
    "ALLOW_REASONS",
    "Action",
    "Decision",
    "MUTATING_ACTIONS",
    "OWN_SUBMISSION_ACTIONS",
    "PolicyEvaluator",
    "READ_ACTIONS",
    "ROLE_MATRIX",
    "ReasonCode",
    "SCHOOL_SCOPE_KINDS",
    "TIER_ORDER",
    "TIER_REQUIREMENTS",
    "allowed_roles",
    "allows_school_scope",
    "check_tier",
    "evaluate",
    "is_read_action",
    "requires_tier",
    "tier_satisfies",
]
