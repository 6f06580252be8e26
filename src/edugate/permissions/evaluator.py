"""Policy evaluation: role × tier × tenant scope against a resolved chain.

Provides:
- ``Decision`` — allow/deny outcome with a reason code.
- ``PolicyEvaluator`` — pure evaluator over the role matrix and ownership facts.
- ``evaluate()`` — module-level shortcut using the default tables.

The evaluator does no I/O. Enrollment is a fact the caller resolves up front
(see :meth:`edugate.resolver.ResourceResolver.is_enrolled`) and passes in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..models import Principal, Project, ResourceKind, Role, Tier
from .constants import ALLOW_REASONS, Action, ReasonCode, is_read_action
from .matrix import ROLE_MATRIX, SCHOOL_SCOPE_KINDS


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy evaluation."""

    allowed: bool
    reason_code: ReasonCode
    resolved_project: Optional[Project] = None
    resolved_resource: Any = None

    def __post_init__(self) -> None:
        if self.allowed != (self.reason_code in ALLOW_REASONS):
            raise ValueError(f"Decision(allowed={self.allowed}) cannot carry reason {self.reason_code.value}")

    @property
    def denied(self) -> bool:
        return not self.allowed

    @classmethod
    def allow(cls, reason: ReasonCode, project: Project | None = None, resource: Any = None) -> Decision:
        return cls(True, reason, project, resource)

    @classmethod
    def deny(cls, reason: ReasonCode, project: Project | None = None, resource: Any = None) -> Decision:
        return cls(False, reason, project, resource)


class PolicyEvaluator:
    """Pure policy evaluator.

    Args:
        role_matrix: ``(kind, action)`` → allowed roles. Defaults to
            :data:`~edugate.permissions.matrix.ROLE_MATRIX`.
        school_scope_kinds: Kinds where same-school teachers get read access.

    Rules, in order:

    1. Role not listed for ``(kind, action)`` → ``ROLE_NOT_PERMITTED``.
    2. Enterprise admin → allowed everywhere (``OWNER_MATCH``).
    3. Free admin → owner only, else ``TIER_DOWNGRADE_DENIED``.
    4. Teacher → owner (``OWNER_MATCH``); read-class on a school-scoped kind
       in the same school (``SCHOOL_SCOPE``); else ``ROLE_NOT_PERMITTED``.
    5. Student → must be enrolled (``ENROLLED_PARTICIPANT`` /
       ``ENROLLED_PARTICIPANT_FAILED``); another student's submission is
       ``ROLE_NOT_PERMITTED``.
    """

    def __init__(
        self,
        *,
        role_matrix: dict[tuple[ResourceKind, Action], frozenset[Role]] | None = None,
        school_scope_kinds: frozenset[ResourceKind] | None = None,
    ) -> None:
        self._matrix = ROLE_MATRIX if role_matrix is None else role_matrix
        self._school_kinds = SCHOOL_SCOPE_KINDS if school_scope_kinds is None else school_scope_kinds

    def evaluate(
        self,
        principal: Principal,
        kind: ResourceKind,
        resource: Any,
        root_project: Project,
        action: Action,
        *,
        enrolled: bool = False,
    ) -> Decision:
        """Evaluate ``action`` by ``principal`` on ``resource``.

        Args:
            principal: The authenticated actor.
            kind: Kind of ``resource``.
            resource: The requested resource descriptor.
            root_project: Project at the top of ``resource``'s ownership chain.
            action: Requested action.
            enrolled: Whether a student principal participates in
                ``root_project``. Ignored for other roles.

        Returns:
            Decision; identical inputs always give identical decisions.
        """
        reason = self._reason(principal, kind, resource, root_project, action, enrolled)
        if reason in ALLOW_REASONS:
            return Decision.allow(reason, root_project, resource)
        return Decision.deny(reason, root_project, resource)

    def _reason(
        self,
        principal: Principal,
        kind: ResourceKind,
        resource: Any,
        project: Project,
        action: Action,
        enrolled: bool,
    ) -> ReasonCode:
        roles = self._matrix.get((kind, action), frozenset())
        if principal.role not in roles:
            return ReasonCode.ROLE_NOT_PERMITTED

        is_owner = project.teacher_id is not None and project.teacher_id == principal.id

        if principal.role == Role.ADMIN:
            if principal.tier == Tier.ENTERPRISE:
                return ReasonCode.OWNER_MATCH
            if principal.tier == Tier.FREE:
                return ReasonCode.OWNER_MATCH if is_owner else ReasonCode.TIER_DOWNGRADE_DENIED
            return ReasonCode.ROLE_NOT_PERMITTED

        if principal.role == Role.TEACHER:
            if is_owner:
                return ReasonCode.OWNER_MATCH
            if (
                is_read_action(action)
                and kind in self._school_kinds
                and principal.school_id is not None
                and principal.school_id == project.school_id
            ):
                return ReasonCode.SCHOOL_SCOPE
            return ReasonCode.ROLE_NOT_PERMITTED

        if principal.role == Role.STUDENT:
            if not enrolled:
                return ReasonCode.ENROLLED_PARTICIPANT_FAILED
            if kind == ResourceKind.SUBMISSION and getattr(resource, "student_id", None) != principal.id:
                return ReasonCode.ROLE_NOT_PERMITTED
            return ReasonCode.ENROLLED_PARTICIPANT

        return ReasonCode.ROLE_NOT_PERMITTED


_default_evaluator = PolicyEvaluator()


def evaluate(
    principal: Principal,
    kind: ResourceKind,
    resource: Any,
    root_project: Project,
    action: Action,
    *,
    enrolled: bool = False,
) -> Decision:
    """Evaluate with the default role matrix and school-scope table."""
    return _default_evaluator.evaluate(principal, kind, resource, root_project, action, enrolled=enrolled)


__all__ = [
    "Decision",
    "PolicyEvaluator",
    "evaluate",
]
