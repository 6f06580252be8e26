"""Request-facing authorization gate.

Provides:
- ``parse_resource_id()`` — strict positive-integer id parsing.
- ``GateResult`` — resolved project/resource plus the allow decision.
- ``Gate`` — the single entry point routes call before touching a resource.

``Gate.authorize`` runs a fixed sequence; the first failing step raises and
nothing after it runs:

1. parse the raw id                       → ``InvalidIdentifierError`` (400)
2. require a principal                     → ``AuthenticationMissingError`` (401)
3. tier gate, before any fetch             → ``AuthorizationDeniedError`` (403)
4. resolve resource and root project       → ``ResourceNotFoundError`` / ``BrokenChainError`` (404),
                                             ``StoreFailureError`` (500)
5. policy evaluation                       → ``AuthorizationDeniedError`` (403)
6. optional route predicate (narrow only)  → ``AuthorizationDeniedError`` (403)

On success the resolved resource and project are attached to the request
scope so the handler does not fetch them again.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from .exceptions import (
    AuthenticationMissingError,
    AuthorizationDeniedError,
    InvalidIdentifierError,
    ResourceNotFoundError,
)
from .logging import get_request_logger
from .models import Principal, Project, ResourceKind
from .permissions.constants import Action, ReasonCode
from .permissions.evaluator import Decision, PolicyEvaluator
from .permissions.tiers import check_tier
from .resolver import RequestScope, ResourceResolver
from .stores.base import ResourceStore

CustomPredicate = Callable[[Principal, Any], bool]

_ID_PATTERN = re.compile(r"[0-9]+")


def parse_resource_id(raw: Any, param_name: str = "id") -> int:
    """Parse a route parameter as a positive integer.

    Accepts ints and plain digit strings (surrounding whitespace ignored).
    Rejects bools, signs, decimals, zero and negatives.

    Raises:
        InvalidIdentifierError
    """
    value: Optional[int] = None
    if isinstance(raw, bool):
        value = None
    elif isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _ID_PATTERN.fullmatch(raw.strip()):
        value = int(raw.strip())

    if value is None or value <= 0:
        raise InvalidIdentifierError(f"Invalid {param_name}", param=param_name, value=repr(raw))
    return value


@dataclass(frozen=True)
class GateResult:
    """Successful authorization."""

    kind: ResourceKind
    resource: Any
    project: Project
    decision: Decision

    @property
    def allowed(self) -> bool:
        return self.decision.allowed

    @property
    def reason_code(self) -> ReasonCode:
        return self.decision.reason_code


class Gate:
    """Authorization entry point, constructed once at startup.

    Args:
        resolver: Resolver over the injected store port.
        evaluator: Policy evaluator (default tables if omitted).

    Usage::

        gate = Gate.from_store(store)

        async def get_milestone(request):
            scope = RequestScope()
            result = await gate.authorize(
                request.principal, ResourceKind.MILESTONE, request.params["id"], Action.READ, scope=scope
            )
            return result.resource
    """

    def __init__(self, resolver: ResourceResolver, evaluator: PolicyEvaluator | None = None) -> None:
        self._resolver = resolver
        self._evaluator = evaluator or PolicyEvaluator()

    @classmethod
    def from_store(cls, store: ResourceStore, evaluator: PolicyEvaluator | None = None) -> Gate:
        return cls(ResourceResolver(store), evaluator)

    @property
    def resolver(self) -> ResourceResolver:
        return self._resolver

    async def authorize(
        self,
        principal: Principal | None,
        kind: ResourceKind,
        raw_id: Any,
        action: Action,
        predicate: CustomPredicate | None = None,
        *,
        scope: RequestScope | None = None,
        param_name: str = "id",
    ) -> GateResult:
        """Authorize ``action`` by ``principal`` on the ``kind`` resource ``raw_id``.

        Args:
            principal: Authenticated principal, or None when the request has none.
            kind: Resource kind addressed by the route.
            raw_id: Raw id route parameter.
            action: Requested action.
            predicate: Route-specific refinement, called as
                ``predicate(principal, resource)`` only after the base policy
                allowed. Returning false denies; it can never turn a deny
                into an allow.
            scope: Request scope for memoization and attachment. A fresh one
                is used when omitted.
            param_name: Parameter name used in validation messages.

        Returns:
            GateResult with the resolved resource and project.
        """
        resource_id = parse_resource_id(raw_id, param_name)

        if principal is None:
            raise AuthenticationMissingError()

        scope = scope if scope is not None else RequestScope()
        log = get_request_logger(__name__, request_id=scope.request_id, principal_id=principal.id)

        if not check_tier(principal.tier, action):
            log.warning(
                "DENIED %s on %s %s: %s requires a higher tier than %s",
                action.value,
                kind.value,
                resource_id,
                action.value,
                principal.tier.value,
            )
            raise AuthorizationDeniedError(
                ReasonCode.TIER_DOWNGRADE_DENIED,
                "Access denied - this feature is not available on your plan",
                action=action.value,
            )

        resource, project = await self._resolver.resolve_with_root(kind, resource_id, scope=scope)
        enrolled = await self._resolver.is_enrolled(principal, project, scope=scope)

        decision = self._evaluate(principal, kind, resource, project, action, enrolled, log)
        if decision.denied:
            log.warning(
                "DENIED %s on %s %s (project %s): %s",
                action.value,
                kind.value,
                resource_id,
                project.id,
                decision.reason_code.value,
            )
            raise AuthorizationDeniedError(decision.reason_code, action=action.value)

        if predicate is not None and not self._apply_predicate(predicate, principal, resource, log):
            log.warning(
                "DENIED %s on %s %s by route predicate",
                action.value,
                kind.value,
                resource_id,
            )
            raise AuthorizationDeniedError(ReasonCode.ROLE_NOT_PERMITTED, action=action.value)

        scope.attach(kind, resource)
        scope.attach(ResourceKind.PROJECT, project)
        log.debug(
            "ALLOWED %s on %s %s: %s",
            action.value,
            kind.value,
            resource_id,
            decision.reason_code.value,
        )
        return GateResult(kind=kind, resource=resource, project=project, decision=decision)

    async def filter_authorized(
        self,
        principal: Principal,
        kind: ResourceKind,
        resources: Iterable[Any],
        action: Action = Action.READ,
        *,
        scope: RequestScope | None = None,
    ) -> list[Any]:
        """Keep the already-fetched ``resources`` that ``principal`` may act on.

        For list endpoints. Missing parents and broken chains drop the item;
        store failures propagate.
        """
        if not check_tier(principal.tier, action):
            return []

        scope = scope if scope is not None else RequestScope()
        log = get_request_logger(__name__, request_id=scope.request_id, principal_id=principal.id)
        allowed: list[Any] = []
        for resource in resources:
            scope.remember(resource)
            try:
                project = await self._resolver.resolve_root_project(kind, resource, scope=scope)
            except ResourceNotFoundError:
                continue
            enrolled = await self._resolver.is_enrolled(principal, project, scope=scope)
            if self._evaluate(principal, kind, resource, project, action, enrolled, log).allowed:
                allowed.append(resource)
        return allowed

    # ── Per-kind shortcuts ─────────────────────────────────

    async def authorize_project(
        self,
        principal: Principal | None,
        raw_id: Any,
        action: Action,
        predicate: CustomPredicate | None = None,
        **kwargs: Any,
    ) -> GateResult:
        return await self.authorize(principal, ResourceKind.PROJECT, raw_id, action, predicate, **kwargs)

    async def authorize_milestone(
        self,
        principal: Principal | None,
        raw_id: Any,
        action: Action,
        predicate: CustomPredicate | None = None,
        **kwargs: Any,
    ) -> GateResult:
        return await self.authorize(principal, ResourceKind.MILESTONE, raw_id, action, predicate, **kwargs)

    async def authorize_assessment(
        self,
        principal: Principal | None,
        raw_id: Any,
        action: Action,
        predicate: CustomPredicate | None = None,
        **kwargs: Any,
    ) -> GateResult:
        return await self.authorize(principal, ResourceKind.ASSESSMENT, raw_id, action, predicate, **kwargs)

    async def authorize_submission(
        self,
        principal: Principal | None,
        raw_id: Any,
        action: Action,
        predicate: CustomPredicate | None = None,
        **kwargs: Any,
    ) -> GateResult:
        return await self.authorize(principal, ResourceKind.SUBMISSION, raw_id, action, predicate, **kwargs)

    async def authorize_team(
        self,
        principal: Principal | None,
        raw_id: Any,
        action: Action,
        predicate: CustomPredicate | None = None,
        **kwargs: Any,
    ) -> GateResult:
        return await self.authorize(principal, ResourceKind.TEAM, raw_id, action, predicate, **kwargs)

    async def authorize_team_member(
        self,
        principal: Principal | None,
        raw_id: Any,
        action: Action,
        predicate: CustomPredicate | None = None,
        **kwargs: Any,
    ) -> GateResult:
        return await self.authorize(principal, ResourceKind.TEAM_MEMBER, raw_id, action, predicate, **kwargs)

    # ── Internals ──────────────────────────────────────────

    def _evaluate(
        self,
        principal: Principal,
        kind: ResourceKind,
        resource: Any,
        project: Project,
        action: Action,
        enrolled: bool,
        log: logging.LoggerAdapter,
    ) -> Decision:
        try:
            return self._evaluator.evaluate(principal, kind, resource, project, action, enrolled=enrolled)
        except Exception:
            log.exception("Policy evaluation failed for %s on %s %s; denying", action, kind.value, resource.id)
            return Decision.deny(ReasonCode.ROLE_NOT_PERMITTED, project, resource)

    @staticmethod
    def _apply_predicate(
        predicate: CustomPredicate,
        principal: Principal,
        resource: Any,
        log: logging.LoggerAdapter,
    ) -> bool:
        try:
            return predicate(principal, resource) is True
        except Exception:
            log.exception("Route predicate raised; denying")
            return False


__all__ = [
    "CustomPredicate",
    "Gate",
    "GateResult",
    "parse_resource_id",
]
