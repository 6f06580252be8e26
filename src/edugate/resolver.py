"""Ownership-chain resolution.

Provides:
- ``RequestScope`` — per-request memo and attachment point for resolved resources.
- ``ResourceResolver`` — fetches a resource and walks its parent references
  up to the owning Project, failing closed on any gap.

The resolver is stateless and shared across requests. Anything cached lives
in the ``RequestScope`` the caller passes in and dies with the request.
Store calls are awaited directly: they inherit the caller's deadline and
cancellation, and the resolver never retries.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Awaitable, Callable, Optional

from .exceptions import BrokenChainError, ResourceNotFoundError, StoreFailureError
from .models import PARENT_LINKS, Principal, Project, ResourceKind, Role, parent_reference
from .stores.base import ResourceStore

logger = logging.getLogger(__name__)

# Submission → Assessment → Milestone → Project
MAX_CHAIN_DEPTH = 3

_FETCHERS: dict[ResourceKind, str] = {
    ResourceKind.PROJECT: "get_project",
    ResourceKind.MILESTONE: "get_milestone",
    ResourceKind.ASSESSMENT: "get_assessment",
    ResourceKind.SUBMISSION: "get_submission",
    ResourceKind.TEAM: "get_team",
    ResourceKind.TEAM_MEMBER: "get_team_member",
}


class RequestScope:
    """Request-scoped state shared by the gate and the downstream handler.

    Holds the resolution memo (so a handler re-resolving the id the gate
    already checked costs no extra fetch) and the resources the gate
    attached after a successful check.
    """

    __slots__ = ("request_id", "_memo", "_participants", "_attached")

    def __init__(self, request_id: str | None = None) -> None:
        self.request_id = request_id or uuid.uuid4().hex
        self._memo: dict[tuple[ResourceKind, int], Any] = {}
        self._participants: dict[int, frozenset[int]] = {}
        self._attached: dict[ResourceKind, Any] = {}

    def remember(self, resource: Any) -> None:
        self._memo[(resource.kind, resource.id)] = resource

    def recall(self, kind: ResourceKind, resource_id: int) -> Any:
        return self._memo.get((kind, resource_id))

    def remember_participants(self, project_id: int, student_ids: frozenset[int]) -> None:
        self._participants[project_id] = student_ids

    def recall_participants(self, project_id: int) -> Optional[frozenset[int]]:
        return self._participants.get(project_id)

    def attach(self, kind: ResourceKind, resource: Any) -> None:
        self._attached[kind] = resource

    def attached(self, kind: ResourceKind) -> Any:
        """Resource the gate attached for ``kind``, or None."""
        return self._attached.get(kind)

    @property
    def project(self) -> Optional[Project]:
        return self._attached.get(ResourceKind.PROJECT)


class ResourceResolver:
    """Resolves resources and their root Project through a :class:`ResourceStore`.

    Args:
        store: Injected store port.
        max_depth: Hop cap for root resolution.
    """

    def __init__(self, store: ResourceStore, *, max_depth: int = MAX_CHAIN_DEPTH) -> None:
        self._store = store
        self._max_depth = max_depth

    async def resolve(
        self,
        kind: ResourceKind,
        resource_id: int,
        *,
        scope: RequestScope | None = None,
    ) -> Any:
        """Fetch a resource by kind and id.

        Raises:
            ResourceNotFoundError: the store has no such row.
            StoreFailureError: the store raised.
        """
        resource = await self._fetch(kind, resource_id, scope)
        if resource is None:
            logger.info("%s %s not found", kind.value, resource_id)
            raise ResourceNotFoundError(
                f"{kind.value.replace('_', ' ').capitalize()} not found",
                kind=kind.value,
                resource_id=resource_id,
            )
        return resource

    async def resolve_root_project(
        self,
        kind: ResourceKind,
        resource: Any,
        *,
        scope: RequestScope | None = None,
    ) -> Project:
        """Walk parent references from ``resource`` up to its Project.

        Dereferences one parent field per hop and stops after ``max_depth``
        hops. A Project resolves to itself.

        Raises:
            BrokenChainError: a parent id is null, a parent row is missing,
                or the walk exceeds the hop cap.
            StoreFailureError: the store raised.
        """
        current = resource
        for hop in range(self._max_depth + 1):
            if current.kind == ResourceKind.PROJECT:
                return current
            if hop == self._max_depth:
                break

            link = parent_reference(current)
            if link is None:
                break
            parent_kind, parent_id = link
            if parent_id is None:
                raise self._broken(kind, resource, current, f"{PARENT_LINKS[current.kind][0]} is null")

            parent = await self._fetch(parent_kind, parent_id, scope)
            if parent is None:
                raise self._broken(kind, resource, current, f"{parent_kind.value} {parent_id} does not exist")
            current = parent

        raise self._broken(kind, resource, current, f"no project within {self._max_depth} hops")

    async def resolve_with_root(
        self,
        kind: ResourceKind,
        resource_id: int,
        *,
        scope: RequestScope | None = None,
    ) -> tuple[Any, Project]:
        """``resolve`` followed by ``resolve_root_project``."""
        resource = await self.resolve(kind, resource_id, scope=scope)
        project = await self.resolve_root_project(kind, resource, scope=scope)
        return resource, project

    async def is_enrolled(
        self,
        principal: Principal,
        project: Project,
        *,
        scope: RequestScope | None = None,
    ) -> bool:
        """Whether a student principal participates in ``project``.

        Non-students are never "enrolled"; their access does not depend on it.
        """
        if principal.role != Role.STUDENT:
            return False

        participants = scope.recall_participants(project.id) if scope is not None else None
        if participants is None:
            participants = frozenset(
                await self._call(
                    self._store.get_project_participant_ids,
                    project.id,
                    what=f"participants of project {project.id}",
                )
            )
            if scope is not None:
                scope.remember_participants(project.id, participants)
        return principal.id in participants

    # ── Internals ──────────────────────────────────────────

    async def _fetch(self, kind: ResourceKind, resource_id: int, scope: RequestScope | None) -> Any:
        if scope is not None:
            cached = scope.recall(kind, resource_id)
            if cached is not None:
                return cached

        fetch = getattr(self._store, _FETCHERS[kind])
        resource = await self._call(fetch, resource_id, what=f"{kind.value} {resource_id}")

        if resource is not None and scope is not None:
            scope.remember(resource)
        return resource

    async def _call(self, fn: Callable[..., Awaitable[Any]], *args: Any, what: str) -> Any:
        try:
            return await fn(*args)
        except Exception as e:
            logger.error("Store failure while fetching %s: %s", what, e)
            raise StoreFailureError(f"Failed to fetch {what}", target=what) from e

    def _broken(self, kind: ResourceKind, resource: Any, at: Any, problem: str) -> BrokenChainError:
        logger.error(
            "Broken ownership chain: %s %s orphaned at %s %s (%s)",
            kind.value,
            resource.id,
            at.kind.value,
            at.id,
            problem,
            extra={"data_integrity": True},
        )
        return BrokenChainError(
            f"{kind.value.replace('_', ' ').capitalize()} not found",
            kind=kind.value,
            resource_id=resource.id,
            orphaned_kind=at.kind.value,
            orphaned_id=at.id,
            problem=problem,
        )


__all__ = [
    "MAX_CHAIN_DEPTH",
    "RequestScope",
    "ResourceResolver",
]
