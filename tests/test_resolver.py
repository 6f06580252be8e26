"""Tests for ownership-chain resolution."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from edugate import (
    Assessment,
    BrokenChainError,
    InMemoryResourceStore,
    Principal,
    Project,
    RequestScope,
    ResourceKind,
    ResourceNotFoundError,
    ResourceResolver,
    Role,
    StoreFailureError,
)
from edugate.resolver import _FETCHERS


class TestRequestScope:
    """Tests for RequestScope."""

    def test_generates_request_id(self) -> None:
        assert RequestScope().request_id != RequestScope().request_id

    def test_keeps_given_request_id(self) -> None:
        assert RequestScope("req-1").request_id == "req-1"

    def test_memo(self) -> None:
        scope = RequestScope()
        project = Project(id=1, teacher_id=10)
        scope.remember(project)
        assert scope.recall(ResourceKind.PROJECT, 1) is project
        assert scope.recall(ResourceKind.MILESTONE, 1) is None

    def test_attach(self) -> None:
        scope = RequestScope()
        project = Project(id=1, teacher_id=10)
        assert scope.project is None
        scope.attach(ResourceKind.PROJECT, project)
        assert scope.project is project
        assert scope.attached(ResourceKind.PROJECT) is project


class TestResolve:
    """Tests for ResourceResolver.resolve()."""

    def test_every_kind_has_a_fetcher(self) -> None:
        for kind in ResourceKind:
            assert kind in _FETCHERS

    @pytest.mark.asyncio
    async def test_found(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        milestone = await resolver.resolve(ResourceKind.MILESTONE, 11)
        assert milestone.project_id == 1

    @pytest.mark.asyncio
    async def test_not_found(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await resolver.resolve(ResourceKind.MILESTONE, 12345)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Milestone not found"
        assert not isinstance(exc_info.value, BrokenChainError)

    @pytest.mark.asyncio
    async def test_team_member_message(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        with pytest.raises(ResourceNotFoundError, match="Team member not found"):
            await resolver.resolve(ResourceKind.TEAM_MEMBER, 12345)


class TestResolveRootProject:
    """Tests for walking parent references."""

    @pytest.mark.asyncio
    async def test_project_resolves_to_itself(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        resource, project = await resolver.resolve_with_root(ResourceKind.PROJECT, 1)
        assert resource is project

    @pytest.mark.asyncio
    async def test_submission_chain(self, store: InMemoryResourceStore) -> None:
        """Submission → Assessment → Milestone → Project in three hops."""
        resolver = ResourceResolver(store)
        before = store.fetch_count
        _, project = await resolver.resolve_with_root(ResourceKind.SUBMISSION, 1111)
        assert project.id == 1
        assert store.fetch_count - before == 4

    @pytest.mark.asyncio
    async def test_child_shares_parent_root(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        _, from_submission = await resolver.resolve_with_root(ResourceKind.SUBMISSION, 1111)
        _, from_assessment = await resolver.resolve_with_root(ResourceKind.ASSESSMENT, 111)
        _, from_member = await resolver.resolve_with_root(ResourceKind.TEAM_MEMBER, 121)
        assert from_submission == from_assessment == from_member

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("kind", "resource_id", "orphaned_kind"),
        [
            (ResourceKind.MILESTONE, 99, "milestone"),  # project_id is null
            (ResourceKind.MILESTONE, 98, "milestone"),  # project 404 missing
            (ResourceKind.ASSESSMENT, 97, "assessment"),  # milestone_id is null
            (ResourceKind.TEAM_MEMBER, 96, "team_member"),  # team 404 missing
        ],
    )
    async def test_broken_chain(
        self,
        store: InMemoryResourceStore,
        kind: ResourceKind,
        resource_id: int,
        orphaned_kind: str,
    ) -> None:
        resolver = ResourceResolver(store)
        with pytest.raises(BrokenChainError) as exc_info:
            await resolver.resolve_with_root(kind, resource_id)
        error = exc_info.value
        assert error.status_code == 404
        assert error.details["orphaned_kind"] == orphaned_kind
        assert error.details["resource_id"] == resource_id

    @pytest.mark.asyncio
    async def test_broken_chain_is_logged_as_data_integrity(
        self, store: InMemoryResourceStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        resolver = ResourceResolver(store)
        with caplog.at_level(logging.ERROR, logger="edugate.resolver"):
            with pytest.raises(BrokenChainError):
                await resolver.resolve_with_root(ResourceKind.MILESTONE, 99)
        records = [r for r in caplog.records if getattr(r, "data_integrity", False)]
        assert len(records) == 1
        assert "milestone 99" in records[0].getMessage()

    @pytest.mark.asyncio
    async def test_hop_cap(self, store: InMemoryResourceStore) -> None:
        """A chain longer than the cap is treated as broken."""
        resolver = ResourceResolver(store, max_depth=2)
        with pytest.raises(BrokenChainError) as exc_info:
            await resolver.resolve_with_root(ResourceKind.SUBMISSION, 1111)
        assert "2 hops" in exc_info.value.details["problem"]

    @pytest.mark.asyncio
    async def test_chain_within_cap(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store, max_depth=2)
        _, project = await resolver.resolve_with_root(ResourceKind.ASSESSMENT, 111)
        assert project.id == 1


class TestMemoization:
    """Tests for request-scoped memoization."""

    @pytest.mark.asyncio
    async def test_second_resolution_costs_nothing(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        scope = RequestScope()
        await resolver.resolve_with_root(ResourceKind.SUBMISSION, 1111, scope=scope)
        before = store.fetch_count
        await resolver.resolve_with_root(ResourceKind.SUBMISSION, 1111, scope=scope)
        await resolver.resolve(ResourceKind.MILESTONE, 11, scope=scope)
        assert store.fetch_count == before

    @pytest.mark.asyncio
    async def test_scopes_are_isolated(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        await resolver.resolve(ResourceKind.PROJECT, 1, scope=RequestScope())
        before = store.fetch_count
        await resolver.resolve(ResourceKind.PROJECT, 1, scope=RequestScope())
        assert store.fetch_count == before + 1

    @pytest.mark.asyncio
    async def test_participants_memoized(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        scope = RequestScope()
        student = Principal(id=100, role=Role.STUDENT)
        project = await resolver.resolve(ResourceKind.PROJECT, 1, scope=scope)
        store.get_project_participant_ids = AsyncMock(return_value=frozenset({100}))  # type: ignore[method-assign]
        assert await resolver.is_enrolled(student, project, scope=scope)
        assert await resolver.is_enrolled(student, project, scope=scope)
        store.get_project_participant_ids.assert_awaited_once_with(1)


class TestStoreFailures:
    """Store errors surface as StoreFailureError, never as a deny."""

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self) -> None:
        store = AsyncMock()
        store.get_milestone.side_effect = ConnectionError("connection refused")
        resolver = ResourceResolver(store)
        with pytest.raises(StoreFailureError) as exc_info:
            await resolver.resolve(ResourceKind.MILESTONE, 11)
        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_failure_mid_chain(self) -> None:
        store = AsyncMock()
        store.get_milestone.side_effect = TimeoutError("deadline exceeded")
        resolver = ResourceResolver(store)
        with pytest.raises(StoreFailureError):
            await resolver.resolve_root_project(ResourceKind.ASSESSMENT, Assessment(id=111, milestone_id=11))

    @pytest.mark.asyncio
    async def test_participant_lookup_failure(self) -> None:
        store = AsyncMock()
        store.get_project_participant_ids.side_effect = OSError("socket closed")
        resolver = ResourceResolver(store)
        student = Principal(id=100, role=Role.STUDENT)
        with pytest.raises(StoreFailureError):
            await resolver.is_enrolled(student, Project(id=1, teacher_id=10))

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        store = AsyncMock()
        store.get_project.side_effect = asyncio.CancelledError()
        resolver = ResourceResolver(store)
        with pytest.raises(asyncio.CancelledError):
            await resolver.resolve(ResourceKind.PROJECT, 1)


class TestEnrollment:
    """Tests for ResourceResolver.is_enrolled()."""

    @pytest.mark.asyncio
    async def test_team_member(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        project = await resolver.resolve(ResourceKind.PROJECT, 1)
        assert await resolver.is_enrolled(Principal(id=100, role=Role.STUDENT), project)

    @pytest.mark.asyncio
    async def test_direct_assignment(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        project = await resolver.resolve(ResourceKind.PROJECT, 2)
        assert await resolver.is_enrolled(Principal(id=102, role=Role.STUDENT), project)

    @pytest.mark.asyncio
    async def test_not_a_participant(self, store: InMemoryResourceStore) -> None:
        resolver = ResourceResolver(store)
        project = await resolver.resolve(ResourceKind.PROJECT, 1)
        assert not await resolver.is_enrolled(Principal(id=101, role=Role.STUDENT), project)

    @pytest.mark.asyncio
    async def test_non_students_skip_lookup(self) -> None:
        store = AsyncMock()
        resolver = ResourceResolver(store)
        teacher = Principal(id=10, role=Role.TEACHER)
        assert not await resolver.is_enrolled(teacher, Project(id=1, teacher_id=10))
        store.get_project_participant_ids.assert_not_awaited()
