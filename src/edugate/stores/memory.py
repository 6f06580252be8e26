"""In-memory resource store for development and tests."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..models import (
    Assessment,
    Milestone,
    Project,
    ResourceKind,
    Submission,
    Team,
    TeamMember,
)


class InMemoryResourceStore:
    """Dict-backed :class:`~edugate.stores.base.ResourceStore`.

    Participants are derived the same way the relational store does it:
    students on any team of the project, plus direct assignments added with
    :meth:`assign_student`.

    Example::

        store = InMemoryResourceStore()
        store.add(Project(id=1, teacher_id=10, school_id=5))
        store.add(Milestone(id=2, project_id=1))
    """

    def __init__(self, resources: Iterable[Any] = ()) -> None:
        self._rows: dict[ResourceKind, dict[int, Any]] = {kind: {} for kind in ResourceKind}
        self._assignments: dict[int, set[int]] = {}
        self.fetch_count = 0
        for resource in resources:
            self.add(resource)

    def add(self, resource: Any) -> None:
        self._rows[resource.kind][resource.id] = resource

    def remove(self, kind: ResourceKind, resource_id: int) -> None:
        self._rows[kind].pop(resource_id, None)

    def assign_student(self, project_id: int, student_id: int) -> None:
        self._assignments.setdefault(project_id, set()).add(student_id)

    def _get(self, kind: ResourceKind, resource_id: int) -> Any:
        self.fetch_count += 1
        return self._rows[kind].get(resource_id)

    async def get_project(self, project_id: int) -> Optional[Project]:
        return self._get(ResourceKind.PROJECT, project_id)

    async def get_milestone(self, milestone_id: int) -> Optional[Milestone]:
        return self._get(ResourceKind.MILESTONE, milestone_id)

    async def get_assessment(self, assessment_id: int) -> Optional[Assessment]:
        return self._get(ResourceKind.ASSESSMENT, assessment_id)

    async def get_submission(self, submission_id: int) -> Optional[Submission]:
        return self._get(ResourceKind.SUBMISSION, submission_id)

    async def get_team(self, team_id: int) -> Optional[Team]:
        return self._get(ResourceKind.TEAM, team_id)

    async def get_team_member(self, member_id: int) -> Optional[TeamMember]:
        return self._get(ResourceKind.TEAM_MEMBER, member_id)

    async def get_project_participant_ids(self, project_id: int) -> frozenset[int]:
        team_ids = {team.id for team in self._rows[ResourceKind.TEAM].values() if team.project_id == project_id}
        members = {
            member.student_id
            for member in self._rows[ResourceKind.TEAM_MEMBER].values()
            if member.team_id in team_ids and member.student_id is not None
        }
        return frozenset(members | self._assignments.get(project_id, set()))


__all__ = ["InMemoryResourceStore"]
