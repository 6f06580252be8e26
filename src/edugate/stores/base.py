"""Resource store port.

The gate never talks to a database directly. It depends on this protocol,
one fetch per resource kind plus a participant lookup for enrollment.
Implementations return ``None`` for an absent row and raise for
infrastructure faults; the resolver turns those into ``StoreFailureError``.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ..models import Assessment, Milestone, Project, Submission, Team, TeamMember


@runtime_checkable
class ResourceStore(Protocol):
    """Async read port over the resource store."""

    async def get_project(self, project_id: int) -> Optional[Project]: ...

    async def get_milestone(self, milestone_id: int) -> Optional[Milestone]: ...

    async def get_assessment(self, assessment_id: int) -> Optional[Assessment]: ...

    async def get_submission(self, submission_id: int) -> Optional[Submission]: ...

    async def get_team(self, team_id: int) -> Optional[Team]: ...

    async def get_team_member(self, member_id: int) -> Optional[TeamMember]: ...

    async def get_project_participant_ids(self, project_id: int) -> frozenset[int]:
        """Student ids on a team of the project or directly assigned to it."""
        ...


__all__ = ["ResourceStore"]
