"""Core data models for edugate.

Principals and resource descriptors are Pydantic models, frozen so that
nothing downstream of the store or the authentication layer can mutate them
mid-request.

Resource descriptors form a tagged union discriminated by ``kind``. Each
non-root kind carries exactly one parent reference; ``None`` there means the
row is orphaned.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Role(str, Enum):
    """Principal roles."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class Tier(str, Enum):
    """Subscription tiers."""

    FREE = "free"
    ENTERPRISE = "enterprise"


class ResourceKind(str, Enum):
    """Discriminator for :data:`ResourceDescriptor` variants."""

    PROJECT = "project"
    MILESTONE = "milestone"
    ASSESSMENT = "assessment"
    SUBMISSION = "submission"
    TEAM = "team"
    TEAM_MEMBER = "team_member"


class Principal(BaseModel):
    """An authenticated actor, as attached by the authentication layer."""

    model_config = ConfigDict(frozen=True)

    id: int
    role: Role
    tier: Tier = Tier.FREE
    school_id: Optional[int] = None


class _Resource(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int


class Project(_Resource):
    """Tenant-owning root of every ownership chain."""

    kind: Literal[ResourceKind.PROJECT] = ResourceKind.PROJECT
    teacher_id: Optional[int] = None
    school_id: Optional[int] = None
    is_public: bool = False


class Milestone(_Resource):
    kind: Literal[ResourceKind.MILESTONE] = ResourceKind.MILESTONE
    project_id: Optional[int] = None


class Assessment(_Resource):
    kind: Literal[ResourceKind.ASSESSMENT] = ResourceKind.ASSESSMENT
    milestone_id: Optional[int] = None


class Submission(_Resource):
    kind: Literal[ResourceKind.SUBMISSION] = ResourceKind.SUBMISSION
    student_id: Optional[int] = None
    assessment_id: Optional[int] = None


class Team(_Resource):
    kind: Literal[ResourceKind.TEAM] = ResourceKind.TEAM
    project_id: Optional[int] = None


class TeamMember(_Resource):
    kind: Literal[ResourceKind.TEAM_MEMBER] = ResourceKind.TEAM_MEMBER
    team_id: Optional[int] = None
    student_id: Optional[int] = None


ResourceDescriptor = Annotated[
    Union[Project, Milestone, Assessment, Submission, Team, TeamMember],
    Field(discriminator="kind"),
]

_DESCRIPTOR_ADAPTER: TypeAdapter[Any] = TypeAdapter(ResourceDescriptor)

MODEL_BY_KIND: dict[ResourceKind, type[_Resource]] = {
    ResourceKind.PROJECT: Project,
    ResourceKind.MILESTONE: Milestone,
    ResourceKind.ASSESSMENT: Assessment,
    ResourceKind.SUBMISSION: Submission,
    ResourceKind.TEAM: Team,
    ResourceKind.TEAM_MEMBER: TeamMember,
}

# kind -> (parent reference field, parent kind); Project is the root.
PARENT_LINKS: dict[ResourceKind, tuple[str, ResourceKind]] = {
    ResourceKind.MILESTONE: ("project_id", ResourceKind.PROJECT),
    ResourceKind.ASSESSMENT: ("milestone_id", ResourceKind.MILESTONE),
    ResourceKind.SUBMISSION: ("assessment_id", ResourceKind.ASSESSMENT),
    ResourceKind.TEAM: ("project_id", ResourceKind.PROJECT),
    ResourceKind.TEAM_MEMBER: ("team_id", ResourceKind.TEAM),
}


def parse_resource(kind: ResourceKind | str, data: dict[str, Any]) -> Any:
    """Build the descriptor variant for ``kind`` from raw store data.

    Accepts both snake_case and the camelCase column names the store layer
    uses (``teacherId``, ``projectId``...). Unknown keys are dropped.

    Raises:
        pydantic.ValidationError: if the data does not fit the variant.
    """
    kind = ResourceKind(kind)
    normalized: dict[str, Any] = {"kind": kind}
    for key, value in data.items():
        if key == "kind":
            continue
        normalized[_snake_case(key)] = value
    return _DESCRIPTOR_ADAPTER.validate_python(normalized)


def parent_reference(resource: Any) -> tuple[ResourceKind, Optional[int]] | None:
    """Return ``(parent_kind, parent_id)`` for a non-root resource.

    Returns None for a Project.
    """
    link = PARENT_LINKS.get(resource.kind)
    if link is None:
        return None
    field_name, parent_kind = link
    return parent_kind, getattr(resource, field_name)


def _snake_case(name: str) -> str:
    out: list[str] = []
    for ch in name:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


__all__ = [
    "Assessment",
    "MODEL_BY_KIND",
    "Milestone",
    "PARENT_LINKS",
    "Principal",
    "Project",
    "ResourceDescriptor",
    "ResourceKind",
    "Role",
    "Submission",
    "Team",
    "TeamMember",
    "Tier",
    "parent_reference",
    "parse_resource",
]
