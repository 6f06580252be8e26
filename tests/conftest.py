"""Shared fixtures: a small school with two tenants and a few orphaned rows.

Layout::

    school 5:  project 1 (teacher 10)  ── milestone 11 ── assessment 111 ── submissions 1111 (student 100),
                                       │                                    1112 (student 101)
                                       └─ team 12 ── member 121 (student 100)
               project 2 (teacher 20)  ── milestone 21 ── assessment 211
                                          direct assignment: student 102
    school 9:  project 3 (teacher 30)  ── milestone 31
    no school: project 4 (teacher 40)

    orphans:   milestone 99 (project_id=None), milestone 98 (project 404 missing),
               assessment 97 (milestone_id=None), team member 96 (team 404 missing)
"""

from __future__ import annotations

import pytest

from edugate import (
    Assessment,
    Gate,
    InMemoryResourceStore,
    Milestone,
    Principal,
    Project,
    Role,
    Submission,
    Team,
    TeamMember,
    Tier,
)


@pytest.fixture
def store() -> InMemoryResourceStore:
    s = InMemoryResourceStore(
        [
            Project(id=1, teacher_id=10, school_id=5),
            Project(id=2, teacher_id=20, school_id=5, is_public=True),
            Project(id=3, teacher_id=30, school_id=9),
            Project(id=4, teacher_id=40, school_id=None),
            Milestone(id=11, project_id=1),
            Milestone(id=21, project_id=2),
            Milestone(id=31, project_id=3),
            Assessment(id=111, milestone_id=11),
            Assessment(id=211, milestone_id=21),
            Submission(id=1111, student_id=100, assessment_id=111),
            Submission(id=1112, student_id=101, assessment_id=111),
            Team(id=12, project_id=1),
            TeamMember(id=121, team_id=12, student_id=100),
            Milestone(id=99, project_id=None),
            Milestone(id=98, project_id=404),
            Assessment(id=97, milestone_id=None),
            TeamMember(id=96, team_id=404, student_id=100),
        ]
    )
    s.assign_student(2, 102)
    return s


@pytest.fixture
def gate(store: InMemoryResourceStore) -> Gate:
    return Gate.from_store(store)


@pytest.fixture
def teacher_t1() -> Principal:
    return Principal(id=10, role=Role.TEACHER, tier=Tier.ENTERPRISE, school_id=5)


@pytest.fixture
def teacher_t2() -> Principal:
    return Principal(id=20, role=Role.TEACHER, tier=Tier.ENTERPRISE, school_id=5)


@pytest.fixture
def free_teacher() -> Principal:
    return Principal(id=10, role=Role.TEACHER, tier=Tier.FREE, school_id=5)


@pytest.fixture
def enterprise_admin() -> Principal:
    return Principal(id=1, role=Role.ADMIN, tier=Tier.ENTERPRISE)


@pytest.fixture
def free_admin() -> Principal:
    return Principal(id=40, role=Role.ADMIN, tier=Tier.FREE)


@pytest.fixture
def enrolled_student() -> Principal:
    """Student 100: team member on project 1."""
    return Principal(id=100, role=Role.STUDENT, tier=Tier.FREE, school_id=5)


@pytest.fixture
def outsider_student() -> Principal:
    """Student 101: not on any team or assignment (but has a submission row)."""
    return Principal(id=101, role=Role.STUDENT, tier=Tier.FREE, school_id=5)


@pytest.fixture
def assigned_student() -> Principal:
    """Student 102: directly assigned to project 2."""
    return Principal(id=102, role=Role.STUDENT, tier=Tier.FREE, school_id=5)
