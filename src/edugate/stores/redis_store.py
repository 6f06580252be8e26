"""Redis-backed resource store.

Resource rows are JSON documents keyed by kind and id; enrollment is a Redis
set of student ids per project::

    {prefix}:resources:project:42      -> {"id": 42, "teacherId": 7, "schoolId": 5, ...}
    {prefix}:resources:milestone:9     -> {"id": 9, "projectId": 42}
    {prefix}:participants:42           -> {101, 102}

The store uses ``redis.asyncio`` so fetches run in the caller's event loop
and inherit its cancellation. Connection errors are raised as-is; the
resolver classifies them as store failures.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from ..exceptions import ConfigurationError
from ..models import (
    Assessment,
    Milestone,
    Project,
    ResourceKind,
    Submission,
    Team,
    TeamMember,
    parse_resource,
)

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "edugate"


class RedisResourceStore:
    """:class:`~edugate.stores.base.ResourceStore` over a ``redis.asyncio`` client.

    Args:
        client: A ``redis.asyncio.Redis`` instance created with
            ``decode_responses=True``.
        prefix: Key prefix (``GateConfig.redis_prefix``).
    """

    def __init__(self, client: Any, *, prefix: str = DEFAULT_PREFIX) -> None:
        self._redis = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str | None, *, prefix: str = DEFAULT_PREFIX) -> RedisResourceStore:
        """Create a store from a Redis URL.

        Raises:
            ConfigurationError: if no URL is configured.
        """
        if not url:
            raise ConfigurationError("REDIS_URL is not set; cannot build RedisResourceStore")

        import redis.asyncio as aioredis

        return cls(aioredis.from_url(url, decode_responses=True), prefix=prefix)

    @classmethod
    def from_config(cls, config: Any) -> RedisResourceStore:
        return cls.from_url(config.redis_url, prefix=config.redis_prefix)

    async def aclose(self) -> None:
        await self._redis.aclose()

    def resource_key(self, kind: ResourceKind, resource_id: int) -> str:
        return f"{self._prefix}:resources:{ResourceKind(kind).value}:{resource_id}"

    def participants_key(self, project_id: int) -> str:
        return f"{self._prefix}:participants:{project_id}"

    # ── Reads ──────────────────────────────────────────────

    async def _load(self, kind: ResourceKind, resource_id: int) -> Any:
        key = self.resource_key(kind, resource_id)
        raw = await self._redis.get(key)
        if raw is None:
            return None
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Malformed resource document at {key}")
        return parse_resource(kind, data)

    async def get_project(self, project_id: int) -> Optional[Project]:
        return await self._load(ResourceKind.PROJECT, project_id)

    async def get_milestone(self, milestone_id: int) -> Optional[Milestone]:
        return await self._load(ResourceKind.MILESTONE, milestone_id)

    async def get_assessment(self, assessment_id: int) -> Optional[Assessment]:
        return await self._load(ResourceKind.ASSESSMENT, assessment_id)

    async def get_submission(self, submission_id: int) -> Optional[Submission]:
        return await self._load(ResourceKind.SUBMISSION, submission_id)

    async def get_team(self, team_id: int) -> Optional[Team]:
        return await self._load(ResourceKind.TEAM, team_id)

    async def get_team_member(self, member_id: int) -> Optional[TeamMember]:
        return await self._load(ResourceKind.TEAM_MEMBER, member_id)

    async def get_project_participant_ids(self, project_id: int) -> frozenset[int]:
        members = await self._redis.smembers(self.participants_key(project_id))
        return frozenset(int(m) for m in members)

    # ── Writes (seeding / sync jobs; the gate never writes) ────

    async def put(self, resource: Any) -> None:
        key = self.resource_key(resource.kind, resource.id)
        await self._redis.set(key, resource.model_dump_json(by_alias=True, exclude={"kind"}))
        logger.debug("Stored %s", key)

    async def add_participant(self, project_id: int, student_id: int) -> None:
        await self._redis.sadd(self.participants_key(project_id), student_id)

    async def remove_participant(self, project_id: int, student_id: int) -> None:
        await self._redis.srem(self.participants_key(project_id), student_id)


__all__ = ["DEFAULT_PREFIX", "RedisResourceStore"]
