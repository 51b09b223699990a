"""
Schema-tolerant reads for secondary tables.

Comments and follow edges have been stored under more than one column layout
over time. Each read here is expressed as candidate queries for the executor
or as a single guarded query for the helper, so a missing table or renamed
column shows up as empty data instead of an exception.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from social_engine.backend.base import QueryResult, RemoteBackend, TableQuery
from social_engine.core.query_executor import CandidateQuery, execute_candidates
from social_engine.core.robust_query import robust_query
from social_engine.models.dtos import RobustResult

FOLLOWERS = "followers"
FOLLOWING = "following"

PROFILE_COLUMNS = "id, username, name, bio, avatar_url, banner_url"


class RobustReads:
    """Optional reads that degrade to defaults rather than fail."""

    def __init__(self, backend: RemoteBackend):
        self.backend = backend

    async def _count(self, query: TableQuery) -> QueryResult:
        # head-count reads carry their answer in ``count``; surface it as data
        result = await self.backend.select(query)
        if result.error is not None:
            return result
        return QueryResult(data=result.count or 0)

    async def comments(self, item_id: str) -> RobustResult[List[Dict[str, Any]]]:
        """Comments of an item, trying the modern, legacy and join-free shapes in turn."""
        candidates = [
            CandidateQuery(
                "modern",
                lambda: self.backend.select(TableQuery(
                    table="comments",
                    columns="id, text, author_id, created_at, profiles:author_id(username, name, avatar_url)",
                    filters={"work_id": item_id},
                )),
            ),
            CandidateQuery(
                "legacy",
                lambda: self.backend.select(TableQuery(
                    table="comments",
                    columns="id, content, user_id, created_at, profiles:user_id(username, name, avatar_url)",
                    filters={"work_id": item_id},
                )),
            ),
            CandidateQuery(
                "without-relations",
                lambda: self.backend.select(TableQuery(
                    table="comments",
                    columns="id, text, author_id, created_at",
                    filters={"work_id": item_id},
                )),
            ),
        ]
        return await execute_candidates(candidates, [], f"comments for work {item_id}")

    async def likes_count(self, item_id: str) -> RobustResult[int]:
        return await robust_query(
            lambda: self._count(TableQuery(table="likes", filters={"work_id": item_id}, count_only=True)),
            0,
            f"likes count for work {item_id}",
        )

    async def follows_count(self, user_id: str, direction: str) -> RobustResult[int]:
        """
        Followers or following count of a user.

        ``followers`` first tries the current ``followee_id`` column and then the
        legacy ``followed_id``; ``following`` only has ``follower_id``.
        """
        if direction not in (FOLLOWERS, FOLLOWING):
            raise ValueError(f"direction must be '{FOLLOWERS}' or '{FOLLOWING}', got {direction!r}")

        columns = ["followee_id", "followed_id"] if direction == FOLLOWERS else ["follower_id"]
        candidates = [
            CandidateQuery(
                column,
                lambda column=column: self._count(
                    TableQuery(table="follows", filters={column: user_id}, count_only=True)
                ),
            )
            for column in columns
        ]
        return await execute_candidates(candidates, 0, f"{direction} count for user {user_id}")

    async def profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = await robust_query(
            lambda: self.backend.select(TableQuery(
                table="profiles", columns=PROFILE_COLUMNS, filters={"id": user_id}, single=True
            )),
            None,
            f"profile for user {user_id}",
        )
        return result.data

    async def check_if_liked(self, item_id: str, actor_id: Optional[str]) -> bool:
        return await self._has_row("likes", item_id, actor_id)

    async def check_if_bookmarked(self, item_id: str, actor_id: Optional[str]) -> bool:
        return await self._has_row("bookmarks", item_id, actor_id)

    async def _has_row(self, table: str, item_id: str, actor_id: Optional[str]) -> bool:
        if not actor_id:
            return False
        result = await robust_query(
            lambda: self.backend.select(TableQuery(
                table=table,
                columns="work_id",
                filters={"work_id": item_id, "user_id": actor_id},
                maybe_single=True,
            )),
            None,
            f"{table} status for work {item_id}",
        )
        if result.fallback:
            logger.debug(f"Using fallback for {table} status of work {item_id}")
        return result.data is not None
