"""
Follow graph client.

The follow toggle is a remote procedure with a uniform result; every read
degrades to an empty/neutral value through the robust query helpers.
"""

from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from social_engine.backend.base import RemoteBackend, TableQuery
from social_engine.config import Settings, get_settings
from social_engine.core.formatting import AUTH_REQUIRED_MESSAGE, FOLLOW_ERROR_MESSAGE
from social_engine.core.identity import ActorProvider, StaticActorProvider, normalize_actor
from social_engine.core.query_executor import CandidateQuery, execute_candidates
from social_engine.core.robust_query import robust_query
from social_engine.models.dtos import FollowResult, FollowStats

PROFILE_EMBED = "id, name, username, avatar_url, bio"


class FollowClient:
    """Follow/unfollow and follower listings for the current actor."""

    def __init__(
        self,
        backend: RemoteBackend,
        actor: Optional[ActorProvider] = None,
        settings: Optional[Settings] = None,
    ):
        self.backend = backend
        self.actor = actor if actor is not None else StaticActorProvider()
        self.settings = settings or get_settings()

    async def toggle_follow(self, target_user_id: str) -> FollowResult:
        """Follow or unfollow ``target_user_id`` as the current actor."""
        if normalize_actor(self.actor.current_actor()) is None:
            return FollowResult(success=False, error=AUTH_REQUIRED_MESSAGE)

        try:
            result = await self.backend.rpc("toggle_follow", {"target_user_id": target_user_id})
        except Exception as e:
            logger.error(f"Toggle follow error: {e!r}")
            return FollowResult(success=False, error=FOLLOW_ERROR_MESSAGE)

        if result.error is not None:
            logger.error(f"Toggle follow error: {result.error}")
            return FollowResult(success=False, error=result.error.message)

        data = result.data if isinstance(result.data, dict) else {}
        try:
            return FollowResult.model_validate({"success": True, **data})
        except ValidationError as e:
            logger.error(f"Malformed toggle_follow response: {e}")
            return FollowResult(success=False, error=FOLLOW_ERROR_MESSAGE)

    async def get_follow_stats(self, user_id: str) -> Optional[FollowStats]:
        result = await robust_query(
            lambda: self.backend.rpc("get_follow_stats", {"user_id": user_id}),
            None,
            f"follow stats for user {user_id}",
        )
        if not isinstance(result.data, dict):
            return None
        try:
            return FollowStats.model_validate(result.data)
        except ValidationError as e:
            logger.warning(f"Discarding malformed follow stats for user {user_id}: {e}")
            return None

    async def get_followers(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent followers of ``user_id`` with their profile embedded."""
        limit = limit or self.settings.follow_list_limit
        candidates = [
            CandidateQuery(
                column,
                lambda column=column: self.backend.select(TableQuery(
                    table="follows",
                    columns=f"follower_id, {column}, created_at, "
                            f"follower:profiles!follows_follower_id_fkey({PROFILE_EMBED})",
                    filters={column: user_id},
                    order_by="created_at",
                    descending=True,
                    limit=limit,
                )),
            )
            for column in ("followee_id", "followed_id")
        ]
        result = await execute_candidates(candidates, [], f"followers of user {user_id}")
        return result.data

    async def get_following(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent accounts ``user_id`` follows with their profile embedded."""
        limit = limit or self.settings.follow_list_limit
        result = await robust_query(
            lambda: self.backend.select(TableQuery(
                table="follows",
                columns=f"follower_id, followee_id, created_at, "
                        f"followee:profiles!follows_followee_id_fkey({PROFILE_EMBED})",
                filters={"follower_id": user_id},
                order_by="created_at",
                descending=True,
                limit=limit,
            )),
            [],
            f"following of user {user_id}",
        )
        return result.data if isinstance(result.data, list) else []

    async def is_following(self, target_user_id: str) -> bool:
        actor_id = normalize_actor(self.actor.current_actor())
        if actor_id is None:
            return False
        result = await robust_query(
            lambda: self.backend.select(TableQuery(
                table="follows",
                columns="follower_id",
                filters={"follower_id": actor_id, "followee_id": target_user_id},
                maybe_single=True,
            )),
            None,
            f"follow status {actor_id} -> {target_user_id}",
        )
        return result.data is not None
