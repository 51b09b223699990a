"""
Social Mutation Client.

Thin, uniform wrappers around the remote social procedures. Every mutation
answers with an ``ActionResult`` and never raises; there are no retries at this
layer, a failure is reported once and the caller decides what to undo.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from pydantic import ValidationError

from social_engine.backend.base import RemoteBackend
from social_engine.config import Settings, get_settings
from social_engine.core.formatting import (
    ACTION_ERROR_MESSAGES,
    AUTH_REQUIRED_MESSAGE,
    COMMENT_LIKE_ERROR_MESSAGE,
    UNEXPECTED_ERROR_MESSAGES,
)
from social_engine.core.identity import normalize_actor
from social_engine.core.robust_query import robust_query
from social_engine.models.dtos import ActionKind, ActionResult, SocialStats

RPC_TOGGLE_LIKE = "toggle_work_like"
RPC_TOGGLE_BOOKMARK = "toggle_work_bookmark"
RPC_TOGGLE_REPOST = "toggle_work_repost"
RPC_ADD_COMMENT = "add_work_comment"
RPC_TOGGLE_COMMENT_LIKE = "toggle_comment_like"
RPC_GET_STATS = "get_work_social_stats"
RPC_GET_FEED = "get_social_feed"

EMPTY_COMMENT_MESSAGE = "El comentario no puede estar vacío"


class SocialMutationClient:
    """
    Remote social-write intents plus the per-item stats read.

    All methods take the content-item identifier and the actor identifier
    explicitly; a missing actor turns every mutation into ``success=False``.
    """

    def __init__(self, backend: RemoteBackend, settings: Optional[Settings] = None):
        """
        Args:
            backend: Transport to the managed database service
            settings: Settings providing batch/page sizes
        """
        self.backend = backend
        self.settings = settings or get_settings()

    async def _call(
        self,
        function: str,
        params: Dict[str, Any],
        failure_message: str,
        unexpected_message: str,
    ) -> ActionResult:
        try:
            result = await self.backend.rpc(function, params)
        except Exception as e:
            logger.error(f"Unexpected error calling {function}: {e!r}")
            return ActionResult.fail(unexpected_message)

        if result.error is not None:
            logger.error(f"Error calling {function}: {result.error}")
            return ActionResult.fail(result.error.message or failure_message)

        logger.debug(f"{function} succeeded with data: {result.data!r}")
        return ActionResult.ok(result.data)

    async def toggle_like(self, item_id: str, actor_id: Optional[str]) -> ActionResult:
        """Toggle the actor's like; ``data`` carries ``liked`` and ``count``."""
        actor_id = normalize_actor(actor_id)
        if actor_id is None:
            return ActionResult.fail(AUTH_REQUIRED_MESSAGE)
        return await self._call(
            RPC_TOGGLE_LIKE,
            {"work_id": item_id, "user_id": actor_id},
            ACTION_ERROR_MESSAGES[ActionKind.LIKE],
            UNEXPECTED_ERROR_MESSAGES[ActionKind.LIKE],
        )

    async def toggle_bookmark(self, item_id: str, actor_id: Optional[str]) -> ActionResult:
        """Toggle the actor's bookmark; ``data`` carries ``bookmarked`` (and ``count`` when sent)."""
        actor_id = normalize_actor(actor_id)
        if actor_id is None:
            return ActionResult.fail(AUTH_REQUIRED_MESSAGE)
        return await self._call(
            RPC_TOGGLE_BOOKMARK,
            {"work_id": item_id, "user_id": actor_id},
            ACTION_ERROR_MESSAGES[ActionKind.BOOKMARK],
            UNEXPECTED_ERROR_MESSAGES[ActionKind.BOOKMARK],
        )

    async def toggle_repost(
        self, item_id: str, actor_id: Optional[str], caption: Optional[str] = None
    ) -> ActionResult:
        """Toggle the actor's repost with an optional caption."""
        actor_id = normalize_actor(actor_id)
        if actor_id is None:
            return ActionResult.fail(AUTH_REQUIRED_MESSAGE)
        return await self._call(
            RPC_TOGGLE_REPOST,
            {"work_id": item_id, "user_id": actor_id, "caption": caption or None},
            ACTION_ERROR_MESSAGES[ActionKind.REPOST],
            UNEXPECTED_ERROR_MESSAGES[ActionKind.REPOST],
        )

    async def add_comment(
        self,
        item_id: str,
        actor_id: Optional[str],
        text: str,
        parent_id: Optional[str] = None,
    ) -> ActionResult:
        """Add a comment, threaded under ``parent_id`` when given; ``data`` carries ``count``."""
        actor_id = normalize_actor(actor_id)
        if actor_id is None:
            return ActionResult.fail(AUTH_REQUIRED_MESSAGE)
        text = (text or "").strip()
        if not text:
            return ActionResult.fail(EMPTY_COMMENT_MESSAGE)
        return await self._call(
            RPC_ADD_COMMENT,
            {
                "work_id": item_id,
                "user_id": actor_id,
                "comment_text": text,
                "parent_id": parent_id or None,
            },
            ACTION_ERROR_MESSAGES[ActionKind.COMMENT],
            UNEXPECTED_ERROR_MESSAGES[ActionKind.COMMENT],
        )

    async def toggle_comment_like(self, comment_id: str, actor_id: Optional[str]) -> ActionResult:
        """Toggle the actor's like on a single comment."""
        actor_id = normalize_actor(actor_id)
        if actor_id is None:
            return ActionResult.fail(AUTH_REQUIRED_MESSAGE)
        return await self._call(
            RPC_TOGGLE_COMMENT_LIKE,
            {"comment_id": comment_id, "user_id": actor_id},
            COMMENT_LIKE_ERROR_MESSAGE,
            COMMENT_LIKE_ERROR_MESSAGE,
        )

    async def get_stats(self, item_id: str, actor_id: Optional[str] = None) -> Optional[SocialStats]:
        """
        Fetch the full stats of one item.

        Args:
            item_id: Content item identifier
            actor_id: Current actor, or None for anonymous viewers

        Returns:
            SocialStats, or None when the read failed or returned nothing usable.
            Without an actor the ``user_*`` flags are always False.
        """
        actor_id = normalize_actor(actor_id)
        result = await robust_query(
            lambda: self.backend.rpc(RPC_GET_STATS, {"work_id": item_id, "user_id": actor_id}),
            None,
            f"social stats for work {item_id}",
        )
        data = result.data
        if isinstance(data, list):
            # set-returning procedures answer with a list of one row
            data = data[0] if data else None
        if data is None:
            return None

        try:
            stats = SocialStats.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Discarding malformed stats for work {item_id}: {e}")
            return None

        if actor_id is None:
            stats = stats.model_copy(
                update={"user_liked": False, "user_bookmarked": False, "user_reposted": False}
            )
        return stats

    async def get_batch_stats(
        self, item_ids: Iterable[str], actor_id: Optional[str] = None
    ) -> Dict[str, SocialStats]:
        """
        Fetch stats for many items, ``stats_batch_size`` at a time.

        Items whose read failed are left out of the mapping.
        """
        ids = list(dict.fromkeys(item_ids))
        batch_size = self.settings.stats_batch_size
        results: Dict[str, SocialStats] = {}

        for start in range(0, len(ids), batch_size):
            batch = ids[start:start + batch_size]
            batch_stats = await asyncio.gather(
                *(self.get_stats(item_id, actor_id) for item_id in batch)
            )
            for item_id, stats in zip(batch, batch_stats):
                if stats is not None:
                    results[item_id] = stats

        logger.info(f"Fetched stats for {len(results)}/{len(ids)} works")
        return results

    async def get_social_feed(
        self, actor_id: Optional[str], limit: Optional[int] = None, offset: int = 0
    ) -> List[Dict[str, Any]]:
        """The actor's feed page; an empty list when anonymous or on failure."""
        actor_id = normalize_actor(actor_id)
        if actor_id is None:
            return []
        limit = limit or self.settings.feed_page_size
        result = await robust_query(
            lambda: self.backend.rpc(
                RPC_GET_FEED,
                {"user_id": actor_id, "page_limit": limit, "page_offset": offset},
            ),
            [],
            f"social feed for user {actor_id}",
        )
        return result.data if isinstance(result.data, list) else []
