"""
Interaction session: the scope that owns coordinators for one observing context.

A UI surface (a page, a request, a CLI run) opens one session, asks it for the
coordinator of each item it renders, and closes it when done. The session is
also the identity provider for its coordinators, so a login or logout is a
single ``set_actor()`` call that re-syncs every open item.
"""

import asyncio
from typing import Any, Dict, Mapping, Optional, Union

from loguru import logger

from social_engine.config import Settings, get_settings
from social_engine.core.identity import normalize_actor
from social_engine.core.interactions import SocialInteractions
from social_engine.core.social_client import SocialMutationClient
from social_engine.models.dtos import SocialStats


class InteractionSession:
    """Registry of ``SocialInteractions`` keyed by item id."""

    def __init__(
        self,
        client: SocialMutationClient,
        actor_id: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.settings = settings or get_settings()
        self._actor_id = normalize_actor(actor_id)
        self._interactions: Dict[str, SocialInteractions] = {}
        self._closed = False

    def current_actor(self) -> Optional[str]:
        return self._actor_id

    @property
    def closed(self) -> bool:
        return self._closed

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._interactions

    def __len__(self) -> int:
        return len(self._interactions)

    async def get(
        self,
        item_id: str,
        initial_stats: Union[SocialStats, Mapping[str, Any], None] = None,
        refresh: bool = True,
    ) -> SocialInteractions:
        """
        Return the coordinator for ``item_id``, creating it on first use.

        A newly created coordinator starts from ``initial_stats`` and, unless
        ``refresh`` is False, replaces them with a server read right away.
        """
        if self._closed:
            raise RuntimeError("InteractionSession is closed")

        interactions = self._interactions.get(item_id)
        if interactions is not None:
            return interactions

        interactions = SocialInteractions(
            item_id,
            self.client,
            actor=self,
            initial_stats=initial_stats,
            settings=self.settings,
            loading=refresh,
        )
        self._interactions[item_id] = interactions
        logger.debug(f"Opened interactions for work {item_id}")

        if refresh:
            await interactions.refresh_stats()
        return interactions

    async def set_actor(self, actor_id: Optional[str]) -> None:
        """Switch identity and re-sync every open coordinator concurrently."""
        actor_id = normalize_actor(actor_id)
        if actor_id == self._actor_id:
            return
        self._actor_id = actor_id
        logger.info(f"Session actor changed, refreshing {len(self._interactions)} works")

        if self._interactions:
            await asyncio.gather(
                *(interactions.refresh_stats() for interactions in self._interactions.values())
            )

    def close(self) -> None:
        """Forget every coordinator; the session cannot be used afterwards."""
        self._interactions.clear()
        self._actor_id = None
        self._closed = True

    async def __aenter__(self) -> "InteractionSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
