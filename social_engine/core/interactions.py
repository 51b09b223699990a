"""
Optimistic Action Coordinator.

One ``SocialInteractions`` instance owns the interaction state of a single
content item inside one observing context. Each action follows the same cycle:

    Idle -> Pending -> (Committed | RolledBack) -> Idle

Entering Pending mutates ``stats`` synchronously before the remote call is
awaited. A successful mutation overwrites the touched fields with the values
the server returned; a failed, raised or timed-out one reverts the optimistic
delta exactly. The in-flight flag is always cleared on the way out.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from loguru import logger

from social_engine.config import Settings, get_settings
from social_engine.core.formatting import (
    ACTION_ERROR_MESSAGES,
    UNEXPECTED_ERROR_MESSAGES,
    format_count,
    get_action_text,
)
from social_engine.core.identity import ActorProvider, StaticActorProvider, normalize_actor
from social_engine.core.social_client import SocialMutationClient
from social_engine.models.dtos import ActionKind, ActionResult, PendingActionState, SocialStats


@dataclass(frozen=True)
class _ActionFields:
    """Which stats fields an action touches and how the server names them."""

    counter: str
    flag: Optional[str] = None
    data_key: Optional[str] = None


_FIELDS = {
    ActionKind.LIKE: _ActionFields(counter="likes", flag="user_liked", data_key="liked"),
    ActionKind.BOOKMARK: _ActionFields(counter="bookmarks", flag="user_bookmarked", data_key="bookmarked"),
    ActionKind.REPOST: _ActionFields(counter="reposts", flag="user_reposted", data_key="reposted"),
    ActionKind.COMMENT: _ActionFields(counter="comments"),
}


@dataclass
class _OptimisticChange:
    """What entering Pending did, so a rollback can undo exactly that."""

    kind: ActionKind
    previous_flag: Optional[bool]
    delta: int
    revision: int


class SocialInteractions:
    """
    Interaction handle for one content item.

    Public surface: ``stats``, ``loading``, ``error``, the four ``is_*`` flags,
    ``like()``, ``bookmark()``, ``repost()``, ``comment()``, ``refresh_stats()``,
    ``format_count()`` and ``get_action_text()``. None of the action methods
    raise; failures end up in ``error``.
    """

    format_count = staticmethod(format_count)
    get_action_text = staticmethod(get_action_text)

    def __init__(
        self,
        item_id: str,
        client: SocialMutationClient,
        actor: Optional[ActorProvider] = None,
        initial_stats: Union[SocialStats, Mapping[str, Any], None] = None,
        settings: Optional[Settings] = None,
        loading: bool = False,
    ):
        """
        Args:
            item_id: Content item identifier
            client: Mutation client used for every remote call
            actor: Identity provider consulted at each action; anonymous when omitted
            initial_stats: Stats already known to the caller; missing fields are zero
            settings: Settings providing the mutation timeout
            loading: Start in the loading state, for a caller about to refresh
        """
        self.item_id = item_id
        self.client = client
        self.actor = actor if actor is not None else StaticActorProvider()
        self.settings = settings or get_settings()

        if isinstance(initial_stats, SocialStats):
            self.stats = initial_stats.model_copy()
        else:
            self.stats = SocialStats.model_validate(dict(initial_stats or {}))

        self.loading = loading
        self.error: Optional[str] = None
        self._pending: Dict[ActionKind, PendingActionState] = {
            kind: PendingActionState() for kind in ActionKind
        }
        # bumped by every refresh that replaced the stats
        self._revision = 0

    # ---------- passive state ----------
    @property
    def is_liking(self) -> bool:
        return self._pending[ActionKind.LIKE].in_flight

    @property
    def is_bookmarking(self) -> bool:
        return self._pending[ActionKind.BOOKMARK].in_flight

    @property
    def is_reposting(self) -> bool:
        return self._pending[ActionKind.REPOST].in_flight

    @property
    def is_commenting(self) -> bool:
        return self._pending[ActionKind.COMMENT].in_flight

    def pending_state(self, kind: ActionKind) -> PendingActionState:
        return self._pending[kind].model_copy()

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot for the UI layer."""
        return {
            "item_id": self.item_id,
            "stats": self.stats.model_dump(),
            "loading": self.loading,
            "error": self.error,
            "is_liking": self.is_liking,
            "is_bookmarking": self.is_bookmarking,
            "is_reposting": self.is_reposting,
            "is_commenting": self.is_commenting,
        }

    # ---------- actions ----------
    async def like(self) -> None:
        await self._run(ActionKind.LIKE)

    async def bookmark(self) -> None:
        await self._run(ActionKind.BOOKMARK)

    async def repost(self, caption: Optional[str] = None) -> None:
        await self._run(ActionKind.REPOST, caption=caption)

    async def comment(self, text: str, parent_id: Optional[str] = None) -> None:
        if not text or not text.strip():
            return
        await self._run(ActionKind.COMMENT, text=text, parent_id=parent_id)

    async def refresh_stats(self) -> bool:
        """
        Replace ``stats`` wholesale with a fresh server read.

        A failed read keeps the current numbers and sets no error.

        Returns:
            True when the stats were replaced
        """
        self.loading = True
        self.error = None
        try:
            fresh = await self.client.get_stats(self.item_id, self.actor.current_actor())
        except Exception as e:
            logger.warning(f"Error refreshing social stats for work {self.item_id}: {e!r}")
            return False
        finally:
            self.loading = False

        if fresh is None:
            logger.debug(f"Stats refresh for work {self.item_id} returned nothing, keeping current values")
            return False

        self.stats = fresh
        self._revision += 1
        logger.debug(f"Stats for work {self.item_id} refreshed (revision {self._revision})")
        return True

    # ---------- state machine ----------
    async def _run(self, kind: ActionKind, **payload: Any) -> None:
        actor_id = normalize_actor(self.actor.current_actor())
        pending = self._pending[kind]
        if actor_id is None or pending.in_flight:
            return

        pending.in_flight = True
        pending.last_error = None
        self.error = None
        change = self._apply_optimistic(kind)

        try:
            result = await self._invoke(kind, actor_id, payload)
            if result.success:
                self._commit(kind, result.data)
            else:
                self._rollback(change)
                self._set_error(kind, result.error or ACTION_ERROR_MESSAGES[kind])
        except asyncio.CancelledError:
            self._rollback(change)
            raise
        except Exception as e:
            if isinstance(e, asyncio.TimeoutError):
                logger.warning(
                    f"{kind.value} on work {self.item_id} timed out after "
                    f"{self.settings.mutation_timeout}s"
                )
            else:
                logger.error(f"Unexpected error during {kind.value} on work {self.item_id}: {e!r}")
            self._rollback(change)
            self._set_error(kind, UNEXPECTED_ERROR_MESSAGES[kind])
        finally:
            pending.in_flight = False

    async def _invoke(self, kind: ActionKind, actor_id: str, payload: Dict[str, Any]) -> ActionResult:
        if kind is ActionKind.LIKE:
            call = self.client.toggle_like(self.item_id, actor_id)
        elif kind is ActionKind.BOOKMARK:
            call = self.client.toggle_bookmark(self.item_id, actor_id)
        elif kind is ActionKind.REPOST:
            call = self.client.toggle_repost(self.item_id, actor_id, payload.get("caption"))
        else:
            call = self.client.add_comment(
                self.item_id, actor_id, payload["text"], payload.get("parent_id")
            )
        return await asyncio.wait_for(call, timeout=self.settings.mutation_timeout)

    def _apply_optimistic(self, kind: ActionKind) -> _OptimisticChange:
        fields = _FIELDS[kind]
        before = getattr(self.stats, fields.counter)
        previous_flag = None

        if fields.flag is None:
            after = before + 1
        else:
            previous_flag = getattr(self.stats, fields.flag)
            after = max(0, before - 1) if previous_flag else before + 1
            setattr(self.stats, fields.flag, not previous_flag)
        setattr(self.stats, fields.counter, after)

        return _OptimisticChange(
            kind=kind, previous_flag=previous_flag, delta=after - before, revision=self._revision
        )

    def _commit(self, kind: ActionKind, data: Any) -> None:
        fields = _FIELDS[kind]
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, Mapping):
            logger.debug(f"{kind.value} on work {self.item_id} committed without server fields")
            return

        if fields.flag is not None and isinstance(data.get(fields.data_key), bool):
            setattr(self.stats, fields.flag, data[fields.data_key])
        count = data.get("count")
        if isinstance(count, int) and not isinstance(count, bool):
            setattr(self.stats, fields.counter, max(0, count))
        logger.debug(f"{kind.value} on work {self.item_id} committed: {dict(data)}")

    def _rollback(self, change: _OptimisticChange) -> None:
        if change.revision != self._revision:
            # a refresh landed after the optimistic update and is already authoritative
            logger.warning(
                f"Skipping rollback of {change.kind.value} on work {self.item_id}: stats were refreshed"
            )
            return

        fields = _FIELDS[change.kind]
        if fields.flag is not None:
            setattr(self.stats, fields.flag, change.previous_flag)
        current = getattr(self.stats, fields.counter)
        setattr(self.stats, fields.counter, max(0, current - change.delta))
        logger.warning(f"Rolled back {change.kind.value} on work {self.item_id}")

    def _set_error(self, kind: ActionKind, message: str) -> None:
        self.error = message
        self._pending[kind].last_error = message
