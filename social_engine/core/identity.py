"""
Actor identity as seen by the engine: a stable identifier, or nothing.
"""

from typing import Optional, Protocol


class ActorProvider(Protocol):
    def current_actor(self) -> Optional[str]:
        ...


def normalize_actor(actor_id: Optional[str]) -> Optional[str]:
    """Blank identifiers count as absent."""
    if actor_id is None:
        return None
    actor_id = actor_id.strip()
    return actor_id or None


class StaticActorProvider:
    """Holds an identity set by the authentication layer."""

    def __init__(self, actor_id: Optional[str] = None):
        self._actor_id = normalize_actor(actor_id)

    def current_actor(self) -> Optional[str]:
        return self._actor_id

    def set_actor(self, actor_id: Optional[str]) -> None:
        self._actor_id = normalize_actor(actor_id)
