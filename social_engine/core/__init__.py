"""
Core components of the social interaction engine.
"""

from .query_executor import CandidateQuery, execute_candidates
from .robust_query import robust_query
from .formatting import format_count, get_action_text
from .identity import ActorProvider, StaticActorProvider
from .social_client import SocialMutationClient
from .interactions import SocialInteractions
from .robust_reads import RobustReads
from .follows import FollowClient
from .session import InteractionSession
from .health_check import generate_migration_script, run_health_check

__all__ = [
    "CandidateQuery",
    "execute_candidates",
    "robust_query",
    "format_count",
    "get_action_text",
    "ActorProvider",
    "StaticActorProvider",
    "SocialMutationClient",
    "SocialInteractions",
    "RobustReads",
    "FollowClient",
    "InteractionSession",
    "generate_migration_script",
    "run_health_check",
]
