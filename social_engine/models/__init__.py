"""
Models package for the social engine.

This package contains the Pydantic DTOs shared by every component.
"""

from .dtos import (
    ActionKind,
    ActionResult,
    FollowResult,
    FollowStats,
    HealthCheckResult,
    HealthReport,
    HealthStatus,
    PendingActionState,
    RobustResult,
    SocialStats,
)

__all__ = [
    "ActionKind",
    "ActionResult",
    "FollowResult",
    "FollowStats",
    "HealthCheckResult",
    "HealthReport",
    "HealthStatus",
    "PendingActionState",
    "RobustResult",
    "SocialStats",
]
