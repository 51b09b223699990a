"""
Pydantic Data Transfer Objects (DTOs) for the social engine.

These models carry interaction state between the remote backend, the
mutation client, the optimistic coordinator and the UI layer.
"""

from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class ActionKind(str, Enum):
    """The four per-item social actions tracked by the coordinator."""
    LIKE = "like"
    BOOKMARK = "bookmark"
    REPOST = "repost"
    COMMENT = "comment"


class SocialStats(BaseModel):
    """
    Aggregate social counters for one content item plus the current actor's
    relationship to it.

    Counts are server-authoritative and never negative. The ``user_*`` flags
    only mean something when an actor is known; otherwise they stay False.
    """
    likes: int = Field(default=0, ge=0)
    comments: int = Field(default=0, ge=0)
    reposts: int = Field(default=0, ge=0)
    bookmarks: int = Field(default=0, ge=0)
    user_liked: bool = False
    user_bookmarked: bool = False
    user_reposted: bool = False

    model_config = ConfigDict(extra="ignore", validate_assignment=True, from_attributes=True)

    @field_validator("likes", "comments", "reposts", "bookmarks", mode="before")
    @classmethod
    def null_count_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("user_liked", "user_bookmarked", "user_reposted", mode="before")
    @classmethod
    def null_flag_is_false(cls, v: Any) -> Any:
        return False if v is None else v


class ActionResult(BaseModel):
    """
    Uniform outcome of one remote social mutation.

    ``data`` carries whatever the remote procedure returned, typically the new
    authoritative boolean (``liked``/``bookmarked``/``reposted``) and/or ``count``.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ActionResult":
        return cls(success=False, error=error)


class RobustResult(BaseModel, Generic[T]):
    """
    Outcome of a resilient read.

    ``error`` is always None: failures are expressed as ``fallback=True`` with the
    caller's default in ``data``. ``variant`` names the candidate that produced
    the data, when one did.
    """
    data: T
    error: None = None
    fallback: bool = False
    variant: Optional[str] = None


class PendingActionState(BaseModel):
    """In-flight flag and last error for one (item, action kind) pair."""
    in_flight: bool = False
    last_error: Optional[str] = None


class FollowStats(BaseModel):
    """Follower/following counts for a profile, plus whether the actor follows it."""
    followers_count: int = Field(default=0, ge=0)
    following_count: int = Field(default=0, ge=0)
    is_following: bool = False

    model_config = ConfigDict(extra="ignore")


class FollowResult(BaseModel):
    """Outcome of a follow toggle."""
    success: bool
    action: Optional[str] = None  # 'followed' | 'unfollowed'
    following: Optional[bool] = None
    error: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    ERROR = "error"


class HealthCheckResult(BaseModel):
    """One table's verdict from the schema health check."""
    status: HealthStatus
    table: str
    issue: Optional[str] = None
    recommendation: Optional[str] = None


class HealthReport(BaseModel):
    """Aggregated health check output."""
    results: List[HealthCheckResult] = Field(default_factory=list)

    @property
    def counts(self) -> Dict[str, int]:
        totals = {status.value: 0 for status in HealthStatus}
        for result in self.results:
            totals[result.status.value] += 1
        return totals

    @property
    def healthy(self) -> bool:
        return all(r.status != HealthStatus.ERROR for r in self.results)
