"""
Remote backend boundary.

The managed database service is consumed only through two calls, a remote
procedure call and a table read, each answering with a ``{data, error}`` pair.
Ordinary failures (network, validation, missing column) arrive as a populated
``error``; callers still guard against language-level exceptions.
"""

from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel, Field

# PostgREST code for "single row expected, none or many found"
NO_SINGLE_ROW_CODE = "PGRST116"
NETWORK_ERROR_CODE = "NETWORK"


class BackendError(BaseModel):
    """Structured error returned by the backend instead of raising."""
    message: str
    code: Optional[str] = None
    details: Optional[str] = None
    hint: Optional[str] = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}" if self.code else self.message


class BackendUnavailableError(Exception):
    """Raised when a transport is used outside its lifecycle (e.g. after close())."""


class QueryResult(BaseModel):
    """``{data, error}`` pair; ``count`` is filled for exact-count reads."""
    data: Optional[Any] = None
    error: Optional[BackendError] = None
    count: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str, code: Optional[str] = None, **extra: Any) -> "QueryResult":
        return cls(error=BackendError(message=message, code=code, **extra))


class TableQuery(BaseModel):
    """
    Declarative description of one table read.

    ``filters`` are equality filters (column -> value). ``single`` demands exactly
    one row; ``maybe_single`` tolerates zero rows and yields ``data=None``.
    ``count_only`` asks for an exact row count without fetching rows.
    """
    table: str
    columns: str = "*"
    filters: Dict[str, Any] = Field(default_factory=dict)
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None
    single: bool = False
    maybe_single: bool = False
    count_only: bool = False


class RemoteBackend(Protocol):
    """Protocol implemented by every transport (HTTP, in-memory test stub)."""

    async def rpc(self, function: str, params: Dict[str, Any]) -> QueryResult:
        """Invoke a remote procedure by name."""
        ...

    async def select(self, query: TableQuery) -> QueryResult:
        """Run one table read."""
        ...
