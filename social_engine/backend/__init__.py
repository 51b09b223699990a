"""
Remote backend boundary for the social engine.
"""

from .base import (
    BackendError,
    BackendUnavailableError,
    QueryResult,
    RemoteBackend,
    TableQuery,
)
from .rest_backend import RestBackend

__all__ = [
    "BackendError",
    "BackendUnavailableError",
    "QueryResult",
    "RemoteBackend",
    "RestBackend",
    "TableQuery",
]
