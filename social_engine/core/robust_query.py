"""
Robust single-query helper.

Wraps one read so that it can never raise or report an error to its caller:
any failure becomes the caller's default with ``fallback=True``. This is the
single entry point for optional reads such as counts and join lookups.
"""

from typing import Any, Awaitable, Callable, Mapping, Optional, Tuple, TypeVar

from loguru import logger

from social_engine.backend.base import QueryResult
from social_engine.models.dtos import RobustResult

T = TypeVar("T")

QueryFn = Callable[[], Awaitable[Any]]


def unpack_result(result: Any) -> Tuple[Any, Optional[Any]]:
    """
    Split a ``{data, error}`` shaped result into its two halves.

    Accepts a ``QueryResult``, a mapping, or any object exposing ``data``/``error``.
    """
    if isinstance(result, QueryResult):
        return result.data, result.error
    if isinstance(result, Mapping):
        return result.get("data"), result.get("error")
    return getattr(result, "data", None), getattr(result, "error", None)


async def robust_query(
    query_fn: QueryFn,
    fallback_data: T,
    context: str = "Unknown query",
) -> RobustResult[T]:
    """
    Run one query and absorb every failure into ``fallback_data``.

    Args:
        query_fn: Zero-argument coroutine function returning ``{data, error}``
        fallback_data: Value returned when the query raises or reports an error
        context: Diagnostic label used in log messages

    Returns:
        RobustResult: never carries an error; ``fallback`` tells whether the default
        was substituted because of a failure. A successful query that found
        nothing yields the default with ``fallback=False``.
    """
    try:
        result = await query_fn()
    except Exception as e:
        logger.warning(f"Query failed in {context}: {e!r}")
        return RobustResult(data=fallback_data, fallback=True)

    data, error = unpack_result(result)
    if error is not None:
        logger.warning(f"Database error in {context}: {error}")
        return RobustResult(data=fallback_data, fallback=True)

    return RobustResult(data=fallback_data if data is None else data, fallback=False)
