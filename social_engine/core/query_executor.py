"""
Resilient query executor.

The backend schema for secondary tables has drifted over time (renamed
columns, optional tables). A logical read is therefore described as an ordered
list of candidate queries, preferred shape first and legacy or minimal shapes
after it. The executor tries them in order and returns the first one that
yields data, or the caller's default when none does. It never raises.
"""

from dataclasses import dataclass
from typing import Sequence, TypeVar, Union

from loguru import logger

from social_engine.core.robust_query import QueryFn, unpack_result
from social_engine.models.dtos import RobustResult

T = TypeVar("T")


@dataclass(frozen=True)
class CandidateQuery:
    """One independently executable shape of a logical read."""

    name: str
    run: QueryFn


Candidate = Union[CandidateQuery, QueryFn]


def _as_candidates(candidates: Sequence[Candidate]) -> list[CandidateQuery]:
    normalized = []
    for index, candidate in enumerate(candidates, start=1):
        if isinstance(candidate, CandidateQuery):
            normalized.append(candidate)
        else:
            normalized.append(CandidateQuery(name=f"variant-{index}", run=candidate))
    return normalized


async def execute_candidates(
    candidates: Sequence[Candidate],
    default: T,
    context: str = "Unknown query",
) -> RobustResult[T]:
    """
    Try each candidate in order and return the first non-null, error-free data.

    A candidate is skipped when it raises, returns a populated ``error`` or returns
    ``data=None``.

    Args:
        candidates: Candidate queries (or bare zero-argument coroutine functions),
            preferred first
        default: Value returned, tagged as fallback, when every candidate fails
        context: Diagnostic label used in log messages

    Returns:
        RobustResult: ``variant`` names the winning candidate on success
    """
    ordered = _as_candidates(candidates)

    for candidate in ordered:
        try:
            result = await candidate.run()
        except Exception as e:
            logger.warning(f"{context}: candidate '{candidate.name}' raised: {e!r}")
            continue

        data, error = unpack_result(result)
        if error is not None:
            logger.warning(f"{context}: candidate '{candidate.name}' returned error: {error}")
            continue
        if data is None:
            logger.debug(f"{context}: candidate '{candidate.name}' returned no data")
            continue

        logger.debug(f"{context}: served by candidate '{candidate.name}'")
        return RobustResult(data=data, fallback=False, variant=candidate.name)

    logger.warning(f"{context}: all {len(ordered)} candidates failed, using fallback data")
    return RobustResult(data=default, fallback=True)
