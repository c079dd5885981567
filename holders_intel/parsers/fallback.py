"""Ordered "first success wins" combinator.

Price sources and RPC endpoint/program attempts are both expressed as an
ordered list of labelled candidates. Candidates are awaited one at a time;
the first whose result passes ``accept`` wins and the rest are never started.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from loguru import logger

from holders_intel.errors import FallbackExhausted

T = TypeVar("T")


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """A labelled source in a fallback chain."""

    label: str
    fetch: Callable[[], Awaitable[T | None]]


@dataclass(frozen=True)
class Winner(Generic[T]):
    label: str
    value: T
    attempts: tuple[tuple[str, str], ...]  # (label, reason) of candidates that lost


def _is_present(value: object) -> bool:
    return value is not None


async def first_success(
    candidates: Sequence[Candidate[T]],
    *,
    accept: Callable[[T], bool] = _is_present,
    describe_reject: Callable[[T], str] | None = None,
    tag: str = "FALLBACK",
) -> Winner[T]:
    """Return the first candidate result that passes ``accept``.

    Exceptions from a candidate count as a failure and fall through to the
    next one; ``asyncio.CancelledError`` is not caught so cancellation of
    the caller stops the chain.

    Raises:
        FallbackExhausted: every candidate failed or was rejected.
    """
    attempts: list[tuple[str, str]] = []

    for candidate in candidates:
        try:
            value = await candidate.fetch()
        except Exception as e:
            reason = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.debug(f"[{tag}] {candidate.label} failed: {reason}")
            attempts.append((candidate.label, reason))
            continue

        if value is not None and accept(value):
            return Winner(label=candidate.label, value=value, attempts=tuple(attempts))

        if value is None:
            reason = "no result"
        elif describe_reject is not None:
            reason = describe_reject(value)
        else:
            reason = "rejected"
        logger.debug(f"[{tag}] {candidate.label} rejected: {reason}")
        attempts.append((candidate.label, reason))

    raise FallbackExhausted(attempts)
