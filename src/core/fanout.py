"""Fan-out with local degradation.

Batch sub-operations (redirect repair, featured images) run concurrently
and each branch ends as an `Outcome`: the computed value, or the fallback
plus the error that caused it. A failing branch never unwinds the gather.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome(Generic[R]):
    value: R
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_outcomes(
    items: Iterable[T],
    fn: Callable[[T], Awaitable[R]],
    fallback: Callable[[T], R],
    *,
    operation: str,
    describe: Callable[[T], str] = repr,
) -> list[Outcome[R]]:
    """Run `fn` over `items` concurrently; order of results matches `items`.

    `describe` names an item in the degradation warning (a slug, a media id).
    """

    async def run_one(item: T) -> Outcome[R]:
        try:
            return Outcome(await fn(item))
        except Exception as exc:
            logger.warning(
                "%s: degraded %s (%s: %s)",
                operation,
                describe(item),
                type(exc).__name__,
                exc,
            )
            return Outcome(fallback(item), error=exc)

    outcomes = list(await asyncio.gather(*(run_one(item) for item in items)))

    degraded = sum(1 for o in outcomes if not o.ok)
    if degraded:
        logger.info("%s: %d of %d items degraded", operation, degraded, len(outcomes))
    return outcomes


def outcome_values(outcomes: Iterable[Outcome[R]]) -> list[R]:
    return [o.value for o in outcomes]
