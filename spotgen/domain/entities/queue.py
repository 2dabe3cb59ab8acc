"""Resolution queue: an ordered, possibly nested collection of entries.

A queue holds Tracks, unresolved entries and, as the intermediate result of a
dispatch, nested queues. It owns concurrent resolution and the sequence
operations that run once everything is a Track.

Concurrency contract: every element of a batch is started at once and the
batch completes only when every element has settled. Results are always
reassembled by original position, never by completion order. If any element
fails, the batch raises one BatchResolutionError naming every failed position.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any

from attrs import define, field

from spotgen.config import get_logger
from spotgen.domain.entities.track import Track
from spotgen.domain.errors import BatchResolutionError, ResolutionError
from spotgen.domain.transforms.core import (
    deduplicate,
    group_by,
    order_by_lastfm,
    order_by_popularity,
)

if TYPE_CHECKING:
    from spotgen.domain.entities.entries import Entry
    from spotgen.domain.protocols import ResolutionContext

logger = get_logger(__name__)

# Recursive element type
type Element = Track | Entry | Queue


@define(slots=True, eq=False)
class Queue:
    """Ordered sequence of playlist elements."""

    elements: list[Any] = field(factory=list, converter=list)

    def add(self, element: Element) -> None:
        self.elements.append(element)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __getitem__(self, index: int) -> Element:
        return self.elements[index]

    @property
    def tracks(self) -> list[Track]:
        """The elements that are Tracks, in order."""
        return [element for element in self.elements if isinstance(element, Track)]

    def is_resolved(self) -> bool:
        """Whether every element is a Track that has been resolved."""
        return all(
            isinstance(element, Track) and element.is_resolved
            for element in self.elements
        )

    # ------------------------------------------------------------------
    # Concurrent resolution
    # ------------------------------------------------------------------

    async def resolve_all(
        self, fn: Callable[[Element], Awaitable[Element]]
    ) -> "Queue":
        """Apply ``fn`` to every element concurrently.

        Returns:
            A new queue holding each result at its element's original position

        Raises:
            BatchResolutionError: After every element settled, if any failed
        """
        if not self.elements:
            return Queue()

        results = await asyncio.gather(
            *(fn(element) for element in self.elements),
            return_exceptions=True,
        )

        failures = []
        for index, result in enumerate(results):
            if isinstance(result, Exception):
                failures.append(ResolutionError(index, self.elements[index], result))
            elif isinstance(result, BaseException):
                raise result

        if failures:
            logger.warning(
                f"{len(failures)} of {len(results)} entries failed to resolve",
                first_error=str(failures[0].cause),
            )
            raise BatchResolutionError(failures)

        return Queue(results)

    async def dispatch(self, context: "ResolutionContext") -> "Queue":
        """Resolve every element.

        Tracks resolve to themselves; composite entries resolve to sub-queues;
        nested queues are dispatched recursively. Call flatten() on the result.
        """

        async def dispatch_element(element: Element) -> Element:
            if isinstance(element, Queue):
                return await element.dispatch(context)
            return await element.resolve(context)

        logger.debug(f"Dispatching {len(self.elements)} entries")
        return await self.resolve_all(dispatch_element)

    async def refresh(self, context: "ResolutionContext") -> "Queue":
        """Upgrade every Track to full metadata. Other elements pass through."""

        async def refresh_element(element: Element) -> Element:
            if isinstance(element, Track):
                return await element.refresh(context)
            return element

        return await self.resolve_all(refresh_element)

    async def fetch_lastfm(
        self, context: "ResolutionContext", user: str | None = None
    ) -> "Queue":
        """Fetch play counts for every Track. Other elements pass through."""

        async def fetch_element(element: Element) -> Element:
            if isinstance(element, Track):
                return await element.fetch_lastfm(context, user)
            return element

        return await self.resolve_all(fetch_element)

    # ------------------------------------------------------------------
    # Sequence operations
    # ------------------------------------------------------------------

    def flatten(self) -> "Queue":
        """Expand nested queues depth-first, preserving order."""
        return Queue(_flatten(self.elements))

    def dedup(self) -> "Queue":
        """Remove tracks similar to an earlier track."""
        return Queue(deduplicate(self.tracks))

    def order_by_popularity(self) -> "Queue":
        return Queue(order_by_popularity(self.tracks))

    def order_by_lastfm(self) -> "Queue":
        return Queue(order_by_lastfm(self.tracks))

    def group(self, key_fn: Callable[[Track], str]) -> "Queue":
        """Stable group-by on ``key_fn``."""
        return Queue(group_by(key_fn, self.tracks))


def _flatten(elements: Iterable[Element]) -> Iterator[Element]:
    for element in elements:
        if isinstance(element, Queue):
            yield from _flatten(element.elements)
        else:
            yield element
