"""Client-side batch rating cache.

When a page renders many product cards at once, each card asks for its own
rating. BatchRatingLoader turns those requests into as few network calls as
possible:

- ids already in the shared RatingsCache are answered immediately;
- uncached ids are collected while a short debounce window keeps being
  restarted, then fetched in one batch;
- results land in the shared cache and in the RatingsView of every consumer
  that asked for them.

The cache is a memo layer with no eviction. Stale values are accepted. A
failed fetch leaves cache and views as they were and is not retried.
Batches that are already in flight are never cancelled, and overlapping
batches from separate windows are not de-duplicated.

Everything here runs on one asyncio event loop.
"""

import asyncio
import os
from collections.abc import Callable, Iterable

import structlog

from ratings.client.transport import RatingsClient, RatingsClientError, RatingSummary

logger = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = float(os.getenv("RATINGS_DEBOUNCE_SECONDS", "0.1"))


class RatingsCache:
    """Product id -> RatingSummary, shared by every consumer it is given to."""

    def __init__(self) -> None:
        self._entries: dict[str, RatingSummary] = {}

    def __contains__(self, product_id: str) -> bool:
        return product_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, product_id: str) -> RatingSummary | None:
        return self._entries.get(product_id)

    def put(self, product_id: str, summary: RatingSummary) -> None:
        self._entries[product_id] = summary

    def update(self, summaries: dict[str, RatingSummary]) -> None:
        self._entries.update(summaries)

    def missing(self, product_ids: Iterable[str]) -> list[str]:
        return [product_id for product_id in product_ids if product_id not in self._entries]

    def snapshot(self, product_ids: Iterable[str]) -> dict[str, RatingSummary]:
        """Cached entries for ``product_ids``; uncached ids are left out."""
        return {product_id: self._entries[product_id] for product_id in product_ids if product_id in self._entries}


class RatingsView:
    """One consumer's view of the ratings it asked for."""

    def __init__(self) -> None:
        self.ratings: dict[str, RatingSummary] = {}
        self._in_flight = 0

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    def get_rating(self, product_id: str) -> RatingSummary | None:
        return self.ratings.get(product_id)

    def merge(self, summaries: dict[str, RatingSummary]) -> None:
        self.ratings.update(summaries)

    def _fetch_started(self) -> None:
        self._in_flight += 1

    def _fetch_finished(self) -> None:
        self._in_flight -= 1


class DebounceTimer:
    """A single cancellable trigger. Scheduling again replaces the pending one."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        self.cancel()
        self._handle = asyncio.get_running_loop().call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class BatchRatingLoader:
    def __init__(
        self,
        client: RatingsClient,
        cache: RatingsCache | None = None,
        delay: float | None = None,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else RatingsCache()
        self.fetch_count = 0

        self._timer = DebounceTimer(DEFAULT_DEBOUNCE_SECONDS if delay is None else delay, self._flush)
        self._pending: dict[str, None] = {}
        self._waiting: list[tuple[RatingsView, tuple[str, ...]]] = []
        self._in_flight: set[asyncio.Task] = set()

    @property
    def idle(self) -> bool:
        return not self._timer.pending and not self._in_flight

    def request(self, product_ids: Iterable[str], view: RatingsView | None = None) -> RatingsView:
        """Ask for ratings of ``product_ids`` on behalf of ``view``.

        Must be called from a running event loop when any id is uncached.
        Returns the view (a new one when none is given).
        """
        view = view if view is not None else RatingsView()
        ids = tuple(dict.fromkeys(product_id for product_id in product_ids if product_id))
        if not ids:
            return view

        view.merge(self.cache.snapshot(ids))
        missing = self.cache.missing(ids)
        if not missing:
            return view

        for product_id in missing:
            self._pending[product_id] = None
        self._waiting.append((view, ids))
        self._timer.schedule()
        return view

    def _flush(self) -> None:
        waiting, self._waiting = self._waiting, []
        pending, self._pending = list(self._pending), {}

        ids = self.cache.missing(pending)
        if not ids:
            # Filled by a batch that finished during the window
            for view, wanted in waiting:
                view.merge(self.cache.snapshot(wanted))
            return

        task = asyncio.get_running_loop().create_task(self._fetch(ids, waiting))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _fetch(self, ids: list[str], waiting: list[tuple[RatingsView, tuple[str, ...]]]) -> None:
        self.fetch_count += 1
        for view, _ in waiting:
            view._fetch_started()
        try:
            fetched = await self.client.fetch_ratings(ids)
        except RatingsClientError as exc:
            logger.warning("Failed to fetch product ratings", product_ids=ids, error=exc.message)
            return
        finally:
            for view, _ in waiting:
                view._fetch_finished()

        self.cache.update(fetched)
        for view, wanted in waiting:
            view.merge(self.cache.snapshot(wanted))

    async def drain(self) -> None:
        """Wait until no trigger is scheduled and no batch is in flight."""
        while not self.idle:
            if self._in_flight:
                await asyncio.gather(*self._in_flight, return_exceptions=True)
            else:
                await asyncio.sleep(self._timer.delay)

    def close(self) -> None:
        """Drop the scheduled trigger. In-flight batches still complete."""
        self._timer.cancel()
        self._pending.clear()
        self._waiting.clear()
