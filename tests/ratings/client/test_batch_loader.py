"""Tests for the debounced, coalescing BatchRatingLoader."""

import asyncio

import httpx
from ratings.client import BatchRatingLoader, DebounceTimer, RatingsCache, RatingSummary, RatingsView

DELAY = 0.02


def _summary(average, count):
    return RatingSummary(average_rating=average, review_count=count)


class TestCoalescing:
    def test_overlapping_requests_share_one_fetch(self, server, make_client):
        server.ratings = {
            "a": {"averageRating": 4.0, "reviewCount": 1},
            "b": {"averageRating": 3.5, "reviewCount": 2},
            "c": {"averageRating": 5.0, "reviewCount": 3},
        }

        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, delay=DELAY)
                first = loader.request(["a", "b"])
                second = loader.request(["b", "c"])
                await loader.drain()
                return loader, first, second

        loader, first, second = asyncio.run(scenario())
        assert loader.fetch_count == 1
        assert server.batch_requests() == [["a", "b", "c"]]
        assert first.ratings == {"a": _summary(4.0, 1), "b": _summary(3.5, 2)}
        assert second.ratings == {"b": _summary(3.5, 2), "c": _summary(5.0, 3)}
        assert len(loader.cache) == 3

    def test_each_request_restarts_the_window(self, server, make_client):
        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, delay=0.05)
                loader.request(["a"])
                await asyncio.sleep(0.02)
                loader.request(["b"])
                await asyncio.sleep(0.02)
                loader.request(["c"])
                await loader.drain()
                return loader

        loader = asyncio.run(scenario())
        assert loader.fetch_count == 1
        assert server.batch_requests() == [["a", "b", "c"]]

    def test_separate_windows_fetch_separately(self, server, make_client):
        server.ratings = {"a": {"averageRating": 4.0, "reviewCount": 1}}

        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, delay=DELAY)
                loader.request(["a"])
                await loader.drain()
                loader.request(["a", "b"])
                await loader.drain()
                return loader

        loader = asyncio.run(scenario())
        assert loader.fetch_count == 2
        assert server.batch_requests() == [["a"], ["b"]]

    def test_duplicate_and_blank_ids_ignored(self, server, make_client):
        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, delay=DELAY)
                loader.request(["a", "", "a", None])
                await loader.drain()

        asyncio.run(scenario())
        assert server.batch_requests() == [["a"]]


class TestCacheHits:
    def test_cached_ids_answered_without_fetch(self, server, make_client):
        cache = RatingsCache()
        cache.put("a", _summary(4.0, 1))
        loader = BatchRatingLoader(make_client(), cache=cache, delay=DELAY)

        # No event loop is needed when nothing is missing
        view = loader.request(["a"])

        assert view.get_rating("a") == _summary(4.0, 1)
        assert not view.is_loading
        assert loader.idle
        assert loader.fetch_count == 0
        assert server.requests == []

    def test_only_missing_ids_fetched(self, server, make_client):
        server.ratings = {"b": {"averageRating": 2.0, "reviewCount": 1}}
        cache = RatingsCache()
        cache.put("a", _summary(4.0, 1))

        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, cache=cache, delay=DELAY)
                view = loader.request(["a", "b"])
                cached_first = dict(view.ratings)
                await loader.drain()
                return view, cached_first

        view, cached_first = asyncio.run(scenario())
        assert cached_first == {"a": _summary(4.0, 1)}
        assert server.batch_requests() == [["b"]]
        assert view.ratings == {"a": _summary(4.0, 1), "b": _summary(2.0, 1)}

    def test_shared_cache_across_loaders(self, server, make_client):
        server.ratings = {"a": {"averageRating": 4.0, "reviewCount": 1}}
        cache = RatingsCache()

        async def scenario():
            async with make_client() as client:
                first = BatchRatingLoader(client, cache=cache, delay=DELAY)
                first.request(["a"])
                await first.drain()
                second = BatchRatingLoader(client, cache=cache, delay=DELAY)
                view = second.request(["a"])
                return second, view

        second, view = asyncio.run(scenario())
        assert second.fetch_count == 0
        assert view.get_rating("a") == _summary(4.0, 1)
        assert len(server.batch_requests()) == 1

    def test_unrated_ids_stay_absent(self, server, make_client):
        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, delay=DELAY)
                view = loader.request(["ghost"])
                await loader.drain()
                return loader, view

        loader, view = asyncio.run(scenario())
        assert view.get_rating("ghost") is None
        assert "ghost" not in loader.cache


class TestFailures:
    def test_failed_fetch_leaves_state_unchanged(self, server, make_client):
        server.fail_with = httpx.Response(500, json={"error": "Failed to fetch product ratings"})
        cache = RatingsCache()
        cache.put("a", _summary(4.0, 1))

        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, cache=cache, delay=DELAY)
                view = loader.request(["a", "b"])
                await loader.drain()
                return loader, view

        loader, view = asyncio.run(scenario())
        assert loader.fetch_count == 1
        assert len(cache) == 1
        assert view.ratings == {"a": _summary(4.0, 1)}
        assert not view.is_loading

    def test_failure_is_not_retried(self, server, make_client):
        server.fail_with = httpx.Response(503, text="unavailable")

        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, delay=DELAY)
                loader.request(["a"])
                await loader.drain()
                await asyncio.sleep(DELAY * 3)
                return loader

        loader = asyncio.run(scenario())
        assert loader.fetch_count == 1
        assert len(server.requests) == 1

    def test_malformed_payload_leaves_state_unchanged(self, make_client):
        def handler(request):
            return httpx.Response(200, json={"ratings": {"a": {"reviewCount": 1}}})

        async def scenario():
            async with make_client(handler) as client:
                loader = BatchRatingLoader(client, delay=DELAY)
                view = RatingsView()
                # Must complete without raising; nothing awaits the batch task
                await loader._fetch(["a"], [(view, ("a",))])
                return loader, view

        loader, view = asyncio.run(scenario())
        assert loader.fetch_count == 1
        assert len(loader.cache) == 0
        assert view.ratings == {}
        assert not view.is_loading


class TestLoadingState:
    def test_view_is_loading_while_batch_in_flight(self, make_client):
        release = asyncio.Event()

        async def handler(request):
            await release.wait()
            return httpx.Response(200, json={"ratings": {"a": {"averageRating": 5.0, "reviewCount": 1}}})

        async def scenario():
            async with make_client(handler) as client:
                loader = BatchRatingLoader(client, delay=DELAY)
                view = loader.request(["a"])
                before_window = view.is_loading
                await asyncio.sleep(DELAY * 3)
                during_fetch = view.is_loading
                release.set()
                await loader.drain()
                return view, before_window, during_fetch

        view, before_window, during_fetch = asyncio.run(scenario())
        assert before_window is False
        assert during_fetch is True
        assert view.is_loading is False
        assert view.get_rating("a") == _summary(5.0, 1)


class TestClose:
    def test_close_drops_scheduled_batch(self, server, make_client):
        async def scenario():
            async with make_client() as client:
                loader = BatchRatingLoader(client, delay=DELAY)
                loader.request(["a"])
                loader.close()
                await asyncio.sleep(DELAY * 3)
                return loader

        loader = asyncio.run(scenario())
        assert loader.idle
        assert loader.fetch_count == 0
        assert server.requests == []


class TestDebounceTimer:
    def test_reschedule_fires_once(self):
        fired = []

        async def scenario():
            timer = DebounceTimer(DELAY, lambda: fired.append(True))
            timer.schedule()
            timer.schedule()
            assert timer.pending
            await asyncio.sleep(DELAY * 3)
            return timer

        timer = asyncio.run(scenario())
        assert fired == [True]
        assert not timer.pending

    def test_cancel(self):
        fired = []

        async def scenario():
            timer = DebounceTimer(DELAY, lambda: fired.append(True))
            timer.schedule()
            timer.cancel()
            await asyncio.sleep(DELAY * 3)

        asyncio.run(scenario())
        assert fired == []


class TestRatingsView:
    def test_merge_and_lookup(self):
        view = RatingsView()
        view.merge({"a": _summary(1.0, 1)})
        assert view.get_rating("a") == _summary(1.0, 1)
        assert view.get_rating("b") is None
