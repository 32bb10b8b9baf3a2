"""Per-product serialisation of review submissions.

Duplicate detection and the rating update for one product must not
interleave with another submission for the same product. Submissions for
different products proceed in parallel.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ProductLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, product_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(product_id)
            if lock is None:
                lock = self._locks[product_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, product_id: str) -> Iterator[None]:
        with self.lock_for(str(product_id)):
            yield

    def __len__(self) -> int:
        return len(self._locks)


product_locks = ProductLocks()
