# === NAVMAP v1 ===
# {
#   "module": "Publit.Production.batch.pool",
#   "purpose": "Bounded thread pool producing one outcome per submitted item",
#   "sections": [
#     {"id": "outcome", "name": "Outcome", "anchor": "class-outcome", "kind": "class"},
#     {"id": "workerpool", "name": "WorkerPool", "anchor": "class-workerpool", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""
Worker pool for batch stages.

Runs a per-item operation over a batch with bounded parallelism:
- At most ``workers`` threads (never more than there are items)
- Exactly one ``Outcome`` per submitted item; an exception raised by the
  operation becomes that item's error instead of escaping the pool
- ``run`` returns only after every item has an outcome

Outcome order follows completion, not submission.

**Usage:**

    pool = WorkerPool(workers=5, name="presign")
    outcomes = pool.run(files, resolve_one, key=lambda f: f.id)
    errors = {o.item_id: o.error for o in outcomes}
"""

from __future__ import annotations

import logging
from concurrent import futures
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Optional, Sequence, TypeVar

__all__ = ["Outcome", "WorkerPool"]

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class Outcome(Generic[R]):
    """Result of applying a stage operation to one item."""

    item_id: Hashable
    error: Optional[Exception] = None
    value: Optional[R] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _apply(op: Callable[[T], R], item: T, item_id: Hashable) -> Outcome[R]:
    try:
        return Outcome(item_id, value=op(item))
    except Exception as e:
        return Outcome(item_id, error=e)


class WorkerPool:
    """
    Fixed-size thread pool draining one batch per ``run`` call.

    Attributes:
        workers: Maximum concurrent threads per run
        name: Thread name prefix, also used in log messages
    """

    def __init__(self, workers: int, name: str = "publit-batch") -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.workers = workers
        self.name = name

    def run(
        self,
        items: Sequence[T],
        op: Callable[[T], R],
        *,
        key: Callable[[T], Hashable] = id,
    ) -> list[Outcome[R]]:
        """
        Apply ``op`` to every item and collect one outcome per item.

        Args:
            items: Batch to process; each item is handed to exactly one worker
            op: Per-item operation run on a worker thread
            key: Maps an item to the id recorded in its outcome

        Returns:
            One Outcome per item, in completion order
        """
        if not items:
            return []

        workers = min(self.workers, len(items))
        logger.debug(f"{self.name}: {len(items)} item(s) on {workers} worker(s)")

        outcomes: list[Outcome[R]] = []
        with futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=self.name
        ) as executor:
            pending = [executor.submit(_apply, op, item, key(item)) for item in items]
            for future in futures.as_completed(pending):
                outcomes.append(future.result())

        failed = sum(1 for o in outcomes if not o.ok)
        if failed:
            logger.debug(f"{self.name}: {failed}/{len(outcomes)} item(s) failed")
        return outcomes
