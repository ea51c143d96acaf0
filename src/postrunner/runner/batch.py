"""
PostRunner Batch Runner

Runs flattened collection requests one at a time, in stored order, collecting
one ResponseRecord per request.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from ..collection.store import Collection, CollectionStore
from ..common.errors import InvalidCollectionError, RequestNotFoundError
from .executor import DEFAULT_TIMEOUT, RequestExecutor, ResponseRecord


logger = logging.getLogger("postrunner.batch")


@dataclass
class BatchTarget:
    """A collection to run, optionally narrowed to some of its requests."""

    collection_id: int
    global_ids: Optional[List[str]] = None


@dataclass
class BatchSummary:
    """Counts over a finished run."""

    total: int
    succeeded: int
    failed: int

    @classmethod
    def from_records(cls, records: Sequence[ResponseRecord]) -> 'BatchSummary':
        succeeded = sum(1 for r in records if r.ok)
        return cls(total=len(records), succeeded=succeeded, failed=len(records) - succeeded)

    @property
    def success_rate(self) -> float:
        """Calculate success rate percentage."""
        if self.total == 0:
            return 0.0
        return (self.succeeded / self.total) * 100


class BatchRunner:
    """
    Sequential runner over the collection store.

    Requests are never run concurrently. The collection token is read just
    before each request, so a token update landing mid-run applies to the
    requests that have not been sent yet.

    Example:
        runner = BatchRunner(store)
        for record in runner.iter_batch([BatchTarget(collection_id=1)]):
            print(record.api_name, record.status)
    """

    def __init__(
        self,
        store: CollectionStore,
        executor: Optional[RequestExecutor] = None,
        request_timeout: Optional[float] = DEFAULT_TIMEOUT,
        bulk_timeout: Optional[float] = None
    ):
        """
        Initialize Batch Runner.

        Args:
            store: Collection store to read from
            executor: Optional RequestExecutor (will create if None)
            request_timeout: Timeout for single-request execution
            bulk_timeout: Per-request timeout for bulk runs (None = unbounded)
        """
        self.store = store
        self.executor = executor if executor is not None else RequestExecutor()
        self.request_timeout = request_timeout
        self.bulk_timeout = bulk_timeout

    def _execute(self, collection: Collection, item, timeout: Optional[float]) -> ResponseRecord:
        return self.executor.execute(
            item,
            token=collection.token,
            collection_name=collection.name,
            variables=collection.variables,
            timeout=timeout
        )

    def run_single(self, collection_id: int, global_id: str) -> ResponseRecord:
        """
        Execute one request, addressed by collection id and global id.

        Raises:
            CollectionNotFoundError: Unknown collection id
            InvalidCollectionError: Collection has no item tree
            RequestNotFoundError: No item with that global id
        """
        collection = self.store.get(collection_id)
        if not collection.has_items:
            raise InvalidCollectionError(collection_id)

        item = collection.find_item(global_id)
        if item is None:
            raise RequestNotFoundError(collection_id, global_id)

        return self._execute(collection, item, self.request_timeout)

    def iter_batch(self, targets: Sequence[BatchTarget]) -> Iterator[ResponseRecord]:
        """
        Execute the targeted requests one at a time, yielding each record.

        All collection ids are resolved before the first request is sent.
        Stopping iteration is the only way to cancel a run.

        Raises:
            CollectionNotFoundError: Unknown collection id (before any request)
        """
        resolved = [(self.store.get(t.collection_id), t) for t in targets]

        for collection, target in resolved:
            if not collection.has_items:
                logger.warning(f"Collection {collection.id} '{collection.name}' has no requests to run")
                continue

            items = list(collection.items)
            wanted = target.global_ids
            if wanted is not None:
                known = [item.global_id for item in items]
                unmatched = [gid for gid in wanted if gid not in known]
                if unmatched:
                    logger.warning(
                        f"Collection {collection.id} '{collection.name}' has no requests "
                        f"matching: {', '.join(map(str, unmatched))}"
                    )

            for item in items:
                if wanted is not None and item.global_id not in wanted:
                    continue
                yield self._execute(collection, item, self.bulk_timeout)

    def run_batch(self, targets: Sequence[BatchTarget]) -> List[ResponseRecord]:
        """Execute the targeted requests in order and collect every record."""
        records = list(self.iter_batch(targets))
        summary = BatchSummary.from_records(records)
        logger.info(f"Batch finished: {summary.succeeded}/{summary.total} succeeded")
        return records

    def run_all(self, collection_ids: Sequence[int]) -> List[ResponseRecord]:
        """Execute every request of the given collections, in order."""
        return self.run_batch([BatchTarget(collection_id=cid) for cid in collection_ids])
