"""Collect every object of the selected kinds with a bounded pool of list calls."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ketchup.collection.models import CollectedObject, CollectionErrorEntry, CollectionResult
from ketchup.discovery.models import ResourceKind
from ketchup.errors import ClientError, PerResourceCollectionError
from ketchup.policy.engine import resolve_namespaces
from ketchup.policy.models import CollectionPolicy, FilteredCatalog

if TYPE_CHECKING:
    from ketchup.collection.client import ClusterClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8
DEFAULT_PAGE_SIZE = 500

# Seconds between cancellation checks while waiting on workers
_POLL_INTERVAL = 0.2


class _Cancelled(Exception):
    """Raised inside a worker when cancellation is requested between pages."""


@dataclass(frozen=True)
class _ListTask:
    kind: ResourceKind
    namespace: str | None = None

    def describe(self) -> str:
        return f"{self.kind.name} in {self.namespace}" if self.namespace else self.kind.name


@dataclass
class _ListOutcome:
    task: _ListTask
    objects: list[CollectedObject] = field(default_factory=list)
    error: CollectionErrorEntry | None = None
    completed: bool = True


def _document(kind: ResourceKind, item: dict[str, Any]) -> dict[str, Any]:
    """List responses omit apiVersion/kind on items; put them back in front."""
    return {"apiVersion": kind.api_version, "kind": kind.kind, **item}


class Collector:
    """Runs one paginated list call per (kind[, namespace]) and merges the outcomes.

    Each call is all-or-nothing: it either contributes every object from all
    of its pages or exactly one error entry. A failed call never stops the
    others. ``cancel()`` (or Ctrl-C while ``collect`` waits) stops issuing new
    calls and returns what has completed so far, flagged as cancelled.
    """

    def __init__(
        self,
        client: ClusterClient,
        max_workers: int = DEFAULT_MAX_WORKERS,
        page_size: int = DEFAULT_PAGE_SIZE,
        request_timeout: float | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._client = client
        self.max_workers = max_workers
        self.page_size = page_size
        self.request_timeout = request_timeout
        self._cancel = threading.Event()

    def cancel(self) -> None:
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def collect(self, filtered: FilteredCatalog, policy: CollectionPolicy) -> CollectionResult:
        """Collect all objects of ``filtered`` kinds."""
        errors: list[CollectionErrorEntry] = []
        namespaces: list[str] = []
        if filtered.namespaced_kinds:
            namespaces = self._namespaces_to_visit(policy, errors)
        tasks = self._plan(filtered, namespaces)
        logger.info(
            "Issuing %d list calls (%d cluster-scoped kinds, %d namespaced kinds x %d namespaces) on %d workers",
            len(tasks),
            len(filtered.cluster_kinds),
            len(filtered.namespaced_kinds),
            len(namespaces),
            self.max_workers,
        )

        outcomes = self._run(tasks)

        objects: list[CollectedObject] = []
        visited: set[str] = set()
        for index in sorted(outcomes):
            outcome = outcomes[index]
            if not outcome.completed:
                continue
            if outcome.task.namespace is not None:
                visited.add(outcome.task.namespace)
            if outcome.error is not None:
                errors.append(outcome.error)
            else:
                objects.extend(outcome.objects)

        if self.cancelled:
            finished = sum(1 for o in outcomes.values() if o.completed)
            logger.warning("Collection cancelled after %d of %d list calls", finished, len(tasks))
        return CollectionResult(
            objects=objects,
            errors=errors,
            cancelled=self.cancelled,
            namespaces=sorted(visited),
            policy=policy,
        )

    def _namespaces_to_visit(self, policy: CollectionPolicy, errors: list[CollectionErrorEntry]) -> list[str]:
        try:
            live: list[str] | None = self._client.list_namespaces()
        except ClientError as e:
            logger.warning("Failed to list namespaces: %s", e)
            errors.append(CollectionErrorEntry(kind="Namespace", api_version="v1", message=str(e)))
            live = None
            if not policy.namespace_filter:
                return []
        visit, _unknown = resolve_namespaces(policy.namespace_filter, live)
        logger.info("Will collect from %d namespace(s): %s", len(visit), visit)
        return visit

    @staticmethod
    def _plan(filtered: FilteredCatalog, namespaces: list[str]) -> list[_ListTask]:
        tasks = [_ListTask(kind) for kind in sorted(filtered.cluster_kinds, key=lambda k: k.name)]
        namespaced = sorted(filtered.namespaced_kinds, key=lambda k: k.name)
        for ns in namespaces:
            tasks.extend(_ListTask(kind, ns) for kind in namespaced)
        return tasks

    def _run(self, tasks: list[_ListTask]) -> dict[int, _ListOutcome]:
        outcomes: dict[int, _ListOutcome] = {}
        futures: dict[Future[_ListOutcome], int] = {}
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="ketchup-list")
        try:
            for index, task in enumerate(tasks):
                futures[executor.submit(self._run_task, task)] = index
            pending = set(futures)
            while pending and not self.cancelled:
                done, pending = wait(pending, timeout=_POLL_INTERVAL, return_when=FIRST_COMPLETED)
                for future in done:
                    outcome = future.result()
                    outcomes[futures[future]] = outcome
                    if outcome.error is not None:
                        logger.info("Failed to collect %s: %s", outcome.task.describe(), outcome.error.message)
                    elif outcome.objects:
                        logger.debug("Collected %s (%d)", outcome.task.describe(), len(outcome.objects))
        except KeyboardInterrupt:
            logger.warning("Interrupted, stopping collection")
            self.cancel()
        finally:
            try:
                executor.shutdown(wait=True, cancel_futures=True)
            except KeyboardInterrupt:
                # Queued calls are already cancelled; in-flight ones stop before their next page
                logger.warning("Interrupted again, not waiting for in-flight list calls")
                self.cancel()

        # Calls that finished while we were shutting down; an interrupted worker has no outcome
        for future, index in futures.items():
            if index in outcomes or not future.done() or future.cancelled():
                continue
            if future.exception() is None:
                outcomes[index] = future.result()
        return outcomes

    @staticmethod
    def _failed(task: _ListTask, message: str) -> _ListOutcome:
        return _ListOutcome(
            task,
            error=CollectionErrorEntry(
                kind=task.kind.name,
                api_version=task.kind.api_version,
                namespace=task.namespace,
                message=message,
            ),
        )

    def _run_task(self, task: _ListTask) -> _ListOutcome:
        if self.cancelled:
            return _ListOutcome(task, completed=False)
        try:
            items = self._list_all(task)
            objects = [
                CollectedObject(
                    kind=task.kind,
                    namespace=task.namespace,
                    name=(item.get("metadata") or {}).get("name") or "",
                    body=_document(task.kind, item),
                )
                for item in items
            ]
        except _Cancelled:
            return _ListOutcome(task, completed=False)
        except PerResourceCollectionError as e:
            return self._failed(task, e.message)
        except Exception as e:
            logger.debug("Unexpected error collecting %s", task.describe(), exc_info=True)
            return self._failed(task, f"{type(e).__name__}: {e}")
        return _ListOutcome(task, objects=objects)

    def _list_all(self, task: _ListTask) -> list[dict[str, Any]]:
        """Follow continuation tokens until the server reports no more pages."""
        items: list[dict[str, Any]] = []
        token: str | None = None
        while True:
            if self.cancelled:
                raise _Cancelled()
            try:
                page, token = self._client.list_page(
                    task.kind,
                    namespace=task.namespace,
                    limit=self.page_size,
                    continue_token=token,
                    timeout=self.request_timeout,
                )
            except ClientError as e:
                raise PerResourceCollectionError(task.kind.name, task.namespace, str(e)) from e
            items.extend(page)
            if not token:
                return items
