"""Performance tracker for completed tasks.

Keeps a bounded rolling history of TaskPerformanceMetrics, derives
per-model aggregates from it, and writes the newest records through to a
key-value store on every update. The history is owned by one tracker
instance; construct a fresh tracker per test or per process.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import TypeAdapter, ValidationError

from taskroute.persistence.store import KeyValueStore, MemoryStore
from taskroute.schemas.performance import (
    ModelPerformance,
    PerformanceStats,
    TaskPerformanceMetrics,
)
from taskroute.schemas.settings import RouterSettings

logger = logging.getLogger(__name__)

_HISTORY_ADAPTER = TypeAdapter(list[TaskPerformanceMetrics])


def aggregate_history(
    history: list[TaskPerformanceMetrics],
) -> dict[str, ModelPerformance]:
    """Fold a history into per-model averages, keyed by ``model_used``."""
    groups: dict[str, list[TaskPerformanceMetrics]] = {}
    for record in history:
        groups.setdefault(record.model_used, []).append(record)

    aggregates: dict[str, ModelPerformance] = {}
    for model, records in groups.items():
        total = len(records)
        aggregates[model] = ModelPerformance(
            model=model,
            avg_time=sum(r.execution_time for r in records) / total,
            success_rate=sum(1 for r in records if r.success) / total,
            avg_cost=sum(r.cost for r in records) / total,
            samples=total,
        )
    return aggregates


class PerformanceTracker:
    """Rolling task-outcome history with derived per-model aggregates.

    Args:
        store: Durable key-value store (defaults to an in-memory store).
        history_cap: Maximum records kept in memory; oldest evicted first.
        persisted_cap: Maximum records written to the store.
        storage_key: Store key holding the JSON history blob.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        history_cap: int = 1000,
        persisted_cap: int = 500,
        storage_key: str = "taskroute_task_performance",
    ) -> None:
        self._store = store if store is not None else MemoryStore()
        self._history_cap = history_cap
        self._persisted_cap = persisted_cap
        self._storage_key = storage_key
        self._history: list[TaskPerformanceMetrics] = []
        self._aggregates: dict[str, ModelPerformance] = {}
        self._loaded = False
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls, settings: RouterSettings, store: KeyValueStore | None = None,
    ) -> PerformanceTracker:
        return cls(
            store,
            history_cap=settings.history_cap,
            persisted_cap=settings.persisted_cap,
            storage_key=settings.storage_key,
        )

    @property
    def history(self) -> tuple[TaskPerformanceMetrics, ...]:
        return tuple(self._history)

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self) -> None:
        """Restore history from the store once.

        Unreadable or unparsable data leaves the history empty; the
        failure is logged and not raised. Runs under the writer lock so a
        concurrent record never persists over history still being read.
        """
        if self._loaded:
            return
        async with self._lock:
            await self._load_locked()

    async def _load_locked(self) -> None:
        if self._loaded:
            return
        records = await self._read_history()
        self._history = records[-self._history_cap:]
        self._aggregates = aggregate_history(self._history)
        self._loaded = True
        if records:
            logger.info("Loaded %d performance records", len(self._history))

    async def _read_history(self) -> list[TaskPerformanceMetrics]:
        try:
            blob = await self._store.get(self._storage_key)
        except Exception as e:  # noqa: BLE001
            logger.warning("Failed to read performance history: %s", e)
            return []
        if not blob:
            return []

        try:
            return _HISTORY_ADAPTER.validate_json(blob)
        except ValidationError as e:
            logger.warning(
                "Discarding unparsable performance history (%d errors)", e.error_count(),
            )
            return []

    async def record_task_performance(self, metrics: TaskPerformanceMetrics) -> None:
        """Append an outcome, refresh aggregates, and persist.

        Never raises: storage failures are logged and the in-memory state
        stays authoritative for this process.
        """
        async with self._lock:
            await self._load_locked()

            self._history.append(metrics)
            if len(self._history) > self._history_cap:
                self._history = self._history[-self._history_cap:]
            self._aggregates = aggregate_history(self._history)

            await self._persist()

    async def _persist(self) -> None:
        snapshot = self._history[-self._persisted_cap:]
        try:
            await self._store.set(
                self._storage_key,
                _HISTORY_ADAPTER.dump_json(snapshot).decode(),
            )
        except Exception as e:  # noqa: BLE001
            logger.warning("Failed to save performance history: %s", e)

    def model_performance(self, model_key: str) -> ModelPerformance | None:
        """Aggregate for ``provider/model``, or None without history."""
        return self._aggregates.get(model_key)

    def mean_latency(self) -> float | None:
        """Mean of the per-model average execution times."""
        if not self._aggregates:
            return None
        return sum(p.avg_time for p in self._aggregates.values()) / len(self._aggregates)

    def get_performance_stats(self) -> PerformanceStats:
        total = len(self._history)
        if total == 0:
            return PerformanceStats()

        return PerformanceStats(
            total_tasks=total,
            overall_success_rate=sum(1 for r in self._history if r.success) / total,
            avg_response_time=sum(r.execution_time for r in self._history) / total,
            model_performance=list(self._aggregates.values()),
        )
