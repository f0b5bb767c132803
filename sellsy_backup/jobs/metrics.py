"""Metrics tracking for a backup run."""
import time
import logging
from collections import defaultdict
from typing import Dict

logger = logging.getLogger(__name__)


class Metrics:
    """Track record counts and document outcomes for one run."""

    def __init__(self, run_id: str):
        self.run_id = run_id
        self.start_time = time.time()
        self.records: Dict[str, int] = defaultdict(int)
        self.counters: Dict[str, int] = defaultdict(int)

    def record_collection(self, collection: str, count: int) -> None:
        """Record how many records a collection returned."""
        self.records[collection] = count

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] = self.counters.get(key, 0) + amount

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def report(self) -> None:
        """Log a one-line summary."""
        collections = ", ".join(f"{name}={count}" for name, count in self.records.items())
        logger.info(
            f"Run {self.run_id} finished in {self.elapsed():.1f}s | "
            f"Records: {collections or 'none'} | "
            f"Documents OK: {self.counters.get('documents_ok', 0)} | "
            f"Documents failed: {self.counters.get('documents_failed', 0)} | "
            f"Pruned: {self.counters.get('pruned', 0)}"
        )

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        return {
            "run_id": self.run_id,
            "records": dict(self.records),
            "documents_ok": self.counters.get("documents_ok", 0),
            "documents_failed": self.counters.get("documents_failed", 0),
            "pruned": self.counters.get("pruned", 0),
            "elapsed_seconds": round(self.elapsed(), 2),
        }
