"""
Reader Session

Runs reconciliation cycles on a background worker and publishes the results.

A refresh trigger starts one cycle: pull the board pointers from the crawler,
aggregate the observed tiles, reconcile them against the baseline, publish.
Only one cycle runs at a time. A trigger arriving while a cycle is running is
dropped, not queued.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple
import logging
import threading
import time

from .aggregator import BoardAreaPointers, ObservationAggregator
from .config import DEFAULT_CONFIG, ReaderConfig
from .counts import TileCountTracker, negative_counts
from .observation import BoardArea, ObservedTile
from .textures import TileRegistry


logger = logging.getLogger(__name__)


class SessionState(IntEnum):
    IDLE = 0
    RUNNING = 1


@dataclass(frozen=True)
class CountSnapshot:
    """
    Results of one cycle, published as a unit.

    Attributes:
        cycle: Cycle number, 0 for the state before any cycle ran
        observed: Tiles seen during the cycle
        remaining: Remaining count per notation
        suit_remaining: Remaining count per numbered suit code
    """
    cycle: int
    observed: Tuple[ObservedTile, ...] = ()
    remaining: Dict[str, int] = field(default_factory=dict)
    suit_remaining: Dict[str, int] = field(default_factory=dict)

    @property
    def anomalies(self) -> Dict[str, int]:
        return negative_counts(self.remaining)


class ReaderSession:
    """
    Owns the worker, the single-cycle guard and the published snapshot.

    Usage:
        registry = build_registry()
        session = ReaderSession(registry, crawler)

        # on every host refresh
        session.trigger()

        # from the presentation layer, one snapshot per frame
        snapshot = session.snapshot
        text = render_remaining(snapshot.remaining, snapshot.suit_remaining)
    """

    def __init__(self, registry: TileRegistry, crawler, config: ReaderConfig = DEFAULT_CONFIG):
        self.registry = registry
        self.crawler = crawler
        self.config = config

        self.aggregator = ObservationAggregator(registry, crawler)
        self.tracker = TileCountTracker(registry.baseline_counts)

        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._idle = threading.Event()
        self._idle.set()
        self._worker: Optional[threading.Thread] = None
        self._cycles = 0

        remaining, suit_remaining = self.tracker.reconcile([])
        self._snapshot = CountSnapshot(0, (), remaining, suit_remaining)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def snapshot(self) -> CountSnapshot:
        return self._snapshot

    def trigger(self) -> bool:
        """
        Start a cycle on the background worker.

        Returns:
            True if a cycle was started, False if one was already running
        """
        if not self._begin():
            return False

        logger.info("Starting reconciliation cycle")
        self._worker = threading.Thread(
            target=self._run_worker,
            name=self.config.worker_name,
            daemon=True,
        )
        self._worker.start()
        return True

    def _begin(self) -> bool:
        """Move from IDLE to RUNNING. False if a cycle is already in flight."""
        with self._lock:
            if self._state == SessionState.RUNNING:
                logger.debug("Cycle already running, dropping trigger")
                return False
            self._state = SessionState.RUNNING
            self._idle.clear()
            return True

    def _finish(self) -> None:
        with self._lock:
            self._state = SessionState.IDLE
            self._idle.set()

    def _run_worker(self) -> None:
        try:
            self._cycle()
        except Exception:
            logger.exception("Reconciliation cycle failed")
        finally:
            self._finish()

    def run_cycle(self) -> Optional[CountSnapshot]:
        """
        Run one cycle in the calling thread and publish its results.

        Follows the same single-cycle guard as trigger().

        Returns:
            The published snapshot, or None if a cycle was already running
        """
        if not self._begin():
            return None
        try:
            return self._cycle()
        finally:
            self._finish()

    def _cycle(self) -> CountSnapshot:
        start = time.perf_counter()

        pointers = self.crawler.get_board_area_pointers()
        observed = self.aggregator.aggregate(pointers)
        logger.info(f"tiles count: {len(observed)}")
        remaining, suit_remaining = self.tracker.reconcile(observed)

        with self._lock:
            self._cycles += 1
            snapshot = CountSnapshot(self._cycles, tuple(observed), remaining, suit_remaining)
            self._snapshot = snapshot

        anomalies = snapshot.anomalies
        if anomalies:
            logger.warning(f"More tiles seen than exist in cycle {snapshot.cycle}: {anomalies}")

        if self.config.log_timings:
            elapsed = (time.perf_counter() - start) * 1000
            logger.debug(f"Cycle {snapshot.cycle} took {elapsed:.2f} ms")
        return snapshot

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no cycle is running. Returns False on timeout."""
        return self._idle.wait(timeout)

    def get_remaining_counts(self) -> Dict[str, int]:
        """
        Copy of the latest remaining counts.

        Each getter reads the published snapshot on its own, so two getter
        calls may straddle a cycle. Read `snapshot` once to get counts, suit
        totals and observed tiles from the same cycle.
        """
        return dict(self._snapshot.remaining)

    def get_suit_remaining_counts(self) -> Dict[str, int]:
        """Copy of the latest suit totals (see get_remaining_counts)"""
        return dict(self._snapshot.suit_remaining)

    def get_observed_tiles(self) -> List[ObservedTile]:
        return list(self._snapshot.observed)

    def wipe_pointers(self) -> None:
        """Forget tracked nodes, e.g. when a new game window is set up"""
        pointers = self._tracked_pointers()
        if pointers is not None:
            pointers.wipe()

    def track_pointer(self, area: BoardArea, ref: Any) -> None:
        pointers = self._tracked_pointers()
        if pointers is None:
            raise TypeError(f"{type(self.crawler).__name__} does not track pointers")
        pointers.track(area, ref)

    def _tracked_pointers(self) -> Optional[BoardAreaPointers]:
        return getattr(self.crawler, "pointers", None)

    def __repr__(self) -> str:
        return f"ReaderSession({self._state.name}, cycle={self._snapshot.cycle})"
