"""
Debounced controller that decides when users are fetched and statistics recomputed.

Every parameter change starts a new cycle: a pending debounce timer is
cancelled and replaced, and a result arriving from an older cycle is dropped.
The view exposed to the dashboard is an immutable StatsView that is swapped
as a whole, so records and statistics always come from the same fetch.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol, Sequence, Tuple
import logging
import threading

from config import DEBOUNCE_SECONDS, DEFAULT_REGION, DEFAULT_USER_COUNT, REGIONS
from models import (
    PersonRecord,
    QueryParameters,
    QueryValidationError,
    StatisticsSnapshot,
)
from user_stats import compute_statistics

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch users. Please try again."


class RecordSource(Protocol):
    def fetch(self, count: int, region: str) -> Sequence[PersonRecord]: ...


class ControllerState(Enum):
    IDLE = "idle"
    AWAITING_DEBOUNCE = "awaiting_debounce"
    VALIDATING = "validating"
    FETCHING = "fetching"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class StatsView:
    state: ControllerState
    parameters: QueryParameters
    records: Tuple[PersonRecord, ...] = ()
    snapshot: StatisticsSnapshot = field(default_factory=StatisticsSnapshot.empty)
    # Parameters of the fetch that produced records and snapshot
    source_parameters: Optional[QueryParameters] = None
    loading: bool = False
    error: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return self.source_parameters is not None


class StatsController:
    def __init__(
        self,
        record_source: RecordSource,
        parameters: Optional[QueryParameters] = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        valid_regions: Iterable[str] = REGIONS,
        on_change: Optional[Callable[[StatsView], None]] = None,
    ):
        self._source = record_source
        self._debounce_seconds = debounce_seconds
        self._valid_regions = frozenset(valid_regions)
        self._on_change = on_change

        self._lock = threading.RLock()
        self._generation = 0
        self._timer: Optional[threading.Timer] = None
        self._disposed = False
        self._view = StatsView(
            state=ControllerState.IDLE,
            parameters=parameters
            or QueryParameters(count=DEFAULT_USER_COUNT, region=DEFAULT_REGION),
        )

    @property
    def view(self) -> StatsView:
        return self._view

    @property
    def parameters(self) -> QueryParameters:
        return self._view.parameters

    @property
    def disposed(self) -> bool:
        return self._disposed

    def start(self):
        """Schedule the initial load with the current parameters."""
        with self._lock:
            if self._disposed:
                return
            view = self._schedule(self._view.parameters)
        self._notify(view)

    def update_parameters(
        self, count: Optional[int] = None, region: Optional[str] = None
    ):
        """Record new input and restart the debounce window."""
        with self._lock:
            if self._disposed:
                logger.debug("Ignoring parameter change on disposed controller")
                return
            current = self._view.parameters
            parameters = QueryParameters(
                count=current.count if count is None else count,
                region=current.region if region is None else region,
            )
            view = self._schedule(parameters)
        self._notify(view)

    def dispose(self):
        """Cancel pending work; results still in flight will be dropped."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._view = replace(self._view, state=ControllerState.IDLE, loading=False)
            view = self._view
        logger.info("Stats controller disposed")
        self._notify(view)

    # --- Cycle ---
    def _schedule(self, parameters: QueryParameters) -> StatsView:
        # Caller holds the lock
        if self._timer is not None:
            self._timer.cancel()
        self._generation += 1
        generation = self._generation
        self._view = replace(
            self._view,
            state=ControllerState.AWAITING_DEBOUNCE,
            parameters=parameters,
            loading=False,
        )
        self._timer = threading.Timer(
            self._debounce_seconds, self._run_cycle, args=(generation,)
        )
        self._timer.daemon = True
        self._timer.start()
        logger.debug(
            f"Cycle {generation} scheduled in {self._debounce_seconds}s: {parameters}"
        )
        return self._view

    def _is_current(self, generation: int) -> bool:
        return not self._disposed and generation == self._generation

    def _transition(self, generation: int, **changes) -> Optional[StatsView]:
        """Apply changes to the view if the cycle is still current."""
        with self._lock:
            if not self._is_current(generation):
                return None
            self._view = replace(self._view, **changes)
            return self._view

    def _run_cycle(self, generation: int):
        with self._lock:
            if not self._is_current(generation):
                return
            self._timer = None
            parameters = self._view.parameters
            self._view = replace(self._view, state=ControllerState.VALIDATING)
            view = self._view
        self._notify(view)

        try:
            parameters.validate(self._valid_regions)
        except QueryValidationError as e:
            logger.info(f"Cycle {generation} skipped, invalid parameters: {e}")
            view = self._transition(
                generation, state=ControllerState.ERROR, loading=False, error=str(e)
            )
            self._notify(view)
            return

        view = self._transition(
            generation, state=ControllerState.FETCHING, loading=True, error=None
        )
        if view is None:
            return
        self._notify(view)

        try:
            records = tuple(self._source.fetch(parameters.count, parameters.region))
            snapshot = compute_statistics(records)
        except Exception:
            view = self._transition(
                generation,
                state=ControllerState.ERROR,
                loading=False,
                error=FETCH_ERROR_MESSAGE,
            )
            if view is None:
                logger.info(f"Cycle {generation} failure discarded as stale")
                return
            logger.exception(f"Cycle {generation} failed for {parameters}")
            self._notify(view)
            return

        view = self._transition(
            generation,
            state=ControllerState.READY,
            records=records,
            snapshot=snapshot,
            source_parameters=parameters,
            loading=False,
            error=None,
        )
        if view is None:
            logger.info(f"Discarding stale result of cycle {generation}")
            return
        logger.info(f"Cycle {generation} ready: users={len(records)}")
        self._notify(view)

    def _notify(self, view: Optional[StatsView]):
        if view is None or self._on_change is None:
            return
        try:
            self._on_change(view)
        except Exception:
            logger.exception("on_change callback failed")
