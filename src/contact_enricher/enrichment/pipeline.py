"""
Row-by-row enrichment pipeline.

The pipeline walks a table one row at a time, enriches every row through a
RowEnricher and reports progress to observers. Runs can be paused, resumed
and stopped; control operations only take effect between rows.

States::

    idle -> processing -> paused | completed | error
    paused -> processing (start) | idle (stop)
"""

import time
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Optional, Sequence

from .models import Row, RowOutcome, RowStatus, Table, table_columns
from .resolver import EntityColumnResolver
from .row_enricher import RowEnricher
from ..config import get_config
from ..errors import (
    ConfigurationError,
    InvalidTransitionError,
    PipelineError,
    UnexpectedRowError,
)


class PipelineStatus:
    """Pipeline state names."""
    IDLE = 'idle'
    PROCESSING = 'processing'
    PAUSED = 'paused'
    COMPLETED = 'completed'
    ERROR = 'error'


@dataclass
class PipelineState:
    """Mutable run state owned by the pipeline."""
    status: str = PipelineStatus.IDLE
    cursor: int = 0
    results: Table = field(default_factory=list)
    log: Deque[str] = field(default_factory=lambda: deque(maxlen=5))
    success_count: int = 0
    progress: float = 0.0


@dataclass
class ProgressUpdate:
    """Snapshot sent to observers after every row and state change."""
    state: str
    progress: float
    current_row: int
    total_rows: int
    success_count: int


class PipelineObserver:
    """Receives pipeline events. Override the hooks you need."""

    def on_progress(self, update: ProgressUpdate):
        pass

    def on_complete(self, results: Table):
        pass

    def on_log(self, entry: str):
        pass


class CallbackObserver(PipelineObserver):
    """Adapts plain callables to the observer interface."""

    def __init__(self, on_update: Optional[Callable[[ProgressUpdate], None]] = None,
                 on_complete: Optional[Callable[[Table], None]] = None,
                 on_log: Optional[Callable[[str], None]] = None):
        self._on_update = on_update
        self._on_complete = on_complete
        self._on_log = on_log

    def on_progress(self, update: ProgressUpdate):
        if self._on_update:
            self._on_update(update)

    def on_complete(self, results: Table):
        if self._on_complete:
            self._on_complete(results)

    def on_log(self, entry: str):
        if self._on_log:
            self._on_log(entry)


class EnrichmentPipeline:
    """Enriches every row of a table, strictly one row at a time."""

    def __init__(self, table: Sequence[Row], row_enricher: RowEnricher, config=None,
                 observers: Optional[List[PipelineObserver]] = None,
                 entity_column: Optional[str] = None,
                 resolver: Optional[EntityColumnResolver] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config or get_config()
        self.logger = logging.getLogger(__name__)

        self.table: Table = list(table)
        self.row_enricher = row_enricher
        self.observers: List[PipelineObserver] = list(observers or [])
        self.resolver = resolver or EntityColumnResolver()
        self.row_delay = self.config.pipeline.row_delay
        self._sleep = sleep

        self._entity_column_override = entity_column
        self._entity_column: Optional[str] = None

        self._lock = threading.Lock()
        self._state = PipelineState(log=deque(maxlen=self.config.pipeline.log_size))
        self._pause_requested = False
        self._run_token = 0

        # Set while no loop is running; a stopped loop clears it only on exit
        self._loop_idle = threading.Event()
        self._loop_idle.set()
        self._loop_thread_id: Optional[int] = None

    # Read-only views

    @property
    def status(self) -> str:
        return self._state.status

    @property
    def cursor(self) -> int:
        return self._state.cursor

    @property
    def progress(self) -> float:
        return self._state.progress

    @property
    def success_count(self) -> int:
        return self._state.success_count

    @property
    def results(self) -> Table:
        with self._lock:
            return [dict(row) for row in self._state.results]

    @property
    def logs(self) -> List[str]:
        with self._lock:
            return list(self._state.log)

    @property
    def entity_column(self) -> str:
        """Column used for entity names, resolved once per pipeline."""
        if self._entity_column is None:
            if self._entity_column_override:
                if self.table and self._entity_column_override not in table_columns(self.table):
                    raise ConfigurationError(f"Column not found in table: {self._entity_column_override}")
                self._entity_column = self._entity_column_override
            else:
                self._entity_column = self.resolver.resolve(self.table)
        return self._entity_column

    def add_observer(self, observer: PipelineObserver):
        self.observers.append(observer)

    # Control operations

    def start(self) -> str:
        """Start or resume a run in the calling thread.

        Returns the state the run ended in (completed, paused or idle when
        stopped from another thread or an observer). If a stopped run is
        still finishing its in-flight row, waits for it first so that rows
        are never processed concurrently.
        """
        token = self._begin_run()
        self._run_loop(token)
        return self.status

    def start_background(self) -> threading.Thread:
        """Start or resume a run in a daemon thread."""
        token = self._begin_run()
        thread = threading.Thread(
            target=self._run_background,
            args=(token,),
            name='enrichment-pipeline',
            daemon=True,
        )
        thread.start()
        return thread

    def pause(self):
        """Ask the running loop to pause before its next row."""
        with self._lock:
            if self._state.status != PipelineStatus.PROCESSING:
                raise InvalidTransitionError(f"Cannot pause while {self._state.status}")
            self._pause_requested = True
        self._add_log("Processing paused by user")

    def stop(self):
        """Abandon the current run and return to idle with the cursor at 0."""
        with self._lock:
            if self._state.status not in (PipelineStatus.PROCESSING, PipelineStatus.PAUSED):
                raise InvalidTransitionError(f"Cannot stop while {self._state.status}")
            self._pause_requested = False
            self._run_token += 1
            self._state.status = PipelineStatus.IDLE
            self._state.cursor = 0
            self._state.results = []
            self._state.success_count = 0
            self._state.progress = 0.0
            update = self._progress_update()
        self._add_log("Processing stopped by user")
        self._notify_progress(update)

    # Run loop

    def _begin_run(self) -> int:
        """Validate and transition to processing; returns the run token."""
        missing = self.config.credentials.missing()
        if missing:
            raise ConfigurationError(f"Please configure your API keys first (missing: {', '.join(missing)})")

        entity_column = self.entity_column

        # After stop() the previous loop may still be inside its last row
        if not self._loop_idle.is_set():
            if self._loop_thread_id == threading.get_ident():
                raise InvalidTransitionError("Cannot start a new run from inside the running loop")
            self.logger.info("Waiting for the previous run to finish its current row")
            self._loop_idle.wait()

        with self._lock:
            previous = self._state.status
            if previous == PipelineStatus.PROCESSING:
                raise InvalidTransitionError("Pipeline is already processing")
            if not self._loop_idle.is_set():
                raise InvalidTransitionError("A previous run is still finishing")
            self._loop_idle.clear()
            self._loop_thread_id = threading.get_ident()

            resuming = previous == PipelineStatus.PAUSED
            if not resuming:
                self._state.cursor = 0
                self._state.results = []
                self._state.log.clear()
                self._state.success_count = 0
                self._state.progress = 0.0

            self._pause_requested = False
            self._run_token += 1
            token = self._run_token
            self._state.status = PipelineStatus.PROCESSING
            cursor = self._state.cursor
            update = self._progress_update()

        if resuming:
            self._add_log(f"Resuming processing at row {cursor + 1}")
        else:
            self._add_log("Starting data processing...")
            self._add_log(f"Using column \"{entity_column}\" for entity names")
        self._notify_progress(update)
        return token

    def _run_background(self, token: int):
        try:
            self._run_loop(token)
        except PipelineError as e:
            self.logger.error(f"Background enrichment run failed: {e}")

    def _run_loop(self, token: int):
        self._loop_thread_id = threading.get_ident()
        try:
            self._iterate_rows(token)
        finally:
            self._loop_thread_id = None
            self._loop_idle.set()

    def _iterate_rows(self, token: int):
        total = len(self.table)

        try:
            with self._lock:
                index = self._state.cursor

            while index < total:
                with self._lock:
                    if token != self._run_token:
                        return
                    if self._pause_requested:
                        break

                row = self.table[index]
                outcome = self._process_row(index, row)

                with self._lock:
                    if token != self._run_token:
                        self.logger.info(f"Discarding row {index + 1} of a stopped run")
                        return
                    self._state.results.append(dict(outcome.row))
                    if outcome.succeeded:
                        self._state.success_count += 1
                    self._state.cursor = index + 1
                    self._state.progress = (index + 1) / total
                    update = self._progress_update()

                self._add_log(outcome.message)
                self._notify_progress(update)

                index += 1
                if outcome.status != RowStatus.SKIPPED and index < total and self.row_delay > 0:
                    self._sleep(self.row_delay)

        except Exception as e:
            with self._lock:
                current = token == self._run_token
                if current:
                    self._state.status = PipelineStatus.ERROR
                    update = self._progress_update()
            if current:
                self.logger.exception("Enrichment run failed")
                self._add_log(f"Processing failed: {e}")
                self._notify_progress(update)
            raise PipelineError(f"Enrichment run failed: {e}") from e

        self._finish_run(token)

    def _process_row(self, index: int, row: Row) -> RowOutcome:
        """Enrich one row; never raises."""
        entity_name = self.resolver.entity_name(row, self.entity_column)
        if not entity_name:
            return RowOutcome(row=row, status=RowStatus.SKIPPED, message=f"Skipping empty row {index + 1}")

        self._add_log(f"Searching for: {entity_name}")
        try:
            return self.row_enricher.enrich(row, entity_name)
        except Exception as e:
            error = UnexpectedRowError(index, entity_name, e)
            self.logger.error(f"Error processing {error}", exc_info=True)
            return RowOutcome(row=row, status=RowStatus.FAILED, message=f"Error processing row {index + 1}: {e}")

    def _finish_run(self, token: int):
        with self._lock:
            if token != self._run_token:
                return
            if self._pause_requested:
                self._pause_requested = False
                self._state.status = PipelineStatus.PAUSED
                completed_results = None
            else:
                self._state.status = PipelineStatus.COMPLETED
                self._state.progress = 1.0
                completed_results = [dict(row) for row in self._state.results]
            update = self._progress_update()

        if completed_results is None:
            self._add_log(f"Processing paused at row {update.current_row + 1}")
            self._notify_progress(update)
            return

        self._add_log(
            f"Processing completed! {update.success_count}/{update.total_rows} rows enriched"
        )
        self._notify_progress(update)
        self._notify_complete(completed_results)

    # Events

    def _progress_update(self) -> ProgressUpdate:
        """Build an update from the current state; caller holds the lock."""
        return ProgressUpdate(
            state=self._state.status,
            progress=self._state.progress,
            current_row=self._state.cursor,
            total_rows=len(self.table),
            success_count=self._state.success_count,
        )

    def _add_log(self, message: str):
        entry = f"{datetime.now().strftime('%H:%M:%S')}: {message}"
        with self._lock:
            self._state.log.append(entry)
        self.logger.info(message)
        for observer in list(self.observers):
            try:
                observer.on_log(entry)
            except Exception as e:
                self.logger.warning(f"Observer failed on log entry: {e}")

    def _notify_progress(self, update: ProgressUpdate):
        for observer in list(self.observers):
            try:
                observer.on_progress(update)
            except Exception as e:
                self.logger.warning(f"Observer failed on progress update: {e}")

    def _notify_complete(self, results: Table):
        for observer in list(self.observers):
            try:
                observer.on_complete(results)
            except Exception as e:
                self.logger.warning(f"Observer failed on completion: {e}")
