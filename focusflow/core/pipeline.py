import threading
import traceback
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Literal, Optional, Sequence

from .aggregator import build_summary, display_data
from .config import DEFAULT_CONFIG, EngineConfig
from .logger import FocusLogger
from .tracker import IdentityStrategy, IdentityTracker
from .types import Detection, DisplayData, DistractionEvent, SessionState, SessionSummary, TrackedPerson


DetectionSource = Callable[[], Sequence[Detection]]
PipelineState = Literal["idle", "active"]


class FocusPipeline:
    """
    Drives a monitoring session: pulls detections on a fixed cadence, scores
    and tracks every face, counts session seconds and serves read-only views.

    Every change to the session state runs as a command on one single-worker
    executor, so a detection tick, a clock tick and a control call never
    interleave. The two timer threads only enqueue commands.
    """

    def __init__(
        self,
        source: DetectionSource,
        config: EngineConfig | None = None,
        log_path: str | None = None,
        strategy: IdentityStrategy | None = None,
    ):
        self.source = source
        self.config = config or DEFAULT_CONFIG
        self.tracker = IdentityTracker(self.config, strategy)
        self.session = SessionState()
        self.logger: Optional[FocusLogger] = None
        self._log_path = log_path

        self._active = False
        self._summary_ready = False
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="focusflow-session")
        self._pending_tick: Future | None = None
        self._pending_clock: Future | None = None
        self._stop_event = threading.Event()
        self._timers: List[threading.Thread] = []
        self._tick_index = 0
        self._debug_iterations = 5  # Detailed logs for the first few ticks

    # ----------------------------
    # Control
    # ----------------------------

    def start(self, schedule: bool = True):
        """Reset the session and go active. With schedule=False ticks are driven by the caller."""
        if self._active:
            print("[Pipeline] start() ignored, session already active")
            return
        # Open the log before going active so a bad path cannot leave a half-started session
        self.logger = None
        if self._log_path:
            try:
                self.logger = FocusLogger(self._log_path)
            except OSError as exc:
                print(f"[Pipeline] Could not open session log {self._log_path}: {exc}; running without it")
        self._submit(self._start_command).result()
        if schedule:
            self._stop_event.clear()
            self._timers = [
                threading.Thread(
                    target=self._timer_loop,
                    args=(self.config.detection_interval_ms, self._fire_detection_tick),
                    name="focusflow-detection-timer",
                    daemon=True,
                ),
                threading.Thread(
                    target=self._timer_loop,
                    args=(self.config.clock_interval_ms, self._fire_clock_tick),
                    name="focusflow-clock-timer",
                    daemon=True,
                ),
            ]
            for timer in self._timers:
                timer.start()
        print(
            f"[Pipeline] Session started (detection every {self.config.detection_interval_ms} ms, "
            f"scheduled={schedule})"
        )

    def stop(self):
        """Stop ticking. The tick already in flight is still applied before going idle."""
        if not self._active:
            return
        self._stop_event.set()
        for timer in self._timers:
            timer.join()
        self._timers = []
        for pending in (self._pending_tick, self._pending_clock):
            if pending is not None:
                pending.result()
        self._pending_tick = None
        self._pending_clock = None
        self._submit(self._stop_command).result()
        print(
            f"[Pipeline] Session stopped after {self.session.elapsed_seconds}s "
            f"(summary available: {self._summary_ready})"
        )

    def select_identity(self, person_id: int | None):
        self._submit(self._select_command, person_id).result()

    def reset_after_summary(self):
        self._submit(self._reset_command).result()

    def close(self):
        self.stop()
        self._executor.shutdown(wait=True)

    # ----------------------------
    # Manual stepping
    # ----------------------------

    def run_detection_tick(self) -> List[DistractionEvent]:
        """Pull one batch from the source and apply it. Returns the events it fired."""
        return self._submit(self._detection_command).result()

    def process_detections(self, detections: Sequence[Detection]) -> List[DistractionEvent]:
        return self._submit(self._apply_command, list(detections)).result()

    def advance_clock(self, seconds: int = 1):
        for _ in range(seconds):
            self._submit(self._clock_command).result()

    # ----------------------------
    # Read-only views
    # ----------------------------

    @property
    def state(self) -> PipelineState:
        return "active" if self._active else "idle"

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def elapsed_seconds(self) -> int:
        return self.session.elapsed_seconds

    @property
    def summary_available(self) -> bool:
        return self._summary_ready

    def current_display_data(self) -> DisplayData:
        with self._lock:
            return display_data(self.session)

    def session_summary(self) -> SessionSummary | None:
        with self._lock:
            if not self._summary_ready:
                return None
            return build_summary(self.session)

    def event_log(self) -> List[DistractionEvent]:
        with self._lock:
            return list(self.session.events)

    def tracked_persons(self) -> List[TrackedPerson]:
        with self._lock:
            return [self.session.persons[pid].snapshot() for pid in sorted(self.session.persons)]

    # ----------------------------
    # Scheduling
    # ----------------------------

    def _submit(self, command, *args) -> Future:
        return self._executor.submit(command, *args)

    def _timer_loop(self, interval_ms: int, fire: Callable[[], None]):
        interval = interval_ms / 1000.0
        while not self._stop_event.wait(interval):
            fire()

    def _fire_detection_tick(self):
        # Never queue a second detection tick behind one that has not been applied yet
        if self._pending_tick is not None and not self._pending_tick.done():
            if self._tick_index <= self._debug_iterations:
                print("[Pipeline] Previous detection tick still running; skipping")
            return
        self._pending_tick = self._submit(self._detection_command)

    def _fire_clock_tick(self):
        self._pending_clock = self._submit(self._clock_command)

    # ----------------------------
    # Commands (run on the session executor only)
    # ----------------------------

    def _start_command(self):
        with self._lock:
            self.session.reset()
            self._summary_ready = False
            self._tick_index = 0
            self._active = True

    def _stop_command(self):
        with self._lock:
            self._active = False
            self._summary_ready = self.session.elapsed_seconds > 0

    def _select_command(self, person_id: int | None):
        with self._lock:
            self.session.selected_id = person_id

    def _reset_command(self):
        if self._active:
            print("[Pipeline] reset_after_summary() ignored while the session is active")
            return
        with self._lock:
            self.session.reset()
            self._summary_ready = False

    def _clock_command(self):
        if not self._active:
            return
        with self._lock:
            self.session.elapsed_seconds += 1

    def _detection_command(self) -> List[DistractionEvent]:
        if not self._active:
            return []
        try:
            detections = list(self.source())
        except Exception as exc:
            print(f"[Pipeline] Detection source error, skipping tick: {exc}")
            traceback.print_exc()
            return []
        return self._apply_command(detections)

    def _apply_command(self, detections: List[Detection]) -> List[DistractionEvent]:
        if not self._active:
            return []
        self._tick_index += 1
        debug = self._tick_index <= self._debug_iterations

        with self._lock:
            events = self.tracker.update(self.session, detections)
            persons = list(self.session.persons.values())
            now = self.session.elapsed_seconds

        if debug:
            scores = {p.id: p.focus_score for p in persons}
            print(f"[Pipeline][Tick {self._tick_index}] faces={len(detections)} scores={scores} t={now}s")
        for event in events:
            print(f"[Pipeline] Distraction: {event.label} dropped below "
                  f"{self.config.distraction_threshold} at {now}s")

        if self.logger is not None:
            self.logger.log_tick(now, persons, events)
        return events
