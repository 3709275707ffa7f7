import threading
import time

from settings import DEFAULT_DELAY_MS


class RunControl:
    """
    Shared state for one sorting run, handed to the engine by the host.

    Both the render thread and the sort worker touch this object, so every
    field is read and written under ``_lock`` (the stop flag is an Event).

    Attributes
    ----------
    algorithm   : str   — display name of the selected algorithm
    delay_ms    : int   — pause between visual steps, re-read every step
    generation  : int   — bumped by select(); recursive sorts compare it
    comparisons : int   — element comparisons made in the current run
    start_time  : float — time.monotonic() at begin_run(), None before
    stop_time   : float — set when the run completes or is stopped
    complete    : bool  — the engine finished and verified the sort
    """

    def __init__(self, algorithm: str, delay_ms: int = DEFAULT_DELAY_MS):
        self._lock        = threading.Lock()
        self._stop        = threading.Event()
        self._algorithm   = algorithm
        self._delay_ms    = max(0, int(delay_ms))
        self._generation  = 0
        self._comparisons = 0
        self._start_time  = None
        self._stop_time   = None
        self._complete    = False

    # ---- selection ----

    @property
    def algorithm(self) -> str:
        with self._lock:
            return self._algorithm

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def select(self, name: str) -> int:
        """Switch algorithm; any recursion started under the old one goes stale."""
        with self._lock:
            self._algorithm = name
            self._generation += 1
            return self._generation

    @property
    def delay_ms(self) -> int:
        with self._lock:
            return self._delay_ms

    @delay_ms.setter
    def delay_ms(self, value: int):
        with self._lock:
            self._delay_ms = max(0, int(value))

    # ---- cancellation ----

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def clear_stop(self):
        self._stop.clear()

    def request_stop(self):
        with self._lock:
            if self._start_time is not None and self._stop_time is None:
                self._stop_time = time.monotonic()
        self._stop.set()

    # ---- run lifecycle ----

    def begin_run(self):
        with self._lock:
            self._comparisons = 0
            self._complete    = False
            self._start_time  = time.monotonic()
            self._stop_time   = None

    def reset_counters(self):
        with self._lock:
            self._comparisons = 0
            self._complete    = False
            self._start_time  = None
            self._stop_time   = None

    def mark_complete(self):
        with self._lock:
            self._complete = True
            if self._stop_time is None:
                self._stop_time = time.monotonic()

    @property
    def complete(self) -> bool:
        with self._lock:
            return self._complete

    # ---- metrics ----

    def add_comparison(self, n: int = 1):
        with self._lock:
            self._comparisons += n

    @property
    def comparisons(self) -> int:
        with self._lock:
            return self._comparisons

    @property
    def start_time(self):
        with self._lock:
            return self._start_time

    @property
    def stop_time(self):
        with self._lock:
            return self._stop_time

    def elapsed_ms(self) -> int:
        with self._lock:
            if self._start_time is None:
                return 0
            end = self._stop_time if self._stop_time is not None else time.monotonic()
            return int((end - self._start_time) * 1000)
