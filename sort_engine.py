import enum
import logging
import threading

from frame_sink import NO_HIGHLIGHT
from settings import BUBBLE, INSERTION, MERGE, QUICK, SELECTION

logger = logging.getLogger(__name__)


class RunOutcome(enum.Enum):
    SORTED    = "sorted"
    CANCELLED = "cancelled"
    RESET     = "reset"
    IGNORED   = "ignored"


# ============================================================
# ======================== SORT ENGINE =======================
# ============================================================
#
# Each algorithm mutates self.arr in place and calls _step(a, b) once per
# visual step: the index pair is logged, a snapshot goes to the sink and the
# worker sleeps one delay interval.
#
# Every loop body and recursive entry starts with a cancellation check.
# Merge and quick sort also compare the generation token captured at run()
# against the live one, so recursion left over from an algorithm the user has
# since switched away from unwinds without publishing another step.

class SortEngine:
    def __init__(self, values, control, sink):
        self.arr      = values
        self.n        = len(values)
        self.control  = control
        self.sink     = sink
        self._wake    = threading.Event()
        self._token   = None
        self._algorithms = {
            BUBBLE:    self.bubble_sort,
            INSERTION: self.insertion_sort,
            SELECTION: self.selection_sort,
            MERGE:     lambda: self.merge_sort(0, self.n - 1, top=True),
            QUICK:     lambda: self.quick_sort(0, self.n - 1, top=True),
        }

    def run(self) -> RunOutcome:
        """
        Sort once with the selected algorithm, or redraw after a reset.

        When a stop is already pending the array has been reshuffled by the
        host: publish it, wait one delay and report RESET so the host can
        build a fresh engine for the next run.
        """
        if self.control.stop_requested:
            self._step(*NO_HIGHLIGHT)
            logger.debug("Reset frame published (%d values)", self.n)
            return RunOutcome.RESET

        name = self.control.algorithm
        sort = self._algorithms.get(name)
        if sort is None:
            logger.warning("Unknown algorithm %r; nothing to do", name)
            return RunOutcome.IGNORED

        self._token = self.control.generation
        self.control.begin_run()
        logger.info("Starting %s on %d values", name, self.n)
        sort()

        if self.control.complete:
            logger.info("%s finished: %d comparisons, %d ms",
                        name, self.control.comparisons, self.control.elapsed_ms())
            return RunOutcome.SORTED
        logger.info("%s cancelled after %d comparisons", name, self.control.comparisons)
        return RunOutcome.CANCELLED

    def interrupt(self):
        """Cut the current pacing sleep short. Does not cancel the run."""
        self._wake.set()

    # ---- helpers ----

    def _stopped(self) -> bool:
        return self.control.stop_requested

    def _active(self) -> bool:
        return not self._stopped() and self.control.generation == self._token

    def _compare(self):
        self.control.add_comparison()

    def _sleep(self):
        delay = self.control.delay_ms / 1000.0
        if self._wake.wait(delay):
            self._wake.clear()
            logger.warning("Pacing sleep interrupted; continuing to next check point")

    def _step(self, a, b):
        self.sink.publish(self.arr, (a, b))
        self._sleep()

    def _finish(self):
        self.sink.set_complete(True)
        self.control.mark_complete()
        self._step(*NO_HIGHLIGHT)

    def is_sorted(self) -> bool:
        """Full adjacent-pair scan; no early exit."""
        ok = True
        for i in range(self.n - 1):
            if self.arr[i] > self.arr[i + 1]:
                ok = False
        return ok

    # ---- iterative sorts ----

    def bubble_sort(self):
        arr, n = self.arr, self.n
        for i in range(n - 1):
            if self._stopped(): return
            for j in range(n - i - 1):
                if self._stopped(): return
                self._compare()
                if arr[j] > arr[j+1]:
                    arr[j], arr[j+1] = arr[j+1], arr[j]
                    self._step(j, j+1)
        if not self._stopped():
            self._finish()

    def selection_sort(self):
        arr, n = self.arr, self.n
        for i in range(n - 1):
            if self._stopped(): return
            mi = i
            for j in range(i + 1, n):
                if self._stopped(): return
                self._compare()
                if arr[j] < arr[mi]: mi = j
            arr[i], arr[mi] = arr[mi], arr[i]
            self._step(mi, i)
        if not self._stopped():
            self._finish()

    def insertion_sort(self):
        arr, n = self.arr, self.n
        for i in range(1, n):
            if self._stopped(): return
            key = arr[i]; j = i - 1
            while j >= 0 and arr[j] > key:
                if self._stopped():
                    # put the held key back so no value is lost
                    arr[j+1] = key
                    return
                self._compare()
                arr[j+1] = arr[j]; j -= 1
                self._step(j, j+1)
            # the comparison that ended the inner loop
            self._compare()
            arr[j+1] = key
        if not self._stopped():
            self._finish()

    # ---- recursive sorts ----

    def merge_sort(self, lo, hi, top=False):
        if not self._active(): return
        if lo < hi:
            mid = (lo + hi) // 2
            self.merge_sort(lo, mid)
            self.merge_sort(mid + 1, hi)
            self._merge(lo, mid, hi)
        if top and self.is_sorted() and self._active():
            self._finish()

    def _merge(self, lo, mid, hi):
        if not self._active(): return
        arr = self.arr
        L = arr[lo:mid+1]; R = arr[mid+1:hi+1]
        i = j = 0; k = lo
        # highlight pairs are (k, k+i) / (k, k+j) with i, j already advanced
        while i < len(L) and j < len(R):
            if not self._active(): return
            self._compare()
            if L[i] <= R[j]:
                arr[k] = L[i]; i += 1
                self._step(k, k+i)
            else:
                arr[k] = R[j]; j += 1
                self._step(k, k+j)
            k += 1
        while i < len(L):
            if not self._active(): return
            arr[k] = L[i]
            self._step(k, k+i)
            i += 1; k += 1
        while j < len(R):
            if not self._active(): return
            arr[k] = R[j]
            self._step(k, k+j)
            j += 1; k += 1

    def quick_sort(self, lo, hi, top=False):
        if not self._active(): return
        if lo < hi:
            p = self._partition(lo, hi)
            if p is None: return
            self.quick_sort(lo, p - 1)
            self.quick_sort(p + 1, hi)
        if top and self.is_sorted() and self._active():
            self._finish()

    def _partition(self, lo, hi):
        """Lomuto partition around arr[hi]; None if the run went stale."""
        if not self._active(): return None
        arr = self.arr
        pivot = arr[hi]; i = lo - 1
        for j in range(lo, hi):
            if not self._active(): return None
            self._compare()
            if arr[j] < pivot:
                i += 1
                arr[i], arr[j] = arr[j], arr[i]
                self._step(i, j)
        if not self._active(): return None
        arr[i+1], arr[hi] = arr[hi], arr[i+1]
        self._step(i+1, hi)
        return i + 1


# ============================================================
# ======================== SORT WORKER =======================
# ============================================================

class SortWorker:
    """Runs one SortEngine.run() on a daemon thread."""

    def __init__(self, engine: SortEngine):
        self.engine   = engine
        self.outcome  = None
        self._thread  = None

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="sort-worker", daemon=True)
        self._thread.start()

    def _run(self):
        try:
            self.outcome = self.engine.run()
        except Exception:
            logger.exception("Sort worker crashed")
            raise

    def interrupt(self):
        self.engine.interrupt()

    def is_alive(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def join(self, timeout=None):
        if self._thread:
            self._thread.join(timeout)
        return self.outcome
