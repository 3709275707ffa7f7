import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

logger = logging.getLogger(__name__)

# Logged for snapshots that are not the result of a mutation
# (completion and reset frames), so the log stays one-to-one with snapshots.
NO_HIGHLIGHT = (-1, -1)


@dataclass(frozen=True)
class Snapshot:
    seq: int
    values: np.ndarray


@dataclass(frozen=True)
class Frame:
    values: np.ndarray
    highlight: tuple
    complete: bool
    chunk: int


def freeze(values) -> np.ndarray:
    """Copy ``values`` into a read-only int array."""
    arr = np.array(values, dtype=np.int64)
    arr.setflags(write=False)
    return arr


class FrameSink:
    """
    Hand-off between the sort worker and the render loop.

    The worker calls publish() after every visual step. Instead of a queue
    the sink keeps a single "latest" slot plus the ordered index-pair log:

      publish():  append pair to log, seq = len(log) - 1, overwrite slot
      drain():    chunks_drawn += snapshots published since last drain,
                  highlight = log[chunks_drawn - 1]

    Skipped snapshots still advance chunks_drawn, so the highlight that is
    looked up always belongs to the snapshot that is actually drawn.
    """

    def __init__(self, redraw: Optional[Callable[[Frame], None]] = None):
        self._lock         = threading.Lock()
        self._redraw       = redraw
        self._pairs        = []
        self._latest       = None
        self._pending      = 0
        self._chunks_drawn = 0
        self._complete     = False

    # ---- producer side (sort worker) ----

    def publish(self, values, pair) -> Snapshot:
        frozen = freeze(values)
        with self._lock:
            self._pairs.append(tuple(pair))
            snap = Snapshot(len(self._pairs) - 1, frozen)
            self._latest = snap
            self._pending += 1
        return snap

    def set_complete(self, complete: bool = True):
        with self._lock:
            self._complete = complete

    # ---- consumer side (render loop) ----

    def drain(self) -> Optional[Frame]:
        with self._lock:
            if not self._pending:
                return None
            snap = self._latest
            dropped = self._pending - 1
            self._chunks_drawn += self._pending
            self._pending = 0
            self._latest = None
            chunk = self._chunks_drawn - 1
            frame = Frame(snap.values, self._pairs[chunk], self._complete, chunk)
        if dropped:
            logger.debug("Coalesced %d snapshot(s) into chunk %d", dropped, chunk)
        if self._redraw is not None:
            self._redraw(frame)
        return frame

    # ---- bookkeeping ----

    def reset(self):
        with self._lock:
            self._pairs        = []
            self._latest       = None
            self._pending      = 0
            self._chunks_drawn = 0
            self._complete     = False

    @property
    def complete(self) -> bool:
        with self._lock:
            return self._complete

    @property
    def chunks_drawn(self) -> int:
        with self._lock:
            return self._chunks_drawn

    @property
    def produced(self) -> int:
        with self._lock:
            return len(self._pairs)

    @property
    def index_pairs(self) -> list:
        with self._lock:
            return list(self._pairs)
