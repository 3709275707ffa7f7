import logging
import random
import time

import pytest

from frame_sink import NO_HIGHLIGHT, FrameSink
from settings import ALGORITHMS, BUBBLE, INSERTION, MERGE, QUICK, SELECTION
from sort_engine import RunOutcome, SortEngine, SortWorker

NAMES = [name for name, _ in ALGORITHMS]

_rng = random.Random(7)
INPUTS = {
    "random":    [_rng.randint(1, 20) for _ in range(30)],
    "sorted":    list(range(1, 16)),
    "reverse":   list(range(15, 0, -1)),
    "all_equal": [4] * 12,
    "empty":     [],
    "single":    [1],
    "pair":      [2, 1],
}


class RecordingSink(FrameSink):
    """FrameSink that checks the log invariant on every publish and can run a hook."""

    def __init__(self, hook=None):
        super().__init__()
        self.hook = hook

    def publish(self, values, pair):
        snap = super().publish(values, pair)
        assert snap.seq == self.produced - 1 == len(self.index_pairs) - 1
        if self.hook is not None:
            self.hook(self)
        return snap


def _run(name, values, control, sink):
    control.select(name)
    return SortEngine(values, control, sink).run()


@pytest.mark.parametrize("name", NAMES)
@pytest.mark.parametrize("kind", sorted(INPUTS))
def test_sorts_every_input(name, kind, control):
    values = list(INPUTS[kind])
    sink = RecordingSink()
    outcome = _run(name, values, control, sink)
    assert outcome is RunOutcome.SORTED
    assert values == sorted(INPUTS[kind])
    assert control.complete
    assert sink.complete
    assert sink.index_pairs[-1] == NO_HIGHLIGHT


def test_bubble_sort_example(control, sink):
    values = [5, 3, 4, 1, 2]
    _run(BUBBLE, values, control, sink)
    assert values == [1, 2, 3, 4, 5]
    assert control.comparisons == 10
    swaps = [p for p in sink.index_pairs if p != NO_HIGHLIGHT]
    # one swap per inversion
    assert len(swaps) == 8
    assert swaps[:4] == [(0, 1), (1, 2), (2, 3), (3, 4)]


@pytest.mark.parametrize("n", [1, 2, 5, 10, 25])
def test_insertion_comparisons_reverse(n, control, sink):
    values = list(range(n, 0, -1))
    _run(INSERTION, values, control, sink)
    assert control.comparisons == n * (n - 1) // 2 + (n - 1)


def test_insertion_shift_pairs(control, sink):
    values = [2, 1]
    _run(INSERTION, values, control, sink)
    assert sink.index_pairs == [(-1, 0), NO_HIGHLIGHT]
    assert control.comparisons == 2


@pytest.mark.parametrize("n", [2, 6, 11])
def test_selection_always_swaps(n, control, sink):
    values = list(range(1, n + 1))
    _run(SELECTION, values, control, sink)
    assert control.comparisons == n * (n - 1) // 2
    assert sink.index_pairs[:-1] == [(i, i) for i in range(n - 1)]


def test_quick_sort_sorted_input(control, sink):
    n = 12
    values = list(range(1, n + 1))
    _run(QUICK, values, control, sink)
    assert control.comparisons == n * (n - 1) // 2
    assert sink.index_pairs[-2] == (1, 1)


def test_merge_highlight_formula(control, sink):
    values = [2, 1]
    _run(MERGE, values, control, sink)
    assert sink.index_pairs == [(0, 1), (1, 1), NO_HIGHLIGHT]
    assert control.comparisons == 1


@pytest.mark.parametrize("name", NAMES)
def test_reset_path_when_stop_already_requested(name, control, sink):
    values = [3, 1, 2]
    control.select(name)
    control.request_stop()
    outcome = SortEngine(values, control, sink).run()
    assert outcome is RunOutcome.RESET
    assert values == [3, 1, 2]
    assert sink.produced == 1
    assert sink.index_pairs == [NO_HIGHLIGHT]
    assert control.comparisons == 0
    assert control.start_time is None
    assert not sink.complete


@pytest.mark.parametrize("name", NAMES)
def test_stop_after_first_step(name, control):
    original = list(range(10, 0, -1))
    values = list(original)
    at_stop = []

    def stop(s):
        control.request_stop()
        at_stop.append(list(values))

    sink = RecordingSink(hook=stop)
    outcome = _run(name, values, control, sink)
    assert outcome is RunOutcome.CANCELLED
    assert sink.produced == 1
    assert not control.complete
    assert not sink.complete
    if name == INSERTION:
        # the held key is dropped back into its hole
        assert sorted(values) == sorted(original)
    else:
        assert values == at_stop[0]


@pytest.mark.parametrize("name", [MERGE, QUICK])
def test_switching_algorithm_stops_recursion(name, control):
    values = list(range(16, 0, -1))
    at_switch = []

    def switch(s):
        if s.produced == 3:
            control.select(BUBBLE)
            at_switch.append(list(values))

    sink = RecordingSink(hook=switch)
    outcome = _run(name, values, control, sink)
    assert outcome is RunOutcome.CANCELLED
    assert sink.produced == 3
    assert not control.complete
    assert values == at_switch[0]


def test_unknown_algorithm_is_ignored(control, sink):
    values = [2, 1]
    outcome = _run("Bogo Sort", values, control, sink)
    assert outcome is RunOutcome.IGNORED
    assert values == [2, 1]
    assert sink.produced == 0


def test_is_sorted_scan(control, sink):
    engine = SortEngine([1, 3, 2, 4], control, sink)
    assert not engine.is_sorted()
    engine.arr[1], engine.arr[2] = engine.arr[2], engine.arr[1]
    assert engine.is_sorted()


def test_interrupted_sleep_is_logged_and_sort_continues(control, caplog):
    control.delay_ms = 10_000
    values = [2, 1]
    engine = SortEngine(values, control, None)
    engine.sink = RecordingSink(hook=lambda s: engine.interrupt())
    control.select(BUBBLE)
    t0 = time.monotonic()
    with caplog.at_level(logging.WARNING, logger="sort_engine"):
        outcome = engine.run()
    assert time.monotonic() - t0 < 5
    assert outcome is RunOutcome.SORTED
    assert not control.stop_requested
    warnings = [r for r in caplog.records if "interrupted" in r.getMessage()]
    assert len(warnings) == 2


def test_worker_runs_in_background(control, sink):
    values = list(range(20, 0, -1))
    control.select(QUICK)
    worker = SortWorker(SortEngine(values, control, sink))
    worker.start()
    assert worker.join(timeout=5) is RunOutcome.SORTED
    assert not worker.is_alive()
    assert values == sorted(values)


def test_worker_stops_on_request(control, sink):
    control.delay_ms = 20
    values = list(range(40, 0, -1))
    control.select(BUBBLE)
    worker = SortWorker(SortEngine(values, control, sink))
    worker.start()
    deadline = time.monotonic() + 5
    while sink.produced == 0 and time.monotonic() < deadline:
        time.sleep(0.005)
    control.request_stop()
    worker.interrupt()
    assert worker.join(timeout=5) is RunOutcome.CANCELLED
    assert not control.complete
    assert sorted(values) == list(range(1, 41))
