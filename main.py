import argparse
import logging
import math
import random
import sys
import time

import numpy as np
import pygame

from frame_sink import FrameSink
from run_control import RunControl
from settings import (
    ACTIVE_COLOR, ALGORITHMS, BACKGROUND_COLOR, BAR_SPACING, COMPLETE_COLOR,
    DEFAULT_ARRAY_SIZE, DEFAULT_DELAY_MS, FPS, LOG_FORMAT, MAX_ARRAY_SIZE,
    MAX_DELAY_MS, MIN_ARRAY_SIZE, UI_ACCENT, UI_BG, UI_BORDER, UI_DIM,
    UI_HOVER, UI_PANEL, UI_PANEL2, UI_SEL_BG, UI_SEL_BORDER, UI_SUBTEXT,
    UI_TEXT, WINDOW_HEIGHT, WINDOW_WIDTH, algorithm_name,
)
from sort_engine import RunOutcome, SortEngine, SortWorker

logger = logging.getLogger(__name__)

# ============================================================
# ========================= LAYOUT CONSTANTS =================
# ============================================================

PAD      = 16
BTN_W    = 150
BTN_H    = 38
BTN_GAP  = 6
ACT_W    = 110
SL_W     = 260

_Y_ALGOS   = 58
_Y_SLIDERS = 104
_Y_BARS    = 160


def shuffled_values(size, rng=random):
    arr = list(range(1, size + 1)); rng.shuffle(arr)
    return arr

# ============================================================
# ======================= COLOR / DRAW =======================
# ============================================================

def value_to_color(value, max_value):
    r = value / max_value
    if r < 0.25: return (0, int(255 * r * 4), 255)
    if r < 0.5:  return (0, 255, int(255 * (1 - (r - 0.25) * 4)))
    if r < 0.75: return (int(255 * (r - 0.5) * 4), 255, 0)
    return (255, int(255 * (1 - (r - 0.75) * 4)), 0)


def bar_heights(values, area_h):
    """Scale values to pixel heights; the largest value fills ``area_h``."""
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return values
    top = max(values.max(), 1.0)
    return np.maximum(values, 0.0) / top * area_h


def draw_bars(screen, values, highlight=(), complete=False):
    area = pygame.Rect(0, _Y_BARS, WINDOW_WIDTH, WINDOW_HEIGHT - _Y_BARS)
    screen.fill(BACKGROUND_COLOR, area)
    n = len(values)
    if not n: return
    bw = area.width / n
    hs = bar_heights(values, area.height - 8)
    # the merge highlight formula can point past the end; those are skipped
    active = {i for i in highlight if 0 <= i < n}
    vmax = max(int(max(values)), 1)
    for i, (v, h) in enumerate(zip(values, hs)):
        if complete:          c = COMPLETE_COLOR
        elif i in active:     c = ACTIVE_COLOR
        else:                 c = value_to_color(min(int(v), vmax), vmax)
        pygame.draw.rect(screen, c, (i * bw, area.bottom - h, max(bw - BAR_SPACING, 1), h))

# ============================================================
# ========================= UI WIDGETS =======================
# ============================================================

class Slider:
    """Single-knob integer slider."""
    KNOB_RADIUS = 6

    def __init__(self, x, y, w, lo, hi, val, label, unit=""):
        self.x, self.y, self.w = x, y, w
        self.lo, self.hi = lo, hi
        self.value = val
        self.label = label
        self.unit = unit
        self.drag = False
        self.track = pygame.Rect(x, y+18, w, 4)
        self.hit = pygame.Rect(x-5, y, w+10, 38)

    def _r(self):
        return (self.value - self.lo) / (self.hi - self.lo)

    def _kx(self):
        return int(self.x + self._r() * self.w)

    def handle(self, ev):
        if ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            if math.hypot(ev.pos[0]-self._kx(), ev.pos[1]-self.track.centery) < 14 \
               or self.hit.collidepoint(ev.pos):
                self.drag = True; self._set(ev.pos[0])
        elif ev.type == pygame.MOUSEBUTTONUP:
            self.drag = False
        elif ev.type == pygame.MOUSEMOTION and self.drag:
            self._set(ev.pos[0])

    def _set(self, mx):
        r = max(0.0, min(1.0, (mx - self.x) / self.w))
        self.value = int(round(self.lo + r * (self.hi - self.lo)))

    def draw(self, s, fonts):
        s.blit(fonts['small'].render(f"{self.label}:  {self.value}{self.unit}", True, UI_SUBTEXT),
               (self.x, self.y))
        pygame.draw.rect(s, UI_BORDER, self.track, border_radius=2)
        fw = int(self._r() * self.w)
        if fw > 0: pygame.draw.rect(s, UI_ACCENT, (self.x, self.track.y, fw, 4), border_radius=2)
        kx, ky = self._kx(), self.track.centery
        pygame.draw.circle(s, UI_PANEL2, (kx, ky), self.KNOB_RADIUS)
        pygame.draw.circle(s, UI_ACCENT, (kx, ky), self.KNOB_RADIUS, 2)
        pygame.draw.circle(s, UI_ACCENT, (kx, ky), 2)


class AlgoBtn:
    H = BTN_H
    def __init__(self, x, y, w, name, idx):
        self.rect = pygame.Rect(x, y, w, self.H)
        self.name, self.idx = name, idx

    def draw(self, s, fonts, sel, hov):
        bg = UI_SEL_BG if sel else (UI_HOVER if hov else UI_PANEL)
        br = UI_SEL_BORDER if sel else (UI_DIM if hov else UI_BORDER)
        pygame.draw.rect(s, bg, self.rect, border_radius=5)
        pygame.draw.rect(s, br, self.rect, 1, border_radius=5)
        tc = UI_TEXT if (sel or hov) else (150, 150, 170)
        t = fonts['mid'].render(self.name, True, tc)
        s.blit(t, t.get_rect(center=self.rect.center))


class SmBtn:
    def __init__(self, x, y, w, h, lbl):
        self.rect = pygame.Rect(x, y, w, h); self.label = lbl
    def draw(self, s, fonts, act=False, hov=False):
        bg = UI_ACCENT if act else (UI_HOVER if hov else UI_PANEL2)
        fc = (0, 0, 0) if act else UI_TEXT
        pygame.draw.rect(s, bg,        self.rect, border_radius=5)
        pygame.draw.rect(s, UI_BORDER, self.rect, 1, border_radius=5)
        t = fonts['mid'].render(self.label, True, fc)
        s.blit(t, t.get_rect(center=self.rect.center))

# ============================================================
# ======================= VISUALIZER =========================
# ============================================================

class Visualizer:
    """
    Controls across the top, bars underneath.

    The render loop owns the widgets and the FrameSink consumer side; the
    sort itself always runs on a SortWorker. RESET raises the stop flag and
    waits, one tick at a time, for the worker to exit before reshuffling.
    """

    def __init__(self, screen, fonts, cfg):
        self.screen  = screen
        self.fonts   = fonts
        self.rng     = random.Random(cfg["seed"])
        self.control = RunControl(cfg["algorithm"], cfg["delay"])
        self.sink    = FrameSink(redraw=self._show)
        self.worker  = None
        self.pending_reset = False
        self.frames_drawn  = 0
        self.hov = -1

        self.btns = []
        for i, (nm, _) in enumerate(ALGORITHMS):
            self.btns.append(AlgoBtn(PAD + i*(BTN_W+BTN_GAP), _Y_ALGOS, BTN_W, nm, i))
        ax = WINDOW_WIDTH - PAD - 2*ACT_W - BTN_GAP
        self.start_btn = SmBtn(ax, _Y_ALGOS, ACT_W, BTN_H, "> START")
        self.reset_btn = SmBtn(ax + ACT_W + BTN_GAP, _Y_ALGOS, ACT_W, BTN_H, "RESET")

        self.sl_size  = Slider(PAD, _Y_SLIDERS, SL_W, MIN_ARRAY_SIZE, MAX_ARRAY_SIZE,
                               cfg["size"], "Array Size")
        self.sl_delay = Slider(PAD + SL_W + 40, _Y_SLIDERS, SL_W, 0, MAX_DELAY_MS,
                               cfg["delay"], "Delay", unit=" ms")

        self.values = shuffled_values(cfg["size"], self.rng)
        self.frame  = None

    @property
    def running(self) -> bool:
        return bool(self.worker and self.worker.is_alive())

    # ---- actions ----

    def config(self):
        nm = self.control.algorithm
        return dict(algorithm=nm, size=self.sl_size.value, delay=self.sl_delay.value)

    def start(self):
        if self.running or self.pending_reset:
            return
        self.control.delay_ms = self.config()["delay"]
        self.sink.reset()
        self.frames_drawn = 0
        self.control.clear_stop()
        self.worker = SortWorker(SortEngine(self.values, self.control, self.sink))
        self.worker.start()

    def reset(self):
        self.control.request_stop()
        if self.worker:
            self.worker.interrupt()
        self.pending_reset = True

    def select(self, name):
        if name != self.control.algorithm:
            self.control.select(name)
            logger.info("Selected %s", name)

    def _finish_reset(self):
        # Only reached once the previous worker has exited.
        self.pending_reset = False
        cfg = self.config()
        self.control.delay_ms = cfg["delay"]
        self.values = shuffled_values(cfg["size"], self.rng)
        self.sink.reset()
        self.control.reset_counters()
        self.frames_drawn = 0
        self.worker = SortWorker(SortEngine(self.values, self.control, self.sink))
        self.worker.start()

    # ---- per-tick ----

    def handle(self, ev):
        self.sl_size.handle(ev)
        self.sl_delay.handle(ev)

        if ev.type == pygame.MOUSEMOTION:
            self.hov = -1
            for b in self.btns:
                if b.rect.collidepoint(ev.pos): self.hov = b.idx

        if ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            for b in self.btns:
                if b.rect.collidepoint(ev.pos): self.select(b.name)
            if self.start_btn.rect.collidepoint(ev.pos): self.start()
            if self.reset_btn.rect.collidepoint(ev.pos): self.reset()

        if ev.type == pygame.KEYDOWN:
            if ev.key == pygame.K_SPACE: self.start()
            elif ev.key == pygame.K_r:   self.reset()

    def _show(self, frame):
        self.frame = frame
        self.frames_drawn += 1

    def update(self):
        self.control.delay_ms = self.config()["delay"]
        if self.pending_reset and not self.running:
            self._finish_reset()
        self.sink.drain()

    def draw(self):
        s  = self.screen
        mp = pygame.mouse.get_pos()
        s.fill(UI_BG)

        t1 = self.fonts['title'].render("SuperSorter", True, UI_TEXT)
        t2 = self.fonts['title'].render("SuperSorter", True, UI_ACCENT)
        s.blit(t2, (PAD+1, 15)); s.blit(t1, (PAD, 14))

        c = self.control
        stats = (f"{c.algorithm}   Comparisons: {c.comparisons}   "
                 f"Time: {c.elapsed_ms()} ms   "
                 f"Frames: {self.frames_drawn}/{self.sink.produced}")
        st = self.fonts['mono_sm'].render(stats, True, UI_SUBTEXT)
        s.blit(st, (WINDOW_WIDTH - PAD - st.get_width(), 24))

        sel = c.algorithm
        for b in self.btns: b.draw(s, self.fonts, b.name == sel, b.idx == self.hov)
        self.start_btn.draw(s, self.fonts, self.running, self.start_btn.rect.collidepoint(mp))
        self.reset_btn.draw(s, self.fonts, self.pending_reset, self.reset_btn.rect.collidepoint(mp))
        self.sl_size.draw(s, self.fonts)
        self.sl_delay.draw(s, self.fonts)
        s.blit(self.fonts['small'].render("SPACE start   R reset   ESC quit", True, UI_DIM),
               (PAD + 2*SL_W + 80, _Y_SLIDERS + 14))
        pygame.draw.line(s, UI_BORDER, (PAD, _Y_BARS - 8), (WINDOW_WIDTH-PAD, _Y_BARS - 8), 1)

        if self.frame is not None:
            draw_bars(s, self.frame.values, self.frame.highlight, self.frame.complete)
        else:
            draw_bars(s, self.values)
        pygame.display.flip()

    def shutdown(self):
        self.control.request_stop()
        if self.worker:
            self.worker.interrupt()
            self.worker.join(timeout=1.0)

# ============================================================
# ========================= HEADLESS =========================
# ============================================================

def run_headless(cfg, out=sys.stdout) -> RunOutcome:
    """Run one sort without a window, draining at FPS like the render loop would."""
    rng     = random.Random(cfg["seed"])
    control = RunControl(cfg["algorithm"], cfg["delay"])
    sink    = FrameSink()
    values  = shuffled_values(cfg["size"], rng)
    worker  = SortWorker(SortEngine(values, control, sink))
    worker.start()

    frames, interval = 0, 1.0 / FPS
    while worker.is_alive():
        if sink.drain() is not None: frames += 1
        time.sleep(interval)
    worker.join()
    if sink.drain() is not None: frames += 1

    outcome = worker.outcome
    print(f"{cfg['algorithm']}: {outcome.value if outcome else 'crashed'}", file=out)
    print(f"  comparisons : {control.comparisons}", file=out)
    print(f"  snapshots   : {sink.produced}", file=out)
    print(f"  frames drawn: {frames}", file=out)
    print(f"  elapsed     : {control.elapsed_ms()} ms", file=out)
    return outcome

# ============================================================
# ========================= MAIN =============================
# ============================================================

def _algorithm_arg(value):
    name = algorithm_name(value)
    if name is None:
        choices = ", ".join(k for _, k in ALGORITHMS)
        raise argparse.ArgumentTypeError(f"unknown algorithm {value!r} (choose from {choices})")
    return name


def _size_arg(value):
    n = int(value)
    if not MIN_ARRAY_SIZE <= n <= MAX_ARRAY_SIZE:
        raise argparse.ArgumentTypeError(f"size must be in [{MIN_ARRAY_SIZE}, {MAX_ARRAY_SIZE}]")
    return n


def _delay_arg(value):
    ms = int(value)
    if ms < 0:
        raise argparse.ArgumentTypeError("delay must be >= 0")
    return ms


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="supersorter", description="Animated sorting algorithm visualizer"
    )
    parser.add_argument("--algorithm", type=_algorithm_arg, default=ALGORITHMS[0][0],
                        help="bubble, insertion, selection, merge or quick")
    parser.add_argument("--size", type=_size_arg, default=DEFAULT_ARRAY_SIZE,
                        help="number of bars")
    parser.add_argument("--delay", type=_delay_arg, default=DEFAULT_DELAY_MS,
                        help="pause between steps in milliseconds")
    parser.add_argument("--seed", type=int, default=None, help="shuffle seed")
    parser.add_argument("--headless", action="store_true",
                        help="sort once without opening a window and print stats")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def build_fonts():
    mono = "consolas,couriernew,lucidaconsole"
    sans = "segoeui,tahoma,arial"
    return dict(title=pygame.font.SysFont(mono, 26), mid=pygame.font.SysFont(sans, 16),
                small=pygame.font.SysFont(sans, 13), mono_sm=pygame.font.SysFont(mono, 13))


def run_window(cfg):
    pygame.init()
    screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
    pygame.display.set_caption("SuperSorter")
    clock = pygame.time.Clock()
    vis = Visualizer(screen, build_fonts(), cfg)
    try:
        while True:
            clock.tick(FPS)
            for ev in pygame.event.get():
                if ev.type == pygame.QUIT: return
                if ev.type == pygame.KEYDOWN and ev.key == pygame.K_ESCAPE: return
                vis.handle(ev)
            vis.update()
            vis.draw()
    finally:
        vis.shutdown()
        pygame.quit()


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)
    cfg = dict(algorithm=args.algorithm, size=args.size, delay=args.delay, seed=args.seed)
    if args.headless:
        return 0 if run_headless(cfg) is RunOutcome.SORTED else 1
    run_window(cfg)
    return 0


if __name__ == "__main__":
    sys.exit(main())
