# ============================================================
# ===================== USER SETTINGS ========================
# ============================================================

WINDOW_WIDTH   = 1100
WINDOW_HEIGHT  = 680
FPS            = 60

DEFAULT_ARRAY_SIZE = 48
MIN_ARRAY_SIZE     = 2
MAX_ARRAY_SIZE     = 128

# Pause between visual steps, in milliseconds.
DEFAULT_DELAY_MS = 20
MAX_DELAY_MS     = 250

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# ============================================================
# ========================= COLORS ===========================
# ============================================================

BACKGROUND_COLOR = (5, 5, 10)
ACTIVE_COLOR     = (255, 60, 60)
COMPLETE_COLOR   = (60, 200, 100)
BAR_SPACING      = 1

UI_BG         = (8,   8,  14)
UI_PANEL      = (14, 14,  22)
UI_PANEL2     = (22, 22,  36)
UI_ACCENT     = (255, 55,  55)
UI_TEXT       = (215, 215, 228)
UI_SUBTEXT    = (105, 105, 130)
UI_HOVER      = (30,  22,  38)
UI_SEL_BG     = (50,  12,  12)
UI_BORDER     = (38,  38,  58)
UI_SEL_BORDER = (255, 55,  55)
UI_DIM        = (60,  60,  80)

# ============================================================
# ======================= ALGORITHMS =========================
# ============================================================

BUBBLE    = "Bubble Sort"
INSERTION = "Insertion Sort"
SELECTION = "Selection Sort"
MERGE     = "Merge Sort"
QUICK     = "Quick Sort"

# Display order in the menu; the display name is what the engine dispatches on.
ALGORITHMS = [
    (BUBBLE,    "bubble"),
    (INSERTION, "insertion"),
    (SELECTION, "selection"),
    (MERGE,     "merge"),
    (QUICK,     "quick"),
]


def algorithm_name(key_or_name: str) -> str | None:
    """Resolve a menu key (``"quick"``) or display name to the display name."""
    for name, key in ALGORITHMS:
        if key_or_name in (name, key):
            return name
    return None
