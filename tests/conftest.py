import sys
from pathlib import Path

# Ensure flat-module imports for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from frame_sink import FrameSink
from run_control import RunControl
from settings import BUBBLE


@pytest.fixture
def control() -> RunControl:
    """Zero-delay control so engine runs finish instantly."""
    return RunControl(BUBBLE, delay_ms=0)


@pytest.fixture
def sink() -> FrameSink:
    return FrameSink()
