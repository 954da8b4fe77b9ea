from __future__ import annotations

import sys
from pathlib import Path

import pytest


_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from mud16.config import PPUConfig  # noqa: E402


@pytest.fixture
def small_config() -> PPUConfig:
    return PPUConfig(width=64, height=48)
