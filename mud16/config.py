from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional, Tuple


SCREEN_W = 320
SCREEN_H = 240

SKY_COLOR = (0x88, 0xDD, 0xFF)

ENV_WAIT_STATES = "MUD16_WAIT_STATES"
ENV_GRANT_TIMEOUT = "MUD16_GRANT_TIMEOUT"


@dataclass(frozen=True)
class PPUConfig:
    width: int = SCREEN_W
    height: int = SCREEN_H
    wait_states: int = 1
    # Cycles to wait for a bus grant before giving up; None waits forever.
    grant_timeout: Optional[int] = None
    sky_color: Tuple[int, int, int] = SKY_COLOR
    ui_band_rows: int = 5
    check_contention: bool = True

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"raster must be at least 1x1, got {self.width}x{self.height}")
        if self.wait_states < 0:
            raise ValueError(f"wait_states must be >= 0, got {self.wait_states}")
        if self.grant_timeout is not None and self.grant_timeout <= 0:
            raise ValueError(f"grant_timeout must be positive or None, got {self.grant_timeout}")
        if len(self.sky_color) != 3 or any(not (0 <= c <= 0xFF) for c in self.sky_color):
            raise ValueError(f"sky_color must be three 8-bit channels, got {self.sky_color!r}")
        if not (0 <= self.ui_band_rows <= 5):
            raise ValueError(f"ui_band_rows must be 0-5, got {self.ui_band_rows}")

    @property
    def ui_band_height(self) -> int:
        return self.ui_band_rows * 8

    @classmethod
    def from_env(cls, **overrides) -> "PPUConfig":
        cfg = cls(**overrides)
        wait = os.environ.get(ENV_WAIT_STATES, "")
        if wait and "wait_states" not in overrides:
            cfg = replace(cfg, wait_states=int(wait))
        timeout = os.environ.get(ENV_GRANT_TIMEOUT, "")
        if timeout and "grant_timeout" not in overrides:
            cfg = replace(cfg, grant_timeout=int(timeout) or None)
        return cfg
