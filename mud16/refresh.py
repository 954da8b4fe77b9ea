from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

from .arbiter import BusArbiter
from .vram import (
    BG_MAP_BASE,
    BG_MAP_SIZE,
    NUM_COLORS,
    OAM_BASE,
    OAM_ENTRIES,
    PALETTE_BASE,
    TILE_BASE,
    TILE_DATA_SIZE,
    UI_MAP_BASE,
    UI_MAP_SIZE,
    VideoMemory,
)

logger = logging.getLogger(__name__)


class RefreshState(IntEnum):
    IDLE = 0
    ISSUE = 1
    WAIT = 2


@dataclass(frozen=True)
class Region:
    name: str
    base: int
    words: int


# Visiting order is fixed.
REGIONS: Tuple[Region, ...] = (
    Region("palettes", PALETTE_BASE, NUM_COLORS),
    Region("tiles", TILE_BASE, TILE_DATA_SIZE // 2),
    Region("bg_map", BG_MAP_BASE, BG_MAP_SIZE // 2),
    Region("ui_map", UI_MAP_BASE, UI_MAP_SIZE // 2),
    Region("oam", OAM_BASE, OAM_ENTRIES * 2),
)

WORDS_PER_REFRESH = sum(r.words for r in REGIONS)


@dataclass
class RefreshFSM:
    # One 16-bit read per step; sprite descriptors take two, low half first.
    state: RefreshState = RefreshState.IDLE
    bus_wanted: bool = False
    refreshed: bool = False

    region_index: int = 0
    word_index: int = 0

    completed_frames: int = 0
    missed_refreshes: int = 0
    aborted_refreshes: int = 0
    words_read: int = 0
    bytes_copied: int = 0
    completed_regions: List[str] = field(default_factory=list)

    _oam_low: int = 0

    @property
    def active(self) -> bool:
        return self.state != RefreshState.IDLE

    @property
    def region(self) -> Region:
        return REGIONS[self.region_index]

    def reset(self) -> None:
        self.state = RefreshState.IDLE
        self.bus_wanted = False
        self.refreshed = False
        self.region_index = 0
        self.word_index = 0
        self.completed_regions = []
        self._oam_low = 0

    def trigger(self) -> bool:
        """Frame start. Returns False if the previous pass is still running."""
        if self.state != RefreshState.IDLE:
            self.missed_refreshes += 1
            logger.warning(
                "frame started with refresh still in %s (word %d), previous data stays visible",
                self.region.name,
                self.word_index,
            )
            return False
        self.refreshed = False
        self.region_index = 0
        self.word_index = 0
        self.completed_regions = []
        self._oam_low = 0
        self.bus_wanted = True
        self.state = RefreshState.ISSUE
        logger.debug("refresh started")
        return True

    def tick(self, arbiter: BusArbiter, vram: VideoMemory) -> None:
        state = self.state
        if state == RefreshState.IDLE:
            return

        if arbiter.timed_out:
            self.aborted_refreshes += 1
            self.bus_wanted = False
            self.state = RefreshState.IDLE
            logger.warning("refresh abandoned in %s, bus was never granted", self.region.name)
            return

        if state == RefreshState.ISSUE:
            arbiter.request_read(self._address())
            self.state = RefreshState.WAIT
            return

        if not arbiter.op_done:
            return

        self._store(vram, arbiter.read_data)
        self.words_read += 1
        self.bytes_copied += 2

        self.word_index += 1
        if self.word_index >= self.region.words:
            self.completed_regions.append(self.region.name)
            self.word_index = 0
            self.region_index += 1
            if self.region_index >= len(REGIONS):
                self._finish()
                return

        arbiter.request_read(self._address())

    def _address(self) -> int:
        return self.region.base + self.word_index * 2

    def _store(self, vram: VideoMemory, data: int) -> None:
        i = self.word_index
        lo = data & 0xFF
        hi = (data >> 8) & 0xFF
        name = self.region.name
        if name == "palettes":
            vram.write_palette(i, data)
        elif name == "tiles":
            vram.write_tile_byte(i * 2, lo)
            vram.write_tile_byte(i * 2 + 1, hi)
        elif name == "bg_map":
            vram.write_bg_map(i * 2, lo)
            vram.write_bg_map(i * 2 + 1, hi)
        elif name == "ui_map":
            vram.write_ui_map(i * 2, lo)
            vram.write_ui_map(i * 2 + 1, hi)
        elif i & 1:
            vram.write_oam(i >> 1, self._oam_low | (data << 16))
        else:
            self._oam_low = data & 0xFFFF

    def _finish(self) -> None:
        self.state = RefreshState.IDLE
        self.region_index = 0
        self.word_index = 0
        self.bus_wanted = False
        self.refreshed = True
        self.completed_frames += 1
        logger.debug("refresh complete, %d regions copied", len(self.completed_regions))
