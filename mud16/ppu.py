from __future__ import annotations

from dataclasses import dataclass, field

from .arbiter import BusArbiter
from .bus import BusSignals, SharedMemory
from .compositor import compose_pixel
from .config import SCREEN_H, SCREEN_W, PPUConfig
from .refresh import RefreshFSM
from .regs import PPURegisters
from .vram import VideoMemory


@dataclass(slots=True)
class ScanCounter:
    width: int = SCREEN_W
    height: int = SCREEN_H
    x: int = 0
    y: int = 0

    @property
    def frame_start(self) -> bool:
        return self.x == 0 and self.y == 0

    def reset(self) -> None:
        self.x = 0
        self.y = 0

    def advance(self) -> bool:
        """Move one pixel on. True when the raster wraps to a new frame."""
        self.x += 1
        if self.x < self.width:
            return False
        self.x = 0
        self.y += 1
        if self.y < self.height:
            return False
        self.y = 0
        return True


@dataclass
class PPU:
    bus: BusSignals
    memory: SharedMemory
    config: PPUConfig = field(default_factory=PPUConfig)

    vram: VideoMemory = field(default_factory=VideoMemory)
    regs: PPURegisters = field(default_factory=PPURegisters)
    refresh: RefreshFSM = field(default_factory=RefreshFSM)
    scan: ScanCounter = field(init=False)
    arbiter: BusArbiter = field(init=False)

    pixel_r: int = 0
    pixel_g: int = 0
    pixel_b: int = 0
    pixel_valid: bool = False
    pixel_x: int = 0
    pixel_y: int = 0
    frame_start: bool = False

    cycles: int = 0

    def __post_init__(self) -> None:
        self.scan = ScanCounter(self.config.width, self.config.height)
        self.arbiter = BusArbiter(
            wait_states=self.config.wait_states,
            grant_timeout=self.config.grant_timeout,
        )

    def power_on(self) -> None:
        """Load the local store straight from shared memory, then reset."""
        self.vram.load_from(self.memory)
        self.reset()

    def reset(self) -> None:
        self.arbiter.reset(self.bus)
        self.refresh.reset()
        self.scan.reset()
        self.pixel_r = 0
        self.pixel_g = 0
        self.pixel_b = 0
        self.pixel_valid = False
        self.pixel_x = 0
        self.pixel_y = 0
        self.frame_start = False

    def tick(self, reset: bool = False) -> bool:
        """One clock edge. Returns True when this pixel was the frame's last."""
        if reset:
            self.reset()
            return False

        scan = self.scan
        x = scan.x
        y = scan.y

        self.frame_start = x == 0 and y == 0
        if self.frame_start:
            self.refresh.trigger()

        self.arbiter.tick(self.bus, self.memory, self.refresh.bus_wanted)
        self.refresh.tick(self.arbiter, self.vram)

        self.pixel_r, self.pixel_g, self.pixel_b = compose_pixel(self.vram, self.regs, self.config, x, y)
        self.pixel_valid = True
        self.pixel_x = x
        self.pixel_y = y

        self.cycles += 1
        return scan.advance()
