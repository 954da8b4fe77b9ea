from __future__ import annotations


from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from .bus import BusSignals, SharedMemory
from .config import PPUConfig
from .content import read_image
from .host import Host
from .ppu import PPU


@dataclass
class Console:
	config: PPUConfig = field(default_factory=PPUConfig.from_env)
	memory: SharedMemory = field(default_factory=SharedMemory)
	bus: BusSignals = field(default_factory=BusSignals)
	host: Host = field(default_factory=Host)
	ppu: PPU = field(init=False)
	frame_rgb: bytearray = field(init=False)
	frame_count: int = 0
	last_frame_ready: bool = False

	def __post_init__(self) -> None:
		self.ppu = PPU(bus=self.bus, memory=self.memory, config=self.config)
		self.frame_rgb = bytearray(self.config.width * self.config.height * 3)

	@classmethod
	def from_image(cls, image_path: str | Path, config: PPUConfig | None = None) -> "Console":
		console = cls(config=config) if config is not None else cls()
		console.load_image(image_path)
		console.power_on()
		return console

	def load_image(self, image_path: str | Path, base: int = 0) -> None:
		self.memory.load(read_image(image_path), base)

	def power_on(self) -> None:
		self.bus.reset()
		self.host.reset(self.bus)
		self.ppu.power_on()
		self.frame_count = 0
		self.last_frame_ready = False

	def reset(self) -> None:
		self.host.reset(self.bus)
		self.ppu.tick(reset=True)
		self.last_frame_ready = False

	def step(self) -> bool:
		self.host.tick(self.bus, self.memory)
		ppu = self.ppu
		self.last_frame_ready = ppu.tick()
		if self.config.check_contention:
			self.bus.driver()

		if ppu.pixel_valid:
			p = (ppu.pixel_y * self.config.width + ppu.pixel_x) * 3
			self.frame_rgb[p] = ppu.pixel_r
			self.frame_rgb[p + 1] = ppu.pixel_g
			self.frame_rgb[p + 2] = ppu.pixel_b

		if self.last_frame_ready:
			self.frame_count += 1
		return self.last_frame_ready

	def run_until_frame(self, max_cycles: int | None = None) -> bool:
		if max_cycles is None:
			max_cycles = self.config.width * self.config.height
		for _ in range(max_cycles):
			if self.step():
				return True
		return False

	def run_frames(self, frames: int) -> None:
		for _ in range(frames):
			self.run_until_frame()

	def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
		if not (0 <= x < self.config.width and 0 <= y < self.config.height):
			raise ValueError(f"pixel ({x}, {y}) is outside the {self.config.width}x{self.config.height} raster")
		p = (y * self.config.width + x) * 3
		return (self.frame_rgb[p], self.frame_rgb[p + 1], self.frame_rgb[p + 2])

	def save_ppm(self, path: str | Path) -> None:
		header = f"P6\n{self.config.width} {self.config.height}\n255\n".encode("ascii")
		Path(path).write_bytes(header + bytes(self.frame_rgb))
