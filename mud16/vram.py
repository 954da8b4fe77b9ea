from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .bus import SharedMemory
from .formats import TILE_BYTES, SpriteDescriptor, expand_nibble

PALETTE_BASE  = 0x00000
TILE_BASE     = 0x01000
BG_MAP_BASE   = 0x05000
UI_MAP_BASE   = 0x06000
OAM_BASE      = 0x07000
OAM_BYTES     = 0x00400

PALETTE_COUNT = 8
COLORS_PER_PALETTE = 16
NUM_COLORS = PALETTE_COUNT * COLORS_PER_PALETTE
BYTES_PER_COLOR = 2

NUM_TILES = 512
TILE_DATA_SIZE = NUM_TILES * TILE_BYTES

BG_MAP_W = 64
BG_MAP_H = 64
BG_MAP_SIZE = BG_MAP_W * BG_MAP_H

UI_MAP_W = 40
UI_MAP_H = 10
UI_MAP_SIZE = UI_MAP_W * UI_MAP_H

OAM_ENTRIES = 128
BYTES_PER_OAM = 4

Rgb = Tuple[int, int, int]


def _color_rgb(word: int) -> Rgb:
    return (expand_nibble(word >> 8), expand_nibble(word >> 4), expand_nibble(word))


def _blank_tile() -> bytearray:
    return bytearray(64)


@dataclass
class VideoMemory:
    palettes: List[int] = field(default_factory=lambda: [0] * NUM_COLORS)
    tiles: bytearray = field(default_factory=lambda: bytearray(TILE_DATA_SIZE))
    bg_map: bytearray = field(default_factory=lambda: bytearray(BG_MAP_SIZE))
    ui_map: bytearray = field(default_factory=lambda: bytearray(UI_MAP_SIZE))
    oam: List[int] = field(default_factory=lambda: [0] * OAM_ENTRIES)

    palette_rgb: List[Rgb] = field(default_factory=lambda: [(0, 0, 0)] * NUM_COLORS)
    tile_pixels: List[bytearray] = field(default_factory=lambda: [_blank_tile() for _ in range(NUM_TILES)])
    sprites: List[SpriteDescriptor] = field(default_factory=lambda: [SpriteDescriptor()] * OAM_ENTRIES)

    _enabled: Optional[List[Tuple[int, SpriteDescriptor]]] = None

    def write_palette(self, index: int, word: int) -> None:
        index %= NUM_COLORS
        word &= 0xFFFF
        self.palettes[index] = word
        self.palette_rgb[index] = _color_rgb(word)

    def write_tile_byte(self, index: int, value: int) -> None:
        index %= TILE_DATA_SIZE
        value &= 0xFF
        self.tiles[index] = value

        pixels = self.tile_pixels[index // TILE_BYTES]
        p = (index % TILE_BYTES) * 2
        pixels[p] = value >> 4
        pixels[p + 1] = value & 0x0F

    def write_bg_map(self, index: int, value: int) -> None:
        self.bg_map[index % BG_MAP_SIZE] = value & 0xFF

    def write_ui_map(self, index: int, value: int) -> None:
        self.ui_map[index % UI_MAP_SIZE] = value & 0xFF

    def write_oam(self, index: int, word: int) -> None:
        index %= OAM_ENTRIES
        word &= 0xFFFFFFFF
        self.oam[index] = word
        self.sprites[index] = SpriteDescriptor.from_word(word)
        self._enabled = None

    def tile_pixel(self, tile: int, x: int, y: int) -> int:
        return self.tile_pixels[tile % NUM_TILES][(y << 3) | x]

    def bg_tile(self, col: int, row: int) -> int:
        return self.bg_map[(row % BG_MAP_H) * BG_MAP_W + (col % BG_MAP_W)]

    def ui_tile(self, col: int, row: int) -> int:
        return self.ui_map[row * UI_MAP_W + col]

    def color(self, palette: int, index: int) -> Rgb:
        return self.palette_rgb[((palette & 7) << 4) | (index & 0x0F)]

    def sprite(self, index: int) -> SpriteDescriptor:
        return self.sprites[index % OAM_ENTRIES]

    def enabled_sprites(self) -> List[Tuple[int, SpriteDescriptor]]:
        """Enabled OAM entries in ascending index order."""
        if self._enabled is None:
            self._enabled = [(i, s) for i, s in enumerate(self.sprites) if s.enabled]
        return self._enabled

    def load_from(self, memory: SharedMemory) -> None:
        for i in range(NUM_COLORS):
            self.write_palette(i, memory.read_word(PALETTE_BASE + i * BYTES_PER_COLOR))
        for i, b in enumerate(memory.dump(TILE_BASE, TILE_DATA_SIZE)):
            self.write_tile_byte(i, b)
        self.bg_map[:] = memory.dump(BG_MAP_BASE, BG_MAP_SIZE)
        self.ui_map[:] = memory.dump(UI_MAP_BASE, UI_MAP_SIZE)
        for i in range(OAM_ENTRIES):
            self.write_oam(i, memory.read_dword(OAM_BASE + i * BYTES_PER_OAM))

    def region_bytes(self, name: str) -> bytes:
        """A region serialized back to its shared-memory layout."""
        if name == "palettes":
            out = bytearray()
            for word in self.palettes:
                out += word.to_bytes(2, "little")
            return bytes(out)
        if name == "tiles":
            return bytes(self.tiles)
        if name == "bg_map":
            return bytes(self.bg_map)
        if name == "ui_map":
            return bytes(self.ui_map)
        if name == "oam":
            out = bytearray()
            for word in self.oam:
                out += word.to_bytes(4, "little")
            return bytes(out)
        raise ValueError(f"unknown video memory region: {name!r}")
