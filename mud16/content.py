from __future__ import annotations

from pathlib import Path
from typing import Sequence, TYPE_CHECKING

from .bus import RAM_SIZE, SharedMemory
from .formats import TILE_BYTES, PaletteColor, SpriteDescriptor, encode_tile, solid_tile
from .vram import (
    BG_MAP_BASE,
    BG_MAP_H,
    BG_MAP_W,
    BYTES_PER_COLOR,
    BYTES_PER_OAM,
    COLORS_PER_PALETTE,
    NUM_TILES,
    OAM_BASE,
    OAM_BYTES,
    OAM_ENTRIES,
    PALETTE_BASE,
    PALETTE_COUNT,
    TILE_BASE,
    UI_MAP_BASE,
    UI_MAP_H,
    UI_MAP_W,
)

if TYPE_CHECKING:
    from .regs import PPURegisters

# Everything from the palettes up to the end of the sprite table.
VIDEO_IMAGE_SIZE = OAM_BASE + OAM_BYTES

GRADIENT_W = 320
GRADIENT_H = 240


def write_color(memory: SharedMemory, palette: int, index: int, color: PaletteColor) -> None:
    if not (0 <= palette < PALETTE_COUNT) or not (0 <= index < COLORS_PER_PALETTE):
        raise ValueError(f"no palette slot {palette}:{index}")
    addr = PALETTE_BASE + (palette * COLORS_PER_PALETTE + index) * BYTES_PER_COLOR
    memory.write_word(addr, color.to_word())


def write_palette(memory: SharedMemory, palette: int, colors: Sequence[PaletteColor]) -> None:
    if len(colors) > COLORS_PER_PALETTE:
        raise ValueError(f"a palette holds {COLORS_PER_PALETTE} colors, got {len(colors)}")
    for i, color in enumerate(colors):
        write_color(memory, palette, i, color)


def write_tile(memory: SharedMemory, tile: int, data: bytes) -> None:
    if not (0 <= tile < NUM_TILES):
        raise ValueError(f"tile index out of range: {tile}")
    if len(data) != TILE_BYTES:
        raise ValueError(f"tile data must be {TILE_BYTES} bytes, got {len(data)}")
    memory.load(data, TILE_BASE + tile * TILE_BYTES)


def set_bg_cell(memory: SharedMemory, col: int, row: int, tile: int) -> None:
    if not (0 <= col < BG_MAP_W and 0 <= row < BG_MAP_H):
        raise ValueError(f"background cell out of range: ({col}, {row})")
    memory.write_byte(BG_MAP_BASE + row * BG_MAP_W + col, tile)


def set_ui_cell(memory: SharedMemory, col: int, row: int, tile: int) -> None:
    if not (0 <= col < UI_MAP_W and 0 <= row < UI_MAP_H):
        raise ValueError(f"UI cell out of range: ({col}, {row})")
    memory.write_byte(UI_MAP_BASE + row * UI_MAP_W + col, tile)


def write_sprite(memory: SharedMemory, index: int, sprite: SpriteDescriptor) -> None:
    if not (0 <= index < OAM_ENTRIES):
        raise ValueError(f"sprite index out of range: {index}")
    memory.write_dword(OAM_BASE + index * BYTES_PER_OAM, sprite.to_word())


def fill_gradient(memory: SharedMemory, width: int = GRADIENT_W, height: int = GRADIENT_H) -> None:
    """RGB gradient, 4 bytes per raster location from address 0 up."""
    ram = memory.ram
    for y in range(height):
        for x in range(width):
            addr = (y * width + x) * 4
            if addr + 3 >= RAM_SIZE:
                return
            ram[addr] = x & 0xFF
            ram[addr + 1] = y & 0xFF
            ram[addr + 2] = (x + y) & 0xFF
            ram[addr + 3] = 0xFF


_BRICK = (
    (2, 2, 2, 3, 2, 2, 2, 2),
    (2, 2, 2, 3, 2, 2, 2, 2),
    (2, 2, 2, 3, 2, 2, 2, 2),
    (3, 3, 3, 3, 3, 3, 3, 3),
    (2, 2, 2, 2, 2, 2, 2, 3),
    (2, 2, 2, 2, 2, 2, 2, 3),
    (2, 2, 2, 2, 2, 2, 2, 3),
    (3, 3, 3, 3, 3, 3, 3, 3),
)

_CLOUD = (
    (0, 0, 0, 4, 4, 0, 0, 0),
    (0, 0, 4, 4, 4, 4, 0, 0),
    (0, 4, 4, 4, 4, 4, 4, 0),
    (4, 4, 4, 4, 4, 4, 4, 4),
    (4, 4, 4, 4, 4, 4, 4, 4),
    (0, 4, 4, 4, 4, 4, 4, 0),
    (0, 0, 0, 0, 0, 0, 0, 0),
    (0, 0, 0, 0, 0, 0, 0, 0),
)

_FACE = (
    (0, 0, 1, 1, 1, 1, 0, 0),
    (0, 1, 1, 1, 1, 1, 1, 0),
    (1, 1, 2, 1, 1, 2, 1, 1),
    (1, 1, 1, 1, 1, 1, 1, 1),
    (1, 2, 1, 1, 1, 1, 2, 1),
    (1, 1, 2, 2, 2, 2, 1, 1),
    (0, 1, 1, 1, 1, 1, 1, 0),
    (0, 0, 1, 1, 1, 1, 0, 0),
)

_ARROW = (
    (0, 0, 0, 3, 0, 0, 0, 0),
    (0, 0, 3, 3, 0, 0, 0, 0),
    (0, 3, 3, 3, 3, 3, 3, 0),
    (3, 3, 3, 3, 3, 3, 3, 0),
    (0, 3, 3, 3, 3, 3, 3, 0),
    (0, 0, 3, 3, 0, 0, 0, 0),
    (0, 0, 0, 3, 0, 0, 0, 0),
    (0, 0, 0, 0, 0, 0, 0, 0),
)

_FRAME = (
    (1, 1, 1, 1, 1, 1, 1, 1),
    (2, 2, 2, 2, 2, 2, 2, 2),
    (2, 2, 2, 2, 2, 2, 2, 2),
    (2, 2, 2, 2, 2, 2, 2, 2),
    (2, 2, 2, 2, 2, 2, 2, 2),
    (2, 2, 2, 2, 2, 2, 2, 2),
    (2, 2, 2, 2, 2, 2, 2, 2),
    (1, 1, 1, 1, 1, 1, 1, 1),
)

TILE_EMPTY = 0
TILE_SOLID = 1
TILE_BRICK = 2
TILE_CLOUD = 3
TILE_FACE = 4
TILE_ARROW = 5
TILE_FRAME = 6


def load_demo(memory: SharedMemory) -> None:
    """A small scene: sky, clouds, a brick floor, a few sprites and UI bands."""
    write_palette(memory, 0, [
        PaletteColor(0x8, 0xD, 0xF),
        PaletteColor(0x2, 0x8, 0x2),
        PaletteColor(0xB, 0x5, 0x2),
        PaletteColor(0x6, 0x3, 0x1),
        PaletteColor(0xF, 0xF, 0xF),
    ])
    write_palette(memory, 1, [
        PaletteColor(0x0, 0x0, 0x0),
        PaletteColor(0xF, 0xD, 0x0),
        PaletteColor(0x2, 0x1, 0x0),
        PaletteColor(0xE, 0x2, 0x2),
    ])
    write_palette(memory, 2, [
        PaletteColor(0x0, 0x0, 0x0),
        PaletteColor(0xC, 0xC, 0xC),
        PaletteColor(0x1, 0x1, 0x4),
    ])
    write_palette(memory, 3, [
        PaletteColor(0x0, 0x0, 0x0),
        PaletteColor(0xC, 0xC, 0xC),
        PaletteColor(0x3, 0x0, 0x1),
    ])

    write_tile(memory, TILE_EMPTY, solid_tile(0))
    write_tile(memory, TILE_SOLID, solid_tile(1))
    write_tile(memory, TILE_BRICK, encode_tile(_BRICK))
    write_tile(memory, TILE_CLOUD, encode_tile(_CLOUD))
    write_tile(memory, TILE_FACE, encode_tile(_FACE))
    write_tile(memory, TILE_ARROW, encode_tile(_ARROW))
    write_tile(memory, TILE_FRAME, encode_tile(_FRAME))

    for row in range(BG_MAP_H):
        for col in range(BG_MAP_W):
            tile = TILE_EMPTY
            if 24 <= row < 30:
                tile = TILE_BRICK
            elif row == 23:
                tile = TILE_SOLID
            elif row in (8, 12) and (col * 7 + row) % 5 == 0:
                tile = TILE_CLOUD
            set_bg_cell(memory, col, row, tile)

    for col in range(UI_MAP_W):
        set_ui_cell(memory, col, 0, TILE_FRAME)
        set_ui_cell(memory, col, UI_MAP_H - 1, TILE_FRAME)

    write_sprite(memory, 0, SpriteDescriptor(enabled=True, x=100, y=176, tile=TILE_FACE, palette=1))
    write_sprite(memory, 1, SpriteDescriptor(enabled=True, x=104, y=180, tile=TILE_FACE, palette=1, hflip=True))
    write_sprite(memory, 2, SpriteDescriptor(enabled=True, x=160, y=120, tile=TILE_ARROW, palette=1))
    write_sprite(memory, 3, SpriteDescriptor(enabled=True, x=200, y=120, tile=TILE_ARROW, palette=1, hflip=True, vflip=True))


def read_image(path: str | Path) -> bytes:
    data = Path(path).read_bytes()
    if not data:
        raise ValueError(f"{path}: empty memory image")
    if len(data) > RAM_SIZE:
        raise ValueError(f"{path}: {len(data)} bytes does not fit in {RAM_SIZE} bytes of shared memory")
    return data


def save_image(memory: SharedMemory, path: str | Path, size: int = VIDEO_IMAGE_SIZE) -> None:
    Path(path).write_bytes(memory.dump(0, size))


def apply_demo_registers(regs: "PPURegisters") -> None:
    regs.bg_palette = 0
    regs.ui_top_palette = 2
    regs.ui_bottom_palette = 3
