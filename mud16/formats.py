from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple


TILE_DIM = 8
TILE_BYTES = 32
TILE_ROW_BYTES = 4

# 32-bit sprite descriptor layout
SPRITE_ENABLE_BIT = 31
SPRITE_VFLIP_BIT = 30
SPRITE_HFLIP_BIT = 29
SPRITE_PALETTE_SHIFT = 26
SPRITE_TILE_SHIFT = 17
SPRITE_Y_SHIFT = 9
SPRITE_X_SHIFT = 0

SPRITE_PALETTE_MASK = 0x7
SPRITE_TILE_MASK = 0x1FF
SPRITE_Y_MASK = 0xFF
SPRITE_X_MASK = 0x1FF


def expand_nibble(c: int) -> int:
    c &= 0x0F
    return (c << 4) | c


def _check_range(name: str, value: int, limit: int) -> int:
    value = int(value)
    if not (0 <= value <= limit):
        raise ValueError(f"{name} out of range: {value} (max {limit})")
    return value


@dataclass(frozen=True)
class PaletteColor:
    """One 12-bit palette entry, stored as 0x0RGB in a 16-bit slot."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        _check_range("r", self.r, 0xF)
        _check_range("g", self.g, 0xF)
        _check_range("b", self.b, 0xF)

    @classmethod
    def from_word(cls, word: int) -> "PaletteColor":
        return cls((word >> 8) & 0xF, (word >> 4) & 0xF, word & 0xF)

    def to_word(self) -> int:
        return ((self.r & 0xF) << 8) | ((self.g & 0xF) << 4) | (self.b & 0xF)

    def to_rgb888(self) -> Tuple[int, int, int]:
        return (expand_nibble(self.r), expand_nibble(self.g), expand_nibble(self.b))


@dataclass(frozen=True)
class SpriteDescriptor:
    """One OAM entry.

    Packed as bit 31 enable, 30 V-flip, 29 H-flip, 28-26 palette,
    25-17 tile, 16-9 Y, 8-0 X.
    """

    enabled: bool = False
    x: int = 0
    y: int = 0
    tile: int = 0
    palette: int = 0
    hflip: bool = False
    vflip: bool = False

    def __post_init__(self) -> None:
        _check_range("x", self.x, SPRITE_X_MASK)
        _check_range("y", self.y, SPRITE_Y_MASK)
        _check_range("tile", self.tile, SPRITE_TILE_MASK)
        _check_range("palette", self.palette, SPRITE_PALETTE_MASK)

    @classmethod
    def from_word(cls, word: int) -> "SpriteDescriptor":
        word &= 0xFFFFFFFF
        return cls(
            enabled=bool((word >> SPRITE_ENABLE_BIT) & 1),
            x=(word >> SPRITE_X_SHIFT) & SPRITE_X_MASK,
            y=(word >> SPRITE_Y_SHIFT) & SPRITE_Y_MASK,
            tile=(word >> SPRITE_TILE_SHIFT) & SPRITE_TILE_MASK,
            palette=(word >> SPRITE_PALETTE_SHIFT) & SPRITE_PALETTE_MASK,
            hflip=bool((word >> SPRITE_HFLIP_BIT) & 1),
            vflip=bool((word >> SPRITE_VFLIP_BIT) & 1),
        )

    def to_word(self) -> int:
        word = (self.x & SPRITE_X_MASK) << SPRITE_X_SHIFT
        word |= (self.y & SPRITE_Y_MASK) << SPRITE_Y_SHIFT
        word |= (self.tile & SPRITE_TILE_MASK) << SPRITE_TILE_SHIFT
        word |= (self.palette & SPRITE_PALETTE_MASK) << SPRITE_PALETTE_SHIFT
        if self.hflip:
            word |= 1 << SPRITE_HFLIP_BIT
        if self.vflip:
            word |= 1 << SPRITE_VFLIP_BIT
        if self.enabled:
            word |= 1 << SPRITE_ENABLE_BIT
        return word


def encode_tile(rows: Sequence[Sequence[int]]) -> bytes:
    """8 rows of 8 color indices -> 32 bytes, high nibble = even x."""
    if len(rows) != TILE_DIM:
        raise ValueError(f"tile needs {TILE_DIM} rows, got {len(rows)}")
    out = bytearray(TILE_BYTES)
    for y, row in enumerate(rows):
        if len(row) != TILE_DIM:
            raise ValueError(f"tile row {y} needs {TILE_DIM} pixels, got {len(row)}")
        for x in range(0, TILE_DIM, 2):
            hi = _check_range("pixel", row[x], 0xF)
            lo = _check_range("pixel", row[x + 1], 0xF)
            out[y * TILE_ROW_BYTES + (x >> 1)] = (hi << 4) | lo
    return bytes(out)


def decode_tile(data: Iterable[int]) -> List[int]:
    data = bytes(data)
    if len(data) != TILE_BYTES:
        raise ValueError(f"tile data must be {TILE_BYTES} bytes, got {len(data)}")
    out: List[int] = []
    for b in data:
        out.append((b >> 4) & 0xF)
        out.append(b & 0xF)
    return out


def solid_tile(index: int) -> bytes:
    return encode_tile([[index] * TILE_DIM for _ in range(TILE_DIM)])
