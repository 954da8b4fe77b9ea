from __future__ import annotations

from mud16.vram import TILE_BYTES, VideoMemory


SKY = (0x88, 0xDD, 0xFF)


def put_tile(vram: VideoMemory, tile: int, data: bytes) -> None:
    for i, b in enumerate(data):
        vram.write_tile_byte(tile * TILE_BYTES + i, b)
