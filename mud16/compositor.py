from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from .vram import BG_MAP_W, UI_MAP_W, Rgb, VideoMemory

if TYPE_CHECKING:
    from .config import PPUConfig
    from .regs import PPURegisters

BG_WRAP_MASK = BG_MAP_W * 8 - 1
UI_BOTTOM_FIRST_ROW = 5


def background_color(vram: VideoMemory, regs: "PPURegisters", config: "PPUConfig", x: int, y: int) -> Rgb:
    px = (x + regs.scroll_x) & BG_WRAP_MASK
    py = (y + regs.scroll_y) & BG_WRAP_MASK
    tile = vram.bg_tile(px >> 3, py >> 3)
    value = vram.tile_pixel(tile, px & 7, py & 7)
    if value == regs.bg_transparent:
        return config.sky_color
    return vram.color(regs.bg_palette, value)


def sprite_color(vram: VideoMemory, regs: "PPURegisters", x: int, y: int) -> Optional[Rgb]:
    """Color of the sprite layer at (x, y), or None when no sprite pixel shows.

    Sprites are walked in ascending OAM order and every opaque hit replaces
    the previous one, so the highest index wins.
    """
    out = None
    transparent = regs.sprite_transparent
    for _, s in vram.enabled_sprites():
        col = x - s.x
        if col < 0 or col >= 8:
            continue
        row = y - s.y
        if row < 0 or row >= 8:
            continue
        if s.hflip:
            col = 7 - col
        if s.vflip:
            row = 7 - row
        value = vram.tile_pixel(s.tile, col, row)
        if value == transparent:
            continue
        out = vram.color(s.palette, value)
    return out


def ui_color(vram: VideoMemory, regs: "PPURegisters", config: "PPUConfig", x: int, y: int) -> Optional[Rgb]:
    band = config.ui_band_height
    bottom_start = config.height - band
    if y < band:
        line = y
        first_row = 0
        palette = regs.ui_top_palette
    elif y >= bottom_start:
        line = y - bottom_start
        first_row = UI_BOTTOM_FIRST_ROW
        palette = regs.ui_bottom_palette
    else:
        return None

    col = x >> 3
    if col >= UI_MAP_W:
        return None
    tile = vram.ui_tile(col, first_row + (line >> 3))
    value = vram.tile_pixel(tile, x & 7, line & 7)
    if value == regs.ui_transparent:
        return None
    return vram.color(palette, value)


def compose_pixel(vram: VideoMemory, regs: "PPURegisters", config: "PPUConfig", x: int, y: int) -> Rgb:
    color = background_color(vram, regs, config, x, y)
    sprite = sprite_color(vram, regs, x, y)
    if sprite is not None:
        color = sprite
    ui = ui_color(vram, regs, config, x, y)
    if ui is not None:
        color = ui
    return color
