from __future__ import annotations

from dataclasses import dataclass


SCROLL_MASK = 0x1FF


@dataclass(slots=True)
class PPURegisters:
    bg_palette: int = 0
    ui_top_palette: int = 0
    ui_bottom_palette: int = 0
    scroll_x: int = 0
    scroll_y: int = 0
    bg_transparent: int = 0
    sprite_transparent: int = 0
    ui_transparent: int = 0

    def reset(self) -> None:
        self.bg_palette = 0
        self.ui_top_palette = 0
        self.ui_bottom_palette = 0
        self.scroll_x = 0
        self.scroll_y = 0
        self.bg_transparent = 0
        self.sprite_transparent = 0
        self.ui_transparent = 0

    def set_scroll(self, x: int, y: int) -> None:
        self.scroll_x = x & SCROLL_MASK
        self.scroll_y = y & SCROLL_MASK

    def set_transparent(self, index: int) -> None:
        index &= 0x0F
        self.bg_transparent = index
        self.sprite_transparent = index
        self.ui_transparent = index
