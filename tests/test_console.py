from __future__ import annotations

import pytest

from mud16.arbiter import ArbState
from mud16.bus import BusOwner
from mud16.config import PPUConfig
from mud16.console import Console
from mud16.content import (
    apply_demo_registers,
    load_demo,
    read_image,
    save_image,
    set_bg_cell,
    write_color,
    write_sprite,
    write_tile,
)
from mud16.formats import PaletteColor, SpriteDescriptor, encode_tile, solid_tile
from mud16.refresh import RefreshState
from mud16.vram import PALETTE_BASE

from helpers import SKY


def _full_console() -> Console:
    return Console(config=PPUConfig())


def test_reset_clears_outputs_and_hands_bus_to_host(small_config: PPUConfig) -> None:
    console = Console(config=small_config)
    console.power_on()
    for _ in range(200):
        console.step()
    assert console.ppu.arbiter.owns_bus
    assert console.ppu.pixel_valid

    console.reset()
    ppu = console.ppu
    assert ppu.arbiter.state == ArbState.IDLE
    assert ppu.refresh.state == RefreshState.IDLE
    assert (ppu.pixel_r, ppu.pixel_g, ppu.pixel_b, ppu.pixel_valid) == (0, 0, 0, False)
    assert (ppu.scan.x, ppu.scan.y) == (0, 0)
    assert console.bus.driver() == BusOwner.HOST
    assert not console.bus.bus_request and not console.bus.bus_ack


def test_exactly_one_bus_driver_every_cycle(small_config: PPUConfig) -> None:
    console = Console(config=small_config)
    console.power_on()
    owners = set()
    for _ in range(small_config.width * small_config.height * 2):
        console.step()
        bus = console.bus
        assert bus.host_drive != bus.ppu_drive
        owners.add(bus.driver())
    assert owners == {BusOwner.HOST, BusOwner.PPU}


def test_pixel_strobe_and_frame_start(small_config: PPUConfig) -> None:
    console = Console(config=small_config)
    console.power_on()
    starts = []
    total = small_config.width * small_config.height
    for n in range(total + 3):
        done = console.step()
        assert console.ppu.pixel_valid
        if console.ppu.frame_start:
            starts.append(n)
        assert done == (n == total - 1)
    assert starts == [0, total]
    assert console.frame_count == 1


def test_single_background_tile_frame() -> None:
    console = _full_console()
    memory = console.memory
    write_color(memory, 0, 1, PaletteColor(0xF, 0x8, 0x0))
    write_tile(memory, 0, solid_tile(0))
    write_tile(memory, 1, solid_tile(1))
    set_bg_cell(memory, 5, 5, 1)
    console.power_on()

    assert console.run_until_frame()
    assert console.pixel(44, 44) == (0xFF, 0x88, 0x00)
    assert console.pixel(0, 0) == SKY
    assert console.pixel(47, 47) == (0xFF, 0x88, 0x00)
    assert console.pixel(48, 47) == SKY

    refresh = console.ppu.refresh
    assert refresh.completed_frames == 1
    assert refresh.missed_refreshes == 0
    assert console.ppu.arbiter.state == ArbState.IDLE


def test_single_sprite_frame() -> None:
    pattern = [[(x + y) % 4 for x in range(8)] for y in range(8)]
    console = _full_console()
    memory = console.memory
    write_tile(memory, 1, encode_tile(pattern))
    palette = [PaletteColor(0, 0, 0), PaletteColor(0xF, 0, 0), PaletteColor(0, 0xF, 0), PaletteColor(0, 0, 0xF)]
    for i, color in enumerate(palette):
        write_color(memory, 1, i, color)
    write_sprite(memory, 0, SpriteDescriptor(enabled=True, x=100, y=50, tile=1, palette=1))
    console.power_on()

    assert console.run_until_frame()
    for dy in range(8):
        for dx in range(8):
            value = pattern[dy][dx]
            expected = SKY if value == 0 else palette[value].to_rgb888()
            assert console.pixel(100 + dx, 50 + dy) == expected, (dx, dy)
    assert console.pixel(99, 50) == SKY
    assert console.pixel(108, 57) == SKY
    assert console.pixel(100, 58) == SKY


def test_host_update_reaches_screen_on_next_refresh() -> None:
    console = _full_console()
    memory = console.memory
    write_color(memory, 0, 1, PaletteColor(0xF, 0x8, 0x0))
    write_tile(memory, 1, solid_tile(1))
    set_bg_cell(memory, 5, 5, 1)
    console.power_on()
    console.run_until_frame()

    console.host.queue_write(PALETTE_BASE + 1 * 2, PaletteColor(0x1, 0x2, 0x3).to_word())
    console.run_until_frame()
    assert console.host.pending_writes == 0
    assert console.ppu.vram.palettes[1] == 0x123
    assert console.ppu.refresh.completed_frames == 2
    assert console.ppu.refresh.refreshed


def test_image_round_trip(tmp_path, small_config: PPUConfig) -> None:
    source = Console(config=small_config)
    load_demo(source.memory)
    path = tmp_path / "scene.bin"
    save_image(source.memory, path)

    console = Console.from_image(path, config=small_config)
    source.ppu.vram.load_from(source.memory)
    assert console.ppu.vram.palettes == source.ppu.vram.palettes
    assert console.ppu.vram.bg_map == source.ppu.vram.bg_map
    assert console.ppu.vram.oam == source.ppu.vram.oam
    assert console.ppu.vram.enabled_sprites()


def test_read_image_rejects_empty_and_oversized(tmp_path) -> None:
    empty = tmp_path / "empty.bin"
    empty.write_bytes(b"")
    with pytest.raises(ValueError):
        read_image(empty)

    big = tmp_path / "big.bin"
    big.write_bytes(bytes(1024 * 1024 + 1))
    with pytest.raises(ValueError):
        read_image(big)


def test_save_ppm(tmp_path, small_config: PPUConfig) -> None:
    console = Console(config=small_config)
    load_demo(console.memory)
    apply_demo_registers(console.ppu.regs)
    console.power_on()
    console.run_until_frame()

    out = tmp_path / "frame.ppm"
    console.save_ppm(out)
    data = out.read_bytes()
    header = b"P6\n64 48\n255\n"
    assert data.startswith(header)
    assert len(data) == len(header) + 64 * 48 * 3
    assert data[len(header):] == bytes(console.frame_rgb)


def test_pixel_outside_raster(small_config: PPUConfig) -> None:
    console = Console(config=small_config)
    with pytest.raises(ValueError):
        console.pixel(64, 0)
    with pytest.raises(ValueError):
        console.pixel(0, -1)


def test_independent_consoles_share_nothing(small_config: PPUConfig) -> None:
    a = Console(config=small_config)
    b = Console(config=small_config)
    write_color(a.memory, 0, 1, PaletteColor(1, 1, 1))
    a.power_on()
    b.power_on()
    a.run_until_frame()
    assert a.ppu.cycles == small_config.width * small_config.height
    assert b.ppu.cycles == 0
    assert b.memory.read_word(PALETTE_BASE + 2) == 0
    assert a.ppu.vram is not b.ppu.vram
