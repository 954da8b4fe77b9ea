from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


RAM_SIZE = 1024 * 1024
ADDR_MASK = RAM_SIZE - 1


class BusContentionError(RuntimeError):
    pass


class BusOwner(IntEnum):
    HOST = 0
    PPU = 1


@dataclass
class SharedMemory:
    """The 1 MB memory shared by the host and the PPU."""

    ram: bytearray = field(default_factory=lambda: bytearray(RAM_SIZE))

    def read_byte(self, address: int) -> int:
        return self.ram[address & ADDR_MASK]

    def write_byte(self, address: int, value: int) -> None:
        self.ram[address & ADDR_MASK] = value & 0xFF

    def read_word(self, address: int) -> int:
        address &= ADDR_MASK
        if address + 1 >= RAM_SIZE:
            return 0
        return self.ram[address] | (self.ram[address + 1] << 8)

    def write_word(self, address: int, value: int) -> None:
        address &= ADDR_MASK
        if address + 1 >= RAM_SIZE:
            return
        self.ram[address] = value & 0xFF
        self.ram[address + 1] = (value >> 8) & 0xFF

    def read_dword(self, address: int) -> int:
        address &= ADDR_MASK
        if address + 3 >= RAM_SIZE:
            return 0
        ram = self.ram
        return ram[address] | (ram[address + 1] << 8) | (ram[address + 2] << 16) | (ram[address + 3] << 24)

    def write_dword(self, address: int, value: int) -> None:
        address &= ADDR_MASK
        if address + 3 >= RAM_SIZE:
            return
        value &= 0xFFFFFFFF
        self.ram[address] = value & 0xFF
        self.ram[address + 1] = (value >> 8) & 0xFF
        self.ram[address + 2] = (value >> 16) & 0xFF
        self.ram[address + 3] = (value >> 24) & 0xFF

    def load(self, data: bytes, base: int = 0) -> None:
        base &= ADDR_MASK
        if base + len(data) > RAM_SIZE:
            raise ValueError(f"{len(data)} bytes at 0x{base:05X} do not fit in shared memory")
        self.ram[base:base + len(data)] = data

    def dump(self, base: int, size: int) -> bytes:
        base &= ADDR_MASK
        return bytes(self.ram[base:base + size])


@dataclass(slots=True)
class BusSignals:
    """Logical state of the shared bus, all signals active-high."""

    address: int = 0
    data: int = 0
    read_strobe: bool = False
    write_strobe: bool = False

    bus_request: bool = False
    bus_grant: bool = False
    bus_ack: bool = False
    address_strobe: bool = False

    host_drive: bool = True
    ppu_drive: bool = False

    def reset(self) -> None:
        self.address = 0
        self.data = 0
        self.read_strobe = False
        self.write_strobe = False
        self.bus_request = False
        self.bus_grant = False
        self.bus_ack = False
        self.address_strobe = False
        self.host_drive = True
        self.ppu_drive = False

    def driver(self) -> BusOwner:
        if self.host_drive and self.ppu_drive:
            raise BusContentionError("host and PPU are both driving the bus")
        if not (self.host_drive or self.ppu_drive):
            raise BusContentionError("nobody is driving the bus")
        return BusOwner.PPU if self.ppu_drive else BusOwner.HOST
