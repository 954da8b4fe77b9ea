from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Tuple

from .bus import BusSignals, SharedMemory


@dataclass
class Host:
    grant_delay: int = 2
    responsive: bool = True

    writes_done: int = 0

    _request_cycles: int = 0
    _pending: Deque[Tuple[int, int]] = field(default_factory=deque)

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    def reset(self, bus: BusSignals) -> None:
        self._request_cycles = 0
        self._pending.clear()
        bus.bus_grant = False
        bus.address_strobe = False

    def queue_write(self, address: int, value: int) -> None:
        self._pending.append((address, value & 0xFFFF))

    def tick(self, bus: BusSignals, memory: SharedMemory) -> None:
        bus.address_strobe = False

        if bus.bus_grant:
            if not bus.bus_request and not bus.bus_ack:
                bus.bus_grant = False
                self._request_cycles = 0
            return

        if not bus.bus_request:
            self._request_cycles = 0

        if self._pending and bus.host_drive:
            address, value = self._pending.popleft()
            bus.address_strobe = True
            memory.write_word(address, value)
            self.writes_done += 1
            return

        if bus.bus_request and self.responsive:
            self._request_cycles += 1
            if self._request_cycles >= self.grant_delay:
                bus.bus_grant = True
