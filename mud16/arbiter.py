from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .bus import BusSignals, SharedMemory

logger = logging.getLogger(__name__)


class ArbState(IntEnum):
    IDLE = 0
    REQUEST_BUS = 1
    SEIZE_BUS = 2
    BUS_MASTER = 3
    READ_REQUEST = 4
    READ_WAIT = 5
    WRITE_REQUEST = 6
    WRITE_WAIT = 7
    RELEASE_BUS = 8


_OWNED_STATES = frozenset(
    {
        ArbState.BUS_MASTER,
        ArbState.READ_REQUEST,
        ArbState.READ_WAIT,
        ArbState.WRITE_REQUEST,
        ArbState.WRITE_WAIT,
        ArbState.RELEASE_BUS,
    }
)

OP_NONE = 0
OP_READ = 1
OP_WRITE = 2


@dataclass
class BusArbiter:
    wait_states: int = 1
    grant_timeout: Optional[int] = None

    state: ArbState = ArbState.IDLE
    op_done: bool = False
    timed_out: bool = False
    read_data: int = 0

    grant_timeouts: int = 0
    transactions: int = 0

    _op: int = OP_NONE
    _op_address: int = 0
    _op_data: int = 0
    _wait_count: int = 0
    _request_wait: int = 0

    @property
    def owns_bus(self) -> bool:
        return self.state in _OWNED_STATES

    @property
    def busy(self) -> bool:
        return self._op != OP_NONE or self.state in (
            ArbState.READ_REQUEST,
            ArbState.READ_WAIT,
            ArbState.WRITE_REQUEST,
            ArbState.WRITE_WAIT,
        )

    def reset(self, bus: BusSignals) -> None:
        self.state = ArbState.IDLE
        self.op_done = False
        self.timed_out = False
        self.read_data = 0
        self._op = OP_NONE
        self._op_address = 0
        self._op_data = 0
        self._wait_count = 0
        self._request_wait = 0

        bus.address = 0
        bus.data = 0
        bus.read_strobe = False
        bus.write_strobe = False
        bus.bus_request = False
        bus.bus_ack = False
        bus.host_drive = True
        bus.ppu_drive = False

    def request_read(self, address: int) -> None:
        self._op = OP_READ
        self._op_address = address & 0xFFFFF

    def request_write(self, address: int, value: int) -> None:
        self._op = OP_WRITE
        self._op_address = address & 0xFFFFF
        self._op_data = value & 0xFFFF

    def tick(self, bus: BusSignals, memory: SharedMemory, bus_wanted: bool) -> None:
        bus.read_strobe = False
        bus.write_strobe = False
        self.op_done = False
        self.timed_out = False

        state = self.state

        if state == ArbState.IDLE:
            if bus_wanted:
                bus.bus_request = True
                self._request_wait = 0
                self.state = ArbState.REQUEST_BUS

        elif state == ArbState.REQUEST_BUS:
            if bus.bus_grant and not bus.address_strobe:
                self.state = ArbState.SEIZE_BUS
                return
            self._request_wait += 1
            timeout = self.grant_timeout
            if timeout is not None and self._request_wait >= timeout:
                bus.bus_request = False
                self._op = OP_NONE
                self.timed_out = True
                self.grant_timeouts += 1
                self.state = ArbState.IDLE
                logger.warning("bus grant not received after %d cycles, request dropped", self._request_wait)

        elif state == ArbState.SEIZE_BUS:
            bus.bus_ack = True
            bus.host_drive = False
            bus.ppu_drive = True
            self.state = ArbState.BUS_MASTER
            logger.debug("bus seized")

        elif state == ArbState.BUS_MASTER:
            if not bus_wanted:
                self.state = ArbState.RELEASE_BUS
            elif self._op == OP_READ:
                self.state = ArbState.READ_REQUEST
            elif self._op == OP_WRITE:
                self.state = ArbState.WRITE_REQUEST

        elif state == ArbState.READ_REQUEST:
            bus.address = self._op_address
            bus.read_strobe = True
            self._op = OP_NONE
            self._wait_count = 0
            self.state = ArbState.READ_WAIT

        elif state == ArbState.READ_WAIT:
            if not bus_wanted:
                self.state = ArbState.RELEASE_BUS
            elif self._wait_count >= self.wait_states:
                self.read_data = memory.read_word(bus.address)
                bus.data = self.read_data
                self.op_done = True
                self.transactions += 1
                self.state = ArbState.BUS_MASTER
            else:
                self._wait_count += 1

        elif state == ArbState.WRITE_REQUEST:
            bus.address = self._op_address
            bus.data = self._op_data
            bus.write_strobe = True
            self._op = OP_NONE
            self._wait_count = 0
            self.state = ArbState.WRITE_WAIT

        elif state == ArbState.WRITE_WAIT:
            if not bus_wanted:
                self.state = ArbState.RELEASE_BUS
            elif self._wait_count >= self.wait_states:
                memory.write_word(bus.address, bus.data)
                self.op_done = True
                self.transactions += 1
                self.state = ArbState.BUS_MASTER
            else:
                self._wait_count += 1

        elif state == ArbState.RELEASE_BUS:
            bus.ppu_drive = False
            bus.host_drive = True
            bus.bus_ack = False
            bus.bus_request = False
            self.state = ArbState.IDLE
            logger.debug("bus released")
