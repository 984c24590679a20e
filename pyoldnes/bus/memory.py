"""Flat memory bus for the 6502 instruction engine.

The whole 64 KiB address space is a single ``bytearray``. There is no
mirroring, banking or device mapping: an address always names the same byte.
Every access is range checked so that a bad address surfaces as
``AddressOutOfRangeError`` instead of an ``IndexError`` or a silent wrap.
"""

from __future__ import annotations

from typing import Iterable

from pyoldnes.utils import debug_log

ADDRESS_SPACE_SIZE = 0x10000
MAX_ADDRESS = ADDRESS_SPACE_SIZE - 1

STACK_BASE = 0x0100
STACK_END = 0x01FF
DEFAULT_LOAD_ADDRESS = 0x8000


class BusError(Exception):
    """Base error for memory bus failures."""


class AddressOutOfRangeError(BusError):
    """Raised when an access falls outside 0x0000-0xFFFF."""

    def __init__(self, address: int) -> None:
        super().__init__(f"address {address:#06x} outside 0x0000-{MAX_ADDRESS:#06x}"
                         if address >= 0 else f"negative address {address}")
        self.address = address


class LoadOverflowError(BusError):
    """Raised when a block load would run past the end of the address space."""

    def __init__(self, start: int, end: int) -> None:
        super().__init__(f"image {start:#06x}-{end:#06x} overflows the address space")
        self.start = start
        self.end = end


def check_address(address: int) -> int:
    """Return ``address`` unchanged or raise ``AddressOutOfRangeError``."""

    if not 0 <= address <= MAX_ADDRESS:
        raise AddressOutOfRangeError(address)
    return address


class MemoryBus:
    """64 KiB byte-addressable memory with validated 8/16-bit access."""

    def __init__(self) -> None:
        self._data = bytearray(ADDRESS_SPACE_SIZE)
        self._debug = False

    def __len__(self) -> int:
        return ADDRESS_SPACE_SIZE

    def load8(self, address: int) -> int:
        addr = check_address(address)
        value = self._data[addr]
        if self._debug:
            debug_log("bus", "load8: addr=%04x val=%02x", addr, value)
        return value

    def store8(self, address: int, value: int) -> None:
        addr = check_address(address)
        if self._debug:
            debug_log("bus", "store8: addr=%04x val=%02x", addr, value & 0xFF)
        self._data[addr] = value & 0xFF

    def load16(self, address: int) -> int:
        """Read a little-endian word stored at ``address``/``address + 1``."""

        check_address(address + 1)
        low = self.load8(address)
        high = self.load8(address + 1)
        return ((high & 0xFF) << 8) | (low & 0xFF)

    def store16(self, address: int, value: int) -> None:
        check_address(address + 1)
        self.store8(address, value & 0xFF)
        self.store8(address + 1, (value >> 8) & 0xFF)

    def load_block(self, start: int, data: Iterable[int]) -> int:
        """Copy ``data`` into memory starting at ``start``.

        Nothing is written when the block does not fit. Returns the number of
        bytes copied.
        """

        check_address(start)
        payload = bytes(data)
        end = start + len(payload) - 1
        if end > MAX_ADDRESS:
            raise LoadOverflowError(start, end)
        self._data[start:start + len(payload)] = payload
        debug_log("bus", "load_block: %04x-%04x (%d bytes)", start, max(start, end), len(payload))
        return len(payload)

    def read_block(self, start: int, length: int) -> bytes:
        if length < 0:
            raise ValueError("length must not be negative")
        check_address(start)
        if length:
            check_address(start + length - 1)
        return bytes(self._data[start:start + length])

    def snapshot(self) -> bytes:
        return bytes(self._data)

    def clear(self) -> None:
        self._data[:] = bytes(ADDRESS_SPACE_SIZE)

    def set_debug(self, enabled: bool) -> None:
        self._debug = enabled
