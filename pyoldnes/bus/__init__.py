"""Bus-related helpers for the 6502 engine."""

from .memory import (
    ADDRESS_SPACE_SIZE,
    DEFAULT_LOAD_ADDRESS,
    MAX_ADDRESS,
    STACK_BASE,
    AddressOutOfRangeError,
    BusError,
    LoadOverflowError,
    MemoryBus,
    check_address,
)

__all__ = [
    "ADDRESS_SPACE_SIZE",
    "DEFAULT_LOAD_ADDRESS",
    "MAX_ADDRESS",
    "STACK_BASE",
    "AddressOutOfRangeError",
    "BusError",
    "LoadOverflowError",
    "MemoryBus",
    "check_address",
]
