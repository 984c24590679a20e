"""Machine assembly: one engine and the memory bus it owns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pyoldnes.bus import DEFAULT_LOAD_ADDRESS, MAX_ADDRESS, MemoryBus
from pyoldnes.cpu import MOS6502, RunResult
from pyoldnes.cpu.addressing import BYTE_ORDERS
from pyoldnes.utils import TraceRecorder


@dataclass
class MachineConfig:
    """Runtime configuration for a machine."""

    load_address: int = DEFAULT_LOAD_ADDRESS
    operand_byte_order: str = "big"
    program: Optional[bytes] = None
    debug_memory: bool = False
    trace_capacity: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.load_address <= MAX_ADDRESS:
            raise ValueError(f"load address out of range: {self.load_address:#x}")
        if self.operand_byte_order not in BYTE_ORDERS:
            raise ValueError(f"operand byte order must be one of {BYTE_ORDERS}")
        if self.trace_capacity < 0:
            raise ValueError("trace capacity must not be negative")


@dataclass
class Machine:
    """Aggregates the engine and its memory."""

    memory: MemoryBus
    cpu: MOS6502
    trace: TraceRecorder | None = None

    def load(self, program: bytes) -> int:
        return self.cpu.load(program)

    def run(self, max_steps: int | None = None) -> RunResult:
        return self.cpu.run(max_steps)


def create_machine(config: MachineConfig | None = None) -> Machine:
    """Instantiate a machine, installing ``config.program`` when given."""

    config = config or MachineConfig()

    memory = MemoryBus()
    memory.set_debug(config.debug_memory)

    trace = TraceRecorder(config.trace_capacity) if config.trace_capacity else None
    cpu = MOS6502(
        memory,
        load_address=config.load_address,
        byte_order=config.operand_byte_order,
        trace=trace,
    )
    if config.program:
        cpu.load(config.program)

    return Machine(memory=memory, cpu=cpu, trace=trace)
