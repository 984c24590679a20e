"""CPU package: register file, instruction table, resolver and engine."""

from .addressing import resolve
from .core import MOS6502, EngineState, RunResult
from .errors import CPUError, UnknownOpcodeError
from .opcodes import OPCODE_TABLE, AddressingMode, Instruction, Mnemonic, lookup
from .registers import RegisterFile, compute_zero_and_negative
from . import opcodes

__all__ = [
    "MOS6502",
    "EngineState",
    "RunResult",
    "RegisterFile",
    "compute_zero_and_negative",
    "CPUError",
    "UnknownOpcodeError",
    "AddressingMode",
    "Instruction",
    "Mnemonic",
    "OPCODE_TABLE",
    "lookup",
    "resolve",
    "opcodes",
]
