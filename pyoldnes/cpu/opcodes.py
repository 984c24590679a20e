"""Opcode metadata for the 6502 instruction set."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Final, Iterable, List, Sequence

from .errors import UnknownOpcodeError


class AddressingMode(Enum):
    """Operand location strategies understood by the resolver."""

    IMPLIED = auto()
    ACCUMULATOR = auto()
    IMMEDIATE = auto()
    ZERO_PAGE = auto()
    ZERO_PAGE_X = auto()
    ZERO_PAGE_Y = auto()
    ABSOLUTE = auto()
    ABSOLUTE_X = auto()
    ABSOLUTE_Y = auto()
    INDIRECT = auto()
    INDIRECT_X = auto()
    INDIRECT_Y = auto()
    RELATIVE = auto()


# Number of operand bytes that follow the opcode.
OPERAND_WIDTH: Final[dict[AddressingMode, int]] = {
    AddressingMode.IMPLIED: 0,
    AddressingMode.ACCUMULATOR: 0,
    AddressingMode.IMMEDIATE: 1,
    AddressingMode.ZERO_PAGE: 1,
    AddressingMode.ZERO_PAGE_X: 1,
    AddressingMode.ZERO_PAGE_Y: 1,
    AddressingMode.ABSOLUTE: 2,
    AddressingMode.ABSOLUTE_X: 2,
    AddressingMode.ABSOLUTE_Y: 2,
    AddressingMode.INDIRECT: 2,
    AddressingMode.INDIRECT_X: 1,
    AddressingMode.INDIRECT_Y: 1,
    AddressingMode.RELATIVE: 1,
}

_MODE_SYNTAX: Final[dict[AddressingMode, str]] = {
    AddressingMode.IMPLIED: "",
    AddressingMode.ACCUMULATOR: "A",
    AddressingMode.IMMEDIATE: "#imm",
    AddressingMode.ZERO_PAGE: "zp",
    AddressingMode.ZERO_PAGE_X: "zp,X",
    AddressingMode.ZERO_PAGE_Y: "zp,Y",
    AddressingMode.ABSOLUTE: "abs",
    AddressingMode.ABSOLUTE_X: "abs,X",
    AddressingMode.ABSOLUTE_Y: "abs,Y",
    AddressingMode.INDIRECT: "(abs)",
    AddressingMode.INDIRECT_X: "(zp,X)",
    AddressingMode.INDIRECT_Y: "(zp),Y",
    AddressingMode.RELATIVE: "rel",
}


class Mnemonic(Enum):
    """Named operations, independent of their addressing mode."""

    ADC = auto()
    AND = auto()
    ASL = auto()
    BCC = auto()
    BCS = auto()
    BEQ = auto()
    BIT = auto()
    BMI = auto()
    BNE = auto()
    BPL = auto()
    BRK = auto()
    BVC = auto()
    BVS = auto()
    CLC = auto()
    CLD = auto()
    CLI = auto()
    CLV = auto()
    CMP = auto()
    CPX = auto()
    CPY = auto()
    DEC = auto()
    DEX = auto()
    DEY = auto()
    EOR = auto()
    INC = auto()
    INX = auto()
    INY = auto()
    JMP = auto()
    JSR = auto()
    LDA = auto()
    LDX = auto()
    LDY = auto()
    LSR = auto()
    NOP = auto()
    ORA = auto()
    PHA = auto()
    PHP = auto()
    PLA = auto()
    PLP = auto()
    ROL = auto()
    ROR = auto()
    RTI = auto()
    RTS = auto()
    SBC = auto()
    SEC = auto()
    SED = auto()
    SEI = auto()
    STA = auto()
    STX = auto()
    STY = auto()
    TAX = auto()
    TAY = auto()
    TSX = auto()
    TXA = auto()
    TXS = auto()
    TYA = auto()


@dataclass(frozen=True)
class Instruction:
    """Metadata describing a single 6502 opcode."""

    opcode: int
    mnemonic: Mnemonic
    mode: AddressingMode

    def __post_init__(self) -> None:
        if not 0 <= self.opcode <= 0xFF:
            raise ValueError(f"opcode out of range: {self.opcode}")

    @property
    def size(self) -> int:
        """Encoded length in bytes, opcode included."""

        return 1 + OPERAND_WIDTH[self.mode]

    def describe(self) -> str:
        syntax = _MODE_SYNTAX[self.mode]
        return f"{self.mnemonic.name} {syntax}".rstrip()


class OpcodeTable:
    """Mutable builder for the 256-entry instruction table."""

    _TABLE_SIZE: Final[int] = 0x100

    def __init__(self) -> None:
        self._table: List[Instruction | None] = [None] * self._TABLE_SIZE

    def register(self, instruction: Instruction) -> None:
        opcode = instruction.opcode
        if self._table[opcode] is not None:
            existing = self._table[opcode]
            raise ValueError(
                f"opcode {opcode:#04x} already registered as {existing.mnemonic.name}")
        self._table[opcode] = instruction

    def register_all(self, instructions: Iterable[Instruction]) -> None:
        for instruction in instructions:
            self.register(instruction)

    def freeze(self) -> Sequence[Instruction | None]:
        return tuple(self._table)


def build_instruction_table(instructions: Iterable[Instruction]) -> Sequence[Instruction | None]:
    """Build a 256-entry instruction lookup table."""

    table = OpcodeTable()
    table.register_all(instructions)
    return table.freeze()


DEFAULT_INSTRUCTIONS: Sequence[Instruction] = (
    # Loads
    Instruction(0xA9, Mnemonic.LDA, AddressingMode.IMMEDIATE),
    Instruction(0xA5, Mnemonic.LDA, AddressingMode.ZERO_PAGE),
    Instruction(0xB5, Mnemonic.LDA, AddressingMode.ZERO_PAGE_X),
    Instruction(0xAD, Mnemonic.LDA, AddressingMode.ABSOLUTE),
    Instruction(0xBD, Mnemonic.LDA, AddressingMode.ABSOLUTE_X),
    Instruction(0xB9, Mnemonic.LDA, AddressingMode.ABSOLUTE_Y),
    Instruction(0xA1, Mnemonic.LDA, AddressingMode.INDIRECT_X),
    Instruction(0xB1, Mnemonic.LDA, AddressingMode.INDIRECT_Y),
    Instruction(0xA2, Mnemonic.LDX, AddressingMode.IMMEDIATE),
    Instruction(0xA6, Mnemonic.LDX, AddressingMode.ZERO_PAGE),
    Instruction(0xB6, Mnemonic.LDX, AddressingMode.ZERO_PAGE_Y),
    Instruction(0xAE, Mnemonic.LDX, AddressingMode.ABSOLUTE),
    Instruction(0xBE, Mnemonic.LDX, AddressingMode.ABSOLUTE_Y),
    Instruction(0xA0, Mnemonic.LDY, AddressingMode.IMMEDIATE),
    Instruction(0xA4, Mnemonic.LDY, AddressingMode.ZERO_PAGE),
    Instruction(0xB4, Mnemonic.LDY, AddressingMode.ZERO_PAGE_X),
    Instruction(0xAC, Mnemonic.LDY, AddressingMode.ABSOLUTE),
    Instruction(0xBC, Mnemonic.LDY, AddressingMode.ABSOLUTE_X),
    # Stores
    Instruction(0x85, Mnemonic.STA, AddressingMode.ZERO_PAGE),
    Instruction(0x95, Mnemonic.STA, AddressingMode.ZERO_PAGE_X),
    Instruction(0x8D, Mnemonic.STA, AddressingMode.ABSOLUTE),
    Instruction(0x9D, Mnemonic.STA, AddressingMode.ABSOLUTE_X),
    Instruction(0x99, Mnemonic.STA, AddressingMode.ABSOLUTE_Y),
    Instruction(0x81, Mnemonic.STA, AddressingMode.INDIRECT_X),
    Instruction(0x91, Mnemonic.STA, AddressingMode.INDIRECT_Y),
    Instruction(0x86, Mnemonic.STX, AddressingMode.ZERO_PAGE),
    Instruction(0x96, Mnemonic.STX, AddressingMode.ZERO_PAGE_Y),
    Instruction(0x8E, Mnemonic.STX, AddressingMode.ABSOLUTE),
    Instruction(0x84, Mnemonic.STY, AddressingMode.ZERO_PAGE),
    Instruction(0x94, Mnemonic.STY, AddressingMode.ZERO_PAGE_X),
    Instruction(0x8C, Mnemonic.STY, AddressingMode.ABSOLUTE),
    # Register transfers
    Instruction(0xAA, Mnemonic.TAX, AddressingMode.IMPLIED),
    Instruction(0xA8, Mnemonic.TAY, AddressingMode.IMPLIED),
    Instruction(0x8A, Mnemonic.TXA, AddressingMode.IMPLIED),
    Instruction(0x98, Mnemonic.TYA, AddressingMode.IMPLIED),
    Instruction(0xBA, Mnemonic.TSX, AddressingMode.IMPLIED),
    Instruction(0x9A, Mnemonic.TXS, AddressingMode.IMPLIED),
    # Stack
    Instruction(0x48, Mnemonic.PHA, AddressingMode.IMPLIED),
    Instruction(0x08, Mnemonic.PHP, AddressingMode.IMPLIED),
    Instruction(0x68, Mnemonic.PLA, AddressingMode.IMPLIED),
    Instruction(0x28, Mnemonic.PLP, AddressingMode.IMPLIED),
    # Logical
    Instruction(0x29, Mnemonic.AND, AddressingMode.IMMEDIATE),
    Instruction(0x25, Mnemonic.AND, AddressingMode.ZERO_PAGE),
    Instruction(0x35, Mnemonic.AND, AddressingMode.ZERO_PAGE_X),
    Instruction(0x2D, Mnemonic.AND, AddressingMode.ABSOLUTE),
    Instruction(0x3D, Mnemonic.AND, AddressingMode.ABSOLUTE_X),
    Instruction(0x39, Mnemonic.AND, AddressingMode.ABSOLUTE_Y),
    Instruction(0x21, Mnemonic.AND, AddressingMode.INDIRECT_X),
    Instruction(0x31, Mnemonic.AND, AddressingMode.INDIRECT_Y),
    Instruction(0x49, Mnemonic.EOR, AddressingMode.IMMEDIATE),
    Instruction(0x45, Mnemonic.EOR, AddressingMode.ZERO_PAGE),
    Instruction(0x55, Mnemonic.EOR, AddressingMode.ZERO_PAGE_X),
    Instruction(0x4D, Mnemonic.EOR, AddressingMode.ABSOLUTE),
    Instruction(0x5D, Mnemonic.EOR, AddressingMode.ABSOLUTE_X),
    Instruction(0x59, Mnemonic.EOR, AddressingMode.ABSOLUTE_Y),
    Instruction(0x41, Mnemonic.EOR, AddressingMode.INDIRECT_X),
    Instruction(0x51, Mnemonic.EOR, AddressingMode.INDIRECT_Y),
    Instruction(0x09, Mnemonic.ORA, AddressingMode.IMMEDIATE),
    Instruction(0x05, Mnemonic.ORA, AddressingMode.ZERO_PAGE),
    Instruction(0x15, Mnemonic.ORA, AddressingMode.ZERO_PAGE_X),
    Instruction(0x0D, Mnemonic.ORA, AddressingMode.ABSOLUTE),
    Instruction(0x1D, Mnemonic.ORA, AddressingMode.ABSOLUTE_X),
    Instruction(0x19, Mnemonic.ORA, AddressingMode.ABSOLUTE_Y),
    Instruction(0x01, Mnemonic.ORA, AddressingMode.INDIRECT_X),
    Instruction(0x11, Mnemonic.ORA, AddressingMode.INDIRECT_Y),
    Instruction(0x24, Mnemonic.BIT, AddressingMode.ZERO_PAGE),
    Instruction(0x2C, Mnemonic.BIT, AddressingMode.ABSOLUTE),
    # Arithmetic
    Instruction(0x69, Mnemonic.ADC, AddressingMode.IMMEDIATE),
    Instruction(0x65, Mnemonic.ADC, AddressingMode.ZERO_PAGE),
    Instruction(0x75, Mnemonic.ADC, AddressingMode.ZERO_PAGE_X),
    Instruction(0x6D, Mnemonic.ADC, AddressingMode.ABSOLUTE),
    Instruction(0x7D, Mnemonic.ADC, AddressingMode.ABSOLUTE_X),
    Instruction(0x79, Mnemonic.ADC, AddressingMode.ABSOLUTE_Y),
    Instruction(0x61, Mnemonic.ADC, AddressingMode.INDIRECT_X),
    Instruction(0x71, Mnemonic.ADC, AddressingMode.INDIRECT_Y),
    Instruction(0xE9, Mnemonic.SBC, AddressingMode.IMMEDIATE),
    Instruction(0xE5, Mnemonic.SBC, AddressingMode.ZERO_PAGE),
    Instruction(0xF5, Mnemonic.SBC, AddressingMode.ZERO_PAGE_X),
    Instruction(0xED, Mnemonic.SBC, AddressingMode.ABSOLUTE),
    Instruction(0xFD, Mnemonic.SBC, AddressingMode.ABSOLUTE_X),
    Instruction(0xF9, Mnemonic.SBC, AddressingMode.ABSOLUTE_Y),
    Instruction(0xE1, Mnemonic.SBC, AddressingMode.INDIRECT_X),
    Instruction(0xF1, Mnemonic.SBC, AddressingMode.INDIRECT_Y),
    # Compare
    Instruction(0xC9, Mnemonic.CMP, AddressingMode.IMMEDIATE),
    Instruction(0xC5, Mnemonic.CMP, AddressingMode.ZERO_PAGE),
    Instruction(0xD5, Mnemonic.CMP, AddressingMode.ZERO_PAGE_X),
    Instruction(0xCD, Mnemonic.CMP, AddressingMode.ABSOLUTE),
    Instruction(0xDD, Mnemonic.CMP, AddressingMode.ABSOLUTE_X),
    Instruction(0xD9, Mnemonic.CMP, AddressingMode.ABSOLUTE_Y),
    Instruction(0xC1, Mnemonic.CMP, AddressingMode.INDIRECT_X),
    Instruction(0xD1, Mnemonic.CMP, AddressingMode.INDIRECT_Y),
    Instruction(0xE0, Mnemonic.CPX, AddressingMode.IMMEDIATE),
    Instruction(0xE4, Mnemonic.CPX, AddressingMode.ZERO_PAGE),
    Instruction(0xEC, Mnemonic.CPX, AddressingMode.ABSOLUTE),
    Instruction(0xC0, Mnemonic.CPY, AddressingMode.IMMEDIATE),
    Instruction(0xC4, Mnemonic.CPY, AddressingMode.ZERO_PAGE),
    Instruction(0xCC, Mnemonic.CPY, AddressingMode.ABSOLUTE),
    # Increments and decrements
    Instruction(0xE6, Mnemonic.INC, AddressingMode.ZERO_PAGE),
    Instruction(0xF6, Mnemonic.INC, AddressingMode.ZERO_PAGE_X),
    Instruction(0xEE, Mnemonic.INC, AddressingMode.ABSOLUTE),
    Instruction(0xFE, Mnemonic.INC, AddressingMode.ABSOLUTE_X),
    Instruction(0xC6, Mnemonic.DEC, AddressingMode.ZERO_PAGE),
    Instruction(0xD6, Mnemonic.DEC, AddressingMode.ZERO_PAGE_X),
    Instruction(0xCE, Mnemonic.DEC, AddressingMode.ABSOLUTE),
    Instruction(0xDE, Mnemonic.DEC, AddressingMode.ABSOLUTE_X),
    Instruction(0xE8, Mnemonic.INX, AddressingMode.IMPLIED),
    Instruction(0xC8, Mnemonic.INY, AddressingMode.IMPLIED),
    Instruction(0xCA, Mnemonic.DEX, AddressingMode.IMPLIED),
    Instruction(0x88, Mnemonic.DEY, AddressingMode.IMPLIED),
    # Shifts and rotates
    Instruction(0x0A, Mnemonic.ASL, AddressingMode.ACCUMULATOR),
    Instruction(0x06, Mnemonic.ASL, AddressingMode.ZERO_PAGE),
    Instruction(0x16, Mnemonic.ASL, AddressingMode.ZERO_PAGE_X),
    Instruction(0x0E, Mnemonic.ASL, AddressingMode.ABSOLUTE),
    Instruction(0x1E, Mnemonic.ASL, AddressingMode.ABSOLUTE_X),
    Instruction(0x4A, Mnemonic.LSR, AddressingMode.ACCUMULATOR),
    Instruction(0x46, Mnemonic.LSR, AddressingMode.ZERO_PAGE),
    Instruction(0x56, Mnemonic.LSR, AddressingMode.ZERO_PAGE_X),
    Instruction(0x4E, Mnemonic.LSR, AddressingMode.ABSOLUTE),
    Instruction(0x5E, Mnemonic.LSR, AddressingMode.ABSOLUTE_X),
    Instruction(0x2A, Mnemonic.ROL, AddressingMode.ACCUMULATOR),
    Instruction(0x26, Mnemonic.ROL, AddressingMode.ZERO_PAGE),
    Instruction(0x36, Mnemonic.ROL, AddressingMode.ZERO_PAGE_X),
    Instruction(0x2E, Mnemonic.ROL, AddressingMode.ABSOLUTE),
    Instruction(0x3E, Mnemonic.ROL, AddressingMode.ABSOLUTE_X),
    Instruction(0x6A, Mnemonic.ROR, AddressingMode.ACCUMULATOR),
    Instruction(0x66, Mnemonic.ROR, AddressingMode.ZERO_PAGE),
    Instruction(0x76, Mnemonic.ROR, AddressingMode.ZERO_PAGE_X),
    Instruction(0x6E, Mnemonic.ROR, AddressingMode.ABSOLUTE),
    Instruction(0x7E, Mnemonic.ROR, AddressingMode.ABSOLUTE_X),
    # Jumps and subroutines
    Instruction(0x4C, Mnemonic.JMP, AddressingMode.ABSOLUTE),
    Instruction(0x6C, Mnemonic.JMP, AddressingMode.INDIRECT),
    Instruction(0x20, Mnemonic.JSR, AddressingMode.ABSOLUTE),
    Instruction(0x60, Mnemonic.RTS, AddressingMode.IMPLIED),
    Instruction(0x40, Mnemonic.RTI, AddressingMode.IMPLIED),
    # Branches
    Instruction(0x90, Mnemonic.BCC, AddressingMode.RELATIVE),
    Instruction(0xB0, Mnemonic.BCS, AddressingMode.RELATIVE),
    Instruction(0xF0, Mnemonic.BEQ, AddressingMode.RELATIVE),
    Instruction(0xD0, Mnemonic.BNE, AddressingMode.RELATIVE),
    Instruction(0x30, Mnemonic.BMI, AddressingMode.RELATIVE),
    Instruction(0x10, Mnemonic.BPL, AddressingMode.RELATIVE),
    Instruction(0x50, Mnemonic.BVC, AddressingMode.RELATIVE),
    Instruction(0x70, Mnemonic.BVS, AddressingMode.RELATIVE),
    # Status flag changes
    Instruction(0x18, Mnemonic.CLC, AddressingMode.IMPLIED),
    Instruction(0xD8, Mnemonic.CLD, AddressingMode.IMPLIED),
    Instruction(0x58, Mnemonic.CLI, AddressingMode.IMPLIED),
    Instruction(0xB8, Mnemonic.CLV, AddressingMode.IMPLIED),
    Instruction(0x38, Mnemonic.SEC, AddressingMode.IMPLIED),
    Instruction(0xF8, Mnemonic.SED, AddressingMode.IMPLIED),
    Instruction(0x78, Mnemonic.SEI, AddressingMode.IMPLIED),
    # System
    Instruction(0x00, Mnemonic.BRK, AddressingMode.IMPLIED),
    Instruction(0xEA, Mnemonic.NOP, AddressingMode.IMPLIED),
)


OPCODE_TABLE: Sequence[Instruction | None] = build_instruction_table(DEFAULT_INSTRUCTIONS)


def lookup(opcode: int, table: Sequence[Instruction | None] = OPCODE_TABLE) -> Instruction:
    """Return the descriptor for ``opcode`` or raise ``UnknownOpcodeError``."""

    instruction = table[opcode & 0xFF] if 0 <= opcode <= 0xFF else None
    if instruction is None:
        raise UnknownOpcodeError(opcode)
    return instruction


def describe(opcode: int) -> str:
    """Render ``opcode`` as ``"LDA #imm"`` style text, or ``"???"``."""

    try:
        return lookup(opcode).describe()
    except UnknownOpcodeError:
        return "???"
