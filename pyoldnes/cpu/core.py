"""6502 fetch-decode-execute engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, ClassVar, Iterable, Sequence

from pyoldnes.bus import (
    DEFAULT_LOAD_ADDRESS,
    MAX_ADDRESS,
    STACK_BASE,
    AddressOutOfRangeError,
    MemoryBus,
)
from pyoldnes.utils import TraceRecorder, debug_enabled, debug_log

from .addressing import BYTE_ORDERS, fetch_byte, resolve
from .errors import CPUError, UnknownOpcodeError
from .opcodes import OPCODE_TABLE, AddressingMode, Instruction, Mnemonic
from .registers import (
    FLAG_B,
    FLAG_C,
    FLAG_D,
    FLAG_I,
    FLAG_N,
    FLAG_U,
    FLAG_V,
    FLAG_Z,
    RegisterFile,
    compute_zero_and_negative,
)

Handler = Callable[[Instruction, int], None]


class EngineState(Enum):
    RUNNING = auto()
    HALTED = auto()


@dataclass
class RunResult:
    """Terminal state reported by ``MOS6502.run``."""

    registers: RegisterFile
    memory: bytes
    steps: int
    state: EngineState

    @property
    def halted(self) -> bool:
        return self.state is EngineState.HALTED


@dataclass
class MOS6502:
    """6502 instruction engine owning its register file and memory bus.

    Lifecycle: construct (registers at power-on values, PC at the load
    address), ``load`` a program image, then ``run`` or ``step``. ``reset``
    returns the registers to power-on values and clears the halted state;
    memory is left untouched.
    """

    memory: MemoryBus = field(default_factory=MemoryBus)
    instruction_table: Sequence[Instruction | None] = field(default=OPCODE_TABLE)
    load_address: int = DEFAULT_LOAD_ADDRESS
    byte_order: str = "big"
    trace: TraceRecorder | None = None

    registers: RegisterFile = field(default_factory=RegisterFile)
    state: EngineState = EngineState.RUNNING
    instruction_count: int = 0

    STACK_BASE: ClassVar[int] = STACK_BASE

    def __post_init__(self) -> None:
        if not 0 <= self.load_address <= MAX_ADDRESS:
            raise ValueError(f"load address out of range: {self.load_address:#x}")
        if self.byte_order not in BYTE_ORDERS:
            raise ValueError(f"unsupported operand byte order: {self.byte_order!r}")
        self.registers.pc = self.load_address
        self._handlers = self._build_handlers()

    # ------------------------------------------------------------------
    # Public interface

    @property
    def halted(self) -> bool:
        return self.state is EngineState.HALTED

    def reset(self) -> None:
        """Restore power-on registers and leave the halted state."""

        self.registers = RegisterFile(pc=self.load_address)
        self.state = EngineState.RUNNING
        self.instruction_count = 0

    def load(self, program: Iterable[int]) -> int:
        """Copy ``program`` to the load address and point PC at it."""

        count = self.memory.load_block(self.load_address, program)
        self.registers.pc = self.load_address
        self.state = EngineState.RUNNING
        debug_log("cpu", "loaded %d bytes at %04x", count, self.load_address)
        return count

    def run(self, max_steps: int | None = None) -> RunResult:
        """Execute until BRK halts the engine or ``max_steps`` is reached."""

        if max_steps is not None and max_steps < 0:
            raise ValueError("max_steps must not be negative")
        executed = 0
        while not self.halted:
            if max_steps is not None and executed >= max_steps:
                debug_log("cpu", "step limit %d reached pc=%04x", max_steps, self.registers.pc)
                break
            self.step()
            executed += 1
        return RunResult(
            registers=self.registers.clone(),
            memory=self.memory.snapshot(),
            steps=executed,
            state=self.state,
        )

    def step(self) -> Instruction | None:
        """Execute a single instruction and return its descriptor.

        Returns ``None`` without touching anything once the engine is halted.
        """

        if self.halted:
            return None

        snapshot = self.registers.clone()
        opcode = fetch_byte(self.registers, self.memory)
        instruction = self._decode(opcode, snapshot)
        if self.trace is not None:
            self.trace.record_step(snapshot, opcode, halted=False, mnemonic=instruction.describe())
        if debug_enabled("cpu"):
            debug_log("cpu", "pc=%04x opcode=%02x %s", snapshot.pc, opcode, instruction.describe())

        try:
            operand = resolve(instruction.mode, self.registers, self.memory, byte_order=self.byte_order)
            self._handlers[instruction.mnemonic](instruction, operand)
        except AddressOutOfRangeError as exc:
            self.registers.restore(snapshot)
            debug_log("cpu", "pc=%04x %s: %s", snapshot.pc, instruction.describe(), exc)
            raise

        self.instruction_count += 1
        return instruction

    # ------------------------------------------------------------------
    # Decode and dispatch

    def _decode(self, opcode: int, snapshot: RegisterFile) -> Instruction:
        instruction = self.instruction_table[opcode]
        if instruction is None:
            if self.trace is not None:
                self.trace.record_step(snapshot, opcode, halted=False, mnemonic="???", note="unknown-opcode")
            raise UnknownOpcodeError(opcode, snapshot.pc)
        return instruction

    def _build_handlers(self) -> dict[Mnemonic, Handler]:
        handlers: dict[Mnemonic, Handler] = {
            Mnemonic.LDA: self.op_lda,
            Mnemonic.LDX: self.op_ldx,
            Mnemonic.LDY: self.op_ldy,
            Mnemonic.STA: self.op_sta,
            Mnemonic.STX: self.op_stx,
            Mnemonic.STY: self.op_sty,
            Mnemonic.TAX: self.op_tax,
            Mnemonic.TAY: self.op_tay,
            Mnemonic.TXA: self.op_txa,
            Mnemonic.TYA: self.op_tya,
            Mnemonic.TSX: self.op_tsx,
            Mnemonic.TXS: self.op_txs,
            Mnemonic.PHA: self.op_pha,
            Mnemonic.PHP: self.op_php,
            Mnemonic.PLA: self.op_pla,
            Mnemonic.PLP: self.op_plp,
            Mnemonic.AND: self.op_and,
            Mnemonic.ORA: self.op_ora,
            Mnemonic.EOR: self.op_eor,
            Mnemonic.BIT: self.op_bit,
            Mnemonic.ADC: self.op_adc,
            Mnemonic.SBC: self.op_sbc,
            Mnemonic.CMP: self.op_cmp,
            Mnemonic.CPX: self.op_cpx,
            Mnemonic.CPY: self.op_cpy,
            Mnemonic.INC: self.op_inc,
            Mnemonic.DEC: self.op_dec,
            Mnemonic.INX: self.op_inx,
            Mnemonic.INY: self.op_iny,
            Mnemonic.DEX: self.op_dex,
            Mnemonic.DEY: self.op_dey,
            Mnemonic.ASL: self.op_asl,
            Mnemonic.LSR: self.op_lsr,
            Mnemonic.ROL: self.op_rol,
            Mnemonic.ROR: self.op_ror,
            Mnemonic.JMP: self.op_jmp,
            Mnemonic.JSR: self.op_jsr,
            Mnemonic.RTS: self.op_rts,
            Mnemonic.RTI: self.op_rti,
            Mnemonic.BCC: self._branch_if(FLAG_C, False),
            Mnemonic.BCS: self._branch_if(FLAG_C, True),
            Mnemonic.BNE: self._branch_if(FLAG_Z, False),
            Mnemonic.BEQ: self._branch_if(FLAG_Z, True),
            Mnemonic.BPL: self._branch_if(FLAG_N, False),
            Mnemonic.BMI: self._branch_if(FLAG_N, True),
            Mnemonic.BVC: self._branch_if(FLAG_V, False),
            Mnemonic.BVS: self._branch_if(FLAG_V, True),
            Mnemonic.CLC: self._set_flag_to(FLAG_C, False),
            Mnemonic.CLD: self._set_flag_to(FLAG_D, False),
            Mnemonic.CLI: self._set_flag_to(FLAG_I, False),
            Mnemonic.CLV: self._set_flag_to(FLAG_V, False),
            Mnemonic.SEC: self._set_flag_to(FLAG_C, True),
            Mnemonic.SED: self._set_flag_to(FLAG_D, True),
            Mnemonic.SEI: self._set_flag_to(FLAG_I, True),
            Mnemonic.NOP: self.op_nop,
            Mnemonic.BRK: self.op_brk,
        }
        missing = [mnemonic.name for mnemonic in Mnemonic if mnemonic not in handlers]
        if missing:
            raise CPUError(f"no handler for mnemonics: {', '.join(missing)}")
        return handlers

    # ------------------------------------------------------------------
    # Instruction handlers

    def op_lda(self, instruction: Instruction, operand: int) -> None:
        self.registers.a = self._read_operand(instruction, operand)
        self._update_nz_flags(self.registers.a)

    def op_ldx(self, instruction: Instruction, operand: int) -> None:
        self.registers.x = self._read_operand(instruction, operand)
        self._update_nz_flags(self.registers.x)

    def op_ldy(self, instruction: Instruction, operand: int) -> None:
        self.registers.y = self._read_operand(instruction, operand)
        self._update_nz_flags(self.registers.y)

    def op_sta(self, _: Instruction, operand: int) -> None:
        self.memory.store8(operand, self.registers.a)

    def op_stx(self, _: Instruction, operand: int) -> None:
        self.memory.store8(operand, self.registers.x)

    def op_sty(self, _: Instruction, operand: int) -> None:
        self.memory.store8(operand, self.registers.y)

    def op_tax(self, _: Instruction, _operand: int) -> None:
        self.registers.x = self.registers.a
        self._update_nz_flags(self.registers.x)

    def op_tay(self, _: Instruction, _operand: int) -> None:
        self.registers.y = self.registers.a
        self._update_nz_flags(self.registers.y)

    def op_txa(self, _: Instruction, _operand: int) -> None:
        self.registers.a = self.registers.x
        self._update_nz_flags(self.registers.a)

    def op_tya(self, _: Instruction, _operand: int) -> None:
        self.registers.a = self.registers.y
        self._update_nz_flags(self.registers.a)

    def op_tsx(self, _: Instruction, _operand: int) -> None:
        self.registers.x = self.registers.sp
        self._update_nz_flags(self.registers.x)

    def op_txs(self, _: Instruction, _operand: int) -> None:
        self.registers.sp = self.registers.x

    def op_pha(self, _: Instruction, _operand: int) -> None:
        self._push_byte(self.registers.a)

    def op_php(self, _: Instruction, _operand: int) -> None:
        # The pushed copy always carries B and the unused bit.
        self._push_byte(self.registers.p | FLAG_B | FLAG_U)

    def op_pla(self, _: Instruction, _operand: int) -> None:
        self.registers.a = self._pull_byte()
        self._update_nz_flags(self.registers.a)

    def op_plp(self, _: Instruction, _operand: int) -> None:
        self._apply_status(self._pull_byte())

    def op_and(self, instruction: Instruction, operand: int) -> None:
        self.registers.a &= self._read_operand(instruction, operand)
        self._update_nz_flags(self.registers.a)

    def op_ora(self, instruction: Instruction, operand: int) -> None:
        self.registers.a |= self._read_operand(instruction, operand)
        self._update_nz_flags(self.registers.a)

    def op_eor(self, instruction: Instruction, operand: int) -> None:
        self.registers.a ^= self._read_operand(instruction, operand)
        self._update_nz_flags(self.registers.a)

    def op_bit(self, instruction: Instruction, operand: int) -> None:
        value = self._read_operand(instruction, operand)
        self.registers.set_flag(FLAG_Z, (self.registers.a & value) == 0)
        self.registers.set_flag(FLAG_N, (value & 0x80) != 0)
        self.registers.set_flag(FLAG_V, (value & 0x40) != 0)

    def op_adc(self, instruction: Instruction, operand: int) -> None:
        value = self._read_operand(instruction, operand)
        self.registers.a = self._add8(self.registers.a, value)

    def op_sbc(self, instruction: Instruction, operand: int) -> None:
        # Binary subtraction is addition of the one's complement.
        value = self._read_operand(instruction, operand)
        self.registers.a = self._add8(self.registers.a, ~value & 0xFF)

    def op_cmp(self, instruction: Instruction, operand: int) -> None:
        self._compare(self.registers.a, self._read_operand(instruction, operand))

    def op_cpx(self, instruction: Instruction, operand: int) -> None:
        self._compare(self.registers.x, self._read_operand(instruction, operand))

    def op_cpy(self, instruction: Instruction, operand: int) -> None:
        self._compare(self.registers.y, self._read_operand(instruction, operand))

    def op_inc(self, instruction: Instruction, operand: int) -> None:
        self._modify(instruction, operand, lambda value: (value + 1) & 0xFF)

    def op_dec(self, instruction: Instruction, operand: int) -> None:
        self._modify(instruction, operand, lambda value: (value - 1) & 0xFF)

    def op_inx(self, _: Instruction, _operand: int) -> None:
        self.registers.x = (self.registers.x + 1) & 0xFF
        self._update_nz_flags(self.registers.x)

    def op_iny(self, _: Instruction, _operand: int) -> None:
        self.registers.y = (self.registers.y + 1) & 0xFF
        self._update_nz_flags(self.registers.y)

    def op_dex(self, _: Instruction, _operand: int) -> None:
        self.registers.x = (self.registers.x - 1) & 0xFF
        self._update_nz_flags(self.registers.x)

    def op_dey(self, _: Instruction, _operand: int) -> None:
        self.registers.y = (self.registers.y - 1) & 0xFF
        self._update_nz_flags(self.registers.y)

    def op_asl(self, instruction: Instruction, operand: int) -> None:
        self._modify(instruction, operand, self._op_asl)

    def op_lsr(self, instruction: Instruction, operand: int) -> None:
        self._modify(instruction, operand, self._op_lsr)

    def op_rol(self, instruction: Instruction, operand: int) -> None:
        self._modify(instruction, operand, self._op_rol)

    def op_ror(self, instruction: Instruction, operand: int) -> None:
        self._modify(instruction, operand, self._op_ror)

    def op_jmp(self, _: Instruction, operand: int) -> None:
        self.registers.pc = operand

    def op_jsr(self, _: Instruction, operand: int) -> None:
        self._push_word((self.registers.pc - 1) & 0xFFFF)
        self.registers.pc = operand

    def op_rts(self, _: Instruction, _operand: int) -> None:
        self.registers.pc = (self._pull_word() + 1) & 0xFFFF

    def op_rti(self, _: Instruction, _operand: int) -> None:
        self._apply_status(self._pull_byte())
        self.registers.pc = self._pull_word()

    def op_nop(self, _: Instruction, _operand: int) -> None:
        return None

    def op_brk(self, _: Instruction, _operand: int) -> None:
        self.state = EngineState.HALTED
        debug_log("cpu", "halted at pc=%04x after %d instructions",
                  self.registers.pc, self.instruction_count + 1)

    def _branch_if(self, flag: int, expected: bool) -> Handler:
        def handler(_: Instruction, target: int) -> None:
            if self.registers.get_flag(flag) is expected:
                self.registers.pc = target

        return handler

    def _set_flag_to(self, flag: int, enabled: bool) -> Handler:
        def handler(_: Instruction, _operand: int) -> None:
            self.registers.set_flag(flag, enabled)

        return handler

    # ------------------------------------------------------------------
    # Operand helpers

    def _read_operand(self, instruction: Instruction, operand: int) -> int:
        if instruction.mode is AddressingMode.IMMEDIATE:
            return operand & 0xFF
        return self.memory.load8(operand)

    def _modify(self, instruction: Instruction, operand: int, mutate: Callable[[int], int]) -> int:
        """Read-modify-write on A (ACCUMULATOR mode) or memory; sets N and Z."""

        if instruction.mode is AddressingMode.ACCUMULATOR:
            result = mutate(self.registers.a) & 0xFF
            self.registers.a = result
        else:
            result = mutate(self.memory.load8(operand)) & 0xFF
            self.memory.store8(operand, result)
        self._update_nz_flags(result)
        return result

    # ------------------------------------------------------------------
    # Flag helpers

    def _update_nz_flags(self, value: int) -> None:
        zero, negative = compute_zero_and_negative(value)
        self.registers.set_flag(FLAG_Z, zero)
        self.registers.set_flag(FLAG_N, negative)

    def _apply_status(self, value: int) -> None:
        self.registers.p = ((value & ~FLAG_B) | FLAG_U) & 0xFF

    def _add8(self, x: int, y: int) -> int:
        carry = 1 if self.registers.get_flag(FLAG_C) else 0
        total = x + y + carry
        result = total & 0xFF
        overflow = (~(x ^ y) & (x ^ result) & 0x80) != 0
        self.registers.set_flag(FLAG_C, total > 0xFF)
        self.registers.set_flag(FLAG_V, overflow)
        self._update_nz_flags(result)
        return result

    def _compare(self, register: int, value: int) -> None:
        self.registers.set_flag(FLAG_C, register >= value)
        self._update_nz_flags((register - value) & 0xFF)

    def _op_asl(self, value: int) -> int:
        self.registers.set_flag(FLAG_C, (value & 0x80) != 0)
        return (value << 1) & 0xFF

    def _op_lsr(self, value: int) -> int:
        self.registers.set_flag(FLAG_C, (value & 0x01) != 0)
        return value >> 1

    def _op_rol(self, value: int) -> int:
        carry_in = 1 if self.registers.get_flag(FLAG_C) else 0
        self.registers.set_flag(FLAG_C, (value & 0x80) != 0)
        return ((value << 1) | carry_in) & 0xFF

    def _op_ror(self, value: int) -> int:
        carry_in = 0x80 if self.registers.get_flag(FLAG_C) else 0
        self.registers.set_flag(FLAG_C, (value & 0x01) != 0)
        return (value >> 1) | carry_in

    # ------------------------------------------------------------------
    # Stack helpers

    def _push_byte(self, value: int) -> None:
        self.memory.store8(self.STACK_BASE + self.registers.sp, value & 0xFF)
        self.registers.sp = (self.registers.sp - 1) & 0xFF

    def _pull_byte(self) -> int:
        self.registers.sp = (self.registers.sp + 1) & 0xFF
        return self.memory.load8(self.STACK_BASE + self.registers.sp)

    def _push_word(self, value: int) -> None:
        self._push_byte((value >> 8) & 0xFF)
        self._push_byte(value & 0xFF)

    def _pull_word(self) -> int:
        low = self._pull_byte()
        high = self._pull_byte()
        return (high << 8) | low
