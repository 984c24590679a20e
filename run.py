"""Command-line entry point for the 6502 instruction engine.

Loads a raw program image (or a built-in ``LDA #$05; BRK`` demo), runs it
until BRK and prints the final register state.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pyoldnes.bus import DEFAULT_LOAD_ADDRESS, BusError
from pyoldnes.cpu import CPUError
from pyoldnes.loader import ProgramFormatError, load_program_from_path
from pyoldnes.system import Machine, MachineConfig, create_machine

DEMO_PROGRAM = bytes([0xA9, 0x05, 0x00])


def _int_auto(text: str) -> int:
    return int(text, 0)


def _print_trace(machine: Machine) -> None:
    if machine.trace is None:
        return
    for line in machine.trace.format_entries():
        print(line)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run.py",
        description="6502 instruction engine",
    )
    parser.add_argument(
        "--program",
        type=Path,
        help="Raw program image to load (default: built-in LDA #$05; BRK)",
    )
    parser.add_argument(
        "--load-address",
        type=_int_auto,
        default=DEFAULT_LOAD_ADDRESS,
        help="Address the image is copied to and executed from (default: 0x8000)",
    )
    parser.add_argument(
        "--little-endian-operands",
        action="store_true",
        help="Assemble 16-bit operands low byte first, as 6502 hardware does",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Stop after this many instructions even if BRK was not reached",
    )
    parser.add_argument(
        "--trace",
        type=int,
        default=0,
        metavar="N",
        help="Print the last N executed instructions",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.program and not args.program.exists():
        parser.error(f"Program file not found: {args.program}")
    if args.trace < 0:
        parser.error("--trace must not be negative")

    try:
        config = MachineConfig(
            operand_byte_order="little" if args.little_endian_operands else "big",
            trace_capacity=args.trace,
            load_address=args.load_address,
        )
    except ValueError as exc:
        parser.error(str(exc))

    machine = create_machine(config)
    try:
        if args.program:
            load_program_from_path(args.program, machine.cpu)
        else:
            machine.load(DEMO_PROGRAM)
        result = machine.run(args.max_steps)
    except (BusError, CPUError, ProgramFormatError) as exc:
        _print_trace(machine)
        parser.exit(1, f"run.py: {exc}\n")

    _print_trace(machine)
    status = "halted" if result.halted else "stopped"
    print(f"{status} after {result.steps} instructions: {result.registers.format()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
