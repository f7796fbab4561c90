"""Tests for console logging."""

from chip8vm import Fault
from chip8vm.logging import ConsoleLogger, MachineLogger


def test_level_filtering(capsys):
    logger = ConsoleLogger(log_level="WARNING", use_colors=False, show_timestamps=False)

    logger.info("hidden")
    logger.warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "[ WARNING][Chip8] shown" in out


def test_log_fault_counts_and_levels(capsys):
    logger = MachineLogger(use_colors=False, show_timestamps=False)

    logger.log_fault(Fault.UNKNOWN_OPCODE, 0x200, 0xFFFF)
    logger.log_fault(Fault.UNKNOWN_OPCODE, 0x202, 0x5AB1)
    logger.log_fault(Fault.CALL_STACK_UNDERFLOW, 0x204, 0x00EE)
    logger.log_fault(Fault.NONE, 0x206)

    out = capsys.readouterr().out
    assert "UNKNOWN_OPCODE at 0x200 (opcode 0xFFFF), treated as no-op" in out
    assert "[   ERROR][Chip8] CALL_STACK_UNDERFLOW at 0x204" in out
    assert logger.fault_counts[Fault.UNKNOWN_OPCODE] == 2
    assert logger.fault_counts[Fault.CALL_STACK_UNDERFLOW] == 1
    assert Fault.NONE not in logger.fault_counts


def test_fault_without_opcode(capsys):
    logger = MachineLogger(use_colors=False, show_timestamps=False)

    logger.log_fault(Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS, 0xFFF)

    assert "PROGRAM_COUNTER_OUT_OF_BOUNDS at 0xFFF, machine halted" in capsys.readouterr().out
