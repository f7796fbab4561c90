"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import execute, fetch, step, load_rom
from chip8vm.decode import DecodedInstruction, Op, decode, nibbles
from chip8vm.faults import Fault, Chip8Error, RomTooLarge, InvalidKey
from chip8vm.timers import advance_timers, sound_active, sound_stops
from chip8vm.config import MachineConfig, load_config
from chip8vm.machine import Chip8
from chip8vm.constants import *

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "load_rom",
    "DecodedInstruction",
    "Op",
    "decode",
    "nibbles",
    "Fault",
    "Chip8Error",
    "RomTooLarge",
    "InvalidKey",
    "advance_timers",
    "sound_active",
    "sound_stops",
    "MachineConfig",
    "load_config",
    "Chip8",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "FONT_START",
    "FONT_DATA",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
