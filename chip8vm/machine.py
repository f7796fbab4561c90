"""Stateful CHIP-8 machine for host front-ends.

``Chip8`` owns an ``EmulatorState`` and drives the pure, jit-compiled
functions of the engine. It is meant to be used from a single thread: the
host loop calls ``tick`` at its chosen CPU rate and ``advance_timers`` at
60 Hz (``run_frame`` bundles both for the common 10-ticks-per-frame loop).
"""

from typing import Optional

import jax
import numpy as np

from chip8vm.config import MachineConfig
from chip8vm.constants import MEMORY_SIZE, NUM_KEYS
from chip8vm.emulator import step, load_rom
from chip8vm.faults import Fault, InvalidKey
from chip8vm.logging import MachineLogger
from chip8vm.state import EmulatorState, create_state
from chip8vm.timers import advance_timers, sound_active, sound_stops

_advance_timers = jax.jit(advance_timers)


class Chip8:
    """A CHIP-8 machine with the public contract consumed by front-ends.

    Args:
        config: Machine settings, defaults to ``MachineConfig()``
        rng: PRNG key used by CXNN. Defaults to ``PRNGKey(config.seed)``
        logger: Fault logger, defaults to a ``MachineLogger`` at
            ``config.log_level``
    """

    def __init__(
        self,
        config: Optional[MachineConfig] = None,
        rng: Optional[jax.random.PRNGKey] = None,
        logger: Optional[MachineLogger] = None,
    ):
        self.config = config or MachineConfig()
        self._initial_rng = rng if rng is not None else jax.random.PRNGKey(self.config.seed)
        self.logger = logger or MachineLogger(log_level=self.config.log_level)
        self.state: EmulatorState = self._power_on()
        self.last_fault = Fault.NONE
        self.halted = False
        self.sound_stopped = False

    def _power_on(self) -> EmulatorState:
        return create_state(self._initial_rng, shift_uses_vy=self.config.shift_uses_vy)

    def reset(self):
        """Return to the power-on state, clearing any halt."""
        self.state = self._power_on()
        self.last_fault = Fault.NONE
        self.halted = False
        self.sound_stopped = False
        self.logger.reset_counts()
        self.logger.debug("Machine reset")

    def load_program(self, rom: bytes):
        """Copy a program image into memory at 0x200.

        Raises:
            RomTooLarge: if the image does not fit; the machine is left untouched
        """
        self.state = load_rom(self.state, rom)
        self.logger.info(f"Loaded {len(rom)} byte program")

    def tick(self) -> Fault:
        """Run one fetch-decode-execute cycle and report its outcome.

        Once a fatal fault has been returned the machine stays halted, and
        every later call returns that fault without executing, until ``reset``.
        """
        if self.halted:
            return self.last_fault

        pc = int(self.state.pc)
        state, instruction = step(self.state)
        self.state = state
        fault = Fault(int(state.fault))
        self.last_fault = fault
        if fault != Fault.NONE:
            # nothing was fetched when pc already sat on the last byte
            opcode = None if pc + 1 >= MEMORY_SIZE else int(instruction)
            self.logger.log_fault(fault, pc, opcode)
            self.halted = fault.is_fatal
        return fault

    def advance_timers(self) -> bool:
        """Count both timers down once.

        The result is also kept in ``sound_stopped`` so hosts driving the
        machine through ``run_frame`` can see the edge.

        Returns:
            True when this call ended the current tone (sound timer went 1 -> 0)
        """
        self.sound_stopped = bool(sound_stops(self.state))
        self.state = _advance_timers(self.state)
        return self.sound_stopped

    def run_frame(self) -> Fault:
        """Execute ``ticks_per_frame`` ticks followed by one timer advance.

        Stops early on a fatal fault; timers still advance for the frame.
        Check ``sound_stopped`` afterwards for the end of a tone, and sleep
        ``frame_interval`` seconds between frames to run at ``timer_hz``.
        """
        fault = Fault.NONE
        for _ in range(self.config.ticks_per_frame):
            fault = self.tick()
            if fault.is_fatal:
                break
        self.advance_timers()
        return fault

    def set_key(self, key: int, pressed: bool):
        """Update the state of one key of the 16-key pad.

        Raises:
            InvalidKey: if ``key`` is outside [0, 15]
        """
        if not 0 <= key < NUM_KEYS:
            raise InvalidKey(key)
        self.state = self.state.replace(keypad=self.state.keypad.at[key].set(bool(pressed)))

    @property
    def framebuffer(self) -> np.ndarray:
        """Read-only (32, 64) boolean snapshot of the display, indexed [y, x]."""
        frame = np.array(self.state.display, dtype=np.bool_)
        frame.flags.writeable = False
        return frame

    @property
    def frame_interval(self) -> float:
        """Seconds between two timer ticks at the configured ``timer_hz``."""
        return 1.0 / self.config.timer_hz

    @property
    def sound_active(self) -> bool:
        return bool(sound_active(self.state))

    @property
    def unknown_opcode_count(self) -> int:
        return self.logger.fault_counts[Fault.UNKNOWN_OPCODE]

    @property
    def keypad(self) -> np.ndarray:
        return np.array(self.state.keypad, dtype=np.bool_)

    def __repr__(self) -> str:
        return (
            f"Chip8(pc=0x{int(self.state.pc):03X}, I=0x{int(self.state.I):03X}, "
            f"halted={self.halted}, last_fault={self.last_fault.name})"
        )
