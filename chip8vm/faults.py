"""CHIP-8 fault codes and host-side exceptions.

Faults raised while executing an instruction never leave the tick as Python
exceptions: they are recorded in ``EmulatorState.fault`` so they can be
produced inside traced JAX code. Exceptions are reserved for the boundary
operations (program loading, key input) that run on the host.
"""

import enum

import jax
import jax.numpy as jnp


class Fault(enum.IntEnum):
    """Outcome of a single tick."""
    NONE = 0
    UNKNOWN_OPCODE = 1
    PROGRAM_COUNTER_OUT_OF_BOUNDS = 2
    CALL_STACK_OVERFLOW = 3
    CALL_STACK_UNDERFLOW = 4
    MEMORY_OUT_OF_BOUNDS = 5

    @property
    def is_fatal(self) -> bool:
        return self not in (Fault.NONE, Fault.UNKNOWN_OPCODE)


class Chip8Error(Exception):
    """Base class for host-side CHIP-8 errors."""


class RomTooLarge(Chip8Error, ValueError):
    """Program image does not fit between PROGRAM_START and the end of memory."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"ROM is {size} bytes, at most {limit} bytes fit in memory")
        self.size = size
        self.limit = limit


class InvalidKey(Chip8Error, ValueError):
    """Key index outside of the 16-key pad."""

    def __init__(self, key: int):
        super().__init__(f"Key index must be in [0, 15], got {key}")
        self.key = key


def set_fault(state, fault: Fault):
    """Record ``fault`` on the state."""
    return state.replace(fault=jnp.asarray(int(fault), dtype=jnp.uint8))


def clear_fault(state):
    return set_fault(state, Fault.NONE)


def is_fatal(fault_code: jnp.ndarray) -> jnp.ndarray:
    """Traced counterpart of ``Fault.is_fatal``."""
    return (fault_code != int(Fault.NONE)) & (fault_code != int(Fault.UNKNOWN_OPCODE))


def make_guarded_instruction(condition_fn, fault: Fault, handler):
    """Factory for handlers that must fault instead of touching the state.

    When ``condition_fn(state, instruction)`` holds, the state is returned
    unchanged apart from ``fault``.
    """
    def guarded_instruction(state, instruction):
        return jax.lax.cond(
            condition_fn(state, instruction),
            lambda s, _: set_fault(s, fault),
            handler,
            state, instruction
        )
    return guarded_instruction
