"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FONT_START, GLYPH_SIZE, MEMORY_SIZE, NUM_REGISTERS
from chip8vm.faults import Fault, make_guarded_instruction


def _span_out_of_bounds(length_fn):
    """Condition: the memory span [I, I + length) runs past the end of memory."""
    def condition(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
        return jnp.astype(state.I, jnp.int32) + length_fn(instruction) > MEMORY_SIZE
    return condition


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register, wrapping at 16 bits. VF is not touched."""
    return state.replace(I=state.I + jnp.astype(state.V[instruction.x], jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Wait for key press.

    Busy-waits by rewinding the program counter, so the instruction is fetched
    again on the next tick while timers keep running.
    """
    def key_pressed_action(state):
        pressed_key = jnp.argmax(state.keypad)
        return state.replace(V=state.V.at[instruction.x].set(jnp.astype(pressed_key, jnp.uint8)))

    def wait_action(state):
        return state.replace(pc=state.pc - 2)

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = jnp.astype(state.V[instruction.x] & 0xF, jnp.uint16)
    return state.replace(I=FONT_START + digit * GLYPH_SIZE)


def _bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    value = state.V[instruction.x]
    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + jnp.astype(state.I, jnp.int32)
    return state.replace(memory=state.memory.at[indices].set(digits))


execute_bcd_conversion = make_guarded_instruction(
    _span_out_of_bounds(lambda inst: 3),
    Fault.MEMORY_OUT_OF_BOUNDS,
    _bcd_conversion,
)
execute_bcd_conversion.__doc__ = """FX33 - Store BCD representation of VX at I, I+1, I+2."""


def _register_span(instruction: DecodedInstruction) -> jnp.ndarray:
    return jnp.astype(instruction.x, jnp.int32) + 1


def _store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    current_memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    return state.replace(memory=state.memory.at[base_indices].set(new_memory_values, mode="drop"))


def _load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.astype(state.I, jnp.int32) + jnp.arange(NUM_REGISTERS)
    memory_values = state.memory.at[base_indices].get(mode="fill", fill_value=0)
    return state.replace(V=jnp.where(register_mask, memory_values, state.V))


execute_store_registers = make_guarded_instruction(
    _span_out_of_bounds(_register_span),
    Fault.MEMORY_OUT_OF_BOUNDS,
    _store_registers,
)
execute_store_registers.__doc__ = """FX55 - Store V0 through VX in memory starting at I."""

execute_load_registers = make_guarded_instruction(
    _span_out_of_bounds(_register_span),
    Fault.MEMORY_OUT_OF_BOUNDS,
    _load_registers,
)
execute_load_registers.__doc__ = """FX65 - Load V0 through VX from memory starting at I."""
