"""Main CHIP-8 emulator execution engine."""

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chip8vm.state import EmulatorState
from chip8vm.decode import Op, decode
from chip8vm.constants import MEMORY_SIZE, PROGRAM_START, MAX_PROGRAM_SIZE
from chip8vm.faults import Fault, RomTooLarge, set_fault, clear_fault, is_fatal
from chip8vm.instructions.system import (
    no_op, unknown_instruction, execute_clear_screen, execute_return
)
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8vm.instructions.alu import (
    execute_move, execute_or, execute_and, execute_xor, execute_add_registers,
    execute_sub_xy, execute_shift_right, execute_sub_yx, execute_shift_left
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

HANDLERS = {
    Op.NOP: no_op,
    Op.CLEAR_SCREEN: execute_clear_screen,
    Op.RETURN: execute_return,
    Op.JUMP: execute_jump,
    Op.CALL: execute_call,
    Op.SKIP_EQ_IMM: execute_skip_if_equal_immediate,
    Op.SKIP_NE_IMM: execute_skip_if_not_equal_immediate,
    Op.SKIP_EQ_REG: execute_skip_if_equal_register,
    Op.SET_IMM: execute_set,
    Op.ADD_IMM: execute_add,
    Op.MOVE: execute_move,
    Op.OR: execute_or,
    Op.AND: execute_and,
    Op.XOR: execute_xor,
    Op.ADD: execute_add_registers,
    Op.SUB: execute_sub_xy,
    Op.SHIFT_RIGHT: execute_shift_right,
    Op.SUB_REVERSE: execute_sub_yx,
    Op.SHIFT_LEFT: execute_shift_left,
    Op.SKIP_NE_REG: execute_skip_if_not_equal_register,
    Op.SET_INDEX: execute_set_index,
    Op.JUMP_OFFSET: execute_jump_with_offset,
    Op.RANDOM: execute_random,
    Op.DRAW: execute_display,
    Op.SKIP_KEY: execute_skip_if_key,
    Op.SKIP_NOT_KEY: execute_skip_if_not_key,
    Op.GET_DELAY: execute_get_delay_timer,
    Op.WAIT_KEY: execute_wait_for_key,
    Op.SET_DELAY: execute_set_delay_timer,
    Op.SET_SOUND: execute_set_sound_timer,
    Op.ADD_INDEX: execute_add_to_index,
    Op.FONT_CHARACTER: execute_font_character,
    Op.BCD: execute_bcd_conversion,
    Op.STORE_REGISTERS: execute_store_registers,
    Op.LOAD_REGISTERS: execute_load_registers,
    Op.UNKNOWN: unknown_instruction,
}

_BRANCHES = [HANDLERS[op] for op in Op]


@jax.jit
def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    The state's ``fault`` field reports the outcome. Guarded handlers leave
    the rest of the state untouched when they fault.
    """
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.kind, _BRANCHES, clear_fault(state), decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch next instruction from memory.

    Faults with PROGRAM_COUNTER_OUT_OF_BOUNDS, leaving ``pc`` where it is,
    when the instruction would straddle the end of memory.
    """
    in_bounds = jnp.astype(state.pc, jnp.int32) + 1 < MEMORY_SIZE
    instruction = jnp.where(
        in_bounds,
        _pack_u16(state.memory[state.pc], state.memory[state.pc + 1]),
        jnp.zeros((), dtype=jnp.uint16),
    )
    return jax.lax.cond(
        in_bounds,
        lambda s: s.replace(pc=s.pc + 2),
        lambda s: set_fault(s, Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS),
        state
    ), instruction


@jax.jit
def step(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Run one fetch-decode-execute cycle.

    A fatal fault rolls the whole cycle back: the returned state equals the
    input apart from its ``fault`` field. An instruction that leaves ``pc``
    outside of memory faults with PROGRAM_COUNTER_OUT_OF_BOUNDS. Timers are
    not touched.
    """
    cleared = clear_fault(state)
    fetched, instruction = fetch(cleared)
    executed = jax.lax.cond(
        fetched.fault == int(Fault.NONE),
        execute,
        lambda s, _: s,
        fetched, instruction
    )
    # pc must stay inside memory after every instruction
    escaped = ~is_fatal(executed.fault) & (jnp.astype(executed.pc, jnp.int32) >= MEMORY_SIZE)
    executed = executed.replace(fault=jnp.where(
        escaped,
        jnp.asarray(int(Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS), dtype=jnp.uint8),
        executed.fault,
    ))
    return jax.lax.cond(
        is_fatal(executed.fault),
        lambda s: cleared.replace(fault=s.fault),
        lambda s: s,
        executed
    ), instruction


def load_rom(state: EmulatorState, rom: bytes) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    if len(rom) > MAX_PROGRAM_SIZE:
        raise RomTooLarge(len(rom), MAX_PROGRAM_SIZE)
    rom_array = jnp.asarray(np.frombuffer(bytes(rom), dtype=np.uint8))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom)].set(rom_array)
    return state.replace(memory=new_memory)
