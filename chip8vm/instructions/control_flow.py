"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import MEMORY_SIZE
from chip8vm.faults import Fault, make_guarded_instruction
from chip8vm.stack import push, is_full


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.astype(instruction.nnn, jnp.uint16))


def _call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


execute_call = make_guarded_instruction(
    lambda state, inst: is_full(state.stack),
    Fault.CALL_STACK_OVERFLOW,
    _call,
)
execute_call.__doc__ = """2NNN - Call subroutine at NNN."""


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=s.pc + 2),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

execute_skip_if_key = make_skip_instruction(
    lambda state, inst: state.keypad[state.V[inst.x] & 0xF]
)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: ~state.keypad[state.V[inst.x] & 0xF]
)


def _jump_target(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    return jnp.astype(instruction.nnn, jnp.int32) + jnp.astype(state.V[0], jnp.int32)


def _jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    return state.replace(pc=jnp.astype(_jump_target(state, instruction), jnp.uint16))


execute_jump_with_offset = make_guarded_instruction(
    lambda state, inst: _jump_target(state, inst) >= MEMORY_SIZE,
    Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS,
    _jump_with_offset,
)
execute_jump_with_offset.__doc__ = """BNNN - Jump to address NNN + V0."""
