"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.faults import Fault, set_fault, make_guarded_instruction
from chip8vm.stack import pop, is_empty


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """0000 - No operation."""
    return state


def unknown_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Unrecognised instruction, executed as a no-op."""
    return set_fault(state, Fault.UNKNOWN_OPCODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def _return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=address)


execute_return = make_guarded_instruction(
    lambda state, inst: is_empty(state.stack),
    Fault.CALL_STACK_UNDERFLOW,
    _return,
)
execute_return.__doc__ = """00EE - Return from subroutine."""
