"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER


def alu_set(vx: int, vy: int) -> int:
    """8XY0 - Set: VX = VY."""
    return vy


def alu_or(vx: int, vy: int) -> int:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy


def alu_and(vx: int, vy: int) -> int:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy


def alu_xor(vx: int, vy: int) -> int:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, set carry flag."""
    result = jnp.astype(vx, jnp.uint16) + vy
    carry = jnp.astype(result > 0xFF, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    return vx - vy, no_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1, VF = shifted out bit."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.uint8)
    return vy - vx, no_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1, VF = shifted out bit."""
    return vx << 1, (vx >> 7) & 1


def make_alu_instruction(operation):
    """Factory for 8XYN instructions that leave VF alone."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        result = operation(state.V[instruction.x], state.V[instruction.y])
        return state.replace(V=state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8)))
    return alu_instruction


def make_flag_alu_instruction(operation, shift=False):
    """Factory for 8XYN instructions that write a flag to VF.

    VF is written after VX so the flag wins when X is F. With ``shift`` set,
    the source operand follows the state's ``shift_uses_vy`` flag.
    """
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        if shift and state.shift_uses_vy:
            vx = vy
        result, flag = operation(vx, vy)
        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return state.replace(V=new_V)
    return alu_instruction


execute_move = make_alu_instruction(alu_set)
execute_or = make_alu_instruction(alu_or)
execute_and = make_alu_instruction(alu_and)
execute_xor = make_alu_instruction(alu_xor)
execute_add_registers = make_flag_alu_instruction(alu_add)
execute_sub_xy = make_flag_alu_instruction(alu_sub_xy)
execute_shift_right = make_flag_alu_instruction(alu_shift_right, shift=True)
execute_sub_yx = make_flag_alu_instruction(alu_sub_yx)
execute_shift_left = make_flag_alu_instruction(alu_shift_left, shift=True)
