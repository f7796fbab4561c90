"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, MAX_SPRITE_HEIGHT, MEMORY_SIZE, FLAG_REGISTER,
)
from chip8vm.faults import Fault, make_guarded_instruction

# Sprite-local row and column offsets covering the tallest possible sprite
rows = jnp.arange(MAX_SPRITE_HEIGHT)
cols = jnp.arange(8)


def sprite_plane(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    """Boolean screen-sized mask of the pixels a DXYN instruction flips.

    Coordinates wrap around both screen edges.
    """
    row_mask = rows < instruction.n
    addresses = jnp.astype(state.I, jnp.int32) + rows
    sprite_bytes = state.memory.at[addresses].get(mode="fill", fill_value=0)
    bits = ((sprite_bytes[:, None] >> (7 - cols)[None, :]) & 1).astype(jnp.bool_)
    bits = bits & row_mask[:, None]

    ys = (jnp.astype(state.V[instruction.y], jnp.int32) + rows) % SCREEN_HEIGHT
    xs = (jnp.astype(state.V[instruction.x], jnp.int32) + cols) % SCREEN_WIDTH
    return jnp.zeros_like(state.display).at[ys[:, None], xs[None, :]].set(bits)


def _draw(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    sprite = sprite_plane(state, instruction)
    collision = jnp.any(state.display & sprite)
    return state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )


execute_display = make_guarded_instruction(
    lambda state, inst: jnp.astype(state.I, jnp.int32) + inst.n > MEMORY_SIZE,
    Fault.MEMORY_OUT_OF_BOUNDS,
    _draw,
)
execute_display.__doc__ = """DXYN - Draw sprite at (VX, VY) with height N."""
