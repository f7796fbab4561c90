"""CHIP-8 delay and sound timer channels.

Both timers count down once per call to ``advance_timers``, which the host is
expected to invoke at 60 Hz independently of the instruction rate.
"""

import jax.numpy as jnp
from chip8vm.state import EmulatorState


def _countdown(timer: jnp.ndarray) -> jnp.ndarray:
    return jnp.where(timer > 0, timer - 1, timer).astype(jnp.uint8)


def advance_timers(state: EmulatorState) -> EmulatorState:
    """Decrement both timers, saturating at zero."""
    return state.replace(
        delay_timer=_countdown(state.delay_timer),
        sound_timer=_countdown(state.sound_timer),
    )


def sound_active(state: EmulatorState) -> jnp.ndarray:
    """Whether a tone should currently be playing."""
    return state.sound_timer > 0


def sound_stops(state: EmulatorState) -> jnp.ndarray:
    """Whether the next ``advance_timers`` ends the current tone (1 -> 0 edge)."""
    return state.sound_timer == 1
