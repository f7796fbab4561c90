"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax
import jax.numpy as jnp
from chip8vm import create_state, Chip8, MachineConfig
from chip8vm.logging import MachineLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def legacy_shift_state():
    """Provide a fresh state whose shifts read VY."""
    return create_state(shift_uses_vy=True)


@pytest.fixture
def machine():
    """Provide a machine with a quiet logger."""
    return Chip8(MachineConfig(), rng=jax.random.PRNGKey(0), logger=MachineLogger(log_level="CRITICAL"))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set V registers by name, e.g. ``set_registers(state, V1=3)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
