"""Tests for fetch, step and ROM loading."""

import jax.numpy as jnp
import pytest
from chip8vm import (
    fetch, step, load_rom, Fault, RomTooLarge, FONT_DATA, MEMORY_SIZE, PROGRAM_START,
)
from chip8vm.constants import MAX_PROGRAM_SIZE


def at_pc(state, pc):
    return state.replace(pc=jnp.asarray(pc, dtype=jnp.uint16))


class TestPowerOn:
    """Test the initial state."""

    def test_font_loaded_at_zero(self, fresh_state):
        assert [int(b) for b in fresh_state.memory[:len(FONT_DATA)]] == list(FONT_DATA)

    def test_rest_of_low_memory_is_zero(self, fresh_state):
        assert jnp.sum(fresh_state.memory[len(FONT_DATA):]) == 0

    def test_registers_cleared(self, fresh_state):
        assert fresh_state.pc == PROGRAM_START
        assert jnp.sum(fresh_state.V) == 0
        assert fresh_state.I == 0
        assert fresh_state.stack.pointer == 0
        assert fresh_state.delay_timer == 0
        assert fresh_state.sound_timer == 0
        assert not bool(jnp.any(fresh_state.keypad))
        assert not bool(jnp.any(fresh_state.display))
        assert fresh_state.display.shape == (32, 64)


class TestFetch:
    """Test instruction fetch."""

    @pytest.mark.parametrize("hi,lo", [(0x00, 0x00), (0x12, 0x34), (0xFF, 0xFF), (0xA0, 0x0F)])
    def test_fetch_big_endian(self, fresh_state, hi, lo):
        state = load_rom(fresh_state, bytes([hi, lo]))

        state, instruction = fetch(state)

        assert instruction == hi * 256 + lo
        assert state.pc == PROGRAM_START + 2

    def test_fetch_last_full_word(self, fresh_state):
        memory = fresh_state.memory.at[MEMORY_SIZE - 2:].set(jnp.array([0xAB, 0xCD], dtype=jnp.uint8))
        state = at_pc(fresh_state.replace(memory=memory), MEMORY_SIZE - 2)

        state, instruction = fetch(state)

        assert instruction == 0xABCD
        assert int(state.fault) == Fault.NONE

    def test_fetch_past_end_faults(self, fresh_state):
        state = at_pc(fresh_state, MEMORY_SIZE - 1)

        state, _ = fetch(state)

        assert int(state.fault) == Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS
        assert state.pc == MEMORY_SIZE - 1


class TestStep:
    """Test the full fetch-decode-execute cycle."""

    def test_load_and_add_scenario(self, fresh_state):
        """6105 7103 leaves V1 = 8 and VF untouched."""
        state = fresh_state.replace(V=fresh_state.V.at[15].set(0x77))
        state = load_rom(state, bytes([0x61, 0x05, 0x71, 0x03]))

        state, _ = step(state)
        state, _ = step(state)

        assert state.V[1] == 8
        assert state.V[15] == 0x77
        assert state.pc == PROGRAM_START + 4

    def test_step_returns_instruction(self, fresh_state):
        state = load_rom(fresh_state, bytes([0x00, 0xE0]))

        _, instruction = step(state)

        assert instruction == 0x00E0

    def test_call_then_return(self, fresh_state):
        """2NNN then 00EE resumes right after the call."""
        state = load_rom(fresh_state, bytes([0x22, 0x04, 0x00, 0x00, 0x00, 0xEE]))

        state, _ = step(state)
        assert state.pc == 0x204
        state, _ = step(state)

        assert state.pc == 0x202
        assert state.stack.pointer == 0

    def test_unknown_opcode_advances(self, fresh_state):
        state = load_rom(fresh_state, bytes([0x5A, 0xB1]))

        state, _ = step(state)

        assert int(state.fault) == Fault.UNKNOWN_OPCODE
        assert state.pc == PROGRAM_START + 2

    def test_fault_cleared_on_next_step(self, fresh_state):
        state = load_rom(fresh_state, bytes([0xFF, 0xFF, 0x60, 0x01]))

        state, _ = step(state)
        assert int(state.fault) == Fault.UNKNOWN_OPCODE
        state, _ = step(state)

        assert int(state.fault) == Fault.NONE
        assert state.V[0] == 1

    def test_fatal_fault_rolls_back(self, fresh_state):
        """00EE with an empty stack leaves the machine exactly where it was."""
        state = load_rom(fresh_state, bytes([0x00, 0xEE]))

        result, _ = step(state)

        assert int(result.fault) == Fault.CALL_STACK_UNDERFLOW
        assert result.pc == state.pc
        assert bool(jnp.array_equal(result.memory, state.memory))

    def test_step_off_end_of_memory(self, fresh_state):
        state = at_pc(fresh_state, MEMORY_SIZE - 1)

        result, _ = step(state)

        assert int(result.fault) == Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS
        assert result.pc == MEMORY_SIZE - 1

    def test_step_does_not_touch_timers(self, fresh_state):
        state = fresh_state.replace(
            delay_timer=jnp.asarray(5, dtype=jnp.uint8),
            sound_timer=jnp.asarray(3, dtype=jnp.uint8),
        )

        state, _ = step(state)

        assert state.delay_timer == 5
        assert state.sound_timer == 3


class TestLoadRom:
    """Test program loading."""

    def test_load_rom_at_program_start(self, fresh_state):
        state = load_rom(fresh_state, b"\x12\x34\x56")

        assert [int(b) for b in state.memory[PROGRAM_START:PROGRAM_START + 3]] == [0x12, 0x34, 0x56]
        assert [int(b) for b in state.memory[:len(FONT_DATA)]] == list(FONT_DATA)

    def test_load_rom_filling_memory(self, fresh_state):
        state = load_rom(fresh_state, bytes([0xAA]) * MAX_PROGRAM_SIZE)

        assert state.memory[MEMORY_SIZE - 1] == 0xAA

    def test_load_rom_too_large(self, fresh_state):
        with pytest.raises(RomTooLarge) as excinfo:
            load_rom(fresh_state, bytes(MAX_PROGRAM_SIZE + 1))

        assert excinfo.value.size == MAX_PROGRAM_SIZE + 1
        assert excinfo.value.limit == MAX_PROGRAM_SIZE

    def test_load_empty_rom(self, fresh_state):
        state = load_rom(fresh_state, b"")
        assert bool(jnp.array_equal(state.memory, fresh_state.memory))


class TestProgramCounterBounds:
    """pc stays inside memory after every step."""

    def at_top(self, state, pc, *program):
        memory = state.memory.at[pc:pc + len(program)].set(jnp.array(program, dtype=jnp.uint8))
        return at_pc(state.replace(memory=memory), pc)

    def test_instruction_in_last_word_faults(self, fresh_state):
        """6001 at 0xFFE would leave pc at 0x1000."""
        state = self.at_top(fresh_state, MEMORY_SIZE - 2, 0x60, 0x01)

        result, instruction = step(state)

        assert instruction == 0x6001
        assert int(result.fault) == Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS
        assert result.pc == MEMORY_SIZE - 2
        assert result.V[0] == 0

    def test_jump_in_last_word_is_fine(self, fresh_state):
        state = self.at_top(fresh_state, MEMORY_SIZE - 2, 0x12, 0x00)

        result, _ = step(state)

        assert int(result.fault) == Fault.NONE
        assert result.pc == PROGRAM_START

    @pytest.mark.parametrize("pc", [MEMORY_SIZE - 4, MEMORY_SIZE - 2])
    def test_taken_skip_past_end_faults(self, fresh_state, pc):
        """3000 with V0 == 0 skips over the end of memory."""
        state = self.at_top(fresh_state, pc, 0x30, 0x00)

        result, _ = step(state)

        assert int(result.fault) == Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS
        assert result.pc == pc

    def test_untaken_skip_near_end_is_fine(self, fresh_state):
        state = self.at_top(fresh_state, MEMORY_SIZE - 4, 0x30, 0x01)

        result, _ = step(state)

        assert int(result.fault) == Fault.NONE
        assert result.pc == MEMORY_SIZE - 2

    def test_unknown_opcode_in_last_word_is_fatal(self, fresh_state):
        state = self.at_top(fresh_state, MEMORY_SIZE - 2, 0xFF, 0xFF)

        result, _ = step(state)

        assert int(result.fault) == Fault.PROGRAM_COUNTER_OUT_OF_BOUNDS
        assert result.pc == MEMORY_SIZE - 2
