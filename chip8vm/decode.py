"""CHIP-8 instruction decoding."""

import enum

import jax.numpy as jnp
from chex import dataclass


class Op(enum.IntEnum):
    """Instruction kinds, in handler-table order."""
    NOP = 0                  # 0000
    CLEAR_SCREEN = 1         # 00E0
    RETURN = 2               # 00EE
    JUMP = 3                 # 1NNN
    CALL = 4                 # 2NNN
    SKIP_EQ_IMM = 5          # 3XNN
    SKIP_NE_IMM = 6          # 4XNN
    SKIP_EQ_REG = 7          # 5XY0
    SET_IMM = 8              # 6XNN
    ADD_IMM = 9              # 7XNN
    MOVE = 10                # 8XY0
    OR = 11                  # 8XY1
    AND = 12                 # 8XY2
    XOR = 13                 # 8XY3
    ADD = 14                 # 8XY4
    SUB = 15                 # 8XY5
    SHIFT_RIGHT = 16         # 8XY6
    SUB_REVERSE = 17         # 8XY7
    SHIFT_LEFT = 18          # 8XYE
    SKIP_NE_REG = 19         # 9XY0
    SET_INDEX = 20           # ANNN
    JUMP_OFFSET = 21         # BNNN
    RANDOM = 22              # CXNN
    DRAW = 23                # DXYN
    SKIP_KEY = 24            # EX9E
    SKIP_NOT_KEY = 25        # EXA1
    GET_DELAY = 26           # FX07
    WAIT_KEY = 27            # FX0A
    SET_DELAY = 28           # FX15
    SET_SOUND = 29           # FX18
    ADD_INDEX = 30           # FX1E
    FONT_CHARACTER = 31      # FX29
    BCD = 32                 # FX33
    STORE_REGISTERS = 33     # FX55
    LOAD_REGISTERS = 34      # FX65
    UNKNOWN = 35


# (mask, value, kind): an instruction is of ``kind`` when ``raw & mask == value``.
PATTERNS = (
    (0xFFFF, 0x0000, Op.NOP),
    (0xFFFF, 0x00E0, Op.CLEAR_SCREEN),
    (0xFFFF, 0x00EE, Op.RETURN),
    (0xF000, 0x1000, Op.JUMP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SKIP_EQ_IMM),
    (0xF000, 0x4000, Op.SKIP_NE_IMM),
    (0xF00F, 0x5000, Op.SKIP_EQ_REG),
    (0xF000, 0x6000, Op.SET_IMM),
    (0xF000, 0x7000, Op.ADD_IMM),
    (0xF00F, 0x8000, Op.MOVE),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD),
    (0xF00F, 0x8005, Op.SUB),
    (0xF00F, 0x8006, Op.SHIFT_RIGHT),
    (0xF00F, 0x8007, Op.SUB_REVERSE),
    (0xF00F, 0x800E, Op.SHIFT_LEFT),
    (0xF00F, 0x9000, Op.SKIP_NE_REG),
    (0xF000, 0xA000, Op.SET_INDEX),
    (0xF000, 0xB000, Op.JUMP_OFFSET),
    (0xF000, 0xC000, Op.RANDOM),
    (0xF000, 0xD000, Op.DRAW),
    (0xF0FF, 0xE09E, Op.SKIP_KEY),
    (0xF0FF, 0xE0A1, Op.SKIP_NOT_KEY),
    (0xF0FF, 0xF007, Op.GET_DELAY),
    (0xF0FF, 0xF00A, Op.WAIT_KEY),
    (0xF0FF, 0xF015, Op.SET_DELAY),
    (0xF0FF, 0xF018, Op.SET_SOUND),
    (0xF0FF, 0xF01E, Op.ADD_INDEX),
    (0xF0FF, 0xF029, Op.FONT_CHARACTER),
    (0xF0FF, 0xF033, Op.BCD),
    (0xF0FF, 0xF055, Op.STORE_REGISTERS),
    (0xF0FF, 0xF065, Op.LOAD_REGISTERS),
)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    kind: int    # Op value, selects the handler
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def nibbles(instruction: int) -> tuple[int, int, int, int]:
    """Split a 16-bit instruction into its four nibbles, most significant first."""
    return (
        (instruction >> 12) & 0xF,
        (instruction >> 8) & 0xF,
        (instruction >> 4) & 0xF,
        instruction & 0xF,
    )


def classify(raw: jnp.ndarray) -> jnp.ndarray:
    """Map a 16-bit instruction to its ``Op`` value."""
    kind = jnp.asarray(int(Op.UNKNOWN), dtype=jnp.int32)
    for mask, value, op in reversed(PATTERNS):
        kind = jnp.where((raw & mask) == value, int(op), kind)
    return kind


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    raw = jnp.asarray(instruction).astype(jnp.uint16)
    return DecodedInstruction(
        raw=raw,
        kind=classify(raw),
        opcode=((raw & 0xF000) >> 12).astype(jnp.uint8),
        x=((raw & 0x0F00) >> 8).astype(jnp.uint8),
        y=((raw & 0x00F0) >> 4).astype(jnp.uint8),
        n=(raw & 0x000F).astype(jnp.uint8),
        nn=(raw & 0x00FF).astype(jnp.uint8),
        nnn=(raw & 0x0FFF).astype(jnp.uint16)
    )
