"""Headless demo: a decimal counter drawn with the built-in font."""

import time

import numpy as np

from chip8vm import Chip8, load_config

# One loop of 16 instructions per frame:
#   200 00E0  clear screen
#   202 A300  I = 0x300
#   204 FD33  BCD of VD into [I, I+2]
#   206 F265  V0..V2 = digits
#   208 6A00  VA = 0 (x)
#   20A 6B00  VB = 0 (y)
#   20C F029  I = glyph of V0
#   20E DAB5  draw
#   210 7A06  x += 6
#   212 F129  I = glyph of V1
#   214 DAB5  draw
#   216 7A06  x += 6
#   218 F229  I = glyph of V2
#   21A DAB5  draw
#   21C 7D01  VD += 1
#   21E 1200  loop
PROGRAM = bytes([
    0x00, 0xE0, 0xA3, 0x00, 0xFD, 0x33, 0xF2, 0x65,
    0x6A, 0x00, 0x6B, 0x00, 0xF0, 0x29, 0xDA, 0xB5,
    0x7A, 0x06, 0xF1, 0x29, 0xDA, 0xB5, 0x7A, 0x06,
    0xF2, 0x29, 0xDA, 0xB5, 0x7D, 0x01, 0x12, 0x00,
])


def render(frame: np.ndarray) -> str:
    return "\n".join("".join("#" if pixel else "." for pixel in row[:18]) for row in frame[:5])


if __name__ == "__main__":
    config = load_config(overrides=["ticks_per_frame=16"])
    machine = Chip8(config)
    machine.load_program(PROGRAM)

    start = time.time()
    for frame_number in range(5):
        frame_start = time.time()
        fault = machine.run_frame()
        print(f"frame {frame_number}: {fault.name}")
        print(render(machine.framebuffer))
        time.sleep(max(0.0, machine.frame_interval - (time.time() - frame_start)))
    print(f"Elapsed: {time.time() - start:.2f}s, {machine!r}")
