"""The CHIP-8 virtual machine: memory, registers, timers and instruction set."""

from __future__ import annotations

import logging
import random
import time
from os import PathLike
from typing import Protocol, Sequence, Union

log = logging.getLogger(__name__)

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
DISPLAY_SIZE = DISPLAY_WIDTH * DISPLAY_HEIGHT
MEM_SIZE = 4096
PROGRAM_START = 0x200
STACK_DEPTH = 16
REGISTER_COUNT = 16
KEY_COUNT = 16
FONT_CHAR_SIZE = 5
PIXEL_COLOR = 0x0050FF50
CYCLE_DELAY = 0.0014
TIMER_PERIOD_MS = 4

FONTSET = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)


class RomError(Exception):
    """Raised when a ROM cannot be loaded or executes an invalid instruction."""


class FrameSink(Protocol):
    def draw_frame(self, pixels: Sequence[int]) -> None: ...


class Chip8:
    """A CHIP-8 interpreter with 4 KiB of memory and a 64x32 monochrome screen."""

    def __init__(self) -> None:
        self._rng = random.Random()
        self.needs_draw = False
        self.reset()

    def reset(self) -> None:
        """Clear all machine state and load the built-in font."""
        self.memory = bytearray(MEM_SIZE)
        self.memory[: len(FONTSET)] = FONTSET
        self.registers = bytearray(REGISTER_COUNT)
        self.stack: list[int] = []
        self.keypad = bytearray(KEY_COUNT)
        self.screen = bytearray(DISPLAY_SIZE)
        self.pc = PROGRAM_START
        self.index = 0
        self.opcode = 0
        self.delay_timer = 0
        self.last_tick = time.monotonic()

    def load(self, path: Union[str, PathLike]) -> None:
        """Reset the machine and load the ROM stored at ``path``."""
        log.info("Loading ROM...")
        try:
            with open(path, "rb") as rom:
                data = rom.read()
        except OSError as exc:
            raise RomError(f"failed to load ROM: {exc}") from exc
        log.info("ROM read successfully.")
        self.load_bytes(data)

    def load_bytes(self, data: bytes) -> None:
        """Reset the machine and place ``data`` at the program start address."""
        self.reset()
        if len(data) >= MEM_SIZE - PROGRAM_START:
            raise RomError("not enough space in memory available for this ROM")
        self.memory[PROGRAM_START : PROGRAM_START + len(data)] = data

    def step(self) -> None:
        """Fetch and execute a single instruction."""
        if self.pc + 1 >= MEM_SIZE:
            raise RomError(f"program counter out of memory: {self.pc:#05x}")
        self.opcode = (self.memory[self.pc] << 8) | self.memory[self.pc + 1]
        self._execute(self.opcode)

    def tick_timer(self) -> None:
        """Decrement the delay timer once enough wall-clock time has passed."""
        now = time.monotonic()
        elapsed_ms = int((now - self.last_tick) * 1000)
        if self.delay_timer > 0 and elapsed_ms > TIMER_PERIOD_MS:
            self.delay_timer -= 1
            self.last_tick = now

    def cycle(self) -> None:
        """Run one instruction, update the timer and pause briefly."""
        self.step()
        self.tick_timer()
        time.sleep(CYCLE_DELAY)

    def frame_pixels(self) -> list[int]:
        """Return the screen as 32-bit ARGB pixel values."""
        return [PIXEL_COLOR * pixel for pixel in self.screen]

    def draw(self, display: FrameSink) -> bool:
        """Send the frame to ``display`` if the screen changed; return whether it did."""
        if not self.needs_draw:
            return False
        display.draw_frame(self.frame_pixels())
        self.needs_draw = False
        return True

    # -- instruction execution -------------------------------------------

    def _advance(self, skip: bool = False) -> None:
        self.pc = (self.pc + (4 if skip else 2)) & 0xFFFF

    def _unknown(self, op: int) -> None:
        raise RomError(f"ROM includes unknown opcode {op:04X}")

    def _execute(self, op: int) -> None:
        x = (op >> 8) & 0xF
        y = (op >> 4) & 0xF
        n = op & 0xF
        nn = op & 0xFF
        nnn = op & 0xFFF
        v = self.registers

        match op >> 12:
            case 0x0:
                if n == 0x0:
                    self.screen[:] = bytes(DISPLAY_SIZE)
                    self.needs_draw = True
                    self._advance()
                elif n == 0xE:
                    if not self.stack:
                        raise RomError("return with an empty stack")
                    self.pc = self.stack.pop()
                    self._advance()
                else:
                    self._unknown(op)
            case 0x1:
                self.pc = nnn
            case 0x2:
                if len(self.stack) >= STACK_DEPTH:
                    raise RomError("stack overflow")
                self.stack.append(self.pc)
                self.pc = nnn
            case 0x3:
                self._advance(v[x] == nn)
            case 0x4:
                self._advance(v[x] != nn)
            case 0x5:
                self._advance(v[x] == v[y])
            case 0x6:
                v[x] = nn
                self._advance()
            case 0x7:
                v[x] = (v[x] + nn) & 0xFF
                self._advance()
            case 0x8:
                self._execute_arithmetic(op, x, y, n)
            case 0x9:
                self._advance(v[x] != v[y])
            case 0xA:
                self.index = nnn
                self._advance()
            case 0xB:
                self.pc = (nnn + v[0]) & 0xFFFF
            case 0xC:
                v[x] = self._rng.randrange(256) & nn
                self._advance()
            case 0xD:
                self._draw_sprite(v[x], v[y], n)
                self._advance()
            case 0xE:
                if n == 0xE:
                    self._advance(bool(self.keypad[v[x] % KEY_COUNT]))
                elif n == 0x1:
                    self._advance(not self.keypad[v[x] % KEY_COUNT])
                else:
                    self._unknown(op)
            case 0xF:
                self._execute_misc(op, x, nn)

    def _execute_arithmetic(self, op: int, x: int, y: int, n: int) -> None:
        v = self.registers
        match n:
            case 0x0:
                v[x] = v[y]
            case 0x1:
                v[x] |= v[y]
            case 0x2:
                v[x] &= v[y]
            case 0x3:
                v[x] ^= v[y]
            case 0x4:
                v[0xF] = 1 if v[x] <= v[y] else 0
                v[x] = (v[x] + v[y]) & 0xFF
            case 0x5:
                v[0xF] = 0 if v[x] <= v[y] else 1
                v[x] = (v[x] - v[y]) & 0xFF
            case 0x6:
                v[0xF] = v[x] & 0x1
                v[x] >>= 1
            case 0x7:
                v[0xF] = 0 if v[y] <= v[x] else 1
                v[x] = (v[y] - v[x]) & 0xFF
            case 0xE:
                v[0xF] = v[x] & 0xF
                v[x] = (v[x] << 1) & 0xFF
            case _:
                self._unknown(op)
        self._advance()

    def _draw_sprite(self, vx: int, vy: int, height: int) -> None:
        v = self.registers
        v[0xF] = 0
        for row in range(height):
            sprite = self.memory[(self.index + row) % MEM_SIZE]
            for column in range(8):
                if sprite & (0x80 >> column):
                    position = ((vx + column) + (vy + row) * DISPLAY_WIDTH) % DISPLAY_SIZE
                    if self.screen[position] == 1:
                        v[0xF] = 1
                    self.screen[position] ^= 1
        self.needs_draw = True

    def _execute_misc(self, op: int, x: int, nn: int) -> None:
        v = self.registers
        match nn:
            case 0x07:
                v[x] = self.delay_timer
            case 0x0A:
                pressed = [key for key, down in enumerate(self.keypad) if down]
                if not pressed:
                    return
                v[x] = pressed[-1]
            case 0x15:
                self.delay_timer = v[x]
            case 0x18:
                pass  # sound timer is not emulated
            case 0x1E:
                v[0xF] = 1 if self.index + v[x] > 0xFFF else 0
                self.index = (self.index + v[x]) & 0xFFFF
            case 0x29:
                self.index = v[x] * FONT_CHAR_SIZE
            case 0x33:
                value = v[x]
                self.memory[self.index] = value // 100
                self.memory[self.index + 1] = (value // 10) % 10
                self.memory[self.index + 2] = value % 10
            case 0x55:
                self.memory[self.index : self.index + x + 1] = v[: x + 1]
                self.index = (self.index + x + 1) & 0xFFFF
            case 0x65:
                v[: x + 1] = self.memory[self.index : self.index + x + 1]
                self.index = (self.index + x + 1) & 0xFFFF
            case _:
                self._unknown(op)
        self._advance()