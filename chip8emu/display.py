"""Window, frame presentation and keyboard input for the emulator."""

from __future__ import annotations

import signal
from typing import Optional, Sequence

import pygame

from .machine import DISPLAY_HEIGHT, DISPLAY_WIDTH, Chip8

WIDTH = 1024
HEIGHT = 512
TITLE = "Emerald Emulator"

# Host key for each CHIP-8 key 0x0..0xF.
KEYMAP = (
    pygame.K_x, pygame.K_1, pygame.K_2, pygame.K_3,
    pygame.K_q, pygame.K_w, pygame.K_e, pygame.K_a,
    pygame.K_s, pygame.K_d, pygame.K_z, pygame.K_c,
    pygame.K_4, pygame.K_r, pygame.K_f, pygame.K_v,
)


def key_index(key: int) -> Optional[int]:
    """Return the CHIP-8 key bound to host ``key``, or None if it is unbound."""
    try:
        return KEYMAP.index(key)
    except ValueError:
        return None


def _to_color(argb: int) -> pygame.Color:
    return pygame.Color((argb >> 16) & 0xFF, (argb >> 8) & 0xFF, argb & 0xFF)


def _trap() -> None:
    """Raise a breakpoint trap so an attached debugger can take over."""
    trap = getattr(signal, "SIGTRAP", None)
    if trap is not None:
        signal.raise_signal(trap)


class Display:
    """A scaled window showing the 64x32 CHIP-8 screen and feeding its keypad."""

    def __init__(self) -> None:
        try:
            pygame.display.init()
            self.window = pygame.display.set_mode((WIDTH, HEIGHT))
        except pygame.error as exc:
            raise RuntimeError(f"could not create window: {exc}") from exc
        pygame.display.set_caption(TITLE)
        self.frame = pygame.Surface((DISPLAY_WIDTH, DISPLAY_HEIGHT))

    def draw_frame(self, pixels: Sequence[int]) -> None:
        """Show a frame of ARGB pixel values, row by row, scaled to the window."""
        expected = DISPLAY_WIDTH * DISPLAY_HEIGHT
        if len(pixels) != expected:
            raise ValueError(f"expected {expected} pixels, got {len(pixels)}")
        for position, argb in enumerate(pixels):
            row, column = divmod(position, DISPLAY_WIDTH)
            self.frame.set_at((column, row), _to_color(argb))
        self.window.fill((0, 0, 0))
        self.window.blit(pygame.transform.scale(self.frame, self.window.get_size()), (0, 0))
        pygame.display.flip()

    def set_key(self, cpu: Chip8, key: int, pressed: bool) -> None:
        """Record a host key press or release on the machine's keypad."""
        index = key_index(key)
        if index is not None:
            cpu.keypad[index] = 1 if pressed else 0

    def handle_events(self, cpu: Chip8) -> bool:
        """Process pending window events; return False once the user asks to quit."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                if event.key == pygame.K_RCTRL:
                    _trap()
                self.set_key(cpu, event.key, True)
            elif event.type == pygame.KEYUP:
                self.set_key(cpu, event.key, False)
        return True