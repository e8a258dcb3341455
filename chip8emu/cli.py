"""Command-line entry point: run a ROM in a window until the user quits."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

import pygame

from .display import Display
from .machine import Chip8, RomError


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load the ROM named on the command line and run it; return an exit status."""
    parser = argparse.ArgumentParser(prog="chip8", description="Run a CHIP-8 ROM.")
    parser.add_argument("rom", help="path of the ROM file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    cpu = Chip8()
    try:
        cpu.load(args.rom)
    except RomError as exc:
        print(f"Failed to load ROM: {exc}", file=sys.stderr)
        return 1

    try:
        display = Display()
        while True:
            cpu.cycle()
            cpu.draw(display)
            if not display.handle_events(cpu):
                return 0
    except (RomError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        pygame.quit()


if __name__ == "__main__":
    sys.exit(main())