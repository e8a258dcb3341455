from unittest import mock

import pygame
import pytest

from chip8emu.cli import main
from chip8emu.machine import MEM_SIZE, PROGRAM_START


@pytest.fixture(autouse=True)
def dummy_video(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")


def write_rom(tmp_path, data):
    path = tmp_path / "game.ch8"
    path.write_bytes(bytes(data))
    return str(path)


def test_requires_rom_argument():
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2


def test_missing_rom_fails(tmp_path, capsys):
    assert main([str(tmp_path / "absent.ch8")]) == 1
    assert "Failed to load ROM" in capsys.readouterr().err


def test_oversized_rom_fails(tmp_path):
    path = write_rom(tmp_path, [0] * (MEM_SIZE - PROGRAM_START))
    assert main([path]) == 1


def test_quit_event_ends_run(tmp_path):
    # 00E0 clears the screen, then 1200 loops forever.
    path = write_rom(tmp_path, [0x00, 0xE0, 0x12, 0x00])
    quit_event = pygame.event.Event(pygame.QUIT)
    with mock.patch("pygame.event.get", return_value=[quit_event]) as get:
        assert main([path]) == 0
    assert get.call_count == 1


def test_unknown_opcode_fails(tmp_path, capsys):
    path = write_rom(tmp_path, [0x00, 0x01])
    with mock.patch("pygame.event.get", return_value=[]):
        assert main([path]) == 1
    assert "unknown opcode" in capsys.readouterr().err