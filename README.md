# chip8emu

chip8emu is a CHIP-8 interpreter. It loads a ROM image, runs it, and draws the 64×32 screen in a 1024×512 pygame window titled "Emerald Emulator".

## Installation

```
pip install chip8emu
```

To also install the test dependencies:

```
pip install "chip8emu[test]"
```

## Running a ROM

```
chip8emu path/to/game.ch8
```

The command takes exactly one argument, the path of the ROM file. Its exit status is:

- `0` when you quit with Escape or by closing the window;
- `1` when the ROM cannot be read or does not fit in memory, when the window cannot be created, or when the program hits an error while running. The error is printed to standard error. Errors while running include an unknown opcode, a return with an empty stack, a stack overflow (more than 16 nested calls) and a program counter that runs past the end of memory;
- `2` when the arguments are wrong. In that case a usage message is printed.

While the ROM is running, pressing the right Ctrl key raises `SIGTRAP` on platforms that have that signal, so an attached debugger can stop the program.

## Keys

The CHIP-8 hex keypad maps onto the keyboard like this:

| Keypad | Key | Keypad | Key |
|--------|-----|--------|-----|
| 0      | X   | 8      | S   |
| 1      | 1   | 9      | D   |
| 2      | 2   | A      | Z   |
| 3      | 3   | B      | C   |
| 4      | Q   | C      | 4   |
| 5      | W   | D      | R   |
| 6      | E   | E      | F   |
| 7      | A   | F      | V   |

## Using the machine from Python

`chip8emu.machine.Chip8` is the interpreter core. It needs no window.

```python
from chip8emu.machine import Chip8, RomError

cpu = Chip8()
try:
    cpu.load("game.ch8")
except RomError as exc:
    print(exc)

cpu.step()                   # fetch and execute one instruction
cpu.tick_timer()             # count down the delay timer
pixels = cpu.frame_pixels()  # 2048 colour values, one per screen pixel
```

- `Chip8.load(path)` resets the machine and loads a ROM file at address `0x200`. `Chip8.load_bytes(data)` does the same from a bytes object. Both raise `RomError` if the ROM cannot be read or does not fit.
- `Chip8.reset()` puts the machine back to its power-on state, with the built-in font at the start of memory.
- `Chip8.step()` executes one instruction. It raises `RomError` on an unknown opcode, on a stack overflow or underflow, and when the program counter leaves memory.
- `Chip8.tick_timer()` decrements the delay timer once more than 4 ms of wall-clock time have passed since its last decrement.
- `Chip8.cycle()` runs `step()` and `tick_timer()`, then sleeps for 1.4 ms.
- `Chip8.frame_pixels()` returns the screen row by row. A lit pixel is `0x0050FF50` and an unlit pixel is `0`.
- `Chip8.draw(display)` passes the frame to `display.draw_frame(...)` only when the screen has changed since the last draw. It returns whether it drew.

The machine state is kept in plain attributes: `memory`, `registers`, `stack`, `keypad`, `screen`, `pc`, `index`, `opcode` and `delay_timer`.

`chip8emu.display.Display` opens the pygame window. If the window cannot be created, it raises `RuntimeError`.

- `Display.draw_frame(pixels)` shows 2048 ARGB values scaled to the window. Any other count raises `ValueError`.
- `Display.set_key(cpu, key, pressed)` sets or clears the keypad slot for a pygame key code.
- `Display.handle_events(cpu)` processes pending events and returns `False` once the user asks to quit.
- `key_index(key)` returns the keypad slot for a pygame key code, or `None` if the key is not mapped.

## Limitations

- There is no sound. The sound-timer instruction (`FX18`) is accepted but does nothing.
- Only the delay timer counts down.
- Instructions outside the original CHIP-8 set stop the program with an error. This includes SUPER-CHIP and XO-CHIP extensions.