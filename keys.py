from enum import Enum
from dataclasses import dataclass


class KeyCode(Enum):
    """
    Decoded keys as produced by the terminal drivers.
    Printable input arrives as Char with the character
    carried on the event.
    """
    # KeyCode {{{
    Char = 0
    Enter = 1
    Backspace = 2
    Esc = 3
    Tab = 4
    BackTab = 5
    Up = 6
    Down = 7
    Left = 8
    Right = 9
    Unknown = 10
    # }}}


@dataclass(frozen=True)
class KeyEvent:
    # KeyEvent {{{
    code: KeyCode
    char: str = ""
    ctrl: bool = False

    @classmethod
    def of(cls, char: str, ctrl: bool = False) -> "KeyEvent":
        return cls(KeyCode.Char, char, ctrl)

    def is_char(self, char: str) -> bool:
        return self.code == KeyCode.Char and not self.ctrl \
            and self.char == char

    def is_ctrl(self, char: str) -> bool:
        return self.code == KeyCode.Char and self.ctrl \
            and self.char == char
    # }}}


def decode_char(char: str) -> KeyEvent:
    """
    Maps a single raw character onto a key event. Escape
    sequences are left to the platform drivers.
    """
    # decode_char {{{
    match char:
        case "\r":
            return KeyEvent(KeyCode.Enter)
        case "\n":
            return KeyEvent.of("j", ctrl=True)     # Ctrl+j
        case "\x0b":
            return KeyEvent.of("k", ctrl=True)     # Ctrl+k
        case "\t":
            return KeyEvent(KeyCode.Tab)
        case "\x7f" | "\x08":
            return KeyEvent(KeyCode.Backspace)
        case "\x1b":
            return KeyEvent(KeyCode.Esc)

    if ord(char) < 0x20:
        # Remaining control characters, Ctrl+a is 0x01
        return KeyEvent.of(chr(ord(char) + 0x60), ctrl=True)

    return KeyEvent.of(char)
    # }}}
