from keys import KeyCode, KeyEvent, decode_char
from errors import TerminalError
from typing import Optional
import termios
import select
import tty
import sys
import os


ESC = "\x1b"
ESC_WAIT = 0.05     # Seconds to wait for the rest of an escape sequence

SEQUENCES = {
    "[A": KeyEvent(KeyCode.Up),
    "[B": KeyEvent(KeyCode.Down),
    "[C": KeyEvent(KeyCode.Right),
    "[D": KeyEvent(KeyCode.Left),
    "[Z": KeyEvent(KeyCode.BackTab),
    "OA": KeyEvent(KeyCode.Up),
    "OB": KeyEvent(KeyCode.Down),
    "OC": KeyEvent(KeyCode.Right),
    "OD": KeyEvent(KeyCode.Left),
}


def initialize() -> list:
    """
    This setup function is relavent on unix-like
    systems to ensure the escape codes passed to
    the terminal operate as expected. It returns
    the original state of the terminal,
    applicable to the reset function.
    """
    # initialize {{{
    fileno = sys.stdin.fileno()
    if not os.isatty(fileno):
        raise TerminalError("Standard input is not a terminal")
    try:
        state = termios.tcgetattr(fileno)
        tty.setraw(fileno)
    except termios.error as error:
        raise TerminalError(f"Failed to enable raw mode: {error}") \
            from error
    return state
    # }}}


def reset(original_state: list) -> None:
    """
    This is required because some terminals on unix-like systems
    will not return, by default, to their original state. This
    function is used to address this.
    """
    # reset {{{
    fileno = sys.stdin.fileno()
    try:
        termios.tcsetattr(fileno, termios.TCSADRAIN, original_state)
    except termios.error as error:
        raise TerminalError(f"Failed to disable raw mode: {error}") \
            from error
    # }}}


def read_key() -> Optional[KeyEvent]:
    """
    Blocks for the next key press and decodes it. Returns
    None for input that does not map onto a key.
    """
    # read_key {{{
    fileno = sys.stdin.fileno()
    char = _read_char(fileno)
    if char == "":
        return None

    if char == ESC:
        if not _pending(fileno):
            return KeyEvent(KeyCode.Esc)
        sequence = _read_char(fileno)
        if sequence in ("[", "O"):
            sequence += _read_char(fileno)
            # Sequences such as Delete (ESC [ 3 ~) run until a final byte
            while sequence[-1].isdigit() or sequence[-1] == ";":
                following = _read_char(fileno)
                if following == "":
                    break
                sequence += following
        return SEQUENCES.get(sequence, KeyEvent(KeyCode.Unknown))

    return decode_char(char)
    # }}}


def _pending(fileno: int) -> bool:
    # _pending {{{
    readable, _, _ = select.select([fileno], [], [], ESC_WAIT)
    return len(readable) > 0
    # }}}


def _read_char(fileno: int) -> str:
    """
    Reads exactly one, possibly multi-byte, UTF-8 character
    """
    # _read_char {{{
    first = os.read(fileno, 1)
    if first == b"":
        return ""

    lead = first[0]
    if lead >= 0xF0:
        length = 4
    elif lead >= 0xE0:
        length = 3
    elif lead >= 0xC0:
        length = 2
    else:
        length = 1

    data = first
    if length > 1:
        data += os.read(fileno, length - 1)
    return data.decode("utf-8", errors="ignore")
    # }}}
