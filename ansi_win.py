from keys import KeyCode, KeyEvent, decode_char
from ctypes.wintypes import DWORD
from errors import TerminalError
from typing import Optional
import ctypes
import msvcrt


# Input Constants
STD_INPUT_HANDLE = -10
ENABLE_VIRTUAL_TERMINAL_INPUT = 0x0200

# Output Constants
STD_OUTPUT_HANDLE = -11
ENABLE_PROCESSED_OUTPUT = 0x0001
ENABLE_WRAP_AT_EOL_OUTPUT = 0x0002
ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004

# Second character after a \x00 or \xe0 prefix
SPECIAL_KEYS = {
    "H": KeyEvent(KeyCode.Up),
    "P": KeyEvent(KeyCode.Down),
    "K": KeyEvent(KeyCode.Left),
    "M": KeyEvent(KeyCode.Right),
    "\x0f": KeyEvent(KeyCode.BackTab),
}


def initialize() -> tuple[DWORD, DWORD]:
    '''
    In certain environments, this function may not
    be needed, such as running PowerShell in Windows
    Terminal. In other situations, such as running
    Windows CMD 'straight', this allows the escape
    characters to function properly.

    Returns (output, input)
    '''
    kernel = ctypes.windll.kernel32
    stdin = kernel.GetStdHandle(STD_INPUT_HANDLE)
    stdout = kernel.GetStdHandle(STD_OUTPUT_HANDLE)
    istate = DWORD()
    ostate = DWORD()
    if not kernel.GetConsoleMode(stdin, ctypes.byref(istate)) or \
            not kernel.GetConsoleMode(stdout, ctypes.byref(ostate)):
        raise TerminalError("Not attached to a console")
    kernel.SetConsoleMode(
            stdin,
            ENABLE_VIRTUAL_TERMINAL_INPUT
    )
    kernel.SetConsoleMode(
            stdout,
            ENABLE_PROCESSED_OUTPUT |
            ENABLE_WRAP_AT_EOL_OUTPUT |
            ENABLE_VIRTUAL_TERMINAL_PROCESSING
    )
    return (ostate, istate)


def reset(ostate: DWORD, istate: DWORD) -> None:
    '''
    Though not strictly necessary, this function is used as a
    means to ensure the user's terminal is returned to the
    way it was before using this application.
    '''
    kernel = ctypes.windll.kernel32
    stdin = kernel.GetStdHandle(STD_INPUT_HANDLE)
    stdout = kernel.GetStdHandle(STD_OUTPUT_HANDLE)
    kernel.SetConsoleMode(stdin, istate)
    kernel.SetConsoleMode(stdout, ostate)


def read_key() -> Optional[KeyEvent]:
    char = msvcrt.getwch()
    if char in ("\x00", "\xe0"):
        return SPECIAL_KEYS.get(msvcrt.getwch(), KeyEvent(KeyCode.Unknown))
    return decode_char(char)
