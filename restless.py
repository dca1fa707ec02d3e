import sys
import shutil
import signal
import logging
import argparse
from pathlib import Path
from types import ModuleType
from typing import Optional
from dataclasses import dataclass
from key_router import handle_key
from errors import RestlessError
from app_state import AppState, BannerLevel
from render import (
    THEME_FILE,
    View,
    ColorMode,
    BorderStyle,
    render,
    hide_cursor,
    show_cursor,
    parse_colors,
    enable_buffer,
    disable_buffer,
    populate_borders,
)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

log = logging.getLogger(__name__)


@dataclass
class Arguments:
    # Arguments {{{
    debug: bool = False
    url: str = ""
    log_file: Optional[str] = None
    theme_file: Path = THEME_FILE
    color_mode: ColorMode = ColorMode.Bit24
    border_style: BorderStyle = BorderStyle.Rounded
    # }}}


def main() -> None:
    """
    Main wraps the platform
    specific implementation
    """
    # main {{{
    try:
        args = parse_args()
        configure_logging(args)
        view = create_view(args)
    except RestlessError as error:
        print(error, file=sys.stderr)
        sys.exit(1)

    if sys.platform == "win32":
        _win_main(args, view)
    else:
        _nix_main(args, view)
    # }}}


def configure_logging(args: Arguments) -> None:
    """
    The terminal is in raw mode while running, so records only
    ever go to a file. Without one they are discarded.
    """
    # configure_logging {{{
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if args.debug else logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if args.log_file is None:
        logger.addHandler(logging.NullHandler())
        return

    handler = logging.FileHandler(args.log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    # requests' connection pool is chatty on DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    # }}}


def create_view(args: Arguments) -> View:
    # create_view {{{
    return View(
        theme=parse_colors(args.theme_file, args.color_mode),
        borders=populate_borders(args.border_style),
        mode=args.color_mode,
        size=tuple(shutil.get_terminal_size()),
        debug=args.debug,
    )
    # }}}


def parse_args(argv: Optional[list[str]] = None) -> Arguments:
    # parse_args {{{
    description = "Build and send HTTP requests from the terminal"
    parser = argparse.ArgumentParser(prog="restless",
                                     description=description)

    parser.add_argument("-u", "--url",
                        help="URL to open the first tab with")

    parser.add_argument("-t", "--theme",
                        help="Path to theme file " +
                        "(defaults to 'theme.ini')")

    parser.add_argument("-m", "--mode",
                        help="Color style: '4bit', '8bit', or '24bit' " +
                        "(defaults to '24bit')")

    parser.add_argument("-b", "--border",
                        help="Border style: 'single', 'double' or " +
                        "'rounded' (defaults to 'rounded')")

    parser.add_argument("-l", "--log-file",
                        help="Write log records to this file")

    parser.add_argument("-g", "--debug", action="store_true",
                        help=argparse.SUPPRESS)

    args = Arguments()
    parsed_args = parser.parse_args(argv)

    if parsed_args.url is not None:
        args.url = parsed_args.url

    if parsed_args.theme is not None:
        args.theme_file = Path(parsed_args.theme)

    if parsed_args.mode is not None:
        try:
            args.color_mode = (ColorMode)(parsed_args.mode.lower())
        except ValueError:
            parser.error(f"invalid color mode '{parsed_args.mode}'")

    if parsed_args.border is not None:
        try:
            args.border_style = (BorderStyle)(parsed_args.border.lower())
        except ValueError:
            parser.error(f"invalid border style '{parsed_args.border}'")

    args.log_file = parsed_args.log_file
    args.debug = parsed_args.debug

    return args
    # }}}


def run(driver: ModuleType, args: Arguments, view: View) -> None:
    """
    The event loop. Blocks on the next key, processes it to
    completion, including a full request round trip, then
    draws the next frame.
    """
    # run {{{
    state = AppState.create(args.url)

    def draw(current: AppState) -> None:
        view.size = tuple(shutil.get_terminal_size())
        render(current, view)

    def before_send(current: AppState) -> None:
        request = current.current_tab.request
        current.notify(f"Sending {request.method} {request.url} ...",
                       BannerLevel.Info)
        draw(current)
        current.banner = None

    enable_buffer()
    hide_cursor()
    log.info("Started with %d tab(s)", len(state.tabs))

    while not state.is_exiting:
        draw(state)
        key = driver.read_key()
        if key is None:
            continue
        handle_key(state, key, before_send)

    log.info("Exiting")
    # }}}


def _cleanup() -> None:
    # _cleanup {{{
    show_cursor()
    disable_buffer()
    sys.stdout.flush()
    # }}}


def _win_main(args: Arguments, view: View) -> None:
    # _win_main {{{
    import ansi_win

    driver = ansi_win
    try:
        ostate, istate = driver.initialize()
    except RestlessError as error:
        print(error, file=sys.stderr)
        sys.exit(1)

    def signal_trap(sig, frame) -> None:
        """
        Ensures terminal state is restored
        """
        _cleanup()
        driver.reset(ostate, istate)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_trap)

    try:
        run(driver, args, view)
    finally:
        _cleanup()
        driver.reset(ostate, istate)
    sys.exit(0)
    # }}}


def _nix_main(args: Arguments, view: View) -> None:
    # _nix_main {{{
    import ansi_nix

    driver = ansi_nix
    try:
        orig_state = driver.initialize()
    except RestlessError as error:
        print(error, file=sys.stderr)
        sys.exit(1)

    def signal_trap(sig, frame) -> None:
        """
        Ensures terminal state is restored
        """
        _cleanup()
        driver.reset(orig_state)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_trap)

    try:
        run(driver, args, view)
    finally:
        _cleanup()
        driver.reset(orig_state)
    sys.exit(0)
    # }}}


if __name__ == "__main__":
    main()
