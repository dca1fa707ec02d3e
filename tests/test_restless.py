import sys
import signal
import logging
import pytest
from pathlib import Path
from unittest.mock import MagicMock, patch
from keys import KeyEvent
from errors import TerminalError
from render import THEME_FILE, ColorMode, BorderStyle
from restless import (
    run,
    main,
    _win_main,
    _nix_main,
    parse_args,
    create_view,
    configure_logging,
)


@pytest.fixture
def root_logger():
    logger = logging.getLogger()
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


def test_defaults():
    args = parse_args([])

    assert args.url == ""
    assert args.theme_file == THEME_FILE
    assert args.color_mode == ColorMode.Bit24
    assert args.border_style == BorderStyle.Rounded
    assert args.log_file is None
    assert not args.debug


def test_all_options():
    args = parse_args([
        "-u", "https://example.com",
        "-t", "custom.ini",
        "-m", "8BIT",
        "-b", "double",
        "-l", "restless.log",
        "-g",
    ])

    assert args.url == "https://example.com"
    assert args.theme_file == Path("custom.ini")
    assert args.color_mode == ColorMode.Bit8
    assert args.border_style == BorderStyle.Double
    assert args.log_file == "restless.log"
    assert args.debug


@pytest.mark.parametrize("argv", [["-m", "16bit"], ["-b", "dotted"]])
def test_invalid_choices_exit(argv):
    with pytest.raises(SystemExit) as excinfo:
        parse_args(argv)

    assert excinfo.value.code == 2


def test_logging_without_file_is_silent(root_logger):
    configure_logging(parse_args([]))

    assert root_logger.level == logging.INFO
    assert any(isinstance(h, logging.NullHandler)
               for h in root_logger.handlers)


def test_logging_to_file(root_logger, tmp_path):
    log_file = Path(tmp_path, "restless.log")
    configure_logging(parse_args(["-l", str(log_file), "-g"]))

    logging.getLogger("tabs").debug("Selected Tab 2")
    for handler in root_logger.handlers:
        handler.flush()

    assert root_logger.level == logging.DEBUG
    assert "[DEBUG] tabs: Selected Tab 2" in log_file.read_text()


@pytest.fixture
def view():
    return create_view(parse_args([]))


def fake_driver(initial_state, keys=None, error=None):
    driver = MagicMock()
    driver.initialize.return_value = initial_state
    if error is not None:
        driver.read_key.side_effect = error
    else:
        driver.read_key.side_effect = keys
    return driver


@patch("restless.signal.signal")
class TestPlatformMains:
    def test_quit_exits_cleanly(self, mock_signal, view, capsys):
        driver = fake_driver("saved", keys=[KeyEvent.of("q")])

        with patch.dict(sys.modules, {"ansi_nix": driver}):
            with pytest.raises(SystemExit) as excinfo:
                _nix_main(parse_args([]), view)

        assert excinfo.value.code == 0
        driver.reset.assert_called_once_with("saved")
        assert "\x1b[?25h" in capsys.readouterr().out

    def test_terminal_setup_failure_exits_with_one(self, mock_signal, view,
                                                    capsys):
        driver = MagicMock()
        driver.initialize.side_effect = TerminalError("not a tty")

        with patch.dict(sys.modules, {"ansi_nix": driver}):
            with pytest.raises(SystemExit) as excinfo:
                _nix_main(parse_args([]), view)

        assert excinfo.value.code == 1
        driver.reset.assert_not_called()
        driver.read_key.assert_not_called()
        assert "Terminal error: not a tty" in capsys.readouterr().err

    def test_terminal_is_reset_when_loop_fails(self, mock_signal, view,
                                               capsys):
        driver = fake_driver("saved", error=RuntimeError("boom"))

        with patch.dict(sys.modules, {"ansi_nix": driver}):
            with pytest.raises(RuntimeError):
                _nix_main(parse_args([]), view)

        driver.reset.assert_called_once_with("saved")
        assert "\x1b[?1049l" in capsys.readouterr().out

    def test_interrupt_resets_terminal(self, mock_signal, view):
        driver = fake_driver("saved", keys=[KeyEvent.of("q")])

        with patch.dict(sys.modules, {"ansi_nix": driver}):
            with pytest.raises(SystemExit):
                _nix_main(parse_args([]), view)

        signal_number, handler = mock_signal.call_args.args
        assert signal_number == signal.SIGINT

        driver.reset.reset_mock()
        with pytest.raises(SystemExit) as excinfo:
            handler(signal.SIGINT, None)

        assert excinfo.value.code == 0
        driver.reset.assert_called_once_with("saved")

    def test_windows_quit(self, mock_signal, view):
        driver = fake_driver(("out", "in"), keys=[KeyEvent.of("q")])

        with patch.dict(sys.modules, {"ansi_win": driver}):
            with pytest.raises(SystemExit) as excinfo:
                _win_main(parse_args([]), view)

        assert excinfo.value.code == 0
        driver.reset.assert_called_once_with("out", "in")

    def test_windows_setup_failure(self, mock_signal, view):
        driver = MagicMock()
        driver.initialize.side_effect = TerminalError("no console")

        with patch.dict(sys.modules, {"ansi_win": driver}):
            with pytest.raises(SystemExit) as excinfo:
                _win_main(parse_args([]), view)

        assert excinfo.value.code == 1
        driver.reset.assert_not_called()


def test_invalid_theme_exits_with_one(root_logger, tmp_path, capsys):
    theme_file = Path(tmp_path, "theme.ini")
    theme_file.write_text("[24bit]\ntext_color = red\n")

    with patch.object(sys, "argv", ["restless", "-t", str(theme_file)]):
        with pytest.raises(SystemExit) as excinfo:
            main()

    assert excinfo.value.code == 1
    assert "Configuration error" in capsys.readouterr().err


def test_unknown_keys_are_skipped(view, capsys):
    driver = fake_driver(None, keys=[None, KeyEvent.of("t"),
                                     KeyEvent.of("q")])

    run(driver, parse_args([]), view)

    assert driver.read_key.call_count == 3
