import sys
import math
import configparser
from enum import Enum
from pathlib import Path
from dataclasses import dataclass
from req_struct import HttpMethod
from errors import ConfigurationError
from app_state import (
    HELP_CONTENT,
    Screen,
    AppState,
    BannerLevel,
    ResponseView,
    ValuesScreen,
    navigation_context,
)


TITLE = "RESTLESS"      # For main application

ESC = "\x1b"            # Escape
CSI = f"{ESC}["         # Control Sequence Introducer

EN_ALT_BUF = "?1049h"   # Enable Alternate Buffer
DIS_ALT_BUF = "?1049l"  # Disable Alternate Buffer

X_OFFSET = 1            # From left edge
X_PADDING = 2           # From relative left edge
HEADER_HEIGHT = 3       # Title row and its borders
URL_HEIGHT = 3

MIN_COLUMNS = 40
MIN_LINES = 16

THEME_FILE = Path(Path(__file__).parent, "theme.ini")


class ColorMode(Enum):
    """
    Indicates the structure of the escape equence
    """
    # ColorMode {{{
    Bit4 = "4bit"       # Color immediately after CSI
    Bit8 = "8bit"       # Sequence is as follows: 35:5:{color}
    Bit24 = "24bit"     # RGB color sequence
    # }}}


class BorderStyle(Enum):
    # BorderStyle {{{
    Single = "single"
    Double = "double"
    Rounded = "rounded"
    # }}}


@dataclass
class Theme:
    # Theme {{{
    text_color:     str
    title_color:    str
    border_color:   str
    active_color:   str
    selected_color: str
    editing_color:  str
    error_color:    str
    # }}}


@dataclass
class Border:
    # Border {{{
    h_single = "─"
    h_double = "═"
    v_single = "│"
    v_double = "║"
    ltc_single = "┌"
    ltc_double = "╔"
    ltc_rounded = "╭"
    lbc_single = "└"
    lbc_double = "╚"
    lbc_rounded = "╰"
    rtc_single = "┐"
    rtc_double = "╗"
    rtc_rounded = "╮"
    rbc_single = "┘"
    rbc_double = "╝"
    rbc_rounded = "╯"
    # }}}


@dataclass
class View:
    """
    Everything about drawing that is not application state
    """
    # View {{{
    theme:   Theme
    borders: dict
    mode:    ColorMode
    size:    tuple[int, int]
    debug:   bool = False
    # }}}


# ini key -> Theme field
THEME_KEYS = {
    "text_color": "text_color",
    "title_color": "title_color",
    "border_color": "border_color",
    "active_section_color": "active_color",
    "active_request_color": "selected_color",
    "editing_color": "editing_color",
    "error_color": "error_color",
}

DEFAULT_COLORS = {
    ColorMode.Bit4: {
        "text_color": "37",
        "title_color": "34",
        "border_color": "90",
        "active_section_color": "32",
        "active_request_color": "33",
        "editing_color": "35",
        "error_color": "31",
    },
    ColorMode.Bit8: {
        "text_color": "252",
        "title_color": "75",
        "border_color": "244",
        "active_section_color": "114",
        "active_request_color": "180",
        "editing_color": "173",
        "error_color": "204",
    },
    ColorMode.Bit24: {
        "text_color": "220,223,228",
        "title_color": "97,175,239",
        "border_color": "120,120,120",
        "active_section_color": "152,195,121",
        "active_request_color": "229,192,123",
        "editing_color": "209,154,102",
        "error_color": "224,108,117",
    },
}


def parse_colors(theme_file: Path, mode: ColorMode) -> Theme:
    """
    Reads the section of the theme file for the color mode.
    A missing file, section or key falls back to the
    built-in colors.
    """
    # parse_colors {{{
    cp = configparser.ConfigParser()
    try:
        cp.read(theme_file)
    except configparser.Error as error:
        raise ConfigurationError(f"Unreadable theme file: {error}") \
            from error

    defaults = DEFAULT_COLORS[mode]
    colors = {}
    for key, attribute in THEME_KEYS.items():
        color = cp.get(mode.value, key, fallback=defaults[key])
        colors[attribute] = validate_colors(key, color.strip(), mode)

    return Theme(**colors)
    # }}}


def validate_colors(key: str, color: str, mode: ColorMode) -> str:
    """
    We may be expecting an integer value or an array depending
    on the color mode. This validates the expected format.
    """
    # validate_colors {{{
    if mode == ColorMode.Bit24:
        split = color.split(",")
        if len(split) != 3 or not all(c.strip().isdigit() for c in split):
            raise ConfigurationError(
                f"Invalid RGB color format for {key}={color}")
        return ",".join(c.strip() for c in split)
    else:
        try:
            int(color)
            return color
        except ValueError:
            raise ConfigurationError(
                f"Color must be an integer for {key}={color}")
    # }}}


def populate_borders(style: BorderStyle) -> dict:
    # populate_borders {{{
    borders = {}
    if style == BorderStyle.Single:
        borders["h_border"] = Border.h_single
        borders["v_border"] = Border.v_single
        borders["lt_corner"] = Border.ltc_single
        borders["lb_corner"] = Border.lbc_single
        borders["rt_corner"] = Border.rtc_single
        borders["rb_corner"] = Border.rbc_single
    elif style == BorderStyle.Rounded:
        borders["h_border"] = Border.h_single
        borders["v_border"] = Border.v_single
        borders["lt_corner"] = Border.ltc_rounded
        borders["lb_corner"] = Border.lbc_rounded
        borders["rt_corner"] = Border.rtc_rounded
        borders["rb_corner"] = Border.rbc_rounded
    else:
        borders["h_border"] = Border.h_double
        borders["v_border"] = Border.v_double
        borders["lt_corner"] = Border.ltc_double
        borders["lb_corner"] = Border.lbc_double
        borders["rt_corner"] = Border.rtc_double
        borders["rb_corner"] = Border.rbc_double
    return borders
    # }}}


def render(state: AppState, view: View) -> None:
    """
    Main render function, redraws the whole frame
    """
    # render {{{
    clear_screen()
    columns, lines = view.size

    if columns < MIN_COLUMNS or lines < MIN_LINES:
        set_cursor(1, 1)
        print(f"Terminal too small ({columns}x{lines}), " +
              f"need {MIN_COLUMNS}x{MIN_LINES}", end="")
        sys.stdout.flush()
        return

    values_y, values_height, response_y, response_height = \
        calculate_sections(view)

    render_header(state, view)
    render_url(state, view)
    render_values(state, view, values_y, values_height)
    render_response(state, view, response_y, response_height)
    render_status(state, view)

    if state.method_dropdown_open:
        render_dropdown(state, view)
    if state.screen == Screen.Help:
        render_help(state, view)
    if state.banner is not None:
        render_banner(state, view)
    if view.debug:
        _render_debug(state, view)

    reset_style()
    sys.stdout.flush()
    # }}}


def calculate_sections(view: View) -> tuple[int, int, int, int]:
    """
    Returns the y position and height of the values and the
    response sections. The status bar takes the last row.
    """
    # calculate_sections {{{
    _, lines = view.size
    top = HEADER_HEIGHT + URL_HEIGHT + 1
    remaining = lines - top
    values_height = max(math.floor(remaining * 2 / 5), 5)
    response_height = remaining - values_height
    return (top, values_height, top + values_height, response_height)
    # }}}


def render_header(state: AppState, view: View) -> None:
    """
    Renders the top bar containing the tabs and the title.
    ╭───────────────────────────────────╮
    │ Tab 1 [Tab 2] Tab 3      RESTLESS │
    ╰───────────────────────────────────╯
    """
    # render_header {{{
    columns, _ = view.size
    width = columns - 2

    names = []
    for index, tab in enumerate(state.tabs.tabs):
        if index == state.tabs.selected_tab:
            names.append((f"[{tab.name}]", view.theme.selected_color))
        else:
            names.append((f" {tab.name} ", view.theme.text_color))

    line = ""
    used = 0
    limit = width - len(TITLE) - X_PADDING * 2
    for name, color in names:
        if used + len(name) > limit:
            break
        line += get_foreground(color, view.mode) + name
        used += len(name)

    padding = " " * (width - used - len(TITLE) - X_PADDING)
    line += get_foreground(view.theme.title_color, view.mode)
    line += f"{padding}{TITLE}  "

    render_box(view, X_OFFSET, 1, columns, HEADER_HEIGHT, "",
               [], view.theme.border_color)
    set_cursor(X_OFFSET + 1, 2)
    print(line, end="")
    # }}}


def render_url(state: AppState, view: View) -> None:
    # render_url {{{
    columns, _ = view.size
    buffers = state.buffers
    line = f"[{buffers.selected_method.value}] {buffers.url_input}"
    if state.screen == Screen.EditingUrl:
        line += "_"

    color = section_color(state, view, Screen.Url, (Screen.EditingUrl,))
    render_box(view, X_OFFSET, HEADER_HEIGHT + 1, columns, URL_HEIGHT,
               " URL (u) ", [line], color)
    # }}}


def render_values(state: AppState, view: View, y: int, height: int) -> None:
    """
    Renders the request values section.
    ╭─ Values ───────────────────────────╮
    │ Body | [Headers] | Params          │
    │ 1. Accept: application/json        │
    │ > Authorization: Bear_             │
    ╰────────────────────────────────────╯
    """
    # render_values {{{
    columns, _ = view.size
    buffers = state.buffers
    width = columns - 2 - X_PADDING

    titles = []
    for values in ValuesScreen:
        if values == state.values_screen:
            titles.append(f"[{values.name}]")
        else:
            titles.append(values.name)
    content = [" | ".join(titles), ""]

    match state.values_screen:
        case ValuesScreen.Body:
            body = buffers.body_input
            if state.screen == Screen.EditingBody:
                body += "_"
            for line in body.split("\n"):
                content += break_line_width(width, line)
        case ValuesScreen.Headers:
            for index, (key, value) in enumerate(buffers.headers_input):
                content += break_line_width(width,
                                            f"{index + 1}. {key}: {value}")
            if state.screen == Screen.EditingHeaders:
                pending = buffers.current_header_key + \
                    buffers.current_header_value
                content.append(f"> {pending}_")
        case ValuesScreen.Params:
            for index, (key, value) in enumerate(buffers.params_input):
                content += break_line_width(width,
                                            f"{index + 1}. {key}={value}")
            if state.screen == Screen.EditingParams:
                pending = buffers.current_param_key + \
                    buffers.current_param_value
                content.append(f"> {pending}_")

    editing = (Screen.EditingBody, Screen.EditingHeaders,
               Screen.EditingParams)
    color = section_color(state, view, Screen.Values, editing)
    render_box(view, X_OFFSET, y, columns, height, " Values (i) ",
               content, color)
    # }}}


def render_response(state: AppState, view: View, y: int,
                    height: int) -> None:
    """
    Renders the response section.
    ╭─ Response ─────────────────────────╮
    │ Headers | [Body]   200 (json)      │
    │ {                                  │
    │   "id": 1                          │
    ╰────────────────────────────────────╯
    """
    # render_response {{{
    columns, _ = view.size
    width = columns - 2 - X_PADDING
    response = state.current_tab.response

    if state.response_view == ResponseView.Headers:
        tabs = "[Headers] | Body"
    else:
        tabs = "Headers | [Body]"

    if response is None:
        content = [tabs, "", "No response yet, press Enter to send"]
    else:
        status = f"Status {response.status_code}"
        content_type = response.content_type()
        if content_type is not None:
            status += f" ({content_type})"
        content = [f"{tabs}   {status}", ""]

        if state.response_view == ResponseView.Headers:
            for key, value in response.headers:
                content += break_line_width(width, f"{key}: {value}")
        else:
            body = response.body.splitlines()[state.response_scroll:]
            for line in body:
                content += break_line_width(width, line)
                if len(content) > height:
                    break

    color = section_color(state, view, Screen.Response, ())
    render_box(view, X_OFFSET, y, columns, height, " Response ",
               content, color)
    # }}}


def render_status(state: AppState, view: View) -> None:
    # render_status {{{
    columns, lines = view.size
    tabs = state.tabs
    line = f" {navigation_context(state)} | " + \
        f"Tab {tabs.selected_tab + 1}/{len(tabs)} | " + \
        state.current_tab.request.summary()
    hint = "? help  q quit "

    line = cap_line_width(columns - len(hint) - 1, line)
    padding = " " * (columns - len(line) - len(hint))
    set_cursor(1, lines)
    set_foreground(view.theme.text_color, view.mode)
    print(f"{line}{padding}{hint}", end="")
    # }}}


def render_dropdown(state: AppState, view: View) -> None:
    """
    Renders the method selection under the URL section
    ╭ Method ╮
    │ GET    │
    │ POST   │
    ╰────────╯
    """
    # render_dropdown {{{
    width = 12
    methods = [method.value for method in HttpMethod]
    render_box(view, X_OFFSET + 1, HEADER_HEIGHT + 2, width,
               len(methods) + 2, " Method ", [], view.theme.editing_color)

    for index, name in enumerate(methods):
        if index == state.method_dropdown_selected:
            color = view.theme.selected_color
            name = f"> {name}"
        else:
            color = view.theme.text_color
            name = f"  {name}"
        set_cursor(X_OFFSET + 2, HEADER_HEIGHT + 3 + index)
        set_foreground(color, view.mode)
        print(f"{name}{' ' * (width - 2 - len(name))}", end="")
    # }}}


def render_help(state: AppState, view: View) -> None:
    # render_help {{{
    columns, lines = view.size
    width = math.floor(columns * 4 / 5)
    height = math.floor(lines * 4 / 5)
    x = math.floor((columns - width) / 2) + 1
    y = math.floor((lines - height) / 2) + 1

    content = []
    for key, description in HELP_CONTENT[state.help_scroll:]:
        if description == "":
            content.append(key)
        else:
            content.append(f"  {key:15} {description}")
    content = content[:height - 3]
    content += [""] * (height - 3 - len(content))
    content.append("j/k to scroll, Esc to close " +
                   f"({state.help_scroll + 1}/{len(HELP_CONTENT)})")

    render_box(view, x, y, width, height, " Key Bindings ",
               content, view.theme.selected_color)
    # }}}


def render_banner(state: AppState, view: View) -> None:
    # render_banner {{{
    columns, lines = view.size
    banner = state.banner
    width = min(60, columns - 4)

    content = []
    for line in banner.text.splitlines():
        content += break_line_width(width - 2 - X_PADDING, line)
    content.append("")
    content.append("Press any key to dismiss")

    height = len(content) + 2
    x = math.floor((columns - width) / 2) + 1
    y = math.floor((lines - height) / 2) + 1

    match banner.level:
        case BannerLevel.Error:
            title, color = " Error ", view.theme.error_color
        case BannerLevel.Warning:
            title, color = " Warning ", view.theme.editing_color
        case BannerLevel.Info:
            title, color = " Info ", view.theme.active_color
    render_box(view, x, y, width, height, title, content, color)
    # }}}


def render_box(view: View, x: int, y: int, width: int, height: int,
               title: str, content: list[str], color: str) -> None:
    """
    Draws a bordered box of the given outer size, filling it
    with the content lines, capped and padded to fit.
    """
    # render_box {{{
    inner = width - 2
    top, bottom = get_top_bottom_borders(view, inner)
    v_border = view.borders["v_border"]

    set_foreground(color, view.mode)
    set_cursor(x, y)
    print(top, end="")

    if title != "":
        set_cursor(x + 2, y)
        set_foreground(view.theme.text_color, view.mode)
        print(title, end="")

    for index in range(height - 2):
        row = content[index] if index < len(content) else ""
        row = cap_line_width(inner - X_PADDING, str(row))
        line = get_foreground(color, view.mode) + v_border
        line += get_foreground(view.theme.text_color, view.mode)
        line += f" {row}{' ' * (inner - 1 - len(row))}"
        line += get_foreground(color, view.mode) + v_border
        set_cursor(x, y + index + 1)
        print(line, end="")

    set_foreground(color, view.mode)
    set_cursor(x, y + height - 1)
    print(bottom, end="")
    # }}}


def section_color(state: AppState, view: View, screen: Screen,
                  editing: tuple) -> str:
    # section_color {{{
    if state.screen in editing:
        return view.theme.editing_color
    if state.screen == screen:
        return view.theme.active_color
    if state.screen == Screen.Help and state.help_return == screen:
        return view.theme.active_color
    return view.theme.border_color
    # }}}


def break_line_width(max_w: int, line: str) -> list[str]:
    """
    This breaks a line into a list of strings based on
    a provided width, indenting the broken peices.
    """
    # break_line_width {{{
    line = str(line)
    if len(line) <= max_w:
        return [line]

    indent = "  "
    result = [line[:max_w]]
    sample = line[max_w:]
    step = max(max_w - len(indent), 1)
    for offset in range(0, len(sample), step):
        result.append(f"{indent}{sample[offset:offset + step]}")

    return result
    # }}}


def cap_line_width(max_w: int, line: str) -> str:
    """
    Cuts a line short, appending with ..
    to indicate this
    """
    # cap_line_width {{{
    if len(str(line)) > max_w:
        capped = str(line)[:max_w - 2]  # Length of ..
        capped = capped + ".."

        line = capped
    return line
    # }}}


def get_top_bottom_borders(view: View, width: int) -> tuple[str, str]:
    # get_top_bottom_borders {{{
    top = f"{view.borders['lt_corner']}" +        \
          f"{view.borders['h_border'] * width}" + \
          f"{view.borders['rt_corner']}"

    bottom = f"{view.borders['lb_corner']}" +        \
             f"{view.borders['h_border'] * width}" + \
             f"{view.borders['rb_corner']}"

    return (top, bottom)
    # }}}


def get_foreground(color: str, mode: ColorMode) -> str:
    # get_foreground {{{
    match mode:
        case ColorMode.Bit4:
            prefix = f"{CSI}"
            return f"{prefix}{color}m"
        case ColorMode.Bit8:
            prefix = f"{CSI}38;5;"
            return f"{prefix}{color}m"
        case ColorMode.Bit24:
            r, g, b = color.split(",")
            prefix = f"{CSI}38;2;"
            return f"{prefix}{r};{g};{b}m"
    # }}}


def set_foreground(color: str, mode: ColorMode) -> None:
    # set_foreground {{{
    print(get_foreground(color, mode), end="")
    # }}}


def set_cursor(x: int, y: int) -> None:
    """
    Escape sequence to move the
    cursor with the assumption that
    location (1,1) is at the top
    left of the screen.

    It also assumes that {x} and {y}
    are based on character size.
    """
    # set_cursor {{{
    print(f'{CSI}{y};{x}H', end="")
    # }}}


def clear_screen() -> None:
    # clear_screen {{{
    print(f"{CSI}2J", end="")
    # }}}


def reset_style() -> None:
    # reset_style {{{
    print(f"{CSI}0m", end="")
    # }}}


def disable_buffer() -> None:
    """
    Reverts screen back to
    previous state before script
    """
    # disable_buffer {{{
    print(f"{CSI}{DIS_ALT_BUF}", end="")
    # }}}


def enable_buffer() -> None:
    """
    Creates a new screen buffer
    """
    # enable_buffer {{{
    print(f"{CSI}{EN_ALT_BUF}", end="")
    # }}}


def hide_cursor() -> None:
    # hide_cursor {{{
    print(f"{CSI}?25l", end="")
    # }}}


def show_cursor() -> None:
    # show_cursor {{{
    print(f"{CSI}?25h", end="")
    sys.stdout.flush()
    # }}}


def _render_debug(state: AppState, view: View) -> None:
    # _render_debug {{{
    columns, lines = view.size
    debug = \
        f"wid {columns} hgt {lines} | " + \
        f"scr {state.screen.name} | sel {state.tabs.selected_tab} | " + \
        f"tabs {len(state.tabs)} | " + \
        f"rsc {state.response_scroll} hsc {state.help_scroll}"

    set_cursor(max(columns - len(debug) - 2, 1), lines - 1)
    set_foreground(view.theme.text_color, view.mode)
    print(debug, end="")
    # }}}
