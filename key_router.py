import logging
from typing import Callable, Optional
from keys import KeyCode, KeyEvent
from errors import RestlessError
from http_parser import process_response
from request import send_request, validate_request
from req_struct import HttpMethod
from edit_buffers import (
    add_param,
    add_header,
    remove_param,
    remove_header,
    backspace_param,
    type_param_char,
    backspace_header,
    type_header_char,
    clear_param_input,
    clear_header_input,
)
from app_state import (
    VIEWING,
    HELP_CONTENT,
    Screen,
    AppState,
    BannerLevel,
    ResponseView,
    ValuesScreen,
)


log = logging.getLogger(__name__)

# Called right before the blocking send, used to redraw the frame
SendHook = Optional[Callable[[AppState], None]]

TAB_NUMBERS = ("1", "2", "3", "4", "5", "6", "7", "8", "9")


def handle_key(state: AppState, key: KeyEvent,
               before_send: SendHook = None) -> None:
    """
    Single entry point of the router. A visible banner eats
    the key to dismiss itself. Every error raised by an action
    ends up as a banner, none of them stops the event loop.
    """
    # handle_key {{{
    if state.is_exiting:
        return

    if state.banner is not None:
        state.banner = None
        return

    try:
        _route(state, key, before_send)
    except RestlessError as error:
        log.info("%s: %s", error.kind.value, error)
        state.notify(str(error))
    # }}}


def _route(state: AppState, key: KeyEvent, before_send: SendHook) -> None:
    # _route {{{
    match state.screen:
        case Screen.Url | Screen.Values | Screen.Response:
            handle_viewing_keys(state, key, before_send)
        case Screen.EditingUrl:
            handle_url_editing_keys(state, key)
        case Screen.EditingBody:
            handle_body_editing_keys(state, key)
        case Screen.EditingHeaders:
            handle_headers_editing_keys(state, key)
        case Screen.EditingParams:
            handle_params_editing_keys(state, key)
        case Screen.Help:
            handle_help_keys(state, key)
        case Screen.Exiting:
            pass
    # }}}


def handle_viewing_keys(state: AppState, key: KeyEvent,
                        before_send: SendHook = None) -> None:
    """
    Keys shared by the Url, Values and Response sections,
    falling through to the section specific handlers.
    """
    # handle_viewing_keys {{{
    if state.method_dropdown_open:
        handle_dropdown_keys(state, key)
        return

    if key.is_ctrl("j"):
        state.screen = update_section(state.screen, True)
    elif key.is_ctrl("k"):
        state.screen = update_section(state.screen, False)
    elif key.is_char("q"):
        state.screen = Screen.Exiting
    elif key.is_char("?"):
        state.show_help()
    elif key.code == KeyCode.Tab:
        state.tabs.next_tab()
        state.response_scroll = 0
    elif key.code == KeyCode.BackTab:
        state.tabs.prev_tab()
        state.response_scroll = 0
    elif key.is_char("t"):
        state.tabs.add_tab()
        state.response_scroll = 0
    elif key.is_char("x"):
        state.tabs.close_tab()
        state.response_scroll = 0
    elif key.is_char("m"):
        open_method_dropdown(state)
    elif key.code == KeyCode.Enter:
        send_current_request(state, before_send)
    elif key.code == KeyCode.Char and not key.ctrl \
            and key.char in TAB_NUMBERS:
        state.tabs.switch_to(TAB_NUMBERS.index(key.char))
        state.response_scroll = 0
    else:
        match state.screen:
            case Screen.Url:
                handle_url_screen_keys(state, key)
            case Screen.Values:
                handle_values_screen_keys(state, key)
            case Screen.Response:
                handle_response_screen_keys(state, key)
    # }}}


def handle_dropdown_keys(state: AppState, key: KeyEvent) -> None:
    # handle_dropdown_keys {{{
    count = len(HttpMethod)
    match key.code:
        case KeyCode.Up:
            state.method_dropdown_selected = \
                (state.method_dropdown_selected - 1) % count
        case KeyCode.Down:
            state.method_dropdown_selected = \
                (state.method_dropdown_selected + 1) % count
        case KeyCode.Enter:
            method = HttpMethod.from_index(state.method_dropdown_selected)
            state.buffers.selected_method = method
            state.method_dropdown_open = False
            state.tabs.commit()
        case KeyCode.Esc:
            state.method_dropdown_open = False
    # }}}


def handle_url_screen_keys(state: AppState, key: KeyEvent) -> None:
    # handle_url_screen_keys {{{
    if key.is_char("u"):
        enter_edit_mode(state)
    # }}}


def handle_values_screen_keys(state: AppState, key: KeyEvent) -> None:
    # handle_values_screen_keys {{{
    if key.is_char("h") or key.code == KeyCode.Left:
        state.values_screen = update_values_screen(state.values_screen,
                                                   False)
    elif key.is_char("l") or key.code == KeyCode.Right:
        state.values_screen = update_values_screen(state.values_screen,
                                                   True)
    elif key.is_char("i"):
        enter_edit_mode(state)
    elif key.is_char("d"):
        remove_last_pair(state)
    # }}}


def handle_response_screen_keys(state: AppState, key: KeyEvent) -> None:
    # handle_response_screen_keys {{{
    if key.is_char("h") or key.code == KeyCode.Left:
        state.response_view = ResponseView.Headers
    elif key.is_char("b") or key.code == KeyCode.Right:
        state.response_view = ResponseView.Body
    elif key.is_char("j") and state.response_view == ResponseView.Body:
        response = state.current_tab.response
        lines = len(response.body.splitlines()) if response else 0
        if state.response_scroll < max(lines - 1, 0):
            state.response_scroll += 1
    elif key.is_char("k") and state.response_view == ResponseView.Body:
        state.response_scroll = max(state.response_scroll - 1, 0)
    # }}}


def handle_url_editing_keys(state: AppState, key: KeyEvent) -> None:
    """
    Enter keeps the typed URL, Esc goes back to the one
    stored on the tab.
    """
    # handle_url_editing_keys {{{
    buffers = state.buffers
    match key.code:
        case KeyCode.Enter:
            state.tabs.commit()
            state.screen = Screen.Url
        case KeyCode.Backspace:
            buffers.url_input = buffers.url_input[:-1]
        case KeyCode.Esc:
            buffers.url_input = state.current_tab.request.url
            state.screen = Screen.Url
        case KeyCode.Char if not key.ctrl:
            buffers.url_input += key.char
    # }}}


def handle_body_editing_keys(state: AppState, key: KeyEvent) -> None:
    # handle_body_editing_keys {{{
    buffers = state.buffers
    match key.code:
        case KeyCode.Enter:
            buffers.body_input += "\n"
        case KeyCode.Backspace:
            buffers.body_input = buffers.body_input[:-1]
        case KeyCode.Esc:
            state.tabs.commit()
            state.screen = Screen.Values
        case KeyCode.Char if not key.ctrl:
            buffers.body_input += key.char
    # }}}


def handle_headers_editing_keys(state: AppState, key: KeyEvent) -> None:
    # handle_headers_editing_keys {{{
    buffers = state.buffers
    match key.code:
        case KeyCode.Enter:
            if buffers.current_header_key != "":
                add_header(buffers)
                state.tabs.commit()
            else:
                state.screen = Screen.Values
        case KeyCode.Backspace:
            backspace_header(buffers)
        case KeyCode.Esc:
            clear_header_input(buffers)
            state.screen = Screen.Values
        case KeyCode.Char if not key.ctrl:
            type_header_char(buffers, key.char)
    # }}}


def handle_params_editing_keys(state: AppState, key: KeyEvent) -> None:
    # handle_params_editing_keys {{{
    buffers = state.buffers
    match key.code:
        case KeyCode.Enter:
            if buffers.current_param_key != "":
                add_param(buffers)
                state.tabs.commit()
            else:
                state.screen = Screen.Values
        case KeyCode.Backspace:
            backspace_param(buffers)
        case KeyCode.Esc:
            clear_param_input(buffers)
            state.screen = Screen.Values
        case KeyCode.Char if not key.ctrl:
            type_param_char(buffers, key.char)
    # }}}


def handle_help_keys(state: AppState, key: KeyEvent) -> None:
    # handle_help_keys {{{
    if key.code == KeyCode.Esc or key.is_char("?"):
        state.hide_help()
    elif key.is_char("j"):
        if state.help_scroll < len(HELP_CONTENT) - 1:
            state.help_scroll += 1
    elif key.is_char("k"):
        state.help_scroll = max(state.help_scroll - 1, 0)
    # }}}


def send_current_request(state: AppState,
                         before_send: SendHook = None) -> None:
    """
    Syncs and validates the current tab's request, then sends
    it. Blocks until the round trip is over.
    """
    # send_current_request {{{
    state.tabs.commit()
    tab = state.current_tab
    validate_request(tab.request)

    if before_send is not None:
        before_send(state)

    status_code, headers, body = send_request(tab.request)
    response, warning = process_response(status_code, headers, body)
    tab.response = response
    state.response_scroll = 0

    if warning is not None:
        state.notify(str(warning), BannerLevel.Warning)
    # }}}


def open_method_dropdown(state: AppState) -> None:
    # open_method_dropdown {{{
    state.method_dropdown_open = True
    state.method_dropdown_selected = state.buffers.selected_method.index()
    # }}}


def enter_edit_mode(state: AppState) -> None:
    # enter_edit_mode {{{
    match state.screen:
        case Screen.Url:
            state.screen = Screen.EditingUrl
        case Screen.Values:
            match state.values_screen:
                case ValuesScreen.Body:
                    state.screen = Screen.EditingBody
                case ValuesScreen.Headers:
                    state.screen = Screen.EditingHeaders
                case ValuesScreen.Params:
                    state.screen = Screen.EditingParams
    # }}}


def remove_last_pair(state: AppState) -> None:
    # remove_last_pair {{{
    buffers = state.buffers
    match state.values_screen:
        case ValuesScreen.Headers:
            if len(buffers.headers_input) == 0:
                state.notify("No headers to remove", BannerLevel.Info)
                return
            remove_header(buffers, len(buffers.headers_input) - 1)
        case ValuesScreen.Params:
            if len(buffers.params_input) == 0:
                state.notify("No parameters to remove", BannerLevel.Info)
                return
            remove_param(buffers, len(buffers.params_input) - 1)
        case ValuesScreen.Body:
            return
    state.tabs.commit()
    # }}}


def update_section(screen: Screen, increase: bool) -> Screen:
    """
    Cycles Url -> Values -> Response -> Url, or backwards
    """
    # update_section {{{
    if screen not in VIEWING:
        return screen

    current = VIEWING.index(screen)
    if increase:
        current += 1
        if current > len(VIEWING) - 1:
            current = 0
    else:
        current -= 1
        if current < 0:
            current = len(VIEWING) - 1

    return VIEWING[current]
    # }}}


def update_values_screen(values: ValuesScreen,
                         increase: bool) -> ValuesScreen:
    # update_values_screen {{{
    current = values.value + (1 if increase else -1)
    return (ValuesScreen)(current % len(ValuesScreen))
    # }}}
