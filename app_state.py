from enum import Enum
from typing import Optional
from tabs import Tab, TabStore
from edit_buffers import EditBuffers
from dataclasses import dataclass, field


class Screen(Enum):
    # Screen {{{
    Url = 0
    Values = 1
    Response = 2
    EditingUrl = 3
    EditingBody = 4
    EditingHeaders = 5
    EditingParams = 6
    Help = 7
    Exiting = 8
    # }}}


class ValuesScreen(Enum):
    # ValuesScreen {{{
    Body = 0
    Headers = 1
    Params = 2
    # }}}


class ResponseView(Enum):
    # ResponseView {{{
    Headers = 0
    Body = 1
    # }}}


class BannerLevel(Enum):
    # BannerLevel {{{
    Info = "info"
    Warning = "warning"
    Error = "error"
    # }}}


@dataclass
class Banner:
    # Banner {{{
    text: str
    level: BannerLevel = BannerLevel.Error
    # }}}


VIEWING = (Screen.Url, Screen.Values, Screen.Response)

EDITING = (
    Screen.EditingUrl,
    Screen.EditingBody,
    Screen.EditingHeaders,
    Screen.EditingParams,
)

# (key, description), a blank description marks a section title
HELP_CONTENT = [
    ("Navigation", ""),
    ("Ctrl+j", "Next section (Url, Values, Response)"),
    ("Ctrl+k", "Previous section"),
    ("Tab", "Next tab"),
    ("Shift+Tab", "Previous tab"),
    ("1-9", "Go to tab by number"),
    ("t", "New tab"),
    ("x", "Close current tab"),
    ("?", "Toggle this help"),
    ("q", "Quit"),
    ("", ""),
    ("Request", ""),
    ("u", "Edit URL (Url section)"),
    ("m", "Choose HTTP method"),
    ("Enter", "Send request"),
    ("h / l", "Switch Body, Headers, Params (Values section)"),
    ("i", "Edit the active Values tab"),
    ("d", "Remove last header or parameter"),
    ("", ""),
    ("Editing", ""),
    ("Enter", "Confirm URL, commit header/param, newline in body"),
    ("Esc", "Leave the editor"),
    ("Backspace", "Delete last character"),
    ("key:value", "Header format"),
    ("key=value", "Parameter format"),
    ("", ""),
    ("Response", ""),
    ("h / b", "Show headers / body"),
    ("j / k", "Scroll body"),
]


@dataclass
class AppState:
    """
    Everything the key router mutates and the renderer reads
    """
    # AppState {{{
    tabs: TabStore
    buffers: EditBuffers
    screen: Screen = Screen.Values
    values_screen: ValuesScreen = ValuesScreen.Body
    response_view: ResponseView = ResponseView.Body

    response_scroll: int = 0
    help_scroll: int = 0
    help_return: Optional[Screen] = None

    method_dropdown_open: bool = False
    method_dropdown_selected: int = 0

    banner: Optional[Banner] = None

    @classmethod
    def create(cls, seed_url: str = "") -> "AppState":
        buffers = EditBuffers()
        return cls(tabs=TabStore(buffers, seed_url), buffers=buffers)

    @property
    def current_tab(self) -> Tab:
        return self.tabs.current

    @property
    def is_editing(self) -> bool:
        return self.screen in EDITING

    @property
    def is_exiting(self) -> bool:
        return self.screen == Screen.Exiting

    def show_help(self) -> None:
        # show_help {{{
        if self.screen == Screen.Help or self.is_editing:
            return
        self.help_return = self.screen
        self.help_scroll = 0
        self.screen = Screen.Help
        # }}}

    def hide_help(self) -> None:
        # hide_help {{{
        if self.screen != Screen.Help:
            return
        self.screen = self.help_return \
            if self.help_return is not None else Screen.Values
        self.help_return = None
        # }}}

    def notify(self, text: str,
               level: BannerLevel = BannerLevel.Error) -> None:
        self.banner = Banner(text, level)
    # }}}


def navigation_context(state: AppState) -> str:
    # navigation_context {{{
    match state.screen:
        case Screen.Url:
            return "URL Input"
        case Screen.Values:
            return f"Values - {state.values_screen.name}"
        case Screen.Response:
            return f"Response - {state.response_view.name}"
        case Screen.EditingUrl:
            return "Editing URL"
        case Screen.EditingBody:
            return "Editing Body"
        case Screen.EditingHeaders:
            return "Editing Headers"
        case Screen.EditingParams:
            return "Editing Params"
        case Screen.Help:
            return "Help"
        case Screen.Exiting:
            return "Exiting"
    # }}}
