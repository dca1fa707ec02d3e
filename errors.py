from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    # ErrorKind {{{
    Network = "network"
    Connection = "connection"
    InvalidUrl = "invalid_url"
    InvalidHeader = "invalid_header"
    InvalidParameter = "invalid_parameter"
    InvalidMethod = "invalid_method"
    Timeout = "timeout"
    Tab = "tab"
    ResponseParsing = "response_parsing"
    AppState = "app_state"
    Terminal = "terminal"
    Configuration = "configuration"
    # }}}


class RestlessError(Exception):
    """
    Base of every error the application raises on purpose.
    Callers branch on `kind`, the text is only for display.
    """
    # RestlessError {{{
    kind: Optional[ErrorKind] = None
    # }}}


class NetworkError(RestlessError):
    # NetworkError {{{
    kind = ErrorKind.Network

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Network error: {cause}")
    # }}}


class ConnectionFailedError(RestlessError):
    # ConnectionFailedError {{{
    kind = ErrorKind.Connection

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Connection failed: {cause}")
    # }}}


class InvalidUrlError(RestlessError):
    # InvalidUrlError {{{
    kind = ErrorKind.InvalidUrl

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL '{url}': {reason}")
    # }}}


class InvalidHeaderError(RestlessError):
    # InvalidHeaderError {{{
    kind = ErrorKind.InvalidHeader

    def __init__(self, key: str, value: str, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        if key == "" and value == "":
            super().__init__(f"Invalid header: {reason}")
        else:
            super().__init__(f"Invalid header '{key}: {value}': {reason}")
    # }}}


class InvalidParameterError(RestlessError):
    # InvalidParameterError {{{
    kind = ErrorKind.InvalidParameter

    def __init__(self, key: str, value: str, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        if key == "" and value == "":
            super().__init__(f"Invalid parameter: {reason}")
        else:
            super().__init__(
                f"Invalid parameter '{key}={value}': {reason}")
    # }}}


class InvalidMethodError(RestlessError):
    # InvalidMethodError {{{
    kind = ErrorKind.InvalidMethod

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Invalid HTTP method: {method}")
    # }}}


class RequestTimeoutError(RestlessError):
    # RequestTimeoutError {{{
    kind = ErrorKind.Timeout

    def __init__(self, seconds: int) -> None:
        self.seconds = seconds
        super().__init__(f"Request timeout after {seconds} seconds")
    # }}}


class TabStoreError(RestlessError):
    # TabStoreError {{{
    kind = ErrorKind.Tab

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Tab error: {message}")
    # }}}


class ResponseParsingError(RestlessError):
    # ResponseParsingError {{{
    kind = ErrorKind.ResponseParsing

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.message = message
        self.line = line
        super().__init__(f"Response parsing error: {message}")
    # }}}


class AppStateError(RestlessError):
    # AppStateError {{{
    kind = ErrorKind.AppState

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Application state error: {message}")
    # }}}


class TerminalError(RestlessError):
    # TerminalError {{{
    kind = ErrorKind.Terminal

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Terminal error: {message}")
    # }}}


class ConfigurationError(RestlessError):
    # ConfigurationError {{{
    kind = ErrorKind.Configuration

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Configuration error: {message}")
    # }}}
