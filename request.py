import logging
import requests
from urllib.parse import quote
from req_struct import HttpRequest
from requests.structures import CaseInsensitiveDict
from errors import (
    NetworkError,
    InvalidUrlError,
    InvalidHeaderError,
    RequestTimeoutError,
    ConnectionFailedError,
    InvalidParameterError,
)


TIMEOUT = 30                            # Seconds, for every request
SCHEMES = ("http://", "https://")       # Case-sensitive prefixes

log = logging.getLogger(__name__)


def validate_request(request: HttpRequest) -> None:
    """
    Raises the first problem found with the request. Runs
    before any network I/O takes place.
    """
    # validate_request {{{
    url = request.url
    if url.strip() == "":
        raise InvalidUrlError(url, "URL cannot be empty")

    if not url.startswith(SCHEMES):
        raise InvalidUrlError(url, "URL must start with http:// or https://")

    for key, value in request.headers:
        check_header(key, value)

    for key, value in request.params:
        if key.strip() == "":
            raise InvalidParameterError(key, value,
                                        "parameter key cannot be empty")
    # }}}


def check_header(key: str, value: str) -> None:
    """
    http.client writes header names as ASCII and values as
    Latin-1, anything it can not encode is rejected up front.
    """
    # check_header {{{
    if key.strip() == "":
        raise InvalidHeaderError(key, value, "header key cannot be empty")

    if _has_line_break(key) or _has_line_break(value):
        raise InvalidHeaderError(key, value,
                                 "header cannot contain line breaks")

    if not key.isascii():
        raise InvalidHeaderError(key, value, "header key must be ASCII")

    try:
        value.encode("latin-1")
    except UnicodeEncodeError as error:
        raise InvalidHeaderError(key, value,
                                 "header value must be Latin-1") from error
    # }}}


def is_ready(request: HttpRequest) -> bool:
    # is_ready {{{
    try:
        validate_request(request)
    except (InvalidUrlError, InvalidHeaderError, InvalidParameterError):
        return False
    return True
    # }}}


def build_url(url: str, params: list[tuple[str, str]]) -> str:
    """
    Appends the percent-encoded query parameters, keeping
    any query string already present in the url as is.
    """
    # build_url {{{
    if len(params) == 0:
        return url

    query = "&".join(
        f"{quote(key, safe='')}={quote(value, safe='')}"
        for key, value in params
    )
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"
    # }}}


def build_headers(headers: list[tuple[str, str]]) -> CaseInsensitiveDict:
    """
    requests keeps headers in a case-insensitive mapping, so
    repeated names are folded into one comma-separated field
    in insertion order rather than overwriting each other.
    """
    # build_headers {{{
    result = CaseInsensitiveDict()
    for key, value in headers:
        key = key.strip()
        if key in result:
            result[key] = f"{result[key]}, {value}"
        else:
            result[key] = value
    return result
    # }}}


def send_request(request: HttpRequest,
                 timeout: int = TIMEOUT) -> tuple[int, str, str]:
    """
    Primary function of the dispatcher. Returns the status
    code, the response headers as 'Key: Value' lines and the
    raw body text.
    """
    # send_request {{{
    validate_request(request)

    url = build_url(request.url, request.params)
    data = None
    if request.body is not None:
        data = request.body.encode("utf-8")

    log.info("Sending %s %s", request.method, url)

    try:
        response = requests.request(
            request.method, url,
            headers=build_headers(request.headers),
            data=data, timeout=timeout)
    except requests.exceptions.Timeout as exception:
        # ConnectTimeout is also a ConnectionError, timeout wins
        log.warning("Request to %s timed out after %ss", url, timeout)
        raise RequestTimeoutError(timeout) from exception
    except requests.exceptions.ConnectionError as exception:
        log.warning("Connection to %s failed: %s", url, exception)
        raise ConnectionFailedError(exception) from exception
    except requests.exceptions.RequestException as exception:
        log.warning("Request to %s failed: %s", url, exception)
        raise NetworkError(exception) from exception
    except (UnicodeError, ValueError) as exception:
        # http.client encoding failures are not RequestExceptions
        log.warning("Request to %s could not be encoded: %s", url, exception)
        raise NetworkError(exception) from exception

    headers = "\n".join(
        f"{key}: {value}" for key, value in response.headers.items()
    )
    log.info("Received %s from %s", response.status_code, url)
    return (response.status_code, headers, response.text)
    # }}}


def _has_line_break(text: str) -> bool:
    # _has_line_break {{{
    return "\n" in text or "\r" in text
    # }}}
