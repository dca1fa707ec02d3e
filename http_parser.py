from req_struct import HttpResponse
from errors import ResponseParsingError
from typing import Optional
import logging
import json


log = logging.getLogger(__name__)


def build_response(status_code: int, headers: str,
                   body: str) -> HttpResponse:
    """
    Checked construction of a response from the dispatcher
    output. Raises ResponseParsingError on a header line
    with an empty key.
    """
    # build_response {{{
    return HttpResponse(
        status_code=status_code,
        headers=split_headers(headers),
        body=pretty_print_json(body)
    )
    # }}}


def build_response_unchecked(status_code: int, headers: str,
                             body: str) -> HttpResponse:
    """
    Best-effort construction used as a display fallback,
    never raises.
    """
    # build_response_unchecked {{{
    try:
        formatted = pretty_print_json(body)
    except (TypeError, ValueError, RecursionError):
        formatted = body

    return HttpResponse(
        status_code=status_code,
        headers=split_headers_lenient(headers),
        body=formatted
    )
    # }}}


def process_response(status_code: int, headers: str, body: str
                     ) -> tuple[HttpResponse, Optional[ResponseParsingError]]:
    """
    Turns the raw dispatcher output into a response. When
    the checked path fails the unchecked one is used and
    the parsing error is handed back as a warning.
    """
    # process_response {{{
    try:
        return (build_response(status_code, headers, body), None)
    except ResponseParsingError as error:
        log.warning("Falling back to unchecked response: %s", error)
        return (build_response_unchecked(status_code, headers, body), error)
    # }}}


def pretty_print_json(raw: str) -> str:
    """
    JSON bodies are re-indented by two spaces, anything else
    (plain text, XML, ...) is returned as it came in.
    """
    # pretty_print_json {{{
    if raw.strip() == "":
        return ""

    try:
        value = json.loads(raw.strip())
    except (ValueError, RecursionError):
        return raw

    return json.dumps(value, indent=2, ensure_ascii=False)
    # }}}


def split_headers(headers: str) -> list[tuple[str, str]]:
    # split_headers {{{
    return _split_headers(headers, strict=True)
    # }}}


def split_headers_lenient(headers: str) -> list[tuple[str, str]]:
    # split_headers_lenient {{{
    return _split_headers(headers, strict=False)
    # }}}


def _split_headers(headers: str, strict: bool) -> list[tuple[str, str]]:
    """
    Responsible for the 'Key: Value' lines of the header blob.
    Only the first colon splits, so values may hold colons.
    """
    # _split_headers {{{
    result = []
    if headers.strip() == "":
        return result

    for number, line in enumerate(headers.splitlines(), start=1):
        line = line.strip()
        if line == "":
            continue

        if ":" not in line:
            log.warning("Skipping malformed header on line %d: '%s'",
                        number, line)
            continue

        key, value = line.split(":", 1)
        key = key.strip()
        value = value.strip()

        if key == "":
            if strict:
                raise ResponseParsingError(
                    f"Empty header key on line {number}: '{line}'",
                    line=number)
            log.warning("Dropping header with empty key on line %d: '%s'",
                        number, line)
            continue

        result.append((key, value))

    return result
    # }}}
