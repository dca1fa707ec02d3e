import logging
from typing import Optional
from request import check_header
from req_struct import HttpMethod
from dataclasses import dataclass, field
from errors import InvalidHeaderError, InvalidParameterError


HEADER_DELIMITER = ":"
PARAM_DELIMITER = "="

log = logging.getLogger(__name__)


@dataclass
class EditBuffers:
    """
    The single staging area mirroring the request of the
    selected tab. Only the tab store copies it in and out.
    """
    # EditBuffers {{{
    url_input: str = ""
    selected_method: HttpMethod = HttpMethod.GET
    body_input: str = ""

    headers_input: list[tuple[str, str]] = field(default_factory=list)
    current_header_key: str = ""
    current_header_value: str = ""

    params_input: list[tuple[str, str]] = field(default_factory=list)
    current_param_key: str = ""
    current_param_value: str = ""

    # Reserved for editing a committed pair in place
    editing_header_index: Optional[int] = None
    editing_param_index: Optional[int] = None
    # }}}


def type_header_char(buffers: EditBuffers, char: str) -> None:
    """
    The first ':' is kept on the key and switches input over
    to the value, later ones are plain value characters.
    """
    # type_header_char {{{
    key, value = _type_char(buffers.current_header_key,
                            buffers.current_header_value,
                            char, HEADER_DELIMITER)
    buffers.current_header_key = key
    buffers.current_header_value = value
    # }}}


def type_param_char(buffers: EditBuffers, char: str) -> None:
    # type_param_char {{{
    key, value = _type_char(buffers.current_param_key,
                            buffers.current_param_value,
                            char, PARAM_DELIMITER)
    buffers.current_param_key = key
    buffers.current_param_value = value
    # }}}


def backspace_header(buffers: EditBuffers) -> None:
    # backspace_header {{{
    if buffers.current_header_value != "":
        buffers.current_header_value = buffers.current_header_value[:-1]
    else:
        buffers.current_header_key = buffers.current_header_key[:-1]
    # }}}


def backspace_param(buffers: EditBuffers) -> None:
    # backspace_param {{{
    if buffers.current_param_value != "":
        buffers.current_param_value = buffers.current_param_value[:-1]
    else:
        buffers.current_param_key = buffers.current_param_key[:-1]
    # }}}


def clear_header_input(buffers: EditBuffers) -> None:
    # clear_header_input {{{
    buffers.current_header_key = ""
    buffers.current_header_value = ""
    # }}}


def clear_param_input(buffers: EditBuffers) -> None:
    # clear_param_input {{{
    buffers.current_param_key = ""
    buffers.current_param_value = ""
    # }}}


def add_header(buffers: EditBuffers) -> tuple[str, str]:
    """
    Commits the pending header. On rejection the pending
    input is left untouched so it can be corrected.
    """
    # add_header {{{
    key, value = _split_pending(buffers.current_header_key,
                                buffers.current_header_value,
                                HEADER_DELIMITER)

    try:
        check_header(key, value)
    except InvalidHeaderError as error:
        log.debug("Rejected header %r: %s", key, error.reason)
        raise

    buffers.headers_input.append((key, value))
    clear_header_input(buffers)
    return (key, value)
    # }}}


def add_param(buffers: EditBuffers) -> tuple[str, str]:
    # add_param {{{
    key, value = _split_pending(buffers.current_param_key,
                                buffers.current_param_value,
                                PARAM_DELIMITER)

    if key == "":
        log.debug("Rejected parameter with empty key")
        raise InvalidParameterError(key, value,
                                    "parameter key cannot be empty")

    buffers.params_input.append((key, value))
    clear_param_input(buffers)
    return (key, value)
    # }}}


def remove_header(buffers: EditBuffers, index: int) -> tuple[str, str]:
    # remove_header {{{
    if index < 0 or index >= len(buffers.headers_input):
        raise InvalidHeaderError("", "", f"no header at index {index}")
    return buffers.headers_input.pop(index)
    # }}}


def remove_param(buffers: EditBuffers, index: int) -> tuple[str, str]:
    # remove_param {{{
    if index < 0 or index >= len(buffers.params_input):
        raise InvalidParameterError("", "", f"no parameter at index {index}")
    return buffers.params_input.pop(index)
    # }}}


def _type_char(key: str, value: str, char: str,
               delimiter: str) -> tuple[str, str]:
    # _type_char {{{
    if delimiter in key:
        return (key, value + char)
    return (key + char, value)
    # }}}


def _split_pending(key: str, value: str,
                   delimiter: str) -> tuple[str, str]:
    """
    Splits the key on its first delimiter. Whatever follows
    it is prepended to the value, which also covers a key
    holding a complete 'key:value' text.
    """
    # _split_pending {{{
    name, _, rest = key.partition(delimiter)
    return (name.strip(), (rest + value).strip())
    # }}}
