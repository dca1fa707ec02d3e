import pytest
from errors import InvalidHeaderError, InvalidParameterError
from edit_buffers import (
    add_param,
    add_header,
    remove_param,
    remove_header,
    backspace_param,
    type_param_char,
    backspace_header,
    type_header_char,
    clear_header_input,
)


def type_header(buffers, text):
    for char in text:
        type_header_char(buffers, char)


def type_param(buffers, text):
    for char in text:
        type_param_char(buffers, char)


class TestHeaderInput:
    def test_delimiter_switches_to_value(self, buffers):
        type_header(buffers, "Accept: text/html")

        assert buffers.current_header_key == "Accept:"
        assert buffers.current_header_value == " text/html"

    def test_later_delimiters_belong_to_value(self, buffers):
        type_header(buffers, "Host:localhost:8080")

        assert buffers.current_header_key == "Host:"
        assert buffers.current_header_value == "localhost:8080"

    def test_backspace_over_delimiter_returns_to_key(self, buffers):
        type_header(buffers, "Ab:c")
        backspace_header(buffers)
        backspace_header(buffers)
        type_header_char(buffers, "x")

        assert buffers.current_header_key == "Abx"
        assert buffers.current_header_value == ""

    def test_backspace_on_empty_input(self, buffers):
        backspace_header(buffers)

        assert buffers.current_header_key == ""
        assert buffers.current_header_value == ""

    def test_add_header_trims_and_clears(self, buffers):
        type_header(buffers, " Content-Type :  application/json ")

        assert add_header(buffers) == ("Content-Type", "application/json")
        assert buffers.headers_input == [("Content-Type", "application/json")]
        assert buffers.current_header_key == ""
        assert buffers.current_header_value == ""

    def test_add_header_keeps_value_colons(self, buffers):
        type_header(buffers, "Foo: bar: baz")

        assert add_header(buffers) == ("Foo", "bar: baz")

    def test_key_without_delimiter_gets_empty_value(self, buffers):
        type_header(buffers, "X-Flag")

        assert add_header(buffers) == ("X-Flag", "")

    def test_pasted_pair_in_key_is_split(self, buffers):
        buffers.current_header_key = "X-Id:42"

        assert add_header(buffers) == ("X-Id", "42")

    def test_empty_key_is_rejected_and_input_kept(self, buffers):
        type_header(buffers, ": value")

        with pytest.raises(InvalidHeaderError):
            add_header(buffers)

        assert buffers.headers_input == []
        assert buffers.current_header_key == ":"
        assert buffers.current_header_value == " value"

    def test_line_break_is_rejected(self, buffers):
        buffers.current_header_key = "X-A:"
        buffers.current_header_value = "1\r\nX-B: 2"

        with pytest.raises(InvalidHeaderError):
            add_header(buffers)

    def test_non_ascii_key_is_rejected(self, buffers):
        type_header(buffers, "X-Näme: 1")

        with pytest.raises(InvalidHeaderError, match="ASCII"):
            add_header(buffers)
        assert buffers.headers_input == []

    def test_value_outside_latin1_is_rejected(self, buffers):
        type_header(buffers, "X-Name:Zoë €")

        with pytest.raises(InvalidHeaderError, match="Latin-1"):
            add_header(buffers)
        assert buffers.current_header_value == "Zoë €"

    def test_clear(self, buffers):
        type_header(buffers, "A:b")
        clear_header_input(buffers)

        assert buffers.current_header_key == ""
        assert buffers.current_header_value == ""


class TestParamInput:
    def test_add_param(self, buffers):
        type_param(buffers, "q = a=b")

        assert buffers.current_param_key == "q ="
        assert add_param(buffers) == ("q", "a=b")
        assert buffers.params_input == [("q", "a=b")]

    def test_backspace(self, buffers):
        type_param(buffers, "k=v")
        backspace_param(buffers)
        backspace_param(buffers)

        assert buffers.current_param_key == "k"

    def test_empty_key_is_rejected(self, buffers):
        type_param(buffers, "=1")

        with pytest.raises(InvalidParameterError):
            add_param(buffers)
        assert buffers.params_input == []


def test_remove_pairs(buffers):
    buffers.headers_input = [("A", "1"), ("B", "2")]
    buffers.params_input = [("p", "1")]

    assert remove_header(buffers, 0) == ("A", "1")
    assert buffers.headers_input == [("B", "2")]
    assert remove_param(buffers, 0) == ("p", "1")
    assert buffers.params_input == []


@pytest.mark.parametrize("index", [-1, 2])
def test_remove_out_of_range(buffers, index):
    buffers.headers_input = [("A", "1"), ("B", "2")]

    with pytest.raises(InvalidHeaderError):
        remove_header(buffers, index)
    with pytest.raises(InvalidParameterError):
        remove_param(buffers, index)

    assert len(buffers.headers_input) == 2


def test_remove_message_without_pair(buffers):
    with pytest.raises(InvalidHeaderError) as excinfo:
        remove_header(buffers, 0)

    assert str(excinfo.value) == "Invalid header: no header at index 0"
