import pytest
import requests
from unittest.mock import patch
from req_struct import HttpRequest
from request import (
    TIMEOUT,
    is_ready,
    build_url,
    send_request,
    build_headers,
    validate_request,
)
from errors import (
    ErrorKind,
    NetworkError,
    InvalidUrlError,
    InvalidHeaderError,
    RequestTimeoutError,
    ConnectionFailedError,
    InvalidParameterError,
)


class TestValidateRequest:
    def test_valid_request_passes(self, valid_request):
        validate_request(valid_request)
        assert is_ready(valid_request)

    @pytest.mark.parametrize("url", ["", "   "])
    def test_blank_url(self, url):
        with pytest.raises(InvalidUrlError, match="URL cannot be empty"):
            validate_request(HttpRequest(url=url))

    @pytest.mark.parametrize("url", [
        "ftp://example.com",
        "example.com",
        "HTTP://example.com",
    ])
    def test_unsupported_scheme(self, url):
        with pytest.raises(InvalidUrlError) as excinfo:
            validate_request(HttpRequest(url=url))

        assert excinfo.value.url == url
        assert not is_ready(HttpRequest(url=url))

    def test_header_with_empty_key(self):
        request = HttpRequest(url="http://a", headers=[("  ", "x")])

        with pytest.raises(InvalidHeaderError):
            validate_request(request)

    @pytest.mark.parametrize("header", [
        ("X-Evil", "a\r\nInjected: 1"),
        ("X-\nEvil", "a"),
    ])
    def test_header_with_line_break(self, header):
        request = HttpRequest(url="http://a", headers=[header])

        with pytest.raises(InvalidHeaderError, match="line breaks"):
            validate_request(request)

    def test_header_key_must_be_ascii(self):
        request = HttpRequest(url="http://a", headers=[("X-é", "1")])

        with pytest.raises(InvalidHeaderError, match="must be ASCII"):
            validate_request(request)
        assert not is_ready(request)

    def test_latin1_header_value_is_allowed(self):
        validate_request(HttpRequest(url="http://a",
                                     headers=[("X-Name", "Zoë")]))

    def test_header_value_must_be_latin1(self):
        request = HttpRequest(url="http://a",
                              headers=[("X-Name", "Zoë €")])

        with pytest.raises(InvalidHeaderError, match="Latin-1"):
            validate_request(request)

    def test_param_with_empty_key(self):
        request = HttpRequest(url="http://a", params=[(" ", "1")])

        with pytest.raises(InvalidParameterError) as excinfo:
            validate_request(request)
        assert excinfo.value.kind == ErrorKind.InvalidParameter

    def test_empty_param_value_is_allowed(self):
        validate_request(HttpRequest(url="http://a", params=[("flag", "")]))


class TestBuildUrl:
    def test_without_params(self):
        assert build_url("https://x.io/a", []) == "https://x.io/a"

    def test_params_are_percent_encoded(self):
        url = build_url("https://x.io/search",
                        [("q", "a b"), ("tag", "c&d")])

        assert url == "https://x.io/search?q=a%20b&tag=c%26d"

    def test_existing_query_is_extended(self):
        url = build_url("https://x.io/search?lang=en", [("q", "x/y")])

        assert url == "https://x.io/search?lang=en&q=x%2Fy"


def test_build_headers_merges_duplicates():
    headers = build_headers([
        ("Accept", "text/html"),
        ("X-Id", "1"),
        ("accept", "application/json"),
    ])

    assert headers["Accept"] == "text/html, application/json"
    assert headers["x-id"] == "1"
    assert len(headers) == 2


class TestSendRequest:
    @patch("request.requests.request")
    def test_success_returns_status_headers_and_body(
            self, mock_request, valid_request, json_response):
        mock_request.return_value = json_response

        status, headers, body = send_request(valid_request)

        assert status == 200
        assert headers == "Content-Type: application/json\n" + \
            "Content-Length: 7"
        assert body == '{"a":1}'

        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://api.example.com/users?page=1")
        assert kwargs["headers"]["content-type"] == "application/json"
        assert kwargs["data"] == '{"name": "Ada"}'.encode("utf-8")
        assert kwargs["timeout"] == TIMEOUT

    @patch("request.requests.request")
    def test_no_body_sends_no_data(self, mock_request, json_response):
        mock_request.return_value = json_response

        send_request(HttpRequest(url="http://localhost:8080"))

        assert mock_request.call_args.kwargs["data"] is None

    @patch("request.requests.request")
    def test_invalid_request_never_reaches_network(self, mock_request):
        with pytest.raises(InvalidUrlError):
            send_request(HttpRequest(url="ftp://example.com"))

        mock_request.assert_not_called()

    @pytest.mark.parametrize("exception", [
        requests.exceptions.Timeout("slow"),
        requests.exceptions.ReadTimeout("slow"),
        requests.exceptions.ConnectTimeout("slow"),
    ])
    @patch("request.requests.request")
    def test_timeouts(self, mock_request, exception):
        mock_request.side_effect = exception

        with pytest.raises(RequestTimeoutError) as excinfo:
            send_request(HttpRequest(url="http://a"))

        assert excinfo.value.seconds == 30
        assert str(excinfo.value) == "Request timeout after 30 seconds"
        assert excinfo.value.__cause__ is exception

    @patch("request.requests.request")
    def test_connection_failure(self, mock_request):
        mock_request.side_effect = \
            requests.exceptions.ConnectionError("refused")

        with pytest.raises(ConnectionFailedError) as excinfo:
            send_request(HttpRequest(url="http://a"))

        assert excinfo.value.kind == ErrorKind.Connection
        assert "refused" in str(excinfo.value)

    @pytest.mark.parametrize("exception", [
        requests.exceptions.TooManyRedirects("loop"),
        requests.exceptions.InvalidURL("bad"),
        requests.exceptions.RequestException("other"),
    ])
    @patch("request.requests.request")
    def test_other_failures_are_network_errors(self, mock_request,
                                               exception):
        mock_request.side_effect = exception

        with pytest.raises(NetworkError) as excinfo:
            send_request(HttpRequest(url="http://a"))

        assert excinfo.value.cause is exception

    @patch("request.requests.request")
    def test_header_that_can_not_be_encoded_never_reaches_network(
            self, mock_request):
        request = HttpRequest(url="http://a", headers=[("X-é", "1")])

        with pytest.raises(InvalidHeaderError):
            send_request(request)

        mock_request.assert_not_called()

    @pytest.mark.parametrize("exception", [
        UnicodeEncodeError("ascii", "é", 0, 1, "ordinal not in range(128)"),
        ValueError("Invalid header value"),
    ])
    @patch("request.requests.request")
    def test_encoding_failures_are_network_errors(self, mock_request,
                                                  exception):
        mock_request.side_effect = exception

        with pytest.raises(NetworkError) as excinfo:
            send_request(HttpRequest(url="http://a"))

        assert excinfo.value.cause is exception
