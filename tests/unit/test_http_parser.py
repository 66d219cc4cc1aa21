"""Tests for the raw HTTP parser."""
import pytest

from drivepy.core.exceptions import FormatError
from drivepy.core.http import parse_http_request, parse_http_response


RAW_RESPONSE = (
    "HTTP/1.1 201 Created\r\n"
    "Content-Type: application/json\r\n"
    "Location: https://example.test/items/1\r\n"
    "\r\n"
    '{"id": "1",\r\n\r\n "name": "a b"}'
)


class TestParseHttpResponse:
    """Test suite for parse_http_response."""

    def test_status_line(self):
        response = parse_http_response(RAW_RESPONSE)

        assert response.status_code == 201
        assert response.status_description == 'Created'

    def test_multi_word_description(self):
        response = parse_http_response("HTTP/1.1 404 Not Found\r\n\r\n")

        assert response.status_code == 404
        assert response.status_description == 'Not Found'

    def test_headers_case_insensitive(self):
        response = parse_http_response(RAW_RESPONSE)

        assert response.headers['content-type'] == 'application/json'
        assert response.location == 'https://example.test/items/1'

    def test_header_value_may_contain_separator(self):
        response = parse_http_response("HTTP/1.1 200 OK\r\nX-Note: a: b\r\n\r\n")

        assert response.headers['X-Note'] == 'a: b'

    def test_duplicate_header_last_wins(self):
        raw = "HTTP/1.1 200 OK\r\nX-Id: first\r\nx-id: second\r\n\r\n"
        response = parse_http_response(raw)

        assert response.headers.getall('X-Id') == ['second']

    def test_body_preserved_exactly(self):
        response = parse_http_response(RAW_RESPONSE)

        assert response.body == b'{"id": "1",\r\n\r\n "name": "a b"}'
        assert response.stream().read() == response.body

    def test_bytes_input(self):
        response = parse_http_response(RAW_RESPONSE.encode('utf-8'))

        assert response.json() == {'id': '1', 'name': 'a b'}

    def test_no_body(self):
        response = parse_http_response("HTTP/1.1 204 No Content\r\n\r\n")

        assert response.body == b''

    def test_parsing_twice_is_identical(self):
        first = parse_http_response(RAW_RESPONSE)
        second = parse_http_response(RAW_RESPONSE)

        assert first.status_code == second.status_code
        assert first.status_description == second.status_description
        assert list(first.headers.items()) == list(second.headers.items())
        assert first.body == second.body

    @pytest.mark.parametrize('raw', [
        '',
        'HTTP/1.1 200\r\n\r\n',
        'garbage\r\n',
    ])
    def test_short_first_line(self, raw):
        with pytest.raises(FormatError):
            parse_http_response(raw)

    def test_non_numeric_status(self):
        with pytest.raises(FormatError):
            parse_http_response("HTTP/1.1 OK Fine\r\n\r\n")

    def test_header_without_separator(self):
        with pytest.raises(FormatError):
            parse_http_response("HTTP/1.1 200 OK\r\nBroken-Header\r\n\r\n")

    def test_header_with_empty_name(self):
        with pytest.raises(FormatError):
            parse_http_response("HTTP/1.1 200 OK\r\n: value\r\n\r\n")

    def test_undecodable_bytes(self):
        with pytest.raises(FormatError) as exc_info:
            parse_http_response(b"HTTP/1.1 200 OK\r\n\r\n\xff\xfe")

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


class TestParseHttpRequest:
    """Test suite for parse_http_request."""

    def test_request_line(self):
        request = parse_http_request("GET https://example.test/drive/root HTTP/1.1\r\n\r\n")

        assert request.method == 'GET'
        assert request.url == 'https://example.test/drive/root'
        assert request.version == 'HTTP/1.1'
        assert request.body == b''

    def test_headers_and_body(self):
        raw = (
            "PATCH https://example.test/items/1 HTTP/1.1\r\n"
            "Content-Type: application/json\r\n"
            "Content-Length: 13\r\n"
            "\r\n"
            '{"name":"x"}\n'
        )
        request = parse_http_request(raw)

        assert request.content_type == 'application/json'
        assert request.headers['Content-Length'] == '13'
        assert request.text() == '{"name":"x"}\n'
