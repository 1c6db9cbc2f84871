"""
Unit tests for the Exchange response protocol.
"""

import pytest

from fileserver.core.exchange import NO_BODY_CONTENT


class TestSendResponseHeaders:
    """Tests for Exchange.send_response_headers()."""

    def test_status_line_and_transport_headers(self, make_exchange, parse_response):
        """Test that Date, Server and Connection are always added."""
        exchange = make_exchange("GET", "/")
        exchange.send_response_headers(200, 0)

        response = parse_response(exchange)
        assert response.version == "HTTP/1.1"
        assert response.status == 200
        assert response.reason == "OK"
        assert response.header("Date")
        assert response.header("Server") == "fileserver/1.0"
        assert response.header("Connection") == "close"

    def test_fixed_length(self, make_exchange, parse_response):
        """Test that a known length becomes Content-Length."""
        exchange = make_exchange("GET", "/")
        exchange.response_headers.set("Content-Type", "text/plain")
        exchange.send_response_headers(200, 5)
        exchange.response_body.write(b"hello")

        response = parse_response(exchange)
        assert response.header("Content-Length") == "5"
        assert response.header("Content-Type") == "text/plain"
        assert response.body == b"hello"
        assert exchange.bytes_sent == 5

    def test_no_body_on_get_error(self, make_exchange, parse_response):
        """Test that a bodyless GET reply announces zero bytes."""
        exchange = make_exchange("GET", "/missing")
        exchange.send_response_headers(404, NO_BODY_CONTENT)

        response = parse_response(exchange)
        assert response.status == 404
        assert response.header("Content-Length") == "0"
        assert response.body == b""

    def test_not_modified_has_no_length(self, make_exchange, parse_response):
        """Test that 304 carries no Content-Length."""
        exchange = make_exchange("GET", "/a.txt")
        exchange.response_headers.set("ETag", "ABC")
        exchange.send_response_headers(304, NO_BODY_CONTENT)

        response = parse_response(exchange)
        assert response.status == 304
        assert response.header("ETag") == "ABC"
        assert "Content-Length" not in response.headers

    def test_head_keeps_caller_length(self, make_exchange, parse_response):
        """Test that HEAD replies keep the Content-Length the caller set."""
        exchange = make_exchange("HEAD", "/a.txt")
        exchange.response_headers.set("Content-Length", "42")
        exchange.send_response_headers(200, NO_BODY_CONTENT)

        response = parse_response(exchange)
        assert response.header("Content-Length") == "42"
        assert response.body == b""

    def test_head_ignores_body_length(self, make_exchange):
        """Test that a body length on HEAD is dropped, not honoured."""
        exchange = make_exchange("HEAD", "/a.txt")
        exchange.send_response_headers(200, 10)

        assert exchange.expected_length == 0
        with pytest.raises(IOError):
            exchange.response_body.write(b"x")

    def test_headers_sent_once(self, make_exchange):
        """Test that a second status line is refused."""
        exchange = make_exchange("GET", "/")
        exchange.send_response_headers(200, 0)

        assert exchange.headers_sent
        assert exchange.status == 200
        with pytest.raises(IOError):
            exchange.send_response_headers(500, NO_BODY_CONTENT)

    def test_invalid_length(self, make_exchange):
        """Test that lengths below -1 are rejected."""
        exchange = make_exchange("GET", "/")

        with pytest.raises(ValueError):
            exchange.send_response_headers(200, -2)


class TestResponseBody:
    """Tests for the response body stream."""

    def test_write_before_headers(self, make_exchange):
        """Test that the body cannot precede the status line."""
        exchange = make_exchange("GET", "/")

        with pytest.raises(IOError):
            exchange.response_body.write(b"early")

    def test_write_past_announced_length(self, make_exchange):
        """Test that no more than Content-Length bytes go out."""
        exchange = make_exchange("GET", "/")
        exchange.send_response_headers(200, 3)
        exchange.response_body.write(b"abc")

        with pytest.raises(IOError):
            exchange.response_body.write(b"d")
        assert exchange.bytes_sent == 3

    def test_write_after_close(self, make_exchange):
        """Test that a closed body stream refuses writes."""
        exchange = make_exchange("GET", "/")
        exchange.send_response_headers(200, 3)
        exchange.response_body.close()

        with pytest.raises(ValueError):
            exchange.response_body.write(b"abc")

    def test_chunks_arrive_in_order(self, make_exchange, parse_response):
        """Test that several writes concatenate."""
        exchange = make_exchange("GET", "/")
        exchange.send_response_headers(200, 6)
        for chunk in (b"ab", b"cd", b"ef"):
            exchange.response_body.write(chunk)

        assert parse_response(exchange).body == b"abcdef"


class TestExchangeLifecycle:
    """Tests for closing an exchange."""

    def test_close_is_idempotent(self, make_exchange):
        """Test that the sink is closed once however often close() runs."""
        exchange = make_exchange("GET", "/")
        exchange.close()
        exchange.close()

        assert exchange.closed
        assert exchange.sink.close_count == 1
        assert exchange.request_body.closed
        assert exchange.response_body.closed

    def test_context_manager(self, make_exchange):
        """Test that leaving a with block closes the exchange."""
        with make_exchange("GET", "/") as exchange:
            pass

        assert exchange.sink.close_count == 1

    def test_request_body_readable(self, make_exchange):
        """Test that the request body is exposed as a stream."""
        exchange = make_exchange("GET", "/")

        assert exchange.request_body.read() == b""
