"""Tests for input validators and client IP extraction."""

from starlette.requests import Request

from urlsh.core.validators import (
    MAX_IP_ADDRESS_LENGTH,
    get_client_ip,
    is_valid_url,
    sanitize_short_code,
    validate_url_length,
)


def make_request(headers=None, client=("10.0.0.9", 5000)) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "headers": raw_headers, "client": client})


class TestSanitizeShortCode:

    def test_accepts_generated_codes(self):
        assert sanitize_short_code("aZ09xY12") == "aZ09xY12"
        assert sanitize_short_code("Ab-_9zQw-1x_") == "Ab-_9zQw-1x_"

    def test_strips_whitespace(self):
        assert sanitize_short_code("  abc  ") == "abc"

    def test_rejects_bad_input(self):
        assert sanitize_short_code("") is None
        assert sanitize_short_code("abc/def") is None
        assert sanitize_short_code("abc;drop") is None
        assert sanitize_short_code("a" * 65) is None


class TestURLValidation:

    def test_valid_urls(self):
        valid_urls = [
            "http://example.com",
            "https://example.com",
            "https://www.example.com/path/to/page",
            "http://subdomain.example.com:8080/path?query=value",
            "http://localhost:8090/x",
        ]
        for url in valid_urls:
            assert is_valid_url(url), f"Should be valid: {url}"

    def test_invalid_urls(self):
        invalid_urls = [
            "not-a-url",
            "ftp://example.com",
            "example.com",
            "",
            "http://",
            "javascript:alert(1)",
        ]
        for url in invalid_urls:
            assert not is_valid_url(url), f"Should be invalid: {url}"

    def test_length_limit(self):
        url = "https://example.com/" + "a" * 100
        assert is_valid_url(url, max_length=200)
        assert not is_valid_url(url, max_length=50)
        assert not validate_url_length("", 10)


class TestClientIP:

    def test_forwarded_for_first_entry(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert get_client_ip(request) == "203.0.113.7"

    def test_real_ip(self):
        request = make_request({"X-Real-Ip": "198.51.100.4"})
        assert get_client_ip(request) == "198.51.100.4"

    def test_peer_address(self):
        assert get_client_ip(make_request()) == "10.0.0.9"

    def test_no_client(self):
        assert get_client_ip(make_request(client=None)) == "unknown"

    def test_skips_headers_that_are_not_addresses(self):
        request = make_request({"X-Forwarded-For": "x" * 200, "X-Real-Ip": "198.51.100.4"})
        assert get_client_ip(request) == "198.51.100.4"

        request = make_request({"X-Forwarded-For": "not-an-ip", "X-Real-Ip": "also-not"})
        assert get_client_ip(request) == "10.0.0.9"

    def test_ipv6_forwarded_for(self):
        request = make_request({"X-Forwarded-For": "2001:DB8::1"})
        assert get_client_ip(request) == "2001:db8::1"

    def test_result_fits_column(self):
        request = make_request(client=("h" * 100, 5000))
        assert len(get_client_ip(request)) == MAX_IP_ADDRESS_LENGTH
