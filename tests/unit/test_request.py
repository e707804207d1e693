"""
Unit tests for HTTP requests.
"""

import pytest

from httpmessage.core.stream import Stream
from httpmessage.errors import ValidationError
from httpmessage.http.request import ALLOWED_METHODS, Request, validate_method
from httpmessage.http.uri import Uri


class TestRequestConstruction:
    """Tests for building a Request."""

    def test_basic_request(self):
        """Test the accessors of a simple GET request."""
        request = Request("GET", Uri("http://example.com/users?page=1"))

        assert request.method == "GET"
        assert request.uri.host == "example.com"
        assert request.protocol_version == "1.1"
        assert request.request_target == "/users?page=1"

    def test_uri_string_accepted(self):
        """Test that a URL string is parsed into a Uri."""
        request = Request("GET", "http://example.com/")

        assert isinstance(request.uri, Uri)
        assert str(request.uri) == "http://example.com/"

    def test_host_header_first(self):
        """Test that the Host header is derived from the Uri and comes first."""
        request = Request(
            "GET",
            Uri("http://host:8080/p"),
            headers={"Accept": "text/html", "X-Tag": "a"},
        )

        assert request.get_header_line("Host") == "host:8080"
        assert list(request.headers) == ["Host", "Accept", "X-Tag"]

    def test_explicit_host_kept(self):
        """Test that a Host header given at construction wins over the Uri."""
        request = Request("GET", "http://a.b/", headers={"host": "proxy.local"})

        assert request.get_header("Host") == ("proxy.local",)

    def test_no_host_for_relative_uri(self):
        """Test that a Uri without a host adds no Host header."""
        request = Request("GET", "/relative")

        assert request.has_header("Host") is False

    @pytest.mark.parametrize("method", ["", "get", "FETCH", "TRACE", None])
    def test_invalid_method(self, method):
        """Test that methods outside the allowed set are rejected."""
        with pytest.raises(ValidationError):
            Request(method, "http://a.b/")

    def test_allowed_methods(self):
        """Test that every allowed method validates."""
        for method in ALLOWED_METHODS:
            assert validate_method(method) == method

    def test_invalid_uri_type(self):
        """Test that a non-Uri, non-string uri is rejected."""
        with pytest.raises(ValidationError):
            Request("GET", 42)

    def test_body_must_be_stream(self):
        """Test that a raw bytes body is rejected."""
        with pytest.raises(ValidationError):
            Request("POST", "http://a.b/", body=b"raw")


class TestRequestTarget:
    """Tests for the request target."""

    @pytest.mark.parametrize("url,target", [
        ("http://a.b", "/"),
        ("http://a.b/p", "/p"),
        ("http://a.b/p?q=1", "/p?q=1"),
        ("http://a.b/p?q=1#frag", "/p?q=1#frag"),
        ("http://a.b/p#frag", "/p"),
    ])
    def test_derived_from_uri(self, url, target):
        """Test the origin-form target derived from the Uri."""
        assert Request("GET", url).request_target == target

    def test_override(self):
        """Test an explicit request target."""
        request = Request("OPTIONS", "http://a.b/p")
        updated = request.with_request_target("*")

        assert updated.request_target == "*"
        assert request.request_target == "/p"
        assert updated.with_request_target("*") is updated

    def test_follows_new_uri(self):
        """Test that the derived target follows with_uri()."""
        request = Request("GET", "http://a.b/old")

        assert request.with_uri("http://a.b/new").request_target == "/new"


class TestRequestCopyOnWrite:
    """Tests for the with_* methods."""

    def test_with_method(self):
        """Test changing the method."""
        request = Request("GET", "http://a.b/")
        updated = request.with_method("POST")

        assert updated.method == "POST"
        assert request.method == "GET"
        assert request.with_method("GET") is request

    def test_with_uri_syncs_host(self):
        """Test that a new Uri updates the Host header."""
        request = Request("GET", "http://a.b/", headers={"Accept": "x"})
        updated = request.with_uri(Uri("http://other.org:81/"))

        assert updated.get_header_line("Host") == "other.org:81"
        assert list(updated.headers)[0] == "Host"
        assert request.get_header_line("Host") == "a.b"

    def test_with_uri_preserve_host(self):
        """Test that preserve_host keeps the current Host header."""
        request = Request("GET", "http://a.b/")
        updated = request.with_uri("http://other.org/", preserve_host=True)

        assert updated.get_header_line("Host") == "a.b"
        assert updated.uri.host == "other.org"

    def test_with_uri_reuses_host_spelling(self):
        """Test that an existing Host casing is kept when syncing."""
        request = Request("GET", "http://a.b/", headers={"Accept": "x", "HOST": "a.b"})
        updated = request.with_uri("http://c.d/")

        assert list(updated.headers) == ["HOST", "Accept"]
        assert updated.get_header_line("host") == "c.d"

    def test_with_same_uri_returns_same(self):
        """Test that passing the current Uri instance is a no-op."""
        uri = Uri("http://a.b/")
        request = Request("GET", uri)

        assert request.with_uri(uri) is request

    def test_header_mutators(self):
        """Test header changes through the request."""
        request = Request("GET", "http://a.b/")
        updated = request.with_header("Accept", "text/html").with_added_header("accept", "*/*")

        assert updated.get_header("ACCEPT") == ("text/html", "*/*")
        assert request.has_header("Accept") is False
        assert updated.without_header("Accept").has_header("Accept") is False
        assert request.without_header("X-Missing") is request

    def test_with_protocol_version(self):
        """Test changing the protocol version."""
        request = Request("GET", "http://a.b/")

        assert request.with_protocol_version("1.0").protocol_version == "1.0"
        assert request.with_protocol_version("1.1") is request

    def test_copies_share_body(self):
        """Test that derived requests share the body stream."""
        body = Stream.create(b"data")
        request = Request("POST", "http://a.b/", body=body)
        derived = request.with_header("X-Tag", "a")

        assert derived.body is body
        assert request.with_body(body) is request


class TestRequestRendering:
    """Tests for the wire form of a request."""

    def test_str_renders_all_headers(self):
        """Test that every header appears in the rendered request."""
        request = Request(
            "POST",
            "http://a.b/users?x=1",
            headers={"Content-Type": "application/json", "X-Tag": ["a", "b"]},
            body=Stream.create('{"name": "Ada"}'),
        )

        assert str(request) == (
            "POST /users?x=1 HTTP/1.1\r\n"
            "Host: a.b\r\n"
            "Content-Type: application/json\r\n"
            "X-Tag: a, b\r\n"
            "\r\n"
            '{"name": "Ada"}'
        )

    def test_to_bytes(self):
        """Test the bytes form of a request without a body."""
        request = Request("GET", "http://a.b/", protocol_version="1.0")

        assert request.to_bytes() == b"GET / HTTP/1.0\r\nHost: a.b\r\n\r\n"

    def test_request_line(self):
        """Test the request line."""
        assert Request("HEAD", "http://a.b/x").request_line == "HEAD /x HTTP/1.1"
