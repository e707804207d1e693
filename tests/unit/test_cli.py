"""
Unit tests for the command line interface.
"""

import json

import pytest

from httpmessage.__main__ import build_parser, main
from httpmessage.config import get_config


class TestUriCommand:
    """Tests for the uri subcommand."""

    def test_json_output(self, capsys):
        """Test that --json prints the components as JSON."""
        assert main(["uri", "https://ada@a.b:8443/p?q=1#f", "--json"]) == 0

        components = json.loads(capsys.readouterr().out)
        assert components["scheme"] == "https"
        assert components["host"] == "a.b"
        assert components["port"] == 8443
        assert components["authority"] == "ada@a.b:8443"

    def test_text_output(self, capsys):
        """Test the aligned text output."""
        assert main(["uri", "http://a.b/docs"]) == 0

        out = capsys.readouterr().out
        assert "host       a.b" in out
        assert "path       /docs" in out

    def test_invalid_url(self, capsys):
        """Test that an unparsable URL exits with status 2."""
        assert main(["uri", "http://[::1/"]) == 2
        assert capsys.readouterr().err.startswith("Error: ")


class TestRequestCommand:
    """Tests for the request subcommand."""

    def test_render_request(self, capsys):
        """Test rendering a request with headers and a body."""
        code = main([
            "request", "POST", "http://api.local/users",
            "-H", "Content-Type: application/json",
            "-H", "X-Tag: a",
            "-H", "X-Tag: b",
            "--body", '{"name": "Ada"}',
        ])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("POST /users HTTP/1.1\r\nHost: api.local\r\n")
        assert "Content-Type: application/json\r\n" in out
        assert "X-Tag: a, b\r\n" in out
        assert '\r\n\r\n{"name": "Ada"}' in out

    def test_explicit_host_header(self, capsys):
        """Test that a Host header given on the command line replaces the URL host."""
        code = main(["request", "GET", "http://a.example/", "-H", "Host: b.example"])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("GET / HTTP/1.1\r\nHost: b.example\r\n")
        assert out.count("Host:") == 1
        assert "a.example" not in out

    def test_protocol(self, capsys):
        """Test the --protocol option."""
        main(["request", "GET", "http://a.b/", "--protocol", "1.0"])

        assert capsys.readouterr().out.startswith("GET / HTTP/1.0\r\n")

    def test_invalid_method(self, capsys):
        """Test that an unknown method exits with status 2."""
        assert main(["request", "FETCH", "http://a.b/"]) == 2
        assert "Invalid method" in capsys.readouterr().err

    def test_malformed_header(self):
        """Test that a header without a colon is an argument error."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["request", "GET", "http://a.b/", "-H", "no-colon"])

        assert exc_info.value.code == 2


class TestResponseCommand:
    """Tests for the response subcommand."""

    def test_render_response(self, capsys):
        """Test rendering a response with a cookie and a body."""
        code = main([
            "response", "404",
            "-H", "Content-Type: text/plain",
            "--body", "Not here",
            "--cookie", "sid=abc",
        ])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("HTTP/1.1 404 Not Found\r\nSet-Cookie: sid=abc; Path=/\r\n")
        assert "Content-Length: 8\r\n" in out
        assert out.rstrip("\n").endswith("\r\n\r\nNot here")

    def test_custom_reason(self, capsys):
        """Test the --reason option."""
        main(["response", "200", "--reason", "Fine"])

        assert capsys.readouterr().out.startswith("HTTP/1.1 200 Fine\r\n")

    def test_unknown_status(self, capsys):
        """Test that an unknown status code exits with status 2."""
        assert main(["response", "999"]) == 2
        assert "Invalid status code" in capsys.readouterr().err


class TestGlobalOptions:
    """Tests for options shared by all subcommands."""

    def test_log_level(self, capsys):
        """Test that --log-level updates the active configuration."""
        assert main(["--log-level", "DEBUG", "uri", "http://a.b/"]) == 0
        assert get_config().log_level == "DEBUG"

    def test_version(self, capsys):
        """Test the --version flag."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "httpmessage 1.0.0" in capsys.readouterr().out
