"""
pytest configuration and fixtures.
"""

import io
import logging
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpmessage import Stream, set_config
from httpmessage.logging import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_config(monkeypatch) -> Generator[None, None, None]:
    """Each test starts from the default configuration."""
    for name in (
        "HTTPMESSAGE_PROTOCOL_VERSION",
        "HTTPMESSAGE_TEMP_MEMORY_LIMIT",
        "HTTPMESSAGE_LOG_LEVEL",
        "HTTPMESSAGE_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Remove handlers installed by configure_logging() during a test."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)


@pytest.fixture
def hello_stream() -> Generator[Stream, None, None]:
    """In-memory stream holding b"hello", positioned at the start."""
    stream = Stream.create(b"hello")
    stream.rewind()
    yield stream
    stream.close()


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A small file on disk."""
    path = tmp_path / "sample.txt"
    path.write_bytes(b"file contents")
    return path


@pytest.fixture
def sample_environ() -> dict:
    """WSGI environ for a POST with a query string, cookies and a body."""
    body = b'{"name": "Ada"}'
    return {
        "REQUEST_METHOD": "POST",
        "SCRIPT_NAME": "",
        "PATH_INFO": "/api/users",
        "QUERY_STRING": "page=2&tag=a&tag=b&empty=",
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8080",
        "SERVER_PROTOCOL": "HTTP/1.0",
        "HTTP_HOST": "localhost:8080",
        "HTTP_ACCEPT": "application/json",
        "HTTP_X_REQUEST_ID": "abc-123",
        "HTTP_COOKIE": "sid=xyz; theme=dark",
        "CONTENT_TYPE": "application/json",
        "CONTENT_LENGTH": str(len(body)),
        "wsgi.url_scheme": "http",
        "wsgi.input": io.BytesIO(body),
    }
