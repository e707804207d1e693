"""
=============================================================================
HTTPMESSAGE - Immutable HTTP Message Value Objects
=============================================================================

Requests, responses, URIs, byte streams and uploaded files as immutable
values. Every "modify" operation returns a new object, so a message can be
handed across layers without anyone changing it underneath you.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpmessage/
    ├── __init__.py          # Public API
    ├── __main__.py          # CLI: python -m httpmessage
    ├── config.py            # MessageConfig
    ├── errors.py            # ValidationError / StreamIOError / StateError
    ├── logging.py           # Logging setup (text / json)
    ├── core/
    │   └── stream.py        # Stream (message bodies)
    └── http/
        ├── headers.py       # HeaderTable
        ├── message.py       # Message
        ├── uri.py           # Uri
        ├── request.py       # Request
        ├── server_request.py # ServerRequest
        ├── response.py      # Response (+ cookies)
        ├── uploaded_file.py # UploadedFile
        └── status_codes.py  # HTTPStatus

=============================================================================
QUICK START
=============================================================================

    from httpmessage import Request, Response, Stream, Uri

    request = Request("GET", Uri("https://example.com:8443/search?q=py"))
    request.get_header_line("Host")        # "example.com:8443"
    request.request_target                 # "/search?q=py"

    response = (Response(201)
        .with_header("Content-Type", "application/json")
        .with_body(Stream.create(b'{"id": 1}'))
        .with_cookie("sid", "abc123", max_age=3600, http_only=True))

    print(response)                        # status line, cookies, headers, body

=============================================================================
"""

__version__ = "1.0.0"

from .config import MessageConfig, get_config, set_config
from .core.stream import Stream
from .errors import HTTPMessageError, StateError, StreamIOError, ValidationError
from .http import (
    HTTPStatus,
    HeaderTable,
    Message,
    Request,
    Response,
    ServerRequest,
    UploadError,
    UploadedFile,
    Uri,
)

__all__ = [
    "__version__",
    "MessageConfig",
    "get_config",
    "set_config",
    "Stream",
    "HTTPMessageError",
    "ValidationError",
    "StreamIOError",
    "StateError",
    "HTTPStatus",
    "HeaderTable",
    "Message",
    "Request",
    "Response",
    "ServerRequest",
    "UploadError",
    "UploadedFile",
    "Uri",
]
