"""
=============================================================================
HTTP MESSAGE MODEL
=============================================================================

Immutable value objects for HTTP/1.x messages.

=============================================================================
MODULE COMPONENTS
=============================================================================

    headers.py         HeaderTable     case-insensitive, ordered headers
    message.py         Message         protocol version + headers + body
    uri.py             Uri             lazily parsed URI components
    request.py         Request         method + Uri + Message
    server_request.py  ServerRequest   Request + server-derived data
    response.py        Response        status + cookies + Message
    uploaded_file.py   UploadedFile    Stream + one-shot move_to()
    status_codes.py    HTTPStatus      status code → reason phrase

=============================================================================
HTTP MESSAGE FORMAT (RFC 7230)
=============================================================================

    REQUEST:                          RESPONSE:
    GET /path HTTP/1.1\r\n            HTTP/1.1 200 OK\r\n
    Header: Value\r\n                 Header: Value\r\n
    \r\n                              \r\n
    [body]                            [body]

=============================================================================
"""

from .headers import HeaderTable
from .message import Message
from .request import ALLOWED_METHODS, Request
from .response import Response, format_cookie_date, format_http_date
from .server_request import ServerRequest
from .status_codes import HTTPStatus, REASON_PHRASES, is_known_status, reason_phrase
from .uploaded_file import UploadError, UploadedFile
from .uri import Uri

__all__ = [
    # Messages
    "HeaderTable",
    "Message",
    "Request",
    "ServerRequest",
    "Response",
    "ALLOWED_METHODS",

    # URIs
    "Uri",

    # Uploads
    "UploadedFile",
    "UploadError",

    # Status codes
    "HTTPStatus",
    "REASON_PHRASES",
    "is_known_status",
    "reason_phrase",

    # Dates
    "format_http_date",
    "format_cookie_date",
]
