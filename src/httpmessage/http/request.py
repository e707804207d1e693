"""
=============================================================================
HTTP REQUEST
=============================================================================

An immutable outgoing/client-side HTTP request: method + Uri + message.

=============================================================================
REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    GET /api/users?page=1 HTTP/1.1\r\n      ← request line           │
    │    ─┬─ ───────┬───────── ───┬────                                   │
    │   method  request-target  protocol_version                         │
    │                                                                      │
    │    Host: example.com:8080\r\n              ← always first           │
    │    Accept: application/json\r\n            ← other headers          │
    │    \r\n                                                             │
    │    [body]                                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
HOST SYNCHRONISATION
=============================================================================

The Host header follows the Uri. When a request is built (without an
explicit Host header) or given a new Uri via with_uri(), the Host header
is set to host[:port] and moved to the front:

    Request("GET", Uri("http://example.com:8080/p"))
        → Host: example.com:8080

    request.with_uri(Uri("http://other.org/"))
        → Host: other.org

    request.with_uri(Uri("http://other.org/"), preserve_host=True)
        → Host unchanged

If a Host header already exists under another casing ("HOST"), that
spelling is kept.

=============================================================================
REQUEST TARGET (ORIGIN-FORM)
=============================================================================

Unless overridden with with_request_target(), the target is derived from
the Uri:

    path (or "/")  +  "?" query  +  "#" fragment
                      (if any)      (only when a query is present)

=============================================================================
"""

import copy
import logging
from typing import Dict, Mapping, Optional, Tuple, Union

from ..core.stream import Stream
from ..errors import ValidationError
from .headers import HeaderValue
from .message import Message
from .uri import Uri


logger = logging.getLogger(__name__)


ALLOWED_METHODS = ("OPTIONS", "HEAD", "GET", "POST", "PUT", "PATCH", "DELETE")


def validate_method(method: str) -> str:
    """
    Raises:
        ValidationError: If method is empty or not in ALLOWED_METHODS.
    """
    if not isinstance(method, str) or not method:
        raise ValidationError("Method must be a non-empty string.")
    if method not in ALLOWED_METHODS:
        raise ValidationError(f"Invalid method: {method}")
    return method


def _coerce_uri(uri: Union[Uri, str]) -> Uri:
    if isinstance(uri, str):
        return Uri(uri)
    if not isinstance(uri, Uri):
        raise ValidationError("uri must be a Uri or a URL string.")
    return uri


class Request:
    """
    An immutable HTTP request.

    Usage:
        request = Request("POST", "https://api.example.com/users",
                          headers={"Content-Type": "application/json"},
                          body=Stream.create(b'{"name": "Ada"}'))

        request.get_header_line("host")             # "api.example.com"
        request = request.with_header("Accept", "application/json")
        print(request)                               # wire form

    Every with_* / without_* method returns a new Request, or the same
    one when nothing changes.
    """

    def __init__(
        self,
        method: str,
        uri: Union[Uri, str],
        headers: Optional[Mapping[str, HeaderValue]] = None,
        body: Optional[Stream] = None,
        protocol_version: Optional[str] = None,
    ):
        self._method = validate_method(method)
        self._uri = _coerce_uri(uri)
        self._target: Optional[str] = None
        self._message = Message.build(headers, body, protocol_version)

        # An explicit Host header wins over the Uri
        if not self._message.has_header("Host"):
            self._sync_host()

    # =========================================================================
    # METHOD / URI / TARGET
    # =========================================================================

    @property
    def method(self) -> str:
        return self._method

    def with_method(self, method: str) -> "Request":
        validate_method(method)
        if method == self._method:
            return self
        new = self._clone()
        new._method = method
        return new

    @property
    def uri(self) -> Uri:
        return self._uri

    def with_uri(self, uri: Union[Uri, str], preserve_host: bool = False) -> "Request":
        """
        Return a request for another Uri.

        Args:
            uri: The new Uri (a URL string is parsed).
            preserve_host: Keep the current Host header instead of
                           deriving it from the new Uri.
        """
        uri = _coerce_uri(uri)
        if uri is self._uri:
            return self

        new = self._clone()
        new._uri = uri
        if not preserve_host:
            new._sync_host()
        return new

    @property
    def request_target(self) -> str:
        if self._target is not None:
            return self._target

        uri = self._uri
        target = uri.path or "/"
        if uri.query:
            target += "?" + uri.query
            if uri.fragment:
                target += "#" + uri.fragment
        return target

    def with_request_target(self, target: str) -> "Request":
        if not isinstance(target, str):
            raise ValidationError("Request target must be a string.")
        if target == self._target:
            return self
        new = self._clone()
        new._target = target
        return new

    def _sync_host(self) -> None:
        host = self._uri.host
        if not host:
            return

        if self._uri.port is not None:
            host += f":{self._uri.port}"
        self._message = self._message.with_first_header("Host", host)
        logger.debug(f"Host header synchronised to {host}")

    # =========================================================================
    # MESSAGE (delegated to the embedded Message)
    # =========================================================================

    @property
    def message(self) -> Message:
        return self._message

    @property
    def protocol_version(self) -> str:
        return self._message.protocol_version

    def with_protocol_version(self, version: str) -> "Request":
        return self._with_message(self._message.with_protocol_version(version))

    @property
    def headers(self) -> Dict[str, list]:
        return self._message.headers

    def has_header(self, name: str) -> bool:
        return self._message.has_header(name)

    def get_header(self, name: str) -> Tuple[str, ...]:
        return self._message.get_header(name)

    def get_header_line(self, name: str) -> str:
        return self._message.get_header_line(name)

    def with_header(self, name: str, value: HeaderValue) -> "Request":
        return self._with_message(self._message.with_header(name, value))

    def with_added_header(self, name: str, value: HeaderValue) -> "Request":
        return self._with_message(self._message.with_added_header(name, value))

    def without_header(self, name: str) -> "Request":
        return self._with_message(self._message.without_header(name))

    @property
    def body(self) -> Stream:
        return self._message.body

    def with_body(self, body: Stream) -> "Request":
        return self._with_message(self._message.with_body(body))

    def _with_message(self, message: Message) -> "Request":
        if message is self._message:
            return self
        new = self._clone()
        new._message = message
        return new

    def _clone(self) -> "Request":
        return copy.copy(self)

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    @property
    def request_line(self) -> str:
        return f"{self._method} {self.request_target} HTTP/{self.protocol_version}"

    def _head(self) -> str:
        lines = [self.request_line]
        for name, values in self._message.header_table.items():
            lines.append(f"{name}: {', '.join(values)}")
        return "\r\n".join(lines) + "\r\n\r\n"

    def to_bytes(self) -> bytes:
        """Request line, headers, blank line and body, as bytes."""
        return self._head().encode("utf-8") + bytes(self.body)

    def __str__(self) -> str:
        return self._head() + str(self.body)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._method} {str(self._uri)!r}>"
