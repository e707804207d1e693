"""
=============================================================================
SERVER REQUEST
=============================================================================

A Request as seen by the server that received it. On top of the method,
Uri, headers and body it carries what the server derived from the
incoming message:

    server_params   environment of the server (e.g. a WSGI environ)
    cookie_params   cookies sent by the client         {"sid": "abc"}
    query_params    parsed query string                {"page": ["2"]}
    uploaded_files  UploadedFile objects by form field {"avatar": ...}
    parsed_body     decoded body (dict, list, object or None)
    attributes      values added by application code   {"user_id": 7}

Like Request, every with_* method returns a new ServerRequest (or the
same one when nothing changes).

=============================================================================
BUILDING FROM WSGI
=============================================================================

    environ                             ServerRequest
    ───────                             ─────────────
    REQUEST_METHOD  "POST"          →   method
    wsgi.url_scheme "https"         ┐
    HTTP_HOST       "a.b:8443"      ├→  uri  https://a.b:8443/x?y=1
    PATH_INFO       "/x"            │
    QUERY_STRING    "y=1"           ┘   query_params {"y": ["1"]}
    HTTP_COOKIE     "sid=abc"       →   cookie_params {"sid": "abc"}
    HTTP_ACCEPT     "text/html"     →   header Accept
    CONTENT_TYPE    "text/plain"    →   header Content-Type
    wsgi.input      b"..."          →   body (CONTENT_LENGTH bytes)
    SERVER_PROTOCOL "HTTP/1.1"      →   protocol_version "1.1"

=============================================================================
"""

from http.cookies import CookieError, SimpleCookie
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import parse_qs, quote

from ..core.stream import Stream
from ..errors import ValidationError
from .headers import HeaderValue
from .request import Request
from .uploaded_file import UploadedFile
from .uri import Uri


_MISSING = object()


def _headers_from_environ(environ: Mapping[str, Any]) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            name = key[5:]
        elif key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            name = key
        else:
            continue
        if value == "":
            continue
        headers["-".join(part.capitalize() for part in name.split("_"))] = str(value)
    return headers


def _uri_from_environ(environ: Mapping[str, Any]) -> Uri:
    scheme = environ.get("wsgi.url_scheme", "http")
    host = environ.get("HTTP_HOST")
    if not host:
        host = environ.get("SERVER_NAME", "")
        port = str(environ.get("SERVER_PORT", ""))
        if port and port != {"https": "443", "http": "80"}.get(scheme):
            host += ":" + port

    path = quote(environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", ""))
    url = f"{scheme}://{host}{path or '/'}" if host else (path or "/")

    query = environ.get("QUERY_STRING", "")
    if query:
        url += "?" + query
    return Uri(url)


def _cookies_from_header(header: str) -> Dict[str, str]:
    if not header:
        return {}
    cookie = SimpleCookie()
    try:
        cookie.load(header)
    except CookieError as e:
        raise ValidationError(f"Invalid Cookie header: {e}") from e
    return {name: morsel.value for name, morsel in cookie.items()}


class ServerRequest(Request):
    """
    A server-side request.

    Usage:
        request = ServerRequest.from_environ(environ)
        request.query_params.get("page")
        request = request.with_attribute("user_id", 7)
    """

    def __init__(
        self,
        method: str,
        uri: Union[Uri, str],
        server_params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        body: Optional[Stream] = None,
        protocol_version: Optional[str] = None,
    ):
        super().__init__(method, uri, headers, body, protocol_version)
        self._server_params: Dict[str, Any] = dict(server_params or {})
        self._cookie_params: Dict[str, str] = {}
        self._query_params: Dict[str, Any] = {}
        self._uploaded_files: Dict[str, Any] = {}
        self._parsed_body: Any = None
        self._attributes: Dict[str, Any] = {}

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> "ServerRequest":
        """
        Build a ServerRequest from a WSGI environ.

        Raises:
            ValidationError: If the method, URL or Cookie header is invalid.
        """
        protocol = environ.get("SERVER_PROTOCOL", "")
        protocol_version = protocol.partition("/")[2] or None

        body = Stream.create()
        stream = environ.get("wsgi.input")
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError as e:
            raise ValidationError("Invalid CONTENT_LENGTH.") from e
        if stream is not None and length > 0:
            body.write(stream.read(length))
            body.rewind()

        request = cls(
            environ.get("REQUEST_METHOD", "GET"),
            _uri_from_environ(environ),
            server_params=environ,
            headers=_headers_from_environ(environ),
            body=body,
            protocol_version=protocol_version,
        )
        request._cookie_params = _cookies_from_header(environ.get("HTTP_COOKIE", ""))
        request._query_params = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)
        return request

    # =========================================================================
    # SERVER-DERIVED DATA
    # =========================================================================

    @property
    def server_params(self) -> Dict[str, Any]:
        return dict(self._server_params)

    @property
    def cookie_params(self) -> Dict[str, str]:
        return dict(self._cookie_params)

    def with_cookie_params(self, cookies: Mapping[str, str]) -> "ServerRequest":
        return self._with_field("_cookie_params", dict(cookies))

    @property
    def query_params(self) -> Dict[str, Any]:
        return dict(self._query_params)

    def with_query_params(self, query: Mapping[str, Any]) -> "ServerRequest":
        return self._with_field("_query_params", dict(query))

    @property
    def uploaded_files(self) -> Dict[str, Any]:
        return dict(self._uploaded_files)

    def with_uploaded_files(self, uploaded_files: Mapping[str, Any]) -> "ServerRequest":
        """
        Args:
            uploaded_files: Field name → UploadedFile, or → list of
                            UploadedFile for multi-file fields.

        Raises:
            ValidationError: If any leaf is not an UploadedFile.
        """
        for value in uploaded_files.values():
            files = value if isinstance(value, (list, tuple)) else [value]
            if not all(isinstance(item, UploadedFile) for item in files):
                raise ValidationError("Uploaded files must be UploadedFile instances.")
        return self._with_field("_uploaded_files", dict(uploaded_files))

    @property
    def parsed_body(self) -> Any:
        return self._parsed_body

    def with_parsed_body(self, data: Any) -> "ServerRequest":
        """
        Raises:
            ValidationError: If data is a scalar (str, bytes, number, bool).
        """
        if isinstance(data, (str, bytes, bytearray, int, float, bool)):
            raise ValidationError("Parsed body must be None, a dict, a list or an object.")
        if data is self._parsed_body:
            return self
        new = self._clone()
        new._parsed_body = data
        return new

    # =========================================================================
    # ATTRIBUTES
    # =========================================================================

    @property
    def attributes(self) -> Dict[str, Any]:
        return dict(self._attributes)

    def attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def with_attribute(self, name: str, value: Any) -> "ServerRequest":
        if self._attributes.get(name, _MISSING) is value:
            return self
        new = self._clone()
        new._attributes = {**self._attributes, name: value}
        return new

    def without_attribute(self, name: str) -> "ServerRequest":
        if name not in self._attributes:
            return self
        new = self._clone()
        new._attributes = {key: value for key, value in self._attributes.items() if key != name}
        return new

    def _with_field(self, field: str, value: Dict[str, Any]) -> "ServerRequest":
        if getattr(self, field) == value:
            return self
        new = self._clone()
        setattr(new, field, value)
        return new

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a query parameter (values are lists after parsing)."""
        values = self._query_params.get(name)
        if isinstance(values, list):
            return values[0] if values else default
        return default if values is None else values

    def get_query_list(self, name: str) -> List[str]:
        values = self._query_params.get(name, [])
        return list(values) if isinstance(values, list) else [values]
