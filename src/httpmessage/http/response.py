"""
=============================================================================
HTTP RESPONSE
=============================================================================

An immutable HTTP response: status code + reason phrase + cookies +
message.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                     ← status line            │
    │    Set-Cookie: sid=abc; Path=/\r\n         ← one line per cookie    │
    │    Content-Type: text/plain\r\n            ← headers, in order      │
    │    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n ← set when rendering     │
    │    Content-Length: 5\r\n                   ← set when rendering     │
    │    \r\n                                                             │
    │    hello                                   ← body                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Rendering (str() / to_bytes()) fills in Date and Content-Length on a
throwaway copy; the Response itself is never changed by rendering.

=============================================================================
SET-COOKIE COMPOSITION
=============================================================================

    with_cookie("sid", "abc", max_age=3600, secure=True, same_site="lax")

        sid=abc; Expires=Mon, 19-Oct-2026 13:00:00 GMT; Max-Age=3600;
        Path=/; Secure; SameSite=Lax

    with_cookie("sid")          (empty value → deletion cookie)

        sid=deleted; Expires=<one year ago>; Max-Age=-31536001; Path=/

Names and values are URL-encoded unless raw=True.

=============================================================================
"""

import copy
import re
import time
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, quote_plus

from ..config import get_config
from ..core.stream import Stream
from ..errors import ValidationError
from .headers import HeaderValue
from .message import Message
from .status_codes import HTTPStatus, is_known_status, reason_phrase


# One year and a second: how far back a deletion cookie's expiry is set
COOKIE_DELETE_AGE = 31536001

COOKIE_NAME_INVALID = re.compile(r"[=,; \x00-\x1f\x7f]")
SAME_SITE_VALUES = ("lax", "strict")

_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


# =============================================================================
# DATE FORMATTING
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (IMF-fixdate), always in GMT.

    Example: Mon, 19 Oct 2026 12:00:00 GMT
    """
    dt = dt.astimezone(timezone.utc) if dt.tzinfo else dt
    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def format_cookie_date(timestamp: float) -> str:
    """
    Format a UNIX timestamp for a cookie Expires attribute.

    Example: Mon, 19-Oct-2026 12:00:00 GMT
    """
    dt = datetime.fromtimestamp(timestamp, timezone.utc)
    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d}-{_MONTHS[dt.month - 1]}-{dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def _validate_status(code: int, reason: str) -> None:
    if isinstance(code, bool) or not isinstance(code, int) or not is_known_status(code):
        raise ValidationError(f"Invalid status code provided for response: {code!r}")
    if not isinstance(reason, str):
        raise ValidationError("Reason phrase must be a string.")


# =============================================================================
# RESPONSE
# =============================================================================

class Response:
    """
    An immutable HTTP response.

    Usage:
        response = Response(404, headers={"Content-Type": "text/plain"},
                            body=Stream.create("Not here"))
        response.reason_phrase                        # "Not Found"
        response = response.with_cookie("seen", "1")
        wire = response.to_bytes()
    """

    def __init__(
        self,
        status_code: int = HTTPStatus.OK,
        reason_phrase: str = "",
        headers: Optional[Mapping[str, HeaderValue]] = None,
        body: Optional[Stream] = None,
        protocol_version: Optional[str] = None,
    ):
        """
        Raises:
            ValidationError: If the status code is not in the phrase table,
                             or a header value / body is invalid.
        """
        self._message = Message.build(headers, body, protocol_version)
        self._cookies: Dict[str, Tuple[str, ...]] = {}
        self._set_status(status_code, reason_phrase)

    # =========================================================================
    # STATUS
    # =========================================================================

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def status(self) -> HTTPStatus:
        return HTTPStatus(self._status_code)

    @property
    def reason_phrase(self) -> str:
        return self._reason_phrase or reason_phrase(self._status_code)

    def with_status(self, code: int, reason: str = "") -> "Response":
        """
        Return a response with another status.

        The same response comes back when the code is unchanged and the
        reason either matches or is empty while the current reason is the
        standard phrase.
        """
        _validate_status(code, reason)

        if code == self._status_code:
            if reason == self._reason_phrase:
                return self
            if reason == "" and self._reason_phrase == reason_phrase(code):
                return self

        new = self._clone()
        new._set_status(code, reason)
        return new

    def _set_status(self, code: int, reason: str) -> None:
        _validate_status(code, reason)
        self._status_code = int(code)
        self._reason_phrase = reason or reason_phrase(code)

    @property
    def status_line(self) -> str:
        return f"HTTP/{self.protocol_version} {self._status_code} {self.reason_phrase}"

    # =========================================================================
    # COOKIES
    # =========================================================================

    def with_cookie(
        self,
        name: str,
        value: str = "",
        max_age: int = 0,
        path: str = "",
        domain: str = "",
        secure: bool = False,
        http_only: bool = False,
        raw: bool = False,
        same_site: Optional[str] = None,
    ) -> "Response":
        """
        Return a response that sets a cookie.

        Args:
            name: Cookie name (no "=,; ", whitespace or control characters).
            value: Cookie value; empty produces a deletion cookie.
            max_age: Lifetime in seconds; 0 means a session cookie.
            path: Path attribute (defaults to MessageConfig.default_cookie_path).
            domain: Domain attribute, omitted when empty.
            secure: Add the Secure flag.
            http_only: Add the HttpOnly flag.
            raw: Skip URL-encoding of name and value.
            same_site: "lax", "strict" or None.

        Raises:
            ValidationError: If the name or same_site value is invalid.
        """
        if not isinstance(name, str) or not name:
            raise ValidationError("The cookie name cannot be empty.")
        if COOKIE_NAME_INVALID.search(name):
            raise ValidationError(f'The cookie name "{name}" contains invalid characters.')

        if same_site is not None:
            if not isinstance(same_site, str) or same_site.lower() not in SAME_SITE_VALUES:
                raise ValidationError('The "same_site" parameter value is not valid.')
            same_site = same_site.lower()

        if not raw:
            name = quote_plus(name, safe="")
            value = quote(value, safe="")

        now = time.time()
        max_age = max(0, max_age)

        if value == "":
            attributes = [
                f"{name}=deleted",
                f"Expires={format_cookie_date(now - COOKIE_DELETE_AGE)}",
                f"Max-Age=-{COOKIE_DELETE_AGE}",
            ]
        else:
            attributes = [f"{name}={value}"]
            if max_age > 0:
                attributes.append(f"Expires={format_cookie_date(now + max_age)}")
                attributes.append(f"Max-Age={max_age}")

        attributes.append(f"Path={path or get_config().default_cookie_path}")

        if domain:
            attributes.append(f"Domain={domain}")
        if secure:
            attributes.append("Secure")
        if http_only:
            attributes.append("HttpOnly")
        if same_site is not None:
            attributes.append(f"SameSite={same_site.capitalize()}")

        new = self._clone()
        new._cookies = {**self._cookies, name: tuple(attributes)}
        return new

    @property
    def cookies(self) -> Dict[str, List[str]]:
        """Cookie name → list of Set-Cookie attributes."""
        return {name: list(attributes) for name, attributes in self._cookies.items()}

    def cookie_lines(self) -> List[str]:
        """Set-Cookie header values, one per cookie."""
        return ["; ".join(attributes) for attributes in self._cookies.values()]

    # =========================================================================
    # MESSAGE (delegated to the embedded Message)
    # =========================================================================

    @property
    def message(self) -> Message:
        return self._message

    @property
    def protocol_version(self) -> str:
        return self._message.protocol_version

    def with_protocol_version(self, version: str) -> "Response":
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

    def with_header(self, name: str, value: HeaderValue) -> "Response":
        return self._with_message(self._message.with_header(name, value))

    def with_added_header(self, name: str, value: HeaderValue) -> "Response":
        return self._with_message(self._message.with_added_header(name, value))

    def without_header(self, name: str) -> "Response":
        return self._with_message(self._message.without_header(name))

    @property
    def body(self) -> Stream:
        return self._message.body

    def with_body(self, body: Stream) -> "Response":
        return self._with_message(self._message.with_body(body))

    def _with_message(self, message: Message) -> "Response":
        if message is self._message:
            return self
        new = self._clone()
        new._message = message
        return new

    def _clone(self) -> "Response":
        return copy.copy(self)

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def _head(self) -> str:
        body = self._message.body
        rendered = (
            self._message
            .with_header("Date", format_http_date(datetime.now(timezone.utc)))
            .with_header("Content-Length", str(body.size() or 0))
        )

        lines = [self.status_line]
        lines.extend(f"Set-Cookie: {line}" for line in self.cookie_lines())
        for name, values in rendered.header_table.items():
            lines.append(f"{name}: {', '.join(values)}")
        return "\r\n".join(lines) + "\r\n\r\n"

    def to_bytes(self) -> bytes:
        """
        Serialize the response for sending.

            HTTP/1.1 200 OK\\r\\n           ← status line
            Set-Cookie: ...\\r\\n           ← cookies
            Content-Type: ...\\r\\n         ← headers (+ Date, Content-Length)
            \\r\\n                          ← separator
            <body bytes>
        """
        return self._head().encode("utf-8") + bytes(self._message.body)

    def __str__(self) -> str:
        return self._head() + str(self._message.body)

    def __repr__(self) -> str:
        return f"<Response {self._status_code} {self.reason_phrase!r}>"
