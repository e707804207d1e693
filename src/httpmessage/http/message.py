"""
=============================================================================
HTTP MESSAGE
=============================================================================

The state shared by requests and responses: protocol version, headers,
and body. Request and Response each embed one Message and forward their
header/body operations to it.

=============================================================================
COPY-ON-WRITE
=============================================================================

A Message is never modified after construction. Every with_* call returns
a new Message that shares the unchanged parts with the original:

    original = Message()
         │
         │  .with_header("Accept", "text/html")
         ▼
    updated  ──► new HeaderTable
             ──► same protocol_version
             ──► same body Stream (shared, not copied)

When the change would be a no-op, the very same instance comes back:

    message.with_protocol_version(message.protocol_version) is message

The body is the one mutable thing reachable from a message: copies share
the same Stream, so reading from one moves the position for all of them.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional, Tuple

from ..config import get_config
from ..core.stream import Stream
from ..errors import ValidationError
from .headers import HeaderTable, HeaderValue


def _default_protocol_version() -> str:
    return get_config().protocol_version


@dataclass(frozen=True, eq=False)
class Message:
    """
    Protocol version + headers + body.

    Attributes:
        protocol_version: e.g. "1.1" (defaults to MessageConfig.protocol_version)
        header_table:     HeaderTable holding the headers
    """

    protocol_version: str = field(default_factory=_default_protocol_version)
    header_table: HeaderTable = field(default_factory=HeaderTable)
    _body: Optional[Stream] = field(default=None, repr=False)

    @classmethod
    def build(
        cls,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        body: Optional[Stream] = None,
        protocol_version: Optional[str] = None,
    ) -> "Message":
        """Construct a message from the optional constructor arguments of a request/response."""
        if body is not None and not isinstance(body, Stream):
            raise ValidationError("Body must be a Stream.")

        kwargs = {"header_table": HeaderTable.from_mapping(headers), "_body": body}
        if protocol_version is not None:
            kwargs["protocol_version"] = protocol_version
        return cls(**kwargs)

    # =========================================================================
    # PROTOCOL VERSION
    # =========================================================================

    def with_protocol_version(self, version: str) -> "Message":
        if version == self.protocol_version:
            return self
        return replace(self, protocol_version=version)

    # =========================================================================
    # HEADERS
    # =========================================================================

    @property
    def headers(self) -> Dict[str, list]:
        """All headers as canonical name → list of values (a copy)."""
        return self.header_table.as_dict()

    def has_header(self, name: str) -> bool:
        return self.header_table.has(name)

    def get_header(self, name: str) -> Tuple[str, ...]:
        return self.header_table.get(name)

    def get_header_line(self, name: str) -> str:
        return self.header_table.get_line(name)

    def with_header(self, name: str, value: HeaderValue) -> "Message":
        return self._with_table(self.header_table.with_value(name, value))

    def with_added_header(self, name: str, value: HeaderValue) -> "Message":
        return self._with_table(self.header_table.with_added(name, value))

    def without_header(self, name: str) -> "Message":
        return self._with_table(self.header_table.without(name))

    def with_first_header(self, name: str, value: HeaderValue) -> "Message":
        """Set a header and move it to the front (Host synchronisation)."""
        return self._with_table(self.header_table.with_first(name, value))

    def _with_table(self, table: HeaderTable) -> "Message":
        if table is self.header_table:
            return self
        return replace(self, header_table=table)

    # =========================================================================
    # BODY
    # =========================================================================

    @property
    def body(self) -> Stream:
        """
        The message body.

        A message built without a body gets an empty stream on first
        access; later accesses return that same stream.
        """
        if self._body is None:
            object.__setattr__(self, "_body", Stream.create())
        return self._body

    def with_body(self, body: Stream) -> "Message":
        if not isinstance(body, Stream):
            raise ValidationError("Body must be a Stream.")
        if body is self._body:
            return self
        return replace(self, _body=body)
