"""
=============================================================================
BYTE STREAM
=============================================================================

Wraps a binary file object (the "resource") behind a small, predictable
interface used as the body of every HTTP message.

=============================================================================
STREAM LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        STREAM STATES                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Stream.create(b"...")  ─┐                                         │
    │   Stream.open(path, mode) ├──►  ATTACHED  ──detach()──►  DETACHED   │
    │   Stream(file_object)    ─┘        │                        ▲       │
    │                                    │                        │       │
    │                                    └──────close()───────────┘       │
    │                                    (also on __exit__ / __del__)     │
    │                                                                      │
    │   ATTACHED:  read / write / seek / tell as the mode allows          │
    │   DETACHED:  every capability flag is False, size() is None,        │
    │              metadata() is empty, eof() is True                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CAPABILITY FLAGS
=============================================================================

Readability and writability come from the mode string, using two fixed
patterns (computed once per resource, then cached):

    readable:  r | [waxc]b?+       "rb", "r+b", "w+b", "ab+", "c+b"
    writable:  rb?+ | [waxc]       "r+b", "wb", "ab", "xb", "cb"

Seekability comes from the resource itself.

=============================================================================
"""

import io
import logging
import os
import re
import tempfile
from typing import Any, BinaryIO, Dict, Optional, Union

from ..config import get_config
from ..errors import HTTPMessageError, StateError, StreamIOError, ValidationError


logger = logging.getLogger(__name__)


READABLE_MODE = re.compile(r"r|[waxc]b?\+")
WRITABLE_MODE = re.compile(r"rb?\+|[waxc]")

# First character of a mode accepted by Stream.open():
#   r read, w create-or-truncate, a append, x exclusive-create,
#   c create-if-missing without truncating
OPEN_MODES = "rwaxc"

# Mode letter, then at most one "b" and one "+" in either order
OPEN_MODE = re.compile(r"[rwaxc](b?\+?|\+b)")

_UNSET = object()


def _create_opener(path: str, flags: int) -> int:
    """os.open() opener that creates the file when it is missing."""
    return os.open(path, flags | os.O_CREAT, 0o666)


def _probe_seekable(resource: Any) -> bool:
    probe = getattr(resource, "seekable", None)
    try:
        if probe is not None:
            return bool(probe())
        resource.seek(0, os.SEEK_CUR)
        return True
    except (OSError, ValueError):
        return False


def _resource_mode(resource: Any) -> str:
    mode = getattr(resource, "mode", None)
    if isinstance(mode, str):
        return mode

    # In-memory buffers (io.BytesIO) carry no mode string
    try:
        readable = resource.readable()
        writable = resource.writable()
    except (AttributeError, ValueError):
        return ""
    if readable and writable:
        return "w+b"
    if readable:
        return "rb"
    return "wb" if writable else ""


class Stream:
    """
    A byte stream over a binary file object.

    The stream owns its resource exclusively until detach() or close().
    Messages that share a Stream share the same position; copying a
    message never copies its body.

    Usage:
        body = Stream.create(b"hello")
        body.rewind()
        body.read(5)        # b"hello"

        with Stream.open("/tmp/upload.bin", "rb") as stream:
            data = stream.get_contents()
    """

    def __init__(self, resource: BinaryIO, mode: Optional[str] = None):
        """
        Wrap an already-open binary resource.

        Args:
            resource: Binary file object (open(), BytesIO, tempfile, ...).
            mode: Mode string to report in metadata. Defaults to the
                  resource's own mode.

        Raises:
            ValidationError: If resource is not a binary file-like object.
        """
        if not hasattr(resource, "close") or not (
            hasattr(resource, "read") or hasattr(resource, "write")
        ):
            raise ValidationError("Stream must wrap a file-like object.")
        if isinstance(resource, io.TextIOBase):
            raise ValidationError("Stream must wrap a binary file-like object.")

        self._resource: Optional[BinaryIO] = resource
        self._mode = mode
        self._size: Optional[int] = None
        self._meta: Optional[Dict[str, Any]] = None
        self._seekable: Any = _UNSET
        self._readable: Any = _UNSET
        self._writable: Any = _UNSET
        self._eof = False

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================

    @classmethod
    def create(cls, content: Union[bytes, str] = b"") -> "Stream":
        """
        Create a readable, writable, seekable stream holding `content`.

        The data lives in memory until it outgrows
        MessageConfig.temp_memory_limit, then moves to a temporary file.
        The position is left at the end of the written content.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")

        resource = tempfile.SpooledTemporaryFile(
            max_size=get_config().temp_memory_limit,
            mode="w+b",
        )
        resource.write(content)
        return cls(resource)

    @classmethod
    def open(cls, filename: Union[str, "os.PathLike[str]"], mode: str = "r") -> "Stream":
        """
        Open a file as a stream.

        Args:
            filename: Path of the file to open.
            mode: One of r, w, a, x, c, optionally followed by "b" and/or
                  "+". Binary mode is always used.

        Returns:
            A Stream owning the opened file.

        Raises:
            ValidationError: If the mode is empty or unrecognized.
            StreamIOError: If the filename is empty or the file cannot
                           be opened.
        """
        if not isinstance(mode, str) or not OPEN_MODE.fullmatch(mode):
            raise ValidationError(f"The mode {mode!r} is invalid.")

        if not filename:
            raise StreamIOError("Filename cannot be empty.")

        binary_mode = mode if "b" in mode else mode[0] + "b" + mode[1:]
        try:
            if binary_mode[0] == "c":
                resource = open(filename, "r+b", opener=_create_opener)
            else:
                resource = open(filename, binary_mode)
        except OSError as e:
            raise StreamIOError(f'The file "{os.fspath(filename)}" cannot be opened.') from e

        logger.debug(f"Opened stream on {os.fspath(filename)} ({binary_mode})")
        return cls(resource, mode=binary_mode)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def detach(self) -> Optional[BinaryIO]:
        """
        Separate the underlying resource from the stream.

        Returns:
            The resource, or None if the stream was already detached.
            The caller becomes responsible for closing it.
        """
        resource = self._resource
        if resource is None:
            return None

        self._resource = None
        self._size = None
        self._meta = None
        self._seekable = False
        self._readable = False
        self._writable = False
        self._eof = True
        return resource

    def close(self) -> None:
        """
        Close the stream and its resource. Safe to call any number of times.

        Raises:
            StreamIOError: If closing the resource fails (for example a
                           failed flush). The stream is detached anyway.
        """
        resource = self.detach()
        if resource is None:
            return

        try:
            resource.close()
        except OSError as e:
            raise StreamIOError("Unable to close stream.") from e
        logger.debug("Closed stream")

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self):
        if getattr(self, "_resource", None) is not None:
            self.close()

    # =========================================================================
    # CAPABILITIES
    # =========================================================================

    def is_seekable(self) -> bool:
        if self._seekable is _UNSET:
            self._seekable = bool(self.metadata("seekable"))
        return self._seekable

    def is_readable(self) -> bool:
        if self._readable is _UNSET:
            self._readable = READABLE_MODE.search(self.metadata("mode") or "") is not None
        return self._readable

    def is_writable(self) -> bool:
        if self._writable is _UNSET:
            self._writable = WRITABLE_MODE.search(self.metadata("mode") or "") is not None
        return self._writable

    # =========================================================================
    # POSITION
    # =========================================================================

    def size(self) -> Optional[int]:
        """
        Return the size of the stream in bytes, or None if unknown.

        The value is cached until the next write().
        """
        if self._size is None and self._resource is not None:
            self._size = self._measure()
        return self._size

    def _measure(self) -> Optional[int]:
        resource = self._resource
        try:
            if self.is_seekable():
                position = resource.tell()
                resource.seek(0, os.SEEK_END)
                end = resource.tell()
                resource.seek(position)
                return end
            return os.fstat(resource.fileno()).st_size
        except (OSError, ValueError, AttributeError):
            return None

    def tell(self) -> int:
        """
        Return the current position.

        Raises:
            StateError: If the stream is detached.
            StreamIOError: If the resource cannot report its position.
        """
        resource = self._require_resource()
        try:
            return resource.tell()
        except (OSError, ValueError) as e:
            raise StreamIOError("Unable to determine stream position.") from e

    def eof(self) -> bool:
        """True when detached, closed, or positioned at the end of the data."""
        resource = self._resource
        if resource is None or getattr(resource, "closed", False):
            return True
        if self._eof:
            return True
        if not self.is_seekable():
            return False

        size = self.size()
        try:
            return size is not None and resource.tell() >= size
        except (OSError, ValueError):
            return True

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None:
        """
        Move the position.

        Raises:
            StreamIOError: If the stream is not seekable or the seek fails.
        """
        if not self.is_seekable():
            raise StreamIOError("Stream is not seekable.")

        try:
            self._resource.seek(offset, whence)
        except (OSError, ValueError) as e:
            raise StreamIOError(
                f'Unable to seek to stream position "{offset}" with whence "{whence}".'
            ) from e
        self._eof = False

    def rewind(self) -> None:
        """Seek to the beginning of the stream."""
        self.seek(0)

    # =========================================================================
    # READ / WRITE
    # =========================================================================

    def write(self, data: Union[bytes, str]) -> int:
        """
        Write data at the current position.

        Returns:
            Number of bytes written.

        Raises:
            StreamIOError: If the stream is not writable or the write fails.
        """
        if not self.is_writable():
            raise StreamIOError("Cannot write to a non-writable stream.")

        if isinstance(data, str):
            data = data.encode("utf-8")

        self._size = None
        try:
            written = self._resource.write(data)
        except (OSError, ValueError) as e:
            raise StreamIOError("Unable to write to stream.") from e
        self._eof = False
        return len(data) if written is None else written

    def read(self, length: int) -> bytes:
        """
        Read up to `length` bytes.

        Raises:
            ValidationError: If length is negative.
            StreamIOError: If the stream is not readable or the read fails.
        """
        if not self.is_readable():
            raise StreamIOError("Cannot read from a non-readable stream.")
        if length < 0:
            raise ValidationError("Length must be a non-negative integer.")

        try:
            chunk = self._resource.read(length)
        except (OSError, ValueError) as e:
            raise StreamIOError("Unable to read from stream.") from e

        chunk = chunk or b""
        if len(chunk) < length:
            self._eof = True
        return chunk

    def get_contents(self) -> bytes:
        """
        Read everything from the current position to the end.

        Raises:
            StreamIOError: If the stream is detached or the read fails.
        """
        if self._resource is not None:
            try:
                content = self._resource.read()
            except (OSError, ValueError) as e:
                raise StreamIOError("Unable to read stream contents.") from e
            if content is not None:
                self._eof = True
                return content
        raise StreamIOError("Unable to read stream contents.")

    # =========================================================================
    # METADATA
    # =========================================================================

    def metadata(self, key: Optional[str] = None) -> Any:
        """
        Return the stream metadata, or a single entry of it.

        Keys: mode, seekable, uri (file path or None), stream_type.
        A detached stream returns {} (or None for a single key).
        """
        if self._resource is None:
            return {} if key is None else None

        if self._meta is None:
            self._meta = self._load_metadata()
        return dict(self._meta) if key is None else self._meta.get(key)

    def _load_metadata(self) -> Dict[str, Any]:
        resource = self._resource
        name = getattr(resource, "name", None)
        if isinstance(name, os.PathLike):
            name = os.fspath(name)

        return {
            "mode": self._mode or _resource_mode(resource),
            "seekable": _probe_seekable(resource),
            "uri": name if isinstance(name, str) else None,
            "stream_type": type(resource).__name__,
        }

    def _require_resource(self) -> BinaryIO:
        if self._resource is None:
            raise StateError("Stream is detached.")
        return self._resource

    # =========================================================================
    # SNAPSHOT
    # =========================================================================

    def __bytes__(self) -> bytes:
        """
        Read the whole stream from the beginning.

        Best effort: returns b"" instead of raising on any stream failure.
        """
        try:
            if self.is_seekable():
                self.rewind()
            return self.get_contents()
        except HTTPMessageError as e:
            logger.debug(f"Stream snapshot failed: {e}")
            return b""

    def __str__(self) -> str:
        return bytes(self).decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        if self._resource is None:
            return "<Stream detached>"
        return f"<Stream mode={self.metadata('mode')!r} size={self.size()}>"
