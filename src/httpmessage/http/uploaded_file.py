"""
=============================================================================
UPLOADED FILE
=============================================================================

A file received in a multipart upload: a Stream plus the client-supplied
name and media type, with a one-shot move_to().

=============================================================================
STATE MACHINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   UploadedFile(stream, error=...)                                   │
    │          │                                                          │
    │          ├── error == OK ──────► ACTIVE ──move_to()──► MOVED        │
    │          │                         │                    │           │
    │          │                    stream() ok          stream() ──┐     │
    │          │                                         move_to() ─┤     │
    │          └── error != OK ──► ERRORED                          │     │
    │                                stream() ─────────────────────►│     │
    │                                move_to() ────────────────────►│     │
    │                                                               ▼     │
    │                                                          StateError │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

move_to() renames the backing file when the stream lives on disk, and
otherwise writes the stream contents to the target. Either way the stream
is closed afterwards.

=============================================================================
"""

import logging
import os
import shutil
from enum import IntEnum
from typing import Optional, Union

from ..core.stream import Stream
from ..errors import StateError, StreamIOError, ValidationError


logger = logging.getLogger(__name__)


class UploadError(IntEnum):
    """Upload error codes, numbered as multipart upload handlers report them."""

    OK = 0
    INI_SIZE = 1        # Exceeds the server's size limit
    FORM_SIZE = 2       # Exceeds the form's MAX_FILE_SIZE
    PARTIAL = 3         # Only partially received
    NO_FILE = 4         # No file was sent
    NO_TMP_DIR = 6      # No temporary directory
    CANT_WRITE = 7      # Failed to write to disk
    EXTENSION = 8       # Stopped by an extension


class UploadedFile:
    """
    A single uploaded file.

    Usage:
        upload = UploadedFile(Stream.open(tmp_path, "rb"),
                              client_filename="report.pdf",
                              client_media_type="application/pdf")
        upload.move_to("/srv/uploads/report.pdf")
    """

    def __init__(
        self,
        stream: Stream,
        size: Optional[int] = None,
        error: int = UploadError.OK,
        client_filename: Optional[str] = None,
        client_media_type: Optional[str] = None,
    ):
        """
        Raises:
            ValidationError: If error is not an UploadError code, or the
                             stream of a successful upload is not a Stream.
        """
        try:
            self._error = UploadError(error)
        except ValueError as e:
            raise ValidationError("Invalid error status for UploadedFile.") from e

        self._client_filename = client_filename
        self._client_media_type = client_media_type
        self._moved = False

        self._stream: Optional[Stream] = None
        if self._error is UploadError.OK:
            if not isinstance(stream, Stream):
                raise ValidationError("Uploaded file stream must be a Stream.")
            self._stream = stream

        if size is None and self._stream is not None:
            size = self._stream.size()
        self._size = size

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def size(self) -> Optional[int]:
        return self._size

    @property
    def error(self) -> UploadError:
        return self._error

    @property
    def client_filename(self) -> Optional[str]:
        return self._client_filename

    @property
    def client_media_type(self) -> Optional[str]:
        return self._client_media_type

    @property
    def is_moved(self) -> bool:
        return self._moved

    def stream(self) -> Stream:
        """
        Raises:
            StateError: If the upload failed or was already moved.
        """
        self._validate_active()
        return self._stream

    # =========================================================================
    # MOVE
    # =========================================================================

    def move_to(self, target_path: Union[str, "os.PathLike[str]"]) -> None:
        """
        Move the uploaded file to `target_path`. Can only succeed once.

        Raises:
            StateError: If the upload failed or was already moved.
            ValidationError: If target_path is empty.
            StreamIOError: If the file cannot be relocated.
        """
        self._validate_active()

        if not isinstance(target_path, (str, os.PathLike)) or not os.fspath(target_path):
            raise ValidationError("Invalid path provided for move operation.")
        target_path = os.fspath(target_path)

        source = self._stream.metadata("uri")
        try:
            if source and os.path.isfile(source):
                shutil.move(source, target_path)
            else:
                if self._stream.is_seekable():
                    self._stream.rewind()
                contents = self._stream.get_contents()
                with open(target_path, "wb") as target:
                    target.write(contents)
        except OSError as e:
            logger.warning(f"Moving upload to {target_path} failed: {e}")
            raise StreamIOError("UploadedFile move failed.") from e

        self._moved = True
        self._stream.close()
        logger.info(f"Moved upload {self._client_filename or ''} to {target_path}")

    def _validate_active(self) -> None:
        if self._error is not UploadError.OK:
            raise StateError("Cannot retrieve stream due to upload error.")
        if self._moved:
            raise StateError("Cannot retrieve stream after it has already been moved.")

    def __repr__(self) -> str:
        return (
            f"<UploadedFile {self._client_filename!r} size={self._size} "
            f"error={self._error.name}>"
        )
