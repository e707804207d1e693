"""
Unit tests for the byte stream.
"""

import io
import os

import pytest

from httpmessage import MessageConfig, set_config
from httpmessage.core.stream import Stream
from httpmessage.errors import StateError, StreamIOError, ValidationError


class UnseekableBuffer(io.BytesIO):
    """In-memory buffer that refuses to seek."""

    def seekable(self):
        return False


class TestStreamCreate:
    """Tests for Stream.create()."""

    def test_create_and_read_back(self):
        """Test that written content can be read after rewinding."""
        stream = Stream.create("hello")
        stream.rewind()

        assert stream.read(5) == b"hello"

    def test_position_left_at_end(self):
        """Test that create() leaves the position after the content."""
        stream = Stream.create(b"abc")

        assert stream.tell() == 3
        assert stream.eof() is True

    def test_capabilities(self):
        """Test that an in-memory stream is readable, writable and seekable."""
        stream = Stream.create()

        assert stream.is_readable() is True
        assert stream.is_writable() is True
        assert stream.is_seekable() is True

    def test_size_follows_writes(self):
        """Test that size() is refreshed after a write."""
        stream = Stream.create(b"abc")
        assert stream.size() == 3

        stream.write(b"defg")
        assert stream.size() == 7

    def test_spills_past_memory_limit(self):
        """Test that content larger than the memory limit is still readable."""
        set_config(MessageConfig(temp_memory_limit=4))
        stream = Stream.create(b"0123456789")
        stream.rewind()

        assert stream.get_contents() == b"0123456789"


class TestStreamOpen:
    """Tests for Stream.open()."""

    def test_open_read_only(self, sample_file):
        """Test reading a file opened with mode r."""
        stream = Stream.open(sample_file, "r")

        assert stream.metadata("mode") == "rb"
        assert stream.is_readable() is True
        assert stream.is_writable() is False
        assert stream.get_contents() == b"file contents"
        stream.close()

    def test_write_to_read_only_fails(self, sample_file):
        """Test that writing to a read-only stream raises StreamIOError."""
        with Stream.open(sample_file, "rb") as stream:
            with pytest.raises(StreamIOError):
                stream.write(b"nope")

    def test_open_write_truncates(self, sample_file):
        """Test that mode w truncates and is write-only."""
        with Stream.open(sample_file, "w") as stream:
            assert stream.is_readable() is False
            assert stream.is_writable() is True
            stream.write(b"new")

        assert sample_file.read_bytes() == b"new"

    def test_open_create_mode_keeps_content(self, tmp_path, sample_file):
        """Test that mode c creates a missing file and never truncates."""
        with Stream.open(sample_file, "c") as stream:
            stream.write(b"F")
        assert sample_file.read_bytes() == b"File contents"

        missing = tmp_path / "created.bin"
        with Stream.open(missing, "c+") as stream:
            stream.write(b"data")
            stream.rewind()
            assert stream.read(4) == b"data"
        assert missing.read_bytes() == b"data"

    def test_exclusive_mode_on_existing_file(self, sample_file):
        """Test that mode x fails when the file exists."""
        with pytest.raises(StreamIOError):
            Stream.open(sample_file, "x")

    def test_missing_file(self, tmp_path):
        """Test that opening a missing file for reading raises StreamIOError."""
        with pytest.raises(StreamIOError):
            Stream.open(tmp_path / "missing.txt", "r")

    @pytest.mark.parametrize("mode", ["", "z", "rt", "r+q", "rbb", "r++", "r+b+", "br"])
    def test_invalid_mode(self, sample_file, mode):
        """Test that unrecognized modes raise ValidationError."""
        with pytest.raises(ValidationError):
            Stream.open(sample_file, mode)

    def test_empty_filename(self):
        """Test that an empty filename raises StreamIOError."""
        with pytest.raises(StreamIOError):
            Stream.open("", "r")

    def test_metadata(self, sample_file):
        """Test the metadata of a file-backed stream."""
        with Stream.open(sample_file, "r+") as stream:
            meta = stream.metadata()

            assert meta["mode"] == "rb+"
            assert meta["seekable"] is True
            assert meta["uri"] == str(sample_file)
            assert meta["stream_type"] == "BufferedRandom"
            assert stream.is_readable() and stream.is_writable()


class TestStreamWrap:
    """Tests for wrapping existing resources."""

    def test_wrap_bytes_io(self):
        """Test that a BytesIO is treated as read/write."""
        stream = Stream(io.BytesIO(b"abc"))

        assert stream.metadata("mode") == "w+b"
        assert stream.read(3) == b"abc"

    def test_reject_text_resource(self):
        """Test that text streams are rejected."""
        with pytest.raises(ValidationError):
            Stream(io.StringIO("text"))

    def test_reject_non_file(self):
        """Test that arbitrary objects are rejected."""
        with pytest.raises(ValidationError):
            Stream(object())

    def test_unseekable_resource(self):
        """Test seek on a resource that cannot seek."""
        stream = Stream(UnseekableBuffer(b"abc"))

        assert stream.is_seekable() is False
        with pytest.raises(StreamIOError):
            stream.seek(0)
        with pytest.raises(StreamIOError):
            stream.rewind()

    def test_unseekable_eof_flag(self):
        """Test that eof is reported after a short read on an unseekable stream."""
        stream = Stream(UnseekableBuffer(b"abc"))

        assert stream.eof() is False
        assert stream.read(10) == b"abc"
        assert stream.eof() is True


class TestStreamPosition:
    """Tests for seek, tell, read and eof."""

    def test_seek_and_tell(self, hello_stream):
        """Test seeking from the start and from the end."""
        hello_stream.seek(2)
        assert hello_stream.tell() == 2

        hello_stream.seek(-1, os.SEEK_END)
        assert hello_stream.read(1) == b"o"

    def test_eof_after_reading_everything(self, hello_stream):
        """Test eof before and after reading all bytes."""
        assert hello_stream.eof() is False
        hello_stream.read(5)
        assert hello_stream.eof() is True

        hello_stream.rewind()
        assert hello_stream.eof() is False

    def test_short_read(self, hello_stream):
        """Test that reading past the end returns what is there."""
        assert hello_stream.read(100) == b"hello"
        assert hello_stream.read(1) == b""

    def test_negative_read_length(self, hello_stream):
        """Test that a negative length raises ValidationError."""
        with pytest.raises(ValidationError):
            hello_stream.read(-1)

    def test_get_contents_from_position(self, hello_stream):
        """Test that get_contents() starts at the current position."""
        hello_stream.seek(3)
        assert hello_stream.get_contents() == b"lo"

    def test_write_str(self):
        """Test that str data is written as UTF-8."""
        stream = Stream.create()
        assert stream.write("é") == 2
        assert bytes(stream) == "é".encode("utf-8")


class TestStreamLifecycle:
    """Tests for detach and close."""

    def test_detach(self):
        """Test that detach() hands back the resource and resets state."""
        resource = io.BytesIO(b"abc")
        stream = Stream(resource)

        assert stream.detach() is resource
        assert stream.detach() is None
        assert stream.size() is None
        assert stream.metadata() == {}
        assert stream.metadata("mode") is None
        assert stream.eof() is True
        assert stream.is_readable() is False
        assert stream.is_writable() is False
        assert stream.is_seekable() is False
        assert resource.closed is False

    def test_tell_after_detach(self):
        """Test that tell() on a detached stream raises StateError."""
        stream = Stream.create(b"abc")
        stream.detach()

        with pytest.raises(StateError):
            stream.tell()

    def test_close_is_idempotent(self):
        """Test that close() may be called repeatedly."""
        resource = io.BytesIO(b"abc")
        stream = Stream(resource)

        stream.close()
        stream.close()

        assert resource.closed is True
        assert stream.eof() is True

    def test_write_after_close(self):
        """Test that writing to a closed stream raises StreamIOError."""
        stream = Stream.create(b"abc")
        stream.close()

        with pytest.raises(StreamIOError):
            stream.write(b"more")

    def test_get_contents_after_close(self):
        """Test that get_contents() on a closed stream raises StreamIOError."""
        stream = Stream.create(b"abc")
        stream.close()

        with pytest.raises(StreamIOError):
            stream.get_contents()

    def test_context_manager_closes(self, sample_file):
        """Test that leaving the with-block closes the resource."""
        with Stream.open(sample_file, "r") as stream:
            resource = stream.metadata("uri")
            assert resource == str(sample_file)

        assert stream.metadata() == {}


class TestStreamSnapshot:
    """Tests for bytes() / str() rendering."""

    def test_bytes_reads_from_start(self):
        """Test that bytes() rewinds before reading."""
        stream = Stream.create(b"abc")
        assert bytes(stream) == b"abc"
        assert bytes(stream) == b"abc"

    def test_str_decodes(self):
        """Test that str() decodes as UTF-8."""
        assert str(Stream.create("héllo")) == "héllo"

    def test_snapshot_of_closed_stream_is_empty(self):
        """Test that rendering a closed stream yields an empty string."""
        stream = Stream.create(b"abc")
        stream.close()

        assert bytes(stream) == b""
        assert str(stream) == ""

    def test_snapshot_of_write_only_stream_is_empty(self, sample_file):
        """Test that rendering an unreadable stream does not raise."""
        with Stream.open(sample_file, "a") as stream:
            assert str(stream) == ""
