"""Parser and writer for .properties files."""

import io
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, Union

from ..config import BUFFER_SIZE, DEFAULT_ENCODING, WriteOptions
from ..errors import DecodeError, IoFailure
from .escapes import ESCAPE_ERRORS, decode_escapes, encode_text, format_comments
from .models import Properties, PropertyEntry

logger = logging.getLogger(__name__)

_CR = ord("\r")
_LF = ord("\n")
_BACKSLASH = ord("\\")
_COMMENT_MARKERS = frozenset(b"#!")
_WHITESPACE = frozenset(b" \t\f")
_SEPARATORS = frozenset(b"=:")

Source = Union[BinaryIO, bytes, bytearray]


class LineReader:
    """Reads logical lines from a binary source.

    Comment and blank lines are dropped, leading whitespace is stripped and
    backslash-continued physical lines are joined. The source is pulled in
    chunks of ``buffer_size`` bytes.

    Usage:
        reader = LineReader(io.BytesIO(b"a=b\\\\\\n  c\\n"))
        for line in reader:
            ...  # b"a=bc"
    """

    def __init__(self, source: BinaryIO, buffer_size: int = BUFFER_SIZE):
        self._source = source
        self._buffer_size = buffer_size
        self._buffer = b""
        self._offset = 0
        self._line = bytearray()
        self._previous: Optional[int] = None
        self._physical_lines = 0
        # Physical line on which the last logical line began
        self.lineno = 0

    def _fill(self) -> bool:
        try:
            self._buffer = self._source.read(self._buffer_size)
        except OSError as exc:
            raise IoFailure("read", str(exc)) from exc
        self._offset = 0
        return bool(self._buffer)

    def read_line(self) -> bytes:
        """Read the next logical line.

        Returns:
            The logical line, or ``b""`` once the input is exhausted.
        """
        skip_lf = False
        skip_white_space = True
        is_new_line = True
        is_comment_line = False
        preceding_backslash = False
        appended_line_begin = False

        line = self._line
        line.clear()

        while True:
            if self._offset >= len(self._buffer):
                if not self._fill():
                    if is_comment_line:
                        line.clear()
                    elif preceding_backslash:
                        line.pop()
                    return bytes(line)

            c = self._buffer[self._offset]
            self._offset += 1

            if (c == _LF and self._previous != _CR) or c == _CR:
                self._physical_lines += 1
            self._previous = c

            if skip_lf:
                skip_lf = False
                if c == _LF:
                    continue

            if skip_white_space:
                if c in _WHITESPACE:
                    continue
                if not appended_line_begin and (c == _CR or c == _LF):
                    continue
                skip_white_space = False
                appended_line_begin = False

            if is_new_line:
                is_new_line = False
                if c in _COMMENT_MARKERS:
                    is_comment_line = True
                    continue

            if c != _LF and c != _CR:
                if not line:
                    self.lineno = self._physical_lines + 1
                line.append(c)
                if c == _BACKSLASH:
                    preceding_backslash = not preceding_backslash
                else:
                    preceding_backslash = False
                continue

            # End of a physical line
            if is_comment_line:
                is_comment_line = False
                is_new_line = True
                skip_white_space = True
                preceding_backslash = False
                line.clear()
                continue

            if preceding_backslash:
                line.pop()
                # Skip the leading whitespace of the continuation line
                skip_white_space = True
                appended_line_begin = True
                preceding_backslash = False
                if c == _CR:
                    skip_lf = True
                continue

            if not line:
                # A continuation ran into an empty line; start over
                is_new_line = True
                skip_white_space = True
                continue

            return bytes(line)

    def __iter__(self) -> Iterator[bytes]:
        while True:
            line = self.read_line()
            if not line:
                return
            yield line


def split_entry(line: bytes) -> tuple[bytes, bytes]:
    """Split a logical line into its raw key and raw value.

    Args:
        line: A non-empty logical line.

    Returns:
        Tuple of (raw_key, raw_value), both still escaped.
    """
    limit = len(line)
    key_len = 0
    value_start = limit
    has_sep = False
    backslash = False

    while key_len < limit:
        c = line[key_len]
        if c in _SEPARATORS and not backslash:
            value_start = key_len + 1
            has_sep = True
            break
        if c in _WHITESPACE and not backslash:
            value_start = key_len + 1
            break
        if c == _BACKSLASH:
            backslash = not backslash
        else:
            backslash = False
        key_len += 1

    while value_start < limit:
        c = line[value_start]
        if c not in _WHITESPACE:
            if not has_sep and c in _SEPARATORS:
                has_sep = True
            else:
                break
        value_start += 1

    return line[:key_len], line[value_start:]


def parse_entry(line: bytes, encoding: str = DEFAULT_ENCODING) -> PropertyEntry:
    """Split and decode a logical line into a PropertyEntry."""
    raw_key, raw_value = split_entry(line)
    return PropertyEntry(
        key=decode_escapes(raw_key, encoding),
        value=decode_escapes(raw_value, encoding)
    )


class PropertiesParser:
    """Parser for .properties files.

    Reads logical lines from a byte source, decodes escapes in keys and
    values and writes entries back with the matching escaping.
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING, buffer_size: int = BUFFER_SIZE):
        """Initialize the parser.

        Args:
            encoding: Encoding of literal (unescaped) bytes on disk.
            buffer_size: Chunk size used when reading from a source.
        """
        self.encoding = encoding
        self.buffer_size = buffer_size

    def iter_entries(self, source: Source) -> Iterator[PropertyEntry]:
        """Yield entries in file order, duplicates included.

        Args:
            source: A binary readable, or raw bytes.

        Raises:
            DecodeError: A line contains a malformed escape. ``lineno`` is
                set to the line on which it began.
            IoFailure: Reading from the source failed.
        """
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)

        reader = LineReader(source, self.buffer_size)
        for line in reader:
            logger.debug("Logical line %d: %r", reader.lineno, line)
            try:
                entry = parse_entry(line, self.encoding)
            except DecodeError as exc:
                exc.lineno = reader.lineno
                raise
            yield entry

    def parse(self, content: Union[bytes, str]) -> list[PropertyEntry]:
        """Parse .properties content into PropertyEntry objects.

        Args:
            content: Raw bytes, or text that is encoded with the parser's
                encoding first.

        Returns:
            List of entries in file order.

        Raises:
            DecodeError: A line contains a malformed escape, or ``content``
                is text the parser's encoding cannot represent.
        """
        if isinstance(content, str):
            content = encode_text(content, self.encoding)
        return list(self.iter_entries(content))

    def parse_to_dict(self, content: Union[bytes, str]) -> dict[str, PropertyEntry]:
        """Parse content into a dictionary keyed by property key (last wins)."""
        return {entry.key: entry for entry in self.parse(content)}

    def parse_file(self, path: Path) -> list[PropertyEntry]:
        """Parse a .properties file into a list of entries."""
        with self._open(path, "rb") as f:
            return list(self.iter_entries(f))

    def load(self, source: Source, properties: Properties) -> Properties:
        """Insert every entry from ``source`` into ``properties``.

        A decode error aborts the load. Entries inserted before it are kept.

        Returns:
            The same Properties instance.
        """
        count = 0
        for entry in self.iter_entries(source):
            logger.debug("Parsed key=%r value=%r", entry.key, entry.value)
            properties.set(entry.key, entry.value)
            count += 1
        logger.debug("Loaded %d entries", count)
        return properties

    def load_file(self, path: Path, properties: Properties) -> Properties:
        with self._open(path, "rb") as f:
            return self.load(f, properties)

    def dump(
        self,
        entries: Iterable[PropertyEntry],
        sink: BinaryIO,
        options: Optional[WriteOptions] = None
    ) -> None:
        """Write entries to a binary sink and flush it once.

        Args:
            entries: Entries to write.
            sink: Binary writable supporting ``flush``.
            options: Write options. Defaults to ``WriteOptions()``.

        Raises:
            IoFailure: Writing to the sink failed.
        """
        options = options or WriteOptions()
        if options.sort_keys:
            entries = sorted(entries, key=lambda entry: entry.key)

        count = 0
        try:
            if options.comments:
                block = format_comments(
                    options.comments,
                    options.escape_unicode,
                    options.line_ending
                )
                sink.write(self._encode(block))

            for entry in entries:
                logger.debug("Writing key=%r value=%r", entry.key, entry.value)
                line = entry.to_properties_format(options.escape_unicode)
                sink.write(self._encode(line + options.line_ending))
                count += 1

            sink.flush()
        except OSError as exc:
            raise IoFailure("write", str(exc)) from exc
        logger.debug("Stored %d entries", count)

    def format(
        self,
        entries: Iterable[PropertyEntry],
        options: Optional[WriteOptions] = None
    ) -> bytes:
        """Format entries as .properties content.

        Returns:
            Encoded .properties content.
        """
        buffer = io.BytesIO()
        self.dump(entries, buffer, options)
        return buffer.getvalue()

    def write(
        self,
        entries: Iterable[PropertyEntry],
        path: Path,
        options: Optional[WriteOptions] = None
    ) -> None:
        """Write entries to a .properties file, creating parent directories.

        Entries go to a temporary file next to ``path`` which then replaces
        it, so a failed write leaves any existing file untouched.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp"
            )
        except OSError as exc:
            raise IoFailure("write", str(exc)) from exc

        try:
            with os.fdopen(fd, "wb") as f:
                mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else 0o644
                os.chmod(tmp_path, mode)
                self.dump(entries, f, options)
            os.replace(tmp_path, path)
        except Exception as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.debug("Could not remove temporary file %s", tmp_path)
            if isinstance(exc, OSError):
                raise IoFailure("write", str(exc)) from exc
            raise

    def _encode(self, text: str) -> bytes:
        return text.encode(self.encoding, errors=ESCAPE_ERRORS)

    @staticmethod
    def _open(path: Path, mode: str) -> BinaryIO:
        try:
            return open(path, mode)
        except OSError as exc:
            operation = "read" if "r" in mode else "write"
            raise IoFailure(operation, str(exc)) from exc
