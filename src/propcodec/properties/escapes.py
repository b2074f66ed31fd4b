"""Escape handling for .properties keys, values and comments.

Decoding works on the raw bytes of a logical line. Encoding produces text
that is turned into bytes by the writer. Characters that the output
encoding cannot represent are escaped through the ``properties-escape``
codec error handler registered here.
"""

import codecs

from ..config import DEFAULT_ENCODING, LF
from ..errors import (
    InvalidHexDigit,
    InvalidLowSurrogate,
    InvalidTextEncoding,
    TruncatedUnicodeEscape,
    UnpairedHighSurrogate,
)


ESCAPE_ERRORS = "properties-escape"

_BACKSLASH = ord("\\")
_U = ord("u")

# \t, \r, \n and \f; any other escaped byte stands for itself
_SHORT_ESCAPES = {
    ord("t"): ord("\t"),
    ord("r"): ord("\r"),
    ord("n"): ord("\n"),
    ord("f"): ord("\f"),
}

_HEX_VALUES = {c: int(chr(c), 16) for c in b"0123456789abcdefABCDEF"}

_SPECIAL_CHARS = {
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
    "=": "\\=",
    ":": "\\:",
    "#": "\\#",
    "!": "\\!",
}

HIGH_SURROGATES = range(0xD800, 0xDC00)
LOW_SURROGATES = range(0xDC00, 0xE000)


def _read_unit(data: bytes, start: int) -> int:
    """Decode the 4 hex digits at ``data[start:start + 4]``."""
    digits = data[start:start + 4]
    if len(digits) < 4:
        raise TruncatedUnicodeEscape(len(digits))
    unit = 0
    for digit in digits:
        try:
            unit = (unit << 4) + _HEX_VALUES[digit]
        except KeyError:
            raise InvalidHexDigit(chr(digit)) from None
    return unit


def _decode_bytes(raw: bytearray, encoding: str) -> str:
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise InvalidTextEncoding(str(exc)) from exc


def encode_text(text: str, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Encode .properties source text given as a ``str`` for parsing.

    Raises:
        InvalidTextEncoding: ``text`` holds characters ``encoding`` cannot
            represent.
    """
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as exc:
        raise InvalidTextEncoding(str(exc)) from exc


def decode_escapes(data: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    """Decode a raw key or value span into text.

    Args:
        data: Raw bytes of the span, possibly containing backslash escapes.
        encoding: Encoding of the literal (unescaped) bytes.

    Returns:
        The decoded string.

    Raises:
        InvalidHexDigit: A ``\\u`` escape contains a non-hex character.
        TruncatedUnicodeEscape: Fewer than 4 hex digits follow ``\\u``.
        UnpairedHighSurrogate: A high surrogate is not followed by ``\\u``.
        InvalidLowSurrogate: A surrogate pair has an invalid trail unit.
        InvalidTextEncoding: Literal bytes are not valid in ``encoding``.
    """
    parts: list[str] = []
    pending = bytearray()
    idx = 0
    end = len(data)

    while idx < end:
        c = data[idx]
        if c != _BACKSLASH:
            pending.append(c)
            idx += 1
            continue

        idx += 1
        if idx >= end:
            # A lone trailing backslash escapes nothing
            break

        c = data[idx]
        if c != _U:
            pending.append(_SHORT_ESCAPES.get(c, c))
            idx += 1
            continue

        code_point = _read_unit(data, idx + 1)
        idx += 5
        # A lone trail unit passes through and is escaped again on write
        if code_point in HIGH_SURROGATES:
            if data[idx:idx + 2] != b"\\u":
                raise UnpairedHighSurrogate(code_point)
            trail = _read_unit(data, idx + 2)
            if trail not in LOW_SURROGATES:
                raise InvalidLowSurrogate(trail)
            code_point = ((code_point - 0xD800) << 10) + (trail - 0xDC00) + 0x10000
            idx += 6

        parts.append(_decode_bytes(pending, encoding))
        pending.clear()
        parts.append(chr(code_point))

    parts.append(_decode_bytes(pending, encoding))
    return "".join(parts)


def unicode_escape(code_point: int) -> str:
    """Return the ``\\uXXXX`` form of a code point.

    Code points above the BMP are split into a surrogate pair, high
    surrogate first. Hex digits are uppercase.
    """
    if code_point >= 0x10000:
        offset = code_point - 0x10000
        high = 0xD800 + (offset >> 10)
        low = 0xDC00 + (offset & 0x3FF)
        return f"\\u{high:04X}\\u{low:04X}"
    return f"\\u{code_point:04X}"


def escape(text: str, escape_space: bool = False, escape_unicode: bool = False) -> str:
    """Escape a key or value for writing.

    Args:
        text: The decoded string.
        escape_space: Escape every space (keys). When False only a leading
            space is escaped (values).
        escape_unicode: Write code points outside ``[0x20, 0x7E]`` as
            ``\\uXXXX`` escapes.

    Returns:
        The escaped text.
    """
    result = []
    for i, ch in enumerate(text):
        code_point = ord(ch)
        if 0x3D < code_point < 0x7F:
            result.append("\\\\" if ch == "\\" else ch)
        elif ch == " ":
            result.append("\\ " if i == 0 or escape_space else " ")
        elif ch in _SPECIAL_CHARS:
            result.append(_SPECIAL_CHARS[ch])
        elif escape_unicode and (code_point < 0x20 or code_point > 0x7E):
            result.append(unicode_escape(code_point))
        else:
            result.append(ch)
    return "".join(result)


def format_comments(
    comments: str,
    escape_unicode: bool = False,
    line_ending: str = LF
) -> str:
    """Turn free-form text into a ``#`` comment block.

    Every line terminator in ``comments`` (``\\n``, ``\\r`` or ``\\r\\n``)
    is replaced with ``line_ending`` and followed by a new ``#`` unless the
    next character already is one.

    Args:
        comments: The comment text.
        escape_unicode: Write code points above 0x7F as ``\\uXXXX``.
        line_ending: Terminator to write after each comment line.

    Returns:
        The comment block, always terminated by ``line_ending``.
    """
    result = ["#"]
    idx = 0
    end = len(comments)

    while idx < end:
        ch = comments[idx]
        if ch == "\r" or ch == "\n":
            if ch == "\r" and comments[idx + 1:idx + 2] == "\n":
                idx += 1
            result.append(line_ending)
            if comments[idx + 1:idx + 2] != "#":
                result.append("#")
        elif escape_unicode and ord(ch) > 0x7F:
            result.append(unicode_escape(ord(ch)))
        else:
            result.append(ch)
        idx += 1

    result.append(line_ending)
    return "".join(result)


def _escape_unencodable(exc: UnicodeError):
    if not isinstance(exc, UnicodeEncodeError):
        raise exc
    chars = exc.object[exc.start:exc.end]
    return "".join(unicode_escape(ord(ch)) for ch in chars), exc.end


codecs.register_error(ESCAPE_ERRORS, _escape_unencodable)
