"""Exceptions raised while loading and storing .properties data."""

from typing import Optional


class PropertiesError(Exception):
    """Base class for every error raised by propcodec."""


class IoFailure(PropertiesError):
    """The underlying source or sink failed.

    The original ``OSError`` is chained as ``__cause__``.
    """

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class DecodeError(PropertiesError, ValueError):
    """A logical line could not be decoded.

    Attributes:
        lineno: Physical line on which the offending logical line began,
            if known.
    """

    lineno: Optional[int] = None

    def __str__(self) -> str:
        message = super().__str__()
        if self.lineno is not None:
            return f"line {self.lineno}: {message}"
        return message


class InvalidHexDigit(DecodeError):
    """A ``\\u`` escape contains a character outside ``[0-9a-fA-F]``."""

    def __init__(self, char: str):
        self.char = char
        super().__init__(f"parse unicode failed, invalid char {char!r}")


class TruncatedUnicodeEscape(DecodeError):
    """Fewer than 4 hex digits follow a ``\\u`` escape."""

    def __init__(self, available: int):
        self.available = available
        super().__init__(
            f"invalid escape unicode, expected 4 hex digits but got {available}"
        )


class UnpairedHighSurrogate(DecodeError):
    """A high surrogate is not immediately followed by another ``\\u`` escape."""

    def __init__(self, unit: int):
        self.unit = unit
        super().__init__(f"got lead surrogate without trail {unit:04X}")


class InvalidLowSurrogate(DecodeError):
    """The unit following a high surrogate is not in ``[DC00, DFFF]``."""

    def __init__(self, unit: int):
        self.unit = unit
        super().__init__(
            f"invalid trail surrogate {unit:04X} after lead surrogate, should be between DC00 and DFFF"
        )


class InvalidTextEncoding(DecodeError):
    """Raw bytes are not valid in the configured text encoding."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"invalid text encoding: {reason}")
