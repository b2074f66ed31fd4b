"""Codec for Java-style .properties files."""

__version__ = "0.1.0"

from .config import WriteOptions
from .errors import (
    DecodeError,
    InvalidHexDigit,
    InvalidLowSurrogate,
    InvalidTextEncoding,
    IoFailure,
    PropertiesError,
    TruncatedUnicodeEscape,
    UnpairedHighSurrogate,
)
from .properties import Properties, PropertiesParser, PropertyEntry
