"""Properties file parsing, escaping and models."""

from .escapes import decode_escapes, encode_text, escape, format_comments, unicode_escape
from .models import Properties, PropertyEntry
from .parser import LineReader, PropertiesParser, parse_entry, split_entry

__all__ = [
    "LineReader",
    "Properties",
    "PropertiesParser",
    "PropertyEntry",
    "decode_escapes",
    "encode_text",
    "escape",
    "format_comments",
    "parse_entry",
    "split_entry",
    "unicode_escape",
]
