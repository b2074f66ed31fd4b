"""Configuration for reading and writing .properties files."""

from dataclasses import dataclass


DEFAULT_ENCODING = "utf-8"

# Size of the chunks pulled from the input source by the line reader.
BUFFER_SIZE = 8 * 1024

LF = "\n"
CR = "\r"
CRLF = "\r\n"

# Line ending names accepted on the command line
LINE_ENDINGS = {
    "lf": LF,
    "cr": CR,
    "crlf": CRLF,
}


@dataclass
class WriteOptions:
    """Options controlling how a mapping is serialized.

    Attributes:
        comments: Free-form text written as a ``#`` comment block before the
            entries. Nothing is written when empty.
        escape_unicode: If True, every code point outside printable ASCII is
            written as a ``\\uXXXX`` escape.
        line_ending: Terminator written after every entry and comment line.
            One of ``"\\n"``, ``"\\r"`` or ``"\\r\\n"``.
        sort_keys: If True, entries are written in sorted key order instead
            of insertion order.
    """
    comments: str = ""
    escape_unicode: bool = False
    line_ending: str = LF
    sort_keys: bool = False

    def __post_init__(self):
        if self.line_ending not in (LF, CR, CRLF):
            raise ValueError(f"Unsupported line ending: {self.line_ending!r}")

    @classmethod
    def from_names(
        cls,
        line_ending: str = "lf",
        **kwargs
    ) -> "WriteOptions":
        """Build options using a line ending name (``lf``, ``cr``, ``crlf``).

        Args:
            line_ending: Name of the line ending, case-insensitive.
            **kwargs: Remaining ``WriteOptions`` fields.

        Returns:
            A new WriteOptions instance.
        """
        try:
            ending = LINE_ENDINGS[line_ending.lower()]
        except KeyError:
            raise ValueError(f"Unknown line ending name: {line_ending!r}") from None
        return cls(line_ending=ending, **kwargs)
