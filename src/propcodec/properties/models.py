"""Data models for .properties entries."""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, Union

from ..config import DEFAULT_ENCODING, WriteOptions
from .escapes import encode_text, escape


@dataclass
class PropertyEntry:
    """Represents a single key/value pair of a .properties file.

    Attributes:
        key: The property key.
        value: The property value.
    """
    key: str
    value: str

    def to_properties_format(self, escape_unicode: bool = False) -> str:
        """Convert entry to a ``key=value`` line, without a terminator.

        Args:
            escape_unicode: Write non-ASCII code points as ``\\uXXXX``.

        Returns:
            The escaped entry line.
        """
        escaped_key = escape(self.key, escape_space=True, escape_unicode=escape_unicode)
        escaped_value = escape(self.value, escape_space=False, escape_unicode=escape_unicode)
        return f"{escaped_key}={escaped_value}"


class Properties:
    """An insertion-ordered mapping of property keys to values.

    All operations are guarded by a single lock, so one instance can be
    shared between threads. ``load`` inserts entries one at a time and
    ``store`` writes a snapshot taken under the lock.

    Usage:
        props = Properties()
        props.load_file("app.properties")
        props.set("greeting", "Hello")
        props.store_file("app.properties", WriteOptions(escape_unicode=True))
    """

    def __init__(
        self,
        data: Optional[dict[str, str]] = None,
        encoding: str = DEFAULT_ENCODING
    ):
        """Initialize the mapping.

        Args:
            data: Optional initial entries.
            encoding: Byte encoding used by load and store.
        """
        self.encoding = encoding
        self._lock = threading.Lock()
        self._data: dict[str, str] = dict(data or {})

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def update(self, updates: dict[str, str], removals: Iterable[str] = ()) -> None:
        """Apply several updates and removals atomically.

        Args:
            updates: Keys to add or overwrite.
            removals: Keys to remove. Missing keys are ignored.
        """
        with self._lock:
            for key in removals:
                self._data.pop(key, None)
            self._data.update(updates)

    def remove(self, key: str) -> Optional[str]:
        """Remove a key, returning its previous value if it existed."""
        with self._lock:
            return self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def items(self) -> list[tuple[str, str]]:
        with self._lock:
            return list(self._data.items())

    def entries(self) -> list[PropertyEntry]:
        return [PropertyEntry(key, value) for key, value in self.items()]

    def to_dict(self) -> dict[str, str]:
        with self._lock:
            return dict(self._data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Properties):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Properties({self.to_dict()!r})"

    def load(self, source: Union[BinaryIO, bytes]) -> None:
        """Read entries from a binary source into this mapping.

        Entries inserted before a decode error stay in the mapping.
        """
        from .parser import PropertiesParser
        PropertiesParser(encoding=self.encoding).load(source, self)

    def loads(self, data: Union[bytes, str]) -> None:
        """Read entries from bytes, or from text encoded with ``self.encoding``."""
        if isinstance(data, str):
            data = encode_text(data, self.encoding)
        self.load(data)

    def load_file(self, path: Union[str, Path]) -> None:
        from .parser import PropertiesParser
        PropertiesParser(encoding=self.encoding).load_file(Path(path), self)

    def store(self, sink: BinaryIO, options: Optional[WriteOptions] = None) -> None:
        """Write every entry to a binary sink, flushing it once at the end."""
        from .parser import PropertiesParser
        PropertiesParser(encoding=self.encoding).dump(self.entries(), sink, options)

    def dumps(self, options: Optional[WriteOptions] = None) -> bytes:
        from .parser import PropertiesParser
        return PropertiesParser(encoding=self.encoding).format(self.entries(), options)

    def store_file(self, path: Union[str, Path], options: Optional[WriteOptions] = None) -> None:
        from .parser import PropertiesParser
        PropertiesParser(encoding=self.encoding).write(self.entries(), Path(path), options)

    @classmethod
    def from_file(cls, path: Union[str, Path], encoding: str = DEFAULT_ENCODING) -> "Properties":
        """Create a mapping from a .properties file."""
        props = cls(encoding=encoding)
        props.load_file(path)
        return props
