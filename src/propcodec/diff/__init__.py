"""Change detection between versions of .properties files."""

from .detector import ChangeType, DiffDetector, PropertyChange

__all__ = ["ChangeType", "DiffDetector", "PropertyChange"]
