"""Change detection for .properties files, between files or git refs."""

import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_ENCODING
from ..properties.models import PropertyEntry
from ..properties.parser import PropertiesParser

logger = logging.getLogger(__name__)


class ChangeType(Enum):
    """Type of change detected in a .properties file."""
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass
class PropertyChange:
    """Represents a change to a property.

    Attributes:
        key: The property key that changed.
        change_type: Type of change (added, modified, removed).
        old_value: Previous value (None for added entries).
        new_value: New value (None for removed entries).
    """
    key: str
    change_type: ChangeType
    old_value: Optional[str] = None
    new_value: Optional[str] = None


class DiffDetector:
    """Detects changes between two versions of a .properties file."""

    def __init__(self, repo_path: Optional[Path] = None, encoding: str = DEFAULT_ENCODING):
        """Initialize the detector.

        Args:
            repo_path: Path to the git repository. Defaults to current directory.
            encoding: Encoding of the compared files.
        """
        self.repo_path = repo_path or Path.cwd()
        self.parser = PropertiesParser(encoding=encoding)

    def compare_files(self, old_path: Path, new_path: Path) -> list[PropertyChange]:
        """Compare two .properties files on disk.

        Args:
            old_path: The baseline file.
            new_path: The file to compare against the baseline.

        Returns:
            List of PropertyChange objects describing the changes.
        """
        old_entries = self._to_dict(self.parser.parse_file(old_path))
        new_entries = self._to_dict(self.parser.parse_file(new_path))
        return self._compare_entries(old_entries, new_entries)

    def detect_changes(
        self,
        file_path: Path,
        base_ref: str = "HEAD~1",
        head_ref: str = "HEAD"
    ) -> list[PropertyChange]:
        """Detect changes to a .properties file between two git refs.

        Args:
            file_path: Path to the file (relative to repo root).
            base_ref: Base git reference (commit, branch, tag). Default: HEAD~1.
            head_ref: Head git reference. Default: HEAD.

        Returns:
            List of PropertyChange objects describing the changes.
        """
        base_content = self._get_file_at_ref(file_path, base_ref)
        base_entries = self.parser.parse_to_dict(base_content) if base_content else {}

        head_content = self._get_file_at_ref(file_path, head_ref)
        head_entries = self.parser.parse_to_dict(head_content) if head_content else {}

        return self._compare_entries(base_entries, head_entries)

    def detect_changes_from_working_tree(
        self,
        file_path: Path,
        base_ref: str = "HEAD"
    ) -> list[PropertyChange]:
        """Detect changes between a git ref and the current working tree.

        Args:
            file_path: Path to the .properties file.
            base_ref: Base git reference to compare against.

        Returns:
            List of PropertyChange objects describing the changes.
        """
        base_content = self._get_file_at_ref(file_path, base_ref)
        base_entries = self.parser.parse_to_dict(base_content) if base_content else {}

        abs_path = self.repo_path / file_path if not file_path.is_absolute() else file_path
        if abs_path.exists():
            current_entries = self._to_dict(self.parser.parse_file(abs_path))
        else:
            current_entries = {}

        return self._compare_entries(base_entries, current_entries)

    def _get_file_at_ref(self, file_path: Path, ref: str) -> Optional[bytes]:
        """Get raw file content at a specific git reference.

        Returns:
            File content, or None if the file doesn't exist at that ref.
        """
        try:
            if file_path.is_absolute():
                file_path = file_path.relative_to(self.repo_path)
        except ValueError:
            pass

        try:
            result = subprocess.run(
                ["git", "show", f"{ref}:{file_path.as_posix()}"],
                capture_output=True,
                cwd=self.repo_path,
                check=True
            )
        except subprocess.CalledProcessError:
            logger.debug("%s does not exist at %s", file_path, ref)
            return None
        return result.stdout

    @staticmethod
    def _to_dict(entries: list[PropertyEntry]) -> dict[str, PropertyEntry]:
        return {entry.key: entry for entry in entries}

    def _compare_entries(
        self,
        base: dict[str, PropertyEntry],
        head: dict[str, PropertyEntry]
    ) -> list[PropertyChange]:
        """Compare two sets of entries and return changes.

        Changes are ordered added, removed, modified; each group follows the
        key order of the file it was found in.
        """
        changes = []

        for key, entry in head.items():
            if key not in base:
                changes.append(PropertyChange(
                    key=key,
                    change_type=ChangeType.ADDED,
                    new_value=entry.value
                ))

        for key, entry in base.items():
            if key not in head:
                changes.append(PropertyChange(
                    key=key,
                    change_type=ChangeType.REMOVED,
                    old_value=entry.value
                ))

        for key, entry in head.items():
            if key in base and base[key].value != entry.value:
                changes.append(PropertyChange(
                    key=key,
                    change_type=ChangeType.MODIFIED,
                    old_value=base[key].value,
                    new_value=entry.value
                ))

        return changes
