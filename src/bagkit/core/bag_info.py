# ============================================================================
# SOURCEFILE: bag_info.py
# RELPATH: bagkit/src/bagkit/core/bag_info.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: bag-info.txt tag metadata with continuation-line folding
# ============================================================================

"""
Bag Info Module.

``bag-info.txt`` holds ordered ``Tag: Value`` lines. Tags may repeat and
their order is significant, so the metadata is a list rather than a dict.

Format Example:
    Source-Organization: FreeLibrary
    External-Description: A long description that was folded
      onto a second line by a tool that wraps at 79 columns.
    Payload-Oxum: 279164.2

A line starting with whitespace continues the previous value; its leading
whitespace collapses to a single space. Values are written back unfolded.
"""

import logging
import re
from pathlib import Path
from typing import Iterator, List, Mapping, Optional, Tuple, Union

from bagkit.core.exceptions import (
    BagReadError,
    BagWriteError,
    IllegalBagStateError,
    TagFileParseError
)
from bagkit.core.models import TagEntry

logger = logging.getLogger(__name__)

FILE_NAME = "bag-info.txt"
METADATA_DELIM = ": "

_LEADING_WHITESPACE = re.compile(r"^\s+")


class BagInfo:
    """
    Ordered tag metadata for a bag.

    Once the owning bag is validated the metadata is locked and any
    mutation raises IllegalBagStateError.
    """

    def __init__(self, entries: Optional[List[TagEntry]] = None):
        self._entries: List[TagEntry] = [e.copy() for e in entries] if entries else []
        self.is_locked = False

    # ---------------- construction ----------------

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "BagInfo":
        """Build from a mapping, skipping tags whose value is blank."""
        info = cls()
        for tag, value in mapping.items():
            if value is not None and str(value).strip():
                info.add_metadata(tag, str(value))
        return info

    @classmethod
    def read_from(cls, file_path: Union[str, Path], strict: bool = False) -> "BagInfo":
        """
        Parse a bag-info.txt file.

        Args:
            file_path: File to read
            strict: Raise on malformed lines instead of logging and skipping

        Raises:
            BagReadError: If the file cannot be read
            TagFileParseError: Malformed line under strict parsing
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise BagReadError(str(file_path), str(e)) from e

        info = cls()
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue

            if _LEADING_WHITESPACE.match(line):
                if info._entries:
                    last = info._entries[-1]
                    last.value += _LEADING_WHITESPACE.sub(" ", line)
                    continue
                reason = "Continuation line without a preceding tag"
            else:
                tag, delim, value = line.partition(METADATA_DELIM)
                if delim and tag.strip():
                    info._entries.append(TagEntry(tag.strip(), value))
                    continue
                reason = "Expected '<Tag>: <Value>'"

            if strict:
                raise TagFileParseError(str(file_path), line_number, line, reason)
            logger.warning("Skipping malformed line %d in %s: %r",
                           line_number, file_path, line)

        return info

    def copy(self) -> "BagInfo":
        """Unlocked deep copy."""
        return BagInfo(self._entries)

    # ---------------- queries ----------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TagEntry]:
        return iter([e.copy() for e in self._entries])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BagInfo):
            return NotImplemented
        return self.items() == other.items()

    def items(self) -> List[Tuple[str, str]]:
        return [(e.tag, e.value) for e in self._entries]

    def contains_tag(self, tag: str) -> bool:
        return any(e.tag == tag for e in self._entries)

    def count_tags(self, tag: Optional[str] = None) -> int:
        """Number of entries, or of entries with ``tag`` when given."""
        if tag is None:
            return len(self._entries)
        return len(self.get_values(tag))

    def get_tags(self) -> List[str]:
        return [e.tag for e in self._entries]

    def get_value(self, tag: str, default: Optional[str] = None) -> Optional[str]:
        """First value recorded for ``tag``."""
        for entry in self._entries:
            if entry.tag == tag:
                return entry.value
        return default

    def get_values(self, tag: str) -> List[str]:
        return [e.value for e in self._entries if e.tag == tag]

    def get_tag(self, index: int) -> str:
        return self._entries[index].tag

    def get_value_at(self, index: int) -> str:
        return self._entries[index].value

    # ---------------- mutation ----------------

    def _check_unlocked(self, operation: str) -> None:
        if self.is_locked:
            raise IllegalBagStateError(operation)

    def add_metadata(self, tag: str, value: str) -> None:
        """
        Append a ``tag``/``value`` pair.

        Raises:
            IllegalBagStateError: If the owning bag has been validated
        """
        self._check_unlocked("add metadata to")
        self._entries.append(TagEntry(tag, value))

    def remove_metadata(self, tag: str) -> bool:
        """
        Remove every entry for ``tag``.

        Returns:
            True if at least one entry was removed

        Raises:
            IllegalBagStateError: If the owning bag has been validated
        """
        self._check_unlocked("remove metadata from")
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.tag != tag]
        return len(self._entries) < before

    def lock(self) -> None:
        self.is_locked = True

    # ---------------- output ----------------

    def write_to(self, file_path: Union[str, Path]) -> Path:
        """
        Write ``Tag: Value`` lines in list order, one entry per line.

        Raises:
            BagWriteError: If the file cannot be written
        """
        file_path = Path(file_path)
        try:
            with open(file_path, 'w', encoding='utf-8', newline='\n') as f:
                for entry in self._entries:
                    logger.debug("Writing BagInfo metadata [%s: %s]", entry.tag, entry.value)
                    f.write(f"{entry.tag}{METADATA_DELIM}{entry.value}\n")
        except OSError as e:
            raise BagWriteError(str(file_path), str(e)) from e
        return file_path

    def __repr__(self) -> str:
        return f"BagInfo({self.items()!r})"
