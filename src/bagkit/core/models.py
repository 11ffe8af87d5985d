# ============================================================================
# SOURCEFILE: models.py
# RELPATH: bagkit/src/bagkit/core/models.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Core data models for manifest entries and tag metadata
# ============================================================================

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


def normalize_path(path: Union[str, Path]) -> Path:
    """Absolute, lexically normalized form used for entry identity."""
    return Path(os.path.normpath(Path(path).absolute()))


@dataclass(eq=False)
class ManifestEntry:
    """
    A single line of a manifest: one file and its checksum.

    Identity is the normalized path only. The checksum is payload and may be
    replaced when a file is re-added.

    Attributes:
        path: Absolute path of the file
        checksum: Lowercase hexadecimal digest
    """
    path: Path
    checksum: str

    def __post_init__(self) -> None:
        if not str(self.path):
            raise ValueError("ManifestEntry path cannot be empty")
        if not self.checksum or not isinstance(self.checksum, str):
            raise ValueError(f"Invalid checksum for '{self.path}': {self.checksum!r}")
        self.path = normalize_path(self.path)

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if isinstance(other, ManifestEntry):
            return self.path == other.path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.path)

    def sort_key(self) -> str:
        """Case-insensitive absolute path, used when sorting a new manifest."""
        return str(self.path).lower()


@dataclass
class TagEntry:
    """
    One ``Tag: Value`` pair from bag-info.txt.

    Attributes:
        tag: Tag name, e.g. ``Source-Organization``
        value: Tag value with any continuation lines already folded in
    """
    tag: str
    value: str = field(default="")

    def __post_init__(self) -> None:
        if self.tag is None or self.value is None:
            raise ValueError("TagEntry tag and value must not be None")
        if not str(self.tag).strip():
            raise ValueError("TagEntry tag cannot be empty")

    def copy(self) -> "TagEntry":
        return TagEntry(self.tag, self.value)

    def __str__(self) -> str:
        return f"{self.tag}: {self.value}"


class BagInfoTags:
    """Tag names recognized in bag-info.txt."""
    SOURCE_ORG = "Source-Organization"
    ORG_ADDRESS = "Organization-Address"
    CONTACT_NAME = "Contact-Name"
    CONTACT_PHONE = "Contact-Phone"
    CONTACT_EMAIL = "Contact-Email"
    EXT_DESCRIPTION = "External-Description"
    BAGGING_DATE = "Bagging-Date"
    EXT_IDENTIFIER = "External-Identifier"
    BAG_SIZE = "Bag-Size"
    PAYLOAD_OXUM = "Payload-Oxum"
    BAG_GROUP_ID = "Bag-Group-Identifier"
    BAG_COUNT = "Bag-Count"
    SENDER_IDENTIFIER = "Internal-Sender-Identifier"
    SENDER_DESCRIPTION = "Internal-Sender-Description"

    # Filled in by the validator, never by hand
    COMPUTED = (BAG_SIZE, PAYLOAD_OXUM)

    @classmethod
    def all_tags(cls) -> tuple:
        return (
            cls.SOURCE_ORG, cls.ORG_ADDRESS, cls.CONTACT_NAME, cls.CONTACT_PHONE,
            cls.CONTACT_EMAIL, cls.EXT_DESCRIPTION, cls.BAGGING_DATE,
            cls.EXT_IDENTIFIER, cls.BAG_SIZE, cls.PAYLOAD_OXUM, cls.BAG_GROUP_ID,
            cls.BAG_COUNT, cls.SENDER_IDENTIFIER, cls.SENDER_DESCRIPTION,
        )


def format_payload_oxum(total_bytes: int, file_count: int) -> str:
    """Machine-readable payload summary: ``<bytes>.<count>``."""
    return f"{total_bytes}.{file_count}"


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: None (core data structures)
# TESTS: tests/unit/test_models.py
# ============================================================================
