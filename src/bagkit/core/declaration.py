# ============================================================================
# SOURCEFILE: declaration.py
# RELPATH: bagkit/src/bagkit/core/declaration.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: The bagit.txt declaration (format version + tag encoding)
# ============================================================================

"""
Declaration Module.

``bagit.txt`` must consist of exactly two lines:

    BagIt-Version: 0.96
    Tag-File-Character-Encoding: UTF-8
"""

import logging
from pathlib import Path
from typing import Optional, Union

from bagkit.core.exceptions import (
    BagReadError,
    BagWriteError,
    DeclarationError,
    ValidationReason
)
from bagkit.core.fileutils import delete_file

logger = logging.getLogger(__name__)

FILE_NAME = "bagit.txt"
VERSION = "0.96"
ENCODING = "UTF-8"
VERSION_TAG = "BagIt-Version"
ENCODING_TAG = "Tag-File-Character-Encoding"
METADATA_DELIM = ": "


class Declaration:
    """
    Format version and tag-file encoding of a bag.

    A declaration is either new (defaults, always valid) or parsed from an
    existing file, in which case ``is_structurally_valid`` records whether
    the file had exactly the two expected lines.
    """

    def __init__(self,
                 bag_dir: Union[str, Path],
                 version: Optional[str] = VERSION,
                 encoding: Optional[str] = ENCODING,
                 is_structurally_valid: bool = True):
        self.bag_dir = Path(bag_dir)
        self.version = version
        self.encoding = encoding
        self.is_structurally_valid = is_structurally_valid

    @property
    def file_path(self) -> Path:
        return self.bag_dir / FILE_NAME

    @classmethod
    def load(cls, bag_dir: Union[str, Path]) -> Optional["Declaration"]:
        """
        Parse ``bagit.txt`` from ``bag_dir``.

        Returns:
            The parsed Declaration, or None if the bag has no bagit.txt

        Raises:
            BagReadError: If the file exists but cannot be read
        """
        declaration_file = Path(bag_dir) / FILE_NAME
        if not declaration_file.exists():
            logger.debug("No declaration found at %s", declaration_file)
            return None

        try:
            with open(declaration_file, 'r', encoding='utf-8') as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise BagReadError(str(declaration_file), str(e)) from e

        version = None
        encoding = None
        validity = True

        for line_number, line in enumerate(lines, start=1):
            value = line[line.find(':') + 1:].strip()
            if line_number == 1 and line.startswith(VERSION_TAG + METADATA_DELIM):
                version = value
            elif line_number == 2 and line.startswith(ENCODING_TAG + METADATA_DELIM):
                encoding = value
            else:
                validity = False

        return cls(bag_dir, version or None, encoding or None, validity)

    def validate(self) -> None:
        """
        Check the declaration.

        A missing file is healed by writing the defaults.

        Raises:
            DeclarationError: With the reason for the first failed check
        """
        if not self.file_path.exists():
            logger.info("Writing missing declaration to %s", self.file_path)
            self.write_to_file()
            return

        if not self.is_structurally_valid:
            raise DeclarationError(ValidationReason.INVALID_STRUCTURE)
        if self.version is None:
            raise DeclarationError(ValidationReason.MISSING_VERSION)
        if '.' not in self.version:
            raise DeclarationError(ValidationReason.INVALID_VERSION, self.version)
        if self.encoding is None:
            raise DeclarationError(ValidationReason.MISSING_ENCODING)
        if self.encoding != ENCODING:
            raise DeclarationError(ValidationReason.INVALID_ENCODING, self.encoding)

    def write_to_file(self) -> Path:
        """
        Write ``bagit.txt``, replacing any previous file.

        Raises:
            BagDeleteError: If the previous file cannot be removed
            BagWriteError: If the file cannot be written
        """
        delete_file(self.file_path)
        try:
            with open(self.file_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(f"{VERSION_TAG}{METADATA_DELIM}{self.version or VERSION}\n")
                f.write(f"{ENCODING_TAG}{METADATA_DELIM}{self.encoding or ENCODING}\n")
        except OSError as e:
            raise BagWriteError(str(self.file_path), str(e)) from e

        self.version = self.version or VERSION
        self.encoding = self.encoding or ENCODING
        self.is_structurally_valid = True
        return self.file_path

    def __repr__(self) -> str:
        return (f"Declaration(version={self.version!r}, encoding={self.encoding!r}, "
                f"valid={self.is_structurally_valid})")
