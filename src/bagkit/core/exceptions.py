# ============================================================================
# FILE: exceptions.py
# RELPATH: bagkit/src/bagkit/core/exceptions.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Exception hierarchy for BagKit
# ============================================================================

"""
Exception classes for BagKit.

Validation outcomes, I/O failures, illegal state transitions and unreadable
archives are kept apart so callers can react to each one precisely. Only the
``is_complete``/``is_valid`` helpers fold them into a boolean.
"""

from enum import Enum
from typing import List, Optional


class BagKitError(Exception):
    """Base exception for all BagKit errors."""
    pass


class ValidationReason(Enum):
    """Why a bag failed validation."""
    MISSING_DECLARATION = "missing_declaration"
    INVALID_STRUCTURE = "invalid_structure"
    MISSING_VERSION = "missing_version"
    INVALID_VERSION = "invalid_version"
    MISSING_ENCODING = "missing_encoding"
    INVALID_ENCODING = "invalid_encoding"
    MISSING_MANIFEST = "missing_manifest"
    ENTRY_COUNT_MISMATCH = "entry_count_mismatch"
    PAYLOAD_MISMATCH = "payload_mismatch"
    MISSING_TAG_FILE = "missing_tag_file"
    PAYLOAD_CHECKSUM = "payload_checksum"
    TAG_CHECKSUM = "tag_checksum"


# ============================================================================
# Validation-Related Exceptions
# ============================================================================

class BagValidationError(BagKitError):
    """
    Raised when a bag is incomplete or invalid.

    Attributes:
        reason: ValidationReason for the failure
        detail: Human-readable explanation
    """
    def __init__(self, reason: ValidationReason, detail: str):
        self.reason = reason
        self.detail = detail
        super().__init__(detail)


class DeclarationError(BagValidationError):
    """Raised when bagit.txt is missing or malformed."""

    _MESSAGES = {
        ValidationReason.MISSING_DECLARATION: "Bag is missing its bagit.txt declaration",
        ValidationReason.INVALID_STRUCTURE: "Found bagit.txt file is invalid: incorrect number of lines or structure",
        ValidationReason.MISSING_VERSION: "Found bagit.txt file is invalid: missing required bagit version",
        ValidationReason.INVALID_VERSION: "Invalid bagit version",
        ValidationReason.MISSING_ENCODING: "Found bagit.txt file is invalid: missing required bagit encoding",
        ValidationReason.INVALID_ENCODING: "Invalid bagit encoding",
    }

    def __init__(self, reason: ValidationReason, value: Optional[str] = None):
        self.value = value
        detail = self._MESSAGES.get(reason, reason.value)
        if value is not None:
            detail += f": '{value}'"
        super().__init__(reason, detail)


class ManifestCountError(BagValidationError):
    """
    Raised when the payload manifest is missing or its entry count differs
    from the number of files in the payload directory.

    Attributes:
        manifest_count: Entries in the payload manifest
        payload_count: Files found under data/
    """
    def __init__(self, manifest_count: int, payload_count: int):
        self.manifest_count = manifest_count
        self.payload_count = payload_count
        if manifest_count == 0:
            reason = ValidationReason.MISSING_MANIFEST
            detail = (f"Missing the required payload manifest "
                      f"(data file count: {payload_count})")
        else:
            reason = ValidationReason.ENTRY_COUNT_MISMATCH
            detail = (f"Data file count: {payload_count}; "
                      f"file entries in payload manifest: {manifest_count}")
        super().__init__(reason, detail)


class PayloadMismatchError(BagValidationError):
    """
    Raised when the payload directory and payload manifest list different files.

    Attributes:
        payload_files: Sorted paths found under data/
        manifest_files: Sorted paths listed in the manifest
    """
    def __init__(self, payload_files: List[str], manifest_files: List[str]):
        self.payload_files = payload_files
        self.manifest_files = manifest_files
        first = next(
            ((p, m) for p, m in zip(payload_files, manifest_files) if p != m),
            None
        )
        detail = "Data directory or payload manifest is missing a file"
        if first is not None:
            detail += f" (data: {first[0]}; manifest: {first[1]})"
        super().__init__(ValidationReason.PAYLOAD_MISMATCH, detail)


class MissingTagFileError(BagValidationError):
    """Raised when a file listed in the tag manifest does not exist."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(
            ValidationReason.MISSING_TAG_FILE,
            f"A tag file is missing from the directory: {path}"
        )


class ChecksumMismatchError(BagValidationError):
    """
    Raised when a recomputed checksum differs from the stored one.

    Attributes:
        path: File with the mismatched checksum
        expected: Checksum stored in the manifest
        actual: Checksum computed from the file
        manifest_kind: "payload" or "tag"
    """
    def __init__(self, path: str, expected: str, actual: str, manifest_kind: str = "payload"):
        self.path = path
        self.expected = expected
        self.actual = actual
        self.manifest_kind = manifest_kind
        reason = (ValidationReason.TAG_CHECKSUM if manifest_kind == "tag"
                  else ValidationReason.PAYLOAD_CHECKSUM)
        super().__init__(
            reason,
            f"Invalid {manifest_kind} checksum for: {path} ({expected} vs. {actual})"
        )


# ============================================================================
# Parse-Related Exceptions
# ============================================================================

class BagParseError(BagKitError):
    """
    Raised by strict parsing when a tag file line is malformed.

    Attributes:
        path: File being parsed
        line_number: 1-based line number
        line: Offending line text
    """
    def __init__(self, path: str, line_number: int, line: str, reason: str = "Malformed line"):
        self.path = path
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"{reason} in '{path}' (line {line_number}): {line!r}")


class ManifestParseError(BagParseError):
    """Raised when a manifest line does not split into checksum and path."""
    pass


class TagFileParseError(BagParseError):
    """Raised when a bag-info.txt line is neither a tag nor a continuation."""
    pass


# ============================================================================
# I/O-Related Exceptions
# ============================================================================

class BagIOError(BagKitError):
    """
    Base exception for I/O errors. Never retried.

    Attributes:
        path: Offending path
        reason: Explanation of the failure
    """
    action = "access"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to {self.action} '{path}': {reason}")


class BagReadError(BagIOError):
    """Raised when a file or archive cannot be read."""
    action = "read"


class BagWriteError(BagIOError):
    """Raised when a file or directory cannot be created or written."""
    action = "write"


class BagDeleteError(BagIOError):
    """Raised when a file or directory cannot be deleted."""
    action = "delete"


class BagDataError(BagIOError):
    """Raised when the bag's data directory is missing or misnamed."""
    action = "use data directory"

    def __init__(self, path: str, reason: str = "Problem with the bag's data directory"):
        super().__init__(path, reason)


class PathTraversalError(BagKitError):
    """
    Raised when an archive member or payload path escapes its base directory.

    Attributes:
        path: The unsafe path
        reason: Why the path is unsafe
    """
    def __init__(self, path: str, reason: str = "Path traversal detected"):
        self.path = path
        self.reason = reason
        super().__init__(f"Unsafe path '{path}': {reason}")


# ============================================================================
# Operation-Related Exceptions
# ============================================================================

class UnsupportedAlgorithmError(BagKitError):
    """Raised when a checksum algorithm is not available."""
    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f"Unsupported checksum algorithm: '{algorithm}'")


class IllegalBagStateError(BagKitError):
    """Raised when a validated bag is modified."""
    def __init__(self, operation: str = "modify"):
        self.operation = operation
        super().__init__(
            f"Can't {operation} a bag that has been validated; copy it instead"
        )


class UnrecognizedFormatError(BagKitError):
    """
    Raised when an archive's content type is not tar, zip, gzip or bzip2.

    Attributes:
        path: Archive path
        mime_type: Detected content type
    """
    def __init__(self, path: str, mime_type: str):
        self.path = path
        self.mime_type = mime_type
        super().__init__(
            f"Couldn't read bag '{path}' because its MIME type '{mime_type}' isn't recognized"
        )


# ============================================================================
# Configuration-Related Exceptions
# ============================================================================

class ConfigError(BagKitError):
    """Base exception for configuration-related errors."""
    pass


class ConfigLoadError(ConfigError):
    """
    Raised when configuration file cannot be loaded.

    Attributes:
        config_file: Path to the configuration file
        reason: Explanation of the failure
    """
    def __init__(self, config_file: str, reason: str):
        self.config_file = config_file
        self.reason = reason
        super().__init__(f"Failed to load config '{config_file}': {reason}")


class ConfigMigrationError(ConfigError):
    """
    Raised when a legacy flat configuration cannot be migrated.

    Attributes:
        old_version: Version being migrated from
        new_version: Version being migrated to
        reason: Explanation of the failure
    """
    def __init__(self, old_version: str, new_version: str, reason: str):
        self.old_version = old_version
        self.new_version = new_version
        self.reason = reason
        super().__init__(
            f"Config migration from {old_version} to {new_version} failed: {reason}"
        )


class ConfigValidationError(ConfigError):
    """
    Raised when configuration data fails validation.

    Attributes:
        key: Configuration key that failed validation
        value: The invalid value
        reason: Explanation of why validation failed
    """
    def __init__(self, key: str, value: object, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# ============================================================================
# LIFECYCLE STATUS: Proposed
# NEXT STEPS: None
# DEPENDENCIES: None (base exception definitions)
# TESTS: tests/unit/test_exceptions.py
# ============================================================================
