# ============================================================================
# SOURCEFILE: validator.py
# RELPATH: bagkit/src/bagkit/core/validator.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Completeness and validity checks producing a validated bag
# ============================================================================

"""
Validator Module.

Validation is a fixed sequence of checks, each stopping at the first
failure:

1. Required files: declaration present and valid, payload manifest
   present with one entry per payload file
2. Payload directory and payload manifest list the same files
3. Every file named in the tag manifest exists
4. Stored checksums match recomputed ones (payload, then tag manifest)
5. Bag-Size and Payload-Oxum are refreshed in bag-info.txt
6. The bag is marked validated and wrapped in a ValidatedBag

``is_complete`` stops after step 3. ``check`` returns a ValidationResult
instead of raising, so callers can branch on the kind of failure.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from bagkit.core import bag_info as bag_info_module
from bagkit.core import packager
from bagkit.core.config import BagConfig
from bagkit.core.exceptions import (
    BagIOError,
    BagValidationError,
    ChecksumMismatchError,
    DeclarationError,
    IllegalBagStateError,
    ManifestCountError,
    MissingTagFileError,
    PathTraversalError,
    PayloadMismatchError,
    UnsupportedAlgorithmError,
    ValidationReason
)
from bagkit.core.fileutils import list_files
from bagkit.core.hashing import hash_file, human_readable_size
from bagkit.core.models import BagInfoTags

logger = logging.getLogger(__name__)

RESULT_VALID = "valid"
RESULT_VALIDATION = "validation"
RESULT_IO = "io"
RESULT_ILLEGAL_STATE = "illegal_state"
RESULT_ALGORITHM = "algorithm"


class ValidatedBag:
    """
    A bag that passed validation.

    Only packaging is exposed; the wrapped bag's metadata and payload are
    locked against further changes.
    """

    def __init__(self, bag):
        if not bag.is_validated:
            raise IllegalBagStateError("wrap an unvalidated bag as")
        self._bag = bag

    @property
    def bag(self):
        return self._bag

    @property
    def payload(self):
        return self._bag.payload

    @property
    def bag_dir(self) -> Path:
        return self._bag.bag_dir

    def package(self, fmt: Union[str, packager.ArchiveFormat],
                destination: Optional[Union[str, Path]] = None) -> Path:
        """Write the bag as an archive; see packager.pack."""
        return self._bag.pack(fmt, destination)

    def to_tar(self, destination: Optional[Union[str, Path]] = None) -> Path:
        return self.package(packager.ArchiveFormat.TAR, destination)

    def to_zip(self, destination: Optional[Union[str, Path]] = None) -> Path:
        return self.package(packager.ArchiveFormat.ZIP, destination)

    def to_tar_gz(self, destination: Optional[Union[str, Path]] = None) -> Path:
        return self.package(packager.ArchiveFormat.TAR_GZ, destination)

    def to_tar_bz2(self, destination: Optional[Union[str, Path]] = None) -> Path:
        return self.package(packager.ArchiveFormat.TAR_BZ2, destination)

    def to_dir(self, destination: Optional[Union[str, Path]] = None) -> Path:
        return self._bag.to_dir(destination)

    def __repr__(self) -> str:
        return f"ValidatedBag({self._bag.bag_dir})"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of BagValidator.check.

    Attributes:
        kind: "valid", "validation", "io", "illegal_state" or "algorithm"
        validated_bag: Set when kind is "valid"
        error: The exception behind a failure
    """
    kind: str
    validated_bag: Optional[ValidatedBag] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.kind == RESULT_VALID

    @property
    def reason(self) -> Optional[ValidationReason]:
        return getattr(self.error, "reason", None)

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""


class BagValidator:
    """Runs the validation sequence over a Bag."""

    def __init__(self, config: Optional[BagConfig] = None, structured_logger=None):
        """
        Args:
            config: Bag configuration
            structured_logger: Optional StructuredLogger receiving validation
                               and checksum events
        """
        self.config = config or BagConfig()
        self.structured_logger = structured_logger

    # ---------------- public API ----------------

    def validate(self, bag) -> ValidatedBag:
        """
        Run every check, refresh computed tags and lock the bag.

        Raises:
            BagValidationError: Subclass naming the failed check
            BagIOError: If a bag file cannot be read or written
            IllegalBagStateError: If bag metadata cannot be refreshed
            UnsupportedAlgorithmError: If a manifest uses an unknown algorithm
        """
        logger.debug("Validating bag %s", bag.bag_dir)
        self._check_required_files(bag)
        self._check_payload_matches_manifest(bag)
        self._check_tag_files_present(bag)
        self._verify_checksums(bag.payload_manifest)
        self._verify_checksums(bag.tag_manifest)

        if not bag.is_validated:
            self._refresh_computed_tags(bag)
            bag._mark_validated()

        self._record(bag, True)
        logger.info("Bag %s is valid", bag.bag_dir.name)
        return ValidatedBag(bag)

    def check(self, bag, verify_checksums: bool = True) -> ValidationResult:
        """
        Validate without raising.

        Args:
            bag: Bag to check
            verify_checksums: Run the full validation; when False only the
                              completeness checks run and nothing is locked
        """
        try:
            if verify_checksums:
                return ValidationResult(RESULT_VALID, validated_bag=self.validate(bag))
            self._check_completeness(bag)
            return ValidationResult(RESULT_VALID)
        except BagValidationError as e:
            self._record(bag, False, e)
            return ValidationResult(RESULT_VALIDATION, error=e)
        except (BagIOError, PathTraversalError) as e:
            return ValidationResult(RESULT_IO, error=e)
        except IllegalBagStateError as e:
            return ValidationResult(RESULT_ILLEGAL_STATE, error=e)
        except UnsupportedAlgorithmError as e:
            return ValidationResult(RESULT_ALGORITHM, error=e)

    def is_complete(self, bag) -> bool:
        """True if the required files are present and consistent."""
        result = self.check(bag, verify_checksums=False)
        if not result.ok:
            logger.warning("The %s bag is not yet complete: %s", bag.bag_dir.name, result.message)
        return result.ok

    def is_valid(self, bag) -> bool:
        """True if the bag is complete and every checksum matches."""
        result = self.check(bag)
        if not result.ok:
            logger.warning("The %s bag is not valid: %s", bag.bag_dir.name, result.message)
        return result.ok

    # ---------------- steps ----------------

    def _check_completeness(self, bag) -> None:
        self._check_required_files(bag)
        self._check_payload_matches_manifest(bag)
        self._check_tag_files_present(bag)

    def _check_required_files(self, bag) -> None:
        if bag.declaration is None:
            raise DeclarationError(ValidationReason.MISSING_DECLARATION)
        # validate() rewrites bagit.txt only when the file is missing
        bag.declaration.validate()

        manifest_count = bag.payload_manifest.count_entries()
        payload_count = len(list_files(bag.data_dir))
        if manifest_count == 0 or manifest_count != payload_count:
            raise ManifestCountError(manifest_count, payload_count)

    def _check_payload_matches_manifest(self, bag) -> None:
        payload_files = [str(p) for p in list_files(bag.data_dir)]
        manifest_files = sorted(str(p) for p in bag.payload_manifest.get_files())
        if payload_files != manifest_files:
            raise PayloadMismatchError(payload_files, manifest_files)

    def _check_tag_files_present(self, bag) -> None:
        for tag_file in bag.tag_manifest.get_files():
            if not tag_file.is_file():
                raise MissingTagFileError(str(tag_file))

    def _verify_checksums(self, manifest) -> None:
        for entry in manifest:
            actual = hash_file(entry.path, manifest.hash_algorithm)
            if actual != entry.checksum:
                if self.structured_logger is not None:
                    self.structured_logger.log_checksum_failed(
                        str(entry.path), entry.checksum, actual, manifest.KIND
                    )
                raise ChecksumMismatchError(str(entry.path), entry.checksum, actual, manifest.KIND)
            logger.debug("Checksum verified for %s", entry.path)

    def _refresh_computed_tags(self, bag) -> None:
        info = bag.bag_info
        if len(info) == 0:
            return

        for tag in BagInfoTags.COMPUTED:
            info.remove_metadata(tag)
        info.add_metadata(BagInfoTags.BAG_SIZE, human_readable_size(bag.get_size()))
        info.add_metadata(BagInfoTags.PAYLOAD_OXUM, bag.get_payload_oxum())

        info_file = bag.bag_dir / bag_info_module.FILE_NAME
        info.write_to(info_file)
        bag.tag_manifest.remove(info_file)
        bag.tag_manifest.add(info_file)
        bag.tag_manifest.write_to_file()

    def _record(self, bag, valid: bool, error: Optional[Exception] = None) -> None:
        if self.structured_logger is None:
            return
        self.structured_logger.log_validation(
            str(bag.bag_dir),
            valid,
            reason=getattr(getattr(error, "reason", None), "value", None),
            message=str(error) if error is not None else None
        )


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: bag_info.py, config.py, exceptions.py, fileutils.py,
#               hashing.py, models.py, packager.py
# TESTS: tests/unit/test_validator.py
# ============================================================================
