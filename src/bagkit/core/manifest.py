# ============================================================================
# SOURCEFILE: manifest.py
# RELPATH: bagkit/src/bagkit/core/manifest.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Payload and tag manifests (checksum ledgers)
# ============================================================================

"""
Manifest Module.

A manifest is a text ledger of ``<checksum> <relative-path>`` lines under a
single algorithm. A bag carries two: ``manifest-<alg>.txt`` for the payload
and ``tagmanifest-<alg>.txt`` for the tag files. They differ only in file
name and in which files they cover.

Format Example:
    8ddd8be4b179a529afa5f2ffae4b9858 data/hello.txt
    0cbc6611f5540bd0809a388dc95a615b data/sub/test.txt

Manifests created from scratch are sorted case-insensitively by path when
written. Manifests loaded from disk keep their original line order so a
load/write cycle does not reorder someone else's file.
"""

import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional, Union

from bagkit.core.config import BagConfig
from bagkit.core.exceptions import BagReadError, BagWriteError, ManifestParseError
from bagkit.core.fileutils import delete_file, list_files, relative_posix
from bagkit.core.hashing import hash_file, normalize_algorithm
from bagkit.core.models import ManifestEntry, normalize_path

logger = logging.getLogger(__name__)

_SEPARATOR_RUN = re.compile(r"[\s*]+")


class Manifest:
    """
    Checksum ledger shared by payload and tag manifests.

    Subclasses set ``NAME_PATTERN``, a file name with a ``{}`` placeholder
    for the algorithm token.
    """

    NAME_PATTERN = "manifest-{}.txt"
    KIND = "payload"

    def __init__(self, bag_dir: Union[str, Path], config: Optional[BagConfig] = None):
        """
        Load the manifest found in ``bag_dir`` or start an empty one.

        Args:
            bag_dir: Bag root directory
            config: Bag configuration; supplies the algorithm for a new
                    manifest and the parsing policy

        Raises:
            ManifestParseError: Malformed line under strict parsing
            BagReadError: If the manifest file cannot be read
            UnsupportedAlgorithmError: If a new manifest's algorithm is unknown
        """
        self.bag_dir = normalize_path(bag_dir)
        self.config = config or BagConfig()
        self._entries: List[ManifestEntry] = []
        self.sortable = False

        found = self.find_files(self.bag_dir)
        if found:
            if len(found) > 1:
                logger.warning(
                    "Found %d %s manifests in %s; using %s",
                    len(found), self.KIND, self.bag_dir, found[0].name
                )
            self.file_name = found[0].name
            self.hash_algorithm = self.name_regex().fullmatch(self.file_name).group(1)
            logger.debug("Using %s manifest %s (algorithm: %s)",
                         self.KIND, self.file_name, self.hash_algorithm)
            self._read(found[0])
        else:
            self.hash_algorithm = self.config.hash_algorithm
            normalize_algorithm(self.hash_algorithm)
            self.file_name = self.NAME_PATTERN.format(self.hash_algorithm)
            self.sortable = True
            logger.debug("Creating new %s manifest (algorithm: %s)",
                         self.KIND, self.hash_algorithm)

    # ---------------- discovery ----------------

    @classmethod
    def name_regex(cls) -> "re.Pattern":
        prefix, suffix = cls.NAME_PATTERN.split("{}")
        return re.compile(re.escape(prefix) + "(.*)" + re.escape(suffix))

    @classmethod
    def find_files(cls, bag_dir: Union[str, Path]) -> List[Path]:
        """All files in ``bag_dir`` whose name matches the pattern, any algorithm."""
        bag_dir = Path(bag_dir)
        if not bag_dir.is_dir():
            return []
        regex = cls.name_regex()
        return sorted(
            p for p in bag_dir.iterdir()
            if p.is_file() and regex.fullmatch(p.name)
        )

    # ---------------- parsing ----------------

    def _read(self, manifest_file: Path) -> None:
        try:
            with open(manifest_file, 'r', encoding='utf-8') as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise BagReadError(str(manifest_file), str(e)) from e

        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue

            # Only the first separator run splits; the path may contain spaces
            parts = _SEPARATOR_RUN.split(line.strip(), maxsplit=1)
            if len(parts) != 2 or not parts[1]:
                if self.config.strict_parsing:
                    raise ManifestParseError(
                        str(manifest_file), line_number, line,
                        "Expected '<checksum> <path>'"
                    )
                logger.warning("Skipping malformed line %d in %s: %r",
                               line_number, manifest_file, line)
                continue

            checksum, relative_path = parts
            entry = ManifestEntry(self.bag_dir / relative_path, checksum.lower())
            logger.debug("Read manifest entry: %s %s", checksum, relative_path)
            self._entries.append(entry)

    # ---------------- queries ----------------

    @property
    def file_path(self) -> Path:
        return self.bag_dir / self.file_name

    def count_entries(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ManifestEntry]:
        return iter(list(self._entries))

    def __contains__(self, file_path: object) -> bool:
        if not isinstance(file_path, (str, Path)):
            return False
        return self._find(file_path) is not None

    def get_files(self) -> List[Path]:
        """Files listed in the manifest, in manifest order."""
        return [entry.path for entry in self._entries]

    def get_stored_hash(self, file_path: Union[str, Path]) -> Optional[str]:
        """
        Checksum recorded for ``file_path``.

        Returns:
            The stored checksum, or None if the file is not in the manifest
        """
        index = self._find(file_path)
        return None if index is None else self._entries[index].checksum

    def relative_path(self, file_path: Union[str, Path]) -> str:
        return relative_posix(normalize_path(file_path), self.bag_dir)

    def _find(self, file_path: Union[str, Path]) -> Optional[int]:
        target = normalize_path(file_path)
        for index, entry in enumerate(self._entries):
            if entry.path == target:
                return index
        return None

    # ---------------- mutation ----------------

    def add(self, file_path: Union[str, Path]) -> ManifestEntry:
        """
        Hash ``file_path`` and record it.

        A path already in the manifest keeps its position and gets the new
        checksum, so there is never more than one entry per path.

        Returns:
            The new or updated entry

        Raises:
            UnsupportedAlgorithmError: If the manifest algorithm is unknown
            BagReadError: If the file cannot be read
        """
        entry = ManifestEntry(Path(file_path), hash_file(file_path, self.hash_algorithm))
        index = self._find(entry.path)
        if index is None:
            self._entries.append(entry)
        else:
            logger.debug("Replacing checksum for %s", entry.path)
            self._entries[index] = entry
        return entry

    def remove(self, file_path: Union[str, Path]) -> bool:
        """
        Drop the entry for ``file_path``.

        Returns:
            True if an entry was removed
        """
        index = self._find(file_path)
        if index is None:
            return False
        del self._entries[index]
        return True

    def clear(self) -> None:
        self._entries.clear()

    def write_to_file(self) -> Path:
        """
        Write the manifest, replacing any previous file of the same name.

        Returns:
            Path of the written manifest

        Raises:
            BagWriteError: If the file cannot be written
        """
        manifest_file = self.file_path

        if self.sortable:
            self._entries.sort(key=ManifestEntry.sort_key)

        delete_file(manifest_file)
        try:
            with open(manifest_file, 'w', encoding='utf-8', newline='\n') as f:
                for entry in self._entries:
                    f.write(f"{entry.checksum} {self.relative_path(entry.path)}\n")
        except OSError as e:
            raise BagWriteError(str(manifest_file), str(e)) from e

        logger.debug("Wrote %d entries to %s", len(self._entries), manifest_file)
        return manifest_file

    def delete(self) -> None:
        """
        Remove every manifest file of this kind, whatever its algorithm.

        Raises:
            BagDeleteError: If any matching file cannot be deleted
        """
        for manifest_file in self.find_files(self.bag_dir):
            logger.debug("Deleting manifest %s", manifest_file)
            delete_file(manifest_file)
        self._entries.clear()

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(file_name={self.file_name!r}, "
                f"entries={len(self._entries)}, sortable={self.sortable})")


class PayloadManifest(Manifest):
    """Checksums for the files under ``data/``."""

    NAME_PATTERN = "manifest-{}.txt"
    KIND = "payload"

    def update_with(self, path: Union[str, Path]) -> List[ManifestEntry]:
        """
        Add ``path`` or, for a directory, every file beneath it.

        Returns:
            Entries added or updated
        """
        logger.debug("Adding a new data file: %s", path)
        return [self.add(file_path) for file_path in list_files(path)]


class TagManifest(Manifest):
    """Checksums for the tag files (bagit.txt, bag-info.txt, manifests)."""

    NAME_PATTERN = "tagmanifest-{}.txt"
    KIND = "tag"


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: config.py, exceptions.py, fileutils.py, hashing.py, models.py
# TESTS: tests/unit/test_manifest.py
# ============================================================================
