# ============================================================================
# SOURCEFILE: payload.py
# RELPATH: bagkit/src/bagkit/core/payload.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Read access to a bag's data/ directory
# ============================================================================

"""
Payload Module.

BagData is a view over ``data/``. Paths handed in and out are relative to
the data directory and use forward slashes.
"""

import logging
import re
from pathlib import Path
from typing import IO, List, Optional, Union

from bagkit.core.exceptions import BagDataError, BagReadError, IllegalBagStateError
from bagkit.core.fileutils import PathValidator, delete_file, delete_tree, list_files, relative_posix

logger = logging.getLogger(__name__)

DATA_DIR_NAME = "data"


class BagData:
    """Files under a bag's payload directory."""

    def __init__(self, data_dir: Union[str, Path], manifest=None):
        """
        Args:
            data_dir: The bag's ``data`` directory
            manifest: Optional PayloadManifest kept in step with removals

        Raises:
            BagDataError: If data_dir is not an existing directory named "data"
        """
        data_dir = Path(data_dir)
        if not data_dir.is_dir() or data_dir.name != DATA_DIR_NAME:
            raise BagDataError(str(data_dir))
        self.data_dir = data_dir.absolute()
        self.manifest = manifest
        self.is_locked = False
        self._validator = PathValidator(self.data_dir)

    def _resolve(self, path: str) -> Path:
        return self._validator.validate_path(path)

    def get_file_paths(self, *extensions: str) -> List[str]:
        """
        Relative paths of payload files.

        Args:
            extensions: Optional extensions to keep ("txt", ".xml"); all
                        files when omitted
        """
        wanted = {ext.lower().lstrip('.') for ext in extensions}
        paths = []
        for file_path in list_files(self.data_dir):
            if wanted and file_path.suffix.lower().lstrip('.') not in wanted:
                continue
            paths.append(relative_posix(file_path, self.data_dir))
        return paths

    def find(self, path_regex: str = ".*", name_regex: str = ".*") -> List[str]:
        """
        Relative paths whose directory part matches ``path_regex`` and whose
        file name matches ``name_regex`` (both full matches).
        """
        path_pattern = re.compile(path_regex)
        name_pattern = re.compile(name_regex)
        matches = []
        for relative in self.get_file_paths():
            directory, _, name = relative.rpartition('/')
            if name_pattern.fullmatch(name) and path_pattern.fullmatch(directory):
                matches.append(relative)
        logger.debug("Number of matching paths found: %d", len(matches))
        return matches

    def file_count(self) -> int:
        return len(list_files(self.data_dir))

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def get_size(self, path: str) -> int:
        file_path = self._resolve(path)
        if not file_path.exists():
            raise BagReadError(path, "File not found")
        return file_path.stat().st_size

    def open(self, path: str) -> IO[bytes]:
        """Open a payload file for binary reading. Caller closes it."""
        file_path = self._resolve(path)
        if not file_path.is_file():
            raise BagReadError(path, "File not found")
        return open(file_path, 'rb')

    def read_bytes(self, path: str) -> bytes:
        with self.open(path) as f:
            return f.read()

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return self.read_bytes(path).decode(encoding)

    def remove_file(self, path: str) -> bool:
        """
        Delete a payload file or directory and drop its manifest entries.

        Returns:
            True if something was deleted

        Raises:
            IllegalBagStateError: If the bag has been validated
        """
        if self.is_locked:
            raise IllegalBagStateError("remove files from")

        target = self._resolve(path)
        if not target.exists():
            return False

        removed = list_files(target)
        if target.is_dir():
            delete_tree(target)
        else:
            delete_file(target)

        if self.manifest is not None:
            for file_path in removed:
                self.manifest.remove(file_path)
        return True

    def lock(self) -> None:
        self.is_locked = True

    def __repr__(self) -> str:
        return f"BagData({self.data_dir})"
