# ============================================================================
# FILE: fileutils.py
# RELPATH: bagkit/src/bagkit/core/fileutils.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Path safety, recursive listing, copying and depth-first delete
# ============================================================================

"""
File Utilities Module.

Filesystem helpers shared by the bag, its manifests and the packager. All
OS failures are translated into BagKit I/O errors carrying the offending path.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

from bagkit.core.exceptions import (
    BagDeleteError,
    BagReadError,
    BagWriteError,
    PathTraversalError
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PathValidator:
    """
    Validates relative paths against a base directory.

    Used when unpacking archives so that a member like ``../../etc/passwd``
    can never land outside the extraction directory.
    """

    def __init__(self, base_path: PathLike):
        """
        Initialize validator.

        Args:
            base_path: Base directory that paths must stay within
        """
        self.base_path = Path(base_path).resolve()

    def validate_path(self, path: PathLike) -> Path:
        """
        Resolve ``path`` under the base directory.

        Args:
            path: Relative path (POSIX or native separators)

        Returns:
            Resolved absolute path inside base_path

        Raises:
            PathTraversalError: If path is absolute or escapes base_path
        """
        path_str = str(path).replace("\\", "/")
        if not path_str or path_str.startswith("/") or Path(path_str).is_absolute():
            raise PathTraversalError(str(path), "Absolute paths not allowed")

        resolved = (self.base_path / path_str).resolve()
        try:
            resolved.relative_to(self.base_path)
        except ValueError:
            raise PathTraversalError(
                str(path),
                f"Path escapes base directory: {self.base_path}"
            )
        return resolved

    def is_safe_path(self, path: PathLike) -> bool:
        try:
            self.validate_path(path)
            return True
        except PathTraversalError:
            return False


def list_files(root: PathLike) -> List[Path]:
    """
    Recursively list regular files under ``root``.

    A path that is itself a file is returned as a one-item list. Results are
    sorted by absolute path so two listings of the same tree compare equal.
    """
    root = Path(root)
    if root.is_file():
        return [root.absolute()]
    if not root.is_dir():
        return []

    files: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            files.append(Path(dirpath, name).absolute())
    files.sort(key=lambda p: str(p))
    return files


def total_size(root: PathLike) -> int:
    """Sum of the sizes of all files under ``root``."""
    size = 0
    for file_path in list_files(root):
        try:
            size += file_path.stat().st_size
        except OSError as e:
            raise BagReadError(str(file_path), str(e)) from e
    return size


def ensure_dir(path: PathLike) -> Path:
    """Create ``path`` (and parents) or raise BagWriteError."""
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BagWriteError(str(path), f"Unable to create directory: {e}") from e
    return path


def copy_path(source: PathLike, destination: PathLike) -> Path:
    """
    Copy a file or directory tree to ``destination``.

    Existing directories are merged into; existing files are overwritten.
    """
    source = Path(source)
    destination = Path(destination)
    if not source.exists():
        raise BagReadError(str(source), "File not found")

    try:
        if source.is_dir():
            shutil.copytree(source, destination, dirs_exist_ok=True)
        else:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
    except (OSError, shutil.Error) as e:
        raise BagWriteError(str(destination), f"Copy from '{source}' failed: {e}") from e
    return destination


def delete_file(path: PathLike) -> None:
    """Delete a single file, raising BagDeleteError on failure."""
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as e:
        raise BagDeleteError(str(path), str(e)) from e


def delete_tree(path: PathLike) -> None:
    """
    Delete a directory tree depth-first.

    Files are removed before their directory and children before parents, so
    no directory removal ever fails because it still has contents.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("Nothing to delete at %s", path)
        return
    if not path.is_dir():
        delete_file(path)
        return

    for dirpath, dirnames, filenames in os.walk(path, topdown=False):
        for name in filenames:
            delete_file(Path(dirpath, name))
        for name in dirnames:
            child = Path(dirpath, name)
            try:
                if child.is_symlink():
                    child.unlink()
                else:
                    child.rmdir()
            except OSError as e:
                raise BagDeleteError(str(child), str(e)) from e
    try:
        path.rmdir()
    except OSError as e:
        raise BagDeleteError(str(path), str(e)) from e


def relative_posix(path: PathLike, base: PathLike) -> str:
    """Return ``path`` relative to ``base`` using forward slashes."""
    return Path(path).absolute().relative_to(Path(base).absolute()).as_posix()


def strip_extensions(name: str) -> str:
    """Drop everything from the first dot: ``bag.tar.gz`` -> ``bag``."""
    end = name.find('.')
    return name[:end] if end > 0 else name


def resolve_root(work_dir: Optional[PathLike], fallback: PathLike) -> Path:
    """Pick the configured work directory or fall back to ``fallback``."""
    if work_dir:
        return Path(work_dir).absolute()
    return Path(fallback).absolute()


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py
# TESTS: tests/unit/test_fileutils.py
# ============================================================================
