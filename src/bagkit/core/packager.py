# ============================================================================
# SOURCEFILE: packager.py
# RELPATH: bagkit/src/bagkit/core/packager.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Archive codec for bags (tar, zip, tar.gz, tar.bz2)
# ============================================================================

"""
Packager Module.

Streams a bag directory into an archive and back. Archive members are
named ``<bag-name>/<relative-path>`` so unpacking recreates the bag as a
single top-level directory. Only regular files are stored; directories are
recreated from file paths, so empty directories do not survive.

Interface:
    pack(bag_dir, fmt, destination) -> archive file
    unpack(archive, fmt, work_root) -> bag directory
"""

import logging
import shutil
import tarfile
import uuid
import zipfile
import zlib
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from bagkit.core import sniffing
from bagkit.core.exceptions import (
    BagDeleteError,
    BagReadError,
    BagWriteError,
    UnrecognizedFormatError
)
from bagkit.core.fileutils import (
    PathValidator,
    delete_tree,
    ensure_dir,
    list_files,
    relative_posix,
    strip_extensions
)

logger = logging.getLogger(__name__)


class ArchiveFormat(Enum):
    TAR = "tar"
    ZIP = "zip"
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"

    @property
    def extension(self) -> str:
        return "." + self.value

    @property
    def tar_mode(self) -> Optional[str]:
        return _TAR_MODES.get(self)


_TAR_MODES = {
    ArchiveFormat.TAR: "w",
    ArchiveFormat.TAR_GZ: "w:gz",
    ArchiveFormat.TAR_BZ2: "w:bz2",
}

_MIME_FORMATS = {
    sniffing.TAR: ArchiveFormat.TAR,
    sniffing.ZIP: ArchiveFormat.ZIP,
    sniffing.GZIP: ArchiveFormat.TAR_GZ,
    sniffing.BZIP2: ArchiveFormat.TAR_BZ2,
}


def format_for_mime_type(mime_type: str) -> Optional[ArchiveFormat]:
    """Archive format for a sniffed content type, or None if unsupported."""
    return _MIME_FORMATS.get(mime_type)


def parse_format(value: Union[str, ArchiveFormat]) -> ArchiveFormat:
    """Accept an ArchiveFormat or its string value ("tar.gz", "zip", ...)."""
    if isinstance(value, ArchiveFormat):
        return value
    normalized = str(value).strip().lower().lstrip('.')
    aliases = {"tgz": "tar.gz", "gz": "tar.gz", "tbz2": "tar.bz2", "bz2": "tar.bz2"}
    normalized = aliases.get(normalized, normalized)
    try:
        return ArchiveFormat(normalized)
    except ValueError:
        valid = ", ".join(f.value for f in ArchiveFormat)
        raise ValueError(f"Unknown archive format '{value}'. Must be one of: {valid}")


def detect_format(archive: Union[str, Path]) -> ArchiveFormat:
    """
    Sniff ``archive`` and map it to an ArchiveFormat.

    Raises:
        UnrecognizedFormatError: If the content type is not supported
    """
    mime_type = sniffing.detect_mime_type(archive)
    logger.debug("Bag file '%s' has MIME type '%s'", Path(archive).name, mime_type)
    fmt = format_for_mime_type(mime_type)
    if fmt is None:
        raise UnrecognizedFormatError(str(Path(archive).absolute()), mime_type)
    return fmt


# ============================================================================
# Packing
# ============================================================================

def pack(bag_dir: Union[str, Path],
         fmt: Union[str, ArchiveFormat],
         destination: Optional[Union[str, Path]] = None) -> Path:
    """
    Write ``bag_dir`` into an archive.

    Args:
        bag_dir: Bag root directory
        fmt: Archive format
        destination: Directory for the archive (defaults to bag_dir's parent)

    Returns:
        Path of the archive, named after the bag up to its first '.'

    Raises:
        BagWriteError: If the archive cannot be written
        BagReadError: If a bag file cannot be read
    """
    bag_dir = Path(bag_dir).absolute()
    fmt = parse_format(fmt)
    out_dir = ensure_dir(destination if destination else bag_dir.parent)
    archive = out_dir / (strip_extensions(bag_dir.name) + fmt.extension)

    logger.debug("Packaging '%s' with %s", bag_dir, fmt.value)
    files = list_files(bag_dir)

    try:
        if fmt is ArchiveFormat.ZIP:
            _write_zip(bag_dir, files, archive)
        else:
            _write_tar(bag_dir, files, archive, fmt.tar_mode)
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
        raise BagWriteError(str(archive), str(e)) from e

    logger.info("%s file written to: %s", fmt.value, archive)
    return archive


def _entry_name(bag_dir: Path, file_path: Path) -> str:
    return f"{bag_dir.name}/{relative_posix(file_path, bag_dir)}"


def _write_tar(bag_dir: Path, files: List[Path], archive: Path, mode: str) -> None:
    with tarfile.open(archive, mode=mode, format=tarfile.PAX_FORMAT) as tar:
        for file_path in files:
            name = _entry_name(bag_dir, file_path)
            logger.debug("Writing tar entry: %s", name)
            tar.add(str(file_path), arcname=name, recursive=False)


def _write_zip(bag_dir: Path, files: List[Path], archive: Path) -> None:
    with zipfile.ZipFile(archive, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        for file_path in files:
            name = _entry_name(bag_dir, file_path)
            logger.debug("Writing zip entry: %s", name)
            zf.write(file_path, arcname=name)


# ============================================================================
# Unpacking
# ============================================================================

def new_extraction_dir(archive: Union[str, Path], work_root: Optional[Union[str, Path]] = None) -> Path:
    """``<root>/<archive stem>_<unique token>``; root defaults to the archive's folder."""
    archive = Path(archive).absolute()
    root = Path(work_root).absolute() if work_root else archive.parent
    return root / f"{strip_extensions(archive.name)}_{uuid.uuid4().hex}"


def unpack(archive: Union[str, Path],
           fmt: Optional[Union[str, ArchiveFormat]] = None,
           work_root: Optional[Union[str, Path]] = None,
           target: Optional[Union[str, Path]] = None) -> Path:
    """
    Extract ``archive`` into a fresh directory.

    Args:
        archive: Archive file
        fmt: Archive format; sniffed when omitted
        work_root: Where to create the extraction directory
        target: Explicit extraction directory (overrides work_root)

    Returns:
        The bag directory: the archive's single top-level directory, or the
        extraction directory itself if members are not wrapped in one

    Raises:
        UnrecognizedFormatError: If fmt is omitted and sniffing fails
        PathTraversalError: If a member would land outside the extraction dir
        BagReadError: If the archive is corrupt or unreadable
    """
    archive = Path(archive).absolute()
    fmt = parse_format(fmt) if fmt is not None else detect_format(archive)
    target = Path(target).absolute() if target else new_extraction_dir(archive, work_root)

    logger.debug("Unpacking '%s' from %s into %s", archive, fmt.value, target)
    ensure_dir(target)
    try:
        if fmt is ArchiveFormat.ZIP:
            _extract_zip(archive, target)
        else:
            _extract_tar(archive, target)
    except Exception:
        try:
            delete_tree(target)
        except BagDeleteError as cleanup_error:
            logger.warning("Unable to clean up '%s': %s", target, cleanup_error)
        raise

    children = list(target.iterdir())
    if len(children) == 1 and children[0].is_dir():
        return children[0]
    return target


def _extract_tar(archive: Path, target: Path) -> None:
    validator = PathValidator(target)
    try:
        with tarfile.open(archive, mode="r:*") as tar:
            for member in tar:
                if not member.isfile():
                    continue
                destination = validator.validate_path(member.name)
                logger.debug("Extracting tar entry '%s' to %s", member.name, destination)
                source = tar.extractfile(member)
                if source is None:
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                with source, open(destination, 'wb') as out:
                    shutil.copyfileobj(source, out)
    except (tarfile.TarError, EOFError, OSError, zlib.error) as e:
        raise BagReadError(str(archive), str(e)) from e


def _extract_zip(archive: Path, target: Path) -> None:
    validator = PathValidator(target)
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                destination = validator.validate_path(info.filename)
                logger.debug("Extracting zip entry '%s' to %s", info.filename, destination)
                destination.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as source, open(destination, 'wb') as out:
                    shutil.copyfileobj(source, out)
    except (zipfile.BadZipFile, OSError, zlib.error) as e:
        raise BagReadError(str(archive), str(e)) from e


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py, fileutils.py, sniffing.py
# TESTS: tests/unit/test_packager.py, tests/integration/test_archive_roundtrip.py
# ============================================================================
