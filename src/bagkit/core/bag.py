# ============================================================================
# SOURCEFILE: bag.py
# RELPATH: bagkit/src/bagkit/core/bag.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Bag aggregate: construction modes, working copy, packaging
# ============================================================================

"""
Bag Module.

A Bag ties together the declaration, the two manifests, bag-info.txt and
the ``data/`` directory of one bag on disk.

Construction Modes:
    - path does not exist: a new, empty bag in a fresh working directory
    - path is a directory: an existing bag, copied into a working directory
      unless ``overwrite=True``
    - path is a file: an archived bag, unpacked into a working directory
      and edited in place from then on

Working directories are ``<root>/<name>_<token>/<name>`` where root is the
configured work directory or the source's parent folder. Use the bag as a
context manager to have the working directory removed on exit:

    with Bag("my-bag") as bag:
        bag.add_data("report.pdf")
        bag.complete()
        BagValidator().validate(bag).to_tar_gz()
"""

import logging
import uuid
from pathlib import Path
from typing import List, Mapping, Optional, Union

from bagkit.core import bag_info as bag_info_module
from bagkit.core import packager
from bagkit.core.bag_info import BagInfo
from bagkit.core.config import BagConfig
from bagkit.core.declaration import FILE_NAME as DECLARATION_FILE
from bagkit.core.declaration import Declaration
from bagkit.core.exceptions import (
    BagDeleteError,
    BagWriteError,
    IllegalBagStateError,
    UnrecognizedFormatError
)
from bagkit.core.fileutils import (
    copy_path,
    delete_tree,
    ensure_dir,
    list_files,
    resolve_root,
    total_size
)
from bagkit.core.manifest import PayloadManifest, TagManifest
from bagkit.core.models import ManifestEntry, format_payload_oxum
from bagkit.core.payload import DATA_DIR_NAME, BagData

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Bag:
    """
    One bag and the working directory it lives in.

    Attributes:
        bag_dir: Resolved bag root directory
        overwrite_in_place: True when edits go straight to bag_dir
        declaration: Parsed or new Declaration; None if bagit.txt is absent
        payload_manifest: Checksums for data/
        tag_manifest: Checksums for tag files
        is_validated: Set once by the validator and never reset
    """

    def __init__(self,
                 path: PathLike,
                 overwrite: bool = False,
                 config: Optional[BagConfig] = None,
                 bag_info: Optional[Union[BagInfo, Mapping[str, str]]] = None):
        """
        Open or create a bag.

        Args:
            path: New bag location, existing bag directory or bag archive
            overwrite: Edit an existing directory in place instead of a copy
            config: Bag configuration; defaults to BagConfig()
            bag_info: Initial metadata, replacing any bag-info.txt content

        Raises:
            UnrecognizedFormatError: If path is a file of an unknown type
            BagIOError: If the working directory or data/ cannot be set up
            BagParseError: Malformed manifest or bag-info line under strict parsing
        """
        self.config = config or BagConfig()
        self.source = Path(path).absolute()
        self.overwrite_in_place = overwrite
        self.is_validated = False
        self._work_tree: Optional[Path] = None
        self._copied_from: Optional[Path] = None
        self._payload: Optional[BagData] = None

        logger.debug("Creating new Bag object: %s", self.source.name)

        is_new = not self.source.exists()
        if self.source.is_file():
            bag_dir = self._unpack(self.source)
            self.overwrite_in_place = True
        elif self.source.is_dir():
            if overwrite:
                bag_dir = self.source
            else:
                self._copied_from = self.source.resolve()
                bag_dir = self._copy_to_working_dir(self.source)
        elif overwrite:
            bag_dir = ensure_dir(self.source)
        else:
            bag_dir = self._new_working_dir(self.source.name)

        self.bag_dir = bag_dir.resolve()

        try:
            self._load(is_new)
            if bag_info is not None:
                self._bag_info = (bag_info.copy() if isinstance(bag_info, BagInfo)
                                  else BagInfo.from_mapping(bag_info))
        except Exception:
            self._discard()
            raise

    # ---------------- construction ----------------

    def _new_working_dir(self, name: str) -> Path:
        root = resolve_root(self.config.work_dir, self.source.parent)
        self._work_tree = root / f"{name}_{uuid.uuid4().hex}"
        bag_dir = self._work_tree / name
        ensure_dir(bag_dir)
        logger.debug("Working directory: %s", bag_dir)
        return bag_dir

    def _copy_to_working_dir(self, source: Path) -> Path:
        bag_dir = self._new_working_dir(source.name)
        try:
            copy_path(source, bag_dir)
        except Exception:
            self._discard()
            raise
        return bag_dir

    def _unpack(self, archive: Path) -> Path:
        try:
            fmt = packager.detect_format(archive)
        except UnrecognizedFormatError:
            logger.error("Unrecognized bag file type: %s", archive)
            self._discard()
            raise

        root = resolve_root(self.config.work_dir, archive.parent)
        self._work_tree = packager.new_extraction_dir(archive, root)
        return packager.unpack(archive, fmt, target=self._work_tree)

    def _load(self, is_new: bool) -> None:
        if is_new:
            self.declaration = Declaration(self.bag_dir)
            self.declaration.write_to_file()
        else:
            self.declaration = Declaration.load(self.bag_dir)

        info_file = self.bag_dir / bag_info_module.FILE_NAME
        if info_file.is_file():
            self._bag_info = BagInfo.read_from(info_file, strict=self.config.strict_parsing)
        else:
            self._bag_info = BagInfo()

        self.payload_manifest = PayloadManifest(self.bag_dir, self.config)
        self.tag_manifest = TagManifest(self.bag_dir, self.config)

        try:
            ensure_dir(self.data_dir)
        except BagWriteError as e:
            raise BagWriteError(str(self.data_dir), "Unable to create the bag's data directory") from e

    # ---------------- properties ----------------

    @property
    def name(self) -> str:
        return self.bag_dir.name

    @property
    def data_dir(self) -> Path:
        return self.bag_dir / DATA_DIR_NAME

    @property
    def payload(self) -> BagData:
        """View over data/; locked along with the bag."""
        if self._payload is None:
            self._payload = BagData(self.data_dir, self.payload_manifest)
            if self.is_validated:
                self._payload.lock()
        return self._payload

    @property
    def bag_info(self) -> BagInfo:
        return self._bag_info

    @bag_info.setter
    def bag_info(self, value: Union[BagInfo, Mapping[str, str]]) -> None:
        if self.is_validated:
            raise IllegalBagStateError("replace the metadata of")
        self._bag_info = value.copy() if isinstance(value, BagInfo) else BagInfo.from_mapping(value)

    @property
    def output_dir(self) -> Path:
        """Folder that archives and directory copies go to by default."""
        if self._work_tree is not None:
            return self._work_tree.parent
        return self.bag_dir.parent

    def has_declaration(self) -> bool:
        return self.declaration is not None

    # ---------------- building ----------------

    def add_data(self, *paths: PathLike) -> List[ManifestEntry]:
        """
        Copy files or directories into data/ and record their checksums.

        Returns:
            Manifest entries added or updated

        Raises:
            IllegalBagStateError: If the bag has been validated
            BagReadError: If a source path does not exist
        """
        if self.is_validated:
            raise IllegalBagStateError("add data to")

        ensure_dir(self.data_dir)
        entries: List[ManifestEntry] = []
        for source in paths:
            source = Path(source)
            target = self.data_dir / source.name
            copy_path(source, target)
            entries.extend(self.payload_manifest.update_with(target))
        return entries

    def complete(self) -> None:
        """Make sure data/ and bagit.txt exist and write the payload manifest."""
        ensure_dir(self.data_dir)
        if self.declaration is None:
            self.declaration = Declaration(self.bag_dir)
        if not self.declaration.file_path.exists():
            self.declaration.write_to_file()
        self.payload_manifest.write_to_file()

    def get_payload_oxum(self) -> str:
        """``<total payload bytes>.<payload file count>``"""
        files = list_files(self.data_dir)
        total = sum(f.stat().st_size for f in files)
        return format_payload_oxum(total, len(files))

    def get_size(self) -> int:
        """Total bytes of every file in the bag, tag files included."""
        return total_size(self.bag_dir)

    def _mark_validated(self) -> None:
        self.is_validated = True
        self._bag_info.lock()
        if self._payload is not None:
            self._payload.lock()

    # ---------------- output ----------------

    def pack(self, fmt: Union[str, packager.ArchiveFormat],
             destination: Optional[PathLike] = None) -> Path:
        """Archive the bag into ``destination`` (default: output_dir)."""
        return packager.pack(self.bag_dir, fmt, destination or self.output_dir)

    def to_dir(self, destination: Optional[PathLike] = None) -> Path:
        """
        Copy the bag to ``destination``.

        With no destination the bag goes to ``output_dir/<name>``; a bag
        edited in place is already there and is returned as is. An existing,
        non-empty directory that is not a bag receives the bag as a
        ``<name>`` subdirectory; an existing bag at the destination is replaced.

        Raises:
            BagWriteError: If the destination contains the bag itself, or is
                           the directory the bag was copied from
        """
        if destination is None:
            if self._work_tree is None:
                return self.bag_dir
            destination = self.output_dir / self.name
        destination = Path(destination).absolute()
        self._check_destination(destination)
        if destination.resolve() == self.bag_dir:
            return self.bag_dir

        if (destination.is_dir() and any(destination.iterdir())
                and not (destination / DECLARATION_FILE).exists()):
            destination = destination / self.name
            self._check_destination(destination)
            if destination.resolve() == self.bag_dir:
                return self.bag_dir

        delete_tree(destination)
        copy_path(self.bag_dir, destination)
        logger.info("Bag directory written to: %s", destination)
        return destination

    def _check_destination(self, destination: Path) -> None:
        resolved = destination.resolve()
        if resolved in self.bag_dir.parents:
            raise BagWriteError(str(destination), "Destination contains the bag being written")
        source = self._copied_from
        if source is not None and (resolved == source or source in resolved.parents):
            raise BagWriteError(str(destination),
                                "Refusing to write over the directory the bag was opened from")

    # ---------------- lifecycle ----------------

    def cleanup(self) -> None:
        """
        Delete the working directory if this bag created it.

        A caller's directory opened with ``overwrite=True`` is never deleted.

        Raises:
            BagDeleteError: If part of the working tree cannot be removed
        """
        if self._work_tree is None:
            logger.debug("Not deleting %s; it belongs to the caller", self.bag_dir)
            return
        logger.debug("Cleaning up working directory %s", self._work_tree)
        delete_tree(self._work_tree)

    def _discard(self) -> None:
        if self._work_tree is None:
            return
        try:
            delete_tree(self._work_tree)
        except BagDeleteError as e:
            logger.warning("Unable to clean up '%s': %s", self._work_tree, e)

    def __enter__(self) -> "Bag":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if not self.config.autoclean:
            return
        if exc_type is None:
            self.cleanup()
            return
        self._discard()

    def __repr__(self) -> str:
        return (f"Bag({self.bag_dir}, overwrite_in_place={self.overwrite_in_place}, "
                f"validated={self.is_validated})")


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: bag_info.py, config.py, declaration.py, exceptions.py,
#               fileutils.py, manifest.py, models.py, packager.py, payload.py
# TESTS: tests/unit/test_bag.py, tests/integration/test_bag_lifecycle.py
# ============================================================================
