# ============================================================================
# SOURCEFILE: sniffing.py
# RELPATH: bagkit/src/bagkit/core/sniffing.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Content-type detection for archived bags
# ============================================================================

"""
Content sniffing by magic bytes, used to pick the archive codec for a bag
handed over as a single file.
"""

from pathlib import Path
from typing import Union

from bagkit.core.exceptions import BagReadError

GZIP = "application/x-gzip"
BZIP2 = "application/x-bzip2"
ZIP = "application/zip"
TAR = "application/x-tar"
UNKNOWN = "application/octet-stream"

_TAR_MAGIC_OFFSET = 257
_HEADER_SIZE = 512


def detect_mime_type(file_path: Union[str, Path]) -> str:
    """
    Guess the content type of an archive from its first bytes.

    Returns:
        One of the module-level MIME constants; UNKNOWN when nothing matches

    Raises:
        BagReadError: If the file cannot be read
    """
    try:
        with open(file_path, 'rb') as f:
            header = f.read(_HEADER_SIZE)
    except OSError as e:
        raise BagReadError(str(file_path), str(e)) from e

    if header.startswith(b"\x1f\x8b"):
        return GZIP
    if header.startswith(b"BZh"):
        return BZIP2
    if header.startswith((b"PK\x03\x04", b"PK\x05\x06")):
        return ZIP
    if header[_TAR_MAGIC_OFFSET:_TAR_MAGIC_OFFSET + 5] == b"ustar":
        return TAR
    return UNKNOWN
