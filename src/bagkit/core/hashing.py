# ============================================================================
# SOURCEFILE: hashing.py
# RELPATH: bagkit/src/bagkit/core/hashing.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Checksum primitive and size formatting
# ============================================================================

"""
Hashing Module.

The one place that touches ``hashlib``. Everything else asks for
``hash_file(path, algorithm)`` and gets back a lowercase hex digest.
"""

import hashlib
from pathlib import Path
from typing import Union

from bagkit.core.exceptions import BagReadError, UnsupportedAlgorithmError

CHUNK_SIZE = 8192

_SIZE_UNITS = ("KB", "MB", "GB", "TB")


def normalize_algorithm(algorithm: str) -> str:
    """
    Map a manifest algorithm token onto a hashlib name.

    Manifest names are lowercase (``manifest-sha256.txt``) but users and older
    tools write ``SHA-256`` or ``SHA1``.
    """
    if not algorithm or not isinstance(algorithm, str):
        raise UnsupportedAlgorithmError(str(algorithm))
    name = algorithm.strip().lower()
    for candidate in (name, name.replace("-", ""), name.replace("-", "_")):
        if candidate in hashlib.algorithms_available:
            return candidate
    raise UnsupportedAlgorithmError(algorithm)


def is_supported(algorithm: str) -> bool:
    try:
        normalize_algorithm(algorithm)
        return True
    except UnsupportedAlgorithmError:
        return False


def hash_file(file_path: Union[str, Path], algorithm: str) -> str:
    """
    Calculate the checksum of a file.

    Args:
        file_path: File to hash
        algorithm: Algorithm name (md5, sha1, sha256, sha512, ...)

    Returns:
        Lowercase hexadecimal digest

    Raises:
        UnsupportedAlgorithmError: If the algorithm is unknown
        BagReadError: If the file cannot be read
    """
    digest = hashlib.new(normalize_algorithm(algorithm))
    try:
        with open(file_path, 'rb') as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b''):
                digest.update(chunk)
    except OSError as e:
        raise BagReadError(str(file_path), str(e)) from e
    return digest.hexdigest().lower()


def hash_bytes(data: bytes, algorithm: str) -> str:
    """Calculate the checksum of an in-memory byte string."""
    return hashlib.new(normalize_algorithm(algorithm), data).hexdigest().lower()


def human_readable_size(size_bytes: int) -> str:
    """
    Format a byte count for the Bag-Size tag.

    Returns "<n> bytes" below 1 KB, otherwise one decimal place in the
    largest 1024-based unit that keeps the value at or above 1.
    """
    if size_bytes < 1024:
        return f"{size_bytes} bytes"
    value = float(size_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        value /= 1024.0
        if value < 1024.0:
            break
    return f"{value:.1f} {unit}"
