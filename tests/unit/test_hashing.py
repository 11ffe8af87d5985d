# ============================================================================
# FILE: test_hashing.py
# RELPATH: bagkit/tests/unit/test_hashing.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Unit tests for checksum helpers and size formatting
# ============================================================================

import hashlib

import pytest

from bagkit.core.exceptions import BagReadError, UnsupportedAlgorithmError
from bagkit.core.hashing import (
    hash_bytes,
    hash_file,
    human_readable_size,
    is_supported,
    normalize_algorithm
)


class TestNormalizeAlgorithm:

    @pytest.mark.parametrize("name,expected", [
        ("md5", "md5"),
        ("MD5", "md5"),
        ("SHA-256", "sha256"),
        ("sha1", "sha1"),
        ("sha512", "sha512"),
    ])
    def test_known_names(self, name, expected):
        assert normalize_algorithm(name) == expected

    def test_unknown_name(self):
        with pytest.raises(UnsupportedAlgorithmError):
            normalize_algorithm("crc99")

    def test_empty_name(self):
        with pytest.raises(UnsupportedAlgorithmError):
            normalize_algorithm("")

    def test_is_supported(self):
        assert is_supported("sha256")
        assert not is_supported("nope")


class TestHashFile:

    def test_matches_hashlib(self, temp_dir):
        target = temp_dir / "hello.txt"
        target.write_bytes(b"hello world\n")

        assert hash_file(target, "md5") == hashlib.md5(b"hello world\n").hexdigest()
        assert hash_file(target, "sha256") == hashlib.sha256(b"hello world\n").hexdigest()

    def test_larger_than_chunk(self, temp_dir):
        data = bytes(range(256)) * 100
        target = temp_dir / "big.bin"
        target.write_bytes(data)

        assert hash_file(target, "sha1") == hashlib.sha1(data).hexdigest()

    def test_missing_file(self, temp_dir):
        with pytest.raises(BagReadError) as exc_info:
            hash_file(temp_dir / "missing.txt", "md5")

        assert "missing.txt" in exc_info.value.path

    def test_hash_bytes(self):
        assert hash_bytes(b"abc", "md5") == "900150983cd24fb0d6963f7d28e17f72"


class TestHumanReadableSize:

    @pytest.mark.parametrize("size,expected", [
        (0, "0 bytes"),
        (1023, "1023 bytes"),
        (1024, "1.0 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024 ** 3, "3.0 GB"),
    ])
    def test_sizes(self, size, expected):
        assert human_readable_size(size) == expected
