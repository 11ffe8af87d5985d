# ============================================================================
# FILE: conftest.py
# RELPATH: bagkit/tests/conftest.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Pytest fixtures for the BagKit test suite
# ============================================================================

"""
Pytest configuration and shared fixtures.

Provides temporary directories, payload trees with known sizes, bag
configurations and ready-made bags on disk.
"""

import shutil
import tempfile
from pathlib import Path
from typing import List

import pytest

from bagkit.core.bag import Bag
from bagkit.core.config import BagConfig
from bagkit.core.validator import BagValidator


# ============================================================================
# Filesystem Fixtures
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test file operations."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path).resolve()
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def temp_config_file(temp_dir):
    """Create a temporary config file path."""
    return temp_dir / "bagkit_config.json"


@pytest.fixture
def payload_dir(temp_dir):
    """
    Payload source tree with files of 10, 20 and 30 bytes.

    Structure:
        payload/
            alpha.txt      (10 bytes)
            beta.txt       (20 bytes)
            nested/
                gamma.bin  (30 bytes)
    """
    root = temp_dir / "payload"
    (root / "nested").mkdir(parents=True)
    (root / "alpha.txt").write_bytes(b"a" * 10)
    (root / "beta.txt").write_bytes(b"b" * 20)
    (root / "nested" / "gamma.bin").write_bytes(bytes(range(30)))
    return root


@pytest.fixture
def payload_files(payload_dir) -> List[Path]:
    """Top-level payload paths to hand to Bag.add_data."""
    return [payload_dir / "alpha.txt", payload_dir / "beta.txt", payload_dir / "nested"]


# ============================================================================
# Config Fixtures
# ============================================================================

@pytest.fixture
def work_config(temp_dir):
    """BagConfig whose working copies go under temp_dir/work."""
    return BagConfig(work_dir=temp_dir / "work")


@pytest.fixture
def sample_bag_info():
    return {
        "Source-Organization": "FreeLibrary",
        "Contact-Name": "Jane Archivist",
        "External-Description": "Scanned letters, box 4",
    }


@pytest.fixture
def legacy_config():
    """Flat configuration in the pre-1.0 property style."""
    return {
        "bagit_hash": "sha256",
        "bagit_workdir": "/tmp/bags",
        "bagit_autoclean": "false",
        "bagit_extra": "kept",
    }


# ============================================================================
# Bag Fixtures
# ============================================================================

@pytest.fixture
def built_bag_dir(temp_dir, payload_files, sample_bag_info):
    """
    A complete, validated bag written in place at temp_dir/fixture-bag.

    Contains bagit.txt, bag-info.txt, manifest-md5.txt, tagmanifest-md5.txt
    and the three payload files.
    """
    bag_dir = temp_dir / "fixture-bag"
    bag = Bag(bag_dir, overwrite=True, bag_info=sample_bag_info)
    bag.add_data(*payload_files)
    bag.complete()
    BagValidator().validate(bag)
    return bag_dir


# ============================================================================
# Assertion Helpers
# ============================================================================

def tree_contents(root: Path) -> dict:
    """Map of relative POSIX path to bytes for every file under root."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*")) if p.is_file()
    }


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: core/bag.py, core/config.py, core/validator.py
# USAGE: Import fixtures in test files, pytest auto-discovers them
# ============================================================================
