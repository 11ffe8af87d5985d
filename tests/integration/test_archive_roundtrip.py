# ============================================================================
# FILE: test_archive_roundtrip.py
# RELPATH: bagkit/tests/integration/test_archive_roundtrip.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Integration tests for packing bags and reopening the archives
# ============================================================================

"""
Archive Integration Tests.

Every supported format must reproduce the bag tree byte for byte, and a
bag opened straight from the archive must validate.
"""

import pytest

from conftest import tree_contents

from bagkit.core import packager
from bagkit.core.bag import Bag
from bagkit.core.packager import ArchiveFormat
from bagkit.core.validator import BagValidator


@pytest.mark.parametrize("fmt", list(ArchiveFormat))
class TestArchiveFormats:

    def test_unpacked_tree_matches(self, built_bag_dir, temp_dir, fmt):
        with Bag(built_bag_dir, overwrite=True) as bag:
            archive = BagValidator().validate(bag).package(fmt, temp_dir / "archives")
            original = tree_contents(bag.bag_dir)

        unpacked = packager.unpack(archive, work_root=temp_dir / "work")

        assert archive.name == "fixture-bag" + fmt.extension
        assert tree_contents(unpacked) == original

    def test_bag_opened_from_archive_validates(self, built_bag_dir, temp_dir, fmt):
        archive = Bag(built_bag_dir, overwrite=True).pack(fmt, temp_dir / "archives")

        with Bag(archive, config=None) as bag:
            extraction_dir = bag.bag_dir.parent
            result = BagValidator().check(bag)
            assert result.ok, result.message
            assert bag.payload_manifest.count_entries() == 3

        assert not extraction_dir.exists()


class TestRepackaging:

    def test_tar_to_zip(self, built_bag_dir, temp_dir):
        tar_archive = Bag(built_bag_dir, overwrite=True).pack("tar", temp_dir / "tar")

        with Bag(tar_archive) as bag:
            zip_archive = BagValidator().validate(bag).to_zip(temp_dir / "zip")

        assert packager.detect_format(zip_archive) is ArchiveFormat.ZIP
        unpacked = packager.unpack(zip_archive, work_root=temp_dir / "work")
        assert tree_contents(unpacked / "data") == tree_contents(built_bag_dir / "data")


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: core/bag.py, core/packager.py, core/validator.py
# ============================================================================
