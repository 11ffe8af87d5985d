# ============================================================================
# FILE: test_bag.py
# RELPATH: bagkit/tests/unit/test_bag.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Unit tests for Bag construction, building and cleanup
# ============================================================================

"""
Unit tests for the Bag aggregate.

Covers the three construction modes, the working-directory layout, data
handling and the context-manager cleanup.
"""

import hashlib

import pytest

from bagkit.core.bag import Bag
from bagkit.core.bag_info import BagInfo
from bagkit.core.config import BagConfig
from bagkit.core.exceptions import BagWriteError, IllegalBagStateError, UnrecognizedFormatError
from bagkit.core.validator import BagValidator

DEFAULT_DECLARATION = "BagIt-Version: 0.96\nTag-File-Character-Encoding: UTF-8\n"


class TestNewBag:
    """Tests for bags created from nothing."""

    def test_working_directory_layout(self, temp_dir, work_config):
        bag = Bag(temp_dir / "mybag", config=work_config)

        assert bag.bag_dir.name == "mybag"
        assert bag.bag_dir.parent.name.startswith("mybag_")
        assert bag.bag_dir.parent.parent == work_config.work_dir
        assert not (temp_dir / "mybag").exists()

    def test_working_directories_are_unique(self, temp_dir, work_config):
        first = Bag(temp_dir / "mybag", config=work_config)
        second = Bag(temp_dir / "mybag", config=work_config)

        assert first.bag_dir != second.bag_dir

    def test_default_root_is_source_parent(self, temp_dir):
        bag = Bag(temp_dir / "mybag")

        assert bag.bag_dir.parent.parent == temp_dir

    def test_new_bag_contents(self, temp_dir, work_config):
        bag = Bag(temp_dir / "mybag", config=work_config)

        assert (bag.bag_dir / "bagit.txt").read_text() == DEFAULT_DECLARATION
        assert bag.data_dir.is_dir()
        assert bag.payload_manifest.count_entries() == 0
        assert bag.tag_manifest.count_entries() == 0
        assert len(bag.bag_info) == 0
        assert bag.has_declaration()

    def test_overwrite_creates_in_place(self, temp_dir):
        bag = Bag(temp_dir / "inplace", overwrite=True)

        assert bag.bag_dir == temp_dir / "inplace"
        assert (temp_dir / "inplace" / "data").is_dir()

    def test_initial_bag_info_mapping(self, temp_dir, work_config, sample_bag_info):
        bag = Bag(temp_dir / "mybag", config=work_config, bag_info=sample_bag_info)

        assert bag.bag_info.get_value("Source-Organization") == "FreeLibrary"


class TestExistingDirectory:

    def test_copied_into_working_dir(self, built_bag_dir, work_config):
        bag = Bag(built_bag_dir, config=work_config)

        assert bag.bag_dir != built_bag_dir
        assert bag.payload_manifest.count_entries() == 3
        assert bag.bag_info.get_value("Payload-Oxum") == "60.3"
        assert bag.declaration.version == "0.96"

    def test_source_untouched_by_edits(self, built_bag_dir, work_config, temp_dir):
        extra = temp_dir / "extra.txt"
        extra.write_text("extra")
        bag = Bag(built_bag_dir, config=work_config)

        bag.add_data(extra)
        bag.complete()

        assert not (built_bag_dir / "data" / "extra.txt").exists()

    def test_missing_declaration_tolerated(self, built_bag_dir, work_config):
        (built_bag_dir / "bagit.txt").unlink()

        bag = Bag(built_bag_dir, config=work_config)

        assert bag.declaration is None
        assert not bag.has_declaration()

    def test_bag_info_argument_replaces_file_content(self, built_bag_dir, work_config):
        bag = Bag(built_bag_dir, config=work_config, bag_info={"Bag-Count": "2 of 3"})

        assert bag.bag_info.items() == [("Bag-Count", "2 of 3")]


class TestArchive:

    def test_opened_from_archive(self, built_bag_dir, temp_dir, work_config):
        bag = Bag(built_bag_dir, overwrite=True)
        BagValidator().validate(bag)
        archive = bag.pack("tar.gz", temp_dir / "archives")

        reopened = Bag(archive, config=work_config)

        assert reopened.overwrite_in_place is True
        assert reopened.bag_dir.name == "fixture-bag"
        assert BagValidator().is_valid(reopened)

    def test_unrecognized_archive(self, temp_dir, work_config):
        notes = temp_dir / "notes.txt"
        notes.write_text("not a bag")

        with pytest.raises(UnrecognizedFormatError):
            Bag(notes, config=work_config)

        assert not work_config.work_dir.exists() or not any(work_config.work_dir.iterdir())


class TestBuilding:

    def test_add_data_records_one_entry_per_file(self, temp_dir, work_config, payload_files):
        bag = Bag(temp_dir / "mybag", config=work_config)

        entries = bag.add_data(*payload_files)

        assert len(entries) == 3
        assert bag.payload_manifest.count_entries() == 3
        gamma = bag.data_dir / "nested" / "gamma.bin"
        assert bag.payload_manifest.get_stored_hash(gamma) == hashlib.md5(bytes(range(30))).hexdigest()

    def test_add_same_file_twice(self, temp_dir, work_config, payload_files):
        bag = Bag(temp_dir / "mybag", config=work_config)

        bag.add_data(payload_files[0])
        bag.add_data(payload_files[0])

        assert bag.payload_manifest.count_entries() == 1

    def test_payload_oxum(self, temp_dir, work_config, payload_files):
        bag = Bag(temp_dir / "mybag", config=work_config)
        bag.add_data(*payload_files)

        assert bag.get_payload_oxum() == "60.3"

    def test_complete_writes_manifest(self, temp_dir, work_config, payload_files):
        bag = Bag(temp_dir / "mybag", config=work_config)
        bag.add_data(*payload_files)

        bag.complete()

        lines = (bag.bag_dir / "manifest-md5.txt").read_text().splitlines()
        assert [line.split(" ")[1] for line in lines] == [
            "data/alpha.txt", "data/beta.txt", "data/nested/gamma.bin"
        ]

    def test_complete_restores_declaration(self, built_bag_dir, work_config):
        (built_bag_dir / "bagit.txt").unlink()
        bag = Bag(built_bag_dir, config=work_config)

        bag.complete()

        assert (bag.bag_dir / "bagit.txt").read_text() == DEFAULT_DECLARATION

    def test_get_size_counts_tag_files(self, temp_dir, work_config, payload_files):
        bag = Bag(temp_dir / "mybag", config=work_config)
        bag.add_data(*payload_files)

        assert bag.get_size() == 60 + len(DEFAULT_DECLARATION)

    def test_bag_info_setter_locked_after_validation(self, built_bag_dir):
        bag = Bag(built_bag_dir, overwrite=True)
        bag.bag_info = BagInfo.from_mapping({"Contact-Name": "Jane"})
        BagValidator().validate(bag)

        with pytest.raises(IllegalBagStateError):
            bag.bag_info = {"Contact-Name": "John"}


class TestOutput:

    def test_to_dir_default_destination(self, temp_dir, payload_files):
        bag = Bag(temp_dir / "mybag")
        bag.add_data(*payload_files)
        bag.complete()

        written = BagValidator().validate(bag).to_dir()

        assert written == temp_dir / "mybag"
        assert (written / "data" / "nested" / "gamma.bin").exists()

    def test_to_dir_in_place_returns_bag_dir(self, built_bag_dir):
        bag = Bag(built_bag_dir, overwrite=True)

        assert bag.to_dir() == bag.bag_dir

    def test_to_dir_refuses_folder_holding_the_bag(self, temp_dir, payload_files):
        unrelated = temp_dir / "unrelated.txt"
        unrelated.write_text("keep me")
        bag = Bag(temp_dir / "mybag", config=BagConfig(autoclean=False))
        bag.add_data(*payload_files)
        bag.complete()
        validated = BagValidator().validate(bag)

        with pytest.raises(BagWriteError):
            validated.to_dir(temp_dir)
        with pytest.raises(BagWriteError):
            validated.to_dir(bag.output_dir)

        assert unrelated.read_text() == "keep me"
        assert (bag.bag_dir / "bagit.txt").exists()

    def test_to_dir_into_non_empty_folder(self, temp_dir, work_config, payload_files):
        out = temp_dir / "out"
        out.mkdir()
        (out / "notes.txt").write_text("keep me")
        bag = Bag(temp_dir / "mybag", config=work_config)
        bag.add_data(*payload_files)
        bag.complete()

        written = BagValidator().validate(bag).to_dir(out)

        assert written == out / "mybag"
        assert (out / "notes.txt").read_text() == "keep me"
        assert (written / "data" / "alpha.txt").exists()

    def test_to_dir_replaces_previous_copy(self, temp_dir, work_config, payload_files):
        bag = Bag(temp_dir / "mybag", config=work_config)
        bag.add_data(*payload_files)
        bag.complete()
        validated = BagValidator().validate(bag)

        first = validated.to_dir(temp_dir / "copy")
        (first / "stale.txt").write_text("old")
        second = validated.to_dir(temp_dir / "copy")

        assert second == first
        assert not (second / "stale.txt").exists()

    def test_to_dir_refuses_source_directory(self, built_bag_dir):
        bag = Bag(built_bag_dir)
        validated = BagValidator().validate(bag)
        before = sorted(p.name for p in built_bag_dir.iterdir())

        with pytest.raises(BagWriteError):
            validated.to_dir()
        with pytest.raises(BagWriteError):
            validated.to_dir(built_bag_dir)

        assert sorted(p.name for p in built_bag_dir.iterdir()) == before

    def test_pack_defaults_to_output_dir(self, temp_dir, work_config, payload_files):
        bag = Bag(temp_dir / "mybag", config=work_config)
        bag.add_data(*payload_files)
        bag.complete()

        archive = BagValidator().validate(bag).to_zip()

        assert archive == work_config.work_dir / "mybag.zip"


class TestCleanup:

    def test_context_manager_removes_working_tree(self, temp_dir, work_config):
        with Bag(temp_dir / "mybag", config=work_config) as bag:
            work_tree = bag.bag_dir.parent
            assert work_tree.exists()

        assert not work_tree.exists()

    def test_cleanup_on_error(self, temp_dir, work_config):
        with pytest.raises(RuntimeError):
            with Bag(temp_dir / "mybag", config=work_config) as bag:
                work_tree = bag.bag_dir.parent
                raise RuntimeError("boom")

        assert not work_tree.exists()

    def test_autoclean_disabled(self, temp_dir):
        config = BagConfig(work_dir=temp_dir / "work", autoclean=False)

        with Bag(temp_dir / "mybag", config=config) as bag:
            bag_dir = bag.bag_dir

        assert bag_dir.exists()

    def test_overwrite_directory_never_deleted(self, built_bag_dir):
        with Bag(built_bag_dir, overwrite=True) as bag:
            pass

        bag.cleanup()
        assert built_bag_dir.exists()
        assert (built_bag_dir / "bagit.txt").exists()

    def test_unpacked_archive_is_owned(self, built_bag_dir, temp_dir, work_config):
        archive = Bag(built_bag_dir, overwrite=True).pack("zip", temp_dir / "archives")

        with Bag(archive, config=work_config) as bag:
            extraction_dir = bag.bag_dir.parent

        assert not extraction_dir.exists()
        assert archive.exists()


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: core/bag.py, core/validator.py
# ============================================================================
