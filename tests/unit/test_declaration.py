# ============================================================================
# FILE: test_declaration.py
# RELPATH: bagkit/tests/unit/test_declaration.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Unit tests for the bagit.txt declaration
# ============================================================================

import pytest

from bagkit.core.declaration import Declaration
from bagkit.core.exceptions import DeclarationError, ValidationReason

DEFAULT_TEXT = "BagIt-Version: 0.96\nTag-File-Character-Encoding: UTF-8\n"


class TestWrite:

    def test_new_declaration_file_is_exact(self, temp_dir):
        Declaration(temp_dir).write_to_file()

        assert (temp_dir / "bagit.txt").read_bytes() == DEFAULT_TEXT.encode("utf-8")

    def test_new_declaration_validates(self, temp_dir):
        declaration = Declaration(temp_dir)
        declaration.write_to_file()

        declaration.validate()

    def test_missing_file_is_written_by_validate(self, temp_dir):
        Declaration(temp_dir).validate()

        assert (temp_dir / "bagit.txt").read_text() == DEFAULT_TEXT

    def test_write_fills_missing_values(self, temp_dir):
        declaration = Declaration(temp_dir, version=None, encoding=None,
                                  is_structurally_valid=False)

        declaration.write_to_file()

        assert declaration.version == "0.96"
        assert declaration.encoding == "UTF-8"
        assert declaration.is_structurally_valid is True


class TestLoad:

    def test_absent_file(self, temp_dir):
        assert Declaration.load(temp_dir) is None

    def test_parse_valid_file(self, temp_dir):
        (temp_dir / "bagit.txt").write_text("BagIt-Version: 1.0\nTag-File-Character-Encoding: UTF-8\n")

        declaration = Declaration.load(temp_dir)

        assert declaration.version == "1.0"
        assert declaration.encoding == "UTF-8"
        assert declaration.is_structurally_valid is True

    def test_extra_line_marks_invalid_structure(self, temp_dir):
        (temp_dir / "bagit.txt").write_text(DEFAULT_TEXT + "Extra: line\n")
        declaration = Declaration.load(temp_dir)

        with pytest.raises(DeclarationError) as exc_info:
            declaration.validate()

        assert exc_info.value.reason is ValidationReason.INVALID_STRUCTURE

    def test_swapped_lines_invalid(self, temp_dir):
        (temp_dir / "bagit.txt").write_text(
            "Tag-File-Character-Encoding: UTF-8\nBagIt-Version: 0.96\n"
        )

        assert Declaration.load(temp_dir).is_structurally_valid is False


class TestValidate:

    @pytest.mark.parametrize("text,reason", [
        ("BagIt-Version: \nTag-File-Character-Encoding: UTF-8\n", ValidationReason.MISSING_VERSION),
        ("BagIt-Version: 1\nTag-File-Character-Encoding: UTF-8\n", ValidationReason.INVALID_VERSION),
        ("BagIt-Version: 0.97\n", ValidationReason.MISSING_ENCODING),
        ("BagIt-Version: 0.97\nTag-File-Character-Encoding: latin-1\n", ValidationReason.INVALID_ENCODING),
    ])
    def test_failure_reasons(self, temp_dir, text, reason):
        (temp_dir / "bagit.txt").write_text(text)
        declaration = Declaration.load(temp_dir)

        with pytest.raises(DeclarationError) as exc_info:
            declaration.validate()

        assert exc_info.value.reason is reason
