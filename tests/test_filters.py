"""Tests for file admissibility."""

import pytest

from repo_explainer.filters import (
    IGNORE_DIRS,
    IGNORE_EXTENSIONS,
    MAX_FILE_SIZE,
    is_admissible,
    is_content_admissible,
    is_path_admissible,
)


class TestPathChecks:
    @pytest.mark.parametrize("ext", IGNORE_EXTENSIONS)
    def test_denied_extensions_any_case(self, ext):
        assert not is_admissible(f"assets/logo{ext}", "text")
        assert not is_admissible(f"assets/LOGO{ext.upper()}", "text")

    @pytest.mark.parametrize("directory", sorted(IGNORE_DIRS))
    def test_denied_directories(self, directory):
        assert not is_path_admissible(f"{directory}/x.js")
        assert not is_path_admissible(f"src/{directory}/x.js")

    def test_directory_match_is_segment_based(self):
        assert is_path_admissible("src/builder/x.js")
        assert is_path_admissible("environment/config.py")
        assert is_path_admissible("outputs/report.md")
        assert not is_path_admissible("pkg/build/out.js")

    def test_regular_source_file(self):
        assert is_path_admissible("src/app/main.py")
        assert is_admissible("README.md")


class TestContentChecks:
    def test_empty_content_rejected(self):
        assert not is_content_admissible("")
        assert not is_admissible("a.txt", "")

    def test_oversized_content_rejected(self):
        assert not is_admissible("a.txt", "a" * (MAX_FILE_SIZE + 1))
        assert is_admissible("a.txt", "a" * MAX_FILE_SIZE)

    def test_binary_looking_content_rejected(self):
        assert not is_content_admissible("\x00\x01\x02abcdefg")

    def test_ten_percent_non_printable_is_allowed(self):
        assert is_content_admissible("\x00" + "a" * 9)
        assert not is_content_admissible("\x00\x00" + "a" * 9)

    def test_whitespace_counts_as_printable(self):
        assert is_content_admissible("def f():\n\treturn 1\r\n")

    def test_referentially_transparent(self):
        args = ("src/main.py", "print('hi')\n")
        assert is_admissible(*args) == is_admissible(*args)
