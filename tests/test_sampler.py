"""Tests for representative file selection."""

import re

import pytest

from repo_explainer.sampler import (
    PRIORITY_PATTERNS,
    TRUNCATION_MARKER,
    PriorityPattern,
    select_representative_files,
    truncate,
)


@pytest.fixture
def web_repo():
    return {
        "src/util/helpers.js": "export const h = 1;",
        "README.md": "# App",
        "package.json": "{}",
        "src/index.js": "import './app';",
        "src/models/user.js": "class User {}",
        "src/routes/users.js": "router.get('/')",
        "docs/guide.md": "guide",
        "scripts/build.sh": "echo build",
        "src/styles.css": "body {}",
    }


class TestPriorityTable:
    def test_table_order(self):
        purposes = [p.purpose for p in PRIORITY_PATTERNS]
        assert purposes[:3] == ["readme", "manifest", "entry point"]
        assert purposes[-1] == "tests"

    @pytest.mark.parametrize(
        "purpose, path",
        [
            ("readme", "docs/README.md"),
            ("manifest", "pyproject.toml"),
            ("entry point", "server/main.py"),
            ("env example", ".env.example"),
            ("container", "Dockerfile"),
            ("schema", "db/schema.prisma"),
            ("models", "app/models/user.rb"),
            ("api", "api/v1/users.ts"),
            ("views", "src/components/Button.tsx"),
            ("utils", "lib/helpers/date.js"),
            ("tests", "tests/test_main.py"),
        ],
    )
    def test_each_pattern_matches_its_class(self, purpose, path):
        pattern = next(p for p in PRIORITY_PATTERNS if p.purpose == purpose)
        assert pattern.matches(path)

    def test_entry_point_needs_a_boundary(self):
        pattern = next(p for p in PRIORITY_PATTERNS if p.purpose == "entry point")
        assert not pattern.matches("src/domain.py")


class TestSelectRepresentativeFiles:
    def test_empty_input(self):
        assert select_representative_files({}) == {}

    def test_priority_precedence_with_ceiling_of_one(self):
        files = {"src/util/helpers.js": "h", "README.md": "r"}
        assert list(select_representative_files(files, max_files=1)) == ["README.md"]

    def test_priority_files_come_first(self, web_repo):
        selected = list(select_representative_files(web_repo))
        assert selected == [
            "README.md",
            "package.json",
            "src/index.js",
            "src/models/user.js",
            "src/routes/users.js",
            # breadth pass: one file per directory, first-seen order
            "docs/guide.md",
            "scripts/build.sh",
            "src/styles.css",
            "src/util/helpers.js",
        ]

    def test_no_duplicates_across_patterns(self):
        # matches both the readme and the tests pattern
        files = {"tests/README.md": "t"}
        assert list(select_representative_files(files)) == ["tests/README.md"]

    def test_ceiling_is_respected(self):
        files = {f"tests/test_{i:02d}.py": "x" for i in range(40)}
        assert len(select_representative_files(files)) == 15
        assert len(select_representative_files(files, max_files=5)) == 5

    def test_breadth_pass_round_robins_directories(self):
        files = {}
        for d in ("alpha", "beta", "gamma"):
            for i in range(5):
                files[f"{d}/f{i}.txt"] = "x"
        selected = list(select_representative_files(files, max_files=6))
        assert selected == [
            "alpha/f0.txt", "beta/f0.txt", "gamma/f0.txt",
            "alpha/f1.txt", "beta/f1.txt", "gamma/f1.txt",
        ]

    def test_breadth_pass_skips_exhausted_directories(self):
        files = {"a/1.txt": "x", "b/1.txt": "x", "b/2.txt": "x", "b/3.txt": "x"}
        selected = list(select_representative_files(files, max_files=4))
        assert selected == ["a/1.txt", "b/1.txt", "b/2.txt", "b/3.txt"]

    def test_root_files_group_together(self):
        files = {"x.txt": "x", "y.txt": "y", "lib/z.txt": "z"}
        selected = list(select_representative_files(files, max_files=2))
        assert selected == ["lib/z.txt", "x.txt"]

    def test_deterministic_regardless_of_insertion_order(self, web_repo):
        reversed_repo = dict(reversed(list(web_repo.items())))
        first = select_representative_files(web_repo)
        assert select_representative_files(web_repo) == first
        assert list(select_representative_files(reversed_repo)) == list(first)

    def test_large_files_truncated(self):
        files = {"README.md": "a" * 12_000, "small.py": "ok"}
        selected = select_representative_files(files)
        assert selected["README.md"] == "a" * 10_000 + "\n... [file truncated due to size]"
        assert selected["small.py"] == "ok"

    def test_custom_patterns(self):
        patterns = [PriorityPattern("go", re.compile(r"\.go$"))]
        files = {"a.py": "x", "b.go": "y"}
        assert list(select_representative_files(files, max_files=1, patterns=patterns)) == ["b.go"]


class TestTruncate:
    def test_exact_limit_untouched(self):
        assert truncate("a" * 10, 10) == "a" * 10

    def test_over_limit_marked(self):
        assert truncate("a" * 11, 10) == "a" * 10 + TRUNCATION_MARKER
