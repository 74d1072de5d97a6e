"""
Tests for the file summary tool.

Tests cover:
- Summary text: language, line count, definitions, external calls
- Summary cache hits and misses
- Missing input

Author: RepoGraph Team
"""

import pytest

from repograph.config import reset_config
from repograph.services.cache import AnalysisCaches
from repograph.tools.file_summary import build_file_summary, summarize_file


@pytest.fixture(autouse=True)
def reset_config_fixture():
    """Reset config before and after each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def caches():
    return AnalysisCaches.from_config()


class TestBuildFileSummary:
    """Tests for build_file_summary."""

    def test_definitions(self):
        """Test language, line count and defined symbols."""
        result = build_file_summary("export function getUser() {}\nexport const LIMIT = 5\n", "src/user.ts")

        assert result["summary"] == "A TypeScript file with 3 lines. Defines: getUser, LIMIT."
        assert result["language"] == "TypeScript"
        assert result["lines"] == 3
        assert result["exports"] == ["getUser", "LIMIT"]
        assert result["apiCalls"] == []

    def test_more_than_five_definitions(self):
        """Test that only the first five names are listed."""
        content = "\n".join(f"def f{i}():\n    pass" for i in range(7))

        result = build_file_summary(content, "app/funcs.py")

        assert result["summary"] == "A Python file with 14 lines. Defines: f0, f1, f2, f3, f4 and 2 more."
        assert len(result["exports"]) == 7

    def test_external_api_calls(self):
        """Test the external call sentence."""
        content = "const res = await fetch('https://api.github.com/users')\n"

        result = build_file_summary(content, "src/client.js")

        assert result["summary"] == "A JavaScript file with 2 lines. Makes external API calls."
        assert result["apiCalls"] == ["https://api.github.com/users"]

    def test_unknown_extension(self):
        """Test that unknown extensions fall back to the upper-cased extension."""
        assert build_file_summary("x", "notes.txt")["summary"] == "A TXT file with 1 lines."


class TestSummarizeFile:
    """Tests for summarize_file."""

    def test_first_call_not_cached(self, caches):
        """Test a fresh summary."""
        result = summarize_file("def main():\n    pass\n", "main.py", caches=caches)

        assert result["file"] == "main.py"
        assert result["cached"] is False
        assert caches.summaries.stats()["size"] == 1

    def test_repeat_is_cached(self, caches):
        """Test that the same text is served from the cache."""
        first = summarize_file("def main():\n    pass\n", "main.py", caches=caches)
        second = summarize_file("def main():\n    pass\n", "main.py", caches=caches)

        assert second["cached"] is True
        assert second["summary"] == first["summary"]
        assert caches.summaries.stats()["size"] == 1

    def test_same_text_other_path(self, caches):
        """Test that a copy of the file at another path hits the cache."""
        summarize_file("def main():\n    pass\n", "main.py", caches=caches)
        result = summarize_file("def main():\n    pass\n", "scripts/copy.py", caches=caches)

        assert result["cached"] is True
        assert result["file"] == "scripts/copy.py"

    def test_same_text_other_language(self, caches):
        """Test that the language is part of the cache key."""
        summarize_file("const a = 1\n", "a.ts", caches=caches)
        result = summarize_file("const a = 1\n", "a.js", caches=caches)

        assert result["cached"] is False
        assert result["language"] == "JavaScript"
        assert caches.summaries.stats()["size"] == 2

    def test_changed_text_misses(self, caches):
        """Test that edited text is summarized again."""
        summarize_file("def main():\n    pass\n", "main.py", caches=caches)
        result = summarize_file("def main():\n    return 1\n", "main.py", caches=caches)

        assert result["cached"] is False

    @pytest.mark.parametrize("content,file_path", [("", "a.py"), ("x = 1", ""), ("x = 1", "   ")])
    def test_missing_input(self, caches, content, file_path):
        """Test that empty content or path is an error."""
        result = summarize_file(content, file_path, caches=caches)

        assert result == {"error": "content and file_path are required"}
        assert caches.summaries.stats()["size"] == 0
