"""Base extractor interface for heuristic source parsing."""

import re
from abc import ABC, abstractmethod
from typing import Iterable


class BaseExtractor(ABC):
    """Abstract base class for lexical extractors.

    Each extractor owns one pattern family and works on raw text only.
    Extractors are best-effort: arbitrary or malformed text yields an empty
    result, never an exception. A stricter language-aware implementation can
    replace any of them as long as it keeps the same ``extract`` contract.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier of the pattern family."""
        pass

    @abstractmethod
    def extract(self, content: str, file_path: str = "") -> tuple[str, ...]:
        """Extract items from a file's text.

        Args:
            content: Raw file text
            file_path: Repository-relative path of the file

        Returns:
            Extracted items in order of first appearance
        """
        pass


def unique(items: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates while keeping first-appearance order."""
    return tuple(dict.fromkeys(items))


def parent_directory(file_path: str) -> str:
    """Directory part of a repository-relative path ('' at root)."""
    if "/" not in file_path:
        return ""
    return file_path.rsplit("/", 1)[0]


def resolve_relative_path(directory: str, import_path: str) -> str:
    """Resolve a relative import against a directory.

    ``.`` segments are skipped and ``..`` pops one directory; popping past
    the repository root is a no-op.

    Example:
        >>> resolve_relative_path("src/app", "../lib/db")
        'src/lib/db'
    """
    result = [part for part in directory.split("/") if part]
    for part in import_path.split("/"):
        if not part or part == ".":
            continue
        if part == "..":
            if result:
                result.pop()
        else:
            result.append(part)
    return "/".join(result)


def strip_extension(path: str) -> str:
    """Remove the final extension from the last path segment."""
    return re.sub(r"\.\w+$", "", path)
