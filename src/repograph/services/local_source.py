"""Local checkout source.

Serves a directory on disk through the ``RepositorySource`` contract so a
working copy can be analyzed without the GitHub API. ``owner`` and ``repo``
arguments are accepted for compatibility and ignored; everything is read
relative to ``root``.

Skipped while walking:
    - dotfiles and dot-directories (mirrors the remote tree listing)
    - paths matching ``AnalysisConfig.ignore_patterns``
    - paths ignored by the root ``.gitignore``
"""

import fnmatch
from pathlib import Path
from typing import Optional

from ..config import AnalysisConfig, get_config
from ..exceptions import RepositoryNotFoundError
from ..logging import get_logger
from ..models.source import RepoMeta, TreeItem, TreeItemKind

logger = get_logger(__name__)


class GitIgnoreRules:
    """Minimal reader for a root ``.gitignore`` (no nested files)."""

    def __init__(self, root: Path):
        self.patterns: list[tuple[str, bool]] = []  # (pattern, is_negation)
        path = root / ".gitignore"
        if path.is_file():
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Unreadable .gitignore at %s: %s", path, e)
                text = ""
            for line in text.splitlines():
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                negated = line.startswith("!")
                self.patterns.append((line[1:] if negated else line, negated))

    def is_ignored(self, relative_path: str, is_dir: bool = False) -> bool:
        ignored = False
        for pattern, negated in self.patterns:
            if self._matches(relative_path, pattern, is_dir):
                ignored = not negated
        return ignored

    @staticmethod
    def _matches(path: str, pattern: str, is_dir: bool) -> bool:
        if pattern.endswith("/"):
            if not is_dir:
                return False
            pattern = pattern[:-1]
        if "/" in pattern.strip("/"):
            return fnmatch.fnmatch(path, pattern.lstrip("/"))
        return fnmatch.fnmatch(path.rsplit("/", 1)[-1], pattern.lstrip("/"))


class LocalRepositorySource:
    """RepositorySource reading from a local directory."""

    def __init__(self, root: Path | str, config: Optional[AnalysisConfig] = None):
        self.root = Path(root).expanduser().resolve()
        self.config = config or get_config().analysis
        if not self.root.is_dir():
            raise RepositoryNotFoundError(f"Directory not found: {self.root}")
        self.gitignore = GitIgnoreRules(self.root)

    async def get_meta(self, owner: str = "", repo: str = "") -> RepoMeta:
        return RepoMeta(
            name=self.root.name,
            full_name=str(self.root),
            language=None,
            default_branch="local",
        )

    async def get_tree(self, owner: str = "", repo: str = "", ref: str = "HEAD") -> list[TreeItem]:
        return self.list_tree()

    def list_tree(self) -> list[TreeItem]:
        """Walk the directory and list files and folders in sorted order."""
        items: list[TreeItem] = []
        pending = [self.root]

        while pending:
            directory = pending.pop()
            try:
                entries = sorted(directory.iterdir(), key=lambda p: p.name)
            except OSError as e:
                logger.debug("Cannot list %s: %s", directory, e)
                continue

            subdirectories = []
            for entry in entries:
                if entry.name.startswith("."):
                    continue
                relative = entry.relative_to(self.root).as_posix()
                is_dir = entry.is_dir()
                if self._is_skipped(relative, is_dir):
                    continue

                if is_dir:
                    items.append(TreeItem(path=relative, kind=TreeItemKind.TREE))
                    subdirectories.append(entry)
                elif entry.is_file():
                    items.append(TreeItem(path=relative, size=entry.stat().st_size))

            pending.extend(reversed(subdirectories))

        return sorted(items, key=lambda item: item.path)

    def _is_skipped(self, relative: str, is_dir: bool) -> bool:
        # a directory is skipped when anything inside it would be
        if self.config.is_ignored(relative) or (is_dir and self.config.is_ignored(f"{relative}/x")):
            return True
        return self.gitignore.is_ignored(relative, is_dir)

    async def get_file_content(self, owner: str, repo: str, path: str) -> str:
        return self.read_file(path)

    def read_file(self, path: str) -> str:
        """Read a file below ``root``; anything unreadable yields ``""``."""
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root) or not target.is_file():
            return ""
        try:
            if target.stat().st_size > self.config.max_file_bytes:
                logger.debug("Skipping oversized file %s", path)
                return ""
            return target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", path, e)
            return ""
