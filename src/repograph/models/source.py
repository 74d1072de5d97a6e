"""Source Collaborator Models.

Shapes exchanged with whatever supplies repository content:

- **TreeItem**: one entry of the recursive tree listing
- **RepoMeta**: repository metadata
- **RepoRef**: owner/repo identity used as the cache key
- **RepositorySource**: the protocol a source must satisfy
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, runtime_checkable


class TreeItemKind(str, Enum):
    """Kind of a tree entry."""
    BLOB = "blob"   # file
    TREE = "tree"   # directory


@dataclass(frozen=True)
class TreeItem:
    """An entry of a repository tree listing."""
    path: str
    kind: TreeItemKind = TreeItemKind.BLOB
    size: Optional[int] = None

    @property
    def is_file(self) -> bool:
        return self.kind is TreeItemKind.BLOB

    @classmethod
    def from_dict(cls, data: dict) -> "TreeItem":
        """Build from a GitHub git/trees entry (``type`` is blob or tree)."""
        return cls(
            path=data["path"],
            kind=TreeItemKind(data.get("type", "blob")),
            size=data.get("size"),
        )


@dataclass(frozen=True)
class RepoMeta:
    """Repository metadata reported by the source."""
    name: str
    full_name: str = ""
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    forks: int = 0
    default_branch: str = "main"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "fullName": self.full_name,
            "description": self.description,
            "language": self.language,
            "stars": self.stars,
            "forks": self.forks,
            "defaultBranch": self.default_branch,
        }


@dataclass(frozen=True)
class RepoRef:
    """Owner/repository pair identifying a repository."""
    owner: str
    repo: str

    @property
    def cache_key(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return self.cache_key


@runtime_checkable
class RepositorySource(Protocol):
    """Contract for repository content providers.

    ``get_file_content`` must return an empty string instead of raising
    when a single file cannot be retrieved.
    """

    async def get_meta(self, owner: str, repo: str) -> RepoMeta:
        ...

    async def get_tree(self, owner: str, repo: str, ref: str = "HEAD") -> list[TreeItem]:
        ...

    async def get_file_content(self, owner: str, repo: str, path: str) -> str:
        ...
