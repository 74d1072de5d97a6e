"""GitHub Repository Source.

Implements the ``RepositorySource`` contract on top of the GitHub REST API
using ``httpx.AsyncClient``:

- ``get_meta``: ``GET /repos/{owner}/{repo}``
- ``get_tree``: ``GET /repos/{owner}/{repo}/git/trees/{ref}?recursive=1``,
  dotfiles removed, cached per owner/repo
- ``get_file_content``: ``GET /repos/{owner}/{repo}/contents/{path}``,
  base64-decoded, cached per owner/repo/path; any failure yields ``""``

Example:
    >>> async with GitHubSource(caches=AnalysisCaches.from_config()) as source:
    ...     meta = await source.get_meta("vercel", "next.js")
"""

import base64
import re
from collections import Counter
from collections.abc import Iterable
from typing import Optional
from urllib.parse import quote

import httpx

from ..config import GitHubConfig, get_config
from ..constants import PRIMARY_LANGUAGE_EXTENSIONS, UNKNOWN_LANGUAGE
from ..exceptions import RepositoryNotFoundError, SourceError
from ..logging import get_logger
from ..models.source import RepoMeta, RepoRef, TreeItem
from .cache import AnalysisCaches

logger = get_logger(__name__)

_URL_PATTERNS = [
    re.compile(r"github\.com/([^/\s]+)/([^/\s?#]+)"),
    re.compile(r"^([^/\s]+)/([^/\s?#]+)$"),
]


def parse_github_url(text: str) -> Optional[RepoRef]:
    """Extract owner and repository from a GitHub URL or ``owner/repo``.

    Returns None for empty or unrecognised input.

    Example:
        >>> parse_github_url("https://github.com/vercel/next.js.git")
        RepoRef(owner='vercel', repo='next.js')
    """
    text = (text or "").strip()
    if not text:
        return None

    for pattern in _URL_PATTERNS:
        match = pattern.search(text)
        if match:
            owner, repo = match.group(1), re.sub(r"\.git$", "", match.group(2))
            if owner and repo:
                return RepoRef(owner=owner, repo=repo)
    return None


def detect_primary_language(items: Iterable[TreeItem]) -> str:
    """Most frequent known source language among the blobs of a tree."""
    counts: Counter = Counter()
    for item in items:
        if not item.is_file or "." not in item.path:
            continue
        ext = item.path.rsplit(".", 1)[-1].lower()
        if ext in PRIMARY_LANGUAGE_EXTENSIONS:
            counts[ext] += 1

    if not counts:
        return UNKNOWN_LANGUAGE
    # most_common keeps first-seen order for ties
    return PRIMARY_LANGUAGE_EXTENSIONS[counts.most_common(1)[0][0]]


class GitHubSource:
    """RepositorySource backed by the GitHub REST API."""

    def __init__(
        self,
        caches: Optional[AnalysisCaches] = None,
        config: Optional[GitHubConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or get_config().github
        self.caches = caches or AnalysisCaches.from_config()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.config.api_url,
            headers=self._headers(),
            timeout=self.config.timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.config.user_agent,
        }
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    async def __aenter__(self) -> "GitHubSource":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, url: str, owner: str, repo: str, **params) -> dict:
        try:
            response = await self._client.get(url, params=params or None)
        except httpx.RequestError as e:
            logger.error("GitHub request failed: %s", e)
            raise SourceError(f"Could not reach GitHub for {owner}/{repo}: {e}") from e

        if response.status_code == 404:
            raise RepositoryNotFoundError(f"Repository {owner}/{repo} not found")
        if response.status_code != 200:
            logger.warning("GitHub returned %s for %s", response.status_code, url)
            raise SourceError(f"GitHub returned HTTP {response.status_code} for {owner}/{repo}")
        return response.json()

    async def get_meta(self, owner: str, repo: str) -> RepoMeta:
        data = await self._get_json(f"/repos/{owner}/{repo}", owner, repo)
        return RepoMeta(
            name=data.get("name", repo),
            full_name=data.get("full_name", f"{owner}/{repo}"),
            description=data.get("description"),
            language=data.get("language"),
            stars=data.get("stargazers_count", 0),
            forks=data.get("forks_count", 0),
            default_branch=data.get("default_branch", "main"),
        )

    async def get_tree(self, owner: str, repo: str, ref: str = "HEAD") -> list[TreeItem]:
        cache_key = f"{owner}/{repo}"
        cached = self.caches.trees.get(cache_key)
        if cached is not None:
            return cached

        data = await self._get_json(
            f"/repos/{owner}/{repo}/git/trees/{quote(ref, safe='')}", owner, repo, recursive="1"
        )
        items = [
            TreeItem.from_dict(entry)
            for entry in data.get("tree", [])
            if entry.get("path")
            and not entry["path"].startswith(".")
            # submodules are listed as "commit"
            and entry.get("type", "blob") in ("blob", "tree")
        ]
        if data.get("truncated"):
            logger.warning("Tree listing for %s was truncated by GitHub", cache_key)

        self.caches.trees.set(cache_key, items)
        logger.info("Fetched tree for %s (%d items)", cache_key, len(items))
        return items

    async def get_file_content(self, owner: str, repo: str, path: str) -> str:
        cache_key = f"{owner}/{repo}/{path}"
        cached = self.caches.files.get(cache_key)
        if cached is not None:
            return cached

        content = ""
        try:
            response = await self._client.get(f"/repos/{owner}/{repo}/contents/{quote(path)}")
            if response.status_code == 200:
                data = response.json()
                if isinstance(data, dict) and isinstance(data.get("content"), str):
                    content = base64.b64decode(data["content"]).decode("utf-8", errors="replace")
            else:
                logger.debug("Content fetch for %s returned %s", cache_key, response.status_code)
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Content fetch for %s failed: %s", cache_key, e)

        self.caches.files.set(cache_key, content)
        return content
