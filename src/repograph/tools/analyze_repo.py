"""Repository Analysis Tool.

Runs the full analysis pipeline for a repository:

1. Parse the repository identifier (``owner/repo`` or a GitHub URL)
2. Return the cached result when one exists
3. Fetch metadata and the tree listing concurrently
4. Fetch up to ``max_parsed_files`` parseable files in batches of
   ``fetch_batch_size``, plus the schema files
5. Build the structural graph, dependency edges and enrichment overlay
6. Extract schema entities, lay out the graph, render the diagrams
7. Summarize, then cache the result (only after every step succeeded)

The synchronous ``analyze(items, contents)`` entry point covers steps 5-6
and needs no network access.

Example Usage:
    result = await analyze_repository("https://github.com/acme/shop")
    print(result["summary"])

Author: RepoGraph Team
"""

import asyncio
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from ..config import Config, get_config
from ..constants import UNKNOWN_LANGUAGE
from ..exceptions import AnalysisError, InvalidRepositoryError, RepoGraphError
from ..logging import get_logger, log_operation_end, log_operation_start
from ..models.graph import GraphEdge, GraphNode, NodeKind, NodeRole
from ..models.schema import SchemaEntity
from ..models.source import RepoMeta, RepoRef, RepositorySource, TreeItem, TreeItemKind
from ..parsers import detect_schema_files, extract_schema_entities
from ..services.cache import AnalysisCaches
from ..services.github_client import GitHubSource, detect_primary_language, parse_github_url
from ..services.graph_builder import GraphBuilder, merge_enrichment
from ..services.layout import LayoutEngine
from ..services.local_source import LocalRepositorySource
from .generate_diagrams import DiagramGenerator

logger = get_logger(__name__)


@dataclass
class AnalysisResult:
    """Graph, schema and diagrams for one path list and content map."""
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    schema_entities: list[SchemaEntity]
    schema_source: Optional[str]
    schema_files: list[str]
    architecture_diagram: str
    erd_diagram: str
    logic_flows: dict[str, str]
    parsed_files: int = 0

    @property
    def endpoints(self) -> list[str]:
        return [node.id for node in self.nodes if node.kind is NodeKind.API]

    def count_role(self, *roles: NodeRole) -> int:
        return sum(1 for node in self.nodes if node.role in roles)

    @property
    def external_apis(self) -> list[str]:
        found: list[str] = []
        for node in self.nodes:
            for api in node.external_apis or ():
                if api not in found:
                    found.append(api)
        return found

    def to_dict(self) -> dict:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "schemaEntities": [entity.to_dict() for entity in self.schema_entities],
            "schemaSource": self.schema_source,
            "diagrams": {
                "architecture": self.architecture_diagram,
                "erd": self.erd_diagram,
                "logicFlows": dict(self.logic_flows),
            },
        }


def analyze(
    items: Sequence[Union[TreeItem, str]],
    contents: Mapping[str, str],
    config: Optional[Config] = None,
    schema_contents: Optional[Mapping[str, str]] = None,
    builder: Optional[GraphBuilder] = None,
) -> AnalysisResult:
    """Analyze a path list and the fetched file contents.

    Args:
        items: Tree listing (TreeItems or bare file paths)
        contents: Text of the fetched source files, by path
        config: Configuration (global config when omitted)
        schema_contents: Text of the schema files; ``contents`` when omitted
        builder: GraphBuilder to use, e.g. one with substituted extractors

    Returns:
        AnalysisResult with laid-out nodes, all edges, schema and diagrams
    """
    config = config or get_config()
    builder = builder or GraphBuilder()

    structure = builder.build_structure(items)
    dependency_edges = builder.build_dependency_edges(structure, contents)
    overlay = builder.build_enrichment(structure, contents)

    nodes = merge_enrichment(structure, overlay)
    edges = list(structure.edges) + dependency_edges

    file_paths = [node.id for node in structure.nodes if node.kind is not NodeKind.FOLDER]
    schema_files = detect_schema_files(file_paths)
    entities, schema_source = extract_schema_entities(
        schema_files,
        schema_contents if schema_contents is not None else contents,
        merge=config.schemas.merge_schema_files,
    )

    nodes = LayoutEngine(config.layout).layout(nodes, edges)

    generator = DiagramGenerator(config.diagram)
    return AnalysisResult(
        nodes=nodes,
        edges=edges,
        schema_entities=entities,
        schema_source=schema_source,
        schema_files=schema_files,
        architecture_diagram=generator.architecture(nodes, edges),
        erd_diagram=generator.erd(entities),
        logic_flows=generator.logic_flows(nodes, edges),
        parsed_files=sum(1 for path in contents if contents[path] and path in structure.node_ids),
    )


def build_summary(language: str, total_files: int, result: AnalysisResult) -> str:
    """One-paragraph description of the analyzed repository."""
    summary = (
        f"A {language} repository with {total_files} files. "
        f"Architecture: {result.count_role(NodeRole.ENTRY)} entry point(s), "
        f"{result.count_role(NodeRole.API, NodeRole.CONTROLLER)} API route(s), "
        f"{result.count_role(NodeRole.SERVICE)} service(s), "
        f"{result.count_role(NodeRole.MODEL)} model(s)."
    )
    apis = result.external_apis
    if apis:
        summary += f" External integrations: {', '.join(apis[:5])}."
    return summary


@dataclass
class RepositoryAnalysis:
    """A completed analysis of one repository."""
    ref: RepoRef
    meta: RepoMeta
    language: str
    tree: list[TreeItem]
    result: AnalysisResult
    elapsed_ms: int
    contents: dict[str, str] = field(default_factory=dict)

    @property
    def summary(self) -> str:
        return build_summary(self.language, self.total_files, self.result)

    @property
    def total_files(self) -> int:
        return sum(1 for item in self.tree if item.kind is TreeItemKind.BLOB)

    def stats(self, cached: bool = False) -> dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "totalFolders": sum(1 for item in self.tree if item.kind is TreeItemKind.TREE),
            "parsedFiles": self.result.parsed_files,
            "apiEndpoints": len(self.result.endpoints),
            "schemaFiles": len(self.result.schema_files),
            "entryPoints": self.result.count_role(NodeRole.ENTRY),
            "services": self.result.count_role(NodeRole.SERVICE),
            "models": self.result.count_role(NodeRole.MODEL),
            "externalApis": len(self.result.external_apis),
            "analysisTimeMs": self.elapsed_ms,
            "cached": cached,
        }

    def to_dict(self, cached: bool = False, include_contents: bool = False) -> dict[str, Any]:
        meta = self.meta.to_dict()
        meta["language"] = self.language
        graph = self.result.to_dict()
        logic_flows = graph["diagrams"]["logicFlows"]

        response = {
            "repository": self.ref.cache_key,
            "summary": self.summary,
            "meta": meta,
            "nodes": graph["nodes"],
            "edges": graph["edges"],
            "schemaEntities": graph["schemaEntities"],
            "schemaSource": graph["schemaSource"],
            "erdDiagram": self.result.erd_diagram,
            "logicFlows": logic_flows,
            "mermaid": {
                "flow": self.result.architecture_diagram,
                "sequence": next(iter(logic_flows.values()), ""),
            },
            "stats": self.stats(cached=cached),
        }
        if include_contents:
            response["fileContents"] = dict(self.contents)
        return response


class RepositoryAnalyzer:
    """Runs the analysis pipeline against a repository source.

    Caches are passed in explicitly, so analyzers only share results when
    they are handed the same ``AnalysisCaches``.
    """

    def __init__(
        self,
        source: RepositorySource,
        caches: Optional[AnalysisCaches] = None,
        config: Optional[Config] = None,
        builder: Optional[GraphBuilder] = None,
    ):
        self.source = source
        self.config = config or get_config()
        self.caches = caches or AnalysisCaches.from_config(self.config.cache)
        self.builder = builder or GraphBuilder()

    async def analyze_repository(self, repository: str, use_cache: bool = True) -> dict[str, Any]:
        """Analyze a repository given as URL or ``owner/repo``.

        Raises:
            InvalidRepositoryError: If the identifier cannot be parsed
        """
        ref = parse_github_url(repository)
        if ref is None:
            raise InvalidRepositoryError(
                f"Invalid repository '{repository}'. Expected github.com/owner/repo or owner/repo"
            )

        if use_cache:
            cached = self.caches.repos.get(ref.cache_key)
            if cached is not None:
                logger.info("Serving cached analysis for %s", ref)
                return cached

        analysis = await self.run(ref)
        if use_cache:
            self.caches.repos.set(ref.cache_key, analysis.to_dict(cached=True))
        return analysis.to_dict(cached=False)

    async def run(self, ref: RepoRef) -> RepositoryAnalysis:
        """Fetch and analyze ``ref`` without touching the result cache.

        Raises:
            RepoGraphError: On source failures (not found, unreachable)
            AnalysisError: On any unexpected failure inside the pipeline
        """
        start_time = log_operation_start(logger, "analyze_repository", repository=ref.cache_key)
        started = time.perf_counter()

        try:
            meta, tree = await asyncio.gather(
                self.source.get_meta(ref.owner, ref.repo),
                self.source.get_tree(ref.owner, ref.repo, "HEAD"),
            )
            contents = await self.fetch_contents(ref, tree)
            schema_contents = await self.fetch_schema_contents(ref, tree, contents)

            result = analyze(
                tree,
                contents,
                self.config,
                schema_contents=schema_contents,
                builder=self.builder,
            )
        except RepoGraphError:
            log_operation_end(logger, "analyze_repository", start_time, success=False, repository=ref.cache_key)
            raise
        except Exception as e:
            log_operation_end(logger, "analyze_repository", start_time, success=False, repository=ref.cache_key)
            raise AnalysisError(f"Failed to analyze {ref}: {e}") from e

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        log_operation_end(
            logger,
            "analyze_repository",
            start_time,
            repository=ref.cache_key,
            nodes=len(result.nodes),
            elapsed_ms=elapsed_ms,
        )

        return RepositoryAnalysis(
            ref=ref,
            meta=meta,
            language=meta.language or detect_primary_language(tree) or UNKNOWN_LANGUAGE,
            tree=list(tree),
            result=result,
            elapsed_ms=elapsed_ms,
            contents=contents,
        )

    async def _fetch_one(self, ref: RepoRef, path: str) -> str:
        try:
            return await self.source.get_file_content(ref.owner, ref.repo, path)
        except Exception as e:
            # a single failed file leaves its node unenriched
            logger.warning("Fetching %s from %s failed: %s", path, ref, e)
            return ""

    async def _fetch_batched(self, ref: RepoRef, paths: Sequence[str]) -> dict[str, str]:
        contents: dict[str, str] = {}
        batch_size = self.config.analysis.fetch_batch_size
        for i in range(0, len(paths), batch_size):
            batch = paths[i:i + batch_size]
            texts = await asyncio.gather(*(self._fetch_one(ref, path) for path in batch))
            for path, text in zip(batch, texts):
                if text:
                    contents[path] = text
        return contents

    async def fetch_contents(self, ref: RepoRef, tree: Sequence[TreeItem]) -> dict[str, str]:
        """Fetch the parseable source files, at most ``max_parsed_files``."""
        analysis = self.config.analysis
        paths = [
            item.path for item in tree
            if item.is_file and analysis.is_parseable(item.path)
        ][: analysis.max_parsed_files]
        return await self._fetch_batched(ref, paths)

    async def fetch_schema_contents(
        self,
        ref: RepoRef,
        tree: Sequence[TreeItem],
        contents: Mapping[str, str],
    ) -> dict[str, str]:
        """Fetch the schema files, reusing text already fetched."""
        paths = detect_schema_files(item.path for item in tree if item.is_file)
        paths = paths[: self.config.analysis.max_schema_files]

        schema_contents = {path: contents[path] for path in paths if path in contents}
        missing = [path for path in paths if path not in schema_contents]
        schema_contents.update(await self._fetch_batched(ref, missing))
        return schema_contents


async def run_analysis(
    repository: str,
    local: bool = False,
    caches: Optional[AnalysisCaches] = None,
) -> AnalysisResult:
    """Analyze a remote or local repository and return the graph result.

    Raises:
        InvalidRepositoryError: If a remote identifier cannot be parsed
        RepoGraphError: On source or pipeline failures
    """
    if local:
        source = LocalRepositorySource(repository)
        analyzer = RepositoryAnalyzer(source, caches=caches)
        analysis = await analyzer.run(RepoRef(owner="local", repo=source.root.name))
        return analysis.result

    ref = parse_github_url(repository)
    if ref is None:
        raise InvalidRepositoryError(f"Invalid repository '{repository}'")

    async with GitHubSource(caches=caches) as source:
        analyzer = RepositoryAnalyzer(source, caches=source.caches)
        analysis = await analyzer.run(ref)
    return analysis.result


async def analyze_repository(
    repository: str,
    include_contents: bool = False,
    use_cache: bool = True,
    caches: Optional[AnalysisCaches] = None,
) -> dict[str, Any]:
    """Analyze a GitHub repository.

    Args:
        repository: GitHub URL or ``owner/repo``
        include_contents: Add the fetched file texts under ``fileContents``
        use_cache: Serve and store results in ``caches.repos``
        caches: Caches to use; a fresh set when omitted

    Returns:
        The analysis response, or ``{"error": message}``
    """
    if not repository or not repository.strip():
        return {"error": "Repository URL is required"}

    try:
        async with GitHubSource(caches=caches) as source:
            analyzer = RepositoryAnalyzer(source, caches=source.caches)
            if include_contents:
                ref = parse_github_url(repository)
                if ref is None:
                    raise InvalidRepositoryError(f"Invalid repository '{repository}'")
                analysis = await analyzer.run(ref)
                return analysis.to_dict(include_contents=True)
            return await analyzer.analyze_repository(repository, use_cache=use_cache)
    except RepoGraphError as e:
        logger.error("Analysis of %s failed: %s", repository, e)
        return {"error": str(e)}


async def analyze_local_repository(
    path: Union[str, Path],
    include_contents: bool = False,
) -> dict[str, Any]:
    """Analyze a local checkout; results are never cached.

    Returns:
        The analysis response, or ``{"error": message}``
    """
    try:
        source = LocalRepositorySource(path)
        analyzer = RepositoryAnalyzer(source)
        analysis = await analyzer.run(RepoRef(owner="local", repo=source.root.name))
    except RepoGraphError as e:
        logger.error("Local analysis of %s failed: %s", path, e)
        return {"error": str(e)}
    return analysis.to_dict(include_contents=include_contents)
