"""
MCP tools for RepoGraph.

**Analysis**: analyze_repository, analyze_local_repository
**Diagram Generation**: generate_diagram (architecture, sequence, erd)
**File Summaries**: summarize_file
"""

from .analyze_repo import (
    AnalysisResult,
    RepositoryAnalysis,
    RepositoryAnalyzer,
    analyze,
    analyze_local_repository,
    analyze_repository,
    build_summary,
    run_analysis,
)
from .file_summary import build_file_summary, summarize_file
from .generate_diagrams import DiagramGenerator, DiagramResult, generate_diagram, sanitize_id

__all__ = [
    "AnalysisResult",
    "RepositoryAnalysis",
    "RepositoryAnalyzer",
    "analyze",
    "analyze_local_repository",
    "analyze_repository",
    "build_summary",
    "run_analysis",
    "build_file_summary",
    "summarize_file",
    "DiagramGenerator",
    "DiagramResult",
    "generate_diagram",
    "sanitize_id",
]
