"""
RepoGraph - Structural and Architectural Maps for Any Repository.

This package turns a repository tree plus the text of its source files into
a typed graph of folders and files, dependency edges between files, an
architectural role for each file, a schema model, and Mermaid diagrams.

Key Features:
    - **Structural Graph**: Folder/file nodes and parent-child tree edges
    - **Dependency Overlay**: Relative imports resolved into import/call edges
    - **Role Classification**: entry, controller, api, service, model, util,
      config, test
    - **Schema Extraction**: Prisma-style model blocks and SQL DDL
    - **Diagrams**: Mermaid architecture, per-endpoint sequence, and ERD

Architecture:
    - server.py: MCP protocol handler and tool registration
    - cli.py: click command line interface
    - tools/: Analysis pipeline and diagram generation
    - services/: Role classifier, graph builder, layout, caches, sources
    - parsers/: Regex-based extractors and schema parsers
    - models/: Graph, schema and source data models

Extraction is heuristic and best-effort: extractors never raise on odd
input, and unresolved imports are dropped rather than reported.

Author: RepoGraph Team
"""

__version__ = "1.0.0"
__author__ = "RepoGraph Team"
__description__ = "Structural and architectural maps for any source repository"

# Public API
from repograph.constants import (
    APPLICATION_NAME,
    APPLICATION_VERSION,
    DiagramType,
    MCPToolName,
)

from repograph.logging import (
    get_logger,
    setup_logging,
)

__all__ = [
    # Metadata
    "__version__",
    "__author__",
    "__description__",

    # Constants
    "APPLICATION_NAME",
    "APPLICATION_VERSION",
    "DiagramType",
    "MCPToolName",

    # Logging
    "get_logger",
    "setup_logging",
]
