"""
Constants and Fixed Tables for RepoGraph.

This module centralizes the magic strings, patterns and lookup tables used
by the analysis engine:

1. Language and extension tables used to tag file nodes
2. Import-resolution candidate order for the dependency overlay
3. Known-SDK table for external integration detection
4. Schema file conventions and SQL constraint keywords
5. Mermaid styling for architecture diagrams
6. MCP tool names

Usage:
    from repograph.constants import (
        EXTENSION_TO_LANGUAGE,
        IMPORT_RESOLUTION_SUFFIXES,
        SDK_PATTERNS,
    )

Author: RepoGraph Team
"""

import re
from enum import Enum
from pathlib import Path


# ============================================================================
# Application Metadata
# ============================================================================

APPLICATION_NAME = "RepoGraph"
APPLICATION_VERSION = "1.0.0"
APPLICATION_DESCRIPTION = "Structural and architectural maps for any source repository"

DEFAULT_DATA_DIRECTORY = Path.home() / ".repograph"
DEFAULT_LOG_DIRECTORY = DEFAULT_DATA_DIRECTORY / "logs"


# ============================================================================
# Languages
# ============================================================================

# Display language for a lowercase file extension (without the dot)
EXTENSION_TO_LANGUAGE = {
    "ts": "TypeScript",
    "tsx": "TypeScript",
    "js": "JavaScript",
    "jsx": "JavaScript",
    "py": "Python",
    "go": "Go",
    "rs": "Rust",
    "java": "Java",
    "rb": "Ruby",
    "php": "PHP",
    "json": "JSON",
    "yaml": "YAML",
    "yml": "YAML",
    "md": "Markdown",
    "css": "CSS",
    "scss": "SCSS",
    "html": "HTML",
    "sql": "SQL",
    "prisma": "Prisma",
    "toml": "TOML",
    "xml": "XML",
    "sh": "Shell",
}

# Extensions counted when guessing a repository's primary language
PRIMARY_LANGUAGE_EXTENSIONS = {
    "ts": "TypeScript",
    "tsx": "TypeScript",
    "js": "JavaScript",
    "jsx": "JavaScript",
    "py": "Python",
    "go": "Go",
    "rs": "Rust",
    "java": "Java",
    "rb": "Ruby",
    "php": "PHP",
    "cs": "C#",
    "cpp": "C++",
    "c": "C",
    "swift": "Swift",
    "kt": "Kotlin",
}

UNKNOWN_LANGUAGE = "Unknown"

# Source files whose content is fetched and run through the extractors
DEFAULT_PARSEABLE_EXTENSIONS = ["ts", "tsx", "js", "jsx", "py", "go", "rs", "java", "rb"]


# ============================================================================
# Import Resolution
# ============================================================================

# Probed in order against the node-id set; the first existing candidate wins
IMPORT_RESOLUTION_SUFFIXES = (
    "",
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    "/index.ts",
    "/index.tsx",
    "/index.js",
    ".py",
)


# ============================================================================
# HTTP
# ============================================================================

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


# ============================================================================
# External Integrations
# ============================================================================

# Known SDK / product names mapped to a display label
SDK_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"stripe", re.IGNORECASE), "Stripe API"),
    (re.compile(r"firebase", re.IGNORECASE), "Firebase"),
    (re.compile(r"aws-sdk|@aws-sdk|boto3", re.IGNORECASE), "AWS SDK"),
    (re.compile(r"supabase", re.IGNORECASE), "Supabase"),
    (re.compile(r"prisma", re.IGNORECASE), "Prisma ORM"),
    (re.compile(r"mongoose|mongodb|pymongo", re.IGNORECASE), "MongoDB"),
    (re.compile(r"\bpg\b|postgres|psycopg", re.IGNORECASE), "PostgreSQL"),
    (re.compile(r"redis", re.IGNORECASE), "Redis"),
    (re.compile(r"sendgrid", re.IGNORECASE), "SendGrid"),
    (re.compile(r"twilio", re.IGNORECASE), "Twilio"),
    (re.compile(r"openai", re.IGNORECASE), "OpenAI API"),
    (re.compile(r"anthropic", re.IGNORECASE), "Anthropic API"),
    (re.compile(r"googleapis|@google-cloud|google\.cloud", re.IGNORECASE), "Google Cloud"),
]

# Placeholder substituted for interpolated template-literal segments
URL_PLACEHOLDER = "{...}"


# ============================================================================
# Schema Files
# ============================================================================

SCHEMA_FILE_PATTERNS = [
    re.compile(r"schema\.prisma$"),
    re.compile(r"\.sql$"),
    re.compile(r"models\.py$"),
    re.compile(r"schema\.(ts|js)$"),
    re.compile(r"migrations?/"),
]

SQL_CONSTRAINT_KEYWORDS = ("PRIMARY", "FOREIGN", "UNIQUE", "INDEX", "KEY", "CONSTRAINT")


# ============================================================================
# Diagrams
# ============================================================================

# Mermaid classDef per role; roles missing here are rendered unstyled
ROLE_CLASS_DEFS = {
    "entry": "fill:#22c55e,stroke:#16a34a,color:#fff",
    "controller": "fill:#3b82f6,stroke:#2563eb,color:#fff",
    "api": "fill:#a855f7,stroke:#9333ea,color:#fff",
    "service": "fill:#06b6d4,stroke:#0891b2,color:#fff",
    "model": "fill:#f97316,stroke:#ea580c,color:#fff",
    "util": "fill:#6b7280,stroke:#4b5563,color:#fff",
}

DEFAULT_EDGE_LABEL = "imports"
DEFAULT_REQUEST_LABEL = "Request"
DEFAULT_SERVICE_CALL = "process"

# Definitions listed by name in a file summary before "and N more"
SUMMARY_MAX_DEFINITIONS = 5


class DiagramType(str, Enum):
    """Types of diagrams the generators can produce."""

    ARCHITECTURE = "architecture"
    SEQUENCE = "sequence"
    ERD = "erd"


# ============================================================================
# MCP Tool Names
# ============================================================================

class MCPToolName(str, Enum):
    """
    Names of MCP tools exposed by this server.

    These must match exactly what's registered in server.py.
    """

    ANALYZE_REPOSITORY = "analyze_repository"
    ANALYZE_LOCAL_REPOSITORY = "analyze_local_repository"
    GENERATE_DIAGRAM = "generate_diagram"
    SUMMARIZE_FILE = "summarize_file"
    GET_CACHE_STATS = "get_cache_stats"
