"""Heuristic source extractors and schema parsers.

Every pattern family sits behind its own extractor class; ``ExtractorSet``
bundles one of each so a caller can swap any of them for a stricter,
language-aware implementation without touching the graph builder.
"""

from dataclasses import dataclass, field

from .base import BaseExtractor, resolve_relative_path
from .call_tracer import CallTracer
from .exports import ExportExtractor
from .external_apis import ExternalApiDetector
from .http_methods import HttpMethodDetector
from .imports import ImportExtractor
from .schema_parser import (
    BlockSchemaParser,
    TableSchemaParser,
    detect_schema_files,
    extract_schema_entities,
    parse_schema,
)

__all__ = [
    "BaseExtractor",
    "CallTracer",
    "ExportExtractor",
    "ExternalApiDetector",
    "HttpMethodDetector",
    "ImportExtractor",
    "ExtractorSet",
    "BlockSchemaParser",
    "TableSchemaParser",
    "detect_schema_files",
    "extract_schema_entities",
    "parse_schema",
    "resolve_relative_path",
]


@dataclass
class ExtractorSet:
    """The lexical extractors applied to each fetched file."""
    imports: BaseExtractor = field(default_factory=ImportExtractor)
    exports: BaseExtractor = field(default_factory=ExportExtractor)
    external_apis: BaseExtractor = field(default_factory=ExternalApiDetector)
    http_methods: BaseExtractor = field(default_factory=HttpMethodDetector)
    call_tracer: CallTracer = field(default_factory=CallTracer)
