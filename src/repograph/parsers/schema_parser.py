"""Schema Parsers for Entity-Relationship Extraction.

This module turns schema definition files into a normalized entity model:

- **detect_schema_files**: picks schema files out of a path list
- **BlockSchemaParser**: block-model definitions (``model User { ... }``,
  the Prisma convention). Primary keys are marked ``@id``, relations
  ``@relation``.
- **TableSchemaParser**: SQL DDL (``CREATE TABLE [IF NOT EXISTS] name (...)``).
  Column definitions are split on raw commas, so a type argument such as
  ``DECIMAL(10,2)`` is cut at its comma and the fragment after it is skipped.
- **extract_schema_entities**: tries the block format then the table format
  per file, in path order.

Relations are resolved later, when the ERD is rendered, by matching a
relation field's type against another entity's name.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Optional

from ..constants import SCHEMA_FILE_PATTERNS, SQL_CONSTRAINT_KEYWORDS
from ..logging import get_logger
from ..models.schema import SchemaEntity, SchemaField

logger = get_logger(__name__)


def detect_schema_files(paths: Iterable[str]) -> list[str]:
    """Return the paths that follow a schema-file convention, in input order."""
    return [
        path for path in paths
        if any(pattern.search(path) for pattern in SCHEMA_FILE_PATTERNS)
    ]


class BlockSchemaParser:
    """Parse ``model Name { field Type @attr ... }`` blocks."""

    MODEL_PATTERN = re.compile(r"\bmodel\s+(\w+)\s*\{([^}]*)\}")
    FIELD_PATTERN = re.compile(r"^(\w+)\s+(\S+)")

    PRIMARY_MARKER = "@id"
    RELATION_MARKER = "@relation"

    @property
    def name(self) -> str:
        return "block"

    def parse(self, content: str) -> list[SchemaEntity]:
        content = content or ""
        entities = []
        # nothing after the last closing brace can complete a block
        end = content.rfind("}") + 1
        for match in self.MODEL_PATTERN.finditer(content, 0, end):
            entities.append(SchemaEntity(
                name=match.group(1),
                fields=tuple(self._parse_fields(match.group(2))),
            ))
        return entities

    def _parse_fields(self, body: str) -> list[SchemaField]:
        fields = []
        for line in (raw.strip() for raw in body.split("\n")):
            if not line or line.startswith("//") or line.startswith("@@"):
                continue
            match = self.FIELD_PATTERN.match(line)
            if not match:
                continue
            field_name, field_type = match.groups()
            fields.append(SchemaField(
                name=field_name,
                type=field_type.replace("?", "").replace("[]", ""),
                is_primary=self.PRIMARY_MARKER in line,
                is_relation=self.RELATION_MARKER in line,
            ))
        return fields


class TableSchemaParser:
    """Parse ``CREATE TABLE`` statements."""

    CREATE_TABLE_PATTERN = re.compile(
        r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?[`\"']?(\w+)[`\"']?\s*\(",
        re.IGNORECASE,
    )
    COLUMN_PATTERN = re.compile(r"^[`\"']?(\w+)[`\"']?\s+(\w+)")
    CONSTRAINT_PATTERN = re.compile(
        r"^(?:" + "|".join(SQL_CONSTRAINT_KEYWORDS) + r")\b", re.IGNORECASE
    )
    PRIMARY_KEY_PATTERN = re.compile(r"PRIMARY\s+KEY", re.IGNORECASE)
    REFERENCES_PATTERN = re.compile(r"\bREFERENCES\b", re.IGNORECASE)

    @property
    def name(self) -> str:
        return "table"

    def parse(self, content: str) -> list[SchemaEntity]:
        content = content or ""
        entities = []
        closers: Optional[dict[int, int]] = None
        for match in self.CREATE_TABLE_PATTERN.finditer(content):
            if closers is None:
                closers = _matching_parens(content)
            close = closers.get(match.end() - 1)
            if close is None:
                continue
            body = content[match.end():close]
            entities.append(SchemaEntity(
                name=match.group(1),
                fields=tuple(self._parse_columns(body)),
            ))
        return entities

    def _parse_columns(self, body: str) -> list[SchemaField]:
        fields = []
        for definition in (part.strip() for part in body.split(",")):
            if not definition or self.CONSTRAINT_PATTERN.match(definition):
                continue
            match = self.COLUMN_PATTERN.match(definition)
            if not match:
                continue
            fields.append(SchemaField(
                name=match.group(1),
                type=match.group(2),
                is_primary=bool(self.PRIMARY_KEY_PATTERN.search(definition)),
                is_relation=bool(self.REFERENCES_PATTERN.search(definition)),
            ))
        return fields


def _matching_parens(content: str) -> dict[int, int]:
    """Map the index of every balanced ``(`` to the index of its ``)``."""
    closers: dict[int, int] = {}
    stack: list[int] = []
    for index, char in enumerate(content):
        if char == "(":
            stack.append(index)
        elif char == ")" and stack:
            closers[stack.pop()] = index
    return closers


def parse_schema(content: str) -> list[SchemaEntity]:
    """Parse one file: block format first, table format as fallback."""
    entities = BlockSchemaParser().parse(content)
    if entities:
        return entities
    return TableSchemaParser().parse(content)


def extract_schema_entities(
    schema_paths: Sequence[str],
    contents: Mapping[str, str],
    merge: bool = False,
) -> tuple[list[SchemaEntity], Optional[str]]:
    """Build the schema model from the discovered schema files.

    Args:
        schema_paths: Schema files in path order
        contents: File text by path (missing or empty files are skipped)
        merge: Combine entities from every file instead of stopping at the
               first file that yields one; the first definition of a name wins

    Returns:
        Tuple of (entities, source path). The source is the chosen file, or
        None when nothing parsed or when merging.
    """
    merged: dict[str, SchemaEntity] = {}

    for path in schema_paths:
        content = contents.get(path)
        if not content:
            continue

        entities = parse_schema(content)
        if not entities:
            continue

        logger.debug("Parsed schema file", extra={"path": path, "entities": len(entities)})
        if not merge:
            return entities, path

        for entity in entities:
            merged.setdefault(entity.name, entity)

    return list(merged.values()), None
