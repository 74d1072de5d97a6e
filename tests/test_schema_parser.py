"""
Tests for schema detection and parsing.

Tests cover:
- Schema file detection
- Block (Prisma-style) model parsing
- SQL CREATE TABLE parsing, including the raw comma split
- File selection: first non-empty file wins, or merge across files

Author: RepoGraph Team
"""

import time

from repograph.models.schema import SchemaField
from repograph.parsers import (
    BlockSchemaParser,
    TableSchemaParser,
    detect_schema_files,
    extract_schema_entities,
    parse_schema,
)


PRISMA_SCHEMA = """
datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

model User {
  id    Int     @id @default(autoincrement())
  email String  @unique
  name  String?
  posts Post[]
  // audit fields come later
  @@index([email])
}

model Post {
  id       Int  @id
  author   User @relation(fields: [authorId], references: [id])
  authorId Int
}
"""


class TestDetectSchemaFiles:
    """Tests for detect_schema_files."""

    def test_conventions(self):
        """Test the recognized schema file conventions, in input order."""
        paths = [
            "src/index.ts",
            "prisma/schema.prisma",
            "db/init.sql",
            "app/models.py",
            "src/db/schema.ts",
            "migrations/0001_initial.py",
            "README.md",
        ]
        assert detect_schema_files(paths) == [
            "prisma/schema.prisma",
            "db/init.sql",
            "app/models.py",
            "src/db/schema.ts",
            "migrations/0001_initial.py",
        ]

    def test_no_schema_files(self):
        """Test a listing without schema files."""
        assert detect_schema_files(["a.ts", "b.py"]) == []


class TestBlockSchemaParser:
    """Tests for Prisma-style model blocks."""

    def test_models_and_fields(self):
        """Test entity names and field order."""
        entities = BlockSchemaParser().parse(PRISMA_SCHEMA)

        assert [e.name for e in entities] == ["User", "Post"]
        assert [f.name for f in entities[0].fields] == ["id", "email", "name", "posts"]

    def test_markers(self):
        """Test primary key and relation markers."""
        user, post = BlockSchemaParser().parse(PRISMA_SCHEMA)

        assert user.fields[0] == SchemaField(name="id", type="Int", is_primary=True)
        assert post.fields[1] == SchemaField(name="author", type="User", is_relation=True)
        assert [f.name for f in user.primary_keys] == ["id"]

    def test_type_markers_stripped(self):
        """Test that optional and list markers are removed from types."""
        user = BlockSchemaParser().parse(PRISMA_SCHEMA)[0]

        assert user.fields[2].type == "String"
        assert user.fields[3].type == "Post"
        assert user.fields[3].is_relation is False

    def test_datasource_block_ignored(self):
        """Test that non-model blocks produce no entity."""
        assert BlockSchemaParser().parse('datasource db {\n  provider = "sqlite"\n}') == []


class TestTableSchemaParser:
    """Tests for SQL DDL parsing."""

    def test_simple_table(self):
        """Test a single-line CREATE TABLE."""
        entities = TableSchemaParser().parse("CREATE TABLE users (id INT PRIMARY KEY, name TEXT)")

        assert len(entities) == 1
        assert entities[0].name == "users"
        assert entities[0].fields == (
            SchemaField(name="id", type="INT", is_primary=True),
            SchemaField(name="name", type="TEXT"),
        )

    def test_if_not_exists_and_references(self):
        """Test IF NOT EXISTS, quoted names, references and constraint lines."""
        sql = """
        create table if not exists "orders" (
            id SERIAL PRIMARY KEY,
            user_id INT REFERENCES users(id),
            total INT NOT NULL,
            CONSTRAINT positive CHECK (total > 0),
            UNIQUE (user_id)
        );
        """
        entity = TableSchemaParser().parse(sql)[0]

        assert entity.name == "orders"
        assert [f.name for f in entity.fields] == ["id", "user_id", "total"]
        assert entity.fields[1].is_relation is True
        assert entity.fields[1].type == "INT"

    def test_type_arguments_split_on_comma(self):
        """Test that a comma inside a type argument cuts the definition."""
        entity = TableSchemaParser().parse("CREATE TABLE t (price DECIMAL(10,2), qty INT)")[0]

        assert [(f.name, f.type) for f in entity.fields] == [("price", "DECIMAL"), ("qty", "INT")]

    def test_multiple_tables(self):
        """Test several statements in one file."""
        sql = "CREATE TABLE a (id INT);\nCREATE TABLE b (id INT);"
        assert [e.name for e in TableSchemaParser().parse(sql)] == ["a", "b"]

    def test_unbalanced_statement_skipped(self):
        """Test that a statement without a closing paren is dropped."""
        assert TableSchemaParser().parse("CREATE TABLE broken (id INT") == []

    def test_balanced_statement_after_unbalanced(self):
        """Test that a complete statement inside an unclosed one still parses."""
        entities = TableSchemaParser().parse("CREATE TABLE a (id INT, CREATE TABLE b (x INT)")

        assert [e.name for e in entities] == ["b"]
        assert entities[0].fields == (SchemaField(name="x", type="INT"),)

    def test_repeated_unclosed_statements_are_fast(self):
        """Test that unclosed statements do not rescan the rest of the file."""
        started = time.perf_counter()
        entities = parse_schema("CREATE TABLE t (" * 4000)

        assert entities == []
        assert time.perf_counter() - started < 2.0

    def test_repeated_unclosed_models_are_fast(self):
        """Test that unclosed model blocks do not rescan the rest of the file."""
        started = time.perf_counter()
        entities = BlockSchemaParser().parse("model M {\n  id Int\n" * 4000)

        assert entities == []
        assert time.perf_counter() - started < 2.0


class TestParseSchema:
    """Tests for format fallback and file selection."""

    def test_block_format_first(self):
        """Test that block models win over DDL in the same file."""
        content = PRISMA_SCHEMA + "\nCREATE TABLE other (id INT);"
        assert [e.name for e in parse_schema(content)] == ["User", "Post"]

    def test_table_fallback(self):
        """Test that DDL is parsed when there are no model blocks."""
        assert [e.name for e in parse_schema("CREATE TABLE users (id INT)")] == ["users"]

    def test_first_non_empty_file_wins(self):
        """Test that a file without entities is skipped."""
        contents = {
            "db/empty.sql": "-- nothing yet",
            "prisma/schema.prisma": PRISMA_SCHEMA,
            "db/init.sql": "CREATE TABLE users (id INT)",
        }
        entities, source = extract_schema_entities(
            ["db/empty.sql", "prisma/schema.prisma", "db/init.sql"], contents
        )

        assert source == "prisma/schema.prisma"
        assert [e.name for e in entities] == ["User", "Post"]

    def test_missing_contents_skipped(self):
        """Test that files without fetched text are skipped."""
        entities, source = extract_schema_entities(["a.sql", "b.sql"], {"b.sql": "CREATE TABLE b (id INT)"})

        assert source == "b.sql"
        assert entities[0].name == "b"

    def test_merge(self):
        """Test merging entities from every file, first definition winning."""
        contents = {
            "a.sql": "CREATE TABLE users (id INT)",
            "b.sql": "CREATE TABLE users (uuid TEXT);\nCREATE TABLE posts (id INT)",
        }
        entities, source = extract_schema_entities(["a.sql", "b.sql"], contents, merge=True)

        assert source is None
        assert [e.name for e in entities] == ["users", "posts"]
        assert entities[0].fields[0].name == "id"

    def test_nothing_parsed(self):
        """Test the empty result."""
        assert extract_schema_entities(["a.sql"], {"a.sql": "SELECT 1"}) == ([], None)
