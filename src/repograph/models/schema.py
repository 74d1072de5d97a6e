"""Schema entity models produced by the schema parsers."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SchemaField:
    """A single column or model field.

    Attributes:
        name: Field or column name
        type: Declared type token (optional/list markers stripped)
        is_primary: Declared as primary key
        is_relation: Declared as relation / foreign-key reference
    """
    name: str
    type: str
    is_primary: bool = False
    is_relation: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "isPrimary": self.is_primary,
            "isRelation": self.is_relation,
        }


@dataclass(frozen=True)
class SchemaEntity:
    """A parsed table or model definition with ordered fields."""
    name: str
    fields: tuple[SchemaField, ...] = field(default_factory=tuple)

    @property
    def primary_keys(self) -> list[SchemaField]:
        return [f for f in self.fields if f.is_primary]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
        }
