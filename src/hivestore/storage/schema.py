"""Table and user-defined-type schema documents.

Schemas are declared in two JSON documents using the column-family type
vocabulary:

    tables.json
        {"tables": {
            "commands_by_device": {
                "fields": {"id": "bigint", "device_id": "text", "command": "text",
                           "timestamp": "timestamp", "parameters": "text"},
                "primaryKey": ["device_id"],
                "clusteringKey": ["timestamp", "id"],
                "groups": ["commands", "command_updates"]
            }}}

    user_types.json
        {"types": {"geo": {"lat": "double", "lon": "double"}}}

A field type is a scalar (``text``, ``bigint``, ...), a collection
(``map<text, text>``, ``list<int>``, ``set<text>``), a declared
user-defined type, or any of these wrapped in ``frozen<...>``.
"""

import json
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hivestore.contracts import SchemaDefinitionError, TableGroup

SCALAR_TYPES = frozenset(
    {
        "ascii",
        "bigint",
        "blob",
        "boolean",
        "counter",
        "date",
        "decimal",
        "double",
        "float",
        "inet",
        "int",
        "smallint",
        "text",
        "time",
        "timestamp",
        "timeuuid",
        "tinyint",
        "uuid",
        "varchar",
        "varint",
    }
)
COLLECTION_TYPES = frozenset({"map", "list", "set", "tuple"})


def split_type(type_name: str) -> tuple[str, list[str]]:
    """Split a type expression into its base name and type arguments.

    ``frozen<...>`` is unwrapped since it does not change the stored shape.

    >>> split_type("map<text, frozen<list<int>>>")
    ('map', ['text', 'frozen<list<int>>'])
    """
    t = type_name.strip().lower()
    while t.startswith("frozen<") and t.endswith(">"):
        t = t[len("frozen<") : -1].strip()
    if "<" not in t:
        return t, []
    if not t.endswith(">"):
        raise SchemaDefinitionError(f"Malformed type expression: {type_name!r}")
    base, inner = t.split("<", 1)
    inner = inner[:-1]

    args: list[str] = []
    depth = 0
    current = ""
    for ch in inner:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        if ch == "," and depth == 0:
            args.append(current.strip())
            current = ""
            continue
        current += ch
    if depth != 0:
        raise SchemaDefinitionError(f"Unbalanced type expression: {type_name!r}")
    args.append(current.strip())
    return base.strip(), args


def referenced_udts(type_name: str) -> set[str]:
    """Return the user-defined type names a type expression refers to."""
    base, args = split_type(type_name)
    if base in COLLECTION_TYPES:
        found: set[str] = set()
        for arg in args:
            found |= referenced_udts(arg)
        return found
    if base in SCALAR_TYPES:
        return set()
    return {base}


def is_structured(type_name: str) -> bool:
    """True for collections and user-defined types (stored as documents)."""
    base, _ = split_type(type_name)
    return base not in SCALAR_TYPES


class _SchemaModel(BaseModel):
    model_config = {
        "frozen": True,
        "extra": "forbid",
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class UDTSchema(_SchemaModel):
    """A user-defined type: a named group of typed fields."""

    name: str
    fields: dict[str, str] = Field(min_length=1)


class TableSchema(_SchemaModel):
    """A storage table and the table groups it belongs to."""

    name: str
    fields: dict[str, str] = Field(min_length=1)
    primary_key: list[str] = Field(min_length=1)
    clustering_key: list[str] = Field(default_factory=list)
    groups: list[TableGroup] = Field(default_factory=list)

    @field_validator("fields")
    @classmethod
    def validate_field_types(cls, v: dict[str, str]) -> dict[str, str]:
        for column, type_name in v.items():
            if not type_name or not type_name.strip():
                raise ValueError(f"column '{column}' has an empty type")
        return v

    @model_validator(mode="after")
    def validate_keys_are_columns(self) -> Self:
        for column in [*self.primary_key, *self.clustering_key]:
            if column not in self.fields:
                raise ValueError(
                    f"key column '{column}' is not a field of table '{self.name}'"
                )
        return self

    @property
    def columns(self) -> list[str]:
        return list(self.fields)

    def belongs_to(self, group: TableGroup) -> bool:
        return group in self.groups


class SchemaSet(BaseModel):
    """Every table and user-defined type the plugin requires.

    Immutable once loaded. Table names and type names are unique, and every
    non-scalar field type refers to a declared user-defined type.
    """

    model_config = {"frozen": True}

    tables: tuple[TableSchema, ...] = ()
    user_types: tuple[UDTSchema, ...] = ()

    @model_validator(mode="after")
    def validate_references(self) -> Self:
        _require_unique("table", [t.name for t in self.tables])
        _require_unique("user-defined type", [u.name for u in self.user_types])

        declared = {u.name.lower() for u in self.user_types}
        owners: list[tuple[str, dict[str, str]]] = [
            (f"table '{t.name}'", t.fields) for t in self.tables
        ]
        owners += [(f"type '{u.name}'", u.fields) for u in self.user_types]
        for owner, fields in owners:
            for column, type_name in fields.items():
                missing = referenced_udts(type_name) - declared
                if missing:
                    raise ValueError(
                        f"{owner} column '{column}' uses undeclared type(s): "
                        f"{', '.join(sorted(missing))}"
                    )
        return self

    @property
    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def table(self, name: str) -> TableSchema:
        for t in self.tables:
            if t.name == name:
                return t
        raise KeyError(name)

    def user_type(self, name: str) -> UDTSchema | None:
        lowered = name.lower()
        for u in self.user_types:
            if u.name.lower() == lowered:
                return u
        return None

    def tables_in_group(self, group: TableGroup) -> tuple[str, ...]:
        """Names of tables belonging to a group, in declaration order."""
        return tuple(t.name for t in self.tables if t.belongs_to(group))

    @classmethod
    def from_documents(
        cls,
        tables_doc: dict[str, Any],
        types_doc: dict[str, Any] | None = None,
    ) -> Self:
        """Build a schema set from decoded schema documents.

        Raises:
            SchemaDefinitionError: If either document is malformed
        """
        raw_tables = tables_doc.get("tables")
        if not isinstance(raw_tables, dict):
            raise SchemaDefinitionError("tables document must contain a 'tables' object")
        raw_types: Any = {} if types_doc is None else types_doc.get("types")
        if not isinstance(raw_types, dict):
            raise SchemaDefinitionError("types document must contain a 'types' object")

        try:
            tables = tuple(
                TableSchema.model_validate({"name": name, **body})
                for name, body in raw_tables.items()
            )
            user_types = tuple(
                UDTSchema(name=name, fields=fields) for name, fields in raw_types.items()
            )
            return cls(tables=tables, user_types=user_types)
        except ValidationError as e:
            raise SchemaDefinitionError(f"Invalid schema definition: {e}") from e


def _require_unique(kind: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name.lower() in seen:
            raise ValueError(f"duplicate {kind} name: '{name}'")
        seen.add(name.lower())


def load_schema_set(tables_path: Path, user_types_path: Path | None = None) -> SchemaSet:
    """Load and validate the schema documents.

    Args:
        tables_path: JSON document with a ``tables`` object
        user_types_path: Optional JSON document with a ``types`` object

    Returns:
        Validated SchemaSet

    Raises:
        FileNotFoundError: If a document doesn't exist
        SchemaDefinitionError: If a document is not valid JSON or not a valid schema
    """
    tables_doc = _read_json(tables_path)
    types_doc = _read_json(user_types_path) if user_types_path is not None else None
    return SchemaSet.from_documents(tables_doc, types_doc)


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SchemaDefinitionError(f"Schema file {path} is not valid JSON: {e}") from e
    if not isinstance(doc, dict):
        raise SchemaDefinitionError(f"Schema file {path} must contain a JSON object")
    return doc
