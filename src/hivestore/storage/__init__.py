"""Storage layer: schema documents, the backend protocol and built-in backends."""

from hivestore.storage.protocols import StorageBackendProtocol
from hivestore.storage.schema import (
    SchemaSet,
    TableSchema,
    UDTSchema,
    load_schema_set,
)
from hivestore.storage.sql_backend import SQLStorageBackend

__all__ = [
    "SQLStorageBackend",
    "SchemaSet",
    "StorageBackendProtocol",
    "TableSchema",
    "UDTSchema",
    "load_schema_set",
]
