"""
Repository package for the document data access layer.
"""
from storedash.repositories.base import Document, DocumentStore, to_jsonable
from storedash.repositories.memory import MemoryDocumentStore
from storedash.repositories.sql import SqlDocumentStore

__all__ = [
    "Document",
    "DocumentStore",
    "MemoryDocumentStore",
    "SqlDocumentStore",
    "to_jsonable",
]
