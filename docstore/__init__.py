"""File-backed JSON document store: one array of records per collection."""

from docstore.document_store import DocumentStore, DuplicateIdError, Page
from docstore.query import Condition, Filter, SortSpec, where

__all__ = [
    "Condition",
    "DocumentStore",
    "DuplicateIdError",
    "Filter",
    "Page",
    "SortSpec",
    "where",
]
