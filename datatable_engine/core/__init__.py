"""Core infrastructure for datatable_engine."""

from .columns import Column, ColumnSchema, SchemaError
from .query import PaginationRequest, QueryState, SortDirection, SortRequest
from .selection import SelectionTracker
from .state import TableStateManager

__all__ = [
    "Column",
    "ColumnSchema",
    "SchemaError",
    "QueryState",
    "SortDirection",
    "SortRequest",
    "PaginationRequest",
    "SelectionTracker",
    "TableStateManager",
]
