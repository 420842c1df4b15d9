"""
DataTable Engine - Filtering, sorting, pagination and selection for tabular views.

This package turns an in-memory collection of uniform records into the rows a
table should display, driven by a declarative column schema, a free-text
search, a single-column sort and a page request.
"""

from .components.table import DataTable
from .core.columns import Column, ColumnSchema, SchemaError
from .core.query import PaginationRequest, QueryState, SortDirection, SortRequest
from .core.selection import SelectionTracker
from .core.state import TableStateManager
from .pipeline.evaluator import EvaluationResult, evaluate
from .pipeline.pages import compute_total_pages, visible_page_numbers

__version__ = "0.1.0"

__all__ = [
    # Core
    "Column",
    "ColumnSchema",
    "SchemaError",
    "QueryState",
    "SortDirection",
    "SortRequest",
    "PaginationRequest",
    "SelectionTracker",
    "TableStateManager",
    # Pipeline
    "evaluate",
    "EvaluationResult",
    # Components
    "DataTable",
    # Utilities
    "compute_total_pages",
    "visible_page_numbers",
]
