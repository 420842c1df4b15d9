"""Pipeline evaluator: filter, then sort, then slice the page window."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
import polars as pl

from ..core.columns import Column, ColumnSchema
from ..core.query import QueryState, SortRequest
from .frame import ROW_INDEX, build_frame, compute_frame_hash, to_frame_text, value_column
from .pages import compute_total_pages, page_bounds, page_label

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """Output of one evaluation.

    Attributes:
        rows: Visible records, the original objects in display order
        total_pages: max(1, ceil(total_rows / items_per_page))
        total_rows: Number of records that passed the filter
        page: The page that was requested (not corrected)
        items_per_page: Page size used
        sort: The sort that was applied, None if none was (or it was ignored)
        data_hash: Hash of the visible row positions and pagination
        schema: Column schema the rows were evaluated against
    """

    rows: List[Any]
    total_pages: int
    total_rows: int
    page: int
    items_per_page: int
    sort: Optional[SortRequest] = None
    data_hash: str = ""
    schema: Optional[ColumnSchema] = field(default=None, repr=False)

    @property
    def is_page_in_range(self) -> bool:
        return 1 <= self.page <= self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def page_label(self) -> str:
        return page_label(self.page, self.total_pages)

    def to_pandas(self, columns: Optional[Iterable[Column]] = None) -> pd.DataFrame:
        """
        Visible window as a pandas DataFrame for a rendering collaborator.

        Headers are the column titles and cells are the raw extracted
        values, one row per visible record.

        Args:
            columns: Columns to project. Defaults to the evaluated schema.

        Returns:
            pandas DataFrame with one row per visible record
        """
        if columns is None:
            columns = self.schema if self.schema is not None else []
        columns = list(columns)
        return pd.DataFrame(
            [[column.extract(record) for column in columns] for record in self.rows],
            columns=[column.title for column in columns],
        )


def filter_frame(frame: pl.DataFrame, schema: ColumnSchema, filter_text: str) -> pl.DataFrame:
    """
    Keep rows where any column contains ``filter_text``, case-insensitively.

    Every column takes part, sortable or not. The text is matched as one
    literal substring; there is no tokenisation.

    Args:
        frame: Frame from build_frame()
        schema: Schema the frame was built from
        filter_text: Search text; empty keeps every row

    Returns:
        Filtered frame, original order preserved
    """
    if not filter_text:
        return frame
    if len(schema) == 0:
        return frame.head(0)

    needle = to_frame_text(filter_text).lower()
    matches = [
        pl.col(value_column(position))
        .str.to_lowercase()
        .str.contains(needle, literal=True)
        for position in range(len(schema))
    ]
    return frame.filter(pl.any_horizontal(matches))


def sort_frame(
    frame: pl.DataFrame,
    schema: ColumnSchema,
    sort: Optional[SortRequest],
) -> Tuple[pl.DataFrame, Optional[SortRequest]]:
    """
    Stable sort on the string form of one column.

    Values are compared as strings, so numbers order lexicographically
    ("10" < "2" < "33"). Rows with equal keys keep their relative order in
    both directions. A sort naming an unknown or unsortable column is
    ignored.

    Args:
        frame: Frame to sort
        schema: Schema used to resolve the sort target
        sort: Requested sort, or None

    Returns:
        Tuple of (sorted frame, sort actually applied or None)
    """
    if sort is None:
        return frame, None

    column = schema.resolve_sort_target(sort.column_id)
    if column is None:
        logger.debug("Ignoring sort on unknown or unsortable column %r", sort.column_id)
        return frame, None

    position = schema.index_of(column.id)
    sorted_frame = frame.sort(
        value_column(position),
        descending=sort.descending,
        maintain_order=True,
    )
    return sorted_frame, sort


def paginate_frame(frame: pl.DataFrame, page: int, items_per_page: int) -> pl.DataFrame:
    """
    Slice the page window out of ``frame``.

    A page past the end yields an empty frame rather than an error.

    Args:
        frame: Filtered and sorted frame
        page: 1-based page number
        items_per_page: Page size

    Returns:
        Frame with at most items_per_page rows
    """
    start, end = page_bounds(page, items_per_page, frame.height)
    if start == end and frame.height:
        logger.debug(
            "Page %d is past the end of %d rows; returning an empty window",
            page,
            frame.height,
        )
    return frame.slice(start, end - start)


def evaluate(
    records: Iterable[Any],
    columns: Any,
    query_state: QueryState,
) -> EvaluationResult:
    """
    Produce the visible rows and page count for one query.

    Runs filter, sort and paginate from scratch over the full collection.
    Nothing is cached and no input is mutated, so identical inputs always
    give identical results.

    Args:
        records: Ordered record collection
        columns: ColumnSchema or iterable of Column
        query_state: Current filter, sort and pagination request

    Returns:
        EvaluationResult with the visible rows and pagination metadata

    Example:
        result = evaluate(people, schema, QueryState(filter_text="ali"))
        result.rows        # records matching "ali" on page 1
        result.total_pages
    """
    schema = ColumnSchema.coerce(columns)
    if not isinstance(records, Sequence):
        records = list(records)

    frame = build_frame(records, schema)
    frame = filter_frame(frame, schema, query_state.filter_text)
    frame, applied_sort = sort_frame(frame, schema, query_state.sort)

    items_per_page = query_state.items_per_page
    page = query_state.current_page
    total_rows = frame.height
    total_pages = compute_total_pages(total_rows, items_per_page)

    window = paginate_frame(frame, page, items_per_page)
    rows = [records[position] for position in window[ROW_INDEX].to_list()]

    data_hash = compute_frame_hash(window, page, items_per_page, total_rows)

    return EvaluationResult(
        rows=rows,
        total_pages=total_pages,
        total_rows=total_rows,
        page=page,
        items_per_page=items_per_page,
        sort=applied_sort,
        data_hash=data_hash,
        schema=schema,
    )
