"""DataTable: one table instance composing schema, query and selection."""

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Hashable,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
)

from ..core.columns import Column, ColumnSchema
from ..core.query import DEFAULT_ITEMS_PER_PAGE, DEFAULT_PAGE, QueryState
from ..core.selection import SelectionTracker
from ..pipeline.evaluator import EvaluationResult, evaluate, filter_frame, sort_frame
from ..pipeline.frame import ROW_INDEX, build_frame
from ..pipeline.pages import visible_page_numbers

if TYPE_CHECKING:
    from ..core.state import TableStateManager


def _field_getter(id_field: str) -> Callable[[Any], Hashable]:
    def get_id(record: Any) -> Hashable:
        if isinstance(record, Mapping):
            return record[id_field]
        return getattr(record, id_field)

    return get_id


class DataTable:
    """
    Filterable, sortable, paginated and selectable table over in-memory records.

    The table holds the column schema (fixed at construction), a QueryState
    and a SelectionTracker. Records are supplied fresh on each evaluate()
    call and are never stored or mutated.

    Features:
    - Case-insensitive "search everything" filter across all columns
    - Single-column stable sort driven by header taps
    - Page navigation clamped to the latest page count
    - Identifier-based selection that survives filtering and paging

    Example:
        table = DataTable(
            columns=[
                Column.from_key("name", title="Name"),
                Column.from_key("age", title="Age"),
            ],
            items_per_page=2,
        )
        table.toggle_sort("name")
        result = table.evaluate(people)
        result.rows         # first page, sorted by name
        table.next_page()
    """

    def __init__(
        self,
        columns: Iterable[Column],
        items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
        initial_page: int = DEFAULT_PAGE,
        reset_page_on_filter_change: bool = False,
        id_field: str = "id",
        id_of: Optional[Callable[[Any], Hashable]] = None,
        title: Optional[str] = None,
        state_key: Optional[str] = None,
        state_manager: Optional["TableStateManager"] = None,
    ):
        """
        Initialize the table.

        Args:
            columns: Column definitions, ids must be unique.
            items_per_page: Rows per page (default: 10). Must be positive.
            initial_page: Page shown first, 1-based (default: 1).
            reset_page_on_filter_change: If True, changing the search text
                jumps back to page 1. Off by default, so the page position
                is kept and may point past the end until the next navigation.
            id_field: Mapping key or attribute holding each record's
                identifier (default: 'id').
            id_of: Callable returning a record's identifier. Overrides
                id_field when given.
            title: Optional title for the rendering collaborator.
            state_key: If given, query and selection state live in Streamlit
                session_state under this key and survive script reruns.
            state_manager: TableStateManager to use with state_key. Defaults
                to the shared default manager.

        Raises:
            SchemaError: If column ids are not unique
            ValueError: If items_per_page or initial_page is not positive
        """
        self._schema = ColumnSchema.coerce(columns)
        self._title = title
        self._id_of = id_of or _field_getter(id_field)
        self._state_manager: Optional["TableStateManager"] = None

        if state_key is None:
            self._query = QueryState(
                items_per_page=items_per_page,
                current_page=initial_page,
                reset_page_on_filter_change=reset_page_on_filter_change,
            )
            self._selection = SelectionTracker()
        else:
            if state_manager is None:
                from ..core.state import get_default_state_manager

                state_manager = get_default_state_manager()
            self._query = state_manager.get_query(
                state_key,
                items_per_page=items_per_page,
                current_page=initial_page,
                reset_page_on_filter_change=reset_page_on_filter_change,
            )
            self._selection = state_manager.get_selection(state_key)
            self._state_manager = state_manager

    @property
    def schema(self) -> ColumnSchema:
        return self._schema

    @property
    def columns(self) -> List[Column]:
        return list(self._schema)

    @property
    def title(self) -> Optional[str]:
        return self._title

    @property
    def query(self) -> QueryState:
        return self._query

    @property
    def selection(self) -> SelectionTracker:
        return self._selection

    @property
    def total_pages(self) -> int:
        """Page count from the most recent evaluate() call."""
        return self._query.last_total_pages

    def record_id(self, record: Any) -> Hashable:
        """Identifier of ``record``."""
        return self._id_of(record)

    # Evaluation

    def evaluate(self, records: Iterable[Any]) -> EvaluationResult:
        """
        Evaluate the current query against ``records``.

        Also stores the resulting page count on the QueryState, so that
        go_to_page(), next_page() and previous_page() clamp against it even
        after a Streamlit rerun rebuilds the table.

        Args:
            records: Ordered record collection

        Returns:
            EvaluationResult for the current page
        """
        result = evaluate(records, self._schema, self._query)
        self._query.last_total_pages = result.total_pages
        return result

    def filtered_records(self, records: Iterable[Any]) -> List[Any]:
        """
        Every record passing the current filter, in the current sort order.

        Unlike evaluate(), no page window is applied.

        Args:
            records: Ordered record collection

        Returns:
            Filtered and sorted records
        """
        if not isinstance(records, Sequence):
            records = list(records)
        frame = build_frame(records, self._schema)
        frame = filter_frame(frame, self._schema, self._query.filter_text)
        frame, _ = sort_frame(frame, self._schema, self._query.sort)
        return [records[position] for position in frame[ROW_INDEX].to_list()]

    def page_numbers(self, page_range: int = 2) -> List[Optional[int]]:
        """Pager window around the current page, None marking gaps."""
        return visible_page_numbers(
            self._query.current_page, self._query.last_total_pages, page_range
        )

    # Query mutators

    def _record_change(self, changed: bool) -> None:
        if changed and self._state_manager is not None:
            self._state_manager.bump()

    def _navigate(self, move: Callable[[int], int]) -> int:
        before = self._query.current_page
        page = move(self._query.last_total_pages)
        self._record_change(page != before)
        return page

    def search(self, text: str) -> bool:
        """Set the search text. Returns True if it changed."""
        changed = self._query.set_filter_text(text)
        self._record_change(changed)
        return changed

    def toggle_sort(self, column_id: str) -> bool:
        """Apply a header tap on ``column_id``. Returns True if the sort changed."""
        changed = self._query.toggle_sort(column_id, self._schema)
        self._record_change(changed)
        return changed

    def clear_sort(self) -> bool:
        changed = self._query.clear_sort()
        self._record_change(changed)
        return changed

    def go_to_page(self, page: int) -> int:
        """Navigate to ``page`` clamped to the latest page count."""
        return self._navigate(lambda total: self._query.go_to_page(page, total))

    def next_page(self) -> int:
        return self._navigate(self._query.next_page)

    def previous_page(self) -> int:
        return self._navigate(self._query.previous_page)

    def set_items_per_page(self, items_per_page: int) -> None:
        """Change the page size. The current page is left as is."""
        before = self._query.items_per_page
        self._query.set_items_per_page(items_per_page)
        self._record_change(items_per_page != before)

    # Selection

    def toggle_selection(self, record: Any) -> bool:
        """Flip selection of ``record``. Returns True if now selected."""
        selected = self._selection.toggle(self._id_of(record))
        self._record_change(True)
        return selected

    def is_selected(self, record: Any) -> bool:
        return self._selection.is_selected(self._id_of(record))

    def select_all(self, records: Iterable[Any]) -> int:
        """
        Add every record in ``records`` to the selection.

        Pass filtered_records() to select everything matching the search.

        Returns:
            Number of records newly selected
        """
        added = self._selection.select_all(self._id_of(record) for record in records)
        self._record_change(added > 0)
        return added

    def deselect_all(self, records: Iterable[Any]) -> int:
        removed = self._selection.deselect_all(self._id_of(record) for record in records)
        self._record_change(removed > 0)
        return removed

    def clear_selection(self) -> bool:
        changed = self._selection.clear()
        self._record_change(changed)
        return changed

    def selected_records(self, records: Iterable[Any]) -> List[Any]:
        """Records from ``records`` whose identifier is selected, in collection order."""
        return [record for record in records if self._id_of(record) in self._selection]

    def __repr__(self) -> str:
        return (
            f"DataTable(columns={self._schema.ids}, query={self._query!r}, "
            f"selected={len(self._selection)})"
        )
