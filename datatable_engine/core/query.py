"""Query state: filter text, active sort and pagination request."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .columns import ColumnSchema

logger = logging.getLogger(__name__)

DEFAULT_ITEMS_PER_PAGE = 10
DEFAULT_PAGE = 1


class SortDirection(str, Enum):
    """Sort direction. Values match the "asc"/"desc" strings used in state dicts."""

    ASCENDING = "asc"
    DESCENDING = "desc"

    def reversed(self) -> "SortDirection":
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


@dataclass(frozen=True)
class SortRequest:
    """The single active sort: which column, which direction."""

    column_id: str
    direction: SortDirection = SortDirection.ASCENDING

    def __post_init__(self):
        # Accept plain "asc"/"desc" strings
        object.__setattr__(self, "direction", SortDirection(self.direction))

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESCENDING


def _validate_positive(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return value


class PaginationRequest:
    """
    Requested page window.

    Both values are positive integers. A page past the end of the data is
    allowed here; the evaluator turns it into an empty window.
    """

    __slots__ = ("_items_per_page", "_current_page")

    def __init__(
        self,
        items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
        current_page: int = DEFAULT_PAGE,
    ):
        self._items_per_page = _validate_positive("items_per_page", items_per_page)
        self._current_page = _validate_positive("current_page", current_page)

    @property
    def items_per_page(self) -> int:
        return self._items_per_page

    @items_per_page.setter
    def items_per_page(self, value: int) -> None:
        self._items_per_page = _validate_positive("items_per_page", value)

    @property
    def current_page(self) -> int:
        return self._current_page

    @current_page.setter
    def current_page(self, value: int) -> None:
        self._current_page = _validate_positive("current_page", value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PaginationRequest):
            return NotImplemented
        return (self._items_per_page, self._current_page) == (
            other._items_per_page,
            other._current_page,
        )

    def __repr__(self) -> str:
        return (
            f"PaginationRequest(items_per_page={self._items_per_page}, "
            f"current_page={self._current_page})"
        )


class QueryState:
    """
    Mutable query driving one table's evaluation.

    Owned by the surface embedding the table and mutated from UI events:
    search box edits, header taps and pager buttons.

    Filter and page-size changes do not move ``current_page`` by default,
    so the page can point past the end of the filtered data until the next
    explicit navigation. Pass ``reset_page_on_filter_change=True`` to jump
    back to page 1 whenever the filter text changes.
    """

    def __init__(
        self,
        filter_text: str = "",
        sort: Optional[SortRequest] = None,
        items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
        current_page: int = DEFAULT_PAGE,
        reset_page_on_filter_change: bool = False,
    ):
        """
        Initialize the query state.

        Args:
            filter_text: Initial free-text filter
            sort: Initial sort request, or None for collection order
            items_per_page: Page size (must be positive)
            current_page: Initial page, 1-based (must be positive)
            reset_page_on_filter_change: If True, set_filter_text() also
                resets the current page to 1.

        Raises:
            ValueError: If items_per_page or current_page is not positive
        """
        self.filter_text = filter_text
        self.sort = sort
        self.pagination = PaginationRequest(items_per_page, current_page)
        self.reset_page_on_filter_change = reset_page_on_filter_change
        # Page count of the latest evaluation, used to clamp navigation
        self.last_total_pages = 1

    @property
    def items_per_page(self) -> int:
        return self.pagination.items_per_page

    @property
    def current_page(self) -> int:
        return self.pagination.current_page

    def set_filter_text(self, text: str) -> bool:
        """
        Replace the filter text verbatim.

        Callers are expected to reset the page themselves unless
        ``reset_page_on_filter_change`` is enabled.

        Args:
            text: New filter text

        Returns:
            True if the filter text changed, False otherwise
        """
        if text == self.filter_text:
            return False
        self.filter_text = text
        if self.reset_page_on_filter_change:
            self.pagination.current_page = DEFAULT_PAGE
        return True

    def toggle_sort(self, column_id: str, schema: "ColumnSchema") -> bool:
        """
        Apply a column-header tap.

        Tapping an inactive sortable column sorts it ascending, tapping the
        active column flips its direction, and tapping an unsortable or
        unknown column does nothing.

        Args:
            column_id: Id of the tapped column
            schema: Column schema used to check sortability

        Returns:
            True if the sort changed, False for a no-op
        """
        column = schema.resolve_sort_target(column_id)
        if column is None:
            logger.debug("Ignoring sort toggle on unsortable column %r", column_id)
            return False

        if self.sort is not None and self.sort.column_id == column_id:
            self.sort = SortRequest(column_id, self.sort.direction.reversed())
        else:
            self.sort = SortRequest(column_id, SortDirection.ASCENDING)
        return True

    def clear_sort(self) -> bool:
        """Remove the active sort. Returns True if a sort was active."""
        if self.sort is None:
            return False
        self.sort = None
        return True

    def go_to_page(self, page: int, total_pages: int) -> int:
        """
        Navigate to ``page``, clamped to ``[1, total_pages]``.

        Args:
            page: Requested page (any integer)
            total_pages: Page count from the latest evaluation

        Returns:
            The page actually selected
        """
        upper = max(1, total_pages)
        clamped = min(max(page, 1), upper)
        if clamped != page:
            logger.debug("Clamped page %d to %d (total %d)", page, clamped, upper)
        self.pagination.current_page = clamped
        return clamped

    def next_page(self, total_pages: int) -> int:
        """Advance one page, stopping at the last page."""
        return self.go_to_page(self.current_page + 1, total_pages)

    def previous_page(self, total_pages: int) -> int:
        """Go back one page, stopping at page 1."""
        return self.go_to_page(self.current_page - 1, total_pages)

    def set_items_per_page(self, items_per_page: int) -> None:
        """
        Replace the page size without touching the current page.

        Raises:
            ValueError: If items_per_page is not positive
        """
        self.pagination.items_per_page = items_per_page

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot as a plain dict (sort direction as "asc"/"desc")."""
        return {
            "filter_text": self.filter_text,
            "sort_column": self.sort.column_id if self.sort else None,
            "sort_dir": self.sort.direction.value if self.sort else None,
            "page": self.current_page,
            "page_size": self.items_per_page,
            "reset_page_on_filter_change": self.reset_page_on_filter_change,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryState):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"QueryState(filter_text={self.filter_text!r}, sort={self.sort}, "
            f"pagination={self.pagination})"
        )
