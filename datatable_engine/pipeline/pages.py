"""Page arithmetic shared by the evaluator and the pager helpers."""

from typing import List, Optional, Tuple


def compute_total_pages(total_rows: int, items_per_page: int) -> int:
    """
    Number of pages needed for ``total_rows``.

    An empty result still has one (empty) page.

    Args:
        total_rows: Number of filtered rows
        items_per_page: Page size, must be positive

    Returns:
        max(1, ceil(total_rows / items_per_page))
    """
    if items_per_page <= 0:
        raise ValueError(f"items_per_page must be positive, got {items_per_page}")
    return max(1, -(-total_rows // items_per_page))


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp ``page`` into ``[1, total_pages]``."""
    return min(max(page, 1), max(1, total_pages))


def page_bounds(page: int, items_per_page: int, total_rows: int) -> Tuple[int, int]:
    """
    Row window ``[start, end)`` for a page.

    Out-of-range pages produce an empty window at the end of the data
    instead of negative or overflowing bounds.

    Args:
        page: 1-based page number
        items_per_page: Page size
        total_rows: Number of rows available

    Returns:
        Tuple of (start, end) row offsets
    """
    start = min(max(page - 1, 0) * items_per_page, total_rows)
    end = min(start + items_per_page, total_rows)
    return start, end


def visible_page_numbers(
    current_page: int,
    total_pages: int,
    page_range: int = 2,
) -> List[Optional[int]]:
    """
    Page numbers a pager control should show.

    Shows the first and last page plus every page within ``page_range`` of
    the current page. A ``None`` entry marks an elided gap (an ellipsis).

    Example:
        >>> visible_page_numbers(6, 10)
        [1, None, 4, 5, 6, 7, 8, None, 10]

    Args:
        current_page: The current page (clamped into range first)
        total_pages: Total number of pages
        page_range: Pages to show on each side of the current page

    Returns:
        Ascending page numbers with None for gaps
    """
    total_pages = max(1, total_pages)
    current_page = clamp_page(current_page, total_pages)
    page_range = max(0, page_range)

    low = max(1, current_page - page_range)
    high = min(total_pages, current_page + page_range)
    pages = sorted({1, total_pages, *range(low, high + 1)})

    result: List[Optional[int]] = []
    previous = 0
    for page in pages:
        if page - previous > 1:
            result.append(None)
        result.append(page)
        previous = page
    return result


def page_label(current_page: int, total_pages: int) -> str:
    """Human-readable position, e.g. "Page 2 of 5"."""
    return f"Page {current_page} of {max(1, total_pages)}"
