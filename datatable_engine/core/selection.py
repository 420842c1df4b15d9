"""Selection tracker: the set of record ids marked as selected."""

from typing import Any, FrozenSet, Hashable, Iterable, Iterator, Set


class SelectionTracker:
    """
    Identifier-based row selection.

    Selections are independent of what the evaluator currently shows: a
    selected record that is filtered out or paged away stays selected. This
    supports selecting every filtered record and then paging through them.

    The counter increases on every membership change so that a rendering
    collaborator can cheaply detect that it needs to redraw.
    """

    def __init__(self, selected: Iterable[Hashable] = ()):
        self._selected: Set[Hashable] = set(selected)
        self._counter = 0

    @property
    def counter(self) -> int:
        """Number of membership changes so far."""
        return self._counter

    @property
    def selected_ids(self) -> FrozenSet[Hashable]:
        return frozenset(self._selected)

    def toggle(self, record_id: Hashable) -> bool:
        """
        Flip membership of ``record_id``.

        Returns:
            True if the id is selected after the call
        """
        if record_id in self._selected:
            self._selected.discard(record_id)
            selected = False
        else:
            self._selected.add(record_id)
            selected = True
        self._counter += 1
        return selected

    def is_selected(self, record_id: Hashable) -> bool:
        return record_id in self._selected

    def select_all(self, record_ids: Iterable[Hashable]) -> int:
        """
        Union ``record_ids`` into the selection.

        Returns:
            Number of ids newly selected
        """
        before = len(self._selected)
        self._selected.update(record_ids)
        added = len(self._selected) - before
        if added:
            self._counter += 1
        return added

    def deselect_all(self, record_ids: Iterable[Hashable]) -> int:
        """
        Remove ``record_ids`` from the selection.

        Returns:
            Number of ids that were deselected
        """
        before = len(self._selected)
        self._selected.difference_update(record_ids)
        removed = before - len(self._selected)
        if removed:
            self._counter += 1
        return removed

    def clear(self) -> bool:
        """Empty the selection. Returns True if anything was selected."""
        if not self._selected:
            return False
        self._selected.clear()
        self._counter += 1
        return True

    def __contains__(self, record_id: Any) -> bool:
        return record_id in self._selected

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._selected)

    def __len__(self) -> int:
        return len(self._selected)

    def __repr__(self) -> str:
        return (
            f"SelectionTracker(counter={self._counter}, "
            f"selected={sorted(self._selected, key=repr)})"
        )
