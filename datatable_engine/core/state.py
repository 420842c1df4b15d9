"""Session-scoped ownership of query and selection state for Streamlit pages."""

from typing import Any, Dict, Optional

import numpy as np

from .query import QueryState
from .selection import SelectionTracker

# Module-level default state manager
_default_state_manager: Optional["TableStateManager"] = None


def get_default_state_manager() -> "TableStateManager":
    """
    Get or create the default shared TableStateManager.

    Returns:
        The default TableStateManager instance
    """
    global _default_state_manager
    if _default_state_manager is None:
        _default_state_manager = TableStateManager()
    return _default_state_manager


def reset_default_state_manager() -> None:
    """Reset the default state manager (useful for testing)."""
    global _default_state_manager
    _default_state_manager = None


class TableStateManager:
    """
    Keeps each table's QueryState and SelectionTracker in Streamlit session_state.

    Streamlit reruns the page script on every interaction, so state owned by a
    plain Python object would be lost. The manager stores one entry per table
    key inside ``st.session_state[session_key]``; the same table key always
    yields the same QueryState and SelectionTracker objects for the life of
    the session.

    Features:
        - Session ID for multi-tab/session safety
        - Counter bumped on every recorded change
        - Independent state per table key
    """

    def __init__(self, session_key: str = "dte_state"):
        """
        Initialize the TableStateManager.

        Args:
            session_key: Key to use in Streamlit session_state for storing
                state. Use different keys for independent table groups.
        """
        self._session_key = session_key
        self._ensure_session_state()

    def _ensure_session_state(self) -> None:
        """Ensure session state is initialized."""
        import streamlit as st

        if self._session_key not in st.session_state:
            st.session_state[self._session_key] = {
                "counter": 0,
                "id": float(np.random.random()),
                "tables": {},
            }

    @property
    def _state(self) -> Dict[str, Any]:
        """Get the internal state dict from session_state."""
        import streamlit as st

        self._ensure_session_state()
        return st.session_state[self._session_key]

    @property
    def session_id(self) -> float:
        """Get the unique session ID."""
        return self._state["id"]

    @property
    def counter(self) -> int:
        """Get the current state counter."""
        return self._state["counter"]

    def _entry(self, table_key: str, **query_defaults: Any) -> Dict[str, Any]:
        tables = self._state["tables"]
        if table_key not in tables:
            tables[table_key] = {
                "query": QueryState(**query_defaults),
                "selection": SelectionTracker(),
            }
        return tables[table_key]

    def get_query(self, table_key: str, **query_defaults: Any) -> QueryState:
        """
        Get the QueryState for a table, creating it on first access.

        Args:
            table_key: Identifier of the table
            **query_defaults: QueryState keyword arguments used only when
                the entry is created (e.g. items_per_page, current_page)

        Returns:
            The table's QueryState
        """
        return self._entry(table_key, **query_defaults)["query"]

    def get_selection(self, table_key: str) -> SelectionTracker:
        """
        Get the SelectionTracker for a table, creating it on first access.

        Args:
            table_key: Identifier of the table

        Returns:
            The table's SelectionTracker
        """
        return self._entry(table_key)["selection"]

    def has_table(self, table_key: str) -> bool:
        """Check whether state exists for ``table_key``."""
        return table_key in self._state["tables"]

    def bump(self) -> int:
        """
        Record that some table state changed.

        Returns:
            The new counter value
        """
        self._state["counter"] += 1
        return self._state["counter"]

    def clear(self, table_key: Optional[str] = None) -> bool:
        """
        Drop stored state.

        Args:
            table_key: Table to drop. If None, drop every table and reset
                the counter.

        Returns:
            True if anything was removed
        """
        tables = self._state["tables"]
        if table_key is None:
            removed = bool(tables)
            self._state["tables"] = {}
            self._state["counter"] = 0
            return removed
        if table_key in tables:
            del tables[table_key]
            self._state["counter"] += 1
            return True
        return False

    def __repr__(self) -> str:
        return (
            f"TableStateManager(session_key='{self._session_key}', "
            f"counter={self.counter}, "
            f"tables={sorted(self._state['tables'])})"
        )
