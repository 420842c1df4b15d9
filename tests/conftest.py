"""Pytest configuration and shared fixtures for datatable-engine tests."""

from dataclasses import dataclass
from typing import Any, Dict, List
from unittest.mock import patch

import pytest

from datatable_engine import Column, ColumnSchema
from datatable_engine.core.state import reset_default_state_manager


class MockSessionState(dict):
    """Mock Streamlit session_state that behaves like a dict."""
    pass


@dataclass(frozen=True)
class Person:
    """Attribute-style record used alongside dict records."""

    id: int
    name: str
    age: int
    city: str


@pytest.fixture
def mock_streamlit():
    """
    Mock Streamlit's session_state for testing state ownership.

    This fixture patches st.session_state to allow testing tables bound to
    session state without running a full Streamlit server.
    """
    mock_session_state = MockSessionState()
    reset_default_state_manager()

    with patch('streamlit.session_state', mock_session_state):
        yield mock_session_state

    reset_default_state_manager()


@pytest.fixture
def people() -> List[Dict[str, Any]]:
    """The three-person collection used throughout the table tests."""
    return [
        {"id": 1, "name": "Charlie", "age": 35},
        {"id": 2, "name": "Alice", "age": 30},
        {"id": 3, "name": "Bob", "age": 25},
    ]


@pytest.fixture
def people_schema() -> ColumnSchema:
    """Sortable name and age columns."""
    return ColumnSchema([
        Column.from_key("name", title="Name"),
        Column.from_key("age", title="Age"),
    ])


@pytest.fixture
def person_objects() -> List[Person]:
    """Attribute-style records."""
    return [
        Person(id=1, name="Alice", age=30, city="New York"),
        Person(id=2, name="Bob", age=25, city="San Francisco"),
        Person(id=3, name="Charlie", age=35, city="Chicago"),
    ]


@pytest.fixture
def person_columns() -> List[Column]:
    """Columns over Person objects; city is not sortable."""
    return [
        Column("name", "Name", extractor=lambda p: p.name),
        Column("age", "Age", extractor=lambda p: p.age),
        Column("city", "City", extractor=lambda p: p.city, is_sortable=False),
    ]


@pytest.fixture
def numbered_rows() -> List[Dict[str, Any]]:
    """25 rows with ids 0-24, a repeating group key and a label."""
    return [
        {"id": i, "group": ["A", "B", "C"][i % 3], "label": f"row_{i}"}
        for i in range(25)
    ]


@pytest.fixture
def numbered_schema() -> ColumnSchema:
    return ColumnSchema([
        Column.from_key("id", title="ID"),
        Column.from_key("group"),
        Column.from_key("label"),
    ])
