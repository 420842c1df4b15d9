"""Column schema: the declarative, type-erased view into each record."""

from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional


class SchemaError(ValueError):
    """Raised when a column schema is malformed.

    This error is raised when:
    1. Two columns in one schema share the same id
    2. A column is declared without an extractor

    It signals a programmer error in the table configuration, so it is
    raised once at construction instead of at evaluation time.
    """

    pass


def _key_extractor(key: str) -> Callable[[Any], Any]:
    """Build an extractor reading ``key`` from a mapping or an attribute."""

    def extract(record: Any) -> Any:
        if isinstance(record, Mapping):
            return record.get(key)
        return getattr(record, key, None)

    return extract


class Column:
    """
    A named view into one field of every record.

    The extractor is the only way the engine reads a record. Whatever it
    returns is compared through its ``str()`` form, for both filtering and
    sorting.

    Example:
        Column("age", "Age", extractor=lambda person: person.age)
        Column.from_key("name", title="Name")
    """

    __slots__ = ("_id", "_title", "_extractor", "_is_sortable", "_cell_renderer")

    def __init__(
        self,
        id: str,
        title: str,
        extractor: Callable[[Any], Any],
        is_sortable: bool = True,
        cell_renderer: Optional[Any] = None,
    ):
        """
        Initialize a column.

        Args:
            id: Identifier, unique within one schema. Sort requests refer
                to columns by this id.
            title: Display label for the rendering collaborator.
            extractor: Function from record to value.
            is_sortable: Whether sort requests may target this column.
            cell_renderer: Opaque renderer reference, passed through untouched.
        """
        if not callable(extractor):
            raise SchemaError(f"Column '{id}' requires a callable extractor")
        self._id = id
        self._title = title
        self._extractor = extractor
        self._is_sortable = is_sortable
        self._cell_renderer = cell_renderer

    @classmethod
    def from_key(
        cls,
        id: str,
        key: Optional[str] = None,
        title: Optional[str] = None,
        is_sortable: bool = True,
        cell_renderer: Optional[Any] = None,
    ) -> "Column":
        """
        Create a column reading a mapping key or attribute.

        Args:
            id: Column identifier
            key: Key or attribute name to read (defaults to ``id``)
            title: Display title (defaults to ``id`` title-cased)
            is_sortable: Whether the column can be sorted
            cell_renderer: Optional opaque renderer reference

        Returns:
            A new Column
        """
        key = key or id
        if title is None:
            title = id.replace("_", " ").title()
        return cls(
            id=id,
            title=title,
            extractor=_key_extractor(key),
            is_sortable=is_sortable,
            cell_renderer=cell_renderer,
        )

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def extractor(self) -> Callable[[Any], Any]:
        return self._extractor

    @property
    def is_sortable(self) -> bool:
        return self._is_sortable

    @property
    def cell_renderer(self) -> Optional[Any]:
        return self._cell_renderer

    def extract(self, record: Any) -> Any:
        """Return the raw value of this column for ``record``."""
        return self._extractor(record)

    def format_value(self, record: Any) -> str:
        """Return the textual representation used for filtering and sorting."""
        return str(self._extractor(record))

    def __repr__(self) -> str:
        return (
            f"Column(id='{self._id}', title='{self._title}', "
            f"is_sortable={self._is_sortable})"
        )


class ColumnSchema:
    """
    Read-only, ordered collection of columns.

    Supplied once per table and never mutated. Lookup by id is used to
    resolve sort targets; iteration is used to apply the filter across
    every column.
    """

    def __init__(self, columns: Iterable[Column]):
        """
        Initialize the schema.

        Args:
            columns: Columns in display order

        Raises:
            SchemaError: If two columns share an id
        """
        self._columns: List[Column] = list(columns)
        self._by_id: Dict[str, Column] = {}
        for column in self._columns:
            if column.id in self._by_id:
                raise SchemaError(
                    f"Duplicate column id '{column.id}'. "
                    f"Column ids must be unique within a schema."
                )
            self._by_id[column.id] = column

    @classmethod
    def coerce(cls, columns: Any) -> "ColumnSchema":
        """Return ``columns`` as a ColumnSchema, wrapping plain iterables."""
        if isinstance(columns, ColumnSchema):
            return columns
        return cls(columns)

    @property
    def ids(self) -> List[str]:
        """Column ids in schema order."""
        return [column.id for column in self._columns]

    @property
    def titles(self) -> List[str]:
        """Column titles in schema order."""
        return [column.title for column in self._columns]

    def get(self, column_id: str) -> Optional[Column]:
        """
        Look up a column by id.

        Args:
            column_id: The column id

        Returns:
            The column, or None if no column has that id
        """
        return self._by_id.get(column_id)

    def index_of(self, column_id: str) -> Optional[int]:
        """Position of ``column_id`` in the schema, or None if absent."""
        column = self._by_id.get(column_id)
        if column is None:
            return None
        return self._columns.index(column)

    def resolve_sort_target(self, column_id: str) -> Optional[Column]:
        """
        Resolve a sort request target.

        Args:
            column_id: The requested sort column id

        Returns:
            The column if it exists and is sortable, otherwise None
        """
        column = self._by_id.get(column_id)
        if column is None or not column.is_sortable:
            return None
        return column

    def __contains__(self, column_id: object) -> bool:
        return column_id in self._by_id

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __repr__(self) -> str:
        return f"ColumnSchema(ids={self.ids})"
