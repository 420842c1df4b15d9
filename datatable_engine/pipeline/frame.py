"""Projection of records into a polars frame of string representations."""

import hashlib
from typing import Any, Dict, List, Sequence

import polars as pl

from ..core.columns import ColumnSchema

# Position of each record in the caller's collection
ROW_INDEX = "__row"


def value_column(position: int) -> str:
    """
    Internal frame column name for the schema column at ``position``.

    Column ids are user-chosen strings, so the frame uses positional names
    to avoid clashing with ROW_INDEX or with each other.
    """
    return f"__c{position}"


def to_frame_text(text: str) -> str:
    """
    Make ``text`` storable in a polars Utf8 column.

    Python strings may hold lone surrogates (e.g. paths decoded with
    ``surrogateescape``) that are not valid UTF-8. Those are written as
    backslash escapes; every other string is returned unchanged.
    """
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return text.encode("utf-8", "backslashreplace").decode("utf-8")
    return text


def build_frame(records: Sequence[Any], schema: ColumnSchema) -> pl.DataFrame:
    """
    Build the working frame for one evaluation.

    Every column value is extracted once and stored as ``str(value)``,
    which is the only form filter and sort ever look at.

    Args:
        records: Ordered record collection (not modified)
        schema: Column schema providing the extractors

    Returns:
        DataFrame with a UInt32 ROW_INDEX column followed by one Utf8
        column per schema column, in schema order
    """
    data: Dict[str, List[Any]] = {ROW_INDEX: list(range(len(records)))}
    frame_schema: Dict[str, Any] = {ROW_INDEX: pl.UInt32}
    for position, column in enumerate(schema):
        name = value_column(position)
        data[name] = [to_frame_text(column.format_value(record)) for record in records]
        frame_schema[name] = pl.Utf8
    return pl.DataFrame(data, schema=frame_schema)


def compute_frame_hash(frame: pl.DataFrame, *extra: Any) -> str:
    """
    Hash the row positions of a frame plus any extra identifying values.

    Two evaluations that show the same records in the same order under the
    same pagination produce the same hash, so a renderer can skip redraws.

    Args:
        frame: Frame holding a ROW_INDEX column
        *extra: Additional values mixed into the hash (page, page size, ...)

    Returns:
        SHA256 hash string
    """
    hash_parts = [str(frame.height)]
    hash_parts.append(",".join(str(row) for row in frame[ROW_INDEX].to_list()))
    hash_parts.extend(str(value) for value in extra)
    hash_input = "|".join(hash_parts).encode()
    return hashlib.sha256(hash_input).hexdigest()
