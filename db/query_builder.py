"""
db/query_builder.py
-------------------
Turns a sparse field-set into a parameterized SQL fragment.

Two fragments are supported:
    - the `SET` clause of a partial UPDATE (`build_set`)
    - the `WHERE` clause of a filtered SELECT (`build_filter`)

Values are never written into the SQL text. Each one becomes a positional
placeholder `$1..$n` and is returned, in the same order, in `values`.
This module knows nothing about entities; the field-to-column lookup is
supplied by the caller through a ColumnMapper.
"""

from collections.abc import Mapping
from typing import Any, Iterable, NamedTuple, Union

from errors import EmptyUpdateError

FieldSet = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


class ColumnMapper:
    """
    Maps application field names to storage column names.

    Only fields whose column name differs need an entry; any other field
    maps to itself.
    """

    def __init__(self, mapping: Mapping[str, str] | None = None):
        self._mapping = dict(mapping or {})

    def map(self, field: str) -> str:
        return self._mapping.get(field, field)

    def __repr__(self) -> str:
        return f"ColumnMapper({self._mapping!r})"


class SqlFragment(NamedTuple):
    """A clause with `$n` placeholders and the values they bind, in order."""

    clause: str
    values: list

    @property
    def next_index(self) -> int:
        """Placeholder index for a parameter appended after this clause."""
        return len(self.values) + 1


def placeholder(index: int) -> str:
    """Positional placeholder for the 1-based parameter `index`."""
    return f"${index}"


def ordered_pairs(fields: FieldSet) -> list[tuple[str, Any]]:
    """
    Convert a sparse field-set into an explicit list of (field, value) pairs.

    A mapping contributes its items in insertion order; a sequence of pairs
    is kept exactly as given.
    """
    if isinstance(fields, Mapping):
        return list(fields.items())
    return [(field, value) for field, value in fields]


def build_set(fields: FieldSet, mapper: ColumnMapper) -> SqlFragment:
    """
    Build the SET clause of a partial update.

    Example:
        >>> build_set({"a": 1, "b": 2}, ColumnMapper({"a": "col_a"}))
        SqlFragment(clause='col_a = $1, b = $2', values=[1, 2])

    Raises:
        EmptyUpdateError: If `fields` is empty.
    """
    pairs = ordered_pairs(fields)
    if not pairs:
        raise EmptyUpdateError()

    columns = []
    values = []
    for index, (field, value) in enumerate(pairs, start=1):
        columns.append(f"{mapper.map(field)} = {placeholder(index)}")
        values.append(value)
    return SqlFragment(", ".join(columns), values)


def build_filter(
    fields: FieldSet, mapper: ColumnMapper, null_safe: bool = False
) -> SqlFragment:
    """
    Build the WHERE clause of a filtered read.

    An empty field-set gives an empty clause and no values; the caller
    then leaves out the WHERE keyword entirely.

    Args:
        fields: Fields to match exactly.
        mapper: Field-to-column lookup.
        null_safe: Compare None values with `IS NOT DISTINCT FROM` so that
            NULL matches NULL. Every field still gets one placeholder.
    """
    conditions = []
    values = []
    for index, (field, value) in enumerate(ordered_pairs(fields), start=1):
        operator = "IS NOT DISTINCT FROM" if null_safe and value is None else "="
        conditions.append(f"{mapper.map(field)} {operator} {placeholder(index)}")
        values.append(value)
    return SqlFragment(" AND ".join(conditions), values)
