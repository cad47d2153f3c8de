"""
repositories/base_repo.py
-------------------------
CRUD operations shared by every entity repository.

A subclass only declares its table, its application field names and the
ColumnMapper for the fields whose column name differs. Rows are returned as
dicts keyed by application field names; SQL is built with the query builder
so caller values only ever travel as `$n` parameters.
"""

from typing import Any, Optional

from db.executor import QueryExecutor
from db.query_builder import (
    ColumnMapper,
    FieldSet,
    build_filter,
    build_set,
    ordered_pairs,
    placeholder,
)
from errors import (
    EmptyUpdateError,
    ImmutableFieldError,
    NotFoundError,
    UnknownFieldError,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class BaseRepository:
    """Repository for CRUD operations on one table."""

    table: str = ""
    entity: str = ""
    # Application field names returned in every row, in this order.
    fields: tuple[str, ...] = ()
    # Accepted on insert/update but never returned.
    write_only_fields: tuple[str, ...] = ()
    # Rejected by update().
    immutable_fields: tuple[str, ...] = ()
    columns: ColumnMapper = ColumnMapper()
    id_field: str = "id"
    id_column: str = "id"

    def __init__(self, executor: QueryExecutor):
        self.db = executor

    # ── CREATE ────────────────────────────────────────────

    def insert(self, fields: FieldSet) -> dict:
        """
        Insert a new row.

        Args:
            fields: Sparse field-set; omitted fields get the column default.

        Returns:
            The created row.

        Raises:
            UnknownFieldError: If a key is not a field of the entity.
            ConflictError: If the store reports a uniqueness violation.
        """
        pairs = ordered_pairs(fields)
        self._check_fields(field for field, _ in pairs)

        if pairs:
            columns = ", ".join(self.columns.map(field) for field, _ in pairs)
            marks = ", ".join(placeholder(i) for i in range(1, len(pairs) + 1))
            sql = f"INSERT INTO {self.table} ({columns}) VALUES ({marks})"
        else:
            sql = f"INSERT INTO {self.table} DEFAULT VALUES"

        rows = self.db.execute(
            f"{sql} RETURNING {self._returning()}", [value for _, value in pairs]
        )
        row = rows[0]
        logger.info(f"Added {self.entity} #{row[self.id_field]}")
        return row

    # ── READ ──────────────────────────────────────────────

    def find(self, filters: Optional[FieldSet] = None) -> list[dict]:
        """
        Fetch the rows matching every given field exactly.

        An empty or missing filter returns all rows. A None value matches
        rows where the column is NULL.
        """
        return self._select_where(ordered_pairs(filters or {}), null_safe=True)

    def get(self, row_id: Any) -> dict:
        """
        Fetch a single row by id.

        Raises:
            NotFoundError: If no row has this id.
        """
        rows = self.db.execute(
            f"SELECT {self._returning()} FROM {self.table} WHERE {self.id_column} = $1",
            [row_id],
        )
        if not rows:
            raise NotFoundError(f"Unknown {self.entity} id: {row_id}")
        return rows[0]

    def exists(self, row_id: Any) -> bool:
        rows = self.db.execute(
            f"SELECT {self.id_column} FROM {self.table} WHERE {self.id_column} = $1",
            [row_id],
        )
        return len(rows) > 0

    # ── UPDATE ────────────────────────────────────────────

    def update(self, row_id: Any, fields: FieldSet) -> dict:
        """
        Apply a partial update and return the updated row.

        The id is checked before the UPDATE is issued, so a missing row is
        never confused with an update that changed nothing.

        Raises:
            EmptyUpdateError: If `fields` is empty (storage is not touched).
            ImmutableFieldError: If `fields` holds an immutable field.
            NotFoundError: If no row has this id.
            UnknownFieldError: If a key is not a field of the entity.
        """
        pairs = ordered_pairs(fields)
        if not pairs:
            raise EmptyUpdateError(f"No fields to update for {self.entity} #{row_id}")
        for field, _ in pairs:
            if field in self.immutable_fields:
                raise ImmutableFieldError(field)

        if not self.exists(row_id):
            raise NotFoundError(f"Unknown {self.entity} id: {row_id}")
        self._check_fields(field for field, _ in pairs)

        fragment = build_set(pairs, self.columns)
        sql = (
            f"UPDATE {self.table} SET {fragment.clause} "
            f"WHERE {self.id_column} = {placeholder(fragment.next_index)} "
            f"RETURNING {self._returning()}"
        )
        rows = self.db.execute(sql, [*fragment.values, row_id])
        if not rows:
            raise NotFoundError(f"Unknown {self.entity} id: {row_id}")
        logger.info(f"Updated {self.entity} #{row_id}: {', '.join(f for f, _ in pairs)}")
        return rows[0]

    # ── DELETE ────────────────────────────────────────────

    def remove(self, row_id: Any) -> None:
        """
        Delete a row by id.

        Raises:
            NotFoundError: If no row was deleted.
        """
        rows = self.db.execute(
            f"DELETE FROM {self.table} WHERE {self.id_column} = $1 RETURNING {self.id_column}",
            [row_id],
        )
        if not rows:
            raise NotFoundError(f"Unknown {self.entity} id: {row_id}")
        logger.info(f"Deleted {self.entity} #{row_id}")

    # ── HELPERS ───────────────────────────────────────────

    def _select_where(self, pairs: list[tuple[str, Any]], null_safe: bool = False) -> list[dict]:
        self._check_fields(field for field, _ in pairs)
        fragment = build_filter(pairs, self.columns, null_safe=null_safe)
        sql = f"SELECT {self._returning()} FROM {self.table}"
        if fragment.clause:
            sql += f" WHERE {fragment.clause}"
        sql += f" ORDER BY {self.id_column}"
        return self.db.execute(sql, fragment.values)

    def _returning(self) -> str:
        """Column list aliasing every column back to its field name."""
        return ", ".join(self._column_expr(field) for field in self.fields)

    def _column_expr(self, field: str) -> str:
        column = self.columns.map(field)
        return column if column == field else f'{column} AS "{field}"'

    def _check_fields(self, fields) -> None:
        """Reject keys that are not fields of this entity."""
        allowed = set(self.fields) | set(self.write_only_fields)
        unknown = [field for field in fields if field not in allowed]
        if unknown:
            raise UnknownFieldError(self.entity, unknown)
