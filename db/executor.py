"""
db/executor.py
--------------
The query executor every repository is built on.

Contract:
    execute(sql, params) -> list[dict]

`sql` uses numbered placeholders `$1..$n`; `params` is the ordered list of
values they bind. Rows come back as plain dicts keyed by the column names
(or aliases) of the statement.
"""

import re
from typing import Any, Protocol, Sequence

from psycopg2 import extras
from psycopg2.errors import UniqueViolation

from db.connection import get_connection, release_connection
from errors import ConflictError
from utils.logger import get_logger

logger = get_logger(__name__)

_PLACEHOLDER = re.compile(r"\$(\d+)")


class QueryExecutor(Protocol):
    """Anything that runs one parameterized statement and returns its rows."""

    def execute(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        ...


def to_pyformat(sql: str, params: Sequence[Any]) -> tuple[str, dict | None]:
    """
    Rewrite `$n` placeholders into psycopg2's named `%(pn)s` form.

    The values stay out of the SQL text; they are passed to the driver as a
    mapping. Literal `%` signs are doubled so psycopg2 does not read them as
    placeholders.
    """
    if not params:
        return sql, None
    named = {f"p{index}": value for index, value in enumerate(params, start=1)}
    return _PLACEHOLDER.sub(r"%(p\1)s", sql.replace("%", "%%")), named


class PostgresExecutor:
    """
    Runs statements on a pooled psycopg2 connection.

    Each call borrows a connection, executes one statement, commits and
    returns the connection to the pool. On failure the statement is rolled
    back and the error re-raised; a unique violation is raised as
    ConflictError.
    """

    def execute(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        query, named = to_pyformat(sql, params)
        conn = get_connection()
        try:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute(query, named)
                rows = [dict(r) for r in cur.fetchall()] if cur.description else []
            conn.commit()
            return rows
        except UniqueViolation as e:
            conn.rollback()
            logger.error(f"Unique violation: {e}")
            raise ConflictError(str(e)) from e
        except Exception as e:
            conn.rollback()
            logger.error(f"Query failed: {e}")
            raise
        finally:
            release_connection(conn)
