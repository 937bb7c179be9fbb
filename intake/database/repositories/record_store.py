from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from intake.database.connection import get_connection
from intake.database.exceptions import RecordStoreError


class PostgresRecordStore:
    """Generic single-row inserts and keyed updates against PostgreSQL."""

    def insert(self, table: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored (including generated columns).

        Raises:
            RecordStoreError: if the insert fails or returns nothing.
        """
        if not fields:
            raise RecordStoreError(f"Refusing to insert an empty row into {table}")
        columns = list(fields)
        query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values}) RETURNING *").format(
            table=sql.Identifier(table),
            columns=sql.SQL(", ").join(map(sql.Identifier, columns)),
            values=sql.SQL(", ").join(sql.Placeholder() * len(columns)),
        )
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(query, [fields[c] for c in columns])
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise RecordStoreError(f"Insert into {table} failed: {exc}") from exc

        if row is None:
            raise RecordStoreError(f"Insert into {table} returned no row")
        return dict(row)

    def update(self, table: str, key: dict[str, Any], fields: dict[str, Any]) -> None:
        """Update the rows matching every column in key.

        Raises:
            RecordStoreError: if the update fails or matches no row.
        """
        if not key or not fields:
            raise RecordStoreError(f"Update on {table} needs both key and fields")
        query = sql.SQL("UPDATE {table} SET {assignments} WHERE {conditions}").format(
            table=sql.Identifier(table),
            assignments=sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(c)) for c in fields
            ),
            conditions=sql.SQL(" AND ").join(
                sql.SQL("{} = %s").format(sql.Identifier(c)) for c in key
            ),
        )
        params = [*fields.values(), *key.values()]
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    if cur.rowcount == 0:
                        raise RecordStoreError(f"No row in {table} matches {key}")
                conn.commit()
        except psycopg.Error as exc:
            raise RecordStoreError(f"Update of {table} failed: {exc}") from exc
