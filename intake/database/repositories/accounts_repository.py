import psycopg

from intake.database.connection import get_connection
from intake.database.exceptions import RecordStoreError

_DEDUCT_SQL = """
    UPDATE clients
    SET remaining_servings = remaining_servings - 1
    WHERE client_id = %s AND remaining_servings > 0
    RETURNING remaining_servings
"""

_AUDIT_SQL = """
    INSERT INTO client_servings_log (client_id, previous_servings, new_servings, notes)
    VALUES (%s, %s, %s, %s)
"""


class AccountsRepository:
    """Customer account allowances in the clients table."""

    def remaining(self, owner_id: str) -> int | None:
        """Remaining dish allowance, or None if the owner has no allowance on record."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT remaining_servings FROM clients WHERE client_id = %s",
                    (owner_id,),
                )
                row = cur.fetchone()

        if row is None or row[0] is None:
            return None
        return int(row[0])

    def deduct(self, owner_id: str, note: str) -> tuple[int, int] | None:
        """Spend one unit of allowance and record it in the servings log.

        The decrement and the audit row commit together. Returns
        (previous, new), or None when the owner had nothing left.

        Raises:
            RecordStoreError: if the database rejects either statement.
        """
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(_DEDUCT_SQL, (owner_id,))
                    row = cur.fetchone()
                    if row is None:
                        conn.rollback()
                        return None
                    new = int(row[0])
                    cur.execute(_AUDIT_SQL, (owner_id, new + 1, new, note))
                conn.commit()
        except psycopg.Error as exc:
            raise RecordStoreError(f"Allowance deduction for {owner_id} failed: {exc}") from exc
        return new + 1, new
