"""Data Access Layer for persisted exchange rates.

Responsibilities
----------------
- Point lookups of rate rows by base currency (and by pair).
- Batch upsert keyed on (base_currency, target_currency), applied in a single
  transaction so a failing batch leaves every existing row untouched.
- Translate sqlite failures into StoreError for the service layer.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import sqlite3
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from fxdash.core.errors import StoreError

UPSERT_RATE_SQL = """
INSERT INTO exchange_rates (base_currency, target_currency, rate, last_updated)
VALUES (:base_currency, :target_currency, :rate, :last_updated)
ON CONFLICT(base_currency, target_currency) DO UPDATE SET
    rate = excluded.rate,
    last_updated = excluded.last_updated
"""


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self, action: str) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside one transaction; commit on success, roll back on error."""
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to {action}: {e}") from e
        try:
            cur = conn.cursor()
            yield cur
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Failed to {action}: {e}") from e
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Exchange rates
    def select_rates_by_base(self, base_currency: str) -> List[Dict[str, Any]]:
        with self._transaction("read exchange rates") as cur:
            cur.execute(
                """
                SELECT id, base_currency, target_currency, rate, last_updated
                FROM exchange_rates
                WHERE base_currency = ?
                ORDER BY id
                """,
                (base_currency,),
            )
            return [dict(r) for r in cur.fetchall()]

    def get_rate(
        self, base_currency: str, target_currency: str
    ) -> Optional[Dict[str, Any]]:
        with self._transaction("read exchange rate") as cur:
            cur.execute(
                """
                SELECT id, base_currency, target_currency, rate, last_updated
                FROM exchange_rates
                WHERE base_currency = ? AND target_currency = ?
                """,
                (base_currency, target_currency),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def count_rates(self, base_currency: Optional[str] = None) -> int:
        query = "SELECT COUNT(*) FROM exchange_rates"
        params: List[Any] = []
        if base_currency is not None:
            query += " WHERE base_currency = ?"
            params.append(base_currency)
        with self._transaction("count exchange rates") as cur:
            cur.execute(query, params)
            row = cur.fetchone()
            return int(row[0] if row and row[0] is not None else 0)

    def list_base_currencies(self) -> List[str]:
        with self._transaction("list base currencies") as cur:
            cur.execute(
                "SELECT DISTINCT base_currency FROM exchange_rates ORDER BY base_currency"
            )
            return [r[0] for r in cur.fetchall()]

    def upsert_rates(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Insert or update rate rows in one transaction and return the batch size.

        Conflicts on (base_currency, target_currency) replace rate and
        last_updated while keeping the existing row id.
        """
        params = [
            {
                "base_currency": r["base_currency"],
                "target_currency": r["target_currency"],
                "rate": r["rate"],
                "last_updated": r["last_updated"],
            }
            for r in rows
        ]
        if not params:
            return 0
        with self._transaction("upsert exchange rates") as cur:
            cur.executemany(UPSERT_RATE_SQL, params)
        return len(params)
