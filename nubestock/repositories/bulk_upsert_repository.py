"""
Bulk upsert repository - store operations behind the batch reconciler.

Works on any master-data table identified by a natural key column. Every
failure is raised as ``StoreError`` tagged with the phase it happened in.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Type

from sqlalchemy import insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.db.base import Base
from nubestock.errors import StoreError, StorePhase
from nubestock.services.batch_reconciler import ExistingRow
from nubestock.utils.formatting import utc_now

STORE_ERRORS = (SQLAlchemyError, OSError)


class BulkUpsertRepository:
    """
    Upsert store over one table.

    A session owns a single connection, so statements are serialised with a
    lock even when the reconciler dispatches updates concurrently. Each
    statement runs under its own savepoint; a failed statement does not
    abort the surrounding transaction.
    """

    def __init__(
        self,
        db: AsyncSession,
        model: Type[Base],
        *,
        key_column: str,
        identity_column: str,
        secondary_column: Optional[str] = None,
    ):
        self.db = db
        self.table = model.__table__
        self.key_column = key_column
        self.identity_column = identity_column
        self.secondary_column = secondary_column
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            if not self.db.in_transaction():
                await self.db.begin()
        except STORE_ERRORS as exc:
            raise StoreError(StorePhase.TRANSACTION, exc) from exc

        try:
            yield
        except BaseException:
            await self._rollback()
            raise

        try:
            await self.db.commit()
        except STORE_ERRORS as exc:
            await self._rollback()
            raise StoreError(StorePhase.TRANSACTION, exc) from exc

    async def fetch_existing(
        self,
        keys: Sequence[str],
        secondary_keys: Sequence[str] = (),
    ) -> List[ExistingRow]:
        """Identity, key and secondary key of every row matching either key set."""
        if not keys and not secondary_keys:
            return []

        identity = self.table.c[self.identity_column]
        key = self.table.c[self.key_column]
        columns = [identity, key]
        condition = key.in_(list(keys))

        secondary = None
        if self.secondary_column is not None:
            secondary = self.table.c[self.secondary_column]
            columns.append(secondary)
            if secondary_keys:
                condition = or_(condition, secondary.in_(list(secondary_keys)))

        async with self._lock:
            try:
                async with self.db.begin_nested():
                    result = await self.db.execute(select(*columns).where(condition))
                    rows = result.all()
            except STORE_ERRORS as exc:
                raise StoreError(StorePhase.SELECT, exc) from exc

        return [
            ExistingRow(
                identity=row[0],
                key=str(row[1]),
                secondary_key=str(row[2]) if secondary is not None and row[2] is not None else None,
            )
            for row in rows
        ]

    async def insert_many(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert all rows with one statement; returns the stored rows with their identities."""
        if not rows:
            return []

        values = [{**row, self.identity_column: row.get(self.identity_column) or uuid.uuid4()} for row in rows]
        stmt = insert(self.table).values(values).returning(*self.table.c)

        async with self._lock:
            try:
                async with self.db.begin_nested():
                    result = await self.db.execute(stmt)
                    return [dict(row) for row in result.mappings().all()]
            except STORE_ERRORS as exc:
                raise StoreError(StorePhase.INSERT, exc) from exc

    async def update_one(self, identity: Any, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update one row by identity. Returns None if the row is gone."""
        values = dict(values)
        values.pop(self.identity_column, None)
        if "modificationdate" in self.table.c:
            values["modificationdate"] = utc_now()

        stmt = (
            update(self.table)
            .where(self.table.c[self.identity_column] == identity)
            .values(**values)
            .returning(*self.table.c)
        )

        async with self._lock:
            try:
                async with self.db.begin_nested():
                    result = await self.db.execute(stmt)
                    row = result.mappings().one_or_none()
            except STORE_ERRORS as exc:
                raise StoreError(StorePhase.UPDATE, exc) from exc

        return dict(row) if row is not None else None

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except STORE_ERRORS as exc:
            raise StoreError(StorePhase.TRANSACTION, exc) from exc
