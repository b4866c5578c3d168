
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql import select

from billing.db.models.counters import CounterRow
from billing.db.models.documents import DocumentRow
from billing.db.store import Document, DocumentStore, matches
from billing.db.timestamps import as_aware, utcnow


def _to_document(row: DocumentRow) -> Document:
    return Document(
        id=row.id,
        collection=row.collection,
        data=dict(row.data or {}),
        created_at=as_aware(row.created_at),
        updated_at=as_aware(row.updated_at),
    )


class SqlDocumentStore(DocumentStore):
    """DocumentStore over SQLAlchemy's async engine, one session per call."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(DocumentRow).where(
                    DocumentRow.collection == collection,
                    DocumentRow.id == doc_id,
                )
            )
            row = result.scalar_one_or_none()
            return _to_document(row) if row is not None else None

    async def query(
        self,
        collection: str,
        where: Optional[Mapping[str, Any]] = None,
    ) -> List[Document]:
        where = dict(where or {})
        stmt = select(DocumentRow).where(DocumentRow.collection == collection)
        if "created_by" in where:
            stmt = stmt.where(DocumentRow.created_by == where["created_by"])
        stmt = stmt.order_by(DocumentRow.created_at)

        async with self._session_factory() as db:
            result = await db.execute(stmt)
            rows = result.scalars().all()

        # remaining filters are applied to the JSON payload in Python
        docs = [_to_document(row) for row in rows]
        return [doc for doc in docs if matches(doc.data, where)]

    async def create(
        self,
        collection: str,
        data: Mapping[str, Any],
        doc_id: Optional[str] = None,
    ) -> str:
        row = DocumentRow(
            collection=collection,
            created_by=data.get("created_by"),
            data=dict(data),
            created_at=utcnow(),
        )
        if doc_id is not None:
            row.id = doc_id

        async with self._session_factory() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
            return row.id

    async def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> bool:
        async with self._session_factory() as db:
            result = await db.execute(
                select(DocumentRow).where(
                    DocumentRow.collection == collection,
                    DocumentRow.id == doc_id,
                )
            )
            row = result.scalar_one_or_none()
            if row is None:
                return False

            merged: Dict[str, Any] = {**(row.data or {}), **data}
            row.data = merged
            row.created_by = merged.get("created_by")
            row.updated_at = utcnow()
            await db.commit()
            return True

    async def delete(self, collection: str, doc_id: str) -> bool:
        async with self._session_factory() as db:
            result = await db.execute(
                select(DocumentRow).where(
                    DocumentRow.collection == collection,
                    DocumentRow.id == doc_id,
                )
            )
            row = result.scalar_one_or_none()
            if row is None:
                return False
            await db.delete(row)
            await db.commit()
            return True

    async def get_counter(self, name: str) -> Optional[int]:
        async with self._session_factory() as db:
            result = await db.execute(select(CounterRow.value).where(CounterRow.name == name))
            return result.scalar_one_or_none()

    async def increment_counter(self, name: str, amount: int = 1, initial: int = 0) -> int:
        counters = CounterRow.__table__
        bump = (
            update(counters)
            .where(counters.c.name == name)
            .values(value=counters.c.value + amount, updated_at=utcnow())
            .returning(counters.c.value)
        )

        # second attempt covers another writer creating the row between our
        # UPDATE and INSERT
        for _ in range(2):
            async with self._session_factory() as db:
                result = await db.execute(bump)
                value = result.scalar_one_or_none()
                if value is not None:
                    await db.commit()
                    return value

                db.add(CounterRow(name=name, value=initial + amount, updated_at=utcnow()))
                try:
                    await db.commit()
                except IntegrityError:
                    await db.rollback()
                    continue
                return initial + amount

        raise RuntimeError(f"Could not increment counter {name!r}")
