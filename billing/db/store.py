"""
Document store contract and the in-memory implementation.

The billing domain never talks to a database directly. It reads and writes
collection-scoped documents (plain field maps) through DocumentStore, which
assigns ids and timestamps. Two implementations exist:

- InMemoryDocumentStore: process-local dictionaries, used for STORE_BACKEND=memory
  and throughout the test-suite
- SqlDocumentStore (billing.db.repositories.documents): SQLAlchemy async engine
"""

import asyncio
import copy
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from billing.db.timestamps import utcnow


@dataclass
class Document:
    """A stored document: its id, owning collection and field map."""

    id: str
    collection: str
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into one mapping, the shape response schemas validate."""
        return {
            **self.data,
            "id": self.id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def matches(data: Mapping[str, Any], where: Optional[Mapping[str, Any]]) -> bool:
    if not where:
        return True
    return all(data.get(key) == value for key, value in where.items())


class DocumentStore(ABC):
    """
    Abstract collection-scoped document store.

    Every method is a suspension point; callers must not assume that two
    calls observe each other unless one awaited the other.
    """

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return one document or None when it does not exist."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        where: Optional[Mapping[str, Any]] = None,
    ) -> List[Document]:
        """Return the documents whose fields equal every value in ``where``."""

    @abstractmethod
    async def create(
        self,
        collection: str,
        data: Mapping[str, Any],
        doc_id: Optional[str] = None,
    ) -> str:
        """Persist a new document and return its id. The store sets created_at."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> bool:
        """Merge ``data`` into an existing document. False when it is missing."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """Remove a document. False when it is missing."""

    @abstractmethod
    async def get_counter(self, name: str) -> Optional[int]:
        """Return the current value of a named counter, None if never used."""

    @abstractmethod
    async def increment_counter(self, name: str, amount: int = 1, initial: int = 0) -> int:
        """
        Atomically add ``amount`` to a named counter and return the new value.

        A counter that does not exist yet starts from ``initial``; when two
        callers race to create it only one ``initial`` is applied.
        """


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed store. Data lives as long as the instance."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Document]] = {}
        self._counters: Dict[str, int] = {}
        self._counter_lock = asyncio.Lock()

    def _bucket(self, collection: str) -> Dict[str, Document]:
        return self._collections.setdefault(collection, {})

    async def get(self, collection, doc_id):
        await asyncio.sleep(0)
        doc = self._bucket(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def query(self, collection, where=None):
        await asyncio.sleep(0)
        return [
            copy.deepcopy(doc)
            for doc in self._bucket(collection).values()
            if matches(doc.data, where)
        ]

    async def create(self, collection, data, doc_id=None):
        await asyncio.sleep(0)
        doc_id = doc_id or uuid.uuid4().hex
        bucket = self._bucket(collection)
        if doc_id in bucket:
            raise KeyError(f"{collection}/{doc_id} already exists")
        bucket[doc_id] = Document(
            id=doc_id,
            collection=collection,
            data=copy.deepcopy(dict(data)),
            created_at=utcnow(),
        )
        return doc_id

    async def update(self, collection, doc_id, data):
        await asyncio.sleep(0)
        doc = self._bucket(collection).get(doc_id)
        if doc is None:
            return False
        doc.data.update(copy.deepcopy(dict(data)))
        doc.updated_at = utcnow()
        return True

    async def delete(self, collection, doc_id):
        await asyncio.sleep(0)
        return self._bucket(collection).pop(doc_id, None) is not None

    async def get_counter(self, name):
        await asyncio.sleep(0)
        return self._counters.get(name)

    async def increment_counter(self, name, amount=1, initial=0):
        async with self._counter_lock:
            await asyncio.sleep(0)
            value = self._counters.get(name, initial) + amount
            self._counters[name] = value
            return value
