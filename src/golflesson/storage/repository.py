"""Typed record access on top of a document store."""

import uuid
from collections.abc import Callable, Iterator
from typing import Any, Generic, Protocol, TypeVar

from golflesson.exceptions import NotFoundError
from golflesson.storage.document_store import DocumentStore


class Record(Protocol):
    id: str

    def to_dict(self) -> dict[str, Any]: ...

M = TypeVar('M', bound=Record)

class Repository(Generic[M]):
    """Row-style access (get, upsert, delete, list_by) to one collection.

    Every call joins the transaction open in the current thread, or runs
    in its own one-statement transaction otherwise.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        from_dict: Callable[[dict[str, Any]], M],
        entity: str | None = None
    ):
        self.store = store
        self.collection = collection
        self.entity = entity or collection.rstrip('s')
        self._from_dict = from_dict

    def get(self, record_id: str) -> M | None:
        with self.store.transaction() as uow:
            data = uow.get(self.collection, record_id)
        return self._from_dict(data) if data is not None else None

    def require(self, record_id: str) -> M:
        """Get a record or raise NotFoundError."""
        record = self.get(record_id) if record_id else None
        if record is None:
            raise NotFoundError(
                f"{self.entity.capitalize()} {record_id} not found",
                self.entity,
                record_id
            )
        return record

    def upsert(self, record: M) -> M:
        with self.store.transaction() as uow:
            uow.put(self.collection, record.id, record.to_dict())
        return record

    def delete(self, record_id: str) -> bool:
        with self.store.transaction() as uow:
            return uow.remove(self.collection, record_id)

    def iter_all(self) -> Iterator[M]:
        with self.store.transaction() as uow:
            rows = list(uow.records(self.collection).values())
        for row in rows:
            yield self._from_dict(row)

    def list_by(self, predicate: Callable[[M], bool] | None = None, **criteria: Any) -> list[M]:
        """List records whose attributes equal ``criteria`` and match ``predicate``."""
        result = []
        for record in self.iter_all():
            if any(getattr(record, key) != value for key, value in criteria.items()):
                continue
            if predicate is not None and not predicate(record):
                continue
            result.append(record)
        return result

def new_id(prefix: str) -> str:
    """Record id such as ``rsv-3f2a9c01b7de``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"
