"""Document stores for reservation, schedule and catalog data.

Each collection is a mapping of record id to a JSON document. All work
goes through ``DocumentStore.transaction()``: the store-wide lock is held
for the whole block, reads are cached in the unit of work, and writes are
staged and only committed when the block exits cleanly.
"""

import fcntl
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from copy import deepcopy
from pathlib import Path
from typing import IO, Any

from golflesson.exceptions import StorageError
from golflesson.exceptions import handle_errors
from golflesson.utils.logging_utils import EnhancedLoggerMixin


Records = dict[str, dict[str, Any]]

LOCK_FILE = ".lock"

class UnitOfWork:
    """Read cache and staged writes for a single transaction."""

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._collections: dict[str, Records] = {}
        self._dirty: set[str] = set()

    def records(self, collection: str) -> Records:
        """Working copy of a collection, loaded on first access."""
        if collection not in self._collections:
            self._collections[collection] = deepcopy(self._store.read(collection))
        return self._collections[collection]

    def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        record = self.records(collection).get(record_id)
        return deepcopy(record) if record is not None else None

    def put(self, collection: str, record_id: str, record: dict[str, Any]) -> None:
        self.records(collection)[record_id] = deepcopy(record)
        self._dirty.add(collection)

    def remove(self, collection: str, record_id: str) -> bool:
        removed = self.records(collection).pop(record_id, None) is not None
        if removed:
            self._dirty.add(collection)
        return removed

    def commit(self) -> None:
        for collection in sorted(self._dirty):
            self._store.write_all(collection, self._collections[collection])
        self._dirty.clear()

class DirectoryLock:
    """Re-entrant lock on a data directory across threads and processes.

    Threads of one process queue on an RLock. The outermost holder also
    takes an exclusive ``flock`` on ``<data_dir>/.lock``, so other
    processes wait until the whole transaction has committed.
    """

    def __init__(self, data_dir: Path):
        self.path = data_dir / LOCK_FILE
        self._thread_lock = threading.RLock()
        self._depth = 0
        self._handle: IO[str] | None = None

    def __enter__(self) -> "DirectoryLock":
        self._thread_lock.acquire()
        try:
            if self._depth == 0:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                handle = open(self.path, 'a', encoding='utf-8')
                try:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
                except OSError:
                    handle.close()
                    raise
                self._handle = handle
            self._depth += 1
        except BaseException:
            self._thread_lock.release()
            raise
        return self

    def __exit__(self, *exc_info: Any) -> None:
        try:
            self._depth -= 1
            if self._depth == 0 and self._handle is not None:
                fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
                self._handle.close()
                self._handle = None
        finally:
            self._thread_lock.release()

class DocumentStore(EnhancedLoggerMixin, ABC):
    """Base class for collection-oriented stores.

    Subclasses implement ``read`` and ``write_all`` with whole-collection
    replace semantics.
    """

    def __init__(self, lock: AbstractContextManager[Any] | None = None):
        super().__init__()
        self._lock = lock if lock is not None else threading.RLock()
        self._local = threading.local()

    @abstractmethod
    def read(self, collection: str) -> Records:
        """Committed records of a collection, keyed by id."""

    @abstractmethod
    def write_all(self, collection: str, records: Records) -> None:
        """Replace a collection with ``records``."""

    @property
    def current(self) -> UnitOfWork | None:
        """Unit of work of the transaction open in this thread, if any."""
        return getattr(self._local, 'uow', None)

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWork]:
        """Run a block as one atomic unit against the store.

        Nested calls in the same thread join the outer transaction; only
        the outermost block commits.
        """
        with self._lock:
            outer = self.current
            if outer is not None:
                yield outer
                return

            uow = UnitOfWork(self)
            self._local.uow = uow
            try:
                yield uow
                with handle_errors(StorageError, "storage", "commit"):
                    uow.commit()
            finally:
                self._local.uow = None

    def snapshot(self, *collections: str) -> dict[str, Records]:
        """Deep copy of the committed state of the given collections."""
        with self._lock:
            return {name: deepcopy(self.read(name)) for name in collections}

class MemoryStore(DocumentStore):
    """In-process store used by tests and dry runs."""

    def __init__(self, data: dict[str, Records] | None = None):
        super().__init__()
        self._data: dict[str, Records] = deepcopy(data) if data else {}

    def read(self, collection: str) -> Records:
        return self._data.get(collection, {})

    def write_all(self, collection: str, records: Records) -> None:
        self._data[collection] = deepcopy(records)

class JsonFileStore(DocumentStore):
    """Store keeping one ``<collection>.json`` file per collection.

    Files are replaced atomically. Transactions hold a ``DirectoryLock``
    shared by every store on the same directory in this process and
    exclusive against other processes.
    """

    _locks: dict[str, DirectoryLock] = {}
    _locks_guard = threading.Lock()

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir).resolve()
        with self._locks_guard:
            lock = self._locks.get(str(self.data_dir))
            if lock is None:
                lock = self._locks[str(self.data_dir)] = DirectoryLock(self.data_dir)
        super().__init__(lock)
        self.set_log_context(data_dir=str(self.data_dir))

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def read(self, collection: str) -> Records:
        path = self._path(collection)
        if not path.exists() or path.stat().st_size == 0:
            return {}

        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.error(f"Failed to read collection {collection}", exc_info=e)
            raise StorageError(
                f"Failed to read collection {collection}",
                {"collection": collection, "error_type": type(e).__name__}
            ) from e

        if isinstance(data, list):
            # Legacy array documents keyed by their id field
            return {record['id']: record for record in data if 'id' in record}
        if not isinstance(data, dict):
            raise StorageError(
                f"Collection {collection} is not a JSON object",
                {"collection": collection}
            )
        return data

    def write_all(self, collection: str, records: Records) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(collection)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{collection}.", suffix=".tmp", dir=self.data_dir)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=2, ensure_ascii=False, default=str)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        self.debug(f"Saved {len(records)} records", collection=collection)
