"""Storage backends for golf lesson application."""

from golflesson.storage.document_store import DirectoryLock, DocumentStore, JsonFileStore, MemoryStore, UnitOfWork
from golflesson.storage.repository import Repository, new_id

__all__ = ['DirectoryLock', 'DocumentStore', 'JsonFileStore', 'MemoryStore', 'Repository', 'UnitOfWork', 'new_id']
