# /app/services/database_helpers/collection_repository.py

"""
Generic repositories layered on top of a blob backend (file or SQL).

A `CollectionRepository` stores a whole list of pydantic records under one
storage key. Every write reads the full collection, modifies it in memory and
writes the full collection back; there are no partial updates and no
transactions, so two concurrent writers can lose an update.

A `SingletonRepository` stores a single record (settings, model metadata)
or a plain value (the API key) under one key.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)


class StorageError(Exception):
    """Raised when the underlying medium rejects a read or a write."""


def _read_blob(backend, key: str) -> Optional[Any]:
    try:
        return backend.read(key)
    except ValueError as e:
        # An undecodable blob is treated like an absent key.
        print(f"ERROR reading storage key {key}: {e}")
        return None
    except Exception as e:
        raise StorageError(f"Failed to read data from storage key {key}: {e}") from e


def _write_blob(backend, key: str, value: Any):
    try:
        backend.write(key, value)
    except Exception as e:
        print(f"ERROR saving to storage key {key}: {e}")
        raise StorageError(f"Failed to save data to storage key {key}: {e}") from e


class CollectionRepository(Generic[T]):
    def __init__(self, backend, key: str, model: Type[T], id_field: str = "id"):
        self.backend = backend
        self.key = key
        self.model = model
        self.id_field = id_field

    # --- Read Methods ---

    def _load(self) -> List[T]:
        raw = _read_blob(self.backend, self.key)
        if not isinstance(raw, list):
            return []
        records = []
        for item in raw:
            try:
                records.append(self.model.model_validate(item))
            except ValidationError as e:
                print(f"Skipping corrupted record in {self.key}: {item.get(self.id_field, 'N/A') if isinstance(item, dict) else 'N/A'}. Error: {e}")
        return records

    def get_all(self, **filters) -> List[T]:
        """Returns all records, optionally filtered by exact field values (e.g. studentId=...)."""
        records = self._load()
        active_filters = {field: value for field, value in filters.items() if value is not None}
        if not active_filters:
            return records
        return [
            r for r in records
            if all(getattr(r, field) == value for field, value in active_filters.items())
        ]

    def get_one(self, record_id: str) -> Optional[T]:
        return next((r for r in self._load() if getattr(r, self.id_field) == record_id), None)

    # --- Write Methods ---

    def _store(self, records: List[T]):
        _write_blob(self.backend, self.key, [r.model_dump(mode="json") for r in records])

    def _coerce(self, record) -> T:
        # Dicts coming from callers are validated here; invalid input raises before any write.
        if isinstance(record, self.model):
            return record
        if isinstance(record, BaseModel):
            record = record.model_dump()
        return self.model.model_validate(record)

    def save(self, record) -> T:
        """Upserts a single record by its primary key."""
        return self.save_many([record])[0]

    def save_many(self, records: List) -> List[T]:
        """Upserts several records with a single read-modify-write of the collection."""
        validated = [self._coerce(r) for r in records]
        existing = self._load()
        index_by_id: Dict[str, int] = {getattr(r, self.id_field): i for i, r in enumerate(existing)}
        for record in validated:
            record_id = getattr(record, self.id_field)
            if record_id in index_by_id:
                existing[index_by_id[record_id]] = record
            else:
                index_by_id[record_id] = len(existing)
                existing.append(record)
        self._store(existing)
        return validated

    def update(self, record_id: str, updates: Dict[str, Any], touch_field: Optional[str] = None) -> Optional[T]:
        """
        Merges `updates` into the stored record and returns the merged record,
        or None (without writing) when the id is unknown. When `touch_field`
        is given it is set to the current UTC time.
        """
        records = self._load()
        for i, record in enumerate(records):
            if getattr(record, self.id_field) != record_id:
                continue
            merged = {**record.model_dump(), **updates}
            merged[self.id_field] = record_id
            if touch_field:
                merged[touch_field] = datetime.now(timezone.utc).isoformat()
            records[i] = self.model.model_validate(merged)
            self._store(records)
            return records[i]
        return None

    def delete(self, record_id: str) -> bool:
        records = self._load()
        remaining = [r for r in records if getattr(r, self.id_field) != record_id]
        if len(remaining) == len(records):
            return False
        self._store(remaining)
        return True


class SingletonRepository(Generic[T]):
    def __init__(self, backend, key: str, model: Optional[Type[T]] = None, default_factory: Optional[Callable[[], Any]] = None):
        self.backend = backend
        self.key = key
        self.model = model
        self.default_factory = default_factory

    def _default(self):
        return self.default_factory() if self.default_factory else None

    def get(self):
        raw = _read_blob(self.backend, self.key)
        if raw is None:
            return self._default()
        if self.model is None:
            return raw
        try:
            return self.model.model_validate(raw)
        except ValidationError as e:
            print(f"ERROR reading storage key {self.key}: {e}")
            return self._default()

    def save(self, value):
        if self.model is not None:
            if not isinstance(value, self.model):
                value = self.model.model_validate(value.model_dump() if isinstance(value, BaseModel) else value)
            _write_blob(self.backend, self.key, value.model_dump(mode="json"))
        else:
            _write_blob(self.backend, self.key, value)
        return value

    def clear(self) -> bool:
        try:
            return self.backend.delete(self.key)
        except Exception as e:
            raise StorageError(f"Failed to delete storage key {self.key}: {e}") from e
