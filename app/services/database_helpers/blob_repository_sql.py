# /app/services/database_helpers/blob_repository_sql.py

"""
This module contains the raw SQLAlchemy queries for the `storage_blobs` table.
It is the SQL implementation of the blob backend used by the storage service:
every storage key maps to exactly one row whose JSON column holds the whole
serialized collection.
"""

from typing import Any, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.db.models.storage_models import StorageBlob


class BlobRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def read(self, key: str) -> Optional[Any]:
        """Returns the decoded value stored under `key`, or None when the key is absent."""
        blob = self.db.query(StorageBlob).filter(StorageBlob.key == key).first()
        if blob is None:
            return None
        return blob.value

    def write(self, key: str, value: Any):
        """
        Replaces the value stored under `key`. The session is rolled back
        before the error is re-raised so it stays usable.
        """
        try:
            blob = self.db.query(StorageBlob).filter(StorageBlob.key == key).first()
            if blob is None:
                self.db.add(StorageBlob(key=key, value=value))
            else:
                blob.value = value
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def delete(self, key: str) -> bool:
        try:
            blob = self.db.query(StorageBlob).filter(StorageBlob.key == key).first()
            if blob is None:
                return False
            self.db.delete(blob)
            self.db.commit()
            return True
        except SQLAlchemyError:
            self.db.rollback()
            raise
