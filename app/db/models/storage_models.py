# /app/db/models/storage_models.py

"""
SQLAlchemy model for the key-value blob table that backs the storage service
when USE_DATABASE is enabled. Each row holds one whole collection (all
students, all alerts, ...) serialized as JSON under its storage key.
"""

from sqlalchemy import Column, String, JSON, DateTime
from sqlalchemy.sql import func

from ..database import Base

class StorageBlob(Base):
    __tablename__ = "storage_blobs"

    key = Column(String, primary_key=True, index=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
