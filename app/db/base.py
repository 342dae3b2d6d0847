# /app/db/base.py

# Central registry for all SQLAlchemy models. Importing them here ensures
# `Base.metadata` knows about every table before `create_all` runs.

from .database import Base

from .models.storage_models import StorageBlob
