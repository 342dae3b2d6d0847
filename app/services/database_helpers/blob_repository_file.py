# /app/services/database_helpers/blob_repository_file.py

"""
File implementation of the blob backend: one JSON document per storage key
inside a data directory. This is the default backend for local development
and for a single-client deployment.
"""

import os
import json
from typing import Any, Optional


class BlobRepositoryFile:
    def __init__(self, data_dir: str):
        self.data_dir = data_dir

    def _path_for(self, key: str) -> str:
        return os.path.join(self.data_dir, f"{key}.json")

    def read(self, key: str) -> Optional[Any]:
        """
        Returns the decoded value stored under `key`, or None when no file exists.
        A file with invalid JSON raises `json.JSONDecodeError`.
        """
        path = self._path_for(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def write(self, key: str, value: Any):
        # Write to a sibling temp file first so a failed dump never truncates the old blob.
        os.makedirs(self.data_dir, exist_ok=True)
        path = self._path_for(key)
        temp_path = f"{path}.tmp"
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(value, f)
        os.replace(temp_path, path)

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        if not os.path.exists(path):
            return False
        os.remove(path)
        return True
