"""
Local JSON file storage for users and their jobs

The whole store is one JSON array of user objects. Every call re-reads the
file; mutations go through update() so that load/modify/save runs under a
single lock and concurrent writers cannot overwrite each other.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Callable, List, TypeVar

from pydantic import TypeAdapter, ValidationError

from jobtracker.core.exceptions import StoreParseError
from jobtracker.schemas.user import User

logger = logging.getLogger(__name__)

T = TypeVar("T")

_users_adapter = TypeAdapter(List[User])


class JsonUserStore:
    """
    Flat-file user store
    Data stored in: data/data.json (configurable)
    """

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._lock = threading.RLock()

    def _ensure_file_exists(self):
        """Create parent directory and an empty-array file if missing"""
        directory = os.path.dirname(self.file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(self.file_path):
            with open(self.file_path, "w", encoding="utf-8") as f:
                json.dump([], f)
            logger.info(f"Created storage file: {self.file_path}")

    def _read_data(self) -> List[User]:
        """Read and validate all users from the JSON file"""
        # Bytes, so invalid UTF-8 is reported by validation like any bad JSON
        with open(self.file_path, "rb") as f:
            content = f.read()
        try:
            return _users_adapter.validate_json(content)
        except ValidationError as e:
            logger.error(f"Corrupt JSON file: {self.file_path}")
            raise StoreParseError(f"Invalid data file {self.file_path}: {e}") from e

    def _write_data(self, users: List[User]):
        """Replace the file with the serialized users"""
        data = [user.model_dump(by_alias=True) for user in users]
        directory = os.path.dirname(os.path.abspath(self.file_path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".data-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.file_path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load(self) -> List[User]:
        """
        Load every user, in insertion order

        Raises:
            StoreParseError: the file is not a JSON list of users
        """
        with self._lock:
            self._ensure_file_exists()
            return self._read_data()

    def save(self, users: List[User]) -> None:
        """Overwrite the store with the given users"""
        with self._lock:
            self._ensure_file_exists()
            self._write_data(users)

    def update(self, mutator: Callable[[List[User]], T]) -> T:
        """
        Load, mutate and save as one critical section

        The mutator edits the list in place and returns the call's result.
        If it raises, nothing is written and the exception propagates.

        Args:
            mutator: function receiving the full user list

        Returns:
            Whatever the mutator returned
        """
        with self._lock:
            users = self.load()
            result = mutator(users)
            self.save(users)
            return result

    def get_user_count(self) -> int:
        """Get total number of users"""
        return len(self.load())
