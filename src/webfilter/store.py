"""JSON snapshot storage for the host registry."""

import json
import logging
from pathlib import Path
from typing import List, Union

from .common import read_secure_file, write_secure_file
from .exceptions import PersistenceError
from .hosts import HostRecord

logger = logging.getLogger(__name__)


class HostStore:
    """Reads and writes the ordered record set as a JSON list."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> List[HostRecord]:
        """
        Load records from the state file.

        Returns:
            Records in stored order. An absent file yields an empty list.

        Raises:
            PersistenceError: If the file is unreadable or malformed
        """
        try:
            content = read_secure_file(self.path)
        except OSError as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}")

        if content is None:
            logger.info(f"No state file at {self.path}, starting empty")
            return []
        if not content:
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Invalid JSON in {self.path}: {e}")

        # A bare null is what an empty list used to be written as
        if data is None:
            return []
        if not isinstance(data, list):
            raise PersistenceError(f"{self.path} must contain a JSON list of hosts")

        try:
            records = [HostRecord.from_dict(entry) for entry in data]
        except ValueError as e:
            raise PersistenceError(f"Invalid host in {self.path}: {e}")

        logger.debug(f"Loaded {len(records)} host(s) from {self.path}")
        return records

    def save(self, records: List[HostRecord]) -> None:
        """
        Write records to the state file, replacing its content.

        Raises:
            PersistenceError: If the file cannot be written
        """
        content = json.dumps([r.to_dict() for r in records], indent=2)
        try:
            write_secure_file(self.path, content + "\n")
        except OSError as e:
            raise PersistenceError(f"Failed to write {self.path}: {e}")
        logger.debug(f"Saved {len(records)} host(s) to {self.path}")
