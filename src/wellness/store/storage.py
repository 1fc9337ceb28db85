"""State file persistence using a single JSON blob."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional


class StateFile:
    """Reads and writes the serialized state record."""

    def __init__(self, path: Path):
        """Initialize the state file manager.

        Args:
            path: Path to the JSON state file
        """
        self.path = Path(path)

    def _ensure_directory(self) -> None:
        """Create parent directories if they don't exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[Any]:
        """Parse the state file.

        Returns:
            Parsed JSON, or None if the file does not exist

        Raises:
            ValueError: If the file is not valid JSON
            OSError: If the file cannot be read
        """
        if not self.path.exists():
            return None
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def write(self, data: dict[str, Any]) -> None:
        """Atomically replace the state file.

        The record is written to a sibling temp file and moved into place so
        a failed write never truncates the previous state.

        Raises:
            OSError: If the directory or file cannot be written
        """
        self._ensure_directory()
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
