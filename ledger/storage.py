"""Persistence utilities for the ledger flat files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

FIELD_DELIMITER = ","


class FlatFileStorage:
    """File-based storage of delimited text rows with crash-safe writes.

    Rows carry no header, quoting or escaping: a field holding the delimiter
    would split into two fields on the next load.
    """

    def __init__(self, base_path: Path, delimiter: str = FIELD_DELIMITER) -> None:
        self._base_path = base_path
        self._delimiter = delimiter
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load_rows(self, resource: str) -> Optional[List[List[str]]]:
        """Return the split rows of ``resource`` or ``None`` when it cannot be read."""
        path = self._base_path / resource
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                lines = handle.read().splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Unable to read from %s: %s", path, exc)
            return None
        return [line.split(self._delimiter) for line in lines if line.strip()]

    def save_rows(self, resource: str, rows: Iterable[Sequence[str]]) -> None:
        path = self._base_path / resource
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8", newline="\n") as handle:
                for row in rows:
                    handle.write(self._delimiter.join(row) + "\n")
                handle.flush()
            # Use replace for atomic move on POSIX; the previous file survives a failed write.
            temp_path.replace(path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Unable to write to {path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path
