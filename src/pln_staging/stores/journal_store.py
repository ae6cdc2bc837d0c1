"""Journal storage backed by a directory of JSON files."""

import logging
from pathlib import Path

from schemas.journal import Journal

from .exceptions import JournalNotFoundError

logger = logging.getLogger(__name__)


class JsonJournalStore:
    """Journal records, one JSON file per uppercased UUID.

    Attributes:
        root: Directory holding the journal files
    """

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"JsonJournalStore('{self.root}')"

    def _path(self, uuid: str) -> Path:
        return self.root / f"{uuid.upper()}.json"

    def get(self, uuid: str) -> Journal:
        """Return the journal with *uuid*.

        Raises:
            JournalNotFoundError: If the journal is not registered
        """
        path = self._path(uuid)
        if not path.is_file():
            raise JournalNotFoundError(f"no such journal: {uuid}")
        return Journal.model_validate_json(path.read_text())

    def all(self) -> list[Journal]:
        return [
            Journal.model_validate_json(f.read_text())
            for f in sorted(self.root.glob("*.json"))
        ]

    def save(self, journal: Journal) -> None:
        """Write *journal*, replacing any previous record atomically."""
        path = self._path(journal.uuid)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(journal.model_dump_json(indent=2))
        tmp_path.rename(path)
        logger.debug(f"Saved journal {journal.uuid} to {path}")
