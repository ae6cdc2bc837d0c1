"""Whitelist storage.

The whitelist is the network-wide trust list: journals whose UUID appears in
it are eligible for reduced restrictions downstream. The JSON store keeps one
file per entry, named for the uppercased UUID, and creates it exclusively so
a UUID can never be listed twice.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from schemas.whitelist import WhitelistEntry

logger = logging.getLogger(__name__)


class WhitelistStore(ABC):
    """Mapping from journal UUID to whitelist entry."""

    @abstractmethod
    def contains(self, uuid: str) -> bool:
        pass

    @abstractmethod
    def get(self, uuid: str) -> WhitelistEntry | None:
        pass

    @abstractmethod
    def insert(self, uuid: str, comment: str) -> bool:
        """Add *uuid* to the whitelist.

        Returns:
            True if a new entry was created, False if the UUID was already listed
        """
        pass


class JsonWhitelistStore(WhitelistStore):
    """Whitelist backed by a directory of JSON files.

    Attributes:
        root: Directory holding one file per whitelisted UUID
    """

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"JsonWhitelistStore('{self.root}')"

    def _path(self, uuid: str) -> Path:
        return self.root / f"{uuid.upper()}.json"

    def contains(self, uuid: str) -> bool:
        return self._path(uuid).is_file()

    def get(self, uuid: str) -> WhitelistEntry | None:
        path = self._path(uuid)
        if not path.is_file():
            return None
        return WhitelistEntry.model_validate_json(path.read_text())

    def insert(self, uuid: str, comment: str) -> bool:
        entry = WhitelistEntry(uuid=uuid, comment=comment)
        try:
            with self._path(uuid).open("x") as f:
                f.write(entry.model_dump_json(indent=2))
        except FileExistsError:
            logger.debug(f"{entry.uuid} is already whitelisted")
            return False
        logger.info(f"Whitelisted {entry.uuid}: {comment}")
        return True

    def all(self) -> list[WhitelistEntry]:
        return [
            WhitelistEntry.model_validate_json(f.read_text())
            for f in sorted(self.root.glob("*.json"))
        ]
