"""Deposit storage.

The JSON store keeps one directory (bucket) per deposit state and one JSON
file per deposit:

    data/deposits/
    ├── payload-validated/
    │   ├── 17.json        # waiting in this state
    │   └── 18.bak         # claimed by a worker mid-transition
    ├── bag-validated/
    │   └── 16.json
    └── bag-error/
        └── 15.json

A transition claims the deposit by renaming ``<id>.json`` to ``<id>.bak`` in
the bucket of the state the caller last saw. Rename is atomic, so when two
workers race for the same deposit only one claim succeeds; the loser sees
the file missing and reports a conflict. The winner writes the record into
the target bucket and drops the claim.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from schemas.deposit import DEPOSIT_STATES, SENT_STATES, Deposit

from .exceptions import DepositNotFoundError, StoreError

logger = logging.getLogger(__name__)


class DepositStore(ABC):
    """Durable record of deposits and their pipeline state."""

    @abstractmethod
    def find(
        self,
        state: str,
        deposit_ids: list[str] | None = None,
        limit: int | None = None,
    ) -> list[Deposit]:
        """Return deposits currently in *state*, ordered by id.

        Args:
            state: Pipeline state to select
            deposit_ids: If given, only return deposits with these ids
            limit: Maximum number of deposits to return
        """
        pass

    @abstractmethod
    def get(self, deposit_id: str) -> Deposit:
        """Return one deposit by id.

        Raises:
            DepositNotFoundError: If no deposit has this id
        """
        pass

    @abstractmethod
    def add(self, deposit: Deposit) -> None:
        """Store a new deposit."""
        pass

    @abstractmethod
    def transition(self, deposit: Deposit, new_state: str) -> bool:
        """Move *deposit* from its current state to *new_state*.

        The deposit's other fields (logs) are persisted along with the new
        state. On success ``deposit.state`` is updated in place.

        Returns:
            True if the transition was applied, False if the stored deposit
            is no longer in ``deposit.state`` (another worker moved it)
        """
        pass

    def sent_deposits_for(self, journal_uuid: str) -> list[Deposit]:
        """Return a journal's deposits that were sent to the preservation network."""
        journal_uuid = journal_uuid.upper()
        return [
            deposit
            for state in SENT_STATES
            for deposit in self.find(state)
            if deposit.journal_uuid == journal_uuid
        ]


def load_deposit(path: Path) -> Deposit:
    """Load a deposit from a JSON file."""
    return Deposit.model_validate_json(path.read_text())


def dump_deposit(deposit: Deposit, destination: Path) -> None:
    """Write a deposit to *destination* atomically."""
    tmp_path = destination.with_suffix(".tmp")
    tmp_path.write_text(deposit.model_dump_json(indent=2))
    tmp_path.rename(destination)


class JsonDepositStore(DepositStore):
    """Deposit store backed by per-state bucket directories of JSON files.

    Attributes:
        root: Directory holding one bucket per deposit state
    """

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"JsonDepositStore('{self.root}')"

    def bucket(self, state: str) -> Path:
        """Return the bucket directory for *state*, creating it if needed.

        Raises:
            ValueError: If *state* is not a known deposit state
        """
        if state not in DEPOSIT_STATES:
            raise ValueError(f"no such deposit state: {state}")
        path = self.root / state
        path.mkdir(exist_ok=True)
        return path

    def find(
        self,
        state: str,
        deposit_ids: list[str] | None = None,
        limit: int | None = None,
    ) -> list[Deposit]:
        deposits = []
        for path in self.bucket(state).glob("*.json"):
            try:
                deposits.append(load_deposit(path))
            except FileNotFoundError:
                # claimed by another worker since the directory was listed
                continue
            except ValidationError as e:
                logger.error(f"Skipping unreadable deposit record {path}: {e}")
                continue
        if deposit_ids:
            wanted = set(deposit_ids)
            deposits = [d for d in deposits if d.id in wanted]
        deposits.sort(key=_sort_key)
        if limit is not None:
            deposits = deposits[:limit]
        return deposits

    def get(self, deposit_id: str) -> Deposit:
        for state in DEPOSIT_STATES:
            path = self.root / state / f"{deposit_id}.json"
            if path.is_file():
                return load_deposit(path)
        raise DepositNotFoundError(f"no such deposit: {deposit_id}")

    def add(self, deposit: Deposit) -> None:
        if self._locate(deposit.id) is not None:
            raise StoreError(f"deposit {deposit.id} already exists")
        path = self.bucket(deposit.state) / f"{deposit.id}.json"
        with path.open("x") as f:
            f.write(deposit.model_dump_json(indent=2))

    def transition(self, deposit: Deposit, new_state: str) -> bool:
        source = self.bucket(deposit.state) / f"{deposit.id}.json"
        claimed = source.with_suffix(".bak")
        destination = self.bucket(new_state) / f"{deposit.id}.json"

        try:
            source.rename(claimed)
        except FileNotFoundError:
            logger.warning(
                f"Deposit {deposit.id} is no longer in {deposit.state}; "
                f"not moving it to {new_state}"
            )
            return False

        record = deposit.model_copy(deep=True)
        record.state = new_state
        try:
            dump_deposit(record, destination)
        except OSError:
            claimed.rename(source)
            raise
        claimed.unlink()

        deposit.state = new_state
        return True

    def recover_orphaned_deposits(self) -> list[str]:
        """Release claims left behind by interrupted workers.

        Converts every ``.bak`` file back to ``.json`` so the deposit is
        selected again on the next run. A claim whose deposit was already
        saved again (in any bucket) belongs to a finished transition and is
        removed instead. Only call this while no other worker is using the
        store.

        Returns:
            Ids of the recovered deposits
        """
        recovered = []
        for state in DEPOSIT_STATES:
            bucket = self.root / state
            for bak_file in bucket.glob("*.bak"):
                json_file = bak_file.with_suffix(".json")
                if self._has_record(bak_file.stem):
                    logger.warning(
                        f"Dropping stale claim {state}/{bak_file.name}: "
                        f"deposit {bak_file.stem} was already saved"
                    )
                    bak_file.unlink()
                    continue
                logger.warning(
                    f"Recovering orphaned deposit: {state}/{bak_file.name} -> {json_file.name}"
                )
                bak_file.rename(json_file)
                recovered.append(bak_file.stem)
        return recovered

    @property
    def snapshot(self) -> dict:
        """Get current status of every non-empty bucket.

        Returns:
            Dictionary mapping state names to waiting deposit ids and ids
            currently claimed by a worker
        """
        states = {}
        for state in DEPOSIT_STATES:
            bucket = self.root / state
            info = {
                "waiting": sorted(f.stem for f in bucket.glob("*.json")),
                "in_process": sorted(f.stem for f in bucket.glob("*.bak")),
            }
            if info["waiting"] or info["in_process"]:
                states[state] = info
        return states

    def _has_record(self, deposit_id: str) -> bool:
        """Return True if a saved record of *deposit_id* exists in any bucket."""
        return any(
            (self.root / state / f"{deposit_id}.json").is_file() for state in DEPOSIT_STATES
        )

    def _locate(self, deposit_id: str) -> Path | None:
        for state in DEPOSIT_STATES:
            for suffix in (".json", ".bak"):
                path = self.root / state / f"{deposit_id}{suffix}"
                if path.exists():
                    return path
        return None


def _sort_key(deposit: Deposit) -> tuple[int, str]:
    """Order numeric ids numerically and the rest lexically."""
    if deposit.id.isdigit():
        return (0, deposit.id.zfill(20))
    return (1, deposit.id)
