"""Deposit schema.

A deposit is one archival package submitted by a journal. Its ``state`` records
how far it has progressed through the processing pipeline:

    deposited-by-journal -> harvested -> payload-validated -> bag-validated
        -> virus-checked -> xml-validated -> reserialized -> deposited
        -> complete

Each stage also has an error state that a deposit enters when the stage
rejects it (e.g. ``bag-error``).
"""

from datetime import datetime, timezone
from typing import Literal, get_args

from pydantic import BaseModel, Field, field_validator

DepositState = Literal[
    "deposited-by-journal",
    "harvested",
    "payload-validated",
    "bag-validated",
    "virus-checked",
    "xml-validated",
    "reserialized",
    "deposited",
    "complete",
    "harvest-error",
    "payload-error",
    "bag-error",
    "virus-error",
    "xml-error",
    "reserialize-error",
    "deposit-error",
    "status-error",
]

DEPOSIT_STATES: tuple[str, ...] = get_args(DepositState)

# States where the deposit has been handed to the preservation network.
SENT_STATES: tuple[str, ...] = ("deposited", "complete", "status-error")


class LogEntry(BaseModel):
    """One entry in a deposit's processing history.

    Attributes:
        timestamp: When the entry was written (UTC)
        message: Description of the event
        level: Log level name ("INFO", "ERROR", ...)
        stage: Name of the stage that wrote the entry
    """

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    message: str
    level: str | None = None
    stage: str | None = None


class Deposit(BaseModel):
    """A deposit moving through the processing pipeline.

    Attributes:
        id: Opaque unique identifier
        deposit_uuid: UUID assigned by the depositing plugin
        journal_uuid: UUID of the owning journal
        state: Current pipeline state
        package_path: Location of the harvested package
        journal_version: OJS version reported by the journal at deposit time
        received: When the deposit was created
        processing_log: Stage outcomes, oldest first
        error_log: Diagnostics from failed stages
    """

    id: str
    deposit_uuid: str | None = None
    journal_uuid: str
    state: DepositState = "deposited-by-journal"
    package_path: str | None = None
    journal_version: str | None = None
    received: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    processing_log: list[LogEntry] = []
    error_log: list[str] = []

    model_config = {"validate_assignment": True}

    @field_validator("deposit_uuid", "journal_uuid")
    @classmethod
    def _uppercase_uuid(cls, value: str | None) -> str | None:
        return value.upper() if value else value

    def __str__(self) -> str:
        return self.deposit_uuid or self.id

    def write_log(
        self, message: str, level: str | None = None, stage: str | None = None
    ) -> None:
        """Add an entry to the deposit's processing history."""
        self.processing_log.append(LogEntry(message=message, level=level, stage=stage))

    def add_errors(self, errors: list[str]) -> None:
        self.error_log.extend(errors)
