"""Whitelist entry schema."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class WhitelistEntry(BaseModel):
    """A journal trusted by the preservation network.

    Attributes:
        uuid: Journal UUID, stored uppercase
        comment: Free-text note on why the journal was listed
        created: When the entry was created
    """

    uuid: str
    comment: str = ""
    created: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("uuid")
    @classmethod
    def _uppercase_uuid(cls, value: str) -> str:
        return value.upper()
