"""Journal schema.

Journals are registered by the PLN plugin running inside an OJS instance.
Their health attributes (status, contacted, OJS version, title, terms) are
refreshed from the journal's ping gateway.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

GATEWAY_URL_SUFFIX = "/gateway/plugin/PLNGatewayPlugin"

# Recognised health values. Only "healthy" and "ping-error" are written by the
# ping cycle; the rest are set elsewhere and must round-trip untouched.
JOURNAL_STATUSES: tuple[str, ...] = (
    "healthy",
    "unhealthy",
    "ping-error",
    "triggered",
    "abandoned",
)


class Journal(BaseModel):
    """A journal taking part in the preservation network.

    Attributes:
        uuid: Journal UUID generated by the PLN plugin, stored uppercase
        url: Base URL of the journal
        status: Health of the journal (see JOURNAL_STATUSES)
        contacted: When the journal last answered a ping
        notified: When the journal manager was last notified
        ojs_version: OJS release powering the journal
        title: Journal title
        issn: Journal ISSN
        terms_accepted: Whether the journal manager accepted the terms of use
        email: Contact address of the journal manager
        publisher_name: Name of the publisher
        publisher_url: Publisher's website
    """

    uuid: str
    url: str
    status: str = "healthy"
    contacted: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    notified: datetime | None = None
    ojs_version: str | None = None
    title: str | None = None
    issn: str | None = None
    terms_accepted: bool = False
    email: str | None = None
    publisher_name: str | None = None
    publisher_url: str | None = None

    model_config = {"validate_assignment": True}

    @field_validator("uuid")
    @classmethod
    def _uppercase_uuid(cls, value: str) -> str:
        return value.upper()

    def __str__(self) -> str:
        return self.title or self.uuid

    @property
    def gateway_url(self) -> str:
        """URL of the journal's ping gateway."""
        return self.url + GATEWAY_URL_SUFFIX
