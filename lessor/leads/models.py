"""Lead model: the customer record tasks act on."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Lead(BaseModel):
    """A prospective renter.

    Only the fields the orchestration layer reads are modelled here;
    the rest of the CRM record belongs to the dashboard.
    """

    id: UUID = Field(default_factory=uuid4)
    organization_id: UUID = Field(..., description="Owning organization")
    first_name: str | None = Field(default=None)
    last_name: str | None = Field(default=None)
    phone: str | None = Field(default=None)
    email: str | None = Field(default=None)

    # Contact permissions
    do_not_contact: bool = Field(default=False)
    sms_consent: bool = Field(default=False)
    sms_consent_at: datetime | None = Field(default=None)
    call_consent: bool = Field(default=False)
    call_consent_at: datetime | None = Field(default=None)

    # Human takeover
    is_human_controlled: bool = Field(default=False)
    human_controlled_by: UUID | None = Field(default=None)
    human_controlled_at: datetime | None = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)

    @property
    def display_name(self) -> str:
        """Name for audit messages."""
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or str(self.id)
