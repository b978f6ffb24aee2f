"""Compliance policy configuration."""

from datetime import time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator


class CompliancePolicy(BaseModel):
    """Contact-window policy applied before regulated actions.

    Defaults mirror the organization settings shipped with new tenants:
    Monday to Saturday, 09:00 to 20:00 local time.
    """

    working_hours_start: time = Field(
        default=time(9, 0),
        description="Earliest local time a regulated action may run",
    )
    working_hours_end: time = Field(
        default=time(20, 0),
        description="Local time after which regulated actions are blocked",
    )
    working_days: list[int] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5, 6],
        description="ISO weekdays (1 = Monday) on which contact is allowed",
    )
    timezone: str = Field(
        default="America/New_York",
        description="IANA timezone used to evaluate the contact window",
    )
    enforce_working_hours: bool = Field(
        default=True,
        description="Apply the working days/hours window",
    )

    @field_validator("working_days")
    @classmethod
    def _validate_days(cls, value: list[int]) -> list[int]:
        for day in value:
            if day < 1 or day > 7:
                raise ValueError(f"working_days entries must be 1-7, got {day}")
        return value

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value
