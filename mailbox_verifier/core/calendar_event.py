"""Canonical calendar event model."""

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CalendarEvent(BaseModel):
    """Comparable representation of one calendar event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: str = Field("", alias="Subject")
    body: str = Field("", alias="Body")
    organizer_email: str = Field("", alias="Organizer")
    attendee_nicknames: Tuple[str, ...] = Field((), alias="Attendees")

    def __str__(self) -> str:
        return (
            f"Event(subject={self.subject!r}, organizer={self.organizer_email!r}, "
            f"attendees={list(self.attendee_nicknames)})"
        )

    @classmethod
    def from_ews_item(cls, event: Any) -> "CalendarEvent":
        """
        Create CalendarEvent from an exchangelib CalendarItem.

        Required, optional and resource attendees are merged in that order.
        """
        from ..utils import safe_get, mailbox_addresses
        from ..services.address_normalizer import normalize_nicknames

        organizer = safe_get(event, "organizer")
        attendees = []
        for field in ("required_attendees", "optional_attendees", "resources"):
            attendees.extend(mailbox_addresses(safe_get(event, field, [])))

        return cls(
            subject=safe_get(event, "subject", ""),
            body=str(safe_get(event, "body", "")),
            organizer_email=safe_get(organizer, "email_address", ""),
            attendee_nicknames=tuple(normalize_nicknames(attendees)),
        )
