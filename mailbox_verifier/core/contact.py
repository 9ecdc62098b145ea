"""Canonical contact model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContactItem(BaseModel):
    """Comparable representation of one contact. Only the display name is kept."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    display_name: str = Field("", alias="DisplayName")

    def __str__(self) -> str:
        return f"Contact(display_name={self.display_name!r})"

    @classmethod
    def from_ews_item(cls, contact: Any) -> "ContactItem":
        from ..utils import safe_get

        return cls(display_name=safe_get(contact, "display_name", ""))
