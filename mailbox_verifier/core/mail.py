"""Canonical mail model."""

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field


class MailItem(BaseModel):
    """
    Comparable representation of one mail message.

    Two mails are the same mail when every field is equal; this is
    what gets compared across accounts and against fixtures.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: str = Field("", alias="Subject")
    body: str = Field("", alias="Body")
    sender_email: str = Field("", alias="SenderEmail")
    recipient_nicknames: Tuple[str, ...] = Field((), alias="ToRecipients")
    parent_folder_name: str = Field("", alias="ParentFolderName")

    def __str__(self) -> str:
        return (
            f"Mail(subject={self.subject!r}, sender={self.sender_email!r}, "
            f"to={list(self.recipient_nicknames)}, folder={self.parent_folder_name!r})"
        )

    @classmethod
    def from_ews_item(cls, message: Any, folder_name: str = "") -> "MailItem":
        """
        Create MailItem from an exchangelib Message.

        Args:
            message: exchangelib Message object
            folder_name: Display name of the message's parent folder
        """
        from ..utils import safe_get, mailbox_addresses
        from ..services.address_normalizer import normalize_nicknames

        sender = safe_get(message, "sender")

        return cls(
            subject=safe_get(message, "subject", ""),
            body=str(safe_get(message, "body", "")),
            sender_email=safe_get(sender, "email_address", ""),
            # Skips non-address and duplicated recipients added by the migration
            recipient_nicknames=tuple(normalize_nicknames(
                mailbox_addresses(safe_get(message, "to_recipients", []))
            )),
            parent_folder_name=folder_name or "",
        )
