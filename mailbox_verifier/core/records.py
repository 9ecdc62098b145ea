"""Raw remote records and the pages that carry them."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field

# Item class of a meeting request delivered into the mailbox
INVITATION_ITEM_CLASS = "IPM.Schedule.Meeting.Request"


class ItemKind(str, Enum):
    """Kinds of mailbox content that are snapshotted."""
    MAIL = "mail"
    EVENT = "event"
    CONTACT = "contact"


class RawRecord(BaseModel):
    """
    One remote item as returned by the item service.

    Only lives for the duration of a single snapshot pass.
    """

    id: str = Field(..., description="Service-assigned item id")
    changekey: Optional[str] = Field(None, description="Item version, required for deletes")
    item_type: str = Field("", description="Type discriminator (EWS item class)")
    folder_id: Optional[str] = Field(None, description="Parent folder id, mail only")
    item: Any = Field(None, description="Remote item object", repr=False)

    @property
    def is_invitation(self) -> bool:
        """True for calendar-invitation artifacts delivered as mail."""
        return self.item_type.startswith(INVITATION_ITEM_CLASS)


class Page(BaseModel):
    """One page of a paged collection."""

    items: List[RawRecord] = Field(default_factory=list)
    next_handle: Optional[str] = Field(None, description="Continuation handle, None on the last page")

    @property
    def has_next(self) -> bool:
        return bool(self.next_handle)
