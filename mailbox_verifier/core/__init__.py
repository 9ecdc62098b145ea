"""Core domain models.

Raw remote records, canonical comparable models and snapshots.
"""

from .records import ItemKind, RawRecord, Page, INVITATION_ITEM_CLASS
from .mail import MailItem
from .calendar_event import CalendarEvent
from .contact import ContactItem
from .snapshot import Snapshot
from .mailbox import MailboxFixture

__all__ = [
    "ItemKind",
    "RawRecord",
    "Page",
    "INVITATION_ITEM_CLASS",
    "MailItem",
    "CalendarEvent",
    "ContactItem",
    "Snapshot",
    "MailboxFixture",
]
