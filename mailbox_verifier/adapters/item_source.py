"""Remote item service: paged reads, folder lookups and deletes.

``ItemSource`` is the narrow surface the snapshot and erase services
depend on. ``EWSItemSource`` implements it against Exchange through
exchangelib, one blocking call at a time on a worker thread.
"""

import asyncio
import logging
from typing import Any, List, Optional, Protocol

from exchangelib import FolderCollection
from exchangelib.items import HARD_DELETE, SEND_TO_NONE
from exchangelib.properties import FolderId

from ..core.records import ItemKind, Page, RawRecord
from ..exceptions import EnumerationError, ItemServiceError
from ..utils import safe_get, ews_id_to_str

# Fields needed to build the canonical models
MAIL_FIELDS = ("subject", "body", "sender", "to_recipients", "parent_folder_id", "item_class")
EVENT_FIELDS = ("subject", "body", "organizer", "required_attendees", "optional_attendees", "resources")
CONTACT_FIELDS = ("display_name",)

MAIL_FOLDER_CLASS = "IPF.Note"


class ItemSource(Protocol):
    """Remote item service as seen by the snapshot and erase services."""

    @property
    def account_name(self) -> str: ...

    async def fetch_page(self, kind: ItemKind, handle: Optional[str]) -> Page:
        """Fetch the first page (handle None) or the page behind a continuation handle."""
        ...

    async def get_folder_name(self, folder_id: str) -> str:
        """Display name of a mail folder, empty if unknown."""
        ...

    async def delete_item(self, kind: ItemKind, record: RawRecord) -> None:
        """Delete one item. Raises ItemServiceError on failure."""
        ...


class EWSItemSource:
    """
    Item source backed by an Exchange mailbox.

    Continuation handles are string offsets into the item view; a page
    shorter than page_size is the last one.
    """

    def __init__(self, ews_client, page_size: int = 100):
        """
        Initialize EWSItemSource.

        Args:
            ews_client: EWSClient instance
            page_size: Items requested per page
        """
        self.ews_client = ews_client
        self.page_size = page_size
        self.logger = logging.getLogger(__name__)

    @property
    def account_name(self) -> str:
        return self.ews_client.email

    async def fetch_page(self, kind: ItemKind, handle: Optional[str]) -> Page:
        offset = self._parse_handle(handle)
        items = await asyncio.to_thread(self._fetch_slice, kind, offset)

        records = []
        for item in items:
            # exchangelib returns per-item errors in place of items
            if isinstance(item, Exception):
                self.logger.warning(f"Skipping unreadable {kind.value} item at offset {offset}: {item}")
                continue
            records.append(self._to_record(item))

        next_handle = str(offset + len(items)) if len(items) == self.page_size else None
        return Page(items=records, next_handle=next_handle)

    async def get_folder_name(self, folder_id: str) -> str:
        if not folder_id:
            return ""
        return await asyncio.to_thread(self._folder_name, folder_id)

    async def delete_item(self, kind: ItemKind, record: RawRecord) -> None:
        await asyncio.to_thread(self._delete, kind, record)

    def _parse_handle(self, handle: Optional[str]) -> int:
        if handle is None:
            return 0
        try:
            offset = int(handle)
        except ValueError:
            raise EnumerationError(f"Invalid continuation handle: {handle!r}")
        if offset < 0:
            raise EnumerationError(f"Invalid continuation handle: {handle!r}")
        return offset

    def _queryset(self, kind: ItemKind):
        account = self.ews_client.account
        if kind is ItemKind.MAIL:
            # Every mail folder under the message root, like /me/messages
            folders = [
                folder for folder in account.msg_folder_root.walk()
                if (safe_get(folder, "folder_class", "") or "").startswith(MAIL_FOLDER_CLASS)
            ]
            return FolderCollection(account=account, folders=folders).all().only(*MAIL_FIELDS)
        if kind is ItemKind.EVENT:
            return account.calendar.all().only(*EVENT_FIELDS)
        return account.contacts.all().only(*CONTACT_FIELDS)

    def _fetch_slice(self, kind: ItemKind, offset: int) -> List[Any]:
        queryset = self._queryset(kind)
        queryset.page_size = self.page_size
        return list(queryset[offset:offset + self.page_size])

    def _to_record(self, item: Any) -> RawRecord:
        return RawRecord(
            id=ews_id_to_str(safe_get(item, "id")),
            changekey=safe_get(item, "changekey"),
            item_type=safe_get(item, "item_class", ""),
            folder_id=ews_id_to_str(safe_get(item, "parent_folder_id")) or None,
            item=item,
        )

    def _folder_name(self, folder_id: str) -> str:
        folder = self.ews_client.account.root.get_folder(FolderId(id=folder_id))
        return safe_get(folder, "name", "")

    def _delete(self, kind: ItemKind, record: RawRecord) -> None:
        try:
            results = self.ews_client.account.bulk_delete(
                ids=[(record.id, record.changekey)],
                delete_type=HARD_DELETE,
                send_meeting_cancellations=SEND_TO_NONE,
            )
        except Exception as e:
            raise ItemServiceError(f"Failed to delete {kind.value} {record.id}: {e}") from e

        for result in results:
            if isinstance(result, Exception):
                raise ItemServiceError(f"Failed to delete {kind.value} {record.id}: {result}") from result
