"""SnapshotBuilder - canonical snapshots of one mailbox."""

import logging
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from ..adapters.paginator import Paginator
from ..core.records import ItemKind, RawRecord
from ..core.snapshot import Snapshot
from ..core.mail import MailItem
from ..core.calendar_event import CalendarEvent
from ..core.contact import ContactItem
from ..exceptions import EnumerationError

T = TypeVar("T")


class SnapshotBuilder:
    """
    Builds mail, event and contact snapshots for one account.

    Enumeration goes through a Paginator over the item source; each raw
    record is then mapped to its canonical model. Failures are absorbed
    here:

    - a record that cannot be mapped is dropped and counted
    - a failed page fetch ends enumeration; the snapshot keeps what was
      read so far and is marked incomplete
    """

    def __init__(self, item_source, account: Optional[str] = None):
        """
        Initialize SnapshotBuilder.

        Args:
            item_source: ItemSource for the account
            account: Account name used in logs and messages
        """
        self.item_source = item_source
        self.account = account or getattr(item_source, "account_name", "")
        self.logger = logging.getLogger(__name__)

    async def raw_records(self, kind: ItemKind) -> Tuple[List[RawRecord], bool, Optional[str]]:
        """
        Enumerate every raw record of one kind.

        Returns:
            (records, complete, error). Records keep remote order and a
            remote id appears at most once.
        """
        async def fetch_page(handle: Optional[str]):
            return await self.item_source.fetch_page(kind, handle)

        paginator = Paginator(fetch_page, label=f"{self.account} {kind.value}")
        records: List[RawRecord] = []
        seen_ids = set()

        try:
            async for record in paginator:
                if record.id in seen_ids:
                    self.logger.debug(f"Skipping repeated {kind.value} id {record.id}")
                    continue
                seen_ids.add(record.id)
                records.append(record)
        except EnumerationError as e:
            self.logger.error(
                f"Enumeration of {kind.value} for {self.account} stopped after "
                f"{e.pages_fetched} page(s), {len(records)} item(s) kept: {e}"
            )
            return records, False, str(e)

        self.logger.info(
            f"Enumerated {len(records)} {kind.value} record(s) for {self.account} "
            f"in {paginator.pages_fetched} page(s)"
        )
        return records, True, None

    async def snapshot(self, kind: ItemKind) -> Snapshot:
        """Build the snapshot of one kind."""
        if kind is ItemKind.MAIL:
            return await self.mails()
        if kind is ItemKind.EVENT:
            return await self.events()
        return await self.contacts()

    async def mails(self) -> Snapshot[MailItem]:
        """
        Snapshot all mail, excluding calendar-invitation artifacts.

        The parent folder name is looked up once per message.
        """
        async def map_mail(record: RawRecord) -> Optional[MailItem]:
            if record.is_invitation:
                return None
            folder_name = await self.item_source.get_folder_name(record.folder_id or "")
            return MailItem.from_ews_item(record.item, folder_name)

        return await self._build(ItemKind.MAIL, map_mail)

    async def events(self) -> Snapshot[CalendarEvent]:
        """Snapshot all calendar events."""
        async def map_event(record: RawRecord) -> Optional[CalendarEvent]:
            return CalendarEvent.from_ews_item(record.item)

        return await self._build(ItemKind.EVENT, map_event)

    async def contacts(self) -> Snapshot[ContactItem]:
        """Snapshot all contacts."""
        async def map_contact(record: RawRecord) -> Optional[ContactItem]:
            return ContactItem.from_ews_item(record.item)

        return await self._build(ItemKind.CONTACT, map_contact)

    async def _build(
        self,
        kind: ItemKind,
        mapper: Callable[[RawRecord], Awaitable[Optional[T]]],
    ) -> Snapshot[T]:
        records, complete, error = await self.raw_records(kind)

        items: List[T] = []
        skipped = 0
        dropped = 0
        for record in records:
            model = await self._map(kind, record, mapper)
            if model is not None:
                items.append(model)
            elif record.is_invitation and kind is ItemKind.MAIL:
                skipped += 1
            else:
                dropped += 1

        snapshot = Snapshot(
            kind=kind,
            account=self.account,
            items=tuple(items),
            complete=complete,
            dropped=dropped,
            error=error,
        )

        if skipped:
            self.logger.info(f"Filtered {skipped} calendar invitation(s) from {self.account} mail")
        if dropped:
            self.logger.warning(f"Dropped {dropped} unmappable {kind.value} record(s) for {self.account}")
        self.logger.info(f"Snapshot: {snapshot.describe()}")
        return snapshot

    async def _map(
        self,
        kind: ItemKind,
        record: RawRecord,
        mapper: Callable[[RawRecord], Awaitable[Optional[T]]],
    ) -> Optional[T]:
        """Map one record, returning None instead of raising."""
        try:
            return await mapper(record)
        except Exception as e:
            self.logger.warning(f"Failed to map {kind.value} {record.id} for {self.account}: {e}")
            return None
