"""Shared fixtures: an in-memory mailbox and a stub migration engine."""

from pathlib import Path
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

from mailbox_verifier.adapters.migration_engine import (
    MailboxQueueStatus,
    MigrationRequest,
    ProjectItemError,
)
from mailbox_verifier.core import (
    CalendarEvent,
    ContactItem,
    ItemKind,
    MailboxFixture,
    MailItem,
    Page,
    RawRecord,
)
from mailbox_verifier.exceptions import ItemServiceError
from mailbox_verifier.services import BulkEraser, MigrationVerifier, SnapshotBuilder

FIXTURES_DIR = Path(__file__).parent / "fixtures"
DOMAIN = "contoso.com"


def make_message(item_id, subject="", body="", sender=None, to=(), folder_id="folder-inbox",
                 item_class="IPM.Note"):
    """Build an object shaped like an exchangelib Message."""
    return SimpleNamespace(
        id=item_id,
        changekey=f"ck-{item_id}",
        subject=subject,
        body=body,
        sender=SimpleNamespace(email_address=sender) if sender else None,
        to_recipients=[SimpleNamespace(email_address=address) for address in to],
        parent_folder_id=SimpleNamespace(id=folder_id) if folder_id else None,
        item_class=item_class,
    )


def make_event(item_id, subject="", body="", organizer=None, required=(), optional=()):
    """Build an object shaped like an exchangelib CalendarItem."""
    def attendees(addresses):
        return [SimpleNamespace(mailbox=SimpleNamespace(email_address=a)) for a in addresses]

    return SimpleNamespace(
        id=item_id,
        changekey=f"ck-{item_id}",
        subject=subject,
        body=body,
        organizer=SimpleNamespace(email_address=organizer) if organizer else None,
        required_attendees=attendees(required),
        optional_attendees=attendees(optional),
        resources=None,
        item_class="IPM.Appointment",
    )


def make_contact(item_id, display_name=None):
    """Build an object shaped like an exchangelib Contact."""
    return SimpleNamespace(
        id=item_id,
        changekey=f"ck-{item_id}",
        display_name=display_name,
        item_class="IPM.Contact",
    )


class InMemoryItemSource:
    """
    ItemSource over in-memory lists, paged with offset handles.

    Records every remote call so tests can check ordering and counts.
    """

    def __init__(self, account_name: str = f"user@{DOMAIN}", page_size: int = 2):
        self.account_name = account_name
        self.page_size = page_size
        self.items: Dict[ItemKind, List] = {kind: [] for kind in ItemKind}
        self.folders: Dict[str, str] = {}
        self.fail_fetch_on_page: Dict[ItemKind, int] = {}
        self.fail_delete_ids = set()
        self.fail_folder_ids = set()
        self.fetch_calls = []
        self.folder_lookups = []
        self.delete_calls = []

    def add(self, kind: ItemKind, *items) -> None:
        self.items[kind].extend(items)

    async def fetch_page(self, kind: ItemKind, handle: Optional[str]) -> Page:
        page_number = len([c for c in self.fetch_calls if c[0] is kind]) + 1
        self.fetch_calls.append((kind, handle))
        if self.fail_fetch_on_page.get(kind) == page_number:
            raise ItemServiceError(f"HTTP 503 fetching {kind.value} page {page_number}")

        offset = int(handle) if handle else 0
        chunk = self.items[kind][offset:offset + self.page_size]
        end = offset + len(chunk)
        records = [
            RawRecord(
                id=item.id,
                changekey=item.changekey,
                item_type=item.item_class,
                folder_id=getattr(getattr(item, "parent_folder_id", None), "id", None),
                item=item,
            )
            for item in chunk
        ]
        return Page(items=records, next_handle=str(end) if end < len(self.items[kind]) else None)

    async def get_folder_name(self, folder_id: str) -> str:
        self.folder_lookups.append(folder_id)
        if folder_id in self.fail_folder_ids:
            raise ItemServiceError(f"Folder lookup failed for {folder_id}")
        return self.folders.get(folder_id, "")

    async def delete_item(self, kind: ItemKind, record: RawRecord) -> None:
        self.delete_calls.append((kind, record.id))
        if record.id in self.fail_delete_ids:
            raise ItemServiceError(f"HTTP 500 deleting {record.id}")
        self.items[kind] = [item for item in self.items[kind] if item.id != record.id]


def seed_from_fixture(source: InMemoryItemSource, fixture: MailboxFixture) -> None:
    """Populate a mailbox with raw items that map back to the fixture's models."""
    for i, mail in enumerate(fixture.mails):
        folder_id = f"folder-{mail.parent_folder_name.lower().replace(' ', '-')}"
        source.folders[folder_id] = mail.parent_folder_name
        source.add(ItemKind.MAIL, make_message(
            f"{source.account_name}-mail-{i}",
            subject=mail.subject,
            body=mail.body,
            sender=mail.sender_email,
            to=[f"{nick}@{DOMAIN}" for nick in mail.recipient_nicknames],
            folder_id=folder_id,
        ))
    for i, event in enumerate(fixture.events):
        source.add(ItemKind.EVENT, make_event(
            f"{source.account_name}-event-{i}",
            subject=event.subject,
            body=event.body,
            organizer=event.organizer_email,
            required=[f"{nick}@{DOMAIN}" for nick in event.attendee_nicknames],
        ))
    for i, contact in enumerate(fixture.contacts):
        source.add(ItemKind.CONTACT, make_contact(
            f"{source.account_name}-contact-{i}", contact.display_name
        ))


class StubMigrationEngine:
    """
    MigrationEngine that copies one in-memory mailbox into another.

    Status and errors are whatever the test sets.
    """

    def __init__(self, source: InMemoryItemSource, destination: InMemoryItemSource):
        self.source = source
        self.destination = destination
        self.status = MailboxQueueStatus.COMPLETED
        self.errors: List[ProjectItemError] = []
        self.copy_items = True
        self.requests: List[MigrationRequest] = []
        self.cleaned_up = False

    async def submit_migration(self, request: MigrationRequest) -> str:
        self.requests.append(request)
        job_id = f"job-{len(self.requests)}"
        if self.copy_items and self.status is MailboxQueueStatus.COMPLETED:
            for kind in ItemKind:
                for item in self.source.items[kind]:
                    copied = SimpleNamespace(**vars(item))
                    copied.id = f"migrated-{item.id}"
                    self.destination.items[kind].append(copied)
            self.destination.folders.update(self.source.folders)
        return job_id

    async def get_status(self, job_id: str) -> MailboxQueueStatus:
        return self.status

    async def get_errors(self, job_id: str) -> List[ProjectItemError]:
        return list(self.errors)

    async def cleanup(self) -> None:
        self.cleaned_up = True


@pytest.fixture
def mailbox_fixture() -> MailboxFixture:
    """Expected source contents: 5 mails, 2 events, 3 contacts."""
    return MailboxFixture.from_file(FIXTURES_DIR / "source_mailbox.json")


@pytest.fixture
def source_mailbox(mailbox_fixture) -> InMemoryItemSource:
    source = InMemoryItemSource(account_name=f"source.user@{DOMAIN}")
    seed_from_fixture(source, mailbox_fixture)
    return source


@pytest.fixture
def destination_mailbox() -> InMemoryItemSource:
    return InMemoryItemSource(account_name=f"destination.user@{DOMAIN}")


@pytest.fixture
def engine(source_mailbox, destination_mailbox) -> StubMigrationEngine:
    return StubMigrationEngine(source_mailbox, destination_mailbox)


@pytest.fixture
def verifier(source_mailbox, destination_mailbox, engine) -> MigrationVerifier:
    destination_builder = SnapshotBuilder(destination_mailbox)
    return MigrationVerifier(
        source_builder=SnapshotBuilder(source_mailbox),
        destination_builder=destination_builder,
        destination_eraser=BulkEraser(destination_mailbox, destination_builder),
        engine=engine,
    )


@pytest.fixture
def migration_request(source_mailbox, destination_mailbox) -> MigrationRequest:
    return MigrationRequest(
        source_account=source_mailbox.account_name,
        destination_account=destination_mailbox.account_name,
    )


def mail(subject, **kwargs) -> MailItem:
    """Canonical mail with defaults for the fields a test does not care about."""
    return MailItem(subject=subject, **kwargs)


def event(subject, **kwargs) -> CalendarEvent:
    return CalendarEvent(subject=subject, **kwargs)


def contact(display_name) -> ContactItem:
    return ContactItem(display_name=display_name)
