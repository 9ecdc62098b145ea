"""Tests for EWSItemSource with a mocked exchangelib account."""

from types import SimpleNamespace
from unittest.mock import MagicMock, Mock, patch

import pytest
from exchangelib.items import HARD_DELETE, SEND_TO_NONE

from mailbox_verifier.adapters.item_source import EWSItemSource
from mailbox_verifier.core import ItemKind, RawRecord
from mailbox_verifier.exceptions import EnumerationError, ItemServiceError

from conftest import make_contact, make_message


@pytest.fixture
def mock_ews_client():
    """Create a mock EWS client for testing."""
    client = Mock()
    client.email = "user@contoso.com"
    client.account = Mock()
    return client


@pytest.fixture
def item_source(mock_ews_client):
    return EWSItemSource(mock_ews_client, page_size=2)


def queryset_returning(items):
    queryset = MagicMock()
    queryset.__getitem__.return_value = items
    return queryset


class TestFetchPage:

    @pytest.mark.asyncio
    async def test_full_page_has_offset_handle(self, item_source, mock_ews_client):
        queryset = queryset_returning([make_contact("c1", "A"), make_contact("c2", "B")])
        mock_ews_client.account.contacts.all.return_value.only.return_value = queryset

        page = await item_source.fetch_page(ItemKind.CONTACT, None)

        assert [r.id for r in page.items] == ["c1", "c2"]
        assert page.next_handle == "2"
        queryset.__getitem__.assert_called_once_with(slice(0, 2))
        mock_ews_client.account.contacts.all.return_value.only.assert_called_once_with("display_name")

    @pytest.mark.asyncio
    async def test_short_page_is_last(self, item_source, mock_ews_client):
        queryset = queryset_returning([make_contact("c3", "C")])
        mock_ews_client.account.contacts.all.return_value.only.return_value = queryset

        page = await item_source.fetch_page(ItemKind.CONTACT, "2")

        assert page.next_handle is None
        queryset.__getitem__.assert_called_once_with(slice(2, 4))

    @pytest.mark.asyncio
    async def test_events_come_from_calendar(self, item_source, mock_ews_client):
        queryset = queryset_returning([])
        mock_ews_client.account.calendar.all.return_value.only.return_value = queryset

        page = await item_source.fetch_page(ItemKind.EVENT, None)

        assert page.items == []
        assert page.next_handle is None

    @pytest.mark.asyncio
    async def test_mail_spans_mail_folders_only(self, item_source, mock_ews_client):
        inbox = SimpleNamespace(folder_class="IPF.Note")
        calendar = SimpleNamespace(folder_class="IPF.Appointment")
        custom = SimpleNamespace(folder_class="IPF.Note.Custom")
        mock_ews_client.account.msg_folder_root.walk.return_value = [inbox, calendar, custom]
        invite = make_message("m2", item_class="IPM.Schedule.Meeting.Request", folder_id="f-inbox")

        with patch("mailbox_verifier.adapters.item_source.FolderCollection") as folder_collection:
            folder_collection.return_value.all.return_value.only.return_value = queryset_returning(
                [make_message("m1", folder_id="f-inbox"), invite]
            )
            page = await item_source.fetch_page(ItemKind.MAIL, None)

        assert folder_collection.call_args.kwargs["folders"] == [inbox, custom]
        assert page.items[0].folder_id == "f-inbox"
        assert page.items[0].changekey == "ck-m1"
        assert page.items[1].is_invitation

    @pytest.mark.asyncio
    async def test_error_entries_are_skipped(self, item_source, mock_ews_client):
        queryset = queryset_returning([make_contact("c1", "A"), ValueError("ErrorItemNotFound")])
        mock_ews_client.account.contacts.all.return_value.only.return_value = queryset

        page = await item_source.fetch_page(ItemKind.CONTACT, None)

        assert [r.id for r in page.items] == ["c1"]
        # Two entries came back, so there may be more
        assert page.next_handle == "2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("handle", ["abc", "-2"])
    async def test_invalid_handle(self, item_source, handle):
        with pytest.raises(EnumerationError):
            await item_source.fetch_page(ItemKind.CONTACT, handle)


class TestFolderName:

    @pytest.mark.asyncio
    async def test_known_folder(self, item_source, mock_ews_client):
        mock_ews_client.account.root.get_folder.return_value = SimpleNamespace(name="Projects")

        assert await item_source.get_folder_name("f-1") == "Projects"
        folder_id = mock_ews_client.account.root.get_folder.call_args.args[0]
        assert folder_id.id == "f-1"

    @pytest.mark.asyncio
    async def test_unknown_folder(self, item_source, mock_ews_client):
        mock_ews_client.account.root.get_folder.return_value = None

        assert await item_source.get_folder_name("f-1") == ""

    @pytest.mark.asyncio
    async def test_empty_id_skips_lookup(self, item_source, mock_ews_client):
        assert await item_source.get_folder_name("") == ""
        mock_ews_client.account.root.get_folder.assert_not_called()


class TestDelete:

    @pytest.mark.asyncio
    async def test_hard_deletes_one_item(self, item_source, mock_ews_client):
        mock_ews_client.account.bulk_delete.return_value = [True]

        await item_source.delete_item(ItemKind.MAIL, RawRecord(id="m1", changekey="ck1"))

        mock_ews_client.account.bulk_delete.assert_called_once_with(
            ids=[("m1", "ck1")],
            delete_type=HARD_DELETE,
            send_meeting_cancellations=SEND_TO_NONE,
        )

    @pytest.mark.asyncio
    async def test_per_item_error_is_raised(self, item_source, mock_ews_client):
        mock_ews_client.account.bulk_delete.return_value = [ValueError("ErrorItemNotFound")]

        with pytest.raises(ItemServiceError, match="ErrorItemNotFound"):
            await item_source.delete_item(ItemKind.EVENT, RawRecord(id="e1"))

    @pytest.mark.asyncio
    async def test_transport_error_is_wrapped(self, item_source, mock_ews_client):
        mock_ews_client.account.bulk_delete.side_effect = OSError("connection reset")

        with pytest.raises(ItemServiceError, match="connection reset"):
            await item_source.delete_item(ItemKind.CONTACT, RawRecord(id="c1"))

    def test_account_name(self, item_source):
        assert item_source.account_name == "user@contoso.com"
