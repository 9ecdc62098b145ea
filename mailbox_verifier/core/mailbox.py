"""Expected mailbox contents loaded from a fixture file."""

from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .mail import MailItem
from .calendar_event import CalendarEvent
from .contact import ContactItem
from .records import ItemKind


class MailboxFixture(BaseModel):
    """
    Mails, events and contacts a test mailbox is expected to hold.

    Accepts PascalCase keys (``Mails``, ``Events``, ``Contacts``) as well
    as the field names.
    """

    model_config = ConfigDict(populate_by_name=True)

    mails: List[MailItem] = Field(default_factory=list, alias="Mails")
    events: List[CalendarEvent] = Field(default_factory=list, alias="Events")
    contacts: List[ContactItem] = Field(default_factory=list, alias="Contacts")

    def items(self, kind: ItemKind) -> list:
        """Expected items of one kind."""
        return {
            ItemKind.MAIL: self.mails,
            ItemKind.EVENT: self.events,
            ItemKind.CONTACT: self.contacts,
        }[kind]

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "MailboxFixture":
        """
        Load a fixture from a JSON file.

        Raises:
            FixtureError: If the file is missing or does not match the model
        """
        from ..exceptions import FixtureError

        path = Path(path)
        try:
            return cls.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise FixtureError(f"Cannot read fixture file {path}: {e}")
        except ValidationError as e:
            raise FixtureError(f"Invalid fixture file {path}: {e}")
