"""Small helpers for reading loosely-typed exchangelib objects."""

from typing import Any, Iterable, List


def safe_get(obj: Any, attr: str, default: Any = None) -> Any:
    """
    Read an attribute (or dict key) without raising.

    Returns default when obj is None, the attribute is missing,
    or the stored value is None.
    """
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(attr, default)
    else:
        value = getattr(obj, attr, default)
    return default if value is None else value


def ews_id_to_str(value: Any) -> str:
    """Convert an exchangelib id object (or plain string) to a string id."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    inner = getattr(value, "id", None)
    if inner is not None:
        return str(inner)
    return str(value)


def mailbox_addresses(mailboxes: Iterable[Any]) -> List[str]:
    """Extract email_address from a list of Mailbox / Attendee objects."""
    addresses = []
    for entry in mailboxes or []:
        if isinstance(entry, str):
            addresses.append(entry)
            continue
        # Attendees wrap the mailbox, recipients are the mailbox
        mailbox = safe_get(entry, "mailbox", entry)
        address = safe_get(mailbox, "email_address", "")
        addresses.append(address)
    return addresses
