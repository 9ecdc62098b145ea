"""Email address normalization for recipient and attendee comparison.

The same mailbox can show up in different systems with different display
wrapping and casing, and migrations inject placeholder recipients that are
not addresses at all. Comparison therefore works on nicknames: the local part
of each valid, distinct address.
"""

import logging
from typing import Iterable, List, Optional

import email_validator
from email_validator import EmailNotValidError, validate_email

logger = logging.getLogger(__name__)

# Active Directory lab domains (contoso.local) carry real mailboxes
LAB_DOMAIN_SUFFIXES = ("local",)
for _suffix in LAB_DOMAIN_SUFFIXES:
    if _suffix in email_validator.SPECIAL_USE_DOMAIN_NAMES:
        email_validator.SPECIAL_USE_DOMAIN_NAMES.remove(_suffix)


def validate_address(raw: Optional[str]) -> Optional[str]:
    """
    Return the normalized address, or None if raw is not a valid address.

    Only syntax is checked. Lab and on-premises domains such as
    contoso.local or a bare host name are accepted.
    """
    if not raw or not isinstance(raw, str):
        return None
    try:
        return validate_email(
            raw.strip(),
            check_deliverability=False,
            globally_deliverable=False,
            allow_display_name=True,
        ).normalized
    except EmailNotValidError:
        return None


def valid_distinct_addresses(raw_addresses: Iterable[Optional[str]]) -> List[str]:
    """
    Filter raw address strings down to valid, distinct addresses.

    Duplicates are detected case-insensitively; the first spelling seen wins
    and first-seen order is preserved. Malformed entries are dropped silently.
    """
    seen = set()
    addresses = []
    for raw in raw_addresses or []:
        address = validate_address(raw)
        if address is None:
            if raw:
                logger.debug(f"Skipping invalid address: {raw!r}")
            continue
        key = address.lower()
        if key in seen:
            continue
        seen.add(key)
        addresses.append(address)
    return addresses


def nickname(address: str) -> str:
    """Local part of an address, lower-cased."""
    return address.split("@", 1)[0].lower()


def normalize_nicknames(raw_addresses: Iterable[Optional[str]]) -> List[str]:
    """Valid, distinct addresses reduced to their nicknames, in first-seen order."""
    return [nickname(address) for address in valid_distinct_addresses(raw_addresses)]
