"""Mailbox migration verifier.

Snapshots the mail, calendar and contacts of an Exchange mailbox and
reconciles snapshots taken before and after a migration.
"""

__version__ = "1.0.0"
