"""Adapters for the remote item service and the migration engine."""

from .paginator import Paginator, PageFetcher
from .item_source import ItemSource, EWSItemSource
from .migration_engine import (
    MigrationEngine,
    MigrationRequest,
    EndpointConfiguration,
    MailboxQueueStatus,
    QueueType,
    MailboxItemType,
    ProjectType,
    ErrorSeverity,
    ProjectItemError,
)

__all__ = [
    "Paginator",
    "PageFetcher",
    "ItemSource",
    "EWSItemSource",
    "MigrationEngine",
    "MigrationRequest",
    "EndpointConfiguration",
    "MailboxQueueStatus",
    "QueueType",
    "MailboxItemType",
    "ProjectType",
    "ErrorSeverity",
    "ProjectItemError",
]
