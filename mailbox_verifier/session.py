"""Wiring of the per-mailbox services from settings."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from .config import AccountSettings, Settings
from .ews_client import EWSClient
from .adapters.item_source import EWSItemSource
from .adapters.migration_engine import (
    EndpointConfiguration,
    MailboxItemType,
    MigrationRequest,
    QueueType,
)
from .core.mailbox import MailboxFixture
from .exceptions import FixtureError
from .middleware.logging import AuditLogger, setup_logging
from .services.snapshot_service import SnapshotBuilder
from .services.eraser_service import BulkEraser
from .services.migration_verifier import MigrationVerifier

logger = logging.getLogger(__name__)


class MailboxSession:
    """
    Client, item source, snapshot builder and eraser for one mailbox.

    Nothing connects until the first remote call.
    """

    def __init__(
        self,
        config: AccountSettings,
        page_size: int = 100,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.client = EWSClient(config)
        self.item_source = EWSItemSource(self.client, page_size=page_size)
        self.builder = SnapshotBuilder(self.item_source, account=config.ews_email)
        self.eraser = BulkEraser(self.item_source, self.builder, audit_logger=audit_logger)

    @property
    def email(self) -> str:
        return self.client.email

    def close(self) -> None:
        self.client.close()


def build_verifier(settings: Settings, engine, audit_logger: Optional[AuditLogger] = None) -> MigrationVerifier:
    """
    Build a MigrationVerifier for the configured source and destination.

    Args:
        settings: Verifier settings
        engine: MigrationEngine implementation
        audit_logger: Optional AuditLogger for destination erases
    """
    source = MailboxSession(settings.source, page_size=settings.page_size)
    destination = MailboxSession(settings.destination, page_size=settings.page_size, audit_logger=audit_logger)
    logger.info(f"Verifier configured: {source.email} -> {destination.email}")

    return MigrationVerifier(
        source_builder=source.builder,
        destination_builder=destination.builder,
        destination_eraser=destination.eraser,
        engine=engine,
    )


def build_migration_request(settings: Settings, queue_type: QueueType = QueueType.FULL) -> MigrationRequest:
    """Migration request between the configured source and destination."""
    def endpoint(account: AccountSettings) -> EndpointConfiguration:
        return EndpointConfiguration(
            use_administrative_credentials=True,
            administrative_username=account.ews_username or account.ews_email,
            administrative_password=account.ews_password,
        )

    return MigrationRequest(
        engine_username=settings.engine_username or "",
        engine_password=settings.engine_password,
        source=endpoint(settings.source),
        destination=endpoint(settings.destination),
        source_connector=settings.connector_type,
        destination_connector=settings.connector_type,
        source_account=settings.source.ews_email,
        destination_account=settings.destination.ews_email,
        queue_type=queue_type,
        item_types=[MailboxItemType(t) for t in settings.item_types] if queue_type is QueueType.FULL else None,
    )


def configure_run(settings: Settings) -> AuditLogger:
    """Set up logging from settings and return the audit logger for erases."""
    setup_logging(settings.log_level, settings.log_dir)
    return AuditLogger(log_dir=settings.log_dir)


def load_fixture(settings: Settings, base_dir: Optional[Union[str, Path]] = None) -> MailboxFixture:
    """
    Load the expected source mailbox contents.

    A relative fixture_path is resolved against base_dir, or against the
    directory of the running program when base_dir is omitted.

    Raises:
        FixtureError: If fixture_path is not set or the file cannot be loaded
    """
    if settings.fixture_path is None:
        raise FixtureError("fixture_path is not configured")

    path = Path(settings.fixture_path)
    if not path.is_absolute():
        root = Path(base_dir) if base_dir is not None else Path(sys.argv[0]).resolve().parent
        path = root / path

    logger.info(f"Loading mailbox fixture from {path}")
    return MailboxFixture.from_file(path)
