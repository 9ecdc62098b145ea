"""MigrationVerifier - end-to-end migration verification flows."""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..adapters.migration_engine import (
    ErrorSeverity,
    MailboxQueueStatus,
    MigrationRequest,
    ProjectItemError,
    QueueType,
)
from ..core.mailbox import MailboxFixture
from ..core.records import ItemKind
from ..core.snapshot import Snapshot
from ..exceptions import MigrationJobError, ReconciliationError
from .eraser_service import EraseResult
from .reconciler import Reconciler, ReconciliationResult

KINDS = (ItemKind.MAIL, ItemKind.EVENT, ItemKind.CONTACT)


class MigrationReport(BaseModel):
    """What a successful full-migration run observed."""

    job_id: str
    status: MailboxQueueStatus
    errors: List[ProjectItemError] = Field(default_factory=list)
    source_counts: Dict[ItemKind, int] = Field(default_factory=dict)
    destination_counts: Dict[ItemKind, int] = Field(default_factory=dict)
    reset_results: List[EraseResult] = Field(default_factory=list)
    checks: List[ReconciliationResult] = Field(default_factory=list)


class MigrationVerifier:
    """
    Runs a migration between two mailboxes and certifies the result.

    Source and destination are read one after the other, never
    concurrently. Snapshots are captured fresh for every step.
    """

    def __init__(
        self,
        source_builder,
        destination_builder,
        destination_eraser,
        engine,
        reconciler: Optional[Reconciler] = None,
    ):
        """
        Initialize MigrationVerifier.

        Args:
            source_builder: SnapshotBuilder for the source mailbox
            destination_builder: SnapshotBuilder for the destination mailbox
            destination_eraser: BulkEraser for the destination mailbox
            engine: MigrationEngine implementation
            reconciler: Reconciler (a default one is created if omitted)
        """
        self.source_builder = source_builder
        self.destination_builder = destination_builder
        self.destination_eraser = destination_eraser
        self.engine = engine
        self.reconciler = reconciler or Reconciler()
        self.logger = logging.getLogger(__name__)

    async def capture(self, builder) -> Dict[ItemKind, Snapshot]:
        """Fresh snapshots of all three kinds for one mailbox."""
        snapshots = {}
        for kind in KINDS:
            snapshots[kind] = await builder.snapshot(kind)
        return snapshots

    async def verify_source_seed(
        self,
        fixture: MailboxFixture,
        source: Optional[Dict[ItemKind, Snapshot]] = None,
    ) -> List[ReconciliationResult]:
        """
        Assert the source mailbox holds the fixture's items.

        Raises:
            ReconciliationError: Listing every missing item across kinds
        """
        source = source or await self.capture(self.source_builder)
        results = [
            self.reconciler.containment(fixture.items(kind), source[kind])
            for kind in KINDS
        ]
        self.reconciler.assert_all(results)
        return results

    async def reset_destination(self) -> List[EraseResult]:
        """Erase all destination mail, events and contacts."""
        self.logger.info(f"Resetting destination mailbox {self.destination_eraser.account}")
        return await self.destination_eraser.erase_all()

    async def verify_destination_empty(self) -> Dict[ItemKind, Snapshot]:
        """
        Assert a fresh destination capture is empty and complete.

        Raises:
            ReconciliationError: Listing every kind with leftovers
        """
        snapshots = await self.capture(self.destination_builder)
        failures = [
            f"Destination {snapshot.account} was not reset: {snapshot.describe()}"
            for snapshot in snapshots.values()
            if not snapshot.is_empty or not snapshot.complete
        ]
        if failures:
            raise ReconciliationError(failures)
        return snapshots

    async def run_full_migration(
        self,
        fixture: MailboxFixture,
        request: MigrationRequest,
    ) -> MigrationReport:
        """
        Full migration scenario.

        1. Capture the source mailbox
        2. Reset the destination mailbox and check it is empty
        3. Check the source holds the fixture
        4. Run a full migration job and check its status and errors
        5. Capture the destination and check it is equivalent to the source

        Raises:
            ReconciliationError: Destination not emptied, seed data missing,
                or destination differs after the job
            MigrationJobError: Job did not complete, or reported errors
        """
        if request.queue_type is not QueueType.FULL:
            raise ValueError(f"Full migration requires queue type Full, got {request.queue_type.value}")

        source = await self.capture(self.source_builder)
        reset_results = await self.reset_destination()
        await self.verify_destination_empty()
        await self.verify_source_seed(fixture, source)

        self.logger.info(f"Submitting migration {request.source_account} -> {request.destination_account}")
        job_id = await self.engine.submit_migration(request)
        status = await self.engine.get_status(job_id)
        errors = await self.engine.get_errors(job_id)
        self.logger.info(f"Migration job {job_id} finished with status {status.value}, {len(errors)} error(s)")

        if status is not MailboxQueueStatus.COMPLETED:
            raise MigrationJobError(
                job_id,
                f"expected status {MailboxQueueStatus.COMPLETED.value}, got {status.value}. "
                f"Errors: {'; '.join(e.message for e in errors) or 'none reported'}",
                errors,
            )

        blocking = [e for e in errors if e.severity is ErrorSeverity.ERROR]
        if blocking:
            raise MigrationJobError(
                job_id,
                f"{len(blocking)} error(s) reported: {'; '.join(e.message for e in blocking)}",
                blocking,
            )

        destination = await self.capture(self.destination_builder)
        checks = [
            self.reconciler.equivalence(source[kind], destination[kind], job_id=job_id)
            for kind in KINDS
        ]
        self.reconciler.assert_all(checks)

        return MigrationReport(
            job_id=job_id,
            status=status,
            errors=errors,
            source_counts={kind: len(source[kind]) for kind in KINDS},
            destination_counts={kind: len(destination[kind]) for kind in KINDS},
            reset_results=reset_results,
            checks=checks,
        )

    async def run_credentials_failure(
        self,
        request: MigrationRequest,
        expected_message: str,
    ) -> str:
        """
        Verification job with bad credentials must fail with one known error.

        Returns:
            The job id

        Raises:
            MigrationJobError: If status, error count or message differ
        """
        if request.queue_type is not QueueType.VERIFICATION:
            request = request.model_copy(update={"queue_type": QueueType.VERIFICATION, "item_types": None})

        job_id = await self.engine.submit_migration(request)
        status = await self.engine.get_status(job_id)
        errors = await self.engine.get_errors(job_id)

        if status is not MailboxQueueStatus.FAILED:
            raise MigrationJobError(
                job_id, f"expected status {MailboxQueueStatus.FAILED.value}, got {status.value}", errors
            )
        if len(errors) != 1:
            raise MigrationJobError(
                job_id,
                f"expected exactly 1 error, got {len(errors)}: {'; '.join(e.message for e in errors)}",
                errors,
            )
        if errors[0].message != expected_message:
            raise MigrationJobError(
                job_id,
                f"expected error message {expected_message!r}, got {errors[0].message!r}",
                errors,
            )

        self.logger.info(f"Verification job {job_id} failed as expected")
        return job_id

    async def teardown(self) -> List[EraseResult]:
        """
        Clean up engine entities, then the destination mailbox.

        The destination is reset even when engine cleanup fails; the
        engine error is raised afterwards.
        """
        cleanup_error = None
        try:
            await self.engine.cleanup()
        except Exception as e:
            self.logger.error(f"Migration engine cleanup failed: {e}")
            cleanup_error = e

        results = await self.reset_destination()
        if cleanup_error is not None:
            raise cleanup_error
        return results
