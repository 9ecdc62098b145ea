"""BulkEraser - best-effort deletion of mailbox content."""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.records import ItemKind

# Cleanup order for a whole mailbox
ERASE_ORDER = (ItemKind.MAIL, ItemKind.EVENT, ItemKind.CONTACT)


class EraseResult(BaseModel):
    """Outcome of erasing one item kind."""

    kind: ItemKind
    account: str = ""
    attempted: int = 0
    deleted: int = 0
    failed_ids: List[str] = Field(default_factory=list)
    enumeration_complete: bool = True

    @property
    def success(self) -> bool:
        return not self.failed_ids and self.enumeration_complete


class BulkEraser:
    """
    Deletes every item of a kind from one account.

    Used to reset a destination mailbox before a run and again at teardown.
    Deletes are issued one at a time. A failed delete is logged and the
    batch moves on; nothing is retried, the leftover item shows up in the
    next snapshot instead.
    """

    def __init__(self, item_source, builder, audit_logger=None):
        """
        Initialize BulkEraser.

        Args:
            item_source: ItemSource for the account
            builder: SnapshotBuilder over the same item source
            audit_logger: Optional AuditLogger for the destructive operations
        """
        self.item_source = item_source
        self.builder = builder
        self.audit_logger = audit_logger
        self.logger = logging.getLogger(__name__)

    @property
    def account(self) -> str:
        return self.builder.account

    async def erase(self, kind: ItemKind) -> EraseResult:
        """
        Delete all items of one kind.

        Mail includes calendar-invitation artifacts; everything that is
        enumerated is deleted.
        """
        records, complete, error = await self.builder.raw_records(kind)
        if not complete:
            self.logger.warning(
                f"Erasing {kind.value} for {self.account} from a partial enumeration: {error}"
            )

        result = EraseResult(
            kind=kind,
            account=self.account,
            attempted=len(records),
            enumeration_complete=complete,
        )

        for record in records:
            try:
                await self.item_source.delete_item(kind, record)
                result.deleted += 1
            except Exception as e:
                self.logger.warning(f"Failed to delete {kind.value} {record.id} for {self.account}: {e}")
                result.failed_ids.append(record.id)

        self.logger.info(
            f"Erased {result.deleted}/{result.attempted} {kind.value} item(s) for {self.account}"
            + (f", {len(result.failed_ids)} failed" if result.failed_ids else "")
        )
        self._audit(result)
        return result

    async def erase_all(self, kinds: Optional[List[ItemKind]] = None) -> List[EraseResult]:
        """Erase mail, events and contacts, in that order."""
        results = []
        for kind in kinds or ERASE_ORDER:
            results.append(await self.erase(kind))
        return results

    def _audit(self, result: EraseResult) -> None:
        if self.audit_logger is None:
            return
        self.audit_logger.log_operation(
            operation=f"erase_{result.kind.value}",
            user=self.account,
            success=result.success,
            details={
                "attempted": result.attempted,
                "deleted": result.deleted,
                "failed": len(result.failed_ids),
            },
        )
