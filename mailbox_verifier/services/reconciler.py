"""Reconciler - containment and equivalence checks between snapshots."""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from ..core.records import ItemKind
from ..core.snapshot import Snapshot
from ..exceptions import ReconciliationError

_PLURALS = {
    ItemKind.MAIL: "mails",
    ItemKind.EVENT: "events",
    ItemKind.CONTACT: "contacts",
}


class ReconciliationResult(BaseModel):
    """Outcome of one check. Empty ``failures`` means the check passed."""

    kind: ItemKind
    mode: str
    expected_count: int = 0
    actual_count: int = 0
    unmatched: List[Any] = Field(default_factory=list)
    failures: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def assert_ok(self) -> None:
        """Raise ReconciliationError if the check failed."""
        if self.failures:
            raise ReconciliationError(self.failures)


def _distinct_missing(items: Iterable[Any], pool: Sequence[Any]) -> List[Any]:
    """Items not present in pool, without repeats, in original order."""
    present = set(pool)
    missing = []
    for item in items:
        if item not in present and item not in missing:
            missing.append(item)
    return missing


def _items(snapshot_or_items: Union[Snapshot, Sequence[Any]]) -> Sequence[Any]:
    if isinstance(snapshot_or_items, Snapshot):
        return snapshot_or_items.items
    return list(snapshot_or_items)


def _format(items: Iterable[Any]) -> str:
    return ", ".join(str(item) for item in items)


class Reconciler:
    """
    Compares snapshots.

    containment: every expected item appears among the actual items.
    equivalence: same number of items, and nothing from the source is
    missing at the destination. The difference alone cannot see extra
    copies at the destination; only the count check catches those, so
    both are always evaluated and reported.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def containment(
        self,
        expected: Sequence[Any],
        actual: Union[Snapshot, Sequence[Any]],
        kind: Optional[ItemKind] = None,
        account: str = "",
    ) -> ReconciliationResult:
        """
        Check that every expected item equals some actual item.

        Args:
            expected: Items a fixture declares
            actual: Freshly captured snapshot (or plain item list)
            kind: Item kind, taken from the snapshot when omitted
            account: Account name for the failure message
        """
        if isinstance(actual, Snapshot):
            kind = kind or actual.kind
            account = account or actual.account
        if kind is None:
            raise ValueError("kind is required when actual is not a Snapshot")

        actual_items = _items(actual)
        missing = _distinct_missing(expected, actual_items)
        label = _PLURALS[kind]

        result = ReconciliationResult(
            kind=kind,
            mode="containment",
            expected_count=len(expected),
            actual_count=len(actual_items),
            unmatched=missing,
        )
        if missing:
            result.failures.append(
                f"Source {label} for {account or 'account'} do not have the expected data setup. "
                f"Missing {len(missing)} of {len(expected)} expected {label}: {_format(missing)}."
            )
            self.logger.warning(result.failures[-1])
        else:
            self.logger.info(f"Containment OK: {len(expected)} expected {label} found in {account}")
        return result

    def equivalence(
        self,
        source: Snapshot,
        destination: Snapshot,
        job_id: Optional[str] = None,
        require_complete: bool = True,
    ) -> ReconciliationResult:
        """
        Check that destination holds exactly what source holds.

        Args:
            source: Source snapshot captured before the migration
            destination: Destination snapshot captured after it
            job_id: Migration job id quoted in failure messages
            require_complete: Fail when either snapshot is incomplete
        """
        if source.kind is not destination.kind:
            raise ValueError(f"Cannot compare {source.kind.value} with {destination.kind.value}")

        kind = source.kind
        label = _PLURALS[kind]
        unmatched = _distinct_missing(source.items, destination.items)

        result = ReconciliationResult(
            kind=kind,
            mode="equivalence",
            expected_count=len(source),
            actual_count=len(destination),
            unmatched=unmatched,
        )

        if require_complete:
            for side, snapshot in (("source", source), ("destination", destination)):
                if not snapshot.complete:
                    result.failures.append(
                        f"The {side} snapshot of {label} for {snapshot.account} is incomplete "
                        f"and cannot certify the migration: {snapshot.error}"
                    )

        if len(source) != len(destination):
            result.failures.append(
                f"The no of {label} at the source account {source.account} ({len(source)}) "
                f"is not equal to the no of {label} at the destination account "
                f"{destination.account} ({len(destination)})"
            )

        if unmatched:
            result.failures.append(
                f"Unmigrated {label} found. Job Id: {job_id} "
                f"Source: {source.account} Destination: {destination.account}. "
                f"List of unmatched {label} {_format(unmatched)}."
            )

        if result.ok:
            self.logger.info(f"Equivalence OK: {len(source)} {label} match")
        else:
            for failure in result.failures:
                self.logger.warning(failure)
        return result

    def assert_all(self, results: Iterable[ReconciliationResult]) -> None:
        """Raise one ReconciliationError listing every failure across results."""
        failures = [failure for result in results for failure in result.failures]
        if failures:
            raise ReconciliationError(failures)
