"""Service layer.

Snapshot building, bulk erase, reconciliation and the migration
verification flows built on them.
"""

from .snapshot_service import SnapshotBuilder
from .eraser_service import BulkEraser, EraseResult
from .reconciler import Reconciler, ReconciliationResult
from .migration_verifier import MigrationVerifier, MigrationReport

__all__ = [
    "SnapshotBuilder",
    "BulkEraser",
    "EraseResult",
    "Reconciler",
    "ReconciliationResult",
    "MigrationVerifier",
    "MigrationReport",
]
