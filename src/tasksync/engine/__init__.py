"""
Sync engine: field transformation, per-pairing reconciliation and run orchestration.
"""

from .sync import PairReconciler
from .transforms import FieldTransformer
from .orchestrator import SyncOrchestrator

__all__ = [
    "PairReconciler",
    "FieldTransformer",
    "SyncOrchestrator",
]
