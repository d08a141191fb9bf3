"""
Models for the tasksync system.
"""

from .config import SyncPairing, UserMapping
from .links import TaskLink
from .tasks import (
    ClickUpTask, ClickUpUpdatePayload, MotionTask,
    MotionCreatePayload, MotionAutoSchedule
)
from .sync import (
    SyncDirection, SyncItemStatus, SyncItemResult,
    PairingStatus, PairingResult, SyncRunStatus, SyncRunSummary
)

__all__ = [
    # Configuration
    "SyncPairing",
    "UserMapping",
    "TaskLink",

    # Remote tasks and payloads
    "ClickUpTask",
    "ClickUpUpdatePayload",
    "MotionTask",
    "MotionCreatePayload",
    "MotionAutoSchedule",

    # Results
    "SyncDirection",
    "SyncItemStatus",
    "SyncItemResult",
    "PairingStatus",
    "PairingResult",
    "SyncRunStatus",
    "SyncRunSummary",
]
