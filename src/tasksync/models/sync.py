"""
Models for sync results: per task, per pairing and per run.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Any, Optional
from pydantic import BaseModel, Field

from ..core.dates import utc_now


class SyncDirection(str, Enum):
    """Which way a task change travels."""
    CLICKUP_TO_MOTION = "clickup_to_motion"
    MOTION_TO_CLICKUP = "motion_to_clickup"


class SyncItemStatus(str, Enum):
    """Outcome of syncing a single task."""
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class SyncItemResult(BaseModel):
    """Outcome of a single task change."""
    direction: SyncDirection
    source_id: str
    target_id: Optional[str] = None
    status: SyncItemStatus
    message: Optional[str] = None


class PairingStatus(str, Enum):
    """Status of one pairing within a run."""
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class PairingResult(BaseModel):
    """Outcome of reconciling one pairing."""
    pairing_id: str
    label: str
    status: PairingStatus
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    cursor_committed: Optional[datetime] = None
    clickup_changed: int = 0
    motion_changed: int = 0
    items: List[SyncItemResult] = Field(default_factory=list)
    error_message: Optional[str] = None

    def count(self, status: SyncItemStatus) -> int:
        return len([item for item in self.items if item.status == status])

    @property
    def created_count(self) -> int:
        return self.count(SyncItemStatus.CREATED)

    @property
    def updated_count(self) -> int:
        return self.count(SyncItemStatus.UPDATED)

    @property
    def skipped_count(self) -> int:
        return self.count(SyncItemStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self.count(SyncItemStatus.FAILED)


class SyncRunStatus(str, Enum):
    """Status of a whole run."""
    RUNNING = "running"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"


class SyncRunSummary(BaseModel):
    """Represents one sync run over all active pairings."""
    id: str
    status: SyncRunStatus = SyncRunStatus.RUNNING
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    triggered_by: str = "scheduler"
    pairings: List[PairingResult] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        return sum(p.created_count for p in self.pairings)

    @property
    def updated_count(self) -> int:
        return sum(p.updated_count for p in self.pairings)

    @property
    def skipped_count(self) -> int:
        return sum(p.skipped_count for p in self.pairings)

    @property
    def failed_count(self) -> int:
        return sum(p.failed_count for p in self.pairings)

    @property
    def failed_pairings(self) -> List[PairingResult]:
        return [p for p in self.pairings if p.status == PairingStatus.FAILED]

    @property
    def execution_time_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def mark_completed(self) -> None:
        """Close the run; failed pairings or failed tasks downgrade the status."""
        self.completed_at = utc_now()
        if self.failed_pairings or self.failed_count:
            self.status = SyncRunStatus.COMPLETED_WITH_ERRORS
        else:
            self.status = SyncRunStatus.COMPLETED

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the run."""
        return {
            "id": self.id,
            "status": self.status.value,
            "triggered_by": self.triggered_by,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "pairings": len(self.pairings),
            "failed_pairings": len(self.failed_pairings),
            "created": self.created_count,
            "updated": self.updated_count,
            "skipped": self.skipped_count,
            "failed": self.failed_count,
            "execution_time_seconds": self.execution_time_seconds,
        }

    def to_firestore(self) -> Dict[str, Any]:
        """Convert to Firestore document format."""
        data = self.model_dump(mode="json")
        data["summary"] = self.get_summary()
        return data
