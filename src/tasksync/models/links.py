"""
Link between a ClickUp task and the Motion task created on its behalf.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from pydantic import BaseModel

from ..core.dates import ensure_utc, parse_iso


class TaskLink(BaseModel):
    """Represents a row of the link store."""
    clickup_task_id: str
    motion_task_id: str
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    def to_firestore(self) -> Dict[str, Any]:
        """Convert to Firestore document format."""
        return {
            "clickup_task_id": self.clickup_task_id,
            "motion_task_id": self.motion_task_id,
            "created_at": ensure_utc(self.created_at).isoformat() if self.created_at else None,
            "last_updated": ensure_utc(self.last_updated).isoformat() if self.last_updated else None,
        }

    @classmethod
    def from_firestore(cls, data: Dict[str, Any]) -> "TaskLink":
        """Create instance from Firestore document."""
        data = dict(data)
        for key in ("created_at", "last_updated"):
            value = data.get(key)
            if isinstance(value, str):
                data[key] = parse_iso(value)
            elif isinstance(value, datetime):
                data[key] = ensure_utc(value)
        return cls(**data)
