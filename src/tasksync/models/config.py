"""
Configuration models stored in Firestore: sync pairings and user mappings.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from ..core.dates import EPOCH, ensure_utc, parse_iso


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return parse_iso(str(value))


class SyncPairing(BaseModel):
    """
    Binds one ClickUp list to one Motion workspace.
    Created and edited by an administrator; the sync only advances ``last_sync_at``.
    """
    id: str = Field(..., description="Unique identifier for this pairing")
    clickup_list_id: str = Field(..., description="ClickUp list to watch for new tasks")
    motion_workspace_id: str = Field(..., description="Motion workspace tasks are mirrored into")
    description: Optional[str] = Field(None, description="Optional human-readable label")
    last_sync_at: Optional[datetime] = Field(None, description="Start time of the last successful pass")
    active: bool = Field(True, description="Whether this pairing is synced")

    @property
    def label(self) -> str:
        return self.description or f"CLK:{self.clickup_list_id} <-> MOT:{self.motion_workspace_id}"

    @property
    def cursor(self) -> datetime:
        """Last successful sync, or the epoch when the pairing never ran."""
        return self.last_sync_at or EPOCH

    @classmethod
    def from_firestore(cls, doc_id: str, data: Dict[str, Any]) -> "SyncPairing":
        """Create instance from Firestore document."""
        data = dict(data)
        data["last_sync_at"] = _to_datetime(data.get("last_sync_at"))
        # ids are numeric in some admin tooling
        for key in ("clickup_list_id", "motion_workspace_id"):
            if data.get(key) is not None:
                data[key] = str(data[key])
        data["id"] = doc_id
        return cls(**data)


class UserMapping(BaseModel):
    """One row of the identity crosswalk (ClickUp user -> Motion user)."""
    clickup_user_id: str
    motion_user_id: str
    label: Optional[str] = None

    @classmethod
    def from_firestore(cls, doc_id: str, data: Dict[str, Any]) -> "UserMapping":
        return cls(
            clickup_user_id=str(data.get("clickup_user_id", doc_id)),
            motion_user_id=str(data["motion_user_id"]),
            label=data.get("label"),
        )
