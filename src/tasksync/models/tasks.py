"""
Remote task shapes and the direction-specific payloads built from them.

Payloads are dumped with ``exclude_unset`` so a field explicitly set to
``None`` is sent as ``null`` (clear it) while an unset field is left out.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..core.dates import parse_iso


class ClickUpAssignee(BaseModel):
    """Assignee entry of a ClickUp task."""
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    username: Optional[str] = None
    email: Optional[str] = None


class ClickUpStatus(BaseModel):
    """Status block of a ClickUp task."""
    model_config = ConfigDict(extra="allow")

    status: str
    type: Optional[str] = None


class ClickUpTask(BaseModel):
    """Represents a task from the ClickUp v2 API (fields used by the sync)."""
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    status: Optional[ClickUpStatus] = None
    text_content: Optional[str] = None  # plain text
    description: Optional[str] = None  # legacy field
    due_date: Optional[Union[int, str]] = None  # unix ms, usually a string
    time_estimate: Optional[Any] = None  # ms
    assignees: List[ClickUpAssignee] = Field(default_factory=list)
    date_updated: Optional[Union[int, str]] = None

    @property
    def updated_at(self) -> Optional[datetime]:
        if self.date_updated in (None, ""):
            return None
        try:
            return datetime.fromtimestamp(int(self.date_updated) / 1000, tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            return None


class MotionTask(BaseModel):
    """Represents a task from the Motion v1 API (fields used by the sync)."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str = ""
    description: Optional[str] = None  # HTML
    duration: Optional[Union[int, float, str]] = None  # minutes, or "NONE"/"REMINDER"
    due_date: Optional[str] = Field(None, alias="dueDate")
    completed: bool = False
    updated_time: Optional[str] = Field(None, alias="updatedTime")
    assignees: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def updated_at(self) -> Optional[datetime]:
        if not self.updated_time:
            return None
        try:
            return parse_iso(self.updated_time)
        except ValueError:
            return None


class MotionAutoSchedule(BaseModel):
    """Auto-scheduling block attached to Motion task creations."""
    model_config = ConfigDict(populate_by_name=True)

    start_date: str = Field(..., alias="startDate")
    deadline_type: str = Field(..., alias="deadlineType")
    schedule: str


class MotionCreatePayload(BaseModel):
    """Motion task creation request built from a ClickUp task."""
    model_config = ConfigDict(populate_by_name=True)

    workspace_id: str = Field(..., alias="workspaceId")
    name: str
    description: Optional[str] = None
    due_date: Optional[str] = Field(None, alias="dueDate")
    duration: Optional[int] = None
    assignee_ids: Optional[List[str]] = Field(None, alias="assigneeIds")
    auto_scheduled: Optional[MotionAutoSchedule] = Field(None, alias="autoScheduled")

    _unmapped_assignees: List[str] = PrivateAttr(default_factory=list)

    @property
    def unmapped_assignees(self) -> List[str]:
        """ClickUp assignee ids that had no Motion counterpart."""
        return self._unmapped_assignees

    def to_request(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class ClickUpUpdatePayload(BaseModel):
    """ClickUp task update request built from a Motion task."""

    due_date: Optional[int] = None  # unix ms, None clears
    status: Optional[str] = None
    time_estimate: Optional[int] = None  # ms, None clears

    def is_empty(self) -> bool:
        """True when there is nothing to write."""
        return not self.model_fields_set

    def to_request(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)
