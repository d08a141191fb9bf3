"""
Field transformations between ClickUp and Motion tasks.

Only a fixed, asymmetric subset of fields crosses the boundary:
ClickUp -> Motion on creation, Motion -> ClickUp (due date, completion,
duration) on every later change. Malformed input never raises; the affected
field is left out instead.
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from ..core.dates import parse_iso, to_iso_z
from ..models.tasks import (
    ClickUpTask, ClickUpUpdatePayload, MotionAutoSchedule,
    MotionCreatePayload, MotionTask
)

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60000


def _as_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class FieldTransformer:
    """
    Builds Motion creation payloads from ClickUp tasks and ClickUp update
    payloads from Motion tasks.
    """

    def __init__(
        self,
        done_status: str = "complete",
        auto_schedule: bool = True,
        schedule_name: str = "Work Hours",
        deadline_type: str = "SOFT",
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            done_status: ClickUp status name written when Motion completes a task
            auto_schedule: Attach an auto-scheduling block to Motion creations
            schedule_name: Motion schedule used for auto-scheduling
            deadline_type: Motion deadline type (HARD, SOFT, NONE)
            today: Source of the auto-scheduling start date
        """
        self.done_status = done_status
        self.auto_schedule = auto_schedule
        self.schedule_name = schedule_name
        self.deadline_type = deadline_type
        self._today = today

    # Unit and date conversions

    @staticmethod
    def clickup_date_to_iso(value: Any) -> Optional[str]:
        """ClickUp unix-ms timestamp (string or int) -> ISO 8601 UTC, or None."""
        if value in (None, ""):
            return None
        timestamp_ms = _as_number(value)
        if timestamp_ms is None:
            logger.warning(f"Failed to parse ClickUp date: {value!r}")
            return None
        try:
            return to_iso_z(datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc))
        except (OverflowError, OSError, ValueError) as e:
            logger.warning(f"ClickUp date out of range: {value!r} ({e})")
            return None

    @staticmethod
    def motion_iso_to_timestamp(value: Optional[str]) -> Optional[int]:
        """Motion ISO 8601 date -> ClickUp unix-ms timestamp, or None."""
        if not value:
            return None
        try:
            return int(parse_iso(value).timestamp() * 1000)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Failed to parse Motion date {value!r}: {e}")
            return None

    @staticmethod
    def ms_to_minutes(value: Any) -> Optional[int]:
        """Milliseconds -> whole minutes (half rounds up); None if absent or not positive."""
        ms = _as_number(value)
        if ms is None or ms <= 0:
            return None
        minutes = _round_half_up(ms / MS_PER_MINUTE)
        return minutes if minutes > 0 else None

    @staticmethod
    def minutes_to_ms(value: Any) -> Optional[int]:
        """Minutes -> milliseconds; None if absent or not positive."""
        minutes = _as_number(value)
        if minutes is None or minutes <= 0:
            return None
        return _round_half_up(minutes * MS_PER_MINUTE)

    # ClickUp -> Motion

    def build_auto_schedule(self) -> MotionAutoSchedule:
        """Auto-scheduling block starting today."""
        return MotionAutoSchedule(
            start_date=self._today().strftime("%Y-%m-%d"),
            deadline_type=self.deadline_type,
            schedule=self.schedule_name,
        )

    def to_creation_payload(
        self,
        task: ClickUpTask,
        workspace_id: str,
        crosswalk: Mapping[str, str],
    ) -> MotionCreatePayload:
        """
        Transform a ClickUp task into a Motion task creation payload.

        Args:
            task: The source ClickUp task
            workspace_id: The target Motion workspace
            crosswalk: ClickUp user id -> Motion user id

        Returns:
            MotionCreatePayload with only the fields that could be derived
        """
        fields: Dict[str, Any] = {
            "workspace_id": workspace_id,
            "name": task.name,
        }

        description = task.text_content if task.text_content is not None else task.description
        if description:
            fields["description"] = description

        due_date = self.clickup_date_to_iso(task.due_date)
        if due_date:
            fields["due_date"] = due_date

        duration = self.ms_to_minutes(task.time_estimate)
        if duration:
            fields["duration"] = duration

        unmapped = []
        if task.assignees:
            assignee_ids = []
            for assignee in task.assignees:
                motion_id = crosswalk.get(str(assignee.id))
                if motion_id:
                    assignee_ids.append(motion_id)
                else:
                    unmapped.append(str(assignee.id))
            fields["assignee_ids"] = assignee_ids
            if unmapped:
                logger.warning(
                    f"ClickUp task {task.id}: {len(unmapped)} of {len(task.assignees)} "
                    f"assignees have no Motion user: {unmapped}"
                )

        if self.auto_schedule:
            try:
                fields["auto_scheduled"] = self.build_auto_schedule()
            except Exception as e:
                logger.error(f"ClickUp task {task.id}: failed to build auto-schedule block: {e}")
                fields["auto_scheduled"] = None

        payload = MotionCreatePayload(**fields)
        payload._unmapped_assignees = unmapped
        return payload

    # Motion -> ClickUp

    def to_update_payload(self, task: MotionTask) -> ClickUpUpdatePayload:
        """
        Transform a Motion task into a ClickUp update payload.

        The due date is always written (None clears it). Completion only ever
        moves ClickUp to the done status; reopening in Motion changes nothing.
        An empty payload means no update is needed.
        """
        fields: Dict[str, Any] = {}

        if not task.due_date:
            fields["due_date"] = None
        else:
            due_date = self.motion_iso_to_timestamp(task.due_date)
            if due_date is not None:
                fields["due_date"] = due_date

        if task.completed:
            fields["status"] = self.done_status

        duration = _as_number(task.duration)
        if duration is not None:
            if duration > 0:
                fields["time_estimate"] = self.minutes_to_ms(duration)
            elif duration == 0:
                fields["time_estimate"] = None

        return ClickUpUpdatePayload(**fields)
