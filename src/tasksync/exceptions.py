"""
Custom exceptions for the tasksync application.
"""

from typing import Optional


class TaskSyncError(Exception):
    """Base exception for all application-specific errors."""
    pass


class ConfigurationError(TaskSyncError):
    """Missing or placeholder credentials, or nothing configured to sync."""
    pass


class RemoteRequestError(TaskSyncError):
    """A remote API answered with a non-2xx status or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class LinkConflictError(TaskSyncError):
    """A task is already linked on one side of the link store."""

    def __init__(self, clickup_task_id: str, motion_task_id: str):
        super().__init__(
            f"Link already exists for ClickUp task {clickup_task_id} or Motion task {motion_task_id}"
        )
        self.clickup_task_id = clickup_task_id
        self.motion_task_id = motion_task_id


# Specific API error classes for connectors
class ClickUpAPIError(RemoteRequestError):
    """Exception raised for ClickUp API errors."""
    pass


class MotionAPIError(RemoteRequestError):
    """Exception raised for Motion API errors."""
    pass
