"""
Services for tasksync.
"""

from .firestore import FirestoreService
from .scheduler import SchedulerService

__all__ = [
    "FirestoreService",
    "SchedulerService",
]
