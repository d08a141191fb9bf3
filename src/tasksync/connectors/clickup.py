"""
ClickUp connector: source of new tasks, target of Motion updates.
"""

import logging
from datetime import datetime
from typing import List

from ..integrations.clickup.client import ClickUpClient
from ..models.tasks import ClickUpTask, ClickUpUpdatePayload
from .base import BaseConnector, ConnectorCapability

logger = logging.getLogger(__name__)


class ClickUpConnector(BaseConnector):
    """
    ClickUp connector. Lists are the collections.
    """

    service_name = "clickup"

    def __init__(self, client: ClickUpClient):
        super().__init__(client)

    def get_capabilities(self) -> ConnectorCapability:
        """ClickUp filters changes server-side and accepts updates."""
        return ConnectorCapability(
            can_fetch_changed=True,
            can_update_tasks=True
        )

    def _test_connection(self) -> None:
        user = self.client.get_authorized_user()
        logger.info(f"Connected to ClickUp as {user.get('username') or user.get('id')}")

    def _fetch_changed_since(self, collection_id: str, since: datetime) -> List[ClickUpTask]:
        return [
            ClickUpTask.model_validate(task)
            for task in self.client.get_tasks_updated_since(collection_id, since)
        ]

    def _update_task(self, task_id: str, payload: ClickUpUpdatePayload) -> ClickUpTask:
        data = self.client.update_task(task_id, payload.to_request())
        # PUT may come back empty; the id is all the caller needs
        return ClickUpTask.model_validate(data or {"id": task_id})
