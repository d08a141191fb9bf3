"""
Motion connector: target of new tasks, source of schedule/completion updates.
"""

import logging
from datetime import datetime
from typing import List

from ..exceptions import MotionAPIError
from ..integrations.motion.client import MotionClient
from ..models.tasks import MotionCreatePayload, MotionTask
from .base import BaseConnector, ConnectorCapability

logger = logging.getLogger(__name__)


class MotionConnector(BaseConnector):
    """
    Motion connector. Workspaces are the collections.
    """

    service_name = "motion"

    def __init__(self, client: MotionClient):
        super().__init__(client)

    def get_capabilities(self) -> ConnectorCapability:
        """Motion has no server-side change filter; it creates tasks."""
        return ConnectorCapability(
            can_fetch_changed=True,
            can_create_tasks=True
        )

    def _test_connection(self) -> None:
        user = self.client.get_current_user()
        logger.info(f"Connected to Motion as {user.get('email') or user.get('id')}")

    def _fetch_changed_since(self, collection_id: str, since: datetime) -> List[MotionTask]:
        return [
            MotionTask.model_validate(task)
            for task in self.client.get_tasks_updated_since(collection_id, since)
        ]

    def _create_task(self, collection_id: str, payload: MotionCreatePayload) -> MotionTask:
        request = payload.to_request()
        request["workspaceId"] = collection_id
        data = self.client.create_task(request)
        if not data or not data.get("id"):
            raise MotionAPIError(f"Motion returned no task id for '{payload.name}'", response_body=str(data))
        return MotionTask.model_validate(data)
