"""
Base connector class for the two task systems.

Connectors wrap the blocking HTTP clients, turn raw JSON into task models and
expose the operations the reconciler awaits. Client calls run in a worker
thread so a slow remote only stalls the pairing waiting on it.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List

from pydantic import BaseModel

from ..exceptions import RemoteRequestError

logger = logging.getLogger(__name__)


class ConnectorCapability(BaseModel):
    """Defines what operations a connector supports."""
    can_fetch_changed: bool = False
    can_create_tasks: bool = False
    can_update_tasks: bool = False


class BaseConnector(ABC):
    """Abstract base class for connectors."""

    service_name: str = "unknown"

    def __init__(self, client: Any):
        """
        Initialize the connector.

        Args:
            client: HTTP client for the service
        """
        self.client = client
        logger.info(f"Initialized {self.__class__.__name__} connector")

    @abstractmethod
    def get_capabilities(self) -> ConnectorCapability:
        """Return what operations this connector supports."""
        pass

    async def test_connection(self) -> bool:
        """Test if the connector can successfully connect to the service."""
        try:
            await asyncio.to_thread(self._test_connection)
            return True
        except RemoteRequestError as e:
            logger.error(f"{self.service_name} connection test failed: {e}")
            return False

    async def fetch_changed_since(self, collection_id: str, since: datetime) -> List[BaseModel]:
        """
        Fetch tasks of a collection changed strictly after ``since``.

        Raises:
            RemoteRequestError: If any page cannot be fetched
        """
        if not self.get_capabilities().can_fetch_changed:
            raise NotImplementedError(f"{self.__class__.__name__} does not support fetching changes")
        return await asyncio.to_thread(self._fetch_changed_since, collection_id, since)

    async def create_task(self, collection_id: str, payload: BaseModel) -> BaseModel:
        """Create a task in a collection and return it."""
        if not self.get_capabilities().can_create_tasks:
            raise NotImplementedError(f"{self.__class__.__name__} does not support creating tasks")
        return await asyncio.to_thread(self._create_task, collection_id, payload)

    async def update_task(self, task_id: str, payload: BaseModel) -> BaseModel:
        """Apply an update payload to a task and return the updated task."""
        if not self.get_capabilities().can_update_tasks:
            raise NotImplementedError(f"{self.__class__.__name__} does not support updating tasks")
        return await asyncio.to_thread(self._update_task, task_id, payload)

    @abstractmethod
    def _test_connection(self) -> None:
        """Service-specific connectivity check; raises on failure."""
        pass

    @abstractmethod
    def _fetch_changed_since(self, collection_id: str, since: datetime) -> List[BaseModel]:
        """Service-specific change fetching implementation."""
        pass

    def _create_task(self, collection_id: str, payload: BaseModel) -> BaseModel:
        """Service-specific task creation implementation."""
        raise NotImplementedError()

    def _update_task(self, task_id: str, payload: BaseModel) -> BaseModel:
        """Service-specific task update implementation."""
        raise NotImplementedError()
