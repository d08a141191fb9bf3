"""
Pair reconciler: one incremental pass over one ClickUp list / Motion workspace pairing.
"""

import asyncio
import logging
from typing import Mapping, Optional

from ..connectors.base import BaseConnector
from ..core.dates import utc_now
from ..exceptions import LinkConflictError, RemoteRequestError
from ..models.config import SyncPairing
from ..models.sync import (
    PairingResult, PairingStatus, SyncDirection, SyncItemResult, SyncItemStatus
)
from ..models.tasks import ClickUpTask, MotionTask
from ..services.firestore import FirestoreService
from .transforms import FieldTransformer

logger = logging.getLogger(__name__)


class PairReconciler:
    """
    Reconciles one pairing since its cursor.

    ClickUp -> Motion is create-only: an unlinked ClickUp task is created in
    Motion and linked. Motion -> ClickUp is update-only: a linked Motion task
    pushes due date, completion and duration back to ClickUp. Tasks created
    directly in Motion are never propagated.
    """
    
    def __init__(
        self,
        store: FirestoreService,
        clickup: BaseConnector,
        motion: BaseConnector,
        transformer: FieldTransformer,
    ):
        self.store = store
        self.clickup = clickup
        self.motion = motion
        self.transformer = transformer
    
    async def reconcile(self, pairing: SyncPairing, crosswalk: Mapping[str, str]) -> PairingResult:
        """
        Run one pass and commit the cursor captured at its start.
        
        Per-task failures are recorded and do not stop the pass. Fetch
        failures and link store read failures propagate, leaving the cursor
        where it was so the next run retries the same interval.
        
        Args:
            pairing: The pairing to reconcile
            crosswalk: ClickUp user id -> Motion user id
            
        Returns:
            PairingResult with one item per changed task
        """
        started_at = utc_now()
        since = await self.store.get_cursor(pairing.id)
        result = PairingResult(
            pairing_id=pairing.id,
            label=pairing.label,
            status=PairingStatus.COMPLETED,
            started_at=started_at
        )
        
        logger.info(f"Processing pairing {pairing.label} ({pairing.id}), changes since {since.isoformat()}")
        
        clickup_tasks, motion_tasks = await asyncio.gather(
            self.clickup.fetch_changed_since(pairing.clickup_list_id, since),
            self.motion.fetch_changed_since(pairing.motion_workspace_id, since),
        )
        result.clickup_changed = len(clickup_tasks)
        result.motion_changed = len(motion_tasks)
        logger.info(f"Fetched {len(clickup_tasks)} updated ClickUp tasks and {len(motion_tasks)} updated Motion tasks")
        
        for task in clickup_tasks:
            result.items.append(await self._sync_clickup_task(pairing, task, crosswalk))
        
        for task in motion_tasks:
            result.items.append(await self._sync_motion_task(task))
        
        await self.store.commit_cursor(pairing.id, started_at)
        result.cursor_committed = started_at
        result.completed_at = utc_now()
        
        logger.info(
            f"Finished pairing {pairing.label}: {result.created_count} created, {result.updated_count} updated, "
            f"{result.skipped_count} skipped, {result.failed_count} failed"
        )
        return result
    
    async def _sync_clickup_task(
        self,
        pairing: SyncPairing,
        task: ClickUpTask,
        crosswalk: Mapping[str, str],
    ) -> SyncItemResult:
        """Create an unlinked ClickUp task in Motion and link it."""
        link = await self.store.find_link_by_clickup_id(task.id)
        if link is not None:
            logger.debug(f"ClickUp task {task.id} already linked to Motion task {link.motion_task_id}")
            return SyncItemResult(
                direction=SyncDirection.CLICKUP_TO_MOTION,
                source_id=task.id,
                target_id=link.motion_task_id,
                status=SyncItemStatus.SKIPPED,
                message="already linked"
            )
        
        logger.info(f"New ClickUp task {task.id} ({task.name}), creating in Motion")
        motion_task_id = None
        try:
            payload = self.transformer.to_creation_payload(task, pairing.motion_workspace_id, crosswalk)
            motion_task = await self.motion.create_task(pairing.motion_workspace_id, payload)
            motion_task_id = motion_task.id
            await self.store.create_link(task.id, motion_task_id)
        except LinkConflictError as e:
            logger.error(f"ClickUp task {task.id} was linked concurrently, Motion task {motion_task_id} is a duplicate: {e}")
            return self._failed(SyncDirection.CLICKUP_TO_MOTION, task.id, motion_task_id, e)
        except RemoteRequestError as e:
            logger.error(f"Failed to create Motion task for ClickUp task {task.id} (status {e.status_code}): {e}")
            return self._failed(SyncDirection.CLICKUP_TO_MOTION, task.id, motion_task_id, e)
        except Exception as e:
            logger.exception(f"Failed to create Motion task or link for ClickUp task {task.id}")
            return self._failed(SyncDirection.CLICKUP_TO_MOTION, task.id, motion_task_id, e)
        
        message = None
        if payload.unmapped_assignees:
            message = f"unmapped assignees: {', '.join(payload.unmapped_assignees)}"
        return SyncItemResult(
            direction=SyncDirection.CLICKUP_TO_MOTION,
            source_id=task.id,
            target_id=motion_task_id,
            status=SyncItemStatus.CREATED,
            message=message
        )
    
    async def _sync_motion_task(self, task: MotionTask) -> SyncItemResult:
        """Push a linked Motion task's due date, completion and duration to ClickUp."""
        link = await self.store.find_link_by_motion_id(task.id)
        if link is None:
            logger.debug(f"Motion task {task.id} is not linked to ClickUp, skipping")
            return SyncItemResult(
                direction=SyncDirection.MOTION_TO_CLICKUP,
                source_id=task.id,
                status=SyncItemStatus.SKIPPED,
                message="not linked"
            )
        
        clickup_task_id = link.clickup_task_id
        payload = self.transformer.to_update_payload(task)
        if payload.is_empty():
            return SyncItemResult(
                direction=SyncDirection.MOTION_TO_CLICKUP,
                source_id=task.id,
                target_id=clickup_task_id,
                status=SyncItemStatus.SKIPPED,
                message="no changes"
            )
        
        try:
            await self.clickup.update_task(clickup_task_id, payload)
        except RemoteRequestError as e:
            logger.error(
                f"Failed to update ClickUp task {clickup_task_id} from Motion task {task.id} (status {e.status_code}): {e}"
            )
            return self._failed(SyncDirection.MOTION_TO_CLICKUP, task.id, clickup_task_id, e)
        except Exception as e:
            logger.exception(f"Failed to update ClickUp task {clickup_task_id} from Motion task {task.id}")
            return self._failed(SyncDirection.MOTION_TO_CLICKUP, task.id, clickup_task_id, e)
        
        logger.info(f"Updated ClickUp task {clickup_task_id} from Motion task {task.id}: {payload.to_request()}")
        return SyncItemResult(
            direction=SyncDirection.MOTION_TO_CLICKUP,
            source_id=task.id,
            target_id=clickup_task_id,
            status=SyncItemStatus.UPDATED
        )
    
    @staticmethod
    def _failed(
        direction: SyncDirection,
        source_id: str,
        target_id: Optional[str],
        error: Exception,
    ) -> SyncItemResult:
        return SyncItemResult(
            direction=direction,
            source_id=source_id,
            target_id=target_id,
            status=SyncItemStatus.FAILED,
            message=str(error)
        )
