"""
Firestore service for pairings, cursors, task links, user mappings and run history.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional
from google.api_core.exceptions import Conflict
from google.cloud import firestore

from ..core.dates import EPOCH, ensure_utc, utc_now
from ..exceptions import LinkConflictError
from ..models.config import SyncPairing, UserMapping
from ..models.links import TaskLink
from ..models.sync import SyncRunSummary

logger = logging.getLogger(__name__)


class FirestoreService:
    """
    Service for all persisted sync state in Firestore.

    Links are stored twice, keyed by ClickUp task id in ``task_links`` and by
    Motion task id in ``task_links_by_motion``. Both documents are written in
    one batch with create-only preconditions, so a second link for either id
    is rejected by Firestore itself.
    """
    
    def __init__(self, project_id: Optional[str] = None, client: Optional[firestore.AsyncClient] = None):
        """
        Initialize Firestore service.
        
        Args:
            project_id: Google Cloud project ID. If None, uses default from environment.
            client: Pre-built async client (tests, emulator)
        """
        try:
            if client is not None:
                self.db = client
            elif project_id:
                self.db = firestore.AsyncClient(project=project_id)
            else:
                # Application default credentials
                self.db = firestore.AsyncClient()
            
            self.pairings_collection = "sync_pairings"
            self.links_collection = "task_links"
            self.links_by_motion_collection = "task_links_by_motion"
            self.user_mappings_collection = "user_mappings"
            self.runs_collection = "sync_runs"
            
            logger.info(f"Firestore service initialized for project: {self.db.project}")
            
        except Exception as e:
            logger.error(f"Failed to initialize Firestore: {e}")
            raise
    
    # Pairings and cursors
    
    async def list_active_pairings(self) -> List[SyncPairing]:
        """List pairings flagged active."""
        query = self.db.collection(self.pairings_collection).where("active", "==", True)
        pairings = []
        async for doc in query.stream():
            pairings.append(SyncPairing.from_firestore(doc.id, doc.to_dict()))
        logger.info(f"Found {len(pairings)} active sync pairings")
        return pairings
    
    async def get_pairing(self, pairing_id: str) -> Optional[SyncPairing]:
        doc = await self.db.collection(self.pairings_collection).document(pairing_id).get()
        if doc.exists:
            return SyncPairing.from_firestore(pairing_id, doc.to_dict())
        return None
    
    async def get_cursor(self, pairing_id: str) -> datetime:
        """Start time of the last successful pass, or the epoch."""
        pairing = await self.get_pairing(pairing_id)
        if pairing is None:
            logger.warning(f"Pairing {pairing_id} not found, using epoch cursor")
            return EPOCH
        return pairing.cursor
    
    async def commit_cursor(self, pairing_id: str, timestamp: datetime) -> None:
        """Persist a pairing's cursor unconditionally."""
        try:
            doc_ref = self.db.collection(self.pairings_collection).document(pairing_id)
            await doc_ref.update({"last_sync_at": ensure_utc(timestamp).isoformat()})
            logger.info(f"Committed cursor {timestamp.isoformat()} for pairing {pairing_id}")
        except Exception as e:
            logger.error(f"Failed to commit cursor for pairing {pairing_id}: {e}")
            raise
    
    # Task links
    
    async def find_link_by_clickup_id(self, clickup_task_id: str) -> Optional[TaskLink]:
        doc = await self.db.collection(self.links_collection).document(clickup_task_id).get()
        return TaskLink.from_firestore(doc.to_dict()) if doc.exists else None
    
    async def find_link_by_motion_id(self, motion_task_id: str) -> Optional[TaskLink]:
        doc = await self.db.collection(self.links_by_motion_collection).document(motion_task_id).get()
        return TaskLink.from_firestore(doc.to_dict()) if doc.exists else None
    
    async def create_link(self, clickup_task_id: str, motion_task_id: str) -> TaskLink:
        """
        Link a ClickUp task to a Motion task.
        
        Raises:
            LinkConflictError: If either task is already linked; nothing is written
        """
        now = utc_now()
        link = TaskLink(
            clickup_task_id=clickup_task_id,
            motion_task_id=motion_task_id,
            created_at=now,
            last_updated=now
        )
        data = link.to_firestore()
        
        batch = self.db.batch()
        batch.create(self.db.collection(self.links_collection).document(clickup_task_id), data)
        batch.create(self.db.collection(self.links_by_motion_collection).document(motion_task_id), data)
        try:
            await batch.commit()
        except Conflict as e:
            logger.error(f"Link conflict for ClickUp {clickup_task_id} / Motion {motion_task_id}: {e}")
            raise LinkConflictError(clickup_task_id, motion_task_id) from e
        
        logger.info(f"Created task link: ClickUp {clickup_task_id} <-> Motion {motion_task_id}")
        return link
    
    async def _delete_link(self, link: TaskLink) -> None:
        batch = self.db.batch()
        batch.delete(self.db.collection(self.links_collection).document(link.clickup_task_id))
        batch.delete(self.db.collection(self.links_by_motion_collection).document(link.motion_task_id))
        await batch.commit()
        logger.warning(f"Deleted task link: ClickUp {link.clickup_task_id} <-> Motion {link.motion_task_id}")
    
    async def delete_link_by_clickup_id(self, clickup_task_id: str) -> bool:
        """Remove a link by ClickUp task id. Administrative only."""
        link = await self.find_link_by_clickup_id(clickup_task_id)
        if link is None:
            return False
        await self._delete_link(link)
        return True
    
    async def delete_link_by_motion_id(self, motion_task_id: str) -> bool:
        """Remove a link by Motion task id. Administrative only."""
        link = await self.find_link_by_motion_id(motion_task_id)
        if link is None:
            return False
        await self._delete_link(link)
        return True
    
    # Identity crosswalk
    
    async def load_user_mappings(self) -> Dict[str, str]:
        """Load the whole ClickUp user -> Motion user crosswalk."""
        crosswalk: Dict[str, str] = {}
        async for doc in self.db.collection(self.user_mappings_collection).stream():
            mapping = UserMapping.from_firestore(doc.id, doc.to_dict())
            crosswalk[mapping.clickup_user_id] = mapping.motion_user_id
        logger.info(f"Loaded {len(crosswalk)} user mappings")
        return crosswalk
    
    # Run history
    
    async def create_run_record(self, summary: SyncRunSummary) -> None:
        await self.db.collection(self.runs_collection).document(summary.id).set(summary.to_firestore())
        logger.info(f"Stored sync run record: {summary.id}")
    
    async def list_run_records(self, limit: int = 20) -> List[Dict]:
        """Most recent run summaries first."""
        query = (
            self.db.collection(self.runs_collection)
            .order_by("started_at", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        runs = []
        async for doc in query.stream():
            runs.append(doc.to_dict().get("summary", {}))
        return runs
