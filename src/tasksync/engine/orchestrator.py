"""
Run orchestrator: reconciles every active pairing concurrently.
"""

import asyncio
import logging
import uuid
from typing import Dict, List, Mapping, Tuple

from ..core.dates import utc_now
from ..exceptions import ConfigurationError
from ..models.config import SyncPairing
from ..models.sync import PairingResult, PairingStatus, SyncRunSummary
from ..services.firestore import FirestoreService
from .sync import PairReconciler

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """
    Loads pairings and the user crosswalk once, then runs one reconciler per
    pairing. A failing pairing is recorded in the summary and never stops,
    or holds back the cursors of, the others.
    """
    
    def __init__(self, store: FirestoreService, reconciler: PairReconciler):
        self.store = store
        self.reconciler = reconciler
    
    async def run(self, triggered_by: str = "scheduler") -> SyncRunSummary:
        """
        Execute one sync run.
        
        Args:
            triggered_by: What triggered this run (scheduler, api, cli)
            
        Returns:
            SyncRunSummary with one PairingResult per active pairing
            
        Raises:
            ConfigurationError: If there are no active pairings
        """
        summary = SyncRunSummary(id=str(uuid.uuid4()), triggered_by=triggered_by)
        logger.info(f"Starting sync run {summary.id} (triggered by {triggered_by})")
        
        pairings = await self.store.list_active_pairings()
        if not pairings:
            raise ConfigurationError("No active sync pairings found")
        
        crosswalk = await self.store.load_user_mappings()
        
        unique, duplicates = self._split_duplicates(pairings)
        results = await asyncio.gather(
            *(self._run_pairing(pairing, crosswalk) for pairing in unique)
        )
        summary.pairings = list(results) + duplicates
        summary.mark_completed()
        
        logger.info(
            f"Sync run {summary.id} finished ({summary.status.value}): "
            f"{len(summary.pairings)} pairings, {len(summary.failed_pairings)} failed; "
            f"{summary.created_count} created, {summary.updated_count} updated, "
            f"{summary.skipped_count} skipped, {summary.failed_count} failed"
        )
        
        try:
            await self.store.create_run_record(summary)
        except Exception as e:
            logger.error(f"Failed to store run record {summary.id}: {e}")
        
        return summary
    
    async def _run_pairing(self, pairing: SyncPairing, crosswalk: Mapping[str, str]) -> PairingResult:
        """Reconcile one pairing; any exception becomes a failed result."""
        started_at = utc_now()
        try:
            return await self.reconciler.reconcile(pairing, crosswalk)
        except Exception as e:
            logger.exception(f"Error processing pairing {pairing.label} ({pairing.id}); cursor not advanced")
            return PairingResult(
                pairing_id=pairing.id,
                label=pairing.label,
                status=PairingStatus.FAILED,
                started_at=started_at,
                completed_at=utc_now(),
                error_message=str(e) or e.__class__.__name__
            )
    
    @staticmethod
    def _split_duplicates(pairings: List[SyncPairing]) -> Tuple[List[SyncPairing], List[PairingResult]]:
        """Keep the first pairing per (list, workspace); report the rest as skipped."""
        seen: Dict[Tuple[str, str], SyncPairing] = {}
        duplicates = []
        for pairing in sorted(pairings, key=lambda p: p.id):
            key = (pairing.clickup_list_id, pairing.motion_workspace_id)
            if key in seen:
                logger.warning(
                    f"Pairing {pairing.id} duplicates pairing {seen[key].id} "
                    f"(list {key[0]}, workspace {key[1]}), skipping it"
                )
                duplicates.append(PairingResult(
                    pairing_id=pairing.id,
                    label=pairing.label,
                    status=PairingStatus.SKIPPED,
                    error_message=f"duplicate of pairing {seen[key].id}"
                ))
                continue
            seen[key] = pairing
        return list(seen.values()), duplicates
