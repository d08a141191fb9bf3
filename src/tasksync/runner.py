"""
Wiring for a sync run: settings -> clients -> connectors -> orchestrator.
"""

import logging
from typing import Optional

from .connectors import ClickUpConnector, MotionConnector
from .core.config import AppSettings, load_settings
from .engine import FieldTransformer, PairReconciler, SyncOrchestrator
from .integrations.clickup.client import ClickUpClient
from .integrations.motion.client import MotionClient
from .models.sync import SyncRunSummary
from .services.firestore import FirestoreService

logger = logging.getLogger(__name__)


def build_transformer(settings: AppSettings) -> FieldTransformer:
    return FieldTransformer(
        done_status=settings.clickup_done_status,
        auto_schedule=settings.motion_auto_schedule,
        schedule_name=settings.motion_schedule_name,
        deadline_type=settings.motion_deadline_type,
    )


def build_connectors(settings: AppSettings):
    """Return the (ClickUp, Motion) connector pair."""
    clickup = ClickUpConnector(ClickUpClient(settings.clickup_api_key, settings.clickup_base_url))
    motion = MotionConnector(MotionClient(settings.motion_api_key, settings.motion_base_url))
    return clickup, motion


def build_orchestrator(settings: AppSettings, store: Optional[FirestoreService] = None) -> SyncOrchestrator:
    store = store or FirestoreService(project_id=settings.google_cloud_project)
    clickup, motion = build_connectors(settings)
    reconciler = PairReconciler(store, clickup, motion, build_transformer(settings))
    return SyncOrchestrator(store, reconciler)


async def run_scheduled_sync(triggered_by: str = "scheduler") -> SyncRunSummary:
    """
    The time-triggered entry point: load configuration, then run every pairing.
    
    Raises:
        ConfigurationError: If credentials are missing or no pairing is active
    """
    settings = load_settings()
    orchestrator = build_orchestrator(settings)
    return await orchestrator.run(triggered_by=triggered_by)
