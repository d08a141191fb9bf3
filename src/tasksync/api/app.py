"""
FastAPI application exposing the sync trigger.

Cloud Scheduler calls ``POST /sync/trigger``; the run continues as a detached
task after the response is sent and is awaited by the lifespan shutdown hook.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set
from fastapi import FastAPI, HTTPException, Depends

from .. import __version__
from ..core.config import load_settings, setup_logging
from ..exceptions import ConfigurationError, TaskSyncError
from ..models.sync import SyncRunSummary
from ..runner import run_scheduled_sync
from ..services.firestore import FirestoreService

logger = logging.getLogger(__name__)

RunFactory = Callable[[str], Awaitable[SyncRunSummary]]


class SyncRunManager:
    """
    Tracks sync runs started through the API. One run at a time per process.
    """
    
    def __init__(self, run_factory: RunFactory = run_scheduled_sync):
        self._run_factory = run_factory
        self._tasks: Set[asyncio.Task] = set()
        self.last_summary: Optional[SyncRunSummary] = None
    
    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)
    
    def start(self, triggered_by: str, detached: bool = True) -> asyncio.Task:
        """
        Start a run in the background.
        
        A detached run logs its errors; otherwise they are raised from the
        returned task to whoever awaits it.
        
        Raises:
            RuntimeError: If a run is already in flight
        """
        if self.running:
            raise RuntimeError("A sync run is already in progress")
        task = asyncio.create_task(self._run(triggered_by, detached))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
    
    async def _run(self, triggered_by: str, detached: bool) -> Optional[SyncRunSummary]:
        try:
            summary = await self._run_factory(triggered_by)
        except ConfigurationError as e:
            logger.error(f"Sync run not started: {e}")
            if not detached:
                raise
            return None
        except Exception:
            logger.exception("Sync run failed")
            if not detached:
                raise
            return None
        self.last_summary = summary
        return summary
    
    async def wait_for_pending(self) -> None:
        """Wait for every in-flight run; used on shutdown."""
        pending = [task for task in self._tasks if not task.done()]
        if pending:
            logger.info(f"Waiting for {len(pending)} sync run(s) to finish before shutdown")
            await asyncio.gather(*pending, return_exceptions=True)


def create_app(
    run_factory: RunFactory = run_scheduled_sync,
    firestore_factory: Optional[Callable[[], FirestoreService]] = None,
) -> FastAPI:
    """Build the API application."""
    state: Dict[str, Any] = {"firestore": None}
    manager = SyncRunManager(run_factory)
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        try:
            if firestore_factory is not None:
                state["firestore"] = firestore_factory()
            else:
                settings = load_settings()
                state["firestore"] = FirestoreService(project_id=settings.google_cloud_project)
            logger.info("Firestore service initialized successfully")
        except Exception as e:
            # Runs load their own settings; only run history is unavailable
            logger.error(f"Failed to initialize Firestore service: {e}")
        
        yield
        
        await manager.wait_for_pending()
        logger.info("Application shutdown")
    
    app = FastAPI(
        title="tasksync API",
        description="Incremental ClickUp <-> Motion task sync",
        version=__version__,
        lifespan=lifespan
    )
    app.state.sync_runs = manager
    
    def get_firestore_service() -> FirestoreService:
        if state["firestore"] is None:
            raise HTTPException(status_code=500, detail="Firestore service not initialized")
        return state["firestore"]
    
    @app.get("/health")
    async def health_check():
        """Check the health of the application and its services."""
        return {
            "status": "healthy",
            "version": __version__,
            "sync_running": manager.running,
            "services": {
                "firestore": state["firestore"] is not None,
            }
        }
    
    @app.post("/sync/trigger", status_code=202)
    async def trigger_sync():
        """Start a sync run and return immediately."""
        try:
            manager.start("scheduler")
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {"message": "Sync run started"}
    
    @app.post("/sync/run")
    async def run_sync_now():
        """Run a sync and wait for its summary."""
        try:
            task = manager.start("api", detached=False)
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        try:
            # a dropped request leaves the run going; shutdown still waits for it
            summary = await asyncio.shield(task)
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except TaskSyncError as e:
            raise HTTPException(status_code=500, detail=str(e))
        return summary.get_summary()
    
    @app.get("/sync/runs", response_model=List[Dict[str, Any]])
    async def list_sync_runs(
        limit: int = 20,
        firestore: FirestoreService = Depends(get_firestore_service)
    ):
        """List the most recent run summaries."""
        try:
            return await firestore.list_run_records(limit=limit)
        except Exception as e:
            logger.error(f"Failed to list sync runs: {e}")
            raise HTTPException(status_code=500, detail="An unexpected error occurred.")
    
    return app


def get_app() -> FastAPI:
    """Factory for ``uvicorn --factory tasksync.api.app:get_app``."""
    setup_logging()
    return create_app()
