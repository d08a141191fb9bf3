"""
Cloud Scheduler service for the time-based sync trigger.
"""

import logging
from typing import Dict, Any, Optional
from google.api_core.exceptions import NotFound
from google.auth import default
from google.cloud import scheduler_v1

logger = logging.getLogger(__name__)

SYNC_JOB_NAME = "tasksync-trigger"


class SchedulerService:
    """
    Service for managing the Cloud Scheduler job that calls ``/sync/trigger``.
    """
    
    def __init__(self, project_id: Optional[str] = None, region: str = "us-central1",
                 client: Optional[scheduler_v1.CloudSchedulerClient] = None):
        """
        Initialize Cloud Scheduler service.
        
        Args:
            project_id: Google Cloud project ID. If None, uses default from environment.
            region: Cloud Scheduler location
            client: Pre-built scheduler client
        """
        try:
            if project_id:
                self.client = client or scheduler_v1.CloudSchedulerClient()
                self.project_id = project_id
            else:
                credentials, project = default()
                self.client = client or scheduler_v1.CloudSchedulerClient(credentials=credentials)
                self.project_id = project
            
            self.region = region
            self.parent = f"projects/{self.project_id}/locations/{self.region}"
            self.job_path = f"{self.parent}/jobs/{SYNC_JOB_NAME}"
            
            logger.info(f"Scheduler service initialized for project: {self.project_id}, region: {self.region}")
            
        except Exception as e:
            logger.error(f"Failed to initialize Cloud Scheduler: {e}")
            raise
    
    def _build_job(self, schedule: str, service_url: str) -> Dict[str, Any]:
        return {
            "name": self.job_path,
            "description": "Periodic ClickUp <-> Motion task sync",
            "schedule": schedule,
            "time_zone": "UTC",
            "http_target": {
                "uri": f"{service_url.rstrip('/')}/sync/trigger",
                "http_method": scheduler_v1.HttpMethod.POST,
                "headers": {
                    "Content-Type": "application/json"
                },
                "oidc_token": {
                    "service_account_email": f"tasksync-sa@{self.project_id}.iam.gserviceaccount.com"
                }
            }
        }
    
    def ensure_sync_schedule(self, schedule: str, service_url: str) -> Dict[str, Any]:
        """
        Create the trigger job, or update it in place if it already exists.
        
        Args:
            schedule: Cron expression
            service_url: Base URL of the deployed API
            
        Returns:
            Dictionary with scheduler job details
        """
        job = self._build_job(schedule, service_url)
        try:
            try:
                self.client.get_job(name=self.job_path)
                response = self.client.update_job(job=job)
                logger.info(f"Updated scheduler job {SYNC_JOB_NAME} with schedule: {schedule}")
            except NotFound:
                response = self.client.create_job(parent=self.parent, job=job)
                logger.info(f"Created scheduler job {SYNC_JOB_NAME} with schedule: {schedule}")
        except Exception as e:
            logger.error(f"Failed to create or update scheduler job {SYNC_JOB_NAME}: {e}")
            raise
        
        return {
            "job_name": SYNC_JOB_NAME,
            "job_path": response.name,
            "schedule": schedule,
            "uri": job["http_target"]["uri"]
        }
    
    def get_sync_schedule(self) -> Optional[Dict[str, Any]]:
        """Get the trigger job details, None if it does not exist."""
        try:
            job = self.client.get_job(name=self.job_path)
        except NotFound:
            return None
        
        return {
            "job_name": SYNC_JOB_NAME,
            "job_path": job.name,
            "schedule": job.schedule,
            "time_zone": job.time_zone,
            "status": job.state.name,
            "uri": job.http_target.uri if job.http_target else None,
        }
    
    def delete_sync_schedule(self) -> bool:
        """Delete the trigger job. True if deleted, False if not found."""
        try:
            self.client.delete_job(name=self.job_path)
        except NotFound:
            logger.warning(f"Scheduler job not found: {SYNC_JOB_NAME}")
            return False
        logger.info(f"Deleted scheduler job: {SYNC_JOB_NAME}")
        return True
