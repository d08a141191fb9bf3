"""
Tests for the Cloud Scheduler job management.
"""

from unittest.mock import MagicMock

from google.api_core.exceptions import NotFound

from tasksync.services.scheduler import SYNC_JOB_NAME, SchedulerService


def _service():
    client = MagicMock()
    return SchedulerService(project_id="demo", region="europe-west1", client=client), client


class TestSchedulerService:
    def test_creates_missing_job(self):
        service, client = _service()
        client.get_job.side_effect = NotFound("missing")
        client.create_job.return_value.name = service.job_path

        result = service.ensure_sync_schedule("*/10 * * * *", "https://sync.example.com/")

        job = client.create_job.call_args.kwargs["job"]
        assert client.create_job.call_args.kwargs["parent"] == "projects/demo/locations/europe-west1"
        assert job["http_target"]["uri"] == "https://sync.example.com/sync/trigger"
        assert job["http_target"]["oidc_token"]["service_account_email"] == "tasksync-sa@demo.iam.gserviceaccount.com"
        assert result["job_name"] == SYNC_JOB_NAME
        client.update_job.assert_not_called()

    def test_updates_existing_job(self):
        service, client = _service()
        client.update_job.return_value.name = service.job_path

        service.ensure_sync_schedule("0 * * * *", "https://sync.example.com")

        assert client.update_job.call_args.kwargs["job"]["schedule"] == "0 * * * *"
        client.create_job.assert_not_called()

    def test_delete_missing_job(self):
        service, client = _service()
        client.delete_job.side_effect = NotFound("missing")

        assert service.delete_sync_schedule() is False

    def test_get_missing_job(self):
        service, client = _service()
        client.get_job.side_effect = NotFound("missing")

        assert service.get_sync_schedule() is None
