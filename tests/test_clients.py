"""
Tests for the ClickUp and Motion HTTP clients and their connectors.
"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from tasksync.connectors import ClickUpConnector, MotionConnector
from tasksync.exceptions import ClickUpAPIError, MotionAPIError
from tasksync.integrations.clickup.client import ClickUpClient
from tasksync.integrations.motion.client import MotionClient
from tasksync.models.tasks import ClickUpUpdatePayload, MotionCreatePayload

SINCE = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def _response(status_code=200, body=None):
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    response.url = "https://api.example.test"
    if isinstance(body, str):
        response._content = body.encode()
    elif body is not None:
        response._content = json.dumps(body).encode()
    else:
        response._content = b""
    return response


@pytest.fixture
def clickup_client():
    client = ClickUpClient("pk_test")
    client.session.request = MagicMock()
    return client


@pytest.fixture
def motion_client():
    client = MotionClient("motion_test")
    client.session.request = MagicMock()
    return client


class TestClickUpClient:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            ClickUpClient("")

    def test_auth_header(self, clickup_client):
        assert clickup_client.session.headers["Authorization"] == "pk_test"

    def test_pages_until_last_page(self, clickup_client):
        clickup_client.session.request.side_effect = [
            _response(body={"tasks": [{"id": "a"}, {"id": "b"}], "last_page": False}),
            _response(body={"tasks": [{"id": "c"}], "last_page": True}),
        ]

        tasks = clickup_client.get_tasks_updated_since("L1", SINCE)

        assert [t["id"] for t in tasks] == ["a", "b", "c"]
        first_call, second_call = clickup_client.session.request.call_args_list
        assert first_call.args == ("GET", "https://api.clickup.com/api/v2/list/L1/task")
        assert first_call.kwargs["params"] == {
            "date_updated_gt": 1700000000000,
            "subtasks": "true",
            "include_closed": "true",
            "page": 0,
        }
        assert second_call.kwargs["params"]["page"] == 1

    def test_stops_on_empty_page(self, clickup_client):
        clickup_client.session.request.return_value = _response(body={"tasks": [], "last_page": False})

        assert clickup_client.get_tasks_updated_since("L1", SINCE) == []
        assert clickup_client.session.request.call_count == 1

    def test_http_error_carries_status_and_body(self, clickup_client):
        clickup_client.session.request.return_value = _response(401, '{"err":"Token invalid"}')

        with pytest.raises(ClickUpAPIError) as exc_info:
            clickup_client.get_authorized_user()

        assert exc_info.value.status_code == 401
        assert "Token invalid" in exc_info.value.response_body

    def test_connection_error(self, clickup_client):
        clickup_client.session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(ClickUpAPIError) as exc_info:
            clickup_client.get_authorized_user()

        assert exc_info.value.status_code is None

    def test_update_uses_put(self, clickup_client):
        clickup_client.session.request.return_value = _response(body={"id": "c1"})

        clickup_client.update_task("c1", {"status": "complete"})

        call = clickup_client.session.request.call_args
        assert call.args == ("PUT", "https://api.clickup.com/api/v2/task/c1")
        assert call.kwargs["json"] == {"status": "complete"}

    def test_empty_response_body(self, clickup_client):
        clickup_client.session.request.return_value = _response(204)
        assert clickup_client.update_task("c1", {"status": "complete"}) is None


class TestMotionClient:
    def test_auth_header(self, motion_client):
        assert motion_client.session.headers["X-API-Key"] == "motion_test"

    def test_pages_follow_next_cursor(self, motion_client):
        motion_client.session.request.side_effect = [
            _response(body={"tasks": [{"id": "m1"}], "meta": {"nextCursor": "abc"}}),
            _response(body={"tasks": [{"id": "m2"}], "meta": {}}),
        ]

        tasks = list(motion_client.iter_tasks("W1"))

        assert [t["id"] for t in tasks] == ["m1", "m2"]
        params = [c.kwargs["params"] for c in motion_client.session.request.call_args_list]
        assert params == [{"workspaceId": "W1"}, {"workspaceId": "W1", "cursor": "abc"}]

    def test_task_pages_are_lazy_and_restartable(self, motion_client):
        motion_client.session.request.side_effect = lambda *args, **kwargs: _response(
            body={"tasks": [{"id": "m1"}], "meta": {}}
        )

        pages = motion_client.iter_tasks("W1")
        assert motion_client.session.request.call_count == 0

        assert [t["id"] for t in pages] == ["m1"]
        assert [t["id"] for t in pages] == ["m1"]
        assert motion_client.session.request.call_count == 2

    def test_filters_by_updated_time(self, motion_client):
        motion_client.session.request.return_value = _response(body={"tasks": [
            {"id": "old", "updatedTime": "2023-11-14T22:13:20.000Z"},
            {"id": "new", "updatedTime": "2023-11-14T22:13:21.000Z"},
            {"id": "bad", "updatedTime": "yesterday"},
            {"id": "none"},
        ]})

        changed = motion_client.get_tasks_updated_since("W1", SINCE)

        assert [t["id"] for t in changed] == ["new"]

    def test_http_error(self, motion_client):
        motion_client.session.request.return_value = _response(429, "Too Many Requests")

        with pytest.raises(MotionAPIError) as exc_info:
            motion_client.get_current_user()

        assert exc_info.value.status_code == 429

    def test_create_posts_to_tasks(self, motion_client):
        motion_client.session.request.return_value = _response(201, {"id": "m1", "name": "T"})

        motion_client.create_task({"workspaceId": "W1", "name": "T"})

        call = motion_client.session.request.call_args
        assert call.args == ("POST", "https://api.usemotion.com/v1/tasks")


class TestConnectors:
    @pytest.mark.asyncio
    async def test_clickup_fetch_returns_models(self):
        client = MagicMock()
        client.get_tasks_updated_since.return_value = [{"id": "c1", "name": "T", "date_updated": "1700000000001"}]

        tasks = await ClickUpConnector(client).fetch_changed_since("L1", SINCE)

        assert tasks[0].id == "c1"
        assert tasks[0].updated_at > SINCE

    @pytest.mark.asyncio
    async def test_clickup_cannot_create(self):
        payload = MotionCreatePayload(workspace_id="W1", name="T")
        with pytest.raises(NotImplementedError):
            await ClickUpConnector(MagicMock()).create_task("L1", payload)

    @pytest.mark.asyncio
    async def test_clickup_update_sends_only_set_fields(self):
        client = MagicMock()
        client.update_task.return_value = None

        task = await ClickUpConnector(client).update_task("c1", ClickUpUpdatePayload(status="complete"))

        client.update_task.assert_called_once_with("c1", {"status": "complete"})
        assert task.id == "c1"

    @pytest.mark.asyncio
    async def test_motion_create_sets_workspace(self):
        client = MagicMock()
        client.create_task.return_value = {"id": "m1", "name": "T"}
        payload = MotionCreatePayload(workspace_id="other", name="T")

        task = await MotionConnector(client).create_task("W1", payload)

        assert task.id == "m1"
        assert client.create_task.call_args.args[0] == {"workspaceId": "W1", "name": "T"}

    @pytest.mark.asyncio
    async def test_motion_create_without_id_fails(self):
        client = MagicMock()
        client.create_task.return_value = {}

        with pytest.raises(MotionAPIError):
            await MotionConnector(client).create_task("W1", MotionCreatePayload(workspace_id="W1", name="T"))

    @pytest.mark.asyncio
    async def test_motion_cannot_update(self):
        with pytest.raises(NotImplementedError):
            await MotionConnector(MagicMock()).update_task("m1", ClickUpUpdatePayload())

    @pytest.mark.asyncio
    async def test_connection_failure_returns_false(self):
        client = MagicMock()
        client.get_current_user.side_effect = MotionAPIError("HTTP 401: unauthorized", status_code=401)

        assert await MotionConnector(client).test_connection() is False

    def test_capabilities(self):
        assert ClickUpConnector(MagicMock()).get_capabilities().model_dump() == {
            "can_fetch_changed": True,
            "can_create_tasks": False,
            "can_update_tasks": True,
        }
        assert MotionConnector(MagicMock()).get_capabilities().model_dump() == {
            "can_fetch_changed": True,
            "can_create_tasks": True,
            "can_update_tasks": False,
        }
