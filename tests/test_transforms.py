"""
Tests for the ClickUp <-> Motion field transformations.
"""

from datetime import date

import pytest

from tasksync.engine.transforms import FieldTransformer
from tasksync.models.tasks import ClickUpTask, MotionTask


@pytest.fixture
def transformer():
    return FieldTransformer(today=lambda: date(2024, 3, 1))


class TestConversions:
    def test_clickup_date_to_iso(self):
        assert FieldTransformer.clickup_date_to_iso("1700000000000") == "2023-11-14T22:13:20.000Z"
        assert FieldTransformer.clickup_date_to_iso(1700000000000) == "2023-11-14T22:13:20.000Z"

    @pytest.mark.parametrize("value", [None, "", "tomorrow", "nan", True, float("inf")])
    def test_clickup_date_to_iso_rejects_malformed(self, value):
        assert FieldTransformer.clickup_date_to_iso(value) is None

    def test_motion_iso_to_timestamp(self):
        assert FieldTransformer.motion_iso_to_timestamp("2023-11-14T22:13:20.000Z") == 1700000000000
        assert FieldTransformer.motion_iso_to_timestamp("2023-11-14T23:13:20+01:00") == 1700000000000
        assert FieldTransformer.motion_iso_to_timestamp("not a date") is None
        assert FieldTransformer.motion_iso_to_timestamp(None) is None

    def test_ms_to_minutes_rounds_half_up(self):
        assert FieldTransformer.ms_to_minutes(90000) == 2
        assert FieldTransformer.ms_to_minutes("150000") == 3
        assert FieldTransformer.ms_to_minutes(89999) == 1

    @pytest.mark.parametrize("value", [None, 0, -60000, 29999, "abc"])
    def test_ms_to_minutes_drops_non_positive(self, value):
        assert FieldTransformer.ms_to_minutes(value) is None

    def test_minutes_to_ms(self):
        assert FieldTransformer.minutes_to_ms(45) == 2700000
        assert FieldTransformer.minutes_to_ms(0.5) == 30000
        assert FieldTransformer.minutes_to_ms(0) is None
        assert FieldTransformer.minutes_to_ms("NONE") is None


class TestCreationPayload:
    def test_full_task(self, transformer):
        task = ClickUpTask(
            id="c1",
            name="Draft proposal",
            text_content="plain",
            description="legacy",
            due_date="1700000000000",
            time_estimate=90000,
            assignees=[{"id": 101, "username": "ana"}],
        )

        payload = transformer.to_creation_payload(task, "W1", {"101": "mu_101"})

        assert payload.to_request() == {
            "workspaceId": "W1",
            "name": "Draft proposal",
            "description": "plain",
            "dueDate": "2023-11-14T22:13:20.000Z",
            "duration": 2,
            "assigneeIds": ["mu_101"],
            "autoScheduled": {"startDate": "2024-03-01", "deadlineType": "SOFT", "schedule": "Work Hours"},
        }
        assert payload.unmapped_assignees == []

    def test_minimal_task_omits_optional_fields(self, transformer):
        payload = transformer.to_creation_payload(ClickUpTask(id="c2", name="Bare"), "W1", {})

        request = payload.to_request()
        assert set(request) == {"workspaceId", "name", "autoScheduled"}

    def test_description_falls_back_to_legacy_field(self, transformer):
        task = ClickUpTask(id="c3", name="T", description="legacy text")
        assert transformer.to_creation_payload(task, "W1", {}).description == "legacy text"

    def test_empty_text_content_is_not_replaced(self, transformer):
        task = ClickUpTask(id="c4", name="T", text_content="", description="legacy text")
        assert "description" not in transformer.to_creation_payload(task, "W1", {}).to_request()

    def test_unmapped_assignees_are_reported(self, transformer, caplog):
        task = ClickUpTask(id="c5", name="T", assignees=[{"id": 101}, {"id": "202"}])

        payload = transformer.to_creation_payload(task, "W1", {"101": "mu_101"})

        assert payload.assignee_ids == ["mu_101"]
        assert payload.unmapped_assignees == ["202"]
        assert "have no Motion user" in caplog.text

    def test_no_mapped_assignees_sends_empty_list(self, transformer):
        task = ClickUpTask(id="c6", name="T", assignees=[{"id": 303}])
        assert transformer.to_creation_payload(task, "W1", {}).to_request()["assigneeIds"] == []

    def test_auto_schedule_failure_sends_explicit_null(self):
        def broken_today():
            raise RuntimeError("clock unavailable")

        transformer = FieldTransformer(today=broken_today)
        request = transformer.to_creation_payload(ClickUpTask(id="c7", name="T"), "W1", {}).to_request()

        assert "autoScheduled" in request
        assert request["autoScheduled"] is None

    def test_auto_schedule_disabled(self):
        transformer = FieldTransformer(auto_schedule=False)
        request = transformer.to_creation_payload(ClickUpTask(id="c8", name="T"), "W1", {}).to_request()
        assert "autoScheduled" not in request

    def test_malformed_fields_are_dropped(self, transformer):
        task = ClickUpTask(id="c9", name="T", due_date="soon", time_estimate={"bad": "shape"})

        request = transformer.to_creation_payload(task, "W1", {}).to_request()

        assert "dueDate" not in request
        assert "duration" not in request


class TestUpdatePayload:
    def test_completed_task_without_due_date_or_duration(self, transformer):
        task = MotionTask(id="m9", dueDate=None, completed=True, duration=0)

        assert transformer.to_update_payload(task).to_request() == {
            "due_date": None,
            "status": "complete",
            "time_estimate": None,
        }

    def test_due_date_and_duration(self, transformer):
        task = MotionTask(id="m1", dueDate="2023-11-14T22:13:20.000Z", duration=45)

        assert transformer.to_update_payload(task).to_request() == {
            "due_date": 1700000000000,
            "time_estimate": 2700000,
        }

    def test_reopened_task_never_writes_status(self, transformer):
        task = MotionTask(id="m2", dueDate="2023-11-14T22:13:20.000Z", completed=False)
        assert "status" not in transformer.to_update_payload(task).to_request()

    @pytest.mark.parametrize("duration", [None, "NONE", "REMINDER"])
    def test_non_numeric_duration_leaves_estimate_alone(self, transformer, duration):
        task = MotionTask(id="m3", dueDate="2023-11-14T22:13:20.000Z", duration=duration)
        assert "time_estimate" not in transformer.to_update_payload(task).to_request()

    def test_unparseable_due_date_is_left_out(self, transformer):
        payload = transformer.to_update_payload(MotionTask(id="m4", dueDate="someday"))
        assert payload.is_empty()

    def test_custom_done_status(self):
        transformer = FieldTransformer(done_status="closed")
        payload = transformer.to_update_payload(MotionTask(id="m5", completed=True))
        assert payload.status == "closed"
