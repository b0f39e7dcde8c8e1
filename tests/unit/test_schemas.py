"""Tests for finresearch.models.schemas: plan validation and data shapes."""

import pytest
from pydantic import ValidationError

from finresearch.models.schemas import (
    ContextEntry,
    ExecutionPlan,
    OptimizedToolArgs,
    PlannedTask,
)

from conftest import plan_payload


# ── ExecutionPlan ────────────────────────────────────────────────────────────


class TestExecutionPlan:
    def test_valid_plan(self):
        plan = ExecutionPlan.model_validate(
            plan_payload((1, "Revenue", ["Fetch statements", "Compute growth"]))
        )
        assert len(plan.tasks) == 1
        assert [s.id for s in plan.tasks[0].subtasks] == [1, 2]
        assert plan.tasks[0].done is False

    def test_empty_task_list_rejected(self):
        with pytest.raises(ValidationError):
            ExecutionPlan.model_validate({"tasks": []})

    def test_duplicate_task_ids_rejected(self):
        payload = plan_payload((1, "A", ["a"]), (1, "B", ["b"]))
        with pytest.raises(ValidationError, match="duplicate task id"):
            ExecutionPlan.model_validate(payload)

    def test_duplicate_subtask_ids_rejected(self):
        payload = {
            "tasks": [{
                "id": 1,
                "description": "A",
                "subtasks": [
                    {"id": 1, "description": "x"},
                    {"id": 1, "description": "y"},
                ],
            }]
        }
        with pytest.raises(ValidationError, match="duplicate subtask id"):
            ExecutionPlan.model_validate(payload)

    def test_same_subtask_ids_in_different_tasks_allowed(self):
        plan = ExecutionPlan.model_validate(
            plan_payload((1, "A", ["a"]), (2, "B", ["b"]))
        )
        assert plan.tasks[0].subtasks[0].id == plan.tasks[1].subtasks[0].id

    def test_blank_description_rejected(self):
        with pytest.raises(ValidationError):
            ExecutionPlan.model_validate(plan_payload((1, "   ", ["a"])))

    def test_negative_id_rejected(self):
        with pytest.raises(ValidationError):
            ExecutionPlan.model_validate(plan_payload((-1, "A", ["a"])))

    def test_negative_subtask_id_allowed(self):
        payload = {"tasks": [{"id": 1, "description": "A", "subtasks": [
            {"id": -1, "description": "x"}, {"id": 0, "description": "y"}
        ]}]}
        plan = ExecutionPlan.model_validate(payload)
        assert [s.id for s in plan.tasks[0].subtasks] == [-1, 0]

    def test_task_without_subtasks_rejected(self):
        with pytest.raises(ValidationError):
            ExecutionPlan.model_validate(
                {"tasks": [{"id": 1, "description": "A", "subtasks": []}]}
            )

    def test_flattened_views(self):
        plan = ExecutionPlan.model_validate(
            plan_payload((3, "Revenue", ["Fetch", "Compute"]))
        )
        assert plan.flat_tasks() == [{"id": 3, "description": "Revenue", "done": False}]
        subtask_plans = plan.flat_subtask_plans()
        assert subtask_plans[0]["id"] == 3
        assert subtask_plans[0]["subtasks"][1] == {"id": 2, "description": "Compute", "done": False}


# ── PlannedTask.refresh_done ─────────────────────────────────────────────────


class TestRefreshDone:
    def _task(self):
        return PlannedTask.model_validate(
            {"id": 1, "description": "A", "subtasks": [
                {"id": 1, "description": "x"}, {"id": 2, "description": "y"}
            ]}
        )

    def test_not_done_until_all_subtasks_done(self):
        task = self._task()
        task.subtasks[0].done = True
        assert task.refresh_done() is False
        assert task.done is False

    def test_done_when_all_subtasks_done(self):
        task = self._task()
        for s in task.subtasks:
            s.done = True
        assert task.refresh_done() is True
        assert task.done is True


# ── ContextEntry / OptimizedToolArgs ─────────────────────────────────────────


class TestContextEntry:
    def test_frozen(self):
        entry = ContextEntry(id=0, task_id=1, subtask_id=1, tool_name="t", result={"a": 1})
        with pytest.raises(ValidationError):
            entry.error = "changed"

    def test_succeeded(self):
        ok = ContextEntry(id=0, task_id=1, subtask_id=1, tool_name="t", result=[])
        failed = ContextEntry(id=1, task_id=1, subtask_id=1, tool_name="t", error="boom")
        assert ok.succeeded is True
        assert failed.succeeded is False


class TestOptimizedToolArgs:
    def test_null_tool_allowed(self):
        args = OptimizedToolArgs.model_validate_json('{"tool_name": null}')
        assert args.tool_name is None
        assert args.arguments == {}
