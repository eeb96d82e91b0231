"""
To-do list feature.

Tasks are owned by the acting user. Besides search and sort, the list can be
narrowed by completion status and reports a completion percentage.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..derive import Projection
from ..entities import PriorityLevel, Task
from ..gateway.api import NEWEST_FIRST, DataGateway
from ..orchestrator import Mutation
from ..results import Failure, GatewayResult, Success
from .common import FeatureController, OnDone, expect_rows, parse_rows, relabel

TABLE = "tasks"

MODAL_CREATE = "create"
MODAL_UPDATE = "update"
MODAL_DELETE = "delete"

TASK_PROJECTION: Projection[Task] = Projection(
    name=lambda t: t.content,
    created_at=lambda t: t.created_at,
    text=(lambda t: t.priority_level.value,),
)


class TaskFilter(str, Enum):
    """Completion filter for the task list."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    def accepts(self, task: Task) -> bool:
        if self is TaskFilter.ACTIVE:
            return not task.is_done
        if self is TaskFilter.COMPLETED:
            return task.is_done
        return True


@dataclass(frozen=True, slots=True)
class TaskProgress:
    """Completion summary over all tasks (not only the visible ones)."""

    completed: int
    total: int

    @property
    def percent(self) -> float:
        return (self.completed / self.total) * 100 if self.total else 0.0


def task_progress(tasks: tuple[Task, ...] | list[Task]) -> TaskProgress:
    return TaskProgress(completed=sum(1 for t in tasks if t.is_done), total=len(tasks))


# ---------- Actions ----------
def parse_priority(value: PriorityLevel | str) -> PriorityLevel | None:
    """Return the priority for `value` (case-insensitive), or None if unknown."""
    if isinstance(value, PriorityLevel):
        return value
    try:
        return PriorityLevel(value.strip().lower())
    except ValueError:
        return None


def list_tasks(gateway: DataGateway, user_id: str) -> GatewayResult:
    result = gateway.list(TABLE, {"user_id": user_id}, NEWEST_FIRST)
    if isinstance(result, Failure):
        return relabel(result, "Failed to fetch tasks. Please try again.")
    return parse_rows(result.data or (), Task.from_row, "Failed to fetch tasks. Please try again.")


def create_task(
    gateway: DataGateway, *, user_id: str, content: str, priority_level: PriorityLevel | str
) -> GatewayResult:
    text = content.strip()
    priority = parse_priority(priority_level)
    if not text:
        return Failure("Task cannot be empty.")
    if priority is None:
        return Failure(f"Unknown priority level: {priority_level}")
    result = gateway.insert(
        TABLE,
        {
            "user_id": user_id,
            "content": text,
            "priority_level": priority.value,
            "is_done": False,
        },
    )
    if isinstance(result, Failure):
        return relabel(result, "Failed to create task. Please try again.")
    return Success(data=result.data, message="Task has been added!")


def update_task(
    gateway: DataGateway,
    *,
    task_id: int,
    user_id: str,
    content: str,
    priority_level: PriorityLevel | str,
) -> GatewayResult:
    text = content.strip()
    priority = parse_priority(priority_level)
    if not text:
        return Failure("Task cannot be empty.")
    if priority is None:
        return Failure(f"Unknown priority level: {priority_level}")
    result = gateway.update(
        TABLE,
        {"id": task_id, "user_id": user_id},
        {"content": text, "priority_level": priority.value},
    )
    return expect_rows(
        result, "Failed to update task. Please try again.", "Task has been updated successfully."
    )


def toggle_task(gateway: DataGateway, *, task_id: int, user_id: str, is_done: bool) -> GatewayResult:
    """Flip completion; `is_done` is the state the user saw before toggling."""
    result = gateway.update(TABLE, {"id": task_id, "user_id": user_id}, {"is_done": not is_done})
    return expect_rows(
        result, "Failed to update task. Please try again.", "Task status has been updated"
    )


def delete_task(gateway: DataGateway, *, task_id: int, user_id: str) -> GatewayResult:
    result = gateway.delete(TABLE, {"id": task_id, "user_id": user_id})
    return expect_rows(result, "Failed to delete task. Please try again.", "Task has been deleted!")


# ---------- Controller ----------
class TasksController(FeatureController[Task]):
    """Task list bound to a session."""

    name = "tasks"
    projection = TASK_PROJECTION

    status_filter: TaskFilter = TaskFilter.ALL

    def fetch(self) -> GatewayResult:
        return list_tasks(self.gateway, str(self.user_id))

    def visible(self) -> list[Task]:
        return [t for t in super().visible() if self.status_filter.accepts(t)]

    def progress(self) -> TaskProgress:
        return task_progress(self.store.items)

    def create(self, content: str, priority_level: PriorityLevel | str, on_done: OnDone = None) -> bool:
        user_id = self.user_id
        return self.submit(
            Mutation(
                key="create-task",
                call=lambda: create_task(
                    self.gateway, user_id=str(user_id), content=content, priority_level=priority_level
                ),
                modal=MODAL_CREATE,
                required=self.identity(),
                precondition_message="Please login to add tasks",
            ),
            on_done,
        )

    def update(self, content: str, priority_level: PriorityLevel | str, on_done: OnDone = None) -> bool:
        """Update the selected task."""
        task = self.store.selected
        task_id = task.id if task is not None else 0
        user_id = self.user_id
        return self.submit(
            Mutation(
                key="update-task",
                call=lambda: update_task(
                    self.gateway,
                    task_id=task_id,
                    user_id=str(user_id),
                    content=content,
                    priority_level=priority_level,
                ),
                modal=MODAL_UPDATE,
                required={**self.identity(), "task": task},
                precondition_message="Select a task first" if self.user_id else "Please login to update tasks",
            ),
            on_done,
        )

    def toggle(self, task: Task, on_done: OnDone = None) -> bool:
        user_id = self.user_id
        return self.submit(
            Mutation(
                key=f"toggle-task-{task.id}",
                call=lambda: toggle_task(
                    self.gateway, task_id=task.id, user_id=str(user_id), is_done=task.is_done
                ),
                required=self.identity(),
            ),
            on_done,
        )

    def delete_selected(self, on_done: OnDone = None) -> bool:
        """Delete the task selected by the confirmation dialog."""
        task = self.store.selected
        task_id = task.id if task is not None else 0
        user_id = self.user_id
        return self.submit(
            Mutation(
                key="delete-task",
                call=lambda: delete_task(self.gateway, task_id=task_id, user_id=str(user_id)),
                modal=MODAL_DELETE,
                required={**self.identity(), "task": task},
                close_modal_on_error=True,
            ),
            on_done,
        )
