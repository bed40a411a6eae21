"""
Task operations scoped to the authenticated user.
"""
import logging
from typing import List

from todo_api import models
from todo_api.errors import NotFound, ValidationError
from todo_api.store import TaskStore

logger = logging.getLogger(__name__)


def _clean_text(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError("text: must not be blank")
    return text


class TaskService:
    def __init__(self, tasks: TaskStore):
        self.tasks = tasks

    def list_tasks(self, user_id: int) -> List[models.Task]:
        """All of the user's tasks in insertion order; empty list when none."""
        return self.tasks.list_for_owner(user_id)

    def create_task(self, user_id: int, text: str) -> models.Task:
        task = self.tasks.add(owner_id=user_id, text=_clean_text(text))
        logger.info("Task %s created for user %s", task.id, user_id)
        return task

    def update_task(self, user_id: int, task_id: int, text: str) -> models.Task:
        """
        Replace the text of one of the user's tasks.

        A task that exists but belongs to someone else is reported exactly
        like a missing one.
        """
        task = self.tasks.update_text(user_id, task_id, _clean_text(text))
        if task is None:
            raise NotFound("Task not found")
        logger.debug("Task %s updated by user %s", task_id, user_id)
        return task

    def delete_task(self, user_id: int, task_id: int) -> bool:
        """
        Delete one of the user's tasks. Succeeds whether or not a matching
        task existed; the return value only says if a row was removed.
        """
        deleted = self.tasks.delete(user_id, task_id)
        if deleted:
            logger.info("Task %s deleted by user %s", task_id, user_id)
        else:
            logger.debug("Delete of task %s by user %s matched nothing", task_id, user_id)
        return deleted
