"""
Persistence for users and tasks.

Both stores wrap a request-scoped SQLAlchemy session. Every task query
filters on the owner as well as the task id, so a task id on its own never
grants access.
"""
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from todo_api import models
from todo_api.errors import DuplicateUser

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, username: str) -> Optional[models.User]:
        return self.db.execute(
            select(models.User).where(models.User.username == username)
        ).scalar_one_or_none()

    def get_by_email(self, email: str) -> Optional[models.User]:
        return self.db.execute(
            select(models.User).where(models.User.email == email)
        ).scalar_one_or_none()

    def add(self, username: str, email: str, password_hash: str) -> models.User:
        """Persist a new user; a uniqueness violation becomes DuplicateUser."""
        user = models.User(username=username, email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name/email.
            self.db.rollback()
            logger.info("Registration for %r hit a uniqueness constraint", username)
            raise DuplicateUser()
        self.db.refresh(user)
        return user

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(models.User)).scalar_one()


# Largest id a 64-bit integer primary key can hold.
MAX_TASK_ID = 2**63 - 1


class TaskStore:
    def __init__(self, db: Session):
        self.db = db

    def list_for_owner(self, owner_id: int) -> List[models.Task]:
        return list(
            self.db.execute(
                select(models.Task)
                .where(models.Task.owner_id == owner_id)
                .order_by(models.Task.id)
            ).scalars()
        )

    def get_owned(self, owner_id: int, task_id: int) -> Optional[models.Task]:
        if not 1 <= task_id <= MAX_TASK_ID:
            return None
        return self.db.execute(
            select(models.Task).where(
                models.Task.id == task_id,
                models.Task.owner_id == owner_id,
            )
        ).scalar_one_or_none()

    def add(self, owner_id: int, text: str) -> models.Task:
        task = models.Task(text=text, owner_id=owner_id)
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def update_text(self, owner_id: int, task_id: int, text: str) -> Optional[models.Task]:
        task = self.get_owned(owner_id, task_id)
        if task is None:
            return None
        task.text = text
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, owner_id: int, task_id: int) -> bool:
        task = self.get_owned(owner_id, task_id)
        if task is None:
            return False
        self.db.delete(task)
        self.db.commit()
        return True
