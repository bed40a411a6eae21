import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from . import __version__, schemas
from .auth import AuthService, get_current_user_id
from .config import Settings, get_settings
from .database import Database, get_db
from .errors import register_exception_handlers
from .store import CredentialStore, TaskStore
from .tasks import TaskService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(CredentialStore(db), settings)


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(TaskStore(db))


# ============== AUTH ENDPOINTS ==============

@router.post("/register", response_model=schemas.Token)
def register(user: schemas.UserCreate, auth: AuthService = Depends(get_auth_service)):
    """Register a new user and return a token for them"""
    token = auth.register(user.username, user.email, user.password)
    return {"token": token}


@router.post("/login", response_model=schemas.Token)
def login(credentials: schemas.UserLogin, auth: AuthService = Depends(get_auth_service)):
    """Login and get a fresh token"""
    token = auth.login(credentials.username, credentials.password)
    return {"token": token}


# ============== TASK ENDPOINTS (PROTECTED) ==============
# get_current_user_id stays ahead of the service dependency: a rejected
# token never opens a session.

@router.get("/tasks", response_model=List[schemas.Task])
def read_tasks(
    user_id: int = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
):
    """Get current user's tasks only"""
    return tasks.list_tasks(user_id)


@router.post("/tasks", response_model=schemas.Task)
def create_task(
    task: schemas.TaskCreate,
    user_id: int = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
):
    """Create a new task owned by the current user"""
    return tasks.create_task(user_id, task.text)


@router.put("/tasks/{task_id}", response_model=schemas.Task)
def update_task(
    task_id: int,
    task_update: schemas.TaskUpdate,
    user_id: int = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
):
    """Update a task's text (only if user owns it)"""
    return tasks.update_task(user_id, task_id, task_update.text)


@router.delete("/tasks/{task_id}", response_model=schemas.Message)
def delete_task(
    task_id: int,
    user_id: int = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
):
    """Delete a task (only if user owns it; reports success either way)"""
    tasks.delete_task(user_id, task_id)
    return {"message": "Task deleted"}


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application around an explicit Settings object and Database.

    Both are stored on ``app.state`` and reached from request dependencies;
    nothing is read from module globals at request time.
    """
    if settings is None:
        settings = get_settings()
    if database is None:
        database = Database(settings.DATABASE_URL)
    database.create_all()

    app = FastAPI(title="To-Do API", version=__version__)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router)

    logger.info("Application created (token lifetime %s min)", settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return app
