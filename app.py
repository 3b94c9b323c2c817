from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from activity import list_activity, record_activity
from auth import (
    generate_token,
    get_settings_dependency,
    hash_password,
    require_user,
    verify_password,
)
from config import Settings, get_settings
from database import Base, create_session_factory, get_db
from errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    NotFoundError,
    TaskTrackerError,
    ValidationError,
)
from logger import configure_logging, get_logger
from models import Task as DBTask, TaskStatus, User as DBUser
from responses import error_response, success_response
from schemas import (
    ActivityLogOut,
    AuthOut,
    LoginRequest,
    RegisterRequest,
    TaskCreate,
    TaskOut,
    TaskUpdate,
    UserOut,
)

logger = get_logger("app")

INVALID_CREDENTIALS = "Invalid credentials"


def get_owned_task(db: Session, task_id: str, user_id: str) -> DBTask:
    # Someone else's task is reported exactly like a missing one.
    task = db.query(DBTask).filter(
        DBTask.id == task_id,
        DBTask.user_id == user_id
    ).first()
    if task is None:
        raise NotFoundError("Task not found")
    return task


def first_error_message(errors) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "missing" and tuple(first.get("loc", ())) == ("body",):
        return "Request body is required"
    return str(first.get("msg", "Invalid request")).replace("Value error, ", "", 1)


async def read_json_body(
    request: Request,
    current_user: dict = Depends(require_user)
) -> dict:
    """The raw JSON object sent by the client, read only after authentication."""
    if not await request.body():
        raise ValidationError("Request body is required")
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def parse_body(model, body: dict):
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError(first_error_message(exc.errors()))


# Authentication endpoints
auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    user_in: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency)
):
    try:
        if db.query(DBUser).filter(DBUser.email == user_in.email).first():
            raise ConflictError("User already exists")

        db_user = DBUser(
            email=user_in.email,
            password=hash_password(user_in.password, settings.BCRYPT_ROUNDS),
            name=user_in.name
        )
        db.add(db_user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("User already exists")
        db.refresh(db_user)

        user = UserOut.model_validate(db_user)
        token = generate_token({"userId": user.id, "email": user.email}, settings)
        record_activity(db, "REGISTER", "User", user.id, entity_id=user.id)
        logger.info("Registered user %s", user.id)

        return success_response(AuthOut(user=user, token=token), status.HTTP_201_CREATED)
    except TaskTrackerError:
        raise
    except Exception:
        logger.exception("Registration error")
        raise InternalError()


@auth_router.post("/login")
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency)
):
    try:
        db_user = db.query(DBUser).filter(DBUser.email == credentials.email).first()
        if not db_user or not verify_password(
            credentials.password, db_user.password, settings.BCRYPT_ROUNDS
        ):
            logger.warning("Failed login attempt")
            raise AuthenticationError(INVALID_CREDENTIALS)

        user = UserOut.model_validate(db_user)
        token = generate_token({"userId": user.id, "email": user.email}, settings)
        record_activity(db, "LOGIN", "User", user.id, entity_id=user.id)
        logger.info("User %s logged in", user.id)

        return success_response(AuthOut(user=user, token=token))
    except TaskTrackerError:
        raise
    except Exception:
        logger.exception("Login error")
        raise InternalError()


# Task endpoints
tasks_router = APIRouter(prefix="/tasks", tags=["tasks"])


@tasks_router.get("")
def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    current_user: dict = Depends(require_user),
    db: Session = Depends(get_db)
):
    try:
        query = db.query(DBTask).filter(DBTask.user_id == current_user["userId"])
        if status_filter:
            query = query.filter(DBTask.status == status_filter.value)
        tasks = query.order_by(
            DBTask.due_date.is_(None),
            DBTask.due_date.asc(),
            DBTask.created_at.desc()
        ).all()
        return success_response([TaskOut.model_validate(t) for t in tasks])
    except TaskTrackerError:
        raise
    except Exception:
        logger.exception("Get tasks error")
        raise InternalError()


@tasks_router.post("", status_code=status.HTTP_201_CREATED)
def create_task(
    body: dict = Depends(read_json_body),
    current_user: dict = Depends(require_user),
    db: Session = Depends(get_db)
):
    try:
        task_in = parse_body(TaskCreate, body)
        db_task = DBTask(
            title=task_in.title,
            description=task_in.description or None,
            status=(task_in.status or TaskStatus.TODO).value,
            due_date=task_in.due_date,
            user_id=current_user["userId"]
        )
        db.add(db_task)
        db.commit()
        db.refresh(db_task)

        task = TaskOut.model_validate(db_task)
        record_activity(
            db, "CREATE", "Task", current_user["userId"],
            entity_id=task.id,
            details={"title": task.title},
            task_id=task.id
        )
        return success_response(task, status.HTTP_201_CREATED)
    except TaskTrackerError:
        raise
    except Exception:
        logger.exception("Create task error")
        raise InternalError()


@tasks_router.get("/{task_id}")
def get_task(
    task_id: str,
    current_user: dict = Depends(require_user),
    db: Session = Depends(get_db)
):
    try:
        task = get_owned_task(db, task_id, current_user["userId"])
        return success_response(TaskOut.model_validate(task))
    except TaskTrackerError:
        raise
    except Exception:
        logger.exception("Get task error")
        raise InternalError()


@tasks_router.patch("/{task_id}")
def update_task(
    task_id: str,
    body: dict = Depends(read_json_body),
    current_user: dict = Depends(require_user),
    db: Session = Depends(get_db)
):
    try:
        task = get_owned_task(db, task_id, current_user["userId"])
        task_in = parse_body(TaskUpdate, body)

        for field, value in task_in.model_dump(exclude_unset=True).items():
            if isinstance(value, TaskStatus):
                value = value.value
            setattr(task, field, value)
        db.commit()
        db.refresh(task)

        updated = TaskOut.model_validate(task)
        record_activity(
            db, "UPDATE", "Task", current_user["userId"],
            entity_id=updated.id,
            details={"changes": body},
            task_id=updated.id
        )
        return success_response(updated)
    except TaskTrackerError:
        raise
    except Exception:
        logger.exception("Update task error")
        raise InternalError()


@tasks_router.delete("/{task_id}")
def delete_task(
    task_id: str,
    current_user: dict = Depends(require_user),
    db: Session = Depends(get_db)
):
    try:
        task = get_owned_task(db, task_id, current_user["userId"])

        # The entry is written first so it still names the task afterwards.
        record_activity(
            db, "DELETE", "Task", current_user["userId"],
            entity_id=task_id,
            details={"title": task.title},
            task_id=task_id
        )

        db.delete(task)
        db.commit()
        return success_response({"message": "Task deleted successfully"})
    except TaskTrackerError:
        raise
    except Exception:
        logger.exception("Delete task error")
        raise InternalError()


# Activity endpoints
activity_router = APIRouter(prefix="/activity", tags=["activity"])


@activity_router.get("")
def get_activity(
    limit: Optional[int] = Query(None, ge=1),
    current_user: dict = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dependency)
):
    try:
        logs = list_activity(
            db, current_user["userId"], limit or settings.ACTIVITY_DEFAULT_LIMIT
        )
        return success_response([ActivityLogOut.model_validate(log) for log in logs])
    except TaskTrackerError:
        raise
    except Exception:
        logger.exception("Get activity logs error")
        raise InternalError()


# Error handlers
async def task_tracker_error_handler(request: Request, exc: TaskTrackerError):
    return error_response(exc.message, exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(first_error_message(exc.errors()), status.HTTP_400_BAD_REQUEST)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(InternalError.default_message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    engine, SessionLocal = create_session_factory(settings.DATABASE_URL)
    # Create tables
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="Task Tracker")
    app.state.settings = settings
    app.state.engine = engine
    app.state.SessionLocal = SessionLocal

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskTrackerError, task_tracker_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(tasks_router)
    app.include_router(activity_router)
    return app
