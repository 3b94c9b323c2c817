"""Populate the database with a demo account and a few tasks."""
from datetime import date
from typing import Optional

from activity import record_activity
from auth import hash_password
from config import Settings, get_settings
from database import Base, create_session_factory
from logger import configure_logging, get_logger
from models import Task, TaskStatus, User

logger = get_logger("seed")

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo123"
DEMO_NAME = "Demo User"

DEMO_TASKS = [
    {
        "title": "Setup development environment",
        "description": "Install Python, PostgreSQL, and set up the project",
        "status": TaskStatus.DONE,
        "due_date": date(2026, 1, 15),
    },
    {
        "title": "Build authentication system",
        "description": "Implement JWT-based authentication with login and register",
        "status": TaskStatus.IN_PROGRESS,
        "due_date": date(2026, 1, 20),
    },
    {
        "title": "Create task dashboard",
        "description": "Build the main dashboard with task list and filters",
        "status": TaskStatus.TODO,
        "due_date": date(2026, 1, 25),
    },
]


def seed(settings: Optional[Settings] = None) -> str:
    """Create the demo user and tasks unless the demo user already exists.

    Returns the id of the demo user.
    """
    settings = settings or get_settings()
    engine, SessionLocal = create_session_factory(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == DEMO_EMAIL).first()
        if user is not None:
            logger.info("Demo user already present, skipping seed")
            return user.id

        user = User(
            email=DEMO_EMAIL,
            password=hash_password(DEMO_PASSWORD, settings.BCRYPT_ROUNDS),
            name=DEMO_NAME,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        record_activity(db, "REGISTER", "User", user.id, entity_id=user.id)

        for data in DEMO_TASKS:
            task = Task(
                title=data["title"],
                description=data["description"],
                status=data["status"].value,
                due_date=data["due_date"],
                user_id=user.id,
            )
            db.add(task)
            db.commit()
            db.refresh(task)
            record_activity(
                db, "CREATE", "Task", user.id,
                entity_id=task.id,
                details={"title": task.title},
                task_id=task.id,
            )

        logger.info("Seeded demo user %s with %d tasks", DEMO_EMAIL, len(DEMO_TASKS))
        return user.id
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    seed(settings)
