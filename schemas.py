from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from models import TaskStatus

MIN_PASSWORD_LENGTH = 6


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Auth
class RegisterRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def check_required(self):
        if not self.email or not self.password or not self.name:
            raise ValueError("Email, password, and name are required")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return self


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode="after")
    def check_required(self):
        if not self.email or not self.password:
            raise ValueError("Email and password are required")
        return self


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    created_at: datetime


class AuthOut(CamelModel):
    user: UserOut
    token: str


# Tasks
class TaskCreate(CamelModel):
    title: Optional[str] = Field(default=None, validate_default=True)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_validator(cls, v):
        if v is None or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class TaskUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_validator(cls, v):
        if v is None or not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

    @field_validator("status")
    @classmethod
    def status_validator(cls, v):
        if v is None:
            raise ValueError("Status cannot be null")
        return v


class TaskOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    due_date: Optional[date] = None
    user_id: str
    created_at: datetime
    updated_at: datetime


# Activity
class TaskTitle(CamelModel):
    title: str


class ActivityLogOut(CamelModel):
    id: str
    action: str
    entity: str
    entity_id: Optional[str] = None
    details: Optional[str] = None
    user_id: str
    task_id: Optional[str] = None
    created_at: datetime
    task: Optional[TaskTitle] = None
