"""Pydantic schemas for Task request/response contracts."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.models.task import TaskPriority, TaskStatus
from app.schemas.common import ListResponse
from app.utils.helpers import strip_text, to_naive_utc


class ProjectTaskBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    estimated_hours: Optional[float] = Field(None, ge=0)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return strip_text(value)

    @field_validator("due_date")
    @classmethod
    def _naive_due_date(cls, value):
        return to_naive_utc(value)


class ProjectTaskCreate(ProjectTaskBase):
    project_id: int
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[int] = None


class ProjectTaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    tags: Optional[List[str]] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    status: Optional[TaskStatus] = None
    assigned_to: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return strip_text(value)

    @field_validator("due_date")
    @classmethod
    def _naive_due_date(cls, value):
        return to_naive_utc(value)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskCommentCreate(BaseModel):
    text: str = Field(..., max_length=500)

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("Comment text is required")
        return text


class TaskCommentOut(BaseModel):
    comment_id: int
    task_id: int
    author_id: Optional[int]
    author_name: Optional[str] = None
    text: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ProjectTaskOut(BaseModel):
    task_id: int
    project_id: int
    project_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    is_archived: bool
    assigned_to: Optional[int] = None
    assignee_name: Optional[str] = None
    created_by: Optional[int] = None
    creator_name: Optional[str] = None
    is_overdue: bool
    comments: List[TaskCommentOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime]
    completed_at: Optional[datetime]

    model_config = {"from_attributes": True}

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_default(cls, value):
        return value or []


class TaskStats(BaseModel):
    total: int
    todo: int
    inprogress: int
    review: int
    done: int
    overdue: int


class TaskListResponse(ListResponse[ProjectTaskOut]):
    stats: TaskStats
