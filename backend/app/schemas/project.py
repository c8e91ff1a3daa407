"""Pydantic schemas for Project request/response contracts."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.models.project import MemberRole, ProjectStatus
from app.models.task import TaskPriority
from app.utils.helpers import strip_text, to_naive_utc


class ProjectSettings(BaseModel):
    allow_member_task_creation: bool = True
    allow_member_task_assignment: bool = False
    default_task_priority: TaskPriority = TaskPriority.MEDIUM


class ProjectSettingsUpdate(BaseModel):
    allow_member_task_creation: Optional[bool] = None
    allow_member_task_assignment: Optional[bool] = None
    default_task_priority: Optional[TaskPriority] = None


class ProjectBase(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return strip_text(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_dates(cls, value):
        return to_naive_utc(value)


class ProjectCreate(ProjectBase):
    settings: Optional[ProjectSettings] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[ProjectStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    is_archived: Optional[bool] = None
    settings: Optional[ProjectSettingsUpdate] = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return strip_text(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_dates(cls, value):
        return to_naive_utc(value)


class ProjectMemberCreate(BaseModel):
    user_id: int
    role: MemberRole = MemberRole.MEMBER


class ProjectMemberOut(BaseModel):
    member_id: int
    project_id: int
    user_id: int
    role: MemberRole
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_role: Optional[str] = None
    joined_at: datetime

    model_config = {"from_attributes": True}


class ProjectOut(ProjectBase):
    project_id: int
    owner_id: int
    owner_name: Optional[str] = None
    status: ProjectStatus
    is_archived: bool
    settings: ProjectSettings
    members: List[ProjectMemberOut] = Field(default_factory=list)
    member_count: int
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_default(cls, value):
        return value or []


class ProjectListItem(ProjectOut):
    task_count: int
    completed_count: int
    progress: int


class ProjectStats(BaseModel):
    total_tasks: int
    todo: int
    inprogress: int
    review: int
    done: int
    overdue: int


class ProjectDetailOut(BaseModel):
    project: ProjectOut
    stats: ProjectStats
