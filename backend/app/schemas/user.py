"""Pydantic schemas for User request/response contracts."""

from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from app.config import settings
from app.models.user import UserRole


class UserBase(BaseModel):
    name: str
    email: EmailStr


class RegisterRequest(UserBase):
    name: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None


class UserOut(UserBase):
    user_id: int
    role: UserRole
    avatar: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class UserRoleUpdate(BaseModel):
    role: UserRole


class UserStatusUpdate(BaseModel):
    is_active: bool


class UserStats(BaseModel):
    owned_projects: int
    member_projects: int
    total_projects: int
    assigned_tasks: int
    completed_tasks: int
    completion_rate: int


class UserDetailOut(UserOut):
    stats: UserStats


class DashboardStats(BaseModel):
    total_projects: int
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    pending_tasks: int
    completion_rate: int


class DashboardProject(BaseModel):
    project_id: int
    name: str
    description: Optional[str] = None
    status: str
    owner_id: int
    owner_name: Optional[str] = None

    model_config = {"from_attributes": True}


class DashboardTask(BaseModel):
    task_id: int
    project_id: int
    project_name: Optional[str] = None
    title: str
    status: str
    priority: str
    due_date: Optional[datetime] = None
    is_overdue: bool

    model_config = {"from_attributes": True}


class DashboardOut(BaseModel):
    stats: DashboardStats
    recent_projects: List[DashboardProject]
    upcoming_tasks: List[DashboardTask]
