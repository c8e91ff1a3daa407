"""SQLAlchemy model package initialization."""

from app.models.user import User, UserRole
from app.models.project import Project, ProjectMember, ProjectStatus, MemberRole
from app.models.task import ProjectTask, TaskComment, TaskStatus, TaskPriority

__all__ = [
    "User", "UserRole",
    "Project", "ProjectMember", "ProjectStatus", "MemberRole",
    "ProjectTask", "TaskComment", "TaskStatus", "TaskPriority",
]
