"""SQLAlchemy models for the Project domain."""

from enum import Enum

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, JSON, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.utils.helpers import percent


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MemberRole(str, Enum):
    MANAGER = "manager"
    MEMBER = "member"


class Project(Base):
    __tablename__ = "projects"

    project_id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    status = Column(String(20), default=ProjectStatus.PLANNING.value)
    start_date = Column(DateTime)
    end_date = Column(DateTime)
    tags = Column(JSON, default=list)
    is_archived = Column(Boolean, default=False)

    allow_member_task_creation = Column(Boolean, default=True)
    allow_member_task_assignment = Column(Boolean, default=False)
    default_task_priority = Column(String(10), default="medium")  # low/medium/high

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    owner = relationship("User", foreign_keys=[owner_id])
    members = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMember.member_id",
    )
    tasks = relationship("ProjectTask", back_populates="project", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_project_owner", "owner_id"),
        Index("idx_project_status", "status"),
    )

    @property
    def owner_name(self):
        return self.owner.name if self.owner else None

    @property
    def settings(self):
        return {
            "allow_member_task_creation": bool(self.allow_member_task_creation),
            "allow_member_task_assignment": bool(self.allow_member_task_assignment),
            "default_task_priority": self.default_task_priority or "medium",
        }

    @property
    def member_count(self):
        # owner is not stored in members
        return len(self.members) + 1

    @property
    def task_count(self):
        return len(self.tasks)

    @property
    def completed_count(self):
        return sum(1 for t in self.tasks if t.status == "done")

    @property
    def progress(self):
        return percent(self.completed_count, self.task_count)


class ProjectMember(Base):
    __tablename__ = "project_member"

    member_id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.project_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    role = Column(String(20), default=MemberRole.MEMBER.value)  # manager/member
    joined_at = Column(DateTime, server_default=func.now())

    project = relationship("Project", back_populates="members")
    user = relationship("User", back_populates="project_memberships")

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member_user"),
        Index("idx_member_user", "user_id"),
    )

    @property
    def user_name(self):
        return self.user.name if self.user else None

    @property
    def user_email(self):
        return self.user.email if self.user else None

    @property
    def user_role(self):
        return self.user.role if self.user else None
