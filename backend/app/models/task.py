"""SQLAlchemy models for the Task domain."""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, Float, ForeignKey, Index, JSON,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class TaskStatus(str, Enum):
    TODO = "todo"
    INPROGRESS = "inprogress"
    REVIEW = "review"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectTask(Base):
    __tablename__ = "project_tasks"

    task_id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.project_id"), nullable=False)
    assigned_to = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    title = Column(String(100), nullable=False)
    description = Column(Text)
    status = Column(String(20), default=TaskStatus.TODO.value)      # todo/inprogress/review/done
    priority = Column(String(10), default=TaskPriority.MEDIUM.value)  # low/medium/high
    due_date = Column(DateTime)
    tags = Column(JSON, default=list)
    estimated_hours = Column(Float)
    actual_hours = Column(Float, default=0)
    is_archived = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
    completed_at = Column(DateTime)

    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User", foreign_keys=[assigned_to])
    creator = relationship("User", foreign_keys=[created_by])
    comments = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskComment.comment_id",
    )

    __table_args__ = (
        Index("idx_task_project_status", "project_id", "status"),
        Index("idx_task_assigned", "assigned_to"),
        Index("idx_task_due_date", "due_date"),
        Index("idx_task_created_by", "created_by"),
    )

    @property
    def is_overdue(self) -> bool:
        if not self.due_date:
            return False
        return datetime.utcnow() > self.due_date and self.status != TaskStatus.DONE

    @property
    def project_name(self):
        return self.project.name if self.project else None

    @property
    def assignee_name(self):
        return self.assignee.name if self.assignee else None

    @property
    def creator_name(self):
        return self.creator.name if self.creator else None


class TaskComment(Base):
    __tablename__ = "task_comments"

    comment_id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("project_tasks.task_id"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    text = Column(String(500), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    task = relationship("ProjectTask", back_populates="comments")
    author = relationship("User")

    @property
    def author_name(self):
        return self.author.name if self.author else None
