"""Task service layer. Encapsulates task rules and data access flow."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session
from fastapi import HTTPException
from app.models.project import Project, ProjectMember
from app.models.task import ProjectTask, TaskComment, TaskStatus
from app.models.user import User
from app.schemas.task import ProjectTaskCreate, ProjectTaskUpdate, TaskCommentCreate
from app.services.project_service import get_project_or_404, get_viewable_project, summarize_tasks
from app.utils.helpers import clean_tags
from app.utils.permissions import (
    can_assign_task,
    can_change_task_status,
    can_comment_task,
    can_create_task,
    can_delete_task,
    can_edit_task,
    can_view_project,
    is_admin,
    is_valid_assignee,
)

logger = logging.getLogger(__name__)

PLAIN_FIELDS = ("title", "description", "priority", "due_date", "tags", "estimated_hours", "actual_hours")


def _get_task_or_404(db: Session, task_id: int) -> ProjectTask:
    task = db.query(ProjectTask).filter(ProjectTask.task_id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _get_task_with_project(db: Session, task_id: int) -> Tuple[ProjectTask, Project]:
    task = _get_task_or_404(db, task_id)
    project = get_project_or_404(db, task.project_id)
    return task, project


def _validate_assignee(project: Project, assigned_to: Optional[int]):
    if not is_valid_assignee(project, assigned_to):
        raise HTTPException(status_code=400, detail="Assignee must be a project member")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_status(task: ProjectTask, status: str):
    if status == TaskStatus.DONE and task.status != TaskStatus.DONE:
        task.completed_at = datetime.utcnow()
    elif status != TaskStatus.DONE:
        task.completed_at = None
    task.status = status


def list_tasks(
    db: Session,
    current_user: User,
    project_id: Optional[int] = None,
    status: Optional[str] = None,
    assigned_to: Optional[int] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[List[ProjectTask], dict]:
    q = db.query(ProjectTask)
    if project_id is not None:
        get_viewable_project(db, project_id, current_user)
        q = q.filter(ProjectTask.project_id == project_id)
    elif not is_admin(current_user):
        accessible = db.query(Project.project_id).filter(
            or_(
                Project.owner_id == current_user.user_id,
                Project.members.any(ProjectMember.user_id == current_user.user_id),
            )
        )
        q = q.filter(ProjectTask.project_id.in_(accessible))

    if status:
        q = q.filter(ProjectTask.status == status)
    if assigned_to is not None:
        q = q.filter(ProjectTask.assigned_to == assigned_to)
    if priority:
        q = q.filter(ProjectTask.priority == priority)
    if search:
        pattern = f"%{_escape_like(search.strip())}%"
        q = q.filter(
            or_(
                ProjectTask.title.ilike(pattern, escape="\\"),
                ProjectTask.description.ilike(pattern, escape="\\"),
                cast(ProjectTask.tags, String).ilike(pattern, escape="\\"),
            )
        )

    tasks = q.order_by(ProjectTask.created_at.desc(), ProjectTask.task_id.desc()).all()
    return tasks, summarize_tasks(tasks)


def get_task(db: Session, task_id: int, current_user: User) -> ProjectTask:
    task, project = _get_task_with_project(db, task_id)
    if not can_view_project(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to access this task")
    return task


def create_task(db: Session, data: ProjectTaskCreate, current_user: User) -> ProjectTask:
    project = get_project_or_404(db, data.project_id)
    if not can_create_task(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to create tasks in this project")
    if data.assigned_to is not None:
        _validate_assignee(project, data.assigned_to)
        if not can_assign_task(project, current_user):
            raise HTTPException(status_code=403, detail="Not authorized to assign tasks")

    payload = data.model_dump(exclude={"project_id", "priority"})
    payload["tags"] = clean_tags(payload.get("tags"))
    priority = data.priority.value if data.priority else (project.default_task_priority or "medium")
    task = ProjectTask(
        project=project,
        created_by=current_user.user_id,
        status=TaskStatus.TODO.value,
        priority=priority,
        **payload,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def update_task(db: Session, task_id: int, data: ProjectTaskUpdate, current_user: User) -> ProjectTask:
    task, project = _get_task_with_project(db, task_id)
    if not can_edit_task(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to update this task")

    fields = data.model_fields_set
    if "status" in fields and data.status is not None:
        if not can_change_task_status(project, task, current_user):
            raise HTTPException(status_code=403, detail="Not authorized to change task status")
    if "assigned_to" in fields:
        _validate_assignee(project, data.assigned_to)
        if not can_assign_task(project, current_user):
            raise HTTPException(status_code=403, detail="Not authorized to change assignee")

    # every check has passed; apply the update
    updates = data.model_dump(include=set(PLAIN_FIELDS) & fields, mode="python")
    for key in ("title", "priority", "tags", "actual_hours"):
        if key in updates and updates[key] is None:
            updates.pop(key)
    if "priority" in updates:
        updates["priority"] = updates["priority"].value
    if "tags" in updates:
        updates["tags"] = clean_tags(updates["tags"])
    for key, value in updates.items():
        setattr(task, key, value)

    if "assigned_to" in fields:
        task.assigned_to = data.assigned_to
    if "status" in fields and data.status is not None:
        _apply_status(task, data.status.value)

    db.commit()
    db.refresh(task)
    return task


def update_task_status(db: Session, task_id: int, status: TaskStatus, current_user: User) -> ProjectTask:
    task, project = _get_task_with_project(db, task_id)
    if not can_change_task_status(project, task, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to update task status")
    _apply_status(task, status.value)
    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task_id: int, current_user: User):
    task, project = _get_task_with_project(db, task_id)
    if not can_delete_task(project, task, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to delete this task")
    db.delete(task)
    db.commit()
    logger.info("User %s deleted task %s from project %s", current_user.user_id, task_id, project.project_id)


def add_comment(db: Session, task_id: int, data: TaskCommentCreate, current_user: User) -> List[TaskComment]:
    task, project = _get_task_with_project(db, task_id)
    if not can_comment_task(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to comment on this task")
    task.comments.append(TaskComment(author_id=current_user.user_id, text=data.text))
    db.commit()
    db.refresh(task)
    return list(task.comments)
