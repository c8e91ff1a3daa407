"""User service layer. Encapsulates account administration rules and data access flow."""

import logging

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.project import Project, ProjectMember
from app.models.task import ProjectTask, TaskComment, TaskStatus
from app.models.user import User, UserRole
from app.utils.helpers import percent
from app.utils.permissions import (
    can_change_role,
    can_change_status,
    can_delete_user,
    can_view_user,
    is_self,
)

logger = logging.getLogger(__name__)

RECENT_PROJECT_LIMIT = 5
UPCOMING_TASK_LIMIT = 10


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def list_users(db: Session):
    return db.query(User).order_by(User.created_at.desc(), User.user_id.desc()).all()


def get_user(db: Session, user_id: int, current_user: User) -> dict:
    if not can_view_user(current_user, user_id):
        raise HTTPException(status_code=403, detail="Not authorized to view this user")
    user = _get_user_or_404(db, user_id)

    owned_projects = db.query(Project).filter(Project.owner_id == user_id).count()
    member_projects = db.query(ProjectMember).filter(ProjectMember.user_id == user_id).count()
    assigned_tasks = db.query(ProjectTask).filter(ProjectTask.assigned_to == user_id).count()
    completed_tasks = (
        db.query(ProjectTask)
        .filter(ProjectTask.assigned_to == user_id, ProjectTask.status == TaskStatus.DONE.value)
        .count()
    )
    return {
        "user": user,
        "stats": {
            "owned_projects": owned_projects,
            "member_projects": member_projects,
            "total_projects": owned_projects + member_projects,
            "assigned_tasks": assigned_tasks,
            "completed_tasks": completed_tasks,
            "completion_rate": percent(completed_tasks, assigned_tasks),
        },
    }


def update_user_role(db: Session, user_id: int, role: UserRole, current_user: User) -> User:
    user = _get_user_or_404(db, user_id)
    if is_self(current_user, user_id):
        raise HTTPException(status_code=400, detail="Cannot change your own role")
    if not can_change_role(current_user, user_id):
        raise HTTPException(status_code=403, detail="Admin access required")

    previous = user.role
    user.role = role.value
    db.commit()
    db.refresh(user)
    logger.info("User %s changed role of user %s from %s to %s", current_user.user_id, user_id, previous, user.role)
    return user


def update_user_status(db: Session, user_id: int, is_active: bool, current_user: User) -> User:
    user = _get_user_or_404(db, user_id)
    if is_self(current_user, user_id) and not is_active:
        raise HTTPException(status_code=400, detail="Cannot deactivate your own account")
    if not can_change_status(current_user, user_id, is_active):
        raise HTTPException(status_code=403, detail="Admin access required")

    user.is_active = is_active
    db.commit()
    db.refresh(user)
    logger.info(
        "User %s %s user %s", current_user.user_id, "activated" if is_active else "deactivated", user_id,
    )
    return user


def delete_user(db: Session, user_id: int, current_user: User):
    user = _get_user_or_404(db, user_id)
    if is_self(current_user, user_id):
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    if not can_delete_user(current_user, user_id):
        raise HTTPException(status_code=403, detail="Admin access required")

    # Owned projects go first, taking their tasks with them.
    owned = db.query(Project).filter(Project.owner_id == user_id).all()
    for project in owned:
        db.delete(project)
    db.flush()

    db.query(ProjectTask).filter(ProjectTask.assigned_to == user_id).update(
        {"assigned_to": None}, synchronize_session=False
    )
    db.query(ProjectTask).filter(ProjectTask.created_by == user_id).update(
        {"created_by": None}, synchronize_session=False
    )
    db.query(TaskComment).filter(TaskComment.author_id == user_id).update(
        {"author_id": None}, synchronize_session=False
    )
    # roster rows are removed through User.project_memberships
    db.delete(user)
    db.commit()
    logger.info(
        "User %s deleted user %s and %d owned project(s)", current_user.user_id, user_id, len(owned),
    )


def get_dashboard(db: Session, user_id: int, current_user: User) -> dict:
    if not can_view_user(current_user, user_id):
        raise HTTPException(status_code=403, detail="Not authorized to view this dashboard")
    _get_user_or_404(db, user_id)

    project_filter = or_(
        Project.owner_id == user_id,
        Project.members.any(ProjectMember.user_id == user_id),
    )
    total_projects = db.query(Project).filter(project_filter).count()
    recent_projects = (
        db.query(Project)
        .filter(project_filter)
        .order_by(Project.created_at.desc(), Project.project_id.desc())
        .limit(RECENT_PROJECT_LIMIT)
        .all()
    )

    assigned = db.query(ProjectTask).filter(ProjectTask.assigned_to == user_id).all()
    completed = sum(1 for t in assigned if t.status == TaskStatus.DONE)
    overdue = sum(1 for t in assigned if t.is_overdue)
    upcoming = (
        db.query(ProjectTask)
        .filter(ProjectTask.assigned_to == user_id)
        .order_by(ProjectTask.due_date.is_(None), ProjectTask.due_date.asc(), ProjectTask.task_id.asc())
        .limit(UPCOMING_TASK_LIMIT)
        .all()
    )

    return {
        "stats": {
            "total_projects": total_projects,
            "total_tasks": len(assigned),
            "completed_tasks": completed,
            "overdue_tasks": overdue,
            "pending_tasks": len(assigned) - completed,
            "completion_rate": percent(completed, len(assigned)),
        },
        "recent_projects": recent_projects,
        "upcoming_tasks": upcoming,
    }
