"""Project service layer. Encapsulates project and membership rules and data access."""

import logging
from typing import Iterable, List, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload
from fastapi import HTTPException
from app.models.project import Project, ProjectMember, ProjectStatus
from app.models.task import ProjectTask, TaskStatus
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectMemberCreate, ProjectUpdate
from app.utils.helpers import clean_tags
from app.utils.permissions import (
    can_manage_members,
    can_manage_project,
    can_view_project,
    is_admin,
    is_owner_removal,
)

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ("allow_member_task_creation", "allow_member_task_assignment", "default_task_priority")


def get_project_or_404(db: Session, project_id: int) -> Project:
    project = (
        db.query(Project)
        .options(selectinload(Project.members))
        .filter(Project.project_id == project_id)
        .first()
    )
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def get_viewable_project(db: Session, project_id: int, current_user: User) -> Project:
    project = get_project_or_404(db, project_id)
    if not can_view_project(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to access this project")
    return project


def summarize_tasks(tasks: Iterable[ProjectTask]) -> dict:
    counts = {s.value: 0 for s in TaskStatus}
    total = 0
    overdue = 0
    for task in tasks:
        total += 1
        if task.status in counts:
            counts[task.status] += 1
        if task.is_overdue:
            overdue += 1
    return {"total": total, **counts, "overdue": overdue}


def list_projects(db: Session, current_user: User) -> List[Project]:
    q = db.query(Project).options(selectinload(Project.members))
    if not is_admin(current_user):
        q = q.filter(
            or_(
                Project.owner_id == current_user.user_id,
                Project.members.any(ProjectMember.user_id == current_user.user_id),
            )
        )
    return q.order_by(Project.created_at.desc(), Project.project_id.desc()).all()


def get_project_detail(db: Session, project_id: int, current_user: User) -> Tuple[Project, dict]:
    project = get_viewable_project(db, project_id, current_user)
    summary = summarize_tasks(project.tasks)
    stats = {"total_tasks": summary.pop("total"), **summary}
    return project, stats


def create_project(db: Session, data: ProjectCreate, current_user: User) -> Project:
    payload = data.model_dump(exclude={"settings"})
    payload["tags"] = clean_tags(payload.get("tags"))
    project = Project(
        owner_id=current_user.user_id,
        status=ProjectStatus.ACTIVE.value,
        **payload,
    )
    if data.settings is not None:
        for key, value in data.settings.model_dump(mode="json").items():
            setattr(project, key, value)
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("User %s created project %s", current_user.user_id, project.project_id)
    return project


def update_project(db: Session, project_id: int, data: ProjectUpdate, current_user: User) -> Project:
    project = get_project_or_404(db, project_id)
    if not can_manage_project(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to update this project")

    # owner is fixed after creation; ProjectUpdate carries no owner field
    payload = data.model_dump(exclude_unset=True, exclude={"settings"})
    for key in ("name", "status", "is_archived"):
        if key in payload and payload[key] is None:
            payload.pop(key)
    if "status" in payload:
        payload["status"] = ProjectStatus(payload["status"]).value
    if "tags" in payload:
        payload["tags"] = clean_tags(payload["tags"])

    for key, value in payload.items():
        setattr(project, key, value)

    if data.settings is not None:
        for key, value in data.settings.model_dump(mode="json", exclude_none=True).items():
            if key in SETTINGS_FIELDS:
                setattr(project, key, value)

    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project_id: int, current_user: User):
    project = get_project_or_404(db, project_id)
    if not can_manage_project(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to delete this project")
    task_count = db.query(ProjectTask).filter(ProjectTask.project_id == project_id).count()
    # tasks and roster rows go with the project through the ORM cascade
    db.delete(project)
    db.commit()
    logger.info(
        "User %s deleted project %s with %d task(s)", current_user.user_id, project_id, task_count,
    )


def get_members(db: Session, project_id: int, current_user: User) -> List[ProjectMember]:
    project = get_viewable_project(db, project_id, current_user)
    return list(project.members)


def add_member(db: Session, project_id: int, data: ProjectMemberCreate, current_user: User) -> List[ProjectMember]:
    project = get_project_or_404(db, project_id)
    if not can_manage_members(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to add members")

    user = db.query(User).filter(User.user_id == data.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    already_member = project.owner_id == data.user_id or any(
        m.user_id == data.user_id for m in project.members
    )
    if already_member:
        raise HTTPException(status_code=400, detail="User is already a project member")

    project.members.append(ProjectMember(user_id=data.user_id, role=data.role.value))
    db.commit()
    db.refresh(project)
    return list(project.members)


def remove_member(db: Session, project_id: int, user_id: int, current_user: User):
    project = get_project_or_404(db, project_id)
    if not can_manage_members(project, current_user):
        raise HTTPException(status_code=403, detail="Not authorized to remove members")
    if is_owner_removal(project, user_id):
        raise HTTPException(status_code=400, detail="Cannot remove project owner")

    member = next((m for m in project.members if m.user_id == user_id), None)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")

    # Tasks assigned to the departing member inside this project become unassigned.
    unassigned = (
        db.query(ProjectTask)
        .filter(ProjectTask.project_id == project_id, ProjectTask.assigned_to == user_id)
        .update({"assigned_to": None}, synchronize_session=False)
    )
    project.members.remove(member)
    db.commit()
    logger.info(
        "User %s removed member %s from project %s (%d task(s) unassigned)",
        current_user.user_id, user_id, project_id, unassigned,
    )
