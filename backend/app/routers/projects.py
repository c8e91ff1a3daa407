from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.schemas.common import ApiResponse, ListResponse, MessageResponse
from app.schemas.project import (
    ProjectCreate,
    ProjectDetailOut,
    ProjectListItem,
    ProjectMemberCreate,
    ProjectMemberOut,
    ProjectOut,
    ProjectUpdate,
)
from app.services import project_service
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", response_model=ListResponse[ProjectListItem])
def list_projects(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    projects = project_service.list_projects(db, current_user)
    return {"count": len(projects), "data": projects}


@router.post("", response_model=ApiResponse[ProjectOut], status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = project_service.create_project(db, data, current_user)
    return {"message": "Project created successfully", "data": project}


@router.get("/{project_id}", response_model=ApiResponse[ProjectDetailOut])
def get_project(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    project, stats = project_service.get_project_detail(db, project_id, current_user)
    return {"data": {"project": project, "stats": stats}}


@router.put("/{project_id}", response_model=ApiResponse[ProjectOut])
def update_project(
    project_id: int,
    data: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = project_service.update_project(db, project_id, data, current_user)
    return {"message": "Project updated successfully", "data": project}


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    project_service.delete_project(db, project_id, current_user)
    return {"message": "Project deleted successfully"}


@router.get("/{project_id}/members", response_model=ListResponse[ProjectMemberOut])
def get_members(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    members = project_service.get_members(db, project_id, current_user)
    return {"count": len(members), "data": members}


@router.post("/{project_id}/members", response_model=ApiResponse[List[ProjectMemberOut]])
def add_member(
    project_id: int,
    data: ProjectMemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    members = project_service.add_member(db, project_id, data, current_user)
    return {"message": "Member added successfully", "data": members}


@router.delete("/{project_id}/members/{user_id}", response_model=MessageResponse)
def remove_member(
    project_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project_service.remove_member(db, project_id, user_id, current_user)
    return {"message": "Member removed successfully"}
