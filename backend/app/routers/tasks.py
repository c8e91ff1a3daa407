from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.models.task import TaskPriority, TaskStatus
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.task import (
    ProjectTaskCreate,
    ProjectTaskOut,
    ProjectTaskUpdate,
    TaskCommentCreate,
    TaskCommentOut,
    TaskListResponse,
    TaskStatusUpdate,
)
from app.services import task_service
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=TaskListResponse)
def list_tasks(
    project_id: Optional[int] = None,
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    assigned_to: Optional[int] = None,
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tasks, stats = task_service.list_tasks(
        db,
        current_user,
        project_id=project_id,
        status=task_status.value if task_status else None,
        assigned_to=assigned_to,
        priority=priority.value if priority else None,
        search=search,
    )
    return {"count": len(tasks), "stats": stats, "data": tasks}


@router.post("", response_model=ApiResponse[ProjectTaskOut], status_code=status.HTTP_201_CREATED)
def create_task(
    data: ProjectTaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = task_service.create_task(db, data, current_user)
    return {"message": "Task created successfully", "data": task}


@router.get("/{task_id}", response_model=ApiResponse[ProjectTaskOut])
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"data": task_service.get_task(db, task_id, current_user)}


@router.put("/{task_id}", response_model=ApiResponse[ProjectTaskOut])
def update_task(
    task_id: int,
    data: ProjectTaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = task_service.update_task(db, task_id, data, current_user)
    return {"message": "Task updated successfully", "data": task}


@router.patch("/{task_id}/status", response_model=ApiResponse[ProjectTaskOut])
def update_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = task_service.update_task_status(db, task_id, data.status, current_user)
    return {"message": "Task status updated successfully", "data": task}


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    task_service.delete_task(db, task_id, current_user)
    return {"message": "Task deleted successfully"}


@router.post("/{task_id}/comments", response_model=ApiResponse[List[TaskCommentOut]])
def add_comment(
    task_id: int,
    data: TaskCommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comments = task_service.add_comment(db, task_id, data, current_user)
    return {"message": "Comment added successfully", "data": comments}
