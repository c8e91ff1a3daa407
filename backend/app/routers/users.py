"""Users API router. Validates requests and delegates to the service layer."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_admin
from app.models.user import User
from app.schemas.common import ApiResponse, ListResponse, MessageResponse
from app.schemas.user import DashboardOut, UserDetailOut, UserOut, UserRoleUpdate, UserStatusUpdate
from app.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=ListResponse[UserOut])
def list_users(
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
):
    users = user_service.list_users(db)
    return {"count": len(users), "data": users}


@router.get("/{user_id}", response_model=ApiResponse[UserDetailOut])
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    detail = user_service.get_user(db, user_id, current_user)
    user = UserOut.model_validate(detail["user"]).model_dump()
    return {"data": {**user, "stats": detail["stats"]}}


@router.put("/{user_id}/role", response_model=ApiResponse[UserOut])
def update_user_role(
    user_id: int,
    data: UserRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = user_service.update_user_role(db, user_id, data.role, current_user)
    return {"message": "User role updated successfully", "data": user}


@router.put("/{user_id}/status", response_model=ApiResponse[UserOut])
def update_user_status(
    user_id: int,
    data: UserStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = user_service.update_user_status(db, user_id, data.is_active, current_user)
    state = "activated" if user.is_active else "deactivated"
    return {"message": f"User {state} successfully", "data": user}


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user_service.delete_user(db, user_id, current_user)
    return {"message": "User deleted successfully"}


@router.get("/{user_id}/dashboard", response_model=ApiResponse[DashboardOut])
def get_dashboard(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"data": user_service.get_dashboard(db, user_id, current_user)}
