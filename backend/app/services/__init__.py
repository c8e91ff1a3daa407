"""Service layer package initialization."""

from app.services import (
    auth_service,
    project_service,
    task_service,
    user_service,
)
