"""Authorization rules for projects, tasks and user administration.

Every predicate here is a pure function of an explicit actor and entities
that the caller has already loaded. Nothing in this module touches the
database session: services fetch first (raising 404 for missing targets)
and only then ask these functions for a decision.

Rule precedence, first match wins:

1. global admin may do everything
2. project view: owner, any member
3. project update/delete: owner
4. membership add/remove: owner; the owner itself can never be removed
5. task create: owner, manager member, or any member when the project
   allows member task creation
6. task assign: owner, manager member, or any member when the project
   allows member task assignment; the assignee must be owner or member
7. task status change: assignee, owner, manager member
8. task field update: any project viewer
9. task delete: owner, task creator
10. comment add: any project viewer
11. user management: admin only; users may view themselves
12. nobody may change their own role, deactivate or delete themselves
"""

from enum import Enum
from typing import Optional

from app.models.project import MemberRole, Project
from app.models.task import ProjectTask
from app.models.user import User, UserRole


class ProjectRelation(str, Enum):
    NONE = "none"
    OWNER = "owner"
    MANAGER = "manager"
    MEMBER = "member"


MEMBER_RELATIONS = (ProjectRelation.MANAGER, ProjectRelation.MEMBER)
PROJECT_LEAD_RELATIONS = (ProjectRelation.OWNER, ProjectRelation.MANAGER)


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def is_self(actor: User, user_id: int) -> bool:
    return actor.user_id == user_id


def resolve_relation(project: Project, user_id: Optional[int]) -> ProjectRelation:
    """Resolve how ``user_id`` relates to ``project``.

    The owner is matched before the roster is scanned, so an owner is never
    reported as a plain member even if a stale roster row exists.
    """
    if user_id is None:
        return ProjectRelation.NONE
    if project.owner_id == user_id:
        return ProjectRelation.OWNER
    for member in project.members:
        if member.user_id == user_id:
            if member.role == MemberRole.MANAGER:
                return ProjectRelation.MANAGER
            return ProjectRelation.MEMBER
    return ProjectRelation.NONE


def is_project_participant(project: Project, user_id: Optional[int]) -> bool:
    return resolve_relation(project, user_id) != ProjectRelation.NONE


def can_view_project(project: Project, user: User) -> bool:
    if is_admin(user):
        return True
    return is_project_participant(project, user.user_id)


def can_manage_project(project: Project, user: User) -> bool:
    if is_admin(user):
        return True
    return resolve_relation(project, user.user_id) == ProjectRelation.OWNER


def can_manage_members(project: Project, user: User) -> bool:
    return can_manage_project(project, user)


def is_owner_removal(project: Project, member_user_id: int) -> bool:
    return project.owner_id == member_user_id


def can_remove_member(project: Project, user: User, member_user_id: int) -> bool:
    if is_owner_removal(project, member_user_id):
        return False
    return can_manage_members(project, user)


def can_create_task(project: Project, user: User) -> bool:
    if is_admin(user):
        return True
    relation = resolve_relation(project, user.user_id)
    if relation in PROJECT_LEAD_RELATIONS:
        return True
    return relation == ProjectRelation.MEMBER and bool(project.allow_member_task_creation)


def can_assign_task(project: Project, user: User) -> bool:
    if is_admin(user):
        return True
    relation = resolve_relation(project, user.user_id)
    if relation in PROJECT_LEAD_RELATIONS:
        return True
    return relation == ProjectRelation.MEMBER and bool(project.allow_member_task_assignment)


def is_valid_assignee(project: Project, user_id: Optional[int]) -> bool:
    # unassigning is always a valid target
    if user_id is None:
        return True
    return is_project_participant(project, user_id)


def can_change_task_status(project: Project, task: ProjectTask, user: User) -> bool:
    if is_admin(user):
        return True
    if task.assigned_to is not None and task.assigned_to == user.user_id:
        return True
    return resolve_relation(project, user.user_id) in PROJECT_LEAD_RELATIONS


def can_edit_task(project: Project, user: User) -> bool:
    return can_view_project(project, user)


def can_delete_task(project: Project, task: ProjectTask, user: User) -> bool:
    if is_admin(user):
        return True
    if task.created_by is not None and task.created_by == user.user_id:
        return True
    return resolve_relation(project, user.user_id) == ProjectRelation.OWNER


def can_comment_task(project: Project, user: User) -> bool:
    return can_view_project(project, user)


def can_manage_users(user: User) -> bool:
    return is_admin(user)


def can_view_user(actor: User, user_id: int) -> bool:
    return is_admin(actor) or is_self(actor, user_id)


def can_change_role(actor: User, target_user_id: int) -> bool:
    return is_admin(actor) and not is_self(actor, target_user_id)


def can_change_status(actor: User, target_user_id: int, is_active: bool) -> bool:
    if not is_admin(actor):
        return False
    return is_active or not is_self(actor, target_user_id)


def can_delete_user(actor: User, target_user_id: int) -> bool:
    return is_admin(actor) and not is_self(actor, target_user_id)
