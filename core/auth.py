"""
Authentication and plan authorization dependencies.

Roles:
- admin: everything
- trainer: generates plans for their own clients, edits their own plans
- client: reads plans addressed to them

A plan is visible to its trainer, its client and admins; only its trainer and
admins may change it.
"""
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from core.database import get_db
from core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from core.security import decode_access_token
from models import User, WorkoutPlan

# Missing credentials are a 401 from get_current_user, not FastAPI's 403.
security = HTTPBearer(auto_error=False)


def _user_id_from_token(token: str) -> UUID:
    payload = decode_access_token(token)
    if not payload:
        raise UnauthorizedError("Invalid authentication credentials")
    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedError("Invalid token payload")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """The active user named by the bearer token."""
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    user_id = _user_id_from_token(credentials.credentials)
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError("User not found")
    if user.status != "active":
        raise ForbiddenError("Account is inactive")
    return user


def require_role(allowed_roles: list[str]):
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise ForbiddenError(f"Access denied. Required roles: {allowed_roles}")
        return current_user

    return role_checker


def require_trainer(
    current_user: User = Depends(require_role(["trainer", "admin"]))
) -> User:
    """Require a trainer (admins pass too)."""
    return current_user


def can_access_plan(plan: WorkoutPlan, user: User) -> bool:
    return user.is_admin or user.id in (plan.trainer_id, plan.client_id)


def can_edit_plan(plan: WorkoutPlan, user: User) -> bool:
    return user.is_admin or plan.trainer_id == user.id


def _load_plan(db: Session, plan_id: UUID) -> WorkoutPlan:
    plan = db.query(WorkoutPlan).filter(WorkoutPlan.id == plan_id).first()
    if not plan:
        raise NotFoundError("Workout plan", str(plan_id))
    return plan


def get_readable_plan(
    plan_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutPlan:
    plan = _load_plan(db, plan_id)
    if not can_access_plan(plan, current_user):
        raise ForbiddenError("You don't have permission to access this workout plan")
    return plan


def get_editable_plan(
    plan_id: UUID,
    current_user: User = Depends(require_trainer),
    db: Session = Depends(get_db),
) -> WorkoutPlan:
    plan = _load_plan(db, plan_id)
    if not can_edit_plan(plan, current_user):
        raise ForbiddenError("Only the plan's trainer can edit it")
    return plan
