"""
Workout Plan Persistence

Resolves who owns a plan, stores the normalized plan and mirrors its summary
to Notion.

Order matters:
0. Owners (workspace, client) are resolved and checked before any LLM call.
1. Relational write, committed. This is the source of truth; if it fails
   the request fails.
2. Notion mirror, best effort. A failed mirror is logged and dropped; the
   row stays without a page id. No rollback, no retry.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from models import User, Workspace, WorkoutPlan
from schemas import WorkoutGenerationRequest
from services.notion_mirror import MirrorResult, NotionMirror, build_mirror_summary, format_plan_date

logger = logging.getLogger(__name__)

# How long a generated plan runs before it needs replacing.
PLAN_LENGTH_DAYS = {
    "personal": 7,
    "group": 30,
}


@dataclass
class PlanOwners:
    workspace_id: UUID
    client_id: UUID


@dataclass
class PersistedPlan:
    plan: WorkoutPlan
    mirror: MirrorResult


def plan_title(content: Dict[str, Any], request: WorkoutGenerationRequest) -> str:
    name = (content.get("sessionDetails") or {}).get("name")
    if name:
        return name
    session_label = "Group" if request.session_type == "group" else "Personal"
    level = (request.fitness_level or "Custom").strip().title()
    return f"{level} {session_label} Workout"


def plan_description(content: Dict[str, Any], today: date) -> str:
    overview = content.get("introduction", {}).get("overview")
    return overview or f"Generated on {format_plan_date(today)}"


def resolve_workspace_id(
    db: Session,
    trainer: User,
    requested: Optional[UUID],
) -> UUID:
    """The requested workspace if the trainer owns it, else the trainer's own."""
    if requested:
        workspace = db.query(Workspace).filter(Workspace.id == requested).first()
        if not workspace:
            raise NotFoundError("Workspace", str(requested))
        if workspace.trainer_id != trainer.id and not trainer.is_admin:
            raise ForbiddenError("Workspace belongs to another trainer")
        return workspace.id

    workspace = db.query(Workspace).filter(Workspace.trainer_id == trainer.id).first()
    if not workspace:
        raise ValidationError("Trainer has no workspace; pass workspaceId")
    return workspace.id


def resolve_client_id(
    db: Session,
    trainer: User,
    requested: Optional[UUID],
) -> UUID:
    """
    The requested client if it is one of the trainer's clients.

    Without an explicit client the trainer is recorded as the client.
    Admins may attach a plan to any existing user.
    """
    if not requested or requested == trainer.id:
        return trainer.id

    client = db.query(User).filter(User.id == requested).first()
    if not client:
        raise NotFoundError("Client", str(requested))
    if client.trainer_id != trainer.id and not trainer.is_admin:
        raise ForbiddenError("Client belongs to another trainer")
    return client.id


def resolve_plan_owners(
    db: Session,
    trainer: User,
    request: WorkoutGenerationRequest,
) -> PlanOwners:
    return PlanOwners(
        workspace_id=resolve_workspace_id(db, trainer, request.workspace_id),
        client_id=resolve_client_id(db, trainer, request.client_id),
    )


def persist_generated_plan(
    db: Session,
    mirror: NotionMirror,
    *,
    trainer: User,
    owners: PlanOwners,
    request: WorkoutGenerationRequest,
    content: Dict[str, Any],
    provider: str,
    default_minutes: int,
    today: Optional[date] = None,
) -> PersistedPlan:
    today = today or date.today()

    plan = WorkoutPlan(
        workspace_id=owners.workspace_id,
        trainer_id=trainer.id,
        client_id=owners.client_id,
        title=plan_title(content, request),
        description=plan_description(content, today),
        content=content,
        start_date=today,
        end_date=today + timedelta(days=PLAN_LENGTH_DAYS[request.session_type]),
        status="active",
        session_type=request.session_type,
        generation_provider=provider,
    )
    db.add(plan)
    db.commit()
    db.refresh(plan)

    logger.info(
        f"Workout plan {plan.id} saved for trainer {trainer.id}",
        extra={"extra_fields": {"plan_id": str(plan.id), "provider": provider}},
    )

    summary = build_mirror_summary(
        content,
        title=plan.title,
        session_type=request.session_type,
        fitness_level=request.fitness_level,
        plan_date=today,
        default_minutes=default_minutes,
    )
    result = mirror.mirror_plan(summary, trainer_id=str(trainer.id), plan_date=today)

    if result.ok:
        plan.notion_page_id = result.page_id
        try:
            db.commit()
        except Exception as e:
            db.rollback()
            logger.warning(f"Could not record Notion page {result.page_id} on plan {plan.id}: {e}")
    elif mirror.enabled:
        logger.warning(
            f"Notion mirror failed for plan {plan.id}: {result.error}",
            extra={"extra_fields": {"plan_id": str(plan.id)}},
        )

    return PersistedPlan(plan=plan, mirror=result)
