"""
Workout Plans API Router

Endpoints:
- POST  /v1/workout-plans/generate        generate, store and mirror a plan (trainer/admin)
- GET   /v1/workout-plans                 plans visible to the caller
- GET   /v1/workout-plans/{id}            one plan
- PATCH /v1/workout-plans/{id}            edit metadata (content is immutable)
- GET   /v1/workout-plans/{id}/export/pdf
- GET   /v1/workout-plans/{id}/export/json
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.auth import get_current_user, get_editable_plan, get_readable_plan, require_trainer
from core.database import get_db
from core.exceptions import ForbiddenError, NotFoundError
from core.providers import get_generation_client, get_notion_mirror
from models import User, WorkoutPlan
from schemas import (
    GenerateWorkoutResponse,
    WorkoutGenerationRequest,
    WorkoutPlanResponse,
    WorkoutPlanSummary,
    WorkoutPlanUpdate,
)
from services.llm_providers import GenerationClient
from services.notion_mirror import NotionMirror
from services.plan_export import (
    ExportResult,
    export_plan_to_json,
    export_plan_to_pdf,
)
from services.workout_generation import generate_workout_plan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/workout-plans", tags=["workout-plans"])


@router.post(
    "/generate",
    response_model=GenerateWorkoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def generate_plan(
    request: WorkoutGenerationRequest,
    current_user: User = Depends(require_trainer),
    db: Session = Depends(get_db),
    generation_client: GenerationClient = Depends(get_generation_client),
    mirror: NotionMirror = Depends(get_notion_mirror),
):
    """
    Generate a workout plan with the LLM provider chain and store it.

    Errors:
    - 422 invalid request
    - 502 the model's reply could not be turned into a plan
    - 503 every configured provider failed
    """
    generated = generate_workout_plan(
        db,
        trainer=current_user,
        request=request,
        generation_client=generation_client,
        mirror=mirror,
    )
    return GenerateWorkoutResponse(
        success=True,
        plan=generated.content,
        workout_id=generated.plan.id,
        provider=generated.provider,
        mirrored=generated.mirrored,
    )


@router.get("", response_model=List[WorkoutPlanSummary])
def list_plans(
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Admins see every plan; others see plans they train or receive."""
    query = db.query(WorkoutPlan)
    if not current_user.is_admin:
        query = query.filter(
            or_(WorkoutPlan.trainer_id == current_user.id, WorkoutPlan.client_id == current_user.id)
        )
    if status_filter:
        query = query.filter(WorkoutPlan.status == status_filter)
    return query.order_by(WorkoutPlan.created_at.desc()).all()


@router.get("/{plan_id}", response_model=WorkoutPlanResponse)
def get_plan(plan: WorkoutPlan = Depends(get_readable_plan)):
    return plan


@router.patch("/{plan_id}", response_model=WorkoutPlanResponse)
def update_plan(
    update: WorkoutPlanUpdate,
    plan: WorkoutPlan = Depends(get_editable_plan),
    current_user: User = Depends(require_trainer),
    db: Session = Depends(get_db),
):
    """Update title, description, status or dates. Only the plan's trainer or an admin."""
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(plan, field, value)
    db.commit()
    db.refresh(plan)

    logger.info(f"Workout plan {plan.id} updated by {current_user.id}")
    return plan


def _download(plan_id: UUID, result: ExportResult) -> Response:
    if not result.success:
        if result.status_code == 404:
            raise NotFoundError("Workout plan", str(plan_id))
        raise ForbiddenError(result.error)

    return Response(
        content=result.content,
        media_type=result.content_type,
        headers={"Content-Disposition": f"attachment; filename={result.filename}"},
    )


@router.get("/{plan_id}/export/pdf")
def export_pdf(
    plan_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Download a plan as a PDF handout."""
    return _download(plan_id, export_plan_to_pdf(plan_id, current_user, db))


@router.get("/{plan_id}/export/json")
def export_json(
    plan_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Download a plan as JSON."""
    return _download(plan_id, export_plan_to_json(plan_id, current_user, db))
