"""
Workout Plan Export Service

Exports workout plans for download and sharing.

Supported formats:
- PDF (printable handout for the client)
- JSON (full plan document, programmatic access / backup)

Both go through the same gate: the plan must exist and the requester must be
an admin, the plan's trainer, or the plan's client. Nothing is rendered for a
denied request.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from core.auth import can_access_plan
from models import User, Workspace, WorkoutPlan
from services.plan_pdf import render_plan_pdf

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Result of a plan export operation."""
    success: bool
    format: str
    filename: str
    content: Union[bytes, str]
    content_type: str
    status_code: int = 200
    error: Optional[str] = None


def _denied(fmt: str, content_type: str, status_code: int, error: str) -> ExportResult:
    return ExportResult(
        success=False,
        format=fmt,
        filename="",
        content=b"" if fmt == "pdf" else "",
        content_type=content_type,
        status_code=status_code,
        error=error,
    )


def _load_plan(
    plan_id: UUID,
    user: User,
    db: Session,
    fmt: str,
    content_type: str,
):
    """Return (plan, None) when allowed, else (None, failed ExportResult)."""
    plan = db.query(WorkoutPlan).filter(WorkoutPlan.id == plan_id).first()
    if not plan:
        return None, _denied(fmt, content_type, 404, "Workout plan not found")

    if not can_access_plan(plan, user):
        logger.warning(
            f"User {user.id} denied {fmt} export of plan {plan_id}",
            extra={"extra_fields": {"plan_id": str(plan_id), "user_id": str(user.id)}},
        )
        return None, _denied(fmt, content_type, 403, "You don't have permission to access this workout plan")

    return plan, None


def export_plan_to_pdf(plan_id: UUID, user: User, db: Session) -> ExportResult:
    """
    Export a workout plan as a PDF handout.

    The header uses the workspace logo when one is set; the last page is
    attributed to the plan's trainer.
    """
    plan, failure = _load_plan(plan_id, user, db, "pdf", "application/pdf")
    if failure:
        return failure

    trainer = db.query(User).filter(User.id == plan.trainer_id).first()
    trainer_name = trainer.display_name if trainer else "Unknown trainer"

    logo_path = None
    if plan.workspace_id:
        workspace = db.query(Workspace).filter(Workspace.id == plan.workspace_id).first()
        logo_path = workspace.logo if workspace else None

    content = render_plan_pdf(plan, trainer_name=trainer_name, logo_path=logo_path)

    logger.info(f"Exported plan {plan_id} to PDF ({len(content)} bytes)")

    return ExportResult(
        success=True,
        format="pdf",
        filename=f"workout-plan-{plan.id}.pdf",
        content=content,
        content_type="application/pdf",
    )


def export_plan_to_json(plan_id: UUID, user: User, db: Session) -> ExportResult:
    """Export a workout plan, metadata plus the full content document, as JSON."""
    plan, failure = _load_plan(plan_id, user, db, "json", "application/json")
    if failure:
        return failure

    export_data = {
        "export_version": "1.0",
        "exported_at": datetime.now().isoformat(),
        "plan": {
            "id": str(plan.id),
            "title": plan.title,
            "description": plan.description,
            "status": plan.status,
            "session_type": plan.session_type,
            "start_date": plan.start_date.isoformat() if plan.start_date else None,
            "end_date": plan.end_date.isoformat() if plan.end_date else None,
            "trainer_id": str(plan.trainer_id),
            "client_id": str(plan.client_id),
            "workspace_id": str(plan.workspace_id),
            "generation_provider": plan.generation_provider,
            "content": plan.content or {},
        },
    }

    logger.info(f"Exported plan {plan_id} to JSON")

    return ExportResult(
        success=True,
        format="json",
        filename=f"workout-plan-{plan.id}.json",
        content=json.dumps(export_data, indent=2, default=str),
        content_type="application/json",
    )
