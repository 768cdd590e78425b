"""
Workout Plan Generation

Runs one generation request end to end:
compose prompt -> LLM provider chain -> normalize -> persist (+ Notion mirror).

Plan owners are checked first (404/403/422 with no LLM call). Errors from
each later stage propagate unchanged (GenerationUnavailable,
MalformedGenerationResponse, database errors); nothing is persisted unless a
normalized plan exists.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from models import User, WorkoutPlan
from schemas import WorkoutGenerationRequest
from services.llm_providers import GenerationClient
from services.notion_mirror import NotionMirror
from services.plan_normalizer import normalize_plan_response
from services.plan_persistence import persist_generated_plan, resolve_plan_owners
from services.prompt_composer import PromptDefaults, compose_workout_prompt

logger = logging.getLogger(__name__)


@dataclass
class GeneratedPlan:
    plan: WorkoutPlan
    content: Dict[str, Any]
    provider: str
    mirrored: bool


def generate_workout_plan(
    db: Session,
    *,
    trainer: User,
    request: WorkoutGenerationRequest,
    generation_client: GenerationClient,
    mirror: NotionMirror,
    defaults: Optional[PromptDefaults] = None,
) -> GeneratedPlan:
    defaults = defaults or PromptDefaults.from_settings()
    started = time.monotonic()

    # Owner checks run before any provider call.
    owners = resolve_plan_owners(db, trainer, request)

    prompt = compose_workout_prompt(request, defaults)
    result = generation_client.generate(prompt)
    content = normalize_plan_response(result.text)

    persisted = persist_generated_plan(
        db,
        mirror,
        trainer=trainer,
        owners=owners,
        request=request,
        content=content,
        provider=result.provider,
        default_minutes=defaults.session_minutes,
    )

    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        f"Generated {request.session_type} workout plan {persisted.plan.id} via {result.provider}",
        extra={"extra_fields": {
            "plan_id": str(persisted.plan.id),
            "provider": result.provider,
            "attempts": len(result.attempts),
            "mirrored": persisted.mirror.ok,
            "duration_ms": elapsed_ms,
        }},
    )

    return GeneratedPlan(
        plan=persisted.plan,
        content=content,
        provider=result.provider,
        mirrored=persisted.mirror.ok,
    )
