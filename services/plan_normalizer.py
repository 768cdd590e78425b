"""
Plan Response Normalizer

Converts an LLM's raw reply into a PlanContent document.

Two failure classes are kept apart:
- unparseable: no JSON object can be found, or it is not valid JSON.
  Raises MalformedGenerationResponse; nothing partial is returned.
- parseable but incomplete: missing sections, single objects where lists
  are expected, numbers where text is expected. Repaired to the documented
  shape (see schemas.PlanContent).
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from schemas import PlanContent, as_item_list
from services.errors import MalformedGenerationResponse

logger = logging.getLogger(__name__)

# Tried in order; the first pattern that matches wins.
_JSON_FENCE = re.compile(r"```json\s*\n([\s\S]*?)```")
_PLAIN_FENCE = re.compile(r"```\s*\n([\s\S]*?)```")
_BRACE_SPAN = re.compile(r"\{[\s\S]*\}")

# Top-level list fields, and the nested list fields per circuit.
TOP_LEVEL_LIST_FIELDS = ("mainWorkout", "equipmentNeeded", "warmup", "cooldown")
SECTION_LIST_FIELDS = {
    "introduction": ("objectives",),
    "recovery": ("immediateSteps", "nutritionTips"),
}


def extract_json_payload(text: str) -> Optional[str]:
    """
    Find the JSON payload in free-form model output.

    Order: a ```json fenced block, a plain ``` fenced block, then the span
    from the first "{" to the last "}". Returns None when nothing matches.
    """
    if not text:
        return None
    for pattern in (_JSON_FENCE, _PLAIN_FENCE):
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    match = _BRACE_SPAN.search(text)
    if match:
        return match.group(0)
    return None


def coerce_lists(content: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply the "always a list" rule to a parsed plan dict, in place.

    Absent or null list fields become [], a single object becomes a
    one-element list. Idempotent.
    """
    equipment = content.get("equipmentNeeded")
    if isinstance(equipment, dict):
        # Older prompt contract: {"equipmentList": [...], "other": "..."}
        content["equipmentNeeded"] = equipment.get("equipmentList")

    for key in TOP_LEVEL_LIST_FIELDS:
        content[key] = as_item_list(content.get(key))

    for circuit in content["mainWorkout"]:
        if isinstance(circuit, dict):
            circuit["exercises"] = as_item_list(circuit.get("exercises"))

    for section, keys in SECTION_LIST_FIELDS.items():
        body = content.get(section)
        if isinstance(body, dict):
            for key in keys:
                body[key] = as_item_list(body.get(key))

    return content


def _reject_constant(name: str):
    # NaN and Infinity are not JSON.
    raise ValueError(f"Non-standard JSON constant {name}")


def parse_plan_json(raw_text: str) -> Dict[str, Any]:
    """Extract and parse the JSON object, or raise MalformedGenerationResponse."""
    payload = extract_json_payload(raw_text)
    if payload is None:
        raise MalformedGenerationResponse(
            "The AI didn't return a properly formatted workout plan",
            raw_text=raw_text,
        )

    try:
        parsed = json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        logger.warning(f"Failed to parse JSON from model response: {e}")
        raise MalformedGenerationResponse(
            "The AI generated an invalid JSON response",
            raw_text=raw_text,
        ) from e

    if not isinstance(parsed, dict):
        raise MalformedGenerationResponse(
            f"Expected a JSON object, got {type(parsed).__name__}",
            raw_text=raw_text,
        )
    return parsed


def normalize_plan_content(content: Dict[str, Any]) -> Dict[str, Any]:
    """Repair an already-parsed plan dict into the PlanContent shape."""
    coerce_lists(content)
    try:
        plan = PlanContent.model_validate(content)
    except ValidationError as e:
        raise MalformedGenerationResponse(f"Workout plan has an unusable structure: {e.error_count()} errors") from e
    return plan.to_document()


def normalize_plan_response(raw_text: str) -> Dict[str, Any]:
    """Raw model text in, PlanContent document out."""
    parsed = parse_plan_json(raw_text)

    missing = [key for key in ("introduction", "mainWorkout", "recovery") if key not in parsed]
    if missing:
        logger.info(f"Model response missing sections {missing}; filling defaults")

    return normalize_plan_content(parsed)
