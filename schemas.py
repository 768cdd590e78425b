from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, date
from uuid import UUID
from typing import Any, Dict, List, Literal, Optional, Union
import json


# ============ Coercion helpers ============
#
# LLM output is loosely typed. These helpers are the single place where
# "a string where a list was expected" or "a number where text was expected"
# gets repaired. Every helper is idempotent.

def as_list(value: Any) -> list:
    """Coerce a value to a list: None -> [], list/tuple -> list, anything else -> [value]."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def as_text(value: Any) -> str:
    """Coerce a scalar-ish value to display text. None becomes ""."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(as_text(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    return str(value)


def as_text_list(value: Any) -> List[str]:
    return [as_text(item) for item in as_list(value) if item is not None]


def as_item_list(value: Any) -> list:
    """Like as_list, but null entries are dropped."""
    return [item for item in as_list(value) if item is not None]


def as_section(value: Any, text_key: str) -> Any:
    """A section object given as bare text is folded into its main text field."""
    if value is None:
        return {}
    if isinstance(value, str):
        return {text_key: value}
    if isinstance(value, dict):
        return value
    return {}


# ============ Plan content ============

class _ContentModel(BaseModel):
    """Base for plan content: camelCase on the wire, unknown keys preserved."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Exercise(_ContentModel):
    exercise: str = ""
    reps: str = ""
    sets: str = ""
    men: str = ""
    woman: str = ""
    technique: str = ""
    notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_bare_name(cls, data: Any) -> Any:
        if data is not None and not isinstance(data, dict):
            return {"exercise": as_text(data)}
        return data

    @field_validator("exercise", "reps", "sets", "men", "woman", "technique", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return as_text(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return as_text(value)


class Circuit(_ContentModel):
    circuit_number: int = 0
    explanation: str = ""
    objective: str = ""
    setup_instructions: str = ""
    exercises: List[Exercise] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_bare_text(cls, data: Any) -> Any:
        if data is not None and not isinstance(data, dict):
            return {"explanation": as_text(data)}
        return data

    @field_validator("circuit_number", mode="before")
    @classmethod
    def _number(cls, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 0

    @field_validator("explanation", "objective", "setup_instructions", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return as_text(value)

    @field_validator("exercises", mode="before")
    @classmethod
    def _list(cls, value: Any) -> list:
        return as_item_list(value)


class Introduction(_ContentModel):
    overview: str = ""
    intensity: str = ""
    objectives: List[str] = Field(default_factory=list)
    preparation: str = ""

    @field_validator("overview", "intensity", "preparation", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return as_text(value)

    @field_validator("objectives", mode="before")
    @classmethod
    def _list(cls, value: Any) -> List[str]:
        return as_text_list(value)


class Recovery(_ContentModel):
    immediate_steps: List[str] = Field(default_factory=list)
    nutrition_tips: List[str] = Field(default_factory=list)
    rest_recommendations: str = ""
    next_day_guidance: str = ""

    @field_validator("immediate_steps", "nutrition_tips", mode="before")
    @classmethod
    def _list(cls, value: Any) -> List[str]:
        return as_text_list(value)

    @field_validator("rest_recommendations", "next_day_guidance", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return as_text(value)


class SessionDetails(_ContentModel):
    type: str = ""
    name: str = ""
    coach: str = ""
    duration: str = ""
    location: str = ""
    fitness_level: str = ""
    focus_area: str = ""

    @field_validator("type", "name", "coach", "duration", "location", "fitness_level", "focus_area", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return as_text(value)


class WarmupItem(_ContentModel):
    exercise: str = ""
    duration: str = ""
    notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _from_bare_name(cls, data: Any) -> Any:
        if data is not None and not isinstance(data, dict):
            return {"exercise": as_text(data)}
        return data

    @field_validator("exercise", "duration", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return as_text(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return as_text(value)


class CooldownItem(WarmupItem):
    technique: str = ""

    @field_validator("technique", mode="before")
    @classmethod
    def _technique(cls, value: Any) -> str:
        return as_text(value)


class PlanContent(_ContentModel):
    """
    The normalized plan document.

    `introduction`, `mainWorkout` and `recovery` are always present; every
    list field is always a list. The remaining sections are carried when the
    model produced them.
    """
    introduction: Introduction = Field(default_factory=Introduction)
    main_workout: List[Circuit] = Field(default_factory=list)
    recovery: Recovery = Field(default_factory=Recovery)
    closing_message: Optional[str] = None

    session_details: Optional[SessionDetails] = None
    equipment_needed: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    warmup: List[WarmupItem] = Field(default_factory=list)
    cooldown: List[CooldownItem] = Field(default_factory=list)

    @field_validator("introduction", mode="before")
    @classmethod
    def _introduction(cls, value: Any) -> Any:
        return as_section(value, "overview")

    @field_validator("recovery", mode="before")
    @classmethod
    def _recovery(cls, value: Any) -> Any:
        return as_section(value, "restRecommendations")

    @field_validator("main_workout", mode="before")
    @classmethod
    def _circuits(cls, value: Any) -> list:
        return as_item_list(value)

    @field_validator("warmup", "cooldown", mode="before")
    @classmethod
    def _items(cls, value: Any) -> list:
        return as_item_list(value)

    @field_validator("equipment_needed", mode="before")
    @classmethod
    def _equipment(cls, value: Any) -> List[str]:
        if isinstance(value, dict):
            # Older prompt contract: {"equipmentList": [...], "other": "..."}
            value = value.get("equipmentList")
        return as_text_list(value)

    @field_validator("session_details", mode="before")
    @classmethod
    def _session_details(cls, value: Any) -> Any:
        if value is None or isinstance(value, dict):
            return value
        return None

    @field_validator("closing_message", "description", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return as_text(value)

    @model_validator(mode="after")
    def _number_circuits(self) -> "PlanContent":
        for position, circuit in enumerate(self.main_workout, start=1):
            if circuit.circuit_number <= 0:
                circuit.circuit_number = position
        return self

    def to_document(self) -> Dict[str, Any]:
        """JSON-ready camelCase dict, as stored in `workout_plans.content`."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============ Generation request ============

class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClientDetails(_RequestModel):
    age: Optional[str] = None
    gender: Optional[str] = None
    goals: Optional[Union[str, List[str]]] = None
    limitations: Optional[Union[str, List[str]]] = None
    experience: Optional[str] = None

    @field_validator("age", mode="before")
    @classmethod
    def _age(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return as_text(value)


class CircuitPreferences(_RequestModel):
    types: List[str] = Field(default_factory=list)
    station_rotation: Optional[bool] = None
    rest_between_stations: Optional[bool] = None
    mixed_equipment_stations: Optional[bool] = None


class GroupFormat(_RequestModel):
    type: Optional[str] = None


class ParticipantInfo(_RequestModel):
    count: Optional[str] = None
    format: Optional[str] = None
    group_size: Optional[str] = None

    @field_validator("count", "group_size", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return as_text(value)


class ProgramDetails(_RequestModel):
    sessions_per_week: Optional[int] = Field(None, ge=1, le=14)


class WorkoutGenerationRequest(_RequestModel):
    """Parameters collected from the trainer for one generated plan."""
    session_type: Literal["group", "personal"]
    fitness_level: str = Field(..., min_length=1)
    equipment: List[str]
    circuit_preferences: Optional[CircuitPreferences] = None
    client_details: Optional[ClientDetails] = None
    group_format: Optional[GroupFormat] = None
    participant_info: Optional[ParticipantInfo] = None
    plan_type: Literal["oneoff", "program"] = "oneoff"
    program_details: Optional[ProgramDetails] = None

    workout_duration: Optional[int] = Field(None, ge=10, le=180, description="Session length in minutes")
    intensity_level: Optional[int] = Field(None, ge=1, le=10)
    focus_areas: List[str] = Field(default_factory=list)
    avoided_exercises: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    include_warmup: bool = True
    include_cooldown: bool = True

    client_id: Optional[UUID] = None
    workspace_id: Optional[UUID] = None

    @field_validator("equipment", mode="before")
    @classmethod
    def _equipment(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("fitness_level", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class GenerateWorkoutResponse(_RequestModel):
    success: bool = True
    plan: Dict[str, Any]
    workout_id: UUID
    provider: str
    mirrored: bool


# ============ Stored plans ============

class WorkoutPlanResponse(BaseModel):
    id: UUID
    created_at: Optional[datetime] = None
    workspace_id: UUID
    trainer_id: UUID
    client_id: UUID
    title: str
    description: Optional[str] = None
    content: Dict[str, Any]
    start_date: date
    end_date: date
    status: str
    session_type: Optional[str] = None
    generation_provider: Optional[str] = None
    notion_page_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WorkoutPlanSummary(BaseModel):
    id: UUID
    created_at: Optional[datetime] = None
    trainer_id: UUID
    client_id: UUID
    title: str
    status: str
    start_date: date
    end_date: date

    model_config = ConfigDict(from_attributes=True)


class WorkoutPlanUpdate(BaseModel):
    """Editable metadata. `content` is immutable and rejected here."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[Literal["draft", "active", "completed", "archived"]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("title", "status", "start_date", "end_date")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # Only reached when the field is sent; these columns are NOT NULL.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value
