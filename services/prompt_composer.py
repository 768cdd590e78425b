"""
Workout Prompt Composer

Turns a WorkoutGenerationRequest into the two instructions sent to an LLM
provider:

- system: trainer role, house rules, and the exact JSON shape the reply must
  follow (always embedded in full)
- user: the specific session to plan

Composition is a pure function of the request and the plan defaults: no
clock, randomness or I/O, so the same request yields byte-identical text.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from core.config import settings
from schemas import WorkoutGenerationRequest

NOT_SPECIFIED = "Not specified"

# Equipment ids sent by the group-session form, mapped to display names.
# Anything not listed is passed through untouched.
EQUIPMENT_NAMES = {
    "dumbbells": "Dumbbells",
    "kettlebells": "Kettlebells",
    "resistance-bands": "Resistance Bands",
    "bodyweight": "Bodyweight Exercises Only",
    "medicine-balls": "Medicine Balls",
    "trx": "TRX Suspension Trainers",
    "battle-ropes": "Battle Ropes",
    "boxes": "Plyo Boxes",
    "mats": "Exercise Mats",
}

SESSION_LABELS = {
    "group": "Group Class",
    "personal": "Personal Training",
}


@dataclass(frozen=True)
class PromptDefaults:
    """House defaults written into every prompt."""
    coach_name: str
    location: str
    session_minutes: int

    @classmethod
    def from_settings(cls) -> "PromptDefaults":
        return cls(
            coach_name=settings.PLAN_COACH_NAME,
            location=settings.PLAN_LOCATION,
            session_minutes=settings.PLAN_SESSION_MINUTES,
        )


@dataclass(frozen=True)
class ComposedPrompt:
    system: str
    user: str


def equipment_display_name(equipment_id: str) -> str:
    return EQUIPMENT_NAMES.get(equipment_id, equipment_id)


def _or_not_specified(value: Optional[Union[str, List[str]]]) -> str:
    if value is None:
        return NOT_SPECIFIED
    if isinstance(value, list):
        joined = ", ".join(v for v in value if v)
        return joined or NOT_SPECIFIED
    return value.strip() or NOT_SPECIFIED


def _yes_no(value: Optional[bool]) -> str:
    if value is None:
        return NOT_SPECIFIED
    return "Yes" if value else "No"


def _plan_schema(include_warmup: bool, include_cooldown: bool, defaults: PromptDefaults) -> str:
    """The JSON contract the reply must follow, in TypeScript-style notation."""
    parts = [
        "{",
        '  "sessionDetails": {',
        '    "type": string, // "Group Class" or "Personal Training"',
        '    "name": string, // Class name for group, "Personal Training Session" for PT',
        f'    "coach": "{defaults.coach_name}",',
        f'    "duration": {defaults.session_minutes},',
        f'    "location": "{defaults.location}",',
        '    "fitnessLevel": string,',
        '    "focusArea": string',
        "  },",
        '  "introduction": {',
        '    "overview": string, // Brief overview of the session',
        '    "intensity": string, // Expected intensity level',
        '    "objectives": string[], // Key objectives for the session',
        '    "preparation": string // Pre-workout preparation advice',
        "  },",
        '  "equipmentNeeded": string[],',
        '  "description": string,',
    ]
    if include_warmup:
        parts += [
            '  "warmup": Array<{',
            '    "exercise": string,',
            '    "duration": string,',
            '    "notes"?: string',
            "  }>,",
        ]
    parts += [
        '  "mainWorkout": Array<{',
        '    "circuitNumber": number,',
        '    "explanation": string,',
        '    "objective": string,',
        '    "setupInstructions": string,',
        '    "exercises": Array<{',
        '      "exercise": string,',
        '      "reps": string,',
        '      "sets": string,',
        '      "men": string, // Suggested load for men',
        '      "woman": string, // Suggested load for women',
        '      "technique": string,',
        '      "notes"?: string',
        "    }>",
        "  }>,",
    ]
    if include_cooldown:
        parts += [
            '  "cooldown": Array<{',
            '    "exercise": string,',
            '    "duration": string,',
            '    "technique": string,',
            '    "notes"?: string',
            "  }>,",
        ]
    parts += [
        '  "recovery": {',
        '    "immediateSteps": string[],',
        '    "nutritionTips": string[],',
        '    "restRecommendations": string,',
        '    "nextDayGuidance": string',
        "  },",
        '  "closingMessage": string',
        "}",
    ]
    return "\n".join(parts)


def compose_system_prompt(
    request: WorkoutGenerationRequest,
    defaults: PromptDefaults,
) -> str:
    minutes = request.workout_duration or defaults.session_minutes
    rules = [
        "Always use the exact sections and format of the JSON structure below",
        "Only include exercises possible with the available equipment",
        f"Scale exercise selection, volume and loading to the fitness level: {request.fitness_level}",
        f"The session must fit within {minutes} minutes",
        f"Location is always {defaults.location}",
        "Give clear, specific technique cues for every exercise and suggested loads for men and women",
        "Use British English spelling (e.g. customise, specialise, programme)",
        "Respond with a single valid JSON object and no other text",
    ]
    numbered = "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))
    schema = _plan_schema(request.include_warmup, request.include_cooldown, defaults)

    return (
        f"You are an expert personal trainer following {defaults.coach_name}'s blueprint "
        "for professional workout plans, with extensive knowledge of exercise science, "
        "biomechanics and programming methodology.\n"
        "\n"
        f"Rules to follow:\n{numbered}\n"
        "\n"
        f"The response must be a valid JSON object with this exact structure:\n{schema}"
    )


def _client_block(request: WorkoutGenerationRequest) -> List[str]:
    details = request.client_details
    plan_type = "12-week programme" if request.plan_type == "program" else "One-off session"
    return [
        "Client Details:",
        f"- Age: {_or_not_specified(details.age if details else None)}",
        f"- Gender: {_or_not_specified(details.gender if details else None)}",
        f"- Goals: {_or_not_specified(details.goals if details else None)}",
        f"- Limitations: {_or_not_specified(details.limitations if details else None)}",
        f"- Experience Level: {_or_not_specified(details.experience if details else None)}",
        f"- Plan Type: {plan_type}",
    ]


def _group_block(request: WorkoutGenerationRequest) -> List[str]:
    group_format = request.group_format
    participants = request.participant_info
    prefs = request.circuit_preferences

    lines = [
        "Group Details:",
        f"- Format: {_or_not_specified(group_format.type if group_format else None)}",
        f"- Participant Count: {_or_not_specified(participants.count if participants else None)}",
        f"- Group Setup: {_or_not_specified(participants.format if participants else None)}",
    ]
    if participants and participants.format == "groups":
        lines.append(
            f"- Group Size: {_or_not_specified(participants.group_size)} participants per group"
        )
    lines += [
        f"- Station Rotation: {_yes_no(prefs.station_rotation if prefs else None)}",
        f"- Rest Between Stations: {_yes_no(prefs.rest_between_stations if prefs else None)}",
        f"- Mixed Equipment Stations: {_yes_no(prefs.mixed_equipment_stations if prefs else None)}",
    ]
    return lines


def compose_user_prompt(
    request: WorkoutGenerationRequest,
    defaults: PromptDefaults,
) -> str:
    session_label = SESSION_LABELS[request.session_type]
    equipment = ", ".join(equipment_display_name(e) for e in request.equipment) or "Bodyweight only"

    lines = [
        "Create a detailed workout plan based on the following information:",
        "",
        f"Session Type: {request.session_type} ({session_label})",
        f"Fitness Level: {request.fitness_level}",
        f"Available Equipment: {equipment}",
    ]

    prefs = request.circuit_preferences
    if prefs and prefs.types:
        lines.append(f"Circuit Types Preferred: {', '.join(prefs.types)}")
    if request.workout_duration:
        lines.append(f"Duration: {request.workout_duration} minutes")
    if request.intensity_level:
        lines.append(f"Intensity Level: {request.intensity_level}/10")
    if request.focus_areas:
        lines.append(f"Focus Areas: {', '.join(request.focus_areas)}")
    if request.avoided_exercises:
        lines.append(f"Exercises to Avoid: {', '.join(request.avoided_exercises)}")
    if request.notes and request.notes.strip():
        lines.append(f"Additional Notes: {request.notes.strip()}")

    lines.append("")
    if request.session_type == "personal":
        lines += _client_block(request)
    else:
        lines += _group_block(request)

    lines.append("")
    minutes = request.workout_duration or defaults.session_minutes
    if request.plan_type == "program":
        sessions = (
            request.program_details.sessions_per_week
            if request.program_details and request.program_details.sessions_per_week
            else NOT_SPECIFIED
        )
        lines.append(
            f"Generate Week 1 of a 12-week progressive programme with {sessions} sessions per week. "
            "Focus on proper periodisation and progressive overload."
        )
    else:
        target = "group class" if request.session_type == "group" else "personal training session"
        lines.append(
            f"Generate a complete workout plan for a {target} that's {minutes} minutes long "
            "using only the available equipment."
        )

    lines += [
        "",
        "The plan needs:",
        "1. Introduction - the overall approach, intensity level and objectives",
        "2. Main Workout - circuits, each with specific exercises, reps/sets, loads and technique notes",
        "3. Recovery recommendations",
    ]
    if not request.include_warmup:
        lines.append("Do NOT include a warm-up section in this workout.")
    if not request.include_cooldown:
        lines.append("Do NOT include a cool-down section in this workout.")

    return "\n".join(lines)


def compose_workout_prompt(
    request: WorkoutGenerationRequest,
    defaults: Optional[PromptDefaults] = None,
) -> ComposedPrompt:
    """Build the system and user prompts for one generation request."""
    defaults = defaults or PromptDefaults.from_settings()
    return ComposedPrompt(
        system=compose_system_prompt(request, defaults),
        user=compose_user_prompt(request, defaults),
    )
