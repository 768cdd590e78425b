"""
Pytest configuration and fixtures

No test touches a real database or network. Database sessions are
MagicMocks whose query() results are keyed by model, and LLM / Notion
clients are fakes injected through constructors or dependency overrides.
"""
import os
import sys
from datetime import date
from uuid import uuid4

import pytest

# Settings are read at import time; provide a valid key before anything imports core.config.
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-at-least-32-characters-long")
os.environ.setdefault("LOG_FORMAT", "text")

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import Workspace, WorkoutPlan
from schemas import WorkoutGenerationRequest
from fixtures.plan_fixtures import make_user


@pytest.fixture
def trainer():
    return make_user("trainer", full_name="Pete Ryan")


@pytest.fixture
def client_user(trainer):
    return make_user("client", full_name="Sam Client", trainer_id=trainer.id)


@pytest.fixture
def outsider():
    return make_user("trainer", full_name="Other Trainer")


@pytest.fixture
def admin():
    return make_user("admin", full_name="Site Admin")


@pytest.fixture
def workspace(trainer):
    return Workspace(id=uuid4(), trainer_id=trainer.id, name="Ryan Fitness", logo=None)


@pytest.fixture
def plan_content():
    return {
        "sessionDetails": {
            "type": "Personal Training",
            "name": "Personal Training Session",
            "coach": "Coach Pete Ryan",
            "duration": "45",
            "location": "PureGym West Byfleet",
            "fitnessLevel": "intermediate",
            "focusArea": "Full body",
        },
        "introduction": {
            "overview": "A full-body strength session.",
            "intensity": "Moderate",
            "objectives": ["Build strength", "Improve conditioning"],
            "preparation": "Hydrate well.",
        },
        "equipmentNeeded": ["Dumbbells", "Kettlebells"],
        "warmup": [{"exercise": "Jumping jacks", "duration": "2 minutes"}],
        "mainWorkout": [
            {
                "circuitNumber": 1,
                "explanation": "Lower body focus",
                "objective": "Strength",
                "setupInstructions": "Set up two stations",
                "exercises": [
                    {"exercise": "Goblet Squat", "reps": "12", "sets": "3", "men": "20kg",
                     "woman": "12kg", "technique": "Chest up, knees track toes"},
                    {"exercise": "Kettlebell Swing", "reps": "15", "sets": "3", "men": "24kg",
                     "woman": "16kg", "technique": "Hinge at the hips", "notes": "Keep a neutral spine"},
                ],
            },
            {
                "circuitNumber": 2,
                "explanation": "Upper body",
                "objective": "Push/pull",
                "setupInstructions": "Bench and dumbbells",
                "exercises": [
                    {"exercise": "Dumbbell Row", "reps": "10", "sets": "3", "men": "22kg",
                     "woman": "14kg", "technique": "Pull to the hip"},
                ],
            },
        ],
        "cooldown": [{"exercise": "Hamstring stretch", "duration": "1 minute", "technique": "Hold"}],
        "recovery": {
            "immediateSteps": ["Stretch"],
            "nutritionTips": ["Protein within an hour"],
            "restRecommendations": "Rest one day",
            "nextDayGuidance": "Light walk",
        },
        "closingMessage": "Great work!",
    }


@pytest.fixture
def personal_request():
    return WorkoutGenerationRequest.model_validate({
        "sessionType": "personal",
        "fitnessLevel": "intermediate",
        "equipment": ["Dumbbells", "Kettlebells"],
        "clientDetails": {"age": "32", "goals": "fat loss"},
    })


@pytest.fixture
def group_request():
    return WorkoutGenerationRequest.model_validate({
        "sessionType": "group",
        "fitnessLevel": "beginner",
        "equipment": ["kettlebells", "trx", "mats"],
        "circuitPreferences": {"types": ["AMRAP"], "stationRotation": True, "restBetweenStations": False},
        "groupFormat": {"type": "circuit"},
        "participantInfo": {"count": 12, "format": "groups", "groupSize": 3},
        "workoutDuration": 45,
    })


@pytest.fixture
def workout_plan(trainer, client_user, workspace, plan_content):
    return WorkoutPlan(
        id=uuid4(),
        workspace_id=workspace.id,
        trainer_id=trainer.id,
        client_id=client_user.id,
        title="Personal Training Session",
        description="A full-body strength session.",
        content=plan_content,
        start_date=date(2026, 3, 2),
        end_date=date(2026, 3, 9),
        status="active",
        session_type="personal",
        generation_provider="anthropic",
    )
