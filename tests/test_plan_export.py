"""
Tests for Plan Export Service

Tests the export gate and formats:
- Missing plan -> 404, unrelated user -> 403, renderer never called
- Trainer, client and admin can export
- PDF and JSON output
"""

import json
from unittest.mock import patch
from uuid import uuid4

import pytest

from models import User, Workspace, WorkoutPlan
from services.plan_export import can_access_plan, export_plan_to_json, export_plan_to_pdf
from fixtures.plan_fixtures import make_query_db


@pytest.fixture
def export_db(workout_plan, trainer, workspace):
    return make_query_db({WorkoutPlan: workout_plan, User: trainer, Workspace: workspace})


class TestGate:

    def test_missing_plan(self, trainer):
        with patch("services.plan_export.render_plan_pdf") as render:
            result = export_plan_to_pdf(uuid4(), trainer, make_query_db())
        assert not result.success
        assert result.status_code == 404
        assert result.content == b""
        render.assert_not_called()

    def test_unrelated_user_denied(self, workout_plan, outsider, export_db):
        with patch("services.plan_export.render_plan_pdf") as render:
            result = export_plan_to_pdf(workout_plan.id, outsider, export_db)
        assert not result.success
        assert result.status_code == 403
        assert result.content == b""
        assert result.filename == ""
        render.assert_not_called()

    @pytest.mark.parametrize("who", ["trainer", "client_user", "admin"])
    def test_allowed_users(self, who, request, workout_plan, export_db):
        user = request.getfixturevalue(who)
        with patch("services.plan_export.render_plan_pdf", return_value=b"%PDF-fake") as render:
            result = export_plan_to_pdf(workout_plan.id, user, export_db)
        assert result.success
        assert result.content == b"%PDF-fake"
        render.assert_called_once()

    def test_can_access_plan(self, workout_plan, trainer, client_user, outsider, admin):
        assert can_access_plan(workout_plan, trainer)
        assert can_access_plan(workout_plan, client_user)
        assert can_access_plan(workout_plan, admin)
        assert not can_access_plan(workout_plan, outsider)

    def test_json_export_uses_same_gate(self, workout_plan, outsider, export_db):
        result = export_plan_to_json(workout_plan.id, outsider, export_db)
        assert not result.success
        assert result.status_code == 403


class TestPdfExport:

    def test_pdf_result(self, workout_plan, client_user, export_db):
        result = export_plan_to_pdf(workout_plan.id, client_user, export_db)
        assert result.success
        assert result.filename == f"workout-plan-{workout_plan.id}.pdf"
        assert result.content_type == "application/pdf"
        assert result.content.startswith(b"%PDF")

    def test_trainer_name_and_logo_passed(self, workout_plan, client_user, workspace, export_db):
        workspace.logo = "logos/ryan.png"
        with patch("services.plan_export.render_plan_pdf", return_value=b"%PDF") as render:
            export_plan_to_pdf(workout_plan.id, client_user, export_db)
        assert render.call_args.kwargs == {"trainer_name": "Pete Ryan", "logo_path": "logos/ryan.png"}


class TestJsonExport:

    def test_json_result(self, workout_plan, trainer, export_db):
        result = export_plan_to_json(workout_plan.id, trainer, export_db)
        assert result.success
        assert result.filename == f"workout-plan-{workout_plan.id}.json"
        data = json.loads(result.content)
        assert data["export_version"] == "1.0"
        assert data["plan"]["id"] == str(workout_plan.id)
        assert data["plan"]["start_date"] == "2026-03-02"
        assert data["plan"]["content"]["mainWorkout"][0]["circuitNumber"] == 1
