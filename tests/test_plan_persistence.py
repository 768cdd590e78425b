"""
Tests for workout plan persistence.

Covers:
- Owner resolution (workspace and client defaults, ownership checks)
- Row fields (title, description, dates)
- Mirror failure never prevents the committed row
- Page id recorded when the mirror succeeds
"""

from datetime import date
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from models import User, Workspace, WorkoutPlan
from schemas import WorkoutGenerationRequest
from services.notion_mirror import MirrorResult, NotionMirror
from services.plan_persistence import (
    PlanOwners,
    persist_generated_plan,
    plan_description,
    plan_title,
    resolve_plan_owners,
)
from fixtures.plan_fixtures import make_query_db, make_user

TODAY = date(2026, 3, 2)


def _mirror(result: MirrorResult, enabled: bool = True):
    mirror = MagicMock(spec=NotionMirror)
    mirror.enabled = enabled
    mirror.mirror_plan.return_value = result
    return mirror


def _request(**overrides):
    return WorkoutGenerationRequest(
        session_type="personal", fitness_level="advanced", equipment=[], **overrides
    )


def _persist(db, mirror, trainer, request, content, owners=None):
    return persist_generated_plan(
        db, mirror,
        trainer=trainer,
        owners=owners or PlanOwners(workspace_id=uuid4(), client_id=trainer.id),
        request=request,
        content=content,
        provider="anthropic",
        default_minutes=45,
        today=TODAY,
    )


class TestPlanOwners:

    def test_defaults_to_trainer_workspace_and_trainer_as_client(self, trainer, workspace, personal_request):
        owners = resolve_plan_owners(make_query_db({Workspace: workspace}), trainer, personal_request)
        assert owners == PlanOwners(workspace_id=workspace.id, client_id=trainer.id)

    def test_explicit_own_client_and_workspace(self, trainer, client_user, workspace):
        db = make_query_db({Workspace: workspace, User: client_user})
        owners = resolve_plan_owners(db, trainer, _request(client_id=client_user.id, workspace_id=workspace.id))
        assert owners.client_id == client_user.id
        assert owners.workspace_id == workspace.id

    def test_no_workspace_available(self, trainer, personal_request):
        with pytest.raises(ValidationError) as exc:
            resolve_plan_owners(make_query_db(), trainer, personal_request)
        assert exc.value.status_code == 422

    def test_unknown_workspace(self, trainer):
        with pytest.raises(NotFoundError):
            resolve_plan_owners(make_query_db(), trainer, _request(workspace_id=uuid4()))

    def test_foreign_workspace_rejected(self, trainer, outsider):
        foreign = Workspace(id=uuid4(), trainer_id=outsider.id, name="Other Gym")
        with pytest.raises(ForbiddenError):
            resolve_plan_owners(make_query_db({Workspace: foreign}), trainer, _request(workspace_id=foreign.id))

    def test_unknown_client(self, trainer, workspace):
        with pytest.raises(NotFoundError):
            resolve_plan_owners(make_query_db({Workspace: workspace}), trainer, _request(client_id=uuid4()))

    def test_foreign_client_rejected(self, trainer, outsider, workspace):
        foreign_client = make_user("client", trainer_id=outsider.id)
        db = make_query_db({Workspace: workspace, User: foreign_client})
        with pytest.raises(ForbiddenError):
            resolve_plan_owners(db, trainer, _request(client_id=foreign_client.id))

    def test_admin_may_use_any_workspace_and_client(self, admin, outsider):
        foreign = Workspace(id=uuid4(), trainer_id=outsider.id, name="Other Gym")
        foreign_client = make_user("client", trainer_id=outsider.id)
        db = make_query_db({Workspace: foreign, User: foreign_client})
        owners = resolve_plan_owners(db, admin, _request(client_id=foreign_client.id, workspace_id=foreign.id))
        assert owners == PlanOwners(workspace_id=foreign.id, client_id=foreign_client.id)


class TestRowFields:

    def test_personal_plan(self, trainer, client_user, workspace, personal_request, plan_content):
        db = make_query_db()
        owners = PlanOwners(workspace_id=workspace.id, client_id=client_user.id)
        persisted = _persist(db, _mirror(MirrorResult(ok=False, error="off"), enabled=False),
                             trainer, personal_request, plan_content, owners=owners)

        plan = persisted.plan
        assert isinstance(plan, WorkoutPlan)
        assert plan.title == "Personal Training Session"
        assert plan.description == "A full-body strength session."
        assert plan.start_date == TODAY
        assert plan.end_date == date(2026, 3, 9)
        assert plan.status == "active"
        assert plan.workspace_id == workspace.id
        assert plan.client_id == client_user.id
        assert plan.trainer_id == trainer.id
        assert plan.generation_provider == "anthropic"
        assert plan.content is plan_content
        db.add.assert_called_once_with(plan)
        db.query.assert_not_called()

    def test_group_plan_runs_thirty_days(self, trainer, group_request):
        persisted = _persist(make_query_db(), _mirror(MirrorResult(ok=False)), trainer, group_request,
                             {"introduction": {}, "mainWorkout": []})
        assert persisted.plan.end_date == date(2026, 4, 1)
        assert persisted.plan.title == "Beginner Group Workout"
        assert persisted.plan.description == "Generated on 02/03/2026"

    def test_title_without_session_name(self, personal_request):
        assert plan_title({}, personal_request) == "Intermediate Personal Workout"

    def test_description_without_overview(self):
        assert plan_description({"introduction": {"overview": ""}}, TODAY) == "Generated on 02/03/2026"


class TestMirrorIsolation:

    def test_mirror_failure_keeps_committed_row(self, trainer, workspace, personal_request, plan_content):
        db = make_query_db()
        persisted = _persist(db, _mirror(MirrorResult(ok=False, error="RuntimeError: boom")),
                             trainer, personal_request, plan_content)

        assert db.commit.call_count == 1
        db.rollback.assert_not_called()
        assert persisted.plan.id is not None
        assert persisted.plan.notion_page_id is None
        assert not persisted.mirror.ok

    def test_commit_happens_before_mirror(self, trainer, workspace, personal_request, plan_content):
        db = make_query_db()
        order = []
        db.commit.side_effect = lambda: order.append("commit")
        mirror = _mirror(MirrorResult(ok=False))
        mirror.mirror_plan.side_effect = lambda *a, **k: order.append("mirror") or MirrorResult(ok=False)

        _persist(db, mirror, trainer, personal_request, plan_content)
        assert order == ["commit", "mirror"]

    def test_mirror_success_records_page_id(self, trainer, workspace, personal_request, plan_content):
        db = make_query_db()
        mirror = _mirror(MirrorResult(ok=True, page_id="page-1"))

        persisted = _persist(db, mirror, trainer, personal_request, plan_content)

        assert persisted.plan.notion_page_id == "page-1"
        assert db.commit.call_count == 2
        summary = mirror.mirror_plan.call_args.args[0]
        assert summary.title == "Personal Training Session - 02/03/2026"
        assert mirror.mirror_plan.call_args.kwargs["trainer_id"] == str(trainer.id)

    def test_page_id_commit_failure_is_not_fatal(self, trainer, workspace, personal_request, plan_content):
        db = make_query_db()
        db.commit.side_effect = [None, RuntimeError("connection lost")]

        persisted = _persist(db, _mirror(MirrorResult(ok=True, page_id="page-1")),
                             trainer, personal_request, plan_content)

        db.rollback.assert_called_once()
        assert persisted.mirror.ok
