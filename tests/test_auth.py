"""
Tests for login and bearer-token authentication.
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from main import app
from core.auth import can_edit_plan, get_editable_plan, get_readable_plan
from core.database import get_db
from core.exceptions import ForbiddenError, NotFoundError
from core.security import create_access_token, decode_access_token, get_password_hash
from models import User, WorkoutPlan
from fixtures.plan_fixtures import make_query_db, make_user


@pytest.fixture
def account():
    return make_user("trainer", email="pete@example.com", password_hash=get_password_hash("squats-and-lunges"))


@pytest.fixture
def client(account):
    app.dependency_overrides[get_db] = lambda: make_query_db({User: account})
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_login_returns_token(client, account):
    response = client.post(
        "/v1/auth/login",
        json={"email": "Pete@Example.com", "password": "squats-and-lunges"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == str(account.id)
    payload = decode_access_token(body["access_token"])
    assert payload["sub"] == str(account.id)
    assert payload["role"] == "trainer"


def test_login_wrong_password(client):
    response = client.post("/v1/auth/login", json={"email": "pete@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHORIZED"


def test_me_with_token(client, account):
    token = create_access_token(str(account.id), account.role)
    response = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["email"] == "pete@example.com"


def test_me_with_bad_token(client):
    response = client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_inactive_account_rejected(client, account):
    account.status = "inactive"
    token = create_access_token(str(account.id), account.role)
    response = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_missing_token_is_401_with_challenge(client):
    response = client.get("/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "UNAUTHORIZED"
    assert response.headers["www-authenticate"] == "Bearer"


def test_plan_edit_rights(workout_plan, trainer, client_user, outsider, admin):
    assert can_edit_plan(workout_plan, trainer)
    assert can_edit_plan(workout_plan, admin)
    assert not can_edit_plan(workout_plan, client_user)
    assert not can_edit_plan(workout_plan, outsider)


def test_other_trainer_cannot_edit(workout_plan, outsider):
    with pytest.raises(ForbiddenError):
        get_editable_plan(workout_plan.id, current_user=outsider, db=make_query_db({WorkoutPlan: workout_plan}))


def test_missing_plan_is_not_found(trainer):
    with pytest.raises(NotFoundError):
        get_readable_plan(uuid4(), current_user=trainer, db=make_query_db())
