"""
Tests for the route guard
"""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from careerhub.auth import COOKIE_NAME, create_session_token
from careerhub.config import get_settings
from careerhub.guard import GuardDecision, evaluate_route, require_role
from careerhub.schemas import Principal, RequiredRole, Role

ADMIN = Principal(id="1", name="Admin User", email="admin@example.com", role=Role.ADMIN)
COUNSELOR = Principal(id="c1", name="Dana", email="dana@example.com", role=Role.COUNSELOR)


class TestEvaluateRoute:
    @pytest.mark.parametrize("required", list(RequiredRole))
    def test_unauthenticated_goes_to_login(self, required):
        assert evaluate_route(None, required) == GuardDecision.REDIRECT_LOGIN

    @pytest.mark.parametrize(
        "principal,required,expected",
        [
            (ADMIN, RequiredRole.ANY, GuardDecision.RENDER),
            (ADMIN, RequiredRole.ADMIN, GuardDecision.RENDER),
            (ADMIN, RequiredRole.COUNSELOR, GuardDecision.REDIRECT_HOME),
            (COUNSELOR, RequiredRole.ANY, GuardDecision.RENDER),
            (COUNSELOR, RequiredRole.ADMIN, GuardDecision.REDIRECT_HOME),
            (COUNSELOR, RequiredRole.COUNSELOR, GuardDecision.RENDER),
        ],
    )
    def test_role_matrix(self, principal, required, expected):
        assert evaluate_route(principal, required) == expected

    def test_default_requirement_is_any(self):
        assert evaluate_route(COUNSELOR) == GuardDecision.RENDER


class TestRequireRoleDependency:
    @pytest.fixture
    def client(self):
        app = FastAPI()

        @app.get("/admin-only")
        async def admin_only(principal: Principal = Depends(require_role(RequiredRole.ADMIN))):
            return {"id": principal.id}

        return TestClient(app)

    def test_no_cookie_is_401(self, client):
        assert client.get("/admin-only").status_code == 401

    def test_garbage_cookie_is_401(self, client):
        client.cookies.set(COOKIE_NAME, "not-a-token")
        assert client.get("/admin-only").status_code == 401

    def test_wrong_role_is_403(self, client):
        client.cookies.set(COOKIE_NAME, create_session_token(COUNSELOR, get_settings()))
        assert client.get("/admin-only").status_code == 403

    def test_matching_role_renders(self, client):
        client.cookies.set(COOKIE_NAME, create_session_token(ADMIN, get_settings()))
        response = client.get("/admin-only")
        assert response.status_code == 200
        assert response.json() == {"id": "1"}
