"""
Tests for Middleware - app/core/middleware.py

Covers:
- CorrelationIdMiddleware: correlation ID propagation
- _mask_path_pii: e-mail masking in URL paths
- SecurityHeadersMiddleware: production vs DEBUG headers
- Exception handlers: AppException, request validation and unexpected errors
"""
import pytest
from fastapi import FastAPI
from pydantic import BaseModel, Field
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from app.core.exceptions import ConflictException
from app.core.middleware import (
    CorrelationIdMiddleware,
    SecurityHeadersMiddleware,
    _mask_path_pii,
    setup_exception_handlers,
    setup_middleware,
)


# ============================================================================
# Helpers
# ============================================================================


def _hello(request: Request) -> PlainTextResponse:
    return PlainTextResponse("ok")


def _build_fastapi_app() -> FastAPI:
    """Minimal FastAPI app wired like the real one"""
    test_app = FastAPI()
    setup_middleware(test_app)
    setup_exception_handlers(test_app)

    class Body(BaseModel):
        quantity: int = Field(gt=0)

    @test_app.get("/conflict")
    async def conflict():
        raise ConflictException("Service already added")

    @test_app.post("/validate")
    async def validate(body: Body):
        return {"quantity": body.quantity}

    @test_app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    @test_app.get("/ok")
    async def ok():
        return {"ok": True}

    return test_app


# ============================================================================
# _mask_path_pii
# ============================================================================


class TestMaskPathPii:

    @pytest.mark.unit
    def test_masks_email_in_path(self):
        masked = _mask_path_pii("/users/budi.santoso@example.com/profile")

        assert masked == "/users/b***@example.com/profile"

    @pytest.mark.unit
    def test_path_without_email_unchanged(self):
        path = "/spbu/2f1c9a1e-8a3f-4b53-9f61-1d0c6c3a9e11/fuel-prices"
        assert _mask_path_pii(path) == path


# ============================================================================
# CorrelationIdMiddleware
# ============================================================================


class TestCorrelationIdMiddleware:

    @pytest.mark.unit
    def test_generates_id_when_missing(self):
        test_app = Starlette(routes=[Route("/test", _hello)])
        test_app.add_middleware(CorrelationIdMiddleware)

        response = TestClient(test_app).get("/test")

        assert len(response.headers["X-Correlation-ID"]) == 8

    @pytest.mark.unit
    def test_echoes_incoming_id(self):
        test_app = Starlette(routes=[Route("/test", _hello)])
        test_app.add_middleware(CorrelationIdMiddleware)

        response = TestClient(test_app).get("/test", headers={"X-Correlation-ID": "abc12345"})

        assert response.headers["X-Correlation-ID"] == "abc12345"


# ============================================================================
# SecurityHeadersMiddleware
# ============================================================================


class TestSecurityHeaders:

    @pytest.mark.unit
    def test_production_headers(self):
        test_app = Starlette(routes=[Route("/test", _hello)])
        test_app.add_middleware(SecurityHeadersMiddleware, debug=False)

        response = TestClient(test_app).get("/test")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["content-security-policy"] == "upgrade-insecure-requests"
        assert "max-age=" in response.headers["strict-transport-security"]

    @pytest.mark.unit
    def test_debug_skips_csp_and_hsts(self):
        test_app = Starlette(routes=[Route("/test", _hello)])
        test_app.add_middleware(SecurityHeadersMiddleware, debug=True)

        response = TestClient(test_app).get("/test")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert "content-security-policy" not in response.headers
        assert "strict-transport-security" not in response.headers

    @pytest.mark.integration
    async def test_headers_on_real_app_errors(self, test_client):
        """Headers are present on 401 responses too"""
        response = await test_client.get("/transactions")

        assert response.status_code == 401
        assert response.headers.get("x-content-type-options") == "nosniff"
        assert "x-correlation-id" in response.headers


# ============================================================================
# Exception handlers
# ============================================================================


class TestExceptionHandlers:

    @pytest.mark.unit
    def test_app_exception_envelope(self):
        response = TestClient(_build_fastapi_app()).get("/conflict")

        assert response.status_code == 409
        assert response.json() == {
            "error": {"code": "ERR_1003", "message": "Service already added", "details": {}}
        }
        assert "X-Correlation-ID" in response.headers

    @pytest.mark.unit
    def test_validation_error_is_400(self):
        response = TestClient(_build_fastapi_app()).post("/validate", json={"quantity": 0})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "ERR_1001"
        assert error["details"]["errors"][0]["field"] == "quantity"

    @pytest.mark.unit
    def test_malformed_json_is_400(self):
        response = TestClient(_build_fastapi_app()).post(
            "/validate", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    @pytest.mark.unit
    def test_unexpected_error_hides_details(self):
        client = TestClient(_build_fastapi_app(), raise_server_exceptions=False)

        response = client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["error"]["code"] == "ERR_1000"
        assert "hunter2" not in response.text

    @pytest.mark.unit
    def test_success_passes_through(self):
        response = TestClient(_build_fastapi_app()).get("/ok")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
