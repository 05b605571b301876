"""Tests for the global safety-net exception handler.

Validates that unexpected errors produce the same ``{"error": ...}`` shape as
every other response, with no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from signup_api.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


def test_handler_registered(app_with_handlers: FastAPI):
    assert Exception in app_with_handlers.exception_handlers


def test_unexpected_exception_returns_generic_500(app_with_handlers: FastAPI):
    @app_with_handlers.get("/boom")
    async def boom():
        raise RuntimeError("database password=hunter2 rejected")

    client = TestClient(app_with_handlers, raise_server_exceptions=False)
    response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred. Please try again later."}
    assert "hunter2" not in response.text


def test_handler_never_leaks_stack_trace():
    request = AsyncMock()
    request.url.path = "/api/subscribe"
    request.method = "POST"

    response = asyncio.run(general_exception_handler(request, ValueError("Test error with details")))

    text = bytes(response.body).decode()
    assert response.status_code == 500
    assert response.headers["cache-control"] == "no-store"
    assert "Traceback" not in text
    assert "ValueError" not in text
    assert set(json.loads(text)) == {"error"}


def test_other_http_errors_keep_default_rendering(app_with_handlers: FastAPI):
    @app_with_handlers.post("/elsewhere")
    async def elsewhere():
        return {"status": "ok"}

    client = TestClient(app_with_handlers)

    assert client.get("/elsewhere").json() == {"detail": "Method Not Allowed"}
    assert client.get("/missing").status_code == 404
