import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from core.logging_config import get_correlation_id
from core.middleware import (
    CorrelationMiddleware,
    ErrorHandlingMiddleware,
    PerformanceMiddleware,
)


class TestCorrelationMiddleware:
    """Test CorrelationMiddleware functionality."""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(CorrelationMiddleware)

        @app.get("/test")
        async def test_endpoint(request: Request):
            return {
                "correlation_id": request.state.correlation_id,
                "context_id": get_correlation_id(),
            }

        return TestClient(app)

    def test_correlation_id_generation(self, client):
        response = client.get("/test")

        assert response.status_code == 200
        data = response.json()
        assert len(data["correlation_id"]) > 0
        assert response.headers["X-Correlation-ID"] == data["correlation_id"]

    def test_existing_correlation_id_preserved(self, client):
        response = client.get("/test", headers={"X-Correlation-ID": "existing-123"})

        data = response.json()
        assert data["correlation_id"] == "existing-123"
        assert data["context_id"] == "existing-123"

    def test_request_id_fallback(self, client):
        response = client.get("/test", headers={"X-Request-ID": "request-456"})

        assert response.json()["correlation_id"] == "request-456"
        assert response.headers["X-Correlation-ID"] == "request-456"


class TestPerformanceMiddleware:
    """Test PerformanceMiddleware functionality."""

    def make_client(self, **kwargs):
        app = FastAPI()
        app.add_middleware(PerformanceMiddleware, **kwargs)

        @app.get("/test")
        async def test_endpoint():
            return {"ok": True}

        return TestClient(app)

    def test_process_time_header(self):
        response = self.make_client().get("/test")

        assert response.status_code == 200
        assert float(response.headers["X-Process-Time"]) >= 0

    def test_slow_request_warning(self, monkeypatch, mock_logger):
        monkeypatch.setattr("core.middleware.logger", mock_logger)

        self.make_client(slow_request_seconds=-1).get("/test")

        mock_logger.warning.assert_called_once()
        assert "Slow request" in mock_logger.warning.call_args[0][0]

    def test_fast_request_no_warning(self, monkeypatch, mock_logger):
        monkeypatch.setattr("core.middleware.logger", mock_logger)

        self.make_client().get("/test")

        mock_logger.warning.assert_not_called()


class TestErrorHandlingMiddleware:
    """Test ErrorHandlingMiddleware functionality."""

    def make_client(self, **kwargs):
        app = FastAPI()
        app.add_middleware(ErrorHandlingMiddleware, **kwargs)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("unexpected failure")

        @app.get("/ok")
        async def ok():
            return {"ok": True}

        return TestClient(app)

    def test_unhandled_error_becomes_json(self, monkeypatch, mock_logger):
        monkeypatch.setattr("core.middleware.logger", mock_logger)

        response = self.make_client().get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "unexpected failure"}
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.kwargs["exc_info"] is True

    def test_unhandled_error_redacted(self):
        response = self.make_client(redact=True).get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "服务器内部错误"}

    def test_success_passes_through(self):
        response = self.make_client().get("/ok")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
