"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from cookstep.main import app
from cookstep.middleware.rate_limit import limiter


@pytest.fixture
def client():
    """Create test client."""
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeLLM:
    """Stands in for GeminiService: returns a canned answer or raises."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.prompts = []

    async def generate_structured_completion(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_llm():
    """Factory for FakeLLM instances."""
    return FakeLLM
