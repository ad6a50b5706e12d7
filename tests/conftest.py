import json

import pytest
from fastapi.testclient import TestClient

from extractly.config import Settings
from extractly.db.sql import Database
from extractly.main import create_app
from extractly.records.table import ExtractionTable

WIDGET_HTML = "<html><body><h1>Widget</h1><span>$19.99</span></body></html>"

WIDGET_RESPONSE = json.dumps(
    {
        "parsed_fields": ["name", "price"],
        "extracted": {"name": "Widget", "price": "$19.99"},
        "confidence": {"name": 0.98, "price": 0.93},
    }
)


class FakeLLM:
    model_id = "fake-gemini"

    def __init__(self, response=WIDGET_RESPONSE, error=None):
        self.response = response
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'extractly-test.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def table(database):
    return ExtractionTable(database)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'extractly-test.db'}",
        gemini_api_key="test-key",
        node_env="test",
    )


@pytest.fixture
def make_client(settings, database, fake_llm):
    """Build a TestClient; keyword arguments override settings fields."""
    clients = []

    def _make(llm=None, **overrides):
        for key, value in overrides.items():
            setattr(settings, key, value)
        app = create_app(settings=settings, database=database, llm=llm or fake_llm)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def llm_factory():
    return FakeLLM
