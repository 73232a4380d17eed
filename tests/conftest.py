"""Pytest configuration and fixtures."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app, get_store
from backend.app.models import Proposal
from backend.app.storage import ProposalStore


def make_proposal(pid, client_name="Acme", **kwargs):
    """Build a Proposal with sensible defaults for projector tests."""
    data = {
        "id": str(pid),
        "client_name": client_name,
        "sent_date": date(2025, 2, 1),
        "value": 1000.0,
        "status": "pending",
        "last_follow_up": date(2025, 2, 1),
        "notes": "",
    }
    data.update(kwargs)
    return Proposal(**data)


@pytest.fixture
def store(tmp_path):
    """A store backed by a JSON file in a temp directory."""
    return ProposalStore(tmp_path)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
