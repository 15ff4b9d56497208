from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from compound_calc.app import create_app
from compound_calc.config import Settings
from compound_calc.domain.storage import InMemoryStorage


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def flask_app(storage):
    return create_app(storage=storage, settings=Settings(storage_backend="memory"))


@pytest.fixture()
def client(flask_app) -> FlaskClient:
    with flask_app.test_client() as test_client:
        yield test_client


def calculation_payload(**overrides) -> dict:
    payload = {
        "principal": 10000,
        "rate": 5,
        "time": 3,
        "frequency": "annually",
    }
    payload.update(overrides)
    return payload
