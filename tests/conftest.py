import os

# Settings are read at import time
os.environ.setdefault("API_KEY", "test-key")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RATE_LIMIT_BURST", "10000")
os.environ["OPENAI_API_KEY"] = ""

import pytest


API_HEADERS = {"X-API-Key": os.environ["API_KEY"]}

# Chart used by the storefront demo product
SIZE_CHART = {
    "P": {"Busto": "84 - 88", "Cintura": "66 - 70", "Quadril": "90 - 94"},
    "M": {"Busto": "92 - 96", "Cintura": "74 - 78", "Quadril": "102 - 106"},
    "G": {"Busto": "100 - 104", "Cintura": "82 - 86", "Quadril": "110 - 114"},
}


@pytest.fixture
def size_chart():
    return {size: dict(cells) for size, cells in SIZE_CHART.items()}


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from app.main import app

    return TestClient(app)


@pytest.fixture
def headers():
    return dict(API_HEADERS)
