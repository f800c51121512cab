from decimal import Decimal
from types import SimpleNamespace
from urllib.parse import urlsplit

import pytest

from catering_aja.app import create_app
from catering_aja.common.db import session as db
from catering_aja.config import CateringConfig
from catering_aja.seed import seed_database


@pytest.fixture
def app(tmp_path):
    config = CateringConfig(
        secret_key="test-secret",
        database_url="sqlite://",
        log_level="ERROR",
        project_root=tmp_path,
    )
    app = create_app(config)
    app.config["TESTING"] = True
    seed_database(db.get_session)
    yield app
    db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username, password):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["user"]


@pytest.fixture
def admin_client(app):
    c = app.test_client()
    login(c, "admin", "admin")
    return c


@pytest.fixture
def customer_client(app):
    c = app.test_client()
    resp = c.post(
        "/api/auth/register",
        json={"username": "budi", "password": "rahasia", "name": "Budi Santoso", "phone": "0812"},
    )
    assert resp.status_code == 201
    login(c, "budi", "rahasia")
    return c


def area(delivery_fee="5000", service_fee="2000", slug="jakarta"):
    return SimpleNamespace(slug=slug, delivery_fee=Decimal(delivery_fee), service_fee=Decimal(service_fee))


def promo(code="HEMAT", discount_type="percent", value="15", start=None, end=None, active=True):
    return SimpleNamespace(
        code=code,
        discount_type=discount_type,
        discount_value=Decimal(value),
        start_date=start,
        end_date=end,
        is_active=active,
    )


class _FlaskResponse:
    def __init__(self, resp):
        self.status_code = resp.status_code
        self.content = resp.data
        self._resp = resp

    def json(self):
        body = self._resp.get_json(silent=True)
        if body is None:
            raise ValueError("no JSON body")
        return body


class FlaskTestSession:
    """Routes ``StorefrontApiClient`` calls into a Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, timeout=None, json=None, params=None):
        path = urlsplit(url).path
        self.calls.append((method, path))
        resp = self.test_client.open(path, method=method, json=json, query_string=params)
        return _FlaskResponse(resp)
