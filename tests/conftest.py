from datetime import date, timedelta
from urllib.parse import urlsplit

import pytest

from restaurant_api import http, store
from restaurant_api.app import create_app
from restaurant_api.client import ReservationClient
from restaurant_api.config import TestingConfig
from restaurant_api.extensions import db

ADMIN_TOKEN = TestingConfig.ADMIN_TOKEN
TABLE_COUNT = 10
FUTURE_DAY = date.today() + timedelta(days=30)
NEXT_DAY = FUTURE_DAY + timedelta(days=1)


@pytest.fixture
def app():
    http._rate_state.clear()
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        store.provision_tables(TABLE_COUNT)
        yield app
        db.session.remove()
        db.drop_all()
    http._rate_state.clear()


@pytest.fixture
def client(app):
    return app.test_client()


class _Response:
    def __init__(self, resp):
        self.status_code = resp.status_code
        self._resp = resp

    def json(self):
        data = self._resp.get_json(silent=True)
        if data is None:
            raise ValueError("Response has no JSON body")
        return data


class FlaskTransport:
    """The slice of requests.Session that ReservationClient uses, served by a Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client

    def request(self, method, url, timeout=None, params=None, json=None):
        resp = self.test_client.open(urlsplit(url).path, method=method, query_string=params, json=json)
        return _Response(resp)


@pytest.fixture
def api(client):
    return ReservationClient("http://testserver", session=FlaskTransport(client))


@pytest.fixture
def make_payload():
    def build(**overrides):
        payload = {
            "fullName": "Asha Rao",
            "phone": "9876543210",
            "email": "asha@example.com",
            "date": FUTURE_DAY.isoformat(),
            "time": "7:00 PM",
            "guests": 4,
            "tables": ["T1", "T2"],
        }
        payload.update(overrides)
        return payload
    return build
