"""
Shared pytest fixtures for the Dropbox team client tests.

Provides:
- Settings built without touching the real environment
- A mock requests session wired into HttpClient
- Canned Dropbox response payloads
"""
import json
from unittest.mock import Mock

import pytest

from dropbox_team_client.auth import AuthManager
from dropbox_team_client.config import AppSettings, DEFAULT_SCOPES
from dropbox_team_client.http import HttpClient
from dropbox_team_client.models import Credentials
from dropbox_team_client.services import TokenAuthorizedClient


def make_response(status_code, payload=None, text=None):
    """Build a stand-in for requests.Response."""
    if text is None:
        text = json.dumps(payload) if payload is not None else ""
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.content = text.encode("utf-8")
    response.url = "https://api.dropboxapi.test"
    if payload is not None:
        response.json.return_value = payload
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    return response


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    """Keep a developer's .env file out of the tests."""
    monkeypatch.setattr("dropbox_team_client.config._load_dotenv_if_present", lambda *a, **k: None)


@pytest.fixture
def settings():
    return AppSettings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://localhost:8080/callback",
        scopes=DEFAULT_SCOPES,
        base_url="https://api.dropboxapi.test/2",
        token_url="https://api.dropboxapi.test/oauth2/token",
    )


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def http_client(settings, session):
    return HttpClient(settings, session=session)


@pytest.fixture
def credentials():
    return Credentials()


@pytest.fixture
def auth_manager(settings, http_client, credentials):
    return AuthManager(settings, http_client, credentials)


@pytest.fixture
def client(settings, http_client, auth_manager):
    return TokenAuthorizedClient(settings, http_client, auth_manager)


@pytest.fixture
def team_info_payload():
    return {
        "name": "Acme Corp",
        "team_id": "dbtid:AAA123",
        "num_licensed_users": 25,
        "num_provisioned_users": 12,
        "policies": {"sharing": {"shared_folder_member_policy": {".tag": "team"}}},
    }


@pytest.fixture
def members_payload():
    return {
        "members": [
            {
                "profile": {
                    "team_member_id": "dbmid:AAA-1",
                    "email": "ada@acme.test",
                    "status": {".tag": "active"},
                    "name": {"display_name": "Ada Lovelace"},
                    "joined_on": "2024-03-01T10:00:00Z",
                },
                "roles": [{"role_id": "pid_dbtmr:1", "name": "Team admin"}],
            },
            {
                "profile": {
                    "team_member_id": "dbmid:AAA-2",
                    "email": "alan@acme.test",
                    "status": {".tag": "invited"},
                    "name": {"display_name": "Alan Turing"},
                    "joined_on": "2024-04-02T11:30:00Z",
                },
                "roles": [],
            },
        ],
        "cursor": "abc",
        "has_more": True,
    }


@pytest.fixture
def events_payload():
    return {
        "events": [
            {
                "timestamp": "2024-05-01T08:15:00Z",
                "event_type": {".tag": "login_success"},
                "actor": {"user": {"display_name": "Ada Lovelace", "email": "ada@acme.test"}},
                "origin": {
                    "geo_location": {"city": "London", "country": "GB"},
                    "host": {"host": "203.0.113.7"},
                },
            },
            {
                "timestamp": "2024-05-01T09:00:00Z",
                "event_type": {".tag": "login_fail"},
            },
        ],
        "cursor": "evt-cursor",
        "has_more": False,
    }
