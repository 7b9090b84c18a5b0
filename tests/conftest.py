import json as jsonlib

import pytest
import requests

from collab_manager.api_client import ApiClient
from collab_manager.models import User
from collab_manager.session import SessionContext
from collab_manager.settings import AppConfig


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        if body is None:
            self.text = ""
        elif isinstance(body, str):
            self.text = body
        else:
            self.text = jsonlib.dumps(body)

    def json(self):
        return jsonlib.loads(self.text)


class FakeHttp:
    """Stands in for requests.Session: routes "METHOD /path" to canned responses."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def add(self, method, path, status=200, body=None):
        self.routes[f"{method} {path}"] = (status, body)

    def request(self, method, url, headers=None, json=None, params=None, timeout=None, verify=None):
        path = "/" + url.split("://", 1)[-1].split("/", 1)[-1]
        self.calls.append({"method": method, "path": path, "headers": headers, "json": json, "params": params})
        route = self.routes.get(f"{method} {path}")
        if route is None:
            return FakeResponse(404, {"detail": "Not Found"})
        if isinstance(route, Exception):
            raise route
        status, body = route
        return FakeResponse(status, body)

    def last(self):
        return self.calls[-1]


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{(tmp_path / 'collab-test.db').as_posix()}"


@pytest.fixture
def config(database_url):
    return AppConfig(
        api_base_url="https://api.test",
        timeout_seconds=5,
        verify_ssl=True,
        client_refresh_seconds=30,
        database_url=database_url,
        demo_fallback=False,
    )


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def recorded():
    return []


@pytest.fixture
def admin_user():
    return User.parse({"id": 1, "email": "admin@auravisual.dk", "full_name": "Ada Admin", "role": "admin"})


@pytest.fixture
def api(config, http, recorded, admin_user):
    session = SessionContext(token="tok-123", user=admin_user)
    return ApiClient(config, session=session, http=http, recorder=lambda **kw: recorded.append(kw))


@pytest.fixture
def anonymous_api(config, http, recorded):
    return ApiClient(config, session=SessionContext(), http=http, recorder=lambda **kw: recorded.append(kw))


@pytest.fixture
def network_down():
    return requests.ConnectionError("connection refused")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, database_url):
    from collab_manager import settings
    from collab_manager.api_log import config as api_log_config

    monkeypatch.setenv("COLLAB_DATABASE_URL", database_url)
    monkeypatch.delenv("API_LOG_DATABASE_URL", raising=False)
    monkeypatch.delenv("API_LOG_ENABLED", raising=False)
    settings.reset_config()
    api_log_config.reset_config()
    yield
    settings.reset_config()
    api_log_config.reset_config()
