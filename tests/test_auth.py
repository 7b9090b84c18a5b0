import pytest

from collab_manager import session_store
from collab_manager.api_client import ApiClient
from collab_manager.errors import ApiError, AuthenticationRequired, NetworkError
from collab_manager.services import AuthService
from collab_manager.session import SessionContext

USER = {"id": 3, "email": "anna@auravisual.dk", "full_name": "Anna Chen", "role": "staff"}


def make_auth(anonymous_api, database_url):
    return AuthService(anonymous_api, device_key="test", database_url=database_url)


def test_login_success(anonymous_api, http, database_url):
    http.add("POST", "/auth/login", 200, {"access_token": "tok", "user": USER})
    auth = make_auth(anonymous_api, database_url)
    session = auth.login(" anna@auravisual.dk ", "secret1")
    assert session.token == "tok"
    assert session.user.role_key == "staff"
    assert http.last()["json"] == {"email": "anna@auravisual.dk", "password": "secret1"}
    assert session_store.load_session("test", database_url).token == "tok"


def test_login_failure(anonymous_api, http, database_url):
    http.add("POST", "/auth/login", 401, {"detail": "bad"})
    auth = make_auth(anonymous_api, database_url)
    with pytest.raises(AuthenticationRequired, match="Invalid credentials"):
        auth.login("anna@auravisual.dk", "wrongpass")
    assert not auth.session.is_authenticated


def test_login_fetches_user_when_not_embedded(anonymous_api, http, database_url):
    http.add("POST", "/auth/login", 200, {"access_token": "tok"})
    http.add("GET", "/auth/me", 200, USER)
    session = make_auth(anonymous_api, database_url).login("anna@auravisual.dk", "secret1")
    assert session.user.full_name == "Anna Chen"
    assert http.last()["headers"]["Authorization"] == "Bearer tok"


def test_login_without_token_is_an_error(anonymous_api, http, database_url):
    http.add("POST", "/auth/login", 200, {"user": USER})
    with pytest.raises(ApiError):
        make_auth(anonymous_api, database_url).login("anna@auravisual.dk", "secret1")


def test_logout_clears_even_when_server_fails(anonymous_api, http, database_url):
    http.add("POST", "/auth/login", 200, {"access_token": "tok", "user": USER})
    auth = make_auth(anonymous_api, database_url)
    auth.login("anna@auravisual.dk", "secret1")
    http.add("POST", "/auth/logout", 500, None)
    auth.logout()
    assert not auth.session.is_authenticated
    assert session_store.load_session("test", database_url) is None


def test_restore_persisted_session(anonymous_api, http, database_url):
    http.add("POST", "/auth/login", 200, {"access_token": "tok", "user": USER})
    make_auth(anonymous_api, database_url).login("anna@auravisual.dk", "secret1")

    anonymous_api.session.invalidate()
    http.add("GET", "/auth/me", 200, dict(USER, full_name="Anna C."))
    auth = make_auth(anonymous_api, database_url)
    assert auth.restore()
    assert auth.session.token == "tok"
    assert auth.session.user.full_name == "Anna C."
    assert http.last()["headers"]["Authorization"] == "Bearer tok"
    assert session_store.load_session("test", database_url).user.full_name == "Anna C."


def test_restore_with_nothing_stored(anonymous_api, database_url):
    assert not make_auth(anonymous_api, database_url).restore()


def test_restore_rejected_token_is_deleted(anonymous_api, http, database_url):
    session_store.save_session(SessionContext(token="stale"), "test", database_url)
    http.add("GET", "/auth/me", 401, {"detail": "expired"})
    auth = make_auth(anonymous_api, database_url)
    assert not auth.restore()
    assert not auth.session.is_authenticated
    assert session_store.load_session("test", database_url) is None


def test_restore_keeps_row_when_server_unreachable(anonymous_api, http, database_url):
    session_store.save_session(SessionContext(token="tok"), "test", database_url)
    auth = make_auth(anonymous_api, database_url)

    def offline():
        raise NetworkError("Network error: offline")

    with pytest.raises(NetworkError):
        auth.restore(verify=offline)
    assert not auth.session.is_authenticated
    assert session_store.load_session("test", database_url).token == "tok"


def test_browsers_do_not_share_sessions(config, http, database_url):
    http.add("POST", "/auth/login", 200, {"access_token": "tok-anna", "user": USER})
    http.add("GET", "/auth/me", 200, USER)
    first = AuthService(ApiClient(config, session=SessionContext(), http=http), device_key="browser-one",
                        database_url=database_url)
    second = AuthService(ApiClient(config, session=SessionContext(), http=http), device_key="browser-two",
                         database_url=database_url)
    first.login("anna@auravisual.dk", "secret1")

    assert not second.restore()
    assert not second.session.is_authenticated

    second.logout()
    assert session_store.load_session("browser-one", database_url).token == "tok-anna"


def test_without_device_key_nothing_is_persisted(anonymous_api, http, database_url):
    http.add("POST", "/auth/login", 200, {"access_token": "tok", "user": USER})
    auth = AuthService(anonymous_api, database_url=database_url)
    auth.login("anna@auravisual.dk", "secret1")
    assert not auth.persist
    assert not auth.restore()
    session_store.init_db(database_url)
    with session_store.get_session(database_url) as db:
        assert db.query(session_store.StoredSession).count() == 0
