import pytest
from fastapi.testclient import TestClient

from robot_api.config import Settings
from robot_api.domain.errors import StoreUnavailableError
from robot_api.domain.records import RobotStatus
from robot_api.main import create_app
from robot_api.storage.status import InMemoryStatusRepository

MOVE_FORWARD = {"commandText": "MoveForward", "robot": "Robot1", "user": "user"}
TURN_LEFT = {"commandText": "TurnLeft", "robot": "Robot1", "user": "user"}

PROTECTED = [
    ("POST", "/command", MOVE_FORWARD),
    ("PUT", "/command?id=1", TURN_LEFT),
    ("GET", "/command?id=1", None),
    ("GET", "/status", None),
    ("GET", "/history", None),
]


def _call(client, method, path, body, headers=None):
    return client.request(method, path, json=body, headers=headers)


# ------------------------
# Public routes
# ------------------------


def test_health_needs_no_token(client) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == "API is healthy"


def test_login_returns_token(client) -> None:
    r = client.post("/login", json={"username": "user", "password": "password"})
    assert r.status_code == 200
    assert r.json()["token"].count(".") == 2


def test_login_rejects_invalid_credentials(client) -> None:
    r = client.post("/login", json={"username": "invalid", "password": "wrongpassword"})
    assert r.status_code == 401
    assert "token" not in r.json()
    assert r.json()["code"] == "invalid_credentials"


def test_login_with_missing_fields_is_unauthorized(client) -> None:
    assert client.post("/login", json={}).status_code == 401


@pytest.mark.parametrize("kwargs", [{}, {"content": "null", "headers": {"Content-Type": "application/json"}}])
def test_login_without_body_is_bad_request(client, kwargs) -> None:
    r = client.post("/login", **kwargs)
    assert r.status_code == 400
    assert "error" in r.json()


def test_login_with_configured_credentials(store, clock) -> None:
    settings = Settings(signing_key="k" * 40, username="operator", password="s3cret")
    with TestClient(create_app(settings, commands=store, clock=clock)) as c:
        assert c.post("/login", json={"username": "operator", "password": "s3cret"}).status_code == 200
        assert c.post("/login", json={"username": "user", "password": "password"}).status_code == 401


# ------------------------
# Authentication gate
# ------------------------


@pytest.mark.parametrize("method,path,body", PROTECTED)
def test_protected_routes_reject_missing_token(client, store, method, path, body) -> None:
    r = _call(client, method, path, body)
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert set(r.json()) >= {"error"}
    assert store.list_all() == []


@pytest.mark.parametrize("method,path,body", PROTECTED)
@pytest.mark.parametrize(
    "header",
    ["Bearer not-a-token", "Bearer ", "Basic dXNlcjpwYXNzd29yZA==", "not-even-a-scheme"],
)
def test_protected_routes_reject_malformed_token(client, store, method, path, body, header) -> None:
    r = _call(client, method, path, body, headers={"Authorization": header})
    assert r.status_code == 401
    assert store.list_all() == []


@pytest.mark.parametrize("method,path,body", PROTECTED)
def test_protected_routes_reject_expired_token(client, store, clock, token, method, path, body) -> None:
    clock.advance(hours=10)
    r = _call(client, method, path, body, headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["code"] == "token_expired"
    assert store.list_all() == []


def test_token_accepted_just_before_expiry(client, clock, auth) -> None:
    clock.advance(hours=9, minutes=59)
    assert client.get("/history", headers=auth).status_code == 200


def test_auth_is_checked_before_parameters(client) -> None:
    r = client.get("/command?id=abc")
    assert r.status_code == 401


def test_rejected_put_leaves_existing_command_untouched(client, store) -> None:
    store.create("MoveForward", "Robot1", "user")
    r = client.put("/command?id=1", json=TURN_LEFT, headers={"Authorization": "Bearer bogus"})
    assert r.status_code == 401
    assert store.get_by_id(1).command_text == "MoveForward"


# ------------------------
# Commands
# ------------------------


def test_end_to_end_command_lifecycle(client) -> None:
    token = client.post("/login", json={"username": "user", "password": "password"}).json()["token"]
    auth = {"Authorization": f"Bearer {token}"}

    r = client.post("/command", json=MOVE_FORWARD, headers=auth)
    assert r.status_code == 200
    assert r.json() == {"message": "Command accepted", "commandId": 1}

    r = client.get("/command?id=1", headers=auth)
    assert r.json() == {"id": 1, "commandText": "MoveForward", "robot": "Robot1", "user": "user"}

    r = client.put("/command?id=1", json=TURN_LEFT, headers=auth)
    assert r.status_code == 200
    assert r.json() == {
        "message": "Command updated",
        "updatedCommand": {"id": 1, "commandText": "TurnLeft", "robot": "Robot1", "user": "user"},
    }

    assert client.get("/command?id=1", headers=auth).json()["commandText"] == "TurnLeft"

    r = client.get("/command?id=9999", headers=auth)
    assert r.status_code == 404
    assert r.json()["error"] == "Command not found"


def test_put_unknown_id_is_not_found_and_creates_nothing(client, store, auth) -> None:
    r = client.put("/command?id=9999", json=TURN_LEFT, headers=auth)
    assert r.status_code == 404
    assert r.json() == {"error": "Command not found", "code": "not_found"}
    assert store.list_all() == []


@pytest.mark.parametrize("query", ["", "?id=", "?id=abc", "?id=1.5"])
def test_get_with_missing_or_invalid_id_is_bad_request(client, auth, query) -> None:
    r = client.get(f"/command{query}", headers=auth)
    assert r.status_code == 400
    assert "error" in r.json()


@pytest.mark.parametrize("query", ["", "?id=abc"])
def test_put_with_missing_or_invalid_id_is_bad_request(client, auth, query) -> None:
    r = client.put(f"/command{query}", json=TURN_LEFT, headers=auth)
    assert r.status_code == 400


def test_post_with_incomplete_body_is_bad_request(client, store, auth) -> None:
    r = client.post("/command", json={"commandText": "MoveForward"}, headers=auth)
    assert r.status_code == 400
    assert store.list_all() == []


def test_snake_case_body_is_accepted(client, auth) -> None:
    body = {"command_text": "Stop", "robot": "Robot2", "user": "user"}
    command_id = client.post("/command", json=body, headers=auth).json()["commandId"]
    assert client.get(f"/command?id={command_id}", headers=auth).json()["commandText"] == "Stop"


def test_history_lists_commands_in_creation_order(client, auth) -> None:
    assert client.get("/history", headers=auth).json() == []
    for text in ("MoveForward", "TurnLeft", "Stop"):
        client.post("/command", json={**MOVE_FORWARD, "commandText": text}, headers=auth)
    client.put("/command?id=1", json={**MOVE_FORWARD, "commandText": "MoveBack"}, headers=auth)

    history = client.get("/history", headers=auth).json()
    assert [c["id"] for c in history] == [1, 2, 3]
    assert [c["commandText"] for c in history] == ["MoveBack", "TurnLeft", "Stop"]


# ------------------------
# Status
# ------------------------


def test_status_defaults_to_idle(client, auth) -> None:
    r = client.get("/status", headers=auth)
    assert r.status_code == 200
    assert r.json() == {"status": "Idle", "position": "0,0", "task": "None"}


def test_status_returns_stored_snapshot(settings, clock) -> None:
    repo = InMemoryStatusRepository(RobotStatus(status="Moving", position="5,2", task="Patrol"))
    with TestClient(create_app(settings, status=repo, clock=clock)) as c:
        token = c.post("/login", json={"username": "user", "password": "password"}).json()["token"]
        r = c.get("/status", headers={"Authorization": f"Bearer {token}"})
    assert r.json() == {"status": "Moving", "position": "5,2", "task": "Patrol"}


# ------------------------
# Internal faults
# ------------------------


class _BrokenStore:
    def create(self, command_text, robot, user):
        raise StoreUnavailableError("postgresql://admin:secret@db/robots refused connection")

    def get_by_id(self, command_id):
        raise RuntimeError("secret internal detail")

    def update(self, command_id, command_text, robot, user):
        raise StoreUnavailableError("secret")

    def list_all(self):
        raise StoreUnavailableError("secret")


@pytest.fixture
def broken_client(settings, clock):
    app = create_app(settings, commands=_BrokenStore(), clock=clock)
    with TestClient(app, raise_server_exceptions=False) as c:
        token = c.post("/login", json={"username": "user", "password": "password"}).json()["token"]
        c.headers["Authorization"] = f"Bearer {token}"
        yield c


@pytest.mark.parametrize(
    "method,path,body",
    [
        ("POST", "/command", MOVE_FORWARD),
        ("GET", "/command?id=1", None),
        ("PUT", "/command?id=1", TURN_LEFT),
        ("GET", "/history", None),
    ],
)
def test_store_faults_return_generic_500(broken_client, method, path, body) -> None:
    r = _call(broken_client, method, path, body)
    assert r.status_code == 500
    assert r.json()["error"] == "Internal server error"
    assert "secret" not in r.text


# ------------------------
# Plumbing
# ------------------------


def test_request_id_is_propagated(client) -> None:
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_request_id_is_minted_when_absent(client) -> None:
    assert client.get("/health").headers["X-Request-ID"]


def test_unknown_route_uses_error_shape(client) -> None:
    r = client.get("/nope")
    assert r.status_code == 404
    assert "error" in r.json()


def test_sql_backed_app_runs_the_lifecycle(clock) -> None:
    settings = Settings(signing_key="k" * 40, database_url="sqlite://")
    with TestClient(create_app(settings, clock=clock)) as c:
        token = c.post("/login", json={"username": "user", "password": "password"}).json()["token"]
        auth = {"Authorization": f"Bearer {token}"}
        assert c.post("/command", json=MOVE_FORWARD, headers=auth).json()["commandId"] == 1
        c.put("/command?id=1", json=TURN_LEFT, headers=auth)
        assert c.get("/command?id=1", headers=auth).json()["commandText"] == "TurnLeft"
        assert c.get("/status", headers=auth).json()["status"] == "Idle"


@pytest.mark.parametrize("database_url", [None, "sqlite://"])
@pytest.mark.parametrize("method", ["GET", "PUT"])
def test_id_beyond_integer_range_is_bad_request(clock, database_url, method) -> None:
    settings = Settings(signing_key="k" * 40, database_url=database_url)
    with TestClient(create_app(settings, clock=clock)) as c:
        token = c.post("/login", json={"username": "user", "password": "password"}).json()["token"]
        auth = {"Authorization": f"Bearer {token}"}
        r = c.request(method, "/command?id=99999999999999999999", json=TURN_LEFT, headers=auth)
        assert r.status_code == 400
        assert "error" in r.json()
        assert c.get("/history", headers=auth).json() == []
